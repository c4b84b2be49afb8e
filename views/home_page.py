import streamlit as st

import components
import films
import storage


cache = components.get_cache()
if not cache.get(storage.HAS_ONBOARDED):
    st.switch_page("views/onboarding_page.py")

name = cache.get(storage.USER_NAME) or "Guest"
greeting, avatar = st.columns([4, 1])
greeting.markdown(f"Hi, **{name}** 👋")
if avatar.button("👤", help="Profile"):
    st.switch_page("views/profile_page.py")

with st.spinner("Loading festival..."):
    festivals = films.get_active_festivals()
    stats = films.get_home_stats()
    top_universities = films.get_top_universities(limit=3)

festival = None
if len(festivals) > 1:
    chosen = st.segmented_control(
        "Festival",
        options=list(range(len(festivals))),
        format_func=lambda index: festivals[index]["name"],
        default=0,
        label_visibility="collapsed",
    )
    festival = festivals[chosen if chosen is not None else 0]
elif festivals:
    festival = festivals[0]

with st.container(border=True):
    if festival:
        status = festival.get("status") or "Off"
        st.caption(("🔴 LIVE" if films.voting_open(festival) else status.upper())
                   + (f" · 📍 {festival['location']}" if festival.get("location") else ""))
        st.markdown(f"## {festival['name']}")
        st.caption(
            f"📅 {films.format_date(festival.get('start_date'))} - "
            f"{films.format_date(festival.get('end_date'))}"
        )
        if films.voting_open(festival):
            if st.button("▶ Start Voting", type="primary", width="stretch"):
                st.switch_page("views/films_page.py")
        else:
            st.button("Voting is currently closed", disabled=True, width="stretch")
    else:
        st.markdown("## No active festival")
        st.caption("Browse the film library while the next festival is being prepared.")

votes_col, students_col = st.columns(2)
votes_col.metric("Total Votes", f"{stats['total_votes']:,}")
students_col.metric("Students", f"{stats['total_students']:,}")

if st.button("🧠 Play Film Trivia (+10 pts per answer)", width="stretch"):
    components.trivia_dialog()

st.markdown("#### Campus Leaders")
if top_universities:
    leader_points = top_universities[0].get("points") or 1
    for position, uni in enumerate(top_universities, start=1):
        st.write(f"{position}. {uni.get('logo') or '🎓'} **{uni['name']}** · {uni.get('points') or 0} pts")
        st.progress(min(max((uni.get("points") or 0) / leader_points, 0.0), 1.0))
else:
    st.info("No campus points yet. Be the first to vote!")

if festival:
    st.markdown(f"#### In Competition · {festival['name']}")
    festival_films = films.get_festival_films(festival["id"])
else:
    st.markdown("#### Popular Films")
    festival_films = films.get_popular_films(limit=5)

if festival_films:
    cols = st.columns(3)
    for index, film in enumerate(festival_films):
        with cols[index % 3]:
            image = films.display_image(film)
            if image:
                st.image(image, width="stretch")
            st.caption(f"**{film.get('title') or 'Untitled'}** · {films.display_genre(film)}")
    if st.button("See all films →"):
        st.switch_page("views/films_page.py")
else:
    st.info(f"No films assigned to {festival['name'] if festival else 'current festival'}.")
