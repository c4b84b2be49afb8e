import streamlit as st

import auth
import components
import films
import gamification
import storage


cache = components.get_cache()

name = cache.get(storage.USER_NAME) or "Guest"
email = cache.get(storage.USER_EMAIL)
points = int(cache.get(storage.USER_POINTS) or 0)
is_student = bool(cache.get(storage.IS_STUDENT))
university_name = cache.get(storage.USER_UNIVERSITY_NAME) or ""

title = gamification.title_for_points(points, is_top_earner=auth.is_top_earner(email))

avatar, details = st.columns([1, 3])
avatar.image(components.avatar_url(name), width=96)
details.markdown(f"## {name}")
details.caption(f"{title}" + (" · 🎓 Student" if is_student else ""))
details.metric("Points", points)

components.render_milestone(points)

if email and st.button("🔄 Refresh from server"):
    if auth.sync_user_profile(email, cache):
        st.toast("Profile synced.")
    st.rerun()

st.markdown("#### My Campus")
with st.container(border=True):
    if is_student and university_name:
        st.markdown(f"🎓 **{university_name}**")
    else:
        st.caption("Represent your college to add your points to the campus leaderboard.")

    with st.expander("Change campus" if is_student else "Select Campus"):
        query = st.text_input("Search college...", key="campus-search")
        matches = auth.filter_universities(components.cached_universities(), query)
        if not matches:
            st.caption("No college found.")
        for uni in matches[:20]:
            if st.button(f"{uni.get('logo') or '🎓'} {uni['name']}", key=f"campus-{uni['id']}"):
                cache.set(storage.USER_UNIVERSITY_ID, uni["id"])
                cache.set(storage.USER_UNIVERSITY_NAME, uni["name"])
                cache.set(storage.IS_STUDENT, True)
                if email:
                    auth.register_new_user(email, name, uni["id"])
                st.rerun()

st.markdown("#### My Watchlist")
watchlist = films.get_films_by_ids(cache.get_list(storage.WATCHLIST))
if watchlist:
    cols = st.columns(3)
    for index, film in enumerate(watchlist):
        with cols[index % 3]:
            image = films.display_image(film)
            if image:
                st.image(image, width="stretch")
            st.caption(f"**{film.get('title') or 'Untitled'}** · {films.display_genre(film)}")
else:
    st.info("Bookmark films to watch them later.")

st.markdown("#### Milestones")
for level in gamification.milestone_track(points):
    marker = "🟢" if level["reached"] else "⚪"
    st.write(f"{marker} **{level['title']}** · {level['range']}")

with st.expander("Privacy Policy & Legal"):
    st.caption(
        "We store your name, email, campus and votes to run the festival ballot and "
        "leaderboards. Reviews are sent to an AI service for grading. Contact the "
        "festival team to have your data removed."
    )

st.page_link("views/admin_page.py", label="Festival admin", icon="🛠️")
