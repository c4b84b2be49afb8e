import streamlit as st

import films


MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

st.markdown("## 🏆 Leaderboard")
films_tab, campus_tab = st.tabs(["🎞️ Films", "🎓 Campus"])

with films_tab:
    top_films = films.get_top_films(limit=10)
    if top_films:
        for position, film in enumerate(top_films, start=1):
            with st.container(border=True):
                rank, body, score = st.columns([1, 5, 2])
                rank.markdown(f"### {MEDALS.get(position, position)}")
                body.markdown(f"**{film.get('title') or 'Untitled'}**")
                body.caption(f"{film.get('director') or 'Unknown director'} · {films.display_genre(film)}")
                score.metric("Rating", films.format_rating(film.get("rating")))
                score.caption(f"{film.get('votes_count') or 0} votes")
    else:
        st.info("No ratings yet.")

with campus_tab:
    universities = films.get_top_universities(limit=10)
    if universities:
        for position, uni in enumerate(universities, start=1):
            with st.container(border=True):
                rank, body, score = st.columns([1, 5, 2])
                rank.markdown(f"### {MEDALS.get(position, position)}")
                body.markdown(f"{uni.get('logo') or '🎓'} **{uni['name']}**")
                body.caption(f"{uni.get('active_students') or 0} active students")
                score.metric("Points", f"{uni.get('points') or 0:,}")
    else:
        st.info("No campuses on the board yet.")
