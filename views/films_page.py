import streamlit as st

import components
import films


LIVE = "Live Festival"
ARCHIVE = "Archive"

cache = components.get_cache()

tab = st.segmented_control("View", [LIVE, ARCHIVE], default=LIVE, label_visibility="collapsed") or LIVE
is_live = tab == LIVE

search = st.text_input(
    "Search",
    placeholder="Search current festival..." if is_live else "Search entire library...",
    label_visibility="collapsed",
)

with st.spinner("Loading films..."):
    if is_live:
        festival_names, all_films = films.get_live_films()
    else:
        festival_names, all_films = [], films.get_archive_films()

if is_live:
    st.caption("🔴 Now showing: " + (" & ".join(festival_names) if festival_names else "Current Competition"))
else:
    st.caption("📦 Past and upcoming films. Voting is closed for the archive.")

genre = st.pills("Genre", films.genre_options(all_films), default="All", label_visibility="collapsed") or "All"
visible = films.filter_films(all_films, genre=genre, search=search)

if visible:
    for film in visible:
        components.render_film_card(film, cache, show_vote_btn=is_live, key_prefix=f"{tab}-")
elif is_live:
    st.info("No films in competition. Check back later or switch to the Archive tab to browse past films.")
else:
    st.info("No films found. Try adjusting your search filters.")
