import streamlit as st

import admin
import components
import films
import supabase_client


settings = components.get_settings()

st.markdown("## 🛠️ Festival Admin")

if not st.session_state.get("admin_unlocked"):
    if not settings["admin_password_hash"]:
        st.warning("Admin access is disabled. Set ADMIN_PASSWORD_HASH to enable it.")
        st.stop()
    password = st.text_input("Admin password", type="password")
    if st.button("Unlock"):
        if admin.verify_admin_password(password, settings["admin_password_hash"]):
            st.session_state.admin_unlocked = True
            st.rerun()
        st.error("Invalid admin password.")
    st.stop()

programme_tab, database_tab = st.tabs(["Program", "Database"])

with programme_tab:
    festivals = admin.get_festivals()
    if not festivals:
        st.info("No festivals found. Create one in the Supabase dashboard.")
    else:
        by_id = {fest["id"]: fest for fest in festivals}
        ids = list(by_id)
        default_id = admin.default_festival_id(festivals)
        festival_id = st.selectbox(
            "Festival",
            ids,
            index=ids.index(default_id),
            format_func=lambda fid: f"{by_id[fid]['name']} ({by_id[fid].get('status') or 'Off'})",
        )
        if by_id[festival_id].get("is_active"):
            st.success("Currently Live on Home Page")
        else:
            st.caption("Not Live (Draft/Ended)")

        assigned_key = f"assigned-{festival_id}"
        if assigned_key not in st.session_state:
            st.session_state[assigned_key] = admin.get_assigned_film_ids(festival_id)
        assigned = st.session_state[assigned_key]

        search = st.text_input("Search master database...")
        master = admin.get_master_films()
        for film in films.filter_films(master, search=search):
            is_assigned = film["id"] in assigned
            title_col, action_col = st.columns([4, 1])
            title_col.markdown(f"**{film.get('title') or 'Untitled'}**")
            title_col.caption(f"{film.get('director') or 'Unknown director'} · {films.display_genre(film)}")
            if action_col.button(
                "✓ Remove" if is_assigned else "＋ Add",
                key=f"assign-{festival_id}-{film['id']}",
                type="secondary" if is_assigned else "primary",
            ):
                st.session_state[assigned_key] = admin.toggle_assignment(
                    festival_id, film["id"], assigned
                )
                st.rerun()

with database_tab:
    connected = supabase_client.check_connection()
    if connected:
        st.success("Connected to Supabase")
    else:
        st.error("Supabase connection failed. Check SUPABASE_URL and SUPABASE_ANON_KEY.")
    st.caption("Use the Supabase Dashboard to add new films to the master table.")
    master = admin.get_master_films()
    st.dataframe(
        [
            {
                "title": film.get("title"),
                "director": film.get("director"),
                "genre": films.display_genre(film),
                "rating": films.format_rating(film.get("rating")),
                "votes": film.get("votes_count") or 0,
            }
            for film in master
        ],
        width="stretch",
    )

with st.sidebar:
    with st.expander("Diagnostics"):
        st.write(f"Supabase URL: {settings['supabase_url']}")
        st.write(f"OpenAI key loaded: {bool(settings['openai_api_key'])}")
        st.write(f"Device id: {st.session_state.get('device_id')}")
