import streamlit as st
from loguru import logger

import components
import config
import storage
import supabase_client


st.set_page_config(page_title="Festival Vote", page_icon="🎬", layout="centered")


@st.cache_resource(show_spinner=False)
def bootstrap():
    secrets = dict(st.secrets) if st.secrets.load_if_toml_exists() else {}
    settings = config.load_settings(secrets)
    config.configure_logging(settings["log_level"])
    storage.init_db(settings["local_db_path"])
    supabase_client.configure(settings)
    logger.info(f"[App] Local cache at {settings['local_db_path']}")
    if not settings["openai_api_key"]:
        logger.warning("[App] OpenAI key not found. Reviews get the offline grade.")
    return settings


st.session_state.settings = bootstrap()

page = st.navigation(
    [
        st.Page("views/home_page.py", title="Home", icon="🏠", default=True),
        st.Page("views/films_page.py", title="Films", icon="🎞️"),
        st.Page("views/leaderboard_page.py", title="Leaderboard", icon="🏆"),
        st.Page("views/profile_page.py", title="Profile", icon="👤"),
        st.Page("views/onboarding_page.py", title="Onboarding", icon="✨"),
        st.Page("views/admin_page.py", title="Admin", icon="🛠️"),
    ],
    position="hidden",
)

cache = components.get_cache()
if page.title != "Onboarding":
    components.render_header(cache)

page.run()

if page.title not in ("Onboarding", "Admin"):
    components.open_pending_dialogs()
    components.render_nav()
