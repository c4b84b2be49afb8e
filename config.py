import os
import sys

from loguru import logger


PLACEHOLDER_SUPABASE_URL = "https://placeholder.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "placeholder.anon.key"
DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_DB_PATH = "data/local_cache.db"


def load_settings(secrets=None, environ=None):
    secrets = secrets or {}
    environ = os.environ if environ is None else environ

    def lookup(name, default=None):
        value = secrets.get(name) or environ.get(name)
        return value if value else default

    settings = {
        "supabase_url": lookup("SUPABASE_URL"),
        "supabase_anon_key": lookup("SUPABASE_ANON_KEY"),
        "openai_api_key": lookup("OPENAI_API_KEY"),
        "openai_model": lookup("OPENAI_MODEL", DEFAULT_MODEL),
        "admin_password_hash": lookup("ADMIN_PASSWORD_HASH"),
        "local_db_path": lookup("LOCAL_DB_PATH", DEFAULT_DB_PATH),
        "log_level": lookup("LOG_LEVEL", "INFO"),
    }

    if not settings["supabase_url"] or not settings["supabase_anon_key"]:
        logger.warning(
            "[Config] Supabase credentials missing! Set SUPABASE_URL and SUPABASE_ANON_KEY."
        )
        settings["supabase_url"] = settings["supabase_url"] or PLACEHOLDER_SUPABASE_URL
        settings["supabase_anon_key"] = (
            settings["supabase_anon_key"] or PLACEHOLDER_SUPABASE_KEY
        )
    return settings


def configure_logging(level="INFO"):
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
