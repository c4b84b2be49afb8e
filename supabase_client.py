"""
Shared Supabase client for the hosted festival database.

Service modules query through the supabase-py client returned by
``get_client`` and catch ``REMOTE_ERRORS`` to fall back to a safe default.
"""

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, create_client

import config


REMOTE_ERRORS = (APIError, httpx.HTTPError)

_settings = None
_client = None


def configure(settings):
    global _settings, _client
    _settings = settings
    _client = None


def get_client() -> Client:
    global _client
    if _client is None:
        settings = _settings or config.load_settings()
        _client = create_client(settings["supabase_url"], settings["supabase_anon_key"])
    return _client


def first(response):
    return response.data[0] if response.data else None


def check_connection(client=None):
    client = client or get_client()
    try:
        client.table("master_films").select("id", count="exact", head=True).execute()
    except REMOTE_ERRORS as exc:
        logger.error(f"[Supabase] Connection check failed: {exc}")
        return False
    return True
