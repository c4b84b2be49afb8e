import datetime
import json
import pathlib
import sqlite3
from contextlib import contextmanager


DATA_PATH = pathlib.Path("data")
DB_PATH = DATA_PATH / "local_cache.db"

HAS_ONBOARDED = "has_onboarded"
USER_NAME = "user_name"
USER_EMAIL = "user_email"
USER_UNIVERSITY_ID = "user_university_id"
USER_UNIVERSITY_NAME = "user_university_name"
IS_STUDENT = "is_student"
USER_POINTS = "user_points"
VOTED_FILMS = "voted_films"
WATCHLIST = "watchlist"


def init_db(db_path=None):
    path = _resolve_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with _get_conn(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS device_cache (
                device_id TEXT NOT NULL,
                key TEXT NOT NULL,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (device_id, key)
            )
            """
        )


def get_value(device_id, key, default=None, db_path=None):
    path = _resolve_db_path(db_path)
    with _get_conn(path) as conn:
        row = conn.execute(
            "SELECT value_json FROM device_cache WHERE device_id = ? AND key = ?",
            (device_id, key),
        ).fetchone()
    if not row:
        return default
    try:
        return json.loads(row["value_json"])
    except json.JSONDecodeError:
        return default


def set_value(device_id, key, value, db_path=None):
    path = _resolve_db_path(db_path)
    with _get_conn(path) as conn:
        conn.execute(
            """
            INSERT INTO device_cache (device_id, key, value_json, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(device_id, key) DO UPDATE SET
                value_json = excluded.value_json,
                updated_at = excluded.updated_at
            """,
            (device_id, key, json.dumps(value), now_iso()),
        )


def get_list(device_id, key, db_path=None):
    value = get_value(device_id, key, default=[], db_path=db_path)
    return value if isinstance(value, list) else []


def add_to_list(device_id, key, item, db_path=None):
    items = get_list(device_id, key, db_path=db_path)
    if item not in items:
        items.append(item)
        set_value(device_id, key, items, db_path=db_path)
    return items


def remove_from_list(device_id, key, item, db_path=None):
    items = [
        existing for existing in get_list(device_id, key, db_path=db_path) if existing != item
    ]
    set_value(device_id, key, items, db_path=db_path)
    return items


def toggle_in_list(device_id, key, item, db_path=None):
    if item in get_list(device_id, key, db_path=db_path):
        remove_from_list(device_id, key, item, db_path=db_path)
        return False
    add_to_list(device_id, key, item, db_path=db_path)
    return True


def now_iso():
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


class LocalCache:
    """Key-value cache for one device, the app's stand-in for browser storage."""

    def __init__(self, device_id, db_path=None):
        self.device_id = device_id
        self.db_path = db_path

    def get(self, key, default=None):
        return get_value(self.device_id, key, default=default, db_path=self.db_path)

    def set(self, key, value):
        set_value(self.device_id, key, value, db_path=self.db_path)

    def get_list(self, key):
        return get_list(self.device_id, key, db_path=self.db_path)

    def add_to_list(self, key, item):
        return add_to_list(self.device_id, key, item, db_path=self.db_path)

    def toggle_in_list(self, key, item):
        return toggle_in_list(self.device_id, key, item, db_path=self.db_path)


def _resolve_db_path(db_path):
    return pathlib.Path(db_path) if db_path else DB_PATH


def _connect(path):
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def _get_conn(path):
    conn = _connect(path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
