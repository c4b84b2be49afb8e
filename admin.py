import sys

import bcrypt
from loguru import logger

import supabase_client


def hash_admin_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_admin_password(password, password_hash):
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("[Admin] ADMIN_PASSWORD_HASH is not a valid bcrypt hash")
        return False


def get_master_films(client=None):
    client = client or supabase_client.get_client()
    try:
        return (
            client.table("master_films").select("*").order("created_at", desc=True).execute().data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Admin] Error fetching master films: {exc}")
        return []


def get_festivals(client=None):
    client = client or supabase_client.get_client()
    try:
        return client.table("festivals").select("*").order("start_date", desc=True).execute().data
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Admin] Error fetching festivals: {exc}")
        return []


def default_festival_id(festivals):
    if not festivals:
        return None
    active = next((fest for fest in festivals if fest.get("is_active")), festivals[0])
    return active["id"]


def get_assigned_film_ids(festival_id, client=None):
    client = client or supabase_client.get_client()
    try:
        rows = (
            client.table("festival_films")
            .select("film_id")
            .eq("festival_id", festival_id)
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Admin] Error fetching festival programme: {exc}")
        return []
    return [row["film_id"] for row in rows]


def toggle_assignment(festival_id, film_id, assigned_ids, client=None):
    """Add or remove a film from a festival programme; returns the new id list."""
    if not festival_id:
        return list(assigned_ids)
    client = client or supabase_client.get_client()
    programme = client.table("festival_films")
    try:
        if film_id in assigned_ids:
            programme.delete().eq("festival_id", festival_id).eq("film_id", film_id).execute()
            logger.info(f"[Admin] Removed film {film_id} from festival {festival_id}")
            return [existing for existing in assigned_ids if existing != film_id]
        programme.insert({"festival_id": festival_id, "film_id": film_id}).execute()
        logger.info(f"[Admin] Added film {film_id} to festival {festival_id}")
        return list(assigned_ids) + [film_id]
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Admin] Error updating festival programme: {exc}")
        return list(assigned_ids)


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python admin.py <password>")
        sys.exit(1)
    print(hash_admin_password(sys.argv[1]))
