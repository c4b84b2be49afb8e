import datetime
import math

from loguru import logger

import storage
import supabase_client


FALLBACK_POSTER = "https://placehold.co/300x450/f1f5f9/94a3b8?text=No+Img"
DEFAULT_GENRE = "Film"


def display_image(film):
    for key in ("poster_url", "image_url"):
        url = (film.get(key) or "").strip()
        if url:
            return url
    return None


def display_genre(film, default=DEFAULT_GENRE):
    return film.get("category") or film.get("genre") or default


def display_duration(film):
    if film.get("duration"):
        return film["duration"]
    if film.get("duration_minutes"):
        return f"{film['duration_minutes']} min"
    return "N/A"


def format_rating(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0.0"
    if math.isnan(number):
        return "0.0"
    return f"{number:.1f}"


def format_date(date_string):
    if not date_string:
        return ""
    try:
        date = datetime.date.fromisoformat(date_string[:10])
    except ValueError:
        return ""
    return f"{date.strftime('%b')} {date.day}"


def voting_open(festival):
    return bool(festival) and festival.get("status") == "Live"


def get_active_festivals(client=None):
    client = client or supabase_client.get_client()
    try:
        return (
            client.table("festivals")
            .select("*")
            .eq("is_active", True)
            .order("start_date", desc=True)
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching active festivals: {exc}")
        return []


def get_festival_films(festival_id, client=None):
    client = client or supabase_client.get_client()
    try:
        rows = (
            client.table("festival_films")
            .select("film_id,master_films(*)")
            .eq("festival_id", festival_id)
            .order("sequence_order")
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching festival films: {exc}")
        return []
    return [row["master_films"] for row in rows if row.get("master_films")]


def get_live_films(client=None):
    """
    Films assigned to any active festival, de-duplicated by id.
    Returns (festival_names, films).
    """
    client = client or supabase_client.get_client()
    try:
        festivals = (
            client.table("festivals").select("id,name").eq("is_active", True).execute().data
        )
        if not festivals:
            return [], []
        rows = (
            client.table("festival_films")
            .select("master_films(*)")
            .in_("festival_id", [fest["id"] for fest in festivals])
            .order("sequence_order")
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching live films: {exc}")
        return [], []

    unique = {}
    for row in rows:
        film = row.get("master_films")
        if film and film["id"] not in unique:
            unique[film["id"]] = film
    return [fest["name"] for fest in festivals], list(unique.values())


def get_archive_films(client=None):
    client = client or supabase_client.get_client()
    try:
        return client.table("master_films").select("*").order("title").execute().data
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching archive: {exc}")
        return []


def get_popular_films(limit=5, client=None):
    client = client or supabase_client.get_client()
    try:
        return (
            client.table("master_films")
            .select("*")
            .order("votes_count", desc=True)
            .limit(limit)
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching popular films: {exc}")
        return []


def get_home_stats(client=None):
    client = client or supabase_client.get_client()
    stats = {"total_votes": 0, "total_students": 0}
    try:
        votes = client.table("film_votes").select("*", count="exact", head=True).execute()
        stats["total_votes"] = votes.count or 0
        students = client.table("user_profiles").select("*", count="exact", head=True).execute()
        stats["total_students"] = students.count or 0
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Home stats fetch error: {exc}")
    return stats


def get_top_films(limit=10, client=None):
    client = client or supabase_client.get_client()
    try:
        return (
            client.table("master_films")
            .select("*")
            .order("rating", desc=True)
            .limit(limit)
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Leaderboard fetch error: {exc}")
        return []


def get_top_universities(limit=10, client=None):
    client = client or supabase_client.get_client()
    try:
        return (
            client.table("universities")
            .select("*")
            .order("points", desc=True)
            .limit(limit)
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Campus leaderboard fetch error: {exc}")
        return []


def get_films_by_ids(film_ids, client=None):
    if not film_ids:
        return []
    client = client or supabase_client.get_client()
    try:
        return client.table("master_films").select("*").in_("id", list(film_ids)).execute().data
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error fetching watchlist: {exc}")
        return []


def filter_films(films, genre="All", search=""):
    lowered = (search or "").lower()
    matches = []
    for film in films:
        if genre != "All" and display_genre(film, "Documentary") != genre:
            continue
        if lowered not in (film.get("title") or "").lower():
            continue
        matches.append(film)
    return matches


def genre_options(films):
    genres = ["All"]
    for film in films:
        genre = display_genre(film, "Documentary")
        if genre not in genres:
            genres.append(genre)
    return genres


def submit_director_question(film, question, user_name, user_email, client=None):
    if not question or not question.strip():
        return False
    client = client or supabase_client.get_client()
    try:
        client.table("film_questions").insert(
            [
                {
                    "film_id": film["id"],
                    "film_title": film.get("title"),
                    "user_name": user_name or "Anonymous",
                    "user_email": user_email,
                    "question": question.strip(),
                    "created_at": storage.now_iso(),
                }
            ]
        ).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Films] Error submitting question: {exc}")
        return False
    return True
