import re

from loguru import logger

import storage
import supabase_client


DEFAULT_UNIVERSITY_LOGO = "🎓"


def normalize_email(email):
    return (email or "").strip().lower()


def to_title_case(text):
    return re.sub(r"\w\S*", lambda match: match.group(0).capitalize(), text)


def get_universities(client=None):
    client = client or supabase_client.get_client()
    try:
        return client.table("universities").select("*").order("name").execute().data
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error fetching universities: {exc}")
        return []


def filter_universities(universities, query):
    lowered = (query or "").lower()
    return [uni for uni in universities if lowered in (uni.get("name") or "").lower()]


def add_new_university(name, location, client=None):
    client = client or supabase_client.get_client()
    if not name or not name.strip():
        return None
    try:
        response = client.table("universities").insert(
            {
                "name": to_title_case(name.strip()),
                "location": to_title_case((location or "").strip()),
                "logo": DEFAULT_UNIVERSITY_LOGO,
                "active_students": 1,
                "points": 0,
            }
        ).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error creating university: {exc}")
        return None
    return supabase_client.first(response)


def recalculate_university_stats(university_id, client=None):
    """
    Rebuild a university's student count and point total from its
    user_profiles rows, which are the source of truth for both numbers.
    """
    if not university_id:
        return False
    client = client or supabase_client.get_client()
    try:
        profiles = (
            client.table("user_profiles")
            .select("points", count="exact")
            .eq("university_id", university_id)
            .execute()
        )
        total_points = sum(profile.get("points") or 0 for profile in profiles.data)
        client.table("universities").update(
            {"active_students": profiles.count or 0, "points": total_points}
        ).eq("id", university_id).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error recalculating university stats: {exc}")
        return False
    return True


def _get_profile(client, email, columns="*"):
    response = (
        client.table("user_profiles").select(columns).eq("email", email).limit(1).execute()
    )
    return supabase_client.first(response)


def register_new_user(email, name, university_id=None, client=None):
    email = normalize_email(email)
    if not email:
        return False
    client = client or supabase_client.get_client()
    profile = {"email": email, "name": name}
    # leave an existing campus link alone when none was picked
    if university_id:
        profile.update(university_id=university_id, is_student=True)
    try:
        existing = _get_profile(client, email, columns="university_id")
        client.table("user_profiles").upsert(profile, on_conflict="email").execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error saving profile: {exc}")
        return False

    previous_id = existing.get("university_id") if existing else None
    if university_id and previous_id != university_id:
        recalculate_university_stats(university_id, client=client)
        if previous_id:
            recalculate_university_stats(previous_id, client=client)
    return True


def fetch_user_vote_history(email, client=None):
    client = client or supabase_client.get_client()
    try:
        rows = (
            client.table("film_votes")
            .select("film_id")
            .eq("user_email", normalize_email(email))
            .execute()
            .data
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.warning(f"[Auth] Vote history unavailable: {exc}")
        return []
    return [row["film_id"] for row in rows if row.get("film_id")]


def sync_user_profile(email, cache, client=None):
    """Copy the stored profile for ``email`` into the device cache."""
    email = normalize_email(email)
    client = client or supabase_client.get_client()
    try:
        profile = _get_profile(client, email)
        if not profile:
            return False
        cache.set(storage.USER_POINTS, profile.get("points") or 0)
        if profile.get("name"):
            cache.set(storage.USER_NAME, profile["name"])
        university_id = profile.get("university_id")
        if university_id:
            cache.set(storage.USER_UNIVERSITY_ID, university_id)
            cache.set(storage.IS_STUDENT, True)
            university = supabase_client.first(
                client.table("universities").select("name").eq("id", university_id).execute()
            )
            if university:
                cache.set(storage.USER_UNIVERSITY_NAME, university["name"])
    except supabase_client.REMOTE_ERRORS as exc:
        logger.warning(f"[Auth] Sync profile failed: {exc}")
        return False

    for film_id in fetch_user_vote_history(email, client=client):
        cache.add_to_list(storage.VOTED_FILMS, film_id)
    return True


def recalculate_film_stats(film_id, client=None):
    if not film_id:
        return False
    client = client or supabase_client.get_client()
    try:
        votes = client.table("film_votes").select("rating").eq("film_id", film_id).execute().data
        if not votes:
            return False
        total_votes = len(votes)
        average = sum(vote.get("rating") or 0 for vote in votes) / total_votes
        client.table("master_films").update(
            {"rating": average, "votes_count": total_votes}
        ).eq("id", film_id).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error recalculating film stats: {exc}")
        return False
    return True


def register_user_vote(email, name, points_to_add, cache, client=None):
    """
    Add points to a profile and push them through to the user's university.
    Returns True when the points counted towards a university.
    """
    email = normalize_email(email)
    client = client or supabase_client.get_client()
    try:
        existing = _get_profile(client, email, columns="points,university_id")
        current_points = (existing.get("points") or 0) if existing else 0
        new_total = current_points + points_to_add

        university_id = cache.get(storage.USER_UNIVERSITY_ID)
        if not university_id and existing:
            university_id = existing.get("university_id")

        client.table("user_profiles").upsert(
            {
                "email": email,
                "name": name,
                "points": new_total,
                "university_id": university_id or None,
            },
            on_conflict="email",
        ).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Auth] Error in register_user_vote: {exc}")
        return False

    cache.set(storage.USER_POINTS, new_total)
    if university_id:
        recalculate_university_stats(university_id, client=client)
    return bool(university_id)


def award_bonus_points(points, cache, client=None):
    email = cache.get(storage.USER_EMAIL)
    if not email:
        return False
    name = cache.get(storage.USER_NAME) or "Anonymous"
    return register_user_vote(email, name, points, cache, client=client)


def is_top_earner(email, client=None):
    email = normalize_email(email)
    if not email:
        return False
    client = client or supabase_client.get_client()
    try:
        leader = supabase_client.first(
            client.table("user_profiles")
            .select("email,points")
            .order("points", desc=True)
            .limit(1)
            .execute()
        )
    except supabase_client.REMOTE_ERRORS as exc:
        logger.warning(f"[Auth] Top earner lookup failed: {exc}")
        return False
    return bool(leader) and leader.get("email") == email and (leader.get("points") or 0) > 0
