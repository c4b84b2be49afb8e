"""
Vote and review flow behind the voting dialog.

A vote rates a film in four categories; the stored rating is their rounded
mean. After voting the user may write a review, which is graded by the AI
grader and worth extra points on top of the flat vote reward.
"""

import math

from loguru import logger
from postgrest.exceptions import APIError

import ai_grader
import auth
import gamification
import storage
import supabase_client


STEP_RATING = "RATING"
STEP_EMAIL = "EMAIL"
STEP_REVIEW_PROMPT = "REVIEW_PROMPT"
STEP_REVIEW_FORM = "REVIEW_FORM"
STEP_ANALYZING = "ANALYZING"
STEP_SUCCESS = "SUCCESS"

RATING_CATEGORIES = [
    {"id": "story", "label": "Story & Clarity", "sub": "Easy to follow & engaging?"},
    {"id": "authenticity", "label": "Authenticity & Depth", "sub": "Honest & well-researched?"},
    {"id": "craft", "label": "Craft & Presentation", "sub": "Visuals, sound, editing"},
    {"id": "impact", "label": "Impact", "sub": "Did it make you think/feel?"},
]
MAX_STARS = 5
MIN_REVIEW_FORM_LENGTH = 10
# Postgres "undefined table" and PostgREST "table not in schema cache"
MISSING_TABLE_CODES = {"42P01", "PGRST205"}


def empty_ratings():
    return {category["id"]: 0 for category in RATING_CATEGORIES}


def is_rating_complete(ratings):
    return all(ratings.get(category["id"], 0) > 0 for category in RATING_CATEGORIES)


def average_rating(ratings):
    values = [ratings[category["id"]] for category in RATING_CATEGORIES]
    return math.floor(sum(values) / len(values) + 0.5)


def is_valid_email(email):
    return "@" in (email or "")


def step_after_rating(has_email):
    return STEP_REVIEW_PROMPT if has_email else STEP_EMAIL


def can_submit_review(review):
    return len(review or "") >= MIN_REVIEW_FORM_LENGTH


def build_review_text(ratings, review):
    breakdown = (
        f"[Ratings: Story={ratings.get('story', 0)}, Auth={ratings.get('authenticity', 0)}, "
        f"Craft={ratings.get('craft', 0)}, Impact={ratings.get('impact', 0)}] \n\n"
    )
    return breakdown + review


def share_message(film_title):
    return {
        "title": f"I voted for {film_title}!",
        "text": f"I just cast my vote for {film_title} at the film festival.",
    }


def submit_vote(film_id, email, name, stars, cache, client=None):
    email = auth.normalize_email(email)
    name = name or "Anonymous"
    client = client or supabase_client.get_client()

    try:
        client.table("film_votes").upsert(
            {
                "film_id": film_id,
                "user_email": email,
                "user_name": name,
                "rating": stars,
                "created_at": storage.now_iso(),
            },
            on_conflict="film_id,user_email",
        ).execute()
    except APIError as exc:
        if exc.code in MISSING_TABLE_CODES:
            logger.warning("[Votes] Table film_votes missing or not cached. Detail vote skipped.")
        else:
            logger.error(f"[Votes] Error saving vote detail: {exc}")
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Votes] Error saving vote detail: {exc}")

    if not auth.recalculate_film_stats(film_id, client=client):
        _increment_vote_count(film_id, client)

    linked = auth.register_user_vote(email, name, gamification.VOTE_POINTS, cache, client=client)
    cache.add_to_list(storage.VOTED_FILMS, film_id)
    return linked


def submit_review(film_id, film_title, email, name, stars, ratings, review, cache,
                  openai_api_key, model=ai_grader.MODEL_NAME, client=None,
                  grader=ai_grader.grade_review):
    grade = grader(film_title, review, openai_api_key, model=model)
    email = auth.normalize_email(email)
    if not email:
        return grade

    name = name or "Anonymous"
    client = client or supabase_client.get_client()
    try:
        client.table("film_votes").upsert(
            {
                "film_id": film_id,
                "user_email": email,
                "user_name": name,
                "rating": stars,
                "review_text": build_review_text(ratings, review),
                "ai_score": grade["pointsAwarded"],
                "created_at": storage.now_iso(),
            },
            on_conflict="film_id,user_email",
        ).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Votes] Review save error: {exc}")

    auth.register_user_vote(email, name, grade["pointsAwarded"], cache, client=client)
    return grade


def _increment_vote_count(film_id, client):
    try:
        client.rpc("increment_vote", {"row_id": film_id}).execute()
        return
    except supabase_client.REMOTE_ERRORS as exc:
        logger.warning(f"[Votes] RPC increment_vote failed: {exc}")

    try:
        film = supabase_client.first(
            client.table("master_films").select("votes_count").eq("id", film_id).execute()
        )
        if film:
            client.table("master_films").update(
                {"votes_count": (film.get("votes_count") or 0) + 1}
            ).eq("id", film_id).execute()
    except supabase_client.REMOTE_ERRORS as exc:
        logger.error(f"[Votes] Manual vote count update failed: {exc}")
