import urllib.parse
import uuid

import streamlit as st

import auth
import films
import gamification
import storage
import trivia
import voting


NAV_PAGES = [
    ("views/home_page.py", "Home", "🏠"),
    ("views/films_page.py", "Films", "🎞️"),
    ("views/leaderboard_page.py", "Ranks", "🏆"),
    ("views/profile_page.py", "Profile", "👤"),
]


def get_settings():
    return st.session_state["settings"]


def get_cache():
    device_id = (
        st.session_state.get("device_id")
        or st.query_params.get("device")
        or uuid.uuid4().hex
    )
    st.session_state.device_id = device_id
    if st.query_params.get("device") != device_id:
        st.query_params["device"] = device_id
    return storage.LocalCache(device_id, get_settings()["local_db_path"])


def avatar_url(name):
    seed = urllib.parse.quote(name or "Guest")
    return (
        f"https://api.dicebear.com/9.x/micah/svg?seed={seed}"
        "&backgroundColor=b6e3f4,c0aede,d1d4f9"
    )


@st.cache_data(show_spinner=False, ttl=300)
def cached_universities():
    return auth.get_universities()


def render_header(cache):
    left, right = st.columns([3, 1])
    left.markdown("### 🎬 Festival Vote")
    right.metric("Points", cache.get(storage.USER_POINTS) or 0)


def render_nav():
    st.divider()
    cols = st.columns(len(NAV_PAGES))
    for col, (path, label, icon) in zip(cols, NAV_PAGES):
        col.page_link(path, label=label, icon=icon)


def render_film_card(film, cache, show_vote_btn=True, key_prefix=""):
    film_id = film["id"]
    has_voted = film_id in cache.get_list(storage.VOTED_FILMS)
    in_watchlist = film_id in cache.get_list(storage.WATCHLIST)

    with st.container(border=True):
        st.image(films.display_image(film) or films.FALLBACK_POSTER, width="stretch")
        title = film.get("title") or "Untitled"
        st.markdown(f"**{title}**" + (" ✅" if has_voted else ""))
        st.caption(
            f"{film.get('director') or 'Unknown director'} · "
            f"{films.display_duration(film)} · {films.display_genre(film)}"
        )
        st.caption(
            f"⭐ {films.format_rating(film.get('rating'))} "
            f"({film.get('votes_count') or 0} votes)"
        )

        cols = st.columns(3)
        if cols[0].button(
            "🔖 Saved" if in_watchlist else "🔖 Save",
            key=f"{key_prefix}watch-{film_id}",
            width="stretch",
        ):
            cache.toggle_in_list(storage.WATCHLIST, film_id)
            st.rerun()
        if cols[1].button("Details", key=f"{key_prefix}detail-{film_id}", width="stretch"):
            film_detail_dialog(film, has_voted, show_vote_btn)
        if show_vote_btn:
            if cols[2].button(
                "✓ Voted" if has_voted else "Vote",
                key=f"{key_prefix}vote-{film_id}",
                disabled=has_voted,
                type="primary",
                width="stretch",
            ):
                voting_dialog(film)
        else:
            cols[2].caption("Archive")


def open_pending_dialogs():
    film = st.session_state.pop("pending_vote", None)
    if film:
        voting_dialog(film)


@st.dialog("Film details")
def film_detail_dialog(film, has_voted, can_vote):
    cache = get_cache()
    image = films.display_image(film)
    if image:
        st.image(image, width="stretch")
    st.subheader(film.get("title") or "Untitled")
    st.caption(
        f"{film.get('director') or 'Unknown director'} · "
        f"{films.display_duration(film)} · {films.display_genre(film)} · "
        f"⭐ {films.format_rating(film.get('rating'))}"
    )
    if film.get("trailer_url"):
        st.link_button("▶ Watch trailer", film["trailer_url"])
    st.write(
        film.get("synopsis")
        or "No synopsis available for this film. Immerse yourself in the visual storytelling."
    )

    st.markdown("**Ask the Director**")
    sent_key = f"qa-sent-{film['id']}"
    if st.session_state.get(sent_key):
        st.success("Question Submitted!")
    else:
        question = st.text_input(
            "Your question", placeholder="What inspired this scene?", key=f"qa-{film['id']}"
        )
        if st.button("Send", key=f"qa-send-{film['id']}", disabled=not question.strip()):
            films.submit_director_question(
                film,
                question,
                cache.get(storage.USER_NAME),
                cache.get(storage.USER_EMAIL),
            )
            st.session_state[sent_key] = True
            st.rerun(scope="fragment")

    if can_vote:
        if st.button(
            "Vote Submitted" if has_voted else "Rate & Review Film",
            disabled=has_voted,
            type="primary",
            width="stretch",
        ):
            st.session_state.pending_vote = film
            st.rerun()


@st.dialog("Rate this Film")
def voting_dialog(film):
    cache = get_cache()
    settings = get_settings()
    state_key = f"vote-flow-{film['id']}"
    if state_key not in st.session_state:
        st.session_state[state_key] = {
            "step": voting.STEP_RATING,
            "ratings": voting.empty_ratings(),
            "stars": 0,
            "review": "",
            "grade": None,
            "linked": False,
        }
    flow = st.session_state[state_key]
    name = cache.get(storage.USER_NAME) or "Anonymous"

    if flow["step"] == voting.STEP_RATING:
        st.caption("Recommended 4-Category Model")
        for category in voting.RATING_CATEGORIES:
            st.markdown(f"**{category['label']}**")
            st.caption(category["sub"])
            selected = st.feedback("stars", key=f"{state_key}-{category['id']}")
            flow["ratings"][category["id"]] = selected + 1 if selected is not None else 0
        if st.button(
            "Submit Evaluation",
            disabled=not voting.is_rating_complete(flow["ratings"]),
            type="primary",
            width="stretch",
        ):
            flow["stars"] = voting.average_rating(flow["ratings"])
            email = cache.get(storage.USER_EMAIL)
            if email:
                flow["linked"] = voting.submit_vote(film["id"], email, name, flow["stars"], cache)
            flow["step"] = voting.step_after_rating(bool(email))
            st.rerun(scope="fragment")

    elif flow["step"] == voting.STEP_EMAIL:
        st.markdown("**Almost Done**")
        st.caption("Enter your email ID to verify your vote. This helps us ensure one person, one vote.")
        email = st.text_input("Email", placeholder="name@gmail.com", key=f"{state_key}-email")
        if st.button("Continue", disabled=not voting.is_valid_email(email), width="stretch"):
            email = auth.normalize_email(email)
            cache.set(storage.USER_EMAIL, email)
            auth.sync_user_profile(email, cache)
            name = cache.get(storage.USER_NAME) or "Anonymous"
            flow["linked"] = voting.submit_vote(film["id"], email, name, flow["stars"], cache)
            flow["step"] = voting.STEP_REVIEW_PROMPT
            st.rerun(scope="fragment")

    elif flow["step"] == voting.STEP_REVIEW_PROMPT:
        st.markdown("**Want to earn more?**")
        st.caption("Write a short review. Our AI will grade it and award you up to 100 extra points!")
        if st.button("Write a Review", type="primary", width="stretch"):
            flow["step"] = voting.STEP_REVIEW_FORM
            st.rerun(scope="fragment")
        if st.button("No thanks, maybe later", width="stretch"):
            flow["step"] = voting.STEP_SUCCESS
            st.rerun(scope="fragment")

    elif flow["step"] == voting.STEP_REVIEW_FORM:
        review = st.text_area(
            "Your Review",
            placeholder="What did you think about the cinematography, story, or message?",
            key=f"{state_key}-review",
        )
        if st.button(
            "Submit for Grading →",
            disabled=not voting.can_submit_review(review),
            width="stretch",
        ):
            flow["review"] = review
            flow["step"] = voting.STEP_ANALYZING
            st.rerun(scope="fragment")

    elif flow["step"] == voting.STEP_ANALYZING:
        with st.spinner("AI is reading your review... Analyzing sentiment and depth"):
            flow["grade"] = voting.submit_review(
                film["id"],
                film.get("title") or "",
                cache.get(storage.USER_EMAIL),
                name,
                flow["stars"],
                flow["ratings"],
                flow["review"],
                cache,
                settings["openai_api_key"],
                model=settings["openai_model"],
            )
        flow["step"] = voting.STEP_SUCCESS
        st.rerun(scope="fragment")

    else:
        st.success("Vote Recorded! Your vote has been successfully cast.")
        grade = flow["grade"]
        if grade and grade["pointsAwarded"] > 0:
            st.markdown(f"**+{grade['pointsAwarded']} Points Earned**")
            st.caption(f"\"{grade['constructiveFeedback']}\"")
        if flow["linked"]:
            university = cache.get(storage.USER_UNIVERSITY_NAME) or "your campus"
            st.caption(f"🎓 Points added to {university}")
        share = voting.share_message(film.get("title") or "")
        with st.expander("Share Vote"):
            st.code(f"{share['title']} {share['text']}", language=None)
        if st.button("Close", width="stretch"):
            del st.session_state[state_key]
            st.rerun()


@st.dialog("Film Trivia")
def trivia_dialog():
    cache = get_cache()
    if "trivia" not in st.session_state:
        st.session_state.trivia = {
            "questions": trivia.pick_questions(),
            "index": 0,
            "score": 0,
            "selected": None,
            "points": None,
        }
    game = st.session_state.trivia
    questions = game["questions"]

    if game["points"] is None:
        question = questions[game["index"]]
        st.caption(
            f"Question {game['index'] + 1} of {len(questions)} · "
            f"⚡ {trivia.round_points(game['score'])} pts"
        )
        st.markdown(f"**{question['question']}**")
        for option in question["options"]:
            label = option
            if game["selected"] is not None:
                if trivia.is_correct(question, option):
                    label = f"✅ {option}"
                elif option == game["selected"]:
                    label = f"❌ {option}"
            if st.button(
                label,
                key=f"trivia-{question['id']}-{option}",
                disabled=game["selected"] is not None,
                width="stretch",
            ):
                game["selected"] = option
                if trivia.is_correct(question, option):
                    game["score"] += 1
                st.rerun(scope="fragment")

        if game["selected"] is not None:
            last = game["index"] == len(questions) - 1
            if st.button("See results" if last else "Next question →", type="primary"):
                if last:
                    game["points"] = trivia.finish_round(game["score"], cache)
                else:
                    game["index"] += 1
                    game["selected"] = None
                st.rerun(scope="fragment")
    else:
        st.markdown("### 🏆 Quiz Complete!")
        st.write(f"You got **{game['score']} out of {len(questions)}** correct.")
        st.metric("Total Reward", f"+{game['points']} Points")
        if game["points"] and not cache.get(storage.USER_EMAIL):
            st.caption("Add your email while voting to keep these points.")
        if st.button("Collect Points →", type="primary", width="stretch"):
            del st.session_state.trivia
            st.rerun()


def render_milestone(points):
    milestone = gamification.next_milestone(points)
    if milestone["is_max"]:
        st.success(f"🏅 {milestone['current_title']}: you're in line for a {milestone['next_title']}!")
        return
    st.progress(
        min(int(milestone["progress_percent"]), 100),
        text=f"{milestone['points_needed']} pts to {milestone['next_title']}",
    )
