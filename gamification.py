PARTICIPANT = "Participant"
ACTIVE_VOTER = "Active Voter"
FILM_REVIEWER = "Film Reviewer"
FESTIVAL_CRITIC = "Festival Critic"
JURY_NOMINEE = "Jury Nominee"
JURY_INVITATION = "Jury Invitation"

VOTE_POINTS = 10
TRIVIA_POINTS_PER_ANSWER = 10

MILESTONES = [
    {"title": PARTICIPANT, "range": "0–50 pts", "min": 0},
    {"title": ACTIVE_VOTER, "range": "51–150 pts", "min": 51},
    {"title": FILM_REVIEWER, "range": "151–300 pts", "min": 151},
    {"title": FESTIVAL_CRITIC, "range": "301+ pts", "min": 301},
]


def title_for_points(points, is_top_earner=False):
    if is_top_earner and points > 0:
        return JURY_NOMINEE
    if points >= 301:
        return FESTIVAL_CRITIC
    if points >= 151:
        return FILM_REVIEWER
    if points >= 51:
        return ACTIVE_VOTER
    return PARTICIPANT


def next_milestone(points):
    if points >= 301:
        return {
            "current_title": FESTIVAL_CRITIC,
            "next_title": JURY_INVITATION,
            "target": None,
            "points_needed": 0,
            "progress_percent": 100.0,
            "is_max": True,
        }
    if points >= 151:
        return _progress(points, FILM_REVIEWER, FESTIVAL_CRITIC, 151, 301)
    if points >= 51:
        return _progress(points, ACTIVE_VOTER, FILM_REVIEWER, 51, 151)
    return _progress(points, PARTICIPANT, ACTIVE_VOTER, 0, 51)


def milestone_track(points):
    return [dict(level, reached=points >= level["min"]) for level in MILESTONES]


def _progress(points, current_title, next_title, floor, target):
    return {
        "current_title": current_title,
        "next_title": next_title,
        "target": target,
        "points_needed": target - points,
        "progress_percent": (points - floor) / (target - floor) * 100,
        "is_max": False,
    }
