import random

import auth
import gamification


QUESTIONS_PER_ROUND = 3

TRIVIA_QUESTIONS = [
    {
        "id": 1,
        "question": "Which of these is considered the first feature-length animated film?",
        "options": ["Fantasia", "Snow White and the Seven Dwarfs", "Steamboat Willie", "Toy Story"],
        "answer": "Snow White and the Seven Dwarfs",
    },
    {
        "id": 2,
        "question": "What is the standard frame rate for cinema?",
        "options": ["60 fps", "30 fps", "24 fps", "48 fps"],
        "answer": "24 fps",
    },
    {
        "id": 3,
        "question": "In film editing, what is a 'Jump Cut'?",
        "options": [
            "A transition between two different locations",
            "A cut that breaks temporal continuity",
            "A fade to black",
            "A fast-paced montage",
        ],
        "answer": "A cut that breaks temporal continuity",
    },
    {
        "id": 4,
        "question": "What does a 'Dolly Zoom' combine?",
        "options": [
            "Two cameras filming at once",
            "A camera move and an opposite zoom",
            "Slow motion and a freeze frame",
            "A pan and a tilt",
        ],
        "answer": "A camera move and an opposite zoom",
    },
    {
        "id": 5,
        "question": "Which aspect ratio is standard for modern widescreen cinema?",
        "options": ["4:3", "16:9", "2.39:1", "1:1"],
        "answer": "2.39:1",
    },
]


def pick_questions(count=QUESTIONS_PER_ROUND, rng=None):
    rng = rng or random
    return rng.sample(TRIVIA_QUESTIONS, min(count, len(TRIVIA_QUESTIONS)))


def is_correct(question, option):
    return option == question["answer"]


def round_points(score):
    return score * gamification.TRIVIA_POINTS_PER_ANSWER


def finish_round(score, cache, client=None):
    points = round_points(score)
    if points > 0:
        auth.award_bonus_points(points, cache, client=client)
    return points
