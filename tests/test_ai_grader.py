import json
import unittest
from unittest import mock

import httpx
import openai

import ai_grader


def status_error(status_code):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError("busy", response=response, body=None)


GOOD_REPLY = json.dumps(
    {
        "qualityScore": 8,
        "pointsAwarded": 70,
        "sentiment": "Positive",
        "constructiveFeedback": "Sharp notes on the editing.",
    }
)


class GradeReviewTests(unittest.TestCase):
    def test_short_review_is_not_sent(self):
        with mock.patch.object(ai_grader, "_call_openai") as call:
            grade = ai_grader.grade_review("Urban Rhythm", "ok", "key")
        call.assert_not_called()
        self.assertEqual(grade, ai_grader.SHORT_REVIEW_GRADE)

    def test_missing_key_gives_offline_grade(self):
        grade = ai_grader.grade_review("Urban Rhythm", "A moving portrait of the city.", None)
        self.assertEqual(grade, ai_grader.OFFLINE_GRADE)

    @mock.patch.object(ai_grader, "OpenAI")
    def test_successful_grade(self, _openai):
        with mock.patch.object(ai_grader, "_call_openai", return_value=GOOD_REPLY):
            grade = ai_grader.grade_review("Urban Rhythm", "A moving portrait of the city.", "key")
        self.assertEqual(grade["pointsAwarded"], 70)
        self.assertEqual(grade["sentiment"], "Positive")

    @mock.patch.object(ai_grader, "OpenAI")
    def test_retries_transient_errors_with_backoff(self, _openai):
        sleep = mock.Mock()
        side_effect = [status_error(429), status_error(503), GOOD_REPLY]
        with mock.patch.object(ai_grader, "_call_openai", side_effect=side_effect) as call:
            grade = ai_grader.grade_review("Urban Rhythm", "Loved the sound design.", "key", sleep=sleep)
        self.assertEqual(call.call_count, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])
        self.assertEqual(grade["qualityScore"], 8)

    @mock.patch.object(ai_grader, "OpenAI")
    def test_gives_up_after_three_attempts(self, _openai):
        sleep = mock.Mock()
        with mock.patch.object(ai_grader, "_call_openai", side_effect=status_error(503)) as call:
            grade = ai_grader.grade_review("Urban Rhythm", "Loved the sound design.", "key", sleep=sleep)
        self.assertEqual(call.call_count, 3)
        self.assertEqual(sleep.call_count, 2)
        self.assertEqual(grade, ai_grader.OFFLINE_GRADE)

    @mock.patch.object(ai_grader, "OpenAI")
    def test_non_transient_error_is_not_retried(self, _openai):
        sleep = mock.Mock()
        with mock.patch.object(ai_grader, "_call_openai", side_effect=status_error(400)) as call:
            grade = ai_grader.grade_review("Urban Rhythm", "Loved the sound design.", "key", sleep=sleep)
        self.assertEqual(call.call_count, 1)
        sleep.assert_not_called()
        self.assertEqual(grade, ai_grader.OFFLINE_GRADE)

    @mock.patch.object(ai_grader, "OpenAI")
    def test_invalid_json_falls_back(self, _openai):
        with mock.patch.object(ai_grader, "_call_openai", return_value="not json"):
            grade = ai_grader.grade_review("Urban Rhythm", "Loved the sound design.", "key")
        self.assertEqual(grade, ai_grader.OFFLINE_GRADE)

    @mock.patch.object(ai_grader, "OpenAI")
    def test_non_finite_numbers_get_neutral_values(self, _openai):
        for raw in (
            '{"qualityScore": 8, "pointsAwarded": Infinity, "sentiment": "Positive"}',
            '{"qualityScore": 8, "pointsAwarded": 1e400, "sentiment": "Positive"}',
        ):
            with mock.patch.object(ai_grader, "_call_openai", return_value=raw):
                grade = ai_grader.grade_review("Urban Rhythm", "Loved the sound design.", "key")
            self.assertEqual(grade["pointsAwarded"], ai_grader.OFFLINE_GRADE["pointsAwarded"])
            self.assertEqual(grade["qualityScore"], 8)


class ValidateResponseTests(unittest.TestCase):
    def test_clamps_and_defaults(self):
        grade = ai_grader._validate_response(
            json.dumps({"qualityScore": 14, "pointsAwarded": 250, "sentiment": "Ecstatic"})
        )
        self.assertEqual(grade["qualityScore"], 10)
        self.assertEqual(grade["pointsAwarded"], 100)
        self.assertEqual(grade["sentiment"], "Neutral")
        self.assertEqual(grade["constructiveFeedback"], "Thanks for your review!")

    def test_missing_numbers_use_neutral_values(self):
        grade = ai_grader._validate_response("{}")
        self.assertEqual(grade["qualityScore"], 5)
        self.assertEqual(grade["pointsAwarded"], 10)

    def test_nan_score_uses_neutral_value(self):
        grade = ai_grader._validate_response('{"qualityScore": NaN, "pointsAwarded": -Infinity}')
        self.assertEqual(grade["qualityScore"], ai_grader.OFFLINE_GRADE["qualityScore"])
        self.assertEqual(grade["pointsAwarded"], ai_grader.OFFLINE_GRADE["pointsAwarded"])

    def test_rejects_non_object(self):
        with self.assertRaises(ValueError):
            ai_grader._validate_response("[1, 2, 3]")


if __name__ == "__main__":
    unittest.main()
