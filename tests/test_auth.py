import tempfile
import unittest
from pathlib import Path
from unittest import mock

import auth
import storage
from supabase_fakes import FakeSupabase, api_error, response


class AuthTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(self.tmpdir.name) / "cache.db"
        storage.init_db(db_path)
        self.cache = storage.LocalCache("device-1", db_path)
        self.client = FakeSupabase()

    def tearDown(self):
        self.tmpdir.cleanup()

    def upserted_profile(self):
        args, kwargs = self.client.queries("user_profiles", "upsert")[-1].call("upsert")
        self.assertEqual(kwargs["on_conflict"], "email")
        return args[0]

    def test_title_case(self):
        self.assertEqual(auth.to_title_case("nATIONAL institute of design"), "National Institute Of Design")

    def test_get_universities_fails_soft(self):
        self.client.respond("universities", api_error("boom"))
        self.assertEqual(auth.get_universities(client=self.client), [])

    def test_filter_universities(self):
        unis = [{"name": "FTII Pune"}, {"name": "NID Ahmedabad"}]
        self.assertEqual(auth.filter_universities(unis, "pune"), [{"name": "FTII Pune"}])
        self.assertEqual(auth.filter_universities(unis, ""), unis)

    def test_add_new_university_formats_row(self):
        self.client.respond("universities", response([{"id": "u9", "name": "Srishti Manipal"}]))
        created = auth.add_new_university("  srishti manipal ", "bengaluru", client=self.client)

        self.assertEqual(created["id"], "u9")
        row = self.client.queries("universities", "insert")[0].call("insert")[0][0]
        self.assertEqual(row["name"], "Srishti Manipal")
        self.assertEqual(row["location"], "Bengaluru")
        self.assertEqual(row["active_students"], 1)
        self.assertEqual(row["points"], 0)

    def test_recalculate_university_stats_sums_profiles(self):
        self.client.respond(
            "user_profiles", response([{"points": 10}, {"points": None}, {"points": 5}], count=3)
        )

        self.assertTrue(auth.recalculate_university_stats("u1", client=self.client))

        update = self.client.queries("universities", "update")[0]
        self.assertEqual(update.call("update")[0][0], {"active_students": 3, "points": 15})
        self.assertEqual(update.filters(), {"id": "u1"})

    def test_register_new_user_recalculates_old_and_new_university(self):
        self.client.respond("user_profiles", response([{"university_id": "u-old"}]))
        with mock.patch.object(auth, "recalculate_university_stats") as recalc:
            ok = auth.register_new_user(" Asha@Example.com ", "Asha", "u-new", client=self.client)

        self.assertTrue(ok)
        row = self.upserted_profile()
        self.assertEqual(row["email"], "asha@example.com")
        self.assertTrue(row["is_student"])
        recalled = [call.args[0] for call in recalc.call_args_list]
        self.assertEqual(recalled, ["u-new", "u-old"])

    def test_register_new_user_same_university_skips_recalculation(self):
        self.client.respond("user_profiles", response([{"university_id": "u1"}]))
        with mock.patch.object(auth, "recalculate_university_stats") as recalc:
            auth.register_new_user("a@b.c", "A", "u1", client=self.client)
        recalc.assert_not_called()

    def test_register_new_user_without_university_keeps_link(self):
        self.client.respond("user_profiles", response([{"university_id": "u1"}]))
        with mock.patch.object(auth, "recalculate_university_stats") as recalc:
            auth.register_new_user("a@b.c", "A", client=self.client)
        self.assertNotIn("university_id", self.upserted_profile())
        recalc.assert_not_called()

    def test_register_new_user_reports_failure(self):
        self.client.respond("user_profiles", response([]), api_error("bad row"))
        self.assertFalse(auth.register_new_user("a@b.c", "A", client=self.client))

    def test_recalculate_film_stats_averages_votes(self):
        self.client.respond("film_votes", response([{"rating": 4}, {"rating": 5}, {"rating": 3}]))

        self.assertTrue(auth.recalculate_film_stats("f1", client=self.client))

        update = self.client.queries("master_films", "update")[0]
        self.assertEqual(update.call("update")[0][0], {"rating": 4.0, "votes_count": 3})
        self.assertEqual(update.filters(), {"id": "f1"})

    def test_recalculate_film_stats_without_votes(self):
        self.assertFalse(auth.recalculate_film_stats("f1", client=self.client))
        self.assertEqual(self.client.queries("master_films"), [])

    def test_register_user_vote_adds_points_and_links_university(self):
        self.client.respond("user_profiles", response([{"points": 40, "university_id": "u1"}]))
        with mock.patch.object(auth, "recalculate_university_stats") as recalc:
            linked = auth.register_user_vote("a@b.c", "A", 10, self.cache, client=self.client)

        self.assertTrue(linked)
        self.assertEqual(self.upserted_profile()["points"], 50)
        self.assertEqual(self.cache.get(storage.USER_POINTS), 50)
        recalc.assert_called_once_with("u1", client=self.client)

    def test_register_user_vote_without_university(self):
        linked = auth.register_user_vote("a@b.c", "A", 10, self.cache, client=self.client)
        self.assertFalse(linked)
        self.assertEqual(self.cache.get(storage.USER_POINTS), 10)
        self.assertIsNone(self.upserted_profile()["university_id"])

    def test_award_bonus_points_needs_email(self):
        self.assertFalse(auth.award_bonus_points(30, self.cache, client=self.client))
        self.assertEqual(self.client.executed, [])

    def test_sync_user_profile_restores_cache(self):
        self.client.respond(
            "user_profiles",
            response([{"email": "a@b.c", "name": "Asha", "points": 120, "university_id": "u1"}]),
        )
        self.client.respond("universities", response([{"name": "FTII"}]))
        self.client.respond("film_votes", response([{"film_id": "f1"}, {"film_id": "f2"}]))

        self.assertTrue(auth.sync_user_profile("a@b.c", self.cache, client=self.client))

        self.assertEqual(self.cache.get(storage.USER_POINTS), 120)
        self.assertEqual(self.cache.get(storage.USER_NAME), "Asha")
        self.assertEqual(self.cache.get(storage.USER_UNIVERSITY_NAME), "FTII")
        self.assertTrue(self.cache.get(storage.IS_STUDENT))
        self.assertEqual(self.cache.get_list(storage.VOTED_FILMS), ["f1", "f2"])

    def test_sync_user_profile_unknown_email(self):
        self.assertFalse(auth.sync_user_profile("new@b.c", self.cache, client=self.client))
        self.assertIsNone(self.cache.get(storage.USER_POINTS))
        self.assertEqual(self.cache.get_list(storage.VOTED_FILMS), [])

    def test_is_top_earner(self):
        self.client.respond("user_profiles", response([{"email": "a@b.c", "points": 500}]))
        self.assertTrue(auth.is_top_earner("A@b.c", client=self.client))
        self.assertFalse(auth.is_top_earner("z@b.c", client=self.client))

        query = self.client.queries("user_profiles")[0]
        self.assertEqual(query.call("order"), (("points",), {"desc": True}))


if __name__ == "__main__":
    unittest.main()
