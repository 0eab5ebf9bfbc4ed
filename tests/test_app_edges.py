import json
import unittest

import app as app_mod             # noqa: E402
from app import app as flask_app  # noqa: E402
from game import GameSession, ManualClock, RankingStore, Scheduler  # noqa: E402


class TestFlaskAPIEdges(unittest.TestCase):
    def setUp(self):
        self._orig_session = app_mod.SESSION
        self.clock = ManualClock()
        self.rankings = RankingStore()
        app_mod.SESSION = GameSession(rankings=self.rankings, scheduler=Scheduler(self.clock), seed=8)
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.SESSION = self._orig_session

    def _post(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def test_given_non_integer_card_id_when_flipping_then_400(self):
        for bad in ({"cardId": "3"}, {"cardId": True}, {"cardId": 1.5}, {}):
            r = self._post("/api/flip", bad)
            self.assertEqual(r.status_code, 400)
            d = r.get_json()
            self.assertFalse(d["ok"])
            self.assertIn("cardId", d["error"])

    def test_given_idle_when_flipping_then_200_but_not_accepted(self):
        r = self._post("/api/flip", {"cardId": 0})
        self.assertEqual(r.status_code, 200)
        d = r.get_json()
        self.assertTrue(d["ok"])
        self.assertFalse(d["accepted"])
        self.assertEqual(d["state"]["flipped"], [])

    def test_given_bad_time_when_checking_qualification_then_400(self):
        for q in ("", "?time=abc", "?time=-1"):
            r = self.client.get("/api/rankings/qualifies" + q)
            self.assertEqual(r.status_code, 400)
            self.assertFalse(r.get_json()["ok"])

    def test_given_full_table_when_checking_qualification_then_cutoff_applies(self):
        for i in range(10):
            self.rankings.insert(f"p{i}", 1000 * (i + 1))
        ok = self.client.get("/api/rankings/qualifies?time=9999").get_json()
        self.assertTrue(ok["qualifies"])
        no = self.client.get("/api/rankings/qualifies?time=10000").get_json()
        self.assertFalse(no["qualifies"])

    def test_given_no_game_when_registering_then_not_registered(self):
        r = self._post("/api/score", {"name": "Nobody"})
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.get_json()["registered"])
        self.assertEqual(len(self.rankings), 0)

    def test_given_non_string_name_when_registering_then_400(self):
        r = self._post("/api/score", {"name": 12})
        self.assertEqual(r.status_code, 400)

    def test_given_reset_mid_countdown_when_time_passes_then_stays_idle(self):
        self._post("/api/start")
        self.clock.advance(1500)
        self._post("/api/reset")
        self.clock.advance(20000)
        st = self.client.get("/api/state").get_json()["state"]
        self.assertEqual(st["phase"], "idle")
        self.assertIsNone(st["countdown"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
