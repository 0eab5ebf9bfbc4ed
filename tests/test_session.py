import unittest
from datetime import datetime, timezone

from game import GameSession, ManualClock, Phase, RankingStore, Scheduler


def _pairs(deck):
    by_symbol = {}
    for card in deck:
        by_symbol.setdefault(card.symbol, []).append(card.id)
    return list(by_symbol.values())


class TestGameSession(unittest.TestCase):
    def setUp(self):
        self.clock = ManualClock()
        self.rankings = RankingStore()
        self.session = GameSession(rankings=self.rankings, scheduler=Scheduler(self.clock), seed=5)

    def _play_through(self, think_ms=0):
        s = self.session
        s.start()
        s.scheduler.advance(6000)
        self.clock.advance(think_ms)
        for a, b in _pairs(s.engine.deck):
            s.flip(a)
            s.flip(b)
            s.scheduler.advance(1000)
        self.assertEqual(s.engine.phase, Phase.FINISHED)

    def test_given_finished_game_when_celebrating_then_no_prompt(self):
        self._play_through()
        self.assertTrue(self.session.engine.is_celebrating())
        self.assertFalse(self.session.score_prompt_open())
        self.assertFalse(self.session.register_score("Dana"))
        self.session.scheduler.advance(3000)
        self.assertTrue(self.session.score_prompt_open())

    def test_given_prompt_when_registering_then_one_insert_only(self):
        self._play_through(think_ms=500)
        self.session.scheduler.advance(3000)
        self.assertTrue(self.session.register_score("Dana", datetime(2024, 1, 1, tzinfo=timezone.utc)))
        self.assertTrue(self.session.registered)
        self.assertFalse(self.session.score_prompt_open())
        self.assertFalse(self.session.register_score("Dana again"))
        top = self.session.top()
        self.assertEqual(len(top), 1)
        self.assertEqual(top[0].name, "Dana")
        self.assertEqual(top[0].time, 8500)

    def test_given_naive_date_when_registering_then_ranked_with_existing_entries(self):
        self.rankings.insert("earlier", 8000)
        self._play_through()
        self.session.scheduler.advance(3000)
        self.assertTrue(self.session.register_score("Lee", datetime(2024, 1, 1)))
        self.assertEqual([e.name for e in self.session.top()], ["Lee", "earlier"])

    def test_given_blank_name_when_registering_then_prompt_stays_open(self):
        self._play_through()
        self.session.scheduler.advance(3000)
        self.assertFalse(self.session.register_score("   "))
        self.assertTrue(self.session.score_prompt_open())
        self.assertEqual(len(self.rankings), 0)

    def test_given_skip_then_registration_closed_for_this_game(self):
        self._play_through()
        self.session.scheduler.advance(3000)
        self.assertTrue(self.session.skip_registration())
        self.assertFalse(self.session.skip_registration())
        self.assertFalse(self.session.register_score("Eve"))
        self.assertEqual(len(self.rankings), 0)

    def test_given_skip_when_not_finished_then_ignored(self):
        self.assertFalse(self.session.skip_registration())
        self.session.start()
        self.assertFalse(self.session.skip_registration())

    def test_given_reset_and_new_game_then_registration_reopens(self):
        self._play_through()
        self.session.scheduler.advance(3000)
        self.session.register_score("Fay")
        self.session.reset()
        self.assertFalse(self.session.registered)
        self._play_through()
        self.session.scheduler.advance(3000)
        self.assertTrue(self.session.register_score("Gus"))
        self.assertEqual(len(self.rankings), 2)

    def test_given_full_table_of_faster_runs_then_no_prompt(self):
        for i in range(10):
            self.rankings.insert(f"pro{i}", 100 + i)
        self._play_through()
        self.session.scheduler.advance(3000)
        self.assertFalse(self.session.qualifies_for_top10(self.session.engine.final_time()))
        self.assertFalse(self.session.score_prompt_open())
        self.assertTrue(self.session.skip_registration())

    def test_given_pump_then_due_transitions_apply(self):
        self.session.start()
        self.clock.advance(3000)
        self.assertEqual(self.session.engine.phase, Phase.COUNTDOWN)
        self.assertGreater(self.session.pump(), 0)
        self.assertEqual(self.session.snapshot().phase, Phase.MEMORIZING)


if __name__ == '__main__':
    unittest.main(verbosity=2)
