from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from .engine import GameEngine
from .ranking import RankingEntry, RankingStore
from .scheduler import Scheduler
from .state import EngineSnapshot

logger = logging.getLogger(__name__)


class GameSession:
    """
    The caller side of one screen: a GameEngine plus the RankingStore it
    reports to.

    Tracks whether the finished game has already been registered or skipped,
    so each completed game gets at most one leaderboard insert.
    """

    def __init__(
        self,
        engine: Optional[GameEngine] = None,
        rankings: Optional[RankingStore] = None,
        scheduler: Optional[Scheduler] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.engine = engine or GameEngine(scheduler=scheduler, seed=seed)
        self.rankings = rankings if rankings is not None else RankingStore()
        self._registration_closed = False

    @property
    def scheduler(self) -> Scheduler:
        return self.engine.scheduler

    def pump(self) -> int:
        """Applies every delayed transition that has come due."""
        return self.scheduler.run_due()

    # ---------- game commands ----------

    def start(self) -> bool:
        started = self.engine.start()
        if started:
            self._registration_closed = False
        return started

    def reset(self) -> None:
        self.engine.reset()
        self._registration_closed = False

    def flip(self, card_id: int) -> bool:
        return self.engine.flip(card_id)

    # ---------- leaderboard ----------

    @property
    def registered(self) -> bool:
        return self._registration_closed

    def qualifies_for_top10(self, time_ms: int) -> bool:
        return self.rankings.qualifies(time_ms)

    def score_prompt_open(self) -> bool:
        """True while the name prompt should be shown for the game just finished."""
        final = self.engine.final_time()
        if final is None or self.engine.is_celebrating() or self._registration_closed:
            return False
        return self.qualifies_for_top10(final)

    def register_score(self, name: str, date: Optional[datetime] = None) -> bool:
        """Records the finished game's time under name. Blank names and repeat calls are ignored."""
        if not self.score_prompt_open():
            return False
        if not (name or '').strip():
            return False
        final = self.engine.final_time()
        if final is None:
            return False
        self.rankings.insert(name, final, date)
        self._registration_closed = True
        return True

    def skip_registration(self) -> bool:
        if not self.engine.is_finished() or self._registration_closed:
            return False
        self._registration_closed = True
        logger.debug("registration skipped for game %s", self.engine.generation)
        return True

    def top(self, n: int = 10) -> List[RankingEntry]:
        return list(self.rankings.top(n))

    def snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()
