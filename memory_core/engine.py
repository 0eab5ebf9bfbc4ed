from __future__ import annotations

import logging
import random
from typing import List, Optional, Union

from .cards import Card, Deck, DECK_SIZE, deal_deck
from .scheduler import Scheduler
from .state import CardView, EngineSnapshot, Phase

logger = logging.getLogger(__name__)

COUNTDOWN_FROM = 3
COUNTDOWN_TICK_MS = 1000
MEMORIZE_MS = 3000
RESOLVE_MS = 1000
CELEBRATION_MS = 3000


class GameEngine:
    """
    Owns one game: the deck, the face-up selection, the matched set, the phase
    and the play clock.

    Flow: idle -> countdown(3..1) -> memorizing (3s, all cards shown) ->
    playing -> finished (3s celebration). reset() returns to idle from
    anywhere. Every delayed step is scheduled with the current generation;
    start() and reset() bump the generation so timers from an abandoned game
    are dropped when they come due.

    Invalid commands are no-ops and return False.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.scheduler = scheduler or Scheduler()
        self._rng = rng or random.Random(seed)
        self._generation = 0
        self._phase = Phase.IDLE
        self._countdown: Optional[int] = None
        self._deck: Deck = deal_deck(rng=self._rng)
        self._flipped: List[int] = []
        self._matched: List[int] = []
        self._play_started_at: Optional[int] = None
        self._final_elapsed: Optional[int] = None
        self._celebrating = False

    # ---------- commands ----------

    def start(self) -> bool:
        if self._phase is not Phase.IDLE:
            return False
        self._new_game()
        self._phase = Phase.COUNTDOWN
        self._countdown = COUNTDOWN_FROM
        logger.info("game %s: countdown from %s", self._generation, COUNTDOWN_FROM)
        self._schedule(COUNTDOWN_TICK_MS, self._tick, 'countdown')
        return True

    def reset(self) -> None:
        self._new_game()
        self._phase = Phase.IDLE
        logger.info("game %s: reset to idle", self._generation)

    def flip(self, card_id: int) -> bool:
        if self._phase is not Phase.PLAYING:
            return False
        if len(self._flipped) >= 2:
            return False
        if card_id in self._flipped or card_id in self._matched:
            return False
        if card_id not in self._deck.ids():
            return False
        self._flipped.append(card_id)
        if len(self._flipped) == 2:
            first, second = self._flipped
            is_match = self._deck.card(first).symbol == self._deck.card(second).symbol
            logger.debug("game %s: flipped %s/%s match=%s", self._generation, first, second, is_match)
            self._schedule(
                RESOLVE_MS,
                lambda: self._resolve(first, second, is_match),
                'match' if is_match else 'mismatch',
            )
        return True

    # ---------- queries ----------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def flipped(self) -> List[int]:
        return list(self._flipped)

    @property
    def matched(self) -> List[int]:
        return list(self._matched)

    def countdown_value(self) -> Optional[int]:
        return self._countdown if self._phase is Phase.COUNTDOWN else None

    def visible(self, card: Union[Card, int]) -> bool:
        card_id = card.id if isinstance(card, Card) else card
        return (
            self._phase is Phase.MEMORIZING
            or card_id in self._flipped
            or card_id in self._matched
        )

    def elapsed(self) -> Optional[int]:
        """Milliseconds since play began; frozen once the last pair resolves. None before play."""
        if self._final_elapsed is not None:
            return self._final_elapsed
        if self._phase is Phase.PLAYING and self._play_started_at is not None:
            return max(0, self.scheduler.now() - self._play_started_at)
        return None

    def final_time(self) -> Optional[int]:
        return self._final_elapsed if self._phase is Phase.FINISHED else None

    def is_celebrating(self) -> bool:
        return self._celebrating

    def is_finished(self) -> bool:
        return self._phase is Phase.FINISHED

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            phase=self._phase,
            countdown=self.countdown_value(),
            cards=tuple(CardView.of(c, self.visible(c)) for c in self._deck),
            flipped=tuple(self._flipped),
            matched=tuple(self._matched),
            elapsed_ms=self.elapsed(),
            celebrating=self._celebrating,
        )

    # ---------- timed transitions ----------

    def _new_game(self) -> None:
        self._generation += 1
        self._deck = deal_deck(rng=self._rng)
        self._flipped = []
        self._matched = []
        self._countdown = None
        self._play_started_at = None
        self._final_elapsed = None
        self._celebrating = False

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _schedule(self, delay_ms: int, callback, label: str) -> None:
        self.scheduler.schedule(delay_ms, callback, self._generation, guard=self._is_current, label=label)

    def _tick(self) -> None:
        if self._phase is not Phase.COUNTDOWN or not self._countdown:
            return
        self._countdown -= 1
        if self._countdown > 0:
            self._schedule(COUNTDOWN_TICK_MS, self._tick, 'countdown')
            return
        self._phase = Phase.MEMORIZING
        logger.debug("game %s: memorizing for %sms", self._generation, MEMORIZE_MS)
        self._schedule(MEMORIZE_MS, self._begin_play, 'memorize')

    def _begin_play(self) -> None:
        if self._phase is not Phase.MEMORIZING:
            return
        self._phase = Phase.PLAYING
        self._countdown = None
        self._play_started_at = self.scheduler.now()
        logger.info("game %s: playing", self._generation)

    def _resolve(self, first: int, second: int, is_match: bool) -> None:
        if self._phase is not Phase.PLAYING:
            return
        if is_match:
            self._matched.extend((first, second))
            self._deck = self._deck.with_matched((first, second))
        self._flipped = []
        if len(self._matched) == DECK_SIZE:
            self._final_elapsed = self.scheduler.now() - (self._play_started_at or 0)
            self._phase = Phase.FINISHED
            self._celebrating = True
            logger.info("game %s: finished in %sms", self._generation, self._final_elapsed)
            self._schedule(CELEBRATION_MS, self._end_celebration, 'celebration')

    def _end_celebration(self) -> None:
        self._celebrating = False
