from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

Guard = Callable[[Any], bool]


class MonotonicClock:
    """Wall-independent millisecond clock for real play."""

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)


class ManualClock:
    """Clock that only moves when told to. Used by tests and replays."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = int(start_ms)

    def now_ms(self) -> int:
        return self._now

    def advance(self, ms: int) -> None:
        if ms < 0:
            raise ValueError('cannot move a clock backwards')
        self._now += int(ms)


@dataclass(order=True)
class _Timer:
    due: int
    seq: int
    callback: Callable[[], None] = field(compare=False)
    token: Any = field(compare=False, default=None)
    guard: Optional[Guard] = field(compare=False, default=None)
    label: str = field(compare=False, default='')


class Scheduler:
    """
    Single logical timer shared by every delayed effect of a game.

    Nothing runs in the background: due callbacks fire when the owner calls
    run_due(). While a callback is firing, now() reports that timer's due
    instant, so chained delays (countdown ticks, reveal window) stay exact even
    when the scheduler is pumped late.

    Each timer carries a token and an optional guard. The guard is evaluated at
    fire time; a timer whose token is no longer current is dropped.
    """

    def __init__(self, clock: Optional[Any] = None) -> None:
        self.clock = clock or MonotonicClock()
        self._heap: List[_Timer] = []
        self._seq = itertools.count()
        self._cursor: Optional[int] = None

    def now(self) -> int:
        return self._cursor if self._cursor is not None else self.clock.now_ms()

    def schedule(
        self,
        delay_ms: int,
        callback: Callable[[], None],
        token: Any = None,
        *,
        guard: Optional[Guard] = None,
        label: str = '',
    ) -> None:
        if delay_ms < 0:
            raise ValueError('delay_ms must be non-negative')
        due = self.now() + int(delay_ms)
        heapq.heappush(self._heap, _Timer(due, next(self._seq), callback, token, guard, label))
        logger.debug("[timer-set] %s token=%s delay=%sms due=%s", label or callback, token, delay_ms, due)

    def pending(self) -> int:
        return len(self._heap)

    def next_due(self) -> Optional[int]:
        return self._heap[0].due if self._heap else None

    def run_due(self) -> int:
        """Fires every timer due at the current clock reading, in due order. Returns the number fired."""
        fired = 0
        now = self.clock.now_ms()
        while self._heap and self._heap[0].due <= now:
            timer = heapq.heappop(self._heap)
            if timer.guard is not None and not timer.guard(timer.token):
                logger.debug("[timer-abort] %s token=%s is stale", timer.label, timer.token)
                continue
            logger.debug("[timer-fire] %s token=%s due=%s now=%s", timer.label, timer.token, timer.due, now)
            self._cursor = timer.due
            try:
                timer.callback()
            finally:
                self._cursor = None
            fired += 1
        return fired

    def advance(self, ms: int) -> int:
        """Moves a manual clock forward and fires whatever became due."""
        advance = getattr(self.clock, 'advance', None)
        if advance is None:
            raise TypeError('advance() needs a clock with an advance(ms) method')
        advance(ms)
        return self.run_due()

    def clear(self) -> None:
        self._heap.clear()
