from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .cards import Card


class Phase(str, Enum):
    IDLE = 'idle'
    COUNTDOWN = 'countdown'
    MEMORIZING = 'memorizing'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass(frozen=True)
class CardView:
    """What the presentation layer may show for one card."""
    id: int
    symbol: Optional[str]  # None while face down
    matched: bool
    visible: bool

    @classmethod
    def of(cls, card: Card, visible: bool) -> 'CardView':
        return cls(id=card.id, symbol=card.symbol if visible else None, matched=card.matched, visible=visible)


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of the engine at one instant, derived on demand."""
    phase: Phase
    countdown: Optional[int]  # only set during Phase.COUNTDOWN
    cards: Tuple[CardView, ...]
    flipped: Tuple[int, ...]
    matched: Tuple[int, ...]
    elapsed_ms: Optional[int]
    celebrating: bool

    @property
    def pairs_found(self) -> int:
        return len(self.matched) // 2
