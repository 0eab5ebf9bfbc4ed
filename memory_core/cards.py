from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Set, Tuple

Symbol = str

SYMBOLS: Tuple[Symbol, ...] = ('🍎', '🍌', '🍓', '🍊', '🍇', '🥝', '🍑', '🥭')
GRID_WIDTH = 4
GRID_HEIGHT = 4
DECK_SIZE = GRID_WIDTH * GRID_HEIGHT


@dataclass(frozen=True)
class Card:
    """A single card. Two cards share each symbol."""
    id: int
    symbol: Symbol
    matched: bool = False

    def with_matched(self) -> 'Card':
        return replace(self, matched=True)


@dataclass(frozen=True)
class Deck:
    """Represents the dealt 4x4 grid of cards in row-major order."""
    cards: Tuple[Card, ...]

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def card(self, card_id: int) -> Card:
        """Looks up a card by id; raises KeyError for ids not in the deck."""
        for c in self.cards:
            if c.id == card_id:
                return c
        raise KeyError(card_id)

    def ids(self) -> List[int]:
        return [c.id for c in self.cards]

    def with_matched(self, card_ids: Iterable[int]) -> 'Deck':
        """Returns a copy with the given cards flagged as matched."""
        hit = set(card_ids)
        return Deck(tuple(c.with_matched() if c.id in hit else c for c in self.cards))

    def pretty(self, visible: Optional[Set[int]] = None, hidden: str = '?') -> str:
        """Generates a human-readable 4x4 grid, showing symbols only for visible ids."""
        shown = visible or set()
        lines: List[str] = []
        for r in range(GRID_HEIGHT):
            row: List[str] = []
            for c in range(GRID_WIDTH):
                card = self.cards[r * GRID_WIDTH + c]
                face = card.symbol if card.id in shown else hidden
                row.append(f"{card.id:>2}:{face}")
            lines.append("  ".join(row))
        return "\n".join(lines)


def deal_deck(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> Deck:
    """Creates a shuffled 16-card deck of 8 symbol pairs."""
    rng = rng or random.Random(seed)
    # Pair i gets ids 2i and 2i+1.
    cards: List[Card] = []
    for index, symbol in enumerate(SYMBOLS):
        cards.append(Card(id=index * 2, symbol=symbol))
        cards.append(Card(id=index * 2 + 1, symbol=symbol))
    # random.shuffle is an in-place Fisher-Yates.
    rng.shuffle(cards)
    return Deck(tuple(cards))
