from __future__ import annotations

# Facade module that re-exports the memory match core.
# Used by the Flask app, the CLI entry point and the tests.
# Single-responsibility modules live under memory_core/*.

# Prefer relative imports when loaded as part of a package, else the top-level package.
try:
    from .memory_core.cards import Card, Deck, SYMBOLS, DECK_SIZE, deal_deck  # type: ignore
    from .memory_core.state import Phase, CardView, EngineSnapshot  # type: ignore
    from .memory_core.scheduler import Scheduler, ManualClock, MonotonicClock  # type: ignore
    from .memory_core.engine import (  # type: ignore
        GameEngine,
        COUNTDOWN_FROM,
        COUNTDOWN_TICK_MS,
        MEMORIZE_MS,
        RESOLVE_MS,
        CELEBRATION_MS,
    )
    from .memory_core.ranking import (  # type: ignore
        RankingEntry,
        RankingStore,
        TOP_N,
        NAME_MAX_LEN,
        entries_from_json,
        entries_to_json,
    )
    from .memory_core.timefmt import format_time, format_date  # type: ignore
    from .memory_core.session import GameSession  # type: ignore
    from .memory_core.db import (  # type: ignore
        RANKINGS_NAMESPACE,
        SqliteRankingStorage,
        db_load_rankings,
        db_store_rankings,
        open_storage,
    )
except ImportError:
    from memory_core.cards import Card, Deck, SYMBOLS, DECK_SIZE, deal_deck  # type: ignore
    from memory_core.state import Phase, CardView, EngineSnapshot  # type: ignore
    from memory_core.scheduler import Scheduler, ManualClock, MonotonicClock  # type: ignore
    from memory_core.engine import (  # type: ignore
        GameEngine,
        COUNTDOWN_FROM,
        COUNTDOWN_TICK_MS,
        MEMORIZE_MS,
        RESOLVE_MS,
        CELEBRATION_MS,
    )
    from memory_core.ranking import (  # type: ignore
        RankingEntry,
        RankingStore,
        TOP_N,
        NAME_MAX_LEN,
        entries_from_json,
        entries_to_json,
    )
    from memory_core.timefmt import format_time, format_date  # type: ignore
    from memory_core.session import GameSession  # type: ignore
    from memory_core.db import (  # type: ignore
        RANKINGS_NAMESPACE,
        SqliteRankingStorage,
        db_load_rankings,
        db_store_rankings,
        open_storage,
    )


def new_session(db_path: str | None = None, seed: int | None = None, clock=None) -> GameSession:
    """Builds a session whose rankings are mirrored to db_path when given."""
    rankings = RankingStore(storage=open_storage(db_path))
    return GameSession(rankings=rankings, scheduler=Scheduler(clock), seed=seed)


def main() -> None:
    # CLI driver delegated to memory_core.cli
    try:
        from .memory_core.cli import main as _main  # type: ignore
    except ImportError:
        from memory_core.cli import main as _main  # type: ignore
    _main()


if __name__ == '__main__':
    main()
