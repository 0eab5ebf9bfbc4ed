"""
Memory match core Python package.

This package holds the game-state machine and the leaderboard logic for the
4x4 concentration game, kept free of any web framework so the Flask app,
the CLI and the tests can all drive it.
Modules:
- cards.py: Card, Deck, deal_deck
- state.py: Phase, EngineSnapshot
- scheduler.py: Scheduler and clocks
- engine.py: GameEngine
- ranking.py: RankingEntry, RankingStore
- session.py: GameSession (engine + rankings + registration flag)
- db.py: optional SQLite persistence for rankings
"""
