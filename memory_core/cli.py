from __future__ import annotations

import argparse
import logging
import os
import time
from typing import Callable, Optional

from .db import open_storage
from .ranking import RankingStore
from .session import GameSession
from .state import Phase
from .timefmt import format_date, format_time


def _wait_until(session: GameSession, done: Callable[[], bool], on_step: Optional[Callable[[], None]] = None) -> None:
    """Sleeps from one scheduled transition to the next until done() holds."""
    scheduler = session.scheduler
    while not done():
        due = scheduler.next_due()
        if due is None:
            return
        delay = max(0, due - scheduler.clock.now_ms())
        advance = getattr(scheduler.clock, 'advance', None)
        if advance is not None:
            advance(delay)
        else:
            time.sleep(delay / 1000.0)
        session.pump()
        if on_step is not None:
            on_step()


def print_rankings(session: GameSession) -> None:
    entries = session.top()
    if not entries:
        print('No records yet.')
        return
    print('Top 10:')
    for rank, e in enumerate(entries, start=1):
        print(f"#{rank:<2} {e.name:<20} {format_time(e.time):>9}  {format_date(e.date)}")


def _print_board(session: GameSession) -> None:
    engine = session.engine
    shown = {c.id for c in engine.deck if engine.visible(c)}
    print(engine.deck.pretty(shown))


def play_one(session: GameSession) -> None:
    engine = session.engine
    session.start()

    last_count: Optional[int] = None

    def show_countdown() -> None:
        nonlocal last_count
        n = engine.countdown_value()
        if n is not None and n != last_count:
            last_count = n
            print(f"{n}...")

    show_countdown()
    _wait_until(session, lambda: engine.phase is not Phase.COUNTDOWN, show_countdown)
    print('Memorize the cards!')
    _print_board(session)
    _wait_until(session, lambda: engine.phase is not Phase.MEMORIZING)

    while engine.phase is Phase.PLAYING:
        print()
        _print_board(session)
        print(f"Time: {format_time(engine.elapsed() or 0)}  Pairs: {len(engine.matched) // 2}/8")
        text = input('Pick a card id (q to give up): ').strip()
        if text.lower() == 'q':
            session.reset()
            return
        try:
            card_id = int(text)
        except ValueError:
            print('Could not parse. Try again.')
            continue
        session.pump()
        if not session.flip(card_id):
            print('That card cannot be flipped right now.')
            continue
        if len(engine.flipped) == 2:
            _print_board(session)
            _wait_until(session, lambda: not engine.flipped)

    final = engine.final_time()
    print(f"\nCongratulations! Cleared in {format_time(final or 0)}")
    _wait_until(session, lambda: not engine.is_celebrating())
    if session.score_prompt_open():
        name = input('You made the top 10! Enter your name (blank to skip): ')
        if not session.register_score(name):
            session.skip_registration()
    print_rankings(session)


def main() -> None:
    parser = argparse.ArgumentParser(description='Memory match (concentration) in the terminal')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal')
    parser.add_argument('--db', default=os.getenv('MEMORY_DB', ''), help='SQLite file to keep rankings in')
    parser.add_argument('--rankings', action='store_true', help='Print the leaderboard and exit')
    parser.add_argument('--debug', action='store_true', help='Log timer and phase transitions')
    args = parser.parse_args()

    debug = args.debug or os.getenv('MEMORY_DEBUG', '0').lower() in ('1', 'true', 'yes', 'on')
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    session = GameSession(rankings=RankingStore(storage=open_storage(args.db)), seed=args.seed)
    if args.rankings:
        print_rankings(session)
        return

    while True:
        text = input('\nPress Enter to start (q to quit): ').strip().lower()
        if text == 'q':
            break
        play_one(session)
        session.reset()
