from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

# Ensure package imports work when executed directly from repo root or as module
if __package__ in (None, ""):
    sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

try:
    from .game import (  # type: ignore
        EngineSnapshot,
        GameSession,
        RankingEntry,
        format_date,
        format_time,
        new_session,
    )
except ImportError:
    from game import (  # type: ignore
        EngineSnapshot,
        GameSession,
        RankingEntry,
        format_date,
        format_time,
        new_session,
    )

DEFAULT_DB = os.getenv("MEMORY_DB", "")
DEBUG_LOGS = os.getenv("MEMORY_DEBUG", "0").lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)

app = Flask(__name__)

# One screen, one game; rankings live as long as the process (or the DB file).
SESSION: GameSession = new_session(DEFAULT_DB or None)


def _session() -> GameSession:
    s = SESSION
    s.pump()
    return s


def snapshot_to_json(snap: EngineSnapshot) -> Dict[str, Any]:
    elapsed = snap.elapsed_ms
    return {
        "phase": snap.phase.value,
        "countdown": snap.countdown,
        "cards": [
            {"id": c.id, "symbol": c.symbol, "matched": c.matched, "visible": c.visible}
            for c in snap.cards
        ],
        "flipped": list(snap.flipped),
        "matched": list(snap.matched),
        "pairsFound": snap.pairs_found,
        "elapsed": elapsed,
        "elapsedText": format_time(elapsed) if elapsed is not None else None,
        "celebrating": snap.celebrating,
    }


def entry_to_json(rank: int, e: RankingEntry) -> Dict[str, Any]:
    out = e.to_json()
    out.update({"rank": rank, "timeText": format_time(e.time), "dateText": format_date(e.date)})
    return out


def _state_response(s: GameSession, accepted: Optional[bool] = None) -> Any:
    body: Dict[str, Any] = {
        "ok": True,
        "state": snapshot_to_json(s.snapshot()),
        "scorePrompt": s.score_prompt_open(),
        "registered": s.registered,
    }
    if accepted is not None:
        body["accepted"] = accepted
    return jsonify(body)


def _rankings_json(s: GameSession):
    return [entry_to_json(i, e) for i, e in enumerate(s.top(), start=1)]


@app.get("/")
def index() -> Any:
    return jsonify({
        "ok": True,
        "game": "memory-match",
        "endpoints": [
            "GET /api/state",
            "POST /api/start",
            "POST /api/flip",
            "POST /api/reset",
            "GET /api/rankings",
            "GET /api/rankings/qualifies",
            "POST /api/score",
            "POST /api/score/skip",
        ],
    })


# ---------- Game API ----------

@app.get("/api/state")
def api_state() -> Any:
    return _state_response(_session())


@app.post("/api/start")
def api_start() -> Any:
    s = _session()
    return _state_response(s, accepted=s.start())


@app.post("/api/reset")
def api_reset() -> Any:
    s = _session()
    s.reset()
    return _state_response(s, accepted=True)


@app.post("/api/flip")
def api_flip() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    card_id = body.get("cardId")
    if isinstance(card_id, bool) or not isinstance(card_id, int):
        logger.debug("rejected flip payload %r", body)
        return jsonify({"ok": False, "error": "cardId must be an integer"}), 400
    s = _session()
    return _state_response(s, accepted=s.flip(card_id))


# ---------- Rankings API ----------

@app.get("/api/rankings")
def api_rankings() -> Any:
    return jsonify({"ok": True, "rankings": _rankings_json(_session())})


@app.get("/api/rankings/qualifies")
def api_qualifies() -> Any:
    raw = request.args.get("time", "")
    try:
        time_ms = int(raw)
    except ValueError:
        return jsonify({"ok": False, "error": "time must be an integer number of milliseconds"}), 400
    if time_ms < 0:
        return jsonify({"ok": False, "error": "time must be non-negative"}), 400
    return jsonify({"ok": True, "time": time_ms, "qualifies": _session().qualifies_for_top10(time_ms)})


@app.post("/api/score")
def api_score() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    name = body.get("name")
    if not isinstance(name, str):
        return jsonify({"ok": False, "error": "name must be a string"}), 400
    s = _session()
    registered = s.register_score(name)
    return jsonify({"ok": True, "registered": registered, "rankings": _rankings_json(s)})


@app.post("/api/score/skip")
def api_score_skip() -> Any:
    s = _session()
    return jsonify({"ok": True, "skipped": s.skip_registration(), "rankings": _rankings_json(s)})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if DEBUG_LOGS else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)
