from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

TOP_N = 10
NAME_MAX_LEN = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(date: datetime) -> datetime:
    """Naive datetimes are taken as UTC so they sort against stored entries."""
    return date if date.tzinfo is not None else date.replace(tzinfo=timezone.utc)


def _parse_date(value: str) -> datetime:
    # fromisoformat() only learned about a trailing 'Z' in 3.11.
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    return _aware(parsed)


def _iso(date: datetime) -> str:
    return date.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass(frozen=True)
class RankingEntry:
    """One leaderboard row. time is the clear time in milliseconds."""
    name: str
    time: int
    date: datetime

    def sort_key(self):
        return (self.time, self.date)

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "time": int(self.time), "date": _iso(self.date)}

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> 'RankingEntry':
        """Builds an entry from its stored form; raises ValueError on anything malformed."""
        if not isinstance(obj, dict):
            raise ValueError(f"ranking entry must be an object, got {type(obj).__name__}")
        name = obj.get("name")
        time_ms = obj.get("time")
        date = obj.get("date")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("ranking entry needs a non-empty name")
        if isinstance(time_ms, bool) or not isinstance(time_ms, int) or time_ms < 0:
            raise ValueError(f"bad ranking time: {time_ms!r}")
        if not isinstance(date, str):
            raise ValueError(f"bad ranking date: {date!r}")
        return cls(name=name.strip()[:NAME_MAX_LEN], time=time_ms, date=_parse_date(date))


def entries_from_json(payload: Any) -> List[RankingEntry]:
    if not isinstance(payload, list):
        raise ValueError("rankings payload must be a list")
    return [RankingEntry.from_json(obj) for obj in payload]


def entries_to_json(entries: Iterable[RankingEntry]) -> List[Dict[str, Any]]:
    return [e.to_json() for e in entries]


class RankingStore:
    """
    In-memory top-10 table, sorted by (time, date) ascending.

    An optional storage object with load() -> list of entries and
    save(entries) methods mirrors the table; see db.SqliteRankingStorage.
    """

    def __init__(
        self,
        entries: Iterable[RankingEntry] = (),
        limit: int = TOP_N,
        storage: Optional[Any] = None,
    ) -> None:
        self.limit = limit
        self.storage = storage
        initial = list(entries)
        if storage is not None and not initial:
            initial = list(storage.load())
        self._entries: List[RankingEntry] = self._ranked(initial)

    def _ranked(self, entries: List[RankingEntry]) -> List[RankingEntry]:
        # sorted() is stable: same time and date keeps insertion order.
        return sorted(entries, key=RankingEntry.sort_key)[: self.limit]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RankingEntry]:
        return self.top()

    def cutoff(self) -> Optional[int]:
        """Time of the last place when the table is full, else None."""
        if len(self._entries) < self.limit:
            return None
        return self._entries[-1].time

    def qualifies(self, time_ms: int) -> bool:
        cutoff = self.cutoff()
        return cutoff is None or time_ms < cutoff

    def insert(self, name: str, time_ms: int, date: Optional[datetime] = None) -> Optional[RankingEntry]:
        """
        Adds a run and keeps the best `limit` entries.

        Returns the new entry when it made the table, None when the name is
        blank (nothing inserted) or the run was cut by the limit.
        """
        clean = (name or '').strip()
        if not clean:
            return None
        when = _aware(date) if date is not None else utcnow()
        entry = RankingEntry(name=clean[:NAME_MAX_LEN], time=int(time_ms), date=when)
        self._entries = self._ranked(self._entries + [entry])
        kept = any(e is entry for e in self._entries)
        logger.info("ranking insert name=%r time=%sms kept=%s", entry.name, entry.time, kept)
        if self.storage is not None:
            try:
                self.storage.save(self._entries)
            except Exception as exc:
                logger.warning("could not persist rankings: %s", exc)
        return entry if kept else None

    def top(self, n: int = TOP_N) -> Iterator[RankingEntry]:
        for entry in self._entries[:n]:
            yield entry

    def clear(self) -> None:
        self._entries = []
