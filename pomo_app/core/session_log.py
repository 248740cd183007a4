from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

from pomo_app.core.phases import PHASE_FOCUS


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class SessionRecord:
    phase: str
    duration_minutes: int
    completed_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=lambda: uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "phase": self.phase,
            "duration_minutes": int(self.duration_minutes),
            "completed_at": self.completed_at.isoformat(),
        }


class SessionLog:
    """Append-only record of completed countdowns, most recent first."""

    def __init__(self) -> None:
        self._records: deque[SessionRecord] = deque()

    def append(self, record: SessionRecord) -> None:
        self._records.appendleft(record)

    def clear(self) -> None:
        self._records.clear()

    def all(self) -> list[SessionRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def group_by_day(self) -> list[tuple[date, list[SessionRecord]]]:
        groups: dict[date, list[SessionRecord]] = {}
        for record in self._records:
            groups.setdefault(local_day(record.completed_at), []).append(record)
        return sorted(groups.items(), key=lambda item: item[0], reverse=True)

    def stats_for_day(self, day: date) -> dict[str, int]:
        focus_count = 0
        total_minutes = 0
        for record in self._records:
            if local_day(record.completed_at) != day:
                continue
            total_minutes += int(record.duration_minutes)
            if record.phase == PHASE_FOCUS:
                focus_count += 1
        return {"focus_session_count": focus_count, "total_minutes": total_minutes}


def local_day(ts: datetime) -> date:
    # naive timestamps are taken as already local
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone().date()
