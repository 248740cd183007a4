from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


def utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class TimerSnapshot:
    phase: str
    run_state: str
    seconds_remaining: int
    completed_focus_count: int
    duration_seconds: int

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        fraction = (self.duration_seconds - self.seconds_remaining) / self.duration_seconds
        return min(1.0, max(0.0, fraction))

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["progress"] = self.progress
        return payload


@dataclass(frozen=True)
class TimerEvent:
    event_type: str
    snapshot: TimerSnapshot
    timestamp: str = field(default_factory=utc_now_iso)
    event_id: str = field(default_factory=lambda: uuid4().hex)
    payload: dict[str, Any] = field(default_factory=dict)
