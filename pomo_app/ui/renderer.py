from __future__ import annotations

from datetime import datetime

from pomo_app.core.events import TimerSnapshot
from pomo_app.core.phases import PHASE_FOCUS, PHASE_LONG_BREAK, PHASE_SHORT_BREAK, RUN_PAUSED, RUN_RUNNING

_TIMER_LABELS = {
    PHASE_FOCUS: "Focus Time",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}
_HISTORY_LABELS = {
    PHASE_FOCUS: "Focus",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}
# badge colours per phase (background, foreground)
PHASE_COLORS = {
    PHASE_FOCUS: ("#e5484d", "#ffffff"),
    PHASE_SHORT_BREAK: ("#30a46c", "#ffffff"),
    PHASE_LONG_BREAK: ("#0090ff", "#ffffff"),
}


class Renderer:
    def format_time(self, seconds: int) -> str:
        seconds = max(0, int(seconds))
        return f"{seconds // 60:02d}:{seconds % 60:02d}"

    def phase_label(self, phase: str) -> str:
        return _TIMER_LABELS.get(phase, phase)

    def history_label(self, phase: str) -> str:
        return _HISTORY_LABELS.get(phase, phase)

    def phase_colors(self, phase: str) -> tuple[str, str]:
        return PHASE_COLORS.get(phase, ("#888888", "#ffffff"))

    def progress_percent(self, snapshot: TimerSnapshot) -> int:
        return int(round(snapshot.progress * 100))

    def primary_action_label(self, snapshot: TimerSnapshot) -> str:
        if snapshot.run_state == RUN_RUNNING:
            return "Pause"
        if snapshot.run_state == RUN_PAUSED:
            return "Resume"
        return "Start"

    def clock_time(self, ts: datetime) -> str:
        local = ts.astimezone() if ts.tzinfo is not None else ts
        hour = local.hour % 12 or 12
        suffix = "AM" if local.hour < 12 else "PM"
        return f"{hour}:{local.minute:02d} {suffix}"

    def window_title(self, snapshot: TimerSnapshot) -> str:
        return f"{self.format_time(snapshot.seconds_remaining)} - {self.phase_label(snapshot.phase)}"
