from __future__ import annotations

PHASE_FOCUS = "focus"
PHASE_SHORT_BREAK = "shortBreak"
PHASE_LONG_BREAK = "longBreak"

PHASES = (PHASE_FOCUS, PHASE_SHORT_BREAK, PHASE_LONG_BREAK)
BREAK_PHASES = frozenset({PHASE_SHORT_BREAK, PHASE_LONG_BREAK})

RUN_IDLE = "idle"
RUN_RUNNING = "running"
RUN_PAUSED = "paused"


def is_phase(value: object) -> bool:
    return isinstance(value, str) and value in PHASES


def phase_minutes(phase: str, settings) -> int:
    if phase == PHASE_FOCUS:
        return int(settings.focus_minutes)
    if phase == PHASE_SHORT_BREAK:
        return int(settings.short_break_minutes)
    if phase == PHASE_LONG_BREAK:
        return int(settings.long_break_minutes)
    raise ValueError(f"unknown phase: {phase!r}")


def phase_seconds(phase: str, settings) -> int:
    return phase_minutes(phase, settings) * 60
