from datetime import datetime

from pomo_app.core.events import TimerSnapshot
from pomo_app.core.phases import PHASE_FOCUS, PHASE_LONG_BREAK, RUN_IDLE, RUN_PAUSED, RUN_RUNNING
from pomo_app.ui.renderer import Renderer


def _snap(run_state: str = RUN_IDLE, remaining: int = 1500, duration: int = 1500) -> TimerSnapshot:
    return TimerSnapshot(
        phase=PHASE_FOCUS,
        run_state=run_state,
        seconds_remaining=remaining,
        completed_focus_count=0,
        duration_seconds=duration,
    )


def test_format_time_pads_minutes_and_seconds() -> None:
    renderer = Renderer()
    assert renderer.format_time(1500) == "25:00"
    assert renderer.format_time(65) == "01:05"
    assert renderer.format_time(0) == "00:00"
    assert renderer.format_time(-3) == "00:00"


def test_labels() -> None:
    renderer = Renderer()
    assert renderer.phase_label(PHASE_FOCUS) == "Focus Time"
    assert renderer.history_label(PHASE_LONG_BREAK) == "Long Break"
    assert renderer.primary_action_label(_snap(RUN_IDLE)) == "Start"
    assert renderer.primary_action_label(_snap(RUN_PAUSED)) == "Resume"
    assert renderer.primary_action_label(_snap(RUN_RUNNING)) == "Pause"


def test_progress_is_clamped() -> None:
    renderer = Renderer()
    assert renderer.progress_percent(_snap(remaining=1500)) == 0
    assert renderer.progress_percent(_snap(remaining=375)) == 75
    # remaining above the configured duration never shows negative progress
    assert _snap(remaining=2000).progress == 0.0
    assert _snap(remaining=0).progress == 1.0


def test_clock_time_uses_12_hour_format() -> None:
    renderer = Renderer()
    assert renderer.clock_time(datetime(2026, 2, 17, 0, 5)) == "12:05 AM"
    assert renderer.clock_time(datetime(2026, 2, 17, 15, 4)) == "3:04 PM"


def test_snapshot_to_dict_includes_progress() -> None:
    payload = _snap(remaining=750).to_dict()
    assert payload["progress"] == 0.5
    assert payload["run_state"] == RUN_IDLE
