from pomo_app.core.phases import PHASE_FOCUS, PHASE_SHORT_BREAK, RUN_IDLE, RUN_PAUSED, RUN_RUNNING
from pomo_app.core.settings import DEFAULT_SETTINGS, Settings
from pomo_app.controller import PomodoroController
from pomo_app.services.ticker import ManualTicker


class _FakeClock:
    def __init__(self) -> None:
        # 10:00 UTC keeps a short run inside one local day for whole-hour offsets
        self.wall = 1_700_042_400.0

    def advance(self, seconds: float) -> None:
        self.wall += float(seconds)


def _controller(settings: Settings | None = None):
    clock = _FakeClock()
    ticker = ManualTicker()
    controller = PomodoroController(initial_settings=settings, ticker=ticker, wall_now=lambda: clock.wall)
    return controller, ticker, clock


def _run_to_completion(controller: PomodoroController, ticker: ManualTicker, clock: _FakeClock) -> None:
    if controller.snapshot().run_state != RUN_RUNNING:
        controller.start()
    remaining = controller.snapshot().seconds_remaining
    for _ in range(remaining):
        clock.advance(1)
        ticker.fire()


def test_today_stats_after_two_focus_and_one_short_break() -> None:
    controller, ticker, clock = _controller()
    _run_to_completion(controller, ticker, clock)
    assert controller.snapshot().phase == PHASE_SHORT_BREAK
    _run_to_completion(controller, ticker, clock)
    assert controller.snapshot().phase == PHASE_FOCUS
    _run_to_completion(controller, ticker, clock)

    assert len(controller.sessions()) == 3
    assert controller.today_stats() == {"focus_session_count": 2, "total_minutes": 55}
    days = controller.grouped_sessions()
    assert sum(len(records) for _, records in days) == 3


def test_toggle_switches_between_running_and_paused() -> None:
    controller, ticker, _clock = _controller()
    controller.toggle()
    assert controller.snapshot().run_state == RUN_RUNNING
    ticker.fire(3)
    controller.toggle()
    assert controller.snapshot().run_state == RUN_PAUSED
    assert controller.snapshot().seconds_remaining == 1497


def test_update_settings_applies_only_when_idle() -> None:
    controller, ticker, _clock = _controller()
    controller.update_settings(Settings(focus_minutes=30))
    assert controller.snapshot().seconds_remaining == 1800

    controller.start()
    ticker.fire(5)
    controller.update_settings(Settings(focus_minutes=10))
    assert controller.settings().focus_minutes == 10
    assert controller.snapshot().seconds_remaining == 1795

    controller.pause()
    controller.update_settings(Settings(focus_minutes=12))
    assert controller.snapshot().seconds_remaining == 1795

    controller.reset()
    assert controller.snapshot().run_state == RUN_IDLE
    assert controller.snapshot().seconds_remaining == 720


def test_reset_settings_to_defaults_recomputes_idle_timer() -> None:
    controller, _ticker, _clock = _controller(Settings(focus_minutes=45))
    assert controller.snapshot().seconds_remaining == 2700
    assert controller.reset_settings_to_defaults() == DEFAULT_SETTINGS
    assert controller.snapshot().seconds_remaining == 1500


def test_clear_session_history_notifies_and_empties() -> None:
    controller, ticker, clock = _controller(Settings(focus_minutes=1))
    _run_to_completion(controller, ticker, clock)
    assert len(controller.sessions()) == 1

    calls: list[int] = []
    controller.subscribe_history(lambda: calls.append(len(controller.sessions())))
    controller.clear_session_history()
    assert controller.sessions() == []
    assert calls == [0]
    # clearing history leaves the focus counter alone
    assert controller.snapshot().completed_focus_count == 1


def test_record_timestamp_comes_from_wall_clock() -> None:
    controller, ticker, clock = _controller(Settings(focus_minutes=1))
    _run_to_completion(controller, ticker, clock)
    record = controller.sessions()[0]
    assert record.completed_at.timestamp() == clock.wall
