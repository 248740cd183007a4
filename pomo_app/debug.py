from __future__ import annotations

import argparse
import json
import time
from datetime import datetime, timezone

from pomo_app.config import PomoConfig
from pomo_app.controller import PomodoroController
from pomo_app.core.phases import RUN_RUNNING
from pomo_app.core.settings import coerce_settings
from pomo_app.logging_setup import configure_logging
from pomo_app.services.daily_summary import summarize_sessions
from pomo_app.services.ticker import ManualTicker


class SimClock:
    def __init__(self, wall_start: float | None = None) -> None:
        self.wall = float(wall_start if wall_start is not None else time.time())

    def wall_time(self) -> float:
        return self.wall

    def advance(self, seconds: float) -> None:
        self.wall += float(seconds)


def _cmd_config(_args: argparse.Namespace) -> int:
    cfg = PomoConfig.from_env()
    print(json.dumps(cfg.to_dict(), ensure_ascii=False, indent=2))
    return 0


def run_simulation(controller: PomodoroController, ticker: ManualTicker, clock: SimClock, cycles: int) -> int:
    """Drive the timer until ``cycles`` focus sessions have completed.

    Returns the number of clock signals delivered.
    """
    signals = 0
    target = max(0, int(cycles))
    while controller.snapshot().completed_focus_count < target:
        if controller.snapshot().run_state != RUN_RUNNING:
            controller.start()
        before = controller.snapshot().completed_focus_count
        while ticker.active:
            clock.advance(1)
            ticker.fire()
            signals += 1
            if controller.snapshot().completed_focus_count != before:
                break
            if controller.snapshot().run_state != RUN_RUNNING:
                break
    return signals


def _cmd_simulate(args: argparse.Namespace) -> int:
    cfg = PomoConfig.from_env()
    overrides: dict[str, object] = {}
    if getattr(args, "focus", None) is not None:
        overrides["focus_minutes"] = args.focus
    if getattr(args, "short_break", None) is not None:
        overrides["short_break_minutes"] = args.short_break
    if getattr(args, "long_break", None) is not None:
        overrides["long_break_minutes"] = args.long_break
    if getattr(args, "interval", None) is not None:
        overrides["long_break_interval"] = args.interval
    if getattr(args, "auto", False):
        overrides["auto_start_breaks"] = True
        overrides["auto_start_focus"] = True
    settings = coerce_settings(overrides, cfg.initial_settings)

    clock = SimClock()
    ticker = ManualTicker()
    controller = PomodoroController(initial_settings=settings, ticker=ticker, wall_now=clock.wall_time)
    signals = run_simulation(controller, ticker, clock, int(getattr(args, "cycles", 1)))

    now = datetime.fromtimestamp(clock.wall_time(), tz=timezone.utc)
    summary = summarize_sessions(controller.session_log, now=now)
    summary["generated_at"] = now.isoformat()
    payload = {
        "settings": controller.settings().to_dict(),
        "signals": signals,
        "snapshot": controller.snapshot().to_dict(),
        "summary": summary,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m pomo_app.debug")
    parser.add_argument("--log-level", default=None, help="override POMO_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="cmd", required=True)

    p_config = subparsers.add_parser("config", help="Show effective config")
    p_config.set_defaults(func=_cmd_config)

    p_sim = subparsers.add_parser("simulate", help="Run focus cycles headless and print the history")
    p_sim.add_argument("--cycles", type=int, default=1, help="focus sessions to complete")
    p_sim.add_argument("--auto", action="store_true", help="enable both auto-start flags")
    p_sim.add_argument("--focus", type=int, default=None)
    p_sim.add_argument("--short-break", type=int, default=None)
    p_sim.add_argument("--long-break", type=int, default=None)
    p_sim.add_argument("--interval", type=int, default=None)
    p_sim.set_defaults(func=_cmd_simulate)

    args = parser.parse_args(argv)
    configure_logging(args.log_level or PomoConfig.from_env().log_level)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
