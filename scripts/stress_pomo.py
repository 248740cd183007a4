from __future__ import annotations

import argparse
import json
import random
import shutil
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pomo_app.controller import PomodoroController
from pomo_app.core.phases import (
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASES,
    RUN_IDLE,
    RUN_PAUSED,
    RUN_RUNNING,
)
from pomo_app.core.settings import Settings
from pomo_app.debug import SimClock
from pomo_app.services.ticker import ManualTicker


@dataclass
class Metrics:
    steps: int = 0
    ticks_delivered: int = 0
    completions_total: int = 0
    focus_completions: int = 0
    long_breaks_scheduled: int = 0
    auto_starts: int = 0
    ignored_intents: int = 0
    stale_signals_replayed: int = 0
    sound_requests: int = 0
    history_clears: int = 0
    state_machine_invariant_violations: int = 0
    illegal_transition_samples: list[str] = field(default_factory=list)


def _violation(metrics: Metrics, message: str) -> None:
    metrics.state_machine_invariant_violations += 1
    if len(metrics.illegal_transition_samples) < 20:
        metrics.illegal_transition_samples.append(f"step={metrics.steps}: {message}")


def _random_settings(rng: random.Random) -> Settings:
    return Settings(
        focus_minutes=rng.randint(1, 3),
        short_break_minutes=rng.randint(1, 2),
        long_break_minutes=rng.randint(1, 3),
        long_break_interval=rng.randint(2, 5),
        auto_start_breaks=rng.random() < 0.5,
        auto_start_focus=rng.random() < 0.5,
    )


def _check_snapshot(controller: PomodoroController, ticker: ManualTicker, metrics: Metrics) -> None:
    snap = controller.snapshot()
    if snap.phase not in PHASES:
        _violation(metrics, f"unknown phase {snap.phase!r}")
    if snap.run_state not in {RUN_IDLE, RUN_RUNNING, RUN_PAUSED}:
        _violation(metrics, f"unknown run_state {snap.run_state!r}")
    if not (0 < snap.seconds_remaining <= snap.duration_seconds):
        _violation(metrics, f"remaining {snap.seconds_remaining} outside (0, {snap.duration_seconds}]")
    if (snap.run_state == RUN_RUNNING) != ticker.active:
        _violation(metrics, f"ticker active={ticker.active} with run_state={snap.run_state}")
    if not 0.0 <= snap.progress <= 1.0:
        _violation(metrics, f"progress {snap.progress} outside [0, 1]")


def _step_tick(controller, ticker, clock, metrics: Metrics, rng: random.Random) -> None:
    before = controller.snapshot()
    log_before = len(controller.session_log)
    burst = rng.randint(1, 90)
    for _ in range(burst):
        if not ticker.active:
            break
        clock.advance(1)
        ticker.fire()
        metrics.ticks_delivered += 1
        after = controller.snapshot()
        if after.completed_focus_count != before.completed_focus_count or len(controller.session_log) != log_before:
            break

    after = controller.snapshot()
    appended = len(controller.session_log) - log_before
    if before.run_state != RUN_RUNNING:
        if after != before or appended:
            _violation(metrics, "tick changed a timer that was not running")
        return
    if appended == 0:
        return
    if appended != 1:
        _violation(metrics, f"completion appended {appended} records")
        return

    metrics.completions_total += 1
    record = controller.session_log.all()[0]
    if record.phase != before.phase:
        _violation(metrics, f"record phase {record.phase} != finished phase {before.phase}")
    settings = controller.settings()
    if before.phase == PHASE_FOCUS:
        metrics.focus_completions += 1
        if after.completed_focus_count != before.completed_focus_count + 1:
            _violation(metrics, "focus completion did not increment the counter")
        expected = PHASE_LONG_BREAK if after.completed_focus_count % settings.long_break_interval == 0 else PHASE_SHORT_BREAK
        if after.phase != expected:
            _violation(metrics, f"after focus #{after.completed_focus_count} got {after.phase}, expected {expected}")
        if after.phase == PHASE_LONG_BREAK:
            metrics.long_breaks_scheduled += 1
        auto = settings.auto_start_breaks
    else:
        if after.phase != PHASE_FOCUS:
            _violation(metrics, f"break completion moved to {after.phase}")
        auto = settings.auto_start_focus
    expected_state = RUN_RUNNING if auto else RUN_IDLE
    if after.run_state != expected_state:
        _violation(metrics, f"auto_start={auto} left run_state={after.run_state}")
    if auto:
        metrics.auto_starts += 1
    if after.seconds_remaining != after.duration_seconds:
        _violation(metrics, "next phase did not start at full duration")


def _step_intent(controller, ticker, metrics: Metrics, rng: random.Random) -> None:
    before = controller.snapshot()
    action = rng.choice(["start", "pause", "reset", "select", "settings", "defaults", "clear", "stale"])
    if action == "start":
        result = controller.start()
        if before.run_state == RUN_RUNNING and result is not None:
            _violation(metrics, "start accepted while running")
        if before.run_state == RUN_PAUSED and controller.snapshot().seconds_remaining != before.seconds_remaining:
            _violation(metrics, "resume changed the remaining time")
    elif action == "pause":
        result = controller.pause()
        if before.run_state != RUN_RUNNING and result is not None:
            _violation(metrics, f"pause accepted from {before.run_state}")
    elif action == "reset":
        result = controller.reset()
        after = controller.snapshot()
        if after.phase != before.phase or after.run_state != RUN_IDLE:
            _violation(metrics, "reset changed phase or left the timer running")
        if after.completed_focus_count != before.completed_focus_count:
            _violation(metrics, "reset touched the focus counter")
    elif action == "select":
        phase = rng.choice(PHASES)
        result = controller.select_phase(phase)
        after = controller.snapshot()
        if before.run_state == RUN_RUNNING:
            if result is not None or after != before:
                _violation(metrics, "select_phase accepted while running")
        elif after.phase != phase or after.run_state != RUN_IDLE:
            _violation(metrics, f"select_phase({phase}) did not force idle")
    elif action == "settings":
        controller.update_settings(_random_settings(rng))
        result = {}
        after = controller.snapshot()
        if before.run_state != RUN_IDLE and after.seconds_remaining != before.seconds_remaining:
            _violation(metrics, "settings change altered an in-progress countdown")
    elif action == "defaults":
        controller.reset_settings_to_defaults()
        result = {}
    elif action == "clear":
        controller.clear_session_history()
        metrics.history_clears += 1
        result = {}
        if controller.sessions():
            _violation(metrics, "history not empty after clear")
    else:
        # replay a clock callback captured before the timer left the running state
        stale = ticker.callback
        controller.pause()
        controller.reset()
        if stale is not None:
            metrics.stale_signals_replayed += 1
            frozen = controller.snapshot()
            stale()
            if controller.snapshot() != frozen:
                _violation(metrics, "stale clock signal mutated a reset timer")
        result = {}
    if result is None:
        metrics.ignored_intents += 1


def run_stress_pomo(args: argparse.Namespace) -> int:
    rng = random.Random(int(args.seed))
    workdir = Path(args.workdir)
    if getattr(args, "clean", False) and workdir.exists():
        shutil.rmtree(workdir)
    workdir.mkdir(parents=True, exist_ok=True)

    metrics = Metrics()
    clock = SimClock(wall_start=1_700_000_000.0)
    ticker = ManualTicker()

    def _sound(_phase: str) -> None:
        metrics.sound_requests += 1
        if rng.random() < float(args.sound_fail_rate):
            raise OSError("no audio device")

    controller = PomodoroController(
        initial_settings=_random_settings(rng),
        ticker=ticker,
        play_sound=_sound,
        wall_now=clock.wall_time,
    )

    for _ in range(int(args.steps)):
        metrics.steps += 1
        if rng.random() < float(args.tick_rate):
            _step_tick(controller, ticker, clock, metrics, rng)
        else:
            _step_intent(controller, ticker, metrics, rng)
        _check_snapshot(controller, ticker, metrics)

    if metrics.sound_requests != metrics.completions_total:
        _violation(metrics, f"sound requests {metrics.sound_requests} != completions {metrics.completions_total}")

    report = {"seed": int(args.seed), "metrics": asdict(metrics)}
    (workdir / "stress_pomo_report.json").write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(json.dumps(report["metrics"], indent=2))
    return 0 if metrics.state_machine_invariant_violations == 0 else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Random intent stress run for the pomodoro state machine")
    parser.add_argument("--steps", type=int, default=5000)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--tick-rate", type=float, default=0.7, help="share of steps that deliver clock signals")
    parser.add_argument("--sound-fail-rate", type=float, default=0.2)
    parser.add_argument("--workdir", default=".stress_pomo")
    parser.add_argument("--clean", action="store_true")
    return run_stress_pomo(parser.parse_args())


if __name__ == "__main__":
    raise SystemExit(main())
