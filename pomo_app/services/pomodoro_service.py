from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from pomo_app.core.events import TimerEvent, TimerSnapshot
from pomo_app.core.phases import (
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    RUN_IDLE,
    RUN_PAUSED,
    RUN_RUNNING,
    is_phase,
    phase_minutes,
    phase_seconds,
)
from pomo_app.core.session_log import SessionLog, SessionRecord
from pomo_app.core.settings import SettingsStore
from pomo_app.services.ticker import ManualTicker, Ticker

LOGGER = logging.getLogger(__name__)


class PomodoroService:
    """Phase state machine for a single countdown.

    Every public intent returns an event payload when it changed something and
    ``None`` when it was ignored. Invalid transitions are never errors.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        session_log: SessionLog,
        ticker: Ticker | None = None,
        play_sound: Callable[[str], None] | None = None,
        wall_now: Callable[[], float] | None = None,
    ) -> None:
        self._settings_store = settings_store
        self._session_log = session_log
        self._ticker = ticker or ManualTicker()
        self._play_sound = play_sound
        self._wall_now = wall_now or time.time
        self._subscribers: list[Callable[[TimerEvent], None]] = []
        self._generation = 0

        self.phase = PHASE_FOCUS
        self.run_state = RUN_IDLE
        self.completed_focus_count = 0
        self.phase_duration_s = phase_seconds(self.phase, settings_store.get())
        self.seconds_remaining = self.phase_duration_s

    # ----- observers -----
    def subscribe(self, callback: Callable[[TimerEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _notify(self, event_type: str, payload: dict | None = None) -> None:
        if not self._subscribers:
            return
        event = TimerEvent(event_type=event_type, snapshot=self.snapshot(), payload=dict(payload or {}))
        for callback in list(self._subscribers):
            callback(event)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self.phase,
            run_state=self.run_state,
            seconds_remaining=int(self.seconds_remaining),
            completed_focus_count=int(self.completed_focus_count),
            duration_seconds=int(self.phase_duration_s),
        )

    def progress(self) -> float:
        return self.snapshot().progress

    # ----- clock signal -----
    def _arm_clock(self) -> None:
        self._ticker.stop()
        self._generation += 1
        generation = self._generation
        self._ticker.start(lambda: self._on_clock_signal(generation))

    def _disarm_clock(self) -> None:
        self._generation += 1
        self._ticker.stop()

    def _on_clock_signal(self, generation: int) -> None:
        if generation != self._generation:
            LOGGER.debug("stale clock signal dropped generation=%s current=%s", generation, self._generation)
            return
        self.tick()

    def _load_phase(self, phase: str) -> None:
        self.phase = phase
        self.phase_duration_s = phase_seconds(phase, self._settings_store.get())
        self.seconds_remaining = self.phase_duration_s

    # ----- intents -----
    def start(self) -> dict | None:
        if self.run_state == RUN_RUNNING:
            LOGGER.debug("start ignored: already running")
            return None
        resumed = self.run_state == RUN_PAUSED
        self.run_state = RUN_RUNNING
        self._arm_clock()
        payload = {
            "phase": self.phase,
            "seconds_remaining": int(self.seconds_remaining),
            "resumed": resumed,
        }
        LOGGER.debug("timer started phase=%s remaining=%s resumed=%s", self.phase, self.seconds_remaining, resumed)
        self._notify("pomo_resume" if resumed else "pomo_start", payload)
        return payload

    def pause(self) -> dict | None:
        if self.run_state != RUN_RUNNING:
            LOGGER.debug("pause ignored: run_state=%s", self.run_state)
            return None
        self.run_state = RUN_PAUSED
        self._disarm_clock()
        payload = {"phase": self.phase, "seconds_remaining": int(self.seconds_remaining)}
        LOGGER.debug("timer paused phase=%s remaining=%s", self.phase, self.seconds_remaining)
        self._notify("pomo_pause", payload)
        return payload

    def reset(self) -> dict:
        self.run_state = RUN_IDLE
        self._disarm_clock()
        self._load_phase(self.phase)
        payload = {"phase": self.phase, "seconds_remaining": int(self.seconds_remaining)}
        LOGGER.debug("timer reset phase=%s", self.phase)
        self._notify("pomo_reset", payload)
        return payload

    def select_phase(self, phase: str) -> dict | None:
        if self.run_state == RUN_RUNNING:
            LOGGER.debug("select_phase ignored while running phase=%s", phase)
            return None
        if not is_phase(phase):
            LOGGER.debug("select_phase ignored: unknown phase %r", phase)
            return None
        self.run_state = RUN_IDLE
        self._disarm_clock()
        self._load_phase(phase)
        payload = {"phase": self.phase, "seconds_remaining": int(self.seconds_remaining)}
        LOGGER.debug("phase selected phase=%s", phase)
        self._notify("pomo_select", payload)
        return payload

    def apply_settings(self) -> dict | None:
        """Re-read durations after a settings replacement.

        Only an idle timer picks up the new duration; a running or paused
        countdown keeps going and the change lands at the next phase load.
        """
        if self.run_state != RUN_IDLE:
            return None
        self._load_phase(self.phase)
        payload = {"phase": self.phase, "seconds_remaining": int(self.seconds_remaining)}
        self._notify("pomo_settings", payload)
        return payload

    def tick(self) -> list[tuple[str, dict]]:
        events: list[tuple[str, dict]] = []
        if self.run_state != RUN_RUNNING:
            return events
        if self.seconds_remaining > 0:
            self.seconds_remaining -= 1
        if self.seconds_remaining > 0:
            self._notify("pomo_tick", {"seconds_remaining": int(self.seconds_remaining)})
            return events

        events.extend(self._complete())
        return events

    # ----- completion -----
    def _emit_sound(self, phase: str) -> None:
        if self._play_sound is None:
            return
        try:
            self._play_sound(phase)
        except Exception:
            LOGGER.debug("completion sound failed phase=%s", phase, exc_info=True)

    def _complete(self) -> list[tuple[str, dict]]:
        events: list[tuple[str, dict]] = []
        finished_phase = self.phase
        settings = self._settings_store.get()

        self.run_state = RUN_IDLE
        self._disarm_clock()
        self._emit_sound(finished_phase)

        record = SessionRecord(
            phase=finished_phase,
            duration_minutes=phase_minutes(finished_phase, settings),
            completed_at=datetime.fromtimestamp(self._wall_now(), tz=timezone.utc),
        )
        self._session_log.append(record)

        if finished_phase == PHASE_FOCUS:
            self.completed_focus_count += 1
            if self.completed_focus_count % settings.long_break_interval == 0:
                next_phase = PHASE_LONG_BREAK
            else:
                next_phase = PHASE_SHORT_BREAK
            auto_start = settings.auto_start_breaks
        else:
            next_phase = PHASE_FOCUS
            auto_start = settings.auto_start_focus

        self._load_phase(next_phase)
        completed = {
            "phase": finished_phase,
            "session_id": record.id,
            "duration_minutes": int(record.duration_minutes),
            "completed_focus_count": int(self.completed_focus_count),
            "next_phase": next_phase,
        }
        events.append(("pomo_complete", completed))
        LOGGER.info(
            "session complete phase=%s minutes=%s focus_count=%s next=%s",
            finished_phase,
            record.duration_minutes,
            self.completed_focus_count,
            next_phase,
        )
        self._notify("pomo_complete", completed)

        if auto_start:
            started = self.start()
            if started is not None:
                events.append(("pomo_start", started))
        return events
