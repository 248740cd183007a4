from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone

from pomo_app.config import PomoConfig
from pomo_app.core.events import TimerEvent, TimerSnapshot
from pomo_app.core.phases import RUN_RUNNING
from pomo_app.core.session_log import SessionLog, SessionRecord, local_day
from pomo_app.core.settings import Settings, SettingsStore
from pomo_app.services.pomodoro_service import PomodoroService
from pomo_app.services.ticker import Ticker

LOGGER = logging.getLogger(__name__)


class PomodoroController:
    """Session-scoped owner of settings, history and the phase state machine.

    The presentation layer forwards every user intent here and reads state
    back through the query methods.
    """

    def __init__(
        self,
        initial_settings: Settings | None = None,
        ticker: Ticker | None = None,
        play_sound: Callable[[str], None] | None = None,
        wall_now: Callable[[], float] | None = None,
    ) -> None:
        self.settings_store = SettingsStore(initial_settings)
        self.session_log = SessionLog()
        self.service = PomodoroService(
            settings_store=self.settings_store,
            session_log=self.session_log,
            ticker=ticker,
            play_sound=play_sound,
            wall_now=wall_now,
        )
        self._wall_now = wall_now
        self._on_history_change: list[Callable[[], None]] = []

    @classmethod
    def from_config(
        cls,
        config: PomoConfig,
        ticker: Ticker | None = None,
        play_sound: Callable[[str], None] | None = None,
    ) -> "PomodoroController":
        return cls(initial_settings=config.initial_settings, ticker=ticker, play_sound=play_sound)

    # ----- observers -----
    def subscribe(self, callback: Callable[[TimerEvent], None]) -> Callable[[], None]:
        return self.service.subscribe(callback)

    def subscribe_history(self, callback: Callable[[], None]) -> None:
        self._on_history_change.append(callback)

    def _emit_history_change(self) -> None:
        for callback in list(self._on_history_change):
            callback()

    # ----- intents -----
    def start(self) -> dict | None:
        return self.service.start()

    def pause(self) -> dict | None:
        return self.service.pause()

    def toggle(self) -> dict | None:
        if self.service.run_state == RUN_RUNNING:
            return self.service.pause()
        return self.service.start()

    def reset(self) -> dict:
        return self.service.reset()

    def select_phase(self, phase: str) -> dict | None:
        return self.service.select_phase(phase)

    def update_settings(self, settings: Settings) -> None:
        self.settings_store.replace(settings)
        LOGGER.debug("settings replaced %s", settings.to_dict())
        self.service.apply_settings()

    def reset_settings_to_defaults(self) -> Settings:
        settings = self.settings_store.reset()
        LOGGER.debug("settings reset to defaults")
        self.service.apply_settings()
        return settings

    def clear_session_history(self) -> None:
        cleared = len(self.session_log)
        self.session_log.clear()
        LOGGER.info("session history cleared count=%s", cleared)
        self._emit_history_change()

    # ----- queries -----
    def snapshot(self) -> TimerSnapshot:
        return self.service.snapshot()

    def settings(self) -> Settings:
        return self.settings_store.get()

    def sessions(self) -> list[SessionRecord]:
        return self.session_log.all()

    def grouped_sessions(self) -> list[tuple[date, list[SessionRecord]]]:
        return self.session_log.group_by_day()

    def today(self) -> date:
        if self._wall_now is not None:
            return local_day(datetime.fromtimestamp(self._wall_now(), tz=timezone.utc))
        return local_day(datetime.now(tz=timezone.utc))

    def today_stats(self) -> dict[str, int]:
        return self.session_log.stats_for_day(self.today())
