from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pomo_app.core.settings import DEFAULT_SETTINGS, Settings, coerce_settings

_SETTINGS_ENV = {
    "focus_minutes": "POMO_FOCUS_MINUTES",
    "short_break_minutes": "POMO_SHORT_BREAK_MINUTES",
    "long_break_minutes": "POMO_LONG_BREAK_MINUTES",
    "long_break_interval": "POMO_LONG_BREAK_INTERVAL",
    "auto_start_breaks": "POMO_AUTO_START_BREAKS",
    "auto_start_focus": "POMO_AUTO_START_FOCUS",
}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_settings() -> Settings:
    raw: dict[str, str] = {}
    for field_name, env_name in _SETTINGS_ENV.items():
        value = os.getenv(env_name, "").strip()
        if value:
            raw[field_name] = value
    return coerce_settings(raw, DEFAULT_SETTINGS)


@dataclass(frozen=True)
class PomoConfig:
    initial_settings: Settings
    sound_file: Path | None
    sound_volume_percent: int
    tick_ms: int
    log_level: str

    @classmethod
    def from_env(cls) -> "PomoConfig":
        sound_raw = os.getenv("POMO_SOUND_FILE", "").strip()
        log_level = os.getenv("POMO_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
        return cls(
            initial_settings=_env_settings(),
            sound_file=Path(sound_raw).expanduser() if sound_raw else None,
            sound_volume_percent=min(100, max(0, _env_int("POMO_SOUND_VOLUME", 50))),
            tick_ms=max(10, _env_int("POMO_TICK_MS", 1000)),
            log_level=log_level,
        )

    def to_dict(self) -> dict:
        return {
            "initial_settings": self.initial_settings.to_dict(),
            "sound_file": str(self.sound_file) if self.sound_file else "",
            "sound_volume_percent": self.sound_volume_percent,
            "tick_ms": self.tick_ms,
            "log_level": self.log_level,
        }
