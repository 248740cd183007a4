from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

_TRUTHY = {"1", "true", "yes", "on"}

# field -> (hardcoded fallback, min, max) as offered by the settings panel
NUMERIC_FIELDS: dict[str, tuple[int, int, int]] = {
    "focus_minutes": (25, 1, 60),
    "short_break_minutes": (5, 1, 30),
    "long_break_minutes": (15, 1, 60),
    "long_break_interval": (4, 2, 10),
}
BOOL_FIELDS = ("auto_start_breaks", "auto_start_focus")


@dataclass(frozen=True)
class Settings:
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_interval: int = 4
    auto_start_breaks: bool = False
    auto_start_focus: bool = False

    def __post_init__(self) -> None:
        for name in ("focus_minutes", "short_break_minutes", "long_break_minutes"):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if int(self.long_break_interval) < 2:
            raise ValueError(f"long_break_interval must be >= 2, got {self.long_break_interval!r}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        return coerce_settings(data, DEFAULT_SETTINGS)


DEFAULT_SETTINGS = Settings()


class SettingsStore:
    """Holds the user-tunable durations. Mutated only by whole-object replacement."""

    def __init__(self, initial: Settings | None = None) -> None:
        self._settings = initial or DEFAULT_SETTINGS

    def get(self) -> Settings:
        return self._settings

    def replace(self, new_settings: Settings) -> None:
        self._settings = new_settings

    def reset(self) -> Settings:
        self._settings = DEFAULT_SETTINGS
        return self._settings


def _coerce_int(raw: Any, fallback: int, low: int, high: int) -> int:
    if isinstance(raw, bool):
        return fallback
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return fallback
    if value <= 0:
        # mirrors `parseInt(x) || default`: zero counts as missing input
        return fallback
    return min(high, max(low, value))


def _coerce_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in _TRUTHY


def coerce_settings(raw: dict[str, Any], previous: Settings) -> Settings:
    """Build a valid Settings from loosely typed panel/env input.

    Keys absent from ``raw`` keep their value from ``previous``. Non-numeric
    input falls back to the field's hardcoded default; numbers are clamped to
    the panel range.
    """
    if not isinstance(raw, dict):
        return previous
    changes: dict[str, Any] = {}
    for name, (fallback, low, high) in NUMERIC_FIELDS.items():
        if name in raw:
            changes[name] = _coerce_int(raw[name], fallback, low, high)
    for name in BOOL_FIELDS:
        if name in raw:
            changes[name] = _coerce_bool(raw[name])
    return replace(previous, **changes)
