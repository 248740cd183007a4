import pytest

from pomo_app.core.settings import DEFAULT_SETTINGS, Settings, SettingsStore, coerce_settings


def test_store_defaults_replace_and_reset() -> None:
    store = SettingsStore()
    assert store.get() == DEFAULT_SETTINGS
    assert store.get().to_dict() == {
        "focus_minutes": 25,
        "short_break_minutes": 5,
        "long_break_minutes": 15,
        "long_break_interval": 4,
        "auto_start_breaks": False,
        "auto_start_focus": False,
    }

    custom = Settings(focus_minutes=50, short_break_minutes=10, long_break_minutes=30, long_break_interval=3)
    store.replace(custom)
    assert store.get() is custom

    restored = store.reset()
    assert restored == DEFAULT_SETTINGS
    assert store.get() == DEFAULT_SETTINGS


def test_settings_reject_values_outside_invariants() -> None:
    with pytest.raises(ValueError):
        Settings(focus_minutes=0)
    with pytest.raises(ValueError):
        Settings(short_break_minutes=-1)
    with pytest.raises(ValueError):
        Settings(long_break_interval=1)


def test_coerce_settings_falls_back_to_hardcoded_defaults_for_bad_input() -> None:
    previous = Settings(focus_minutes=40, short_break_minutes=8, long_break_minutes=20, long_break_interval=6)
    coerced = coerce_settings(
        {"focus_minutes": "abc", "short_break_minutes": "", "long_break_minutes": 0, "long_break_interval": None},
        previous,
    )
    assert coerced.focus_minutes == 25
    assert coerced.short_break_minutes == 5
    assert coerced.long_break_minutes == 15
    assert coerced.long_break_interval == 4


def test_coerce_settings_clamps_and_keeps_missing_fields() -> None:
    previous = Settings(focus_minutes=40, auto_start_focus=True)
    coerced = coerce_settings({"short_break_minutes": "45", "long_break_interval": 1, "long_break_minutes": 99}, previous)
    assert coerced.short_break_minutes == 30
    assert coerced.long_break_interval == 2
    assert coerced.long_break_minutes == 60
    assert coerced.focus_minutes == 40
    assert coerced.auto_start_focus is True


def test_coerce_settings_parses_boolean_strings() -> None:
    coerced = coerce_settings({"auto_start_breaks": "yes", "auto_start_focus": "off"}, DEFAULT_SETTINGS)
    assert coerced.auto_start_breaks is True
    assert coerced.auto_start_focus is False


def test_settings_round_trip_through_dict() -> None:
    settings = Settings(focus_minutes=30, long_break_interval=5, auto_start_breaks=True)
    assert Settings.from_dict(settings.to_dict()) == settings
