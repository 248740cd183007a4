from pathlib import Path

from pomo_app.config import PomoConfig
from pomo_app.core.settings import DEFAULT_SETTINGS

_ENV_NAMES = [
    "POMO_FOCUS_MINUTES",
    "POMO_SHORT_BREAK_MINUTES",
    "POMO_LONG_BREAK_MINUTES",
    "POMO_LONG_BREAK_INTERVAL",
    "POMO_AUTO_START_BREAKS",
    "POMO_AUTO_START_FOCUS",
    "POMO_SOUND_FILE",
    "POMO_SOUND_VOLUME",
    "POMO_TICK_MS",
    "POMO_LOG_LEVEL",
]


def _clear_env(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults(monkeypatch) -> None:
    _clear_env(monkeypatch)
    cfg = PomoConfig.from_env()
    assert cfg.initial_settings == DEFAULT_SETTINGS
    assert cfg.sound_file is None
    assert cfg.sound_volume_percent == 50
    assert cfg.tick_ms == 1000
    assert cfg.log_level == "WARNING"


def test_config_reads_and_coerces_env(monkeypatch, tmp_path) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("POMO_FOCUS_MINUTES", "50")
    monkeypatch.setenv("POMO_SHORT_BREAK_MINUTES", "nope")
    monkeypatch.setenv("POMO_LONG_BREAK_INTERVAL", "1")
    monkeypatch.setenv("POMO_AUTO_START_BREAKS", "true")
    monkeypatch.setenv("POMO_SOUND_FILE", str(tmp_path / "ding.wav"))
    monkeypatch.setenv("POMO_SOUND_VOLUME", "250")
    monkeypatch.setenv("POMO_TICK_MS", "abc")
    monkeypatch.setenv("POMO_LOG_LEVEL", "debug")

    cfg = PomoConfig.from_env()
    assert cfg.initial_settings.focus_minutes == 50
    assert cfg.initial_settings.short_break_minutes == 5
    assert cfg.initial_settings.long_break_interval == 2
    assert cfg.initial_settings.auto_start_breaks is True
    assert cfg.initial_settings.auto_start_focus is False
    assert cfg.sound_file == Path(tmp_path / "ding.wav")
    assert cfg.sound_volume_percent == 100
    assert cfg.tick_ms == 1000
    assert cfg.log_level == "DEBUG"
    assert cfg.to_dict()["initial_settings"]["focus_minutes"] == 50
