from __future__ import annotations

from pomo_app.config import PomoConfig
from pomo_app.controller import PomodoroController
from pomo_app.logging_setup import configure_logging


def main() -> int:
    config = PomoConfig.from_env()
    configure_logging(config.log_level)

    from pomo_app.ui.shell_qt import PomodoroShell

    shell = PomodoroShell(config)
    controller = PomodoroController.from_config(config, ticker=shell.ticker, play_sound=shell.sound.play)
    shell.bind(controller)
    return shell.run()


if __name__ == "__main__":
    raise SystemExit(main())
