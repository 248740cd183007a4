from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

from PySide6 import QtCore, QtGui, QtWidgets
try:
    from PySide6 import QtMultimedia
except Exception:
    QtMultimedia = None

from pomo_app.config import PomoConfig
from pomo_app.controller import PomodoroController
from pomo_app.core.events import TimerEvent, TimerSnapshot
from pomo_app.core.phases import PHASE_FOCUS, PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASES, RUN_RUNNING
from pomo_app.core.settings import BOOL_FIELDS, NUMERIC_FIELDS, Settings, coerce_settings
from pomo_app.services.daily_summary import day_label, today_progress
from pomo_app.services.ticker import Ticker
from pomo_app.ui.renderer import Renderer


class QtTicker(Ticker):
    def __init__(self, interval_ms: int = 1000, parent: QtCore.QObject | None = None) -> None:
        self._timer = QtCore.QTimer(parent)
        self._timer.setInterval(max(1, int(interval_ms)))
        self._timer.timeout.connect(self._fire)
        self._callback: Callable[[], None] | None = None

    def start(self, callback: Callable[[], None]) -> None:
        self._timer.stop()
        self._callback = callback
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    def _fire(self) -> None:
        callback = self._callback
        if callback is not None:
            callback()


class CompletionSound:
    def __init__(self, sound_file: Path | None, volume_percent: int = 50, parent: QtCore.QObject | None = None) -> None:
        self._player = None
        self._audio = None
        if sound_file is None or not sound_file.exists() or QtMultimedia is None:
            return
        try:
            audio = QtMultimedia.QAudioOutput(parent)
            audio.setVolume(max(0, min(100, int(volume_percent))) / 100.0)
            player = QtMultimedia.QMediaPlayer(parent)
            player.setAudioOutput(audio)
            player.setSource(QtCore.QUrl.fromLocalFile(str(sound_file)))
            self._audio = audio
            self._player = player
        except Exception:
            self._player = None
            self._audio = None

    def play(self, _phase: str) -> None:
        if self._player is not None:
            self._player.setPosition(0)
            self._player.play()
            return
        QtWidgets.QApplication.beep()


class PomodoroShell:
    def __init__(self, config: PomoConfig) -> None:
        self._app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
        self._app.setApplicationName("Pomodoro Timer")
        self.config = config
        self.ticker = QtTicker(config.tick_ms, parent=self._app)
        self.sound = CompletionSound(config.sound_file, config.sound_volume_percent, parent=self._app)
        self._win: _PomodoroWindow | None = None

    def bind(self, controller: PomodoroController) -> None:
        self._win = _PomodoroWindow(controller)
        controller.subscribe(self._win.on_timer_event)
        controller.subscribe_history(self._win.refresh)
        self._win.refresh()

    def run(self) -> int:
        if self._win is None:
            raise RuntimeError("bind() a controller before run()")
        self._win.show()
        self._win.raise_()
        self._win.activateWindow()
        return int(self._app.exec())


class _PomodoroWindow(QtWidgets.QWidget):
    def __init__(self, controller: PomodoroController) -> None:
        super().__init__()
        self._controller = controller
        self._renderer = Renderer()
        self._history_dialog: _HistoryDialog | None = None

        self.setWindowTitle("Pomodoro Timer")
        self.setMinimumWidth(380)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setSpacing(14)

        title = QtWidgets.QLabel("Pomodoro Timer")
        title_font = title.font()
        title_font.setPointSize(20)
        title_font.setBold(True)
        title.setFont(title_font)
        title.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(title)

        self._badge = QtWidgets.QLabel()
        self._badge.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(self._badge, alignment=QtCore.Qt.AlignCenter)

        self._time_label = QtWidgets.QLabel()
        time_font = QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont)
        time_font.setPointSize(44)
        time_font.setBold(True)
        self._time_label.setFont(time_font)
        self._time_label.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(self._time_label)

        self._progress = QtWidgets.QProgressBar()
        self._progress.setRange(0, 100)
        self._progress.setTextVisible(False)
        layout.addWidget(self._progress)

        controls = QtWidgets.QHBoxLayout()
        self._primary_btn = QtWidgets.QPushButton()
        self._primary_btn.clicked.connect(self._emit_toggle)
        self._reset_btn = QtWidgets.QPushButton("Reset")
        self._reset_btn.clicked.connect(self._emit_reset)
        controls.addWidget(self._primary_btn, stretch=2)
        controls.addWidget(self._reset_btn, stretch=1)
        layout.addLayout(controls)

        stats = QtWidgets.QHBoxLayout()
        self._focus_count_label = QtWidgets.QLabel()
        self._total_label = QtWidgets.QLabel()
        for label in (self._focus_count_label, self._total_label):
            label.setAlignment(QtCore.Qt.AlignCenter)
            stats.addWidget(label)
        layout.addLayout(stats)

        phases = QtWidgets.QHBoxLayout()
        self._phase_buttons: dict[str, QtWidgets.QPushButton] = {}
        for phase in PHASES:
            btn = QtWidgets.QPushButton(self._renderer.history_label(phase))
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked=False, p=phase: self._emit_select_phase(p))
            phases.addWidget(btn)
            self._phase_buttons[phase] = btn
        layout.addLayout(phases)

        bottom = QtWidgets.QHBoxLayout()
        settings_btn = QtWidgets.QPushButton("Settings")
        settings_btn.setFlat(True)
        settings_btn.clicked.connect(self._open_settings)
        history_btn = QtWidgets.QPushButton("History")
        history_btn.setFlat(True)
        history_btn.clicked.connect(self._open_history)
        bottom.addStretch(1)
        bottom.addWidget(settings_btn)
        bottom.addWidget(history_btn)
        bottom.addStretch(1)
        layout.addLayout(bottom)

    # -------- rendering ----------
    def render(self, snapshot: TimerSnapshot) -> None:
        bg, fg = self._renderer.phase_colors(snapshot.phase)
        self._badge.setText(self._renderer.phase_label(snapshot.phase))
        self._badge.setStyleSheet(
            f"background:{bg}; color:{fg}; border-radius:9px; padding:3px 12px; font-weight:600;"
        )
        self._time_label.setText(self._renderer.format_time(snapshot.seconds_remaining))
        self._progress.setValue(self._renderer.progress_percent(snapshot))
        self._progress.setStyleSheet(f"QProgressBar::chunk {{ background:{bg}; }}")
        self._primary_btn.setText(self._renderer.primary_action_label(snapshot))
        self._focus_count_label.setText(f"{snapshot.completed_focus_count}\nFocus Sessions")
        self._total_label.setText(f"{len(self._controller.session_log)}\nTotal Sessions")

        running = snapshot.run_state == RUN_RUNNING
        for phase, btn in self._phase_buttons.items():
            btn.setChecked(phase == snapshot.phase)
            btn.setEnabled(not running)
        self.setWindowTitle(self._renderer.window_title(snapshot))

    def refresh(self) -> None:
        self.render(self._controller.snapshot())
        if self._history_dialog is not None and self._history_dialog.isVisible():
            self._history_dialog.reload()

    def on_timer_event(self, event: TimerEvent) -> None:
        self.render(event.snapshot)
        if event.event_type == "pomo_complete" and self._history_dialog is not None:
            if self._history_dialog.isVisible():
                self._history_dialog.reload()

    # -------- intents ----------
    def _emit_toggle(self) -> None:
        self._controller.toggle()

    def _emit_reset(self) -> None:
        self._controller.reset()

    def _emit_select_phase(self, phase: str) -> None:
        if self._controller.select_phase(phase) is None:
            # rejected while running: restore the checked state
            self.render(self._controller.snapshot())

    def _open_settings(self) -> None:
        dialog = _SettingsDialog(self._controller, parent=self)
        dialog.exec()
        self.refresh()

    def _open_history(self) -> None:
        if self._history_dialog is None:
            self._history_dialog = _HistoryDialog(self._controller, self._renderer, parent=self)
        self._history_dialog.reload()
        self._history_dialog.show()
        self._history_dialog.raise_()

    def keyPressEvent(self, e: QtGui.QKeyEvent) -> None:
        if e.key() == QtCore.Qt.Key_Space:
            self._emit_toggle()
            return
        if e.key() == QtCore.Qt.Key_R:
            self._emit_reset()
            return
        shortcuts = {QtCore.Qt.Key_1: PHASE_FOCUS, QtCore.Qt.Key_2: PHASE_SHORT_BREAK, QtCore.Qt.Key_3: PHASE_LONG_BREAK}
        if e.key() in shortcuts:
            self._emit_select_phase(shortcuts[e.key()])
            return
        super().keyPressEvent(e)


_FIELD_LABELS = {
    "focus_minutes": "Focus Time (minutes)",
    "short_break_minutes": "Short Break (minutes)",
    "long_break_minutes": "Long Break (minutes)",
    "long_break_interval": "Long Break Interval (focus sessions)",
    "auto_start_breaks": "Auto-start breaks",
    "auto_start_focus": "Auto-start focus",
}


class _SettingsDialog(QtWidgets.QDialog):
    def __init__(self, controller: PomodoroController, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self.setWindowTitle("Settings")

        layout = QtWidgets.QVBoxLayout(self)

        durations = QtWidgets.QGroupBox("Timer Duration")
        form = QtWidgets.QFormLayout(durations)
        self._spins: dict[str, QtWidgets.QSpinBox] = {}
        for name, (_fallback, low, high) in NUMERIC_FIELDS.items():
            spin = QtWidgets.QSpinBox()
            spin.setRange(low, high)
            spin.valueChanged.connect(self._apply)
            form.addRow(_FIELD_LABELS[name], spin)
            self._spins[name] = spin
        layout.addWidget(durations)

        auto = QtWidgets.QGroupBox("Auto-start")
        auto_layout = QtWidgets.QVBoxLayout(auto)
        self._checks: dict[str, QtWidgets.QCheckBox] = {}
        for name in BOOL_FIELDS:
            check = QtWidgets.QCheckBox(_FIELD_LABELS[name])
            check.toggled.connect(self._apply)
            auto_layout.addWidget(check)
            self._checks[name] = check
        layout.addWidget(auto)

        buttons = QtWidgets.QHBoxLayout()
        defaults_btn = QtWidgets.QPushButton("Reset to Defaults")
        defaults_btn.clicked.connect(self._reset_defaults)
        close_btn = QtWidgets.QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        buttons.addWidget(defaults_btn)
        buttons.addStretch(1)
        buttons.addWidget(close_btn)
        layout.addLayout(buttons)

        self._load(controller.settings())

    def _load(self, settings: Settings) -> None:
        values = settings.to_dict()
        for name, spin in self._spins.items():
            spin.blockSignals(True)
            spin.setValue(int(values[name]))
            spin.blockSignals(False)
        for name, check in self._checks.items():
            check.blockSignals(True)
            check.setChecked(bool(values[name]))
            check.blockSignals(False)

    def _apply(self, *_args) -> None:
        raw: dict[str, object] = {name: spin.value() for name, spin in self._spins.items()}
        raw.update({name: check.isChecked() for name, check in self._checks.items()})
        self._controller.update_settings(coerce_settings(raw, self._controller.settings()))

    def _reset_defaults(self) -> None:
        self._load(self._controller.reset_settings_to_defaults())


class _HistoryDialog(QtWidgets.QDialog):
    def __init__(
        self,
        controller: PomodoroController,
        renderer: Renderer,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._renderer = renderer
        self.setWindowTitle("Session History")
        self.resize(380, 460)

        layout = QtWidgets.QVBoxLayout(self)
        self._today_label = QtWidgets.QLabel()
        self._today_label.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(self._today_label)

        self._empty_label = QtWidgets.QLabel(
            "No sessions yet\nComplete your first Pomodoro session to see it here!"
        )
        self._empty_label.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(self._empty_label)

        self._tree = QtWidgets.QTreeWidget()
        self._tree.setHeaderLabels(["Session", "Duration", "Completed"])
        self._tree.setRootIsDecorated(False)
        layout.addWidget(self._tree, stretch=1)

        buttons = QtWidgets.QHBoxLayout()
        self._clear_btn = QtWidgets.QPushButton("Clear history")
        self._clear_btn.clicked.connect(self._clear)
        close_btn = QtWidgets.QPushButton("Close")
        close_btn.clicked.connect(self.hide)
        buttons.addWidget(self._clear_btn)
        buttons.addStretch(1)
        buttons.addWidget(close_btn)
        layout.addLayout(buttons)

    def reload(self) -> None:
        log = self._controller.session_log
        today = self._controller.today()
        progress = today_progress(log)
        if progress is None:
            self._today_label.hide()
        else:
            self._today_label.setText(
                f"Today's Progress: {progress['focus_session_count']} focus sessions, "
                f"{progress['total_minutes']} minutes"
            )
            self._today_label.show()

        has_sessions = len(log) > 0
        self._empty_label.setVisible(not has_sessions)
        self._tree.setVisible(has_sessions)
        self._clear_btn.setEnabled(has_sessions)

        self._tree.clear()
        for day, records in self._controller.grouped_sessions():
            header = QtWidgets.QTreeWidgetItem([day_label(day, today), "", ""])
            header_font = header.font(0)
            header_font.setBold(True)
            header.setFont(0, header_font)
            self._tree.addTopLevelItem(header)
            for record in records:
                item = QtWidgets.QTreeWidgetItem(
                    [
                        self._renderer.history_label(record.phase),
                        f"{record.duration_minutes} min",
                        self._renderer.clock_time(record.completed_at),
                    ]
                )
                bg, _fg = self._renderer.phase_colors(record.phase)
                item.setForeground(0, QtGui.QBrush(QtGui.QColor(bg)))
                header.addChild(item)
            header.setExpanded(True)

    def _clear(self) -> None:
        self._controller.clear_session_history()
        self.reload()
