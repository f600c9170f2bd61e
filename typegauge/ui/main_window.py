from __future__ import annotations

import html
import logging
from typing import Optional

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from typegauge.core.catalog import DEFAULT_TIME_LIMIT, TypingTest, TypingTestCatalog, custom_test
from typegauge.core.history import ResultHistory
from typegauge.core.policy import BackspaceMode
from typegauge.core.scoring import TestResults, performance_insights
from typegauge.core.session import TypingSession
from typegauge.core.settings import SettingsStore
from typegauge.ui.colors import PassageColors, timer_color
from typegauge.ui.models import WordStatus, build_word_views, needs_new_session

logger = logging.getLogger(__name__)

_QT_KEY_NAMES = {
    Qt.Key.Key_Space: " ",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Delete: "Delete",
    Qt.Key.Key_Tab: "Tab",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Home: "Home",
    Qt.Key.Key_End: "End",
    Qt.Key.Key_PageUp: "PageUp",
    Qt.Key.Key_PageDown: "PageDown",
    Qt.Key.Key_Shift: "Shift",
    Qt.Key.Key_Control: "Control",
    Qt.Key.Key_Alt: "Alt",
    Qt.Key.Key_Meta: "Meta",
    Qt.Key.Key_CapsLock: "CapsLock",
}
_KEY_NAMES = {int(key): name for key, name in _QT_KEY_NAMES.items()}

_BACKSPACE_LABELS = {
    BackspaceMode.FULL: "Full backspace",
    BackspaceMode.WORD: "Current word only",
    BackspaceMode.DISABLED: "Backspace disabled",
}

_WORD_STYLES = {
    WordStatus.CORRECT: f"color:{PassageColors.CORRECT}; background:{PassageColors.CORRECT_BG};",
    WordStatus.WRONG: f"color:{PassageColors.WRONG}; background:{PassageColors.WRONG_BG};",
    WordStatus.CURRENT: f"color:{PassageColors.CURRENT}; background:{PassageColors.CURRENT_BG}; font-weight:600;",
    WordStatus.PENDING: f"color:{PassageColors.PENDING};",
    WordStatus.PLAIN: f"color:{PassageColors.TEXT_PRIMARY};",
}


def format_time(seconds: int) -> str:
    if seconds >= 60:
        m, s = divmod(seconds, 60)
        return f"{m}:{s:02d}"
    return f"{seconds}s"


def _insights_html(results: TestResults) -> str:
    insights = performance_insights(results)
    sections = []
    for title, lines in (
        ("Speed analysis", insights.analysis),
        ("Recommendations", insights.recommendations),
    ):
        items = "".join(f"<li>{html.escape(line)}</li>" for line in lines)
        sections.append(f"<b>{title}</b><ul>{items}</ul>")
    return "<br>" + "".join(sections)


class MainWindow(QMainWindow):
    """Single-screen typing test: pick a passage, type it, read the results.

    Key presses reach the session through an event filter on the input line
    so rejected keys (the word delimiter, blocked deletions and shortcuts)
    never touch the field. A one-second timer drives the countdown.
    """

    def __init__(
        self,
        catalog: TypingTestCatalog,
        settings_store: SettingsStore,
        history: ResultHistory,
    ) -> None:
        super().__init__()
        self._catalog = catalog
        self._settings_store = settings_store
        self._history = history
        self._session: Optional[TypingSession] = None
        self._test: Optional[TypingTest] = None

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(1000)
        self._tick_timer.timeout.connect(self._on_tick)

        self.setWindowTitle("TypeGauge")
        self._build_ui()
        self._populate_languages()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QWidget(self)
        root.setStyleSheet(f"background:{PassageColors.BG}; color:{PassageColors.TEXT_PRIMARY};")
        layout = QVBoxLayout(root)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(16)

        pickers = QHBoxLayout()
        self.language_combo = QComboBox()
        self.language_combo.currentIndexChanged.connect(self._on_language_changed)
        self.test_combo = QComboBox()
        self.test_combo.currentIndexChanged.connect(self._on_test_changed)
        self.backspace_combo = QComboBox()
        for mode, label in _BACKSPACE_LABELS.items():
            self.backspace_combo.addItem(label, mode)
        settings = self._settings_store.settings
        self.backspace_combo.setCurrentIndex(list(_BACKSPACE_LABELS).index(settings.backspace_mode))
        self.backspace_combo.currentIndexChanged.connect(self._on_backspace_mode_changed)
        self.highlight_check = QCheckBox("Highlight current word")
        self.highlight_check.setChecked(settings.highlight_text)
        self.highlight_check.toggled.connect(self._on_display_changed)
        self.errors_check = QCheckBox("Show errors")
        self.errors_check.setChecked(settings.show_errors)
        self.errors_check.toggled.connect(self._on_display_changed)
        for widget in (
            self.language_combo,
            self.test_combo,
            self.backspace_combo,
            self.highlight_check,
            self.errors_check,
        ):
            pickers.addWidget(widget)
        layout.addLayout(pickers)

        stats = QGridLayout()
        self.time_label = self._stat(stats, 0, "remaining")
        self.wpm_label = self._stat(stats, 1, "WPM")
        self.progress_label = self._stat(stats, 2, "Progress")
        self.wrong_label = self._stat(stats, 3, "Wrong Words")
        layout.addLayout(stats)

        self.passage_label = QLabel()
        self.passage_label.setWordWrap(True)
        self.passage_label.setTextFormat(Qt.TextFormat.RichText)
        self.passage_label.setFrameShape(QFrame.Shape.StyledPanel)
        self.passage_label.setStyleSheet(
            f"background:{PassageColors.CARD_BG}; border:1px solid {PassageColors.CARD_BORDER};"
            " border-radius:8px; padding:16px; font-size:20px;"
        )
        layout.addWidget(self.passage_label, 1)

        self.input_box = QLineEdit()
        self.input_box.setPlaceholderText("Start typing to begin the test...")
        self.input_box.setContextMenuPolicy(Qt.ContextMenuPolicy.NoContextMenu)
        self.input_box.setDragEnabled(False)
        self.input_box.setAcceptDrops(False)
        self.input_box.setStyleSheet("font-size:20px; padding:8px;")
        self.input_box.installEventFilter(self)
        self.input_box.textEdited.connect(self._on_text_edited)
        layout.addWidget(self.input_box)

        buttons = QHBoxLayout()
        self.custom_button = QPushButton("Custom text...")
        self.custom_button.clicked.connect(self._open_custom_text)
        buttons.addWidget(self.custom_button)
        self.restart_button = QPushButton("Restart")
        self.restart_button.clicked.connect(self._restart)
        self.submit_button = QPushButton("Finish")
        self.submit_button.clicked.connect(self._submit)
        buttons.addStretch(1)
        buttons.addWidget(self.restart_button)
        buttons.addWidget(self.submit_button)
        layout.addLayout(buttons)

        self.results_label = QLabel()
        self.results_label.setWordWrap(True)
        self.results_label.setVisible(False)
        layout.addWidget(self.results_label)

        self.setCentralWidget(root)

    def _stat(self, grid: QGridLayout, column: int, caption: str) -> QLabel:
        value = QLabel("0")
        value.setAlignment(Qt.AlignmentFlag.AlignCenter)
        value.setStyleSheet("font-size:24px; font-weight:700;")
        label = QLabel(caption)
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        label.setStyleSheet(f"color:{PassageColors.TEXT_MUTED};")
        grid.addWidget(value, 0, column)
        grid.addWidget(label, 1, column)
        return value

    # ------------------------------------------------------------------
    # Test selection
    # ------------------------------------------------------------------

    def _populate_languages(self) -> None:
        languages = self._catalog.languages()
        self.language_combo.blockSignals(True)
        for language in languages:
            self.language_combo.addItem(language.capitalize(), language)
        preferred = self._settings_store.settings.language
        if preferred in languages:
            self.language_combo.setCurrentIndex(languages.index(preferred))
        self.language_combo.blockSignals(False)
        self._on_language_changed()

    def _on_language_changed(self) -> None:
        language = self.language_combo.currentData()
        if language is None:
            return
        if language != self._settings_store.settings.language:
            self._settings_store.update(language=language)
        self.test_combo.blockSignals(True)
        self.test_combo.clear()
        for category, tests in self._catalog.categories(language).items():
            for test in tests:
                self.test_combo.addItem(f"{category} · {test.title} ({test.word_count} words)", test.key)
        self.test_combo.blockSignals(False)
        self._on_test_changed()

    def _on_test_changed(self) -> None:
        key = self.test_combo.currentData()
        if key is None:
            return
        self._test = self._catalog.get(key)
        self._start_session()

    def _on_backspace_mode_changed(self) -> None:
        mode = BackspaceMode(self.backspace_combo.currentData())
        self._settings_store.update(backspace_mode=mode)
        if needs_new_session(self._session, mode):
            self._start_session()

    def _on_display_changed(self) -> None:
        self._settings_store.update(
            highlight_text=self.highlight_check.isChecked(),
            show_errors=self.errors_check.isChecked(),
        )
        self._refresh()

    def _open_custom_text(self) -> None:
        text, ok = QInputDialog.getMultiLineText(self, "Custom text", "Paste or type at least 10 words:")
        if not ok:
            return
        settings = self._settings_store.settings
        try:
            test = custom_test(text, settings.effective_time_limit(DEFAULT_TIME_LIMIT), settings.language)
        except ValueError as e:
            logger.info("Custom text rejected: %s", e)
            QMessageBox.warning(self, "Custom text", str(e))
            return
        self._test = test
        self._start_session()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _start_session(self) -> None:
        if self._test is None:
            return
        self._tick_timer.stop()
        settings = self._settings_store.settings
        self._session = TypingSession(
            self._test.content,
            settings.effective_time_limit(self._test.time_limit),
            settings.backspace_mode,
        )
        self._set_input_text("")
        self.input_box.setEnabled(True)
        self.input_box.setFocus()
        self.results_label.setVisible(False)
        self._refresh()

    def _restart(self) -> None:
        if self._session is None:
            return
        self._tick_timer.stop()
        self._session = self._session.retry()
        self._set_input_text("")
        self.input_box.setEnabled(True)
        self.input_box.setFocus()
        self.results_label.setVisible(False)
        self._refresh()

    def _submit(self) -> None:
        if self._session is None or self._session.is_finished:
            return
        self._session.submit()
        self._after_event()

    def _on_tick(self) -> None:
        if self._session is None:
            return
        self._session.tick()
        self._after_event()

    def _after_event(self) -> None:
        session = self._session
        if session is None:
            return
        if session.is_running and not self._tick_timer.isActive():
            self._tick_timer.start()
        self._refresh()
        if session.is_finished:
            self._tick_timer.stop()
            self.input_box.setEnabled(False)
            self._show_results(session.results)

    def _show_results(self, results: Optional[TestResults]) -> None:
        if results is None or self._test is None:
            return
        if self._history.record(self._test.key, results):
            note = "You qualified for the leaderboard!" if results.qualifies_for_leaderboard else "Results saved."
        else:
            note = "Results for custom text are not saved to history."
        self.results_label.setText(
            f"<b>{results.net_wpm} WPM</b> (gross {results.gross_wpm}) · "
            f"accuracy {results.accuracy_percent:.2f}% · "
            f"keystroke accuracy {results.keystroke_accuracy_percent:.2f}% · "
            f"{results.correct_word_count}/{results.typed_word_count} words correct · "
            f"{results.elapsed_seconds}s<br>{html.escape(note)}"
            f"{_insights_html(results)}"
        )
        self.results_label.setVisible(True)

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if obj is self.input_box and event.type() == QEvent.Type.KeyPress:
            return self._on_key_press(event)
        return super().eventFilter(obj, event)

    def _on_key_press(self, event: QKeyEvent) -> bool:
        """Return True to swallow the key press."""
        if self._session is None:
            return True
        name = _KEY_NAMES.get(int(event.key()), event.text())
        if not name:
            return False
        ctrl = bool(
            event.modifiers()
            & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier)
        )
        allowed = self._session.on_key_event(name, ctrl=ctrl)
        if name == " ":
            self._set_input_text(self._session.current_buffer if self._session.is_finished else "")
        self._after_event()
        return not allowed

    def _on_text_edited(self, value: str) -> None:
        if self._session is None:
            return
        if not self._session.on_buffer_change(value):
            self._set_input_text(self._session.current_buffer)
        self._after_event()

    def _set_input_text(self, text: str) -> None:
        self.input_box.blockSignals(True)
        self.input_box.setText(text)
        self.input_box.blockSignals(False)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        session = self._session
        if session is None:
            return
        settings = self._settings_store.settings
        words = build_word_views(session, settings.highlight_text, settings.show_errors)
        self.passage_label.setText(
            " ".join(
                f'<span style="{_WORD_STYLES[view.status]}">{html.escape(view.text)}</span>'
                for view in words
            )
        )
        remaining = session.remaining_seconds()
        self.time_label.setText(format_time(remaining))
        self.time_label.setStyleSheet(
            f"font-size:24px; font-weight:700; color:{timer_color(remaining, session.time_limit_seconds)};"
        )
        self.wpm_label.setText(str(session.current_wpm()))
        self.progress_label.setText(f"{int(session.current_progress_percent())}%")
        self.wrong_label.setText(str(len(session.wrong_word_indices)))
        # backspace mode can't change under a running attempt
        self.backspace_combo.setEnabled(not session.is_running)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._tick_timer.stop()
        super().closeEvent(event)
