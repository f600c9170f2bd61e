"""Application entry point and setup for the TypeGauge typing test."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from typegauge.core.catalog import TypingTestCatalog
from typegauge.core.history import ResultHistory
from typegauge.core.settings import SettingsStore
from typegauge.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load tests, settings and history, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("TypeGauge")
    app.setApplicationDisplayName("TypeGauge")

    catalog = TypingTestCatalog()
    settings_store = SettingsStore()
    history = ResultHistory()
    logging.info("Loaded %d typing tests", len(catalog.all()))

    window = MainWindow(catalog=catalog, settings_store=settings_store, history=history)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(int(geometry.width() * 0.7), int(geometry.height() * 0.7))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
