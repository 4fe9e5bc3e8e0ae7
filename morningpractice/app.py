import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from . import __app_name__, __version__
from .config import PracticeConfig, load_config
from .logging_utils import setup_logging
from .qss import QSS
from .session import build_session
from .ui.practice_window import PracticeWindow
from .ui.qt_scheduler import QtScheduler


def run(config: PracticeConfig | None = None, *, muted: bool = False, audio: bool = True, speech: bool = True) -> int:
    # Ensure logging is configured when launching GUI directly
    log_mode_env = os.environ.get("MORNINGPRACTICE_LOG_MODE")
    if not logging.getLogger().handlers:
        setup_logging(level="WARNING", add_console=True, log_mode=log_mode_env)
    log = logging.getLogger(__name__)
    log.info("Starting %s %s", __app_name__, __version__)

    if config is None:
        config = load_config()

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(__app_name__)
    app.setStyleSheet(QSS)

    scheduler = QtScheduler()
    session = build_session(config, scheduler, audio=audio, speech=speech, muted=muted)
    win = PracticeWindow(session)
    app.aboutToQuit.connect(lambda: log.info("aboutToQuit"))
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
