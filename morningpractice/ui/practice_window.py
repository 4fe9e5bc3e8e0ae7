"""
Practice window.

Renders the session's :class:`PracticeView` and forwards the five user
actions (start, go, listen again, reset, mute) to the session. Controls
whose action would be ignored are disabled or hidden.
"""

import logging

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget,
)

from .. import __app_name__
from ..session import PracticeSession, PracticeView, SessionEvent, SessionEventType, Stage, build_view


class PracticeWindow(QWidget):
    """Single-screen practice UI bound to one :class:`PracticeSession`."""

    # Emitted after every repaint from session state
    view_changed = pyqtSignal(object)  # PracticeView

    def __init__(self, session: PracticeSession, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.session = session
        self.view: PracticeView = build_view(session.state, session.config)

        self.setObjectName("PracticeWindow")
        self.setWindowTitle(__app_name__)
        self.setMinimumSize(420, 560)

        self._init_ui()
        session.event_emitter.subscribe(SessionEventType.STATE_CHANGED, self._on_state_changed)
        self.refresh()

    def _init_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(16, 16, 16, 16)

        # === HEADER ===
        header = QFrame()
        header.setObjectName("Header")
        header_layout = QHBoxLayout(header)
        titles = QVBoxLayout()
        title = QLabel("Morning Practice")
        title.setObjectName("AppTitle")
        subtitle = QLabel("Start your day with mindful movement")
        subtitle.setObjectName("AppSubtitle")
        titles.addWidget(title)
        titles.addWidget(subtitle)
        header_layout.addLayout(titles, 1)
        self.btn_mute = QPushButton("Mute")
        self.btn_mute.setObjectName("Mute")
        self.btn_mute.clicked.connect(self.session.toggle_mute)
        header_layout.addWidget(self.btn_mute, 0, Qt.AlignmentFlag.AlignTop)
        layout.addWidget(header)

        # === BODY ===
        self.label_clock = QLabel()
        self.label_clock.setObjectName("Clock")
        self.label_clock.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.label_clock, 0, Qt.AlignmentFlag.AlignHCenter)

        self.label_progress = QLabel()
        self.label_progress.setObjectName("Progress")
        layout.addWidget(self.label_progress, 0, Qt.AlignmentFlag.AlignHCenter)

        self.label_title = QLabel()
        self.label_title.setObjectName("StageTitle")
        self.label_title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.label_title.setWordWrap(True)
        layout.addWidget(self.label_title)

        self.label_body = QLabel()
        self.label_body.setObjectName("Body")
        self.label_body.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.label_body.setWordWrap(True)
        layout.addWidget(self.label_body)

        layout.addStretch(1)

        # === CONTROLS ===
        controls = QHBoxLayout()
        controls.addStretch(1)
        self.btn_start = QPushButton("Start Practice")
        self.btn_start.setObjectName("Primary")
        self.btn_start.clicked.connect(self.session.start_practice)
        controls.addWidget(self.btn_start)

        self.btn_go = QPushButton("Go")
        self.btn_go.setObjectName("Go")
        self.btn_go.clicked.connect(self.session.start_exercise)
        controls.addWidget(self.btn_go)

        self.btn_listen = QPushButton("Listen again")
        self.btn_listen.setToolTip("Listen to instructions")
        self.btn_listen.clicked.connect(self.session.repeat_instructions)
        controls.addWidget(self.btn_listen)
        controls.addStretch(1)
        layout.addLayout(controls)

        self.btn_reset = QPushButton("Reset")
        self.btn_reset.clicked.connect(self.session.reset_practice)
        layout.addWidget(self.btn_reset, 0, Qt.AlignmentFlag.AlignHCenter)

    def _on_state_changed(self, _event: SessionEvent):
        self.refresh()

    def refresh(self):
        """Repaint every widget from the current session state."""
        view = build_view(self.session.state, self.session.config)
        self.view = view

        self.label_clock.setText(view.clock)
        self.label_clock.setVisible(bool(view.clock))
        self.label_progress.setText(view.progress)
        self.label_progress.setVisible(bool(view.progress))
        self.label_title.setText(view.title)
        self.label_body.setText(view.body)

        self.btn_start.setVisible(view.stage is Stage.START)
        self.btn_start.setEnabled(view.can_start)
        in_exercise = view.stage is Stage.EXERCISE
        self.btn_go.setVisible(in_exercise and view.can_go)
        self.btn_go.setEnabled(view.can_go)
        self.btn_listen.setVisible(in_exercise and view.can_go)
        self.btn_listen.setEnabled(view.can_listen)
        self.btn_reset.setVisible(view.can_reset)
        self.btn_mute.setText(view.mute_label)

        self.view_changed.emit(view)

    def closeEvent(self, event):
        self.session.event_emitter.unsubscribe(SessionEventType.STATE_CHANGED, self._on_state_changed)
        self.session.shutdown()
        super().closeEvent(event)
