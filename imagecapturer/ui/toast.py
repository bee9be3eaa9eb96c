"""
Capture status toast - floating notification for capture failures.

Usage:
    from imagecapturer.ui.toast import CaptureToast

    self._toast = CaptureToast(parent=self)
    self._toast.show_outcome(outcome)            # IoFailure / MemoryFailure
    self._toast.show_message("Capture failed", preset="error")
"""

import logging

from PyQt6.QtWidgets import QLabel, QGraphicsOpacityEffect
from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QAbstractAnimation

from imagecapturer.core.outcomes import IoFailure, MemoryFailure

logger = logging.getLogger("CaptureToast")


class CaptureToast(QLabel):
    COLORS = {
        'info': '#5dade2',
        'warning': '#f39c12',
        'error': '#e74c3c',
    }

    MESSAGES = {
        'setup_failed': "Couldn't prepare image storage",
        'io': "Couldn't read the captured image",
        'memory': "Not enough memory to load the captured image",
        'rejected': "Image capture was cancelled or failed",
    }

    def __init__(self, parent, duration=2500, y_offset=60):
        super().__init__("", parent)
        self._duration = duration
        self._y_offset = y_offset
        self._color = self.COLORS['info']

        self.opacity_effect = QGraphicsOpacityEffect(self)
        self.setGraphicsEffect(self.opacity_effect)
        self.anim = QPropertyAnimation(self.opacity_effect, b"opacity")

        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.timeout.connect(self.fade_out)

        self._apply_style()
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.hide()

    def _apply_style(self):
        c = self._color
        self.setStyleSheet(f"""
            background: rgba(40, 40, 40, 230);
            color: {c};
            border: 1px solid {c};
            border-radius: 15px;
            padding: 8px 20px;
            font-weight: bold;
        """)

    def show_outcome(self, outcome):
        """Show the message matching a failed decode outcome."""
        if isinstance(outcome, MemoryFailure):
            self.show_message(self.MESSAGES['memory'], preset='warning')
        elif isinstance(outcome, IoFailure):
            self.show_message(self.MESSAGES['io'], preset='error')

    def show_message(self, text, preset="info", duration=None):
        self._hide_timer.stop()
        if self.anim.state() == QAbstractAnimation.State.Running:
            self.anim.stop()
        # A pending fade-out must not hide the new message
        try:
            self.anim.finished.disconnect(self.hide)
        except TypeError:
            pass

        self.setText(text)
        self._color = self.COLORS.get(preset, self.COLORS['info'])
        self._apply_style()
        self.adjustSize()

        parent = self.parentWidget()
        if parent:
            self.move((parent.width() - self.width()) // 2, self._y_offset)
        self.show()
        self.raise_()
        logger.debug(f"Toast shown: {text}")

        self.opacity_effect.setOpacity(0.0)
        self.anim.setDuration(300)
        self.anim.setStartValue(0.0)
        self.anim.setEndValue(1.0)
        self.anim.start()

        self._hide_timer.start(duration or self._duration)

    def fade_out(self):
        if self.anim.state() == QAbstractAnimation.State.Running:
            self.anim.stop()
        self.anim.setDuration(500)
        self.anim.setStartValue(1.0)
        self.anim.setEndValue(0.0)
        self.anim.finished.connect(self.hide)
        self.anim.start()
