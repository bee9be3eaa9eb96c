"""
Demo window: one button that captures an image through the chooser flow and
shows it, surviving a restart in the middle of a capture.
"""

import os
import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import QLabel, QMainWindow, QProgressBar, QPushButton, QVBoxLayout, QWidget

from imagecapturer.apps.chooser_flow import ChooserFlow
from imagecapturer.core.capture_session import CaptureSession, MatchResult, shared_decode_pool
from imagecapturer.core.context import ForegroundContext
from imagecapturer.core.decode_providers import DownsamplingDecodeProvider
from imagecapturer.core.errors import StorageUnavailable
from imagecapturer.core.outcomes import Success
from imagecapturer.core.scratch_files import ScratchFileManager
from imagecapturer.core.session_state import SessionState
from imagecapturer.core.version import VERSION_STRING
from imagecapturer.ui.toast import CaptureToast

CAPTURE_REQUEST_ID = 1


def recover_orphaned_request(session, context, callback, provider=None):
    """
    A restored pending request has no chooser left to answer it. Decode what the
    camera already wrote into the scratch file, otherwise give the request up.
    Returns the MatchResult, or None when nothing was pending.
    """
    correlation_id = session.pending_correlation_id
    if correlation_id is None:
        return None
    path = session.scratch_path
    if path is not None and os.path.isfile(path) and os.path.getsize(path) > 0:
        return session.match(context, correlation_id, True, None, callback=callback, provider=provider)
    return session.match(context, correlation_id, False)


class CaptureWindow(QMainWindow):
    def __init__(self, config):
        super().__init__()
        self.logger = logging.getLogger("CaptureWindow")
        self.config = config
        self.context = ForegroundContext("gui")
        self.image = None
        # Written on the GUI thread, read by the decode provider on a worker thread
        self.smallest_view_dimension = 0

        self.setWindowTitle(VERSION_STRING)
        self.resize(640, 720)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.image_view = QLabel(central)
        self.image_view.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.image_view.setMinimumSize(200, 200)
        layout.addWidget(self.image_view, 1)

        self.progress_bar = QProgressBar(central)
        self.progress_bar.setRange(0, 0)
        layout.addWidget(self.progress_bar)

        self.capture_button = QPushButton("Capture Image", central)
        self.capture_button.clicked.connect(self.on_capture_clicked)
        layout.addWidget(self.capture_button)
        self.setCentralWidget(central)

        self.toast = CaptureToast(self)
        self.chooser = ChooserFlow(self)
        self.chooser.result_ready.connect(self.on_chooser_result)
        self.provider = DownsamplingDecodeProvider(lambda: self.smallest_view_dimension)

        self.session = self._restore_session()
        # The chooser that owned a restored request died with the previous run
        result = recover_orphaned_request(self.session, self.context, self.on_outcome, self.provider)
        if result is not None:
            self.logger.info(f"Recovered capture left pending by the previous run: {result.value}")
        self.set_capturing(result is MatchResult.DISPATCHED)

    # --- session persistence ---

    def _new_session_kwargs(self):
        return {
            "scratch_files": ScratchFileManager.from_config(self.config),
            "thread_pool": shared_decode_pool(self.config.max_decode_threads),
        }

    def _restore_session(self) -> CaptureSession:
        state_file = self.config.resolved_state_file()
        if os.path.exists(state_file):
            try:
                with open(state_file, 'r', encoding='utf-8') as f:
                    state = SessionState.from_json(f.read())
                self.logger.info(f"Restored capture session from {state_file}")
                return CaptureSession.restore(self.context, state, **self._new_session_kwargs())
            except (OSError, ValueError) as e:
                self.logger.warning(f"Ignoring unreadable session state {state_file}: {e}")

        return CaptureSession(self.context, chooser_title=self.config.chooser_title, **self._new_session_kwargs())

    def _save_session(self):
        state_file = self.config.resolved_state_file()
        try:
            os.makedirs(os.path.dirname(state_file), exist_ok=True)
            with open(state_file, 'w', encoding='utf-8') as f:
                f.write(self.session.save_state(self.context).to_json())
        except OSError as e:
            self.logger.error(f"Failed to save session state to {state_file}: {e}")

    # --- capture flow ---

    def on_capture_clicked(self):
        self.set_capturing(True)
        try:
            scratch_path = self.session.begin(self.context, CAPTURE_REQUEST_ID)
        except StorageUnavailable as e:
            self.logger.error(f"Setup failed: {e}")
            self.set_capturing(False)
            self.toast.show_message(CaptureToast.MESSAGES['setup_failed'], preset='error')
            return

        title = self.session.chooser_title or self.config.chooser_title
        self.chooser.launch(self, CAPTURE_REQUEST_ID, title, scratch_path)

    def on_chooser_result(self, correlation_id, succeeded, locator):
        result = self.session.match(
            self.context, correlation_id, succeeded, locator,
            callback=self.on_outcome, provider=self.provider,
        )
        if result is MatchResult.IGNORED:
            self.logger.debug(f"Chooser result {correlation_id} isn't ours")
        elif result is MatchResult.REJECTED:
            self.set_capturing(False)
            self.toast.show_message(CaptureToast.MESSAGES['rejected'], preset='warning')
        # DISPATCHED: on_outcome follows

    def on_outcome(self, outcome):
        self.set_capturing(False)
        if isinstance(outcome, Success):
            self.image = outcome.image
            self._show_image()
            return

        self.logger.error("Image capture failed", exc_info=outcome.error)
        self.toast.show_outcome(outcome)

    # --- view ---

    def set_capturing(self, capturing: bool):
        if capturing:
            self.image = None
            self.image_view.clear()
            self.progress_bar.show()
            self.capture_button.setEnabled(False)
        else:
            self.progress_bar.hide()
            self.capture_button.setEnabled(True)

    def _show_image(self):
        if self.image is None:
            return
        pixmap = QPixmap.fromImage(self.image)
        self.image_view.setPixmap(pixmap.scaled(
            self.image_view.size(), Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation
        ))

    def resizeEvent(self, event):
        super().resizeEvent(event)
        smallest = min(self.image_view.width(), self.image_view.height())
        if smallest > 0 and (self.smallest_view_dimension == 0 or smallest < self.smallest_view_dimension):
            self.smallest_view_dimension = smallest
        self._show_image()

    def closeEvent(self, event):
        # The pending request survives; only the running decode is dropped
        self.session.close(self.context)
        self._save_session()
        super().closeEvent(event)
