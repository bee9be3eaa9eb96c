"""
Stand-in for the external image chooser.

"Gallery" hands back the picked file's URL as the result locator.
"Camera" copies the picked file into the scratch path and hands back no
locator, like a camera app writing to the path it was given.
Results are always delivered later from the event loop, never inline.
"""

import shutil
import logging

from PyQt6.QtCore import QObject, QTimer, QUrl, pyqtSignal
from PyQt6.QtWidgets import QFileDialog, QInputDialog

SOURCE_GALLERY = "Gallery"
SOURCE_CAMERA = "Camera"
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"


class ChooserFlow(QObject):
    result_ready = pyqtSignal(int, bool, object)  # correlation_id, succeeded, locator

    def __init__(self, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger("ChooserFlow")

    def launch(self, parent_widget, correlation_id: int, title: str, scratch_path):
        source, ok = QInputDialog.getItem(
            parent_widget, title, "Image source:", [SOURCE_GALLERY, SOURCE_CAMERA], 0, False
        )
        if not ok:
            self._deliver(correlation_id, False, None)
            return

        picked, _ = QFileDialog.getOpenFileName(parent_widget, title, "", IMAGE_FILTER)
        if not picked:
            self._deliver(correlation_id, False, None)
            return

        if source == SOURCE_GALLERY:
            self._deliver(correlation_id, True, QUrl.fromLocalFile(picked))
            return

        try:
            shutil.copyfile(picked, scratch_path)
        except OSError as e:
            self.logger.error(f"Camera simulation failed to write {scratch_path}: {e}")
            self._deliver(correlation_id, False, None)
            return
        self._deliver(correlation_id, True, None)

    def _deliver(self, correlation_id, succeeded, locator):
        self.logger.debug(f"Chooser returning {correlation_id} succeeded={succeeded} locator={locator}")
        QTimer.singleShot(0, lambda: self.result_ready.emit(correlation_id, succeeded, locator))
