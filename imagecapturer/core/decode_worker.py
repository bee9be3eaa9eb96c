"""
Background decode of a captured image.

The worker body runs on a QThreadPool thread and never lets a fault escape:
every exit path produces one DecodeOutcome, emitted through a signal whose
receiver lives on the session's foreground thread.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from imagecapturer.core.decode_providers import DecodeProvider
from imagecapturer.core.locators import LocatorResolver
from imagecapturer.core.outcomes import DecodeOutcome, IoFailure, classify_error, classify_image

logger = logging.getLogger("DecodeWorker")


class CancellationToken:
    """Set once from the foreground thread, checked at the delivery boundary."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class DecodeRequest:
    # None means the external flow wrote into the scratch file
    locator: Optional[Any]
    scratch_path: Path
    provider: DecodeProvider

    @property
    def read_locator(self):
        return self.locator if self.locator is not None else self.scratch_path


class DecodeHandle:
    """One dispatched decode. Holds what the session needs once the worker reports back."""

    def __init__(self, request: DecodeRequest, callback: Callable[[DecodeOutcome], None]):
        self.request = request
        self.callback = callback
        self.token = CancellationToken()
        # Created here so it lives on the foreground thread, not the pool thread
        self.signals = DecodeWorker.Signals()

    def cancel(self):
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def __repr__(self):
        return f"DecodeHandle(locator={self.request.read_locator!r}, cancelled={self.cancelled})"


class DecodeWorker(QRunnable):
    class Signals(QObject):
        finished = pyqtSignal(object, object)  # DecodeHandle, DecodeOutcome

    def __init__(self, handle: DecodeHandle, resolver: LocatorResolver):
        super().__init__()
        self.handle = handle
        self.resolver = resolver

    def decode(self) -> DecodeOutcome:
        request = self.handle.request
        read_locator = request.read_locator
        try:
            device = self.resolver.open(read_locator)
            try:
                image = request.provider.provide_image(device)
            finally:
                device.close()
            return classify_image(image, request.locator, request.scratch_path)
        except Exception as e:
            # MemoryError included: it is an Exception subclass
            logger.warning(f"Decoding {self.resolver.describe(read_locator)} failed: {type(e).__name__}: {e}")
            return classify_error(e)

    def run(self):
        try:
            outcome = self.decode()
        except Exception as e:
            # An exception escaping QRunnable.run aborts the process
            logger.error(f"Decode worker fault for {self.handle!r}", exc_info=True)
            outcome = IoFailure(e)
        logger.debug(f"Decode finished with {type(outcome).__name__} for {self.handle!r}")
        self.handle.signals.finished.emit(self.handle, outcome)
