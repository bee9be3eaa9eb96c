"""
Capture session: correlates one external image request with its result and
runs the decode in the background.

Typical use from the foreground thread:

    context = ForegroundContext("gui")
    session = CaptureSession(context, scratch_files=ScratchFileManager(capture_dir))

    path = session.begin(context, 1, "Select Image Source")
    # ... launch the external chooser with `path` as its write target ...

    # when the chooser returns:
    result = session.match(context, 1, ok, locator, callback=on_outcome)

The callback receives exactly one Success / IoFailure / MemoryFailure on the
session's thread, unless cancel_active_decode() ran first.
"""

import logging
from enum import Enum
from pathlib import Path

from PyQt6.QtCore import QObject, QThreadPool, Qt, pyqtSlot

from imagecapturer.core.context import ForegroundContext
from imagecapturer.core.decode_providers import coerce_provider
from imagecapturer.core.decode_worker import DecodeHandle, DecodeRequest, DecodeWorker
from imagecapturer.core.errors import AlreadyPending, InvalidCorrelationId, NotAwaiting
from imagecapturer.core.locators import LocatorResolver
from imagecapturer.core.scratch_files import ScratchFileManager
from imagecapturer.core.session_state import SessionState


class MatchResult(Enum):
    IGNORED = "ignored"
    DISPATCHED = "dispatched"
    REJECTED = "rejected"


_shared_pool = None


def shared_decode_pool(max_threads: int = None) -> QThreadPool:
    """Pool used by sessions that aren't given one. A given max_threads is applied on every call."""
    global _shared_pool
    if _shared_pool is None:
        _shared_pool = QThreadPool()
        _shared_pool.setMaxThreadCount(4)  # Limit threads
    if max_threads is not None:
        _shared_pool.setMaxThreadCount(max(1, max_threads))
    return _shared_pool


class CaptureSession(QObject):
    def __init__(self, context: ForegroundContext, chooser_title: str = None,
                 scratch_files: ScratchFileManager = None, resolver: LocatorResolver = None,
                 thread_pool: QThreadPool = None, parent=None):
        context.check("CaptureSession()")
        super().__init__(parent)
        self.logger = logging.getLogger("CaptureSession")
        self._context = context
        self._scratch_files = scratch_files
        self._resolver = resolver or LocatorResolver()
        self._thread_pool = thread_pool

        self._chooser_title = chooser_title
        self._pending_id = None
        self._scratch_path = None
        self._active_decode = None
        # Dispatched decodes whose worker hasn't reported back yet (active or cancelled)
        self._draining = set()

    @classmethod
    def restore(cls, context: ForegroundContext, state: SessionState, **kwargs) -> "CaptureSession":
        """Recreate a session from saved state. An in-flight decode is not restored."""
        session = cls(context, chooser_title=state.chooser_title, **kwargs)
        if state.is_pending:
            session._pending_id = state.correlation_id
            session._scratch_path = session.scratch_files.adopt(state.scratch_path)
            session.logger.info(f"Restored pending capture {state.correlation_id} -> {state.scratch_path}")
        return session

    # --- collaborators ---

    @property
    def context(self) -> ForegroundContext:
        return self._context

    @property
    def scratch_files(self) -> ScratchFileManager:
        if self._scratch_files is None:
            from imagecapturer.core.config import load_config
            self._scratch_files = ScratchFileManager.from_config(load_config())
        return self._scratch_files

    @property
    def thread_pool(self) -> QThreadPool:
        if self._thread_pool is None:
            self._thread_pool = shared_decode_pool()
        return self._thread_pool

    @property
    def chooser_title(self):
        return self._chooser_title

    @property
    def pending_correlation_id(self):
        return self._pending_id

    @property
    def scratch_path(self):
        return self._scratch_path

    # --- operations ---

    def begin(self, context: ForegroundContext, correlation_id: int, title: str = None) -> Path:
        """
        Start waiting for one external image request.
        Returns the scratch path the external flow may write the image into.
        """
        context.check("begin", self._context)

        if correlation_id < 1:
            raise InvalidCorrelationId(f"correlation_id must be greater than zero: {correlation_id}")
        if self._pending_id is not None:
            raise AlreadyPending(f"Can only capture one file at a time. Previous file: {self._scratch_path}")

        path = self.scratch_files.allocate()
        if title is not None:
            self._chooser_title = title
        self._pending_id = correlation_id
        self._scratch_path = path
        self.logger.info(f"Awaiting capture {correlation_id} -> {path}")
        return path

    def match(self, context: ForegroundContext, correlation_id: int, succeeded: bool,
              locator=None, callback=None, provider=None) -> MatchResult:
        """
        Offer an external result to the session.

        IGNORED: not ours, nothing changed.
        REJECTED: ours, but the external flow failed. No callback will fire.
        DISPATCHED: decoding in the background; callback(outcome) fires later.
        """
        context.check("match", self._context)
        if self._pending_id is None or correlation_id != self._pending_id:
            return MatchResult.IGNORED

        if self._scratch_path is None:
            raise NotAwaiting(
                f"begin wasn't called first for {correlation_id}, "
                f"or the session wasn't saved/restored across recreation"
            )
        if succeeded and callback is None:
            raise ValueError("A callback is required to receive the decoded image")
        decode_provider = coerce_provider(provider) if succeeded else None

        scratch_path = self._scratch_path
        self._pending_id = None
        self._scratch_path = None

        if not succeeded:
            self.logger.info(f"Capture {correlation_id} failed in the external flow")
            self.scratch_files.release(scratch_path)
            return MatchResult.REJECTED

        if self._active_decode is not None:
            self.logger.warning("Starting a new decode while the previous one is still active; cancelling it")
            self._active_decode.cancel()
            self._active_decode = None

        request = DecodeRequest(locator, scratch_path, decode_provider)
        handle = DecodeHandle(request, callback)
        handle.signals.finished.connect(self._on_decode_finished, Qt.ConnectionType.QueuedConnection)
        self._active_decode = handle
        self._draining.add(handle)

        self.thread_pool.start(DecodeWorker(handle, self._resolver))
        self.logger.info(f"Capture {correlation_id} dispatched for decoding")
        return MatchResult.DISPATCHED

    def cancel_pending(self, context: ForegroundContext):
        """
        Forget the pending request. Returns its scratch path (or None).
        The scratch file is left on disk; the caller decides whether to delete it.
        """
        context.check("cancel_pending", self._context)
        abandoned = self._scratch_path
        self._pending_id = None
        self._scratch_path = None
        if abandoned is not None:
            self.logger.info(f"Cancelled pending capture, scratch file kept: {abandoned}")
        return abandoned

    def cancel_active_decode(self, context: ForegroundContext) -> None:
        """Stop delivery of the running decode. Its scratch file goes when the worker returns."""
        context.check("cancel_active_decode", self._context)
        if self._active_decode is not None:
            self._active_decode.cancel()
            self.logger.info(f"Cancelled background decode {self._active_decode!r}")
            self._active_decode = None

    def is_capturing(self, context: ForegroundContext) -> bool:
        """True while waiting on the external flow. A running decode doesn't count."""
        context.check("is_capturing", self._context)
        return self._pending_id is not None

    def is_decoding(self, context: ForegroundContext) -> bool:
        context.check("is_decoding", self._context)
        return self._active_decode is not None

    def save_state(self, context: ForegroundContext) -> SessionState:
        context.check("save_state", self._context)
        return SessionState(self._chooser_title, self._scratch_path, self._pending_id)

    def close(self, context: ForegroundContext) -> None:
        """
        Teardown: cancel the active decode and delete scratch files of decodes
        still draining. The pending request is kept so it can be saved.
        """
        context.check("close", self._context)
        self.cancel_active_decode(context)
        for handle in list(self._draining):
            handle.cancel()
            self.scratch_files.release(handle.request.scratch_path)

    # --- delivery ---

    @pyqtSlot(object, object)
    def _on_decode_finished(self, handle, outcome):
        self._draining.discard(handle)
        if self._active_decode is handle:
            # Cleared before the callback so it can begin() again
            self._active_decode = None

        if handle.cancelled:
            self.logger.debug(f"Suppressed delivery of cancelled decode {handle!r}")
            self.scratch_files.release(handle.request.scratch_path)
            return

        try:
            handle.callback(outcome)
        finally:
            self.scratch_files.release(handle.request.scratch_path)
