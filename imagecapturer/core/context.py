"""
Foreground context token.

A capture session is bound to the thread that created it. Every session
operation receives the token explicitly and the session verifies that it is
its own token and that the caller is running on that thread.
"""

import threading

from imagecapturer.core.errors import WrongContext


class ForegroundContext:
    def __init__(self, name: str = None):
        self._ident = threading.get_ident()
        self.name = name or f"thread-{self._ident}"

    def is_current(self) -> bool:
        return threading.get_ident() == self._ident

    def check(self, operation: str, owner: "ForegroundContext" = None):
        """Raise WrongContext unless this token belongs to owner and the caller runs on its thread."""
        if owner is not None and owner is not self:
            raise WrongContext(f"{operation}: context {self.name} does not own this session (owner: {owner.name})")
        if not self.is_current():
            raise WrongContext(
                f"{operation} can only be used from the foreground context. "
                f"Foreground: {self.name} Current thread: {threading.current_thread().name}"
            )

    def __repr__(self):
        return f"ForegroundContext({self.name!r})"
