"""
Error taxonomy for capture sessions.

UsageFault and its subclasses are programmer errors and are never expected
in a correctly wired caller. StorageUnavailable is recoverable and raised
before any external flow starts.
"""


class CaptureError(Exception):
    """Base class for everything raised by the capture core."""


class UsageFault(CaptureError, RuntimeError):
    """The session API was used incorrectly."""


class WrongContext(UsageFault):
    """A session operation was invoked outside its foreground context."""


class AlreadyPending(UsageFault):
    """begin() was called while a request is still outstanding."""


class NotAwaiting(UsageFault):
    """A result matched the pending id but no scratch path is paired with it."""


class InvalidCorrelationId(CaptureError, ValueError):
    pass


class StorageUnavailable(CaptureError, OSError):
    """The scratch directory could not be created."""
