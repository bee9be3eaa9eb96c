# Image Capturer Package
from .core.capture_session import CaptureSession, MatchResult
from .core.context import ForegroundContext
from .core.decode_providers import DecodeProvider, DefaultDecodeProvider, DownsamplingDecodeProvider, calculate_sample_size
from .core.errors import (
    CaptureError, UsageFault, WrongContext, AlreadyPending, NotAwaiting,
    InvalidCorrelationId, StorageUnavailable,
)
from .core.locators import LocatorResolver
from .core.outcomes import DecodeOutcome, Success, IoFailure, MemoryFailure
from .core.scratch_files import ScratchFileManager
from .core.session_state import SessionState
from .core.version import VERSION as __version__
