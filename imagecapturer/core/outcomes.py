"""
Decode outcomes delivered to the caller.

Exactly one of Success, IoFailure or MemoryFailure is produced for every
dispatched request. The classify_* helpers are the whole decision table; they
hold no state.
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

from PyQt6.QtGui import QImage


class DecodeOutcome:
    """Base of the three outcome variants."""

    @property
    def succeeded(self) -> bool:
        return isinstance(self, Success)


@dataclass(frozen=True)
class Success(DecodeOutcome):
    image: QImage
    # Locator supplied by the external flow, None when the scratch file was read
    origin_locator: Optional[Any] = None
    # Scratch file the image came from, if it was the read locator and still existed
    origin_file: Optional[os.PathLike] = None


@dataclass(frozen=True)
class IoFailure(DecodeOutcome):
    error: BaseException


@dataclass(frozen=True)
class MemoryFailure(DecodeOutcome):
    """Decoding exhausted memory. Exactly one of the two fields is set."""
    memory_error: Optional[MemoryError] = None
    null_fault: Optional[BaseException] = None

    def __post_init__(self):
        if (self.memory_error is None) == (self.null_fault is None):
            raise ValueError("MemoryFailure needs exactly one of memory_error or null_fault")

    @property
    def error(self) -> BaseException:
        return self.memory_error if self.memory_error is not None else self.null_fault


def is_null_reference_fault(error: BaseException) -> bool:
    """True for AttributeError/TypeError raised by touching None."""
    if isinstance(error, (AttributeError, TypeError)):
        return "'NoneType'" in str(error)
    return False


def classify_image(image, origin_locator=None, scratch_path=None) -> DecodeOutcome:
    """Map a provider's return value to Success or IoFailure."""
    if image is None:
        return IoFailure(OSError("decode returned no image"))
    if not isinstance(image, QImage):
        return IoFailure(TypeError(f"decode returned {type(image).__name__}, expected QImage"))
    if image.isNull():
        return IoFailure(OSError("decode returned no image"))

    origin_file = None
    if origin_locator is None and scratch_path is not None and os.path.exists(scratch_path):
        origin_file = scratch_path
    return Success(image, origin_locator, origin_file)


def classify_error(error: BaseException) -> DecodeOutcome:
    """Map a fault raised while opening or decoding to IoFailure or MemoryFailure."""
    if isinstance(error, MemoryError):
        return MemoryFailure(memory_error=error)
    if is_null_reference_fault(error):
        # Allocation failures inside the image codecs surface this way
        return MemoryFailure(null_fault=error)
    return IoFailure(error)
