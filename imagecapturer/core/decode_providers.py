"""
Decode providers turn an open byte stream into a QImage on a worker thread.

QImage (unlike QPixmap) is safe to create off the GUI thread.
"""

import logging

from PyQt6.QtCore import QIODevice, QSize
from PyQt6.QtGui import QImageReader

logger = logging.getLogger("DecodeProvider")


def calculate_sample_size(max_dimension: int, width: int, height: int) -> int:
    """
    Smallest power-of-two subsampling factor that brings (width, height) within
    the box obtained by scaling the source so its larger side matches max_dimension.

    calculate_sample_size(500, 4000, 3000) == 8
    """
    if max_dimension <= 0 or width <= 0 or height <= 0:
        return 1

    scale_factor = max(width / (max_dimension * 1.0), height / (max_dimension * 1.0))
    new_width = int(width / scale_factor)
    new_height = int(height / scale_factor)

    scale = 1
    while width // scale > new_width or height // scale > new_height:
        scale *= 2
    return scale


class DecodeProvider:
    """Interface for custom decoders. Called on a worker thread."""

    def provide_image(self, device: QIODevice):
        """Return a QImage for the stream, or None / a null QImage if it couldn't be created."""
        raise NotImplementedError


class DefaultDecodeProvider(DecodeProvider):
    """Decodes the full-resolution image."""

    def provide_image(self, device: QIODevice):
        reader = QImageReader(device)
        image = reader.read()
        if image.isNull():
            logger.debug(f"Full decode produced no image: {reader.errorString()}")
        return image


class DownsamplingDecodeProvider(DecodeProvider):
    """
    Subsamples by a power of two before decoding to bound peak memory.

    min_dimension is either an int or a zero-argument callable returning the
    current smallest viewport dimension (read on the worker thread, so it
    should be a plain attribute read).
    """

    def __init__(self, min_dimension):
        self._min_dimension = min_dimension

    def target_dimension(self) -> int:
        if callable(self._min_dimension):
            return int(self._min_dimension())
        return int(self._min_dimension)

    def provide_image(self, device: QIODevice):
        reader = QImageReader(device)
        source_size = reader.size()
        sample = 1
        if source_size.isValid():
            sample = calculate_sample_size(self.target_dimension(), source_size.width(), source_size.height())
        if sample > 1:
            reader.setScaledSize(QSize(source_size.width() // sample, source_size.height() // sample))
            logger.debug(f"Subsampling {source_size.width()}x{source_size.height()} by {sample}")

        image = reader.read()
        if image.isNull():
            logger.debug(f"Subsampled decode produced no image: {reader.errorString()}")
        return image


def coerce_provider(provider) -> DecodeProvider:
    """Accept a DecodeProvider, a plain callable(device), or None (full decode)."""
    if provider is None:
        return DefaultDecodeProvider()
    if isinstance(provider, DecodeProvider):
        return provider
    if callable(provider):
        return _CallableProvider(provider)
    raise TypeError(f"Not a decode provider: {provider!r}")


class _CallableProvider(DecodeProvider):
    def __init__(self, func):
        self._func = func

    def provide_image(self, device: QIODevice):
        return self._func(device)
