"""
Resolves result locators to readable byte streams.

A locator is whatever the external flow hands back: a local path, a
QUrl with a file: or qrc: scheme, or a scheme registered by the caller.
"""

import os
import logging
from typing import Callable, Dict

from PyQt6.QtCore import QFile, QIODevice, QUrl

logger = logging.getLogger("LocatorResolver")

Opener = Callable[[QUrl], QIODevice]


def _open_qfile(path: str) -> QIODevice:
    device = QFile(path)
    if not device.open(QIODevice.OpenModeFlag.ReadOnly):
        raise OSError(f"Couldn't open {path}: {device.errorString()}")
    return device


class LocatorResolver:
    def __init__(self):
        self._openers: Dict[str, Opener] = {}

    def register(self, scheme: str, opener: Opener) -> None:
        """Add support for a URL scheme. opener(url) must return an open QIODevice or raise OSError."""
        self._openers[scheme.lower()] = opener

    def describe(self, locator) -> str:
        if isinstance(locator, QUrl):
            return locator.toString()
        if isinstance(locator, (str, os.PathLike)):
            return os.fspath(locator)
        return repr(locator)

    def open(self, locator) -> QIODevice:
        """Open a readable device for locator. Raises OSError when that isn't possible."""
        if locator is None:
            raise OSError("No locator to read from")

        if isinstance(locator, QUrl):
            device = self._open_url(locator)
        elif isinstance(locator, (str, os.PathLike)):
            device = _open_qfile(os.fspath(locator))
        else:
            raise OSError(f"Unsupported locator type: {type(locator).__name__}")

        if device is None or not device.isReadable():
            raise OSError(f"Decoding image FAILED because the stream for {self.describe(locator)} is not readable")
        return device

    def _open_url(self, url: QUrl) -> QIODevice:
        scheme = url.scheme().lower()
        opener = self._openers.get(scheme)
        if opener is not None:
            return opener(url)
        if url.isLocalFile():
            return _open_qfile(url.toLocalFile())
        if scheme == "qrc":
            return _open_qfile(":" + url.path())
        raise OSError(f"Unsupported locator scheme '{scheme}': {url.toString()}")
