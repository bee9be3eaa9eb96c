"""
Scratch file allocation for the external capture flow.

Each request gets a uniquely named file inside a shared capture directory, so
sessions and processes never need to coordinate. The file itself is only a
path: the external flow may or may not write into it.
"""

import os
import uuid
import logging
from pathlib import Path

from imagecapturer.core.errors import StorageUnavailable


class ScratchFileManager:
    def __init__(self, directory, prefix: str = "capture-", suffix: str = ".jpg"):
        self.logger = logging.getLogger("ScratchFiles")
        self.directory = Path(directory)
        self.prefix = prefix
        self.suffix = suffix
        # Paths handed out (or adopted) and not yet released
        self._owned = set()

    @classmethod
    def from_config(cls, config) -> "ScratchFileManager":
        return cls(config.resolved_capture_dir(), config.scratch_prefix, config.scratch_suffix)

    def allocate(self) -> Path:
        """Return a fresh unique path in the capture directory, creating the directory if needed."""
        if not self.directory.is_dir():
            try:
                os.makedirs(self.directory, exist_ok=True)
            except OSError as e:
                raise StorageUnavailable(f"Couldn't create temporary image storage directory: {self.directory}") from e
            self.logger.info(f"Created capture directory {self.directory}")

        path = self.directory / f"{self.prefix}{uuid.uuid4()}{self.suffix}"
        self._owned.add(path)
        self.logger.debug(f"Allocated scratch file {path}")
        return path

    def adopt(self, path) -> Path:
        """Take ownership of a path allocated by an earlier process (restored session)."""
        path = Path(path)
        self._owned.add(path)
        return path

    def owns(self, path) -> bool:
        return Path(path) in self._owned

    def release(self, path) -> bool:
        """
        Delete a scratch file exactly once.
        Returns True if this call released the path. Deletion errors are logged, not raised.
        """
        if path is None:
            return False
        path = Path(path)
        if path not in self._owned:
            return False
        self._owned.discard(path)

        try:
            path.unlink()
            self.logger.debug(f"Deleted scratch file {path}")
        except FileNotFoundError:
            # The external flow never wrote it, or the caller already removed it
            pass
        except OSError as e:
            self.logger.warning(f"Failed to delete temporary file: {path} ({e})")
        return True
