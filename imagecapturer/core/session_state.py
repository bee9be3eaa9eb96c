"""
Persisted form of a CaptureSession.

Only the chooser title and the pending (id, scratch path) pair survive a
caller teardown; an in-flight decode is never persisted. The decoder enforces
that the pair is either complete or absent.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger("SessionState")

STATE_VERSION = 1
NO_REQUEST = -1


@dataclass(frozen=True)
class SessionState:
    chooser_title: Optional[str] = None
    scratch_path: Optional[Path] = None
    correlation_id: Optional[int] = None

    def __post_init__(self):
        if (self.scratch_path is None) != (self.correlation_id is None):
            raise ValueError(
                f"scratch_path and correlation_id must be set together: "
                f"{self.scratch_path!r}, {self.correlation_id!r}"
            )

    @property
    def is_pending(self) -> bool:
        return self.correlation_id is not None

    def to_dict(self) -> dict:
        return {
            "version": STATE_VERSION,
            "chooser_title": self.chooser_title,
            "scratch_path": None if self.scratch_path is None else str(self.scratch_path),
            "correlation_id": NO_REQUEST if self.correlation_id is None else self.correlation_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise ValueError(f"Unsupported session state version: {version}")

        title = data.get("chooser_title")
        raw_path = data.get("scratch_path")
        raw_id = data.get("correlation_id", NO_REQUEST)
        if raw_id is None:
            raw_id = NO_REQUEST
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            raise ValueError(f"correlation_id must be an integer: {raw_id!r}")

        if raw_path is None:
            # No scratch path means no pending request
            return cls(title, None, None)
        if raw_id < 1:
            logger.warning(f"Dropping scratch path {raw_path} restored without a request id")
            return cls(title, None, None)
        return cls(title, Path(raw_path), raw_id)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "SessionState":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Session state must be a JSON object")
        return cls.from_dict(data)
