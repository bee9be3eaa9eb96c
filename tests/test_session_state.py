"""SessionState codec tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from imagecapturer.core.session_state import NO_REQUEST, STATE_VERSION, SessionState


def test_pending_state_round_trip() -> None:
    state = SessionState("Pick one", Path("/tmp/captured-images/capture-1.jpg"), 7)
    restored = SessionState.from_json(state.to_json())
    assert restored == state
    assert restored.is_pending


def test_idle_state_round_trip() -> None:
    state = SessionState(None, None, None)
    data = state.to_dict()
    assert data == {"version": STATE_VERSION, "chooser_title": None, "scratch_path": None, "correlation_id": NO_REQUEST}
    assert SessionState.from_dict(data) == state
    assert not state.is_pending


def test_layout_uses_strings_and_minus_one() -> None:
    data = json.loads(SessionState("T", Path("/x/capture.jpg"), 3).to_json())
    assert data["scratch_path"] == str(Path("/x/capture.jpg"))
    assert data["correlation_id"] == 3


def test_unpaired_state_cannot_be_built() -> None:
    with pytest.raises(ValueError):
        SessionState("T", Path("/x.jpg"), None)
    with pytest.raises(ValueError):
        SessionState("T", None, 4)


def test_missing_path_means_no_request() -> None:
    state = SessionState.from_dict({"version": 1, "chooser_title": "T", "scratch_path": None, "correlation_id": 9})
    assert state == SessionState("T", None, None)


def test_path_without_id_is_dropped() -> None:
    state = SessionState.from_dict({"version": 1, "chooser_title": "T", "scratch_path": "/x.jpg", "correlation_id": -1})
    assert state == SessionState("T", None, None)


def test_missing_fields_default_to_idle() -> None:
    assert SessionState.from_dict({}) == SessionState(None, None, None)


def test_unknown_version_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionState.from_dict({"version": 2})


def test_non_integer_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionState.from_dict({"scratch_path": "/x.jpg", "correlation_id": "7"})
    with pytest.raises(ValueError):
        SessionState.from_dict({"scratch_path": "/x.jpg", "correlation_id": True})


def test_non_object_json_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionState.from_json("[1, 2, 3]")
