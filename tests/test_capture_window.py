"""Recovery of a capture left pending by a previous run of the demo window."""
from __future__ import annotations

from imagecapturer.apps.capture_window import recover_orphaned_request
from imagecapturer.core.capture_session import CaptureSession, MatchResult
from imagecapturer.core.outcomes import Success


def _restored(session, context, scratch_files, pool):
    return CaptureSession.restore(context, session.save_state(context), scratch_files=scratch_files, thread_pool=pool)


def test_nothing_pending_is_left_alone(session, context, recorder) -> None:
    assert recover_orphaned_request(session, context, recorder) is None
    assert not session.is_capturing(context)


def test_written_scratch_file_is_decoded(session, context, scratch_files, pool, write_image, recorder,
                                         wait_until) -> None:
    path = session.begin(context, 1)
    write_image(path)
    restored = _restored(session, context, scratch_files, pool)

    assert recover_orphaned_request(restored, context, recorder) is MatchResult.DISPATCHED
    assert not restored.is_capturing(context)
    assert wait_until(lambda: recorder.outcomes)
    assert isinstance(recorder.last, Success)
    assert not path.exists()


def test_unwritten_scratch_file_is_given_up(session, context, scratch_files, pool, recorder, pump_events) -> None:
    path = session.begin(context, 1)
    path.touch()
    restored = _restored(session, context, scratch_files, pool)

    assert recover_orphaned_request(restored, context, recorder) is MatchResult.REJECTED
    assert not restored.is_capturing(context)
    assert restored.begin(context, 1)
    pump_events()
    assert recorder.outcomes == []
    assert not path.exists()
