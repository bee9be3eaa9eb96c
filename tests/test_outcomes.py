"""Result classifier decision table."""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QUrl
from PyQt6.QtGui import QImage

from imagecapturer.core.outcomes import (
    IoFailure, MemoryFailure, Success, classify_error, classify_image, is_null_reference_fault,
)


def _image():
    return QImage(4, 4, QImage.Format.Format_RGB32)


def test_none_image_is_io_failure() -> None:
    outcome = classify_image(None)
    assert isinstance(outcome, IoFailure)
    assert "decode returned no image" in str(outcome.error)


def test_null_qimage_is_io_failure() -> None:
    assert isinstance(classify_image(QImage()), IoFailure)


def test_non_image_result_is_io_failure() -> None:
    outcome = classify_image("image")
    assert isinstance(outcome, IoFailure)
    assert isinstance(outcome.error, TypeError)
    assert "str" in str(outcome.error)


def test_image_from_existing_scratch_file(tmp_path) -> None:
    scratch = tmp_path / "capture-1.jpg"
    scratch.write_bytes(b"x")
    outcome = classify_image(_image(), None, scratch)
    assert isinstance(outcome, Success)
    assert outcome.succeeded
    assert outcome.origin_locator is None
    assert outcome.origin_file == scratch


def test_image_from_vanished_scratch_file(tmp_path) -> None:
    outcome = classify_image(_image(), None, tmp_path / "gone.jpg")
    assert isinstance(outcome, Success)
    assert outcome.origin_file is None


def test_image_from_external_locator_has_no_origin_file(tmp_path) -> None:
    scratch = tmp_path / "capture-1.jpg"
    scratch.write_bytes(b"x")
    locator = QUrl("file:///photos/a.jpg")
    outcome = classify_image(_image(), locator, scratch)
    assert outcome.origin_locator == locator
    assert outcome.origin_file is None


def test_memory_error() -> None:
    error = MemoryError()
    outcome = classify_error(error)
    assert isinstance(outcome, MemoryFailure)
    assert outcome.memory_error is error
    assert outcome.error is error
    assert not outcome.succeeded


def test_attribute_error_on_none() -> None:
    try:
        None.width()
    except AttributeError as e:
        error = e
    outcome = classify_error(error)
    assert isinstance(outcome, MemoryFailure)
    assert outcome.null_fault is error
    assert outcome.error is error


def test_type_error_on_none() -> None:
    try:
        None[0]
    except TypeError as e:
        error = e
    assert is_null_reference_fault(error)
    assert isinstance(classify_error(error), MemoryFailure)


@pytest.mark.parametrize("error", [
    OSError("disk gone"),
    ValueError("bad header"),
    AttributeError("'QImage' object has no attribute 'foo'"),
    TypeError("expected bytes"),
])
def test_other_errors_are_io_failures(error) -> None:
    outcome = classify_error(error)
    assert isinstance(outcome, IoFailure)
    assert outcome.error is error


def test_memory_failure_needs_exactly_one_signal() -> None:
    with pytest.raises(ValueError):
        MemoryFailure()
    with pytest.raises(ValueError):
        MemoryFailure(memory_error=MemoryError(), null_fault=AttributeError())
