"""Shared pytest fixtures: one Qt application, an event pump and capture collaborators."""
import os
import sys
import time

# Must be set before any Qt object is created
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QThreadPool, Qt
from PyQt6.QtGui import QImage

from imagecapturer.core.capture_session import CaptureSession
from imagecapturer.core.context import ForegroundContext
from imagecapturer.core.scratch_files import ScratchFileManager


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    yield app


def _pump(timeout_ms=20):
    QCoreApplication.processEvents(QEventLoop.ProcessEventsFlag.AllEvents, timeout_ms)


@pytest.fixture
def wait_until(qapp):
    """Process Qt events until predicate() is true or the timeout expires."""
    def _wait(predicate, timeout=5.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            _pump()
            if predicate():
                return True
            time.sleep(0.005)
        return predicate()
    return _wait


@pytest.fixture
def pump_events(qapp):
    """Process Qt events for a fixed period."""
    def _pump_for(duration=0.2):
        deadline = time.monotonic() + duration
        while time.monotonic() < deadline:
            _pump()
            time.sleep(0.005)
    return _pump_for


@pytest.fixture
def context(qapp):
    return ForegroundContext("test")


@pytest.fixture
def pool():
    thread_pool = QThreadPool()
    thread_pool.setMaxThreadCount(2)
    yield thread_pool
    thread_pool.waitForDone(5000)


@pytest.fixture
def capture_dir(tmp_path):
    return tmp_path / "captured-images"


@pytest.fixture
def scratch_files(capture_dir):
    # PNG suffix so Qt's format detection matches the test images
    return ScratchFileManager(capture_dir, prefix="capture-", suffix=".png")


@pytest.fixture
def session(context, scratch_files, pool):
    capture_session = CaptureSession(context, chooser_title="Pick one", scratch_files=scratch_files, thread_pool=pool)
    yield capture_session
    pool.waitForDone(5000)


@pytest.fixture
def write_image():
    """Write a solid PNG of the given size and return its path."""
    def _write(path, width=40, height=30):
        image = QImage(width, height, QImage.Format.Format_RGB32)
        image.fill(Qt.GlobalColor.blue)
        assert image.save(str(path), "PNG")
        return path
    return _write


class OutcomeRecorder:
    def __init__(self):
        self.outcomes = []

    def __call__(self, outcome):
        self.outcomes.append(outcome)

    @property
    def last(self):
        return self.outcomes[-1]


@pytest.fixture
def recorder():
    return OutcomeRecorder()
