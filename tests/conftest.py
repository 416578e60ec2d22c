"""
Pytest configuration: one offscreen QApplication for the whole session
so QObject signals and widgets work, plus fake process plumbing for
queue tests.
"""

import os
import sys
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication, QEvent, QObject, Signal
from PySide6.QtWidgets import QApplication

# Make `core` importable when running from a checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


@pytest.fixture(scope="session", autouse=True)
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance() or QApplication([])
    yield app


class FakeWorker(QObject):
    """Stands in for TranscodeWorker; tests drive its signals by hand."""

    output_received = Signal(int, str)
    exited          = Signal(int, int)
    start_failed    = Signal(int, str)
    finished        = Signal()

    instances: list = []

    def __init__(self, handle, argv, parent=None):
        super().__init__(parent)
        self.handle = handle
        self.argv = list(argv)
        self.started = False
        self.waited = False
        self.cancelled = False
        self.killed = False
        self.ignores_terminate = False
        FakeWorker.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def kill(self):
        self.killed = True

    def wait(self, timeout_ms=None):
        self.waited = True
        return self.killed or not self.ignores_terminate

    # helpers
    def say(self, text):
        self.output_received.emit(self.handle, text)

    def exit(self, code):
        self.exited.emit(self.handle, code)
        self.finished.emit()


class FakeSupervisor(QObject):
    """Same surface as ProcessSupervisor, without any process."""

    progress  = Signal(int, object)
    output    = Signal(int, str)
    completed = Signal(int, str)
    failed    = Signal(int, str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.started: list[list[str]] = []
        self.cancelled: list[int] = []
        self.handle = None
        self._next = 0
        self.shut_down = False

    def start(self, argv):
        if self.handle is not None:
            raise RuntimeError("already running")
        self._next += 1
        self.handle = self._next
        self.started.append(list(argv))
        return self.handle

    def cancel(self, handle=None):
        self.cancelled.append(handle)
        return True

    def shutdown(self):
        self.shut_down = True

    # helpers
    def report(self, event):
        self.progress.emit(self.handle, event)

    def succeed(self):
        handle, self.handle = self.handle, None
        self.completed.emit(handle, self.started[-1][-1])

    def fail(self, code=1):
        handle, self.handle = self.handle, None
        self.failed.emit(handle, f"FFmpeg exited with code {code}")


@pytest.fixture
def fake_worker_cls():
    FakeWorker.instances = []
    return FakeWorker


@pytest.fixture
def supervisor():
    sup = FakeSupervisor()
    yield sup
    sup.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
