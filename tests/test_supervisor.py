"""
ProcessSupervisor with a fake worker: signals are driven by hand, so
everything runs synchronously on the test thread.
"""

import pytest
from PySide6.QtCore import QCoreApplication, QEvent

from core.supervisor import ProcessSupervisor


@pytest.fixture
def sup(fake_worker_cls):
    s = ProcessSupervisor(worker_factory=fake_worker_cls)
    yield s
    s.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)


@pytest.fixture
def events(sup):
    seen = {"progress": [], "completed": [], "failed": [], "output": []}
    sup.progress.connect(lambda h, e: seen["progress"].append((h, e)))
    sup.completed.connect(lambda h, p: seen["completed"].append((h, p)))
    sup.failed.connect(lambda h, m: seen["failed"].append((h, m)))
    sup.output.connect(lambda h, t: seen["output"].append((h, t)))
    return seen


def test_start_launches_worker(sup, fake_worker_cls):
    handle = sup.start(["ffmpeg", "-i", "a.mp4", "b.mp4"])
    worker = fake_worker_cls.instances[-1]
    assert worker.started
    assert worker.handle == handle
    assert sup.is_running
    assert sup.active_handle == handle


def test_second_start_is_a_caller_error(sup):
    sup.start(["ffmpeg", "out.mp4"])
    with pytest.raises(RuntimeError):
        sup.start(["ffmpeg", "other.mp4"])


def test_chunks_become_progress(sup, fake_worker_cls, events):
    handle = sup.start(["ffmpeg", "out.mp4"])
    worker = fake_worker_cls.instances[-1]

    worker.say("  Duration: 00:01:40.00, start: 0.000000, bitrate: 900 kb/s")
    worker.say("frame=  10 time=00:00:25.00 bitrate=1.0kbits/s speed=3.1x")

    assert len(events["output"]) == 2
    assert len(events["progress"]) == 1
    h, event = events["progress"][0]
    assert h == handle
    assert event.percent == 25
    assert event.speed == "3.1x"


def test_exit_zero_completes_with_output_path(sup, fake_worker_cls, events):
    handle = sup.start(["ffmpeg", "-i", "a.mov", "/out/a_encoded.mp4"])
    fake_worker_cls.instances[-1].exit(0)

    assert events["completed"] == [(handle, "/out/a_encoded.mp4")]
    assert events["failed"] == []
    assert not sup.is_running


def test_nonzero_exit_fails_with_code_in_message(sup, fake_worker_cls, events):
    handle = sup.start(["ffmpeg", "out.mp4"])
    fake_worker_cls.instances[-1].exit(183)

    assert events["failed"] == [(handle, "FFmpeg exited with code 183")]
    assert events["completed"] == []


def test_start_failure_is_reported_as_failure(sup, fake_worker_cls, events):
    handle = sup.start(["/nope/ffmpeg", "out.mp4"])
    worker = fake_worker_cls.instances[-1]
    worker.start_failed.emit(handle, "No such file or directory")

    assert events["failed"] == [(handle, "Could not start FFmpeg: No such file or directory")]
    assert not sup.is_running


def test_cancel_terminates_but_outcome_comes_from_exit(sup, fake_worker_cls, events):
    handle = sup.start(["ffmpeg", "out.mp4"])
    worker = fake_worker_cls.instances[-1]

    assert sup.cancel(handle)
    assert worker.cancelled
    assert events["failed"] == []        # nothing until the process exits
    assert sup.is_running

    worker.exit(-15)
    assert events["failed"] == [(handle, "FFmpeg exited with code -15")]


def test_cancel_without_process(sup):
    assert not sup.cancel()


def test_cancel_wrong_handle_is_ignored(sup, fake_worker_cls):
    handle = sup.start(["ffmpeg", "out.mp4"])
    assert not sup.cancel(handle + 1)
    assert not fake_worker_cls.instances[-1].cancelled


def test_stale_worker_events_are_dropped(sup, fake_worker_cls, events):
    sup.start(["ffmpeg", "first.mp4"])
    first = fake_worker_cls.instances[-1]
    first.exit(0)

    second_handle = sup.start(["ffmpeg", "second.mp4"])
    first.say("  Duration: 00:00:10.00")
    first.say("time=00:00:05.00 speed=1x")
    first.exit(1)

    assert events["progress"] == []
    assert events["failed"] == []
    assert sup.active_handle == second_handle


def test_duration_does_not_leak_between_runs(sup, fake_worker_cls, events):
    sup.start(["ffmpeg", "a.mp4"])
    first = fake_worker_cls.instances[-1]
    first.say("  Duration: 00:00:10.00")
    first.exit(0)

    sup.start(["ffmpeg", "b.mp4"])
    fake_worker_cls.instances[-1].say("time=00:00:05.00 speed=1x")
    assert events["progress"][-1][1].percent is None


def test_shutdown_cancels_and_waits(sup, fake_worker_cls):
    sup.start(["ffmpeg", "out.mp4"])
    worker = fake_worker_cls.instances[-1]
    sup.shutdown()
    assert worker.cancelled
    assert worker.waited
    assert not worker.killed


def test_shutdown_kills_a_process_that_ignores_terminate(sup, fake_worker_cls):
    sup.start(["ffmpeg", "out.mp4"])
    worker = fake_worker_cls.instances[-1]
    worker.ignores_terminate = True
    sup.shutdown(timeout_ms=10)
    assert worker.cancelled
    assert worker.killed


def test_shutdown_when_idle_is_a_no_op(sup):
    sup.shutdown()
    assert not sup.is_running
