"""
TranscodeWorker.run() called directly (no thread) against a tiny Python
script standing in for ffmpeg.
"""

import sys

from core.worker import TranscodeWorker

FAKE_FFMPEG = (
    "import sys\n"
    "sys.stderr.write('  Duration: 00:00:10.00, start: 0.0\\n')\n"
    "sys.stderr.write('frame=1 time=00:00:02.00 speed=1x\\r')\n"
    "sys.stderr.write('frame=2 time=00:00:05.00 speed=1x\\r\\n')\n"
    "sys.exit(int(sys.argv[1]))\n"
)


def _collect(worker):
    seen = {"lines": [], "exited": [], "start_failed": []}
    worker.output_received.connect(lambda h, t: seen["lines"].append(t))
    worker.exited.connect(lambda h, c: seen["exited"].append((h, c)))
    worker.start_failed.connect(lambda h, r: seen["start_failed"].append(h))
    return seen


def test_run_forwards_stderr_lines_and_exit_code():
    worker = TranscodeWorker(7, [sys.executable, "-c", FAKE_FFMPEG, "3"])
    seen = _collect(worker)

    worker.run()

    assert seen["lines"] == [
        "  Duration: 00:00:10.00, start: 0.0",
        "frame=1 time=00:00:02.00 speed=1x",
        "frame=2 time=00:00:05.00 speed=1x",
    ]
    assert seen["exited"] == [(7, 3)]
    assert seen["start_failed"] == []


def test_run_reports_clean_exit():
    worker = TranscodeWorker(1, [sys.executable, "-c", FAKE_FFMPEG, "0"])
    seen = _collect(worker)
    worker.run()
    assert seen["exited"] == [(1, 0)]


def test_missing_binary_reports_start_failure():
    worker = TranscodeWorker(2, ["/definitely/not/ffmpeg", "out.mp4"])
    seen = _collect(worker)
    worker.run()
    assert seen["start_failed"] == [2]
    assert seen["exited"] == []


def test_cancel_before_start_is_harmless():
    worker = TranscodeWorker(3, [sys.executable, "-c", "pass"])
    worker.cancel()


def test_run_does_not_log_the_command(capsys):
    # JobQueue logs the command once at dispatch
    worker = TranscodeWorker(4, [sys.executable, "-c", FAKE_FFMPEG, "0"])
    worker.run()
    out = capsys.readouterr().out
    assert "[WORKER] #4 ffmpeg exited with code 0" in out
    assert sys.executable not in out
