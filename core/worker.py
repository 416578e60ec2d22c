"""
core.worker
~~~~~~~~~~~
QThread that runs a single ffmpeg process and forwards its stderr.

Signals
-------
output_received(int, str)   handle, one chunk of ffmpeg's stderr
exited(int, int)            handle, exit code (emitted exactly once)
start_failed(int, str)      handle, reason; ffmpeg never started

The worker does no parsing; ProcessSupervisor turns chunks into progress
on the GUI thread.
"""

from __future__ import annotations

import subprocess

from PySide6.QtCore import QThread, Signal


class TranscodeWorker(QThread):

    output_received = Signal(int, str)
    exited          = Signal(int, int)
    start_failed    = Signal(int, str)

    def __init__(self, handle: int, argv: list[str], parent=None):
        super().__init__(parent)
        self.handle = handle
        self._argv  = list(argv)
        self._process: subprocess.Popen | None = None
        self._cancel_requested = False

    # ── QThread entry point ───────────────────────────────────────────────────

    def run(self):
        try:
            # Text mode splits on \r too, so each status line arrives on its own.
            # stdin is closed so ffmpeg never waits for a keypress.
            self._process = subprocess.Popen(
                self._argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            print(f"[WORKER] #{self.handle} ❌ Could not start: {exc}")
            self.start_failed.emit(self.handle, str(exc))
            return

        print(f"[WORKER] #{self.handle} PID = {self._process.pid}")

        # cancel() may have landed before Popen returned
        if self._cancel_requested:
            self._process.terminate()

        for line in self._process.stderr:
            line = line.rstrip()
            if line:
                self.output_received.emit(self.handle, line)

        code = self._process.wait()
        print(f"[WORKER] #{self.handle} ffmpeg exited with code {code}")
        self.exited.emit(self.handle, code)

    # ── Cancel ────────────────────────────────────────────────────────────────

    def cancel(self):
        print(f"[WORKER] #{self.handle} cancel() called")
        self._cancel_requested = True
        if self._process and self._process.poll() is None:
            self._process.terminate()
            print(f"[WORKER] #{self.handle} Process terminated")
        else:
            print(f"[WORKER] #{self.handle} cancel(): no running process to terminate")

    def kill(self):
        """Last resort when terminate() was ignored."""
        if self._process and self._process.poll() is None:
            self._process.kill()
            print(f"[WORKER] #{self.handle} Process killed")
