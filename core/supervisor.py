"""
core.supervisor
~~~~~~~~~~~~~~~
ProcessSupervisor owns at most one running ffmpeg (via TranscodeWorker)
and turns its raw output into progress / outcome signals.

Every signal carries the *handle* returned by start(), so a listener can
drop events from a run it no longer cares about. Worker signals are
queued onto the thread this object lives in (the GUI thread), which
keeps progress and exit handling in a single event context.

Signals
-------
progress(int, ProgressEvent)
output(int, str)            raw stderr line, for logs
completed(int, str)         handle, output path
failed(int, str)            handle, human-readable message
"""

from __future__ import annotations

import itertools

from PySide6.QtCore import QObject, Signal, Slot

from core.progress import ProgressParser
from core.worker import TranscodeWorker


class ProcessSupervisor(QObject):

    progress  = Signal(int, object)
    output    = Signal(int, str)
    completed = Signal(int, str)
    failed    = Signal(int, str)

    def __init__(self, worker_factory=TranscodeWorker, parent=None):
        super().__init__(parent)
        self._worker_factory = worker_factory
        self._worker = None
        self._handle: int | None = None
        self._output_path = ""
        self._parser = ProgressParser()
        self._handles = itertools.count(1)

    # ── Public API ────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._worker is not None

    @property
    def active_handle(self) -> int | None:
        return self._handle

    def start(self, argv: list[str]) -> int:
        """
        Launch *argv* and return its handle. The last element of *argv* is
        taken as the output path reported on success.

        Raises RuntimeError if a process is already running; serialising
        runs is the caller's job.
        """
        if self._worker is not None:
            raise RuntimeError(
                f"ProcessSupervisor already running handle #{self._handle}"
            )

        handle = next(self._handles)
        self._handle = handle
        self._output_path = argv[-1] if argv else ""
        self._parser.reset()

        worker = self._worker_factory(handle, argv, parent=self)
        worker.output_received.connect(self._on_output)
        worker.exited.connect(self._on_exited)
        worker.start_failed.connect(self._on_start_failed)
        worker.finished.connect(worker.deleteLater)
        self._worker = worker

        print(f"[SUPERVISOR] Starting #{handle} → '{self._output_path}'")
        worker.start()
        return handle

    def cancel(self, handle: int | None = None) -> bool:
        """
        Ask the running process to terminate. The outcome still arrives
        through completed / failed once it has actually exited.
        Returns False if there was nothing (matching) to cancel.
        """
        if self._worker is None:
            print("[SUPERVISOR] cancel(): nothing running")
            return False
        if handle is not None and handle != self._handle:
            print(f"[SUPERVISOR] cancel(): #{handle} is not the active run (#{self._handle})")
            return False
        print(f"[SUPERVISOR] Cancelling #{self._handle}")
        self._worker.cancel()
        return True

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """
        Terminate any running process and block until its thread ends (app
        exit). A process still alive after *timeout_ms* is killed.
        """
        worker = self._worker
        if worker is None:
            return
        print(f"[SUPERVISOR] Shutting down #{self._handle}")
        worker.cancel()
        if not worker.wait(timeout_ms):
            print(f"[SUPERVISOR] #{self._handle} ignored terminate, killing")
            worker.kill()
            worker.wait(timeout_ms)

    # ── Worker slots ──────────────────────────────────────────────────────────

    @Slot(int, str)
    def _on_output(self, handle: int, text: str) -> None:
        if handle != self._handle:
            return
        self.output.emit(handle, text)
        event = self._parser.feed(text)
        if event is not None:
            self.progress.emit(handle, event)

    @Slot(int, int)
    def _on_exited(self, handle: int, code: int) -> None:
        if handle != self._handle:
            return
        output_path = self._output_path
        self._release()

        if code == 0:
            print(f"[SUPERVISOR] #{handle} ✅ completed → '{output_path}'")
            self.completed.emit(handle, output_path)
        else:
            print(f"[SUPERVISOR] #{handle} ❌ exit code {code}")
            self.failed.emit(handle, f"FFmpeg exited with code {code}")

    @Slot(int, str)
    def _on_start_failed(self, handle: int, reason: str) -> None:
        if handle != self._handle:
            return
        self._release()
        self.failed.emit(handle, f"Could not start FFmpeg: {reason}")

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _release(self) -> None:
        self._worker = None
        self._handle = None
        self._output_path = ""
