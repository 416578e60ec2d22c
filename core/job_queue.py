"""
core.job_queue
~~~~~~~~~~~~~~
JobQueue holds every queued Job and feeds them, one at a time and in
insertion order, to a ProcessSupervisor.

State machine per job
---------------------
    PENDING ──advance()──► ENCODING ──exit 0──► COMPLETED
                              │
                              ├──exit ≠ 0──► FAILED   (queue pauses)
                              │
                              └──cancel + exit──► PENDING, progress 0 (queue pauses)

A cancelled job only goes back to PENDING once the process has actually
exited; until then it stays ENCODING and nothing else is started.

Signals
-------
job_added(Job)
job_removed(str)            job id
job_changed(Job)            status / progress / options changed
progress(str, ProgressEvent)
job_completed(str, str)     job id, output path
job_failed(str, str)        job id, message
running_changed(bool)       auto-advance switched on / off
busy_changed(bool)          an ffmpeg process started / exited
notice(str)                 user-facing message (e.g. queue full)
drained()                   no pending jobs left after a run
cleared()
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal, Slot

from core.command_builder import build_command, command_as_string
from core.config import Settings
from core.models import Job, JobOptions, JobStatus, ProgressEvent, TaskType
from core.paths import ffmpeg_bin
from core.supervisor import ProcessSupervisor


class JobQueue(QObject):

    job_added       = Signal(object)
    job_removed     = Signal(str)
    job_changed     = Signal(object)
    progress        = Signal(str, object)
    job_completed   = Signal(str, str)
    job_failed      = Signal(str, str)
    running_changed = Signal(bool)
    busy_changed    = Signal(bool)
    notice          = Signal(str)
    drained         = Signal()
    cleared         = Signal()

    def __init__(
        self,
        supervisor: ProcessSupervisor | None = None,
        settings: Settings | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self.settings = settings or Settings()
        self._supervisor = supervisor or ProcessSupervisor(parent=self)
        self._jobs: list[Job] = []

        self._running = False               # auto-advance enabled
        self._active_id: str | None = None  # job in ENCODING
        self._handle: int | None = None     # supervisor run we're waiting on
        self._cancel_requested = False

        self._supervisor.progress.connect(self._on_progress)
        self._supervisor.completed.connect(self._on_completed)
        self._supervisor.failed.connect(self._on_failed)

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def jobs(self) -> list[Job]:
        return list(self._jobs)

    @property
    def max_size(self) -> int:
        return self.settings.max_queue_size

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_busy(self) -> bool:
        """True while a process is live (including one being cancelled)."""
        return self._handle is not None

    @property
    def active_job(self) -> Job | None:
        return self.get(self._active_id) if self._active_id else None

    def get(self, job_id: str) -> Job | None:
        return next((j for j in self._jobs if j.id == job_id), None)

    def __len__(self) -> int:
        return len(self._jobs)

    def pending_count(self) -> int:
        return sum(1 for j in self._jobs if j.status != JobStatus.COMPLETED)

    # ── Job management ────────────────────────────────────────────────────────

    def enqueue(
        self,
        options: JobOptions,
        task_type: TaskType | None = None,
        preset_used: str | None = None,
    ) -> Job | None:
        """
        Append a new PENDING job. Returns None (and emits notice) when the
        queue is full; the queue is left untouched in that case.
        """
        task_type = task_type or options.TASK_TYPE
        if task_type != options.TASK_TYPE:
            raise TypeError(
                f"{type(options).__name__} cannot be queued as a {task_type.value} job"
            )

        if len(self._jobs) >= self.max_size:
            print(f"[QUEUE] enqueue rejected: queue full ({self.max_size})")
            self.notice.emit(
                f"Queue limit reached ({self.max_size} items maximum). "
                "Please wait for some items to complete or clear the queue."
            )
            return None

        job = Job(
            task_type=task_type,
            options=options,
            preset_used=preset_used if task_type == TaskType.ENCODE else None,
        )
        self._jobs.append(job)
        print(f"[QUEUE] enqueue: '{job.name}' ({task_type.value}) id={job.id}")
        self.job_added.emit(job)
        return job

    def update_options(
        self,
        job_id: str,
        options: JobOptions,
        preset_used: str | None = None,
    ) -> bool:
        """
        Replace the options of a PENDING or FAILED job and re-arm it.
        Running and completed jobs can't be edited.
        """
        job = self.get(job_id)
        if job is None or job.status not in (JobStatus.PENDING, JobStatus.FAILED):
            return False
        if options.TASK_TYPE != job.task_type:
            raise TypeError(
                f"{type(options).__name__} cannot replace {job.task_type.value} options"
            )
        job.options = options
        job.preset_used = preset_used if job.task_type == TaskType.ENCODE else None
        self._rearm(job)
        print(f"[QUEUE] update_options: '{job.name}'")
        self.job_changed.emit(job)
        return True

    def retry(self, job_id: str) -> bool:
        """Put a FAILED job back in line. Does not start the queue."""
        job = self.get(job_id)
        if job is None or job.status != JobStatus.FAILED:
            return False
        self._rearm(job)
        print(f"[QUEUE] retry: '{job.name}'")
        self.job_changed.emit(job)
        return True

    def remove(self, job_id: str) -> bool:
        """
        Delete a job. The active job is not deleted: its process is
        cancelled, it goes back to PENDING once ffmpeg has exited, and the
        queue pauses.
        """
        job = self.get(job_id)
        if job is None:
            return False

        if job_id == self._active_id:
            print(f"[QUEUE] remove: '{job.name}' is active — cancelling instead")
            self._cancel_active()
            self._set_running(False)
            return True

        self._jobs.remove(job)
        print(f"[QUEUE] remove: '{job.name}'")
        self.job_removed.emit(job_id)
        if not self._jobs:
            self._set_running(False)
        return True

    def clear(self) -> None:
        """Cancel whatever is running and empty the queue."""
        print(f"[QUEUE] clear: dropping {len(self._jobs)} job(s)")
        self._set_running(False)
        if self._handle is not None:
            self._cancel_active()
        self._active_id = None
        self._jobs.clear()
        self.cleared.emit()

    # ── Running ───────────────────────────────────────────────────────────────

    def advance(self) -> None:
        """
        (Re)enable auto-advance and start the first PENDING job if nothing is
        running. With nothing left to do the queue goes idle.
        """
        self._set_running(True)

        if self._handle is not None:
            # A process is still live (possibly winding down after a cancel);
            # its exit handler continues from here.
            return

        job = next((j for j in self._jobs if j.status == JobStatus.PENDING), None)
        if job is None:
            print("[QUEUE] advance: nothing pending — idle")
            self._set_running(False)
            if any(j.status == JobStatus.COMPLETED for j in self._jobs):
                self.drained.emit()
            return

        self._dispatch(job)

    start = advance

    def pause(self) -> None:
        """Stop after the current job; the running process is left alone."""
        self._set_running(False)

    def cancel_active_and_pause(self) -> None:
        """Cancel the running job (it returns to PENDING) and stop advancing."""
        self._set_running(False)
        if self._handle is not None:
            self._cancel_active()

    def shutdown(self) -> None:
        """Stop advancing and kill any running ffmpeg. Used on app exit."""
        self._set_running(False)
        self._supervisor.shutdown()

    # ── Internal: dispatch ────────────────────────────────────────────────────

    def _dispatch(self, job: Job) -> None:
        job.status = JobStatus.ENCODING
        job.progress = 0
        job.error_message = ""
        self._active_id = job.id
        self._cancel_requested = False

        cmd = build_command(
            job,
            ffmpeg_bin(self.settings.ffmpeg_path),
            self.settings.output_suffix,
        )
        print(f"[QUEUE] dispatch '{job.name}':\n  {command_as_string(cmd)}")
        self.job_changed.emit(job)
        self._handle = self._supervisor.start(cmd)
        self.busy_changed.emit(True)

    def _cancel_active(self) -> None:
        if self._handle is None:
            return
        self._cancel_requested = True
        self._supervisor.cancel(self._handle)

    # ── Supervisor slots ──────────────────────────────────────────────────────

    @Slot(int, object)
    def _on_progress(self, handle: int, event: ProgressEvent) -> None:
        if handle != self._handle or self._cancel_requested:
            return
        job = self.active_job
        if job is None:
            return
        if event.percent is not None:
            job.progress = event.percent
        self.progress.emit(job.id, event)

    @Slot(int, str)
    def _on_completed(self, handle: int, output_path: str) -> None:
        job = self._finish_run(handle)
        if job is None:
            return
        job.status = JobStatus.COMPLETED
        job.progress = 100
        job.output_path = output_path
        print(f"[QUEUE] '{job.name}' completed → '{output_path}'")
        self.job_changed.emit(job)
        self.job_completed.emit(job.id, output_path)
        self._continue()

    @Slot(int, str)
    def _on_failed(self, handle: int, message: str) -> None:
        job = self._finish_run(handle)
        if job is None:
            return
        job.status = JobStatus.FAILED
        job.error_message = message
        print(f"[QUEUE] '{job.name}' failed: {message} — pausing queue")
        self.job_changed.emit(job)
        self.job_failed.emit(job.id, message)
        self._set_running(False)

    def _finish_run(self, handle: int) -> Job | None:
        """
        Common exit bookkeeping. Returns the job whose outcome still needs
        recording, or None when the run was stale, cancelled or cleared.
        """
        if handle != self._handle:
            return None

        job = self.active_job
        cancelled = self._cancel_requested
        self._handle = None
        self._active_id = None
        self._cancel_requested = False
        self.busy_changed.emit(False)

        if job is None:
            # Queue was cleared while the process wound down
            self._continue()
            return None

        if cancelled:
            self._rearm(job)
            print(f"[QUEUE] '{job.name}' cancelled — back to pending")
            self.job_changed.emit(job)
            self._continue()
            return None

        return job

    def _continue(self) -> None:
        if self._running:
            self.advance()

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _rearm(job: Job) -> None:
        job.status = JobStatus.PENDING
        job.progress = 0
        job.error_message = ""
        job.output_path = ""

    def _set_running(self, running: bool) -> None:
        if running == self._running:
            return
        print(f"[QUEUE] running: {self._running} → {running}")
        self._running = running
        self.running_changed.emit(running)
