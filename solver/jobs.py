"""
Job lifecycle manager: the in-memory table of solve jobs.

A job is created in the processing state, receives progress updates from its
running solver, and ends in exactly one of two terminal states:

    processing ──complete_job──▶ completed
        │
        └──────fail_job────────▶ failed      (solver error or timeout)

Nothing leaves a terminal state. In particular a solver that finishes after
its job has already timed out cannot flip it back to completed; the late
result is simply dropped.

Threading model:
    The table is touched from three places at once: request handlers
    creating and polling jobs, solver threads reporting progress and
    results, and timer threads firing timeouts. Every read and every
    check-and-set transition happens under one re-entrant lock, which makes
    the completion/timeout race safe in either order.

Time is injected. The manager never calls time.time() or starts a timer
directly; it asks its clock and its scheduler, so tests can drive timeouts
and retention without sleeping.

Failure policy:
    Apart from a duplicate id on create_job, nothing here raises. Updates,
    completions, and failures for unknown or already-finished jobs are
    silent no-ops because progress callbacks and timeouts legitimately race
    with each other and with the retention sweep.
"""

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

from solver.constants import JOB_RETENTION_S, JOB_TIMEOUT_S, TIMEOUT_MESSAGE
from solver.models import Progress, SolveParams, SolveResult

_log = logging.getLogger(__name__)

_PROGRESS_FIELDS = frozenset(f.name for f in dataclasses.fields(Progress))


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DuplicateJobError(ValueError):
    """Raised by create_job when the id is already in the table."""


@dataclass
class Job:
    """
    One solve request's tracked lifecycle record.

    Attributes:
        job_id:       Opaque identifier supplied by the caller.
        params:       The solve request; never changes.
        status:       processing, completed, or failed.
        progress:     Cumulative progress; frozen once the job is terminal.
        result:       Set only when completed.
        error:        Set only when failed.
        created_at:   Clock reading at creation (seconds).
        completed_at: Clock reading at the terminal transition, else None.
    """

    job_id: str
    params: SolveParams
    status: JobStatus = JobStatus.PROCESSING
    progress: Progress = field(default_factory=Progress)
    result: SolveResult | None = None
    error: str | None = None
    created_at: float = 0.0
    completed_at: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not JobStatus.PROCESSING

    def to_dict(self) -> dict:
        """
        Boundary snapshot: jobId, status, and the one payload field that
        matches the status (progress, result, or error).
        """
        data: dict[str, Any] = {"jobId": self.job_id, "status": self.status.value}
        if self.status is JobStatus.PROCESSING:
            data["progress"] = self.progress.to_dict()
        elif self.status is JobStatus.COMPLETED and self.result is not None:
            data["result"] = self.result.to_dict()
        elif self.status is JobStatus.FAILED:
            data["error"] = self.error
        return data


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Delayed-call abstraction: run callback(*args) after delay seconds."""

    def call_later(self, delay: float, callback: Callable[..., None], *args: Any) -> TimerHandle: ...


class ThreadTimerScheduler:
    """Scheduler backed by daemon threading.Timer objects."""

    def call_later(self, delay: float, callback: Callable[..., None], *args: Any) -> threading.Timer:
        timer = threading.Timer(delay, callback, args=args)
        # Daemon so a pending timeout never keeps the process alive on shutdown.
        timer.daemon = True
        timer.start()
        return timer


class JobManager:
    """
    Owns the job table, the per-job timeouts, and the retention sweep.

    Args:
        timeout_s:   How long a job may stay processing before it is failed.
        retention_s: How long a terminal job stays visible after completing.
        clock:       Returns the current time in seconds.
        scheduler:   Arms timeouts. Defaults to ThreadTimerScheduler.
    """

    def __init__(
        self,
        timeout_s: float = JOB_TIMEOUT_S,
        retention_s: float = JOB_RETENTION_S,
        clock: Callable[[], float] = time.time,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.retention_s = retention_s
        self._clock = clock
        self._scheduler: Scheduler = scheduler if scheduler is not None else ThreadTimerScheduler()
        self._lock = threading.RLock()
        self._jobs: dict[str, Job] = {}
        self._timers: dict[str, TimerHandle] = {}

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def create_job(self, job_id: str, params: SolveParams) -> Job:
        """
        Register a new processing job and arm its timeout.

        Also sweeps out terminal jobs past their retention window; job
        creation is the only place that happens, so no background thread is
        needed to bound memory.

        Raises:
            DuplicateJobError: job_id is already in the table.
        """
        with self._lock:
            if job_id in self._jobs:
                raise DuplicateJobError(f"Job with ID '{job_id}' already exists")

            now = self._clock()
            self._sweep(now)

            job = Job(job_id=job_id, params=params, created_at=now)
            self._jobs[job_id] = job
            self._timers[job_id] = self._scheduler.call_later(
                self.timeout_s, self._on_timeout, job_id
            )

            _log.info(
                "Job %s created: n=%d algorithm=%s mode=%s",
                job_id,
                params.n,
                params.algorithm.value,
                params.mode.value,
            )
            return dataclasses.replace(job)

    def update_progress(self, job_id: str, partial: Mapping[str, int]) -> None:
        """
        Merge progress fields into a processing job.

        Keys other than solutions_found and operations are ignored, and
        fields missing from partial keep their current value.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.is_terminal:
                return
            changes = {k: v for k, v in partial.items() if k in _PROGRESS_FIELDS}
            if changes:
                job.progress = dataclasses.replace(job.progress, **changes)

    def complete_job(self, job_id: str, result: SolveResult) -> None:
        """Move a processing job to completed with its result."""
        with self._lock:
            job = self._finish(job_id, JobStatus.COMPLETED)
            if job is None:
                return
            job.result = result
            _log.info("Job %s completed: %d solutions", job_id, result.solution_count)

    def fail_job(self, job_id: str, message: str) -> None:
        """Move a processing job to failed with a human-readable message."""
        with self._lock:
            job = self._finish(job_id, JobStatus.FAILED)
            if job is None:
                return
            job.error = message
            _log.warning("Job %s failed: %s", job_id, message)

    def get_job(self, job_id: str) -> Job | None:
        """
        Return a snapshot of the job, or None if unknown or expired.

        A terminal job past its retention window is evicted here too, so a
        stale result is never served just because no new job has been
        created since it expired.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if self._is_expired(job, self._clock()):
                self._evict(job_id)
                return None
            return dataclasses.replace(job)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    # -----------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # -----------------------------------------------------------------------

    def _finish(self, job_id: str, status: JobStatus) -> Job | None:
        """
        Check-and-set a processing job to a terminal status.

        Returns the job for the caller to attach its payload, or None when
        the job is gone or already terminal.
        """
        job = self._jobs.get(job_id)
        if job is None or job.is_terminal:
            return None
        job.status = status
        job.completed_at = self._clock()
        timer = self._timers.pop(job_id, None)
        if timer is not None:
            timer.cancel()
        return job

    def _on_timeout(self, job_id: str) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.is_terminal:
                return
            self.fail_job(job_id, TIMEOUT_MESSAGE)

    def _is_expired(self, job: Job, now: float) -> bool:
        return job.completed_at is not None and now - job.completed_at > self.retention_s

    def _sweep(self, now: float) -> None:
        expired = [job_id for job_id, job in self._jobs.items() if self._is_expired(job, now)]
        for job_id in expired:
            self._evict(job_id)
        if expired:
            _log.info("Swept %d expired jobs", len(expired))

    def _evict(self, job_id: str) -> None:
        self._jobs.pop(job_id, None)
        timer = self._timers.pop(job_id, None)
        if timer is not None:
            timer.cancel()
