"""
Solve orchestration: the glue between a boundary (HTTP, console) and the core.

The orchestrator validates a raw request, asks the JobManager for a job, and
hands the actual search to a dispatcher without waiting for it. The caller
gets the job back immediately and polls get_job_status() afterwards.

Dispatch is pluggable. Anything with the shape dispatch(fn, *args) works:
the default starts a daemon thread, the web app passes FastAPI's
BackgroundTasks.add_task so the search starts once the 202 response has been
sent, and tests pass a function that runs the job inline.
"""

import logging
import threading
from typing import Any, Callable

from solver.constants import MAX_N, MIN_N
from solver.jobs import Job, JobManager
from solver.models import Algorithm, Mode, Progress, SolveParams
from solver.search import get_solver

_log = logging.getLogger(__name__)

Dispatch = Callable[..., Any]


class InvalidSolveRequest(ValueError):
    """A solve request failed validation; no job was created."""


def spawn_thread(fn: Callable[..., None], *args: Any) -> None:
    """Default dispatcher: run fn(*args) on a fresh daemon thread."""
    thread = threading.Thread(target=fn, args=args, daemon=True)
    thread.start()


class SolveOrchestrator:
    """
    Creates solve jobs and runs them asynchronously.

    Attributes:
        manager:  The JobManager holding every job this orchestrator created.
        max_n:    Largest board size build_params() accepts.
    """

    def __init__(
        self,
        manager: JobManager | None = None,
        dispatch: Dispatch = spawn_thread,
        max_n: int = MAX_N,
    ) -> None:
        self.manager = manager if manager is not None else JobManager()
        self.max_n = max_n
        self._dispatch = dispatch

    def build_params(self, n: Any, algorithm: Any, mode: Any) -> SolveParams:
        """
        Validate raw request values and build SolveParams.

        Raises:
            InvalidSolveRequest: With a message naming the offending field.
        """
        if n is None:
            raise InvalidSolveRequest("Validation Error: 'n' is required.")
        # JSON has one number type; 8.0 is as much an integer as 8.
        if isinstance(n, float) and n.is_integer():
            n = int(n)
        if isinstance(n, bool) or not isinstance(n, int):
            raise InvalidSolveRequest("Validation Error: 'n' must be an integer.")
        if not MIN_N <= n <= self.max_n:
            raise InvalidSolveRequest(
                f"Validation Error: 'n' must be an integer between {MIN_N} and {self.max_n}."
            )
        return SolveParams(
            n=n,
            algorithm=_parse_choice("algorithm", algorithm, Algorithm),
            mode=_parse_choice("mode", mode, Mode),
        )

    def create_solve_job(
        self,
        job_id: str,
        params: SolveParams,
        dispatch: Dispatch | None = None,
    ) -> Job:
        """
        Create a job and schedule its search without waiting for it.

        Args:
            job_id:   Fresh opaque id (the boundary generates a UUID).
            params:   Validated solve request.
            dispatch: Overrides the orchestrator's dispatcher for this call.

        Returns:
            Snapshot of the newly created, processing job.
        """
        job = self.manager.create_job(job_id, params)
        (dispatch or self._dispatch)(self.run_job, job_id, params)
        return job

    def run_job(self, job_id: str, params: SolveParams) -> None:
        """
        Run one job's search to completion and record the outcome.

        Any exception from the solver ends up as the job's error message;
        nothing propagates to the dispatcher's thread.
        """
        def on_progress(progress: Progress) -> None:
            self.manager.update_progress(
                job_id,
                {"solutions_found": progress.solutions_found, "operations": progress.operations},
            )

        try:
            solver = get_solver(params.algorithm)
            result = solver(params.n, params.mode, on_progress=on_progress)
        except Exception as exc:
            _log.exception("Search failed for job %s", job_id)
            self.manager.fail_job(job_id, str(exc))
            return

        self.manager.complete_job(job_id, result)

    def get_job_status(self, job_id: str) -> Job | None:
        """Return the job snapshot, or None if unknown or expired."""
        return self.manager.get_job(job_id)


def _parse_choice(name: str, value: Any, choices: type) -> Any:
    if value is None or value == "":
        raise InvalidSolveRequest(f"Validation Error: '{name}' is required.")
    try:
        return choices(value)
    except ValueError:
        valid = ", ".join(c.value for c in choices)
        raise InvalidSolveRequest(
            f"Validation Error: '{name}' must be one of: {valid}."
        ) from None
