"""
Line-oriented console for the solve engine.

Reads commands from stdin and writes replies to stdout, one line per reply
(boards print one row per line). Diagnostics go to stderr so stdout stays
clean enough to pipe into another program.

Commands:
    solve <n> [algorithm] [mode]   start a job   → "job <id>"
    status <id>                    poll a job     → "status <id> <state> ..."
    show <id>                      print the boards of a completed job
    help                           list commands
    quit                           exit

Threading model:
    Jobs run on daemon threads started by the orchestrator, exactly as they
    would behind the HTTP API. The loop keeps reading stdin while searches
    run, so several jobs can be started and polled side by side.
"""

import sys
import uuid

from solver.jobs import JobStatus
from solver.models import Algorithm, Mode
from solver.orchestrator import InvalidSolveRequest, SolveOrchestrator

HELP_LINES = (
    "solve <n> [backtracking|bitmask] [findFirst|findAll|countAll]",
    "status <id>",
    "show <id>",
    "help",
    "quit",
)


def _send(line: str) -> None:
    """Write a reply line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str) -> None:
    """Write a diagnostic line to stderr."""
    print(message, file=sys.stderr, flush=True)


class ConsoleHandler:
    """
    Stateful handler for the console protocol.

    Attributes:
        orchestrator: Creates and tracks the jobs started from this console.
    """

    def __init__(self, orchestrator: SolveOrchestrator | None = None) -> None:
        self.orchestrator = orchestrator if orchestrator is not None else SolveOrchestrator()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_solve(self, tokens: list[str]) -> None:
        """
        Parse "solve <n> [algorithm] [mode]" and start a job.

        Algorithm defaults to bitmask and mode to findFirst, the cheapest
        combination, so "solve 8" always answers quickly.
        """
        if not tokens:
            _log("solve: missing board size")
            return
        try:
            n = int(tokens[0])
        except ValueError:
            _log(f"solve: board size must be an integer, got {tokens[0]!r}")
            return
        algorithm = tokens[1] if len(tokens) > 1 else Algorithm.BITMASK.value
        mode = tokens[2] if len(tokens) > 2 else Mode.FIND_FIRST.value

        try:
            params = self.orchestrator.build_params(n, algorithm, mode)
        except InvalidSolveRequest as e:
            _log(f"solve: {e}")
            return

        job_id = str(uuid.uuid4())
        self.orchestrator.create_solve_job(job_id, params)
        _send(f"job {job_id}")

    def handle_status(self, tokens: list[str]) -> None:
        """Print one status line for a job."""
        job = self._lookup(tokens)
        if job is None:
            return

        if job.status is JobStatus.PROCESSING:
            detail = (
                f"solutions {job.progress.solutions_found} "
                f"operations {job.progress.operations}"
            )
        elif job.status is JobStatus.COMPLETED:
            detail = (
                f"solutions {job.result.solution_count} "
                f"operations {job.result.operations}"
            )
        else:
            detail = f"error {job.error}"
        _send(f"status {job.job_id} {job.status.value} {detail}")

    def handle_show(self, tokens: list[str]) -> None:
        """Print every solution board of a completed job, blank line between boards."""
        job = self._lookup(tokens)
        if job is None:
            return
        if job.status is not JobStatus.COMPLETED:
            _log(f"show: job {job.job_id} is {job.status.value}")
            return
        if job.result.solutions is None:
            _log(f"show: job {job.job_id} only counted solutions")
            return

        for index, board in enumerate(job.result.solutions):
            if index:
                _send("")
            for row in board:
                _send(row)

    def handle_help(self) -> None:
        for line in HELP_LINES:
            _send(line)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _lookup(self, tokens: list[str]):
        if not tokens:
            _log("missing job id")
            return None
        job = self.orchestrator.get_job_status(tokens[0])
        if job is None:
            _log(f"Job with ID '{tokens[0]}' not found.")
        return job


def run_console_loop(handler: ConsoleHandler | None = None, stream=None) -> None:
    """
    Main console loop.

    Reads lines until "quit" or end of input. Each command runs inside a
    try/except so that one bad command is reported and the loop carries on.
    """
    handler = handler if handler is not None else ConsoleHandler()
    stream = stream if stream is not None else sys.stdin

    for raw_line in stream:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0].lower()
        args = tokens[1:]

        try:
            if command == "solve":
                handler.handle_solve(args)
            elif command == "status":
                handler.handle_status(args)
            elif command == "show":
                handler.handle_show(args)
            elif command == "help":
                handler.handle_help()
            elif command == "quit":
                break
            else:
                _log(f"ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"unhandled error for command {command!r}: {e}")


if __name__ == "__main__":
    run_console_loop()
