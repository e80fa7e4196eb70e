"""SolveOrchestrator: validation, dispatch, and failure funnelling."""

import time

import pytest

from solver.jobs import JobManager, JobStatus
from solver.models import Algorithm, Mode, SolveParams
from solver.orchestrator import InvalidSolveRequest, SolveOrchestrator
from tests.conftest import run_inline


@pytest.fixture
def orchestrator(manager):
    return SolveOrchestrator(manager=manager, dispatch=run_inline, max_n=15)


def test_build_params(orchestrator):
    assert orchestrator.build_params(8, "bitmask", "countAll") == SolveParams(
        8, Algorithm.BITMASK, Mode.COUNT_ALL
    )


@pytest.mark.parametrize(
    "n,algorithm,mode,message",
    [
        (None, "bitmask", "findAll", "'n' is required"),
        ("8", "bitmask", "findAll", "'n' must be an integer."),
        (8.5, "bitmask", "findAll", "'n' must be an integer."),
        (True, "bitmask", "findAll", "'n' must be an integer."),
        (0, "bitmask", "findAll", "between 1 and 15"),
        (16, "bitmask", "findAll", "between 1 and 15"),
        (8, None, "findAll", "'algorithm' is required"),
        (8, "annealing", "findAll", "'algorithm' must be one of: backtracking, bitmask."),
        (8, "bitmask", "", "'mode' is required"),
        (8, "bitmask", "findSome", "'mode' must be one of: findFirst, findAll, countAll."),
    ],
)
def test_build_params_rejects(orchestrator, n, algorithm, mode, message):
    with pytest.raises(InvalidSolveRequest, match=message):
        orchestrator.build_params(n, algorithm, mode)


def test_build_params_accepts_integral_float(orchestrator):
    params = orchestrator.build_params(8.0, "bitmask", "countAll")
    assert params.n == 8
    assert isinstance(params.n, int)


def test_max_n_is_configurable(manager):
    small = SolveOrchestrator(manager=manager, dispatch=run_inline, max_n=8)
    with pytest.raises(InvalidSolveRequest, match="between 1 and 8"):
        small.build_params(9, "bitmask", "countAll")


def test_create_solve_job_runs_to_completion(orchestrator):
    params = SolveParams(6, Algorithm.BACKTRACKING, Mode.FIND_ALL)
    orchestrator.create_solve_job("a", params)

    job = orchestrator.get_job_status("a")
    assert job.status is JobStatus.COMPLETED
    assert job.result.solution_count == 4
    assert len(job.result.solutions) == 4


def test_create_returns_processing_snapshot(manager):
    dispatched = []
    orchestrator = SolveOrchestrator(manager=manager, dispatch=lambda fn, *args: dispatched.append((fn, args)))
    job = orchestrator.create_solve_job("a", SolveParams(4, Algorithm.BITMASK, Mode.FIND_FIRST))

    assert job.status is JobStatus.PROCESSING
    assert orchestrator.get_job_status("a").status is JobStatus.PROCESSING
    assert len(dispatched) == 1

    fn, args = dispatched[0]
    fn(*args)
    assert orchestrator.get_job_status("a").status is JobStatus.COMPLETED


def test_per_call_dispatch_override(orchestrator):
    calls = []
    orchestrator.create_solve_job(
        "a",
        SolveParams(4, Algorithm.BITMASK, Mode.FIND_FIRST),
        dispatch=lambda fn, *args: calls.append(args),
    )
    assert calls == [("a", SolveParams(4, Algorithm.BITMASK, Mode.FIND_FIRST))]
    assert orchestrator.get_job_status("a").status is JobStatus.PROCESSING


def test_progress_reaches_job_while_running(manager):
    seen = []

    def dispatch(fn, *args):
        original = manager.update_progress

        def spy(job_id, partial):
            original(job_id, partial)
            seen.append(manager.get_job(job_id).progress)

        manager.update_progress = spy
        fn(*args)

    orchestrator = SolveOrchestrator(manager=manager, dispatch=dispatch)
    orchestrator.create_solve_job("a", SolveParams(8, Algorithm.BACKTRACKING, Mode.COUNT_ALL))

    assert [p.solutions_found for p in seen] == [10, 20, 30, 40, 50, 60, 70, 80, 90]
    job = orchestrator.get_job_status("a")
    assert job.status is JobStatus.COMPLETED
    # Progress stays as the last update left it.
    assert job.progress.solutions_found == 90


def test_solver_error_becomes_failed_job(orchestrator):
    # Bypass build_params to get a board size the solver itself rejects.
    orchestrator.create_solve_job("bad", SolveParams(0, Algorithm.BITMASK, Mode.FIND_ALL))

    job = orchestrator.get_job_status("bad")
    assert job.status is JobStatus.FAILED
    assert "positive integer" in job.error


def test_unexpected_exception_becomes_failed_job(orchestrator, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("solver exploded")

    monkeypatch.setattr("solver.orchestrator.get_solver", lambda algorithm: explode)
    orchestrator.create_solve_job("a", SolveParams(4, Algorithm.BITMASK, Mode.FIND_ALL))
    job = orchestrator.get_job_status("a")
    assert job.status is JobStatus.FAILED
    assert job.error == "solver exploded"


def test_unknown_job_status(orchestrator):
    assert orchestrator.get_job_status("missing") is None


def test_default_dispatch_runs_on_a_thread():
    orchestrator = SolveOrchestrator(manager=JobManager(timeout_s=30))
    orchestrator.create_solve_job("a", SolveParams(8, Algorithm.BITMASK, Mode.COUNT_ALL))

    deadline = time.monotonic() + 5.0
    while orchestrator.get_job_status("a").status is JobStatus.PROCESSING:
        assert time.monotonic() < deadline
        time.sleep(0.01)
    assert orchestrator.get_job_status("a").result.solution_count == 92
