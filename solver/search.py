"""
Solve entry point: the stable interface the orchestrator, the console, and
the benchmark depend on.

solve() has the same signature for every algorithm; only the function it
dispatches to changes. Adding an algorithm means adding a module with a
matching solve() and one entry in _SOLVERS.
"""

from typing import Callable

from solver import backtracking, bitmask
from solver.models import Algorithm, Mode, SolveResult
from solver.state import ProgressSink, StepSink

SolverFn = Callable[..., SolveResult]

_SOLVERS: dict[Algorithm, SolverFn] = {
    Algorithm.BACKTRACKING: backtracking.solve,
    Algorithm.BITMASK: bitmask.solve,
}


def get_solver(algorithm: Algorithm | str) -> SolverFn:
    """
    Look up the solve function for an algorithm.

    Raises:
        ValueError: Unknown algorithm name.
    """
    try:
        return _SOLVERS[Algorithm(algorithm)]
    except ValueError:
        valid = ", ".join(a.value for a in Algorithm)
        raise ValueError(
            f"Unknown algorithm {algorithm!r}; expected one of: {valid}"
        ) from None


def solve(
    n: int,
    algorithm: Algorithm | str = Algorithm.BITMASK,
    mode: Mode | str = Mode.FIND_ALL,
    on_progress: ProgressSink | None = None,
    on_step: StepSink | None = None,
) -> SolveResult:
    """Run the selected solver synchronously and return its result."""
    return get_solver(algorithm)(n, mode, on_progress=on_progress, on_step=on_step)
