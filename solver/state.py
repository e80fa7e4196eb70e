"""
Per-invocation search state and the bookkeeping both solvers share.

Each call to a solver builds its own SearchState and threads it through the
recursion by reference. Nothing here is module-level or captured in a
closure, so two searches running at the same time on different threads never
see each other's board or counters.

The helpers below cover what the two algorithms do identically: validating
their inputs, recording a solution, and building step events. Conflict
tracking is the part that differs, and it lives in the solver modules.
"""

from dataclasses import dataclass, field
from typing import Callable

from solver.constants import EMPTY
from solver.models import Mode, Progress, SolveResult, SolveStep, StepKind

ProgressSink = Callable[[Progress], None]
StepSink = Callable[[SolveStep], None]


@dataclass
class SearchState:
    """
    Mutable state owned by one running search.

    Attributes:
        n:              Board size.
        mode:           Search mode; decides whether boards are materialized
                        and whether the first solution ends the search.
        on_progress:    Optional sink called every progress_every solutions.
        on_step:        Optional sink called on every place/remove/solution.
        progress_every: Progress cadence in solutions (solver-specific).
        board:          n rows of n cells, QUEEN or EMPTY.
        solutions:      Recorded boards, or None in countAll mode.
        solution_count: Solutions found so far.
        operations:     Candidate placements examined so far.
    """

    n: int
    mode: Mode
    on_progress: ProgressSink | None = None
    on_step: StepSink | None = None
    progress_every: int = 1
    board: list[list[str]] = field(default_factory=list)
    solutions: list[tuple[str, ...]] | None = None
    solution_count: int = 0
    operations: int = 0

    def __post_init__(self) -> None:
        if not self.board:
            self.board = [[EMPTY] * self.n for _ in range(self.n)]
        if self.solutions is None and self.mode is not Mode.COUNT_ALL:
            self.solutions = []


def check_inputs(n: int, mode: Mode | str) -> Mode:
    """
    Validate solver arguments and normalize the mode.

    Upper bounds on n are the caller's business; the solvers only reject
    values that make no sense as a board.

    Raises:
        ValueError: n is not a positive integer, or mode is unknown.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise ValueError(f"Board size must be a positive integer, got {n!r}")
    try:
        return Mode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in Mode)
        raise ValueError(f"Unknown mode {mode!r}; expected one of: {valid}") from None


def snapshot(board: list[list[str]]) -> tuple[str, ...]:
    """Serialize the board row-major as one string per row."""
    return tuple("".join(row) for row in board)


def record_solution(state: SearchState) -> bool:
    """
    Record that the board currently holds a full solution.

    Returns:
        True if the search should stop (findFirst), False to keep going.
    """
    state.solution_count += 1

    # countAll never materializes boards; the counter is the whole result.
    if state.solutions is not None:
        state.solutions.append(snapshot(state.board))

    if state.on_progress is not None and state.solution_count % state.progress_every == 0:
        state.on_progress(
            Progress(solutions_found=state.solution_count, operations=state.operations)
        )

    if state.on_step is not None:
        state.on_step(
            SolveStep(
                kind=StepKind.SOLUTION,
                operations=state.operations,
                solution_count=state.solution_count,
            )
        )

    return state.mode is Mode.FIND_FIRST


def emit_cell_step(
    state: SearchState,
    kind: StepKind,
    row: int,
    col: int,
    mask: int | None = None,
) -> None:
    """Send a PLACE/REMOVE event with a board snapshot, if anyone is listening."""
    if state.on_step is None:
        return
    state.on_step(
        SolveStep(
            kind=kind,
            operations=state.operations,
            solution_count=state.solution_count,
            row=row,
            col=col,
            board=snapshot(state.board),
            mask=mask,
        )
    )


def to_result(state: SearchState) -> SolveResult:
    """Freeze the final state into a SolveResult."""
    solutions = tuple(state.solutions) if state.solutions is not None else None
    return SolveResult(
        solution_count=state.solution_count,
        solutions=solutions,
        operations=state.operations,
    )
