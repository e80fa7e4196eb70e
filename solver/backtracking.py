"""
Classic recursive backtracking with set-based conflict checks.

Queens are placed one row at a time. For each row the search tries every
column from left to right and keeps a queen only if its column and both of
its diagonals are still free. Three sets track the occupied lines:

    cols  : column index
    diag1 : row - col   (constant along a "\\" diagonal)
    diag2 : row + col   (constant along a "/" diagonal)

Set membership makes each safety test O(1) on average, but every column of
every visited row is still examined, even the ones an earlier queen already
rules out. That is the cost the bitmask solver avoids, and the operations
counter here makes it visible: it increments once per column examined,
whether or not the column turns out to be safe.

Discovery order is deterministic: leftmost column first at every decision,
so findAll returns solutions in lexicographic order of their column vectors.
"""

from dataclasses import dataclass, field

from solver.constants import BACKTRACKING_PROGRESS_EVERY, EMPTY, QUEEN
from solver.models import Mode, SolveResult, StepKind
from solver.state import (
    ProgressSink,
    SearchState,
    StepSink,
    check_inputs,
    emit_cell_step,
    record_solution,
    to_result,
)


@dataclass
class BacktrackState(SearchState):
    """SearchState plus the three conflict sets."""

    cols: set[int] = field(default_factory=set)
    diag1: set[int] = field(default_factory=set)
    diag2: set[int] = field(default_factory=set)


def _is_safe(state: BacktrackState, row: int, col: int) -> bool:
    state.operations += 1
    return (
        col not in state.cols
        and (row - col) not in state.diag1
        and (row + col) not in state.diag2
    )


def _place(state: BacktrackState, row: int, col: int) -> None:
    state.board[row][col] = QUEEN
    state.cols.add(col)
    state.diag1.add(row - col)
    state.diag2.add(row + col)
    emit_cell_step(state, StepKind.PLACE, row, col)


def _remove(state: BacktrackState, row: int, col: int) -> None:
    state.board[row][col] = EMPTY
    state.cols.discard(col)
    state.diag1.discard(row - col)
    state.diag2.discard(row + col)
    emit_cell_step(state, StepKind.REMOVE, row, col)


def _backtrack(state: BacktrackState, row: int) -> bool:
    """
    Fill rows row..n-1.

    Returns:
        True once the search must stop (first solution in findFirst mode).
        The True propagates straight up the recursion without undoing the
        board, which is harmless: the board is discarded with the state.
    """
    if row == state.n:
        return record_solution(state)

    for col in range(state.n):
        if _is_safe(state, row, col):
            _place(state, row, col)
            if _backtrack(state, row + 1):
                return True
            _remove(state, row, col)

    return False


def solve(
    n: int,
    mode: Mode | str = Mode.FIND_ALL,
    on_progress: ProgressSink | None = None,
    on_step: StepSink | None = None,
) -> SolveResult:
    """
    Solve N-Queens by set-based backtracking.

    Args:
        n:           Board size (positive integer; upper bound is the caller's).
        mode:        findFirst, findAll, or countAll.
        on_progress: Called with cumulative Progress every 10th solution.
        on_step:     Called with a SolveStep on every place, remove, and
                     solution. Building board snapshots is not free, so leave
                     it None unless something is actually animating.

    Returns:
        SolveResult with the count, the boards (None for countAll), and the
        number of columns examined.

    Raises:
        ValueError: n is not a positive integer or mode is unknown.
    """
    mode = check_inputs(n, mode)
    state = BacktrackState(
        n=n,
        mode=mode,
        on_progress=on_progress,
        on_step=on_step,
        progress_every=BACKTRACKING_PROGRESS_EVERY,
    )
    _backtrack(state, 0)
    return to_result(state)
