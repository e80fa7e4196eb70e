"""
Backtracking with integer bitmasks for conflict tracking.

Same search as solver.backtracking, but the three occupied-line sets become
three integers where bit i stands for column i of the current row:

    cols  : columns already holding a queen
    diag1 : squares attacked along diagonals running toward higher columns
    diag2 : squares attacked along diagonals running toward lower columns

Moving down one row, a diagonal's attacked square moves one column over, so
diag1 shifts left and diag2 shifts right before being passed to the next
row. Bits pushed past column n-1 are harmless: they are masked away by
`full` when the legal set is computed. Python integers never overflow, so
this works for any board size the boundary allows.

The legal columns of a row come out of a single expression,

    available = full & ~(cols | diag1 | diag2)

and the loop only ever visits those, lowest bit (leftmost column) first.
operations counts extracted candidates, so for the same board it is always
lower than the set-based solver's count of every column examined.
"""

from dataclasses import dataclass

from solver.constants import BITMASK_PROGRESS_EVERY, EMPTY, QUEEN
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
class BitmaskState(SearchState):
    """
    SearchState plus the all-columns mask.

    The three occupancy masks are not stored here: they are passed by value
    down the recursion, so each frame holds its own copy and backtracking
    needs no undo step for them.
    """

    full: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        self.full = (1 << self.n) - 1


def _column_of(bit: int) -> int:
    """Column index of a single set bit, counted from the least-significant end."""
    return bit.bit_length() - 1


def _search(state: BitmaskState, row: int, cols: int, diag1: int, diag2: int) -> bool:
    if row == state.n:
        return record_solution(state)

    available = state.full & ~(cols | diag1 | diag2)

    while available:
        state.operations += 1

        bit = available & -available
        col = _column_of(bit)

        state.board[row][col] = QUEEN
        emit_cell_step(state, StepKind.PLACE, row, col, mask=available)

        if _search(
            state,
            row + 1,
            cols | bit,
            (diag1 | bit) << 1,
            (diag2 | bit) >> 1,
        ):
            return True

        state.board[row][col] = EMPTY
        emit_cell_step(state, StepKind.REMOVE, row, col, mask=available)

        available &= available - 1

    return False


def solve(
    n: int,
    mode: Mode | str = Mode.FIND_ALL,
    on_progress: ProgressSink | None = None,
    on_step: StepSink | None = None,
) -> SolveResult:
    """
    Solve N-Queens by bitmask backtracking.

    Same contract as solver.backtracking.solve(), except that progress is
    reported every 100th solution and step events carry the row's legal
    column mask.
    """
    mode = check_inputs(n, mode)
    state = BitmaskState(
        n=n,
        mode=mode,
        on_progress=on_progress,
        on_step=on_step,
        progress_every=BITMASK_PROGRESS_EVERY,
    )
    _search(state, 0, 0, 0, 0)
    return to_result(state)
