"""
Value types shared by the solvers, the job manager, and the boundaries.

Everything here is immutable. The solvers build these objects once per event
and hand them to callbacks; the job manager stores them on the job record and
hands snapshots back out, so no caller can mutate another caller's view.

Wire names (camelCase) only appear in the to_dict() methods. Inside Python
everything is snake_case.
"""

from dataclasses import dataclass
from enum import Enum


class Algorithm(str, Enum):
    """Search algorithm selector. Values are the wire names."""

    BACKTRACKING = "backtracking"
    BITMASK = "bitmask"


class Mode(str, Enum):
    """
    Search mode.

    FIND_FIRST stops at the first solution, FIND_ALL enumerates every
    solution board, COUNT_ALL enumerates without materializing boards.
    """

    FIND_FIRST = "findFirst"
    FIND_ALL = "findAll"
    COUNT_ALL = "countAll"


class StepKind(str, Enum):
    PLACE = "place"
    REMOVE = "remove"
    SOLUTION = "solution"


@dataclass(frozen=True)
class SolveParams:
    """The immutable solve request: board size, algorithm, and mode."""

    n: int
    algorithm: Algorithm
    mode: Mode

    def to_dict(self) -> dict:
        return {"n": self.n, "algorithm": self.algorithm.value, "mode": self.mode.value}


@dataclass(frozen=True)
class Progress:
    """
    Cumulative search progress.

    Attributes:
        solutions_found: Solutions recorded so far.
        operations:      Candidate placements examined so far. The unit differs
                         per solver (every column tried vs. every legal column
                         extracted), which is exactly what makes the two
                         counters comparable as an efficiency measure.
    """

    solutions_found: int = 0
    operations: int = 0

    def to_dict(self) -> dict:
        return {"solutionsFound": self.solutions_found, "operations": self.operations}


@dataclass(frozen=True)
class SolveResult:
    """
    Final outcome of one search.

    Attributes:
        solution_count: Number of solutions found (at most 1 for findFirst).
        solutions:      Solution boards in discovery order, each a tuple of
                        row strings ("Q" / "."). None in countAll mode.
        operations:     Total candidate placements examined.
    """

    solution_count: int
    solutions: tuple[tuple[str, ...], ...] | None
    operations: int

    def to_dict(self) -> dict:
        data: dict = {"solutionCount": self.solution_count}
        if self.solutions is not None:
            data["solutions"] = [list(board) for board in self.solutions]
        data["operations"] = self.operations
        return data


@dataclass(frozen=True)
class SolveStep:
    """
    One visualization event emitted by a solver.

    PLACE and REMOVE carry the cell and a snapshot of the board after the
    change; SOLUTION carries only the counters. The bitmask solver also sets
    mask to the row's legal-column bitset at the moment of the step.
    """

    kind: StepKind
    operations: int
    solution_count: int = 0
    row: int | None = None
    col: int | None = None
    board: tuple[str, ...] | None = None
    mask: int | None = None
