"""
Properties both solvers must satisfy: known counts, valid boards, mode
semantics, agreement with each other, and the operation-count gap.
"""

import pytest

from solver import backtracking, bitmask
from solver.models import Algorithm, Mode
from solver.search import get_solver, solve

SOLVERS = [backtracking.solve, bitmask.solve]
KNOWN_COUNTS = {1: 1, 2: 0, 3: 0, 4: 2, 5: 10, 6: 4, 7: 40, 8: 92}


def assert_valid_board(board, n):
    assert len(board) == n
    queens = []
    for row, line in enumerate(board):
        assert len(line) == n
        assert set(line) <= {"Q", "."}
        assert line.count("Q") == 1
        queens.append((row, line.index("Q")))
    cols = [c for _, c in queens]
    assert len(set(cols)) == n
    assert len({r - c for r, c in queens}) == n
    assert len({r + c for r, c in queens}) == n


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("n,expected", sorted(KNOWN_COUNTS.items()))
def test_known_counts(solver, n, expected):
    result = solver(n, Mode.COUNT_ALL)
    assert result.solution_count == expected
    assert result.solutions is None


@pytest.mark.parametrize("n", range(1, 11))
def test_count_all_agrees_between_solvers(n):
    bt = backtracking.solve(n, Mode.COUNT_ALL)
    bm = bitmask.solve(n, Mode.COUNT_ALL)
    assert bt.solution_count == bm.solution_count


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("n", [1, 4, 5, 6, 8])
def test_find_all_boards_are_valid(solver, n):
    result = solver(n, Mode.FIND_ALL)
    assert result.solution_count == len(result.solutions) == KNOWN_COUNTS[n]
    for board in result.solutions:
        assert_valid_board(board, n)
    assert len(set(result.solutions)) == len(result.solutions)


@pytest.mark.parametrize("solver", SOLVERS)
def test_find_all_order_is_leftmost_first(solver):
    result = solver(4, "findAll")
    assert result.solutions == (
        (".Q..", "...Q", "Q...", "..Q."),
        ("..Q.", "Q...", "...Q", ".Q.."),
    )


def test_find_all_order_matches_between_solvers():
    assert backtracking.solve(8, Mode.FIND_ALL).solutions == bitmask.solve(8, Mode.FIND_ALL).solutions


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("n", [1, 4, 5, 8, 10])
def test_find_first_returns_one_solution(solver, n):
    result = solver(n, Mode.FIND_FIRST)
    assert result.solution_count == 1
    assert len(result.solutions) == 1
    assert_valid_board(result.solutions[0], n)


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("n", [2, 3])
def test_find_first_on_impossible_board_returns_nothing(solver, n):
    result = solver(n, Mode.FIND_FIRST)
    assert result.solution_count == 0
    assert result.solutions == ()


@pytest.mark.parametrize("solver", SOLVERS)
def test_find_first_is_first_of_find_all(solver):
    assert solver(8, Mode.FIND_FIRST).solutions[0] == solver(8, Mode.FIND_ALL).solutions[0]


def test_find_first_stops_early():
    first = backtracking.solve(8, Mode.FIND_FIRST)
    full = backtracking.solve(8, Mode.COUNT_ALL)
    assert first.operations < full.operations


def test_operations_small_boards():
    # n=2: each of the two first-row columns is examined, then both
    # second-row columns are rejected under it.
    assert backtracking.solve(2, Mode.COUNT_ALL).operations == 6
    # The bitmask solver only ever visits the two legal first-row columns.
    assert bitmask.solve(2, Mode.COUNT_ALL).operations == 2
    assert backtracking.solve(1, Mode.COUNT_ALL).operations == 1
    assert bitmask.solve(1, Mode.COUNT_ALL).operations == 1


@pytest.mark.parametrize("n", range(6, 11))
def test_bitmask_examines_fewer_candidates(n):
    bt = backtracking.solve(n, Mode.COUNT_ALL)
    bm = bitmask.solve(n, Mode.COUNT_ALL)
    assert bt.operations > bm.operations


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("n", [0, -3, 2.5, "8", True])
def test_rejects_bad_board_size(solver, n):
    with pytest.raises(ValueError):
        solver(n, Mode.COUNT_ALL)


@pytest.mark.parametrize("solver", SOLVERS)
def test_rejects_unknown_mode(solver):
    with pytest.raises(ValueError, match="Unknown mode"):
        solver(4, "findSome")


def test_get_solver_dispatch():
    assert get_solver(Algorithm.BACKTRACKING) is backtracking.solve
    assert get_solver("bitmask") is bitmask.solve
    with pytest.raises(ValueError, match="Unknown algorithm"):
        get_solver("annealing")


def test_search_entry_point():
    result = solve(6, "backtracking", "countAll")
    assert result.solution_count == 4
    assert result.to_dict() == {"solutionCount": 4, "operations": result.operations}


def test_result_to_dict_includes_boards():
    data = solve(4, Algorithm.BITMASK, Mode.FIND_FIRST).to_dict()
    assert data["solutionCount"] == 1
    assert data["solutions"] == [[".Q..", "...Q", "Q...", "..Q."]]
