#!/usr/bin/env python3
"""
Benchmark: compare operations and wall time of the two solvers.

Runs both algorithms in countAll mode over a fixed range of board sizes and
prints solutions, operations (candidate placements examined), elapsed time,
and operations per second. The last column is the ratio of backtracking to
bitmask operations: how many candidates the bitmask solver never had to look
at.

Run before and after touching either solver; the solution counts must not
change and the operation counts only change if the search order did.

Usage (from the repo root): python3 -m tools.bench [max_n]
"""
import sys
import time

from solver.models import Algorithm, Mode
from solver.search import solve

# Board sizes measured by default. 4..11 finishes in seconds for both solvers.
DEFAULT_SIZES = range(4, 12)


def run_size(n: int, algorithm: Algorithm) -> dict:
    """Run one countAll search and return its metrics.

    Args:
        n: Board size.
        algorithm: Which solver to run.

    Returns:
        Dict with keys: solutions, operations, time_ms, ops_per_s.
    """
    start = time.perf_counter()
    result = solve(n, algorithm, Mode.COUNT_ALL)
    elapsed_ms = max(1e-3, (time.perf_counter() - start) * 1000)
    return {
        "solutions": result.solution_count,
        "operations": result.operations,
        "time_ms": elapsed_ms,
        "ops_per_s": int(result.operations * 1000 / elapsed_ms),
    }


def main() -> None:
    """Run every board size through both solvers and print a summary table."""
    sizes = DEFAULT_SIZES
    if len(sys.argv) > 1:
        sizes = range(4, int(sys.argv[1]) + 1)

    print(f"N-Queens solver benchmark ({sys.executable})")
    print()
    print(
        f"{'N':>3} {'Solutions':>10} "
        f"{'BT ops':>12} {'BT ms':>9} {'BT ops/s':>11} "
        f"{'BM ops':>12} {'BM ms':>9} {'BM ops/s':>11} {'Ratio':>6}"
    )
    print("-" * 92)

    for n in sizes:
        bt = run_size(n, Algorithm.BACKTRACKING)
        bm = run_size(n, Algorithm.BITMASK)
        if bt["solutions"] != bm["solutions"]:
            print(f"MISMATCH at n={n}: {bt['solutions']} vs {bm['solutions']}", file=sys.stderr)
        ratio = bt["operations"] / bm["operations"] if bm["operations"] else 0.0
        print(
            f"{n:>3} {bm['solutions']:>10,} "
            f"{bt['operations']:>12,} {bt['time_ms']:>9.1f} {bt['ops_per_s']:>11,} "
            f"{bm['operations']:>12,} {bm['time_ms']:>9.1f} {bm['ops_per_s']:>11,} "
            f"{ratio:>6.2f}"
        )


if __name__ == "__main__":
    main()
