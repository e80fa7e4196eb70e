"""
N-Queens solve engine package.

This package implements two exhaustive constraint-search solvers for the
N-Queens problem and the job lifecycle manager that runs them off the
request path.

Modules:
    constants   : Board limits, progress cadences, job timing, boundary config
    models      : Enums and immutable value types (params, progress, results, steps)
    state       : Per-invocation search state shared by both solvers
    backtracking: Row-by-row search with set-based conflict checks
    bitmask     : Row-by-row search with integer bitmask conflict checks
    search      : Stable solve() entry point dispatching on the algorithm
    jobs        : JobManager: job table, timeouts, retention sweep
    orchestrator: Validates requests, creates jobs, runs solvers asynchronously
"""
