"""
Solver constants: board limits, progress cadences, and job timing.

All numeric constants used by the solvers, the job manager, and the HTTP
boundary are defined here. A handful can be overridden through environment
variables, read once at import time; the core itself only ever receives them
as constructor arguments, so tests pass explicit values instead of patching
the environment.
"""

import os


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# ---------------------------------------------------------------------------
# Board limits
# ---------------------------------------------------------------------------
# MAX_N bounds the search space the boundary is willing to accept. 15 already
# has 2,279,184 solutions; findAll at that size is what the job timeout exists for.

MIN_N: int = 1
MAX_N: int = _env_int("MAX_N_VALUE", 15)

# ---------------------------------------------------------------------------
# Board rendering
# ---------------------------------------------------------------------------

QUEEN: str = "Q"
EMPTY: str = "."

# ---------------------------------------------------------------------------
# Progress cadence (in solutions found)
# ---------------------------------------------------------------------------
# The bitmask solver finds solutions roughly an order of magnitude faster,
# so it reports ten times less often to keep callback overhead comparable.

BACKTRACKING_PROGRESS_EVERY: int = 10
BITMASK_PROGRESS_EVERY: int = 100

# ---------------------------------------------------------------------------
# Job lifecycle
# ---------------------------------------------------------------------------
# Environment values are milliseconds; everything internal uses seconds.

JOB_TIMEOUT_S: float = _env_int("JOB_TIMEOUT_MS", 120_000) / 1000
JOB_RETENTION_S: float = 5 * 60
TIMEOUT_MESSAGE: str = "Job execution timeout exceeded"

# ---------------------------------------------------------------------------
# HTTP boundary
# ---------------------------------------------------------------------------

RATE_LIMIT_WINDOW_S: float = _env_int("RATE_LIMIT_WINDOW_MS", 60_000) / 1000
RATE_LIMIT_MAX_REQUESTS: int = _env_int("RATE_LIMIT_MAX_REQUESTS", 10)
CORS_ORIGIN: str = os.environ.get("CORS_ORIGIN", "http://localhost:5173")
