"""
Shared test fixtures.

Provides: a controllable clock, a manual scheduler that only fires timers when
told to, and a JobManager wired to both.
"""

import pytest

from solver.jobs import JobManager
from solver.models import Algorithm, Mode, SolveParams


class FakeClock:
    """Clock that only moves when advance() is called."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualTimer:
    def __init__(self, delay, callback, args) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Records call_later() requests; fire() runs them on demand."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def call_later(self, delay, callback, *args) -> ManualTimer:
        timer = ManualTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    def fire(self, timer: ManualTimer) -> None:
        # Mirrors threading.Timer: a cancelled timer never runs its callback.
        if not timer.cancelled:
            timer.callback(*timer.args)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def manager(clock, scheduler):
    return JobManager(timeout_s=120, retention_s=300, clock=clock, scheduler=scheduler)


@pytest.fixture
def params():
    return SolveParams(n=6, algorithm=Algorithm.BACKTRACKING, mode=Mode.FIND_ALL)


def run_inline(fn, *args):
    """Dispatcher that runs the job synchronously on the calling thread."""
    fn(*args)
