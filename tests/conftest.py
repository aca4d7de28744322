"""Shared test fixtures."""

import pytest


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Deterministic clock starting at t=1000s."""
    return FakeClock()
