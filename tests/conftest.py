"""
Shared test fixtures
"""
import pytest


class FakeClock:
    """Manually advanced epoch-ms clock"""

    def __init__(self, start: float = 0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms

    def set(self, ms: float):
        self.now = ms


@pytest.fixture
def clock():
    return FakeClock()
