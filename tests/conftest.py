"""Shared fixtures for the fractal engine tests."""

import pytest

from fractals import Complex, FractalParams


class FakeClock:
    """Monotonic clock that advances by ``step`` seconds on every query."""

    def __init__(self, step: float = 0.0, start: float = 0.0):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_clock():
    """Factory for clocks that a test advances by hand."""
    return FakeClock


@pytest.fixture
def frozen_clock() -> FakeClock:
    return FakeClock(step=0.0)


@pytest.fixture
def slow_clock() -> FakeClock:
    """Every query reports a full second elapsed, exhausting any time budget."""
    return FakeClock(step=1.0)


@pytest.fixture
def mandelbrot_params() -> FractalParams:
    return FractalParams.mandelbrot(
        max_iterations=50,
        power=2,
        c_min=Complex(-2.0, -1.12),
        c_max=Complex(0.47, 1.12),
    )


@pytest.fixture
def julia_params() -> FractalParams:
    return FractalParams.julia_set(c=Complex(-0.8, 0.156), max_iterations=60)
