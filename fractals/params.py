"""Run configuration for the fractal engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .complex_number import Complex

MANDELBROT_DEFAULT_C_MIN = Complex(-2.0, -1.12)
MANDELBROT_DEFAULT_C_MAX = Complex(0.47, 1.12)
MANDELBROT_DEFAULT_ITERATIONS = 400
MANDELBROT_DEFAULT_POWER = 2

JULIA_DEFAULT_X_MIN = Complex(-1.5, -1.0)
JULIA_DEFAULT_X_MAX = Complex(1.5, 1.0)
JULIA_DEFAULT_C = Complex(-0.8, 0.156)
JULIA_DEFAULT_ITERATIONS = 400

DEFAULT_WIDTH = 1024


class FractalType(enum.Enum):
    MANDELBROT = "mandelbrot"
    JULIA_SET = "julia"


@dataclass(frozen=True)
class FractalParams:
    """Immutable parameters of a single fractal run.

    ``min`` and ``max`` are the corners of the viewport in the complex plane.
    ``c`` is only used by Julia sets and ``power`` only by the Mandelbrot set.
    """

    fractal_type: FractalType
    max_iterations: int
    min: Complex
    max: Complex
    power: int = 2
    c: Complex = Complex(0.0, 0.0)

    @classmethod
    def mandelbrot(
        cls,
        *,
        max_iterations: int = MANDELBROT_DEFAULT_ITERATIONS,
        power: int = MANDELBROT_DEFAULT_POWER,
        c_min: Complex = MANDELBROT_DEFAULT_C_MIN,
        c_max: Complex = MANDELBROT_DEFAULT_C_MAX,
    ) -> FractalParams:
        return cls(
            fractal_type=FractalType.MANDELBROT,
            max_iterations=max_iterations,
            min=c_min,
            max=c_max,
            power=power,
        )

    @classmethod
    def julia_set(
        cls,
        *,
        c: Complex = JULIA_DEFAULT_C,
        max_iterations: int = JULIA_DEFAULT_ITERATIONS,
        x_min: Complex = JULIA_DEFAULT_X_MIN,
        x_max: Complex = JULIA_DEFAULT_X_MAX,
    ) -> FractalParams:
        return cls(
            fractal_type=FractalType.JULIA_SET,
            max_iterations=max_iterations,
            min=x_min,
            max=x_max,
            c=c,
        )

    def validate(self) -> FractalParams:
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.fractal_type is FractalType.MANDELBROT and self.power < 2:
            raise ValueError(f"power must be at least 2, got {self.power}")
        if not (self.max.real > self.min.real and self.max.imag > self.min.imag):
            raise ValueError(f"viewport {self.min}..{self.max} must have max > min on both axes")
        return self

    def canvas_height(self, canvas_width: int) -> int:
        """Height in pixels that keeps the viewport's aspect ratio."""

        return int(
            canvas_width
            * (self.max.imag - self.min.imag)
            / (self.max.real - self.min.real)
        )

    def pixel_to_complex(self, x: float, y: float, width: int, height: int) -> Complex:
        return Complex(
            self.min.real + x * (self.max.real - self.min.real) / width,
            self.min.imag + y * (self.max.imag - self.min.imag) / height,
        )

    def zoom_to_selection(
        self, x0: int, y0: int, x1: int, y1: int, width: int, height: int
    ) -> FractalParams:
        """Return parameters whose viewport covers the selected pixel rectangle."""

        if x0 == x1 or y0 == y1:
            raise ValueError("selection must span at least one pixel on both axes")
        corner_a = self.pixel_to_complex(min(x0, x1), min(y0, y1), width, height)
        corner_b = self.pixel_to_complex(max(x0, x1), max(y0, y1), width, height)
        return replace(self, min=corner_a, max=corner_b)
