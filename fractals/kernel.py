"""Escape-time iteration kernels."""

from __future__ import annotations

from dataclasses import dataclass

from .complex_number import Complex
from .escape import find_escape_radius
from .params import FractalParams, FractalType


@dataclass(frozen=True)
class Kernel:
    """Escape-time kernel for either a Mandelbrot or a Julia set.

    ``escape_radius_sq`` is only meaningful for Julia sets, whose escape
    radius depends on the fixed parameter ``c``. The Mandelbrot radius depends
    on the sample and is computed per call.
    """

    fractal_type: FractalType
    max_iterations: int
    power: int = 2
    c: Complex = Complex(0.0, 0.0)
    escape_radius_sq: float = 4.0

    @classmethod
    def mandelbrot(cls, max_iterations: int, power: int = 2) -> Kernel:
        return cls(FractalType.MANDELBROT, max_iterations, power=power)

    @classmethod
    def julia_set(cls, max_iterations: int, c: Complex) -> Kernel:
        radius = find_escape_radius(c.norm())
        return cls(FractalType.JULIA_SET, max_iterations, c=c, escape_radius_sq=radius * radius)

    @classmethod
    def from_params(cls, params: FractalParams) -> Kernel:
        if params.fractal_type is FractalType.MANDELBROT:
            return cls.mandelbrot(params.max_iterations, params.power)
        return cls.julia_set(params.max_iterations, params.c)

    @property
    def not_escaped(self) -> int:
        return self.max_iterations + 1

    def iterate(self, sample: Complex) -> int:
        """Return the 1-based iteration at which ``sample`` escapes.

        Points that stay inside the escape radius for ``max_iterations``
        steps return ``max_iterations + 1``.
        """

        if self.fractal_type is FractalType.MANDELBROT:
            radius = find_escape_radius(sample.norm())
            max_sq = radius * radius
            power = self.power
            z = Complex(0.0, 0.0)
            for idx in range(1, self.max_iterations + 1):
                z = z.powi(power) + sample
                if z.square_length() >= max_sq:
                    return idx
        else:
            max_sq = self.escape_radius_sq
            c = self.c
            z = sample
            for idx in range(1, self.max_iterations + 1):
                z = z.mul_by(z) + c
                if z.square_length() >= max_sq:
                    return idx

        return self.max_iterations + 1
