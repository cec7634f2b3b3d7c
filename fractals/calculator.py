"""Time-sliced, resumable raster scan over a fractal kernel."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from .complex_number import Complex
from .kernel import Kernel
from .params import FractalParams
from .stats import Stats

logger = logging.getLogger(__name__)

MAX_POINTS = 5000
# seconds of work allowed per calculate() call
MAX_DURATION = 0.2
# iterations of work between clock queries
CHECK_INTERVAL = 100


@dataclass
class Points:
    """A batch of iteration counts starting at raster position ``(x_start, y_start)``."""

    x_start: int = 0
    y_start: int = 0
    num_points: int = 0
    values: np.ndarray = field(default_factory=lambda: np.zeros(MAX_POINTS, dtype=np.uint32))

    def valid_values(self) -> np.ndarray:
        return self.values[: self.num_points]


class FractalCalculator:
    """Computes a ``width x height`` raster in bounded batches.

    Each :meth:`calculate` call resumes at the stored cursor, fills at most
    ``MAX_POINTS`` values and returns early once ``max_duration`` seconds
    have elapsed. Callers keep invoking it until :meth:`is_done`.
    """

    def __init__(self, params: FractalParams, width: int, height: int, max_duration: float = MAX_DURATION):
        logger.info(
            "creating %s calculator: min: %s, max: %s, %dx%d",
            params.fractal_type.value,
            params.min,
            params.max,
            width,
            height,
        )
        self.params = params
        self.width = width
        self.height = height
        self.max_duration = max_duration
        self.scale_real = (params.max.real - params.min.real) / width
        self.scale_imag = (params.max.imag - params.min.imag) / height
        self.offset = params.min
        self.kernel = Kernel.from_params(params)
        self.x_curr = 0
        self.y_curr = 0
        self.res = Points()
        self.done = False

    @property
    def scale(self) -> Complex:
        return Complex(self.scale_real, self.scale_imag)

    def is_done(self) -> bool:
        return self.done

    def progress(self) -> float:
        if self.done:
            return 1.0
        return (self.y_curr * self.width + self.x_curr) / (self.width * self.height)

    def calculate(self, stats: Optional[Stats] = None, clock: Optional[Callable[[], float]] = None) -> Points:
        """Compute the next batch of points and advance the cursor."""

        if clock is None:
            clock = time.perf_counter
        start = clock()

        res = self.res
        res.x_start = self.x_curr
        res.y_start = self.y_curr
        res.num_points = 0

        x = self.x_curr
        y = self.y_curr
        values = res.values
        iterate = self.kernel.iterate

        points_done = None
        last_check = 0
        iterations = 0

        for count in range(len(values)):
            sample = Complex(
                x * self.scale_real + self.offset.real,
                y * self.scale_imag + self.offset.imag,
            )
            curr = iterate(sample)
            values[count] = curr
            iterations += curr

            if x < self.width - 1:
                x += 1
            else:
                x = 0
                y += 1
                if y >= self.height:
                    self.done = True
                    points_done = count + 1
                    break

            if iterations - last_check > CHECK_INTERVAL:
                last_check = iterations
                if clock() - start >= self.max_duration:
                    points_done = count + 1
                    break

        res.num_points = len(values) if points_done is None else points_done

        self.x_curr = x
        self.y_curr = y

        if stats is not None:
            stats.update(iterations, res.num_points, start)

        return res
