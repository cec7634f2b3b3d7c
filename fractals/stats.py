"""Throughput counters for a fractal run."""

from __future__ import annotations

import math
import time
from typing import Callable, Optional


def format_time(seconds: float) -> str:
    """Format a duration in seconds as ``H:MM:SS``."""

    hours = math.floor(seconds / 3600.0)
    minutes = math.floor((seconds % 3600.0) / 60.0)
    secs = math.floor(seconds % 60.0)
    return f"{hours}:{minutes:02d}:{secs:02d}"


class Stats:
    """Accumulates iterations, points and time spent in the calculator."""

    def __init__(self, total_points: Optional[int] = None, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock
        self.total_points = total_points
        self.start_time = clock()
        self.total_time = 0.0
        self.time_in_fractal = 0.0
        self.iterations = 0
        self.points = 0

    def update(self, iterations: int, points: int, start_time: float) -> None:
        end = self.clock()
        self.iterations += iterations
        self.points += points
        self.time_in_fractal += end - start_time
        self.total_time = max(self.total_time, end - self.start_time)

    def iterations_per_second(self) -> float:
        return self.iterations / self.time_in_fractal if self.time_in_fractal > 0 else 0.0

    def points_per_second(self) -> float:
        return self.points / self.time_in_fractal if self.time_in_fractal > 0 else 0.0

    def format_stats(self) -> str:
        lines = [
            f"Iterations: {self.iterations:.4E}",
            f"Points:     {self.points:.4E}",
            f"Time Calc:  {format_time(self.time_in_fractal)}",
            f"Tot. Time:  {format_time(self.total_time)}",
            f"Iter/Sec:   {self.iterations_per_second():.3f}",
            f"Points/Sec: {self.points_per_second():.3f}",
        ]
        if self.total_points:
            lines.append(f"Progress:   {100.0 * self.points / self.total_points:.1f}%")
        return "\n".join(lines)
