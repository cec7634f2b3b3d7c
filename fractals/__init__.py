"""Public API of the incremental fractal engine."""

from .calculator import CHECK_INTERVAL, MAX_DURATION, MAX_POINTS, FractalCalculator, Points
from .canvas import Canvas
from .colors import (
    BACKGROUND_COLOR,
    ColormapRange,
    ColorRange,
    Direction,
    HslColor,
    HslRange,
    HueWheel,
    RgbColor,
    RgbRange,
    iterations_as_hue_to_rgb,
    range_percent,
)
from .complex_number import Complex
from .escape import find_escape_radius
from .kernel import Kernel
from .params import FractalParams, FractalType
from .stats import Stats, format_time

__all__ = [
    "BACKGROUND_COLOR",
    "CHECK_INTERVAL",
    "Canvas",
    "ColorRange",
    "ColormapRange",
    "Complex",
    "Direction",
    "FractalCalculator",
    "FractalParams",
    "FractalType",
    "HslColor",
    "HslRange",
    "HueWheel",
    "Kernel",
    "MAX_DURATION",
    "MAX_POINTS",
    "Points",
    "RgbColor",
    "RgbRange",
    "Stats",
    "find_escape_radius",
    "format_time",
    "iterations_as_hue_to_rgb",
    "range_percent",
]
