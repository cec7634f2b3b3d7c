"""In-memory raster that paints calculator batches."""

from __future__ import annotations

import numpy as np
import PIL.Image

from .calculator import Points
from .colors import BACKGROUND_COLOR, ColorRange, HueWheel, RgbColor


class Canvas:
    """RGB raster fed with :class:`Points` batches in row-major order.

    Values above ``max_iterations`` did not escape and are painted with the
    background color. Every other value is normalized by ``max_iterations``
    and mapped through ``palette``. A :class:`HueWheel` palette is fed the raw
    iteration count instead.
    """

    def __init__(
        self,
        width: int,
        height: int,
        palette: ColorRange,
        max_iterations: int,
        background: str = BACKGROUND_COLOR,
    ):
        self.width = width
        self.height = height
        self.palette = palette
        self.max_iterations = max_iterations
        self.background = RgbColor.from_hex(background)
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self._color_cache: dict[int, tuple[int, int, int]] = {}
        self.clear()

    def clear(self) -> None:
        self._pixels[...] = self.background.as_tuple()

    def color_for(self, value: int) -> tuple[int, int, int]:
        color = self._color_cache.get(value)
        if color is None:
            if value > self.max_iterations:
                color = self.background.as_tuple()
            elif isinstance(self.palette, HueWheel):
                color = self.palette.rgb_for_iterations(value, self.max_iterations).as_tuple()
            else:
                percent = float(np.clip(value / self.max_iterations, 0.0, 1.0))
                color = self.palette.rgb_percent_of(percent).as_tuple()
            self._color_cache[value] = color
        return color

    def draw_results(self, points: Points) -> None:
        x = points.x_start
        y = points.y_start
        for value in points.valid_values():
            if y >= self.height:
                break
            self._pixels[y, x] = self.color_for(int(value))
            x += 1
            if x >= self.width:
                x = 0
                y += 1

    def to_array(self) -> np.ndarray:
        return self._pixels.copy()

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self._pixels)
