"""Color ranges mapping a normalized iteration value to an RGB color.

Channel arithmetic is carried out in single precision so results match the
exact hex values the palette was tuned against.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

import numpy as np
from matplotlib import colormaps

BACKGROUND_COLOR = "#000000"

DEFAULT_HUE = 0.0
DEFAULT_SATURATION = 1.0
DEFAULT_LIGHTNESS = 0.5

HUE_RANGE = 300.0
HUE_OFFSET = 0.0

_F = np.float32


class Direction(enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


def range_percent(start: float, end: float, direction: Direction, maximum: float, percent: float) -> np.float32:
    """Interpolate ``percent`` of the way from ``start`` to ``end`` on a channel of period ``maximum``."""

    start = _F(start)
    end = _F(end)
    maximum = _F(maximum)
    percent = _F(percent)

    if start == end:
        return start
    if start < end:
        if direction is Direction.POSITIVE:
            return start + (end - start) * percent
        hi_start = start + maximum
        return np.fmod(hi_start - (hi_start - end) * percent, maximum)
    if direction is Direction.POSITIVE:
        hi_end = end + maximum
        return np.fmod(start + (hi_end - start) * percent, maximum)
    return start - (start - end) * percent


def _check_percent(percent: float) -> None:
    if not 0.0 <= percent <= 1.0:
        raise ValueError(f"percent must be within [0, 1], got {percent}")


@dataclass(frozen=True)
class RgbColor:
    red: int
    green: int
    blue: int

    @classmethod
    def from_hex(cls, value: str) -> RgbColor:
        hex_color = value.lstrip("#")
        if len(hex_color) != 6:
            raise ValueError(f"color must be in the form #RRGGBB, got {value!r}")
        try:
            return cls(*(int(hex_color[i:i + 2], 16) for i in (0, 2, 4)))
        except ValueError as exc:
            raise ValueError(f"color must contain only hexadecimal digits, got {value!r}") from exc

    def to_hex(self) -> str:
        return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"

    def as_tuple(self) -> tuple[int, int, int]:
        return self.red, self.green, self.blue

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True)
class HslColor:
    """Hue in degrees, saturation and lightness as fractions."""

    hue: float
    saturation: float
    lightness: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "hue", float(np.mod(_F(self.hue), _F(360.0))))
        object.__setattr__(self, "saturation", float(np.fmod(_F(self.saturation), _F(100.0))))
        object.__setattr__(self, "lightness", float(np.fmod(_F(self.lightness), _F(100.0))))

    def to_rgb(self) -> RgbColor:
        # see: https://www.rapidtables.com/convert/color/hsl-to-rgb.html
        if not 0.0 <= self.saturation <= 1.0:
            raise ValueError(f"saturation must be within [0, 1], got {self.saturation}")
        if not 0.0 <= self.lightness <= 1.0:
            raise ValueError(f"lightness must be within [0, 1], got {self.lightness}")

        hue = _F(self.hue)
        saturation = _F(self.saturation)
        lightness = _F(self.lightness)
        if hue >= _F(360.0):
            hue = np.fmod(hue, _F(360.0))

        c = (_F(1.0) - abs(_F(2.0) * lightness - _F(1.0))) * saturation
        x = c * (_F(1.0) - abs(np.fmod(hue / _F(60.0), _F(2.0)) - _F(1.0)))
        m = lightness - c / _F(2.0)

        sector = int(hue) // 60
        if sector == 0:
            r, g, b = c, x, _F(0.0)
        elif sector == 1:
            r, g, b = x, c, _F(0.0)
        elif sector == 2:
            r, g, b = _F(0.0), c, x
        elif sector == 3:
            r, g, b = _F(0.0), x, c
        elif sector == 4:
            r, g, b = x, _F(0.0), c
        elif sector == 5:
            r, g, b = c, _F(0.0), x
        else:
            raise ValueError(f"invalid hue value: {hue}")

        return RgbColor(*(int(abs(np.floor((channel + m) * _F(255.0)))) & 0xFF for channel in (r, g, b)))


@dataclass(frozen=True)
class HslRange:
    start: HslColor = HslColor(DEFAULT_HUE, DEFAULT_SATURATION, DEFAULT_LIGHTNESS)
    end: HslColor = HslColor(DEFAULT_HUE + HUE_RANGE, DEFAULT_SATURATION, DEFAULT_LIGHTNESS)
    direction: Direction = Direction.POSITIVE

    def percent_of(self, percent: float) -> HslColor:
        _check_percent(percent)
        return HslColor(
            float(range_percent(self.start.hue, self.end.hue, self.direction, 360.0, percent)),
            float(range_percent(self.start.saturation, self.end.saturation, self.direction, 1.0, percent)),
            float(range_percent(self.start.lightness, self.end.lightness, self.direction, 1.0, percent)),
        )

    def rgb_percent_of(self, percent: float) -> RgbColor:
        return self.percent_of(percent).to_rgb()


@dataclass(frozen=True)
class RgbRange:
    start: RgbColor
    end: RgbColor
    direction: Direction = Direction.POSITIVE

    def percent_of(self, percent: float) -> RgbColor:
        _check_percent(percent)
        return RgbColor(
            *(
                int(np.floor(range_percent(start, end, self.direction, 256.0, percent)))
                for start, end in zip(self.start.as_tuple(), self.end.as_tuple())
            )
        )

    def rgb_percent_of(self, percent: float) -> RgbColor:
        return self.percent_of(percent)


@dataclass(frozen=True)
class ColormapRange:
    """Sample a named matplotlib colormap."""

    name: str = "twilight_shifted"
    invert: bool = False
    _cmap: object = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            cmap = colormaps[self.name]
        except KeyError as exc:
            raise ValueError(f"unknown colormap {self.name!r}") from exc
        object.__setattr__(self, "_cmap", cmap)

    def percent_of(self, percent: float) -> RgbColor:
        _check_percent(percent)
        if self.invert:
            percent = 1.0 - percent
        rgba = self._cmap(float(percent))
        return RgbColor(*(int(np.clip(channel * 255, 0, 255)) for channel in rgba[:3]))

    def rgb_percent_of(self, percent: float) -> RgbColor:
        return self.percent_of(percent)


@dataclass(frozen=True)
class HueWheel:
    """Sweep ``hue_range`` degrees of the color wheel at full saturation.

    The canvas colors with :meth:`rgb_for_iterations`, spreading the raw
    iteration count over ``steps`` (the iteration cap) rather than a
    normalized percent.
    """

    offset: float = HUE_OFFSET
    hue_range: float = HUE_RANGE

    def percent_of(self, percent: float) -> HslColor:
        _check_percent(percent)
        hue = np.mod(_F(percent) * _F(self.hue_range) + _F(self.offset), _F(360.0))
        return HslColor(float(hue), DEFAULT_SATURATION, DEFAULT_LIGHTNESS)

    def rgb_percent_of(self, percent: float) -> RgbColor:
        return self.percent_of(percent).to_rgb()

    def rgb_for_iterations(self, iterations: int, steps: int) -> RgbColor:
        return iterations_as_hue_to_rgb(iterations, steps, offset=self.offset, hue_range=self.hue_range)


ColorRange = Union[HslRange, RgbRange, ColormapRange, HueWheel]


def iterations_as_hue_to_rgb(
    iterations: int, steps: int, offset: float = HUE_OFFSET, hue_range: float = HUE_RANGE
) -> RgbColor:
    """Map an iteration count onto the hue wheel."""

    hue = np.mod(_F(iterations) * (_F(hue_range) / _F(steps)) + _F(offset), _F(360.0))
    return HslColor(float(hue), DEFAULT_SATURATION, DEFAULT_LIGHTNESS).to_rgb()
