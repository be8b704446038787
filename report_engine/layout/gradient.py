"""
Linear gradients rendered as discrete horizontal bands.

Each band is a filled strip whose color is interpolated between the two
stops that bracket the band's ratio. The number of bands trades smoothness
for draw calls; the report header uses one band per unit of height.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..errors import GradientError
from .palette import RGB


@dataclass(frozen=True)
class ColorStop:
    offset: float
    rgb: RGB


class LinearGradient:
    def __init__(self, stops: Sequence[ColorStop]):
        stops = list(stops)
        if len(stops) < 2:
            raise GradientError("A gradient needs at least two color stops")
        if stops[0].offset != 0 or stops[-1].offset != 1:
            raise GradientError("Gradient stops must start at offset 0 and end at offset 1")
        for prev, cur in zip(stops, stops[1:]):
            if cur.offset <= prev.offset:
                raise GradientError(
                    f"Gradient offsets must be strictly increasing ({prev.offset} -> {cur.offset})"
                )
        self.stops = tuple(stops)

    @classmethod
    def two_stop(cls, start: RGB, end: RGB) -> "LinearGradient":
        return cls([ColorStop(0.0, start), ColorStop(1.0, end)])

    def color_at(self, ratio: float) -> RGB:
        ratio = min(1.0, max(0.0, ratio))
        for lo, hi in zip(self.stops, self.stops[1:]):
            if ratio <= hi.offset:
                local = (ratio - lo.offset) / (hi.offset - lo.offset)
                return _lerp(lo.rgb, hi.rgb, local)
        return self.stops[-1].rgb

    def band_colors(self, bands: int) -> List[RGB]:
        if bands < 1:
            raise GradientError("Band count must be positive")
        return [self.color_at(i / bands) for i in range(bands)]


def _lerp(c0: RGB, c1: RGB, ratio: float) -> RGB:
    return (
        c0[0] + (c1[0] - c0[0]) * ratio,
        c0[1] + (c1[1] - c0[1]) * ratio,
        c0[2] + (c1[2] - c0[2]) * ratio,
    )


def fill_gradient_band(
    canv,
    x: float,
    y: float,
    width: float,
    height: float,
    gradient: LinearGradient,
    bands: Optional[int] = None,
) -> float:
    """Fill a vertical gradient band top to bottom and return the y below it."""
    count = bands or max(1, int(round(height)))
    strip = height / count
    for i, color in enumerate(gradient.band_colors(count)):
        canv.fill_rect(x, y + i * strip, width, strip, color)
    return y + height
