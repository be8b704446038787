from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping, Sequence, Tuple, Union

from reportlab.lib import colors

from ..config import load_style_preset

RGB = Tuple[float, float, float]


def rgb(value: Union[str, Sequence[float]]) -> RGB:
    """Accept "#RRGGBB" or an (r, g, b) triple on the 0-255 scale."""
    if isinstance(value, str):
        color = colors.HexColor("#" + value.strip().lstrip("#"))
        return (round(color.red * 255), round(color.green * 255), round(color.blue * 255))
    r, g, b = value
    return (r, g, b)


@dataclass(frozen=True)
class ColorPalette:
    primary: RGB = (79, 70, 229)
    primary_light: RGB = (129, 140, 248)
    secondary: RGB = (59, 130, 246)
    success: RGB = (16, 185, 129)
    warning: RGB = (245, 158, 11)
    danger: RGB = (239, 68, 68)
    dark: RGB = (31, 41, 55)
    light: RGB = (243, 244, 246)
    white: RGB = (255, 255, 255)
    text: RGB = (55, 65, 81)
    text_light: RGB = (107, 114, 128)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Union[str, Sequence[float]]]) -> "ColorPalette":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown palette colors: {', '.join(sorted(unknown))}")
        return cls(**{name: rgb(value) for name, value in values.items()})


def load_palette() -> ColorPalette:
    return ColorPalette.from_mapping(load_style_preset().get("palette", {}))
