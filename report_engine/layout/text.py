from __future__ import annotations

from typing import Any, List, Protocol

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from ..config import MISSING_VALUE
from .document import TextStyle


class TextMeasurer(Protocol):
    def split_lines(self, text: str, max_width: float, font: str, size: float) -> List[str]:
        ...


class FontMetricsMeasurer:
    """
    Greedy word wrap using reportlab font metrics.
    Widths are in millimetres, font sizes in points.
    """

    def width(self, text: str, font: str, size: float) -> float:
        return stringWidth(text, font, size) / mm

    def split_lines(self, text: str, max_width: float, font: str, size: float) -> List[str]:
        lines: List[str] = []
        for paragraph in str(text).split("\n"):
            lines.extend(self._wrap_paragraph(paragraph, max_width, font, size))
        return lines

    def _wrap_paragraph(self, paragraph: str, max_width: float, font: str, size: float) -> List[str]:
        words = paragraph.split()
        if not words:
            return [""]

        lines: List[str] = []
        cur = ""
        for word in words:
            test = f"{cur} {word}" if cur else word
            if self.width(test, font, size) <= max_width:
                cur = test
                continue

            if cur:
                lines.append(cur)
                cur = ""
            if self.width(word, font, size) <= max_width:
                cur = word
                continue

            # word wider than the column (URLs, ids): break it by characters
            pieces = self._break_word(word, max_width, font, size)
            lines.extend(pieces[:-1])
            cur = pieces[-1]

        if cur:
            lines.append(cur)
        return lines

    def _break_word(self, word: str, max_width: float, font: str, size: float) -> List[str]:
        pieces: List[str] = []
        cur = ""
        for ch in word:
            if cur and self.width(cur + ch, font, size) > max_width:
                pieces.append(cur)
                cur = ch
            else:
                cur += ch
        pieces.append(cur)
        return pieces


def normalize_value(value: Any) -> str:
    if value is None or value == "":
        return MISSING_VALUE
    return str(value)


def wrap_text(canv, text: Any, max_width: float, style: TextStyle) -> List[str]:
    """Wrap text for drawing; a missing value renders as "N/A"."""
    lines = canv.measure_wrapped_lines(normalize_value(text), max_width, style)
    return lines or [""]


def block_height(line_count: int, line_height: float, spacing: float) -> float:
    return line_count * line_height + spacing
