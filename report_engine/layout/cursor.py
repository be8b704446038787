from __future__ import annotations

import logging
from typing import Optional

from ..errors import LayoutError
from .document import Page

logger = logging.getLogger(__name__)


def would_overflow(y: float, needed: float, page_height: float, margin: float) -> bool:
    return y + needed > page_height - margin


def check_page_break(canv, current_y: float, needed: float, page_height: float, margin: float) -> float:
    """Start a new page when `needed` does not fit below `current_y`; return the y to write at."""
    if would_overflow(current_y, needed, page_height, margin):
        canv.add_page()
        return margin
    return current_y


class LayoutCursor:
    """Vertical write position on the current page of one build."""

    def __init__(self, canv, page_width: float, page_height: float, margin: float):
        if page_height - 2 * margin <= 0:
            raise LayoutError(f"Margin {margin} leaves no usable height on a {page_height} page")
        self.canvas = canv
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.y = margin
        self.current_page: Optional[Page] = None

    @property
    def usable_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    def begin(self) -> Page:
        if self.current_page is not None:
            raise LayoutError("Cursor already has a page")
        self._new_page()
        return self.current_page

    def reserve(self, height: float) -> float:
        if self.current_page is None:
            raise LayoutError("reserve() called before begin()")
        if would_overflow(self.y, height, self.page_height, self.margin):
            self._new_page()
            if height > self.usable_height:
                logger.warning(
                    "Block of height %.1f exceeds usable page height %.1f; it will overflow page %d",
                    height,
                    self.usable_height,
                    self.current_page.number,
                )
        return self.y

    def advance(self, height: float) -> float:
        self.y += height
        return self.y

    def move_to(self, y: float) -> None:
        if self.current_page is None:
            raise LayoutError("move_to() called before begin()")
        self.y = y

    def force_break(self) -> Page:
        self._new_page()
        return self.current_page

    def at_page_top(self) -> bool:
        return self.y == self.margin

    def _new_page(self) -> None:
        self.current_page = self.canvas.add_page()
        self.y = self.margin
