from __future__ import annotations

from io import BytesIO
import logging
from typing import List, Optional, Protocol, Union

from reportlab.lib.utils import ImageReader

from ..errors import LayoutError
from .document import Document, FillRect, Image, Line, Page, RoundedRect, Text, TextStyle
from .palette import RGB
from .text import FontMetricsMeasurer, TextMeasurer

logger = logging.getLogger(__name__)


class Canvas(Protocol):
    """Primitive drawing surface the layout engine writes to."""

    def fill_rect(self, x: float, y: float, width: float, height: float, color: RGB, alpha: float = 1.0) -> None:
        ...

    def rounded_rect(
        self, x: float, y: float, width: float, height: float, radius: float, color: RGB, alpha: float = 1.0
    ) -> None:
        ...

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float, color: RGB) -> None:
        ...

    def draw_text(self, text: str, x: float, y: float, style: TextStyle) -> None:
        ...

    def draw_image(self, data: Union[str, bytes], x: float, y: float, width: float, height: float) -> None:
        ...

    def add_page(self) -> Page:
        ...

    def select_page(self, page: Page) -> None:
        ...

    def measure_wrapped_lines(self, text: str, max_width: float, style: TextStyle) -> List[str]:
        ...


class RecordingCanvas:
    """
    Canvas that records every primitive into a Document.

    Pages are appended through add_page only; draws go to the most recently
    added page unless select_page points them elsewhere.
    """

    def __init__(
        self,
        page_width: float,
        page_height: float,
        measurer: Optional[TextMeasurer] = None,
        document: Optional[Document] = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.measurer = measurer or FontMetricsMeasurer()
        self.document = document if document is not None else Document()
        self.current_page: Optional[Page] = None

    def add_page(self) -> Page:
        self.current_page = self.document.add_page(self.page_width, self.page_height)
        logger.debug("Started page %d", self.current_page.number)
        return self.current_page

    def select_page(self, page: Page) -> None:
        """Redirect draws to an earlier page, e.g. for footers stamped at finalize."""
        if not any(p is page for p in self.document.pages):
            raise LayoutError(f"Page {page.number} does not belong to this document")
        self.current_page = page

    def fill_rect(self, x, y, width, height, color, alpha=1.0) -> None:
        self._emit(FillRect(x, y, width, height, tuple(color), alpha))

    def rounded_rect(self, x, y, width, height, radius, color, alpha=1.0) -> None:
        self._emit(RoundedRect(x, y, width, height, radius, tuple(color), alpha))

    def line(self, x1, y1, x2, y2, width, color) -> None:
        self._emit(Line(x1, y1, x2, y2, width, tuple(color)))

    def draw_text(self, text, x, y, style) -> None:
        self._emit(Text(text, x, y, style))

    def draw_image(self, data, x, y, width, height) -> None:
        # fail here rather than at encode time so callers can degrade
        reader = ImageReader(BytesIO(data) if isinstance(data, (bytes, bytearray)) else str(data))
        reader.getSize()
        self._emit(Image(bytes(data) if isinstance(data, bytearray) else data, x, y, width, height))

    def measure_wrapped_lines(self, text, max_width, style) -> List[str]:
        return self.measurer.split_lines(text, max_width, style.font, style.size)

    def _emit(self, command) -> None:
        if self.current_page is None:
            raise LayoutError("No page to draw on; add a page first")
        self.document.issue(self.current_page, command)
