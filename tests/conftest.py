from __future__ import annotations

from typing import List

import pytest

from report_engine.config import LayoutSettings
from report_engine.layout.canvas import RecordingCanvas
from report_engine.layout.composer import DocumentComposer


class FixedLinesMeasurer:
    """Stand-in for font metrics: every text wraps to the same number of lines."""

    def __init__(self, lines: int = 1) -> None:
        self.lines = lines
        self.calls: List[tuple] = []

    def split_lines(self, text, max_width, font, size) -> List[str]:
        self.calls.append((text, max_width))
        return [text] + [f"{text} (cont. {i})" for i in range(1, self.lines)]


@pytest.fixture
def settings() -> LayoutSettings:
    # 200 units of usable height
    return LayoutSettings(page_width=210.0, page_height=270.0, margin=35.0)


def make_composer(settings: LayoutSettings, lines: int = 1) -> DocumentComposer:
    canv = RecordingCanvas(settings.page_width, settings.page_height, measurer=FixedLinesMeasurer(lines))
    return DocumentComposer(canv, settings)
