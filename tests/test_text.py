from __future__ import annotations

import pytest
from reportlab.lib.units import mm

from report_engine.layout.canvas import RecordingCanvas
from report_engine.layout.document import TextStyle
from report_engine.layout.text import FontMetricsMeasurer, block_height, wrap_text

from conftest import FixedLinesMeasurer

COURIER = TextStyle("Courier", 10)
# Courier glyphs are 0.6 em wide: ten 10pt characters per 60pt
TEN_CHARS = 60 / mm + 0.01


@pytest.fixture
def measurer() -> FontMetricsMeasurer:
    return FontMetricsMeasurer()


def test_greedy_word_wrap(measurer) -> None:
    assert measurer.split_lines("hello world foo", TEN_CHARS, "Courier", 10) == ["hello", "world foo"]


def test_long_word_is_broken_by_characters(measurer) -> None:
    lines = measurer.split_lines("see abcdefghijklmnopqrstuvwxy", TEN_CHARS, "Courier", 10)
    assert lines == ["see", "abcdefghij", "klmnopqrst", "uvwxy"]


def test_newlines_start_new_lines(measurer) -> None:
    assert measurer.split_lines("first\n\nsecond", TEN_CHARS, "Courier", 10) == ["first", "", "second"]


@pytest.mark.parametrize("value", [None, ""])
def test_missing_values_wrap_as_placeholder(value) -> None:
    canv = RecordingCanvas(210.0, 297.0, measurer=FontMetricsMeasurer())
    assert wrap_text(canv, value, 50.0, COURIER) == wrap_text(canv, "N/A", 50.0, COURIER) == ["N/A"]


def test_non_string_values_are_stringified() -> None:
    measurer = FixedLinesMeasurer()
    canv = RecordingCanvas(210.0, 297.0, measurer=measurer)
    assert wrap_text(canv, 3.1415, 50.0, COURIER) == ["3.1415"]
    assert wrap_text(canv, 0, 50.0, COURIER) == ["0"]


def test_block_height() -> None:
    assert block_height(3, 5, 3) == 18
