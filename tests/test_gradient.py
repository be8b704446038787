from __future__ import annotations

import pytest

from report_engine.errors import GradientError
from report_engine.layout.canvas import RecordingCanvas
from report_engine.layout.document import FillRect
from report_engine.layout.gradient import ColorStop, LinearGradient, fill_gradient_band

START = (79, 70, 229)
END = (129, 140, 248)


def test_two_stop_band_endpoints() -> None:
    bands = 35
    colors = LinearGradient.two_stop(START, END).band_colors(bands)
    assert len(colors) == bands
    assert colors[0] == START
    ratio = (bands - 1) / bands
    for channel in range(3):
        expected = START[channel] + (END[channel] - START[channel]) * ratio
        assert colors[-1][channel] == pytest.approx(expected)
        assert abs(colors[-1][channel] - END[channel]) <= abs(END[channel] - START[channel]) / bands + 1e-9


def test_multi_stop_uses_bracketing_stops() -> None:
    gradient = LinearGradient(
        [ColorStop(0.0, (0, 0, 0)), ColorStop(0.5, (100, 100, 100)), ColorStop(1.0, (100, 0, 200))]
    )
    assert gradient.color_at(0.25) == pytest.approx((50, 50, 50))
    assert gradient.color_at(0.5) == pytest.approx((100, 100, 100))
    assert gradient.color_at(0.75) == pytest.approx((100, 50, 150))
    assert gradient.color_at(2.0) == (100, 0, 200)


@pytest.mark.parametrize(
    "stops",
    [
        [ColorStop(0.0, START)],
        [ColorStop(0.1, START), ColorStop(1.0, END)],
        [ColorStop(0.0, START), ColorStop(0.9, END)],
        [ColorStop(0.0, START), ColorStop(0.5, END), ColorStop(0.5, END), ColorStop(1.0, START)],
    ],
)
def test_invalid_stops_are_rejected(stops) -> None:
    with pytest.raises(GradientError):
        LinearGradient(stops)


def test_fill_gradient_band_draws_one_strip_per_row() -> None:
    canv = RecordingCanvas(210.0, 297.0)
    canv.add_page()
    bottom = fill_gradient_band(canv, 0, 0, 210.0, 35.0, LinearGradient.two_stop(START, END))

    strips = [cmd for cmd in canv.current_page.commands if isinstance(cmd, FillRect)]
    assert bottom == 35.0
    assert len(strips) == 35
    assert [s.y for s in strips] == [float(i) for i in range(35)]
    assert all(s.height == 1.0 and s.width == 210.0 for s in strips)
    assert strips[0].color == START


def test_preset_palette_matches_report_colors() -> None:
    from report_engine.layout.palette import ColorPalette, load_palette

    assert load_palette() == ColorPalette()
