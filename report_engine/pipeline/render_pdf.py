from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, Union

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..errors import LayoutError
from ..layout.document import Document, FillRect, Image, Line, RoundedRect, Text


def _color(rgb) -> colors.Color:
    r, g, b = rgb
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


# Layout coordinates are millimetres from the top-left corner; reportlab
# wants points from the bottom-left.


def _fill_rect(canv: canvas.Canvas, cmd: FillRect, page_h: float) -> None:
    canv.setFillColor(_color(cmd.color), alpha=cmd.alpha)
    canv.rect(cmd.x * mm, page_h - (cmd.y + cmd.height) * mm, cmd.width * mm, cmd.height * mm, stroke=0, fill=1)


def _rounded_rect(canv: canvas.Canvas, cmd: RoundedRect, page_h: float) -> None:
    canv.setFillColor(_color(cmd.color), alpha=cmd.alpha)
    canv.roundRect(
        cmd.x * mm,
        page_h - (cmd.y + cmd.height) * mm,
        cmd.width * mm,
        cmd.height * mm,
        radius=cmd.radius * mm,
        stroke=0,
        fill=1,
    )


def _line(canv: canvas.Canvas, cmd: Line, page_h: float) -> None:
    canv.setStrokeColor(_color(cmd.color))
    canv.setLineWidth(cmd.width * mm)
    canv.line(cmd.x1 * mm, page_h - cmd.y1 * mm, cmd.x2 * mm, page_h - cmd.y2 * mm)


def _text(canv: canvas.Canvas, cmd: Text, page_h: float) -> None:
    style = cmd.style
    canv.setFont(style.font, style.size)
    canv.setFillColor(_color(style.color), alpha=1.0)
    x, y = cmd.x * mm, page_h - cmd.y * mm
    if style.align == "center":
        canv.drawCentredString(x, y, cmd.text)
    elif style.align == "right":
        canv.drawRightString(x, y, cmd.text)
    else:
        canv.drawString(x, y, cmd.text)


def _image(canv: canvas.Canvas, cmd: Image, page_h: float, readers: Dict[Union[str, bytes], ImageReader]) -> None:
    reader = readers.get(cmd.source)
    if reader is None:
        source = BytesIO(cmd.source) if isinstance(cmd.source, bytes) else str(cmd.source)
        reader = readers[cmd.source] = ImageReader(source)
    canv.drawImage(
        reader,
        cmd.x * mm,
        page_h - (cmd.y + cmd.height) * mm,
        cmd.width * mm,
        cmd.height * mm,
        mask="auto",
    )


DRAWERS: Dict[type, Callable] = {
    FillRect: _fill_rect,
    RoundedRect: _rounded_rect,
    Line: _line,
    Text: _text,
}


def render_pdf(document: Document, output_path: Path) -> Path:
    if not document.finalized:
        raise LayoutError("Only finalized documents can be encoded")
    if not document.page_count:
        raise LayoutError("Document has no pages")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    first = document.pages[0]
    canv = canvas.Canvas(str(output_path), pagesize=(first.width * mm, first.height * mm))

    # one reader per image source
    readers: Dict[Union[str, bytes], ImageReader] = {}
    for page in document.pages:
        page_h = page.height * mm
        canv.setPageSize((page.width * mm, page_h))
        for cmd in page.commands:
            if isinstance(cmd, Image):
                _image(canv, cmd, page_h, readers)
            else:
                DRAWERS[type(cmd)](canv, cmd, page_h)
        canv.showPage()

    canv.save()
    return output_path
