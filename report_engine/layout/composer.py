"""
Report composition on top of the layout cursor.

The module-level ``draw_*`` functions place one block at an explicit y and
return the y below it. ``DocumentComposer`` drives them through a
``LayoutCursor`` so that every block is measured, reserved, drawn and then
committed in that order:

    HEADER -> METADATA -> (SECTION -> [KEYVALUE]*)* -> FINALIZE

All coordinates are millimetres from the top-left corner of the page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..config import FOOTER_NOTE, LayoutSettings, REPORT_TITLE, SYSTEM_NAME
from ..errors import ComposerStateError, DocumentFinalizedError
from .canvas import RecordingCanvas
from .cursor import LayoutCursor, would_overflow
from .document import Document, Page, TextStyle
from .gradient import LinearGradient, fill_gradient_band
from .palette import ColorPalette
from .text import TextMeasurer, block_height, normalize_value, wrap_text

logger = logging.getLogger(__name__)

LOGO_Y = 8.0
LOGO_SIZE = 22.0
TITLE_Y = 18.0
SUBTITLE_Y = 25.0
BAR_FILL_HEIGHT = 8.0
BAR_RADIUS = 1.0
BAR_ALPHA = 0.12
BAR_TEXT_INSET = 3.0
BAR_TEXT_BASELINE = 5.0
UNDERLINE_OFFSET = 2.0
UNDERLINE_WIDTH = 0.5
FOOTER_MIN_MARGIN = 15.0

Field = Tuple[str, Any]


@dataclass
class KeyValue:
    key: str
    value: Optional[str] = None


@dataclass
class Section:
    title: str
    rows: List[KeyValue] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    keep_together: bool = False


@dataclass
class ReportRecord:
    report_id: str
    title: str = REPORT_TITLE
    subtitle: str = SYSTEM_NAME
    metadata_fields: List[Field] = field(default_factory=list)
    sections: List[Section] = field(default_factory=list)


@dataclass(frozen=True)
class SectionTitle:
    text: str
    underline_length: float


@dataclass
class KeyValueBlock:
    key: str
    value: Optional[str]
    key_lines: List[str]
    value_lines: List[str]
    height: float
    y: Optional[float] = None


def _style(settings: LayoutSettings, color, size: Optional[float] = None, bold: bool = False, align: str = "left"):
    return TextStyle(
        font=settings.font_bold if bold else settings.font_name,
        size=settings.body_size if size is None else size,
        color=color,
        align=align,
    )


def draw_optional_image(canv, data, x: float, y: float, width: float, height: float) -> bool:
    """Best-effort image draw. Returns False when the image could not be drawn."""
    if not data:
        return False
    try:
        canv.draw_image(data, x, y, width, height)
    except Exception as exc:
        logger.warning("Logo not drawn, continuing without it: %s", exc)
        return False
    return True


def draw_header(
    canv,
    settings: LayoutSettings,
    palette: ColorPalette,
    logo: Optional[Union[str, bytes]],
    title: str,
    subtitle: str,
) -> float:
    gradient = LinearGradient.two_stop(palette.primary, palette.primary_light)
    fill_gradient_band(canv, 0, 0, settings.page_width, settings.header_height, gradient)

    draw_optional_image(canv, logo, settings.margin, LOGO_Y, LOGO_SIZE, LOGO_SIZE)

    center = settings.page_width / 2
    canv.draw_text(title, center, TITLE_Y, _style(settings, palette.white, settings.title_size, True, "center"))
    canv.draw_text(subtitle, center, SUBTITLE_Y, _style(settings, palette.white, settings.subtitle_size, True, "center"))
    return settings.header_height


def draw_metadata_bar(
    canv,
    settings: LayoutSettings,
    palette: ColorPalette,
    fields: Sequence[Field],
    y: float,
) -> float:
    margin = settings.margin
    width = settings.content_width
    canv.rounded_rect(margin, y, width, BAR_FILL_HEIGHT, BAR_RADIUS, palette.primary, BAR_ALPHA)

    baseline = y + BAR_TEXT_BASELINE
    labels = [f"{label}: {normalize_value(value)}" for label, value in fields]
    last = len(labels) - 1
    for i, text in enumerate(labels):
        if i == 0:
            x, align = margin + BAR_TEXT_INSET, "left"
        elif i == last:
            x, align = settings.page_width - margin - BAR_TEXT_INSET, "right"
        else:
            x, align = margin + width * i / last, "center"
        canv.draw_text(text, x, baseline, _style(settings, palette.dark, settings.metadata_size, align=align))
    return y + settings.metadata_bar_height


def draw_section_title(
    canv,
    settings: LayoutSettings,
    palette: ColorPalette,
    title: str,
    y: float,
    margin: float,
) -> float:
    heading = SectionTitle(title, settings.underline_length)
    canv.draw_text(heading.text, margin, y, _style(settings, palette.dark, settings.section_title_size, True))
    rule_y = y + UNDERLINE_OFFSET
    canv.line(margin, rule_y, margin + heading.underline_length, rule_y, UNDERLINE_WIDTH, palette.primary)
    return y + settings.title_block_height


def measure_key_value(
    canv,
    settings: LayoutSettings,
    key: str,
    value: Any,
    max_width: Optional[float] = None,
) -> KeyValueBlock:
    width = settings.content_width if max_width is None else max_width
    value_lines = wrap_text(canv, value, width - settings.label_column_width, TextStyle(settings.font_name, settings.body_size))
    label = f"{key}:"
    if settings.wrap_keys:
        key_lines = wrap_text(canv, label, settings.label_column_width - 2, TextStyle(settings.font_bold, settings.body_size))
        line_count = max(len(key_lines), len(value_lines))
    else:
        key_lines = [label]
        line_count = len(value_lines)
    height = block_height(line_count, settings.line_height, settings.row_spacing)
    return KeyValueBlock(key, value, key_lines, value_lines, height)


def place_key_value(
    canv,
    settings: LayoutSettings,
    palette: ColorPalette,
    block: KeyValueBlock,
    y: float,
    margin: float,
) -> float:
    block.y = y
    key_style = _style(settings, palette.text, bold=True)
    value_style = _style(settings, palette.text_light)
    for i, line in enumerate(block.key_lines):
        canv.draw_text(line, margin, y + i * settings.line_height, key_style)
    for i, line in enumerate(block.value_lines):
        canv.draw_text(line, margin + settings.label_column_width, y + i * settings.line_height, value_style)
    return y + block.height


def draw_key_value(
    canv,
    settings: LayoutSettings,
    palette: ColorPalette,
    key: str,
    value: Any,
    y: float,
    margin: float,
    max_width: Optional[float] = None,
) -> float:
    block = measure_key_value(canv, settings, key, value, max_width)
    return place_key_value(canv, settings, palette, block, y, margin)


def draw_footer(canv, settings: LayoutSettings, palette: ColorPalette, page: Page, total: int) -> None:
    top = settings.page_height - settings.margin + 4
    left = settings.margin
    right = settings.page_width - settings.margin
    canv.line(left, top, right, top, UNDERLINE_WIDTH, palette.text_light)
    center = settings.page_width / 2
    canv.draw_text(SYSTEM_NAME, center, top + 5, _style(settings, palette.text_light, settings.footer_size, align="center"))
    canv.draw_text(FOOTER_NOTE, center, top + 9, _style(settings, palette.text_light, settings.footer_size, align="center"))
    canv.draw_text(f"Page {page.number} of {total}", right, top + 5, _style(settings, palette.text_light, settings.footer_size, align="right"))


class ComposerState(str, Enum):
    NEW = "NEW"
    HEADER = "HEADER"
    METADATA = "METADATA"
    SECTION = "SECTION"
    KEYVALUE = "KEYVALUE"
    FINALIZED = "FINALIZED"


_TRANSITIONS = {
    ComposerState.NEW: {ComposerState.HEADER},
    ComposerState.HEADER: {ComposerState.METADATA},
    ComposerState.METADATA: {ComposerState.SECTION, ComposerState.FINALIZED},
    ComposerState.SECTION: {ComposerState.SECTION, ComposerState.KEYVALUE, ComposerState.FINALIZED},
    ComposerState.KEYVALUE: {ComposerState.SECTION, ComposerState.KEYVALUE, ComposerState.FINALIZED},
    ComposerState.FINALIZED: set(),
}


class DocumentComposer:
    """Builds one Document. Create a fresh composer per report."""

    def __init__(self, canv, settings: LayoutSettings, palette: Optional[ColorPalette] = None):
        self.canvas = canv
        self.settings = settings
        self.palette = palette or ColorPalette()
        self.cursor = LayoutCursor(canv, settings.page_width, settings.page_height, settings.margin)
        self.state = ComposerState.NEW
        self._sections = 0

    @property
    def document(self) -> Document:
        return self.canvas.document

    # -- state -------------------------------------------------------------

    def _check(self, target: ComposerState) -> None:
        if self.state == ComposerState.FINALIZED:
            raise DocumentFinalizedError("Document already finalized")
        if target not in _TRANSITIONS[self.state]:
            raise ComposerStateError(f"Cannot move from {self.state.value} to {target.value}")

    def _enter(self, target: ComposerState) -> None:
        self._check(target)
        self.state = target

    def _reserve(self, height: float) -> float:
        return self.cursor.reserve(height)

    # -- blocks ------------------------------------------------------------

    def render_header(
        self,
        title: str = REPORT_TITLE,
        subtitle: str = SYSTEM_NAME,
        logo: Optional[Union[str, bytes]] = None,
    ) -> float:
        self._enter(ComposerState.HEADER)
        self.cursor.begin()
        y = draw_header(self.canvas, self.settings, self.palette, logo, title, subtitle)
        self.cursor.move_to(max(y, self.settings.margin))
        return self.cursor.y

    def render_metadata_bar(self, fields: Sequence[Field]) -> float:
        self._enter(ComposerState.METADATA)
        height = self.settings.metadata_bar_height
        y = self._reserve(height)
        draw_metadata_bar(self.canvas, self.settings, self.palette, fields, y)
        return self.cursor.advance(height)

    def render_section_title(self, title: str, keep_with_next: bool = True, follow: Optional[float] = None) -> float:
        """``follow`` is the height kept free below the title; one single-line row by default."""
        self._enter(ComposerState.SECTION)
        s = self.settings
        lead = self._section_lead()
        if not keep_with_next:
            follow = 0.0
        elif follow is None:
            follow = s.line_height + s.row_spacing
        self._reserve(lead + s.title_block_height + follow)
        if not self.cursor.at_page_top():
            self.cursor.advance(lead)
        draw_section_title(self.canvas, s, self.palette, title, self.cursor.y, s.margin)
        self._sections += 1
        return self.cursor.advance(s.title_block_height)

    def render_key_value(self, key: str, value: Any, max_width: Optional[float] = None) -> float:
        self._enter(ComposerState.KEYVALUE)
        block = measure_key_value(self.canvas, self.settings, key, value, max_width)
        y = self._reserve(block.height)
        place_key_value(self.canvas, self.settings, self.palette, block, y, self.settings.margin)
        return self.cursor.advance(block.height)

    def render_paragraph(self, text: Any, indent: float = 0.0) -> float:
        self._enter(ComposerState.KEYVALUE)
        s = self.settings
        style = _style(s, self.palette.text)
        lines = wrap_text(self.canvas, text, s.content_width - indent, style)
        x = s.margin + indent
        height = block_height(len(lines), s.line_height, s.row_spacing)
        if height <= self.cursor.usable_height:
            y = self._reserve(height)
            for i, line in enumerate(lines):
                self.canvas.draw_text(line, x, y + i * s.line_height, style)
            return self.cursor.advance(height)

        # longer than a page: commit line by line
        for line in lines:
            y = self._reserve(s.line_height)
            self.canvas.draw_text(line, x, y, style)
            self.cursor.advance(s.line_height)
        return self.cursor.advance(s.row_spacing)

    def measure_section(self, section: Section) -> float:
        s = self.settings
        style = _style(s, self.palette.text)
        height = s.title_block_height
        for row in section.rows:
            height += measure_key_value(self.canvas, s, row.key, row.value).height
        for text in section.paragraphs:
            lines = wrap_text(self.canvas, text, s.content_width, style)
            height += block_height(len(lines), s.line_height, s.row_spacing)
        return height

    def render_section(self, section: Section) -> float:
        self._check(ComposerState.SECTION)
        if section.keep_together:
            needed = self._section_lead() + self.measure_section(section)
            fits_on_page = needed <= self.cursor.usable_height
            if (
                fits_on_page
                and not self.cursor.at_page_top()
                and would_overflow(self.cursor.y, needed, self.cursor.page_height, self.cursor.margin)
            ):
                logger.debug("Moving section %r to a new page", section.title)
                self.cursor.force_break()

        y = self.render_section_title(
            section.title,
            keep_with_next=bool(section.rows or section.paragraphs),
            follow=self._first_block_height(section),
        )
        for row in section.rows:
            y = self.render_key_value(row.key, row.value)
        for text in section.paragraphs:
            y = self.render_paragraph(text)
        return y

    def finalize(self) -> Document:
        self._enter(ComposerState.FINALIZED)
        self._draw_footers()
        document = self.document.finalize()
        logger.info("Finalized document with %d page(s)", document.page_count)
        return document

    def render_report(self, report: ReportRecord, logo: Optional[Union[str, bytes]] = None) -> Document:
        self.render_header(report.title, report.subtitle, logo)
        self.render_metadata_bar(report.metadata_fields)
        for section in report.sections:
            self.render_section(section)
        return self.finalize()

    def _draw_footers(self) -> None:
        # page totals are only known once layout is done
        if self.settings.margin < FOOTER_MIN_MARGIN:
            return
        pages = self.document.pages
        for page in pages:
            self.canvas.select_page(page)
            draw_footer(self.canvas, self.settings, self.palette, page, len(pages))

    def _first_block_height(self, section: Section) -> float:
        s = self.settings
        if section.rows:
            row = section.rows[0]
            height = measure_key_value(self.canvas, s, row.key, row.value).height
        elif section.paragraphs:
            lines = wrap_text(self.canvas, section.paragraphs[0], s.content_width, _style(s, self.palette.text))
            height = block_height(len(lines), s.line_height, s.row_spacing)
        else:
            return 0.0
        # a first block that cannot share a page with the title only keeps one line
        if s.title_block_height + height > self.cursor.usable_height:
            return s.line_height
        return height

    def _section_lead(self) -> float:
        if self._sections == 0 or self.cursor.at_page_top():
            return 0.0
        return self.settings.section_spacing


def new_composer(
    settings: LayoutSettings,
    palette: Optional[ColorPalette] = None,
    measurer: Optional[TextMeasurer] = None,
) -> DocumentComposer:
    canv = RecordingCanvas(settings.page_width, settings.page_height, measurer=measurer)
    return DocumentComposer(canv, settings, palette)


def compose_report(
    report: ReportRecord,
    settings: LayoutSettings,
    palette: Optional[ColorPalette] = None,
    logo: Optional[Union[str, bytes]] = None,
    measurer: Optional[TextMeasurer] = None,
) -> Document:
    return new_composer(settings, palette, measurer).render_report(report, logo)
