from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Tuple
import json

from reportlab.lib.pagesizes import A4, LETTER, landscape
from reportlab.lib.units import mm


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "exports.db"
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "assets" / "layout_preset.json"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

SYSTEM_NAME = "UMSafe Complaint Management System"
REPORT_TITLE = "COMPLAINT REPORT"
FOOTER_NOTE = "This document is system-generated"
DECLARATION_TEXT = (
    "This document is generated for official record purposes. No signature is required."
)
MISSING_VALUE = "N/A"
TIMELINE_LIMIT = 5

# reportlab page sizes are in points; the layout engine works in millimetres.
PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "a4": (A4[0] / mm, A4[1] / mm),
    "letter": (LETTER[0] / mm, LETTER[1] / mm),
}


@dataclass(frozen=True)
class LayoutSettings:
    page_width: float = PAGE_SIZES["a4"][0]
    page_height: float = PAGE_SIZES["a4"][1]
    margin: float = 20.0
    font_name: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    header_height: float = 35.0
    title_size: float = 22.0
    subtitle_size: float = 10.0
    metadata_size: float = 9.0
    section_title_size: float = 14.0
    body_size: float = 10.0
    footer_size: float = 8.0
    line_height: float = 5.0
    row_spacing: float = 3.0
    label_column_width: float = 40.0
    title_block_height: float = 8.0
    underline_length: float = 40.0
    metadata_bar_height: float = 12.0
    section_spacing: float = 4.0
    wrap_keys: bool = False

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.page_height - 2 * self.margin


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_layout_settings(page_size: str = "a4", orientation: str = "portrait", **overrides) -> LayoutSettings:
    key = page_size.lower()
    if key not in PAGE_SIZES:
        raise ValueError(f"Unsupported page size: {page_size}")
    width, height = PAGE_SIZES[key]
    if orientation == "landscape":
        width, height = landscape((width, height))
    elif orientation != "portrait":
        raise ValueError(f"Unsupported orientation: {orientation}")

    preset = load_style_preset()
    fields = {name for name in LayoutSettings.__dataclass_fields__}
    values = {k: v for k, v in preset.items() if k in fields}
    settings = replace(LayoutSettings(), page_width=width, page_height=height, **values)
    if overrides:
        settings = replace(settings, **overrides)
    return settings


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "exports.db"
