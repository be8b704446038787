from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import fitz  # PyMuPDF

from ..storage import artifact_path

PREVIEW_TYPES = ("preview_1", "preview_2", "preview_3")


def _pick_preview_pages(page_count: int) -> Tuple[int, ...]:
    # first, middle and last page; short documents get fewer previews
    if page_count <= 0:
        return ()
    if page_count <= 3:
        return tuple(range(page_count))
    return (0, page_count // 2, page_count - 1)


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1600) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the image is at least min_px
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(2.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_previews(slug: str, pdf_path: Path, base_dir: Path | None = None) -> List[Path]:
    previews: List[Path] = []
    with fitz.open(str(pdf_path)) as doc:
        for artifact_type, index in zip(PREVIEW_TYPES, _pick_preview_pages(doc.page_count)):
            out_path = artifact_path(slug, artifact_type, base_dir=base_dir)
            _render_page_to_png(doc, index, out_path)
            previews.append(out_path)
    return previews
