from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
import json
import logging
from typing import Iterable, List, Optional, Tuple

from .. import config
from ..config import load_layout_settings
from ..layout.composer import ReportRecord, compose_report
from ..layout.document import Document
from ..layout.palette import load_palette
from ..models import ExportStatus, ReportExport, get_session, init_db
from ..storage import artifact_path, record_artifacts
from .ingest import load_report, slug_from_title
from .render_pdf import render_pdf
from .render_preview import render_previews


logger = logging.getLogger(__name__)


def _write_error(slug: str, message: str) -> None:
    error_path = artifact_path(slug, "error", base_dir=config.OUT_DIR)
    error_path.write_text(message, encoding="utf-8")


def report_slug(report: ReportRecord) -> str:
    return slug_from_title(f"report {report.report_id}")


def export_report(
    report: ReportRecord,
    page_size: str = "a4",
    orientation: str = "portrait",
    logo: Optional[str] = None,
    previews: bool = True,
    base_dir: Path | None = None,
) -> Tuple[Document, List[tuple[str, Path]]]:
    settings = load_layout_settings(page_size, orientation)
    document = compose_report(report, settings, load_palette(), logo=logo)

    slug = report_slug(report)
    pdf_path = render_pdf(document, artifact_path(slug, "pdf", base_dir=base_dir))
    artifacts: List[tuple[str, Path]] = [("pdf", pdf_path)]

    if previews:
        for index, path in enumerate(render_previews(slug, pdf_path, base_dir=base_dir), start=1):
            artifacts.append((f"preview_{index}", path))

    report_path = artifact_path(slug, "report", base_dir=base_dir)
    report_path.write_text(json.dumps(asdict(report), indent=2, default=str), encoding="utf-8")
    artifacts.append(("report", report_path))

    logger.info("Exported %s: %d page(s) -> %s", report.report_id, document.page_count, pdf_path)
    return document, artifacts


def run_exports(
    paths: Iterable[Path],
    page_size: str = "a4",
    orientation: str = "portrait",
    logo: Optional[str] = None,
    previews: bool = True,
) -> dict[str, list[str]]:
    init_db()
    results: dict[str, list[str]] = {"READY": [], "FAILED": []}
    with get_session() as session:
        for path in paths:
            report: Optional[ReportRecord] = None
            artifacts: List[tuple[str, Path]] = []
            page_count = 0
            try:
                report = load_report(path)
                document, artifacts = export_report(report, page_size, orientation, logo, previews)
                page_count = document.page_count
                status = ExportStatus.READY
                error = None
            except Exception as exc:
                logger.exception("Export error for %s", path)
                status = ExportStatus.FAILED
                error = str(exc) or exc.__class__.__name__

            slug = report_slug(report) if report is not None else slug_from_title(path.stem)
            export = ReportExport(
                report_id=report.report_id if report is not None else path.stem,
                title=report.title if report is not None else path.name,
                slug=slug,
                page_size=page_size,
                status=status,
                page_count=page_count,
                fail_detail=error,
            )
            session.add(export)
            session.commit()
            session.refresh(export)

            if status == ExportStatus.READY:
                record_artifacts(export, artifacts)
                results["READY"].append(slug)
            else:
                _write_error(slug, error or "Unknown error")
                results["FAILED"].append(slug)
    return results
