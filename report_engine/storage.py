from __future__ import annotations

from pathlib import Path
from typing import Iterable

from . import config
from .models import Artifact, ReportExport, get_session


ARTIFACT_NAMES = {
    "pdf": "report.pdf",
    "preview_1": "preview_1.png",
    "preview_2": "preview_2.png",
    "preview_3": "preview_3.png",
    "report": "report.json",
    "error": "error.log",
}


def report_dir(slug: str, base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(slug: str, artifact_type: str, base_dir: Path | None = None) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return report_dir(slug, base_dir=base_dir) / filename


def record_artifacts(export: ReportExport, artifacts: Iterable[tuple[str, Path]]) -> None:
    with get_session() as session:
        for artifact_type, path in artifacts:
            try:
                stored = path.relative_to(config.OUT_DIR)
            except ValueError:
                stored = path
            session.add(Artifact(export_id=export.id, type=artifact_type, path=str(stored)))
        session.commit()
