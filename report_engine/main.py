from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from sqlmodel import select

from . import config
from .models import ExportStatus, ReportExport, get_session, init_db, reset_engine
from .pipeline.run import run_exports

app = typer.Typer(help="Paginated report PDF export")


def _setup(out: Optional[Path], verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=config.LOG_FORMAT)
    if out:
        config.set_out_dir(out)
        reset_engine()


@app.command()
def build(
    paths: List[Path] = typer.Argument(..., help="Report JSON files"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    page_size: str = typer.Option("a4", "--page-size", help="a4 or letter"),
    landscape: bool = typer.Option(False, "--landscape", help="Landscape pages"),
    logo: Optional[Path] = typer.Option(None, "--logo", help="Header logo image"),
    previews: bool = typer.Option(True, "--previews/--no-previews", help="Render PNG previews"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    _setup(out, verbose)
    results = run_exports(
        paths,
        page_size=page_size,
        orientation="landscape" if landscape else "portrait",
        logo=str(logo) if logo else None,
        previews=previews,
    )
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for slug in results["FAILED"]:
        typer.echo(f"FAILED: {slug}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    failed: bool = typer.Option(False, "--failed", help="Only failed exports"),
) -> None:
    _setup(out, False)
    init_db()
    with get_session() as session:
        statement = select(ReportExport).order_by(ReportExport.created_at)
        if failed:
            statement = statement.where(ReportExport.status == ExportStatus.FAILED)
        exports = list(session.exec(statement))
    if not exports:
        typer.echo("No exports recorded")
        return
    for export in exports:
        line = f"{export.created_at:%Y-%m-%d %H:%M} {export.status.value:6} {export.slug} ({export.page_count} pages)"
        if export.fail_detail:
            line += f" - {export.fail_detail}"
        typer.echo(line)


if __name__ == "__main__":
    app()
