from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from report_engine.errors import ReportDataError
from report_engine.pipeline.ingest import (
    complaint_to_report,
    format_date,
    format_datetime,
    load_report,
    report_from_dict,
)

COMPLAINT = {
    "id": "64f0c",
    "displayId": "CMP-0042",
    "status": "In Progress",
    "createdAt": "2025-03-04T09:15:00Z",
    "isAnonymous": True,
    "username": "someone",
    "userId": "u-1",
    "title": "Broken projector",
    "description": "The projector in the lecture hall flickers.",
    "category": {"name": "Facilities", "priority": "High"},
    "facultyLocation": {"faculty": "Engineering", "facultyBlock": "B", "facultyBlockRoom": "B-12"},
    "attachments": ["https://example.org/a.png", {"url": "https://example.org/b.png"}],
}


def _rows(report, title):
    section = next(s for s in report.sections if s.title == title)
    return {row.key: row.value for row in section.rows}


def test_date_formats() -> None:
    assert format_datetime(datetime(2025, 3, 4, 9, 5)) == "04/03/2025 09:05"
    assert format_date("2025-03-04T09:15:00Z") == "04 March 2025"
    assert format_date(None) == "N/A"
    assert format_datetime("not a date") == "N/A"


def test_complaint_report_sections() -> None:
    history = [{"actionTitle": f"Step {i}", "createdAt": "2025-03-05"} for i in range(7)]
    report = complaint_to_report(COMPLAINT, history=history, generated_at=datetime(2025, 3, 6, 12, 0))

    assert report.report_id == "CMP-0042"
    assert report.metadata_fields == [("Report Generated", "06/03/2025 12:00"), ("Document ID", "CMP-0042")]
    titles = [s.title for s in report.sections]
    assert titles[0] == "Report Summary"
    assert "Media Attachment" in titles
    assert titles[-2:] == ["Activity Timeline", "Declaration"]

    complainant = _rows(report, "Complainant Information")
    assert complainant["Name"] == "Anonymous User"
    assert complainant["User ID"] == "Hidden for Privacy"

    timeline = next(s for s in report.sections if s.title == "Activity Timeline")
    assert len(timeline.rows) == 5
    assert timeline.paragraphs == ["7 recorded activities (showing most recent 5)"]

    files = _rows(report, "Media Attachment")
    assert files == {"File 1": "https://example.org/a.png", "File 2": "https://example.org/b.png"}


def test_missing_fields_stay_empty_for_placeholder() -> None:
    report = complaint_to_report({"id": "x"}, generated_at=datetime(2025, 1, 1))
    titles = [s.title for s in report.sections]
    assert "Media Attachment" not in titles
    assert "Activity Timeline" not in titles
    assert _rows(report, "Location Information")["Room"] is None
    assert _rows(report, "Administrative Handling")["Administrator"] == "Unassigned"


def test_load_generic_report(tmp_path: Path) -> None:
    path = tmp_path / "report.json"
    path.write_text(
        json.dumps(
            {
                "report_id": "R-1",
                "title": "MONTHLY SUMMARY",
                "metadata": [["Period", "March"], ["Document ID", "R-1"]],
                "sections": [{"title": "Totals", "rows": {"Open": 3, "Closed": None}, "keep_together": True}],
            }
        ),
        encoding="utf-8",
    )
    report = load_report(path)
    assert report.title == "MONTHLY SUMMARY"
    assert report.metadata_fields == [("Period", "March"), ("Document ID", "R-1")]
    assert [(r.key, r.value) for r in report.sections[0].rows] == [("Open", 3), ("Closed", None)]
    assert report.sections[0].keep_together


def test_load_complaint_payload(tmp_path: Path) -> None:
    path = tmp_path / "complaint.json"
    path.write_text(json.dumps({"complaint": COMPLAINT, "assignedToName": "Officer A"}), encoding="utf-8")
    report = load_report(path)
    assert _rows(report, "Administrative Handling")["Administrator"] == "Officer A"


def test_bad_report_files(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReportDataError):
        load_report(broken)

    untitled = tmp_path / "untitled.json"
    untitled.write_text(json.dumps({"report_id": "R", "sections": [{"rows": []}]}), encoding="utf-8")
    with pytest.raises(ReportDataError):
        load_report(untitled)

    with pytest.raises(FileNotFoundError):
        load_report(tmp_path / "missing.json")


def test_generic_report_accepts_pairs_and_mappings() -> None:
    report = report_from_dict(
        {
            "report_id": "R-1",
            "metadata": {"Prepared by": "Desk", "Document ID": "R-1"},
            "sections": [
                {"title": "Pairs", "rows": [["Status", "Open"], ("Room", None)]},
                {"title": "Mapping", "rows": {"Block": "A"}},
            ],
        }
    )
    assert report.metadata_fields == [("Prepared by", "Desk"), ("Document ID", "R-1")]
    assert [(r.key, r.value) for r in report.sections[0].rows] == [("Status", "Open"), ("Room", None)]
    assert [(r.key, r.value) for r in report.sections[1].rows] == [("Block", "A")]


@pytest.mark.parametrize(
    "payload",
    [
        {"report_id": "R", "sections": [{"title": "S", "rows": [{"key": "Status", "value": "Open"}]}]},
        {"report_id": "R", "sections": [{"title": "S", "rows": [["Status", "Open", "extra"]]}]},
        {"report_id": "R", "sections": [{"title": "S", "rows": ["ab"]}]},
        {"report_id": "R", "metadata": [{"label": "Generated", "value": "now"}]},
        {"report_id": "R", "metadata": ["Generated"]},
    ],
)
def test_generic_report_rejects_malformed_pairs(payload) -> None:
    with pytest.raises(ReportDataError):
        report_from_dict(payload)
