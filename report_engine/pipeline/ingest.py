from __future__ import annotations

from datetime import datetime
import hashlib
import json
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional

from slugify import slugify

from ..config import DECLARATION_TEXT, MISSING_VALUE, TIMELINE_LIMIT
from ..errors import ReportDataError
from ..layout.composer import KeyValue, ReportRecord, Section


MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def slug_from_title(title: str) -> str:
    slug = slugify(title)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(title.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from title")
    return slug


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_datetime(value: Any) -> str:
    """dd/mm/yyyy HH:MM"""
    d = _parse_datetime(value)
    if d is None:
        return MISSING_VALUE
    return d.strftime("%d/%m/%Y %H:%M")


def format_date(value: Any) -> str:
    """dd Month yyyy"""
    d = _parse_datetime(value)
    if d is None:
        return MISSING_VALUE
    return f"{d.day:02d} {MONTH_NAMES[d.month - 1]} {d.year}"


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _nested(record: dict, key: str) -> dict:
    value = record.get(key)
    return value if isinstance(value, dict) else {}


def complaint_to_report(
    complaint: dict,
    assigned_to_name: Optional[str] = None,
    history: Optional[Iterable[dict]] = None,
    generated_at: Optional[datetime] = None,
) -> ReportRecord:
    """Lay out a complaint record as the official complaint report."""
    report_id = str(_first(complaint.get("displayId"), complaint.get("id")) or MISSING_VALUE)
    anonymous = bool(complaint.get("isAnonymous"))
    category = _nested(complaint, "category")
    location = _nested(complaint, "facultyLocation")

    sections = [
        Section(
            "Report Summary",
            [
                KeyValue("Reference", report_id),
                KeyValue("Status", complaint.get("status") or "Pending"),
                KeyValue("Submitted", format_date(complaint.get("createdAt"))),
                KeyValue("Last Updated", format_date(_first(complaint.get("updatedAt"), complaint.get("createdAt")))),
            ],
        ),
        Section(
            "Complainant Information",
            [
                KeyValue("Name", "Anonymous User" if anonymous else (complaint.get("username") or "Unknown")),
                KeyValue("Submitted By", "Anonymous" if anonymous else "Non-Anonymous"),
                KeyValue("User ID", "Hidden for Privacy" if anonymous else complaint.get("userId")),
            ],
            keep_together=True,
        ),
        Section(
            "Complaint Details",
            [
                KeyValue("Title", complaint.get("title") or "No Title Provided"),
                KeyValue("Description", complaint.get("description") or "No description provided"),
                KeyValue("Category", category.get("name")),
                KeyValue("Priority", _first(category.get("priority"), complaint.get("priority"))),
            ],
        ),
        Section(
            "Location Information",
            [
                KeyValue("Faculty", _first(location.get("faculty"), location.get("facultyName"))),
                KeyValue("Block", location.get("facultyBlock")),
                KeyValue("Room", location.get("facultyBlockRoom")),
                KeyValue("Latitude", complaint.get("latitude")),
                KeyValue("Longitude", complaint.get("longitude")),
            ],
            keep_together=True,
        ),
    ]

    attachments = complaint.get("attachments") or []
    if attachments:
        sections.append(
            Section(
                "Media Attachment",
                [
                    KeyValue(
                        f"File {i}",
                        item if isinstance(item, str) else (item or {}).get("url"),
                    )
                    for i, item in enumerate(attachments, start=1)
                ],
            )
        )

    sections.append(
        Section(
            "Administrative Handling",
            [
                KeyValue("Administrator", _first(complaint.get("adminName"), assigned_to_name) or "Unassigned"),
                KeyValue("Admin ID", complaint.get("adminId")),
            ],
            keep_together=True,
        )
    )

    events = list(history or [])
    if events:
        shown = events[:TIMELINE_LIMIT]
        timeline = Section(
            "Activity Timeline",
            paragraphs=[f"{len(events)} recorded activities (showing most recent {len(shown)})"],
        )
        for event in shown:
            details = event.get("actionDetails")
            when = format_date(event.get("createdAt"))
            timeline.rows.append(
                KeyValue(event.get("actionTitle") or "Action Taken", f"{when}\n{details}" if details else when)
            )
        sections.append(timeline)

    sections.append(Section("Declaration", paragraphs=[DECLARATION_TEXT], keep_together=True))

    generated = generated_at or datetime.now()
    return ReportRecord(
        report_id=report_id,
        metadata_fields=[
            ("Report Generated", format_datetime(generated)),
            ("Document ID", report_id),
        ],
        sections=sections,
    )


def _pairs(items, what: str, report_id) -> List[tuple]:
    """Rows and metadata are [label, value] pairs; anything else is a data error."""
    pairs = []
    for item in items:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ReportDataError(f"Malformed {what} in report {report_id}: expected [label, value], got {item!r}")
        pairs.append((str(item[0]), item[1]))
    return pairs


def report_from_dict(payload: dict) -> ReportRecord:
    report_id = payload.get("report_id") or payload.get("id")
    if not report_id:
        raise ReportDataError("Report has no report_id")
    sections: List[Section] = []
    for raw in payload.get("sections") or []:
        if not isinstance(raw, dict) or not raw.get("title"):
            raise ReportDataError(f"Section without a title in report {report_id}")
        rows = raw.get("rows") or []
        if isinstance(rows, dict):
            rows = list(rows.items())
        sections.append(
            Section(
                title=str(raw["title"]),
                rows=[KeyValue(key, value) for key, value in _pairs(rows, "row", report_id)],
                paragraphs=[str(text) for text in raw.get("paragraphs") or []],
                keep_together=bool(raw.get("keep_together", False)),
            )
        )
    record = ReportRecord(report_id=str(report_id), sections=sections)
    if payload.get("title"):
        record.title = str(payload["title"])
    if payload.get("subtitle"):
        record.subtitle = str(payload["subtitle"])
    metadata = payload.get("metadata") or []
    if isinstance(metadata, dict):
        metadata = list(metadata.items())
    record.metadata_fields = _pairs(metadata, "metadata field", report_id) or [
        ("Report Generated", format_datetime(datetime.now())),
        ("Document ID", str(report_id)),
    ]
    return record


def load_report(path: Path) -> ReportRecord:
    if not path.exists():
        raise FileNotFoundError(f"Report not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ReportDataError(f"Report is not valid JSON: {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ReportDataError(f"Report must be a JSON object: {path}")

    if "sections" in payload:
        return report_from_dict(payload)
    complaint = payload.get("complaint", payload)
    if not isinstance(complaint, dict):
        raise ReportDataError(f"Complaint must be a JSON object: {path}")
    return complaint_to_report(
        complaint,
        assigned_to_name=payload.get("assignedToName"),
        history=payload.get("history"),
    )
