"""CSV reports written at the end of each run."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List

from ..errors import ReportError
from ..models import AuditEntry
from .lateness import format_timestamp

COLUMNS = [
    "StudentID",
    "ExamNumber",
    "Name",
    "Assignment",
    "DateSubmitted",
    "LateSubmission",
    "ExtraTime",
    "ReceiptFilename",
    "Filename",
    "NumberOfFiles",
    "FiletypeError",
    "ToMark",
    "OutputFile",
]

SUCCESS_SUFFIX = "learn-success"
ERRORS_SUFFIX = "learn-errors"
NO_SUBMISSION_SUFFIX = "learn-nosubmission"
SUMMARY_SUFFIX = "learn-submissionsummary"


@dataclass(frozen=True)
class ReportPaths:
    success: Path
    errors: Path
    no_submission: Path
    summary: Path

    @classmethod
    def for_run(cls, output_dir: Path, run_time: datetime) -> "ReportPaths":
        stamp = format_timestamp(run_time)
        return cls(
            success=output_dir / f"{stamp}-{SUCCESS_SUFFIX}.csv",
            errors=output_dir / f"{stamp}-{ERRORS_SUFFIX}.csv",
            no_submission=output_dir / f"{stamp}-{NO_SUBMISSION_SUFFIX}.csv",
            summary=output_dir / f"{stamp}-{SUMMARY_SUFFIX}.csv",
        )


def entry_row(entry: AuditEntry) -> Dict[str, object]:
    return {
        "StudentID": entry.student_id,
        "ExamNumber": entry.exam_number,
        "Name": entry.name,
        "Assignment": entry.assignment,
        "DateSubmitted": entry.date_submitted,
        "LateSubmission": entry.late_label,
        "ExtraTime": entry.extra_time,
        "ReceiptFilename": entry.receipt_filename,
        "Filename": entry.filename,
        "NumberOfFiles": entry.number_of_files,
        "FiletypeError": entry.filetype_error,
        "ToMark": entry.disposition.value,
        "OutputFile": entry.output_file,
    }


def write_entries(path: Path, entries: Iterable[AuditEntry]) -> int:
    """Write ``entries`` to ``path`` with a header row; returns the number of rows."""
    count = 0
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=COLUMNS)
            writer.writeheader()
            for entry in entries:
                writer.writerow(entry_row(entry))
                count += 1
    except OSError as exc:
        raise ReportError(f"Cannot write report {path}: {exc}") from exc
    return count


def write_reports(
    output_dir: Path,
    run_time: datetime,
    *,
    accepted: List[AuditEntry],
    bad: List[AuditEntry],
    missing: List[AuditEntry],
    audit: List[AuditEntry],
) -> ReportPaths:
    paths = ReportPaths.for_run(Path(output_dir), run_time)
    write_entries(paths.success, accepted)
    write_entries(paths.errors, bad)
    write_entries(paths.no_submission, missing)
    write_entries(paths.summary, audit)
    return paths


__all__ = ["COLUMNS", "ReportPaths", "entry_row", "write_entries", "write_reports"]
