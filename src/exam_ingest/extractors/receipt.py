"""Parser for the per-attempt receipt files found in a Learn assignment download.

A receipt looks like::

    Name: Jane Doe (s1234567)
    Assignment: MATH00000 Exam
    Date Submitted: Wednesday, 22 April 2020 15:55:44 o'clock BST
    Current Mark: Needs Marking

    Submission Field:
    There is no student submission text data for this assignment.

    Comments:
    There are no student comments for this assignment.

    Files:
        Original filename: exam.pdf
        Filename: MATH00000 Exam_s1234567_attempt_2020-04-22-15-55-44_exam.pdf
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.lateness import TIMESTAMP_FORMAT, format_timestamp
from ..errors import ReceiptParseError

_NAME_RE = re.compile(r"^(?P<name>.*?)\s*\((?P<uun>[A-Za-z]?[0-9]{7})\)\s*$")
_LONG_DATE_RE = re.compile(
    r"(?P<day>\d{1,2})\s+(?P<month>[A-Za-z]+)\s+(?P<year>\d{4})\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
)

PAYLOAD_SUFFIX = ".pdf"


@dataclass(frozen=True)
class Receipt:
    """Structured content of one receipt file."""

    path: Path
    student_id: str
    name: str
    assignment: str
    date_submitted: str
    filenames: Tuple[str, ...] = ()
    original_filenames: Tuple[str, ...] = ()
    filetype_error: str = ""

    @property
    def number_of_files(self) -> int:
        return len(self.filenames)

    @property
    def submitted_at(self) -> datetime:
        return datetime.strptime(self.date_submitted, TIMESTAMP_FORMAT)


def parse_submission_date(text: str) -> Optional[datetime]:
    """Read either the normalized form or Learn's long ``Weekday, 22 April 2020 15:55:44`` form."""
    value = (text or "").strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        pass
    match = _LONG_DATE_RE.search(value)
    if not match:
        return None
    compact = "{day} {month} {year} {hour}:{minute}:{second}".format(**match.groupdict())
    for pattern in ("%d %B %Y %H:%M:%S", "%d %b %Y %H:%M:%S"):
        try:
            return datetime.strptime(compact, pattern)
        except ValueError:
            continue
    return None


def _filetype_error(filenames: List[str]) -> str:
    problems = [f"{name} is not a PDF" for name in filenames if not name.lower().endswith(PAYLOAD_SUFFIX)]
    return "; ".join(problems)


def parse_receipt(path: Path | str) -> Receipt:
    receipt_path = Path(path)
    try:
        text = receipt_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ReceiptParseError(receipt_path, f"unreadable ({exc})") from exc

    fields = {}
    filenames: List[str] = []
    originals: List[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("Original filename:"):
            originals.append(line.split(":", 1)[1].strip())
        elif line.startswith("Filename:"):
            filenames.append(line.split(":", 1)[1].strip())
        elif ":" in line and not fields.get("files"):
            key, value = line.split(":", 1)
            key = key.strip().lower()
            if key == "files":
                fields["files"] = "yes"
            elif key and key not in fields:
                fields[key] = value.strip()

    raw_date = fields.get("date submitted")
    if raw_date is None:
        raise ReceiptParseError(receipt_path, "no 'Date Submitted' line")
    submitted_at = parse_submission_date(raw_date)
    if submitted_at is None:
        raise ReceiptParseError(receipt_path, f"unrecognised submission date '{raw_date}'")

    name = fields.get("name", "")
    student_id = ""
    match = _NAME_RE.match(name)
    if match:
        name = match.group("name")
        student_id = match.group("uun").upper()

    filenames = [entry for entry in filenames if entry]
    return Receipt(
        path=receipt_path,
        student_id=student_id,
        name=name,
        assignment=fields.get("assignment", ""),
        date_submitted=format_timestamp(submitted_at),
        filenames=tuple(filenames),
        original_filenames=tuple(entry for entry in originals if entry),
        filetype_error=_filetype_error(filenames),
    )


__all__ = ["Receipt", "parse_receipt", "parse_submission_date"]
