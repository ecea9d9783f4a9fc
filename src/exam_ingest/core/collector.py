"""Scan a Learn download and group the receipts found in it by student."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from ..errors import ParseError, ReceiptParseError
from ..extractors.receipt import Receipt, parse_receipt
from ..extractors.roster import RosterIndex, normalize_student_id
from ..models import CandidateSubmission
from ..utils.logger import debug_detail, get_logger
from .lateness import is_late

log = get_logger("collector")

RECEIPT_SUFFIX = ".txt"
FILENAME_ID_RE = re.compile(r"_(s[0-9]{7})_attempt_", re.IGNORECASE)

ReceiptParser = Callable[[Path], Receipt]


@dataclass
class Collection:
    """Candidates per student in discovery order, plus receipts that were left out."""

    groups: Dict[str, List[CandidateSubmission]] = field(default_factory=dict)
    skipped: Dict[Path, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(len(group) for group in self.groups.values())

    def add(self, candidate: CandidateSubmission) -> None:
        self.groups.setdefault(candidate.student_id, []).append(candidate)

    def group(self, student_id: str) -> List[CandidateSubmission]:
        return self.groups.get(student_id, [])


def student_id_from_filename(filename: str) -> Optional[str]:
    match = FILENAME_ID_RE.search(filename)
    if not match:
        return None
    return match.group(1).upper()


def iter_receipts(learn_dir: Path) -> Iterator[Path]:
    """Receipt files anywhere below ``learn_dir``, in a stable order."""
    for path in sorted(learn_dir.rglob("*")):
        if path.is_file() and path.suffix.lower() == RECEIPT_SUFFIX:
            yield path


def build_candidate(
    receipt: Receipt,
    student_id: str,
    roster: RosterIndex,
    deadline: datetime,
) -> CandidateSubmission:
    student = roster[student_id]
    submitted_at = receipt.submitted_at
    return CandidateSubmission(
        student_id=student.student_id,
        submitted_at=submitted_at,
        receipt_path=receipt.path,
        payload_files=tuple(receipt.path.parent / name for name in receipt.filenames),
        filetype_error=receipt.filetype_error,
        late=is_late(submitted_at, deadline, student.extra_time),
        exam_number=student.exam_number,
        extra_time=student.extra_time,
        name=receipt.name,
        assignment=receipt.assignment,
        original_filename=receipt.original_filenames[0] if receipt.original_filenames else "",
        receipt_student_id=receipt.student_id,
    )


def scan(
    learn_dir: Path,
    roster: RosterIndex,
    deadline: datetime,
    *,
    strict: bool = False,
    parser: ReceiptParser = parse_receipt,
) -> Collection:
    """Read every receipt in ``learn_dir`` and attach roster details and the late flag.

    Unknown students and unparseable receipts are logged and skipped. With
    ``strict`` set, the first unparseable receipt aborts the scan instead.
    """
    collection = Collection()
    for receipt_path in iter_receipts(Path(learn_dir)):
        student_id = student_id_from_filename(receipt_path.name)
        if student_id is None:
            reason = "no student identifier in file name"
            log.warning("Skipping %s: %s", receipt_path.name, reason)
            collection.skipped[receipt_path] = reason
            continue
        if student_id not in roster:
            reason = f"{student_id} is not in the class list"
            log.warning("Skipping %s: %s", receipt_path.name, reason)
            collection.skipped[receipt_path] = reason
            continue

        try:
            receipt = parser(receipt_path)
        except ParseError as exc:
            if strict:
                raise
            log.error("Cannot parse receipt %s: %s", receipt_path.name, exc)
            collection.skipped[receipt_path] = str(exc)
            continue

        if receipt.student_id and normalize_student_id(receipt.student_id) != student_id:
            log.warning(
                "Receipt %s names %s but the file name says %s; using the file name",
                receipt_path.name,
                receipt.student_id,
                student_id,
            )

        try:
            candidate = build_candidate(receipt, student_id, roster, deadline)
        except ValueError as exc:
            error = ReceiptParseError(receipt_path, f"bad submission date ({exc})")
            if strict:
                raise error from exc
            log.error("Cannot parse receipt %s: %s", receipt_path.name, error.reason)
            collection.skipped[receipt_path] = str(error)
            continue

        collection.add(candidate)
        debug_detail(
            f"{candidate.student_id}: {receipt_path.name} at {receipt.date_submitted}"
            f" ({candidate.number_of_files} file(s){', LATE' if candidate.late else ''})"
        )

    log.info("Learn receipts: %d from %d students", collection.total, len(collection.groups))
    return collection


__all__ = [
    "Collection",
    "FILENAME_ID_RE",
    "build_candidate",
    "iter_receipts",
    "scan",
    "student_id_from_filename",
]
