"""Class list loading and the student-keyed roster index."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from ..errors import LoadError
from ..models import StudentRecord
from ..utils.logger import debug_detail

STUDENT_PREFIX = "S"

ID_COLUMN = "UUN"
EXAM_NUMBER_COLUMN = "Exam Number"
EXTRA_TIME_COLUMN = "Extra Time"


@dataclass(frozen=True)
class RosterRow:
    """Raw class list row, before normalization."""

    line: int
    student_id: str
    exam_number: str
    extra_time: int


def normalize_student_id(raw: str) -> str:
    """Upper-case the identifier and make sure it carries the ``S`` prefix."""
    student_id = (raw or "").strip().upper()
    if student_id and not student_id.startswith(STUDENT_PREFIX):
        student_id = STUDENT_PREFIX + student_id
    return student_id


def _header_key(name: str) -> str:
    return " ".join((name or "").split()).lower()


def _resolve_columns(fieldnames: Optional[List[str]], path: Path) -> Dict[str, str]:
    if not fieldnames:
        raise LoadError(f"Class list {path} is empty or has no header row")
    by_key = {_header_key(name): name for name in fieldnames}
    columns: Dict[str, str] = {}
    missing = []
    for wanted in (ID_COLUMN, EXAM_NUMBER_COLUMN, EXTRA_TIME_COLUMN):
        actual = by_key.get(_header_key(wanted))
        if actual is None:
            missing.append(wanted)
        else:
            columns[wanted] = actual
    if missing:
        raise LoadError(f"Class list {path} is missing column(s): {', '.join(missing)}")
    return columns


def _parse_extra_time(raw: Optional[str], line: int, path: Path) -> int:
    text = (raw or "").strip()
    if not text:
        return 0
    try:
        minutes = int(text)
    except ValueError as exc:
        raise LoadError(f"{path.name} line {line}: extra time '{text}' is not a whole number of minutes") from exc
    if minutes < 0:
        raise LoadError(f"{path.name} line {line}: extra time cannot be negative ({minutes})")
    return minutes


def read_roster_rows(path: Path | str) -> List[RosterRow]:
    """Read ``UUN``, ``Exam Number`` and ``Extra Time`` from a class list CSV."""
    csv_path = Path(path)
    try:
        with csv_path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            columns = _resolve_columns(reader.fieldnames, csv_path)
            rows: List[RosterRow] = []
            for record in reader:
                line = reader.line_num
                raw_id = (record.get(columns[ID_COLUMN]) or "").strip()
                if not raw_id and not any((value or "").strip() for value in record.values() if isinstance(value, str)):
                    continue
                if not raw_id:
                    raise LoadError(f"{csv_path.name} line {line}: missing {ID_COLUMN}")
                rows.append(
                    RosterRow(
                        line=line,
                        student_id=raw_id,
                        exam_number=(record.get(columns[EXAM_NUMBER_COLUMN]) or "").strip(),
                        extra_time=_parse_extra_time(record.get(columns[EXTRA_TIME_COLUMN]), line, csv_path),
                    )
                )
    except FileNotFoundError as exc:
        raise LoadError(f"Class list not found: {csv_path}") from exc
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise LoadError(f"Cannot read class list {csv_path}: {exc}") from exc
    debug_detail(f"Read {len(rows)} class list rows from {csv_path}")
    return rows


class RosterIndex(Mapping[str, StudentRecord]):
    """Students keyed by normalized identifier, iterated in class list order."""

    def __init__(self, records: Optional[Dict[str, StudentRecord]] = None) -> None:
        self._records: Dict[str, StudentRecord] = dict(records or {})

    @classmethod
    def load(cls, rows: Iterable[RosterRow]) -> "RosterIndex":
        records: Dict[str, StudentRecord] = {}
        first_seen: Dict[str, int] = {}
        for row in rows:
            student_id = normalize_student_id(row.student_id)
            if student_id in records:
                raise LoadError(
                    f"Duplicate student {student_id} in class list (lines {first_seen[student_id]} and {row.line})"
                )
            records[student_id] = StudentRecord(
                student_id=student_id,
                exam_number=row.exam_number,
                extra_time=row.extra_time,
            )
            first_seen[student_id] = row.line
        return cls(records)

    @classmethod
    def from_csv(cls, path: Path | str) -> "RosterIndex":
        return cls.load(read_roster_rows(path))

    def __getitem__(self, student_id: str) -> StudentRecord:
        return self._records[normalize_student_id(student_id)]

    def __contains__(self, student_id: object) -> bool:
        return isinstance(student_id, str) and normalize_student_id(student_id) in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def students(self) -> List[StudentRecord]:
        return list(self._records.values())


__all__ = [
    "RosterIndex",
    "RosterRow",
    "normalize_student_id",
    "read_roster_rows",
]
