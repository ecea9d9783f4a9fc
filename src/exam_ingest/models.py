"""Domain objects shared by the collector, the selection engine and the reports."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .core.lateness import format_timestamp


class Disposition(str, Enum):
    """Label written to the ``ToMark`` column of the reports."""

    TO_MARK = "Yes"
    SUPERSEDED = "No - Superseded"
    LATE = "No - LATE"
    BAD = "Bad submission"
    MANUAL = "Manual"
    NO_SUBMISSION = "No submission"


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    BAD = "bad"
    NONE = "none"


LATE_LABEL = "LATE"
MANUAL_LABEL = "Manual"


@dataclass(frozen=True)
class StudentRecord:
    """One row of the class list."""

    student_id: str
    exam_number: str
    extra_time: int = 0


@dataclass(frozen=True)
class CandidateSubmission:
    """A single Learn receipt found for a student, before selection."""

    student_id: str
    submitted_at: datetime
    receipt_path: Path
    payload_files: Tuple[Path, ...] = ()
    filetype_error: str = ""
    late: bool = False
    exam_number: str = ""
    extra_time: int = 0
    name: str = ""
    assignment: str = ""
    original_filename: str = ""
    receipt_student_id: str = ""

    @property
    def number_of_files(self) -> int:
        return len(self.payload_files)

    @property
    def late_label(self) -> str:
        return LATE_LABEL if self.late else ""

    def files(self) -> Tuple[Path, ...]:
        """Receipt first, then every payload."""
        return (self.receipt_path, *self.payload_files)


@dataclass(frozen=True)
class AuditEntry:
    """Immutable row of the submission summary report."""

    student_id: str
    exam_number: str
    disposition: Disposition
    name: str = ""
    assignment: str = ""
    date_submitted: str = ""
    late_label: str = ""
    extra_time: int = 0
    receipt_filename: str = ""
    filename: str = ""
    number_of_files: int = 0
    filetype_error: str = ""
    output_file: str = ""

    @classmethod
    def for_candidate(
        cls,
        candidate: CandidateSubmission,
        disposition: Disposition,
        output_file: str = "",
    ) -> "AuditEntry":
        filename = candidate.payload_files[0].name if candidate.payload_files else ""
        return cls(
            student_id=candidate.student_id,
            exam_number=candidate.exam_number,
            disposition=disposition,
            name=candidate.name,
            assignment=candidate.assignment,
            date_submitted=format_timestamp(candidate.submitted_at),
            late_label=candidate.late_label,
            extra_time=candidate.extra_time,
            receipt_filename=candidate.receipt_path.name,
            filename=filename,
            number_of_files=candidate.number_of_files,
            filetype_error=candidate.filetype_error,
            output_file=output_file,
        )

    @classmethod
    def for_student(
        cls,
        student: StudentRecord,
        disposition: Disposition,
        *,
        filename: str = "",
        late_label: str = "",
        number_of_files: int = 0,
        output_file: str = "",
    ) -> "AuditEntry":
        return cls(
            student_id=student.student_id,
            exam_number=student.exam_number,
            disposition=disposition,
            late_label=late_label,
            extra_time=student.extra_time,
            filename=filename,
            number_of_files=number_of_files,
            output_file=output_file,
        )

    def with_output(self, output_file: str, disposition: Optional[Disposition] = None) -> "AuditEntry":
        return replace(self, output_file=output_file, disposition=disposition or self.disposition)


@dataclass(frozen=True)
class Outcome:
    """The single final result for one roster student."""

    kind: OutcomeKind
    student: StudentRecord
    disposition: Disposition
    submission: Optional[CandidateSubmission] = None
    late_label: str = ""
    output_file: str = ""
    manual_path: Optional[Path] = None

    def as_entry(self) -> AuditEntry:
        """Flatten into a report row."""
        if self.submission is not None:
            entry = AuditEntry.for_candidate(self.submission, self.disposition, self.output_file)
            return replace(entry, late_label=self.late_label)
        return AuditEntry.for_student(
            self.student,
            self.disposition,
            filename=self.manual_path.name if self.manual_path else "",
            late_label=self.late_label,
            number_of_files=1 if self.manual_path else 0,
            output_file=self.output_file,
        )


class ActionKind(str, Enum):
    DELETE = "delete"
    RELOCATE = "relocate"


@dataclass(frozen=True)
class FileAction:
    """A filesystem side effect requested by the selection engine."""

    kind: ActionKind
    path: Path
    target: Optional[Path] = None
    cleanup: Tuple[Path, ...] = ()

    @classmethod
    def delete(cls, path: Path) -> "FileAction":
        return cls(kind=ActionKind.DELETE, path=path)

    @classmethod
    def relocate(cls, src: Path, dst: Path, cleanup: Tuple[Path, ...] = ()) -> "FileAction":
        # cleanup paths are removed only once the relocation has succeeded
        return cls(kind=ActionKind.RELOCATE, path=src, target=dst, cleanup=cleanup)


@dataclass
class Decision:
    """Selection result for one student: outcome, audit rows and file actions."""

    outcome: Outcome
    audit: List[AuditEntry] = field(default_factory=list)
    actions: List[FileAction] = field(default_factory=list)

    @property
    def relocations(self) -> List[FileAction]:
        return [action for action in self.actions if action.kind is ActionKind.RELOCATE]


__all__ = [
    "ActionKind",
    "AuditEntry",
    "CandidateSubmission",
    "Decision",
    "Disposition",
    "FileAction",
    "LATE_LABEL",
    "MANUAL_LABEL",
    "Outcome",
    "OutcomeKind",
    "StudentRecord",
]
