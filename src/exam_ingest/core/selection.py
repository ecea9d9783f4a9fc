"""Choose at most one submission per student and describe what to do with the files.

The choice is a left fold over the student's receipts in discovery order.
The accumulator starts as a sentinel that counts as late and sits before any
real timestamp, so the first on-time receipt always replaces it. Late
receipts never touch the accumulator. An on-time receipt replaces it only
when strictly newer, so of two receipts with the same timestamp the one seen
first is kept.

Nothing here touches the filesystem apart from checking for a manual
``s1234567.pdf``; the returned :class:`~exam_ingest.models.Decision` lists the
deletes and the single relocation for :mod:`exam_ingest.core.relocate` to
carry out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..config.settings import IngestConfig
from ..models import (
    LATE_LABEL,
    MANUAL_LABEL,
    AuditEntry,
    CandidateSubmission,
    Decision,
    Disposition,
    FileAction,
    Outcome,
    OutcomeKind,
    StudentRecord,
)

FAR_PAST = datetime.min


@dataclass(frozen=True)
class Accumulator:
    """Best on-time receipt so far; empty means the sentinel."""

    best: Optional[CandidateSubmission] = None

    @property
    def submitted_at(self) -> datetime:
        return self.best.submitted_at if self.best is not None else FAR_PAST

    @property
    def late(self) -> bool:
        return self.best is None or self.best.late

    @property
    def is_sentinel(self) -> bool:
        return self.best is None


SENTINEL = Accumulator()


@dataclass(frozen=True)
class AuditEvent:
    candidate: CandidateSubmission
    disposition: Disposition


def step(acc: Accumulator, candidate: CandidateSubmission) -> Tuple[Accumulator, List[AuditEvent]]:
    """One fold step: returns the new accumulator and the receipts it rules out."""
    if candidate.late:
        return acc, [AuditEvent(candidate, Disposition.LATE)]
    if candidate.submitted_at > acc.submitted_at:
        events = [] if acc.is_sentinel else [AuditEvent(acc.best, Disposition.SUPERSEDED)]
        return Accumulator(candidate), events
    # Older than, or tied with, the current best.
    return acc, [AuditEvent(candidate, Disposition.SUPERSEDED)]


def fold(group: Iterable[CandidateSubmission]) -> Tuple[Accumulator, List[AuditEvent]]:
    acc = SENTINEL
    events: List[AuditEvent] = []
    for candidate in group:
        acc, emitted = step(acc, candidate)
        events.extend(emitted)
    return acc, events


def output_name(exam_number: str, late: bool = False) -> str:
    if late:
        return f"LATE-{exam_number}.pdf"
    return f"{exam_number}.pdf"


def _cleanup_actions(events: Sequence[AuditEvent], keep: Set[Path]) -> List[FileAction]:
    actions: List[FileAction] = []
    scheduled: Set[Path] = set()
    for event in events:
        for path in event.candidate.files():
            if path in keep or path in scheduled:
                continue
            scheduled.add(path)
            actions.append(FileAction.delete(path))
    return actions


def _previous_output(student: StudentRecord, config: IngestConfig) -> str:
    """Note a file left in the output folder by an earlier run, if any."""
    for late in (False, True):
        existing = config.output_dir / output_name(student.exam_number, late)
        if existing.is_file():
            return f"Existing {existing.name}"
    return ""


def _select_without_candidates(student: StudentRecord, config: IngestConfig) -> Decision:
    manual = config.manual_path(student.student_id)
    if manual.is_file():
        target = config.output_dir / output_name(student.exam_number)
        outcome = Outcome(
            kind=OutcomeKind.ACCEPTED,
            student=student,
            disposition=Disposition.MANUAL,
            late_label=MANUAL_LABEL,
            manual_path=manual,
        )
        return Decision(
            outcome=outcome,
            audit=[outcome.as_entry()],
            actions=[FileAction.relocate(manual, target)],
        )

    outcome = Outcome(
        kind=OutcomeKind.NONE,
        student=student,
        disposition=Disposition.NO_SUBMISSION,
        output_file=_previous_output(student, config),
    )
    return Decision(outcome=outcome, audit=[outcome.as_entry()])


def select(
    student: StudentRecord,
    group: Sequence[CandidateSubmission],
    config: IngestConfig,
) -> Decision:
    """Decide the single outcome for ``student`` from their receipts."""
    if not group:
        return _select_without_candidates(student, config)

    acc, events = fold(group)
    audit = [AuditEntry.for_candidate(event.candidate, event.disposition) for event in events]
    winner = acc.best
    keep = set(winner.files()) if winner is not None else set()
    actions = _cleanup_actions(events, keep)

    if winner is None:
        # Every receipt was late: report the first one, move nothing.
        outcome = Outcome(
            kind=OutcomeKind.BAD,
            student=student,
            disposition=Disposition.LATE,
            submission=group[0],
            late_label=LATE_LABEL,
        )
        return Decision(outcome=outcome, audit=audit, actions=actions)

    if winner.number_of_files == 1 and not winner.filetype_error:
        target = config.output_dir / output_name(student.exam_number, winner.late)
        actions.append(
            FileAction.relocate(winner.payload_files[0], target, cleanup=(winner.receipt_path,))
        )
        audit.append(AuditEntry.for_candidate(winner, Disposition.TO_MARK))
        outcome = Outcome(
            kind=OutcomeKind.ACCEPTED,
            student=student,
            disposition=Disposition.TO_MARK,
            submission=winner,
            late_label=winner.late_label,
        )
        return Decision(outcome=outcome, audit=audit, actions=actions)

    # Several files or a non-PDF upload: leave everything for manual handling.
    audit.append(AuditEntry.for_candidate(winner, Disposition.BAD))
    outcome = Outcome(
        kind=OutcomeKind.BAD,
        student=student,
        disposition=Disposition.BAD,
        submission=winner,
        late_label=winner.late_label,
    )
    return Decision(outcome=outcome, audit=audit, actions=actions)


__all__ = [
    "Accumulator",
    "AuditEvent",
    "FAR_PAST",
    "SENTINEL",
    "fold",
    "output_name",
    "select",
    "step",
]
