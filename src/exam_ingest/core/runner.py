"""Orchestration of one ingest pass: roster, scan, select, relocate, report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from time import perf_counter
from typing import Callable, List, Optional, Protocol

from ..config.settings import IngestConfig
from ..extractors.receipt import parse_receipt
from ..extractors.roster import RosterIndex
from ..models import AuditEntry, Decision, Outcome, OutcomeKind
from ..utils.logger import get_logger
from .collector import Collection, ReceiptParser, scan
from .relocate import apply_decision
from .reports import ReportPaths, write_reports
from .selection import select


class ProgressSink(Protocol):
    """Receives one notification per student processed."""

    def start(self, total: int, label: str = "Students") -> None:
        """Called once before the first student."""

    def advance(self, student_id: str, kind: str) -> None:
        """Called after each student's decision has been applied."""

    def stop(self) -> None:
        """Called once at the end, also on failure."""


class _NullProgress:
    def start(self, total: int, label: str = "Students") -> None:
        pass

    def advance(self, student_id: str, kind: str) -> None:
        pass

    def stop(self) -> None:
        pass


@dataclass
class IngestResult:
    """Everything a run produced."""

    decisions: List[Decision] = field(default_factory=list)
    collection: Collection = field(default_factory=Collection)
    reports: Optional[ReportPaths] = None
    elapsed_seconds: float = 0.0

    def _outcomes(self, kind: OutcomeKind) -> List[Outcome]:
        return [decision.outcome for decision in self.decisions if decision.outcome.kind is kind]

    @property
    def accepted(self) -> List[Outcome]:
        return self._outcomes(OutcomeKind.ACCEPTED)

    @property
    def bad(self) -> List[Outcome]:
        return self._outcomes(OutcomeKind.BAD)

    @property
    def missing(self) -> List[Outcome]:
        return self._outcomes(OutcomeKind.NONE)

    @property
    def audit(self) -> List[AuditEntry]:
        return [entry for decision in self.decisions for entry in decision.audit]


class IngestRunner:
    """Run the whole reconciliation for one configuration.

    Students are handled one after another in class list order. The Learn
    and output folders must not be touched by anything else while a run is
    in progress.
    """

    def __init__(
        self,
        config: IngestConfig,
        *,
        roster_loader: Callable[..., RosterIndex] = RosterIndex.from_csv,
        receipt_parser: ReceiptParser = parse_receipt,
        progress: Optional[ProgressSink] = None,
        logger=None,
        timer: Callable[[], float] = perf_counter,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._roster_loader = roster_loader
        self._receipt_parser = receipt_parser
        self._progress = progress or _NullProgress()
        self._logger = logger or get_logger("runner")
        self._timer = timer
        self._clock = clock

    def run(self) -> IngestResult:
        config = self._config
        start = self._timer()
        run_time = self._clock()

        roster = self._roster_loader(config.classlist)
        if not roster:
            self._logger.warning("Class list %s has no students; check the file", config.classlist)
        else:
            self._logger.info("Class list contains %d students", len(roster))

        config.prepare_directories()
        collection = scan(
            config.learn_dir,
            roster,
            config.deadline,
            strict=config.strict,
            parser=self._receipt_parser,
        )

        decisions: List[Decision] = []
        self._progress.start(len(roster))
        try:
            for student in roster.students():
                decision = select(student, collection.group(student.student_id), config)
                decision = apply_decision(decision, dry_run=config.dry_run)
                decisions.append(decision)
                self._progress.advance(student.student_id, decision.outcome.kind.value)
        finally:
            self._progress.stop()

        result = IngestResult(decisions=decisions, collection=collection)
        self._logger.info(
            "Successful submissions: %d, bad submissions: %d, no submissions: %d",
            len(result.accepted),
            len(result.bad),
            len(result.missing),
        )

        if config.dry_run:
            self._logger.info("Dry run: no reports written")
        else:
            result.reports = write_reports(
                config.output_dir,
                run_time,
                accepted=[outcome.as_entry() for outcome in result.accepted],
                bad=[outcome.as_entry() for outcome in result.bad],
                missing=[outcome.as_entry() for outcome in result.missing],
                audit=result.audit,
            )

        result.elapsed_seconds = self._timer() - start
        self._logger.info("Ingest finished (elapsed %.2fs)", result.elapsed_seconds)
        return result


__all__ = ["IngestResult", "IngestRunner", "ProgressSink"]
