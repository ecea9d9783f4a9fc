"""Ingest exam submissions from a Learn download and rename them by exam number."""

from .config.settings import IngestConfig
from .core.runner import IngestResult, IngestRunner
from .models import (
    AuditEntry,
    CandidateSubmission,
    Decision,
    Disposition,
    Outcome,
    OutcomeKind,
    StudentRecord,
)

__version__ = "0.3.0"

__all__ = [
    "AuditEntry",
    "CandidateSubmission",
    "Decision",
    "Disposition",
    "IngestConfig",
    "IngestResult",
    "IngestRunner",
    "Outcome",
    "OutcomeKind",
    "StudentRecord",
]
