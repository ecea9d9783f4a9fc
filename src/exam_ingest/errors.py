"""Exception hierarchy for the ingest workflow."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class IngestError(Exception):
    """Base class for all errors raised by exam_ingest."""


class ConfigError(IngestError):
    """Invalid flags, deadline or directories. Raised before any file is touched."""


class LoadError(ConfigError):
    """The class list could not be read or is malformed."""


class ParseError(IngestError):
    """A timestamp or input record could not be parsed."""


class ReceiptParseError(ParseError):
    """A Learn receipt file is unreadable or malformed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path.name}: {reason}")


class RelocationError(IngestError):
    """Copying or linking a payload into the output directory failed."""

    def __init__(self, src: Path | str, dst: Path | str, reason: Optional[str] = None) -> None:
        self.src = Path(src)
        self.dst = Path(dst)
        self.reason = reason or "unknown error"
        super().__init__(f"Cannot move {self.src} -> {self.dst}: {self.reason}")


class ReportError(IngestError):
    """A report file could not be written."""


__all__ = [
    "IngestError",
    "ConfigError",
    "LoadError",
    "ParseError",
    "ReceiptParseError",
    "RelocationError",
    "ReportError",
]
