"""Deadline handling: timestamp formats and the on-time/late decision."""

from __future__ import annotations

from datetime import datetime, timedelta

from ..errors import ConfigError, ParseError

DEADLINE_FORMAT = "%Y-%m-%d-%H-%M"
TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"

# A deadline of 12:00 accepts anything up to and including 12:00:59.
GRACE = timedelta(seconds=59)


def parse_deadline(text: str) -> datetime:
    """Parse a ``YYYY-MM-DD-HH-MM`` deadline given on the command line."""
    try:
        return datetime.strptime((text or "").strip(), DEADLINE_FORMAT)
    except ValueError as exc:
        raise ConfigError(f"Invalid deadline '{text}', expected YYYY-MM-DD-HH-MM") from exc


def parse_timestamp(text: str) -> datetime:
    """Parse a ``YYYY-MM-DD-HH-MM-SS`` submission timestamp."""
    try:
        return datetime.strptime((text or "").strip(), TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ParseError(f"Invalid submission timestamp '{text}'") from exc


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def effective_deadline(deadline: datetime, extra_minutes: int = 0) -> datetime:
    """Deadline after the grace period and any extra-time allowance."""
    graced = deadline + GRACE
    if extra_minutes > 0:
        return graced + timedelta(minutes=extra_minutes)
    return graced


def is_late(submitted_at: datetime, deadline: datetime, extra_minutes: int = 0) -> bool:
    return submitted_at > effective_deadline(deadline, extra_minutes)


__all__ = [
    "DEADLINE_FORMAT",
    "GRACE",
    "TIMESTAMP_FORMAT",
    "effective_deadline",
    "format_timestamp",
    "is_late",
    "parse_deadline",
    "parse_timestamp",
]
