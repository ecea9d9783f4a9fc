"""Readers for the class list CSV and Learn receipt files."""

from .receipt import Receipt, parse_receipt
from .roster import RosterIndex, normalize_student_id, read_roster_rows

__all__ = [
    "Receipt",
    "RosterIndex",
    "normalize_student_id",
    "parse_receipt",
    "read_roster_rows",
]
