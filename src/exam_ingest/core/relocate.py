"""Moving payloads into the output folder and carrying out selection decisions."""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tempfile
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import List

from ..errors import RelocationError
from ..models import ActionKind, AuditEntry, Decision, Disposition, FileAction, Outcome, OutcomeKind
from ..utils.logger import debug_detail, get_logger

log = get_logger("relocate")


class RelocationStatus(str, Enum):
    CREATED = "File created"
    REPLACED = "File replaced"
    ALREADY_EXISTS = "File already exists"
    NOTHING = "Done Nothing"


def copy_file(src: Path, dst: Path) -> None:
    """Hard-link ``src`` to ``dst`` where possible, else copy the bytes; then touch ``dst``.

    The byte copy goes to a temporary file beside ``dst`` and is renamed over
    it only once complete, so ``dst`` never holds a partial copy.
    """
    try:
        os.link(src, dst)
    except OSError:
        fd, partial = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".part", dir=dst.parent)
        os.close(fd)
        try:
            shutil.copyfile(src, partial)
            os.replace(partial, dst)
        except OSError:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(partial)
            raise
    os.utime(dst, None)


def remove_file(path: Path, *, dry_run: bool = False) -> bool:
    """Delete ``path``; a file that is already gone is not an error."""
    if dry_run:
        debug_detail(f"[dry run] would delete {path}")
        return True
    try:
        path.unlink()
    except FileNotFoundError:
        debug_detail(f"Already removed: {path}")
        return False
    except OSError as exc:
        log.error("Cannot delete %s: %s", path, exc)
        return False
    debug_detail(f"Deleted {path}")
    return True


def move_into(src: Path | str, dst: Path | str, *, dry_run: bool = False) -> RelocationStatus:
    """Move ``src`` to ``dst`` unless ``dst`` is already at least as new.

    An existing destination that is as new as the source, or newer, is left
    alone and the source is discarded, so running the same ingest twice
    converges on the same output folder. A missing source whose destination
    is already in place counts as moved, which lets a run that stopped before
    its cleanup finish on the next attempt.
    """
    src, dst = Path(src), Path(dst)
    try:
        src_stat = src.stat()
    except FileNotFoundError as exc:
        if dst.is_file():
            debug_detail(f"{src.name} already moved to {dst}")
            return RelocationStatus.ALREADY_EXISTS
        raise RelocationError(src, dst, "source file is missing") from exc
    except OSError as exc:
        raise RelocationError(src, dst, str(exc)) from exc
    if not stat.S_ISREG(src_stat.st_mode):
        raise RelocationError(src, dst, "source is not a regular file")

    replacing = False
    try:
        dst_stat = dst.stat()
    except FileNotFoundError:
        dst_stat = None
    except OSError as exc:
        raise RelocationError(src, dst, str(exc)) from exc

    if dst_stat is not None:
        if not stat.S_ISREG(dst_stat.st_mode):
            raise RelocationError(src, dst, "destination is not a regular file")
        if dst_stat.st_mtime_ns >= src_stat.st_mtime_ns:
            remove_file(src, dry_run=dry_run)
            return RelocationStatus.ALREADY_EXISTS
        replacing = True

    if dry_run:
        debug_detail(f"[dry run] would move {src} -> {dst}")
    else:
        try:
            copy_file(src, dst)
        except OSError as exc:
            raise RelocationError(src, dst, str(exc)) from exc
        remove_file(src)
    return RelocationStatus.REPLACED if replacing else RelocationStatus.CREATED


def _settle_audit(audit: List[AuditEntry], output_file: str, failed: bool) -> List[AuditEntry]:
    settled = []
    for entry in audit:
        if entry.disposition in (Disposition.TO_MARK, Disposition.MANUAL):
            entry = entry.with_output(output_file, Disposition.BAD if failed else None)
        settled.append(entry)
    return settled


def _relocate(action: FileAction, outcome: Outcome, dry_run: bool) -> Outcome:
    try:
        status = move_into(action.path, action.target, dry_run=dry_run)
    except RelocationError as exc:
        log.error("%s: %s", outcome.student.student_id, exc)
        return replace(
            outcome,
            kind=OutcomeKind.BAD,
            disposition=Disposition.BAD,
            output_file=RelocationStatus.NOTHING.value,
        )
    log.info("%s -> %s (%s)", outcome.student.student_id, action.target.name, status.value)
    for path in action.cleanup:
        remove_file(path, dry_run=dry_run)
    return replace(outcome, output_file=status.value)


def apply_decision(decision: Decision, *, dry_run: bool = False) -> Decision:
    """Run the decision's file actions in order and return the settled decision.

    A failed relocation turns the outcome into a bad submission and keeps the
    receipt in place for the next run.
    """
    outcome = decision.outcome
    audit = list(decision.audit)
    for action in decision.actions:
        if action.kind is ActionKind.DELETE:
            remove_file(action.path, dry_run=dry_run)
            continue
        outcome = _relocate(action, outcome, dry_run)
        audit = _settle_audit(audit, outcome.output_file, outcome.kind is OutcomeKind.BAD)
    return Decision(outcome=outcome, audit=audit, actions=list(decision.actions))


__all__ = [
    "RelocationStatus",
    "apply_decision",
    "copy_file",
    "move_into",
    "remove_file",
]
