"""
src/exam_ingest/utils/progress.py
Per-student progress and the end-of-run summary table.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn
from rich.table import Column, Table

from .logger import progress as log_progress

_KIND_STYLES: Dict[str, str] = {
    "accepted": "green",
    "bad": "red",
    "none": "yellow",
}


@dataclass
class BucketCount:
    """One summary row: bucket label, count and the report it was written to."""

    label: str
    count: int
    report: str = ""
    kind: str = ""


class RunProgress:
    """Track students as they pass through the selection engine."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        rich_flag = os.getenv("CLI_PROGRESS_RICH")
        self.use_rich = (
            sys.stdout.isatty()
            and self.console.is_terminal
            and (rich_flag is None or rich_flag.lower() not in {"0", "false"})
        )
        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None
        self.total = 0
        self.completed = 0

    def start(self, total: int, label: str = "Students") -> None:
        self.total = total
        self.completed = 0
        if not self.use_rich:
            log_progress(f"{label}: 0/{total}")
            return
        self.progress = Progress(
            SpinnerColumn(style="bright_magenta"),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=28, complete_style="bright_blue", finished_style="bright_green"),
            TextColumn("[dim]{task.completed}/{task.total}[/]"),
            TextColumn("[dim]{task.fields[status]}[/]"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self.progress.start()
        self.task_id = self.progress.add_task(label, total=max(total, 1), status="")

    def advance(self, student_id: str, kind: str) -> None:
        self.completed += 1
        if self.progress is not None and self.task_id is not None:
            self.progress.update(self.task_id, advance=1, status=f"{student_id} • {kind}")
        elif self.total and (self.completed == self.total or self.completed % 25 == 0):
            log_progress(f"Students: {self.completed}/{self.total}")

    def stop(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
                self.task_id = None

    def print_summary(self, rows: Sequence[BucketCount], title: str = "Run summary") -> None:
        """Print bucket counts, as a rich table on a terminal, else as plain lines."""
        if not self.use_rich:
            for row in rows:
                suffix = f" -> {row.report}" if row.report else ""
                print(f"  {row.label:<22} {row.count:>5}{suffix}")
            sys.stdout.flush()
            return
        table = Table(
            Column(header="Bucket", style="bold"),
            Column(header="Count", justify="right", style="bright_blue"),
            Column(header="Report", style="dim"),
            title=title,
            box=None,
            show_header=True,
            header_style="bold blue",
            expand=False,
        )
        for row in rows:
            style = _KIND_STYLES.get(row.kind, "")
            count = f"[{style}]{row.count}[/]" if style else str(row.count)
            table.add_row(row.label, count, row.report)
        self.console.print()
        self.console.print(table)
        self.console.print()


__all__ = ["BucketCount", "RunProgress"]
