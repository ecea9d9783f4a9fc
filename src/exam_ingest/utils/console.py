"""
src/exam_ingest/utils/console.py
Console rendering utilities for the Exam Ingest CLI.
"""
from __future__ import annotations

import os
import shutil
import sys
import textwrap
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

__all__ = ["IngestConsole", "ConsolePalette"]


@dataclass
class ConsolePalette:
    """Simple ANSI-aware palette used by IngestConsole."""

    reset: str = "\033[0m"
    bold: str = "\033[1m"
    dim: str = "\033[2m"
    cyan: str = "\033[36m"
    blue: str = "\033[34m"
    magenta: str = "\033[35m"
    green: str = "\033[32m"
    yellow: str = "\033[33m"
    red: str = "\033[31m"
    white: str = "\033[97m"

    @property
    def disabled(self) -> bool:
        return bool(os.getenv("NO_COLOR"))

    def apply(self, text: str, *styles: str) -> str:
        if self.disabled or not styles:
            return text
        return f"{''.join(styles)}{text}{self.reset}"


class IngestConsole:
    """Headlines, panels and key/value blocks for the run header."""

    def __init__(self, stream=None) -> None:
        self.palette = ConsolePalette()
        self.stream = stream or sys.stdout
        self.width = max(68, min(self._detect_width(), 120))

    def _detect_width(self) -> int:
        return shutil.get_terminal_size((100, 20)).columns

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def _wrap(self, text: str, *, indent: int = 0) -> str:
        wrapper = textwrap.TextWrapper(
            width=self.width - indent,
            subsequent_indent=" " * indent,
            drop_whitespace=False,
        )
        return "\n".join(wrapper.fill(line) if line.strip() else "" for line in text.splitlines())

    def _rule(self, label: str = "", *, accent: str = "blue", char: str = "═") -> str:
        label_text = f" {label} " if label else ""
        pad_total = max(self.width - len(label_text), 0)
        left = pad_total // 2
        right = pad_total - left
        rule_line = f"{char * left}{label_text}{char * right}"
        color = getattr(self.palette, accent, "")
        return self.palette.apply(rule_line[: self.width], color)

    def key_values(self, title: str, pairs: Sequence[Tuple[str, str]], *, accent: str = "magenta") -> None:
        """Render aligned ``label: value`` lines inside a titled panel."""
        label_width = max((len(label) for label, _ in pairs), default=0)
        body = [
            f"{self.palette.apply(label.ljust(label_width), self.palette.dim)}  {value}"
            for label, value in pairs
        ]
        self.panel(title, body, accent=accent)

    def panel(self, title: str, body: Iterable[str], *, accent: str = "magenta") -> None:
        self._print(self._rule(title, accent=accent))
        for line in body:
            self._print(self._wrap(line, indent=4))
        self._print(self._rule(accent=accent))
