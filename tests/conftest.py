import pathlib
import sys
from datetime import datetime
from typing import Callable, List, Optional

import pytest

SYS_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = SYS_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from exam_ingest.config.settings import IngestConfig  # noqa: E402

DEADLINE = datetime(2020, 4, 22, 16, 0)
ASSIGNMENT = "MATH00000 Exam"


def receipt_text(uun: str, submitted_at: datetime, filenames: List[str], originals: Optional[List[str]] = None) -> str:
    originals = originals or [name.rsplit("_", 1)[-1] for name in filenames]
    lines = [
        f"Name: Test Student ({uun.lower()})",
        f"Assignment: {ASSIGNMENT}",
        f"Date Submitted: {submitted_at.strftime('%A, %d %B %Y %H:%M:%S')} o'clock BST",
        "Current Mark: Needs Marking",
        "",
        "Submission Field:",
        "There is no student submission text data for this assignment.",
        "",
        "Comments:",
        "There are no student comments for this assignment.",
        "",
        "Files:",
    ]
    for original, name in zip(originals, filenames):
        lines.append(f"\tOriginal filename: {original}")
        lines.append(f"\tFilename: {name}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def learn_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "learn"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "output"


@pytest.fixture
def add_receipt(learn_dir: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Write a Learn receipt plus its payload files; returns the receipt path."""

    def _add(
        uun: str,
        submitted_at: datetime,
        payloads: Optional[List[str]] = None,
        *,
        folder: Optional[pathlib.Path] = None,
    ) -> pathlib.Path:
        target = folder or learn_dir
        target.mkdir(parents=True, exist_ok=True)
        stem = f"{ASSIGNMENT}_{uun.lower()}_attempt_{submitted_at.strftime('%Y-%m-%d-%H-%M-%S')}"
        payloads = ["exam.pdf"] if payloads is None else payloads
        filenames = [f"{stem}_{name}" for name in payloads]
        for name in filenames:
            (target / name).write_bytes(f"%PDF-1.4 {name}".encode("utf-8"))
        receipt = target / f"{stem}.txt"
        receipt.write_text(receipt_text(uun, submitted_at, filenames, payloads), encoding="utf-8")
        return receipt

    return _add


@pytest.fixture
def write_classlist(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    def _write(rows: List[tuple], name: str = "classlist.csv") -> pathlib.Path:
        path = tmp_path / name
        body = ["UUN,Exam Number,Extra Time"]
        body.extend(",".join(str(value) for value in row) for row in rows)
        path.write_text("\n".join(body) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(tmp_path: pathlib.Path, learn_dir: pathlib.Path, output_dir: pathlib.Path) -> Callable[..., IngestConfig]:
    def _make(**overrides) -> IngestConfig:
        values = dict(
            course="MATH00000",
            classlist=tmp_path / "classlist.csv",
            learn_dir=learn_dir,
            output_dir=output_dir,
            deadline=DEADLINE,
        )
        values.update(overrides)
        return IngestConfig(**values)

    return _make
