import csv
from datetime import datetime, timedelta
from itertools import count
from unittest.mock import MagicMock

import pytest

from exam_ingest.core.runner import IngestRunner
from exam_ingest.errors import ConfigError

from conftest import DEADLINE

FIRST_RUN = datetime(2020, 4, 22, 17, 0, 0)
SECOND_RUN = datetime(2020, 4, 22, 18, 0, 0)


def _read_rows(path):
    with path.open(encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))


def _runner(config, *, clock_at=FIRST_RUN, progress=None):
    ticks = count()
    return IngestRunner(
        config,
        progress=progress,
        timer=lambda: float(next(ticks)),
        clock=lambda: clock_at,
    )


@pytest.fixture
def cohort(write_classlist, add_receipt, learn_dir):
    """Four students: one clean upload, one manual PDF, one multi-file upload, one absent."""
    classlist = write_classlist(
        [
            ("s1234567", "001", 0),
            ("s2222222", "002", 0),
            ("s3333333", "003", 0),
            ("s4444444", "004", 0),
        ]
    )
    add_receipt("s1234567", DEADLINE - timedelta(minutes=40))
    add_receipt("s1234567", DEADLINE - timedelta(minutes=10))
    (learn_dir / "s2222222.pdf").write_bytes(b"%PDF manual scan")
    add_receipt("s3333333", DEADLINE - timedelta(minutes=5), payloads=["page1.pdf", "page2.pdf"])
    return classlist


def test_run_places_one_pdf_per_accepted_student(cohort, make_config, output_dir, learn_dir):
    config = make_config(classlist=cohort)

    result = _runner(config).run()

    assert [o.student.student_id for o in result.accepted] == ["S1234567", "S2222222"]
    assert [o.student.student_id for o in result.bad] == ["S3333333"]
    assert [o.student.student_id for o in result.missing] == ["S4444444"]
    placed = (output_dir / "001.pdf").read_bytes()
    assert placed.startswith(b"%PDF-1.4") and b"2020-04-22-15-50-00" in placed
    assert (output_dir / "002.pdf").read_bytes() == b"%PDF manual scan"
    assert not (learn_dir / "s2222222.pdf").exists()
    assert not list(learn_dir.glob("*s1234567*"))
    assert len(list(learn_dir.glob("*s3333333*"))) == 3


def test_reports_are_written_with_run_timestamp(cohort, make_config, output_dir):
    result = _runner(make_config(classlist=cohort)).run()

    assert result.reports.success == output_dir / "2020-04-22-17-00-00-learn-success.csv"
    success = _read_rows(result.reports.success)
    assert [(row["StudentID"], row["ExamNumber"], row["ToMark"]) for row in success] == [
        ("S1234567", "001", "Yes"),
        ("S2222222", "002", "Manual"),
    ]
    assert success[0]["OutputFile"] == "File created"
    assert success[1]["LateSubmission"] == "Manual"

    (error,) = _read_rows(result.reports.errors)
    assert error["StudentID"] == "S3333333"
    assert error["NumberOfFiles"] == "2"
    assert error["ToMark"] == "Bad submission"

    (missing,) = _read_rows(result.reports.no_submission)
    assert missing["StudentID"] == "S4444444"
    assert missing["ToMark"] == "No submission"

    summary = _read_rows(result.reports.summary)
    assert [row["ToMark"] for row in summary if row["StudentID"] == "S1234567"] == ["No - Superseded", "Yes"]


def test_every_student_lands_in_exactly_one_bucket(cohort, make_config):
    result = _runner(make_config(classlist=cohort)).run()

    buckets = [o.student.student_id for o in result.accepted + result.bad + result.missing]
    assert sorted(buckets) == ["S1234567", "S2222222", "S3333333", "S4444444"]


def test_second_run_leaves_output_unchanged(cohort, make_config, output_dir, learn_dir):
    config = make_config(classlist=cohort)
    _runner(config).run()
    pdfs_before = {path.name: path.read_bytes() for path in output_dir.glob("*.pdf")}
    learn_before = sorted(path.name for path in learn_dir.iterdir())

    result = _runner(config, clock_at=SECOND_RUN).run()

    assert {path.name: path.read_bytes() for path in output_dir.glob("*.pdf")} == pdfs_before
    assert sorted(path.name for path in learn_dir.iterdir()) == learn_before
    assert [o.output_file for o in result.missing if o.student.student_id == "S1234567"] == ["Existing 001.pdf"]
    assert len(list(output_dir.glob("*-learn-success.csv"))) == 2


def test_dry_run_touches_nothing(cohort, make_config, output_dir, learn_dir):
    learn_before = sorted(path.name for path in learn_dir.iterdir())

    result = _runner(make_config(classlist=cohort, dry_run=True)).run()

    assert result.reports is None
    assert not output_dir.exists()
    assert sorted(path.name for path in learn_dir.iterdir()) == learn_before
    assert [o.output_file for o in result.accepted] == ["File created", "File created"]


def test_progress_sink_sees_every_student(cohort, make_config):
    progress = MagicMock()

    result = _runner(make_config(classlist=cohort), progress=progress).run()

    progress.start.assert_called_once_with(4)
    assert progress.advance.call_count == 4
    progress.stop.assert_called_once()
    assert result.elapsed_seconds == 1.0


def test_missing_learn_folder_stops_before_scanning(write_classlist, make_config, tmp_path):
    config = make_config(classlist=write_classlist([("s1234567", "001", 0)]), learn_dir=tmp_path / "absent")

    with pytest.raises(ConfigError, match="Learn folder"):
        _runner(config).run()


def test_run_finishes_a_move_interrupted_before_receipt_cleanup(write_classlist, add_receipt, make_config, output_dir):
    classlist = write_classlist([("s1234567", "001", 0)])
    receipt = add_receipt("s1234567", DEADLINE - timedelta(minutes=3))
    payload = receipt.with_name(f"{receipt.stem}_exam.pdf")
    output_dir.mkdir()
    payload.rename(output_dir / "001.pdf")

    result = _runner(make_config(classlist=classlist)).run()

    (outcome,) = result.accepted
    assert outcome.output_file == "File already exists"
    assert result.bad == []
    assert not receipt.exists()
    assert (output_dir / "001.pdf").read_bytes().startswith(b"%PDF-1.4")
