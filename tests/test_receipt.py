from datetime import datetime

import pytest

from exam_ingest.errors import ParseError, ReceiptParseError
from exam_ingest.extractors.receipt import parse_receipt, parse_submission_date

from conftest import ASSIGNMENT, receipt_text


def test_parse_receipt_reads_learn_fields(tmp_path):
    path = tmp_path / "receipt.txt"
    path.write_text(
        receipt_text("s1234567", datetime(2020, 4, 22, 15, 55, 44), ["Exam_s1234567_attempt_x_answers.pdf"]),
        encoding="utf-8",
    )

    receipt = parse_receipt(path)

    assert receipt.student_id == "S1234567"
    assert receipt.name == "Test Student"
    assert receipt.assignment == ASSIGNMENT
    assert receipt.date_submitted == "2020-04-22-15-55-44"
    assert receipt.submitted_at == datetime(2020, 4, 22, 15, 55, 44)
    assert receipt.filenames == ("Exam_s1234567_attempt_x_answers.pdf",)
    assert receipt.original_filenames == ("answers.pdf",)
    assert receipt.number_of_files == 1
    assert receipt.filetype_error == ""


def test_non_pdf_payloads_are_flagged(tmp_path):
    path = tmp_path / "receipt.txt"
    path.write_text(
        receipt_text("s1234567", datetime(2020, 4, 22, 15, 0), ["a_page1.jpg", "a_page2.PDF"]),
        encoding="utf-8",
    )

    receipt = parse_receipt(path)

    assert receipt.number_of_files == 2
    assert receipt.filetype_error == "a_page1.jpg is not a PDF"


def test_receipt_without_date_raises(tmp_path):
    path = tmp_path / "receipt.txt"
    path.write_text("Name: Someone (s1234567)\nFiles:\n\tFilename: x.pdf\n", encoding="utf-8")

    with pytest.raises(ReceiptParseError, match="Date Submitted"):
        parse_receipt(path)


def test_receipt_with_garbled_date_is_a_parse_error(tmp_path):
    path = tmp_path / "receipt.txt"
    path.write_text("Date Submitted: sometime last week\n", encoding="utf-8")

    with pytest.raises(ParseError):
        parse_receipt(path)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2020-04-22-09-05-01", datetime(2020, 4, 22, 9, 5, 1)),
        ("Wednesday, 22 April 2020 09:05:01 o'clock BST", datetime(2020, 4, 22, 9, 5, 1)),
        ("Wed, 2 Apr 2020 9:05:01 o'clock BST", datetime(2020, 4, 2, 9, 5, 1)),
        ("not a date", None),
    ],
)
def test_parse_submission_date_forms(text, expected):
    assert parse_submission_date(text) == expected
