"""Command-line entry point: ``exam-ingest --deadline 2020-04-22-16-00 ...``.

Typical workflow:

1. Unzip the Learn download into the Learn folder and run the command.
2. Bad submissions stay in the Learn folder. Inspect them and, where
   possible, replace all the Learn files for that student with a single
   ``s1234567.pdf`` (the student's UUN, lower case).
3. Run the command again; the hand-made PDFs are picked up and moved.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from ..config.settings import IngestConfig
from ..errors import ConfigError, ParseError, ReportError
from ..utils.console import IngestConsole
from ..utils.env_utils import load_env
from ..utils.logger import add_log_file, logger, set_log_profile, step, success
from ..utils.progress import BucketCount, RunProgress
from .runner import IngestResult, IngestRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-ingest",
        description=(
            "Match a Learn submission download against the class list, move one "
            "on-time PDF per student into the output folder named by exam number, "
            "and write CSV reports. Do not run two ingests on the same folders at once."
        ),
    )
    parser.add_argument("--course", help="Course code label (env COURSE_CODE, default MATH00000)")
    parser.add_argument(
        "--classlist",
        help="CSV with columns UUN, Exam Number, Extra Time (env CLASSLIST_CSV)",
    )
    parser.add_argument("--learndir", help="Folder containing the unzipped Learn download (env LEARN_DIR)")
    parser.add_argument("--outputdir", help="Folder for the anonymised scripts and reports (env OUTPUT_DIR)")
    parser.add_argument("--deadline", help="Submission deadline as YYYY-MM-DD-HH-MM (env DEADLINE)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would happen without touching any file")
    parser.add_argument("--strict", action="store_true", help="Abort on the first unreadable receipt")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    parser.add_argument("--log-file", help="Also write the full log to this file (env LOG_FILE)")
    parser.add_argument("--env-file", help="Read defaults from this .env file (env ENV_FILE, default .env)")
    return parser


def _print_summary(progress: RunProgress, result: IngestResult) -> None:
    reports = result.reports
    rows = [
        BucketCount("Successful submissions", len(result.accepted), str(reports.success) if reports else "", "accepted"),
        BucketCount("Bad submissions", len(result.bad), str(reports.errors) if reports else "", "bad"),
        BucketCount("No submissions", len(result.missing), str(reports.no_submission) if reports else "", "none"),
        BucketCount("Receipts audited", len(result.audit), str(reports.summary) if reports else ""),
    ]
    if result.collection.skipped:
        rows.append(BucketCount("Receipts skipped", len(result.collection.skipped), "see log", "bad"))
    progress.print_summary(rows)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env(args.env_file or os.getenv("ENV_FILE", ".env"))
    if args.debug:
        set_log_profile("debug")
    if args.log_file:
        add_log_file(args.log_file)

    console = IngestConsole()
    try:
        config = IngestConfig.resolve(vars(args))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    console.key_values("Exam Ingest", config.summary_pairs())
    step("Reconciling Learn submissions with the class list")

    progress = RunProgress()
    runner = IngestRunner(config, progress=progress)
    try:
        result = runner.run()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    except ParseError as exc:
        logger.error("Stopped on unreadable input: %s", exc)
        return 1
    except ReportError as exc:
        logger.error("%s", exc)
        return 1

    _print_summary(progress, result)
    if config.dry_run:
        success("Dry run completed; no files were changed")
    else:
        success("Ingest completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
