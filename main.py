"""Run Exam Ingest from a source checkout.

    python main.py --deadline 2020-04-22-16-00 --classlist MATH00000_enrolment.csv \
        --learndir MATH00000 --outputdir MATH00000_examno

Flags may also be given as COURSE_CODE, CLASSLIST_CSV, LEARN_DIR, OUTPUT_DIR
and DEADLINE in a .env file next to this script.
"""

from __future__ import annotations

import pathlib
import sys

SRC_PATH = pathlib.Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from exam_ingest.core.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
