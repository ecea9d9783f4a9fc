"""Run configuration resolved from command-line flags, the environment and defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Tuple

from ..core.lateness import GRACE, parse_deadline
from ..errors import ConfigError
from ..utils.env_utils import env_flag, env_str
from ..utils.logger import debug_detail

DEFAULT_COURSE = "MATH00000"
DEFAULT_CLASSLIST = "MATH00000_enrolment.csv"
DEFAULT_LEARN_DIR = "learn_dir"
DEFAULT_OUTPUT_DIR = "output_dir"

# flag name -> (environment variable, default)
ENV_KEYS = {
    "course": ("COURSE_CODE", DEFAULT_COURSE),
    "classlist": ("CLASSLIST_CSV", DEFAULT_CLASSLIST),
    "learndir": ("LEARN_DIR", DEFAULT_LEARN_DIR),
    "outputdir": ("OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
    "deadline": ("DEADLINE", None),
}


@dataclass(frozen=True)
class IngestConfig:
    """Everything a run needs, passed explicitly to the collector and selection engine."""

    course: str
    classlist: Path
    learn_dir: Path
    output_dir: Path
    deadline: datetime
    dry_run: bool = False
    strict: bool = False

    @property
    def graced_deadline(self) -> datetime:
        return self.deadline + GRACE

    @classmethod
    def resolve(cls, values: Mapping[str, Any]) -> "IngestConfig":
        """Build a config from flag values, falling back to the environment then defaults."""
        resolved = {}
        for key, (env_name, default) in ENV_KEYS.items():
            value = values.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                value = env_str(env_name, default)
            resolved[key] = value

        if not resolved["deadline"]:
            raise ConfigError("Missing deadline: pass --deadline YYYY-MM-DD-HH-MM or set DEADLINE")

        config = cls(
            course=str(resolved["course"]).strip(),
            classlist=Path(resolved["classlist"]).expanduser(),
            learn_dir=Path(resolved["learndir"]).expanduser(),
            output_dir=Path(resolved["outputdir"]).expanduser(),
            deadline=parse_deadline(str(resolved["deadline"])),
            dry_run=bool(values.get("dry_run")) or env_flag("DRY_RUN"),
            strict=bool(values.get("strict")) or env_flag("STRICT_PARSE"),
        )
        debug_detail(f"Resolved configuration: {config}")
        return config

    def prepare_directories(self) -> None:
        """Check the Learn folder and make sure the output folder exists.

        Raises :class:`ConfigError` before anything is moved. In dry-run mode
        a missing output folder is reported but not created.
        """
        if not self.learn_dir.is_dir():
            raise ConfigError(f"Learn folder does not exist or is not a directory: {self.learn_dir}")
        if self.learn_dir.resolve() == self.output_dir.resolve():
            raise ConfigError("Learn folder and output folder must be different")
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise ConfigError(f"Output path exists but is not a directory: {self.output_dir}")
        if self.dry_run:
            return
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Cannot create output folder {self.output_dir}: {exc}") from exc

    def summary_pairs(self) -> List[Tuple[str, str]]:
        """Label/value pairs for the run header panel."""
        if self.dry_run:
            mode = "dry run"
        elif self.strict:
            mode = "strict"
        else:
            mode = "normal"
        return [
            ("course", self.course),
            ("deadline", self.graced_deadline.strftime("%Y-%m-%d at %H:%M:%S")),
            ("class list", str(self.classlist)),
            ("learn folder", str(self.learn_dir)),
            ("output folder", str(self.output_dir)),
            ("mode", mode),
        ]

    def manual_path(self, student_id: str) -> Path:
        """Location of a hand-prepared ``s1234567.pdf`` for a student."""
        return self.learn_dir / f"{student_id.lower()}.pdf"


__all__ = ["IngestConfig", "DEFAULT_COURSE", "ENV_KEYS"]
