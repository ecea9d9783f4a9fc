from datetime import timedelta

import pytest

from exam_ingest.core import main as cli

from conftest import DEADLINE

ENV_VARS = ("COURSE_CODE", "CLASSLIST_CSV", "LEARN_DIR", "OUTPUT_DIR", "DEADLINE", "DRY_RUN", "STRICT_PARSE", "ENV_FILE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # set first so values loaded from an env file are rolled back afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("CLI_PROGRESS_RICH", "0")
    monkeypatch.chdir(tmp_path)


def test_missing_deadline_exits_with_error():
    assert cli.main([]) == 1


def test_malformed_deadline_exits_with_error():
    assert cli.main(["--deadline", "22/04/2020"]) == 1


def test_flags_drive_a_full_run(write_classlist, add_receipt, learn_dir, output_dir):
    classlist = write_classlist([("s1234567", "001", 0)])
    add_receipt("s1234567", DEADLINE - timedelta(minutes=3))

    code = cli.main(
        [
            "--classlist", str(classlist),
            "--learndir", str(learn_dir),
            "--outputdir", str(output_dir),
            "--deadline", "2020-04-22-16-00",
        ]
    )

    assert code == 0
    assert (output_dir / "001.pdf").exists()
    assert len(list(output_dir.glob("*-learn-submissionsummary.csv"))) == 1


def test_environment_supplies_defaults(monkeypatch, write_classlist, add_receipt, learn_dir, output_dir):
    classlist = write_classlist([("s1234567", "001", 0)])
    add_receipt("s1234567", DEADLINE - timedelta(minutes=3))
    monkeypatch.setenv("CLASSLIST_CSV", str(classlist))
    monkeypatch.setenv("LEARN_DIR", str(learn_dir))
    monkeypatch.setenv("OUTPUT_DIR", str(output_dir))
    monkeypatch.setenv("DEADLINE", "2020-04-22-16-00")

    assert cli.main(["--dry-run"]) == 0
    assert not output_dir.exists()


def test_env_file_is_read(tmp_path, write_classlist, learn_dir, output_dir):
    classlist = write_classlist([])
    env_file = tmp_path / "ingest.env"
    env_file.write_text(
        "\n".join(
            [
                f"CLASSLIST_CSV={classlist}",
                f"LEARN_DIR={learn_dir}",
                f"OUTPUT_DIR={output_dir}",
                "DEADLINE=2020-04-22-16-00",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    assert cli.main(["--env-file", str(env_file)]) == 0
    assert output_dir.is_dir()


def test_missing_class_list_exits_with_error(learn_dir, output_dir, tmp_path):
    code = cli.main(
        [
            "--classlist", str(tmp_path / "absent.csv"),
            "--learndir", str(learn_dir),
            "--outputdir", str(output_dir),
            "--deadline", "2020-04-22-16-00",
        ]
    )

    assert code == 1


def test_parser_exposes_documented_flags():
    args = cli.build_parser().parse_args(["--deadline", "2020-04-22-16-00", "--dry-run", "--strict"])

    assert args.deadline == "2020-04-22-16-00"
    assert args.dry_run is True
    assert args.strict is True
    assert args.learndir is None
