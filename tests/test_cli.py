"""Tests for the command line interface."""

import json

from schema_kg_docs import load_schema
from schema_kg_docs.cli import main, parse_args


def test_parse_build_args():
    args = parse_args(
        ["build", "snap.json", "--output", "out.json", "--include", "users", "--include", "posts"]
    )
    assert args.command == "build"
    assert args.include == ["users", "posts"]
    assert args.distance is None


def test_inspect(fixtures_dir, capsys):
    assert main(["inspect", str(fixtures_dir / "filter_tables.json")]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["table_count"] == 5


def test_build_applies_overrides(fixtures_dir, tmp_path):
    output = tmp_path / "out.json"
    code = main(
        [
            "--config",
            str(fixtures_dir / "empty.yml"),
            "build",
            str(fixtures_dir / "filter_tables.json"),
            "--output",
            str(output),
            "--include",
            "users",
            "--distance",
            "1",
        ]
    )
    assert code == 0
    schema = load_schema(output)
    assert [t.name for t in schema.tables] == ["users", "user_options", "posts"]
    assert len(schema.relations) == 2


def test_export_pack(fixtures_dir, tmp_path):
    code = main(
        [
            "--config",
            str(fixtures_dir / "empty.yml"),
            "export-pack",
            str(fixtures_dir / "filter_tables.json"),
            "--output-dir",
            str(tmp_path / "pack"),
        ]
    )
    assert code == 0
    assert (tmp_path / "pack" / "summary.json").exists()


def test_errors_are_reported(tmp_path, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text("[", encoding="utf-8")
    assert main(["inspect", str(broken)]) == 1
    assert "error:" in capsys.readouterr().err


def test_missing_files_are_reported(fixtures_dir, tmp_path, capsys):
    """Missing config or snapshot paths exit with status 1, not a traceback."""
    snapshot = str(fixtures_dir / "filter_tables.json")
    output = str(tmp_path / "out.json")
    code = main(["--config", str(tmp_path / "nope.yml"), "build", snapshot, "--output", output])
    assert code == 1
    assert "Config file not found" in capsys.readouterr().err

    assert main(["inspect", str(tmp_path / "missing.json")]) == 1
    assert "error:" in capsys.readouterr().err
