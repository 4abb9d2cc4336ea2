"""Tests for main CLI module."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from gitsheets.config import SheetsConfig
from gitsheets.main import (
    create_config,
    create_parser,
    main,
    parse_dependency,
    parse_primary_key,
    validate_args,
)
from gitsheets.snapshot import Snapshot


def _snapshot_files(root: Path) -> list:
    return sorted((root / "snapshots").glob("*.json"))


class TestParser:
    """Test argument parsing helpers."""

    def test_command_required(self):
        parser = create_parser()

        with pytest.raises(SystemExit):
            parser.parse_args([])

    def test_snapshot_arguments(self):
        args = create_parser().parse_args([
            "snapshot", "sales.csv",
            "-m", "Initial import",
            "-k", "0,2",
            "-d", "customers=data/customers.csv",
            "-d", "regions.csv",
            "-c",
        ])

        assert args.command == "snapshot"
        assert args.file == "sales.csv"
        assert args.message == "Initial import"
        assert args.primary_key == "0,2"
        assert args.dependency == ["customers=data/customers.csv", "regions.csv"]
        assert args.commit is True

    def test_diff_arguments(self):
        args = create_parser().parse_args(["diff", "a.json", "b.json", "-f", "git", "--match", "key"])

        assert args.source == "a.json"
        assert args.target == "b.json"
        assert args.format == "git"
        assert args.match == "key"

    def test_diff_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["diff", "a.json", "b.json", "-f", "html"])

    def test_validate_negative_limit(self):
        args = create_parser().parse_args(["log", "-n", "-1"])

        with pytest.raises(ValueError, match="--limit cannot be negative"):
            validate_args(args)

    def test_create_config_overrides(self, temp_dir):
        args = create_parser().parse_args(
            ["--root", str(temp_dir), "diff", "a.json", "b.json", "-f", "json"]
        )

        config = create_config(args, base=SheetsConfig())

        assert config.root == temp_dir
        assert config.diff_format == "json"
        assert config.match_mode == "position"

    def test_parse_primary_key_ignores_garbage(self):
        assert parse_primary_key("0, 2,x,,-1") == [0, 2]
        assert parse_primary_key(None) == []

    def test_parse_dependency(self):
        assert parse_dependency("customers=data/c.csv") == ("customers", "data/c.csv")
        assert parse_dependency("data/regions.csv") == ("regions.csv", "data/regions.csv")


class TestCommands:
    """Test command execution end to end on the filesystem."""

    def test_snapshot_and_verify(self, temp_dir, sample_csv, capsys):
        exit_code = main([
            "--root", str(temp_dir),
            "snapshot", str(sample_csv),
            "-m", "Initial import",
            "-k", "0",
        ])

        assert exit_code == 0
        files = _snapshot_files(temp_dir)
        assert len(files) == 1
        assert files[0].name.startswith("sales_")

        snapshot = Snapshot.load(files[0])
        assert snapshot.message == "Initial import"
        assert snapshot.table.primary_key == [0]
        assert snapshot.table.headers == ["ID", "Name", "Amount"]

        capsys.readouterr()
        assert main(["verify", str(files[0])]) == 0
        assert "Integrity check passed" in capsys.readouterr().out

    def test_snapshot_records_dependencies(self, temp_dir, sample_csv):
        lookup = temp_dir / "lookup.csv"
        lookup.write_text("Code\nA\n", encoding="utf-8")

        exit_code = main([
            "--root", str(temp_dir),
            "snapshot", str(sample_csv),
            "-d", f"lookup={lookup}",
        ])

        assert exit_code == 0
        snapshot = Snapshot.load(_snapshot_files(temp_dir)[0])
        assert [dep.name for dep in snapshot.dependencies] == ["lookup"]
        assert len(snapshot.dependencies[0].hash) == 64

    def test_verify_tampered_snapshot(self, temp_dir, sales_snapshot, capsys):
        path = temp_dir / "snapshot.json"
        sales_snapshot.save(path)
        document = json.loads(path.read_text(encoding="utf-8"))
        document["hashes"]["table_hash"] = "f" * 64
        path.write_text(json.dumps(document), encoding="utf-8")

        assert main(["verify", str(path)]) == 1
        assert "Integrity check FAILED" in capsys.readouterr().err

    def test_diff_json_output(self, temp_dir, sales_snapshot, updated_sales_snapshot, capsys):
        source = temp_dir / "a.json"
        target = temp_dir / "b.json"
        out = temp_dir / "diffs" / "a_b.json"
        out.parent.mkdir()
        sales_snapshot.save(source)
        updated_sales_snapshot.save(target)

        exit_code = main(["diff", str(source), str(target), "-f", "json", "-o", str(out)])

        assert exit_code == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["summary"]["rows_added"] == 1
        assert printed["changes"][0] == {
            "CellChanged": {"row": 1, "col": 2, "old": "200", "new": "250"}
        }
        assert json.loads(out.read_text(encoding="utf-8")) == printed

    def test_diff_missing_snapshot(self, temp_dir, capsys):
        exit_code = main(["diff", str(temp_dir / "a.json"), str(temp_dir / "b.json")])

        assert exit_code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["ok"] is False
        assert error["error"]["code"] == "IO_ERROR"

    def test_snapshot_parse_error(self, temp_dir, capsys):
        bad = temp_dir / "bad.csv"
        bad.write_text('A,B\n"1"x,2\n', encoding="utf-8")

        exit_code = main(["--root", str(temp_dir), "snapshot", str(bad)])

        assert exit_code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["error"]["code"] == "PARSE_ERROR"

    def test_log_lists_newest_first_and_skips_broken(self, temp_dir, sales_snapshot, capsys):
        snapshots_dir = temp_dir / "snapshots"
        snapshots_dir.mkdir()
        sales_snapshot.save(snapshots_dir / "sales_1.json")
        (snapshots_dir / "broken.json").write_text("{}", encoding="utf-8")

        exit_code = main(["--root", str(temp_dir), "log"])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "Showing 2 most recent snapshots" in output
        assert f"Snapshot: {sales_snapshot.id}" in output
        assert "Table:    2 rows x 3 cols" in output

    def test_log_without_snapshots(self, temp_dir, capsys):
        assert main(["--root", str(temp_dir), "log"]) == 0
        assert "No snapshots found" in capsys.readouterr().out

    def test_status_outside_repository(self, temp_dir, capsys):
        with patch("gitsheets.main.GitWorkspace.status_short", return_value=None):
            exit_code = main(["--root", str(temp_dir), "status"])

        assert exit_code == 0
        assert "Git repository: no" in capsys.readouterr().out

    def test_unexpected_error_envelope(self, capsys):
        with patch("gitsheets.main.run_command", side_effect=RuntimeError("boom")):
            exit_code = main(["status"])

        assert exit_code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["error"]["code"] == "INTERNAL_ERROR"
        assert error["error"]["details"] == {"type": "RuntimeError"}
