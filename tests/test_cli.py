"""Tests for auditpager/cli.py - CLI integration tests using Click's CliRunner."""

from __future__ import annotations

import datetime as dt
import json
import logging
import sys
from pathlib import Path

import pytest
from auditpager.cli import cli, main, setup_logging
from auditpager.exceptions import PagerNotFoundError
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def no_pager(mocker):
    """Make the terminal pager unavailable so output goes to stdout."""
    return mocker.patch(
        "auditpager.commands.audit.new_paginated_writer", side_effect=PagerNotFoundError()
    )


class TestCliHelp:
    """Tests for CLI help output."""

    def test_main_help(self, runner: CliRunner):
        """Main --help lists the audit command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "audit" in result.output
        assert "page through audit logs" in result.output

    def test_audit_help(self, runner: CliRunner):
        """audit --help shows command options."""
        result = runner.invoke(cli, ["audit", "--help"])
        assert result.exit_code == 0
        assert "--json" in result.output
        assert "--timestamp" in result.output
        assert "--tree" in result.output
        assert "FILE_OR_URL" in result.output

    def test_per_page_is_hidden(self, runner: CliRunner):
        """--per-page is not advertised."""
        result = runner.invoke(cli, ["audit", "--help"])
        assert "--per-page" not in result.output


class TestCliVersion:
    """Tests for CLI version output."""

    def test_version_flag(self, runner: CliRunner):
        """--version shows version information."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "auditpager" in result.output.lower()
        assert "0." in result.output or "1." in result.output


class TestCliDebugFlag:
    """Tests for --debug flag."""

    def test_debug_flag_accepted(self, runner: CliRunner):
        """--debug flag is accepted at top level."""
        result = runner.invoke(cli, ["--debug", "--help"])
        assert result.exit_code == 0

    def test_debug_short_flag_accepted(self, runner: CliRunner):
        """-d flag is accepted as shorthand for --debug."""
        result = runner.invoke(cli, ["-d", "--help"])
        assert result.exit_code == 0


class TestCliAudit:
    """Tests for the audit command."""

    def test_requires_source(self, runner: CliRunner):
        """audit without a source is a usage error."""
        result = runner.invoke(cli, ["audit"])
        assert result.exit_code != 0
        assert "FILE_OR_URL" in result.output

    def test_json_output(self, runner: CliRunner, no_pager, events_file: Path):
        """--json prints one JSON object per event."""
        result = runner.invoke(cli, ["audit", str(events_file), "--json", "-T"])
        assert result.exit_code == 0, result.output
        rows = [json.loads(line) for line in result.output.splitlines()]
        assert [r["AUTHOR"] for r in rows] == ["alice", "bob", "carol"]
        logged_at = dt.datetime.fromisoformat(rows[0]["DATE"])
        assert logged_at == dt.datetime(2026, 1, 21, 21, 52, 57, tzinfo=dt.UTC)
        assert set(rows[0]) == {"AUTHOR", "EVENT", "IP ADDRESS", "DATE"}

    def test_table_output(self, runner: CliRunner, no_pager, events_file: Path):
        """Default output is a table with a header line."""
        result = runner.invoke(cli, ["audit", str(events_file)])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("AUTHOR")
        assert "alice" in result.output
        assert "ago" in result.output

    def test_tree_adds_subject(
        self, runner: CliRunner, no_pager, events_file: Path, tmp_path: Path, tree_data
    ):
        """--tree adds resolved subjects to the output."""
        tree_path = tmp_path / "tree.json"
        tree_path.write_text(json.dumps(tree_data), encoding="utf-8")
        result = runner.invoke(cli, ["audit", str(events_file), "--tree", str(tree_path), "--json"])
        assert result.exit_code == 0, result.output
        row = json.loads(result.output.splitlines()[0])
        assert row["EVENT SUBJECT"] == "acme/backend/prod/db/password"

    def test_bad_per_page(self, runner: CliRunner, events_file: Path):
        """A non-positive --per-page is rejected."""
        result = runner.invoke(cli, ["audit", str(events_file), "--per-page", "0"])
        assert result.exit_code != 0
        assert "per-page should be positive" in str(result.exception)

    def test_per_page_must_be_int(self, runner: CliRunner, events_file: Path):
        """--per-page only takes integers."""
        result = runner.invoke(cli, ["audit", str(events_file), "--per-page", "many"])
        assert result.exit_code == 2


class TestCliLogging:
    """Tests for logging setup behavior."""

    def test_setup_logging_no_duplicate_handlers(self):
        """Repeated setup_logging calls do not add duplicate stderr handlers."""
        logger = logging.getLogger("auditpager")
        original_handlers = list(logger.handlers)
        original_level = logger.level
        try:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)

            setup_logging(debug=False)
            setup_logging(debug=True)

            stderr_handlers = [
                h
                for h in logger.handlers
                if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
            ]
            assert len(stderr_handlers) == 1
            assert logger.level == logging.DEBUG
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            for handler in original_handlers:
                logger.addHandler(handler)
            logger.setLevel(original_level)


class TestMain:
    """Tests for the main() exit code mapping."""

    def test_user_error_exit_code(self, monkeypatch, capsys, tmp_path: Path):
        """User errors print ERROR: and exit with their return code."""
        missing = tmp_path / "missing.jsonl"
        monkeypatch.setattr(sys, "argv", ["auditpager", "audit", str(missing)])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2
        assert "ERROR: Audit log file not found" in capsys.readouterr().err

    def test_source_error_exit_code(self, monkeypatch, capsys, no_pager, tmp_path: Path):
        """A broken event source exits with status 2."""
        bad = tmp_path / "bad.jsonl"
        bad.write_text("not json\n", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["auditpager", "audit", str(bad), "--json"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2
        assert "Invalid JSON" in capsys.readouterr().err

    def test_undecodable_source_exit_code(self, monkeypatch, capsys, no_pager, tmp_path: Path):
        """An audit log that is not UTF-8 exits with status 2 and no traceback."""
        bad = tmp_path / "bad.jsonl"
        bad.write_bytes(b"\xff\xfe\n")
        monkeypatch.setattr(sys, "argv", ["auditpager", "audit", str(bad), "--json"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2
        assert "ERROR: Invalid UTF-8" in capsys.readouterr().err

    def test_success(self, monkeypatch, capsys, no_pager, events_file: Path):
        """A successful run exits with status 0."""
        monkeypatch.setattr(sys, "argv", ["auditpager", "audit", str(events_file), "--json"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
        assert "alice" in capsys.readouterr().out
