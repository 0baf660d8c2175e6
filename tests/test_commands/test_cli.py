from __future__ import annotations

import json
import os
import logging
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from depledger import __version__
from depledger.cli import cli, main
from depledger.exceptions import DepLedgerError

REGISTRY = "(registry+https://github.com/rust-lang/crates.io-index)"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run every test from an empty directory so no settings file is found."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPLEDGER_SETTINGS", raising=False)
    monkeypatch.delenv("DEPLEDGER_COLOR", raising=False)
    yield tmp_path
    # Handlers installed during a run point at streams the runner has closed
    logging.getLogger("depledger").handlers.clear()


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    path = tmp_path / "cargo-build.json"
    event = {"reason": "compiler-artifact", "package_id": f"libc 0.2.126 {REGISTRY}"}
    path.write_text(json.dumps(event) + "\n", encoding="utf-8")
    return path


@pytest.mark.unit
class TestCliGroup:
    """Tests for the top-level command group."""

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """Test every subcommand is registered."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in (
            "print-log",
            "print-tree",
            "diff-tree",
            "gen-config",
            "gen-licenses",
            "gen-licenses-dir",
            "gen-bom",
        ):
            assert name in result.output

    def test_short_help_option(self, runner: CliRunner) -> None:
        """Test -h is accepted."""
        result = runner.invoke(cli, ["-h"])

        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_version(self, runner: CliRunner) -> None:
        """Test --version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == f"depledger {__version__}"

    def test_unknown_command(self, runner: CliRunner) -> None:
        """Test an unknown command is a usage error."""
        result = runner.invoke(cli, ["frobnicate"])

        assert result.exit_code == 2

    def test_missing_input_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test click rejects a path that does not exist."""
        result = runner.invoke(cli, ["print-log", str(tmp_path / "missing.json")])

        assert result.exit_code == 2
        assert "does not exist" in result.stderr

    def test_invalid_settings_file(
        self, runner: CliRunner, tmp_path: Path, log_file: Path
    ) -> None:
        """Test a bad settings file stops before the command runs."""
        settings = tmp_path / "depledger.toml"
        settings.write_text("[depledger]\nfail_on_diff = 'yes'\n", encoding="utf-8")

        result = runner.invoke(cli, ["print-log", str(log_file)])

        assert result.exit_code == 1
        assert "[ERROR] fail_on_diff must be a boolean" in result.stderr
        assert result.stdout == ""

    def test_explicit_settings_option(
        self, runner: CliRunner, tmp_path: Path, log_file: Path
    ) -> None:
        """Test --settings is loaded even when not discoverable."""
        settings = tmp_path / "custom.toml"
        settings.write_text("[depledger]\nunknown = 1\n", encoding="utf-8")

        result = runner.invoke(cli, ["--settings", str(settings), "print-log", str(log_file)])

        assert result.exit_code == 1
        assert "Unknown configuration keys: unknown" in result.stderr

    def test_settings_from_environment(
        self, runner: CliRunner, tmp_path: Path, log_file: Path
    ) -> None:
        """Test DEPLEDGER_SETTINGS names the settings file."""
        settings = tmp_path / "custom.toml"
        settings.write_text("[depledger]\nunknown = 1\n", encoding="utf-8")

        result = runner.invoke(
            cli,
            ["print-log", str(log_file)],
            env={"DEPLEDGER_SETTINGS": str(settings)},
        )

        assert result.exit_code == 1

    def test_no_color_sets_environment(
        self, runner: CliRunner, log_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test --no-color exports NO_COLOR for the rest of the run."""
        monkeypatch.delenv("NO_COLOR", raising=False)

        with patch.dict("os.environ", {}):
            result = runner.invoke(cli, ["--no-color", "print-log", str(log_file)])
            no_color = os.environ.get("NO_COLOR")

        assert result.exit_code == 0
        assert no_color == "1"

    def test_verbose_enables_info_logging(self, runner: CliRunner, log_file: Path) -> None:
        """Test -v lowers the log level to INFO."""
        result = runner.invoke(cli, ["-v", "print-log", str(log_file)])

        assert result.exit_code == 0
        assert logging.getLogger("depledger").level == logging.INFO


@pytest.mark.unit
class TestMain:
    """Tests for the main() exit code mapping."""

    def test_success(self, log_file: Path) -> None:
        """Test a successful command returns 0."""
        with patch("sys.argv", ["depledger", "print-log", str(log_file)]):
            assert main() == 0

    def test_usage_error(self, capsys: pytest.CaptureFixture) -> None:
        """Test click usage errors keep their exit code."""
        with patch("sys.argv", ["depledger", "frobnicate"]):
            assert main() == 2

        assert "No such command" in capsys.readouterr().err

    def test_command_failure(self, tmp_path: Path) -> None:
        """Test a command that exits 1 makes main return 1."""
        log_file = tmp_path / "broken.json"
        log_file.write_text('{"reason": "compiler-artifact"}\n', encoding="utf-8")

        with patch("sys.argv", ["depledger", "print-log", str(log_file)]):
            assert main() == 1

    def test_help_returns_zero(self) -> None:
        """Test --help exits cleanly."""
        with patch("sys.argv", ["depledger", "--help"]):
            assert main() == 0

    def test_abort(self, capsys: pytest.CaptureFixture) -> None:
        """Test click.Abort maps to 130."""
        with patch("depledger.cli.cli", side_effect=click.exceptions.Abort()):
            assert main() == 130

        assert "Operation cancelled by user" in capsys.readouterr().err

    def test_keyboard_interrupt(self) -> None:
        """Test Ctrl+C maps to 130."""
        with patch("depledger.cli.cli", side_effect=KeyboardInterrupt()):
            assert main() == 130

    def test_depledger_error(self, capsys: pytest.CaptureFixture) -> None:
        """Test an escaped DepLedgerError maps to 1."""
        with patch("depledger.cli.cli", side_effect=DepLedgerError("boom")):
            assert main() == 1

        assert "[ERROR] boom" in capsys.readouterr().err

    def test_unexpected_error(self, capsys: pytest.CaptureFixture) -> None:
        """Test any other exception maps to 1."""
        with patch("depledger.cli.cli", side_effect=RuntimeError("kaput")):
            assert main() == 1

        assert "Unexpected error: kaput" in capsys.readouterr().err
