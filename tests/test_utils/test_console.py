from __future__ import annotations

import sys
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console

from depledger.utils.console import (
    DEPLEDGER_THEME,
    _get_console,
    _should_use_color,
    print_error,
    print_info,
    print_success,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Reset cached consoles before and after each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that affect color."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


@pytest.mark.unit
class TestThemeConfiguration:
    """Tests for the console theme."""

    @pytest.mark.parametrize("style_name", ["success", "error", "warning", "info", "dim"])
    def test_theme_has_style(self, style_name: str) -> None:
        """Test each status style is defined."""
        assert style_name in DEPLEDGER_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for _should_use_color."""

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test NO_COLOR disables color."""
        monkeypatch.setenv("NO_COLOR", "1")

        assert _should_use_color(stderr=False) is False

    def test_ci_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test CI disables color."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("CI", "true")

        assert _should_use_color(stderr=True) is False

    def test_tty_stdout(self, clean_env: None) -> None:
        """Test a TTY stdout enables color."""
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(stderr=False) is True

    def test_checks_matching_stream(self, clean_env: None) -> None:
        """Test the stderr console looks at stderr."""
        with patch.object(sys.stderr, "isatty", return_value=False):
            assert _should_use_color(stderr=True) is False


@pytest.mark.unit
class TestGetConsole:
    """Tests for _get_console caching."""

    def test_returns_console(self) -> None:
        """Test a rich Console is returned."""
        assert isinstance(_get_console(), Console)

    def test_cached_per_stream(self) -> None:
        """Test one console per stream."""
        assert _get_console() is _get_console()
        assert _get_console(stderr=True) is _get_console(stderr=True)
        assert _get_console() is not _get_console(stderr=True)
        assert _get_console(stderr=True).stderr is True

    def test_reconfigure_drops_cache(self) -> None:
        """Test reconfigure_console creates fresh consoles."""
        first = _get_console()
        reconfigure_console()

        assert _get_console() is not first

    def test_reconfigure_respects_no_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a changed environment is honoured after reconfigure."""
        monkeypatch.setenv("NO_COLOR", "1")
        reconfigure_console()

        assert _get_console().no_color is True


@pytest.mark.unit
class TestPrintHelpers:
    """Tests for status message helpers."""

    def test_print_success(self) -> None:
        """Test success messages get the OK prefix."""
        with patch.object(Console, "print") as mock_print:
            print_success("Wrote bom.json")

        mock_print.assert_called_once_with(
            "[OK] Wrote bom.json", style="success", markup=False
        )

    def test_print_error(self) -> None:
        """Test error messages get the ERROR prefix."""
        with patch.object(Console, "print") as mock_print:
            print_error("No license specified for serde")

        mock_print.assert_called_once_with(
            "[ERROR] No license specified for serde", style="error", markup=False
        )

    def test_print_warning(self) -> None:
        """Test warnings get the WARNING prefix."""
        with patch.object(Console, "print") as mock_print:
            print_warning("mismatch")

        mock_print.assert_called_once_with(
            "[WARNING] mismatch", style="warning", markup=False
        )

    def test_print_warning_without_prefix(self) -> None:
        """Test the warning prefix can be dropped."""
        with patch.object(Console, "print") as mock_print:
            print_warning("plain", prefix=None)

        mock_print.assert_called_once_with("plain", style="warning", markup=False)

    def test_print_info(self) -> None:
        """Test info messages are printed as-is."""
        with patch.object(Console, "print") as mock_print:
            print_info("Build log and tree agree")

        mock_print.assert_called_once_with(
            "Build log and tree agree", style="info", markup=False
        )

    def test_markup_not_interpreted(self, capsys: pytest.CaptureFixture) -> None:
        """Test square brackets in package data are printed literally."""
        print_error("crate [bold]x[/bold]")

        captured = capsys.readouterr()
        assert "[ERROR] crate [bold]x[/bold]" in captured.err
        assert captured.out == ""

    def test_success_goes_to_stdout(self, capsys: pytest.CaptureFixture) -> None:
        """Test success messages are written on stdout."""
        print_success("done")

        captured = capsys.readouterr()
        assert "[OK] done" in captured.out
        assert captured.err == ""
