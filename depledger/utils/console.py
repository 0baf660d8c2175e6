"""
Console output utilities for depledger using Rich.

Two consoles are kept: one on stdout for user-facing status, one on
stderr for errors and the non-fatal diagnostics (``diff-tree``
mismatches). Report bodies are plain text and are written with
``click.echo`` by the commands, never through Rich, so that markup
characters in package data are never interpreted.

For diagnostic or debug output, use :mod:`depledger.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Dict, Optional

from rich.theme import Theme
from rich.console import Console

DEPLEDGER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_consoles: Dict[bool, Console] = {}
_console_lock = threading.Lock()


def _should_use_color(stderr: bool) -> bool:
    """Return True if colored output should be enabled for the stream."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    stream = sys.stderr if stderr else sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, OSError):
        return False


def _get_console(*, stderr: bool = False) -> Console:
    """Return the shared console for stdout or stderr.

    The console resolves ``sys.stdout``/``sys.stderr`` at write time, so
    stream redirection (e.g. by test runners) is honoured.
    """
    console = _consoles.get(stderr)
    if console is None:
        with _console_lock:
            console = _consoles.get(stderr)
            if console is None:
                use_color = _should_use_color(stderr)
                console = Console(
                    theme=DEPLEDGER_THEME,
                    stderr=stderr,
                    no_color=not use_color,
                    highlight=False,
                    soft_wrap=True,
                )
                _consoles[stderr] = console
    return console


def reconfigure_console() -> None:
    """Drop the cached consoles so the next call re-reads the environment."""
    with _console_lock:
        _consoles.clear()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message on stdout."""
    _get_console().print(f"{prefix} {message}", style="success", markup=False)


def print_info(message: str) -> None:
    """Print a neutral status message on stderr."""
    _get_console(stderr=True).print(message, style="info", markup=False)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message on stderr."""
    _get_console(stderr=True).print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: Optional[str] = "[WARNING]") -> None:
    """Print a warning on stderr."""
    text = f"{prefix} {message}" if prefix else message
    _get_console(stderr=True).print(text, style="warning", markup=False)
