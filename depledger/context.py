"""
Shared context object for depledger CLI commands.

This module defines the global Click context used to share settings and
runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depledger.config import DepLedgerSettings


class DepLedgerContext:
    """Global context object for depledger CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        settings_path: Path to the settings file in use, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        settings: Loaded tool settings (defaults when no file was found).
    """

    __slots__ = ("settings_path", "verbose", "color", "settings")

    def __init__(self) -> None:
        self.settings_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.settings: DepLedgerSettings = DepLedgerSettings()


#: Click decorator for injecting :class:`DepLedgerContext` into commands.
pass_context = click.make_pass_decorator(DepLedgerContext, ensure=True)
