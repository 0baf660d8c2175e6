"""
Command-line interface for depledger.

This module provides the main CLI entry point and handles global options,
settings loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from depledger.config import load_settings
from depledger.__version__ import __version__
from depledger.context import DepLedgerContext
from depledger.exceptions import ConfigError, DepLedgerError
from depledger.utils.logger import get_logger, setup_logging, verbosity_to_level
from depledger.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--settings",
    "-s",
    "settings_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a depledger settings file (TOML).",
    envvar="DEPLEDGER_SETTINGS",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPLEDGER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depledger",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    settings_path: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depledger: license reports and bills of materials for Rust builds.

    \b
    Available commands:
      depledger print-log          Print packages from a cargo build log
      depledger print-tree         Print dependencies from a cargo tree dump
      depledger diff-tree          Compare a build log with a cargo tree
      depledger gen-config         Draft an allow-list
      depledger gen-licenses       Print the license report of a build log
      depledger gen-licenses-dir   Print one license report for many logs
      depledger gen-bom            Write the bill of materials of a package

    \b
    Examples:
      depledger gen-licenses cargo-build.json allow-list.json
      depledger -v diff-tree cargo-build.json tree.txt

    Use ``depledger COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for rich and the log formatter
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        settings = load_settings(settings_path)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depledger_ctx = DepLedgerContext()
    depledger_ctx.settings_path = settings_path or settings.source_path
    depledger_ctx.color = color
    depledger_ctx.verbose = verbose
    depledger_ctx.settings = settings
    ctx.obj = depledger_ctx

    logger.debug("depledger v%s", __version__)
    logger.debug("Settings path: %s", depledger_ctx.settings_path)
    logger.debug("Settings: %s", settings.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from depledger.commands.print_log import print_log  # noqa: E402
from depledger.commands.print_tree import print_tree  # noqa: E402
from depledger.commands.diff_tree import diff_tree  # noqa: E402
from depledger.commands.gen_config import gen_config  # noqa: E402
from depledger.commands.gen_licenses import gen_licenses  # noqa: E402
from depledger.commands.gen_licenses_dir import gen_licenses_dir  # noqa: E402
from depledger.commands.gen_bom import gen_bom  # noqa: E402

cli.add_command(print_log)
cli.add_command(print_tree)
cli.add_command(diff_tree)
cli.add_command(gen_config)
cli.add_command(gen_licenses)
cli.add_command(gen_licenses_dir)
cli.add_command(gen_bom)


def main() -> int:
    """Main entry point for the depledger CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error (any :class:`DepLedgerError`)
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except DepLedgerError as exc:
        print_error(str(exc))
        logger.debug(
            "DepLedgerError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
