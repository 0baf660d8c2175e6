"""Print-log command implementation for depledger.

Ingests one build log and prints the resulting ledger, one package per
line, in ascending identity order::

    $ depledger print-log target/cargo-build.json
    libc [0.2.126] (registry+https://github.com/rust-lang/crates.io-index)
    serde [1.0.136, 1.0.137] (registry+https://github.com/rust-lang/crates.io-index)
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import read_log
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error

logger = get_logger("commands.print_log")


@click.command("print-log")
@click.argument(
    "log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def print_log(ctx: DepLedgerContext, log_path: Path) -> None:
    """Print the packages recorded in a cargo JSON build log."""
    try:
        ledger = read_log(log_path)
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    for usage in ledger.values():
        click.echo(str(usage))
    logger.debug("Printed %d package(s)", len(ledger))
