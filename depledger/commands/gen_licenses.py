"""Gen-licenses command implementation for depledger.

Prints the license report of one build log to stdout::

    $ depledger gen-licenses cargo-build.json allow-list.json > LICENSES.txt

Every distributed package must be a third-party allow-list entry with at
least one license. Otherwise nothing is printed and the command exits 1.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import read_log, render_license_report
from depledger.models import load_allow_list
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error

logger = get_logger("commands.gen_licenses")


@click.command("gen-licenses")
@click.argument(
    "log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def gen_licenses(ctx: DepLedgerContext, log_path: Path, config_path: Path) -> None:
    """Print the license report for a build log."""
    try:
        allow_list = load_allow_list(config_path)
        ledger = read_log(log_path)
        report = render_license_report(ledger, allow_list)
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    click.echo(report, nl=False)
