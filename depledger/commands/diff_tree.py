"""Diff-tree command implementation for depledger.

Compares what the compiler built (build log) with what the crate graph
links (``cargo tree``) and reports every disagreement as a warning on
stderr. Both directions are always reported in full.

Mismatches are not fatal: the command exits 0 unless ``fail_on_diff`` is
enabled in the settings, in which case it exits 1 after reporting.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import diff_tree as compute_diff
from depledger.core import read_log, read_tree
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error, print_info, print_warning

logger = get_logger("commands.diff_tree")


@click.command("diff-tree")
@click.argument(
    "log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "tree_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def diff_tree(ctx: DepLedgerContext, log_path: Path, tree_path: Path) -> None:
    """Report packages that differ between a build log and a cargo tree."""
    try:
        ledger = read_log(log_path)
        tree = read_tree(tree_path)
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    diff = compute_diff(ledger, tree)
    for mismatch in diff.mismatches:
        print_warning(mismatch.message)

    if not diff:
        print_info("Build log and tree agree")
        return

    if ctx.settings.fail_on_diff:
        logger.debug("fail_on_diff is set, exiting with status 1")
        sys.exit(1)
