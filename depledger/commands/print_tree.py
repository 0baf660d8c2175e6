"""Print-tree command implementation for depledger.

Parses a ``cargo tree`` dump and prints every dependency line as
``<identity> <version>``, in tree order and without the root.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import read_tree
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error

logger = get_logger("commands.print_tree")


@click.command("print-tree")
@click.argument(
    "tree_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def print_tree(ctx: DepLedgerContext, tree_path: Path) -> None:
    """Print the dependencies listed in a cargo tree dump."""
    try:
        dependencies = read_tree(tree_path)
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    for dep in dependencies:
        click.echo(str(dep))
