"""Gen-config command implementation for depledger.

Drafts an allow-list from a build log and a dependency tree. Packages the
tree links become third-party entries with an empty license list; every
other package built is listed as build-only. The allow-list classifies
identities, not versions: when a crate was built at several versions and
only some of them are linked, it is listed as third-party only and its
unlinked versions are not mentioned anywhere in the draft. The draft must
be reviewed and the licenses filled in by hand before it is used for
reports.

Typical usage::

    $ cargo build --message-format=json > cargo-build.json
    $ cargo tree --edges normal > tree.txt
    $ depledger gen-config cargo-build.json tree.txt allow-list.json
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import read_log, read_tree, synthesize_allow_list
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error, print_success, safe_write_file

logger = get_logger("commands.gen_config")


@click.command("gen-config")
@click.argument(
    "log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "tree_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
)
@pass_context
def gen_config(
    ctx: DepLedgerContext,
    log_path: Path,
    tree_path: Path,
    output_path: Path,
) -> None:
    """Generate a skeleton allow-list from a build log and a cargo tree.

    An existing OUTPUT_PATH is backed up before it is replaced.
    """
    try:
        ledger = read_log(log_path)
        tree = read_tree(tree_path)
        allow_list = synthesize_allow_list(ledger, tree)
        backup = safe_write_file(output_path, allow_list.dumps())
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    if backup is not None:
        logger.info("Previous allow-list saved to %s", backup)
    print_success(
        f"Wrote {output_path} ({len(allow_list.third_party)} third-party, "
        f"{len(allow_list.build_only)} build-only)"
    )
