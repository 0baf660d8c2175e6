"""Gen-bom command implementation for depledger.

Writes the JSON bill of materials of one vendor package::

    $ depledger gen-bom my-app cargo-build.json allow-list.json bom.json

SUBJECT must appear in the build log and in the vendor section of the
allow-list. Build-only packages are left out; every other package must be
vendor or third-party.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depledger.core import create_bom, read_log
from depledger.models import load_allow_list
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error, print_success, safe_write_file

logger = get_logger("commands.gen_bom")


@click.command("gen-bom")
@click.argument("subject")
@click.argument(
    "log_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
)
@pass_context
def gen_bom(
    ctx: DepLedgerContext,
    subject: str,
    log_path: Path,
    config_path: Path,
    output_path: Path,
) -> None:
    """Write the bill of materials of SUBJECT as JSON."""
    try:
        allow_list = load_allow_list(config_path)
        ledger = read_log(log_path)
        bom = create_bom(subject, ledger, allow_list)
        backup = safe_write_file(output_path, bom.dumps())
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    if backup is not None:
        logger.info("Previous BOM saved to %s", backup)
    print_success(
        f"Wrote {output_path} ({subject} {bom.subject.version}, "
        f"{len(bom.dependencies)} dependencies)"
    )
