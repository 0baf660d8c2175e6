"""Gen-licenses-dir command implementation for depledger.

Builds one license report covering several build logs, typically one per
target architecture::

    artifacts/
    ├── aarch64/cargo-build.json
    └── x86_64/cargo-build.json

    $ depledger gen-licenses-dir artifacts allow-list.json

Every file below DIR whose name is exactly the log file name is merged
into a single ledger, with the same source-consistency rule as a single
log. The file name comes from ``--file-name``, else from the
``log_file_name`` setting.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from depledger.core import find_log_files, read_logs, render_license_report
from depledger.models import load_allow_list
from depledger.exceptions import DepLedgerError
from depledger.context import pass_context, DepLedgerContext
from depledger.utils import get_logger, print_error

logger = get_logger("commands.gen_licenses_dir")


@click.command("gen-licenses-dir")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.argument(
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--file-name",
    "-f",
    default=None,
    help="Basename of the build logs to merge (default: log_file_name setting).",
)
@pass_context
def gen_licenses_dir(
    ctx: DepLedgerContext,
    directory: Path,
    config_path: Path,
    file_name: Optional[str],
) -> None:
    """Print one license report for every build log found under DIRECTORY."""
    name = file_name or ctx.settings.log_file_name

    try:
        allow_list = load_allow_list(config_path)
        log_files = find_log_files(directory, name)
        if not log_files:
            raise DepLedgerError(
                f"No build logs named {name} found under {directory}",
                details={"directory": str(directory), "file_name": name},
            )
        ledger = read_logs(log_files)
        report = render_license_report(ledger, allow_list)
    except DepLedgerError as e:
        print_error(f"{e}")
        sys.exit(1)

    click.echo(report, nl=False)
