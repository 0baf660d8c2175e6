"""Build log ingestion.

Reads the JSON message stream written by ``cargo build
--message-format=json`` and records every package the compiler produced
an artifact for in a :class:`~depledger.models.PackageLedger`.

Only ``compiler-artifact`` messages matter. Each carries a package
descriptor of the form ``<identity> <version> <source>``::

    {"reason": "compiler-artifact",
     "package_id": "serde 1.0.136 (registry+https://github.com/rust-lang/crates.io-index)",
     ...}

Other message kinds are skipped, as are lines that are not JSON objects
(cargo interleaves plain compiler output with the messages). A
malformed descriptor, or the same package seen with two different
sources, aborts the whole ingestion.

Typical usage::

    ledger = read_log("target/cargo-build.json")

    # Merge every build log below a directory (e.g. one per architecture)
    ledger = read_logs(find_log_files("artifacts", "cargo-build.json"))
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import semantic_version

from depledger.models import PackageLedger, parse_version
from depledger.exceptions import MalformedEventError
from depledger.utils import find_named_files, get_logger, safe_read_file
from depledger.constants import COMPILER_ARTIFACT_REASON, PACKAGE_ID_KEY

logger = get_logger("core.log")

#: Descriptor fields, in the order they appear.
DESCRIPTOR_FIELDS = ("id", "version", "source")


def parse_package_descriptor(
    descriptor: str,
    *,
    line_number: Optional[int] = None,
    file_path: Optional[str] = None,
) -> Tuple[str, semantic_version.Version, str]:
    """Split a ``<identity> <version> <source>`` descriptor.

    Tokens are separated by whitespace; tokens past the third are ignored.

    Returns:
        ``(identity, version, source)``.

    Raises:
        MalformedEventError: A token is missing or the version is not a
            semantic version. ``field`` names the offending token.

    Example::

        >>> parse_package_descriptor("libc 0.2.126 (registry+https://x)")[0]
        'libc'
    """
    tokens = descriptor.split()
    for index, name in enumerate(DESCRIPTOR_FIELDS):
        if len(tokens) <= index:
            raise MalformedEventError(
                f"missing {name}",
                field=name,
                descriptor=descriptor,
                line_number=line_number,
                file_path=file_path,
            )

    identity, raw_version, source = tokens[:3]
    try:
        version = parse_version(raw_version)
    except ValueError as exc:
        raise MalformedEventError(
            f"invalid version {raw_version!r}: {exc}",
            field="version",
            descriptor=descriptor,
            line_number=line_number,
            file_path=file_path,
        ) from exc

    return identity, version, source


class BuildLogIngester:
    """Accumulates one or more build logs into a single ledger.

    Every log read through the same ingester is merged with the same rule,
    so a package built from two different sources is detected even when
    the two observations sit in different files.

    Example::

        >>> ingester = BuildLogIngester()
        >>> ingester.ingest_file("x86_64/cargo-build.json")
        >>> ingester.ingest_file("aarch64/cargo-build.json")
        >>> ledger = ingester.ledger
    """

    def __init__(self, ledger: Optional[PackageLedger] = None) -> None:
        self.ledger = ledger if ledger is not None else PackageLedger()
        self.files_read: List[Path] = []
        self.artifacts_seen = 0

    def ingest_file(self, path: Union[str, Path]) -> PackageLedger:
        """Read one build log from disk into the ledger.

        Raises:
            FileOperationError: The file cannot be read.
            MalformedEventError: An artifact event has a bad descriptor.
            OriginConflictError: A package has two different sources.
        """
        path = Path(path)
        logger.info("Reading build log %s", path)
        before = self.artifacts_seen

        self.ingest_lines(
            safe_read_file(path, max_size=None).splitlines(),
            file_path=str(path),
        )

        self.files_read.append(path)
        logger.info(
            "%s: %d artifact event(s), %d package(s) in ledger",
            path,
            self.artifacts_seen - before,
            len(self.ledger),
        )
        return self.ledger

    def ingest_lines(
        self,
        lines: Iterable[str],
        *,
        file_path: Optional[str] = None,
    ) -> PackageLedger:
        """Record every compiler-artifact event found in ``lines``."""
        for line_number, line in enumerate(lines, start=1):
            event = _decode_event(line)
            if event is None:
                if line.strip():
                    logger.debug("Skipping non-message line %d", line_number)
                continue
            if event.get("reason") != COMPILER_ARTIFACT_REASON:
                continue

            descriptor = event.get(PACKAGE_ID_KEY)
            if not isinstance(descriptor, str):
                raise MalformedEventError(
                    f"compiler-artifact event without a {PACKAGE_ID_KEY} string",
                    field="id",
                    line_number=line_number,
                    file_path=file_path,
                )

            identity, version, source = parse_package_descriptor(
                descriptor,
                line_number=line_number,
                file_path=file_path,
            )
            self.ledger.record(identity, version, source)
            self.artifacts_seen += 1

        return self.ledger


def _decode_event(line: str) -> Optional[dict]:
    """Decode a JSON object line; None for anything else."""
    text = line.strip()
    if not text.startswith("{"):
        return None
    try:
        event = json.loads(text)
    except json.JSONDecodeError:
        return None
    return event if isinstance(event, dict) else None


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def parse_log_stream(
    lines: Iterable[str],
    ledger: Optional[PackageLedger] = None,
    origin: Optional[str] = None,
) -> PackageLedger:
    """Ingest an in-memory build log; ``origin`` labels errors."""
    return BuildLogIngester(ledger).ingest_lines(lines, file_path=origin)


def read_log(path: Union[str, Path]) -> PackageLedger:
    """Ingest a single build log file."""
    return BuildLogIngester().ingest_file(path)


def read_logs(paths: Iterable[Union[str, Path]]) -> PackageLedger:
    """Ingest several build logs into one ledger, in the given order."""
    ingester = BuildLogIngester()
    for path in paths:
        ingester.ingest_file(path)
    logger.info(
        "Merged %d build log(s) into %d package(s)",
        len(ingester.files_read),
        len(ingester.ledger),
    )
    return ingester.ledger


def find_log_files(root: Union[str, Path], file_name: str) -> List[Path]:
    """Find every build log named exactly ``file_name`` below ``root``, sorted."""
    paths = find_named_files(root, file_name)
    logger.info("Found %d file(s) named %s under %s", len(paths), file_name, root)
    return paths
