"""Dependency tree parser for ``cargo tree`` output.

Turns a tree dump into a flat, ordered list of :class:`TreeDependency`::

    my-app v1.2.0 (/src/my-app)          <- root, always skipped
    ├── serde v1.0.136
    │   └── serde_derive v1.0.136 (proc-macro)
    └── tracing v0.1.35
        └── tracing-core v0.1.28 (*)

On every line after the root, the first whitespace-separated token made
only of ASCII letters, digits, ``_`` or ``-`` is the package identity;
tree-drawing glyphs never pass that test. The next token is the version,
prefixed with ``v``. Anything after it (``(*)``, ``(proc-macro)``, a
path) is ignored.

Parsing is strict: a line that does not yield an identity and a version
fails the whole parse.
"""

from __future__ import annotations

import re
from pathlib import Path
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import semantic_version

from depledger.models import parse_version
from depledger.constants import TREE_VERSION_PREFIX
from depledger.utils import get_logger, safe_read_file
from depledger.exceptions import (
    BadVersionPrefixError,
    MissingIdentityError,
    MissingVersionError,
    TreeParseError,
)

logger = get_logger("core.tree")

_IDENTITY_RE = re.compile(r"[A-Za-z0-9_-]+")

# ASCII whitespace only; non-breaking spaces are part of tree glyph runs
_ASCII_WHITESPACE_RE = re.compile(r"[ \t\n\r\f\v]+")


@dataclass(frozen=True)
class TreeDependency:
    """One node of a dependency tree."""

    identity: str
    version: semantic_version.Version

    def __str__(self) -> str:
        return f"{self.identity} {self.version}"


def _is_identity(token: str) -> bool:
    return _IDENTITY_RE.fullmatch(token) is not None


def parse_dependency(
    line: str,
    *,
    line_number: Optional[int] = None,
    file_path: Optional[str] = None,
) -> TreeDependency:
    """Parse one non-root line of a tree dump.

    Raises:
        MissingIdentityError: No token qualifies as an identity.
        MissingVersionError: Nothing follows the identity.
        BadVersionPrefixError: The version token does not start with ``v``.
        TreeParseError: The version is not a semantic version.

    Example::

        >>> dep = parse_dependency("    │   └── tracing-core v0.1.28 (*)")
        >>> dep.identity, str(dep.version)
        ('tracing-core', '0.1.28')
    """
    location = {"line_number": line_number, "line_content": line, "file_path": file_path}
    tokens = [token for token in _ASCII_WHITESPACE_RE.split(line) if token]

    index = next((i for i, token in enumerate(tokens) if _is_identity(token)), None)
    if index is None:
        raise MissingIdentityError("Line missing package id", **location)
    identity = tokens[index]

    if index + 1 >= len(tokens):
        raise MissingVersionError(f"Line missing version for {identity}", **location)
    raw_version = tokens[index + 1]

    if not raw_version.startswith(TREE_VERSION_PREFIX):
        raise BadVersionPrefixError(
            f"Version {raw_version!r} of {identity} does not begin "
            f"with {TREE_VERSION_PREFIX!r}",
            **location,
        )

    try:
        version = parse_version(raw_version[len(TREE_VERSION_PREFIX):])
    except ValueError as exc:
        raise TreeParseError(
            f"Invalid version {raw_version!r} for {identity}: {exc}",
            **location,
        ) from exc

    return TreeDependency(identity=identity, version=version)


def parse_tree_lines(
    lines: Iterable[str],
    *,
    file_path: Optional[str] = None,
) -> List[TreeDependency]:
    """Parse tree lines; the first line (the root) is discarded."""
    dependencies: List[TreeDependency] = []
    iterator = iter(lines)

    root = next(iterator, None)
    if root is not None:
        logger.debug("Skipping tree root: %s", root.strip())

    for line_number, line in enumerate(iterator, start=2):
        dependencies.append(
            parse_dependency(line, line_number=line_number, file_path=file_path)
        )

    return dependencies


def parse_tree(text: str, *, file_path: Optional[str] = None) -> List[TreeDependency]:
    """Parse a complete tree dump held in memory."""
    return parse_tree_lines(text.splitlines(), file_path=file_path)


def read_tree(path: Union[str, Path]) -> List[TreeDependency]:
    """Read and parse a tree dump file (UTF-8)."""
    path = Path(path)
    logger.info("Reading dependency tree %s", path)
    dependencies = parse_tree(safe_read_file(path), file_path=str(path))
    logger.info("%s: %d dependency line(s)", path, len(dependencies))
    return dependencies
