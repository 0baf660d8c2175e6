"""
Deduplicating, ordered set of semantic versions.

A :class:`VersionSet` holds every distinct version observed for one
package identity. Versions are compared by semantic-version precedence
(numeric fields, then pre-release identifiers), never as strings, so
``1.10.0`` sorts after ``1.9.0``. Versions that differ only in build
metadata have equal precedence; they are ordered by their build
identifiers so iteration never depends on hashing.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Set, Tuple, Union

import semantic_version

VersionLike = Union[str, semantic_version.Version]


def parse_version(value: VersionLike) -> semantic_version.Version:
    """Return ``value`` as a strict semantic version.

    Raises:
        ValueError: ``value`` is not a valid ``major.minor.patch`` version.
    """
    if isinstance(value, semantic_version.Version):
        return value
    return semantic_version.Version(value)


def order_key(version: semantic_version.Version) -> Tuple[Any, ...]:
    """Total-order sort key: precedence, then build metadata."""
    return (version.precedence_key, version.build)


class VersionSet:
    """Ordered set of :class:`semantic_version.Version`.

    Insertion is idempotent and membership is exact: ``1.0.0`` is not
    "in" a set holding only ``1.0.1``. Iteration is ascending.

    Example:
        >>> versions = VersionSet(["1.1.0", "1.0.0", "1.1.0"])
        >>> str(versions)
        '[1.0.0, 1.1.0]'
        >>> "1.0.0" in versions
        True
    """

    __slots__ = ("_versions",)

    def __init__(self, versions: Iterable[VersionLike] = ()) -> None:
        self._versions: Set[semantic_version.Version] = set()
        self.update(versions)

    def add(self, version: VersionLike) -> bool:
        """Insert ``version``; return False if it was already present."""
        parsed = parse_version(version)
        if parsed in self._versions:
            return False
        self._versions.add(parsed)
        return True

    def update(self, versions: Iterable[VersionLike]) -> None:
        """Union ``versions`` into this set."""
        for version in versions:
            self.add(version)

    def first(self) -> Optional[semantic_version.Version]:
        """Lowest version by precedence, or None when empty."""
        return min(self._versions, key=order_key) if self._versions else None

    def as_list(self) -> List[semantic_version.Version]:
        return sorted(self._versions, key=order_key)

    def as_strings(self) -> List[str]:
        return [str(version) for version in self.as_list()]

    def __contains__(self, version: object) -> bool:
        if isinstance(version, str):
            try:
                version = parse_version(version)
            except ValueError:
                return False
        return version in self._versions

    def __iter__(self) -> Iterator[semantic_version.Version]:
        return iter(self.as_list())

    def __len__(self) -> int:
        return len(self._versions)

    def __bool__(self) -> bool:
        return bool(self._versions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionSet):
            return NotImplemented
        return self._versions == other._versions

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "[" + ", ".join(self.as_strings()) + "]"

    def __repr__(self) -> str:
        return f"VersionSet({self.as_strings()!r})"
