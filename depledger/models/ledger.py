"""
Package ledger: what a build actually linked.

The ledger maps each package identity to its :class:`PackageUsage`, the
set of versions observed for it and the source tag it was built from. It
is filled by the build log ingester, optionally pruned against an
allow-list, and then consumed read-only by the reconciler and the report
generators.

Typical usage::

    ledger = PackageLedger()
    ledger.record("serde", "1.0.136", "(registry+https://...)")
    ledger.record("serde", "1.0.137", "(registry+https://...)")
    str(ledger["serde"].versions)   # '[1.0.136, 1.0.137]'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
)

import semantic_version

from depledger.exceptions import OriginConflictError
from depledger.models.version_set import VersionLike, VersionSet, parse_version

if TYPE_CHECKING:
    from depledger.models.allow_list import AllowList


@dataclass
class PackageUsage:
    """Every observation of one package identity.

    Attributes:
        identity: Package identity (crate name).
        source: Source tag shared by every observation of the identity.
        versions: Distinct versions observed, ascending.
    """

    identity: str
    source: str
    versions: VersionSet = field(default_factory=VersionSet)

    def __str__(self) -> str:
        return f"{self.identity} {self.versions} {self.source}"


class PackageLedger:
    """Mapping of package identity to :class:`PackageUsage`.

    Iteration (``keys``, ``items``, ``values``, ``for identity in ledger``)
    is always in ascending identity order so reports are reproducible.
    """

    __slots__ = ("_packages",)

    def __init__(self) -> None:
        self._packages: Dict[str, PackageUsage] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def record(self, identity: str, version: VersionLike, source: str) -> PackageUsage:
        """Merge one observation of ``identity`` into the ledger.

        A new identity is inserted. A known identity must carry the exact
        same source tag; its version set is then unioned with ``version``.

        Raises:
            ValueError: ``version`` is not a semantic version.
            OriginConflictError: ``source`` differs from the stored tag.
        """
        version = parse_version(version)
        usage = self._packages.get(identity)
        if usage is None:
            usage = PackageUsage(identity=identity, source=source)
            self._packages[identity] = usage
        elif usage.source != source:
            raise OriginConflictError(identity, usage.source, source)

        usage.versions.add(version)
        return usage

    # ------------------------------------------------------------------
    # Pruning
    # ------------------------------------------------------------------

    def retain(self, predicate: Callable[[str, PackageUsage], bool]) -> List[str]:
        """Keep only entries for which ``predicate`` holds.

        Returns:
            Identities that were removed, ascending.
        """
        removed = [
            identity
            for identity, usage in self.items()
            if not predicate(identity, usage)
        ]
        for identity in removed:
            del self._packages[identity]
        return removed

    def remove_build_only(self, allow_list: "AllowList") -> List[str]:
        """Drop packages the allow-list marks as build-only."""
        return self.retain(lambda identity, _: identity not in allow_list.build_only)

    def remove_vendor(self, allow_list: "AllowList") -> List[str]:
        """Drop packages the allow-list marks as vendor-licensed."""
        return self.retain(lambda identity, _: identity not in allow_list.vendor)

    def pop(self, identity: str) -> Optional[PackageUsage]:
        """Remove and return the entry for ``identity``, if any."""
        return self._packages.pop(identity, None)

    def copy(self) -> "PackageLedger":
        """Return an independent ledger with the same observations."""
        clone = PackageLedger()
        for identity, usage in self.items():
            clone._packages[identity] = PackageUsage(
                identity=identity,
                source=usage.source,
                versions=VersionSet(usage.versions),
            )
        return clone

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get(self, identity: str) -> Optional[PackageUsage]:
        return self._packages.get(identity)

    def keys(self) -> List[str]:
        return sorted(self._packages)

    def items(self) -> List[Tuple[str, PackageUsage]]:
        return [(identity, self._packages[identity]) for identity in self.keys()]

    def values(self) -> List[PackageUsage]:
        return [self._packages[identity] for identity in self.keys()]

    def pairs(self) -> Iterator[Tuple[str, semantic_version.Version]]:
        """Yield every ``(identity, version)`` pair, ascending."""
        for identity, usage in self.items():
            for version in usage.versions:
                yield identity, version

    def __getitem__(self, identity: str) -> PackageUsage:
        return self._packages[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self._packages

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"PackageLedger({len(self)} packages)"
