"""Reconciliation of a build ledger against an allow-list and a dependency tree.

The ledger says what the compiler built, the dependency tree says what
the crate graph links, and the allow-list says what is permitted and how
it is licensed. This module cross-references them:

1. :func:`check_allowed`: every ledger package must be allow-listed as
   third-party; all violations are reported together.
2. :func:`prune`: drop build-only (and optionally vendor) packages from
   a ledger before reporting.
3. :func:`diff_tree`: symmetric difference between ledger and tree, as
   non-fatal mismatches.
4. :func:`synthesize_allow_list`: draft an allow-list from a ledger and
   a tree, for a human to complete.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

import semantic_version

from depledger.core.tree_ingester import TreeDependency
from depledger.exceptions import AllowListViolationError
from depledger.models import AllowList, PackageLedger, Source, ThirdPartyPackage
from depledger.utils import get_logger

logger = get_logger("core.reconciler")


def check_allowed(ledger: PackageLedger, allow_list: AllowList) -> None:
    """Require every ledger identity to be a third-party allow-list entry.

    Raises:
        AllowListViolationError: Lists every identity that is missing.
    """
    disallowed = [identity for identity in ledger if identity not in allow_list.third_party]
    if disallowed:
        logger.debug("Disallowed packages: %s", disallowed)
        raise AllowListViolationError(disallowed)


def prune(
    ledger: PackageLedger,
    allow_list: AllowList,
    *,
    vendor: bool = False,
) -> List[str]:
    """Remove build-only entries, and vendor entries when ``vendor`` is set.

    Only ``ledger`` is modified; pass a :meth:`PackageLedger.copy` to keep
    the original.

    Returns:
        Removed identities, ascending.
    """
    removed = ledger.remove_build_only(allow_list)
    if vendor:
        removed = sorted(removed + ledger.remove_vendor(allow_list))
    if removed:
        logger.info("Pruned %d package(s): %s", len(removed), ", ".join(removed))
    return removed


# ---------------------------------------------------------------------------
# Ledger / tree differences
# ---------------------------------------------------------------------------


class MismatchKind(Enum):
    """Ways a ledger and a dependency tree can disagree."""

    #: The tree names a package the build log never built.
    MISSING_IDENTITY = "missing_identity"
    #: The build log has the package, but not at the tree's version.
    MISSING_VERSION = "missing_version"
    #: The build log has a package/version no tree node names.
    NOT_IN_TREE = "not_in_tree"


@dataclass(frozen=True)
class TreeMismatch:
    kind: MismatchKind
    identity: str
    version: semantic_version.Version

    @property
    def message(self) -> str:
        if self.kind is MismatchKind.MISSING_IDENTITY:
            return f"Tree contains dependency {self.identity} not found in build log!"
        if self.kind is MismatchKind.MISSING_VERSION:
            return (
                f"Tree contains dependency {self.identity} version {self.version} "
                "not found in build log!"
            )
        return (
            f"Log contains dependency {self.identity} version {self.version} "
            "not found in the tree"
        )


@dataclass
class TreeDiff:
    """Both directions of a ledger/tree comparison.

    Attributes:
        tree_only: Tree nodes with no matching ledger entry, in tree order.
            A node repeated in the tree is reported once per occurrence.
        ledger_only: Ledger ``(identity, version)`` pairs no tree node
            matches, ascending.
    """

    tree_only: List[TreeMismatch] = field(default_factory=list)
    ledger_only: List[TreeMismatch] = field(default_factory=list)

    @property
    def mismatches(self) -> List[TreeMismatch]:
        return self.tree_only + self.ledger_only

    def __bool__(self) -> bool:
        return bool(self.tree_only or self.ledger_only)

    def __len__(self) -> int:
        return len(self.tree_only) + len(self.ledger_only)


def _tree_pairs(tree: Sequence[TreeDependency]) -> Set[Tuple[str, semantic_version.Version]]:
    return {(dep.identity, dep.version) for dep in tree}


def diff_tree(ledger: PackageLedger, tree: Sequence[TreeDependency]) -> TreeDiff:
    """Compare a ledger and a dependency tree in both directions.

    Every mismatch is collected; nothing here is fatal.
    """
    diff = TreeDiff()

    for dep in tree:
        usage = ledger.get(dep.identity)
        if usage is None:
            diff.tree_only.append(
                TreeMismatch(MismatchKind.MISSING_IDENTITY, dep.identity, dep.version)
            )
        elif dep.version not in usage.versions:
            diff.tree_only.append(
                TreeMismatch(MismatchKind.MISSING_VERSION, dep.identity, dep.version)
            )

    in_tree = _tree_pairs(tree)
    for identity, version in ledger.pairs():
        if (identity, version) not in in_tree:
            diff.ledger_only.append(
                TreeMismatch(MismatchKind.NOT_IN_TREE, identity, version)
            )

    logger.info(
        "Tree diff: %d tree-only, %d ledger-only mismatch(es)",
        len(diff.tree_only),
        len(diff.ledger_only),
    )
    return diff


# ---------------------------------------------------------------------------
# Allow-list skeleton
# ---------------------------------------------------------------------------


def synthesize_allow_list(
    ledger: PackageLedger,
    tree: Sequence[TreeDependency],
    *,
    source: Source = Source.CRATES_IO,
) -> AllowList:
    """Draft an allow-list from what was built and what the tree links.

    A package built at a version the tree also names is presumed to be
    distributed and becomes a third-party entry with an empty license
    list, to be filled in by hand. A package none of whose versions appear
    in the tree is presumed build-only. Unlinked versions of a linked
    package are dropped from the draft, so each identity lands in exactly
    one category. This is a heuristic and the draft needs review before use.
    """
    in_tree = _tree_pairs(tree)
    classification: Dict[str, bool] = {}

    for identity, version in ledger.pairs():
        linked = (identity, version) in in_tree
        classification[identity] = classification.get(identity, False) or linked

    allow_list = AllowList()
    for identity, linked in classification.items():
        if linked:
            allow_list.third_party[identity] = ThirdPartyPackage(
                id=identity, source=source, licenses=[]
            )
        else:
            allow_list.build_only.add(identity)

    logger.info(
        "Synthesized allow-list: %d third-party, %d build-only",
        len(allow_list.third_party),
        len(allow_list.build_only),
    )
    return allow_list
