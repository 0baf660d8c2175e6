"""
depledger: dependency reconciliation for Rust builds.

depledger cross-references the crates a cargo build actually compiled
with a hand-curated allow-list and the ``cargo tree`` dependency graph,
and produces the compliance documents a distribution needs:

    • A plain text license report with every license text appended
    • A JSON bill of materials for a vendor package
    • A draft allow-list to start curating from
"""

from __future__ import annotations

from depledger.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depledger Contributors"
__license__ = "Apache-2.0"
__description__ = "License reports and bills of materials for Rust builds."

__all__ = [
    "__version__",
]
