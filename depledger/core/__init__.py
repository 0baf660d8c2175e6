"""
Core functionality exports for depledger.

This module provides convenient access to the core subsystems of depledger:
build log and dependency tree ingestion, reconciliation against the
allow-list, and report generation.

    from depledger.core import read_log, render_license_report
"""

from __future__ import annotations

from depledger.core.log_ingester import (
    BuildLogIngester,
    find_log_files,
    parse_log_stream,
    parse_package_descriptor,
    read_log,
    read_logs,
)
from depledger.core.tree_ingester import (
    TreeDependency,
    parse_dependency,
    parse_tree,
    parse_tree_lines,
    read_tree,
)
from depledger.core.reconciler import (
    MismatchKind,
    TreeDiff,
    TreeMismatch,
    check_allowed,
    diff_tree,
    prune,
    synthesize_allow_list,
)
from depledger.core.reports import create_bom, render_license_report

__all__ = [
    "BuildLogIngester",
    "find_log_files",
    "parse_log_stream",
    "parse_package_descriptor",
    "read_log",
    "read_logs",
    "TreeDependency",
    "parse_dependency",
    "parse_tree",
    "parse_tree_lines",
    "read_tree",
    "MismatchKind",
    "TreeDiff",
    "TreeMismatch",
    "check_allowed",
    "diff_tree",
    "prune",
    "synthesize_allow_list",
    "create_bom",
    "render_license_report",
]
