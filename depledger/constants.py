"""
Centralized constants for depledger.

This module defines immutable configuration values used across depledger,
including build log markers, report wording, default settings, and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Build log (cargo --message-format=json)
# ---------------------------------------------------------------------------

#: ``reason`` value of the events naming a produced artifact.
COMPILER_ARTIFACT_REASON: Final[str] = "compiler-artifact"

#: Event key holding the ``<id> <version> <source>`` descriptor.
PACKAGE_ID_KEY: Final[str] = "package_id"

# ---------------------------------------------------------------------------
# Dependency tree (cargo tree)
# ---------------------------------------------------------------------------

#: Prefix of the version token following a package identity.
TREE_VERSION_PREFIX: Final[str] = "v"

# ---------------------------------------------------------------------------
# Package sources and licenses
# ---------------------------------------------------------------------------

#: URL template for packages published on crates.io.
CRATES_IO_URL_TEMPLATE: Final[str] = "https://crates.io/crates/{id}"

#: URL template for the canonical SPDX page of a license.
SPDX_URL_TEMPLATE: Final[str] = "https://spdx.org/licenses/{spdx}.html"

#: Line rendered in place of copyright statements the author never provided.
COPYRIGHT_NOT_PRESENT: Final[str] = (
    "No copyright statement was provided by the author "
    "even though they license may refer to it"
)

# ---------------------------------------------------------------------------
# License report wording
# ---------------------------------------------------------------------------

#: Opening line of the license report.
REPORT_HEADER: Final[str] = (
    "This distribution contains open source dependencies "
    "under the following licenses:"
)

#: Sentence closing the license summary section.
REPORT_COPIES_NOTICE: Final[str] = (
    "Copies of these licenses are provided at the end of this document. "
    "They may also be obtained from the URLs above."
)

# ---------------------------------------------------------------------------
# Settings defaults
# ---------------------------------------------------------------------------

#: Basename of the build logs collected by ``gen-licenses-dir``.
DEFAULT_LOG_FILE_NAME: Final[str] = "cargo-build.json"

#: Whether ``diff-tree`` exits non-zero when mismatches are reported.
DEFAULT_FAIL_ON_DIFF: Final[bool] = False

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading input files.
MAX_FILE_SIZE: Final[int] = 256 * 1024 * 1024  # 256 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
