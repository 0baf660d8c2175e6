"""
Custom exception hierarchy for depledger.

This module defines structured exception types used across depledger.
All exceptions inherit from :class:`DepLedgerError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Every error here is fatal to the command that raised it. The only
non-fatal condition in depledger (a build log / dependency tree mismatch)
is reported as data, not raised.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, MutableMapping, Optional


class DepLedgerError(Exception):
    """Base exception for all depledger errors.

    All depledger-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ConfigError(DepLedgerError):
    """Raised when tool settings or an allow-list file are invalid.

    Args:
        message: Error description.
        config_path: Path of the offending file.
        option: Name of the offending option or entry.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(DepLedgerError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/backup).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


# ---------------------------------------------------------------------------
# Build log ingestion
# ---------------------------------------------------------------------------


class MalformedEventError(DepLedgerError):
    """Raised when a compiler-artifact event carries a bad package descriptor.

    Args:
        message: Error description.
        field: Descriptor field that is missing or invalid
            (``id``, ``version`` or ``source``).
        descriptor: Raw descriptor string, when one was present.
        line_number: Line of the build log holding the event.
        file_path: Build log being read.
    """

    __slots__ = ("field", "descriptor", "line_number", "file_path")

    def __init__(
        self,
        message: str,
        *,
        field: str,
        descriptor: Optional[str] = None,
        line_number: Optional[int] = None,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {"field": field}
        _add_if(
            details,
            "descriptor",
            _truncate(descriptor) if descriptor is not None else None,
        )
        _add_if(details, "line", line_number)
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.field = field
        self.descriptor = descriptor
        self.line_number = line_number
        self.file_path = file_path


class OriginConflictError(DepLedgerError):
    """Raised when one identity is observed with two different source tags."""

    __slots__ = ("identity", "existing_source", "new_source")

    def __init__(
        self,
        identity: str,
        existing_source: str,
        new_source: str,
    ) -> None:
        super().__init__(
            f"package {identity} has different sources, "
            f"{new_source} and {existing_source}",
            {"package": identity},
        )
        self.identity = identity
        self.existing_source = existing_source
        self.new_source = new_source


# ---------------------------------------------------------------------------
# Dependency tree parsing
# ---------------------------------------------------------------------------


class TreeParseError(DepLedgerError):
    """Raised when a line of a dependency tree dump cannot be parsed.

    Args:
        message: Error description.
        line_number: 1-based line number where parsing failed.
        line_content: Raw content of the problematic line.
        file_path: Path to the file being parsed.
    """

    __slots__ = ("line_number", "line_content", "file_path")

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "line", line_number)
        _add_if(details, "content", line_content)
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.line_number = line_number
        self.line_content = line_content
        self.file_path = file_path


class MissingIdentityError(TreeParseError):
    """Raised when no token of a tree line is a valid package identity."""


class MissingVersionError(TreeParseError):
    """Raised when the identity token is not followed by a version token."""


class BadVersionPrefixError(TreeParseError):
    """Raised when the version token does not begin with ``v``."""


# ---------------------------------------------------------------------------
# Reconciliation and reporting
# ---------------------------------------------------------------------------


class AllowListViolationError(DepLedgerError):
    """Raised when packages in the build are missing from the allow-list.

    All offending identities are collected before raising so a single run
    reports every one of them.
    """

    __slots__ = ("identities",)

    def __init__(self, identities: Iterable[str]) -> None:
        self.identities: List[str] = sorted(set(identities))
        super().__init__(
            "These 3rd party packages are not in the allow list: "
            + ", ".join(self.identities)
        )


class NoLicenseSpecifiedError(DepLedgerError):
    """Raised when an allow-listed package declares an empty license list."""

    __slots__ = ("identity",)

    def __init__(self, identity: str) -> None:
        super().__init__(f"No license specified for {identity}")
        self.identity = identity


class SubjectNotFoundError(DepLedgerError):
    """Raised when the subject of a bill of materials cannot be resolved."""

    __slots__ = ("identity",)

    def __init__(self, identity: str, reason: str) -> None:
        super().__init__(f"Subject crate {identity} {reason}")
        self.identity = identity


class UnknownDependencyError(DepLedgerError):
    """Raised when a dependency is neither vendor nor third-party."""

    __slots__ = ("identity",)

    def __init__(self, identity: str) -> None:
        super().__init__(f"3rd party package not found in allow-list: {identity}")
        self.identity = identity
