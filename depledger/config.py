"""Tool settings loader for depledger.

Settings tune the command-line tool itself and are distinct from the
allow-list JSON, which describes packages. Two file formats are read:

- ``depledger.toml`` with settings under a ``[depledger]`` table
- ``pyproject.toml`` with settings under a ``[tool.depledger]`` table

Discovery order:

1. Explicit path from ``--settings`` or ``DEPLEDGER_SETTINGS``
2. ``depledger.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depledger]`` section

Precedence: defaults < settings file < command-line options.

Example (``depledger.toml``)::

    [depledger]
    log_file_name = "build-messages.json"
    fail_on_diff = true
"""

from __future__ import annotations

import tomli
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from depledger.exceptions import ConfigError
from depledger.utils.logger import get_logger
from depledger.constants import DEFAULT_FAIL_ON_DIFF, DEFAULT_LOG_FILE_NAME

logger = get_logger("config")

_SETTINGS_FILE = "depledger.toml"
_PYPROJECT_FILE = "pyproject.toml"
_SECTION = "depledger"


@dataclass
class DepLedgerSettings:
    """Parsed and validated depledger settings.

    All fields have defaults, so an empty settings file is valid.

    Attributes:
        log_file_name: Basename of the build logs ``gen-licenses-dir``
            collects when ``--file-name`` is not given.
        fail_on_diff: Make ``diff-tree`` exit with status 1 when it
            reports any mismatch.
        source_path: Path to loaded settings file, or ``None`` if using
            defaults.
    """

    log_file_name: str = DEFAULT_LOG_FILE_NAME
    fail_on_diff: bool = DEFAULT_FAIL_ON_DIFF

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return settings as a dictionary for debug logging."""
        return {
            "log_file_name": self.log_file_name,
            "fail_on_diff": self.fail_on_diff,
        }


def discover_settings_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the settings file to load.

    Args:
        explicit_path: Explicit settings path. If provided, must exist.

    Returns:
        Resolved path to the settings file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Settings file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit settings: %s", resolved)
        return resolved

    cwd = Path.cwd()

    settings_toml = cwd / _SETTINGS_FILE
    if settings_toml.is_file():
        logger.debug("Found %s: %s", _SETTINGS_FILE, settings_toml)
        return settings_toml

    pyproject_toml = cwd / _PYPROJECT_FILE
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml: %s", _SECTION, pyproject_toml)
        return pyproject_toml

    logger.debug("No settings file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check whether ``pyproject.toml`` has a ``[tool.depledger]`` table.

    An unreadable or invalid pyproject is treated as having none; it is
    not ours to validate.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring %s: %s", path, exc)
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and _SECTION in tool


def load_settings(settings_path: Optional[Path] = None) -> DepLedgerSettings:
    """Load and validate depledger settings.

    Args:
        settings_path: Explicit path to a settings file. If ``None``, uses
            auto-discovery (see :func:`discover_settings_file`).

    Returns:
        Validated :class:`DepLedgerSettings`, with defaults when no file
        was found.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_settings_file(settings_path)

    if resolved is None:
        logger.debug("No settings file found, using defaults")
        return DepLedgerSettings()

    logger.info("Loading settings from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == _PYPROJECT_FILE:
        section = raw.get("tool", {}).get(_SECTION, {})
    else:
        section = raw.get(_SECTION, {})

    if not section:
        logger.debug("Settings file found but no %s section, using defaults", _SECTION)
        return DepLedgerSettings(source_path=resolved)

    if not isinstance(section, dict):
        raise ConfigError(
            f"[{_SECTION}] must be a table, got {type(section).__name__}",
            config_path=str(resolved),
        )

    settings = _parse_section(section, config_path=str(resolved))
    settings.source_path = resolved

    logger.debug("Loaded settings: %s", settings.to_log_dict())
    return settings


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomli.load(fh)
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read settings file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepLedgerSettings:
    """Validate a ``[depledger]`` or ``[tool.depledger]`` table.

    Rejects unknown keys and type mismatches.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    settings = DepLedgerSettings()

    known_top = {"log_file_name", "fail_on_diff"}

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "log_file_name" in section:
        val = section["log_file_name"]
        if not isinstance(val, str):
            raise ConfigError(
                f"log_file_name must be a string, got {type(val).__name__}",
                config_path=config_path,
                option="log_file_name",
            )
        if not val or "/" in val or "\\" in val:
            raise ConfigError(
                f"log_file_name must be a bare file name, got {val!r}",
                config_path=config_path,
                option="log_file_name",
            )
        settings.log_file_name = val

    if "fail_on_diff" in section:
        val = section["fail_on_diff"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"fail_on_diff must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="fail_on_diff",
            )
        settings.fail_on_diff = val

    return settings
