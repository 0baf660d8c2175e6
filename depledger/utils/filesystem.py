"""
Filesystem utilities for depledger.

This module provides safe helpers for reading inputs, atomically writing
generated files (allow-list skeletons, bills of materials) and discovering
build logs in a directory tree. All filesystem errors are normalized to
``FileOperationError``.
"""

from __future__ import annotations

import os
import glob
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import List, Optional, Union

from depledger.constants import MAX_FILE_SIZE
from depledger.utils.logger import get_logger
from depledger.exceptions import FileOperationError


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Check that ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def _create_backup(path: Path) -> Path:
    """Copy ``path`` next to itself with a timestamped ``.backup`` suffix."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.with_suffix(f"{path.suffix}.{timestamp}.backup")

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.info("Backed up %s to %s", path, backup_path)
    return backup_path


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than ``max_size`` bytes.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FileOperationError: Missing, oversized, unreadable or undecodable file.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup: bool = True,
) -> Optional[Path]:
    """Write text to ``file_path`` by atomic replacement.

    An existing file is backed up first (unless ``create_backup`` is
    false) so a hand-curated allow-list is never silently lost.

    Returns:
        Path to the created backup, if any.
    """
    path = Path(file_path)
    backup: Optional[Path] = None

    if create_backup and path.is_file():
        backup = _create_backup(path)

    _atomic_write(path, content)
    return backup


def find_named_files(directory: PathLike, file_name: str) -> List[Path]:
    """Recursively find files whose basename is exactly ``file_name``.

    The result is sorted so that repeated scans of an unchanged tree
    visit files in the same order.

    Raises:
        FileOperationError: ``directory`` is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileOperationError(
            f"Not a directory: {root}",
            file_path=str(root),
            operation="scan",
        )

    matches = [
        path
        for path in root.rglob(glob.escape(file_name))
        if path.name == file_name and path.is_file()
    ]
    return sorted(matches)

