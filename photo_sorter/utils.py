"""Utility functions for photo sorting."""

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Container, Iterable, List

import psutil

from .errors import DirectoryCreateError

logger = logging.getLogger(__name__)


def calculate_sha256(file_path: Path, chunk_size: int = 8192) -> str:
    """
    Calculate SHA256 hash of a file.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        SHA256 hash as hexadecimal string, empty string on read error
    """
    hasher = hashlib.sha256()
    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
        return hasher.hexdigest()
    except OSError as e:
        logger.error(f"Failed to calculate hash for {file_path}: {e}")
        return ""


def files_identical(first: Path, second: Path) -> bool:
    """True when both files have the same size and SHA256."""
    if get_file_size(first) != get_file_size(second):
        return False
    first_hash = calculate_sha256(first)
    return bool(first_hash) and first_hash == calculate_sha256(second)


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Args:
        file_path: Path to file

    Returns:
        File size in bytes, 0 if error
    """
    try:
        return file_path.stat().st_size
    except OSError as e:
        logger.error(f"Failed to get size for {file_path}: {e}")
        return 0


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def get_available_space(path: Path) -> int:
    """
    Get available disk space for a path in bytes.

    The nearest existing ancestor is measured, so a destination root that
    has not been created yet still reports the free space of its volume.
    """
    probe = path
    while not probe.exists() and probe.parent != probe:
        probe = probe.parent
    try:
        return psutil.disk_usage(str(probe)).free
    except OSError as e:
        logger.error(f"Failed to get disk space for {path}: {e}")
        return 0


def ensure_directory(path: Path) -> Path:
    """
    Ensure directory exists, creating missing parents.

    Raises:
        DirectoryCreateError: if the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateError(f"Failed to create directory {path}: {e}") from e
    return path


def normalize_extensions(extensions: Iterable[str]) -> List[str]:
    """Lower-case extensions with any leading dot removed."""
    return [ext.lower().lstrip('.') for ext in extensions if ext]


def has_extension(name: str, extensions: Iterable[str]) -> bool:
    """Check a file name against a list of extensions (without dots)."""
    extension = Path(name).suffix.lower().lstrip('.')
    return extension in normalize_extensions(extensions)


def unique_path(destination: Path, taken: Container[Path] = ()) -> Path:
    """
    Return ``destination`` or the first free ``<stem>_N<suffix>`` sibling.

    Counting starts at 2 so the first renamed copy of ``img.jpg`` is
    ``img_2.jpg``. Paths in ``taken`` count as occupied even when nothing
    exists there yet.
    """
    if not destination.exists() and destination not in taken:
        return destination

    counter = 2
    while True:
        candidate = destination.with_name(f"{destination.stem}_{counter}{destination.suffix}")
        if not candidate.exists() and candidate not in taken:
            return candidate
        counter += 1


def is_inside(path: Path, root: Path) -> bool:
    """True when ``path`` equals ``root`` or lies below it."""
    try:
        path.resolve().relative_to(root.resolve())
        return True
    except ValueError:
        return False


def get_current_timestamp() -> str:
    """Get current timestamp as ISO string."""
    return datetime.now().isoformat()
