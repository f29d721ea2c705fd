"""File discovery for recording and extra-file detection."""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def list_files(directory: Path, recursive: bool = False) -> List[Path]:
    """List regular files under ``directory``.

    Directories are never returned. Without ``recursive`` only the entries
    directly inside ``directory`` are considered.

    Args:
        directory: Directory to list
        recursive: Also descend into subdirectories

    Returns:
        File paths (joined onto ``directory``), sorted

    Raises:
        OSError: If ``directory`` cannot be listed
    """
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    entries = directory.rglob("*") if recursive else directory.iterdir()
    files = sorted(entry for entry in entries if entry.is_file())

    logger.debug(f"Listed directory: {{'path': {str(directory)!r}, 'recursive': {recursive}, 'files': {len(files)}}}")
    return files


def is_manifest_file(path: Path, manifest_extension: str) -> bool:
    """Check whether ``path`` looks like a manifest by its extension."""
    if not manifest_extension:
        return False
    return path.suffix.lower() == manifest_extension.lower()


def relative_manifest_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` in manifest form ('/' separated)."""
    return path.relative_to(root).as_posix()
