"""Record the checksums of a directory into an SFV manifest."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from keeper.common import ManifestError, human_readable, is_representable
from keeper.common.checksums import CRC32_CHUNK_SIZE
from .config import DEFAULT_MANIFEST_EXTENSION, DEFAULT_TOOL_IDENTIFIER, SfvConfig
from .discovery import is_manifest_file, list_files, relative_manifest_path
from .manifest import FileRecord, write_manifest
from .parallel import checksum_files

module_logger = logging.getLogger(__name__)


def _select_files(
    source_dir: Path,
    manifest_path: Path,
    recursive: bool,
    exclude_manifests: bool,
    manifest_extension: str,
    logger: logging.Logger,
) -> Tuple[List[Tuple[str, Path]], bool]:
    """Pick the files to record as (relative path, file path) pairs.

    Returns:
        Selected files and whether every candidate could be represented
    """
    manifest_resolved = manifest_path.resolve()
    selected = []
    all_representable = True

    for file_path in list_files(source_dir, recursive=recursive):
        if file_path.resolve() == manifest_resolved:
            logger.debug(f"Skipping target manifest: {{'path': {str(file_path)!r}}}")
            continue
        if exclude_manifests and is_manifest_file(file_path, manifest_extension):
            logger.info(f"Skipping existing manifest: {{'path': {str(file_path)!r}}}")
            continue

        relative = relative_manifest_path(file_path, source_dir)
        if not is_representable(relative):
            logger.error(f"File name cannot be stored in a manifest: {{'path': {relative!r}}}")
            all_representable = False
            continue

        selected.append((relative, file_path))

    return selected, all_representable


def record(
    source_dir: Path,
    manifest_path: Path,
    *,
    buffer_size: int = CRC32_CHUNK_SIZE,
    tool_identifier: str = DEFAULT_TOOL_IDENTIFIER,
    recursive: bool = False,
    exclude_manifests: bool = True,
    manifest_extension: str = DEFAULT_MANIFEST_EXTENSION,
    workers: int = 1,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Checksum the files of ``source_dir`` and write them to ``manifest_path``.

    The manifest itself is never recorded, even when it lives inside
    ``source_dir``. Any existing file at ``manifest_path`` is overwritten.

    If some files cannot be read, the manifest is still written with the files
    that could be, and the call reports failure.

    Args:
        source_dir: Directory whose files are recorded
        manifest_path: Manifest file to create
        buffer_size: Read buffer size in bytes
        tool_identifier: Name written into the manifest header
        recursive: Descend into subdirectories
        exclude_manifests: Skip files with ``manifest_extension``
        manifest_extension: Extension identifying manifest files
        workers: Threads used for checksum computation
        logger: Logger receiving progress and problems

    Returns:
        True if every file was recorded and the manifest was written
    """
    logger = logger or module_logger
    source_dir = Path(source_dir)
    manifest_path = Path(manifest_path)

    logger.info(f"Recording manifest: {{'source_dir': {str(source_dir)!r}, 'manifest': {str(manifest_path)!r}}}")

    try:
        selected, ok = _select_files(
            source_dir, manifest_path, recursive, exclude_manifests, manifest_extension, logger
        )
    except OSError as e:
        logger.error(f"Cannot list directory: {{'path': {str(source_dir)!r}, 'error': {str(e)!r}}}")
        return False

    results = checksum_files([file_path for _, file_path in selected], buffer_size, workers)

    records = []
    total_bytes = 0
    for (relative, file_path), (checksum, success) in zip(selected, results):
        if not success:
            logger.error(f"Cannot compute checksum: {{'path': {relative!r}}}")
            ok = False
            continue
        records.append(FileRecord(path=relative, checksum=checksum))
        try:
            total_bytes += file_path.stat().st_size
        except OSError as e:
            # Size only feeds the summary line
            logger.debug(f"Cannot stat file: {{'path': {relative!r}, 'error': {str(e)!r}}}")

    try:
        write_manifest(manifest_path, records, tool_identifier)
    except (OSError, ManifestError, UnicodeError) as e:
        logger.error(f"Cannot write manifest: {{'path': {str(manifest_path)!r}, 'error': {str(e)!r}}}")
        return False

    logger.info(
        f"Recorded {len(records):,} file(s), {human_readable(total_bytes, 'B')}: "
        f"{{'manifest': {str(manifest_path)!r}, 'complete': {ok}}}"
    )
    return ok


def record_with_config(
    source_dir: Path,
    manifest_path: Path,
    config: SfvConfig,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Run :func:`record` with settings taken from ``config``."""
    return record(
        source_dir,
        manifest_path,
        buffer_size=config.buffer_size,
        tool_identifier=config.tool_identifier,
        recursive=config.recursive,
        exclude_manifests=config.exclude_manifests,
        manifest_extension=config.manifest_extension,
        workers=config.workers,
        logger=logger,
    )
