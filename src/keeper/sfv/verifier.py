"""Verify files against an SFV manifest.

Every record is checked, whatever happened to the ones before it. Each record
yields exactly one outcome:

- ``Match``: the recomputed checksum equals the recorded one
- ``Mismatch``: the file was read but its checksum differs
- ``Missing``: the file could not be opened or read

Non-matching outcomes and unparsable manifest lines are flattened into a
list of human-readable error strings; an empty list means success.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from keeper.common import (
    FormatError, IntegrityError, LogContext, ManifestError, MissingFileError,
    classify_error, format_checksum, manifest_sort_key, normalize_path,
)
from keeper.common.checksums import CRC32_CHUNK_SIZE
from .config import DEFAULT_MANIFEST_EXTENSION, SfvConfig
from .discovery import is_manifest_file, list_files, relative_manifest_path
from .manifest import read_manifest
from .parallel import checksum_files

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """File content still has the recorded checksum."""
    path: str
    checksum: int

    def error_message(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Mismatch:
    """File was read but its checksum changed."""
    path: str
    expected: int
    actual: int

    def error_message(self) -> Optional[str]:
        return (
            f"checksum mismatch: {self.path} "
            f"expected={format_checksum(self.expected)} actual={format_checksum(self.actual)}"
        )

    def to_error(self) -> IntegrityError:
        return IntegrityError(self.error_message(), expected=self.expected, actual=self.actual, path=self.path)


@dataclass(frozen=True)
class Missing:
    """File listed in the manifest could not be read."""
    path: str

    def error_message(self) -> Optional[str]:
        return f"file missing: {self.path}"

    def to_error(self) -> MissingFileError:
        return MissingFileError(self.error_message(), path=self.path)


VerificationOutcome = Union[Match, Mismatch, Missing]


@dataclass
class VerificationResult:
    """Outcome of one verification run.

    Attributes:
        manifest_path: Manifest that was verified
        outcomes: One outcome per manifest record, in manifest order
        format_errors: Manifest lines that could not be parsed
        extra_files: Files on disk not listed in the manifest (only when requested)
        errors: Human-readable error strings, empty when everything matched
    """
    manifest_path: Path
    outcomes: List[VerificationOutcome] = field(default_factory=list)
    format_errors: List[FormatError] = field(default_factory=list)
    extra_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def matched(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Match))

    @property
    def mismatched(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Mismatch))

    @property
    def missing(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Missing))


def _find_extra_files(
    manifest_path: Path,
    listed: List[str],
    recursive: bool,
    exclude_manifests: bool,
    manifest_extension: str,
    logger: logging.Logger,
) -> List[str]:
    """Files next to the manifest that the manifest does not mention."""
    root = manifest_path.parent
    known = {normalize_path(path) for path in listed}
    manifest_resolved = manifest_path.resolve()

    try:
        on_disk = list_files(root, recursive=recursive)
    except OSError as e:
        logger.warning(f"Cannot list manifest directory: {{'path': {str(root)!r}, 'error': {str(e)!r}}}")
        return []

    extra = []
    for file_path in on_disk:
        if file_path.resolve() == manifest_resolved:
            continue
        if exclude_manifests and is_manifest_file(file_path, manifest_extension):
            continue
        relative = relative_manifest_path(file_path, root)
        if normalize_path(relative) not in known:
            extra.append(relative)
    return sorted(extra, key=manifest_sort_key)


def verify_manifest(
    manifest_path: Path,
    *,
    buffer_size: int = CRC32_CHUNK_SIZE,
    workers: int = 1,
    report_extra: bool = False,
    recursive: bool = False,
    exclude_manifests: bool = True,
    manifest_extension: str = DEFAULT_MANIFEST_EXTENSION,
    logger: Optional[logging.Logger] = None,
) -> VerificationResult:
    """Recompute the checksums listed in ``manifest_path`` and classify them.

    Record paths are resolved relative to the directory holding the manifest.

    Args:
        manifest_path: Manifest to verify
        buffer_size: Read buffer size in bytes
        workers: Threads used for checksum computation
        report_extra: Also report files not listed in the manifest
        recursive: Look into subdirectories when searching for extra files
        exclude_manifests: Ignore other manifests when searching for extra files
        manifest_extension: Extension identifying manifest files
        logger: Logger receiving progress and problems

    Returns:
        VerificationResult with outcomes and error strings
    """
    logger = logger or module_logger
    manifest_path = Path(manifest_path)
    result = VerificationResult(manifest_path=manifest_path)

    logger.info(f"Verifying manifest: {{'manifest': {str(manifest_path)!r}}}")

    try:
        decoded = read_manifest(manifest_path)
    except ManifestError as e:
        logger.error(e.message)
        result.errors.append(f"manifest unreadable: {manifest_path}")
        return result

    logger.debug(f"Manifest loaded: {{'records': {len(decoded.records)}, 'generated_by': {decoded.tool_identifier!r}}}")

    for format_error in decoded.errors:
        logger.warning(format_error.message)
        result.format_errors.append(format_error)
        result.errors.append(format_error.message)

    root = manifest_path.parent
    records = decoded.records
    checksums = checksum_files([root / record.path for record in records], buffer_size, workers)

    for record, (actual, success) in zip(records, checksums):
        if not success:
            outcome: VerificationOutcome = Missing(record.path)
        elif actual != record.checksum:
            outcome = Mismatch(record.path, expected=record.checksum, actual=actual)
        else:
            outcome = Match(record.path, checksum=actual)

        result.outcomes.append(outcome)
        if isinstance(outcome, Match):
            logger.debug(f"OK: {record.path}")
            continue

        error = outcome.to_error()
        with LogContext(category=classify_error(error)):
            logger.warning(error.message)
        result.errors.append(error.message)

    if report_extra:
        result.extra_files = _find_extra_files(
            manifest_path,
            [record.path for record in records],
            recursive,
            exclude_manifests,
            manifest_extension,
            logger,
        )
        for relative in result.extra_files:
            message = f"extra file: {relative}"
            logger.warning(message)
            result.errors.append(message)

    logger.info(
        f"Verification finished: {{'records': {len(result.outcomes)}, 'matched': {result.matched}, "
        f"'mismatched': {result.mismatched}, 'missing': {result.missing}, "
        f"'format_errors': {len(result.format_errors)}, 'extra_files': {len(result.extra_files)}}}"
    )
    return result


def verify(
    manifest_path: Path,
    *,
    buffer_size: int = CRC32_CHUNK_SIZE,
    workers: int = 1,
    report_extra: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """Verify ``manifest_path`` and return the error strings (empty on success)."""
    return verify_manifest(
        manifest_path,
        buffer_size=buffer_size,
        workers=workers,
        report_extra=report_extra,
        logger=logger,
    ).errors


def verify_with_config(
    manifest_path: Path,
    config: SfvConfig,
    logger: Optional[logging.Logger] = None,
) -> VerificationResult:
    """Run :func:`verify_manifest` with settings taken from ``config``."""
    return verify_manifest(
        manifest_path,
        buffer_size=config.buffer_size,
        workers=config.workers,
        report_extra=config.report_extra_files,
        recursive=config.recursive,
        exclude_manifests=config.exclude_manifests,
        manifest_extension=config.manifest_extension,
        logger=logger,
    )
