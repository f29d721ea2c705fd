"""SFV manifest reading and writing.

A manifest is a plain text file with a two line comment header followed by
one ``<path> <CRC32>`` line per file:

    ; Generated by keeper
    ;
    a.txt 7D14DDDD
    b.bin 00000000

Records are sorted by path in UTF-8 byte order and checksums are written as
8 uppercase hex digits, so serializing the same records always produces the
same bytes.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from keeper.common import FormatError, ManifestError, format_checksum, manifest_sort_key
from .config import DEFAULT_TOOL_IDENTIFIER

logger = logging.getLogger(__name__)

COMMENT_PREFIX = ";"
GENERATED_BY = f"{COMMENT_PREFIX} Generated by "
_CHECKSUM_RE = re.compile(r"[0-9A-Fa-f]{1,8}")
_DRIVE_RE = re.compile(r"[A-Za-z]:[\\/]")


@dataclass(frozen=True)
class FileRecord:
    """One manifest entry.

    Attributes:
        path: Path relative to the manifest directory, '/' separated
        checksum: CRC32 of the file content (unsigned 32-bit)
    """
    path: str
    checksum: int


@dataclass
class DecodeResult:
    """Records parsed from a manifest plus the lines that could not be parsed.

    Attributes:
        records: Records in file order
        errors: Format errors in line order
        tool_identifier: Name from the ``; Generated by`` header, None if absent
    """
    records: List[FileRecord] = field(default_factory=list)
    errors: List[FormatError] = field(default_factory=list)
    tool_identifier: Optional[str] = None

    def to_text(self) -> str:
        """Serialize the records again under the header they were read with."""
        return serialize_manifest(self.records, self.tool_identifier or DEFAULT_TOOL_IDENTIFIER)


def header_lines(tool_identifier: str = DEFAULT_TOOL_IDENTIFIER) -> List[str]:
    """Return the fixed comment header (without line terminators)."""
    return [f"{GENERATED_BY}{tool_identifier}", COMMENT_PREFIX]


def sort_records(records: Iterable[FileRecord]) -> List[FileRecord]:
    """
    Sort records by path in byte order.

    Raises:
        ManifestError: If two records share a path
    """
    ordered = sorted(records, key=lambda r: manifest_sort_key(r.path))
    for previous, current in zip(ordered, ordered[1:]):
        if previous.path == current.path:
            raise ManifestError(f"Duplicate manifest entry: {current.path}", path=current.path)
    return ordered


def serialize_manifest(
    records: Iterable[FileRecord],
    tool_identifier: str = DEFAULT_TOOL_IDENTIFIER,
) -> str:
    """
    Render records as manifest text.

    Every line, including the last one, ends with a newline. An empty record
    list still produces the header.

    Args:
        records: Records in any order
        tool_identifier: Name written into the header

    Returns:
        Manifest text

    Raises:
        ManifestError: If two records share a path
    """
    lines = header_lines(tool_identifier)
    lines.extend(f"{record.path} {format_checksum(record.checksum)}" for record in sort_records(records))
    return "".join(line + "\n" for line in lines)


def write_manifest(
    manifest_path: Path,
    records: Iterable[FileRecord],
    tool_identifier: str = DEFAULT_TOOL_IDENTIFIER,
) -> None:
    """
    Write a manifest, replacing any existing file at ``manifest_path``.

    The text is written to a temporary file next to the target and moved into
    place, so a failed write leaves the previous manifest untouched.

    Raises:
        ManifestError: If two records share a path
        UnicodeEncodeError: If a record path cannot be encoded as UTF-8
        OSError: If the file cannot be written
    """
    manifest_path = Path(manifest_path)
    # Encoded up front; '\n' line endings on every platform
    data = serialize_manifest(records, tool_identifier).encode("utf-8")

    temp_path = manifest_path.with_name(f".{manifest_path.name}.tmp")
    try:
        with open(temp_path, "wb") as f:
            f.write(data)
        os.replace(temp_path, manifest_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def _outside_root(path: str) -> bool:
    """True for absolute paths (POSIX or Windows style) and paths climbing out with '..'."""
    if path.startswith(("/", "\\")) or _DRIVE_RE.match(path):
        return True
    return ".." in re.split(r"[\\/]", path)


def parse_line(line: str, line_number: int | None = None) -> FileRecord | None:
    """
    Parse a single manifest line.

    Returns:
        FileRecord for a data line, None for a blank or comment line

    Raises:
        FormatError: If a data line is not ``<path> <hex checksum>``, or its
            path is absolute or climbs out of the manifest directory
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIX):
        return None

    where = f"line {line_number}" if line_number is not None else "line"
    tokens = stripped.split()
    if len(tokens) != 2:
        raise FormatError(
            f"malformed {where}: {stripped}",
            line=stripped,
            line_number=line_number,
            reason=f"expected 2 fields, got {len(tokens)}",
        )

    path, checksum_text = tokens
    if not _CHECKSUM_RE.fullmatch(checksum_text):
        raise FormatError(
            f"malformed {where}: {stripped}",
            line=stripped,
            line_number=line_number,
            reason=f"invalid checksum {checksum_text!r}",
        )

    if _outside_root(path):
        raise FormatError(
            f"malformed {where}: {stripped}",
            line=stripped,
            line_number=line_number,
            reason="path outside the manifest directory",
        )

    return FileRecord(path=path, checksum=int(checksum_text, 16))


def parse_manifest(lines: Iterable[str]) -> DecodeResult:
    """
    Parse manifest lines, collecting format errors instead of stopping.

    A path listed more than once is reported as a format error; the first
    occurrence wins. The tool identifier is taken from a ``; Generated by``
    line seen before the first record.

    Args:
        lines: Manifest lines (with or without line terminators)

    Returns:
        DecodeResult with records in file order and format errors in line order
    """
    result = DecodeResult()
    seen = set()

    for line_number, line in enumerate(lines, start=1):
        header = line.rstrip("\r\n")
        if result.tool_identifier is None and not result.records and header.startswith(GENERATED_BY):
            result.tool_identifier = header[len(GENERATED_BY):]
            continue

        try:
            record = parse_line(line, line_number)
        except FormatError as e:
            logger.debug(f"Skipping manifest line: {{'line_number': {line_number}, 'reason': {e.context.get('reason')!r}}}")
            result.errors.append(e)
            continue

        if record is None:
            continue

        if record.path in seen:
            stripped = line.strip()
            result.errors.append(FormatError(
                f"duplicate entry on line {line_number}: {stripped}",
                line=stripped,
                line_number=line_number,
                reason="duplicate path",
            ))
            continue

        seen.add(record.path)
        result.records.append(record)

    return result


def read_manifest(manifest_path: Path) -> DecodeResult:
    """
    Read and parse a manifest file.

    Raises:
        ManifestError: If the file cannot be opened or is not valid UTF-8
    """
    try:
        # utf-8-sig tolerates a byte order mark added by editors
        with open(manifest_path, "r", encoding="utf-8-sig") as f:
            return parse_manifest(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {manifest_path}: {e}", path=str(manifest_path)) from e
