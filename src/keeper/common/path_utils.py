"""Path utilities for consistent manifest path handling."""

import unicodedata
from pathlib import Path


def normalize_path(path: Path | str) -> str:
    """
    Normalize a path for consistent storage and comparison.

    Applies:
    - Unicode NFC normalization (canonical composition) for consistent Unicode handling
    - Forward slash conversion for cross-platform consistency

    Args:
        path: Path object or string to normalize

    Returns:
        Normalized path string with forward slashes and NFC Unicode normalization

    Examples:
        >>> normalize_path(Path("café/résumé.txt"))
        'café/résumé.txt'
        >>> normalize_path(r"backups\\2013\\photos")
        'backups/2013/photos'
    """
    # Convert to string if Path object
    path_str = str(path)

    # Normalize Unicode to NFC (Canonical Composition)
    normalized = unicodedata.normalize('NFC', path_str)

    # Convert backslashes to forward slashes for cross-platform consistency
    normalized = normalized.replace('\\', '/')

    return normalized


def manifest_sort_key(path: str) -> bytes:
    """Byte-wise sort key for manifest paths (independent of locale)."""
    return path.encode('utf-8', 'surrogateescape')


def is_representable(path: str) -> bool:
    """
    Check whether a relative path can be written as an SFV data line.

    Data lines are split on whitespace and lines starting with ';' are
    comments, so such names would not survive a round trip. Manifests are
    UTF-8 text; on POSIX a name that is not valid UTF-8 arrives here with
    surrogate escapes and cannot be written.

    Args:
        path: Manifest-relative path

    Returns:
        True if the path can be stored in a manifest
    """
    if not path or path.startswith(';'):
        return False
    if any(ch.isspace() for ch in path):
        return False
    try:
        path.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True
