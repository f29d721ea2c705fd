"""Common utilities for keeper."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import (
    KeeperError, ConfigurationError, CommandError, FileProcessingError,
    MissingFileError, IntegrityError,
    ManifestError, FormatError, classify_error
)
from .path_utils import normalize_path, manifest_sort_key, is_representable
from .checksums import (
    CRC32_CHUNK_SIZE, compute_crc32, compute_file_checksum, format_checksum
)
from .pretty import human_readable, collapse_middle

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'KeeperError',
    'ConfigurationError',
    'CommandError',
    'FileProcessingError',
    'MissingFileError',
    'IntegrityError',
    'ManifestError',
    'FormatError',
    'classify_error',
    'normalize_path',
    'manifest_sort_key',
    'is_representable',
    'CRC32_CHUNK_SIZE',
    'compute_crc32',
    'compute_file_checksum',
    'format_checksum',
    'human_readable',
    'collapse_middle',
]
