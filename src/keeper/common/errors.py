"""Base error definitions for keeper."""

from typing import Any, Dict, Optional


class KeeperError(Exception):
    """Base exception for all keeper errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ConfigurationError(KeeperError):
    """Configuration is invalid or missing."""
    pass


class CommandError(KeeperError):
    """Command is unknown or was given the wrong arguments."""
    pass


class FileProcessingError(KeeperError):
    """Base exception for file processing errors."""
    pass


class MissingFileError(FileProcessingError):
    """File listed in a manifest cannot be read."""
    pass


class IntegrityError(FileProcessingError):
    """Recomputed checksum differs from the recorded one."""

    def __init__(self, message: str, expected: int, actual: int, **context: Any) -> None:
        super().__init__(message, **context)
        self.expected = expected
        self.actual = actual


class ManifestError(KeeperError):
    """Manifest cannot be read, written or built."""
    pass


class FormatError(ManifestError):
    """A manifest data line could not be parsed."""

    def __init__(
        self,
        message: str,
        line: str,
        line_number: Optional[int] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, **context)
        self.line = line
        self.line_number = line_number


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'format', 'integrity', 'missing', 'permission',
        'manifest', 'config', 'command', 'io' or 'unknown'
    """
    if isinstance(exception, FormatError):
        return 'format'
    elif isinstance(exception, IntegrityError):
        return 'integrity'
    elif isinstance(exception, MissingFileError):
        return 'missing'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, ManifestError):
        return 'manifest'
    elif isinstance(exception, ConfigurationError):
        return 'config'
    elif isinstance(exception, CommandError):
        return 'command'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
