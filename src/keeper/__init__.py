"""keeper: record and verify SFV checksum manifests."""

from .sfv import record, verify, verify_manifest

__version__ = "0.1.0"

__all__ = [
    'record',
    'verify',
    'verify_manifest',
]
