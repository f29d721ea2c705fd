"""SFV manifest recording and verification."""

from .config import KeeperConfig, SfvConfig
from .manifest import (
    FileRecord, DecodeResult, serialize_manifest, write_manifest,
    parse_manifest, read_manifest
)
from .recorder import record, record_with_config
from .verifier import (
    Match, Mismatch, Missing, VerificationOutcome, VerificationResult,
    verify, verify_manifest, verify_with_config
)

__all__ = [
    'KeeperConfig',
    'SfvConfig',
    'FileRecord',
    'DecodeResult',
    'serialize_manifest',
    'write_manifest',
    'parse_manifest',
    'read_manifest',
    'record',
    'record_with_config',
    'Match',
    'Mismatch',
    'Missing',
    'VerificationOutcome',
    'VerificationResult',
    'verify',
    'verify_manifest',
    'verify_with_config',
]
