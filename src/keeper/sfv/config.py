"""Configuration models for SFV recording and verification."""

from pydantic import BaseModel, Field, ConfigDict, field_validator

from keeper.common import LoggingConfig
from keeper.common.checksums import CRC32_CHUNK_SIZE

DEFAULT_TOOL_IDENTIFIER = "keeper"
DEFAULT_MANIFEST_EXTENSION = ".sfv"


class SfvConfig(BaseModel):
    """Record/verify behaviour configuration."""

    model_config = ConfigDict(extra='forbid')

    buffer_size: int = Field(
        default=CRC32_CHUNK_SIZE,
        ge=1,
        description="Read buffer size in bytes used for checksum computation"
    )
    tool_identifier: str = Field(
        default=DEFAULT_TOOL_IDENTIFIER,
        min_length=1,
        description="Name written into the '; Generated by' manifest header"
    )
    manifest_extension: str = Field(
        default=DEFAULT_MANIFEST_EXTENSION,
        description="File extension identifying manifest files"
    )
    recursive: bool = Field(
        default=False,
        description="Descend into subdirectories when recording"
    )
    exclude_manifests: bool = Field(
        default=True,
        description="Skip other manifest files when recording or listing extra files"
    )
    report_extra_files: bool = Field(
        default=False,
        description="Report files on disk that are not listed in the manifest"
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Number of threads computing checksums (1 = sequential)"
    )

    @field_validator('tool_identifier')
    @classmethod
    def single_line_identifier(cls, v: str) -> str:
        """The identifier is part of a comment line and must not break it."""
        if "\n" in v or "\r" in v:
            raise ValueError("tool_identifier must be a single line")
        return v

    @field_validator('manifest_extension')
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Normalize extension to lowercase with a leading dot."""
        v = v.strip().lower()
        if v and not v.startswith("."):
            v = "." + v
        return v


class KeeperConfig(BaseModel):
    """Root configuration for keeper."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sfv: SfvConfig = Field(default_factory=SfvConfig)
