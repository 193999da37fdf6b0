"""Configuration schema for the archive extractor."""

from pydantic import BaseModel, Field, ConfigDict
from nanoreader.common import LoggingConfig


class ExtractionConfig(BaseModel):
    """Configuration for PA/PAR extraction."""

    model_config = ConfigDict(extra='forbid')

    metadata_file: str = Field(
        default="pa.bin",
        description="Metadata store holding the header, entry table and names"
    )
    data_file: str = Field(
        default="pa.arc",
        description="Data store holding the entry payloads"
    )
    output_dir: str = Field(
        default="pa",
        description="Directory to extract files to (created if absent)"
    )
    manifest_file: str = Field(
        default="pa.json",
        description="Where the JSON manifest is written after a run"
    )
    max_nesting_depth: int = Field(
        default=64,
        ge=1,
        description="Maximum depth of PAR archives nested inside each other"
    )
    write_debug_log: bool = Field(
        default=True,
        description="Write a timestamped Debug_*.txt log when logging.file is unset"
    )


class NanoReaderConfig(BaseModel):
    """Root configuration for the extractor."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
