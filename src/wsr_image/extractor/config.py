"""Configuration schema for the image extractor."""

import codecs
from typing import Literal

from pydantic import BaseModel, Field, ConfigDict, field_validator

from wsr_image.common import LoggingConfig


class ExtractionConfig(BaseModel):
    """Configuration for image extraction."""

    model_config = ConfigDict(extra='forbid')

    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the input archive"
    )
    encoding_errors: Literal["strict", "replace", "surrogateescape"] = Field(
        default="replace",
        description="How undecodable input bytes are handled"
    )
    preview: bool = Field(
        default=False,
        description="Report what would be written without writing anything"
    )
    verify_written_files: bool = Field(
        default=False,
        description="Re-read each written file and compare size and CRC32"
    )

    @field_validator('encoding')
    @classmethod
    def check_encoding(cls, v: str) -> str:
        """Reject encodings Python does not know."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        return v


class WsrImageConfig(BaseModel):
    """Root configuration for the image extractor."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
