"""Data models for the HEIC batch conversion pipeline."""

import mimetypes
import os
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from heic_converter.core.constants import (
    ACCEPTED_MEDIA_TYPES,
    ARCHIVE_FILENAME,
    MAX_FILE_SIZE,
    OUTPUT_MEDIA_TYPES,
    OUTPUT_QUALITY,
    SOURCE_MEDIA_TYPE_BY_EXTENSION,
    THUMBNAIL_MAX_DIMENSION,
    THUMBNAIL_QUALITY,
)

for _extension, _media_type in SOURCE_MEDIA_TYPE_BY_EXTENSION.items():
    mimetypes.add_type(_media_type, _extension)


class OutputFormat(str, Enum):
    """Supported output raster formats."""

    JPEG = "jpeg"
    PNG = "png"

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.value}"

    @property
    def media_type(self) -> str:
        return OUTPUT_MEDIA_TYPES[self.value]


class CandidateFile(BaseModel):
    """A file offered for conversion, immutable once admitted."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name, without path components")
    media_type: str = Field(..., description="Declared MIME type")
    data: bytes = Field(..., repr=False, description="File contents")

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        """Strip directory components from the display name."""
        return os.path.basename(v)

    @property
    def size(self) -> int:
        """Byte length of the file."""
        return len(self.data)

    @classmethod
    def from_bytes(
        cls, name: str, data: bytes, media_type: Optional[str] = None
    ) -> "CandidateFile":
        """Wrap an in-memory blob, declaring its type from the name if needed."""
        if media_type is None:
            media_type = mimetypes.guess_type(name)[0] or ""
        return cls(name=name, media_type=media_type, data=data)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CandidateFile":
        """Read a file from disk, declaring its type from the extension."""
        path = Path(path)
        return cls.from_bytes(path.name, path.read_bytes())


class ResourceHandle(BaseModel):
    """Process-local reference to an in-memory blob."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Process-local blob URL")
    media_type: str = Field(default="", description="Media type of the blob")
    size: int = Field(..., ge=0, description="Blob size in bytes")


class AcceptedItem(BaseModel):
    """A validated file with its optional preview handle."""

    model_config = ConfigDict(frozen=True)

    file: CandidateFile
    thumbnail: Optional[ResourceHandle] = Field(
        default=None, description="Preview handle, None when preview failed"
    )

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def has_thumbnail(self) -> bool:
        return self.thumbnail is not None


class ConvertedItem(BaseModel):
    """A successfully converted output."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identity, unique within a conversion run")
    name: str = Field(..., description="Output file name")
    output_format: OutputFormat
    handle: ResourceHandle
    data: bytes = Field(..., repr=False, description="Encoded output")
    source: CandidateFile = Field(..., repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


class PipelinePolicy(BaseModel):
    """Acceptance and encoding policy for a batch."""

    model_config = ConfigDict(frozen=True)

    accepted_media_types: FrozenSet[str] = Field(default=ACCEPTED_MEDIA_TYPES)
    max_file_size_bytes: int = Field(default=MAX_FILE_SIZE, gt=0)
    output_format: OutputFormat = Field(default=OutputFormat.JPEG)
    thumbnail_quality: int = Field(default=THUMBNAIL_QUALITY, ge=1, le=100)
    output_quality: int = Field(default=OUTPUT_QUALITY, ge=1, le=100)
    thumbnail_max_dimension: Optional[int] = Field(
        default=THUMBNAIL_MAX_DIMENSION, gt=0
    )
    archive_name: str = Field(default=ARCHIVE_FILENAME, min_length=1)

    @model_validator(mode="after")
    def check_quality_order(self) -> "PipelinePolicy":
        """Previews must be cheaper than final outputs."""
        if self.thumbnail_quality >= self.output_quality:
            raise ValueError("thumbnail_quality must be lower than output_quality")
        return self

    @property
    def max_file_size_mb(self) -> int:
        """Size limit in whole megabytes, for informational text."""
        return self.max_file_size_bytes // (1024 * 1024)


class EncodeSettings(BaseModel):
    """Settings passed to a format handler when encoding."""

    quality: int = Field(default=OUTPUT_QUALITY, ge=1, le=100)
