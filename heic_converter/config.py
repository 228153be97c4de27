from pydantic import Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from heic_converter.core.constants import (
    ACCEPTED_MEDIA_TYPES,
    ARCHIVE_FILENAME,
    DEFAULT_OUTPUT_FORMAT,
    MAX_FILE_SIZE_MB,
    OUTPUT_MEDIA_TYPES,
    OUTPUT_QUALITY,
    THUMBNAIL_MAX_DIMENSION,
    THUMBNAIL_QUALITY,
)
from heic_converter.core.exceptions import ConfigurationError
from heic_converter.models.conversion import OutputFormat, PipelinePolicy


class Settings(BaseSettings):
    # Application
    app_name: str = Field(default="HEIC Converter", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # File Acceptance
    max_file_size_mb: int = Field(
        default=MAX_FILE_SIZE_MB, gt=0, description="Max file size in MB"
    )

    # Encoding
    output_format: str = Field(
        default=DEFAULT_OUTPUT_FORMAT, description="Default output format"
    )
    thumbnail_quality: int = Field(
        default=THUMBNAIL_QUALITY, ge=1, le=100, description="Preview quality (1-100)"
    )
    output_quality: int = Field(
        default=OUTPUT_QUALITY, ge=1, le=100, description="Output quality (1-100)"
    )
    thumbnail_max_dimension: int = Field(
        default=THUMBNAIL_MAX_DIMENSION,
        gt=0,
        description="Longest preview edge in pixels",
    )

    # Export
    archive_name: str = Field(
        default=ARCHIVE_FILENAME, description="File name of the bundled archive"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v):
        v = v.lower()
        if v == "jpg":
            v = "jpeg"
        if v not in OUTPUT_MEDIA_TYPES:
            raise ValueError(f"output_format must be one of {sorted(OUTPUT_MEDIA_TYPES)}")
        return v

    @model_validator(mode="after")
    def validate_quality_order(self):
        if self.thumbnail_quality >= self.output_quality:
            raise ValueError("thumbnail_quality must be lower than output_quality")
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="HEIC_CONVERTER_",
        extra="ignore",
    )

    def to_policy(self) -> PipelinePolicy:
        """Build the pipeline policy these settings describe.

        Raises:
            ConfigurationError: if the settings were modified after loading
                into a combination the pipeline cannot run with.
        """
        try:
            return PipelinePolicy(
                accepted_media_types=ACCEPTED_MEDIA_TYPES,
                max_file_size_bytes=self.max_file_size_mb * 1024 * 1024,
                output_format=OutputFormat(self.output_format),
                thumbnail_quality=self.thumbnail_quality,
                output_quality=self.output_quality,
                thumbnail_max_dimension=self.thumbnail_max_dimension,
                archive_name=self.archive_name,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ConfigurationError(
                f"Invalid pipeline configuration: {first['msg']}",
                details={
                    "config_key": ".".join(str(p) for p in first["loc"]) or "policy",
                    "config_value": str(first.get("input", ""))[:100],
                },
            ) from e
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid pipeline configuration: {e}",
                details={
                    "config_key": "output_format",
                    "config_value": str(self.output_format),
                    "valid_options": [f.value for f in OutputFormat],
                },
            ) from e


settings = Settings()
