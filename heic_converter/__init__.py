"""Local HEIC/HEIF to JPEG/PNG batch conversion."""

__version__ = "0.1.0"

from typing import Optional

from heic_converter.config import Settings, settings
from heic_converter.core.batch import (
    ArchiveBundler,
    BatchController,
    BatchConverter,
    BatchState,
    ThumbnailPipeline,
    ZipArchiveWriter,
    derive_output_name,
    validate,
)
from heic_converter.core.conversion.codec import CodecAdapter, PillowHeifCodec
from heic_converter.core.resources import ResourceHandleManager
from heic_converter.models import (
    AcceptedItem,
    CandidateFile,
    ConvertedItem,
    OutputFormat,
    PipelinePolicy,
    ResourceHandle,
)
from heic_converter.utils.logging import get_logger, setup_logging


def configure_logging(app_settings: Optional[Settings] = None) -> None:
    """Install stderr logging from settings; call once at application startup."""
    app_settings = app_settings or settings
    setup_logging(log_level=app_settings.log_level, json_logs=app_settings.json_logs)
    get_logger(__name__).info(
        f"Starting {app_settings.app_name}", version=__version__
    )


__all__ = [
    "AcceptedItem",
    "ArchiveBundler",
    "BatchController",
    "BatchConverter",
    "BatchState",
    "CandidateFile",
    "CodecAdapter",
    "ConvertedItem",
    "OutputFormat",
    "PillowHeifCodec",
    "PipelinePolicy",
    "ResourceHandle",
    "ResourceHandleManager",
    "ThumbnailPipeline",
    "ZipArchiveWriter",
    "configure_logging",
    "derive_output_name",
    "get_logger",
    "setup_logging",
    "validate",
]
