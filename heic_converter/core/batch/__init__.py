"""Batch pipeline: validation, previews, conversion, bundling and state."""

from .archive import ArchiveBundler, ArchiveWriter, ZipArchiveWriter
from .controller import BatchController
from .converter import BatchConverter, derive_output_name
from .models import BatchState, BatchStats
from .thumbnails import ThumbnailPipeline
from .validator import validate, validate_all

__all__ = [
    "ArchiveBundler",
    "ArchiveWriter",
    "BatchController",
    "BatchConverter",
    "BatchState",
    "BatchStats",
    "ThumbnailPipeline",
    "ZipArchiveWriter",
    "derive_output_name",
    "validate",
    "validate_all",
]
