"""Constants and default values for the HEIC batch converter."""

from typing import Dict, FrozenSet, Tuple

# File Acceptance Policy
MAX_FILE_SIZE_MB = 25
MAX_FILE_SIZE = MAX_FILE_SIZE_MB * 1024 * 1024  # 25MB

# Media types declared for HEIC/HEIF sources (primary and vendor-prefixed).
# Matched case-sensitively, exactly as declared by the ingestion surface.
ACCEPTED_MEDIA_TYPES: FrozenSet[str] = frozenset(
    {
        "image/heic",
        "image/heif",
        "image/x-heic",
        "image/x-heif",
    }
)

# Source extensions replaced when deriving an output name
SOURCE_EXTENSIONS: Tuple[str, ...] = ("heic", "heif")

# Extension registrations used when declaring a media type for files on disk
SOURCE_MEDIA_TYPE_BY_EXTENSION: Dict[str, str] = {
    ".heic": "image/heic",
    ".heif": "image/heif",
}

# Quality hints (1-100). Thumbnails trade fidelity for latency.
THUMBNAIL_QUALITY = 20
OUTPUT_QUALITY = 90
THUMBNAIL_MAX_DIMENSION = 256
THUMBNAIL_FORMAT = "jpeg"

# Output Formats
DEFAULT_OUTPUT_FORMAT = "jpeg"

OUTPUT_MEDIA_TYPES: Dict[str, str] = {
    "jpeg": "image/jpeg",
    "png": "image/png",
}

# Format name aliases resolved before a handler lookup
FORMAT_ALIASES: Dict[str, str] = {
    "jpg": "jpeg",
    "jpe": "jpeg",
    "heic": "heif",
}

# Archive Bundling
ARCHIVE_FILENAME = "converted-images.zip"
ARCHIVE_MEDIA_TYPE = "application/zip"

# Resource handles are addressed as process-local blob URLs
RESOURCE_URL_SCHEME = "blob"
RESOURCE_URL_ORIGIN = "local"

# User-facing messages
MSG_UNSUPPORTED_TYPE = "Unsupported file type: {name}. Only HEIC/HEIF files are allowed."
MSG_FILE_TOO_LARGE = "File {name} is too large. Max file size is {max_mb}MB."
MSG_CONVERSION_FAILED = "Failed to convert {name}. Please try again."
MSG_ARCHIVE_FAILED = "Failed to create zip file for download."
MSG_NOTHING_TO_BUNDLE = "Nothing to bundle"
MSG_BUSY = "Another operation is still in progress. Please try again when it finishes."
