"""HEIF/HEIC format handler."""

from typing import BinaryIO

import pillow_heif
import structlog
from PIL import Image

from heic_converter.core.conversion.formats.base import BaseFormatHandler
from heic_converter.core.exceptions import (
    CodecError,
    HeifDecodingError,
    UnsupportedFormatError,
)
from heic_converter.models.conversion import EncodeSettings

# Register HEIF opener with Pillow
pillow_heif.register_heif_opener()

logger = structlog.get_logger()

HEIF_BRANDS = (b"heic", b"heix", b"hevc", b"hevx", b"mif1", b"msf1")


class HeifHandler(BaseFormatHandler):
    """Decoder for HEIF/HEIC sources."""

    def __init__(self) -> None:
        """Initialize HEIF handler."""
        super().__init__()
        self.format_name = "HEIF"

    def is_heif(self, image_data: bytes) -> bool:
        """Check the ISO-BMFF ``ftyp`` box for a HEIF brand."""
        return (
            len(image_data) >= 12
            and image_data[4:8] == b"ftyp"
            and image_data[8:12] in HEIF_BRANDS
        )

    def load_image(self, image_data: bytes) -> Image.Image:
        """Load HEIF/HEIC image from bytes.

        Content without a HEIF container is still handed to Pillow; only a
        failure on a real HEIF container is reported as ``HeifDecodingError``.
        """
        try:
            return super().load_image(image_data)
        except CodecError as e:
            if not self.is_heif(image_data):
                raise
            raise HeifDecodingError(
                f"Failed to load HEIF image: {e.details.get('error', e.message)}",
                details=e.details,
            ) from e.__cause__

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: EncodeSettings
    ) -> None:
        """HEIF is a source format only."""
        raise UnsupportedFormatError(
            "HEIF output is not supported",
            details={"requested_format": "heif", "supported_formats": ["jpeg", "png"]},
        )
