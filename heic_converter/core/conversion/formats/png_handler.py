"""PNG format handler."""

from typing import Any, BinaryIO, Dict

import structlog
from PIL import Image

from heic_converter.core.conversion.formats.base import BaseFormatHandler
from heic_converter.core.exceptions import CodecError
from heic_converter.models.conversion import EncodeSettings

logger = structlog.get_logger()


class PNGHandler(BaseFormatHandler):
    """Handler for PNG format."""

    def __init__(self) -> None:
        """Initialize PNG handler."""
        super().__init__()
        self.format_name = "PNG"

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: EncodeSettings
    ) -> None:
        """Save image as PNG."""
        try:
            if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                if "transparency" in image.info:
                    image = image.convert("RGBA")
                else:
                    image = image.convert("RGB")

            save_params = self.get_quality_param(settings)
            save_params["optimize"] = True

            image.save(output_buffer, format="PNG", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise CodecError(
                f"Failed to save image as PNG: {str(e)}",
                details={"output_format": "png", "error": str(e)},
            ) from e

    def get_quality_param(self, settings: EncodeSettings) -> Dict[str, Any]:
        """Get PNG-specific quality parameters."""
        # PNG is lossless; map quality 1-100 to compression 9-0 (inverse)
        compression_level = int(9 - (settings.quality / 100) * 9)
        compression_level = max(0, min(9, compression_level))

        return {"compress_level": compression_level}

    def _supports_transparency(self) -> bool:
        """PNG supports transparency."""
        return True

    def _supports_mode(self, mode: str) -> bool:
        return mode in ("RGB", "RGBA", "L", "LA", "P")
