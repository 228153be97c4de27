"""JPEG format handler."""

from typing import Any, BinaryIO, Dict

import structlog
from PIL import Image

from heic_converter.core.conversion.formats.base import BaseFormatHandler
from heic_converter.core.exceptions import CodecError
from heic_converter.models.conversion import EncodeSettings

logger = structlog.get_logger()


class JPEGHandler(BaseFormatHandler):
    """Handler for JPEG format."""

    def __init__(self):
        """Initialize JPEG handler."""
        super().__init__()
        self.format_name = "JPEG"

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: EncodeSettings
    ) -> None:
        """Save image as JPEG."""
        try:
            # JPEG doesn't support transparency, ensure RGB mode
            if image.mode in ("RGBA", "LA", "P"):
                background = Image.new("RGB", image.size, (255, 255, 255))
                if image.mode == "P":
                    image = image.convert("RGBA")
                background.paste(
                    image, mask=image.split()[-1] if "A" in image.mode else None
                )
                image = background
            elif image.mode not in ("RGB", "L"):
                image = image.convert("RGB")

            save_params = self.get_quality_param(settings)
            save_params["optimize"] = True
            save_params["progressive"] = True

            image.save(output_buffer, format="JPEG", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise CodecError(
                f"Failed to save image as JPEG: {str(e)}",
                details={"output_format": "jpeg", "error": str(e)},
            ) from e

    def get_quality_param(self, settings: EncodeSettings) -> Dict[str, Any]:
        """Get JPEG-specific quality parameters."""
        # Map our 1-100 range to JPEG's useful 1-95 range
        jpeg_quality = int((settings.quality / 100) * 95)
        jpeg_quality = max(1, min(95, jpeg_quality))

        return {
            "quality": jpeg_quality,
            "subsampling": 0 if settings.quality > 90 else 2,  # 4:4:4 for high quality
        }

    def _supports_mode(self, mode: str) -> bool:
        return mode in ("RGB", "L")
