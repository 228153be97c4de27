"""Base format handler interface."""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, BinaryIO, Dict, Optional

from PIL import Image, ImageOps

from heic_converter.core.exceptions import CodecError
from heic_converter.models.conversion import EncodeSettings


class BaseFormatHandler(ABC):
    """Abstract base class for format handlers."""

    def __init__(self) -> None:
        """Initialize format handler."""
        self.format_name: str = ""

    def load_image(self, image_data: bytes) -> Image.Image:
        """Decode image bytes into an upright RGB/RGBA image."""
        try:
            with BytesIO(image_data) as buffer:
                img = Image.open(buffer)
                # Load image data to ensure it's fully read
                img.load()
                img = ImageOps.exif_transpose(img)
                if img.mode not in ("RGB", "RGBA"):
                    if "transparency" in img.info or img.mode in ("LA", "PA"):
                        img = img.convert("RGBA")
                    else:
                        img = img.convert("RGB")
                return img
        except Exception as e:
            raise CodecError(
                f"Failed to load {self.format_name or 'source'} image: {str(e)}",
                details={"error": str(e), "input_size": len(image_data)},
            ) from e

    @abstractmethod
    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: EncodeSettings
    ) -> None:
        """Save image to buffer with given settings."""

    def get_quality_param(self, settings: EncodeSettings) -> Dict[str, Any]:
        """Get format-specific quality parameters."""
        return {"quality": settings.quality}

    def prepare_image(
        self, image: Image.Image, max_dimension: Optional[int] = None
    ) -> Image.Image:
        """Prepare image for encoding (downscale, flatten alpha if needed)."""
        if max_dimension is not None and max(image.size) > max_dimension:
            image = image.copy()
            image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        # Convert RGBA to RGB for formats that don't support transparency
        if image.mode == "RGBA" and not self._supports_transparency():
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])  # Use alpha channel as mask
            return background

        if not self._supports_mode(image.mode):
            return image.convert("RGB")

        return image

    def _supports_transparency(self) -> bool:
        """Check if format supports transparency."""
        # Override in subclasses
        return False

    def _supports_mode(self, mode: str) -> bool:
        """Check if format supports the given color mode."""
        # Override in subclasses
        return mode in ("RGB", "RGBA")
