"""Codec adapter over the HEIC decode / raster encode capability."""

import asyncio
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Dict, Optional, Type, Union

import structlog

from heic_converter.core.constants import FORMAT_ALIASES
from heic_converter.core.conversion.formats.base import BaseFormatHandler
from heic_converter.core.conversion.formats.heif_handler import HeifHandler
from heic_converter.core.conversion.formats.jpeg_handler import JPEGHandler
from heic_converter.core.conversion.formats.png_handler import PNGHandler
from heic_converter.core.exceptions import (
    CodecError,
    ImageConverterError,
    UnsupportedFormatError,
)
from heic_converter.models.conversion import EncodeSettings, OutputFormat
from heic_converter.models.results import Failure, Outcome, Success

logger = structlog.get_logger()


class CodecAdapter(ABC):
    """Uniform async interface to an image decode/encode capability.

    Implementations signal failure by raising ``CodecError`` (or
    ``UnsupportedFormatError``) from the coroutine, never synchronously.
    """

    @abstractmethod
    async def convert(
        self,
        blob: bytes,
        target_format: Union[OutputFormat, str],
        quality: int,
        max_dimension: Optional[int] = None,
    ) -> bytes:
        """Decode ``blob`` and re-encode it as ``target_format``."""


class PillowHeifCodec(CodecAdapter):
    """Codec backed by Pillow with the pillow-heif opener registered."""

    def __init__(self) -> None:
        self.decoder = HeifHandler()
        self.format_handlers: Dict[str, Type[BaseFormatHandler]] = {}
        self.register_handler("jpeg", JPEGHandler)
        self.register_handler("png", PNGHandler)

    def register_handler(
        self, format_name: str, handler_class: Type[BaseFormatHandler]
    ) -> None:
        """Register an encoder for an output format."""
        self.format_handlers[format_name.lower()] = handler_class
        logger.debug("Registered format handler", format=format_name)

    def _get_handler(self, format_name: str) -> BaseFormatHandler:
        """Get encoder for format."""
        name = format_name.lower()
        name = FORMAT_ALIASES.get(name, name)
        handler_class = self.format_handlers.get(name)
        if not handler_class:
            raise UnsupportedFormatError(
                f"Output format '{format_name}' is not supported",
                details={
                    "requested_format": format_name,
                    "supported_formats": sorted(self.format_handlers),
                },
            )
        return handler_class()

    async def convert(
        self,
        blob: bytes,
        target_format: Union[OutputFormat, str],
        quality: int,
        max_dimension: Optional[int] = None,
    ) -> bytes:
        format_name = (
            target_format.value
            if isinstance(target_format, OutputFormat)
            else str(target_format)
        )
        handler = self._get_handler(format_name)
        settings = EncodeSettings(quality=quality)

        # Run in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, self._convert_sync, blob, handler, settings, max_dimension
            )
        except ImageConverterError:
            raise
        except Exception as e:
            raise CodecError(
                f"Failed to convert image: {str(e)}",
                details={
                    "output_format": format_name,
                    "quality": quality,
                    "error": str(e),
                },
            ) from e

    def _convert_sync(
        self,
        blob: bytes,
        handler: BaseFormatHandler,
        settings: EncodeSettings,
        max_dimension: Optional[int],
    ) -> bytes:
        image = self.decoder.load_image(blob)
        prepared = handler.prepare_image(image, max_dimension=max_dimension)
        try:
            with BytesIO() as output_buffer:
                handler.save_image(prepared, output_buffer, settings)
                return output_buffer.getvalue()
        finally:
            if prepared is not image:
                prepared.close()
            image.close()


async def attempt(
    codec: CodecAdapter,
    blob: bytes,
    target_format: Union[OutputFormat, str],
    quality: int,
    max_dimension: Optional[int] = None,
) -> Outcome[bytes]:
    """Run one codec conversion and capture its outcome."""
    try:
        data = await codec.convert(
            blob, target_format, quality, max_dimension=max_dimension
        )
    except ImageConverterError as e:
        return Failure(e)
    except Exception as e:
        # A codec implementation outside our hierarchy still yields a Failure
        error = CodecError(
            f"Codec failed: {str(e)}",
            details={"error": str(e)},
        )
        error.__cause__ = e
        return Failure(error)
    return Success(data)
