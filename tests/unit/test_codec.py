"""Unit tests for the Pillow/pillow-heif codec and its format handlers."""

from io import BytesIO

import pytest
from PIL import Image

from heic_converter.core.conversion.codec import PillowHeifCodec, attempt
from heic_converter.core.conversion.formats.heif_handler import HeifHandler
from heic_converter.core.conversion.formats.jpeg_handler import JPEGHandler
from heic_converter.core.conversion.formats.png_handler import PNGHandler
from heic_converter.core.exceptions import (
    CodecError,
    HeifDecodingError,
    UnsupportedFormatError,
)
from heic_converter.models.conversion import EncodeSettings, OutputFormat
from heic_converter.models.results import Failure, Success
from tests.helpers.fakes import FakeCodec


@pytest.fixture
def codec():
    return PillowHeifCodec()


@pytest.fixture
def sample_heic_bytes():
    """A small HEIC image, skipped when no HEIF encoder is available."""
    img = Image.new("RGB", (32, 32), color="green")
    buffer = BytesIO()
    try:
        img.save(buffer, format="HEIF", quality=50)
    except (KeyError, OSError, ValueError) as e:
        pytest.skip(f"HEIF encoder unavailable: {e}")
    return buffer.getvalue()


class TestFormatHandlers:
    """Test handler capabilities."""

    def test_format_names(self):
        assert JPEGHandler().format_name == "JPEG"
        assert PNGHandler().format_name == "PNG"
        assert HeifHandler().format_name == "HEIF"

    def test_is_heif_checks_ftyp_brand(self):
        handler = HeifHandler()

        assert handler.is_heif(b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00") is True
        assert handler.is_heif(b"\x89PNG\r\n\x1a\n0000") is False
        assert handler.is_heif(b"") is False

    def test_heif_output_not_supported(self):
        with pytest.raises(UnsupportedFormatError):
            HeifHandler().save_image(
                Image.new("RGB", (1, 1)), BytesIO(), EncodeSettings()
            )

    def test_jpeg_quality_mapping(self):
        params = JPEGHandler().get_quality_param(EncodeSettings(quality=20))

        assert params["quality"] == 19
        assert params["subsampling"] == 2

    def test_png_compression_mapping(self):
        assert PNGHandler().get_quality_param(EncodeSettings(quality=100)) == {
            "compress_level": 0
        }

    def test_jpeg_prepare_flattens_alpha(self):
        image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))

        prepared = JPEGHandler().prepare_image(image)

        assert prepared.mode == "RGB"

    def test_prepare_downscales_to_max_dimension(self):
        image = Image.new("RGB", (640, 480))

        prepared = PNGHandler().prepare_image(image, max_dimension=256)

        assert prepared.size == (256, 192)
        assert image.size == (640, 480)


class TestPillowHeifCodec:
    """Test conversions through the codec adapter."""

    @pytest.mark.asyncio
    async def test_convert_to_jpeg(self, codec, sample_png_bytes):
        output = await codec.convert(sample_png_bytes, OutputFormat.JPEG, 90)

        assert output[:2] == b"\xff\xd8"
        with Image.open(BytesIO(output)) as img:
            assert img.format == "JPEG"
            assert img.size == (64, 48)

    @pytest.mark.asyncio
    async def test_convert_to_png_keeps_alpha(self, codec, sample_png_bytes):
        output = await codec.convert(sample_png_bytes, "png", 90)

        with Image.open(BytesIO(output)) as img:
            assert img.format == "PNG"
            assert img.mode == "RGBA"

    @pytest.mark.asyncio
    async def test_convert_with_max_dimension(self, codec, sample_jpeg_bytes):
        output = await codec.convert(
            sample_jpeg_bytes, OutputFormat.JPEG, 20, max_dimension=256
        )

        with Image.open(BytesIO(output)) as img:
            assert max(img.size) == 256

    @pytest.mark.asyncio
    async def test_format_alias(self, codec, sample_png_bytes):
        output = await codec.convert(sample_png_bytes, "jpg", 90)

        assert output[:2] == b"\xff\xd8"

    @pytest.mark.asyncio
    async def test_corrupt_input_raises_codec_error(self, codec):
        with pytest.raises(CodecError) as exc_info:
            await codec.convert(b"definitely not an image", OutputFormat.JPEG, 90)

        assert not isinstance(exc_info.value, HeifDecodingError)
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_corrupt_heif_container_raises_heif_error(self, codec):
        truncated = b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00mif1heic"

        with pytest.raises(HeifDecodingError) as exc_info:
            await codec.convert(truncated, OutputFormat.JPEG, 90)

        assert exc_info.value.error_code == "CONV202"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_unsupported_target_format(self, codec, sample_png_bytes):
        with pytest.raises(UnsupportedFormatError):
            await codec.convert(sample_png_bytes, "gif", 90)

    @pytest.mark.asyncio
    async def test_decodes_heic_source(self, codec, sample_heic_bytes):
        assert HeifHandler().is_heif(sample_heic_bytes)

        output = await codec.convert(sample_heic_bytes, OutputFormat.PNG, 90)

        with Image.open(BytesIO(output)) as img:
            assert img.format == "PNG"
            assert img.size == (32, 32)


class TestAttempt:
    """Test outcome wrapping of codec calls."""

    @pytest.mark.asyncio
    async def test_success(self):
        outcome = await attempt(FakeCodec(), b"x", OutputFormat.PNG, 90)

        assert isinstance(outcome, Success)
        assert outcome.ok is True
        assert outcome.value == b"converted:png:x"

    @pytest.mark.asyncio
    async def test_codec_error_becomes_failure(self):
        outcome = await attempt(FakeCodec(fail_on={b"x"}), b"x", OutputFormat.PNG, 90)

        assert isinstance(outcome, Failure)
        assert outcome.ok is False
        assert isinstance(outcome.error, CodecError)

    @pytest.mark.asyncio
    async def test_foreign_exception_becomes_failure(self):
        class BrokenCodec(FakeCodec):
            async def convert(self, *args, **kwargs):
                raise RuntimeError("boom")

        outcome = await attempt(BrokenCodec(), b"x", OutputFormat.JPEG, 90)

        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error.__cause__, RuntimeError)
