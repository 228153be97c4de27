"""Pytest fixtures for HEIC converter tests."""

import io

import pytest
from PIL import Image

from heic_converter.core.batch.controller import BatchController
from heic_converter.core.resources import ResourceHandleManager
from heic_converter.models.conversion import PipelinePolicy
from tests.helpers.fakes import FakeCodec, RecordingArchiveWriter


@pytest.fixture
def policy():
    """Default acceptance policy."""
    return PipelinePolicy()


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def handles():
    return ResourceHandleManager()


@pytest.fixture
def archive_writer():
    return RecordingArchiveWriter()


@pytest.fixture
def controller(fake_codec, handles, policy, archive_writer):
    """Controller wired to the fake codec and recording archive writer."""
    return BatchController(
        codec=fake_codec,
        handles=handles,
        policy=policy,
        archive_writer=archive_writer,
    )


@pytest.fixture
def sample_png_bytes():
    """A small RGBA PNG image."""
    img = Image.new("RGBA", (64, 48), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_jpeg_bytes():
    """A JPEG image larger than the preview size."""
    img = Image.new("RGB", (640, 480), color="blue")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return buffer.getvalue()
