"""Unit tests for archive bundling."""

import io
import zipfile

import pytest

from heic_converter.core.batch.archive import ArchiveBundler, ZipArchiveWriter
from heic_converter.core.exceptions import ArchiveError
from heic_converter.models.conversion import ConvertedItem, OutputFormat
from tests.helpers.fakes import RecordingArchiveWriter, make_heic


def converted_item(handles, name, data):
    return ConvertedItem(
        id=f"{name}-1",
        name=name,
        output_format=OutputFormat.JPEG,
        handle=handles.create(data, "image/jpeg"),
        data=data,
        source=make_heic(name.replace(".jpeg", ".heic")),
    )


class TestZipArchiveWriter:
    """Test the ZIP writer."""

    def test_writes_entries(self):
        archive = ZipArchiveWriter().write({"a.jpeg": b"aaa", "b.jpeg": b"bbb"})

        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            assert zf.namelist() == ["a.jpeg", "b.jpeg"]
            assert zf.read("b.jpeg") == b"bbb"
            assert zf.getinfo("a.jpeg").compress_type == zipfile.ZIP_DEFLATED


class TestArchiveBundler:
    """Test bundling semantics."""

    @pytest.mark.asyncio
    async def test_bundle_keys_by_output_name(self, handles):
        writer = RecordingArchiveWriter()
        items = [
            converted_item(handles, "one.jpeg", b"1"),
            converted_item(handles, "two.jpeg", b"2"),
        ]

        archive = await ArchiveBundler(writer).bundle(items)

        assert archive == b"archive:one.jpeg,two.jpeg"
        assert writer.entries == {"one.jpeg": b"1", "two.jpeg": b"2"}

    @pytest.mark.asyncio
    async def test_empty_set_is_rejected(self):
        with pytest.raises(ArchiveError, match="Nothing to bundle"):
            await ArchiveBundler(RecordingArchiveWriter()).bundle([])

    @pytest.mark.asyncio
    async def test_writer_failure_is_single_archive_error(self, handles):
        items = [converted_item(handles, "one.jpeg", b"1")]

        with pytest.raises(ArchiveError) as exc_info:
            await ArchiveBundler(RecordingArchiveWriter(fail=True)).bundle(items)

        assert exc_info.value.message == "Failed to create zip file for download."
        assert exc_info.value.details["entry_count"] == 1
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_real_zip_round_trip(self, handles):
        items = [converted_item(handles, "photo.jpeg", b"\xff\xd8data")]

        archive = await ArchiveBundler(ZipArchiveWriter()).bundle(items)

        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            assert zf.namelist() == ["photo.jpeg"]
            assert zf.read("photo.jpeg") == b"\xff\xd8data"
