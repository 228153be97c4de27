"""Bundling converted outputs into a single archive."""

import asyncio
import io
import zipfile
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Sequence

from heic_converter.core.constants import MSG_ARCHIVE_FAILED, MSG_NOTHING_TO_BUNDLE
from heic_converter.core.exceptions import ArchiveError
from heic_converter.models.conversion import ConvertedItem
from heic_converter.utils.logging import get_logger

logger = get_logger(__name__)


class ArchiveWriter(ABC):
    """Serializes a name-to-blob mapping into one archive blob."""

    @abstractmethod
    def write(self, entries: Mapping[str, bytes]) -> bytes:
        """Return the archive containing ``entries``."""


class ZipArchiveWriter(ArchiveWriter):
    """ZIP archive writer using DEFLATE compression."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression

    def write(self, entries: Mapping[str, bytes]) -> bytes:
        zip_buffer = io.BytesIO()

        with zipfile.ZipFile(zip_buffer, "w", self.compression) as zip_file:
            for name, data in entries.items():
                zip_file.writestr(name, data)

        return zip_buffer.getvalue()


class ArchiveBundler:
    """Writes every converted output into one archive, all or nothing."""

    def __init__(self, writer: ArchiveWriter) -> None:
        self.writer = writer

    async def bundle(self, items: Sequence[ConvertedItem]) -> bytes:
        """Bundle outputs keyed by their output names.

        Raises:
            ArchiveError: if there is nothing to bundle or the writer fails.
        """
        if not items:
            raise ArchiveError(MSG_NOTHING_TO_BUNDLE, details={"entry_count": 0})

        # Names are unique within a run; no deduplication happens here
        entries: Dict[str, bytes] = {item.name: item.data for item in items}

        loop = asyncio.get_running_loop()
        try:
            archive = await loop.run_in_executor(None, self.writer.write, entries)
        except Exception as e:
            logger.error(
                "Archive creation failed",
                entry_count=len(entries),
                error=str(e),
            )
            raise ArchiveError(
                MSG_ARCHIVE_FAILED,
                details={"entry_count": len(entries), "error": str(e)},
            ) from e

        logger.info("Archive created", entry_count=len(entries), size=len(archive))
        return archive
