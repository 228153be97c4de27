"""Low-quality preview generation for accepted files."""

import asyncio
from typing import List, Sequence

from heic_converter.core.constants import THUMBNAIL_FORMAT
from heic_converter.core.conversion.codec import CodecAdapter, attempt
from heic_converter.core.resources import ResourceHandleManager
from heic_converter.models.conversion import (
    AcceptedItem,
    CandidateFile,
    OutputFormat,
    PipelinePolicy,
)
from heic_converter.models.results import Success
from heic_converter.utils.logging import get_logger

logger = get_logger(__name__)


class ThumbnailPipeline:
    """Maps accepted files to preview handles, isolating per-file failure."""

    def __init__(
        self,
        codec: CodecAdapter,
        handles: ResourceHandleManager,
        policy: PipelinePolicy,
    ) -> None:
        self.codec = codec
        self.handles = handles
        self.policy = policy
        self.thumbnail_format = OutputFormat(THUMBNAIL_FORMAT)

    async def build_thumbnails(
        self, files: Sequence[CandidateFile]
    ) -> List[AcceptedItem]:
        """Build one ``AcceptedItem`` per file.

        All preview conversions run concurrently; the list is returned only
        once every one of them has settled, in input order. Files whose
        preview failed are still returned, without a thumbnail.
        """
        if not files:
            return []

        outcomes = await asyncio.gather(
            *(
                attempt(
                    self.codec,
                    file.data,
                    self.thumbnail_format,
                    self.policy.thumbnail_quality,
                    max_dimension=self.policy.thumbnail_max_dimension,
                )
                for file in files
            )
        )

        items: List[AcceptedItem] = []
        for index, (file, outcome) in enumerate(zip(files, outcomes)):
            if isinstance(outcome, Success):
                handle = self.handles.create(
                    outcome.value, self.thumbnail_format.media_type
                )
                items.append(AcceptedItem(file=file, thumbnail=handle))
            else:
                logger.warning(
                    "Thumbnail generation failed",
                    index=index,
                    error_code=outcome.error.error_code,
                    error=outcome.error.message,
                )
                items.append(AcceptedItem(file=file))

        logger.debug(
            "Thumbnails built",
            total=len(items),
            with_preview=sum(1 for item in items if item.has_thumbnail),
        )
        return items
