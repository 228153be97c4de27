"""Batch state controller: owns the lists and drives the pipeline."""

import asyncio
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from heic_converter.config import settings
from heic_converter.core.batch.archive import (
    ArchiveBundler,
    ArchiveWriter,
    ZipArchiveWriter,
)
from heic_converter.core.batch.converter import BatchConverter
from heic_converter.core.batch.models import BatchState, BatchStats
from heic_converter.core.batch.thumbnails import ThumbnailPipeline
from heic_converter.core.batch.validator import validate_all
from heic_converter.core.constants import ARCHIVE_MEDIA_TYPE, FORMAT_ALIASES, MSG_BUSY
from heic_converter.core.conversion.codec import CodecAdapter, PillowHeifCodec
from heic_converter.core.exceptions import ArchiveError, UnsupportedFormatError
from heic_converter.core.resources import ResourceHandleManager
from heic_converter.models.conversion import (
    AcceptedItem,
    CandidateFile,
    ConvertedItem,
    OutputFormat,
    PipelinePolicy,
)
from heic_converter.utils.logging import LoggingContext, get_logger

logger = get_logger(__name__)


class BatchController:
    """Single writer of the accepted list, converted list and error message.

    Transitions::

        idle -> populated -> thumbnailing -> ready
        ready -> converting -> converted
        converted -> bundling -> converted | error
        any -> idle (clear_batch)

    Only one run (thumbnails, conversion or bundling) is in flight at a time.
    A ``clear_batch`` during a run bumps the batch generation; the run's
    results are then revoked instead of published.
    """

    def __init__(
        self,
        codec: Optional[CodecAdapter] = None,
        handles: Optional[ResourceHandleManager] = None,
        policy: Optional[PipelinePolicy] = None,
        archive_writer: Optional[ArchiveWriter] = None,
    ) -> None:
        self.policy = policy or settings.to_policy()
        self.codec = codec or PillowHeifCodec()
        self.handles = handles or ResourceHandleManager()
        self.thumbnails = ThumbnailPipeline(self.codec, self.handles, self.policy)
        self.converter = BatchConverter(self.codec, self.handles, self.policy)
        self.bundler = ArchiveBundler(archive_writer or ZipArchiveWriter())

        self.output_format: OutputFormat = self.policy.output_format

        self._items: List[AcceptedItem] = []
        self._converted: List[ConvertedItem] = []
        self._error: Optional[str] = None
        self._state = BatchState.IDLE
        self._busy = False
        self._generation = 0
        self._rejected = 0
        self._failed = 0

    async def __aenter__(self) -> "BatchController":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # Read-only views

    @property
    def items(self) -> Tuple[AcceptedItem, ...]:
        return tuple(self._items)

    @property
    def converted(self) -> Tuple[ConvertedItem, ...]:
        return tuple(self._converted)

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        """Most recent user-facing error message."""
        return self._error

    @property
    def busy(self) -> bool:
        """True while a thumbnail, conversion or bundling run is in flight."""
        return self._busy

    # Configuration

    def set_output_format(self, output_format: Union[OutputFormat, str]) -> None:
        """Select the output format for the next conversion run."""
        if isinstance(output_format, OutputFormat):
            self.output_format = output_format
            return
        name = output_format.lower()
        name = FORMAT_ALIASES.get(name, name)
        try:
            self.output_format = OutputFormat(name)
        except ValueError:
            raise UnsupportedFormatError(
                f"Output format '{output_format}' is not supported",
                details={
                    "requested_format": output_format,
                    "supported_formats": [f.value for f in OutputFormat],
                },
            ) from None

    # Pipeline operations

    async def add_files(self, files: Iterable[CandidateFile]) -> List[AcceptedItem]:
        """Validate files, build their previews and append them to the batch.

        Rejected files set the error message (last one wins) and do not stop
        the others. Returns the newly appended items.
        """
        if self._busy:
            logger.warning("Add ignored while a run is in flight", state=self._state.value)
            self._error = MSG_BUSY
            return []

        self._error = None
        accepted, rejected = validate_all(files, self.policy)
        self._rejected += len(rejected)
        for result in rejected:
            self._error = result.reason

        if not accepted:
            return []

        generation = self._generation
        previous_state = self._state
        self._transition(BatchState.POPULATED)
        self._busy = True
        self._transition(BatchState.THUMBNAILING)
        try:
            new_items = await self.thumbnails.build_thumbnails(accepted)
        except BaseException:
            if generation == self._generation:
                self._transition(previous_state)
            raise
        finally:
            self._busy = False

        if generation != self._generation:
            # Batch was cleared while previews were being built
            self.handles.revoke_many(
                item.thumbnail for item in new_items if item.thumbnail
            )
            logger.info("Discarded previews of a cleared batch", count=len(new_items))
            return []

        self._items.extend(new_items)
        self._transition(BatchState.READY)
        logger.info(
            "Files added",
            accepted=len(new_items),
            rejected=len(rejected),
            total=len(self._items),
        )
        return new_items

    async def convert(
        self, output_format: Optional[Union[OutputFormat, str]] = None
    ) -> List[ConvertedItem]:
        """Convert every accepted file; no-op while empty or busy.

        An unknown ``output_format`` sets the error message instead of
        raising. The previous run's outputs are released before the new run
        starts.
        """
        if self._busy:
            return []
        if output_format is not None:
            try:
                self.set_output_format(output_format)
            except UnsupportedFormatError as e:
                self._error = e.message
                return []
        if not self._items:
            return []

        self._error = None
        self._release_converted()

        generation = self._generation

        def report(file: CandidateFile, message: str) -> None:
            if generation == self._generation:
                self._error = message

        self._busy = True
        self._transition(BatchState.CONVERTING)
        run_id = str(uuid.uuid4())
        try:
            with LoggingContext(correlation_id=run_id, run_id=run_id):
                converted = await self.converter.convert_all(
                    list(self._items), self.output_format, on_error=report
                )
        except BaseException:
            if generation == self._generation:
                self._transition(BatchState.READY)
            raise
        finally:
            self._busy = False

        if generation != self._generation:
            self.handles.revoke_many(item.handle for item in converted)
            logger.info("Discarded outputs of a cleared batch", count=len(converted))
            return []

        self._converted = converted
        self._failed = self.converter.last_run_metrics.get("failed", 0)
        self._transition(BatchState.CONVERTED)
        return list(converted)

    async def download_all(self) -> Optional[bytes]:
        """Bundle every converted output into one archive.

        Returns ``None`` when there is nothing to bundle, a run is in flight,
        or bundling failed (the error message is set in that case).
        """
        if not self._converted or self._busy:
            return None

        self._error = None
        generation = self._generation
        self._busy = True
        self._transition(BatchState.BUNDLING)
        try:
            archive = await self.bundler.bundle(list(self._converted))
        except ArchiveError as e:
            if generation == self._generation:
                self._error = e.message
                self._transition(BatchState.ERROR)
            return None
        finally:
            self._busy = False

        if generation != self._generation:
            return None

        self._transition(BatchState.CONVERTED)
        return archive

    def clear_batch(self) -> None:
        """Revoke every outstanding handle and reset the batch to idle.

        Safe to call repeatedly and from any state.
        """
        owned = [item.thumbnail for item in self._items if item.thumbnail]
        owned.extend(item.handle for item in self._converted)

        self._items = []
        self._converted = []
        self._error = None
        self._rejected = 0
        self._failed = 0
        self._transition(BatchState.IDLE)
        self._generation += 1

        # Handles released behind our back are skipped, never revoked twice
        live = [handle for handle in owned if self.handles.is_live(handle)]
        if len(live) < len(owned):
            logger.warning(
                "Batch held handles that were already released",
                count=len(owned) - len(live),
            )
        revoked = self.handles.revoke_many(live)
        if revoked:
            logger.info("Batch cleared", handles_revoked=revoked)

    async def aclose(self) -> None:
        """Teardown: release everything this controller holds."""
        self.clear_batch()

    def _transition(self, state: BatchState) -> None:
        logger.debug("Batch state changed", previous=self._state.value, state=state.value)
        self._state = state

    def _release_converted(self) -> int:
        revoked = self.handles.revoke_many(item.handle for item in self._converted)
        self._converted = []
        return revoked

    # Download actions

    async def save_item(
        self, item: ConvertedItem, directory: Union[str, Path]
    ) -> Path:
        """Write one converted output to ``directory`` under its output name."""
        return await self._save_blob(
            item.data, item.output_format.media_type, Path(directory) / item.name
        )

    async def save_archive(self, archive: bytes, directory: Union[str, Path]) -> Path:
        """Write a bundled archive to ``directory``."""
        return await self._save_blob(
            archive, ARCHIVE_MEDIA_TYPE, Path(directory) / self.policy.archive_name
        )

    async def _save_blob(self, blob: bytes, media_type: str, target: Path) -> Path:
        # A transient handle lives only for the duration of the save
        handle = self.handles.create(blob, media_type)
        try:
            data = self.handles.resolve(handle)
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, target.write_bytes, data)
        finally:
            self.handles.revoke(handle)
        logger.info("Saved output", size=len(blob), media_type=media_type)
        return target

    # Reporting

    def stats(self) -> BatchStats:
        metrics = self.converter.last_run_metrics
        return BatchStats(
            state=self._state,
            accepted_files=len(self._items),
            thumbnails=sum(1 for item in self._items if item.has_thumbnail),
            converted_files=len(self._converted),
            failed_files=self._failed,
            rejected_files=self._rejected,
            handles_created=self.handles.created_count,
            handles_revoked=self.handles.revoked_count,
            handles_outstanding=self.handles.outstanding,
            last_run_seconds=metrics.get("duration_seconds"),
            peak_memory_mb=metrics.get("peak_memory_mb"),
            error=self._error,
        )

