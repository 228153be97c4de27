"""Full-quality, best-effort conversion of a batch."""

import itertools
import re
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Union

import psutil

from heic_converter.core.constants import MSG_CONVERSION_FAILED, SOURCE_EXTENSIONS
from heic_converter.core.conversion.codec import CodecAdapter, attempt
from heic_converter.core.resources import ResourceHandleManager
from heic_converter.models.conversion import (
    AcceptedItem,
    CandidateFile,
    ConvertedItem,
    OutputFormat,
    PipelinePolicy,
)
from heic_converter.models.results import Failure
from heic_converter.utils.logging import get_logger

logger = get_logger(__name__)

_SOURCE_EXTENSION_PATTERN = re.compile(
    r"\.(" + "|".join(SOURCE_EXTENSIONS) + r")\Z", re.IGNORECASE
)

ErrorCallback = Callable[[CandidateFile, str], None]


def derive_output_name(name: str, output_format: Union[OutputFormat, str]) -> str:
    """Replace a trailing ``.heic``/``.heif`` with the output extension.

    Names without a source extension are returned unchanged.
    """
    output_format = OutputFormat(output_format)
    return _SOURCE_EXTENSION_PATTERN.sub(
        lambda _: output_format.extension, name, count=1
    )


def _disambiguate(name: str, taken: Set[str]) -> str:
    """Return ``name`` or ``stem (n).ext``, whichever is not yet taken."""
    if name not in taken:
        return name
    stem, dot, extension = name.rpartition(".")
    if not dot:
        stem, extension = name, ""
    for n in itertools.count(1):
        candidate = f"{stem} ({n}){dot}{extension}"
        if candidate not in taken:
            return candidate


class BatchConverter:
    """Converts accepted files one at a time, skipping failures."""

    def __init__(
        self,
        codec: CodecAdapter,
        handles: ResourceHandleManager,
        policy: PipelinePolicy,
    ) -> None:
        self.codec = codec
        self.handles = handles
        self.policy = policy
        self._sequence = itertools.count()
        self._memory_process = psutil.Process()
        self.last_run_metrics: Dict[str, Any] = {}

    def _get_memory_usage(self) -> float:
        """Get current memory usage in MB."""
        return self._memory_process.memory_info().rss / 1024 / 1024

    def _make_id(self, file: CandidateFile) -> str:
        return f"{file.name}-{time.time_ns()}-{next(self._sequence)}"

    async def convert_all(
        self,
        items: Sequence[AcceptedItem],
        output_format: Union[OutputFormat, str],
        on_error: Optional[ErrorCallback] = None,
    ) -> List[ConvertedItem]:
        """Convert every item in list order; failed items are omitted.

        Conversions are sequential to bound peak memory. Each failure is
        reported through ``on_error`` with a message naming the file and the
        run continues with the next item.
        """
        output_format = OutputFormat(output_format)
        converted: List[ConvertedItem] = []
        taken: Set[str] = set()
        failed = 0

        start_time = time.time()
        peak_memory_mb = self._get_memory_usage()

        try:
            for index, item in enumerate(items):
                outcome = await attempt(
                    self.codec,
                    item.file.data,
                    output_format,
                    self.policy.output_quality,
                )
                peak_memory_mb = max(peak_memory_mb, self._get_memory_usage())

                if isinstance(outcome, Failure):
                    failed += 1
                    logger.error(
                        "Conversion failed",
                        index=index,
                        error_code=outcome.error.error_code,
                        error=outcome.error.message,
                    )
                    if on_error is not None:
                        on_error(item.file, MSG_CONVERSION_FAILED.format(name=item.name))
                    continue

                name = _disambiguate(
                    derive_output_name(item.name, output_format), taken
                )
                taken.add(name)
                handle = self.handles.create(outcome.value, output_format.media_type)
                converted.append(
                    ConvertedItem(
                        id=self._make_id(item.file),
                        name=name,
                        output_format=output_format,
                        handle=handle,
                        data=outcome.value,
                        source=item.file,
                    )
                )
        except BaseException:
            # An aborted run publishes nothing; release what it already produced
            revoked = self.handles.revoke_many(done.handle for done in converted)
            logger.warning("Conversion run aborted", handles_revoked=revoked)
            raise

        self.last_run_metrics = {
            "total": len(items),
            "converted": len(converted),
            "failed": failed,
            "duration_seconds": time.time() - start_time,
            "peak_memory_mb": peak_memory_mb,
        }
        logger.info(
            "Batch converted",
            output_format=output_format.value,
            **self.last_run_metrics,
        )
        return converted
