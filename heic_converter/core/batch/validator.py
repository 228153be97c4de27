"""Acceptance policy checks for candidate files."""

from typing import Iterable, List, Tuple

from heic_converter.core.constants import MSG_FILE_TOO_LARGE, MSG_UNSUPPORTED_TYPE
from heic_converter.core.exceptions import ValidationError
from heic_converter.models.conversion import CandidateFile, PipelinePolicy
from heic_converter.models.results import Accepted, Rejected, ValidationResult
from heic_converter.utils.logging import get_logger

logger = get_logger(__name__)


def validate(file: CandidateFile, policy: PipelinePolicy) -> ValidationResult:
    """Classify one file as accepted or rejected.

    The media type is checked first, exactly as declared. A file whose size
    equals the limit is accepted.
    """
    if file.media_type not in policy.accepted_media_types:
        return Rejected(
            file=file,
            error=ValidationError(
                MSG_UNSUPPORTED_TYPE.format(name=file.name),
                details={
                    "field_name": "media_type",
                    "field_value": file.media_type,
                    "expected_values": sorted(policy.accepted_media_types),
                },
            ),
        )

    if file.size > policy.max_file_size_bytes:
        return Rejected(
            file=file,
            error=ValidationError(
                MSG_FILE_TOO_LARGE.format(
                    name=file.name, max_mb=policy.max_file_size_mb
                ),
                details={
                    "field_name": "size",
                    "field_value": file.size,
                    "constraints": f"<= {policy.max_file_size_bytes} bytes",
                },
            ),
        )

    return Accepted(file=file)


def validate_all(
    files: Iterable[CandidateFile], policy: PipelinePolicy
) -> Tuple[List[CandidateFile], List[Rejected]]:
    """Validate each file independently, preserving input order."""
    accepted: List[CandidateFile] = []
    rejected: List[Rejected] = []

    for file in files:
        result = validate(file, policy)
        if isinstance(result, Accepted):
            accepted.append(result.file)
        else:
            rejected.append(result)
            logger.warning(
                "Candidate file rejected",
                field=result.error.details.get("field_name"),
                media_type=file.media_type,
                size=file.size,
            )

    return accepted, rejected
