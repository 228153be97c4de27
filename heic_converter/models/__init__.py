"""Data models for the HEIC batch converter."""

from heic_converter.models.conversion import (
    AcceptedItem,
    CandidateFile,
    ConvertedItem,
    EncodeSettings,
    OutputFormat,
    PipelinePolicy,
    ResourceHandle,
)
from heic_converter.models.results import (
    Accepted,
    Failure,
    Outcome,
    Rejected,
    Success,
    ValidationResult,
)

__all__ = [
    # Pipeline models
    "AcceptedItem",
    "CandidateFile",
    "ConvertedItem",
    "EncodeSettings",
    "OutputFormat",
    "PipelinePolicy",
    "ResourceHandle",
    # Result types
    "Accepted",
    "Failure",
    "Outcome",
    "Rejected",
    "Success",
    "ValidationResult",
]
