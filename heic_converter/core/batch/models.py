"""State and statistics models for the batch controller."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BatchState(str, Enum):
    """Lifecycle state of a batch."""

    IDLE = "idle"
    POPULATED = "populated"
    THUMBNAILING = "thumbnailing"
    READY = "ready"
    CONVERTING = "converting"
    CONVERTED = "converted"
    BUNDLING = "bundling"
    ERROR = "error"


class BatchStats(BaseModel):
    """Point-in-time summary of a batch."""

    state: BatchState
    accepted_files: int = Field(..., ge=0, description="Files in the batch")
    thumbnails: int = Field(..., ge=0, description="Files with a preview")
    converted_files: int = Field(..., ge=0, description="Outputs of the last run")
    failed_files: int = Field(
        default=0, ge=0, description="Files that failed in the last run"
    )
    rejected_files: int = Field(
        default=0, ge=0, description="Files rejected since the last clear"
    )
    handles_created: int = Field(..., ge=0)
    handles_revoked: int = Field(..., ge=0)
    handles_outstanding: int = Field(..., ge=0)
    last_run_seconds: Optional[float] = Field(
        None, description="Duration of the last conversion run"
    )
    peak_memory_mb: Optional[float] = Field(
        None, description="Peak resident memory during the last run"
    )
    error: Optional[str] = None
