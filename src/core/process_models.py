"""
Pydantic models for structured process logging.

A batch run is recorded as a start step, one step per completed item and a
completion step, all correlated by the run id.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict


class ProcessStep(str, Enum):
    """Process step types for a batch run."""
    BATCH_START = "batch_start"
    ITEM_COMPLETE = "item_complete"
    BATCH_CANCELLED = "batch_cancelled"
    BATCH_COMPLETE = "batch_complete"
    REPORT_COMPLETE = "report_complete"


class ProcessStatus(str, Enum):
    """Process execution status."""
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"


class ProcessLogRecord(BaseModel):
    """Structured process log record for database insertion."""
    run_id: str = Field(..., min_length=1, description="UUID correlating steps in a batch")

    step: ProcessStep = Field(..., description="Process step type")
    batch_kind: str = Field(..., min_length=1, max_length=64, description="competitors, citations, rankings")
    target: str = Field(..., min_length=1, max_length=255, description="Target domain or directory name")

    started_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Step start timestamp (ISO 8601)"
    )
    completed_at: Optional[str] = Field(None, description="Step completion timestamp (ISO 8601)")
    duration_seconds: Optional[float] = Field(None, ge=0, description="Duration in seconds")

    status: ProcessStatus = Field(default=ProcessStatus.SUCCESS, description="Execution status")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Counts, outcome tags, etc.")

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Log creation timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("target", mode="before")
    @classmethod
    def validate_target(cls, v: Optional[str]) -> str:
        if not v or not str(v).strip():
            return "batch"
        return str(v).strip()[:255]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    def calculate_duration(self) -> Optional[float]:
        """
        Calculate duration from started_at and completed_at timestamps.

        Returns:
            Duration in seconds, or None if completed_at is not set
        """
        if not self.completed_at:
            return None

        try:
            start = datetime.fromisoformat(self.started_at.replace('Z', '+00:00'))
            end = datetime.fromisoformat(self.completed_at.replace('Z', '+00:00'))
            return max(0.0, round((end - start).total_seconds(), 3))
        except ValueError:
            return None


STEP_DESCRIPTIONS = {
    ProcessStep.BATCH_START: "Starting {batch_kind} batch of {total} targets",
    ProcessStep.ITEM_COMPLETE: "Item {index} finished: {outcome}",
    ProcessStep.BATCH_CANCELLED: "Batch cancelled, {remaining} targets not run",
    ProcessStep.BATCH_COMPLETE: "Batch finished: {succeeded} ok, {failed} failed",
    ProcessStep.REPORT_COMPLETE: "Report built for {total} targets",
}


def get_step_description(step: ProcessStep, **kwargs) -> str:
    """
    Get human-readable description for a step.

    Args:
        step: Process step
        **kwargs: Context for formatting (e.g., total, outcome)
    """
    template = STEP_DESCRIPTIONS.get(step, str(step))
    try:
        return template.format(**kwargs)
    except (KeyError, ValueError, IndexError):
        return template
