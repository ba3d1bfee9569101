"""
Job Parsing Schemas

Result and status models exchanged between the pipeline and its callers.
"""

from typing import Optional, Dict, Any, NamedTuple
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, model_validator

UNKNOWN_SOURCE = "UNKNOWN"


class CompensationType(str, Enum):
    """How a compensation amount is paid."""
    HOURLY = "HOURLY"
    ANNUAL = "ANNUAL"
    UNKNOWN = "UNKNOWN"


class ExperienceLevel(str, Enum):
    """Seniority bucket inferred from title or description keywords."""
    INTERN = "INTERN"
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"


class CompensationInfo(NamedTuple):
    """Compensation amount and type produced by salary-text heuristics."""
    amount: Optional[float]
    type: CompensationType


class JobParseResult(BaseModel):
    """
    Outcome of a single parse attempt.

    Frozen once built. A successful result never carries an error message and
    a failed one always does.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    successful: bool = Field(..., description="Whether parsing succeeded")
    source: str = Field(..., description="Extractor name or UNKNOWN")
    original_url: Optional[str] = Field(None, description="URL as given by the caller")

    job_title: Optional[str] = Field(None, description="Job title")
    company: Optional[str] = Field(None, description="Hiring company")
    location: Optional[str] = Field(None, description="Job location")
    description: Optional[str] = Field(None, description="Job description")
    compensation: Optional[float] = Field(None, description="Compensation amount (range mean)")
    compensation_type: Optional[CompensationType] = Field(None, description="Compensation type")
    experience_level: Optional[ExperienceLevel] = Field(None, description="Experience level")

    error_message: Optional[str] = Field(None, description="Human-readable failure reason")

    @model_validator(mode="after")
    def _check_outcome(self) -> "JobParseResult":
        if self.successful and self.error_message is not None:
            raise ValueError("successful result cannot carry an error message")
        if not self.successful and not self.error_message:
            raise ValueError("failed result requires an error message")
        return self

    @classmethod
    def failure(cls, source: str, original_url: Optional[str], error_message: str) -> "JobParseResult":
        """Create a failed parse result."""
        return cls(
            successful=False,
            source=source,
            original_url=original_url,
            error_message=error_message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for collaborators, enums as plain strings."""
        return self.model_dump(mode="json")


class RenderQueueStatus(NamedTuple):
    """Point-in-time snapshot of the render queue."""
    active_instances: int
    queued_requests: int
    max_concurrent_instances: int
    available_slots: int

    def __str__(self) -> str:
        return (
            f"RenderQueueStatus(active={self.active_instances}, queued={self.queued_requests}, "
            f"max={self.max_concurrent_instances}, available={self.available_slots})"
        )
