"""
Schemas Package

Result and status models exchanged with callers of the pipeline.
"""

from .job import (
    UNKNOWN_SOURCE,
    CompensationInfo,
    CompensationType,
    ExperienceLevel,
    JobParseResult,
    RenderQueueStatus,
)

__all__ = [
    "UNKNOWN_SOURCE",
    "CompensationInfo",
    "CompensationType",
    "ExperienceLevel",
    "JobParseResult",
    "RenderQueueStatus",
]
