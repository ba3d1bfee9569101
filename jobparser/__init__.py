"""
Job Parser

Turns job posting URLs into normalized job records, rendering JavaScript
pages through a bounded pool of headless browsers when needed.
"""

from jobparser.core.container import (
    get_container,
    init_container,
    parse_job_url,
    shutdown_container,
)
from jobparser.schemas.job import JobParseResult, RenderQueueStatus

__version__ = "1.0.0"

__all__ = [
    "parse_job_url",
    "init_container",
    "shutdown_container",
    "get_container",
    "JobParseResult",
    "RenderQueueStatus",
]
