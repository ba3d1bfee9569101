"""
Services Layer

Rendering decisions, the render queue and the extraction dispatcher that
coordinate fetching and extractors.
"""

from .job_parsing import JobParsingService
from .render_queue import RenderQueue
from .rendering import RenderingService, JS_HEAVY_DOMAINS

__all__ = [
    "JobParsingService",
    "RenderQueue",
    "RenderingService",
    "JS_HEAVY_DOMAINS",
]
