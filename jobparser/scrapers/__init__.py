"""
Job Scrapers Package

Document fetching, rendering engines and the site-specific extractors for
Greenhouse, Meta and Microsoft job postings. Every extractor implements the
base extractor interface for consistent results.
"""

from typing import TYPE_CHECKING, Tuple

from .base import BaseExtractor, DocumentAnalysis, remediation_hint, select_best_document
from .document import Document
from .fetcher import ContentFetcher, is_garbled
from .greenhouse import GreenhouseExtractor
from .meta import MetaExtractor
from .microsoft import MicrosoftExtractor
from .rendering_engine import (
    RenderingEngine,
    SeleniumRenderingEngine,
    UnavailableRenderingEngine,
    create_rendering_engine,
    find_system_browser,
)
from .utils import (
    clean_text,
    compensation_parser,
    experience_classifier,
    extract_compensation,
    extract_experience_level,
)

if TYPE_CHECKING:
    from jobparser.services.rendering import RenderingService


def default_extractors(rendering: "RenderingService") -> Tuple[BaseExtractor, ...]:
    """Extractor registry in priority order."""
    return (
        GreenhouseExtractor(rendering),
        MetaExtractor(rendering),
        MicrosoftExtractor(rendering),
    )


__all__ = [
    # Base classes
    'BaseExtractor',
    'DocumentAnalysis',
    'Document',
    'remediation_hint',
    'select_best_document',

    # Fetching and rendering
    'ContentFetcher',
    'is_garbled',
    'RenderingEngine',
    'SeleniumRenderingEngine',
    'UnavailableRenderingEngine',
    'create_rendering_engine',
    'find_system_browser',

    # Extractors
    'GreenhouseExtractor',
    'MetaExtractor',
    'MicrosoftExtractor',
    'default_extractors',

    # Utilities
    'clean_text',
    'compensation_parser',
    'experience_classifier',
    'extract_compensation',
    'extract_experience_level',
]
