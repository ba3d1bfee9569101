"""
Base Extractor Classes

Abstract base class for site-specific job extractors plus the fetch-strategy
escalation and document-quality analysis they share.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple
import time

from jobparser.core.exceptions import (
    BaseApplicationException,
    ExtractionIncompleteException,
    FetchException,
)
from jobparser.schemas.job import (
    CompensationInfo,
    CompensationType,
    ExperienceLevel,
    JobParseResult,
)
from jobparser.scrapers.document import Document
from jobparser.scrapers.utils import FIELD_LIMITS, clean_multiline, clean_text, truncate_field
from jobparser.utils.logger import get_logger, log_error, log_scraping_activity, log_performance_metric

if TYPE_CHECKING:
    from jobparser.services.rendering import RenderingService

logger = get_logger(__name__)

# Escalation thresholds, in elements and characters
RENDERED_MIN_ELEMENTS = 100
RENDERED_MIN_TEXT = 1000
ENHANCED_MIN_ELEMENTS = 50
USABLE_MIN_ELEMENTS = 20


def select_best_document(
    candidates: Iterable[Tuple[Optional[Document], float]]
) -> Optional[Document]:
    """
    Pick the highest-scoring document; the earliest wins ties.

    Args:
        candidates: ``(document, quality_score)`` pairs, documents may be None

    Returns:
        Optional[Document]: Best document, or None when there are none
    """
    best: Optional[Document] = None
    best_score = float("-inf")
    for document, score in candidates:
        if document is not None and score > best_score:
            best, best_score = document, score
    return best


@dataclass(frozen=True)
class DocumentAnalysis:
    """Quality summary of a fetched document."""

    title: str
    element_count: int
    text_length: int
    has_job_content: bool
    looks_like_js_shell: bool

    @classmethod
    def analyze(cls, document: Document, job_markers: Sequence[str] = ()) -> "DocumentAnalysis":
        text = document.text()
        lowered = text.lower()
        element_count = document.element_count()
        script_count = len(document.select("script"))
        has_job_content = any(marker.lower() in lowered for marker in job_markers)
        return cls(
            title=document.title(),
            element_count=element_count,
            text_length=len(text),
            has_job_content=has_job_content,
            looks_like_js_shell=(
                not has_job_content
                and len(text) < RENDERED_MIN_TEXT
                and (
                    script_count * 4 > element_count
                    or "enable javascript" in lowered
                    or document.select_one("#root, #app, #__next") is not None
                )
            ),
        )


def remediation_hint(analysis: DocumentAnalysis, rendering_available: bool) -> str:
    """
    Explain the likely reason an extractor found no job content.

    Args:
        analysis: Quality summary of the document the extractor worked on
        rendering_available: Whether browser rendering could be used

    Returns:
        str: Human-readable diagnosis with a suggested remedy
    """
    if analysis.looks_like_js_shell and not rendering_available:
        return (
            "The page requires JavaScript rendering. Enable rendering "
            "(install selenium and Chrome) or enter the job details manually."
        )
    if analysis.element_count < USABLE_MIN_ELEMENTS:
        return (
            f"The page returned minimal content ({analysis.element_count} elements) "
            "and may have anti-bot protection. Try a direct job link or wait before retrying."
        )
    if analysis.element_count < RENDERED_MIN_ELEMENTS:
        return (
            f"The page loaded only partially ({analysis.element_count} elements). "
            "Wait a few minutes and try again."
        )
    if not analysis.has_job_content:
        return (
            "The job posting may no longer be available, the URL may be incorrect, "
            "or the page structure may have changed."
        )
    return "The page structure may have changed."


class BaseExtractor(ABC):
    """
    Abstract base class for site-specific job extractors.

    ``parse`` never raises: every failure becomes a failed JobParseResult
    tagged with the extractor name.

    Args:
        rendering: Render decision layer used to fetch documents
    """

    def __init__(self, rendering: "RenderingService") -> None:
        self.rendering = rendering

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name reported in results."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable site family name."""
        pass

    @property
    @abstractmethod
    def url_markers(self) -> Tuple[str, ...]:
        """URL fragments this extractor handles."""
        pass

    @property
    def job_markers(self) -> Tuple[str, ...]:
        """Words expected on a genuine job page, used for diagnostics."""
        return ("responsibilities", "qualifications", "apply")

    def can_handle(self, url: Optional[str]) -> bool:
        """Pure URL match against this extractor's markers."""
        if not url:
            return False
        lowered = url.lower()
        return any(marker in lowered for marker in self.url_markers)

    async def parse(self, url: str) -> JobParseResult:
        """
        Fetch and extract a job posting.

        Args:
            url: Job posting URL this extractor can handle

        Returns:
            JobParseResult: Successful result or a failure tagged with ``name``
        """
        log_scraping_activity(self.name, "parse", url=url)
        started = time.monotonic()
        try:
            result = await self._extract(url)
        except ExtractionIncompleteException as e:
            logger.warning(f"{self.name} extraction incomplete: {e.message}", url=url)
            return JobParseResult.failure(self.name, url, e.message)
        except FetchException as e:
            logger.error(f"{self.name} fetch failed: {e.message}", url=url, error_code=e.error_code)
            return JobParseResult.failure(
                self.name, url, f"Failed to parse {self.display_name} job: {e.message}"
            )
        except BaseApplicationException as e:
            logger.error(f"{self.name} parse failed: {e.message}", url=url)
            return JobParseResult.failure(self.name, url, e.message)
        except Exception as e:
            log_error(e, context={"extractor": self.name, "url": url})
            return JobParseResult.failure(
                self.name, url, f"Failed to parse {self.display_name} job: {e}"
            )

        log_performance_metric(
            "parse_duration",
            time.monotonic() - started,
            context={"extractor": self.name, "url": url},
        )
        return result

    @abstractmethod
    async def _extract(self, url: str) -> JobParseResult:
        """Site-specific extraction; may raise, ``parse`` converts failures."""
        pass

    async def fetch_document(self, url: str) -> Document:
        """Fetch through the render decision layer."""
        return await self.rendering.fetch_best(url)

    async def fetch_with_escalation(self, url: str, wait_seconds: float) -> Document:
        """
        Try rendering, then enhanced headers, then the baseline fetcher.

        Each strategy is tried at most once. The best document by element
        count is returned; this only fails when every strategy failed.

        Raises:
            FetchException: No strategy produced a document
        """
        attempts: List[Tuple[Document, int]] = []
        errors: List[FetchException] = []

        if self.rendering.is_available():
            try:
                document = await self.rendering.fetch_rendered(url, wait_seconds)
                elements, text_length = document.element_count(), len(document.text())
                if elements > RENDERED_MIN_ELEMENTS and text_length > RENDERED_MIN_TEXT:
                    log_scraping_activity(self.name, "fetch_strategy", url=url, strategy="rendered", elements=elements)
                    return document
                logger.warning(
                    "Rendered document looks incomplete",
                    url=url,
                    elements=elements,
                    text_length=text_length,
                )
                attempts.append((document, elements))
            except FetchException as e:
                logger.warning(f"Rendered fetch failed for {url}: {e.message}")
                errors.append(e)

        try:
            document = await self.rendering.fetch_enhanced(url)
            elements = document.element_count()
            if elements <= ENHANCED_MIN_ELEMENTS:
                logger.warning("Enhanced-header document looks incomplete", url=url, elements=elements)
            attempts.append((document, elements))
        except FetchException as e:
            logger.warning(f"Enhanced-header fetch failed for {url}: {e.message}")
            errors.append(e)

        best = select_best_document(attempts)
        if best is None or best.element_count() < USABLE_MIN_ELEMENTS:
            try:
                document = await self.rendering.fetch_static(url)
                attempts.append((document, document.element_count()))
            except FetchException as e:
                logger.warning(f"Baseline fetch failed for {url}: {e.message}")
                errors.append(e)
            best = select_best_document(attempts)

        if best is None:
            if errors:
                raise errors[-1]
            raise FetchException(f"All fetch strategies failed for {url}", url=url)

        log_scraping_activity(self.name, "fetch_strategy", url=url, strategy="best_of", elements=best.element_count())
        return best

    def analyze_document(self, document: Document) -> DocumentAnalysis:
        return DocumentAnalysis.analyze(document, self.job_markers)

    def require_title(self, title: Optional[str], document: Document) -> str:
        """
        Return the cleaned title or raise ExtractionIncompleteException.
        """
        title = clean_text(title)
        if not title:
            raise ExtractionIncompleteException(
                "job title",
                remediation_hint(self.analyze_document(document), self.rendering.is_available()),
            )
        return title

    def build_result(
        self,
        url: str,
        job_title: str,
        company: Optional[str] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
        compensation: Optional[CompensationInfo] = None,
        experience_level: Optional[ExperienceLevel] = None,
    ) -> JobParseResult:
        """Clean and truncate extracted fields into a successful result."""
        compensation = compensation or CompensationInfo(None, CompensationType.UNKNOWN)
        fields = {
            "job_title": clean_text(job_title),
            "company": clean_text(company),
            "location": clean_text(location),
            # Structured descriptions keep their section and bullet lines
            "description": clean_multiline(description),
        }
        cleaned = {
            key: truncate_field(value or None, FIELD_LIMITS[key], key)
            for key, value in fields.items()
        }
        return JobParseResult(
            successful=True,
            source=self.name,
            original_url=url,
            compensation=compensation.amount,
            compensation_type=compensation.type,
            experience_level=experience_level,
            **cleaned,
        )
