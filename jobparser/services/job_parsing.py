"""
Job Parsing Service

Routes a job URL to the first extractor that claims it. This is the single
inbound operation of the pipeline and never raises.
"""

from typing import List, Optional, Sequence, Tuple

from jobparser.core.exceptions import InvalidUrlException, UnsupportedUrlException
from jobparser.schemas.job import UNKNOWN_SOURCE, JobParseResult
from jobparser.scrapers.base import BaseExtractor
from jobparser.utils.logger import LoggerMixin, job_url_context, log_error


class JobParsingService(LoggerMixin):
    """
    Extraction dispatcher over an ordered, immutable extractor registry.

    Priority is registry order; the first extractor whose ``can_handle``
    matches is used exclusively.

    Args:
        extractors: Extractors in priority order
    """

    def __init__(self, extractors: Sequence[BaseExtractor]) -> None:
        self.extractors: Tuple[BaseExtractor, ...] = tuple(extractors)
        self.logger.info(
            f"Initialized JobParsingService with {len(self.extractors)} extractors",
            extractors=[extractor.name for extractor in self.extractors],
        )

    def supported_sources(self) -> List[str]:
        """Human-readable names of the supported site families, in priority order."""
        return [extractor.display_name for extractor in self.extractors]

    def find_extractor(self, url: str) -> Optional[BaseExtractor]:
        return next((e for e in self.extractors if e.can_handle(url)), None)

    async def parse_job_url(self, url: Optional[str]) -> JobParseResult:
        """
        Parse a job posting URL.

        Args:
            url: Job posting URL; surrounding whitespace is ignored

        Returns:
            JobParseResult: Always returned, failures included
        """
        if url is None or not url.strip():
            error = InvalidUrlException()
            self.logger.warning("Rejected empty job URL")
            return JobParseResult.failure(UNKNOWN_SOURCE, url, error.message)

        url = url.strip()
        with job_url_context(url):
            return await self._dispatch(url)

    async def _dispatch(self, url: str) -> JobParseResult:
        self.logger.info(f"Attempting to parse job URL: {url}")

        extractor = self.find_extractor(url)
        if extractor is None:
            error = UnsupportedUrlException(url, self.supported_sources())
            self.logger.warning(
                f"No suitable extractor found for URL: {url}",
                available=[e.name for e in self.extractors],
            )
            return JobParseResult.failure(UNKNOWN_SOURCE, url, error.message)

        self.logger.info(f"Using {extractor.name} extractor for URL: {url}")
        try:
            result = await extractor.parse(url)
        except Exception as e:
            log_error(e, context={"extractor": extractor.name, "url": url})
            return JobParseResult.failure(extractor.name, url, f"Parser error: {e}")

        if result.successful:
            self.logger.info(f"Successfully parsed job from {url} using {extractor.name}")
        else:
            self.logger.warning(
                f"Failed to parse job from {url} using {extractor.name}",
                error_message=result.error_message,
            )
        return result
