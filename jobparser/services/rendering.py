"""
Rendering Service

Decides between static fetching and browser rendering for a URL and exposes
both strategies to the extractors.
"""

from typing import Iterable, List, Optional, Tuple

from jobparser.core.exceptions import FetchException, RenderUnavailableException
from jobparser.schemas.job import RenderQueueStatus
from jobparser.scrapers.document import Document
from jobparser.scrapers.fetcher import ContentFetcher
from jobparser.services.render_queue import RenderQueue
from jobparser.utils.logger import LoggerMixin

# Sites known to build job content client-side
JS_HEAVY_DOMAINS: Tuple[str, ...] = (
    "careers.microsoft.com",
    "jobs.careers.microsoft.com",
    "metacareers.com",
    "careers.google.com",
    "amazon.jobs",
    "netflix.jobs",
    "uber.com/careers",
    "airbnb.com/careers",
)


class RenderingService(LoggerMixin):
    """
    Render decision layer in front of the content fetcher and render queue.

    Args:
        fetcher: Static content fetcher
        render_queue: Browser render queue
        extra_domains: Additional URL fragments treated as JavaScript-heavy
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        render_queue: RenderQueue,
        extra_domains: Iterable[str] = (),
    ) -> None:
        self.fetcher = fetcher
        self.render_queue = render_queue
        self.js_domains: Tuple[str, ...] = JS_HEAVY_DOMAINS + tuple(d.lower() for d in extra_domains)

    def likely_requires_rendering(self, url: Optional[str]) -> bool:
        """Whether the URL belongs to a site that renders jobs with JavaScript."""
        if not url:
            return False
        lowered = url.lower()
        return any(domain in lowered for domain in self.js_domains)

    def is_available(self) -> bool:
        return self.render_queue.is_available()

    def status(self) -> RenderQueueStatus:
        return self.render_queue.status()

    def describe_engines(self) -> List[str]:
        """Names of the rendering engines usable in this process."""
        if not self.is_available():
            return []
        return self.render_queue.engine.describe()

    async def fetch_static(self, url: str) -> Document:
        return await self.fetcher.fetch(url)

    async def fetch_enhanced(self, url: str) -> Document:
        return await self.fetcher.fetch_with_enhanced_headers(url)

    async def fetch_rendered(self, url: str, wait_seconds: Optional[float] = None) -> Document:
        """
        Render a URL through the render queue.

        Raises:
            RenderUnavailableException: No rendering engine in this process
            QueueTimeoutException: Render budget exceeded
            RenderException: The render failed
        """
        if not self.is_available():
            raise RenderUnavailableException(url=url)
        return await self.render_queue.fetch_rendered(url, wait_seconds)

    async def fetch_best(
        self,
        url: str,
        wait_seconds: Optional[float] = None,
        force_render: bool = False,
    ) -> Document:
        """
        Fetch with rendering for JavaScript-heavy sites, statically otherwise.

        A failed render falls back to the static fetch.

        Args:
            url: Page to fetch
            wait_seconds: Client-side rendering allowance
            force_render: Render even when the URL is not on the allow-list
        """
        if (force_render or self.likely_requires_rendering(url)) and self.is_available():
            try:
                return await self.fetch_rendered(url, wait_seconds)
            except FetchException as e:
                self.logger.warning(
                    "Render failed, falling back to static fetch",
                    url=url,
                    error=e.message,
                )
        return await self.fetch_static(url)
