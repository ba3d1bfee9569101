"""
Simple Dependency Container

Builds the job parsing pipeline once and owns its lifecycle.
"""

from typing import Any, Dict, Optional

from jobparser.core.config import Settings, get_settings
from jobparser.schemas.job import JobParseResult
from jobparser.scrapers import default_extractors
from jobparser.scrapers.fetcher import ContentFetcher
from jobparser.scrapers.rendering_engine import RenderingEngine, create_rendering_engine
from jobparser.services.job_parsing import JobParsingService
from jobparser.services.render_queue import RenderQueue
from jobparser.services.rendering import RenderingService
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)


class SimpleContainer:
    """Simple dependency injection container."""

    def __init__(self):
        self._instances: Dict[str, Any] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[ContentFetcher] = None,
        engine: Optional[RenderingEngine] = None,
    ):
        """
        Initialize container and dependencies.

        Args:
            settings: Settings override, defaults to environment settings
            fetcher: Content fetcher override
            engine: Rendering engine override
        """
        if self._initialized:
            return

        logger.info("Initializing job parsing pipeline...")

        settings = settings or get_settings()
        self._instances["settings"] = settings

        fetcher = fetcher or ContentFetcher(timeout_seconds=settings.HTTP_TIMEOUT_SECONDS)
        self._instances["fetcher"] = fetcher

        render_queue = RenderQueue(
            engine or create_rendering_engine(settings),
            max_concurrent_instances=settings.RENDER_MAX_CONCURRENT_INSTANCES,
            queue_timeout_seconds=settings.RENDER_QUEUE_TIMEOUT_SECONDS,
            request_timeout_seconds=settings.RENDER_REQUEST_TIMEOUT_SECONDS,
            default_wait_seconds=settings.RENDER_DEFAULT_WAIT_SECONDS,
        )
        self._instances["render_queue"] = render_queue

        rendering = RenderingService(fetcher, render_queue, settings.get_extra_js_domains())
        self._instances["rendering_service"] = rendering

        self._instances["job_parsing_service"] = JobParsingService(default_extractors(rendering))

        self._initialized = True
        logger.info(
            "Container initialized successfully",
            rendering_available=rendering.is_available(),
            engines=rendering.describe_engines(),
        )

    async def shutdown(self):
        """Shutdown container and cleanup resources."""
        if not self._initialized:
            return
        logger.info("Shutting down container...")

        settings: Settings = self._instances["settings"]
        await self._instances["render_queue"].shutdown(settings.RENDER_SHUTDOWN_GRACE_SECONDS)
        await self._instances["fetcher"].aclose()

        self._instances.clear()
        self._initialized = False
        logger.info("Container shutdown complete")

    def get(self, name: str) -> Any:
        """Get dependency by name."""
        return self._instances.get(name)

    @property
    def job_parsing_service(self) -> JobParsingService:
        return self._instances["job_parsing_service"]

    @property
    def rendering_service(self) -> RenderingService:
        return self._instances["rendering_service"]


# Global container instance
container = SimpleContainer()


async def init_container(**overrides):
    """Initialize the global container."""
    await container.initialize(**overrides)


async def shutdown_container():
    """Shutdown the global container."""
    await container.shutdown()


def get_container() -> SimpleContainer:
    """Get the global container instance."""
    return container


async def parse_job_url(url: Optional[str]) -> JobParseResult:
    """
    Parse a job posting URL with the global pipeline.

    Initializes the container on first use.
    """
    if not container.initialized:
        await container.initialize()
    return await container.job_parsing_service.parse_job_url(url)
