"""
Render Queue

Bounded pool of headless-browser renders. A fair asyncio semaphore admits at
most ``max_concurrent_instances`` renders at once; each admitted render runs
the blocking engine on a worker thread.
"""

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from jobparser.core.config import get_settings
from jobparser.core.exceptions import (
    QueueTimeoutException,
    RenderException,
    RenderUnavailableException,
)
from jobparser.schemas.job import RenderQueueStatus
from jobparser.scrapers.document import Document
from jobparser.scrapers.rendering_engine import RenderingEngine
from jobparser.utils.logger import LoggerMixin, log_performance_metric, log_render_event

# Time a signalled render has to exit before its task is cancelled
CANCEL_WAIT_SECONDS = 5.0


class RenderQueue(LoggerMixin):
    """
    Admission-controlled rendering of JavaScript pages.

    Counters are only touched on the event loop thread, between awaits, so
    ``status()`` never needs a lock. A permit is held until the render thread
    has actually exited; at shutdown renders are signalled to cancel and given
    ``CANCEL_WAIT_SECONDS`` to exit before their tasks are cancelled outright.

    Args:
        engine: Blocking renderer run on worker threads
        max_concurrent_instances: Size of the admission gate
        queue_timeout_seconds: Bound on waiting for a permit
        request_timeout_seconds: Bound on an admitted render
        default_wait_seconds: Client-side rendering allowance when none given
    """

    def __init__(
        self,
        engine: RenderingEngine,
        max_concurrent_instances: Optional[int] = None,
        queue_timeout_seconds: Optional[float] = None,
        request_timeout_seconds: Optional[float] = None,
        default_wait_seconds: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.engine = engine
        self.max_concurrent_instances = max_concurrent_instances or settings.RENDER_MAX_CONCURRENT_INSTANCES
        self.queue_timeout_seconds = queue_timeout_seconds or settings.RENDER_QUEUE_TIMEOUT_SECONDS
        self.request_timeout_seconds = request_timeout_seconds or settings.RENDER_REQUEST_TIMEOUT_SECONDS
        self.default_wait_seconds = (
            settings.RENDER_DEFAULT_WAIT_SECONDS if default_wait_seconds is None else default_wait_seconds
        )

        self._gate = asyncio.Semaphore(self.max_concurrent_instances)
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_concurrent_instances,
            thread_name_prefix="render-queue",
        )
        self._active = 0
        self._queued = 0
        self._accepting = True
        self._in_flight: Dict[asyncio.Task, threading.Event] = {}

        self._available = engine.probe()
        self.logger.info(
            "Render queue initialized",
            engine=engine.name,
            available=self._available,
            max_concurrent_instances=self.max_concurrent_instances,
            queue_timeout_seconds=self.queue_timeout_seconds,
            request_timeout_seconds=self.request_timeout_seconds,
        )

    @property
    def total_timeout_seconds(self) -> float:
        return self.queue_timeout_seconds + self.request_timeout_seconds

    def is_available(self) -> bool:
        """Whether a rendering engine was found at startup."""
        return self._available

    def status(self) -> RenderQueueStatus:
        """Point-in-time snapshot of the queue counters."""
        return RenderQueueStatus(
            active_instances=self._active,
            queued_requests=self._queued,
            max_concurrent_instances=self.max_concurrent_instances,
            available_slots=self.max_concurrent_instances - self._active,
        )

    async def fetch_rendered(self, url: str, wait_seconds: Optional[float] = None) -> Document:
        """
        Render a URL in a headless browser.

        Args:
            url: Page to render
            wait_seconds: Client-side rendering allowance; queue default when None

        Returns:
            Document: Parsed rendered HTML

        Raises:
            RenderUnavailableException: No rendering engine
            QueueTimeoutException: Permit or total time budget exceeded
            RenderException: The render itself failed
        """
        if not self._available:
            raise RenderUnavailableException(url=url)
        if not self._accepting:
            raise RenderException("Render queue is shutting down", url=url)

        wait = self.default_wait_seconds if wait_seconds is None else wait_seconds
        cancel_event = threading.Event()
        started = time.monotonic()

        task = asyncio.ensure_future(self._run(url, wait, cancel_event))
        self._in_flight[task] = cancel_event
        task.add_done_callback(self._on_task_done)

        try:
            html = await asyncio.wait_for(asyncio.shield(task), timeout=self.total_timeout_seconds)
        except asyncio.TimeoutError:
            cancel_event.set()
            raise QueueTimeoutException(
                f"Render request timed out after {self.total_timeout_seconds} seconds",
                budget_seconds=self.total_timeout_seconds,
                url=url,
            ) from None
        except asyncio.CancelledError:
            cancel_event.set()
            raise

        log_performance_metric(
            "render_duration",
            time.monotonic() - started,
            context={"url": url, "wait_seconds": wait},
        )
        return Document(html, url)

    async def _run(self, url: str, wait_seconds: float, cancel_event: threading.Event) -> str:
        self._queued += 1
        try:
            await asyncio.wait_for(self._gate.acquire(), timeout=self.queue_timeout_seconds)
        except asyncio.TimeoutError:
            raise QueueTimeoutException(
                f"Timeout waiting for available browser slot after {self.queue_timeout_seconds} seconds",
                budget_seconds=self.queue_timeout_seconds,
                url=url,
            ) from None
        finally:
            self._queued -= 1

        self._active += 1
        try:
            if cancel_event.is_set():
                raise RenderException("Render request abandoned before start", url=url)
            log_render_event("Render admitted", self.status(), url=url)
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                self._executor,
                self.engine.render,
                url,
                wait_seconds,
                self.request_timeout_seconds,
                cancel_event,
            )
        finally:
            self._active -= 1
            self._gate.release()
            log_render_event("Render released", self.status(), url=url)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._in_flight.pop(task, None)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.debug("Render task finished with error", error=str(error))

    async def shutdown(self, grace_seconds: Optional[float] = None) -> None:
        """
        Stop accepting renders and wait for in-flight ones.

        Work still running after the grace period is signalled to cancel and
        waited on briefly so its permit is released only once the render
        thread exits. Renders that ignore the signal are cancelled and the
        worker pool is shut down without waiting.
        """
        if grace_seconds is None:
            grace_seconds = get_settings().RENDER_SHUTDOWN_GRACE_SECONDS
        self._accepting = False

        pending = set(self._in_flight)
        if pending:
            self.logger.info(f"Waiting for {len(pending)} in-flight renders")
            _, pending = await asyncio.wait(pending, timeout=grace_seconds)

        if pending:
            self.logger.warning(f"Cancelling {len(pending)} renders after {grace_seconds}s grace period")
            for task in pending:
                cancel_event = self._in_flight.get(task)
                if cancel_event is not None:
                    cancel_event.set()
            _, pending = await asyncio.wait(pending, timeout=CANCEL_WAIT_SECONDS)

        for task in pending:
            self.logger.warning("Render ignored cancellation, abandoning its thread")
            task.cancel()

        self._executor.shutdown(wait=False, cancel_futures=True)
        self.logger.info("Render queue shut down")
