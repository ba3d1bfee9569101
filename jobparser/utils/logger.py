"""
Logging Configuration

structlog setup for the parsing pipeline. Events are JSON in production and
pretty-printed when DEBUG is on; the job URL being parsed is carried on every
event through context variables.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import structlog
from structlog.stdlib import LoggerFactory
from pythonjsonlogger import jsonlogger

from jobparser.core.config import Settings, get_settings

_configured = False


def _processors(settings: Settings) -> List[Any]:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.DEBUG:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(force: bool = False) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    structlog.configure(
        processors=_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    if settings.LOG_TO_FILE and not settings.DEBUG:
        logs_dir = Path(settings.LOG_DIR)
        logs_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(logs_dir / "jobparser.log")
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logging.getLogger().addHandler(handler)

    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module or component name."""
    return structlog.get_logger(name)


class LoggerMixin:
    """Gives a class a ``logger`` named after its module and class."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")


@contextmanager
def job_url_context(url: Optional[str]) -> Iterator[None]:
    """Bind ``job_url`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(job_url=url):
        yield


def log_scraping_activity(source: str, action: str, url: Optional[str] = None, **kwargs) -> None:
    """
    Record a fetch or extraction step.

    Args:
        source: Extractor name or fetch component
        action: Step being performed
        url: Page involved
        **kwargs: Step details such as strategy or element counts
    """
    get_logger("scraping").info(f"{source}: {action}", source=source, action=action, url=url, **kwargs)


def log_render_event(event: str, status: Any, url: Optional[str] = None, **kwargs) -> None:
    """Record a render queue transition together with the queue snapshot."""
    get_logger("render_queue").debug(
        event,
        url=url,
        active=status.active_instances,
        queued=status.queued_requests,
        available=status.available_slots,
        **kwargs
    )


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None, **kwargs) -> None:
    """
    Log an exception, including structured details for application errors.

    Args:
        error: Exception that occurred
        context: Where it happened
    """
    details = error.to_dict() if hasattr(error, "to_dict") else {"message": str(error)}
    get_logger("errors").error(
        f"{type(error).__name__}: {error}",
        error=details,
        context=context or {},
        exc_info=error,
        **kwargs
    )


def log_performance_metric(
    metric_name: str,
    value: float,
    unit: str = "seconds",
    context: Optional[Dict[str, Any]] = None,
) -> None:
    get_logger("performance").info(
        "Performance metric",
        metric=metric_name,
        value=round(value, 4),
        unit=unit,
        context=context or {},
    )


# Configure logging on import
configure_logging()
