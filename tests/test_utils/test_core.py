"""
Test cases for exceptions, settings and logging helpers.
"""

import pytest
import structlog

from jobparser.core.config import Settings
from jobparser.core.exceptions import (
    ErrorCategory,
    ExtractionIncompleteException,
    FetchException,
    InvalidUrlException,
    QueueTimeoutException,
    RenderUnavailableException,
    UnsupportedUrlException,
)
from jobparser.utils.logger import (
    LoggerMixin,
    get_logger,
    job_url_context,
    log_error,
    log_performance_metric,
)


@pytest.mark.unit
class TestExceptions:
    """Test the exception hierarchy and its messages."""

    def setup_method(self):
        """Set up test fixtures."""
        self.url = "https://example.com/jobs/1"

    def test_invalid_url_message(self):
        """Test the blank URL message."""
        error = InvalidUrlException()

        assert error.message == "URL cannot be null or empty"
        assert error.category == ErrorCategory.VALIDATION

    @pytest.mark.parametrize("supported,expected", [
        (["Greenhouse", "Meta", "Microsoft"], "Only Greenhouse, Meta, and Microsoft URLs are supported."),
        (["Greenhouse", "Meta"], "Only Greenhouse and Meta URLs are supported."),
        (["Greenhouse"], "Only Greenhouse URLs are supported."),
    ])
    def test_unsupported_url_lists_families(self, supported, expected):
        """Test supported families are listed in the message."""
        error = UnsupportedUrlException(self.url, supported)

        assert error.message.endswith(expected)
        assert error.details["supported"] == supported

    def test_render_errors_are_fetch_errors(self):
        """Test rendering failures share the fetch failure base."""
        assert isinstance(RenderUnavailableException(url=self.url), FetchException)
        assert isinstance(QueueTimeoutException("late", budget_seconds=90, url=self.url), FetchException)

    def test_queue_timeout_details(self):
        """Test the timeout budget is kept on the exception."""
        error = QueueTimeoutException("late", budget_seconds=90, url=self.url)

        assert error.budget_seconds == 90
        assert error.details == {"url": self.url, "budget_seconds": 90}
        assert error.category == ErrorCategory.TIMEOUT

    def test_extraction_incomplete_message(self):
        """Test the field and hint are combined."""
        error = ExtractionIncompleteException("job title", "Try again later.")

        assert error.message == "Failed to extract job title. Try again later."
        assert error.field == "job title"

    def test_to_dict(self):
        """Test serialization for logging."""
        data = FetchException("boom", url=self.url).to_dict()

        assert data["error_code"] == "FETCH_FAILURE"
        assert data["category"] == "network"
        assert data["details"] == {"url": self.url}
        assert "timestamp" in data


@pytest.mark.unit
class TestSettings:
    """Test settings defaults and helpers."""

    def test_defaults(self):
        """Test the pipeline works unconfigured."""
        settings = Settings()

        assert settings.RENDER_MAX_CONCURRENT_INSTANCES >= 1
        assert settings.RENDER_ENABLED is True
        assert settings.HTTP_TIMEOUT_SECONDS > 0

    def test_extra_js_domains(self):
        """Test comma separated domains are split and normalized."""
        settings = Settings(RENDER_EXTRA_JS_DOMAINS=" Workday.com, ,lever.co ")

        assert settings.get_extra_js_domains() == ["workday.com", "lever.co"]

    def test_environment_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("RENDER_MAX_CONCURRENT_INSTANCES", "7")

        assert Settings().RENDER_MAX_CONCURRENT_INSTANCES == 7


@pytest.mark.unit
class TestLogging:
    """Test logging helpers do not raise."""

    def test_logger_mixin_names_class(self):
        """Test the mixin logger is usable."""
        class Worker(LoggerMixin):
            pass

        Worker().logger.info("Worker started", worker="test")

    def test_helpers(self):
        """Test error and metric helpers accept context."""
        log_error(ValueError("bad"), context={"url": "https://example.com"})
        log_performance_metric("parse_duration", 0.25, context={"extractor": "META"})
        get_logger(__name__).debug("Debug event", value=1)

    def test_job_url_context_binds_and_clears(self):
        """Test the job URL is bound only inside the block."""
        with job_url_context("https://example.com/jobs/1"):
            assert structlog.contextvars.get_contextvars()["job_url"] == "https://example.com/jobs/1"

        assert "job_url" not in structlog.contextvars.get_contextvars()
