"""
Custom Exceptions for Job Parser

Pipeline exceptions with user-facing messages and stable error codes.
Extractors convert all of these into failed JobParseResults before they
reach the dispatcher's caller.
"""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    UNSUPPORTED = "unsupported"
    NETWORK = "network"
    PARSING = "parsing"
    RENDERING = "rendering"
    TIMEOUT = "timeout"
    EXTRACTION = "extraction"
    SYSTEM = "system"


class BaseApplicationException(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent error handling
    and user-friendly error messages.
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.suggested_action = suggested_action
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "suggested_action": self.suggested_action,
        }


# Input Exceptions
class InvalidUrlException(BaseApplicationException):
    """Exception for a missing or blank job URL."""

    def __init__(self, message: str = "URL cannot be null or empty", **kwargs):
        super().__init__(
            message=message,
            error_code="INVALID_INPUT",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            suggested_action="Provide the full URL of a job posting",
            **kwargs
        )


class UnsupportedUrlException(BaseApplicationException):
    """Exception for URLs no extractor can handle."""

    def __init__(self, url: Optional[str], supported: List[str], **kwargs):
        if len(supported) > 2:
            families = ", ".join(supported[:-1]) + f", and {supported[-1]}"
        else:
            families = " and ".join(supported)
        super().__init__(
            message=(
                "No suitable parser found for this URL. "
                f"Only {families} URLs are supported."
            ),
            error_code="UNSUPPORTED_URL",
            category=ErrorCategory.UNSUPPORTED,
            severity=ErrorSeverity.LOW,
            details={"url": url, "supported": supported},
            **kwargs
        )


# Fetch Exceptions
class FetchException(BaseApplicationException):
    """Exception for network, HTTP, decompression or charset failures."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "FETCH_FAILURE")
        kwargs.setdefault("category", ErrorCategory.NETWORK)
        details = kwargs.pop("details", None) or {}
        details.setdefault("url", url)
        super().__init__(message=message, details=details, **kwargs)
        self.url = url


class DocumentParseException(FetchException):
    """Exception for content that could not be turned into a document."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            url=url,
            error_code="DOCUMENT_PARSE_ERROR",
            category=ErrorCategory.PARSING,
            **kwargs
        )


class RenderException(FetchException):
    """Exception for a failed browser render."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "RENDER_FAILURE")
        kwargs.setdefault("category", ErrorCategory.RENDERING)
        super().__init__(message, url=url, **kwargs)


class RenderUnavailableException(RenderException):
    """Exception raised when the rendering engine is not installed or disabled."""

    def __init__(self, url: Optional[str] = None, **kwargs):
        super().__init__(
            "Rendering unavailable - cannot render JavaScript",
            url=url,
            error_code="RENDER_UNAVAILABLE",
            severity=ErrorSeverity.LOW,
            suggested_action="Install selenium and a Chrome/Chromium browser, or set RENDER_ENABLED=true",
            **kwargs
        )


class QueueTimeoutException(RenderException):
    """Exception for render requests that exceeded their time budget."""

    def __init__(self, message: str, budget_seconds: float, url: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            url=url,
            error_code="QUEUE_TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            severity=ErrorSeverity.HIGH,
            details={"url": url, "budget_seconds": budget_seconds},
            suggested_action="Retry later or raise RENDER_MAX_CONCURRENT_INSTANCES",
            **kwargs
        )
        self.budget_seconds = budget_seconds


# Extraction Exceptions
class ExtractionIncompleteException(BaseApplicationException):
    """Exception for documents missing a required field such as the job title."""

    def __init__(self, field: str, hint: str, **kwargs):
        super().__init__(
            message=f"Failed to extract {field}. {hint}",
            error_code="EXTRACTION_INCOMPLETE",
            category=ErrorCategory.EXTRACTION,
            severity=ErrorSeverity.MEDIUM,
            details={"field": field},
            suggested_action=hint,
            **kwargs
        )
        self.field = field
