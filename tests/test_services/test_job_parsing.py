"""
Tests for the extraction dispatcher.
"""

import pytest

from jobparser.schemas.job import UNKNOWN_SOURCE, JobParseResult
from jobparser.scrapers import default_extractors
from jobparser.scrapers.document import Document
from jobparser.services.job_parsing import JobParsingService
from tests.conftest import GREENHOUSE_URL, META_URL, MICROSOFT_URL
from tests.fakes import fake_rendering


class RecordingExtractor:
    """Duck-typed extractor that records the URLs it is asked to parse."""

    def __init__(self, name, markers, error=None):
        self.name = name
        self.display_name = name.title()
        self.markers = markers
        self.error = error
        self.parsed = []

    def can_handle(self, url):
        return any(marker in url.lower() for marker in self.markers)

    async def parse(self, url):
        self.parsed.append(url)
        if self.error is not None:
            raise self.error
        return JobParseResult(successful=True, source=self.name, original_url=url, job_title="Engineer")


@pytest.mark.unit
class TestJobParsingService:
    """Test URL routing and failure handling."""

    @pytest.mark.parametrize("url", [None, "", "   ", "\t\n"])
    async def test_blank_url(self, url):
        """Test blank input fails without consulting extractors."""
        extractor = RecordingExtractor("ANY", ("",))
        service = JobParsingService([extractor])

        result = await service.parse_job_url(url)

        assert result.successful is False
        assert result.source == UNKNOWN_SOURCE
        assert result.error_message == "URL cannot be null or empty"
        assert extractor.parsed == []

    async def test_unsupported_url(self):
        """Test unsupported URLs list the supported site families."""
        service = JobParsingService(default_extractors(fake_rendering()))

        result = await service.parse_job_url("https://example.com/jobs/1")

        assert result.successful is False
        assert result.source == UNKNOWN_SOURCE
        assert result.original_url == "https://example.com/jobs/1"
        assert result.error_message == (
            "No suitable parser found for this URL. "
            "Only Greenhouse, Meta, and Microsoft URLs are supported."
        )

    async def test_url_trimmed_before_routing(self):
        """Test surrounding whitespace is ignored."""
        extractor = RecordingExtractor("GREENHOUSE", ("greenhouse.io",))
        service = JobParsingService([extractor])

        result = await service.parse_job_url(f"  {GREENHOUSE_URL}\n")

        assert result.successful is True
        assert extractor.parsed == [GREENHOUSE_URL]

    async def test_first_matching_extractor_used_exclusively(self):
        """Test only the highest-priority matching extractor runs."""
        first = RecordingExtractor("FIRST", ("example.com",))
        second = RecordingExtractor("SECOND", ("example.com",))
        service = JobParsingService([first, second])

        result = await service.parse_job_url("https://example.com/job")

        assert result.source == "FIRST"
        assert first.parsed == ["https://example.com/job"]
        assert second.parsed == []

    async def test_extractor_exception_contained(self):
        """Test an escaping extractor exception becomes a failure."""
        extractor = RecordingExtractor("BROKEN", ("example.com",), error=RuntimeError("boom"))
        service = JobParsingService([extractor])

        result = await service.parse_job_url("https://example.com/job")

        assert result.successful is False
        assert result.source == "BROKEN"
        assert result.error_message == "Parser error: boom"

    @pytest.mark.parametrize("url,source", [
        (GREENHOUSE_URL, "GREENHOUSE"),
        (META_URL, "META"),
        (MICROSOFT_URL, "MICROSOFT"),
    ])
    def test_default_routing(self, url, source):
        """Test each built-in family routes to its extractor."""
        service = JobParsingService(default_extractors(fake_rendering()))

        assert service.find_extractor(url).name == source

    def test_routing_is_deterministic(self):
        """Test repeated routing gives the same extractor."""
        service = JobParsingService(default_extractors(fake_rendering()))

        picks = {service.find_extractor(META_URL).name for _ in range(5)}

        assert picks == {"META"}

    def test_registry_is_immutable(self):
        """Test the registry is fixed at construction."""
        extractors = list(default_extractors(fake_rendering()))
        service = JobParsingService(extractors)
        extractors.clear()

        assert isinstance(service.extractors, tuple)
        assert service.supported_sources() == ["Greenhouse", "Meta", "Microsoft"]

    async def test_parse_with_real_extractor(self, greenhouse_html):
        """Test a routed parse returns the extractor's result."""
        rendering = fake_rendering(Document(greenhouse_html, GREENHOUSE_URL))
        service = JobParsingService(default_extractors(rendering))

        result = await service.parse_job_url(GREENHOUSE_URL)

        assert result.successful is True
        assert result.source == "GREENHOUSE"
        assert result.job_title == "Software Engineer"
