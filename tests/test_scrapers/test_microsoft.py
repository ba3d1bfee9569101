"""
Tests for the Microsoft extractor.
"""

import pytest

from jobparser.schemas.job import CompensationType, ExperienceLevel
from jobparser.scrapers.document import Document
from jobparser.scrapers.microsoft import RENDER_WAIT_SECONDS, MicrosoftExtractor, extract_job_id
from tests.conftest import MICROSOFT_URL
from tests.fakes import fake_rendering

SHELL_HTML = """
<html>
  <head><title>Microsoft Careers</title></head>
  <body><div id="root"></div><script src="/bundle.js"></script></body>
</html>
"""


@pytest.mark.unit
class TestExtractJobId:
    """Test job id parsing from careers URLs."""

    @pytest.mark.parametrize("url,job_id", [
        (MICROSOFT_URL, "1818936"),
        ("https://careers.microsoft.com/us/en/job/1234567?src=x", "1234567"),
        ("https://careers.microsoft.com/us/en/job/7654321", "7654321"),
        ("https://careers.microsoft.com/us/en/search", None),
        (None, None),
    ])
    def test_extract_job_id(self, url, job_id):
        """Test numeric ids are found and absent ones give None."""
        assert extract_job_id(url) == job_id


@pytest.mark.scraper
class TestMicrosoftExtractor:
    """Test Microsoft careers extraction."""

    def test_can_handle(self):
        """Test careers hosts are recognized."""
        extractor = MicrosoftExtractor(fake_rendering())

        assert extractor.can_handle(MICROSOFT_URL)
        assert extractor.can_handle("https://careers.microsoft.com/us/en/job/1")
        assert not extractor.can_handle("https://www.microsoft.com/en-us/store")

    async def test_static_page(self, microsoft_html):
        """Test extraction from a fully populated page."""
        rendering = fake_rendering(Document(microsoft_html, MICROSOFT_URL), available=False)

        result = await MicrosoftExtractor(rendering).parse(MICROSOFT_URL)

        assert result.successful is True
        assert result.source == "MICROSOFT"
        assert result.job_title == "Principal Software Engineer"
        assert result.company == "Microsoft"
        assert result.location == "Redmond, Washington, United States"
        assert result.description == (
            "Overview:\nJoin the Azure team to build cloud services.\n\n"
            "Qualifications:\nBachelor's degree and 8+ years of experience.\n\n"
            "Responsibilities:\nOwn the architecture of core services."
        )
        assert result.compensation == 223900.0
        assert result.compensation_type == CompensationType.ANNUAL
        assert result.experience_level == ExperienceLevel.SENIOR
        rendering.fetch_rendered.assert_not_awaited()

    async def test_complete_render_accepted_without_fallbacks(self, microsoft_html):
        """Test a complete rendered page is used directly."""
        filler = "".join(
            "<li>Benefits include comprehensive health coverage for you and your family.</li>"
            for _ in range(100)
        )
        html = microsoft_html.replace("</main>", f"<ul>{filler}</ul></main>")
        rendering = fake_rendering(Document(html, MICROSOFT_URL), available=True)

        result = await MicrosoftExtractor(rendering).parse(MICROSOFT_URL)

        assert result.successful is True
        assert result.job_title == "Principal Software Engineer"
        rendering.fetch_rendered.assert_awaited_once_with(MICROSOFT_URL, RENDER_WAIT_SECONDS)
        rendering.fetch_enhanced.assert_not_awaited()
        rendering.fetch_static.assert_not_awaited()

    async def test_js_shell_without_rendering(self):
        """Test an unrendered shell page fails with guidance and the job id."""
        rendering = fake_rendering(Document(SHELL_HTML, MICROSOFT_URL), available=False)

        result = await MicrosoftExtractor(rendering).parse(MICROSOFT_URL)

        assert result.successful is False
        assert result.source == "MICROSOFT"
        assert result.error_message.startswith("Failed to extract job content.")
        assert "JavaScript rendering" in result.error_message
        assert "Job ID 1818936" in result.error_message

    async def test_placeholder_title_skipped(self):
        """Test the "Job you selected" placeholder is never used as a title."""
        html = """
        <html><head><title>Careers</title></head>
        <body>
          <div role="group"><h1 style="font-weight: 600; font-size: 20px">Job you selected</h1></div>
          <h1>Senior Data Engineer</h1>
          <h3>Overview</h3><div>Build data platforms for Azure.</div>
        </body></html>
        """
        rendering = fake_rendering(Document(html, MICROSOFT_URL))

        result = await MicrosoftExtractor(rendering).parse(MICROSOFT_URL)

        assert result.job_title == "Senior Data Engineer"
        assert result.description == "Overview:\nBuild data platforms for Azure."
