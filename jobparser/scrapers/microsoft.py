"""
Microsoft Extractor

Extracts job postings from Microsoft careers sites. These pages are React
applications, so documents are fetched with strategy escalation and checked
for job content before extraction.
"""

import re
from typing import List, Optional, Tuple

from bs4.element import Tag

from jobparser.core.exceptions import ExtractionIncompleteException
from jobparser.schemas.job import CompensationInfo, JobParseResult
from jobparser.scrapers.base import BaseExtractor, DocumentAnalysis, remediation_hint
from jobparser.scrapers.document import Document, element_text
from jobparser.scrapers.utils import (
    ExperienceClassifier,
    extract_compensation,
    first_text,
)
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)

COMPANY_NAME = "Microsoft"
PAGE_TITLE_SUFFIX = " | Microsoft Careers"
TITLE_PLACEHOLDER = "Job you selected"
RENDER_WAIT_SECONDS = 10

_JOB_ID = re.compile(r"/job/(\d+)(?:/|$|\?)")


def extract_job_id(url: Optional[str]) -> Optional[str]:
    """Numeric job id from a ``.../job/<id>/...`` careers URL."""
    if not url:
        return None
    match = _JOB_ID.search(url)
    return match.group(1) if match else None


def _is_generic_heading(text: str) -> bool:
    lowered = text.lower()
    return "search" in lowered or "careers" in lowered or "microsoft" in lowered


class MicrosoftExtractor(BaseExtractor):
    """Microsoft careers extractor."""

    TITLE_SELECTORS = (
        "h1[style*='font-weight'][style*='font-size']",
        ".SearchJobDetailsCard h1",
        ".ms-DocumentCard h1",
        "div[role='group'] h1",
    )
    TITLE_ATTRIBUTE_SELECTORS = (
        "[data-automation-id*='jobTitle']",
        "[aria-label*='job title']",
        "[data-testid*='job-title']",
        "h1.job-title",
    )
    LOCATION_HINTS = ("Redmond, Washington", "Seattle, Washington", "Remote", "United States")
    LOCATION_WORDS = ("Redmond", "Seattle", "Washington", "United States", "Remote")
    SECTIONS = ("Overview", "Qualifications", "Responsibilities")
    DESCRIPTION_SELECTORS = (
        ".ms-DocumentCard",
        "main[id='main-content']",
        "[data-testid='job-description']",
        ".job-description",
        "main",
    )
    SALARY_WORDS = ("per year", "/year", "annually", "USD")

    @property
    def name(self) -> str:
        return "MICROSOFT"

    @property
    def display_name(self) -> str:
        return "Microsoft"

    @property
    def url_markers(self) -> Tuple[str, ...]:
        return (
            "careers.microsoft.com",
            "jobs.careers.microsoft.com",
            "microsoft.com/careers",
            "microsoft.com/jobs",
            "jobs.microsoft.com",
        )

    async def _extract(self, url: str) -> JobParseResult:
        document = await self.fetch_with_escalation(url, RENDER_WAIT_SECONDS)

        analysis = self.analyze_document(document)
        logger.debug(
            "Microsoft document analysis",
            url=url,
            title=analysis.title,
            elements=analysis.element_count,
            has_job_content=analysis.has_job_content,
            js_shell=analysis.looks_like_js_shell,
        )
        if not analysis.has_job_content and analysis.looks_like_js_shell:
            hint = remediation_hint(analysis, self.rendering.is_available())
            job_id = extract_job_id(url)
            if job_id:
                hint += f" Job ID {job_id} can be searched manually on the Microsoft careers site."
            raise ExtractionIncompleteException("job content", hint)

        job_title = self.require_title(self._extract_job_title(document), document)
        location = self._extract_location(document)
        description = self._extract_description(document)
        compensation = self._extract_compensation(document)
        experience_level = ExperienceClassifier.from_title_and_description(
            job_title,
            description or first_text(document, ("main",)),
        )

        logger.info(f"Parsed Microsoft job: {job_title}", url=url)
        return self.build_result(
            url,
            job_title=job_title,
            company=COMPANY_NAME,
            location=location,
            description=description,
            compensation=compensation,
            experience_level=experience_level,
        )

    def analyze_document(self, document: Document) -> DocumentAnalysis:
        """Microsoft pages count as job content when they show a job heading, sections or pay."""
        title = document.title()
        text = document.text()
        element_count = document.element_count()

        has_job_heading = any(
            not _is_generic_heading(element_text(h1))
            for h1 in document.select("h1")
            if element_text(h1)
        )
        has_sections = bool(document.select(
            ", ".join(f"h3:-soup-contains('{section}')" for section in self.SECTIONS)
        ))
        has_salary = "Microsoft" in text and "$" in text
        has_job_content = has_job_heading or has_sections or has_salary

        return DocumentAnalysis(
            title=title,
            element_count=element_count,
            text_length=len(text),
            has_job_content=has_job_content,
            looks_like_js_shell=not has_job_content and (
                element_count < 50
                or "Search Jobs" in title
                or ("Microsoft Careers" in title and "- Microsoft" not in title)
            ),
        )

    def _title_from_page_title(self, document: Document) -> Optional[str]:
        page_title = document.title()
        if PAGE_TITLE_SUFFIX not in page_title:
            return None
        title = page_title.replace(PAGE_TITLE_SUFFIX, "").strip()
        if not title or "search jobs" in title.lower() or title.lower() == "microsoft careers":
            return None
        return title

    def _extract_job_title(self, document: Document) -> Optional[str]:
        title = self._title_from_page_title(document)
        if title:
            return title

        title = first_text(
            document,
            self.TITLE_SELECTORS,
            predicate=lambda el: element_text(el) != TITLE_PLACEHOLDER,
        )
        if title:
            return title

        for h1 in document.select("h1"):
            text = element_text(h1)
            if len(text) > 5 and text != TITLE_PLACEHOLDER and not _is_generic_heading(text):
                return text

        return first_text(
            document,
            self.TITLE_ATTRIBUTE_SELECTORS + ("h1",),
            predicate=lambda el: element_text(el) != TITLE_PLACEHOLDER,
        )

    def _extract_location(self, document: Document) -> Optional[str]:
        for p in document.select("p[style*='font-size: 14px']"):
            text = element_text(p)
            if "," in text and (
                any(word in text for word in ("United States", "Washington", "Remote", "WA"))
                or len(text) < 100
            ):
                return text

        location = first_text(document, (".ms-Stack-inner p",))
        if location:
            return location

        for p in document.select("p"):
            text = element_text(p)
            if len(text) < 100 and any(word in text for word in self.LOCATION_WORDS):
                return text

        for hint in self.LOCATION_HINTS:
            matches = document.elements_containing_own_text(hint)
            if matches:
                return element_text(matches[0])

        return first_text(document, ("[data-testid='job-location']", ".job-location"))

    def _section_content(self, document: Document, section: str) -> Optional[str]:
        header = document.select_one(f"h3:-soup-contains('{section}')")
        if header is None:
            return None
        content: Optional[Tag] = header.find_next_sibling()
        return element_text(content) if content is not None else None

    def _extract_description(self, document: Document) -> Optional[str]:
        parts: List[str] = []
        for section in self.SECTIONS:
            content = self._section_content(document, section)
            if content:
                parts.append(f"{section}:\n{content}")
        if parts:
            return "\n\n".join(parts)

        container = None
        for selector in self.DESCRIPTION_SELECTORS:
            container = document.select_one(selector)
            if container is not None:
                break
        if container is None:
            return None

        blocks = [
            element_text(block)
            for block in container.select("h3, p, ul, ol, div[class*='description']")
        ]
        blocks = [block for block in blocks if len(block) > 10]
        if blocks:
            return "\n\n".join(blocks)
        return element_text(container) or None

    def _extract_compensation(self, document: Document) -> CompensationInfo:
        salary_text = first_text(document, ("[data-testid='salary']",))
        if salary_text:
            return extract_compensation(salary_text)

        sentences = [s.strip() for s in document.text().split(".")]
        # Ranges quoted as "USD $161,600 - $286,200 per year"
        for sentence in sentences:
            if "$" in sentence and "USD" in sentence and "-" in sentence and "year" in sentence:
                return extract_compensation(sentence)
        for sentence in sentences:
            if "$" in sentence and any(word in sentence for word in self.SALARY_WORDS):
                return extract_compensation(sentence)

        for element in document.elements_containing_own_text("$"):
            text = element_text(element)
            if "USD" in text or "year" in text or "annual" in text:
                return extract_compensation(text)

        return extract_compensation(None)
