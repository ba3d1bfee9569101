"""
Greenhouse Extractor

Extracts job postings from Greenhouse-hosted job boards
(boards.greenhouse.io, job-boards.greenhouse.io).
"""

import re
from typing import Optional, Tuple

from jobparser.schemas.job import CompensationInfo, ExperienceLevel, JobParseResult
from jobparser.scrapers.base import BaseExtractor
from jobparser.scrapers.document import Document, element_text, own_text
from jobparser.scrapers.utils import (
    ExperienceClassifier,
    company_from_title,
    company_from_url,
    extract_compensation,
    first_text,
    select_first,
    strip_apply_boilerplate,
)
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_COMPANY = "Unknown Company"

_DOLLAR_RANGE = re.compile(r"\$[\d,]+k?\s*(?:-|–|—|to)\s*\$?[\d,]+", re.IGNORECASE)
_DOLLAR_AMOUNT = re.compile(r"\$[\d,]+")


class GreenhouseExtractor(BaseExtractor):
    """
    Greenhouse job board extractor.

    Current boards use ``.job__*`` class names; older boards use ``.app-title``
    and ``.posting-*``. Both layouts are covered by the selector chains.
    """

    BOARD_MARKERS = ("job-boards.greenhouse.io/", "boards.greenhouse.io/")

    TITLE_SELECTORS = (
        ".job__title h1.section-header",
        "h1.section-header.section-header--large.font-primary",
        ".app-title",
        "h1.posting-headline",
        "h1",
    )
    COMPANY_SELECTORS = (".company-name", ".posting-company")
    LOCATION_SELECTORS = (".location", ".posting-location")
    LOCATION_HINTS = ("Remote", "United States", "San Francisco")
    DESCRIPTION_SELECTORS = (
        ".job__description.body",
        ".job__description div",
        ".job__description",
        "#content",
        ".posting-description",
        ".content",
        "main",
    )

    @property
    def name(self) -> str:
        return "GREENHOUSE"

    @property
    def display_name(self) -> str:
        return "Greenhouse"

    @property
    def url_markers(self) -> Tuple[str, ...]:
        return ("greenhouse.io", "boards.greenhouse.io", "job-boards.greenhouse.io")

    async def _extract(self, url: str) -> JobParseResult:
        document = await self.fetch_document(url)

        job_title = self.require_title(first_text(document, self.TITLE_SELECTORS), document)
        company = self._extract_company(document, url)
        location = self._extract_location(document)
        description = self._extract_description(document)
        compensation = self._extract_compensation(document)
        experience_level = self._extract_experience_level(document, job_title)

        logger.info(f"Parsed Greenhouse job: {job_title} at {company}", url=url)
        return self.build_result(
            url,
            job_title=job_title,
            company=company,
            location=location,
            description=description,
            compensation=compensation,
            experience_level=experience_level,
        )

    def _extract_company(self, document: Document, url: str) -> str:
        company = first_text(document, self.COMPANY_SELECTORS)
        if company:
            return company

        company = company_from_url(url, self.BOARD_MARKERS)
        if company:
            return company

        return company_from_title(document.title()) or UNKNOWN_COMPANY

    def _extract_location(self, document: Document) -> Optional[str]:
        container = document.select_one(".job__location")
        if container is not None:
            # Prefer a specific location over a bare "Remote" label
            for div in container.select("div"):
                text = own_text(div)
                if text and text != "Remote" and "svg" not in text and "icon" not in text:
                    return text
            text = element_text(container)
            if text:
                return text

        location = first_text(document, self.LOCATION_SELECTORS)
        if location:
            return location

        for hint in self.LOCATION_HINTS:
            matches = document.elements_containing_own_text(hint)
            if matches:
                return element_text(matches[0])
        return None

    def _extract_description(self, document: Document) -> Optional[str]:
        description = first_text(document, self.DESCRIPTION_SELECTORS)
        return strip_apply_boilerplate(description) or None

    def _extract_compensation(self, document: Document) -> CompensationInfo:
        salary_text = first_text(document, (".salary",))

        description = document.select_one(".job__description")
        if not salary_text and description is not None:
            for element in document.elements_containing_own_text("$", within=description):
                text = element_text(element)
                if "annual salary" in text.lower() or _DOLLAR_RANGE.search(text) or "USD" in text:
                    salary_text = text
                    break

            if not salary_text:
                description_text = element_text(description)
                dollar_index = description_text.find("$")
                if dollar_index >= 0 and ("—" in description_text or "–" in description_text):
                    window = description_text[max(0, dollar_index - 20):dollar_index + 50]
                    if _DOLLAR_AMOUNT.search(window):
                        salary_text = window

        if not salary_text:
            content = document.select_one("#content")
            if content is not None:
                matches = document.elements_containing_own_text("$", within=content)
                if matches:
                    salary_text = element_text(matches[0])

        return extract_compensation(salary_text)

    def _extract_experience_level(self, document: Document, job_title: str) -> Optional[ExperienceLevel]:
        content = select_first(document, (".job__description", "#content"))
        return ExperienceClassifier.from_title_and_description(
            job_title,
            element_text(content) if content is not None else None,
        )
