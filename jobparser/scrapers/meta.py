"""
Meta Extractor

Extracts job postings from Meta careers pages (metacareers.com and the older
facebook.com/careers and meta.com/careers paths).
"""

import re
from typing import List, Optional, Tuple

from bs4.element import Tag

from jobparser.schemas.job import CompensationInfo, JobParseResult
from jobparser.scrapers.base import BaseExtractor
from jobparser.scrapers.document import Document, element_text
from jobparser.scrapers.utils import (
    ExperienceClassifier,
    extract_compensation,
    first_text,
)
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)

COMPANY_NAME = "Meta"

_TRAILING_SEPARATOR = re.compile(r"\s*•\s*$")


class MetaExtractor(BaseExtractor):
    """
    Meta careers extractor.

    Meta's job pages use generated class names; the structured description
    is a main paragraph followed by titled sections of bullet items.
    """

    TITLE_SELECTORS = ("._army", "h1[data-testid='job-title']", "h1.job-title", "h1")
    LOCATION_ITEM_SELECTOR = "._careersV2RefreshJobDetailPage__location2024"
    LOCATION_SELECTORS = ("[data-testid='job-location']", ".job-location")
    LOCATION_HINTS = ("Remote", ", CA", "United States")

    CONTENT_SELECTOR = "._8muv._ar_h"
    MAIN_PARAGRAPH_SELECTOR = "._1n-_._6hy-._94t2"
    SECTION_HEADER_SELECTOR = "._1n-z._6hy-._8lfs"
    SECTION_ITEM_SELECTOR = "._1n-_._6hy-._8lf-"
    SECTIONS = ("Responsibilities", "Minimum Qualifications", "Preferred Qualifications")

    DESCRIPTION_SELECTORS = ("[data-testid='job-description']", ".job-description", "div[role='main']", "main")
    SALARY_MARKERS = ("/hour", "/year", "bonus", "equity")

    @property
    def name(self) -> str:
        return "META"

    @property
    def display_name(self) -> str:
        return "Meta"

    @property
    def url_markers(self) -> Tuple[str, ...]:
        return ("metacareers.com", "facebook.com/careers", "meta.com/careers")

    async def _extract(self, url: str) -> JobParseResult:
        document = await self.fetch_document(url)

        job_title = self.require_title(first_text(document, self.TITLE_SELECTORS), document)
        location = self._extract_location(document)
        description = self._extract_description(document)
        compensation = self._extract_compensation(document)
        experience_level = ExperienceClassifier.from_title_and_description(job_title, description)

        logger.info(f"Parsed Meta job: {job_title}", url=url)
        return self.build_result(
            url,
            job_title=job_title,
            company=COMPANY_NAME,
            location=location,
            description=description,
            compensation=compensation,
            experience_level=experience_level,
        )

    def _extract_location(self, document: Document) -> Optional[str]:
        locations = []
        for item in document.select(self.LOCATION_ITEM_SELECTOR):
            text = _TRAILING_SEPARATOR.sub("", element_text(item)).strip()
            if text:
                locations.append(text)
        if locations:
            return ", ".join(locations)

        location = first_text(document, self.LOCATION_SELECTORS)
        if location:
            return location

        for hint in self.LOCATION_HINTS:
            matches = document.elements_containing_own_text(hint)
            if matches:
                return element_text(matches[0])
        return None

    def _section_items(self, header: Tag) -> List[str]:
        items = header.find_next_sibling()
        if items is None:
            return []
        return [element_text(item) for item in items.select(self.SECTION_ITEM_SELECTOR)]

    def _extract_description(self, document: Document) -> Optional[str]:
        container = document.select_one(self.CONTENT_SELECTOR)
        parts: List[str] = []

        if container is not None:
            main_paragraph = container.select_one(self.MAIN_PARAGRAPH_SELECTOR)
            if main_paragraph is not None:
                parts.append(element_text(main_paragraph))

            headers = container.select(self.SECTION_HEADER_SELECTOR)
            for section in self.SECTIONS:
                header = next((h for h in headers if section in element_text(h)), None)
                if header is None:
                    continue
                items = self._section_items(header)
                parts.append(f"{section}:\n" + "\n".join(f"• {item}" for item in items))

        if parts:
            return "\n\n".join(part for part in parts if part).strip() or None

        return first_text(document, self.DESCRIPTION_SELECTORS)

    def _extract_compensation(self, document: Document) -> CompensationInfo:
        salary_text = first_text(document, ("[data-testid='salary']",))

        if not salary_text:
            container = document.select_one(self.CONTENT_SELECTOR)
            if container is not None:
                for element in document.elements_containing_own_text("$", within=container):
                    text = element_text(element)
                    if any(marker in text for marker in self.SALARY_MARKERS):
                        salary_text = text
                        break

        if not salary_text:
            matches = document.elements_containing_own_text("$")
            if matches:
                salary_text = element_text(matches[0])

        return extract_compensation(salary_text)
