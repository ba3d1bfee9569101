"""
Scraper Utilities

Text cleanup, selector-fallback chains and the compensation and experience
heuristics shared by all extractors.
"""

import re
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from jobparser.schemas.job import CompensationInfo, CompensationType, ExperienceLevel
from jobparser.scrapers.document import Document, element_text
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

_APPLY_BOILERPLATE = (
    re.compile(r"apply for this job.*$", re.IGNORECASE | re.DOTALL),
    re.compile(r"submit application.*$", re.IGNORECASE | re.DOTALL),
)

SelectorChain = Sequence[str]
Searchable = Union[Document, BeautifulSoup, Tag]


def clean_text(text: Optional[str]) -> Optional[str]:
    """
    Collapse whitespace runs to single spaces and trim.

    Idempotent; ``None`` passes through.
    """
    if text is None:
        return None
    return _WHITESPACE.sub(" ", text).strip()


def clean_multiline(text: Optional[str]) -> Optional[str]:
    """Like ``clean_text`` but keeps line breaks, with at most one blank line in a row."""
    if text is None:
        return None
    lines = [_WHITESPACE.sub(" ", line).strip() for line in text.splitlines()]
    kept = []
    for line in lines:
        if line or (kept and kept[-1]):
            kept.append(line)
    return "\n".join(kept).strip()


def strip_apply_boilerplate(text: Optional[str]) -> Optional[str]:
    """Remove trailing "apply for this job" / "submit application" sections."""
    if not text:
        return text
    for pattern in _APPLY_BOILERPLATE:
        text = pattern.sub("", text)
    return text.strip()


def truncate_field(value: Optional[str], max_length: int, field_name: str) -> Optional[str]:
    """Hard-truncate a field to its storage limit, logging when it happens."""
    if value is None or len(value) <= max_length:
        return value
    logger.warning(
        f"Truncating {field_name} from {len(value)} to {max_length} characters"
    )
    return value[:max_length]


def select_first(
    root: Searchable,
    selectors: SelectorChain,
    predicate: Optional[Callable[[Tag], bool]] = None,
) -> Optional[Tag]:
    """
    Evaluate a selector-fallback chain.

    Args:
        root: Document or element to query
        selectors: CSS selectors in priority order
        predicate: Optional extra acceptance test for a matched element

    Returns:
        Optional[Tag]: First element with non-empty text that passes the predicate
    """
    for selector in selectors:
        for element in root.select(selector):
            if not element_text(element):
                continue
            if predicate is None or predicate(element):
                return element
    return None


def first_text(
    root: Searchable,
    selectors: SelectorChain,
    predicate: Optional[Callable[[Tag], bool]] = None,
) -> Optional[str]:
    """Text of the first match of a selector-fallback chain, or None."""
    element = select_first(root, selectors, predicate)
    return element_text(element) if element is not None else None


def company_from_url(url: str, board_markers: Iterable[str]) -> Optional[str]:
    """
    Company slug following a job-board host, first letter capitalized.

    ``https://boards.greenhouse.io/acme/jobs/1`` gives ``Acme``. Embedded
    boards carry the slug in the ``for`` query parameter instead.
    """
    if not url:
        return None
    for marker in board_markers:
        index = url.find(marker)
        if index < 0:
            continue
        slug = url[index + len(marker):].split("/")[0].split("?")[0].split("#")[0]
        if slug == "embed":
            slug = (parse_qs(urlparse(url).query).get("for") or [""])[0]
        if slug:
            return slug[0].upper() + slug[1:]
    return None


def company_from_title(title: Optional[str]) -> Optional[str]:
    """Company from a "<Job> at <Company> - <Site>" page title."""
    if not title or " at " not in title:
        return None
    company = title.split(" at ", 1)[1].split(" - ")[0].strip()
    return company or None


class CompensationParser:
    """
    Dollar-amount compensation heuristics.

    Ranges resolve to their mean. The unit decides the type; without a unit
    small amounts are taken as hourly and large ones as annual.
    """

    PATTERN = re.compile(
        r"\$\s?(?P<low>\d[\d,]*(?:\.\d+)?)(?P<low_k>k\b)?"
        r"(?:\s*(?:-|–|—|to)\s*\$?\s?(?P<high>\d[\d,]*(?:\.\d+)?)(?P<high_k>k\b)?)?"
        r"(?:\s*(?P<unit>k\b|thousand|per\s+year|a\s+year|annually|annual|/\s*year|/\s*yr"
        r"|per\s+hour|an\s+hour|/\s*hour|/\s*hr|hourly))?",
        re.IGNORECASE,
    )

    HOURLY_THRESHOLD = 200
    ANNUAL_THRESHOLD = 1000

    @staticmethod
    def _to_number(raw: str) -> float:
        return float(raw.replace(",", ""))

    @classmethod
    def parse(cls, text: Optional[str]) -> CompensationInfo:
        """
        Extract compensation from free text.

        Args:
            text: Text that may mention a salary

        Returns:
            CompensationInfo: ``(None, UNKNOWN)`` when no dollar amount is found
        """
        if not text:
            return CompensationInfo(None, CompensationType.UNKNOWN)

        match = cls.PATTERN.search(text)
        if not match:
            return CompensationInfo(None, CompensationType.UNKNOWN)

        try:
            low = cls._to_number(match.group("low"))
            high = cls._to_number(match.group("high")) if match.group("high") else None
        except ValueError:
            logger.debug(f"Unparseable salary amount in: {match.group(0)}")
            return CompensationInfo(None, CompensationType.UNKNOWN)

        amount = (low + high) / 2 if high is not None else low
        unit = (match.group("unit") or "").lower()
        thousands = bool(match.group("low_k") or match.group("high_k")) or unit in ("k", "thousand")

        if "hour" in unit or "hr" in unit:
            return CompensationInfo(amount, CompensationType.HOURLY)

        if thousands:
            return CompensationInfo(amount * 1000, CompensationType.ANNUAL)

        if "year" in unit or "yr" in unit or "annual" in unit:
            return CompensationInfo(amount, CompensationType.ANNUAL)

        if amount < cls.HOURLY_THRESHOLD:
            return CompensationInfo(amount, CompensationType.HOURLY)
        if amount > cls.ANNUAL_THRESHOLD:
            return CompensationInfo(amount, CompensationType.ANNUAL)
        return CompensationInfo(amount, CompensationType.UNKNOWN)


class ExperienceClassifier:
    """Keyword buckets checked in priority order; MID is the default."""

    KEYWORDS: Tuple[Tuple[ExperienceLevel, Tuple[str, ...]], ...] = (
        (ExperienceLevel.SENIOR, ("senior", "sr.", "lead", "principal", "staff", "architect")),
        (ExperienceLevel.JUNIOR, ("junior", "jr.", "entry", "associate", "graduate")),
        (ExperienceLevel.INTERN, ("intern", "internship")),
        (ExperienceLevel.MID, ("mid", "intermediate")),
    )

    @classmethod
    def classify(cls, text: Optional[str]) -> Optional[ExperienceLevel]:
        if text is None:
            return None
        lowered = text.lower()
        if not lowered.strip():
            return ExperienceLevel.MID
        for level, keywords in cls.KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return level
        return ExperienceLevel.MID

    @classmethod
    def from_title_and_description(
        cls,
        title: Optional[str],
        description: Optional[str],
    ) -> Optional[ExperienceLevel]:
        """Classify by title, consulting the description only when the title says MID."""
        level = cls.classify(title)
        if level == ExperienceLevel.MID and description:
            return cls.classify(description)
        return level


# Shared instances
compensation_parser = CompensationParser()
experience_classifier = ExperienceClassifier()


def extract_compensation(text: Optional[str]) -> CompensationInfo:
    return compensation_parser.parse(text)


def extract_experience_level(text: Optional[str]) -> Optional[ExperienceLevel]:
    return experience_classifier.classify(text)


FIELD_LIMITS: Dict[str, int] = {
    "job_title": 500,
    "company": 500,
    "location": 1000,
    "description": 10000,
    "compensation_type": 100,
    "experience_level": 100,
}
