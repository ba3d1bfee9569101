"""
Parsed HTML Document

Thin wrapper around BeautifulSoup that keeps the fetch URL as base URI and
exposes the queries extractors rely on.
"""

from typing import List, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment
from bs4.element import Tag

from jobparser.core.exceptions import DocumentParseException

# Elements whose strings never count as visible text
_NON_TEXT_TAGS = frozenset({"script", "style", "noscript", "template", "head", "title", "meta"})

Node = Union["Document", Tag]


def element_text(element: Optional[Tag]) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return ""
    return " ".join(element.get_text(" ").split())


def own_text(element: Optional[Tag]) -> str:
    """Text of the element's direct string children only."""
    if element is None or element.name in _NON_TEXT_TAGS:
        return ""
    parts = [
        str(child) for child in element.find_all(string=True, recursive=False)
        if not isinstance(child, Comment)
    ]
    return " ".join(" ".join(parts).split())


class Document:
    """
    Navigable document tree produced by a fetch.

    Args:
        html: Raw HTML markup
        base_uri: URL the markup was fetched from
    """

    def __init__(self, html: str, base_uri: str) -> None:
        try:
            self._soup = BeautifulSoup(html or "", "html.parser")
        except Exception as e:
            raise DocumentParseException(f"Could not parse document: {e}", url=base_uri) from e
        self.base_uri = base_uri

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def title(self) -> str:
        """Content of the <title> element, or an empty string."""
        if self._soup.title is None:
            return ""
        return " ".join(self._soup.title.get_text().split())

    def text(self) -> str:
        """Visible body text with whitespace collapsed."""
        root = self._soup.body or self._soup
        return element_text(root)

    def select(self, selector: str) -> List[Tag]:
        return self._soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self._soup.select_one(selector)

    def element_count(self) -> int:
        """Number of elements in the tree, used as a coarse quality score."""
        return len(self._soup.find_all(True))

    def elements_containing_own_text(self, needle: str, within: Optional[Tag] = None) -> List[Tag]:
        """
        Elements whose own text contains ``needle`` (case-insensitive).

        Args:
            needle: Text to look for
            within: Restrict the search to this element's subtree

        Returns:
            List[Tag]: Matching elements in document order
        """
        root = within if within is not None else (self._soup.body or self._soup)
        needle = needle.lower()
        candidates = [root] if isinstance(root, Tag) and root is not self._soup else []
        candidates.extend(root.find_all(True))
        return [el for el in candidates if needle in own_text(el).lower()]

    def absolute_url(self, href: str) -> str:
        """Resolve a possibly relative link against the base URI."""
        return urljoin(self.base_uri, href)

    def __repr__(self) -> str:
        return f"Document(base_uri={self.base_uri!r}, elements={self.element_count()})"
