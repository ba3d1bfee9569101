"""
Content Fetcher

Static HTTP retrieval of job pages. A simple path lets httpx decode the body;
when that text looks garbled or truncated, a manual path decompresses the raw
bytes and resolves the charset itself.
"""

import gzip
import time
import unicodedata
import zlib
from typing import Dict, Optional, Tuple

import brotli
import httpx

from jobparser.core.config import get_settings
from jobparser.core.exceptions import FetchException
from jobparser.scrapers.document import Document
from jobparser.utils.logger import get_logger, log_scraping_activity, log_performance_metric

logger = get_logger(__name__)

MIN_SIMPLE_TEXT_LENGTH = 100
CONTROL_CHAR_RATIO = 0.005
MOJIBAKE_THRESHOLD = 3

# UTF-8 bytes read as Latin-1 / Windows-1252
MOJIBAKE_ARTIFACTS = (
    "Ã©", "Ã¨", "Ã ", "Ã¡", "Ã¢", "Ã¤", "Ã§", "Ã¯", "Ã´", "Ã¶", "Ã¹", "Ã»", "Ã¼", "Ã±",
    "â€™", "â€œ", "â€\x9d", "â€“", "â€”", "â€¦",
    "Â ", "Â©", "Â®",
)

FALLBACK_CHARSETS = ("utf-8", "iso-8859-1", "windows-1252", "us-ascii")

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}

ENHANCED_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": "max-age=0",
    "DNT": "1",
    "Referer": "https://www.google.com/",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Microsoft Edge";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "cross-site",
    "Sec-Fetch-User": "?1",
}


def is_garbled(text: Optional[str]) -> bool:
    """
    Heuristic check for text decoded with the wrong charset.

    Args:
        text: Decoded body text

    Returns:
        bool: True for empty text, replacement characters, too many control
        characters or repeated mojibake sequences
    """
    if not text:
        return True

    if "\ufffd" in text:
        return True

    control_chars = sum(
        1 for ch in text
        if unicodedata.category(ch) == "Cc" and not ch.isspace()
    )
    if control_chars > len(text) * CONTROL_CHAR_RATIO:
        return True

    artifacts = 0
    for artifact in MOJIBAKE_ARTIFACTS:
        artifacts += text.count(artifact)
        if artifacts >= MOJIBAKE_THRESHOLD:
            return True

    return False


def decompress(body: bytes, content_encoding: Optional[str]) -> bytes:
    """
    Undo Content-Encoding on a raw body.

    Encodings are removed in reverse order of application. On any failure the
    raw bytes are returned unchanged.
    """
    if not content_encoding:
        return body

    encodings = [e.strip().lower() for e in content_encoding.split(",") if e.strip()]
    data = body
    try:
        for encoding in reversed(encodings):
            if encoding in ("gzip", "x-gzip"):
                data = gzip.decompress(data)
            elif encoding == "deflate":
                try:
                    data = zlib.decompress(data)
                except zlib.error:
                    # Raw deflate stream without zlib header
                    data = zlib.decompress(data, -zlib.MAX_WBITS)
            elif encoding == "br":
                data = brotli.decompress(data)
            elif encoding != "identity":
                logger.warning(f"Unknown content encoding: {encoding}")
    except (OSError, EOFError, zlib.error, brotli.error) as e:
        logger.warning(
            "Decompression failed, using raw bytes",
            content_encoding=content_encoding,
            error=str(e),
        )
        return body
    return data


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Extract the charset parameter from a Content-Type header."""
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.strip().lower() == "charset" and value:
            return value.strip().strip("\"'")
    return None


def decode_body(body: bytes, declared_charset: Optional[str] = None) -> Tuple[str, str]:
    """
    Decode bytes into text, preferring the declared charset.

    Args:
        body: Decompressed body
        declared_charset: Charset from the Content-Type header

    Returns:
        Tuple[str, str]: Decoded text and the charset that produced it
    """
    if declared_charset:
        try:
            text = body.decode(declared_charset)
            if not is_garbled(text):
                return text, declared_charset
            logger.debug(f"Declared charset {declared_charset} produced garbled text")
        except (LookupError, UnicodeDecodeError) as e:
            logger.debug(f"Declared charset {declared_charset} failed: {e}")

    for charset in FALLBACK_CHARSETS:
        try:
            text = body.decode(charset)
        except UnicodeDecodeError:
            continue
        if not is_garbled(text):
            return text, charset

    logger.warning("No charset produced clean text, decoding UTF-8 with replacement")
    return body.decode("utf-8", errors="replace"), "utf-8"


class ContentFetcher:
    """
    Static HTML fetcher backed by httpx.

    Args:
        client: Optional preconfigured client (tests inject a MockTransport)
        timeout_seconds: Connect/read/write/pool timeout
        user_agent: User-Agent for the base header template
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.timeout_seconds = timeout_seconds or settings.HTTP_TIMEOUT_SECONDS
        self.headers: Dict[str, str] = {
            "User-Agent": user_agent or settings.HTTP_USER_AGENT,
            **BASE_HEADERS,
        }
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                follow_redirects=True,
            )
        return self._client

    async def __aenter__(self) -> "ContentFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> Document:
        """
        Fetch a URL with the base browser header template.

        Raises:
            FetchException: Network error or non-2xx status
            DocumentParseException: Body could not be parsed
        """
        return await self._fetch(url, self.headers, strategy="static")

    async def fetch_with_enhanced_headers(self, url: str) -> Document:
        """Fetch a URL presenting a fuller browser fingerprint."""
        return await self._fetch(url, ENHANCED_HEADERS, strategy="enhanced_headers")

    async def _fetch(self, url: str, headers: Dict[str, str], strategy: str) -> Document:
        log_scraping_activity("content_fetcher", "fetch", url=url, strategy=strategy)
        started = time.monotonic()

        html = await self._fetch_simple(url, headers)
        if html is None:
            html = await self._fetch_manual(url, headers)

        document = Document(html, url)
        log_performance_metric(
            "static_fetch_duration",
            time.monotonic() - started,
            context={"url": url, "strategy": strategy},
        )
        return document

    async def _fetch_simple(self, url: str, headers: Dict[str, str]) -> Optional[str]:
        """Let httpx decode the body; None means fall through to the manual path."""
        try:
            response = await self.client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Simple fetch failed for {url}, trying manual path: {e}")
            return None

        self._check_status(response, url)

        try:
            text = response.text
        except (httpx.DecodingError, LookupError, UnicodeDecodeError) as e:
            logger.warning(f"Simple decode failed for {url}: {e}")
            return None

        if len(text) < MIN_SIMPLE_TEXT_LENGTH or is_garbled(text):
            logger.warning(
                "Simple fetch produced unusable text, trying manual path",
                url=url,
                length=len(text),
            )
            return None
        return text

    async def _fetch_manual(self, url: str, headers: Dict[str, str]) -> str:
        """Stream raw bytes, decompress and resolve the charset by hand."""
        try:
            async with self.client.stream("GET", url, headers=headers) as response:
                self._check_status(response, url)
                raw = b"".join([chunk async for chunk in response.aiter_raw()])
                content_encoding = response.headers.get("content-encoding")
                content_type = response.headers.get("content-type")
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise FetchException(f"Failed to fetch {url}: {e}", url=url) from e

        body = decompress(raw, content_encoding)
        text, charset = decode_body(body, charset_from_content_type(content_type))
        logger.debug(
            "Manual fetch decoded body",
            url=url,
            charset=charset,
            content_encoding=content_encoding,
            length=len(text),
        )
        return text

    @staticmethod
    def _check_status(response: httpx.Response, url: str) -> None:
        if not response.is_success:
            raise FetchException(
                f"Unexpected response code: {response.status_code} for URL: {url}",
                url=url,
                details={"url": url, "status_code": response.status_code},
            )
