"""
Tests for static content fetching, decompression and charset handling.
"""

import gzip
import zlib

import brotli
import httpx
import pytest

from jobparser.core.exceptions import FetchException
from jobparser.scrapers.fetcher import (
    ENHANCED_HEADERS,
    ContentFetcher,
    charset_from_content_type,
    decode_body,
    decompress,
    is_garbled,
)
from tests.fakes import html_response, mock_fetcher, raw_response

PAGE = (
    "<html><head><title>Data Engineer</title></head><body>"
    + "<p>We are hiring a data engineer to build pipelines.</p>" * 5
    + "</body></html>"
)


@pytest.mark.unit
class TestIsGarbled:
    """Test the garbled-text heuristic."""

    def test_clean_text(self):
        """Test ordinary text with whitespace controls is clean."""
        assert is_garbled("Senior engineer\nRemote\tfriendly café") is False

    def test_empty_and_replacement_characters(self):
        """Test empty text and U+FFFD are garbled."""
        assert is_garbled("") is True
        assert is_garbled(None) is True
        assert is_garbled("Caf\ufffd") is True

    def test_control_characters(self):
        """Test a high ratio of non-whitespace control characters is garbled."""
        assert is_garbled("abc\x01\x02def") is True

    def test_mojibake_threshold(self):
        """Test repeated mojibake sequences trip the check, a single one does not."""
        assert is_garbled("CafÃ© opens") is False
        assert is_garbled("CafÃ© rÃ©sumÃ© naÃ¯ve") is True


@pytest.mark.unit
class TestDecompress:
    """Test Content-Encoding removal."""

    def test_gzip(self):
        """Test gzip bodies are decompressed."""
        assert decompress(gzip.compress(b"hello"), "gzip") == b"hello"

    def test_zlib_deflate(self):
        """Test zlib-wrapped deflate bodies are decompressed."""
        assert decompress(zlib.compress(b"hello"), "deflate") == b"hello"

    def test_raw_deflate(self):
        """Test headerless deflate streams are decompressed."""
        compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
        raw = compressor.compress(b"hello") + compressor.flush()

        assert decompress(raw, "deflate") == b"hello"

    def test_brotli(self):
        """Test brotli bodies are decompressed."""
        assert decompress(brotli.compress(b"hello"), "br") == b"hello"

    def test_stacked_encodings_reverse_order(self):
        """Test encodings are removed last-applied first."""
        body = brotli.compress(gzip.compress(b"hello"))

        assert decompress(body, "gzip, br") == b"hello"

    def test_identity_and_missing(self):
        """Test identity or no encoding leaves the body alone."""
        assert decompress(b"hello", None) == b"hello"
        assert decompress(b"hello", "identity") == b"hello"

    def test_invalid_body_returns_raw(self):
        """Test a corrupt body falls back to the raw bytes."""
        assert decompress(b"not gzip at all", "gzip") == b"not gzip at all"


@pytest.mark.unit
class TestCharsets:
    """Test charset resolution."""

    def test_charset_from_content_type(self):
        """Test the charset parameter is parsed from Content-Type."""
        assert charset_from_content_type("text/html; charset=UTF-8") == "UTF-8"
        assert charset_from_content_type('text/html; charset="windows-1252"') == "windows-1252"
        assert charset_from_content_type("text/html") is None
        assert charset_from_content_type(None) is None

    def test_declared_charset_preferred(self):
        """Test a working declared charset is used."""
        text, charset = decode_body("Café".encode("utf-8"), "utf-8")

        assert text == "Café"
        assert charset == "utf-8"

    def test_fallback_when_declared_fails(self):
        """Test fallback charsets are tried in order."""
        text, charset = decode_body("Café".encode("windows-1252"), "utf-8")

        assert text == "Café"
        assert charset == "iso-8859-1"

    def test_unknown_declared_charset(self):
        """Test an unknown charset name falls through to UTF-8."""
        text, charset = decode_body(b"plain", "no-such-charset")

        assert text == "plain"
        assert charset == "utf-8"


@pytest.mark.scraper
class TestContentFetcher:
    """Test ContentFetcher against a mock transport."""

    async def test_simple_path(self):
        """Test a clean UTF-8 page is returned from the simple path."""
        fetcher = mock_fetcher(lambda request: html_response(PAGE))

        document = await fetcher.fetch("https://example.com/job")

        assert document.title() == "Data Engineer"
        assert document.base_uri == "https://example.com/job"

    async def test_base_headers_sent(self):
        """Test the base header template is presented."""
        seen = []

        def handler(request):
            seen.append(request.headers)
            return html_response(PAGE)

        fetcher = mock_fetcher(handler)
        await fetcher.fetch("https://example.com/job")

        assert seen[0]["Accept-Language"] == "en-US,en;q=0.9"
        assert seen[0]["Sec-Fetch-Mode"] == "navigate"
        assert "Mozilla/5.0" in seen[0]["User-Agent"]

    async def test_enhanced_headers_sent(self):
        """Test the enhanced variant presents the fuller fingerprint."""
        seen = []

        def handler(request):
            seen.append(request.headers)
            return html_response(PAGE)

        fetcher = mock_fetcher(handler)
        await fetcher.fetch_with_enhanced_headers("https://example.com/job")

        assert seen[0]["DNT"] == "1"
        assert seen[0]["Referer"] == "https://www.google.com/"
        assert seen[0]["User-Agent"] == ENHANCED_HEADERS["User-Agent"]

    async def test_non_success_status(self):
        """Test a 404 raises FetchException naming the code and URL."""
        fetcher = mock_fetcher(lambda request: html_response("gone", status_code=404))

        with pytest.raises(FetchException) as exc_info:
            await fetcher.fetch("https://example.com/missing")

        assert exc_info.value.message == (
            "Unexpected response code: 404 for URL: https://example.com/missing"
        )
        assert exc_info.value.details["status_code"] == 404

    async def test_manual_path_resolves_charset(self):
        """Test undeclared Windows-1252 bytes are decoded by the manual path."""
        body = ("<html><body><p>Café staff wanted</p></body></html>").encode("windows-1252")
        calls = []

        def handler(request):
            calls.append(request.url)
            return raw_response(body, {"content-type": "text/html"})

        fetcher = mock_fetcher(handler)
        document = await fetcher.fetch("https://example.com/cafe")

        assert "Café staff wanted" in document.text()
        assert len(calls) == 2

    async def test_manual_path_keeps_plain_body_declared_gzip(self):
        """Test a body mislabelled as gzip is used as sent."""
        body = ("<html><body>" + "<p>plain text</p>" * 20 + "</body></html>").encode("utf-8")

        def handler(request):
            return raw_response(
                body,
                {"content-type": "text/html; charset=utf-8", "content-encoding": "gzip"},
            )

        fetcher = mock_fetcher(handler)
        document = await fetcher.fetch("https://example.com/mislabelled")

        assert document.text().startswith("plain text plain text")
        assert len(document.select("p")) == 20

    async def test_stream_errors_become_fetch_exceptions(self):
        """Test a body that cannot be streamed raises FetchException."""
        def handler(request):
            # Already read, so streaming it again fails
            return httpx.Response(200, content=b"short")

        fetcher = mock_fetcher(handler)

        with pytest.raises(FetchException, match="Failed to fetch https://example.com/short"):
            await fetcher.fetch("https://example.com/short")

    async def test_network_error(self):
        """Test transport failures surface as FetchException."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = mock_fetcher(handler)

        with pytest.raises(FetchException, match="Failed to fetch https://example.com/down"):
            await fetcher.fetch("https://example.com/down")

    async def test_context_manager_closes_owned_client(self):
        """Test an owned client is created lazily and closed on exit."""
        async with ContentFetcher(timeout_seconds=1) as fetcher:
            client = fetcher.client
            assert fetcher.client is client

        assert client.is_closed
