"""
Unit tests for gzip content negotiation.
"""

import gzip

from microhttp.http.compression import accepts_gzip, compress_body, maybe_compress
from microhttp.http.response import HTTPResponse, empty, text


class TestAcceptsGzip:
    """Tests for accepts_gzip()."""

    def test_single_token(self):
        assert accepts_gzip({"Accept-Encoding": "gzip"}) is True

    def test_token_in_list(self):
        assert accepts_gzip({"Accept-Encoding": "deflate, gzip, br"}) is True

    def test_whitespace_is_trimmed(self):
        assert accepts_gzip({"Accept-Encoding": " br ,  gzip "}) is True

    def test_other_encodings_only(self):
        assert accepts_gzip({"Accept-Encoding": "deflate, br"}) is False

    def test_missing_header(self):
        assert accepts_gzip({}) is False

    def test_token_must_match_exactly(self):
        """Test that near-miss tokens don't count."""
        assert accepts_gzip({"Accept-Encoding": "gzip;q=1.0"}) is False
        assert accepts_gzip({"Accept-Encoding": "x-gzip"}) is False

    def test_header_name_is_case_sensitive(self):
        assert accepts_gzip({"accept-encoding": "gzip"}) is False


class TestMaybeCompress:
    """Tests for maybe_compress()."""

    def test_compresses_body(self):
        """Test that a negotiated body is gzipped and headers updated."""
        response = text("abc")

        assert maybe_compress({"Accept-Encoding": "gzip"}, response) is True
        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Length"] == str(len(response.body))
        assert response.headers["Content-Type"] == "text/plain"
        assert gzip.decompress(response.body) == b"abc"

    def test_not_negotiated(self):
        """Test that the body is untouched without Accept-Encoding."""
        response = text("abc")

        assert maybe_compress({}, response) is False
        assert response.body == b"abc"
        assert "Content-Encoding" not in response.headers

    def test_no_body(self):
        """Test that bodiless responses are left alone."""
        response = empty()

        assert maybe_compress({"Accept-Encoding": "gzip"}, response) is False
        assert response.headers == {}

    def test_empty_body_not_compressed(self):
        """Test that b"" is treated like no body at all."""
        response = text("")

        assert maybe_compress({"Accept-Encoding": "gzip"}, response) is False
        assert response.body == b""
        assert response.headers == {"Content-Type": "text/plain", "Content-Length": "0"}

    def test_at_most_once(self):
        """Test that a second pass does not double-compress."""
        response = text("abc")
        maybe_compress({"Accept-Encoding": "gzip"}, response)
        once = response.body

        assert maybe_compress({"Accept-Encoding": "gzip"}, response) is False
        assert response.body == once
        assert gzip.decompress(response.body) == b"abc"

    def test_existing_encoding_respected(self):
        """Test that a handler-set Content-Encoding is not overridden."""
        response = HTTPResponse(body=b"raw", headers={"Content-Encoding": "identity"})

        assert maybe_compress({"Accept-Encoding": "gzip"}, response) is False
        assert response.body == b"raw"

    def test_compress_body_level(self):
        data = b"a" * 1000
        assert gzip.decompress(compress_body(data, level=1)) == data
        assert gzip.decompress(compress_body(data, level=9)) == data
