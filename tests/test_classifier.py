"""Tests for cache hit/miss classification."""

import httpx
import pytest

from cdnhit.classifier import classify, decode_header_value, header_value
from cdnhit.errors import HeaderDecodeFailure


class TestClassify:
    """Test classify() on plain mappings and httpx headers."""

    def test_hit(self):
        """Test an exact match is a hit."""
        headers = {"x-cache": "Hit from cloudfront"}
        assert classify(headers, "x-cache", "Hit from cloudfront") is True

    def test_absent(self):
        """Test a missing header is a miss."""
        assert classify({}, "x-cache", "Hit from cloudfront") is False

    def test_different_value(self):
        """Test a different value is a miss."""
        headers = {"x-cache": "Miss from cloudfront"}
        assert classify(headers, "x-cache", "Hit from cloudfront") is False

    def test_name_case_insensitive(self):
        """Test header names match regardless of case."""
        headers = httpx.Headers({"X-Cache": "HIT"})
        assert classify(headers, "x-cache", "HIT") is True
        assert classify({"X-CACHE": "HIT"}, "X-Cache", "HIT") is True

    def test_value_case_sensitive(self):
        """Test values are compared case-sensitively."""
        assert classify({"cf-cache-status": "hit"}, "cf-cache-status", "HIT") is False

    def test_empty_key(self):
        """Test an empty key never matches."""
        assert classify({"": "HIT"}, "", "HIT") is False
        assert classify({"x-cache": ""}, "", "") is False

    def test_binary_value_is_miss(self):
        """Test a non-text value resolves to miss without raising."""
        headers = httpx.Headers([(b"x-cache", b"\xffHit\xfe")])
        assert classify(headers, "x-cache", "Hit") is False

    def test_binary_value_in_mapping(self):
        """Test bytes values in a plain mapping are decoded or rejected."""
        assert classify({"x-cache": b"HIT"}, "x-cache", "HIT") is True
        assert classify({"x-cache": b"\x80"}, "x-cache", "HIT") is False

    def test_control_character_is_miss(self):
        """Test a value with control characters counts as undecodable."""
        assert classify({"x-cache": "HIT\x01"}, "x-cache", "HIT\x01") is False

    def test_first_value_used(self):
        """Test only the first of repeated headers is considered."""
        headers = httpx.Headers([("x-cache", "MISS"), ("x-cache", "HIT")])
        assert classify(headers, "x-cache", "HIT") is False


class TestHeaderValue:
    """Test header_value()."""

    def test_present(self):
        """Test the decoded value is returned."""
        assert header_value(httpx.Headers({"Age": "12"}), "age") == "12"

    def test_absent(self):
        """Test None is returned for a missing header."""
        assert header_value({}, "age") is None

    def test_undecodable_raises(self):
        """Test an undecodable value raises HeaderDecodeFailure."""
        with pytest.raises(HeaderDecodeFailure):
            header_value(httpx.Headers([(b"x-cache", b"\xc3\xa9")]), "x-cache")


class TestDecodeHeaderValue:
    """Test decode_header_value()."""

    def test_visible_ascii(self):
        """Test bytes and str of visible ASCII decode unchanged."""
        assert decode_header_value(b"Hit from cloudfront", "x-cache") == "Hit from cloudfront"
        assert decode_header_value("max-age=60\tpublic", "cache-control") == "max-age=60\tpublic"

    def test_control_character_rejected(self):
        """Test ASCII control characters are not accepted as text."""
        with pytest.raises(HeaderDecodeFailure):
            decode_header_value(b"HIT\x01", "x-cache")
