"""Tests for terminal rendering."""

import httpx

from cdnhit.display import console, render_headers


class TestRenderHeaders:
    """Test the response header dump."""

    def test_text_values_shown(self, destination):
        """Test ordinary header values are printed as-is."""
        headers = httpx.Headers([(b"x-cache", b"Hit from cloudfront"), (b"age", b"42")])
        with console.capture() as capture:
            render_headers(destination, headers)
        output = capture.get()
        assert "Hit from cloudfront" in output
        assert "42" in output
        assert "<binary value>" not in output

    def test_non_text_values_marked(self, destination):
        """Test values the classifier cannot decode are shown as binary."""
        headers = httpx.Headers([(b"x-cache", b"HIT\x01"), (b"via", b"\xff\xfe")])
        with console.capture() as capture:
            render_headers(destination, headers)
        output = capture.get()
        assert output.count("<binary value>") == 2
        assert "HIT" not in output
