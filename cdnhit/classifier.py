"""Cache hit/miss classification from response headers."""

from __future__ import annotations

from typing import Mapping, Optional, Union

import httpx

from cdnhit.errors import HeaderDecodeFailure

HeaderValue = Union[str, bytes]
HeaderSource = Union[httpx.Headers, Mapping[str, HeaderValue]]


def _raw_value(headers: HeaderSource, header_key: str) -> Optional[HeaderValue]:
    """Return the first value stored under *header_key*, matching names case-insensitively."""
    wanted = header_key.lower()
    if isinstance(headers, httpx.Headers):
        # .raw keeps the undecoded bytes so invalid values can be detected
        for name, value in headers.raw:
            if name.decode("latin-1").lower() == wanted:
                return value
        return None
    for name, value in headers.items():
        if name.lower() == wanted:
            return value
    return None


def decode_header_value(value: HeaderValue, header_key: str) -> str:
    """Decode a header value as visible ASCII text."""
    if isinstance(value, bytes):
        try:
            text = value.decode("ascii")
        except UnicodeDecodeError as exc:
            raise HeaderDecodeFailure(header_key) from exc
    else:
        text = value
    if any(not (ch == "\t" or 0x20 <= ord(ch) < 0x7F) for ch in text):
        raise HeaderDecodeFailure(header_key)
    return text


def header_value(headers: HeaderSource, header_key: str) -> Optional[str]:
    """Return the decoded value of *header_key*, or None if it is absent.

    Raises
    ------
    HeaderDecodeFailure
        If the value is present but not visible ASCII text.
    """
    if not header_key:
        return None
    raw = _raw_value(headers, header_key)
    if raw is None:
        return None
    return decode_header_value(raw, header_key)


def classify(headers: HeaderSource, header_key: str, expected_hit_value: str) -> bool:
    """Return True when *header_key* is present and equals *expected_hit_value*.

    Comparison is exact and case-sensitive.  An absent header, an empty
    key or an undecodable value all count as a miss.
    """
    try:
        actual = header_value(headers, header_key)
    except HeaderDecodeFailure:
        return False
    if actual is None:
        return False
    return actual == expected_hit_value
