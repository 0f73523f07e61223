from __future__ import annotations

import pytest

from webrequest.utils.text import from_bytes, get_charset, to_text

#################################
#     Tests for get_charset     #
#################################


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("text/html; charset=ISO-8859-1", "ISO-8859-1"),
        ('application/json; Charset="utf-16"', "utf-16"),
        ("text/plain;charset=UTF-8", "UTF-8"),
        ("application/json", None),
        ("", None),
        (None, None),
    ],
)
def test_get_charset(content_type: str | None, expected: str | None) -> None:
    assert get_charset(content_type) == expected


################################
#     Tests for from_bytes     #
################################


def test_from_bytes_utf8_default() -> None:
    assert from_bytes("héllo".encode()) == "héllo"


def test_from_bytes_with_charset() -> None:
    assert from_bytes("héllo".encode("latin-1"), "ISO-8859-1") == "héllo"


def test_from_bytes_unknown_charset_falls_back_to_utf8() -> None:
    """Test that an unknown charset decodes as UTF-8."""
    assert from_bytes(b"hello", "no-such-charset") == "hello"


def test_from_bytes_replaces_undecodable_bytes() -> None:
    """Test that undecodable bytes never make decoding fail."""
    assert from_bytes(b"ok\xff") == "ok�"


def test_from_bytes_empty() -> None:
    assert from_bytes(b"") == ""
    assert from_bytes(None) == ""


#############################
#     Tests for to_text     #
#############################


@pytest.mark.parametrize(
    ("value", "text"),
    [(True, "true"), (False, "false"), (0, "0"), (42, "42"), (2.5, "2.5"), ("abc", "abc")],
)
def test_to_text(value: object, text: str) -> None:
    assert to_text(value) == text
