import pytest

from previewsmith import is_allowed_uri, is_external_url, normalize_url, sanitize_url


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("example.com", "https://example.com"),
        ("  example.com/path?q=1  ", "https://example.com/path?q=1"),
        ("sub.example.co.uk", "https://sub.example.co.uk"),
        ("http://example.com", "http://example.com"),
        ("mailto:someone@example.com", "mailto:someone@example.com"),
        ("javascript:alert(1)", "javascript:alert(1)"),
        ("/relative/path", "/relative/path"),
        ("#section", "#section"),
        ("not a url", "not a url"),
        ("   ", ""),
    ],
)
def test_normalize_url(value: str, expected: str) -> None:
    assert normalize_url(value) == expected


def test_normalize_url_returns_non_strings_unchanged() -> None:
    assert normalize_url(None) is None
    assert normalize_url("") == ""
    assert normalize_url(42) == 42


@pytest.mark.parametrize(
    "uri",
    [
        "",
        "https://example.com",
        "HTTP://EXAMPLE.COM",
        "mailto:a@b.c",
        "tel:+123",
        "xmpp:user@host",
        "/relative",
        "relative/path",
        "#anchor",
    ],
)
def test_allowed_uris(uri: str) -> None:
    assert is_allowed_uri(uri)


@pytest.mark.parametrize(
    "uri",
    [
        "javascript:alert(1)",
        "java\nscript:alert(1)",
        " javascript:alert(1)",
        "data:text/html;base64,AAAA",
        "custom:thing",
    ],
)
def test_rejected_uris(uri: str) -> None:
    assert not is_allowed_uri(uri)


def test_extra_schemes_extend_allow_list() -> None:
    assert is_allowed_uri("custom:thing", extra_schemes=["custom"])


def test_sanitize_url_resolves_against_base() -> None:
    assert sanitize_url("/docs", "https://example.com/a/b") == "https://example.com/docs"
    assert sanitize_url("javascript:alert(1)", "https://example.com/") == "#"


def test_is_external_url() -> None:
    origin = "https://example.com"

    assert is_external_url("https://other.org/page", origin)
    assert not is_external_url("https://example.com/page", origin)
    assert not is_external_url("/page", origin)
    assert not is_external_url("../page", origin)
    assert not is_external_url("data:image/png;base64,AAAA", origin)
