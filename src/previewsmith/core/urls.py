"""URL classification, normalisation and allow-list checks."""

from __future__ import annotations

from collections.abc import Iterable
import re
from typing import Any
from urllib.parse import urljoin, urlparse


DEFAULT_ALLOWED_SCHEMES: tuple[str, ...] = (
    "http",
    "https",
    "ftp",
    "ftps",
    "mailto",
    "tel",
    "callto",
    "sms",
    "cid",
    "xmpp",
)

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)
_BARE_DOMAIN_PATTERN = re.compile(
    r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)+",
    re.IGNORECASE,
)
_ATTR_WHITESPACE = re.compile(r"[\u0000-\u0020\u00a0\u1680\u180e\u2000-\u2029\u205f\u3000]")


def normalize_url(url: Any) -> Any:
    """Return ``url`` with a scheme added when it is a bare domain.

    Values that already carry a scheme, root-relative paths, fragments and
    anything that does not look like a domain are returned trimmed but
    otherwise untouched.
    """
    if not url or not isinstance(url, str):
        return url

    candidate = url.strip()
    if not candidate:
        return candidate
    if _SCHEME_PATTERN.match(candidate):
        return candidate
    if candidate.startswith(("/", "#")):
        return candidate
    if _BARE_DOMAIN_PATTERN.match(candidate):
        return f"https://{candidate}"
    return candidate


def _allowed_uri_pattern(schemes: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(scheme) for scheme in schemes)
    return re.compile(
        rf"^(?:(?:{alternatives}):|[^a-z]|[a-z0-9+.\-]+(?:[^a-z+.\-:]|$))",
        re.IGNORECASE,
    )


def is_allowed_uri(uri: str | None, extra_schemes: Iterable[str] = ()) -> bool:
    """Return whether ``uri`` uses an allowed scheme or no scheme at all.

    Control and whitespace characters are stripped first so that values such
    as ``"java\\nscript:"`` cannot sneak past the check.
    """
    if not uri:
        return True

    schemes = list(DEFAULT_ALLOWED_SCHEMES)
    for scheme in extra_schemes:
        if scheme and scheme not in schemes:
            schemes.append(scheme)

    cleaned = _ATTR_WHITESPACE.sub("", uri)
    return _allowed_uri_pattern(schemes).match(cleaned) is not None


def sanitize_url(url: str, base_url: str, extra_schemes: Iterable[str] = ()) -> str:
    """Resolve ``url`` against ``base_url`` and return it if allowed, else ``"#"``."""
    try:
        resolved = urljoin(base_url, url)
    except ValueError:
        return "#"
    if is_allowed_uri(resolved, extra_schemes):
        return resolved
    return "#"


def is_external_url(url: str, origin: str) -> bool:
    """Return whether ``url`` points outside of ``origin``."""
    if url.startswith(("/", "./", "../")):
        return False
    if url.startswith(("data:", "blob:")):
        return False
    try:
        target = urlparse(urljoin(origin, url))
        current = urlparse(origin)
    except ValueError:
        return False
    return (target.scheme, target.netloc) != (current.scheme, current.netloc)


__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "is_allowed_uri",
    "is_external_url",
    "normalize_url",
    "sanitize_url",
]
