"""
Domain matching — URL → bare domain, and domain vs. blocklist pattern.

    "facebook.com"   matches facebook.com, m.facebook.com
    "*.facebook.com" matches facebook.com, www.facebook.com, a.b.facebook.com
    "x.com"          does NOT match x.com.evil.com
"""

from __future__ import annotations

from urllib.parse import urlsplit

from ..errors import InvalidUrl


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def normalize(url: str) -> str:
    """Return the lower-cased host of *url* without a leading ``www.``."""
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except (AttributeError, ValueError) as exc:
        raise InvalidUrl(str(url)) from exc
    if not parts.scheme or not host:
        raise InvalidUrl(url)
    return _strip_www(host.lower())


def matches(domain: str, pattern: str) -> bool:
    pattern = _strip_www(pattern.lower())
    if pattern.startswith("*."):
        base = pattern[2:]
        return domain == base or domain.endswith("." + base)
    return domain == pattern or domain.endswith("." + pattern)
