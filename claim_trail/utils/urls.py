"""URL helpers: domain extraction, domain-list matching, canonical form."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

_TRACKING_PARAMS = {"fbclid", "gclid", "mc_cid", "mc_eid", "ref", "igshid"}


def extract_domain(url: str, *, default: str = "unknown") -> str:
    """Return the lowercase hostname without a leading ``www.``."""
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return default
    if not hostname:
        return default
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def domain_matches(url: str, patterns: list[str] | tuple[str, ...] | set[str]) -> bool:
    """Check a URL against a domain list.

    Pattern forms:
      ``.gov``                hostname suffix (TLD-style)
      ``reuters.com``         exact host or any subdomain of it
      ``thequint.com/news``   host + path prefix
    """
    try:
        parsed = urlparse(url if "//" in url else f"//{url}")
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if host.startswith("www."):
        host = host[4:]
    if not host:
        return False

    host_path = host + (parsed.path or "")
    for pattern in patterns:
        p = pattern.lower()
        if "/" in p:
            if host_path.startswith(p) or f".{p}" in host_path:
                return True
        elif p.startswith("."):
            if host.endswith(p):
                return True
        elif host == p or host.endswith(f".{p}"):
            return True
    return False


def canonical_url(url: str) -> str:
    """Canonical form used for evidence deduplication.

    Lowercases scheme and host, strips ``www.``, the fragment, tracking
    parameters and a trailing slash, and sorts the remaining query.
    """
    raw = (url or "").strip()
    try:
        parsed = urlparse(raw)
    except ValueError:
        return raw
    if not parsed.netloc:
        return raw

    netloc = parsed.netloc.lower()
    if netloc.startswith("www."):
        netloc = netloc[4:]

    query = [
        (k, v)
        for k, v in parse_qsl(parsed.query, keep_blank_values=True)
        if not k.lower().startswith("utm_") and k.lower() not in _TRACKING_PARAMS
    ]
    path = parsed.path.rstrip("/")

    return urlunparse(
        (parsed.scheme.lower() or "https", netloc, path, "", urlencode(sorted(query)), "")
    )
