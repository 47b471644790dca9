"""Source authority classification and domain reputation scoring."""

from __future__ import annotations

from claim_trail.contracts import SourceAuthority
from claim_trail.utils.urls import domain_matches, extract_domain

# Shared domain families used by the graph builder and evaluator profiles
FACT_CHECK_DOMAINS = (
    "snopes.com",
    "factcheck.org",
    "politifact.com",
    "altnews.in",
    "boomlive.in",
    "thequint.com",
    "vishvasnews.com",
    "factly.in",
    "newschecker.in",
)

SOCIAL_MEDIA_DOMAINS = (
    "twitter.com",
    "x.com",
    "facebook.com",
    "instagram.com",
    "tiktok.com",
    "reddit.com",
    "youtube.com",
)

# TLD and domain patterns for classification
_INSTITUTIONAL_TLDS = (".edu", ".gov", ".mil", ".gov.in", ".ac.in", ".nic.in")
_INSTITUTIONAL_DOMAINS = {
    "nature.com",
    "science.org",
    "sciencedirect.com",
    "springer.com",
    "wiley.com",
    "ncbi.nlm.nih.gov",
    "arxiv.org",
    "jstor.org",
    "ieee.org",
    "acm.org",
    "who.int",
    "un.org",
    "worldbank.org",
    "doi.org",
    "researchgate.net",
    "plos.org",
    "cambridge.org",
    "academic.oup.com",
}

_PROFESSIONAL_DOMAINS = {
    "reuters.com",
    "apnews.com",
    "afp.com",
    "bbc.com",
    "bbc.co.uk",
    "nytimes.com",
    "washingtonpost.com",
    "theguardian.com",
    "thehindu.com",
    "indianexpress.com",
    "ndtv.com",
    "indiatimes.com",
    "hindustantimes.com",
    "livemint.com",
    "indiatoday.in",
    "scroll.in",
    "theprint.in",
    "thewire.in",
}

_COMMUNITY_DOMAINS = {
    "wikipedia.org",
    "quora.com",
    "medium.com",
    "substack.com",
    *SOCIAL_MEDIA_DOMAINS,
}

_PROMOTIONAL_PATTERNS = ("shop.", "store.", "buy.", "deals.", "promo.")

# Authority -> numeric score mapping
_AUTHORITY_SCORES: dict[SourceAuthority, float] = {
    SourceAuthority.INSTITUTIONAL: 0.95,
    SourceAuthority.PROFESSIONAL: 0.75,
    SourceAuthority.COMMUNITY: 0.50,
    SourceAuthority.PROMOTIONAL: 0.15,
    SourceAuthority.UNKNOWN: 0.40,
}

# Domain reputation tiers (0-100), checked in order
_HIGH_REPUTATION = (
    "reuters.com",
    "apnews.com",
    "bbc.com",
    "bbc.co.uk",
    "theguardian.com",
    "nytimes.com",
    "washingtonpost.com",
    "thehindu.com",
    "indianexpress.com",
    "ndtv.com",
    "timesofindia.indiatimes.com",
    "hindustantimes.com",
    "economictimes.indiatimes.com",
    "livemint.com",
    "pib.gov.in",
    "who.int",
    "un.org",
)
_MEDIUM_REPUTATION = (
    "indiatoday.in",
    "news18.com",
    "firstpost.com",
    "thequint.com",
    "scroll.in",
    "theprint.in",
    "moneycontrol.com",
    "businesstoday.in",
)


def classify_authority(url: str) -> SourceAuthority:
    """Classify a URL's source authority level."""
    hostname = extract_domain(url, default="")
    if not hostname:
        return SourceAuthority.UNKNOWN

    if hostname.endswith(_INSTITUTIONAL_TLDS):
        return SourceAuthority.INSTITUTIONAL

    # Also check parent domain (e.g., sub.nature.com -> nature.com)
    parts = hostname.split(".")
    for i in range(len(parts) - 1):
        domain = ".".join(parts[i:])
        if domain in _INSTITUTIONAL_DOMAINS:
            return SourceAuthority.INSTITUTIONAL
        if domain in _PROFESSIONAL_DOMAINS:
            return SourceAuthority.PROFESSIONAL
        if domain in _COMMUNITY_DOMAINS:
            return SourceAuthority.COMMUNITY

    for pattern in _PROMOTIONAL_PATTERNS:
        if hostname.startswith(pattern):
            return SourceAuthority.PROMOTIONAL

    return SourceAuthority.UNKNOWN


def authority_score(authority: SourceAuthority) -> float:
    """Convert authority classification to numeric score."""
    return _AUTHORITY_SCORES.get(authority, 0.40)


def domain_reputation(url: str) -> int:
    """Heuristic domain-quality score (0-100) attached to retrieved evidence."""
    domain = extract_domain(url, default="")
    if not domain:
        return 50

    if domain_matches(url, _HIGH_REPUTATION):
        return 90
    if domain_matches(url, _MEDIUM_REPUTATION):
        return 70
    if domain_matches(url, SOCIAL_MEDIA_DOMAINS):
        return 30

    # Government and educational domains
    if domain.endswith((".gov", ".gov.in")):
        return 95
    if domain.endswith((".edu", ".ac.in")):
        return 85
    if domain.endswith(".org"):
        return 75

    return 50


def is_fact_check_domain(url: str) -> bool:
    return domain_matches(url, FACT_CHECK_DOMAINS)


def is_social_media(url: str) -> bool:
    return domain_matches(url, SOCIAL_MEDIA_DOMAINS)
