"""Tests for source authority classification and domain reputation."""

from __future__ import annotations

import pytest

from claim_trail.contracts import SourceAuthority
from claim_trail.scoring.authority import (
    authority_score,
    classify_authority,
    domain_reputation,
    is_fact_check_domain,
    is_social_media,
)


class TestClassifyAuthority:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.nature.com/articles/x", SourceAuthority.INSTITUTIONAL),
            ("https://www.iitb.ac.in/research", SourceAuthority.INSTITUTIONAL),
            ("https://www.cdc.gov/flu", SourceAuthority.INSTITUTIONAL),
            ("https://www.reuters.com/world", SourceAuthority.PROFESSIONAL),
            ("https://www.reddit.com/r/india", SourceAuthority.COMMUNITY),
            ("https://shop.example.com/deal", SourceAuthority.PROMOTIONAL),
            ("https://example.com/page", SourceAuthority.UNKNOWN),
            ("", SourceAuthority.UNKNOWN),
        ],
    )
    def test_classification(self, url, expected):
        assert classify_authority(url) == expected

    def test_subdomain_of_institutional(self):
        assert classify_authority("https://blogs.nature.com/post") == SourceAuthority.INSTITUTIONAL

    def test_scores_are_ordered(self):
        assert authority_score(SourceAuthority.INSTITUTIONAL) > authority_score(
            SourceAuthority.PROFESSIONAL
        )
        assert authority_score(SourceAuthority.PROMOTIONAL) < authority_score(
            SourceAuthority.UNKNOWN
        )


class TestDomainReputation:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.reuters.com/world", 90),
            ("https://pib.gov.in/PressRelease", 90),
            ("https://www.indiatoday.in/india", 70),
            ("https://twitter.com/user/status/1", 30),
            ("https://data.gov/dataset", 95),
            ("https://mha.gov.in/notice", 95),
            ("https://www.iitb.ac.in/news", 85),
            ("https://www.mit.edu/news", 85),
            ("https://en.wikipedia.org/wiki/Solar", 75),
            ("https://random-blog.net/post", 50),
            ("not a url", 50),
        ],
    )
    def test_tiers(self, url, expected):
        assert domain_reputation(url) == expected


class TestDomainFamilies:
    def test_fact_checkers(self):
        assert is_fact_check_domain("https://www.snopes.com/fact-check/x")
        assert is_fact_check_domain("https://www.altnews.in/story")
        assert not is_fact_check_domain("https://www.reuters.com/world")

    def test_social_media(self):
        assert is_social_media("https://x.com/user")
        assert is_social_media("https://www.facebook.com/page")
        assert not is_social_media("https://www.netflix.com/title")
