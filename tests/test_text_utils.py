"""Tests for text similarity and URL helpers."""

from __future__ import annotations

from claim_trail.utils.text import fuzzy_distance, jaccard_score, truncate
from claim_trail.utils.urls import canonical_url, domain_matches, extract_domain


class TestJaccard:
    def test_identical(self):
        assert jaccard_score("solar subsidy approved", "Solar Subsidy Approved") == 1.0

    def test_disjoint(self):
        assert jaccard_score("solar subsidy", "cricket final") == 0.0

    def test_partial(self):
        assert jaccard_score("a b c", "a b d") == 0.5

    def test_empty(self):
        assert jaccard_score("", "anything") == 0.0


class TestFuzzyDistance:
    def test_identical_text_is_zero(self):
        assert fuzzy_distance("Cabinet approves solar plan", "Cabinet approves solar plan") == 0.0

    def test_case_and_punctuation_ignored(self):
        assert fuzzy_distance("Cabinet approves solar plan!", "cabinet approves solar plan") == 0.0

    def test_word_order_ignored(self):
        assert fuzzy_distance("solar plan approved", "approved solar plan") == 0.0

    def test_unrelated_text_is_far(self):
        d = fuzzy_distance(
            "Cabinet approves rooftop solar subsidy",
            "Local team wins district cricket final",
        )
        assert d > 0.3

    def test_blank_is_maximal(self):
        assert fuzzy_distance("", "text") == 1.0
        assert fuzzy_distance("   ", "text") == 1.0


class TestTruncate:
    def test_truncates_and_strips(self):
        assert truncate("hello world  ", 8) == "hello wo"
        assert truncate("  hi there", 5) == "hi"

    def test_none_safe(self):
        assert truncate(None, 10) == ""


class TestExtractDomain:
    def test_strips_www(self):
        assert extract_domain("https://www.reuters.com/world") == "reuters.com"

    def test_lowercases(self):
        assert extract_domain("https://NEWS.Example.COM/a") == "news.example.com"

    def test_unparseable_uses_default(self):
        assert extract_domain("not a url") == "unknown"
        assert extract_domain("not a url", default="") == ""


class TestDomainMatches:
    def test_exact_host(self):
        assert domain_matches("https://x.com/user/status/1", ["x.com"])

    def test_subdomain(self):
        assert domain_matches("https://mobile.twitter.com/a", ["twitter.com"])

    def test_no_substring_false_positive(self):
        assert not domain_matches("https://www.netflix.com/title", ["x.com"])

    def test_tld_suffix(self):
        assert domain_matches("https://www.cdc.gov/flu", [".gov"])
        assert not domain_matches("https://gov.example.com", [".gov"])

    def test_path_prefix(self):
        assert domain_matches("https://www.thequint.com/news/webqoof/x", ["thequint.com/news"])
        assert not domain_matches("https://www.thequint.com/entertainment", ["thequint.com/news"])


class TestCanonicalUrl:
    def test_strips_tracking_fragment_and_slash(self):
        url = "HTTPS://WWW.Example.com/a/?utm_source=x&b=2&a=1#frag"
        assert canonical_url(url) == "https://example.com/a?a=1&b=2"

    def test_drops_click_ids(self):
        assert canonical_url("https://example.com/a?fbclid=123") == "https://example.com/a"

    def test_equivalent_urls_match(self):
        assert canonical_url("https://www.reuters.com/world/") == canonical_url(
            "https://reuters.com/world?utm_medium=social"
        )

    def test_relative_returned_unchanged(self):
        assert canonical_url("/relative/path") == "/relative/path"
