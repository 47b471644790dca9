"""The closed set of evaluator profiles.

Each profile differs only in which domains get a trust bonus or penalty,
which keyword families raise scrutiny, and how the reasoning service's
report is adjusted afterwards.
"""

from __future__ import annotations

import re
from typing import Any

from claim_trail.contracts import (
    EvaluatorProfile,
    EvaluatorReport,
    ScoredEvidence,
    SourceAuthority,
    Verdict,
)
from claim_trail.scoring.authority import (
    FACT_CHECK_DOMAINS,
    SOCIAL_MEDIA_DOMAINS,
    classify_authority,
)
from claim_trail.utils.urls import domain_matches, extract_domain

from . import register_evaluator
from .base import Evaluator, clamp, distinct_domains

_GOVERNMENT_TLDS = (".gov", ".gov.in")


def _mentions(text: str, phrases: tuple[str, ...]) -> bool:
    """Whole-word (or whole-phrase) match of any phrase in lowercase text."""
    lowered = text.lower()
    return any(re.search(rf"\b{re.escape(p)}\b", lowered) for p in phrases)


def _is_government(url: str) -> bool:
    return domain_matches(url, _GOVERNMENT_TLDS)


class MainstreamEvaluator(Evaluator):
    name = "Mainstream Press Evaluator"
    profile = EvaluatorProfile.MAINSTREAM
    bias_profile = {
        "political": "centrist",
        "economic": "pro-business",
        "editorial": "mainstream",
        "focus": ["national-interest", "development", "economy"],
    }

    trusted_domains = (
        "timesofindia.indiatimes.com",
        "economictimes.indiatimes.com",
        "pib.gov.in",
        "rbi.org.in",
        "sebi.gov.in",
        "reuters.com",
        "apnews.com",
    )

    def score_evidence(self, evidence, context):
        scored: list[ScoredEvidence] = []
        for e in evidence:
            bonus = 0.0
            url = e["url"]
            if domain_matches(url, self.trusted_domains):
                bonus += 20
            if _is_government(url):
                bonus += 25
            host = extract_domain(url, default="")
            if "economic" in host or "business" in host:
                bonus += 10
            base = e.get("domain_score", 50)
            scored.append({**e, "domain_score": min(100.0, base + bonus), "trust_bonus": bonus})
        return scored

    def adjust(self, report, context, evidence):
        has_government = any(_is_government(e["url"]) for e in evidence)
        if has_government and report["verdict"] == Verdict.UNKNOWN.value:
            report["credibility_score"] = min(100.0, report["credibility_score"] + 10)
            report["key_findings"].append("Government sources provide corroboration")
        return report

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "trusted_domains": list(self.trusted_domains)}


class DigitalEvaluator(Evaluator):
    name = "Digital Media Evaluator"
    profile = EvaluatorProfile.DIGITAL
    bias_profile = {
        "political": "varied",
        "content": "digital-first",
        "editorial": "trending-focused",
        "focus": ["viral-content", "social-media", "technology", "lifestyle"],
    }

    relevant_domains = (
        "indiatimes.com",
        "techcrunch.com",
        "theverge.com",
        "wired.com",
        "arstechnica.com",
    )
    social_signals = (
        "viral",
        "trending",
        "went viral",
        "social media",
        "twitter",
        "instagram",
        "facebook",
        "whatsapp forward",
    )
    forward_patterns = (
        "forward this",
        "share this",
        "must read",
        "breaking",
        "government has announced",
        "did you know",
    )

    def analyze(self, claim, evidence):
        has_social = _mentions(claim, self.social_signals)
        has_forward = _mentions(claim, self.forward_patterns)
        social_count = sum(1 for e in evidence if domain_matches(e["url"], SOCIAL_MEDIA_DOMAINS))

        risk = 0
        if has_social:
            risk += 30
        if has_forward:
            risk += 40
        risk += social_count * 10

        return {
            "is_viral": has_social or has_forward,
            "has_social_signals": has_social,
            "has_forward_pattern": has_forward,
            "social_media_count": social_count,
            "risk_level": min(100, risk),
        }

    def score_evidence(self, evidence, context):
        scored: list[ScoredEvidence] = []
        for e in evidence:
            url = e["url"]
            adjusted = e.get("domain_score", 50)
            if domain_matches(url, self.relevant_domains):
                adjusted += 10
            if domain_matches(url, SOCIAL_MEDIA_DOMAINS):
                adjusted -= 20
            if context["is_viral"] and domain_matches(url, FACT_CHECK_DOMAINS):
                adjusted += 25
            scored.append({**e, "domain_score": clamp(adjusted, 0.0, 100.0)})
        return scored

    def adjust(self, report, context, evidence):
        if context["is_viral"] and context["risk_level"] > 50:
            if report["verdict"] == Verdict.TRUE.value:
                report["credibility_score"] = max(report["credibility_score"] - 15, 40.0)
                report["concerns"].append(
                    "Content shows viral/forwarded message patterns - exercise caution"
                )
        if context["is_viral"]:
            report["key_findings"].append(
                f"Viral content pattern detected (risk level: {context['risk_level']}%)"
            )
        return report

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "relevant_domains": list(self.relevant_domains)}


class InvestigativeEvaluator(Evaluator):
    name = "Investigative Evaluator"
    profile = EvaluatorProfile.INVESTIGATIVE
    bias_profile = {
        "political": "liberal-leaning",
        "editorial": "investigative",
        "approach": "policy-critical",
        "focus": ["social-issues", "civil-liberties", "policy-analysis", "international"],
    }

    trusted_sources = (
        "ndtv.com",
        "thehindu.com",
        "theguardian.com",
        "bbc.com",
        "nytimes.com",
        "washingtonpost.com",
        "scroll.in",
        "thewire.in",
    )
    academic_sources = (
        "jstor.org",
        "sciencedirect.com",
        "researchgate.net",
        "scholar.google.com",
        ".edu",
        ".ac.in",
    )
    international_sources = ("bbc.com", "nytimes.com", "theguardian.com", "reuters.com")
    policy_keywords = (
        "government",
        "policy",
        "law",
        "court",
        "supreme court",
        "parliament",
        "minister",
        "ministry",
        "bill",
        "act",
        "regulation",
        "constitutional",
        "rights",
    )
    social_keywords = (
        "protest",
        "arrest",
        "detention",
        "violence",
        "discrimination",
        "caste",
        "minority",
        "women",
        "dalit",
        "tribal",
        "farmer",
        "student",
        "journalist",
        "activist",
    )
    investigative_markers = ("investigation", "according to documents", "sources say")

    def analyze(self, claim, evidence):
        policy = _mentions(claim, self.policy_keywords)
        social = _mentions(claim, self.social_keywords)
        if policy and social:
            sensitivity = "high"
        elif policy or social:
            sensitivity = "medium"
        else:
            sensitivity = "low"
        return {
            "has_policy_implications": policy,
            "has_social_implications": social,
            "sensitivity": sensitivity,
        }

    def score_evidence(self, evidence, context):
        policy = context["has_policy_implications"]
        scored: list[ScoredEvidence] = []
        for e in evidence:
            url = e["url"]
            adjusted = e.get("domain_score", 50)
            if domain_matches(url, self.trusted_sources):
                adjusted += 15
            if policy and domain_matches(url, self.academic_sources):
                adjusted += 25
            if domain_matches(url, self.international_sources):
                adjusted += 10
            if policy and _is_government(url):
                adjusted += 5
            scored.append({**e, "domain_score": clamp(adjusted, 0.0, 100.0)})
        return scored

    def adjust(self, report, context, evidence):
        if context["sensitivity"] == "high":
            if len(distinct_domains(evidence)) < 3 and report["verdict"] == Verdict.TRUE.value:
                report["confidence"] = max(report["confidence"] - 0.2, 0.3)
                report["concerns"].append("Sensitive topic with limited independent verification")

            if any(_mentions(e.get("snippet", ""), self.investigative_markers) for e in evidence):
                report["key_findings"].append("Investigative reporting found on this topic")

        if context["has_policy_implications"]:
            report["key_findings"].append(
                f"Topic involves policy/governance (sensitivity: {context['sensitivity']})"
            )
        return report

    def describe(self) -> dict[str, Any]:
        return {
            **super().describe(),
            "trusted_sources": list(self.trusted_sources),
            "academic_sources": list(self.academic_sources),
        }


class ScholarlyEvaluator(Evaluator):
    name = "Scholarly Evaluator"
    profile = EvaluatorProfile.SCHOLARLY
    bias_profile = {
        "political": "neutral",
        "editorial": "research-driven",
        "approach": "institutional-evidence",
        "focus": ["peer-review", "primary-data", "methodology"],
    }

    authority_bonus: dict[SourceAuthority, float] = {
        SourceAuthority.INSTITUTIONAL: 25,
        SourceAuthority.PROFESSIONAL: 10,
        SourceAuthority.COMMUNITY: -10,
        SourceAuthority.PROMOTIONAL: -25,
        SourceAuthority.UNKNOWN: 0,
    }

    def analyze(self, claim, evidence):
        authorities = [classify_authority(e["url"]) for e in evidence]
        return {
            "authorities": authorities,
            "institutional_count": authorities.count(SourceAuthority.INSTITUTIONAL),
        }

    def score_evidence(self, evidence, context):
        scored: list[ScoredEvidence] = []
        for e, authority in zip(evidence, context["authorities"]):
            bonus = self.authority_bonus[authority]
            adjusted = clamp(e.get("domain_score", 50) + bonus, 0.0, 100.0)
            scored.append({**e, "domain_score": adjusted, "trust_bonus": bonus})
        return scored

    def adjust(self, report, context, evidence):
        institutional = context["institutional_count"]
        if institutional == 0 and report["verdict"] == Verdict.TRUE.value:
            report["confidence"] = max(report["confidence"] - 0.15, 0.3)
            report["concerns"].append("No institutional or peer-reviewed source supports this claim")
        elif institutional:
            report["key_findings"].append(f"{institutional} institutional source(s) consulted")
        return report


class GenericEvaluator(Evaluator):
    """Evidence-neutral baseline, also used for quick verification."""

    name = "Generic Evaluator"
    profile = EvaluatorProfile.GENERIC
    bias_profile = {
        "political": "neutral",
        "editorial": "evidence-based",
        "approach": "scientific-method",
        "focus": ["primary-sources", "cross-verification", "factual-accuracy"],
    }

    primary_sources = ("reuters.com", "apnews.com", "afp.com", "who.int", "un.org", ".gov")

    # Checked in this order; first family with a hit wins
    verdict_keywords: dict[str, tuple[str, ...]] = {
        Verdict.FALSE.value: ("false", "fake", "misleading", "misinformation", "hoax", "debunked"),
        Verdict.TRUE.value: ("true", "correct", "accurate", "verified", "confirmed"),
        Verdict.MIXED.value: ("partly true", "partially", "mixed", "context"),
    }

    def analyze(self, claim, evidence):
        fact_checks = [e for e in evidence if domain_matches(e["url"], FACT_CHECK_DOMAINS)]
        fact_check_verdict = None
        for fc in fact_checks:
            snippet = fc.get("snippet", "")
            for verdict, keywords in self.verdict_keywords.items():
                if _mentions(snippet, keywords):
                    fact_check_verdict = verdict
                    break
            if fact_check_verdict:
                break
        return {
            "fact_check_count": len(fact_checks),
            "fact_check_verdict": fact_check_verdict,
            "fact_check_sources": [extract_domain(e["url"]) for e in fact_checks],
        }

    def score_evidence(self, evidence, context):
        scored: list[ScoredEvidence] = []
        for e in evidence:
            url = e["url"]
            score = e.get("domain_score", 50)
            if domain_matches(url, FACT_CHECK_DOMAINS):
                score = 95
            elif domain_matches(url, self.primary_sources):
                score = max(score, 85)
            elif _is_government(url):
                score = max(score, 80)
            elif domain_matches(url, (".edu", ".ac.in")):
                score = max(score, 75)
            if domain_matches(url, SOCIAL_MEDIA_DOMAINS):
                score = min(score, 30)
            scored.append({**e, "domain_score": float(score)})
        return scored

    def adjust(self, report, context, evidence):
        verdict = context["fact_check_verdict"]
        if verdict:
            sources = ", ".join(context["fact_check_sources"])
            if verdict == Verdict.FALSE.value and report["verdict"] != Verdict.FALSE.value:
                report["verdict"] = Verdict.FALSE.value
                report["credibility_score"] = min(report["credibility_score"], 30.0)
                report["concerns"].append(f"Fact-checkers ({sources}) have rated this claim as false")
            elif verdict == Verdict.TRUE.value and report["verdict"] != Verdict.TRUE.value:
                report["credibility_score"] = max(report["credibility_score"], 70.0)
            report["key_findings"].append(
                f"Fact-check available: {verdict} ({context['fact_check_count']} source(s))"
            )

        if evidence:
            average = sum(e["domain_score"] for e in evidence) / len(evidence)
            if average < 50:
                report["confidence"] = max(report["confidence"] - 0.2, 0.3)
                report["concerns"].append("Low average source quality - verification uncertain")

        if len(distinct_domains(evidence)) < 2:
            report["confidence"] = max(report["confidence"] - 0.15, 0.3)
            report["concerns"].append("Limited source diversity")

        if any(domain_matches(e["url"], self.primary_sources) for e in evidence):
            report["credibility_score"] = min(100.0, report["credibility_score"] + 5)
            report["key_findings"].append("Primary/wire service source found")
        return report

    def describe(self) -> dict[str, Any]:
        return {
            **super().describe(),
            "fact_checkers": list(FACT_CHECK_DOMAINS),
            "primary_sources": list(self.primary_sources),
        }


register_evaluator(EvaluatorProfile.MAINSTREAM.value, MainstreamEvaluator)
register_evaluator(EvaluatorProfile.DIGITAL.value, DigitalEvaluator)
register_evaluator(EvaluatorProfile.INVESTIGATIVE.value, InvestigativeEvaluator)
register_evaluator(EvaluatorProfile.SCHOLARLY.value, ScholarlyEvaluator)
register_evaluator(EvaluatorProfile.GENERIC.value, GenericEvaluator)
