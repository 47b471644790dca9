"""Evaluator base: score a private copy of the evidence, delegate, post-process."""

from __future__ import annotations

import copy
from typing import Any

from claim_trail.contracts import (
    EvaluatorProfile,
    EvaluatorReport,
    EvidenceItem,
    ReasoningService,
    ScoredEvidence,
    Verdict,
)
from claim_trail.errors import EvaluatorError
from claim_trail.utils.urls import extract_domain


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def _number(value: Any, default: float) -> float:
    return default if value is None else float(value)


def distinct_domains(evidence: list[ScoredEvidence]) -> set[str]:
    return {extract_domain(e["url"], default="") for e in evidence} - {""}


class Evaluator:
    """One fixed editorial perspective over the evidence.

    Subclasses override ``analyze``, ``score_evidence`` and ``adjust``.
    They never see the caller's evidence list, only a deep copy of it.
    """

    name: str = "Evaluator"
    profile: EvaluatorProfile = EvaluatorProfile.GENERIC
    bias_profile: dict[str, Any] = {}

    def __init__(self, reasoning: ReasoningService) -> None:
        self.reasoning = reasoning

    async def assess(self, claim: str, evidence: list[EvidenceItem]) -> EvaluatorReport:
        private: list[ScoredEvidence] = copy.deepcopy(evidence)
        context = self.analyze(claim, private)
        scored = self.score_evidence(private, context)

        raw = await self.reasoning.assess(self.profile.value, claim, scored)
        if not isinstance(raw, dict):
            raise EvaluatorError(f"{self.name}: reasoning service returned {type(raw).__name__}")
        if raw.get("credibility_score") is None and raw.get("confidence") is None:
            raise EvaluatorError(f"{self.name}: reasoning reply has no credibility score or confidence")

        report = self._coerce(raw)
        report = self.adjust(report, context, scored)
        return self._finalize(report)

    def analyze(self, claim: str, evidence: list[ScoredEvidence]) -> dict[str, Any]:
        return {}

    def score_evidence(
        self, evidence: list[ScoredEvidence], context: dict[str, Any]
    ) -> list[ScoredEvidence]:
        return [{**e, "domain_score": e.get("domain_score", 50)} for e in evidence]

    def adjust(
        self,
        report: EvaluatorReport,
        context: dict[str, Any],
        evidence: list[ScoredEvidence],
    ) -> EvaluatorReport:
        return report

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "profile": self.profile.value,
            "bias_profile": dict(self.bias_profile),
        }

    def _coerce(self, raw: dict[str, Any]) -> EvaluatorReport:
        return EvaluatorReport(
            evaluator_name=self.name,
            profile=self.profile.value,
            credibility_score=_number(raw.get("credibility_score"), 50.0),
            confidence=_number(raw.get("confidence"), 0.5),
            verdict=Verdict.normalize(raw.get("verdict")).value,
            summary=str(raw.get("summary", "")),
            reasoning=str(raw.get("reasoning", "")),
            evidence_links=_str_list(raw.get("evidence_links")),
            key_findings=_str_list(raw.get("key_findings")),
            concerns=_str_list(raw.get("concerns")),
        )

    def _finalize(self, report: EvaluatorReport) -> EvaluatorReport:
        report["credibility_score"] = round(clamp(report["credibility_score"], 0.0, 100.0), 2)
        report["confidence"] = round(clamp(report["confidence"], 0.0, 1.0), 4)
        report["verdict"] = Verdict.normalize(report["verdict"]).value
        report["evaluator_name"] = self.name
        report["profile"] = self.profile.value
        return report


def failed_report(name: str, profile: str, reason: str) -> EvaluatorReport:
    """Degraded report standing in for an evaluator that raised or timed out."""
    return EvaluatorReport(
        evaluator_name=name,
        profile=profile,
        credibility_score=0.0,
        confidence=0.0,
        verdict=Verdict.UNKNOWN.value,
        summary=f"Evaluator failed: {reason}",
        reasoning="",
        evidence_links=[],
        key_findings=[],
        concerns=[],
        error=True,
    )
