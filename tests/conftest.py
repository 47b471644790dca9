"""Test fixtures and mocks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from claim_trail.contracts import EvaluatorReport, EvidenceItem


def make_reasoning(
    *,
    assess: dict | None = None,
    aggregate: dict | None = None,
    graph: dict | None = None,
    claims: list[dict] | None = None,
) -> MagicMock:
    """Reasoning service stand-in with canned JSON responses."""
    reasoning = MagicMock()
    reasoning.assess = AsyncMock(
        return_value=assess
        or {
            "credibility_score": 75,
            "confidence": 0.8,
            "verdict": "true",
            "summary": "Supported by multiple outlets",
            "reasoning": "Several independent sources agree.",
            "evidence_links": ["https://www.reuters.com/world/solar-subsidy"],
            "key_findings": ["Official announcement found"],
            "concerns": [],
        }
    )
    reasoning.aggregate = AsyncMock(
        return_value=aggregate
        or {
            "verdict": "true",
            "accuracy_score": 82,
            "confidence": 0.85,
            "summary": "The claim is accurate.",
            "agent_consensus": "All evaluators agree.",
            "remaining_uncertainties": [],
        }
    )
    reasoning.analyze_source_graph = AsyncMock(return_value=graph or {"edges": []})
    reasoning.extract_claims = AsyncMock(return_value=claims or [])
    reasoning.usage = []
    return reasoning


def make_report(
    profile: str = "generic",
    verdict: str = "true",
    *,
    credibility: float = 70.0,
    confidence: float = 0.8,
    error: bool = False,
) -> EvaluatorReport:
    report = EvaluatorReport(
        evaluator_name=f"{profile.title()} Evaluator",
        profile=profile,
        credibility_score=credibility,
        confidence=confidence,
        verdict=verdict,
        summary="",
        reasoning="",
        evidence_links=[],
        key_findings=[],
        concerns=[],
    )
    if error:
        report["error"] = True
    return report


class FakeClock:
    """Injectable clock for reputation decay tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def reasoning() -> MagicMock:
    return make_reasoning()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_evidence() -> list[EvidenceItem]:
    return [
        EvidenceItem(
            url="https://pib.gov.in/PressRelease?id=1",
            title="Cabinet approves rooftop solar subsidy scheme",
            snippet="The Union Cabinet approved a subsidy for rooftop solar panels in households.",
            publish_timestamp="2026-03-01T08:00:00+00:00",
            domain_score=90,
        ),
        EvidenceItem(
            url="https://www.reuters.com/world/india/solar-subsidy",
            title="India backs household solar with new subsidy",
            snippet="India will pay part of the installation cost for rooftop panels, officials said.",
            publish_timestamp="2026-03-01T11:30:00+00:00",
            domain_score=90,
        ),
        EvidenceItem(
            url="https://www.thehindu.com/news/national/solar-plan",
            title="Rooftop solar plan to cover ten million homes",
            snippet="The plan targets ten million homes over three years.",
            publish_timestamp="2026-03-02T06:00:00+00:00",
            domain_score=90,
        ),
        EvidenceItem(
            url="https://twitter.com/someuser/status/1",
            title="Free solar panels for everyone",
            snippet="Everyone gets free panels from next month, breaking news!",
            publish_timestamp="2026-03-02T09:00:00+00:00",
            domain_score=30,
        ),
        EvidenceItem(
            url="https://www.altnews.in/solar-free-panels",
            title="Fact check: panels are subsidised, not free",
            snippet="Claims of free solar panels for everyone are misleading; the scheme is a subsidy.",
            publish_timestamp="2026-03-03T10:00:00+00:00",
            domain_score=70,
        ),
    ]


@pytest.fixture
def reasoning_factory():
    return make_reasoning


@pytest.fixture
def report_factory():
    return make_report
