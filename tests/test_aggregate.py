"""Tests for reputation-weighted aggregation."""

from __future__ import annotations

import pytest

from claim_trail.errors import ReasoningError
from claim_trail.scoring.aggregate import (
    aggregate_reports,
    reputation_weight,
    surface_disagreements,
    weighted_tally,
)


class TestTally:
    def test_reputation_weight(self):
        assert reputation_weight(0) == 0.5
        assert reputation_weight(80) == pytest.approx(1.3)
        assert reputation_weight(100) == 1.5

    def test_weighted_by_profile_reputation(self, report_factory):
        reports = [
            report_factory("generic", "true"),
            report_factory("digital", "true"),
            report_factory("scholarly", "false"),
        ]
        tally = weighted_tally(reports, {"generic": 80, "digital": 20})
        assert tally == {"true": pytest.approx(2.0), "false": pytest.approx(1.0)}

    def test_failed_reports_excluded(self, report_factory):
        reports = [report_factory("generic", "true"), report_factory("digital", error=True)]
        assert weighted_tally(reports, {}) == {"true": 1.0}


class TestDisagreements:
    def test_split_verdicts(self, report_factory):
        reports = [report_factory("generic", "true"), report_factory("digital", "false")]
        assert surface_disagreements(reports) == [
            "Evaluators disagree on the verdict (Generic Evaluator=true, Digital Evaluator=false)"
        ]

    def test_failed_evaluator_listed(self, report_factory):
        reports = [report_factory("generic", "true"), report_factory("scholarly", error=True)]
        assert surface_disagreements(reports) == ["Scholarly Evaluator failed and did not contribute"]

    def test_unanimous(self, report_factory):
        reports = [report_factory("generic"), report_factory("digital")]
        assert surface_disagreements(reports) == []


class TestAggregateReports:
    @pytest.mark.asyncio
    async def test_single_verdict(self, reasoning, report_factory):
        reports = [report_factory("generic"), report_factory("mainstream")]
        result = await aggregate_reports(reports, {"generic": 70}, reasoning)
        assert result["verdict"] == "true"
        assert result["accuracy_score"] == 82
        assert result["confidence"] == 0.85
        assert result["consensus_description"] == "All evaluators agree."
        assert result["weighted_tally"] == {"true": pytest.approx(2.2)}

        args = reasoning.aggregate.await_args.args
        assert args[1] == {"generic": 70, "mainstream": 50}
        assert args[2] == result["weighted_tally"]

    @pytest.mark.asyncio
    async def test_all_failed_short_circuits(self, reasoning, report_factory):
        reports = [report_factory("generic", error=True), report_factory("digital", error=True)]
        result = await aggregate_reports(reports, {}, reasoning)
        assert result["verdict"] == "unknown"
        assert result["accuracy_score"] == 0
        assert result["confidence"] == 0
        assert len(result["remaining_uncertainties"]) == 2
        reasoning.aggregate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_reports(self, reasoning):
        result = await aggregate_reports([], {}, reasoning)
        assert result["verdict"] == "unknown"
        reasoning.aggregate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_out_of_range_values_clamped(self, reasoning_factory, report_factory):
        reasoning = reasoning_factory(
            aggregate={
                "verdict": "Definitely",
                "accuracy_score": 140,
                "confidence": -0.3,
                "summary": "s",
                "consensus_description": "Mostly aligned",
            }
        )
        result = await aggregate_reports([report_factory()], {}, reasoning)
        assert result["verdict"] == "unknown"
        assert result["accuracy_score"] == 100
        assert result["confidence"] == 0
        assert result["consensus_description"] == "Mostly aligned"

    @pytest.mark.asyncio
    async def test_disagreements_merged_into_uncertainties(self, reasoning_factory, report_factory):
        reasoning = reasoning_factory(
            aggregate={
                "verdict": "mixed",
                "accuracy_score": 55,
                "confidence": 0.6,
                "summary": "s",
                "remaining_uncertainties": ["Scheme dates unclear"],
            }
        )
        reports = [report_factory("generic", "true"), report_factory("digital", "false")]
        result = await aggregate_reports(reports, {}, reasoning)
        assert result["remaining_uncertainties"][0] == "Scheme dates unclear"
        assert result["remaining_uncertainties"][1].startswith("Evaluators disagree")

    @pytest.mark.asyncio
    async def test_reasoning_errors_propagate(self, reasoning, report_factory):
        reasoning.aggregate.side_effect = ReasoningError("upstream down", retryable=True)
        with pytest.raises(ReasoningError):
            await aggregate_reports([report_factory()], {}, reasoning)
