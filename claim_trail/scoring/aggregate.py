"""Reputation-weighted aggregation of evaluator reports into one verdict."""

from __future__ import annotations

from claim_trail.contracts import (
    AggregateVerdict,
    EvaluatorReport,
    ReasoningService,
    Verdict,
)

DEFAULT_REPUTATION = 50.0


def reputation_weight(reputation: float) -> float:
    """0.5 for a zero-reputation evaluator, 1.5 for a perfect one."""
    return 0.5 + reputation / 100


def weighted_tally(
    reports: list[EvaluatorReport], reputations: dict[str, float]
) -> dict[str, float]:
    """Reputation-weighted support per verdict. Failed reports carry no weight."""
    tally: dict[str, float] = {}
    for report in reports:
        if report.get("error"):
            continue
        weight = reputation_weight(reputations.get(report["profile"], DEFAULT_REPUTATION))
        tally[report["verdict"]] = round(tally.get(report["verdict"], 0.0) + weight, 4)
    return tally


def surface_disagreements(reports: list[EvaluatorReport]) -> list[str]:
    """Describe verdict splits and failed evaluators as open uncertainties."""
    uncertainties: list[str] = []
    succeeded = [r for r in reports if not r.get("error")]
    verdicts = {r["verdict"] for r in succeeded}
    if len(verdicts) > 1:
        split = ", ".join(f"{r['evaluator_name']}={r['verdict']}" for r in succeeded)
        uncertainties.append(f"Evaluators disagree on the verdict ({split})")
    for r in reports:
        if r.get("error"):
            uncertainties.append(f"{r['evaluator_name']} failed and did not contribute")
    return uncertainties


def _merge_unique(*groups: list[str]) -> list[str]:
    merged: list[str] = []
    seen: set[str] = set()
    for group in groups:
        for item in group:
            if item and item not in seen:
                seen.add(item)
                merged.append(item)
    return merged


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


async def aggregate_reports(
    reports: list[EvaluatorReport],
    reputations: dict[str, float],
    reasoning: ReasoningService,
) -> AggregateVerdict:
    """Produce exactly one verdict from N reports.

    With no successful report the result is a fixed ``unknown`` verdict and
    the reasoning service is not called. Reasoning errors propagate.
    """
    tally = weighted_tally(reports, reputations)
    disagreements = surface_disagreements(reports)

    if not tally:
        return AggregateVerdict(
            verdict=Verdict.UNKNOWN.value,
            accuracy_score=0.0,
            confidence=0.0,
            summary="No evaluator produced a usable report",
            consensus_description="No consensus: every evaluator failed",
            remaining_uncertainties=disagreements,
            weighted_tally=tally,
        )

    effective = {
        r["profile"]: reputations.get(r["profile"], DEFAULT_REPUTATION) for r in reports
    }
    raw = await reasoning.aggregate(reports, effective, tally)

    raw_uncertainties = raw.get("remaining_uncertainties")
    if not isinstance(raw_uncertainties, list):
        raw_uncertainties = []

    return AggregateVerdict(
        verdict=Verdict.normalize(raw.get("verdict")).value,
        accuracy_score=round(_clamp(float(raw.get("accuracy_score", 50)), 0.0, 100.0), 2),
        confidence=round(_clamp(float(raw.get("confidence", 0.5)), 0.0, 1.0), 4),
        summary=str(raw.get("summary", "")),
        consensus_description=str(
            raw.get("consensus_description") or raw.get("agent_consensus") or ""
        ),
        remaining_uncertainties=_merge_unique(
            [str(u) for u in raw_uncertainties], disagreements
        ),
        weighted_tally=tally,
    )
