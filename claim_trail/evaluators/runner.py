"""Bounded-concurrency evaluator runner with per-evaluator failure isolation."""

from __future__ import annotations

import asyncio
import sys

from claim_trail.contracts import EvaluatorReport, EvidenceItem, ReasoningService

from . import get_evaluator
from .base import Evaluator, failed_report


def resolve_evaluators(
    names: list[str],
    reasoning: ReasoningService,
    *,
    evaluators: dict[str, Evaluator] | None = None,
) -> list[Evaluator]:
    """Map requested names to evaluator instances.

    Duplicates collapse to the first occurrence; unknown names are skipped
    with a warning.
    """
    resolved: list[Evaluator] = []
    seen: set[str] = set()
    for raw in names:
        name = (raw or "").strip().lower()
        if not name or name in seen:
            continue
        seen.add(name)
        if evaluators is not None:
            evaluator = evaluators.get(name)
            if evaluator is None:
                print(f"WARNING: unknown evaluator '{raw}', skipping", file=sys.stderr)
                continue
        else:
            try:
                evaluator = get_evaluator(name, reasoning)
            except KeyError:
                print(f"WARNING: unknown evaluator '{raw}', skipping", file=sys.stderr)
                continue
        resolved.append(evaluator)
    return resolved


async def run_evaluators(
    names: list[str],
    claim: str,
    evidence: list[EvidenceItem],
    *,
    reasoning: ReasoningService,
    max_concurrent: int = 4,
    timeout: float = 90.0,
    evaluators: dict[str, Evaluator] | None = None,
) -> list[EvaluatorReport]:
    """Run every requested evaluator, at most ``max_concurrent`` in flight.

    Returns one report per resolved evaluator, in request order, once all of
    them have settled. A raising or timed-out evaluator yields a failed report
    and never affects its siblings.
    """
    resolved = resolve_evaluators(names, reasoning, evaluators=evaluators)
    if not resolved:
        return []

    sem = asyncio.Semaphore(max_concurrent)

    async def assess_with_sem(evaluator: Evaluator) -> EvaluatorReport:
        async with sem:
            return await asyncio.wait_for(evaluator.assess(claim, evidence), timeout=timeout)

    tasks = [assess_with_sem(e) for e in resolved]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    reports: list[EvaluatorReport] = []
    for evaluator, result in zip(resolved, results):
        if isinstance(result, BaseException):
            if isinstance(result, (asyncio.TimeoutError, TimeoutError)):
                reason = f"timed out after {timeout}s"
            else:
                reason = type(result).__name__
            print(f"WARNING: {evaluator.name} failed: {reason}: {result}", file=sys.stderr)
            reports.append(failed_report(evaluator.name, evaluator.profile.value, reason))
        else:
            reports.append(result)
    return reports
