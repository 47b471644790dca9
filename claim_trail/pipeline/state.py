"""VerificationState: the single state object flowing through the pipeline."""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from claim_trail.contracts import (
    AggregateVerdict,
    EvaluatorReport,
    EvidenceItem,
    LedgerReceipt,
    ReputationChange,
    SourceGraph,
)

# --- Reducers (last-write-wins) ---


def _replace(existing: Any, new: Any) -> Any:
    return new


def _replace_list(existing: list, new: list) -> list:
    """Replace-last-write for list fields (overwrites, not appends)."""
    return new


def _replace_dict(existing: dict, new: dict) -> dict:
    return new


class VerificationState(TypedDict):
    # Input (set once)
    run_id: str
    claim: str
    source: str
    original_url: Annotated[str | None, _replace]
    started_at: float  # time.monotonic() at run start

    # Normalize
    evidence: Annotated[list[EvidenceItem], _replace_list]
    requested_evaluators: Annotated[list[str], _replace_list]

    # Evaluate + aggregate
    reports: Annotated[list[EvaluatorReport], _replace_list]
    reputations: Annotated[dict[str, float], _replace_dict]
    verdict: Annotated[AggregateVerdict, _replace_dict]

    # Source graph + persistence
    graph: Annotated[SourceGraph, _replace_dict]
    ledger: Annotated[LedgerReceipt | None, _replace]
    persisted: Annotated[bool, _replace]
    processing_time_ms: Annotated[int, _replace]

    # Reputation
    reputation_changes: Annotated[list[ReputationChange], _replace_list]
