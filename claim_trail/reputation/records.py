"""Pure reputation record operations: score changes, decay, verification stats.

All functions take the current time explicitly and mutate the record in place.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from claim_trail.contracts import (
    DecayState,
    EvaluatorProfile,
    ReputationHistoryEntry,
    ReputationRecord,
    ReputationStats,
)

NEUTRAL_SCORE = 50.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0

HIGH_CONFIDENCE_THRESHOLD = 0.8
LOW_CONFIDENCE_THRESHOLD = 0.3
HIGH_CONFIDENCE_BONUS = 1.5
LOW_CONFIDENCE_PENALTY = 0.5

AGREED_REASON = "Agreed with final verdict"
DISAGREED_REASON = "Disagreed with final verdict"
DECAY_REASON = "time decay"


def new_record(
    name: str,
    *,
    now: datetime,
    evaluator_type: str | None = None,
    decay_rate: float = 0.01,
    decay_period_days: int = 7,
) -> ReputationRecord:
    return ReputationRecord(
        evaluator_name=name,
        evaluator_type=evaluator_type or EvaluatorProfile.infer(name).value,
        current_score=NEUTRAL_SCORE,
        stats=ReputationStats(
            total_verifications=0,
            correct_predictions=0,
            incorrect_predictions=0,
            agreement_with_consensus=0,
            disagreement_with_consensus=0,
            avg_credibility_score=50.0,
            avg_confidence=0.5,
        ),
        history=[],
        decay=DecayState(
            last_applied_at=now.isoformat(),
            rate=decay_rate,
            period_days=decay_period_days,
        ),
        peak=NEUTRAL_SCORE,
        lowest=NEUTRAL_SCORE,
        first_verification=now.isoformat(),
        last_verification=None,
    )


def apply_score_change(
    record: ReputationRecord,
    delta: float,
    reason: str,
    *,
    now: datetime,
    metadata: dict[str, Any] | None = None,
    history_limit: int = 100,
) -> ReputationHistoryEntry:
    """Clamp-add ``delta`` to the score and append a bounded history entry."""
    old = record["current_score"]
    new = max(MIN_SCORE, min(MAX_SCORE, old + delta))
    record["current_score"] = new
    record["peak"] = max(record["peak"], new)
    record["lowest"] = min(record["lowest"], new)

    entry = ReputationHistoryEntry(
        timestamp=now.isoformat(),
        old_score=old,
        new_score=new,
        delta=delta,
        reason=reason,
        metadata=dict(metadata or {}),
    )
    record["history"].append(entry)
    if len(record["history"]) > history_limit:
        record["history"] = record["history"][-history_limit:]
    return entry


def apply_decay(
    record: ReputationRecord, *, now: datetime, history_limit: int = 100
) -> bool:
    """Pull the score toward neutral once at least one decay period has elapsed.

    Returns True if decay was applied. A second call inside the same period
    is a no-op.
    """
    decay = record["decay"]
    last = datetime.fromisoformat(decay["last_applied_at"])
    days = (now - last).total_seconds() / 86400
    if days < decay["period_days"]:
        return False

    periods = math.floor(days / decay["period_days"])
    factor = (1 - decay["rate"]) ** periods
    current = record["current_score"]
    target = NEUTRAL_SCORE + (current - NEUTRAL_SCORE) * factor

    apply_score_change(
        record,
        target - current,
        DECAY_REASON,
        now=now,
        metadata={"periods_elapsed": periods, "decay_factor": factor},
        history_limit=history_limit,
    )
    decay["last_applied_at"] = now.isoformat()
    return True


def compute_adjustment(
    old_score: float, agreed: bool, confidence: float, *, k_factor: float = 32
) -> float:
    """ELO-style adjustment weighted by the evaluator's stated confidence.

    Confident agreement earns a bonus; low-confidence disagreement is
    penalized less.
    """
    expected = old_score / 100
    actual = 1.0 if agreed else 0.0
    weight = confidence
    if agreed and confidence >= HIGH_CONFIDENCE_THRESHOLD:
        weight *= HIGH_CONFIDENCE_BONUS
    if not agreed and confidence <= LOW_CONFIDENCE_THRESHOLD:
        weight *= LOW_CONFIDENCE_PENALTY
    return k_factor * (actual - expected) * weight


def record_verification(
    record: ReputationRecord,
    agreed: bool,
    confidence: float,
    *,
    now: datetime,
    credibility_score: float | None = None,
) -> None:
    stats = record["stats"]
    stats["total_verifications"] += 1
    if agreed:
        stats["correct_predictions"] += 1
        stats["agreement_with_consensus"] += 1
    else:
        stats["incorrect_predictions"] += 1
        stats["disagreement_with_consensus"] += 1

    total = stats["total_verifications"]
    stats["avg_confidence"] = (stats["avg_confidence"] * (total - 1) + confidence) / total
    if credibility_score is not None:
        stats["avg_credibility_score"] = (
            stats["avg_credibility_score"] * (total - 1) + credibility_score
        ) / total
    record["last_verification"] = now.isoformat()


def accuracy_rate(record: ReputationRecord) -> float:
    stats = record["stats"]
    if stats["total_verifications"] == 0:
        return 0.0
    return stats["correct_predictions"] / stats["total_verifications"]
