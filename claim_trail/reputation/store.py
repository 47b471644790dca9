"""Process-wide reputation store backed by a single JSON file."""

from __future__ import annotations

import asyncio
import copy
import json
import sys
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from claim_trail.contracts import ReputationChange, ReputationRecord
from claim_trail.errors import PersistenceError

from .records import (
    AGREED_REASON,
    DISAGREED_REASON,
    NEUTRAL_SCORE,
    accuracy_rate,
    apply_decay,
    apply_score_change,
    compute_adjustment,
    new_record,
    record_verification,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReputationStore:
    """Reputation records keyed by evaluator name.

    Same layout as RecordStore: one human-readable JSON file, graceful
    degradation on missing or corrupt data. Read-modify-write of one
    evaluator's record is serialized by a per-name asyncio.Lock.
    """

    _FILENAME = "reputation.json"

    def __init__(
        self,
        data_dir: str | Path,
        *,
        k_factor: float = 32,
        decay_rate: float = 0.01,
        decay_period_days: int = 7,
        history_limit: int = 100,
        require_durability: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self.k_factor = k_factor
        self.decay_rate = decay_rate
        self.decay_period_days = decay_period_days
        self.history_limit = history_limit
        self.require_durability = require_durability
        self._clock = clock
        self._records: dict[str, ReputationRecord] = self._load()
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def path(self) -> Path:
        return self._dir / self._FILENAME

    def _load(self) -> dict[str, ReputationRecord]:
        """Load all records. Returns {} on any error."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return data
            return {}
        except (json.JSONDecodeError, OSError):
            return {}

    def _save(self) -> None:
        tmp = self.path.with_suffix(".tmp")
        try:
            tmp.write_text(
                json.dumps(self._records, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError as e:
            if self.require_durability:
                raise PersistenceError(f"Could not write {self.path}: {e}") from e
            print(f"WARNING: reputation store write failed: {e}", file=sys.stderr)

    def _lock_for(self, name: str) -> asyncio.Lock:
        return self._locks.setdefault(name, asyncio.Lock())

    def _get_or_create_unlocked(self, name: str, evaluator_type: str | None) -> ReputationRecord:
        record = self._records.get(name)
        if record is None:
            record = new_record(
                name,
                now=self._clock(),
                evaluator_type=evaluator_type,
                decay_rate=self.decay_rate,
                decay_period_days=self.decay_period_days,
            )
            self._records[name] = record
            self._save()
        return record

    async def get_or_create(self, name: str, evaluator_type: str | None = None) -> ReputationRecord:
        """Return a copy of the record, creating it at the neutral score if absent."""
        async with self._lock_for(name):
            return copy.deepcopy(self._get_or_create_unlocked(name, evaluator_type))

    async def get_reputation(self, name: str) -> float:
        """Current score after any due decay has been applied."""
        async with self._lock_for(name):
            record = self._get_or_create_unlocked(name, None)
            if apply_decay(record, now=self._clock(), history_limit=self.history_limit):
                self._save()
            return record["current_score"]

    async def get_reputations(self, names: list[str]) -> dict[str, float]:
        return {name: await self.get_reputation(name) for name in names}

    async def apply_decay(self, name: str) -> ReputationRecord:
        async with self._lock_for(name):
            record = self._get_or_create_unlocked(name, None)
            if apply_decay(record, now=self._clock(), history_limit=self.history_limit):
                self._save()
            return copy.deepcopy(record)

    async def update_score(
        self,
        name: str,
        delta: float,
        reason: str,
        metadata: dict[str, Any] | None = None,
    ) -> ReputationRecord:
        async with self._lock_for(name):
            record = self._get_or_create_unlocked(name, None)
            apply_score_change(
                record,
                delta,
                reason,
                now=self._clock(),
                metadata=metadata,
                history_limit=self.history_limit,
            )
            self._save()
            return copy.deepcopy(record)

    async def update_after_run(
        self,
        name: str,
        agreed: bool,
        confidence: float,
        *,
        credibility_score: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ReputationChange:
        """Move the score toward agreement with the final verdict, weighted by confidence."""
        async with self._lock_for(name):
            now = self._clock()
            record = self._get_or_create_unlocked(name, None)
            old = record["current_score"]
            adjustment = compute_adjustment(old, agreed, confidence, k_factor=self.k_factor)
            apply_score_change(
                record,
                adjustment,
                AGREED_REASON if agreed else DISAGREED_REASON,
                now=now,
                metadata={
                    "agreed": agreed,
                    "confidence": confidence,
                    "adjustment": adjustment,
                    **(metadata or {}),
                },
                history_limit=self.history_limit,
            )
            record_verification(
                record, agreed, confidence, now=now, credibility_score=credibility_score
            )
            self._save()
            new = record["current_score"]
            return ReputationChange(
                evaluator_name=name,
                old_score=old,
                new_score=new,
                change=new - old,
                agreed=agreed,
            )

    def all_reputations(self) -> dict[str, dict[str, Any]]:
        return {
            name: {"score": r["current_score"], "stats": copy.deepcopy(r["stats"])}
            for name, r in self._records.items()
        }

    def leaderboard(self, limit: int = 10) -> list[dict[str, Any]]:
        ranked = sorted(self._records.values(), key=lambda r: r["current_score"], reverse=True)
        return [
            {
                "evaluator_name": r["evaluator_name"],
                "evaluator_type": r["evaluator_type"],
                "current_score": r["current_score"],
                "total_verifications": r["stats"]["total_verifications"],
                "correct_predictions": r["stats"]["correct_predictions"],
            }
            for r in ranked[:limit]
        ]

    def insight(self, name: str) -> dict[str, Any]:
        record = self._records.get(name)
        if record is None:
            return {"evaluator_name": name, "exists": False, "current_score": NEUTRAL_SCORE}
        return {
            "evaluator_name": name,
            "exists": True,
            "current_score": record["current_score"],
            "stats": copy.deepcopy(record["stats"]),
            "accuracy_rate": accuracy_rate(record),
            "peak": record["peak"],
            "lowest": record["lowest"],
            "recent_history": copy.deepcopy(record["history"][-10:]),
        }

    @staticmethod
    def weighted_score(credibility_score: float, reputation: float) -> float:
        return credibility_score * (0.5 + reputation / 100)


_SHARED: dict[str, ReputationStore] = {}


def shared_reputation_store(data_dir: str | Path, **kwargs: Any) -> ReputationStore:
    """One store per data directory for the lifetime of the process."""
    key = str(Path(data_dir).resolve())
    store = _SHARED.get(key)
    if store is None:
        store = ReputationStore(data_dir, **kwargs)
        _SHARED[key] = store
    return store
