"""Tests for reputation records and the JSON-backed store."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from claim_trail.errors import PersistenceError
from claim_trail.reputation.records import (
    accuracy_rate,
    apply_decay,
    compute_adjustment,
    new_record,
    record_verification,
)
from claim_trail.reputation.store import ReputationStore, shared_reputation_store


class TestComputeAdjustment:
    def test_confident_agreement_bonus(self):
        assert compute_adjustment(50, True, 0.8) == pytest.approx(19.2)

    def test_disagreement(self):
        assert compute_adjustment(50, False, 0.8) == pytest.approx(-12.8)

    def test_low_confidence_disagreement_softened(self):
        assert compute_adjustment(50, False, 0.2) == pytest.approx(-1.6)

    def test_moderate_agreement(self):
        assert compute_adjustment(50, True, 0.5) == pytest.approx(8.0)

    def test_high_score_gains_less(self):
        assert compute_adjustment(90, True, 0.8) < compute_adjustment(50, True, 0.8)


class TestRecords:
    def test_new_record_is_neutral(self, clock):
        record = new_record("Scholarly Evaluator", now=clock())
        assert record["current_score"] == 50
        assert record["evaluator_type"] == "scholarly"
        assert record["peak"] == record["lowest"] == 50
        assert record["last_verification"] is None

    def test_decay_waits_a_full_period(self, clock):
        record = new_record("generic", now=clock())
        record["current_score"] = 70
        clock.advance(days=6)
        assert apply_decay(record, now=clock()) is False
        assert record["current_score"] == 70

    def test_decay_pulls_toward_neutral(self, clock):
        record = new_record("generic", now=clock())
        record["current_score"] = 30
        clock.advance(days=7)
        assert apply_decay(record, now=clock()) is True
        assert record["current_score"] == pytest.approx(30.2)
        assert record["history"][-1]["reason"] == "time decay"

    def test_record_verification_running_averages(self, clock):
        record = new_record("generic", now=clock())
        record_verification(record, True, 0.9, now=clock(), credibility_score=80)
        record_verification(record, False, 0.5, now=clock(), credibility_score=40)
        stats = record["stats"]
        assert stats["total_verifications"] == 2
        assert stats["correct_predictions"] == 1
        assert stats["avg_confidence"] == pytest.approx(0.7)
        assert stats["avg_credibility_score"] == pytest.approx(60)
        assert accuracy_rate(record) == 0.5
        assert record["last_verification"] == clock().isoformat()

    def test_accuracy_rate_without_history(self, clock):
        assert accuracy_rate(new_record("generic", now=clock())) == 0.0


class TestReputationStore:
    @pytest.mark.asyncio
    async def test_agreement_raises_score(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        change = await store.update_after_run("generic", True, 0.8)
        assert change["old_score"] == 50
        assert change["new_score"] == pytest.approx(69.2)
        assert change["change"] == pytest.approx(19.2)
        assert change["agreed"] is True

    @pytest.mark.asyncio
    async def test_disagreement_lowers_score(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        change = await store.update_after_run("digital", False, 0.8)
        assert change["new_score"] == pytest.approx(37.2)
        record = await store.get_or_create("digital")
        assert record["history"][-1]["reason"] == "Disagreed with final verdict"
        assert record["stats"]["incorrect_predictions"] == 1

    @pytest.mark.asyncio
    async def test_score_clamped(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        record = await store.update_score("generic", 80, "manual")
        assert record["current_score"] == 100
        record = await store.update_score("generic", -250, "manual")
        assert record["current_score"] == 0
        assert record["peak"] == 100
        assert record["lowest"] == 0

    @pytest.mark.asyncio
    async def test_history_bounded(self, tmp_path, clock):
        store = ReputationStore(tmp_path, history_limit=5, clock=clock)
        for i in range(8):
            await store.update_score("generic", 1, f"step {i}")
        record = await store.get_or_create("generic")
        assert len(record["history"]) == 5
        assert record["history"][0]["reason"] == "step 3"

    @pytest.mark.asyncio
    async def test_decay_on_read_is_idempotent(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        await store.update_score("generic", 20, "seed")
        clock.advance(days=14)
        assert await store.get_reputation("generic") == pytest.approx(69.602)
        assert await store.get_reputation("generic") == pytest.approx(69.602)
        record = await store.get_or_create("generic")
        assert record["history"][-1]["metadata"]["periods_elapsed"] == 2
        assert sum(1 for h in record["history"] if h["reason"] == "time decay") == 1

    @pytest.mark.asyncio
    async def test_unknown_evaluator_is_neutral(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        assert await store.get_reputations(["generic", "scholarly"]) == {
            "generic": 50,
            "scholarly": 50,
        }

    @pytest.mark.asyncio
    async def test_get_or_create_returns_copy(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        record = await store.get_or_create("generic")
        record["current_score"] = 99
        assert await store.get_reputation("generic") == 50

    @pytest.mark.asyncio
    async def test_concurrent_updates_serialized(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        await asyncio.gather(*(store.update_score("generic", 1, "tick") for _ in range(20)))
        record = await store.get_or_create("generic")
        assert record["current_score"] == 70
        assert len(record["history"]) == 20

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        await store.update_after_run("mainstream", True, 0.8)
        reloaded = ReputationStore(tmp_path, clock=clock)
        assert await reloaded.get_reputation("mainstream") == pytest.approx(69.2)
        assert (tmp_path / "reputation.json").exists()

    def test_corrupt_file_starts_empty(self, tmp_path, clock):
        (tmp_path / "reputation.json").write_text("{not json", encoding="utf-8")
        store = ReputationStore(tmp_path, clock=clock)
        assert store.all_reputations() == {}

    @pytest.mark.asyncio
    async def test_write_failure_degrades(self, tmp_path, clock, capsys):
        store = ReputationStore(tmp_path, clock=clock)
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            change = await store.update_after_run("generic", True, 0.8)
        assert change["new_score"] == pytest.approx(69.2)
        assert "WARNING" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_write_failure_raises_when_durable(self, tmp_path, clock):
        store = ReputationStore(tmp_path, require_durability=True, clock=clock)
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError):
                await store.update_score("generic", 5, "manual")

    @pytest.mark.asyncio
    async def test_leaderboard_and_insight(self, tmp_path, clock):
        store = ReputationStore(tmp_path, clock=clock)
        await store.update_after_run("generic", True, 0.9)
        await store.update_after_run("digital", False, 0.9)
        await store.get_or_create("scholarly")

        board = store.leaderboard(limit=2)
        assert [row["evaluator_name"] for row in board] == ["generic", "scholarly"]
        assert board[0]["correct_predictions"] == 1

        info = store.insight("generic")
        assert info["exists"] is True
        assert info["accuracy_rate"] == 1.0
        assert len(info["recent_history"]) == 1
        assert store.insight("nobody") == {
            "evaluator_name": "nobody",
            "exists": False,
            "current_score": 50,
        }

    def test_weighted_score(self):
        assert ReputationStore.weighted_score(80, 50) == 80
        assert ReputationStore.weighted_score(80, 100) == 120

    def test_shared_store_per_directory(self, tmp_path):
        first = shared_reputation_store(tmp_path / "a")
        assert shared_reputation_store(tmp_path / "a") is first
        assert shared_reputation_store(tmp_path / "b") is not first
