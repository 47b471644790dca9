"""Tests for the claim-trail CLI."""

from __future__ import annotations

import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from claim_trail.__main__ import parse_args, run
from claim_trail.errors import VerificationError
from claim_trail.reputation.store import shared_reputation_store


@pytest.fixture
def data_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("RUN_LOG_DIR", str(tmp_path / "runs"))
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("DEFAULT_EVALUATORS", raising=False)
    monkeypatch.delenv("QUICK_EVALUATOR", raising=False)
    return tmp_path / "data"


class TestParseArgs:
    def test_verify_defaults(self):
        with patch.object(sys, "argv", ["prog", "verify", "The dam opened in 2019"]):
            args = parse_args()
        assert args.command == "verify"
        assert args.text == "The dam opened in 2019"
        assert args.url is None
        assert args.quick is False
        assert args.no_log is False

    def test_verify_flags(self):
        args = parse_args(
            ["verify", "--url", "https://a.com/x", "--evaluators", "generic,digital", "--quick", "--json"]
        )
        assert args.text is None
        assert args.url == "https://a.com/x"
        assert args.evaluators == "generic,digital"
        assert args.quick and args.json

    def test_reputation_args(self):
        args = parse_args(["reputation", "generic", "--limit", "3"])
        assert args.name == "generic"
        assert args.limit == 3

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestCommands:
    @pytest.mark.asyncio
    async def test_status(self, data_env, capsys):
        await run(parse_args(["status"]))
        out = json.loads(capsys.readouterr().out)
        assert "scholarly" in out["available_evaluators"]
        assert out["quick_evaluator"] == "generic"

    @pytest.mark.asyncio
    async def test_lookup_missing(self, data_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            await run(parse_args(["lookup", "f" * 64]))
        assert exc_info.value.code == 1
        assert "No verification found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_recent_empty(self, data_env, capsys):
        await run(parse_args(["recent"]))
        assert "No verification records found." in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_reputation_leaderboard(self, data_env, capsys):
        store = shared_reputation_store(data_env)
        await store.update_after_run("generic", True, 0.8)
        await run(parse_args(["reputation"]))
        out = capsys.readouterr().out
        assert "1. generic" in out
        assert "(1/1 agreed)" in out

    @pytest.mark.asyncio
    async def test_reputation_single(self, data_env, capsys):
        await run(parse_args(["reputation", "digital"]))
        out = json.loads(capsys.readouterr().out)
        assert out == {"evaluator_name": "digital", "exists": False, "current_score": 50.0}

    @pytest.mark.asyncio
    async def test_verify_requires_input(self, data_env, capsys):
        with pytest.raises(SystemExit):
            await run(parse_args(["verify"]))
        assert "claim text or --url is required" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_verify_requires_api_key(self, data_env, capsys):
        with pytest.raises(SystemExit):
            await run(parse_args(["verify", "The dam opened in 2019"]))
        assert "ANTHROPIC_API_KEY is required" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_verify_failure_closes_verifier(self, data_env, monkeypatch, capsys):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        verifier = MagicMock()
        verifier.verify = AsyncMock(side_effect=VerificationError("graph rejected"))
        verifier.close = AsyncMock()
        with patch("claim_trail.pipeline.verifier.Verifier.from_settings", return_value=verifier):
            with pytest.raises(SystemExit):
                await run(parse_args(["verify", "The dam opened in 2019"]))
        verifier.close.assert_awaited_once()
        err = capsys.readouterr().err
        assert "ERROR: Verification failed" in err
        assert "graph rejected" not in err
