"""Tests for the ledger client in dry-run and live modes."""

from __future__ import annotations

import json
import re
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from claim_trail.errors import PersistenceError
from claim_trail.ledger.client import LedgerClient

TS = 1_772_000_000_000  # epoch ms


def _live_client(handler) -> LedgerClient:
    transport = httpx.MockTransport(handler)
    return LedgerClient(
        dry_run=False,
        url="https://ledger.example/api/",
        client=httpx.AsyncClient(transport=transport),
    )


class TestDryRun:
    @pytest.mark.asyncio
    async def test_synthetic_receipt(self):
        ledger = LedgerClient(dry_run=True)
        receipt = await ledger.store_verification("ab" * 32, "true", TS, {"claim": "c"})
        assert re.fullmatch(r"0x[0-9a-f]{64}", receipt["transaction_hash"])
        assert receipt["dry_run"] is True
        assert receipt["success"] is True
        assert receipt["graph_hash"] == "ab" * 32
        assert receipt["timestamp"].startswith("2026-")
        await ledger.close()

    @pytest.mark.asyncio
    async def test_each_anchor_is_distinct(self):
        ledger = LedgerClient(dry_run=True)
        first = await ledger.store_verification("h", "true", TS)
        second = await ledger.store_verification("h", "true", TS)
        assert first["transaction_hash"] != second["transaction_hash"]

    @pytest.mark.asyncio
    async def test_lookup_returns_none(self):
        assert await LedgerClient(dry_run=True).get_verification("h") is None


class TestLiveMode:
    @pytest.mark.asyncio
    async def test_posts_payload(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/verifications"
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"transactionHash": "0xabc", "provider": "polygon"})

        ledger = _live_client(handler)
        receipt = await ledger.store_verification("h", "false", TS)
        assert receipt["transaction_hash"] == "0xabc"
        assert receipt["dry_run"] is False
        assert seen[0]["graph_hash"] == "h"
        assert seen[0]["verdict"] == "false"

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        statuses = iter([503, 429, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            if status == 200:
                return httpx.Response(200, json={"transaction_hash": "0xdef"})
            return httpx.Response(status)

        ledger = _live_client(handler)
        with patch("claim_trail.ledger.client.asyncio.sleep", new=AsyncMock()) as sleep:
            receipt = await ledger.store_verification("h", "true", TS)
        assert receipt["transaction_hash"] == "0xdef"
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"error": "bad hash"})

        ledger = _live_client(handler)
        with pytest.raises(PersistenceError, match="rejected"):
            await ledger.store_verification("h", "true", TS)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        ledger = _live_client(handler)
        with patch("claim_trail.ledger.client.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(PersistenceError, match="after 3 attempts"):
                await ledger.store_verification("h", "true", TS)

    @pytest.mark.asyncio
    async def test_lookup(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/known"):
                return httpx.Response(200, json={"verdict": "true"})
            return httpx.Response(404)

        ledger = _live_client(handler)
        assert await ledger.get_verification("known") == {"verdict": "true"}
        assert await ledger.get_verification("missing") is None
