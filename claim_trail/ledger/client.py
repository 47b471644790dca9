"""Ledger client: anchors a graph hash and verdict, or simulates doing so.

Dry-run mode returns a synthetic ``0x``-prefixed SHA-256 reference with no
external effect. Live mode POSTs to a ledger gateway with retries on 429
and 5xx responses.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from datetime import datetime, timezone
from typing import Any

import httpx

from claim_trail.contracts import LedgerReceipt
from claim_trail.errors import PersistenceError

_MAX_RETRIES = 3
_INITIAL_BACKOFF = 1.0


def _iso(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


class LedgerClient:
    """LedgerService backed by an HTTP gateway."""

    def __init__(
        self,
        *,
        dry_run: bool = True,
        url: str = "",
        api_key: str = "",
        provider: str = "polygon",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.dry_run = dry_run
        self.url = url.rstrip("/")
        self.provider = provider
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def store_verification(
        self,
        graph_hash: str,
        verdict: str,
        timestamp: int,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerReceipt:
        """Anchor one verification. ``timestamp`` is epoch milliseconds."""
        if self.dry_run:
            return self._simulate(graph_hash, verdict, timestamp, metadata or {})

        payload = {
            "provider": self.provider,
            "graph_hash": graph_hash,
            "verdict": verdict,
            "timestamp": timestamp,
            "metadata": metadata or {},
        }
        resp = await self._post_with_retry("/verifications", payload)
        body = resp.json()
        return LedgerReceipt(
            success=bool(body.get("success", True)),
            provider=body.get("provider", self.provider),
            transaction_hash=str(body.get("transaction_hash") or body.get("transactionHash", "")),
            graph_hash=graph_hash,
            verdict=verdict,
            timestamp=_iso(timestamp),
            dry_run=False,
        )

    async def get_verification(self, graph_hash: str) -> dict[str, Any] | None:
        """Look up an anchored verification. Always None in dry-run mode."""
        if self.dry_run:
            return None
        try:
            resp = await self._client.get(f"{self.url}/verifications/{graph_hash}")
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise PersistenceError(f"Ledger lookup failed: {e}") from e

    def _simulate(
        self, graph_hash: str, verdict: str, timestamp: int, metadata: dict[str, Any]
    ) -> LedgerReceipt:
        payload = json.dumps(
            {"graph_hash": graph_hash, "verdict": verdict, "timestamp": timestamp, "metadata": metadata},
            sort_keys=True,
            default=str,
        )
        digest = hashlib.sha256(f"{payload}{time.time_ns()}".encode("utf-8")).hexdigest()
        return LedgerReceipt(
            success=True,
            provider=self.provider,
            transaction_hash=f"0x{digest}",
            graph_hash=graph_hash,
            verdict=verdict,
            timestamp=_iso(timestamp),
            dry_run=True,
        )

    async def _post_with_retry(self, path: str, payload: dict) -> httpx.Response:
        """POST with exponential backoff on 429 and 5xx. Other errors raise at once."""
        backoff = _INITIAL_BACKOFF
        last_error = ""
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.post(f"{self.url}{path}", json=payload)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
            else:
                if resp.status_code == 429 or resp.status_code >= 500:
                    last_error = f"HTTP {resp.status_code}"
                else:
                    try:
                        resp.raise_for_status()
                    except httpx.HTTPStatusError as e:
                        raise PersistenceError(f"Ledger write rejected: {e}") from e
                    return resp
            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(backoff)
                backoff *= 2
        raise PersistenceError(f"Ledger write failed after {_MAX_RETRIES} attempts: {last_error}")
