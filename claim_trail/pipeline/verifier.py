"""Verifier: the caller-facing surface over the verification pipeline."""

from __future__ import annotations

import os
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from claim_trail.agents.claims import extract_claim
from claim_trail.config import Settings
from claim_trail.contracts import (
    EvidenceItem,
    LedgerService,
    ReasoningService,
    RetrievalService,
    VerificationRecord,
    VerificationResult,
)
from claim_trail.errors import GraphValidationError, PersistenceError, VerificationError
from claim_trail.evaluators import available_evaluators
from claim_trail.evaluators.base import Evaluator
from claim_trail.event_log.writer import EventLog
from claim_trail.evidence.normalize import gather_evidence
from claim_trail.memory.store import RecordStore
from claim_trail.pipeline.builder import build_verification_graph
from claim_trail.reputation.store import ReputationStore, shared_reputation_store


def generate_run_id() -> str:
    """Unique run ID: verify-YYYYMMDD-HHMMSS-XXXX."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    suffix = os.urandom(2).hex()
    return f"verify-{ts}-{suffix}"


class Verifier:
    """Runs verifications end to end and exposes lookups over stored results."""

    def __init__(
        self,
        settings: Settings,
        *,
        reasoning: ReasoningService,
        retriever: RetrievalService | None = None,
        ledger: LedgerService | None = None,
        reputation: ReputationStore | None = None,
        records: RecordStore | None = None,
        evaluators: dict[str, Evaluator] | None = None,
        enable_log: bool = True,
    ) -> None:
        self.settings = settings
        self.reasoning = reasoning
        self.retriever = retriever
        self.ledger = ledger
        self.reputation = reputation or shared_reputation_store(
            Path(settings.data_dir),
            k_factor=settings.reputation_k_factor,
            decay_rate=settings.reputation_decay_rate,
            decay_period_days=settings.reputation_decay_period_days,
            history_limit=settings.reputation_history_limit,
            require_durability=settings.require_durability,
        )
        self.records = records or RecordStore(
            settings.data_dir, require_durability=settings.require_durability
        )
        self.evaluators = evaluators
        self.enable_log = enable_log

    @classmethod
    def from_settings(cls, settings: Settings) -> Verifier:
        """Wire the production services: Anthropic reasoning, Tavily retrieval, ledger."""
        from claim_trail.agents.base import ReasoningCaller
        from claim_trail.agents.reasoning import AnthropicReasoningService
        from claim_trail.backends.tavily import TavilyRetriever
        from claim_trail.ledger.client import LedgerClient

        evaluator_caller = ReasoningCaller(
            api_key=settings.anthropic_api_key,
            model=settings.reasoning_model,
            max_concurrent=settings.max_concurrent_requests,
            max_retries=settings.max_retries,
            timeout=settings.evaluator_timeout,
            fallback_model=settings.fallback_model,
        )
        aggregator_caller = ReasoningCaller(
            api_key=settings.anthropic_api_key,
            model=settings.aggregator_model,
            max_concurrent=settings.max_concurrent_requests,
            max_retries=settings.max_retries,
            timeout=settings.evaluator_timeout,
            fallback_model=settings.fallback_model,
        )
        retriever = TavilyRetriever(api_key=settings.tavily_api_key) if settings.tavily_api_key else None
        ledger = LedgerClient(
            dry_run=settings.ledger_dry_run,
            url=settings.ledger_url,
            api_key=settings.ledger_api_key,
            provider=settings.ledger_provider,
        )
        return cls(
            settings,
            reasoning=AnthropicReasoningService(evaluator_caller, aggregator_caller=aggregator_caller),
            retriever=retriever,
            ledger=ledger,
        )

    async def run_verification(
        self,
        claim: str,
        evidence_items: list[EvidenceItem],
        evaluator_names: list[str] | None = None,
        *,
        quick: bool = False,
        source: str = "api",
        original_url: str | None = None,
    ) -> VerificationResult:
        """Evaluate, aggregate, graph, persist and update reputations for one claim.

        ``quick`` restricts the run to the single baseline evaluator.
        Required-durability write failures propagate as-is; anything else,
        graph validation failures included, surfaces as VerificationError.
        """
        if not claim or not claim.strip():
            raise VerificationError("empty claim", debug=self.settings.debug)

        if quick:
            names = [self.settings.quick_evaluator]
        else:
            names = list(evaluator_names or self.settings.default_evaluators)

        run_id = generate_run_id()
        event_log = EventLog(self.settings.run_log_dir, run_id) if self.enable_log else None
        graph = build_verification_graph(
            self.settings,
            reasoning=self.reasoning,
            reputation=self.reputation,
            records=self.records,
            ledger=self.ledger,
            event_log=event_log,
            evaluators=self.evaluators,
        )

        initial_state = {
            "run_id": run_id,
            "claim": claim.strip(),
            "source": source,
            "original_url": original_url,
            "started_at": time.monotonic(),
            "evidence": list(evidence_items),
            "requested_evaluators": names,
            "reports": [],
            "reputations": {},
            "ledger": None,
            "persisted": False,
            "reputation_changes": [],
        }

        try:
            final = await graph.ainvoke(initial_state)
        except PersistenceError:
            raise
        except GraphValidationError as e:
            print(f"WARNING: verification {run_id} produced an invalid graph: {e}", file=sys.stderr)
            raise VerificationError(str(e), debug=self.settings.debug) from e
        except Exception as e:
            print(f"WARNING: verification {run_id} failed: {type(e).__name__}: {e}", file=sys.stderr)
            raise VerificationError(f"{type(e).__name__}: {e}", debug=self.settings.debug) from e

        verdict = final["verdict"]
        receipt = final.get("ledger")
        return VerificationResult(
            run_id=run_id,
            claim=final["claim"],
            verdict=verdict["verdict"],
            accuracy_score=verdict["accuracy_score"],
            confidence=verdict["confidence"],
            summary=verdict["summary"],
            consensus=verdict["consensus_description"],
            reports=final["reports"],
            graph=final["graph"],
            remaining_uncertainties=verdict["remaining_uncertainties"],
            ledger_reference=receipt["transaction_hash"] if receipt else None,
            reputation_changes=final.get("reputation_changes", []),
            timestamp=datetime.now(timezone.utc).isoformat(),
            processing_time_ms=final.get("processing_time_ms", 0),
        )

    async def verify(
        self,
        *,
        url: str | None = None,
        text: str | None = None,
        evaluators: list[str] | None = None,
        quick: bool = False,
        source: str = "api",
    ) -> VerificationResult:
        """Extract the claim, gather evidence, then run the verification."""
        if self.retriever is None:
            raise VerificationError("no retrieval service configured", debug=self.settings.debug)

        try:
            claim = await extract_claim(
                text, url, reasoning=self.reasoning, retriever=self.retriever
            )
            evidence = await gather_evidence(
                claim,
                url,
                self.retriever,
                max_results=self.settings.max_evidence_results,
            )
        except ValueError:
            raise
        except Exception as e:
            raise VerificationError(f"{type(e).__name__}: {e}", debug=self.settings.debug) from e

        return await self.run_verification(
            claim,
            evidence,
            evaluators,
            quick=quick,
            source=source,
            original_url=url,
        )

    async def verify_quick(
        self,
        *,
        url: str | None = None,
        text: str | None = None,
        source: str = "extension",
    ) -> dict[str, Any]:
        """Single baseline evaluator, compact response."""
        result = await self.verify(url=url, text=text, quick=True, source=source)
        reports = result["reports"]
        return {
            "verdict": result["verdict"],
            "accuracy_score": result["accuracy_score"],
            "summary": reports[0]["summary"] if reports else "Unable to verify",
            "detail_url": f"/verifications/{result['graph']['hash']}",
            "timestamp": result["timestamp"],
        }

    def status(self) -> dict[str, Any]:
        return {
            "available_evaluators": sorted(self.evaluators) if self.evaluators else available_evaluators(),
            "default_evaluators": list(self.settings.default_evaluators),
            "quick_evaluator": self.settings.quick_evaluator,
            "status": "operational",
        }

    def lookup(self, graph_hash: str) -> VerificationRecord | None:
        return self.records.get_by_hash(graph_hash)

    async def close(self) -> None:
        """Release the ledger client's HTTP connections."""
        close = getattr(self.ledger, "close", None)
        if close is not None:
            await close()
