"""StateGraph construction: normalize -> evaluate -> aggregate -> source_graph -> persist -> reputation."""

from __future__ import annotations

import sys
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from claim_trail.config import Settings
from claim_trail.contracts import (
    LedgerReceipt,
    LedgerService,
    ReasoningService,
    VerificationRecord,
)
from claim_trail.errors import PersistenceError
from claim_trail.evaluators.base import Evaluator
from claim_trail.evaluators.runner import run_evaluators
from claim_trail.event_log.writer import EventLog
from claim_trail.evidence.normalize import dedupe_evidence, normalize_evidence
from claim_trail.memory.store import RecordStore
from claim_trail.pipeline.state import VerificationState
from claim_trail.reputation.store import ReputationStore
from claim_trail.scoring.aggregate import aggregate_reports
from claim_trail.trail.builder import build_source_graph

NodeFn = Callable[[VerificationState], Awaitable[dict]]


def _usage_totals(reasoning: ReasoningService) -> tuple[int, int, float]:
    usage = getattr(reasoning, "usage", None) or []
    tokens = sum(u["input_tokens"] + u["output_tokens"] for u in usage)
    cost = sum(u["cost_usd"] for u in usage)
    return len(usage), tokens, cost


def build_verification_graph(
    settings: Settings,
    *,
    reasoning: ReasoningService,
    reputation: ReputationStore,
    records: RecordStore | None = None,
    ledger: LedgerService | None = None,
    event_log: EventLog | None = None,
    evaluators: dict[str, Evaluator] | None = None,
) -> CompiledStateGraph:
    """Build and compile the verification graph.

    Returns a compiled StateGraph ready to invoke with a VerificationState.
    """

    def logged(name: str, fn: NodeFn) -> NodeFn:
        """Emit one RunEvent per node execution when an event log is attached."""
        if event_log is None:
            return fn

        async def wrapper(state: VerificationState) -> dict:
            _, tokens_before, cost_before = _usage_totals(reasoning)
            start = time.monotonic()
            result = await fn(state)
            _, tokens_after, cost_after = _usage_totals(reasoning)
            event_log.emit(
                EventLog.make_event(
                    node=name,
                    run_id=state["run_id"],
                    elapsed_s=time.monotonic() - start,
                    inputs_summary=EventLog.summarize(
                        {"evidence": state.get("evidence"), "reports": state.get("reports")}
                    ),
                    outputs_summary=EventLog.summarize(result),
                    tokens=tokens_after - tokens_before,
                    cost=cost_after - cost_before,
                )
            )
            return result

        return wrapper

    # --- Node functions (closures over services) ---

    async def normalize_node(state: VerificationState) -> dict:
        evidence = dedupe_evidence(normalize_evidence(state.get("evidence", [])))
        requested = state.get("requested_evaluators") or list(settings.default_evaluators)
        return {"evidence": evidence, "requested_evaluators": requested}

    async def evaluate_node(state: VerificationState) -> dict:
        reports = await run_evaluators(
            state["requested_evaluators"],
            state["claim"],
            state["evidence"],
            reasoning=reasoning,
            max_concurrent=settings.max_concurrent_evaluators,
            timeout=settings.evaluator_timeout,
            evaluators=evaluators,
        )
        return {"reports": reports}

    async def aggregate_node(state: VerificationState) -> dict:
        reports = state["reports"]
        profiles = list(dict.fromkeys(r["profile"] for r in reports))
        reputations = await reputation.get_reputations(profiles)
        verdict = await aggregate_reports(reports, reputations, reasoning)
        return {"reputations": reputations, "verdict": verdict}

    async def source_graph_node(state: VerificationState) -> dict:
        graph = await build_source_graph(
            state["claim"],
            state["evidence"],
            reasoning=reasoning,
            ai_enhance=settings.graph_ai_enhance,
        )
        return {"graph": graph}

    async def persist_node(state: VerificationState) -> dict:
        graph = state["graph"]
        verdict = state["verdict"]
        receipt: LedgerReceipt | None = None

        if ledger is not None:
            try:
                receipt = await ledger.store_verification(
                    graph["hash"],
                    verdict["verdict"],
                    int(time.time() * 1000),
                    {
                        "source": state["source"],
                        "evaluator_count": len(state["reports"]),
                        "evidence_count": len(state["evidence"]),
                    },
                )
            except Exception as e:
                if settings.require_durability:
                    raise PersistenceError(f"Ledger write failed: {e}") from e
                print(f"WARNING: ledger write failed: {e}", file=sys.stderr)

        elapsed_ms = int((time.monotonic() - state["started_at"]) * 1000)
        persisted = False
        if records is not None:
            record = VerificationRecord(
                hash=graph["hash"],
                claim=state["claim"],
                graph=graph,
                reports=state["reports"],
                verdict=verdict["verdict"],
                accuracy_score=verdict["accuracy_score"],
                confidence=verdict["confidence"],
                ledger=receipt,
                source=state["source"],
                original_url=state.get("original_url"),
                processing_time_ms=elapsed_ms,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            persisted = records.save(record)

        return {"ledger": receipt, "persisted": persisted, "processing_time_ms": elapsed_ms}

    async def reputation_node(state: VerificationState) -> dict:
        final_verdict = state["verdict"]["verdict"]
        changes = []
        for report in state["reports"]:
            if report.get("error"):
                continue
            change = await reputation.update_after_run(
                report["profile"],
                report["verdict"] == final_verdict,
                report["confidence"],
                credibility_score=report["credibility_score"],
                metadata={"final_verdict": final_verdict, "evaluator_verdict": report["verdict"]},
            )
            changes.append(change)
        return {"reputation_changes": changes}

    # --- Graph wiring ---

    graph = StateGraph(VerificationState)

    graph.add_node("normalize", logged("normalize", normalize_node))
    graph.add_node("evaluate", logged("evaluate", evaluate_node))
    graph.add_node("aggregate", logged("aggregate", aggregate_node))
    graph.add_node("source_graph", logged("source_graph", source_graph_node))
    graph.add_node("persist", logged("persist", persist_node))
    graph.add_node("reputation", logged("reputation", reputation_node))

    graph.set_entry_point("normalize")
    graph.add_edge("normalize", "evaluate")
    graph.add_edge("evaluate", "aggregate")
    graph.add_edge("aggregate", "source_graph")
    graph.add_edge("source_graph", "persist")
    graph.add_edge("persist", "reputation")
    graph.add_edge("reputation", END)

    return graph.compile()
