"""Single source of truth for all types, enums, and protocols."""

from __future__ import annotations

from enum import Enum
from typing import Any, NotRequired, Protocol, TypedDict, runtime_checkable

# --- Enums ---


class Verdict(str, Enum):
    TRUE = "true"
    FALSE = "false"
    MIXED = "mixed"
    UNKNOWN = "unknown"

    @classmethod
    def normalize(cls, value: Any) -> Verdict:
        """Coerce free-form verdict text to one of the four allowed values."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text == member.value:
                return member
        return cls.UNKNOWN


class NodeRole(str, Enum):
    ORIGIN = "origin"  # earliest publication
    AMPLIFIER = "amplifier"  # repeats / spreads
    MODIFIER = "modifier"  # adds new information
    DEBUNKER = "debunker"  # contradicts / fact-checks
    UNKNOWN = "unknown"


class Relationship(str, Enum):
    CITES = "cites"
    QUOTES = "quotes"
    CONTRADICTS = "contradicts"
    AMPLIFIES = "amplifies"
    UPDATES = "updates"


class EvaluatorProfile(str, Enum):
    """Closed set of evaluator perspectives."""

    MAINSTREAM = "mainstream"
    DIGITAL = "digital"
    INVESTIGATIVE = "investigative"
    SCHOLARLY = "scholarly"
    GENERIC = "generic"  # evidentiary-neutral baseline

    @classmethod
    def infer(cls, name: str) -> EvaluatorProfile:
        """Infer the profile from an evaluator key or display name."""
        lowered = (name or "").lower()
        for member in cls:
            if member.value in lowered:
                return member
        return cls.GENERIC


class SourceAuthority(str, Enum):
    INSTITUTIONAL = "institutional"  # .edu, .gov, journals
    PROFESSIONAL = "professional"  # news, wire services
    COMMUNITY = "community"  # forums, wikis, social media
    PROMOTIONAL = "promotional"  # marketing
    UNKNOWN = "unknown"


# --- Evidence ---


class EvidenceItem(TypedDict):
    """One retrieved source document. Read-only once produced."""

    url: str
    title: str
    snippet: str
    publish_timestamp: NotRequired[str | None]  # ISO 8601 or RFC 2822
    domain_score: NotRequired[float]  # 0-100
    is_original: NotRequired[bool]
    relevance: NotRequired[float]  # retrieval relevance, 0-1


class ScoredEvidence(EvidenceItem):
    """Evidence annotated by an evaluator on its own private copy."""

    trust_bonus: NotRequired[float]


# --- Source graph ---


class GraphNode(TypedDict):
    id: str  # "node_<index>", stable per construction run
    url: str
    title: str
    snippet: str
    timestamp: str  # ISO 8601
    domain_score: float
    role: str  # NodeRole value
    domain: str


# "from" is a keyword, hence the functional form
GraphEdge = TypedDict(
    "GraphEdge",
    {
        "id": str,
        "from": str,
        "to": str,
        "relationship": str,  # Relationship value
        "timestamp": str,
        "evidence": str,
        "ai_detected": bool,
    },
)


class GraphMetadata(TypedDict):
    created_at: str
    source_count: int
    node_count: int
    edge_count: int
    cluster_count: int
    ai_enhanced: bool


class SourceGraph(TypedDict):
    claim: str
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    clusters: list[list[str]]
    hash: str  # lowercase hex SHA-256 of the canonical reduced view
    metadata: NotRequired[GraphMetadata]


class GraphValidation(TypedDict):
    valid: bool
    errors: list[str]


# --- Evaluator reports ---


class EvaluatorReport(TypedDict):
    evaluator_name: str  # display name
    profile: str  # EvaluatorProfile value; reputation key
    credibility_score: float  # 0-100
    confidence: float  # 0-1
    verdict: str  # Verdict value
    summary: str
    reasoning: str
    evidence_links: list[str]
    key_findings: list[str]
    concerns: list[str]
    error: NotRequired[bool]


class AggregateVerdict(TypedDict):
    verdict: str
    accuracy_score: float  # 0-100
    confidence: float  # 0-1
    summary: str
    consensus_description: str
    remaining_uncertainties: list[str]
    weighted_tally: dict[str, float]  # verdict -> reputation-weighted support


# --- Reputation ---


class ReputationHistoryEntry(TypedDict):
    timestamp: str
    old_score: float
    new_score: float
    delta: float
    reason: str
    metadata: dict[str, Any]


class ReputationStats(TypedDict):
    total_verifications: int
    correct_predictions: int
    incorrect_predictions: int
    agreement_with_consensus: int
    disagreement_with_consensus: int
    avg_credibility_score: float
    avg_confidence: float


class DecayState(TypedDict):
    last_applied_at: str
    rate: float  # fraction per period
    period_days: int


class ReputationRecord(TypedDict):
    evaluator_name: str
    evaluator_type: str
    current_score: float  # 0-100
    stats: ReputationStats
    history: list[ReputationHistoryEntry]  # most recent last, bounded
    decay: DecayState
    peak: float
    lowest: float
    first_verification: str
    last_verification: str | None


class ReputationChange(TypedDict):
    evaluator_name: str
    old_score: float
    new_score: float
    change: float
    agreed: bool


# --- External services ---


class LedgerReceipt(TypedDict):
    success: bool
    provider: str
    transaction_hash: str
    graph_hash: str
    verdict: str
    timestamp: str
    dry_run: bool


class VerificationRecord(TypedDict):
    """Durable document persisted per verification, keyed by graph hash."""

    hash: str
    claim: str
    graph: SourceGraph
    reports: list[EvaluatorReport]
    verdict: str
    accuracy_score: float
    confidence: float
    ledger: LedgerReceipt | None
    source: str
    original_url: str | None
    processing_time_ms: int
    created_at: str


class VerificationResult(TypedDict):
    run_id: str
    claim: str
    verdict: str
    accuracy_score: float
    confidence: float
    summary: str
    consensus: str
    reports: list[EvaluatorReport]
    graph: SourceGraph
    remaining_uncertainties: list[str]
    ledger_reference: str | None
    reputation_changes: list[ReputationChange]
    timestamp: str
    processing_time_ms: int


class TokenUsage(TypedDict):
    agent: str
    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    timestamp: str


class RunEvent(TypedDict):
    node: str
    run_id: str
    ts: str  # ISO 8601
    elapsed_s: float
    inputs_summary: dict[str, int]  # field -> count/size
    outputs_summary: dict[str, int]  # field -> count/size
    tokens: int
    cost: float


# --- Protocols ---


@runtime_checkable
class ReasoningService(Protocol):
    async def assess(
        self, profile: str, claim: str, evidence: list[ScoredEvidence]
    ) -> dict[str, Any]: ...

    async def aggregate(
        self,
        reports: list[EvaluatorReport],
        reputations: dict[str, float],
        weighted_tally: dict[str, float],
    ) -> dict[str, Any]: ...

    async def analyze_source_graph(
        self, claim: str, nodes: list[GraphNode]
    ) -> dict[str, Any]: ...

    async def extract_claims(self, text: str) -> list[dict[str, Any]]: ...


@runtime_checkable
class RetrievalService(Protocol):
    async def search_claim(
        self, claim: str, *, max_results: int = 8
    ) -> tuple[list[EvidenceItem], list[EvidenceItem]]: ...

    async def fetch(self, url: str) -> dict[str, Any]: ...


@runtime_checkable
class LedgerService(Protocol):
    async def store_verification(
        self,
        graph_hash: str,
        verdict: str,
        timestamp: int,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerReceipt: ...
