"""Source graph construction: nodes, duplicate clusters, roles, edges, hash."""

from __future__ import annotations

import sys
from datetime import datetime, timezone

from dateutil.parser import parse as parse_date

from claim_trail.contracts import (
    EvidenceItem,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    NodeRole,
    ReasoningService,
    Relationship,
    SourceGraph,
)
from claim_trail.scoring.authority import is_fact_check_domain
from claim_trail.utils.text import fuzzy_distance, jaccard_score
from claim_trail.utils.urls import extract_domain

from .canonical import canonical_hash
from .validation import ensure_valid

# Fuzzy distance below which two nodes count as duplicates
CLUSTER_THRESHOLD = 0.3
# Jaccard overlap above which a successor quotes its predecessor
QUOTE_OVERLAP = 0.7
# Minimum evidence count before asking the reasoning service for extra edges
AI_MIN_SOURCES = 3

DEBUNKER_SIGNALS = (
    "fact check",
    "false claim",
    "misleading",
    "debunk",
    "not true",
    "misinformation",
    "fake news",
    "hoax",
    "no evidence",
    "unverified",
    "conspiracy",
    "baseless",
)
AMPLIFIER_SIGNALS = (
    "breaking",
    "viral",
    "trending",
    "shared",
    "reports say",
    "according to",
    "sources claim",
)

_LATEST = datetime.max.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: str | None, fallback: datetime) -> datetime:
    if not value:
        return fallback
    try:
        parsed = parse_date(str(value))
    except (ValueError, OverflowError):
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _node_text(node: GraphNode) -> str:
    return f"{node['title']} {node['snippet']}"


def _by_time(nodes: list[GraphNode]) -> list[GraphNode]:
    """Ascending by timestamp. The sort is stable, so ties keep input order."""
    return sorted(nodes, key=lambda n: _parse_timestamp(n["timestamp"], _LATEST))


def create_nodes(evidence: list[EvidenceItem], *, now: datetime | None = None) -> list[GraphNode]:
    """One node per evidence item, in retrieval order.

    A missing or unparseable publish timestamp is replaced by ``now``.
    """
    now = now or datetime.now(timezone.utc)
    nodes: list[GraphNode] = []
    for index, item in enumerate(evidence):
        timestamp = _parse_timestamp(item.get("publish_timestamp"), now)
        score = item.get("domain_score")
        nodes.append(
            GraphNode(
                id=f"node_{index}",
                url=item["url"],
                title=item.get("title", ""),
                snippet=item.get("snippet", ""),
                timestamp=timestamp.isoformat(),
                domain_score=50.0 if score is None else float(score),
                role=NodeRole.UNKNOWN.value,
                domain=extract_domain(item["url"]),
            )
        )
    return nodes


def detect_duplicate_clusters(
    nodes: list[GraphNode], *, threshold: float = CLUSTER_THRESHOLD
) -> list[list[str]]:
    """Greedy single-pass near-duplicate clustering.

    Each node not yet in a cluster is compared against every other node;
    unclustered matches inside the threshold form a cluster seeded by that
    node. Clusters are disjoint and the result depends on input order.
    """
    clusters: list[list[str]] = []
    clustered: set[str] = set()

    for node in nodes:
        if node["id"] in clustered:
            continue
        text = _node_text(node)
        members = [
            other["id"]
            for other in nodes
            if other["id"] != node["id"]
            and other["id"] not in clustered
            and fuzzy_distance(text, _node_text(other)) < threshold
        ]
        if members:
            cluster = [node["id"], *members]
            clusters.append(cluster)
            clustered.update(cluster)

    return clusters


def _has_signal(content: str, signals: tuple[str, ...]) -> bool:
    return any(signal in content for signal in signals)


def assign_roles(nodes: list[GraphNode]) -> list[GraphNode]:
    """Earliest node is the single origin; the rest are classified by content and domain."""
    if not nodes:
        return nodes

    origin = _by_time(nodes)[0]
    for node in nodes:
        if node is origin:
            node["role"] = NodeRole.ORIGIN.value
            continue
        content = _node_text(node).lower()
        if _has_signal(content, DEBUNKER_SIGNALS):
            node["role"] = NodeRole.DEBUNKER.value
        elif is_fact_check_domain(node["url"]):
            node["role"] = NodeRole.DEBUNKER.value
        elif _has_signal(content, AMPLIFIER_SIGNALS):
            node["role"] = NodeRole.AMPLIFIER.value
        else:
            node["role"] = NodeRole.MODIFIER.value
    return nodes


def content_overlap(a: GraphNode, b: GraphNode) -> float:
    return jaccard_score(_node_text(a), _node_text(b))


def build_edges(nodes: list[GraphNode]) -> list[GraphEdge]:
    """Temporal attribution edges from each node's predecessor.

    Debunkers whose predecessor is not the origin also get a direct
    ``contradicts`` edge from the origin.
    """
    origin = next((n for n in nodes if n["role"] == NodeRole.ORIGIN.value), None)
    if origin is None:
        return []

    ordered = _by_time(nodes)
    edges: list[GraphEdge] = []

    def add(source: GraphNode, target: GraphNode, relationship: Relationship, evidence: str) -> None:
        edges.append(
            {
                "id": f"edge_{len(edges)}",
                "from": source["id"],
                "to": target["id"],
                "relationship": relationship.value,
                "timestamp": target["timestamp"],
                "evidence": evidence,
                "ai_detected": False,
            }
        )

    for previous, current in zip(ordered, ordered[1:]):
        if current["role"] == NodeRole.DEBUNKER.value:
            relationship = Relationship.CONTRADICTS
        elif content_overlap(current, previous) > QUOTE_OVERLAP:
            relationship = Relationship.QUOTES
        elif current["domain"] == previous["domain"]:
            relationship = Relationship.UPDATES
        else:
            relationship = Relationship.AMPLIFIES

        add(
            previous,
            current,
            relationship,
            f"Temporal sequence: {previous['title']} -> {current['title']}",
        )

        if current["role"] == NodeRole.DEBUNKER.value and previous["id"] != origin["id"]:
            add(origin, current, Relationship.CONTRADICTS, "Debunker addresses original claim")

    return edges


def merge_ai_edges(
    nodes: list[GraphNode], edges: list[GraphEdge], proposed: list[dict], *, timestamp: str
) -> int:
    """Append reasoning-proposed edges that reference known nodes and are not present yet.

    Returns the number of edges added.
    """
    node_ids = {n["id"] for n in nodes}
    allowed = {r.value for r in Relationship}
    existing = {(e["from"], e["to"]) for e in edges}
    added = 0

    for raw in proposed:
        if not isinstance(raw, dict):
            continue
        source, target = raw.get("from"), raw.get("to")
        relationship = str(raw.get("relationship", "")).lower()
        if source not in node_ids or target not in node_ids or source == target:
            continue
        if relationship not in allowed or (source, target) in existing:
            continue
        edges.append(
            {
                "id": f"edge_ai_{len(edges)}",
                "from": source,
                "to": target,
                "relationship": relationship,
                "timestamp": timestamp,
                "evidence": str(raw.get("evidence", "")),
                "ai_detected": True,
            }
        )
        existing.add((source, target))
        added += 1

    return added


async def build_source_graph(
    claim: str,
    evidence: list[EvidenceItem],
    *,
    reasoning: ReasoningService | None = None,
    ai_enhance: bool = True,
    now: datetime | None = None,
) -> SourceGraph:
    """Build, hash and validate the source graph for one verification.

    Raises GraphValidationError if the result is structurally invalid.
    """
    now = now or datetime.now(timezone.utc)
    nodes = create_nodes(evidence, now=now)
    clusters = detect_duplicate_clusters(nodes)
    assign_roles(nodes)
    edges = build_edges(nodes)

    ai_enhanced = False
    if ai_enhance and reasoning is not None and len(evidence) >= AI_MIN_SOURCES:
        try:
            analysis = await reasoning.analyze_source_graph(claim, nodes)
            proposed = (analysis.get("edges") or []) if isinstance(analysis, dict) else []
            merge_ai_edges(nodes, edges, proposed, timestamp=now.isoformat())
            ai_enhanced = True
        except Exception as e:
            print(f"WARNING: source graph analysis failed, using heuristics only: {e}", file=sys.stderr)

    graph = SourceGraph(
        claim=claim,
        nodes=nodes,
        edges=edges,
        clusters=clusters,
        hash="",
        metadata=GraphMetadata(
            created_at=now.isoformat(),
            source_count=len(evidence),
            node_count=len(nodes),
            edge_count=len(edges),
            cluster_count=len(clusters),
            ai_enhanced=ai_enhanced,
        ),
    )
    ensure_valid(graph)
    graph["hash"] = canonical_hash(graph)
    return graph
