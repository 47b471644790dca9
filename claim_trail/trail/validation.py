"""Structural validation and summary statistics for source graphs."""

from __future__ import annotations

from collections import Counter
from typing import Any

from claim_trail.contracts import GraphValidation, NodeRole, SourceGraph
from claim_trail.errors import GraphValidationError


def validate_graph(graph: SourceGraph) -> GraphValidation:
    """Check ids, urls and edge references. Never repairs anything."""
    errors: list[str] = []
    if not graph.get("claim"):
        errors.append("Missing claim")

    nodes = graph.get("nodes")
    if not isinstance(nodes, list):
        errors.append("Nodes must be a list")
        return GraphValidation(valid=False, errors=errors)

    node_ids: set[str] = set()
    for node in nodes:
        node_id = node.get("id")
        if not node_id:
            errors.append("Node missing ID")
        if not node.get("url"):
            errors.append(f"Node {node_id} missing URL")
        if node_id in node_ids:
            errors.append(f"Duplicate node ID: {node_id}")
        node_ids.add(node_id)

    for edge in graph.get("edges") or []:
        for end in ("from", "to"):
            if edge.get(end) not in node_ids:
                errors.append(f"Edge {edge.get('id')} references non-existent node: {edge.get(end)}")

    return GraphValidation(valid=not errors, errors=errors)


def ensure_valid(graph: SourceGraph) -> SourceGraph:
    result = validate_graph(graph)
    if not result["valid"]:
        raise GraphValidationError(result["errors"])
    return graph


def graph_stats(graph: SourceGraph) -> dict[str, Any]:
    nodes = graph.get("nodes") or []
    edges = graph.get("edges") or []
    roles = Counter(n["role"] for n in nodes)
    return {
        "node_count": len(nodes),
        "edge_count": len(edges),
        "cluster_count": len(graph.get("clusters") or []),
        "role_distribution": dict(roles),
        "domain_distribution": dict(Counter(n["domain"] for n in nodes)),
        "relationship_distribution": dict(Counter(e["relationship"] for e in edges)),
        "has_origin": roles[NodeRole.ORIGIN.value] > 0,
        "has_debunkers": roles[NodeRole.DEBUNKER.value] > 0,
    }
