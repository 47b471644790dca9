"""Canonical reduced view of a source graph, its serialization and hash."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass

from claim_trail.contracts import SourceGraph


@dataclass(frozen=True)
class CanonicalNode:
    id: str
    url: str
    title: str
    role: str


@dataclass(frozen=True)
class CanonicalEdge:
    source: str
    target: str
    relationship: str

    @property
    def sort_key(self) -> tuple[str, str]:
        return (f"{self.source}-{self.target}", self.relationship)

    def as_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.target, "relationship": self.relationship}


@dataclass(frozen=True)
class CanonicalGraph:
    """Structural conclusions only: no timestamps, snippets or domain scores."""

    claim: str
    nodes: tuple[CanonicalNode, ...]
    edges: tuple[CanonicalEdge, ...]

    @classmethod
    def from_graph(cls, graph: SourceGraph) -> CanonicalGraph:
        nodes = sorted(
            (
                CanonicalNode(id=n["id"], url=n["url"], title=n["title"], role=n["role"])
                for n in graph["nodes"]
            ),
            key=lambda n: n.id,
        )
        edges = sorted(
            (
                CanonicalEdge(source=e["from"], target=e["to"], relationship=e["relationship"])
                for e in graph["edges"]
            ),
            key=lambda e: e.sort_key,
        )
        return cls(claim=graph["claim"], nodes=tuple(nodes), edges=tuple(edges))

    def to_json(self) -> str:
        payload = {
            "claim": self.claim,
            "nodes": [asdict(n) for n in self.nodes],
            "edges": [e.as_dict() for e in self.edges],
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonical_hash(graph: SourceGraph) -> str:
    """Lowercase hex SHA-256 of the canonical reduced view."""
    canonical = CanonicalGraph.from_graph(graph).to_json()
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def serialize_graph(graph: SourceGraph) -> str:
    """Full graph as stable sorted-key JSON."""
    return json.dumps(graph, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
