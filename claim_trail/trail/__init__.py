"""Source graph: how a claim propagated across the retrieved evidence.

Nodes are evidence items with a propagation role, edges are temporal
attribution links, and the graph is identified by a canonical SHA-256 hash.
"""
