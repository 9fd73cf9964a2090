"""Rank helpers shared by the ranking strategies."""

from __future__ import annotations

import networkx as nx

from rankflow.errors import PreconditionError
from rankflow.ir.graph import EdgeKey, Graph


def longest_path(g: Graph) -> None:
    """Give every node the smallest rank its incoming minlen constraints allow.

    Sources get rank 0 and every other node sits at the maximum, over its
    incoming edges, of tail rank plus minlen. Fast and always feasible, but
    it stretches the graph.
    """
    try:
        order = list(nx.topological_sort(g.digraph))
    except nx.NetworkXUnfeasible as exc:
        raise PreconditionError("Longest-path ranking requires an acyclic graph") from exc

    for v in order:
        g.node(v).rank = max(
            (g.node(e.v).rank + g.edge(e).minlen for e in g.in_edges(v)),
            default=0,
        )


def slack(g: Graph, e: EdgeKey) -> float:
    """How much longer ``e`` is than its minlen requires; tight edges have slack 0."""
    return g.node(e.w).rank - g.node(e.v).rank - g.edge(e).minlen
