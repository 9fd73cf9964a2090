"""Initial ordering.

Seeds each layer by a depth-first walk from the nodes of the lowest ranks,
so nodes land next to the neighbors they were reached from before any
crossing reduction runs. After Gansner et al., "A Technique for Drawing
Directed Graphs".
"""

from __future__ import annotations

from rankflow.errors import PreconditionError
from rankflow.ir.graph import Graph


def init_order(g: Graph) -> list[list[str]]:
    """Return one list of node ids per rank, in first-visit order."""
    simple_nodes = [v for v in g.nodes() if not g.children(v)]
    ranks: dict[str, int] = {}
    for v in simple_nodes:
        rank = g.node(v).rank
        if rank is None:
            raise PreconditionError(f"Node {v!r} has no rank")
        ranks[v] = int(rank)
    if not ranks:
        return []

    layers: list[list[str]] = [[] for _ in range(max(ranks.values()) + 1)]
    visited: set[str] = set()

    for start in sorted(simple_nodes, key=lambda v: ranks[v]):
        stack = [start]
        while stack:
            v = stack.pop()
            if v in visited:
                continue
            visited.add(v)
            layers[ranks[v]].append(v)
            stack.extend(reversed(g.successors(v)))
    return layers
