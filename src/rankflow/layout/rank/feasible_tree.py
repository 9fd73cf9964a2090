"""Feasible tight spanning tree.

Grows a tree of tight edges from an arbitrary node. Whenever the tree cannot
grow any more, the whole tree is shifted by the slack of the cheapest edge
leaving it, which makes that edge tight, and growth resumes.

Preconditions: the graph is a connected DAG with a feasible ranking.
Postconditions: the ranking is still feasible and every tree edge is tight.
The returned tree is an undirected networkx graph over all nodes.
"""

from __future__ import annotations

import networkx as nx

from rankflow.errors import PreconditionError
from rankflow.ir.graph import EdgeKey, Graph
from rankflow.layout.rank.util import slack


def feasible_tree(g: Graph) -> nx.Graph:
    t = nx.Graph()
    nodes = g.nodes()
    if not nodes:
        return t
    t.add_node(nodes[0])
    size = len(nodes)

    while tight_tree(t, g) < size:
        edge = find_min_slack_edge(t, g)
        if edge is None:
            raise PreconditionError("Rank assignment requires a connected graph")
        delta = slack(g, edge) if edge.v in t else -slack(g, edge)
        shift_ranks(t, g, delta)

    return t


def tight_tree(t: nx.Graph, g: Graph) -> int:
    """Extend ``t`` with every node reachable over tight edges; return the tree size."""
    stack = list(t.nodes)
    while stack:
        v = stack.pop()
        for e in g.node_edges(v):
            w = e.w if v == e.v else e.v
            if w not in t and not slack(g, e):
                t.add_edge(v, w)
                stack.append(w)
    return t.number_of_nodes()


def find_min_slack_edge(t: nx.Graph, g: Graph) -> EdgeKey | None:
    """The edge with exactly one endpoint in ``t`` that has the least slack."""
    crossing = [e for e in g.edges() if (e.v in t) != (e.w in t)]
    if not crossing:
        return None
    return min(crossing, key=lambda e: slack(g, e))


def shift_ranks(t: nx.Graph, g: Graph, delta: float) -> None:
    for v in t.nodes:
        g.node(v).rank += delta
