"""Network simplex ranking.

Gansner et al., "A Technique for Drawing Directed Graphs". Starting from a
feasible tight tree, repeatedly swap a tree edge with a negative cut value
for the non-tree edge of least slack that crosses the same cut, until no
cut value is negative. The result minimizes the total weighted edge length.

Preconditions: the graph is a connected DAG; every edge has weight and minlen.
Postconditions: every node has a rank; ranks may be negative.

Tree bookkeeping lives on the undirected networkx tree: nodes carry
``low``, ``lim`` and ``parent`` from a postorder walk, edges carry
``cutvalue``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import networkx as nx

from rankflow.ir.graph import EdgeKey, Graph
from rankflow.layout.rank.feasible_tree import feasible_tree
from rankflow.layout.rank.util import longest_path, slack
from rankflow.layout.util import simplify

logger = logging.getLogger(__name__)


def network_simplex(g: Graph) -> None:
    g = simplify(g)
    longest_path(g)
    t = feasible_tree(g)
    init_low_lim_values(t)
    init_cut_values(t, g)

    exchanges = 0
    e = leave_edge(t)
    while e is not None:
        f = enter_edge(t, g, e)
        exchange_edges(t, g, e, f)
        exchanges += 1
        e = leave_edge(t)
    logger.debug("Network simplex converged after %d exchange(s)", exchanges)


# ─── Cut values ──────────────────────────────────────────────────────────────


def init_cut_values(t: nx.Graph, g: Graph) -> None:
    """Assign every tree edge its cut value, children before parents."""
    if t.number_of_nodes() == 0:
        return
    root = next(iter(t.nodes))
    for v in nx.dfs_postorder_nodes(t, source=root):
        if v != root:
            assign_cut_value(t, g, v)


def assign_cut_value(t: nx.Graph, g: Graph, child: str) -> None:
    parent = t.nodes[child]["parent"]
    t.edges[child, parent]["cutvalue"] = calc_cut_value(t, g, child)


def calc_cut_value(t: nx.Graph, g: Graph, child: str) -> float:
    """Cut value of the tree edge between ``child`` and its tree parent.

    Uses the already computed cut values of the child's own tree edges, so
    the whole tree costs one pass over the edges.
    """
    parent = t.nodes[child]["parent"]
    child_is_tail = True
    graph_edge = g.edge(child, parent)
    if graph_edge is None:
        child_is_tail = False
        graph_edge = g.edge(parent, child)

    cut_value = graph_edge.weight
    for e in g.node_edges(child):
        is_out_edge = e.v == child
        other = e.w if is_out_edge else e.v
        if other == parent:
            continue
        points_to_head = is_out_edge == child_is_tail
        other_weight = g.edge(e).weight
        cut_value += other_weight if points_to_head else -other_weight
        if t.has_edge(child, other):
            other_cut_value = t.edges[child, other]["cutvalue"]
            cut_value += -other_cut_value if points_to_head else other_cut_value
    return cut_value


def init_low_lim_values(tree: nx.Graph, root: str | None = None) -> None:
    """Number the tree in postorder: ``lim`` is a node's number, ``low`` the least in its subtree."""
    if tree.number_of_nodes() == 0:
        return
    if root is None:
        root = next(iter(tree.nodes))

    next_lim = 1
    visited = {root}
    stack: list[tuple[str, str | None, int, Iterator[str]]] = [(root, None, next_lim, iter(tree.neighbors(root)))]
    while stack:
        v, parent, low, neighbors = stack[-1]
        child = next((w for w in neighbors if w not in visited), None)
        if child is None:
            stack.pop()
            label = tree.nodes[v]
            label["low"] = low
            label["lim"] = next_lim
            label["parent"] = parent
            next_lim += 1
        else:
            visited.add(child)
            stack.append((child, v, next_lim, iter(tree.neighbors(child))))


# ─── Edge exchange ───────────────────────────────────────────────────────────


def leave_edge(tree: nx.Graph) -> tuple[str, str] | None:
    for u, v, data in tree.edges(data=True):
        if data["cutvalue"] < 0:
            return u, v
    return None


def enter_edge(t: nx.Graph, g: Graph, edge: tuple[str, str]) -> EdgeKey:
    """Least-slack graph edge that reconnects the two halves split by ``edge``."""
    v, w = edge
    # The graph edge may point the other way round.
    if not g.has_edge(v, w):
        v, w = w, v

    v_label = t.nodes[v]
    w_label = t.nodes[w]
    tail_label = v_label
    flip = False

    # Whichever end is deeper in the tree is the root of the detached subtree.
    if v_label["lim"] > w_label["lim"]:
        tail_label = w_label
        flip = True

    candidates = [
        e
        for e in g.edges()
        if flip == is_descendant(t.nodes[e.v], tail_label) and flip != is_descendant(t.nodes[e.w], tail_label)
    ]
    return min(candidates, key=lambda e: slack(g, e))


def exchange_edges(t: nx.Graph, g: Graph, e: tuple[str, str], f: EdgeKey) -> None:
    t.remove_edge(*e)
    t.add_edge(f.v, f.w)
    init_low_lim_values(t)
    init_cut_values(t, g)
    update_ranks(t, g)


def update_ranks(t: nx.Graph, g: Graph) -> None:
    """Re-derive ranks from the root so every tree edge is tight again."""
    root = next(v for v in t.nodes if t.nodes[v]["parent"] is None)
    for v in list(nx.dfs_preorder_nodes(t, source=root))[1:]:
        parent = t.nodes[v]["parent"]
        edge = g.edge(v, parent)
        flipped = False
        if edge is None:
            edge = g.edge(parent, v)
            flipped = True
        g.node(v).rank = g.node(parent).rank + (edge.minlen if flipped else -edge.minlen)


def is_descendant(v_label: dict, root_label: dict) -> bool:
    """Whether the tree node with ``v_label`` lies in the subtree rooted at ``root_label``."""
    return root_label["low"] <= v_label["lim"] <= root_label["lim"]
