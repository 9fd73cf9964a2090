"""Nesting graph: make rank assignment respect subgraph containment.

Every subgraph gets a top and a bottom border node, linked to its children so
that its members rank strictly between them, and a single root connects all
components. Multiplying minlen by ``2 * height + 1`` leaves room for border
ranks between any two ordinary ranks, so ordinary nodes and borders never
share a rank.

After Sander, "Layout of Compound Directed Graphs".

Preconditions: the graph is a DAG and every edge has a minlen.
Postconditions: the graph is connected, subgraphs have border_top and
border_bottom, and the graph label records nesting_root and node_rank_factor.
"""

from __future__ import annotations

import logging

import networkx as nx

from rankflow.errors import PreconditionError
from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, NestingRoot, NodeLabel
from rankflow.layout.types import BORDER_BOTTOM_PREFIX, BORDER_TOP_PREFIX, ROOT_PREFIX
from rankflow.layout.util import add_border_node, add_dummy_node, hierarchy_postorder

logger = logging.getLogger(__name__)


def run(g: Graph) -> str:
    """Add borders, nesting edges and the nesting root to ``g``; return the root id."""
    if not nx.is_directed_acyclic_graph(g.digraph):
        raise PreconditionError("Nesting graph requires an acyclic graph")

    root = add_dummy_node(g, NestingRoot(), NodeLabel(), ROOT_PREFIX)
    depths = tree_depths(g)
    height = max(depths.values()) - 1
    node_sep = 2 * height + 1

    g.graph.nesting_root = root

    for e in g.edges():
        g.edge(e).minlen *= node_sep

    # Heavier than every real edge together, so subgraphs stay vertically compact.
    weight = sum_weights(g) + 1

    borders = 0
    top_level = [v for v in g.children() if v != root]
    for v, _ in hierarchy_postorder(g, top_level):
        children = g.children(v)
        if not children:
            g.add_edge(root, v, label=EdgeLabel(weight=0, minlen=node_sep))
            continue

        top = add_border_node(g, "top", BORDER_TOP_PREFIX)
        bottom = add_border_node(g, "bottom", BORDER_BOTTOM_PREFIX)
        label: NodeLabel = g.node(v)
        g.set_parent(top, v)
        label.border_top = top
        g.set_parent(bottom, v)
        label.border_bottom = bottom
        borders += 2

        for child in children:
            child_label: NodeLabel = g.node(child)
            child_top = child_label.border_top or child
            child_bottom = child_label.border_bottom or child
            # Leaf children have no edges of their own pulling them in.
            this_weight = weight / 2 if child_label.border_top else weight
            minlen = 1 if child_top != child_bottom else height - depths[v] + 1
            g.add_edge(top, child_top, label=EdgeLabel(weight=this_weight, minlen=minlen, nesting_edge=True))
            g.add_edge(child_bottom, bottom, label=EdgeLabel(weight=this_weight, minlen=minlen, nesting_edge=True))

        if g.parent(v) is None:
            g.add_edge(root, top, label=EdgeLabel(weight=0, minlen=height + depths[v]))

    # Kept so empty border ranks can be told apart from empty node ranks later.
    g.graph.node_rank_factor = node_sep
    logger.debug("Nesting graph: height=%d node_sep=%d border nodes=%d", height, node_sep, borders)
    return root


def tree_depths(g: Graph) -> dict[str, int]:
    """Depth of every node in the hierarchy; top-level nodes have depth 1."""
    return dict(hierarchy_postorder(g))


def sum_weights(g: Graph) -> float:
    return sum(g.edge(e).weight for e in g.edges())


def cleanup(g: Graph) -> None:
    """Remove the nesting root and every nesting edge."""
    root = g.graph.nesting_root
    if root is not None:
        g.remove_node(root)
        g.graph.nesting_root = None
    for e in g.edges():
        if g.edge(e).nesting_edge:
            g.remove_edge(e)
