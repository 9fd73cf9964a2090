"""Dummy node insertion for edges spanning multiple ranks.

``run`` breaks every edge longer than one rank into unit-length segments
through chains of dummy nodes; the dummy on the edge's label rank takes the
label's size. ``undo`` collapses each chain back into the original edge,
turning the dummy positions into routing points.

Preconditions for ``run``: the graph is a DAG and every node has a rank.
"""

from __future__ import annotations

import logging

from rankflow.errors import PreconditionError
from rankflow.ir.graph import EdgeKey, Graph
from rankflow.ir.labels import EdgeDummy, EdgeLabel, EdgeLabelDummy, NodeLabel
from rankflow.layout.types import DUMMY_PREFIX
from rankflow.layout.util import add_dummy_node
from rankflow.types import Point

logger = logging.getLogger(__name__)


def run(g: Graph) -> None:
    g.graph.dummy_chains = []
    for e in g.edges():
        _normalize_edge(g, e)
    logger.debug("Inserted %d dummy chain(s)", len(g.graph.dummy_chains))


def _normalize_edge(g: Graph, e: EdgeKey) -> None:
    v = e.v
    w = e.w
    v_rank = g.node(v).rank
    w_rank = g.node(w).rank
    if v_rank is None or w_rank is None:
        raise PreconditionError(f"Edge {v!r} -> {w!r} has an unranked endpoint")
    v_rank = int(v_rank)
    w_rank = int(w_rank)
    if w_rank == v_rank + 1:
        return

    edge_label: EdgeLabel = g.edge(e)
    label_rank = edge_label.label_rank
    g.remove_edge(e)

    first = True
    for rank in range(v_rank + 1, w_rank):
        edge_label.points = []
        if rank == label_rank:
            attrs = NodeLabel(width=edge_label.width, height=edge_label.height, rank=rank)
            kind = EdgeLabelDummy(edge=e, edge_label=edge_label, labelpos=edge_label.labelpos)
        else:
            attrs = NodeLabel(width=0.0, height=0.0, rank=rank)
            kind = EdgeDummy(edge=e, edge_label=edge_label)
        dummy = add_dummy_node(g, kind, attrs, DUMMY_PREFIX)
        g.add_edge(v, dummy, label=EdgeLabel(weight=edge_label.weight), name=e.name)
        if first:
            g.graph.dummy_chains.append(dummy)
            first = False
        v = dummy

    g.add_edge(v, w, label=EdgeLabel(weight=edge_label.weight), name=e.name)


def undo(g: Graph) -> None:
    for v in g.graph.dummy_chains:
        node: NodeLabel = g.node(v)
        kind = node.kind
        assert isinstance(kind, (EdgeDummy, EdgeLabelDummy))
        orig_label = kind.edge_label
        g.add_edge(kind.edge, label=orig_label)
        while isinstance(node.kind, (EdgeDummy, EdgeLabelDummy)):
            w = g.successors(v)[0]
            g.remove_node(v)
            orig_label.points.append(Point(x=node.x, y=node.y))
            if isinstance(node.kind, EdgeLabelDummy):
                orig_label.x = node.x
                orig_label.y = node.y
                orig_label.width = node.width
                orig_label.height = node.height
            v = w
            node = g.node(v)
    g.graph.dummy_chains = []
