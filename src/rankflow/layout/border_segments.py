"""Left and right border nodes for every rank a subgraph spans."""

from __future__ import annotations

from typing import Literal

from rankflow.ir.graph import Graph
from rankflow.ir.labels import BorderSegment, EdgeLabel, NodeLabel
from rankflow.layout.types import BORDER_LEFT_PREFIX, BORDER_RIGHT_PREFIX
from rankflow.layout.util import add_dummy_node, hierarchy_postorder


def add_border_segments(g: Graph) -> None:
    for v, _ in hierarchy_postorder(g):
        node: NodeLabel = g.node(v)
        if node.min_rank is None or node.max_rank is None:
            continue
        node.border_left = {}
        node.border_right = {}
        for rank in range(node.min_rank, node.max_rank + 1):
            _add_border_node(g, "left", BORDER_LEFT_PREFIX, v, node, rank)
            _add_border_node(g, "right", BORDER_RIGHT_PREFIX, v, node, rank)


def _add_border_node(
    g: Graph, side: Literal["left", "right"], prefix: str, sg: str, sg_node: NodeLabel, rank: int
) -> None:
    borders = sg_node.border_left if side == "left" else sg_node.border_right
    prev = borders.get(rank - 1)
    curr = add_dummy_node(g, BorderSegment(side=side), NodeLabel(width=0.0, height=0.0, rank=rank), prefix)
    borders[rank] = curr
    g.set_parent(curr, sg)
    if prev is not None:
        g.add_edge(prev, curr, label=EdgeLabel(weight=1))
