"""Per-rank layer graphs for crossing reduction.

A layer graph holds every base node and subgraph on one rank with its
hierarchy intact. Nodes without a parent hang under a synthetic root, named
in the graph label, which makes it easy to walk the movable hierarchy. Edges
of the requested relationship are copied in, always pointing towards the
movable node; parallel edges are merged by summing their weights since the
layer graph is not a multigraph.

Preconditions: the graph is a DAG, base nodes have a rank, subgraph nodes
have min_rank and max_rank, and edges have a weight.
"""

from __future__ import annotations

from rankflow.errors import PreconditionError
from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, LayerGraphLabel, NodeLabel
from rankflow.layout.types import ROOT_PREFIX
from rankflow.types import Relationship


def build_layer_graph(g: Graph, rank: int, relationship: Relationship) -> Graph:
    root = g.unique_id(ROOT_PREFIX)
    result = Graph(compound=True, label=LayerGraphLabel(root=root, rank=rank))
    # Base nodes share their label with ``g`` so orders written here reach ``g``.
    result.set_default_node_label(g.node)

    for v in g.nodes():
        node: NodeLabel = g.node(v)
        is_subgraph = node.min_rank is not None and node.max_rank is not None
        if node.rank is None and not is_subgraph:
            raise PreconditionError(f"Node {v!r} has neither a rank nor a rank span")
        if node.rank != rank and not (is_subgraph and node.min_rank <= rank <= node.max_rank):
            continue

        result.set_node(v)
        result.set_parent(v, g.parent(v) or root)

        incident = g.in_edges(v) if relationship is Relationship.IN_EDGES else g.out_edges(v)
        for e in incident:
            u = e.w if e.v == v else e.v
            edge: EdgeLabel | None = result.edge(u, v)
            weight = edge.weight if edge is not None else 0
            result.set_edge(u, v, label=EdgeLabel(weight=g.edge(e).weight + weight))

        if is_subgraph:
            result.set_node(
                v,
                NodeLabel(
                    border_left={rank: node.border_left[rank]},
                    border_right={rank: node.border_right[rank]},
                ),
            )

    return result


def build_layer_graphs(g: Graph, ranks: range, relationship: Relationship) -> list[Graph]:
    return [build_layer_graph(g, rank, relationship) for rank in ranks]
