"""Crossing reduction.

Assigns every node an ``order`` within its rank that tries to minimize edge
crossings. Starts from a DFS-based initial order, then sweeps down and up the
ranks sorting each layer by barycenter, and keeps the best layering found.
The search stops after four sweeps without improvement.

Preconditions: the graph is a DAG, nodes have a rank, subgraph nodes have
min_rank, max_rank, border_left and border_right, and edges have a weight.
"""

from __future__ import annotations

import copy
import logging
import math

from rankflow.ir.graph import Graph
from rankflow.layout.order.cross_count import cross_count, two_layer_cross_count
from rankflow.layout.order.init_order import init_order
from rankflow.layout.order.layer_graph import build_layer_graph, build_layer_graphs
from rankflow.layout.order.sort_subgraph import (
    add_subgraph_constraints,
    barycenter,
    resolve_conflicts,
    sort,
    sort_subgraph,
)
from rankflow.layout.util import build_layer_matrix, max_rank
from rankflow.types import Relationship

logger = logging.getLogger(__name__)

__all__ = [
    "add_subgraph_constraints",
    "assign_order",
    "barycenter",
    "build_layer_graph",
    "cross_count",
    "init_order",
    "order",
    "resolve_conflicts",
    "sort",
    "sort_subgraph",
    "two_layer_cross_count",
]

# Sweeps allowed without improving the crossing count.
MAX_STALE_SWEEPS = 4


def order(g: Graph) -> None:
    highest = max_rank(g)
    down_layer_graphs = build_layer_graphs(g, range(1, highest + 1), Relationship.IN_EDGES)
    up_layer_graphs = build_layer_graphs(g, range(highest - 1, -1, -1), Relationship.OUT_EDGES)

    layering = init_order(g)
    assign_order(g, layering)

    best_cc = math.inf
    best = layering
    i = 0
    last_best = 0
    while last_best < MAX_STALE_SWEEPS:
        _sweep_layer_graphs(down_layer_graphs if i % 2 else up_layer_graphs, i % 4 >= 2)
        layering = build_layer_matrix(g)
        cc = cross_count(g, layering)
        if cc < best_cc:
            last_best = 0
            best = copy.deepcopy(layering)
            best_cc = cc
        i += 1
        last_best += 1

    assign_order(g, best)
    logger.debug("Ordering settled after %d sweep(s) with %s crossing(s)", i, best_cc)


def assign_order(g: Graph, layering: list[list[str]]) -> None:
    for layer in layering:
        for i, v in enumerate(layer):
            g.node(v).order = i


def _sweep_layer_graphs(layer_graphs: list[Graph], bias_right: bool) -> None:
    cg = Graph()
    for lg in layer_graphs:
        root = lg.graph.root
        result = sort_subgraph(lg, root, cg, bias_right)
        for i, v in enumerate(result.vs):
            lg.node(v).order = i
        add_subgraph_constraints(lg, cg, result.vs)
