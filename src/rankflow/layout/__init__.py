"""Layout phases and the public pipeline API."""

from __future__ import annotations

from rankflow.layout.acyclic import dfs_fas
from rankflow.layout.border_segments import add_border_segments
from rankflow.layout.dlist import DoublyLinkedList
from rankflow.layout.engine import LayeredLayout, build_layout_graph, layout, update_input_graph
from rankflow.layout.greedy_fas import greedy_fas
from rankflow.layout.order import build_layer_graph, cross_count, init_order, order
from rankflow.layout.parent_dummy_chains import parent_dummy_chains
from rankflow.layout.position import position
from rankflow.layout.rank import assign_ranks, feasible_tree, longest_path, network_simplex
from rankflow.layout.types import (
    BORDER_BOTTOM_PREFIX,
    BORDER_LEFT_PREFIX,
    BORDER_RIGHT_PREFIX,
    BORDER_TOP_PREFIX,
    DUMMY_PREFIX,
    EDGE_PROXY_PREFIX,
    ROOT_PREFIX,
    SELF_EDGE_PREFIX,
)
from rankflow.layout.util import as_non_compound_graph, build_layer_matrix, simplify

__all__ = [
    "BORDER_BOTTOM_PREFIX",
    "BORDER_LEFT_PREFIX",
    "BORDER_RIGHT_PREFIX",
    "BORDER_TOP_PREFIX",
    "DUMMY_PREFIX",
    "EDGE_PROXY_PREFIX",
    "ROOT_PREFIX",
    "SELF_EDGE_PREFIX",
    "DoublyLinkedList",
    "LayeredLayout",
    "add_border_segments",
    "as_non_compound_graph",
    "assign_ranks",
    "build_layer_graph",
    "build_layer_matrix",
    "build_layout_graph",
    "cross_count",
    "dfs_fas",
    "feasible_tree",
    "greedy_fas",
    "init_order",
    "layout",
    "longest_path",
    "network_simplex",
    "order",
    "parent_dummy_chains",
    "position",
    "simplify",
    "update_input_graph",
]
