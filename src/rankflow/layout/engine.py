"""Layout orchestrator.

``layout`` copies the caller's graph into a typed working graph, runs every
phase in order on it and writes the resulting geometry back. The caller's
graph is only touched by the final write-back, so a failing run leaves it as
it was.
"""

from __future__ import annotations

import logging
import math
from collections.abc import MutableMapping
from typing import Any

from rankflow.config import LayoutConfig, edge_label_from_attrs, node_label_from_attrs
from rankflow.errors import PreconditionError
from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, EdgeProxy, NodeLabel, SelfEdgeDummy, is_border
from rankflow.layout import (
    acyclic,
    coordinate_system,
    nesting,
    normalize,
)
from rankflow.layout.border_segments import add_border_segments
from rankflow.layout.order import order
from rankflow.layout.parent_dummy_chains import parent_dummy_chains
from rankflow.layout.position import position
from rankflow.layout.rank import assign_ranks
from rankflow.layout.types import EDGE_PROXY_PREFIX, SELF_EDGE_PREFIX
from rankflow.layout.util import (
    add_dummy_node,
    as_non_compound_graph,
    build_layer_matrix,
    intersect_rect,
    normalize_ranks,
    remove_empty_ranks,
    timed,
)
from rankflow.types import LabelPos, Point

logger = logging.getLogger(__name__)


# ─── Entry points ────────────────────────────────────────────────────────────


class LayeredLayout:
    """Runs the layered layout pipeline over caller graphs."""

    def __init__(self, debug_timing: bool = False) -> None:
        self.debug_timing = debug_timing

    def layout(self, input_graph: Graph) -> Graph:
        """Lay out ``input_graph`` in place and return it."""
        with timed("layout", self.debug_timing):
            with timed("  build_layout_graph", self.debug_timing):
                g = build_layout_graph(input_graph)
            with timed("  run_layout", self.debug_timing):
                self.run(g)
            with timed("  update_input_graph", self.debug_timing):
                update_input_graph(input_graph, g)
        return input_graph

    def run(self, g: Graph) -> None:
        """Run every phase over the typed working graph ``g``."""
        report = self.debug_timing
        with timed("    make_space_for_edge_labels", report):
            make_space_for_edge_labels(g)
        with timed("    remove_self_edges", report):
            remove_self_edges(g)
        with timed("    acyclic", report):
            acyclic.run(g)
        with timed("    nesting_graph.run", report):
            nesting.run(g)
        with timed("    rank", report):
            assign_ranks(as_non_compound_graph(g))
        with timed("    inject_edge_label_proxies", report):
            inject_edge_label_proxies(g)
        with timed("    remove_empty_ranks", report):
            remove_empty_ranks(g)
        with timed("    nesting_graph.cleanup", report):
            nesting.cleanup(g)
        with timed("    normalize_ranks", report):
            normalize_ranks(g)
        with timed("    assign_rank_min_max", report):
            assign_rank_min_max(g)
        with timed("    remove_edge_label_proxies", report):
            remove_edge_label_proxies(g)
        with timed("    normalize.run", report):
            normalize.run(g)
        with timed("    parent_dummy_chains", report):
            parent_dummy_chains(g)
        with timed("    add_border_segments", report):
            add_border_segments(g)
        with timed("    order", report):
            order(g)
        with timed("    insert_self_edges", report):
            insert_self_edges(g)
        with timed("    coordinate_system.adjust", report):
            coordinate_system.adjust(g)
        with timed("    position", report):
            position(g)
        with timed("    position_self_edges", report):
            position_self_edges(g)
        with timed("    remove_border_nodes", report):
            remove_border_nodes(g)
        with timed("    normalize.undo", report):
            normalize.undo(g)
        with timed("    fixup_edge_label_coords", report):
            fixup_edge_label_coords(g)
        with timed("    coordinate_system.undo", report):
            coordinate_system.undo(g)
        with timed("    translate_graph", report):
            translate_graph(g)
        with timed("    assign_node_intersects", report):
            assign_node_intersects(g)
        with timed("    reverse_points", report):
            reverse_points_for_reversed_edges(g)
        with timed("    acyclic.undo", report):
            acyclic.undo(g)


def layout(g: Graph, debug_timing: bool = False) -> Graph:
    """Lay out ``g`` in place; node, edge and graph attributes gain geometry."""
    return LayeredLayout(debug_timing=debug_timing).layout(g)


# ─── Input and output ────────────────────────────────────────────────────────


def build_layout_graph(input_graph: Graph) -> Graph:
    """Typed working copy of ``input_graph`` with every option defaulted."""
    config = LayoutConfig.from_attrs(input_graph.graph)
    g = Graph(multigraph=True, compound=True, label=config.to_graph_label())

    for v in input_graph.nodes():
        g.set_node(v, node_label_from_attrs(input_graph.node(v)))
    for v in input_graph.nodes():
        parent = input_graph.parent(v)
        if parent is not None:
            g.set_parent(v, parent)

    for e in input_graph.edges():
        for end in (e.v, e.w):
            if input_graph.children(end):
                raise PreconditionError(f"Edge {e.v!r} -> {e.w!r} touches subgraph {end!r}")
        g.add_edge(e.v, e.w, label=edge_label_from_attrs(input_graph.edge(e)), name=e.name)

    logger.debug("Layout graph: %r, options %s", g, config)
    return g


def update_input_graph(input_graph: Graph, layout_graph: Graph) -> None:
    """Copy coordinates, subgraph sizes, edge points and graph size back."""
    for v in input_graph.nodes():
        attrs = _ensure_attrs(input_graph.node(v), lambda a: input_graph.set_node(v, a))
        label: NodeLabel = layout_graph.node(v)
        attrs["x"] = label.x
        attrs["y"] = label.y
        if layout_graph.children(v):
            attrs["width"] = label.width
            attrs["height"] = label.height

    for e in input_graph.edges():
        attrs = _ensure_attrs(input_graph.edge(e), lambda a: input_graph.set_edge(e, label=a))
        edge: EdgeLabel = layout_graph.edge(e)
        attrs["points"] = edge.points
        if edge.has_label_position:
            attrs["x"] = edge.x
            attrs["y"] = edge.y

    graph_attrs = _ensure_attrs(input_graph.graph, lambda a: setattr(input_graph, "graph", a))
    graph_attrs["width"] = layout_graph.graph.width
    graph_attrs["height"] = layout_graph.graph.height


def _ensure_attrs(attrs: Any, store: Any) -> MutableMapping[str, Any]:
    if attrs is None:
        attrs = {}
        store(attrs)
    return attrs


# ─── Edge labels ─────────────────────────────────────────────────────────────


def make_space_for_edge_labels(g: Graph) -> None:
    """Insert a rank between every pair of ranks so labels get a rank of their own.

    Halving ranksep keeps the overall height the same. Labels beside the edge
    widen it by the label offset.
    """
    graph = g.graph
    graph.ranksep /= 2
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        edge.minlen *= 2
        if edge.labelpos is not LabelPos.CENTER:
            if graph.rankdir.is_vertical:
                edge.width += edge.labeloffset
            else:
                edge.height += edge.labeloffset


def inject_edge_label_proxies(g: Graph) -> None:
    """Park a proxy node on the middle rank of every labelled edge."""
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        if edge.width and edge.height:
            v = g.node(e.v)
            w = g.node(e.w)
            label = NodeLabel(rank=(w.rank - v.rank) / 2 + v.rank)
            add_dummy_node(g, EdgeProxy(edge=e), label, EDGE_PROXY_PREFIX)


def remove_edge_label_proxies(g: Graph) -> None:
    for v in g.nodes():
        node: NodeLabel = g.node(v)
        if isinstance(node.kind, EdgeProxy):
            g.edge(node.kind.edge).label_rank = node.rank
            g.remove_node(v)


def fixup_edge_label_coords(g: Graph) -> None:
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        if not edge.has_label_position:
            continue
        if edge.labelpos in (LabelPos.LEFT, LabelPos.RIGHT):
            edge.width -= edge.labeloffset
        if edge.labelpos is LabelPos.LEFT:
            edge.x -= edge.width / 2 + edge.labeloffset
        elif edge.labelpos is LabelPos.RIGHT:
            edge.x += edge.width / 2 + edge.labeloffset


# ─── Self edges ──────────────────────────────────────────────────────────────


def remove_self_edges(g: Graph) -> None:
    for e in g.edges():
        if e.v == e.w:
            g.node(e.v).self_edges.append((e, g.edge(e)))
            g.remove_edge(e)


def insert_self_edges(g: Graph) -> None:
    """Place one dummy per self edge directly right of its node."""
    for layer in build_layer_matrix(g):
        order_shift = 0
        for i, v in enumerate(layer):
            node: NodeLabel = g.node(v)
            node.order = i + order_shift
            for e, label in node.self_edges:
                order_shift += 1
                add_dummy_node(
                    g,
                    SelfEdgeDummy(edge=e, label=label),
                    NodeLabel(width=label.width, height=label.height, rank=node.rank, order=i + order_shift),
                    SELF_EDGE_PREFIX,
                )
            node.self_edges = []


def position_self_edges(g: Graph) -> None:
    """Turn each self edge dummy into a loop of five points beside its node."""
    for v in g.nodes():
        node: NodeLabel = g.node(v)
        kind = node.kind
        if not isinstance(kind, SelfEdgeDummy):
            continue
        self_node: NodeLabel = g.node(kind.edge.v)
        x = self_node.x + self_node.width / 2
        y = self_node.y
        dx = node.x - x
        dy = self_node.height / 2
        label = kind.label
        g.add_edge(kind.edge, label=label)
        g.remove_node(v)
        label.points = [
            Point(x=x + 2 * dx / 3, y=y - dy),
            Point(x=x + 5 * dx / 6, y=y - dy),
            Point(x=x + dx, y=y),
            Point(x=x + 5 * dx / 6, y=y + dy),
            Point(x=x + 2 * dx / 3, y=y + dy),
        ]
        label.x = node.x
        label.y = node.y


# ─── Subgraphs ───────────────────────────────────────────────────────────────


def assign_rank_min_max(g: Graph) -> None:
    highest = 0
    for v in g.nodes():
        node: NodeLabel = g.node(v)
        if node.border_top is not None:
            node.min_rank = int(g.node(node.border_top).rank)
            node.max_rank = int(g.node(node.border_bottom).rank)
            highest = max(highest, node.max_rank)
    g.graph.max_rank = highest


def remove_border_nodes(g: Graph) -> None:
    """Size each subgraph from its border nodes, then drop all border nodes."""
    for v in g.nodes():
        if not g.children(v):
            continue
        node: NodeLabel = g.node(v)
        top: NodeLabel = g.node(node.border_top)
        bottom: NodeLabel = g.node(node.border_bottom)
        left: NodeLabel = g.node(node.border_left[max(node.border_left)])
        right: NodeLabel = g.node(node.border_right[max(node.border_right)])

        node.width = abs(right.x - left.x)
        node.height = abs(bottom.y - top.y)
        node.x = left.x + node.width / 2
        node.y = top.y + node.height / 2

    for v in g.nodes():
        if is_border(g.node(v).kind):
            g.remove_node(v)


# ─── Final geometry ──────────────────────────────────────────────────────────


def translate_graph(g: Graph) -> None:
    """Move the drawing so its bounding box, margins included, starts at the origin."""
    min_x = math.inf
    max_x = 0.0
    min_y = math.inf
    max_y = 0.0
    graph = g.graph

    def extend(x: float, y: float, width: float, height: float) -> None:
        nonlocal min_x, max_x, min_y, max_y
        min_x = min(min_x, x - width / 2)
        max_x = max(max_x, x + width / 2)
        min_y = min(min_y, y - height / 2)
        max_y = max(max_y, y + height / 2)

    for v in g.nodes():
        node: NodeLabel = g.node(v)
        extend(node.x, node.y, node.width, node.height)
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        if edge.has_label_position:
            extend(edge.x, edge.y, edge.width, edge.height)

    if min_x == math.inf:
        min_x = min_y = 0.0
    min_x -= graph.marginx
    min_y -= graph.marginy

    for v in g.nodes():
        node = g.node(v)
        node.x -= min_x
        node.y -= min_y
    for e in g.edges():
        edge = g.edge(e)
        for point in edge.points:
            point.x -= min_x
            point.y -= min_y
        if edge.x is not None:
            edge.x -= min_x
        if edge.y is not None:
            edge.y -= min_y

    graph.width = max_x - min_x + graph.marginx
    graph.height = max_y - min_y + graph.marginy


def assign_node_intersects(g: Graph) -> None:
    """Start and end every edge's points on the border of its nodes."""
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        node_v: NodeLabel = g.node(e.v)
        node_w: NodeLabel = g.node(e.w)
        if not edge.points:
            p1 = Point(x=node_w.x, y=node_w.y)
            p2 = Point(x=node_v.x, y=node_v.y)
        else:
            p1 = edge.points[0]
            p2 = edge.points[-1]
        edge.points = [intersect_rect(node_v, p1), *edge.points, intersect_rect(node_w, p2)]


def reverse_points_for_reversed_edges(g: Graph) -> None:
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        if edge.reversed:
            edge.points.reverse()
