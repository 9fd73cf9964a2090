"""Coordinate assignment.

y comes straight from the ranks: each rank is as tall as its tallest node
and ranks are ``ranksep`` apart. x follows Brandes and Köpf, "Fast and Simple
Horizontal Coordinate Assignment": four vertical alignments (up/down crossed
with left/right) are compacted into blocks, shifted onto the narrowest of
them and then balanced.

Preconditions: nodes have rank and order, and the graph is already in the
top-to-bottom coordinate system.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from rankflow.ir.graph import Graph
from rankflow.ir.labels import BorderSegment, EdgeLabelDummy, NodeLabel, is_border
from rankflow.layout.util import as_non_compound_graph, build_layer_matrix
from rankflow.types import Align, LabelPos

logger = logging.getLogger(__name__)

Conflicts = dict[str, set[str]]
SepFn = Callable[[Graph, str, str], float]


def position(g: Graph) -> None:
    g = as_non_compound_graph(g)
    position_y(g)
    for v, x in position_x(g).items():
        g.node(v).x = x


def position_y(g: Graph) -> None:
    rank_sep = g.graph.ranksep
    prev_y = 0.0
    for layer in build_layer_matrix(g):
        max_height = max((g.node(v).height for v in layer), default=0.0)
        for v in layer:
            g.node(v).y = prev_y + max_height / 2
        prev_y += max_height + rank_sep


# ─── Conflicts ───────────────────────────────────────────────────────────────


def find_type1_conflicts(g: Graph, layering: list[list[str]]) -> Conflicts:
    """Mark non-inner segments that cross an inner segment.

    Inner segments join two dummy nodes; they win every crossing so long
    edges stay straight.
    """
    conflicts: Conflicts = {}

    for prev_layer, layer in zip(layering, layering[1:]):
        k0 = 0
        scan_pos = 0
        last_node = layer[-1] if layer else None
        for i, v in enumerate(layer):
            w = _find_other_inner_segment_node(g, v)
            k1 = g.node(w).order if w is not None else len(prev_layer)
            if w is None and v != last_node:
                continue
            for scan_node in layer[scan_pos : i + 1]:
                for u in g.predecessors(scan_node):
                    u_label: NodeLabel = g.node(u)
                    u_pos = u_label.order
                    if (u_pos < k0 or k1 < u_pos) and not (u_label.dummy and g.node(scan_node).dummy):
                        add_conflict(conflicts, u, scan_node)
            scan_pos = i + 1
            k0 = k1

    return conflicts


def find_type2_conflicts(g: Graph, layering: list[list[str]]) -> Conflicts:
    """Mark inner segments that cross the border segments of a subgraph."""
    conflicts: Conflicts = {}

    def scan(south: list[str], south_pos: int, south_end: int, prev_north_border: int, next_north_border: int) -> None:
        for v in south[south_pos:south_end]:
            if not g.node(v).dummy:
                continue
            for u in g.predecessors(v):
                u_node: NodeLabel = g.node(u)
                if u_node.dummy and (u_node.order < prev_north_border or u_node.order > next_north_border):
                    add_conflict(conflicts, u, v)

    for north, south in zip(layering, layering[1:]):
        prev_north_pos = -1
        next_north_pos: int | None = None
        south_pos = 0
        for south_lookahead, v in enumerate(south):
            if is_border(g.node(v).kind):
                predecessors = g.predecessors(v)
                if predecessors:
                    next_north_pos = g.node(predecessors[0]).order
                    scan(south, south_pos, south_lookahead, prev_north_pos, next_north_pos)
                    south_pos = south_lookahead
                    prev_north_pos = next_north_pos
        scan(south, south_pos, len(south), next_north_pos if next_north_pos is not None else -1, len(north))

    return conflicts


def _find_other_inner_segment_node(g: Graph, v: str) -> str | None:
    if g.node(v).dummy:
        for u in g.predecessors(v):
            if g.node(u).dummy:
                return u
    return None


def add_conflict(conflicts: Conflicts, v: str, w: str) -> None:
    if v > w:
        v, w = w, v
    conflicts.setdefault(v, set()).add(w)


def has_conflict(conflicts: Conflicts, v: str, w: str) -> bool:
    if v > w:
        v, w = w, v
    return w in conflicts.get(v, ())


def _merge_conflicts(*all_conflicts: Conflicts) -> Conflicts:
    merged: Conflicts = {}
    for conflicts in all_conflicts:
        for v, ws in conflicts.items():
            merged.setdefault(v, set()).update(ws)
    return merged


# ─── Alignment and compaction ────────────────────────────────────────────────


def vertical_alignment(
    g: Graph,
    layering: list[list[str]],
    conflicts: Conflicts,
    neighbor_fn: Callable[[str], list[str]],
) -> tuple[dict[str, str], dict[str, str]]:
    """Align each node with its median neighbor; returns ``(root, align)``.

    ``root`` maps every node to the top of its block and ``align`` links each
    node to the next one down the block, cycling back to the root.
    """
    root: dict[str, str] = {}
    align: dict[str, str] = {}
    pos: dict[str, int] = {}

    for layer in layering:
        for order, v in enumerate(layer):
            root[v] = v
            align[v] = v
            pos[v] = order

    for layer in layering:
        prev_idx = -1
        for v in layer:
            ws = neighbor_fn(v)
            if not ws:
                continue
            ws = sorted(ws, key=lambda w: pos[w])
            mp = (len(ws) - 1) / 2
            for i in range(math.floor(mp), math.ceil(mp) + 1):
                w = ws[i]
                if align[v] == v and prev_idx < pos[w] and not has_conflict(conflicts, v, w):
                    align[w] = v
                    align[v] = root[v] = root[w]
                    prev_idx = pos[w]

    return root, align


def horizontal_compaction(
    g: Graph,
    layering: list[list[str]],
    root: dict[str, str],
    align: dict[str, str],
    reverse_sep: bool = False,
) -> dict[str, float]:
    """Place blocks as far left as the separation constraints allow, then
    pull them right where that does not widen the drawing."""
    xs: dict[str, float] = {}
    block_g = _build_block_graph(g, layering, root, reverse_sep)
    border_side = "left" if reverse_sep else "right"

    def iterate(set_xs: Callable[[str], None], next_nodes: Callable[[str], list[str]]) -> None:
        stack = block_g.nodes()
        visited: set[str] = set()
        while stack:
            elem = stack.pop()
            if elem in visited:
                set_xs(elem)
            else:
                visited.add(elem)
                stack.append(elem)
                stack.extend(next_nodes(elem))

    def pass1(elem: str) -> None:
        xs[elem] = max((xs[e.v] + block_g.edge(e) for e in block_g.in_edges(elem)), default=0.0)

    def pass2(elem: str) -> None:
        lowest = min((xs[e.w] - block_g.edge(e) for e in block_g.out_edges(elem)), default=math.inf)
        kind = g.node(elem).kind
        if lowest != math.inf and not (isinstance(kind, BorderSegment) and kind.side == border_side):
            xs[elem] = max(xs[elem], lowest)

    iterate(pass1, block_g.predecessors)
    iterate(pass2, block_g.successors)

    for v in align:
        xs[v] = xs[root[v]]
    return xs


def _build_block_graph(g: Graph, layering: list[list[str]], root: dict[str, str], reverse_sep: bool) -> Graph:
    block_graph = Graph()
    sep_fn = sep(g.graph.nodesep, g.graph.edgesep, reverse_sep)

    for layer in layering:
        u: str | None = None
        for v in layer:
            v_root = root[v]
            block_graph.set_node(v_root)
            if u is not None:
                u_root = root[u]
                prev_max = block_graph.edge(u_root, v_root)
                block_graph.set_edge(u_root, v_root, label=max(sep_fn(g, v, u), prev_max or 0.0))
            u = v

    return block_graph


def sep(node_sep: float, edge_sep: float, reverse_sep: bool) -> SepFn:
    """Build the minimum center distance between neighbors ``w`` and ``v``."""

    def label_shift(label: NodeLabel) -> float:
        """How far the label pushes the edge line right of the dummy's center."""
        kind = label.kind
        if not isinstance(kind, EdgeLabelDummy):
            return 0.0
        if kind.labelpos is LabelPos.LEFT:
            return label.width / 2
        if kind.labelpos is LabelPos.RIGHT:
            return -label.width / 2
        return 0.0

    def separation(g: Graph, v: str, w: str) -> float:
        v_label: NodeLabel = g.node(v)
        w_label: NodeLabel = g.node(w)

        total = v_label.width / 2
        delta = label_shift(v_label)
        total += -delta if reverse_sep else delta
        total += (edge_sep if v_label.dummy else node_sep) / 2
        total += (edge_sep if w_label.dummy else node_sep) / 2
        total += w_label.width / 2
        delta = label_shift(w_label)
        total += delta if reverse_sep else -delta
        return total

    return separation


# ─── Combining the four alignments ───────────────────────────────────────────


def find_smallest_width_alignment(g: Graph, xss: dict[str, dict[str, float]]) -> str:
    best_alignment = ""
    best_width = math.inf
    for alignment, xs in xss.items():
        lo = math.inf
        hi = -math.inf
        for v, x in xs.items():
            half_width = g.node(v).width / 2
            lo = min(lo, x - half_width)
            hi = max(hi, x + half_width)
        if hi - lo < best_width:
            best_width = hi - lo
            best_alignment = alignment
    return best_alignment


def align_coordinates(xss: dict[str, dict[str, float]], align_to: str) -> None:
    """Shift every alignment onto ``align_to``: left ones by their minimum,
    right ones by their maximum."""
    target = xss[align_to]
    target_min = min(target.values())
    target_max = max(target.values())

    for vert in ("u", "d"):
        for horiz in ("l", "r"):
            alignment = vert + horiz
            xs = xss[alignment]
            if xs is target:
                continue
            if horiz == "l":
                delta = target_min - min(xs.values())
            else:
                delta = target_max - max(xs.values())
            if delta:
                xss[alignment] = {v: x + delta for v, x in xs.items()}


def balance(xss: dict[str, dict[str, float]], align: Align | None = None) -> dict[str, float]:
    result: dict[str, float] = {}
    for v in xss["ul"]:
        if align is not None:
            result[v] = xss[align.value][v]
        else:
            xs = sorted(xss[alignment][v] for alignment in ("ul", "ur", "dl", "dr"))
            result[v] = (xs[1] + xs[2]) / 2
    return result


def position_x(g: Graph) -> dict[str, float]:
    layering = build_layer_matrix(g)
    if not any(layering):
        return {}
    conflicts = _merge_conflicts(find_type1_conflicts(g, layering), find_type2_conflicts(g, layering))

    xss: dict[str, dict[str, float]] = {}
    for vert in ("u", "d"):
        vertical = layering if vert == "u" else list(reversed(layering))
        neighbor_fn = g.predecessors if vert == "u" else g.successors
        for horiz in ("l", "r"):
            adjusted = vertical if horiz == "l" else [list(reversed(layer)) for layer in vertical]
            root, align = vertical_alignment(g, adjusted, conflicts, neighbor_fn)
            xs = horizontal_compaction(g, adjusted, root, align, reverse_sep=horiz == "r")
            if horiz == "r":
                xs = {v: -x for v, x in xs.items()}
            xss[vert + horiz] = xs

    smallest = find_smallest_width_alignment(g, xss)
    align_coordinates(xss, smallest)
    logger.debug("Aligned coordinates to the %s alignment", smallest)
    return balance(xss, g.graph.align)
