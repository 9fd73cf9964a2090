"""Helpers shared by the layout phases."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from rankflow.config import MAX_NESTING_DEPTH
from rankflow.errors import LayoutError, PreconditionError
from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, NestingBorder, NodeKind, NodeLabel
from rankflow.types import Point

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ─── Dummy nodes ─────────────────────────────────────────────────────────────


def add_dummy_node(g: Graph, kind: NodeKind, label: NodeLabel, prefix: str) -> str:
    """Add a synthetic node of ``kind`` under a fresh id and return the id."""
    v = g.unique_id(prefix)
    label.kind = kind
    g.set_node(v, label)
    return v


def add_border_node(
    g: Graph, side: str, prefix: str, rank: int | None = None, order: int | None = None
) -> str:
    label = NodeLabel(width=0.0, height=0.0, rank=rank, order=order)
    return add_dummy_node(g, NestingBorder(side=side), label, prefix)  # type: ignore[arg-type]


# ─── Graph views ─────────────────────────────────────────────────────────────


def as_non_compound_graph(g: Graph) -> Graph:
    """Copy of ``g`` without hierarchy and without subgraph nodes; labels are shared."""
    simplified = Graph(multigraph=g.multigraph, label=g.graph)
    for v in g.nodes():
        if not g.children(v):
            simplified.set_node(v, g.node(v))
    for e in g.edges():
        simplified.set_edge(e, label=g.edge(e))
    return simplified


def simplify(g: Graph) -> Graph:
    """Collapse parallel edges: weights are summed, the largest minlen wins."""
    simplified = Graph(label=g.graph)
    for v in g.nodes():
        simplified.set_node(v, g.node(v))
    for e in g.edges():
        label: EdgeLabel = g.edge(e)
        merged: EdgeLabel | None = simplified.edge(e.v, e.w)
        if merged is None:
            simplified.set_edge(e.v, e.w, label=EdgeLabel(weight=label.weight, minlen=label.minlen))
        else:
            merged.weight += label.weight
            merged.minlen = max(merged.minlen, label.minlen)
    return simplified


# ─── Ranks and layers ────────────────────────────────────────────────────────


def max_rank(g: Graph) -> int:
    ranks = [label.rank for label in (g.node(v) for v in g.nodes()) if label.rank is not None]
    return int(max(ranks)) if ranks else -1


def build_layer_matrix(g: Graph) -> list[list[str]]:
    """Node ids grouped by rank, each layer sorted by order."""
    layering: list[list[tuple[int, str]]] = [[] for _ in range(max_rank(g) + 1)]
    for v in g.nodes():
        label: NodeLabel = g.node(v)
        if label.rank is not None:
            layering[int(label.rank)].append((label.order or 0, v))
    return [[v for _, v in sorted(layer, key=lambda item: item[0])] for layer in layering]


def normalize_ranks(g: Graph) -> None:
    """Shift ranks so the smallest is 0."""
    ranked = [label for label in (g.node(v) for v in g.nodes()) if label.rank is not None]
    if not ranked:
        return
    lowest = min(label.rank for label in ranked)
    for label in ranked:
        label.rank -= lowest


def remove_empty_ranks(g: Graph) -> None:
    """Drop empty ranks, keeping those the nesting graph reserved for borders."""
    ranked = [(v, g.node(v)) for v in g.nodes() if g.node(v).rank is not None]
    if not ranked:
        return
    offset = min(label.rank for _, label in ranked)
    layers: dict[float, list[NodeLabel]] = {}
    for _, label in ranked:
        layers.setdefault(label.rank - offset, []).append(label)

    factor = g.graph.node_rank_factor
    delta = 0
    for i in range(int(max(layers)) + 1):
        labels = layers.get(i)
        if labels is None and (factor is None or i % factor != 0):
            delta -= 1
        elif labels and delta:
            for label in labels:
                label.rank += delta
    logger.debug("Removed %d empty rank(s)", -delta)


# ─── Hierarchy traversal ─────────────────────────────────────────────────────


def hierarchy_postorder(g: Graph, roots: Iterable[str] | None = None) -> Iterator[tuple[str, int]]:
    """Yield ``(node, depth)`` for the hierarchy below ``roots``, children first.

    Top-level nodes have depth 1. Raises PreconditionError when nesting is
    deeper than MAX_NESTING_DEPTH.
    """
    start = list(g.children() if roots is None else roots)
    stack: list[tuple[str, int, Iterator[str]]] = []
    for root in start:
        stack.append((root, 1, iter(g.children(root))))
        while stack:
            v, depth, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                yield v, depth
            else:
                if depth + 1 > MAX_NESTING_DEPTH:
                    raise PreconditionError(f"Subgraph nesting deeper than {MAX_NESTING_DEPTH} levels")
                stack.append((child, depth + 1, iter(g.children(child))))


# ─── Geometry ────────────────────────────────────────────────────────────────


def intersect_rect(rect: NodeLabel, point: Point) -> Point:
    """Where the segment from the center of ``rect`` to ``point`` leaves the rectangle."""
    x, y = rect.x or 0.0, rect.y or 0.0
    dx = point.x - x
    dy = point.y - y
    w = rect.width / 2
    h = rect.height / 2

    if not dx and not dy:
        raise LayoutError("Not possible to find intersection inside of the rectangle")

    # A point straight above or below always leaves through the top or bottom,
    # even for a rectangle of zero width.
    if not dx or abs(dy) * w > abs(dx) * h:
        if dy < 0:
            h = -h
        sx = h * dx / dy
        sy = h
    else:
        if dx < 0:
            w = -w
        sx = w
        sy = w * dy / dx
    return Point(x=x + sx, y=y + sy)


# ─── Misc ────────────────────────────────────────────────────────────────────


def partition(items: Iterable[T], predicate: Callable[[T], bool]) -> tuple[list[T], list[T]]:
    lhs: list[T] = []
    rhs: list[T] = []
    for item in items:
        (lhs if predicate(item) else rhs).append(item)
    return lhs, rhs


@contextmanager
def timed(name: str, report: bool = False) -> Iterator[None]:
    """Log how long the enclosed block took; at INFO when ``report`` is set."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - start) * 1000
        logger.log(logging.INFO if report else logging.DEBUG, "%s time: %.3fms", name, elapsed)
