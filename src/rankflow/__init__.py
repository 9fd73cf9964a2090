"""rankflow: layered layout for directed graphs with cycles and nested subgraphs."""

from rankflow.config import LayoutConfig
from rankflow.errors import ConfigError, DuplicateEdgeError, GraphError, LayoutError, PreconditionError
from rankflow.ir.graph import EdgeKey, Graph
from rankflow.layout.engine import LayeredLayout
from rankflow.types import Acyclicer, Align, LabelPos, Point, RankDir, Ranker

__all__ = [
    "Acyclicer",
    "Align",
    "ConfigError",
    "DuplicateEdgeError",
    "EdgeKey",
    "Graph",
    "GraphError",
    "LabelPos",
    "LayeredLayout",
    "LayoutConfig",
    "LayoutError",
    "Point",
    "PreconditionError",
    "RankDir",
    "Ranker",
    "run_layout",
]


def run_layout(g: Graph, debug_timing: bool = False) -> Graph:
    """Compute a layered layout for ``g`` and write it into ``g``'s attributes.

    Args:
        g: Graph whose graph, node and edge labels are attribute dicts (or None).
            Attribute names are case-insensitive.
        debug_timing: Log the time spent in every phase at INFO instead of DEBUG.

    Returns:
        The same graph. Nodes gain ``x``/``y`` (subgraphs also ``width``/``height``),
        edges gain ``points`` and, when labelled, ``x``/``y``; the graph gains
        ``width``/``height``.

    Raises:
        ConfigError: If an option has an unknown or malformed value.
        PreconditionError: If the graph cannot be laid out, e.g. an edge touches a subgraph.
    """
    return LayeredLayout(debug_timing=debug_timing).layout(g)
