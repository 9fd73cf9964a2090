"""Graph model and the typed labels of the working graph."""

from rankflow.ir.graph import EdgeKey, Graph
from rankflow.ir.labels import (
    PLAIN,
    BorderSegment,
    EdgeDummy,
    EdgeLabel,
    EdgeLabelDummy,
    EdgeProxy,
    GraphLabel,
    LayerGraphLabel,
    NestingBorder,
    NestingRoot,
    NodeKind,
    NodeLabel,
    Plain,
    SelfEdgeDummy,
    is_border,
    is_dummy,
)

__all__ = [
    "PLAIN",
    "BorderSegment",
    "EdgeDummy",
    "EdgeKey",
    "EdgeLabel",
    "EdgeLabelDummy",
    "EdgeProxy",
    "Graph",
    "GraphLabel",
    "LayerGraphLabel",
    "NestingBorder",
    "NestingRoot",
    "NodeKind",
    "NodeLabel",
    "Plain",
    "SelfEdgeDummy",
    "is_border",
    "is_dummy",
]
