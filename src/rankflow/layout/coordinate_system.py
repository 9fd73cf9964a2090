"""Rank direction handling.

The ordering and positioning phases always work top to bottom. ``adjust``
swaps node and edge sizes for horizontal layouts beforehand, and ``undo``
flips and transposes the computed coordinates into the requested direction.
"""

from __future__ import annotations

from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, NodeLabel
from rankflow.types import RankDir


def adjust(g: Graph) -> None:
    if not g.graph.rankdir.is_vertical:
        _swap_width_height(g)


def undo(g: Graph) -> None:
    rankdir: RankDir = g.graph.rankdir
    if rankdir in (RankDir.BT, RankDir.RL):
        _reverse_y(g)
    if not rankdir.is_vertical:
        _swap_xy(g)
        _swap_width_height(g)


def _swap_width_height(g: Graph) -> None:
    for v in g.nodes():
        label: NodeLabel = g.node(v)
        label.width, label.height = label.height, label.width
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        edge.width, edge.height = edge.height, edge.width


def _reverse_y(g: Graph) -> None:
    for v in g.nodes():
        label: NodeLabel = g.node(v)
        if label.y is not None:
            label.y = -label.y
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        for point in edge.points:
            point.y = -point.y
        if edge.y is not None:
            edge.y = -edge.y


def _swap_xy(g: Graph) -> None:
    for v in g.nodes():
        label: NodeLabel = g.node(v)
        label.x, label.y = label.y, label.x
    for e in g.edges():
        edge: EdgeLabel = g.edge(e)
        for point in edge.points:
            point.x, point.y = point.y, point.x
        if edge.x is not None:
            edge.x, edge.y = edge.y, edge.x
