"""Typed labels carried by the layout's working graph.

Every node of the working graph holds a ``NodeLabel`` whose ``kind`` says
whether it is a caller node or one of the synthetic nodes the pipeline adds
and later removes. Edge labels and the graph label are typed the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from rankflow.ir.graph import EdgeKey
from rankflow.types import Acyclicer, Align, LabelPos, Point, RankDir, Ranker

# ─── Node kinds ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Plain:
    """A caller node (or a subgraph container)."""


@dataclass(frozen=True)
class EdgeProxy:
    """Temporary node holding the rank an edge label should land on."""

    edge: EdgeKey


@dataclass(frozen=True)
class SelfEdgeDummy:
    """Placeholder for a self-loop, ordered just right of its node."""

    edge: EdgeKey
    label: EdgeLabel


@dataclass(frozen=True)
class EdgeDummy:
    """Interior node of a long edge split into unit-length segments."""

    edge: EdgeKey
    edge_label: EdgeLabel


@dataclass(frozen=True)
class EdgeLabelDummy:
    """Chain node on the edge's label rank; its geometry becomes the label's."""

    edge: EdgeKey
    edge_label: EdgeLabel
    labelpos: LabelPos


@dataclass(frozen=True)
class BorderSegment:
    """Left or right border of a subgraph on one rank."""

    side: Literal["left", "right"]


@dataclass(frozen=True)
class NestingRoot:
    """The single root that keeps the nesting graph connected."""


@dataclass(frozen=True)
class NestingBorder:
    """Top or bottom border of a subgraph."""

    side: Literal["top", "bottom"]


NodeKind = Union[
    Plain,
    EdgeProxy,
    SelfEdgeDummy,
    EdgeDummy,
    EdgeLabelDummy,
    BorderSegment,
    NestingRoot,
    NestingBorder,
]

PLAIN = Plain()


def is_dummy(kind: NodeKind) -> bool:
    return not isinstance(kind, Plain)


def is_border(kind: NodeKind) -> bool:
    return isinstance(kind, (BorderSegment, NestingBorder))


# ─── Labels ──────────────────────────────────────────────────────────────────


@dataclass(eq=False)
class EdgeLabel:
    weight: float = 1.0
    minlen: int = 1
    width: float = 0.0
    height: float = 0.0
    labeloffset: float = 10.0
    labelpos: LabelPos = LabelPos.RIGHT
    reversed: bool = False
    forward_name: str | None = None
    nesting_edge: bool = False
    label_rank: float | None = None
    points: list[Point] = field(default_factory=list)
    x: float | None = None
    y: float | None = None

    @property
    def has_label_position(self) -> bool:
        return self.x is not None


@dataclass(eq=False)
class NodeLabel:
    width: float = 0.0
    height: float = 0.0
    kind: NodeKind = PLAIN
    rank: float | None = None
    order: int | None = None
    x: float | None = None
    y: float | None = None
    min_rank: int | None = None
    max_rank: int | None = None
    border_top: str | None = None
    border_bottom: str | None = None
    border_left: dict[int, str] = field(default_factory=dict)
    border_right: dict[int, str] = field(default_factory=dict)
    self_edges: list[tuple[EdgeKey, EdgeLabel]] = field(default_factory=list)

    @property
    def dummy(self) -> bool:
        return is_dummy(self.kind)


@dataclass(eq=False)
class GraphLabel:
    rankdir: RankDir = RankDir.TB
    align: Align | None = None
    acyclicer: Acyclicer = Acyclicer.DFS
    ranker: Ranker = Ranker.NETWORK_SIMPLEX
    nodesep: float = 50.0
    edgesep: float = 20.0
    ranksep: float = 50.0
    marginx: float = 0.0
    marginy: float = 0.0
    # Run state, filled in by the phases.
    nesting_root: str | None = None
    node_rank_factor: int | None = None
    dummy_chains: list[str] = field(default_factory=list)
    max_rank: int = 0
    width: float = 0.0
    height: float = 0.0


@dataclass(eq=False)
class LayerGraphLabel:
    """Graph label of a per-rank layer graph."""

    root: str
    rank: int
