"""Centralized configuration for rankflow.

Callers describe options as attributes on their graph, nodes and edges, with
case-insensitive names. This module turns those attribute mappings into the
typed labels the layout works on, applying defaults along the way.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from rankflow.errors import ConfigError
from rankflow.ir.labels import EdgeLabel, GraphLabel, NodeLabel
from rankflow.types import Acyclicer, Align, LabelPos, RankDir, Ranker

E = TypeVar("E", bound=Enum)

GRAPH_NUM_ATTRS = ("nodesep", "edgesep", "ranksep", "marginx", "marginy")
NODE_NUM_ATTRS = ("width", "height")
EDGE_NUM_ATTRS = ("minlen", "weight", "width", "height", "labeloffset")

# Deepest subgraph nesting the layout accepts.
MAX_NESTING_DEPTH = 256


@dataclass
class LayoutConfig:
    """Graph-level layout options."""

    rankdir: RankDir = RankDir.TB
    align: Align | None = None
    acyclicer: Acyclicer = Acyclicer.DFS
    ranker: Ranker = Ranker.NETWORK_SIMPLEX
    nodesep: float = 50.0
    edgesep: float = 20.0
    ranksep: float = 50.0
    marginx: float = 0.0
    marginy: float = 0.0

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any] | None) -> LayoutConfig:
        attrs = canonicalize(attrs)
        numbers = select_number_attrs(attrs, GRAPH_NUM_ATTRS)
        return cls(
            rankdir=_parse_enum(RankDir, attrs.get("rankdir"), RankDir.default()),
            align=_parse_enum(Align, attrs.get("align"), None),
            acyclicer=_parse_enum(Acyclicer, attrs.get("acyclicer"), Acyclicer.default()),
            ranker=_parse_enum(Ranker, attrs.get("ranker"), Ranker.default()),
            **numbers,
        )

    def to_graph_label(self) -> GraphLabel:
        return GraphLabel(
            rankdir=self.rankdir,
            align=self.align,
            acyclicer=self.acyclicer,
            ranker=self.ranker,
            nodesep=self.nodesep,
            edgesep=self.edgesep,
            ranksep=self.ranksep,
            marginx=self.marginx,
            marginy=self.marginy,
        )


def canonicalize(attrs: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``attrs`` with lower-cased keys."""
    if not attrs:
        return {}
    return {str(key).lower(): value for key, value in attrs.items()}


def select_number_attrs(attrs: Mapping[str, Any], names: tuple[str, ...]) -> dict[str, float]:
    selected: dict[str, float] = {}
    for name in names:
        if name not in attrs or attrs[name] is None:
            continue
        try:
            selected[name] = float(attrs[name])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Attribute '{name}' must be numeric, got {attrs[name]!r}") from exc
    return selected


def node_label_from_attrs(attrs: Mapping[str, Any] | None) -> NodeLabel:
    numbers = select_number_attrs(canonicalize(attrs), NODE_NUM_ATTRS)
    return NodeLabel(width=numbers.get("width", 0.0), height=numbers.get("height", 0.0))


def edge_label_from_attrs(attrs: Mapping[str, Any] | None) -> EdgeLabel:
    canonical = canonicalize(attrs)
    numbers = select_number_attrs(canonical, EDGE_NUM_ATTRS)
    minlen = numbers.get("minlen", 1.0)
    if minlen != int(minlen) or minlen < 0:
        raise ConfigError(f"Attribute 'minlen' must be a non-negative integer, got {minlen!r}")
    weight = numbers.get("weight", 1.0)
    if weight < 0:
        raise ConfigError(f"Attribute 'weight' must be non-negative, got {weight!r}")
    return EdgeLabel(
        minlen=int(minlen),
        weight=weight,
        width=numbers.get("width", 0.0),
        height=numbers.get("height", 0.0),
        labeloffset=numbers.get("labeloffset", 10.0),
        labelpos=_parse_enum(LabelPos, canonical.get("labelpos"), LabelPos.default()),
    )


def _parse_enum(enum_cls: type[E], value: Any, default: E | None) -> Any:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    key = str(value).lower()
    for member in enum_cls:
        if member.value == key:
            return member
    choices = ", ".join(repr(m.value) for m in enum_cls)
    raise ConfigError(f"Unknown {enum_cls.__name__} {value!r}; use one of {choices}")
