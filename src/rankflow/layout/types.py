"""Layout types shared across layout phases."""

from __future__ import annotations

from dataclasses import dataclass, field

# Prefix constants for synthetic node ids
ROOT_PREFIX = "_root"
BORDER_TOP_PREFIX = "_bt"
BORDER_BOTTOM_PREFIX = "_bb"
BORDER_LEFT_PREFIX = "_bl"
BORDER_RIGHT_PREFIX = "_br"
EDGE_PROXY_PREFIX = "_ep"
SELF_EDGE_PREFIX = "_se"
DUMMY_PREFIX = "_d"
REVERSED_EDGE_PREFIX = "rev"


@dataclass
class BarycenterEntry:
    """Weighted barycenter of one movable node of a layer graph."""

    v: str
    barycenter: float | None = None
    weight: float = 0.0


@dataclass
class SortResult:
    """Ordered node ids of a (sub)graph plus its aggregate barycenter."""

    vs: list[str]
    barycenter: float | None = None
    weight: float = 0.0


@dataclass(eq=False)
class ConflictEntry:
    """A group of nodes whose relative order is fixed during conflict resolution."""

    vs: list[str]
    i: int
    barycenter: float | None = None
    weight: float = 0.0
    indegree: int = 0
    incoming: list[ConflictEntry] = field(default_factory=list)
    outgoing: list[ConflictEntry] = field(default_factory=list)
    merged: bool = False
