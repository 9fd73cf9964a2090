"""Graph model used by every layout phase.

Wraps a networkx MultiDiGraph and adds what the layout needs on top of it:
edge identity by (tail, head, name), an optional compound parent/child
hierarchy, per-graph label factories and a per-graph id generator for
synthetic nodes.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Hashable, Iterable
from typing import Any, NamedTuple

import networkx as nx

from rankflow.errors import DuplicateEdgeError, GraphError

# Key under which unnamed edges are stored in the MultiDiGraph. A tuple can
# never collide with a caller's string edge name.
_UNNAMED: tuple[str] = ("__unnamed__",)

_MISSING: Any = object()


class EdgeKey(NamedTuple):
    """Identity of an edge: tail, head and an optional multi-edge name."""

    v: str
    w: str
    name: str | None = None


def _to_key(name: str | None) -> Hashable:
    return _UNNAMED if name is None else name


def _from_key(key: Hashable) -> str | None:
    return None if key == _UNNAMED else key  # type: ignore[return-value]


class Graph:
    """Directed graph with optional parallel edges and compound hierarchy.

    Labels are opaque to the graph: the caller's input graph usually carries
    attribute dicts, while the layout's working graph carries the typed labels
    from ``rankflow.ir.labels``.
    """

    def __init__(self, *, multigraph: bool = False, compound: bool = False, label: Any = None) -> None:
        self.multigraph = multigraph
        self.compound = compound
        self.graph: Any = label
        self.digraph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._default_node_label: Callable[[str], Any] = lambda v: None
        self._default_edge_label: Callable[[str, str, str | None], Any] = lambda v, w, name: None
        self._parent: dict[str, str | None] = {}
        self._children: dict[str | None, dict[str, None]] = {None: {}}
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()}, compound={self.compound})"

    # ─── Label factories and ids ──────────────────────────────────────────

    def set_default_node_label(self, factory: Callable[[str], Any]) -> Graph:
        self._default_node_label = factory
        return self

    def set_default_edge_label(self, factory: Callable[[str, str, str | None], Any]) -> Graph:
        self._default_edge_label = factory
        return self

    def unique_id(self, prefix: str) -> str:
        """Return ``prefix`` plus a counter value not yet used as a node id."""
        while True:
            candidate = f"{prefix}{next(self._ids)}"
            if candidate not in self.digraph:
                return candidate

    # ─── Nodes ────────────────────────────────────────────────────────────

    def nodes(self) -> list[str]:
        return list(self.digraph.nodes)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def has_node(self, v: str) -> bool:
        return v in self.digraph

    def node(self, v: str) -> Any:
        if v not in self.digraph:
            return None
        return self.digraph.nodes[v]["label"]

    def set_node(self, v: str, label: Any = _MISSING) -> Graph:
        """Create ``v`` or replace its label; an existing node keeps its label when none is given."""
        if v in self.digraph:
            if label is not _MISSING:
                self.digraph.nodes[v]["label"] = label
            return self
        if label is _MISSING:
            label = self._default_node_label(v)
        self.digraph.add_node(v, label=label)
        if self.compound:
            self._parent[v] = None
            self._children[v] = {}
            self._children[None][v] = None
        return self

    def remove_node(self, v: str) -> Graph:
        if v not in self.digraph:
            return self
        if self.compound:
            del self._children[self._parent.pop(v)][v]
            for child in list(self._children[v]):
                self.set_parent(child)
            del self._children[v]
        self.digraph.remove_node(v)
        return self

    def sources(self) -> list[str]:
        return [v for v in self.digraph.nodes if self.digraph.in_degree(v) == 0]

    def sinks(self) -> list[str]:
        return [v for v in self.digraph.nodes if self.digraph.out_degree(v) == 0]

    # ─── Hierarchy ────────────────────────────────────────────────────────

    def set_parent(self, v: str, parent: str | None = None) -> Graph:
        if not self.compound:
            raise GraphError("Cannot set parent in a non-compound graph")
        if parent is not None:
            ancestor: str | None = parent
            while ancestor is not None:
                if ancestor == v:
                    raise GraphError(f"Setting {parent!r} as parent of {v!r} would create a cycle")
                ancestor = self._parent.get(ancestor)
            self.set_node(parent)
        self.set_node(v)
        del self._children[self._parent[v]][v]
        self._parent[v] = parent
        self._children[parent][v] = None
        return self

    def parent(self, v: str) -> str | None:
        if not self.compound:
            return None
        return self._parent.get(v)

    def children(self, v: str | None = None) -> list[str]:
        """Children of ``v``, or the top-level nodes when ``v`` is None."""
        if not self.compound:
            if v is None:
                return self.nodes()
            return []
        if v is not None and v not in self._children:
            return []
        return list(self._children[v])

    # ─── Adjacency ────────────────────────────────────────────────────────

    def successors(self, v: str) -> list[str]:
        if v not in self.digraph:
            return []
        return list(self.digraph.successors(v))

    def predecessors(self, v: str) -> list[str]:
        if v not in self.digraph:
            return []
        return list(self.digraph.predecessors(v))

    def neighbors(self, v: str) -> list[str]:
        seen = dict.fromkeys(self.predecessors(v))
        seen.update(dict.fromkeys(self.successors(v)))
        return list(seen)

    def in_edges(self, v: str, u: str | None = None) -> list[EdgeKey]:
        if v not in self.digraph:
            return []
        return [
            EdgeKey(tail, v, _from_key(key))
            for tail, _, key in self.digraph.in_edges(v, keys=True)
            if u is None or tail == u
        ]

    def out_edges(self, v: str, w: str | None = None) -> list[EdgeKey]:
        if v not in self.digraph:
            return []
        return [
            EdgeKey(v, head, _from_key(key))
            for _, head, key in self.digraph.out_edges(v, keys=True)
            if w is None or head == w
        ]

    def node_edges(self, v: str, w: str | None = None) -> list[EdgeKey]:
        if w is None:
            return self.in_edges(v) + self.out_edges(v)
        return self.in_edges(v, w) + self.out_edges(v, w)

    # ─── Edges ────────────────────────────────────────────────────────────

    def edges(self) -> list[EdgeKey]:
        return [EdgeKey(v, w, _from_key(key)) for v, w, key in self.digraph.edges(keys=True)]

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def has_edge(self, v: str | EdgeKey, w: str | None = None, name: str | None = None) -> bool:
        v, w, name = self._unpack(v, w, name)
        return self.digraph.has_edge(v, w, key=_to_key(name))

    def edge(self, v: str | EdgeKey, w: str | None = None, name: str | None = None) -> Any:
        v, w, name = self._unpack(v, w, name)
        data = self.digraph.get_edge_data(v, w, key=_to_key(name))
        return None if data is None else data["label"]

    def add_edge(
        self, v: str | EdgeKey, w: str | None = None, label: Any = _MISSING, name: str | None = None
    ) -> Graph:
        """Create a new edge; raises DuplicateEdgeError if the identity already exists."""
        v, w, name = self._unpack(v, w, name)
        if self.has_edge(v, w, name):
            raise DuplicateEdgeError(f"Edge {v!r} -> {w!r} named {name!r} already exists")
        return self.set_edge(v, w, label, name)

    def set_edge(
        self, v: str | EdgeKey, w: str | None = None, label: Any = _MISSING, name: str | None = None
    ) -> Graph:
        """Create an edge or update its label; an existing edge keeps its label when none is given."""
        v, w, name = self._unpack(v, w, name)
        if name is not None and not self.multigraph:
            raise GraphError("Cannot set a named edge when multigraph is false")
        key = _to_key(name)
        if self.digraph.has_edge(v, w, key=key):
            if label is not _MISSING:
                self.digraph.edges[v, w, key]["label"] = label
            return self
        if label is _MISSING:
            label = self._default_edge_label(v, w, name)
        self.set_node(v)
        self.set_node(w)
        self.digraph.add_edge(v, w, key=key, label=label)
        return self

    def set_path(self, vs: Iterable[str], label: Any = _MISSING) -> Graph:
        path = list(vs)
        for v, w in zip(path, path[1:]):
            self.set_edge(v, w, label)
        return self

    def remove_edge(self, v: str | EdgeKey, w: str | None = None, name: str | None = None) -> Graph:
        v, w, name = self._unpack(v, w, name)
        key = _to_key(name)
        if self.digraph.has_edge(v, w, key=key):
            self.digraph.remove_edge(v, w, key=key)
        return self

    @staticmethod
    def _unpack(v: str | EdgeKey, w: str | None, name: str | None) -> tuple[str, str, str | None]:
        if isinstance(v, EdgeKey):
            return v.v, v.w, v.name
        if w is None:
            raise GraphError("Edge head is required")
        return v, w, name
