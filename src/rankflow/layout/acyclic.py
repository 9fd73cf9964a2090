"""Cycle removal.

Reverses a feedback arc set so the working graph becomes a DAG. Each reversed
edge remembers its original name so ``undo`` can restore it exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from rankflow.ir.graph import EdgeKey, Graph
from rankflow.ir.labels import EdgeLabel
from rankflow.layout.greedy_fas import greedy_fas
from rankflow.layout.types import REVERSED_EDGE_PREFIX
from rankflow.types import Acyclicer

logger = logging.getLogger(__name__)


def run(g: Graph, acyclicer: Acyclicer | None = None) -> list[EdgeKey]:
    """Reverse a feedback arc set of ``g`` in place and return the original edge keys."""
    if acyclicer is None:
        acyclicer = g.graph.acyclicer if g.graph is not None else Acyclicer.DFS

    if acyclicer is Acyclicer.GREEDY:
        fas = greedy_fas(g, lambda e: g.edge(e).weight)
    else:
        fas = dfs_fas(g)

    for e in fas:
        label: EdgeLabel = g.edge(e)
        g.remove_edge(e)
        label.forward_name = e.name
        label.reversed = True
        g.add_edge(e.w, e.v, label=label, name=_reversed_name(g, e))

    logger.debug("Reversed %d edge(s) using %s feedback arc set", len(fas), acyclicer.value)
    return fas


def dfs_fas(g: Graph) -> list[EdgeKey]:
    """Back edges of a depth-first forest visited in node insertion order."""
    fas: list[EdgeKey] = []
    on_stack: set[str] = set()
    visited: set[str] = set()

    for start in g.nodes():
        if start in visited:
            continue
        visited.add(start)
        on_stack.add(start)
        stack: list[tuple[str, Iterator[EdgeKey]]] = [(start, iter(g.out_edges(start)))]
        while stack:
            v, out_edges = stack[-1]
            e = next(out_edges, None)
            if e is None:
                stack.pop()
                on_stack.discard(v)
            elif e.w in on_stack:
                fas.append(e)
            elif e.w not in visited:
                visited.add(e.w)
                on_stack.add(e.w)
                stack.append((e.w, iter(g.out_edges(e.w))))
    return fas


def undo(g: Graph) -> None:
    """Put every reversed edge back in its original direction and name."""
    restored = 0
    for e in g.edges():
        label: EdgeLabel = g.edge(e)
        if label.reversed:
            g.remove_edge(e)
            forward_name = label.forward_name
            label.reversed = False
            label.forward_name = None
            g.add_edge(e.w, e.v, label=label, name=forward_name)
            restored += 1
    logger.debug("Restored %d reversed edge(s)", restored)


def _reversed_name(g: Graph, e: EdgeKey) -> str:
    name = g.unique_id(REVERSED_EDGE_PREFIX)
    while g.has_edge(e.w, e.v, name):
        name = g.unique_id(REVERSED_EDGE_PREFIX)
    return name
