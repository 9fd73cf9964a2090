"""Weight-aware greedy feedback arc set.

Eades, Lin and Smyth, "A fast and effective heuristic for the feedback arc set
problem". Nodes are kept in buckets keyed by out-weight minus in-weight; sinks
and sources are peeled off first, otherwise the node with the largest
difference goes next and its incoming edges join the feedback set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from rankflow.ir.graph import EdgeKey, Graph
from rankflow.layout.dlist import DoublyLinkedList, ListEntry

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class FasEntry(ListEntry):
    v: str
    in_weight: float = 0.0
    out_weight: float = 0.0


@dataclass
class _FasState:
    graph: Graph
    buckets: list[DoublyLinkedList[FasEntry]]
    zero_idx: int


def greedy_fas(g: Graph, weight_fn: Callable[[EdgeKey], float] | None = None) -> list[EdgeKey]:
    """Return edges of ``g`` whose reversal makes it acyclic."""
    if g.node_count() <= 1:
        return []
    state = _build_state(g, weight_fn or (lambda e: 1))
    removed = _do_greedy_fas(state)
    fas: list[EdgeKey] = []
    for v, w in removed:
        fas.extend(g.out_edges(v, w))
    logger.debug("Greedy feedback arc set has %d edge(s)", len(fas))
    return fas


def _do_greedy_fas(state: _FasState) -> list[tuple[str, str]]:
    g = state.graph
    buckets = state.buckets
    sinks = buckets[0]
    sources = buckets[-1]
    results: list[tuple[str, str]] = []

    while g.node_count():
        for bucket in (sinks, sources):
            entry = bucket.dequeue()
            while entry is not None:
                _remove_node(state, entry, collect=False)
                entry = bucket.dequeue()
        if g.node_count():
            for bucket in reversed(buckets[1:-1]):
                entry = bucket.dequeue()
                if entry is not None:
                    results.extend(_remove_node(state, entry, collect=True))
                    break
    return results


def _remove_node(state: _FasState, entry: FasEntry, collect: bool) -> list[tuple[str, str]]:
    g = state.graph
    results: list[tuple[str, str]] = []

    # Each edge goes before its other end is re-bucketed, so the remaining
    # degrees seen by _assign_bucket are current.
    for e in g.in_edges(entry.v):
        weight = g.edge(e)
        g.remove_edge(e)
        u_entry: FasEntry = g.node(e.v)
        if collect:
            results.append((e.v, e.w))
        u_entry.out_weight -= weight
        _assign_bucket(state, u_entry)

    for e in g.out_edges(entry.v):
        weight = g.edge(e)
        g.remove_edge(e)
        w_entry: FasEntry = g.node(e.w)
        w_entry.in_weight -= weight
        _assign_bucket(state, w_entry)

    g.remove_node(entry.v)
    return results


def _build_state(g: Graph, weight_fn: Callable[[EdgeKey], float]) -> _FasState:
    fas_graph = Graph()
    max_in = 0.0
    max_out = 0.0

    for v in g.nodes():
        fas_graph.set_node(v, FasEntry(v=v))

    # Parallel edges collapse into one edge carrying the summed weight.
    for e in g.edges():
        weight = weight_fn(e)
        prev = fas_graph.edge(e.v, e.w) or 0
        fas_graph.set_edge(e.v, e.w, label=prev + weight)
        tail: FasEntry = fas_graph.node(e.v)
        head: FasEntry = fas_graph.node(e.w)
        tail.out_weight += weight
        head.in_weight += weight
        max_out = max(max_out, tail.out_weight)
        max_in = max(max_in, head.in_weight)

    bucket_count = int(max_out + max_in) + 3
    buckets: list[DoublyLinkedList[FasEntry]] = [DoublyLinkedList() for _ in range(bucket_count)]
    state = _FasState(graph=fas_graph, buckets=buckets, zero_idx=int(max_in) + 1)
    for v in fas_graph.nodes():
        _assign_bucket(state, fas_graph.node(v))
    return state


def _assign_bucket(state: _FasState, entry: FasEntry) -> None:
    """Sinks and sources go by remaining degree; zero-weight edges still count."""
    buckets = state.buckets
    g = state.graph
    if not g.successors(entry.v):
        buckets[0].enqueue(entry)
    elif not g.predecessors(entry.v):
        buckets[-1].enqueue(entry)
    else:
        idx = int(entry.out_weight - entry.in_weight) + state.zero_idx
        buckets[min(max(idx, 1), len(buckets) - 2)].enqueue(entry)
