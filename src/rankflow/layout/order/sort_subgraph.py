"""Barycenter sorting of a layer graph's hierarchy.

Each subgraph is sorted on its own and then treated as one block whose
barycenter is the weighted mean of its members. Conflicts with ordering
constraints learned on earlier layers are resolved by coalescing nodes,
after Forster, "A Fast and Simple Heuristic for Constrained Two-Level
Crossing Reduction".
"""

from __future__ import annotations

from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, NodeLabel
from rankflow.layout.types import BarycenterEntry, ConflictEntry, SortResult
from rankflow.layout.util import partition

# ─── Barycenters ─────────────────────────────────────────────────────────────


def barycenter(g: Graph, movable: list[str]) -> list[BarycenterEntry]:
    """Weighted mean order of each movable node's in-neighbors."""
    entries: list[BarycenterEntry] = []
    for v in movable:
        in_edges = g.in_edges(v)
        if not in_edges:
            entries.append(BarycenterEntry(v=v))
            continue
        total = 0.0
        weight = 0.0
        for e in in_edges:
            edge: EdgeLabel = g.edge(e)
            total += edge.weight * g.node(e.v).order
            weight += edge.weight
        if weight:
            entries.append(BarycenterEntry(v=v, barycenter=total / weight, weight=weight))
        else:
            entries.append(BarycenterEntry(v=v))
    return entries


def _merge_barycenters(target: BarycenterEntry, other: SortResult) -> None:
    if target.barycenter is not None and other.barycenter is not None:
        weight = target.weight + other.weight
        if weight:
            target.barycenter = (target.barycenter * target.weight + other.barycenter * other.weight) / weight
        target.weight = weight
    else:
        target.barycenter = other.barycenter
        target.weight = other.weight


# ─── Conflict resolution ─────────────────────────────────────────────────────


def resolve_conflicts(entries: list[BarycenterEntry], cg: Graph) -> list[ConflictEntry]:
    """Coalesce entries whose barycenters contradict the constraint graph ``cg``.

    Constraint edges ``u -> v`` demand that ``u`` stays left of ``v``. When
    the barycenters say otherwise the two are merged into one entry holding
    both, in constraint order.
    """
    mapped: dict[str, ConflictEntry] = {}
    for i, entry in enumerate(entries):
        mapped[entry.v] = ConflictEntry(
            vs=[entry.v],
            i=i,
            barycenter=entry.barycenter,
            weight=entry.weight if entry.barycenter is not None else 0.0,
        )

    for e in cg.edges():
        entry_v = mapped.get(e.v)
        entry_w = mapped.get(e.w)
        if entry_v is not None and entry_w is not None:
            entry_w.indegree += 1
            entry_v.outgoing.append(entry_w)

    source_set = [entry for entry in mapped.values() if not entry.indegree]
    return _do_resolve_conflicts(source_set)


def _do_resolve_conflicts(source_set: list[ConflictEntry]) -> list[ConflictEntry]:
    entries: list[ConflictEntry] = []

    while source_set:
        entry = source_set.pop()
        entries.append(entry)
        for u_entry in reversed(entry.incoming):
            if u_entry.merged:
                continue
            if (
                u_entry.barycenter is None
                or entry.barycenter is None
                or u_entry.barycenter >= entry.barycenter
            ):
                _merge_entries(entry, u_entry)
        for w_entry in entry.outgoing:
            w_entry.incoming.append(entry)
            w_entry.indegree -= 1
            if w_entry.indegree == 0:
                source_set.append(w_entry)

    return [entry for entry in entries if not entry.merged]


def _merge_entries(target: ConflictEntry, source: ConflictEntry) -> None:
    total = 0.0
    weight = 0.0
    if target.weight:
        total += target.barycenter * target.weight
        weight += target.weight
    if source.weight:
        total += source.barycenter * source.weight
        weight += source.weight

    target.vs = source.vs + target.vs
    target.barycenter = total / weight if weight else None
    target.weight = weight
    target.i = min(source.i, target.i)
    source.merged = True


# ─── Sorting ─────────────────────────────────────────────────────────────────


def sort(entries: list[ConflictEntry], bias_right: bool = False) -> SortResult:
    """Order entries by barycenter; entries without one keep their index."""
    sortable, unsortable = partition(entries, lambda entry: entry.barycenter is not None)
    unsortable.sort(key=lambda entry: -entry.i)
    if bias_right:
        sortable.sort(key=lambda entry: (entry.barycenter, -entry.i))
    else:
        sortable.sort(key=lambda entry: (entry.barycenter, entry.i))

    vs: list[str] = []
    total = 0.0
    weight = 0.0
    vs_index = _consume_unsortable(vs, unsortable, 0)

    for entry in sortable:
        vs_index += len(entry.vs)
        vs.extend(entry.vs)
        total += entry.barycenter * entry.weight
        weight += entry.weight
        vs_index = _consume_unsortable(vs, unsortable, vs_index)

    result = SortResult(vs=vs)
    if weight:
        result.barycenter = total / weight
        result.weight = weight
    return result


def _consume_unsortable(vs: list[str], unsortable: list[ConflictEntry], index: int) -> int:
    while unsortable and unsortable[-1].i <= index:
        last = unsortable.pop()
        vs.extend(last.vs)
        index += 1
    return index


# ─── Subgraphs ───────────────────────────────────────────────────────────────


def sort_subgraph(g: Graph, v: str, cg: Graph, bias_right: bool = False) -> SortResult:
    """Sort the children of ``v`` in layer graph ``g``, subgraphs first."""
    movable = g.children(v)
    node: NodeLabel | None = g.node(v)
    rank = g.graph.rank
    border_left = node.border_left.get(rank) if node is not None else None
    border_right = node.border_right.get(rank) if node is not None else None
    subgraphs: dict[str, SortResult] = {}

    if border_left is not None:
        movable = [w for w in movable if w not in (border_left, border_right)]

    barycenters = barycenter(g, movable)
    for entry in barycenters:
        if g.children(entry.v):
            subgraph_result = sort_subgraph(g, entry.v, cg, bias_right)
            subgraphs[entry.v] = subgraph_result
            if subgraph_result.barycenter is not None:
                _merge_barycenters(entry, subgraph_result)

    entries = resolve_conflicts(barycenters, cg)
    _expand_subgraphs(entries, subgraphs)

    result = sort(entries, bias_right)

    if border_left is not None:
        result.vs = [border_left, *result.vs, border_right]
        left_preds = g.predecessors(border_left)
        if left_preds:
            left_pred: NodeLabel = g.node(left_preds[0])
            right_pred: NodeLabel = g.node(g.predecessors(border_right)[0])
            if result.barycenter is None:
                result.barycenter = 0.0
                result.weight = 0.0
            result.barycenter = (
                result.barycenter * result.weight + left_pred.order + right_pred.order
            ) / (result.weight + 2)
            result.weight += 2

    return result


def _expand_subgraphs(entries: list[ConflictEntry], subgraphs: dict[str, SortResult]) -> None:
    for entry in entries:
        expanded: list[str] = []
        for v in entry.vs:
            if v in subgraphs:
                expanded.extend(subgraphs[v].vs)
            else:
                expanded.append(v)
        entry.vs = expanded


def add_subgraph_constraints(g: Graph, cg: Graph, vs: list[str]) -> None:
    """Record in ``cg`` the left-to-right order of sibling subgraphs seen in ``vs``."""
    prev: dict[str, str] = {}
    root_prev: str | None = None

    for v in vs:
        child = g.parent(v)
        while child is not None:
            parent = g.parent(child)
            if parent is not None:
                prev_child = prev.get(parent)
                prev[parent] = child
            else:
                prev_child = root_prev
                root_prev = child
            if prev_child is not None and prev_child != child:
                cg.set_edge(prev_child, child)
                break
            child = parent
