"""Place dummy chain nodes into the subgraphs their edge passes through.

Each chain climbs from its tail towards the lowest common ancestor of the
edge's endpoints and then descends towards its head; every dummy is
parented to the deepest subgraph on that path that spans the dummy's rank.
"""

from __future__ import annotations

from dataclasses import dataclass

from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeDummy, EdgeLabelDummy, NodeLabel
from rankflow.layout.util import hierarchy_postorder


@dataclass
class _PostorderNum:
    low: int
    lim: int


def parent_dummy_chains(g: Graph) -> None:
    postorder_nums = _postorder(g)

    for v in g.graph.dummy_chains:
        node: NodeLabel = g.node(v)
        kind = node.kind
        assert isinstance(kind, (EdgeDummy, EdgeLabelDummy))
        edge_obj = kind.edge
        path, lca = _find_path(g, postorder_nums, edge_obj.v, edge_obj.w)
        path_idx = 0
        path_v = path[path_idx]
        ascending = True

        while v != edge_obj.w:
            node = g.node(v)

            if ascending:
                while True:
                    path_v = path[path_idx]
                    if path_v == lca or g.node(path_v).max_rank >= node.rank:
                        break
                    path_idx += 1
                if path_v == lca:
                    ascending = False

            if not ascending:
                while path_idx < len(path) - 1 and g.node(path[path_idx + 1]).min_rank <= node.rank:
                    path_idx += 1
                path_v = path[path_idx]

            g.set_parent(v, path_v)
            v = g.successors(v)[0]


def _find_path(
    g: Graph, postorder_nums: dict[str, _PostorderNum], v: str, w: str
) -> tuple[list[str | None], str | None]:
    """Subgraphs from ``v`` up to the lowest common ancestor and down to ``w``."""
    v_path: list[str | None] = []
    w_path: list[str | None] = []
    low = min(postorder_nums[v].low, postorder_nums[w].low)
    lim = max(postorder_nums[v].lim, postorder_nums[w].lim)

    parent: str | None = v
    while True:
        parent = g.parent(parent)
        v_path.append(parent)
        if parent is None or not (postorder_nums[parent].low > low or lim > postorder_nums[parent].lim):
            break
    lca = parent

    parent = g.parent(w)
    while parent != lca:
        w_path.append(parent)
        parent = g.parent(parent)

    return v_path + list(reversed(w_path)), lca


def _postorder(g: Graph) -> dict[str, _PostorderNum]:
    result: dict[str, _PostorderNum] = {}
    lim = 0
    lows: dict[str, int] = {}
    for v, _ in hierarchy_postorder(g):
        children = g.children(v)
        lows[v] = min((lows[child] for child in children), default=lim)
        result[v] = _PostorderNum(low=lows[v], lim=lim)
        lim += 1
    return result
