"""Rank assignment.

Assigns every node an integer rank such that, for every edge, the head's rank
minus the tail's rank is at least the edge's minlen. Ranks may start anywhere,
including below zero; later phases normalize them.

Preconditions: the graph is a connected DAG, and every edge has weight and
minlen.
"""

from __future__ import annotations

import logging

import networkx as nx

from rankflow.errors import PreconditionError
from rankflow.ir.graph import Graph
from rankflow.layout.rank.feasible_tree import feasible_tree
from rankflow.layout.rank.network_simplex import network_simplex
from rankflow.layout.rank.util import longest_path, slack
from rankflow.types import Ranker

logger = logging.getLogger(__name__)

__all__ = [
    "assign_ranks",
    "feasible_tree",
    "longest_path",
    "network_simplex",
    "slack",
    "tight_tree_ranker",
]


def assign_ranks(g: Graph, ranker: Ranker | None = None) -> None:
    if ranker is None:
        ranker = g.graph.ranker if g.graph is not None else Ranker.default()
    check_rankable(g)

    if ranker is Ranker.LONGEST_PATH:
        longest_path(g)
    elif ranker is Ranker.TIGHT_TREE:
        tight_tree_ranker(g)
    else:
        network_simplex(g)
    logger.debug("Assigned ranks to %d node(s) with %s", g.node_count(), ranker.value)


def tight_tree_ranker(g: Graph) -> None:
    longest_path(g)
    feasible_tree(g)


def check_rankable(g: Graph) -> None:
    if g.node_count() == 0:
        return
    if not nx.is_directed_acyclic_graph(g.digraph):
        raise PreconditionError("Rank assignment requires an acyclic graph")
    if not nx.is_weakly_connected(g.digraph):
        raise PreconditionError("Rank assignment requires a connected graph")
