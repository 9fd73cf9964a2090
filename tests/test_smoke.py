"""Smoke tests: imports work, a trivial graph lays out."""

import rankflow
from rankflow import Graph


def test_import():
    assert rankflow.Graph is not None
    assert callable(rankflow.run_layout)
    assert callable(rankflow.layout.layout)


def test_simple_layout():
    g = Graph(label={})
    g.set_node("a", {"width": 10, "height": 10})
    g.set_node("b", {"width": 10, "height": 10})
    g.set_edge("a", "b", label={})
    rankflow.run_layout(g)
    assert g.node("a")["y"] < g.node("b")["y"]
    assert g.graph["width"] > 0
