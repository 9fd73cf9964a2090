"""Tests for shared layout helpers and option parsing."""

from __future__ import annotations

import logging

import pytest

from rankflow.config import (
    MAX_NESTING_DEPTH,
    LayoutConfig,
    canonicalize,
    edge_label_from_attrs,
    node_label_from_attrs,
)
from rankflow.errors import ConfigError, LayoutError, PreconditionError
from rankflow.ir.graph import Graph
from rankflow.ir.labels import EdgeLabel, GraphLabel, NestingBorder, NodeLabel
from rankflow.layout.util import (
    add_border_node,
    as_non_compound_graph,
    build_layer_matrix,
    hierarchy_postorder,
    intersect_rect,
    max_rank,
    normalize_ranks,
    partition,
    remove_empty_ranks,
    simplify,
    timed,
)
from rankflow.types import Acyclicer, Align, LabelPos, Point, RankDir, Ranker

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_ranked_graph(ranks: dict[str, int | None], compound: bool = False) -> Graph:
    g = Graph(multigraph=True, compound=compound, label=GraphLabel())
    for v, rank in ranks.items():
        g.set_node(v, NodeLabel(rank=rank))
    return g


# ─── Graph views ──────────────────────────────────────────────────────────────


class TestGraphViews:
    def test_simplify_merges_parallel_edges(self):
        g = make_ranked_graph({"a": 0, "b": 1})
        g.add_edge("a", "b", label=EdgeLabel(weight=2.0, minlen=1), name="x")
        g.add_edge("a", "b", label=EdgeLabel(weight=3.0, minlen=4), name="y")
        simple = simplify(g)
        assert not simple.multigraph
        assert simple.edge_count() == 1
        edge = simple.edge("a", "b")
        assert edge.weight == 5.0
        assert edge.minlen == 4
        assert simple.node("a") is g.node("a")

    def test_non_compound_drops_subgraphs(self):
        g = make_ranked_graph({"a": 0, "b": 1}, compound=True)
        g.set_node("sg", NodeLabel())
        g.set_parent("a", "sg")
        g.add_edge("a", "b", label=EdgeLabel(), name="n")
        flat = as_non_compound_graph(g)
        assert sorted(flat.nodes()) == ["a", "b"]
        assert flat.edge("a", "b", "n") is g.edge("a", "b", "n")
        assert flat.graph is g.graph


# ─── Ranks and layers ─────────────────────────────────────────────────────────


class TestRanks:
    def test_max_rank(self):
        assert max_rank(make_ranked_graph({"a": 0, "b": 4, "c": None})) == 4
        assert max_rank(make_ranked_graph({})) == -1

    def test_layer_matrix_sorted_by_order(self):
        g = make_ranked_graph({"a": 0, "b": 1, "c": 1})
        g.node("b").order = 1
        g.node("c").order = 0
        assert build_layer_matrix(g) == [["a"], ["c", "b"]]

    def test_layer_matrix_keeps_empty_ranks(self):
        g = make_ranked_graph({"a": 0, "b": 2})
        assert build_layer_matrix(g) == [["a"], [], ["b"]]

    def test_normalize_ranks(self):
        g = make_ranked_graph({"a": -3, "b": 0, "c": None})
        normalize_ranks(g)
        assert g.node("a").rank == 0
        assert g.node("b").rank == 3
        assert g.node("c").rank is None

    def test_remove_empty_ranks(self):
        g = make_ranked_graph({"a": 0, "b": 2, "c": 5})
        remove_empty_ranks(g)
        assert [g.node(v).rank for v in ("a", "b", "c")] == [0, 1, 2]

    def test_remove_empty_ranks_keeps_factor_multiples(self):
        """With a node rank factor of 2, empty rank 2 survives, ranks 1 and 3 go."""
        g = make_ranked_graph({"a": 0, "b": 4})
        g.graph.node_rank_factor = 2
        remove_empty_ranks(g)
        assert g.node("b").rank == 2


# ─── Hierarchy traversal ──────────────────────────────────────────────────────


class TestHierarchyPostorder:
    def test_children_before_parents(self):
        g = Graph(compound=True)
        g.set_parent("a", "inner")
        g.set_parent("inner", "outer")
        g.set_node("b")
        visited = list(hierarchy_postorder(g))
        assert visited == [("a", 3), ("inner", 2), ("outer", 1), ("b", 1)]

    def test_explicit_roots(self):
        g = Graph(compound=True)
        g.set_parent("a", "sg")
        g.set_node("b")
        assert list(hierarchy_postorder(g, ["sg"])) == [("a", 2), ("sg", 1)]

    def test_too_deep_rejected(self):
        g = Graph(compound=True)
        for i in range(MAX_NESTING_DEPTH + 1):
            g.set_parent(f"n{i + 1}", f"n{i}")
        with pytest.raises(PreconditionError):
            list(hierarchy_postorder(g))

    def test_max_depth_accepted(self):
        g = Graph(compound=True)
        for i in range(MAX_NESTING_DEPTH - 1):
            g.set_parent(f"n{i + 1}", f"n{i}")
        depths = dict(hierarchy_postorder(g))
        assert depths["n0"] == 1
        assert depths[f"n{MAX_NESTING_DEPTH - 1}"] == MAX_NESTING_DEPTH


# ─── Geometry and misc ────────────────────────────────────────────────────────


class TestIntersectRect:
    def test_side_hit(self):
        rect = NodeLabel(x=0.0, y=0.0, width=10.0, height=10.0)
        assert intersect_rect(rect, Point(x=20.0, y=0.0)) == Point(x=5.0, y=0.0)
        assert intersect_rect(rect, Point(x=-20.0, y=0.0)) == Point(x=-5.0, y=0.0)

    def test_top_and_bottom_hit(self):
        rect = NodeLabel(x=0.0, y=0.0, width=10.0, height=10.0)
        assert intersect_rect(rect, Point(x=0.0, y=20.0)) == Point(x=0.0, y=5.0)
        assert intersect_rect(rect, Point(x=0.0, y=-20.0)) == Point(x=0.0, y=-5.0)

    def test_center_rejected(self):
        rect = NodeLabel(x=1.0, y=1.0, width=10.0, height=10.0)
        with pytest.raises(LayoutError):
            intersect_rect(rect, Point(x=1.0, y=1.0))

    def test_zero_size_rect(self):
        """Default-sized nodes are points; edges still attach without dividing by zero."""
        point = NodeLabel(x=0.0, y=0.0, width=0.0, height=0.0)
        assert intersect_rect(point, Point(x=0.0, y=20.0)) == Point(x=0.0, y=0.0)
        assert intersect_rect(point, Point(x=15.0, y=20.0)) == Point(x=0.0, y=0.0)
        assert intersect_rect(point, Point(x=-15.0, y=0.0)) == Point(x=0.0, y=0.0)

    def test_zero_width_rect(self):
        rect = NodeLabel(x=0.0, y=0.0, width=0.0, height=10.0)
        assert intersect_rect(rect, Point(x=0.0, y=20.0)) == Point(x=0.0, y=5.0)
        assert intersect_rect(rect, Point(x=0.0, y=-20.0)) == Point(x=0.0, y=-5.0)


class TestMisc:
    def test_partition(self):
        evens, odds = partition(range(6), lambda n: n % 2 == 0)
        assert evens == [0, 2, 4]
        assert odds == [1, 3, 5]

    def test_add_border_node(self):
        g = Graph()
        v = add_border_node(g, "top", "_bt", rank=2)
        assert g.node(v).kind == NestingBorder(side="top")
        assert g.node(v).rank == 2
        assert g.node(v).dummy

    def test_timed_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger="rankflow"):
            with timed("phase", report=True):
                pass
        assert any("phase time" in record.getMessage() for record in caplog.records)


# ─── Configuration ────────────────────────────────────────────────────────────


class TestLayoutConfig:
    def test_defaults(self):
        config = LayoutConfig.from_attrs(None)
        assert config.rankdir is RankDir.TB
        assert config.align is None
        assert config.acyclicer is Acyclicer.DFS
        assert config.ranker is Ranker.NETWORK_SIMPLEX
        assert (config.nodesep, config.edgesep, config.ranksep) == (50, 20, 50)
        assert (config.marginx, config.marginy) == (0, 0)

    def test_case_insensitive(self):
        config = LayoutConfig.from_attrs({"RankDir": "LR", "NodeSep": "10", "align": "DR", "Ranker": "Longest-Path"})
        assert config.rankdir is RankDir.LR
        assert config.nodesep == 10.0
        assert config.align is Align.DR
        assert config.ranker is Ranker.LONGEST_PATH

    def test_enum_instances_accepted(self):
        config = LayoutConfig.from_attrs({"acyclicer": Acyclicer.GREEDY})
        assert config.acyclicer is Acyclicer.GREEDY

    def test_unknown_value_rejected(self):
        with pytest.raises(ConfigError):
            LayoutConfig.from_attrs({"ranker": "fastest"})

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            LayoutConfig.from_attrs({"rankdir": "diagonal"})

    def test_non_numeric_rejected(self):
        with pytest.raises(ConfigError):
            LayoutConfig.from_attrs({"nodesep": "wide"})

    def test_graph_label(self):
        label = LayoutConfig.from_attrs({"ranksep": 30}).to_graph_label()
        assert label.ranksep == 30
        assert label.nesting_root is None

    def test_canonicalize(self):
        assert canonicalize({"MinLen": 2}) == {"minlen": 2}
        assert canonicalize(None) == {}


class TestLabelsFromAttrs:
    def test_node_defaults(self):
        label = node_label_from_attrs(None)
        assert (label.width, label.height) == (0, 0)
        assert not label.dummy

    def test_node_size(self):
        label = node_label_from_attrs({"Width": 50, "height": "20"})
        assert (label.width, label.height) == (50.0, 20.0)

    def test_edge_defaults(self):
        label = edge_label_from_attrs({})
        assert label.minlen == 1
        assert label.weight == 1
        assert (label.width, label.height) == (0, 0)
        assert label.labeloffset == 10
        assert label.labelpos is LabelPos.RIGHT

    def test_edge_options(self):
        label = edge_label_from_attrs({"minlen": 2, "weight": 0.5, "labelpos": "C"})
        assert label.minlen == 2
        assert label.weight == 0.5
        assert label.labelpos is LabelPos.CENTER

    @pytest.mark.parametrize("attrs", [{"minlen": 1.5}, {"minlen": -1}, {"weight": -2}, {"labelpos": "top"}])
    def test_invalid_edge_options(self, attrs):
        with pytest.raises(ConfigError):
            edge_label_from_attrs(attrs)
