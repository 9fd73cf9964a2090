"""End-to-end tests for rankflow.run_layout — the full pipeline on caller graphs with attribute dicts."""

from __future__ import annotations

import logging

import pytest

import rankflow
from rankflow import ConfigError, Graph, Point, PreconditionError, run_layout
from rankflow.layout.engine import LayeredLayout, build_layout_graph

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_input(
    nodes: dict[str, dict] | None = None,
    edges: list[tuple] | None = None,
    *,
    multigraph: bool = False,
    compound: bool = False,
    **graph_attrs,
) -> Graph:
    """Caller graph: nodes map id to attrs, edges are ``(v, w)``, ``(v, w, attrs)`` or ``(v, w, attrs, name)``."""
    g = Graph(multigraph=multigraph, compound=compound, label=dict(graph_attrs))
    for v, attrs in (nodes or {}).items():
        g.set_node(v, dict(attrs))
    for edge in edges or []:
        v, w = edge[0], edge[1]
        attrs = dict(edge[2]) if len(edge) > 2 else {}
        name = edge[3] if len(edge) > 3 else None
        for end in (v, w):
            if not g.has_node(end):
                g.set_node(end, {})
        g.add_edge(v, w, label=attrs, name=name)
    return g


def box(g: Graph, v: str) -> tuple[float, float, float, float]:
    attrs = g.node(v)
    return (
        attrs["x"] - attrs["width"] / 2,
        attrs["y"] - attrs["height"] / 2,
        attrs["x"] + attrs["width"] / 2,
        attrs["y"] + attrs["height"] / 2,
    )


def assert_laid_out(g: Graph) -> None:
    for v in g.nodes():
        assert isinstance(g.node(v)["x"], float), v
        assert isinstance(g.node(v)["y"], float), v
    for e in g.edges():
        assert len(g.edge(e)["points"]) >= 2, e


# ─── Basic shapes ─────────────────────────────────────────────────────────────


class TestSingleNode:
    def test_centered_in_bounding_box(self):
        g = make_input({"a": {"width": 50, "height": 100}})
        run_layout(g)
        assert (g.node("a")["x"], g.node("a")["y"]) == (25, 50)
        assert (g.graph["width"], g.graph["height"]) == (50, 100)

    def test_margins(self):
        g = make_input({"a": {"width": 50, "height": 100}}, marginx=10, marginy=5)
        run_layout(g)
        assert (g.node("a")["x"], g.node("a")["y"]) == (35, 55)
        assert (g.graph["width"], g.graph["height"]) == (70, 110)

    def test_node_without_attrs(self):
        g = Graph()
        g.set_node("a")
        run_layout(g)
        assert g.node("a") == {"x": 0, "y": 0}
        assert g.graph == {"width": 0, "height": 0}

    def test_empty_graph(self):
        g = make_input()
        run_layout(g)
        assert (g.graph["width"], g.graph["height"]) == (0, 0)


class TestTwoNodes:
    def test_edge_routed_through_rank_gap(self):
        """The edge leaves a's bottom, passes the middle rank and enters b's top."""
        g = make_input({"a": {"width": 50, "height": 100}, "b": {"width": 75, "height": 200}}, [("a", "b")], ranksep=300)
        run_layout(g)
        assert (g.node("a")["x"], g.node("a")["y"]) == (37.5, 50)
        assert (g.node("b")["x"], g.node("b")["y"]) == (37.5, 100 + 300 + 100)
        assert g.edge("a", "b")["points"] == [
            Point(x=37.5, y=100),
            Point(x=37.5, y=100 + 150),
            Point(x=37.5, y=100 + 300),
        ]
        assert (g.graph["width"], g.graph["height"]) == (75, 600)

    def test_same_rank_separated_by_nodesep(self):
        g = make_input({"a": {"width": 50, "height": 100}, "b": {"width": 75, "height": 200}}, nodesep=200)
        run_layout(g)
        a, b = g.node("a"), g.node("b")
        assert a["y"] == b["y"] == 100
        assert abs(a["x"] - b["x"]) == 25 + 200 + 37.5

    def test_minlen_stretches_ranks(self):
        g = make_input({"a": {"height": 10}, "b": {"height": 10}}, [("a", "b", {"minlen": 2})], ranksep=20)
        run_layout(g)
        # minlen 2 leaves an empty rank, so b sits two rank gaps below a.
        assert g.node("b")["y"] - g.node("a")["y"] == 10 + 20 + 20

    def test_default_sized_nodes(self):
        """Nodes without width or height lay out as points joined by vertical edges."""
        g = make_input(edges=[("a", "b")])
        run_layout(g)
        a, b = g.node("a"), g.node("b")
        assert a["x"] == b["x"]
        assert b["y"] - a["y"] == 50
        points = g.edge("a", "b")["points"]
        assert len(points) == 3
        assert all(p.x == a["x"] for p in points)
        assert points[0].y == a["y"] and points[-1].y == b["y"]

    def test_default_sized_fan_out(self):
        g = make_input(edges=[("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        run_layout(g)
        assert_laid_out(g)
        assert g.node("b")["y"] == g.node("c")["y"]
        assert g.node("b")["x"] != g.node("c")["x"]


# ─── Rank direction ───────────────────────────────────────────────────────────


class TestRankDir:
    @pytest.fixture
    def nodes(self) -> dict[str, dict]:
        return {"a": {"width": 50, "height": 100}, "b": {"width": 75, "height": 200}}

    def test_bt_flips(self, nodes):
        g = make_input(nodes, [("a", "b")], rankdir="bt")
        run_layout(g)
        assert g.node("a")["y"] > g.node("b")["y"]
        assert g.node("a")["x"] == g.node("b")["x"]

    def test_lr(self, nodes):
        g = make_input(nodes, [("a", "b")], rankdir="LR")
        run_layout(g)
        assert g.node("a")["x"] < g.node("b")["x"]
        assert g.node("a")["y"] == g.node("b")["y"]
        assert g.graph["height"] == 200

    def test_rl(self, nodes):
        g = make_input(nodes, [("a", "b")], rankdir="rl")
        run_layout(g)
        assert g.node("a")["x"] > g.node("b")["x"]


# ─── Cycles, self loops and parallel edges ────────────────────────────────────


class TestCycles:
    @pytest.mark.parametrize("acyclicer", ["dfs", "greedy"])
    def test_cycle_laid_out_with_original_edges(self, acyclicer):
        g = make_input(
            {v: {"width": 20, "height": 20} for v in "abc"},
            [("a", "b"), ("b", "c"), ("c", "a", {}, "back")],
            multigraph=True,
            acyclicer=acyclicer,
        )
        before = sorted(g.edges())
        run_layout(g)
        assert sorted(g.edges()) == before
        assert_laid_out(g)

    def test_reversed_edge_points_run_forward(self):
        """c → a is drawn against the flow; its points still start at c."""
        g = make_input({v: {"width": 20, "height": 20} for v in "abc"}, [("a", "b"), ("b", "c"), ("c", "a")])
        run_layout(g)
        points = g.edge("c", "a")["points"]
        c, a = g.node("c"), g.node("a")
        assert abs(points[0].y - c["y"]) < abs(points[0].y - a["y"])
        assert abs(points[-1].y - a["y"]) < abs(points[-1].y - c["y"])

    def test_self_loop(self):
        g = make_input({"a": {"width": 100, "height": 100}}, [("a", "a")])
        run_layout(g)
        points = g.edge("a", "a")["points"]
        assert len(points) == 7
        assert all(p.x >= g.node("a")["x"] for p in points)

    def test_parallel_named_edges(self):
        g = make_input(
            {"a": {"width": 20, "height": 20}, "b": {"width": 20, "height": 20}},
            [("a", "b", {}, "x"), ("a", "b", {}, "y")],
            multigraph=True,
        )
        run_layout(g)
        assert len(g.edge("a", "b", "x")["points"]) == 3
        assert len(g.edge("a", "b", "y")["points"]) == 3
        assert g.edge("a", "b", "x")["points"][1] != g.edge("a", "b", "y")["points"][1]


# ─── Edge labels ──────────────────────────────────────────────────────────────


class TestEdgeLabels:
    def test_centered_label_between_nodes(self):
        g = make_input(
            {"a": {"width": 50, "height": 20}, "b": {"width": 50, "height": 20}},
            [("a", "b", {"width": 60, "height": 30, "labelpos": "c"})],
        )
        run_layout(g)
        edge = g.edge("a", "b")
        assert edge["x"] == g.node("a")["x"]
        assert g.node("a")["y"] < edge["y"] < g.node("b")["y"]

    def test_right_label_offset(self):
        g = make_input(
            {"a": {"width": 50, "height": 20}, "b": {"width": 50, "height": 20}},
            [("a", "b", {"width": 60, "height": 30, "labelpos": "r", "labeloffset": 5})],
        )
        run_layout(g)
        assert g.edge("a", "b")["x"] > g.node("a")["x"]

    def test_unlabelled_edge_has_no_label_position(self):
        g = make_input({"a": {}, "b": {}}, [("a", "b")])
        run_layout(g)
        assert "x" not in g.edge("a", "b")


# ─── Subgraphs ────────────────────────────────────────────────────────────────


class TestSubgraphs:
    def test_subgraph_encloses_children(self):
        g = make_input(
            {"sg": {}, "a": {"width": 50, "height": 50}, "b": {"width": 50, "height": 50}},
            [("a", "b")],
            compound=True,
        )
        g.set_parent("a", "sg")
        g.set_parent("b", "sg")
        run_layout(g)
        left, top, right, bottom = box(g, "sg")
        for v in ("a", "b"):
            assert left < g.node(v)["x"] < right
            assert top < g.node(v)["y"] < bottom
        assert g.node("sg")["width"] > 0
        assert g.node("sg")["height"] > 0

    def test_edge_leaving_subgraph(self):
        g = make_input(
            {"sg": {}, "a": {"width": 20, "height": 20}, "c": {"width": 20, "height": 20}},
            [("a", "c")],
            compound=True,
        )
        g.set_parent("a", "sg")
        run_layout(g)
        left, top, right, bottom = box(g, "sg")
        assert top < g.node("a")["y"] < bottom
        assert g.node("c")["y"] > bottom
        assert_laid_out(g)

    def test_edge_to_subgraph_rejected(self):
        g = make_input({"sg": {}, "a": {}, "b": {}}, [("b", "sg")], compound=True)
        g.set_parent("a", "sg")
        with pytest.raises(PreconditionError):
            run_layout(g)
        assert "x" not in g.node("a")


# ─── Options and diagnostics ──────────────────────────────────────────────────


GRAPH_WITH_EVERYTHING = [("a", "b"), ("b", "c"), ("c", "a"), ("a", "d"), ("d", "d"), ("e", "c")]


class TestOptions:
    @pytest.mark.parametrize("ranker", ["network-simplex", "tight-tree", "longest-path"])
    def test_every_ranker(self, ranker):
        g = make_input({v: {"width": 10, "height": 10} for v in "abcde"}, GRAPH_WITH_EVERYTHING, ranker=ranker)
        run_layout(g)
        assert_laid_out(g)

    @pytest.mark.parametrize("align", ["ul", "ur", "dl", "dr"])
    def test_every_alignment(self, align):
        g = make_input({v: {"width": 10, "height": 10} for v in "abcde"}, GRAPH_WITH_EVERYTHING, align=align)
        run_layout(g)
        assert_laid_out(g)

    def test_unknown_option_rejected(self):
        g = make_input({"a": {}}, ranker="fastest")
        with pytest.raises(ConfigError):
            run_layout(g)

    def test_bad_edge_option_rejected(self):
        g = make_input({}, [("a", "b", {"minlen": "long"})])
        with pytest.raises(ConfigError):
            run_layout(g)

    def test_debug_timing(self, caplog):
        g = make_input({"a": {}}, [("a", "b")])
        with caplog.at_level(logging.INFO, logger="rankflow"):
            run_layout(g, debug_timing=True)
        messages = [record.getMessage() for record in caplog.records]
        assert any(m.startswith("layout time") for m in messages)
        assert any("order time" in m for m in messages)

    def test_layout_graph_is_typed(self):
        g = make_input({"a": {"Width": 10}}, [("a", "b", {"MinLen": 3})], multigraph=True, RankSep=5)
        lg = build_layout_graph(g)
        assert lg.node("a").width == 10
        assert lg.edge("a", "b").minlen == 3
        assert lg.graph.ranksep == 5
        assert lg.multigraph and lg.compound

    def test_layered_layout_reusable(self):
        engine = LayeredLayout()
        first = make_input({"a": {"width": 10, "height": 10}}, [("a", "b")])
        second = make_input({"a": {"width": 10, "height": 10}}, [("a", "b")])
        engine.layout(first)
        engine.layout(second)
        assert first.node("b") == second.node("b")

    def test_package_level_layout(self):
        g = make_input({"a": {"width": 10, "height": 10}})
        assert rankflow.run_layout(g) is g

    def test_layout_subpackage_not_shadowed(self):
        """``rankflow.layout`` stays the phase package after ``import rankflow``."""
        assert rankflow.layout.acyclic.run is not None
        assert rankflow.layout.LayeredLayout is LayeredLayout
        assert callable(rankflow.layout.layout)
