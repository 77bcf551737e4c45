"""
Unit tests for the Kruskal and Prim spanning-tree engines.
"""

import pytest

from nodes import Oblast
from rail_graph import RailGraph
from spanning_tree import KruskalEngine, PrimEngine, SpanningEdge, count_components, mst_graph


def make_graph(ids, edges):
    g = RailGraph()
    for nid in ids:
        g.add_node(Oblast(nid, f"Oblast {nid}", 48.0, 31.0))
    for a, b, d in edges:
        g.add_edge(a, b, d)
    return g


def triangle():
    return make_graph("ABC", [("A", "B", 10.0), ("B", "C", 5.0), ("A", "C", 20.0)])


def weighted():
    return make_graph(
        "ABCDEF",
        [
            ("A", "B", 7.0),
            ("A", "C", 9.0),
            ("A", "F", 14.0),
            ("B", "C", 10.0),
            ("B", "D", 15.0),
            ("C", "D", 11.0),
            ("C", "F", 2.0),
            ("D", "E", 6.0),
            ("E", "F", 9.0),
        ],
    )


def edge_pairs(result):
    return {frozenset((e.from_id, e.to_id)) for e in result.get("mst_edges")}


def test_kruskal_rejects_cycle_edge():
    result = KruskalEngine().run(triangle())
    assert result.success
    assert edge_pairs(result) == {frozenset("AB"), frozenset("BC")}
    assert result.get("total_weight") == 15.0
    assert result.get("edges_count") == 2
    assert not result.get("is_forest")
    route = result.main_route
    assert route.optimal
    # First-appearance order along accepted edges (B-C accepted first).
    assert route.node_ids == ["B", "C", "A"]
    assert route.total_distance == 15.0


def test_kruskal_and_prim_agree_on_weight():
    g = weighted()
    kruskal = KruskalEngine().run(g)
    for start in "ABCDEF":
        prim = PrimEngine().run(g, start)
        assert prim.get("total_weight") == pytest.approx(kruskal.get("total_weight"))
        assert prim.get("edges_count") == 5
    assert kruskal.get("total_weight") == 33.0


def test_kruskal_ignores_destroyed_links():
    g = triangle()
    g.destroy_edge("B", "C")
    result = KruskalEngine().run(g)
    assert edge_pairs(result) == {frozenset("AB"), frozenset("AC")}
    assert result.get("total_weight") == 30.0
    assert PrimEngine().run(g, "A").get("total_weight") == 30.0


def test_disconnected_graph_is_flagged_as_forest():
    g = make_graph("ABCD", [("A", "B", 1.0), ("C", "D", 2.0)])
    kruskal = KruskalEngine().run(g)
    assert kruskal.success
    assert kruskal.get("is_forest")
    assert kruskal.get("components") == 2
    assert kruskal.get("total_weight") == 3.0

    prim = PrimEngine().run(g, "C")
    assert prim.success
    assert prim.get("is_forest")
    assert prim.get("components") == 2
    assert prim.get("total_weight") == 2.0
    assert prim.main_route.node_ids == ["C", "D"]
    assert count_components(g) == 2


def test_prim_defaults_to_first_node_and_reports_start():
    result = PrimEngine().run(triangle())
    assert result.get("start_node") == "A"
    assert result.main_route.start.id == "A"
    assert result.get("total_weight") == 15.0


def test_prim_unknown_start_fails():
    result = PrimEngine().run(triangle(), "Z")
    assert not result.success
    assert "Z" in result.error_message


def test_empty_graph_fails():
    assert not KruskalEngine().run(RailGraph()).success
    assert not PrimEngine().run(RailGraph()).success


def test_mst_graph_materializes_tree():
    g = weighted()
    result = KruskalEngine().run(g)
    tree = mst_graph(g, result.get("mst_edges"))
    assert tree.node_count == 6
    assert tree.edge_count == 5
    assert tree.distance("C", "F") == 2.0
    assert not tree.has_edge("A", "F")
    assert tree.node("A") is not g.node("A")


def test_spanning_edge_str():
    assert str(SpanningEdge("A", "B", 12.345)) == "A - B (12.3 km)"


def test_spanning_trees_leave_out_destroyed_oblast():
    g = make_graph("ABC", [("A", "B", 1.0), ("B", "C", 1.0), ("A", "C", 5.0)])
    g.destroy_node("B")
    for conn in g.edges():
        conn.restore()

    kruskal = KruskalEngine().run(g, None, None)
    prim = PrimEngine().run(g, "A", None)
    assert kruskal.get("total_weight") == 5.0
    assert prim.get("total_weight") == 5.0
    assert kruskal.get("is_forest")
