"""
Unit tests for BFS and DFS over RailGraph.
"""

from nodes import Oblast
from rail_graph import RailGraph
from traversal import BreadthFirstSearch, DepthFirstSearch


def make_graph(edges, extra=()):
    g = RailGraph()
    ids = []
    for a, b, _ in edges:
        for nid in (a, b):
            if nid not in ids:
                ids.append(nid)
    ids.extend(extra)
    for nid in ids:
        g.add_node(Oblast(nid, f"Oblast {nid}", 48.0, 31.0))
    for a, b, d in edges:
        g.add_edge(a, b, d)
    return g


def triangle():
    return make_graph([("A", "B", 10.0), ("B", "C", 5.0), ("A", "C", 20.0)], extra=["D"])


def test_bfs_finds_fewest_hops_not_shortest_distance():
    result = BreadthFirstSearch().run(triangle(), "A", "C")
    assert result.success
    assert result.main_route.node_ids == ["A", "C"]
    assert result.main_route.total_distance == 20.0
    assert not result.main_route.optimal
    assert result.get("visited_order") == ["A", "B", "C"]


def test_bfs_accumulates_distance_along_discovery_edges():
    g = make_graph([("A", "B", 3.0), ("B", "C", 4.0), ("C", "D", 5.0)])
    result = BreadthFirstSearch().run(g, "A", "D")
    assert result.main_route.node_ids == ["A", "B", "C", "D"]
    assert result.distance == 12.0
    assert result.main_route.hop_count == 3


def test_bfs_unreachable_keeps_counters():
    result = BreadthFirstSearch().run(triangle(), "A", "D")
    assert not result.success
    assert result.error_message == "No path between Oblast A and Oblast D"
    assert result.nodes_visited == 3
    assert result.edges_examined > 0
    assert result.main_route is None


def test_unknown_nodes_fail_without_raising():
    g = triangle()
    for engine in (BreadthFirstSearch(), DepthFirstSearch()):
        result = engine.run(g, "A", "Z")
        assert not result.success
        assert "not found" in result.error_message
        assert not engine.run(g, None, "A").success
    assert not DepthFirstSearch().run_iterative(g, "Z", "A").success


def test_bfs_never_revisits():
    g = make_graph(
        [("A", "B", 1.0), ("A", "C", 1.0), ("B", "D", 1.0), ("C", "D", 1.0), ("D", "E", 1.0)]
    )
    result = BreadthFirstSearch().run(g, "A", "E")
    order = result.get("visited_order")
    assert len(order) == len(set(order))
    assert result.nodes_visited <= g.node_count


def test_full_traversal_reports_reachable_set():
    g = triangle()
    result = BreadthFirstSearch().full_traversal(g, "A")
    assert result.success
    assert result.get("visit_order") == ["A", "B", "C"]
    assert result.get("total_reachable") == 3
    assert result.main_route is None

    g.destroy_edge("A", "B")
    g.destroy_edge("A", "C")
    assert BreadthFirstSearch().full_traversal(g, "A").get("total_reachable") == 1
    assert not BreadthFirstSearch().full_traversal(g, "Z").success


def test_dfs_follows_adjacency_order():
    g = make_graph([("A", "B", 1.0), ("A", "C", 1.0), ("B", "D", 1.0), ("C", "D", 1.0)])
    result = DepthFirstSearch().run(g, "A", "D")
    assert result.success
    assert result.main_route.node_ids == ["A", "B", "D"]
    assert result.distance == 2.0
    assert not result.main_route.optimal


def test_iterative_dfs_explores_in_reverse_order():
    g = make_graph([("A", "B", 1.0), ("A", "C", 1.0), ("B", "D", 1.0), ("C", "D", 1.0)])
    result = DepthFirstSearch().run_iterative(g, "A", "D")
    assert result.success
    assert result.main_route.node_ids == ["A", "C", "D"]
    assert result.algorithm_name == "DFS (Iterative)"


def test_dfs_detours_when_link_destroyed():
    g = triangle()
    g.destroy_edge("A", "C")
    result = DepthFirstSearch().run(g, "A", "C")
    assert result.main_route.node_ids == ["A", "B", "C"]
    assert result.distance == 15.0

    g.destroy_edge("B", "C")
    failed = DepthFirstSearch().run(g, "A", "C")
    assert not failed.success
    assert failed.nodes_visited == 2


def chain(n):
    return make_graph([(f"n{i}", f"n{i + 1}", 1.0) for i in range(n - 1)])


def test_dfs_handles_chains_deeper_than_recursion_limit():
    g = chain(1500)
    result = DepthFirstSearch().run(g, "n0", "n1499")
    assert result.success
    assert len(result.main_route.node_ids) == 1500
    assert result.distance == 1499.0
    assert result.nodes_visited == 1500


def test_dfs_start_equals_end():
    result = DepthFirstSearch().run(triangle(), "B", "B")
    assert result.success
    assert result.main_route.node_ids == ["B"]
    assert result.nodes_visited == 1
    assert result.edges_examined == 0


def test_traversals_skip_destroyed_oblast_behind_revived_links():
    g = make_graph([("n0", "n1", 1.0), ("n1", "n2", 1.0)])
    g.destroy_node("n1")
    for conn in g.edges():
        conn.restore()
    assert not BreadthFirstSearch().run(g, "n0", "n2").success
    assert not DepthFirstSearch().run(g, "n0", "n2").success
    assert not DepthFirstSearch().run_iterative(g, "n0", "n2").success
