"""
Unit tests for the Route and AlgorithmResult value objects.
"""

import dataclasses
import math

import pytest

from nodes import Oblast
from rail_graph import RailGraph
from routing import AlgorithmResult, Route, walk_parents


def make_graph():
    g = RailGraph()
    g.add_node(Oblast("kyiv", "Kyiv", 50.4501, 30.5234))
    g.add_node(Oblast("zhytomyr", "Zhytomyr", 50.2547, 28.6587))
    g.add_node(Oblast("rivne", "Rivne", 50.6199, 26.2516))
    g.add_edge("kyiv", "zhytomyr", 140.0)
    g.add_edge("zhytomyr", "rivne", 187.0)
    return g


def test_walk_parents():
    assert walk_parents({"b": "a", "c": "b", "a": None}, "c") == ["a", "b", "c"]
    assert walk_parents({"b": "a"}, "b") == ["a", "b"]
    assert walk_parents({}, "x") == ["x"]


def test_route_from_path_resolves_nodes_and_links():
    g = make_graph()
    route = Route.from_path(g, ["kyiv", "zhytomyr", "rivne"], 327.0, "Dijkstra", 0.5, optimal=True)
    assert route.start.name == "Kyiv"
    assert route.end.id == "rivne"
    assert route.step_count == 3
    assert route.hop_count == 2
    assert len(route.connections) == 2
    assert route.passes_through("zhytomyr")
    assert not route.passes_through("lviv")
    assert route.path_string() == "Kyiv → Zhytomyr → Rivne"
    assert route.path_ids() == "kyiv → zhytomyr → rivne"
    assert "Optimal: yes" in route.detailed_description()
    assert "327.0km" in str(route)


def test_route_validity_tracks_live_graph():
    g = make_graph()
    route = Route.from_path(g, ["kyiv", "zhytomyr", "rivne"], 327.0, "BFS")
    assert route.is_valid(g)
    g.destroy_edge("zhytomyr", "rivne")
    assert not route.is_valid(g)


def test_route_with_repeated_stop_is_not_valid():
    g = make_graph()
    stutter = Route.from_path(g, ["kyiv", "kyiv", "zhytomyr"], 140.0, "X")
    assert not stutter.is_valid(g)


def test_route_is_frozen():
    route = Route(path=(), total_distance=0.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        route.total_distance = 1.0
    assert route.start is None
    assert route.hop_count == 0


def test_failed_result():
    result = AlgorithmResult.failed("BFS", "No path between A and B", nodes_visited=4, edges_examined=6)
    assert not result.success
    assert result.best_route() is None
    assert result.all_routes_sorted() == []
    assert result.distance == math.inf
    assert "FAILED" in result.full_report()
    assert result.nodes_visited == 4


def test_best_route_and_sorting():
    g = make_graph()
    main = Route.from_path(g, ["kyiv", "zhytomyr", "rivne"], 327.0, "DFS")
    alt = Route.from_path(g, ["kyiv", "zhytomyr"], 140.0, "DFS")
    result = AlgorithmResult.succeeded("DFS", main_route=main, alternative_routes=[alt])
    assert result.best_route() is alt
    assert result.all_routes_sorted() == [alt, main]
    assert result.alternative_routes == (alt,)
    assert "Alternative routes: 1" in result.full_report()


def test_metadata_is_read_only():
    result = AlgorithmResult.succeeded("Dijkstra", all_distances={"a": 0.0})
    assert result.get("all_distances") == {"a": 0.0}
    assert result.get("missing", 7) == 7
    with pytest.raises(TypeError):
        result.metadata["x"] = 1


def test_efficiency_and_comparison():
    fast = AlgorithmResult.succeeded("BFS", nodes_visited=10, execution_time_ms=2.0)
    slow = AlgorithmResult.succeeded("DFS", nodes_visited=10, execution_time_ms=5.0)
    assert fast.efficiency == pytest.approx(5.0)
    assert AlgorithmResult.succeeded("X", nodes_visited=3).efficiency == math.inf
    assert "Winner: BFS (faster)" in fast.compare_with(slow)
    assert "Winner: BFS (faster)" in slow.compare_with(fast)
