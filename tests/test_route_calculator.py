"""
Tests for RouteCalculator and ComparisonResult.
"""

import random

import pytest

from algorithms import AlgorithmType
from graph_service import GraphService
from network_config import NetworkConfig
from nodes import Oblast
from rail_graph import RailGraph
from route_calculator import ComparisonResult, RouteCalculator
from routing import AlgorithmResult, Route


def make_network() -> RailGraph:
    g = RailGraph()
    g.add_node(Oblast("lviv", "Lviv", 49.8397, 24.0297))
    g.add_node(Oblast("rivne", "Rivne", 50.6199, 26.2516))
    g.add_node(Oblast("kyiv", "Kyiv", 50.4501, 30.5234))
    g.add_node(Oblast("dnipro", "Dnipro", 48.4647, 35.0462))
    g.add_node(Oblast("donetsk", "Donetsk", 48.0159, 37.8028, is_frontline=True))
    # The direct lviv-kyiv link is longer than the detour through rivne, so
    # BFS and DFS (which take it first) lose to Dijkstra on lviv -> donetsk.
    g.add_edge("lviv", "kyiv", 600.0)
    g.add_edge("lviv", "rivne", 210.0)
    g.add_edge("rivne", "kyiv", 330.0)
    g.add_edge("kyiv", "dnipro", 480.0)
    g.add_edge("dnipro", "donetsk", 250.0)
    return g


def make_calculator(safe_ids=("lviv", "rivne")) -> RouteCalculator:
    config = NetworkConfig(frontline_ids=("donetsk",), safe_ids=safe_ids)
    return RouteCalculator(GraphService(make_network(), config=config, rng=random.Random(0)))


def test_compare_algorithms():
    comparison = make_calculator().compare_algorithms("lviv", "donetsk")
    assert set(comparison.results) == set(AlgorithmType)
    assert comparison.shortest().algorithm_name == "Dijkstra"
    assert comparison.shortest().distance == 1270.0
    assert comparison.fastest() is not None
    assert comparison.most_efficient() is not None

    frame = comparison.to_frame()
    assert list(frame["algorithm"]) == [t.name for t in AlgorithmType]
    assert frame["success"].all()
    text = comparison.comparison_table()
    assert "Shortest: Dijkstra (1270.0 km)" in text


def test_comparison_with_failures_only():
    failed = AlgorithmResult.failed("BFS", "nope")
    comparison = ComparisonResult({AlgorithmType.BFS: failed})
    assert comparison.fastest() is None
    assert comparison.shortest() is None
    assert comparison.most_efficient() is None
    assert not comparison.to_frame()["success"].any()


def test_find_top_n_routes():
    calc = make_calculator()
    routes = calc.find_top_n_routes("lviv", "donetsk", 2)
    assert len(routes) == 2
    assert routes[0].total_distance == 1270.0
    assert routes[1].total_distance == 1330.0
    assert calc.find_top_n_routes("lviv", "donetsk", 0) == []
    with pytest.raises(ValueError):
        calc.find_top_n_routes("lviv", "donetsk", -1)


def test_evacuation_route_goes_to_nearest_safe_oblast():
    calc = make_calculator()
    route = calc.calculate_evacuation_route("donetsk")
    assert route is not None
    assert route.end.id == "rivne"
    assert route.total_distance == 1060.0
    assert route.optimal


def test_evacuation_falls_back_to_dynamic_safe_set():
    calc = make_calculator(safe_ids=("nowhere",))
    route = calc.calculate_evacuation_route("donetsk")
    # Every non-frontline oblast at full supply counts as safe.
    assert route.end.id == "dnipro"
    assert route.total_distance == 250.0


def test_evacuation_rejects_non_frontline_and_unreachable():
    calc = make_calculator()
    assert calc.calculate_evacuation_route("kyiv") is None
    assert calc.calculate_evacuation_route("missing") is None
    calc.service.destroy_edge("dnipro", "donetsk")
    assert calc.calculate_evacuation_route("donetsk") is None


def test_calculate_tour_chains_segments():
    calc = make_calculator()
    tour = calc.calculate_tour(["lviv", "dnipro", "rivne"])
    assert tour.node_ids == ["lviv", "rivne", "kyiv", "dnipro", "kyiv", "rivne"]
    assert tour.total_distance == 1020.0 + 810.0
    assert tour.algorithm == "Multi-Point Tour"
    assert not tour.optimal
    assert calc.calculate_tour(["lviv"]) is None


def test_calculate_tour_none_when_segment_unreachable():
    calc = make_calculator()
    calc.service.destroy_node("dnipro")
    assert calc.calculate_tour(["lviv", "kyiv", "donetsk"]) is None


def test_analyze_route():
    calc = make_calculator()
    graph = calc.service.graph
    graph.node("dnipro").supply_level = 15
    route = Route.from_path(graph, ["kyiv", "dnipro", "donetsk"], 730.0, "Dijkstra")
    stats = calc.analyze_route(route)
    assert stats.steps_count == 3
    assert stats.frontline_stops == 1
    assert stats.safe_stops == 2
    assert stats.avg_segment_distance == pytest.approx(365.0)
    assert stats.most_critical_point == "Dnipro"
    assert "Most critical point: Dnipro" in str(stats)


def test_route_viability_and_cost():
    calc = make_calculator()
    graph = calc.service.graph
    route = Route.from_path(graph, ["kyiv", "dnipro", "donetsk"], 730.0, "Dijkstra")
    assert calc.is_route_viable(route)

    graph.node("dnipro").supply_level = 20
    # 730 km x 10 + 1000 (frontline donetsk) + 500 (dnipro below 30).
    assert calc.calculate_route_cost(route) == pytest.approx(8800.0)

    calc.service.destroy_edge("dnipro", "donetsk")
    assert not calc.is_route_viable(route)
    skipping = Route.from_path(graph, ["lviv", "dnipro"], 1.0, "X")
    assert not calc.is_route_viable(skipping)


def test_estimate_travel_time():
    calc = make_calculator()
    route = Route(path=(), total_distance=600.0)
    assert calc.estimate_travel_time(route, 120.0) == pytest.approx(5.0)
    assert calc.estimate_travel_time(route) == pytest.approx(10.0)
    with pytest.raises(ValueError):
        calc.estimate_travel_time(route, 0)
