"""
Higher-level routing on top of GraphService.

Algorithm comparison, evacuation and multi-stop tours, route statistics
and the synthetic cost model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from algorithms import AlgorithmType
from graph_service import SPANNING_TREE_TYPES, GraphService
from routing import AlgorithmResult, Route


@dataclass(frozen=True)
class RouteStatistics:
    total_distance: float
    steps_count: int
    frontline_stops: int
    safe_stops: int
    avg_segment_distance: float
    most_critical_point: str
    algorithm: str

    def __str__(self) -> str:
        return (
            "Route statistics\n"
            f"Total distance: {self.total_distance:.2f} km\n"
            f"Stops: {self.steps_count}\n"
            f"Frontline stops: {self.frontline_stops}\n"
            f"Safe stops: {self.safe_stops}\n"
            f"Average segment: {self.avg_segment_distance:.2f} km\n"
            f"Most critical point: {self.most_critical_point}\n"
            f"Algorithm: {self.algorithm}\n"
        )


class ComparisonResult:
    """
    Results of every algorithm for one (start, end) query.
    """

    def __init__(self, results: Mapping[AlgorithmType, AlgorithmResult]) -> None:
        self._results: Dict[AlgorithmType, AlgorithmResult] = dict(results)

    @property
    def results(self) -> Dict[AlgorithmType, AlgorithmResult]:
        return dict(self._results)

    def _successful(self) -> List[AlgorithmResult]:
        return [r for r in self._results.values() if r.success]

    def fastest(self) -> Optional[AlgorithmResult]:
        return min(self._successful(), key=lambda r: r.execution_time_ms, default=None)

    def shortest(self) -> Optional[AlgorithmResult]:
        """Shortest start -> end route; spanning-tree results excluded."""
        candidates = [
            r for algorithm, r in self._results.items()
            if algorithm not in SPANNING_TREE_TYPES and r.success and r.main_route is not None
        ]
        return min(candidates, key=lambda r: r.distance, default=None)

    def most_efficient(self) -> Optional[AlgorithmResult]:
        return max(self._successful(), key=lambda r: r.efficiency, default=None)

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for algorithm, result in self._results.items():
            route = result.main_route
            rows.append(
                {
                    "algorithm": algorithm.name,
                    "success": result.success,
                    "distance_km": route.total_distance if route is not None else float("nan"),
                    "time_ms": result.execution_time_ms,
                    "nodes_visited": result.nodes_visited,
                    "edges_examined": result.edges_examined,
                    "stops": route.step_count if route is not None else 0,
                    "optimal": route.optimal if route is not None else False,
                }
            )
        return pd.DataFrame(rows)

    def comparison_table(self) -> str:
        lines = ["Algorithm comparison", self.to_frame().to_string(index=False, float_format="%.3f")]
        fastest = self.fastest()
        shortest = self.shortest()
        if fastest is not None:
            lines.append(f"Fastest: {fastest.algorithm_name}")
        if shortest is not None:
            lines.append(f"Shortest: {shortest.algorithm_name} ({shortest.distance:.1f} km)")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.comparison_table()


class RouteCalculator:
    def __init__(self, service: GraphService) -> None:
        self._service = service

    @property
    def service(self) -> GraphService:
        return self._service

    def compare_algorithms(self, start_id: str, end_id: str) -> ComparisonResult:
        return ComparisonResult(self._service.execute_all_algorithms(start_id, end_id))

    def find_top_n_routes(self, start_id: str, end_id: str, n: int) -> List[Route]:
        """Up to n start -> end routes from the path-finding algorithms, shortest first."""
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        results = self._service.execute_all_algorithms(start_id, end_id)
        routes = [
            r.main_route for algorithm, r in results.items()
            if algorithm not in SPANNING_TREE_TYPES and r.success and r.main_route is not None
        ]
        routes.sort(key=lambda route: route.total_distance)
        return routes[:n]

    def calculate_evacuation_route(self, frontline_id: str) -> Optional[Route]:
        """
        Shortest route from a frontline oblast to the nearest safe oblast.

        Safe targets are the configured safe ids still standing in the graph,
        or the dynamic safe set when none of them is. Returns None for
        unknown or non-frontline origins, or when no target is reachable.
        """
        service = self._service
        graph = service.graph
        origin = graph.node(frontline_id)
        if origin is None or not origin.is_frontline:
            return None

        targets = [
            nid for nid in service.config.safe_ids
            if graph.has_node(nid) and not graph.node(nid).destroyed
        ]
        if not targets:
            targets = [n.id for n in service.safe_nodes()]

        dijkstra = service.engine(AlgorithmType.DIJKSTRA)
        routes = dijkstra.routes_to_all(graph, frontline_id)
        reachable = [routes[nid] for nid in targets if nid in routes and nid != frontline_id]
        return min(reachable, key=lambda route: route.total_distance, default=None)

    def calculate_tour(self, node_ids: Sequence[str]) -> Optional[Route]:
        """
        Chain Dijkstra segments through node_ids in the given order.

        Not a travelling-salesman solution: the visiting order is the
        caller's. Returns None for fewer than two stops or when any segment
        is unreachable.
        """
        if len(node_ids) < 2:
            return None

        path = []
        links = []
        total = 0.0
        elapsed = 0.0
        for from_id, to_id in zip(node_ids, node_ids[1:]):
            segment = self._service.execute_algorithm(AlgorithmType.DIJKSTRA, from_id, to_id)
            if not segment.success:
                return None
            route = segment.main_route
            path.extend(route.path if not path else route.path[1:])
            links.extend(route.connections)
            total += route.total_distance
            elapsed += segment.execution_time_ms

        return Route(
            path=tuple(path),
            total_distance=total,
            algorithm="Multi-Point Tour",
            connections=tuple(links),
            computation_time_ms=elapsed,
            optimal=False,
        )

    def analyze_route(self, route: Route) -> RouteStatistics:
        path = route.path
        frontline = sum(1 for node in path if node.is_frontline)
        avg_segment = route.total_distance / (len(path) - 1) if len(path) > 1 else 0.0
        most_critical = min(path, key=lambda node: node.supply_level, default=None)
        return RouteStatistics(
            total_distance=route.total_distance,
            steps_count=len(path),
            frontline_stops=frontline,
            safe_stops=len(path) - frontline,
            avg_segment_distance=avg_segment,
            most_critical_point=most_critical.name if most_critical is not None else "N/A",
            algorithm=route.algorithm,
        )

    def is_route_viable(self, route: Route) -> bool:
        """No destroyed oblast and no destroyed or missing link along route."""
        graph = self._service.graph
        if any(node.destroyed for node in route.path):
            return False
        ids = route.node_ids
        for a, b in zip(ids, ids[1:]):
            conn = graph.connection(a, b)
            if conn is None or conn.destroyed:
                return False
        return True

    def estimate_travel_time(self, route: Route, speed_kmh: Optional[float] = None) -> float:
        """Hours at a constant speed (default from configuration)."""
        speed = self._service.config.default_speed_kmh if speed_kmh is None else speed_kmh
        if speed <= 0:
            raise ValueError(f"Speed must be positive, got {speed!r}")
        return route.total_distance / speed

    def calculate_route_cost(self, route: Route) -> float:
        """
        distance x cost_per_km, plus a flat penalty per frontline stop and
        per stop whose supply is below the critical threshold.
        """
        config = self._service.config
        cost = route.total_distance * config.cost_per_km
        for node in route.path:
            if node.is_frontline:
                cost += config.frontline_penalty
            if node.supply_level < config.critical_supply:
                cost += config.low_supply_penalty
        return cost
