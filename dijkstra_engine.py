"""
Heap-based Dijkstra over the rail graph.

Uses Python's heapq to compute single-source shortest paths over any Graph
implementation. Edge weights are the raw link distances read from the
graph's distance matrix; destroyed links never appear as neighbours.
"""

from typing import Dict, Optional, Set, Tuple
import heapq
import math
import time

from algorithms import AlgorithmType, GraphAlgorithm
from graph import Graph
from routing import AlgorithmResult, Route, walk_parents


class SimpleDijkstraEngine(GraphAlgorithm):
    """
    Single-source Dijkstra using a binary heap with lazy deletion.

    Complexity:
        O((V + E) log V) over the nodes reachable from the source.

    The last_* counters describe the most recent call and are reset at the
    start of every call.
    """

    algorithm_type = AlgorithmType.DIJKSTRA
    name = "Dijkstra"

    def __init__(self) -> None:
        self._reset_counters()

    def _reset_counters(self) -> None:
        self.last_nodes_visited = 0
        self.last_edges_examined = 0
        self.last_relaxed = 0
        self.last_heap_pops = 0
        self.last_heap_pushes = 0

    def shortest_path_costs(self, graph: Graph, source: str) -> Dict[str, float]:
        """
        Compute only the cost map for all reachable nodes from source.
        """
        dist, _ = self.shortest_paths(graph, source)
        return dist

    def shortest_paths(
        self,
        graph: Graph,
        source: str,
        target: Optional[str] = None,
    ) -> Tuple[Dict[str, float], Dict[str, str]]:
        """
        Dijkstra variant that also records predecessors for path reconstruction.

        Returns the distance map (dest -> cost from source) and a predecessor
        map; unreachable nodes are absent from both, and the source has no
        predecessor. When target is given the search stops as soon as target
        is finalized, so other entries may be upper bounds only.
        """
        self._reset_counters()
        dist: Dict[str, float] = {source: 0.0}
        prev: Dict[str, str] = {}
        done: Set[str] = set()
        pq = [(0.0, source)]
        self.last_heap_pushes = 1

        while pq:
            d_u, u = heapq.heappop(pq)
            self.last_heap_pops += 1
            if u in done:
                continue
            done.add(u)
            self.last_nodes_visited += 1
            if u == target:
                break

            for neighbor in graph.neighbors(u):
                v = neighbor.id
                self.last_edges_examined += 1
                if v in done:
                    continue
                alt = d_u + graph.distance(u, v)
                if alt < dist.get(v, math.inf):
                    dist[v] = alt
                    prev[v] = u
                    heapq.heappush(pq, (alt, v))
                    self.last_heap_pushes += 1
                    self.last_relaxed += 1

        return dist, prev

    def run(self, graph: Graph, start_id: Optional[str], end_id: Optional[str]) -> AlgorithmResult:
        started = time.perf_counter()
        if (
            start_id is None
            or end_id is None
            or not graph.has_node(start_id)
            or not graph.has_node(end_id)
        ):
            return AlgorithmResult.failed(self.name, "Start or destination node not found")

        dist, prev = self.shortest_paths(graph, start_id, target=end_id)
        elapsed = (time.perf_counter() - started) * 1000.0

        if end_id not in dist:
            return AlgorithmResult.failed(
                self.name,
                f"No path between {graph.node(start_id).name} and {graph.node(end_id).name}",
                nodes_visited=self.last_nodes_visited,
                edges_examined=self.last_edges_examined,
                execution_time_ms=elapsed,
            )

        route = Route.from_path(
            graph,
            walk_parents(prev, end_id),
            dist[end_id],
            "Dijkstra",
            computation_time_ms=elapsed,
            optimal=True,
        )
        return AlgorithmResult.succeeded(
            self.name,
            main_route=route,
            nodes_visited=self.last_nodes_visited,
            edges_examined=self.last_edges_examined,
            execution_time_ms=elapsed,
            all_distances=dict(dist),
        )

    def routes_to_all(self, graph: Graph, source: str) -> Dict[str, Route]:
        """
        Shortest route from source to every reachable node (source included).

        Runs to exhaustion; unknown sources give an empty map.
        """
        if not graph.has_node(source):
            return {}
        started = time.perf_counter()
        dist, prev = self.shortest_paths(graph, source)
        elapsed = (time.perf_counter() - started) * 1000.0
        return {
            dest: Route.from_path(
                graph,
                walk_parents(prev, dest),
                cost,
                "Dijkstra",
                computation_time_ms=elapsed,
                optimal=True,
            )
            for dest, cost in dist.items()
        }
