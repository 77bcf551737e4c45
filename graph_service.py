"""
Session service owning the live rail graph.

GraphService dispatches algorithm runs through a closed registry, memoizes
their results, applies attrition and repairs, and derives network-level
statistics. All public operations hold one re-entrant lock, so cache
invalidation and matrix rebuilds are atomic with respect to other callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import math
import random
import threading

import numpy as np

from algorithms import AlgorithmType, GraphAlgorithm
from connections import Connection
from dijkstra_engine import SimpleDijkstraEngine
from network_config import NetworkConfig
from nodes import Oblast
from rail_graph import RailGraph
from routing import AlgorithmResult, Route
from simulation import simulate_war_damage
from spanning_tree import KruskalEngine, PrimEngine
from traversal import BreadthFirstSearch, DepthFirstSearch


@dataclass(frozen=True)
class CacheKey:
    """
    Memo key for one algorithm run.

    graph_version keeps results computed before a direct graph mutation
    (one that bypassed the service) from being served afterwards.
    """

    algorithm: AlgorithmType
    start_id: Optional[str]
    end_id: Optional[str]
    graph_version: int


@dataclass(frozen=True)
class NetworkStatistics:
    total_oblasts: int
    destroyed_oblasts: int
    frontline_oblasts: int
    total_connections: int
    destroyed_connections: int
    avg_supply_level: float
    connectivity: float
    total_distance: float
    main_hub: str

    def __str__(self) -> str:
        return (
            "Network statistics\n"
            f"Oblasts: {self.total_oblasts}\n"
            f"Destroyed oblasts: {self.destroyed_oblasts}\n"
            f"Frontline oblasts: {self.frontline_oblasts}\n"
            f"Connections: {self.total_connections}\n"
            f"Destroyed connections: {self.destroyed_connections}\n"
            f"Average supply level: {self.avg_supply_level:.1f}%\n"
            f"Connectivity: {self.connectivity:.1f}%\n"
            f"Total distance: {self.total_distance:.1f} km\n"
            f"Main hub: {self.main_hub}\n"
        )


SPANNING_TREE_TYPES = (AlgorithmType.KRUSKAL, AlgorithmType.PRIM)


def build_registry() -> Dict[AlgorithmType, GraphAlgorithm]:
    """One engine per AlgorithmType; raises if an enum member has none."""
    engines: List[GraphAlgorithm] = [
        BreadthFirstSearch(),
        DepthFirstSearch(),
        SimpleDijkstraEngine(),
        KruskalEngine(),
        PrimEngine(),
    ]
    registry = {engine.algorithm_type: engine for engine in engines}
    missing = [t.name for t in AlgorithmType if t not in registry]
    if missing:
        raise RuntimeError(f"No engine registered for: {', '.join(missing)}")
    return registry


class GraphService:
    def __init__(
        self,
        graph: Optional[RailGraph] = None,
        config: Optional[NetworkConfig] = None,
        graph_factory: Optional[Callable[[], RailGraph]] = None,
        rng: Optional[random.Random] = None,
        verbose: bool = False,
    ) -> None:
        self._config = config or NetworkConfig()
        self._graph_factory = graph_factory
        if graph is None:
            graph = graph_factory() if graph_factory is not None else RailGraph()
        self._graph = graph
        self._rng = rng or random.Random()
        self._verbose = verbose
        self._engines = build_registry()
        self._cache: Dict[CacheKey, AlgorithmResult] = {}
        self._lock = threading.RLock()

    # --- Graph ownership ------------------------------------------------------

    @property
    def graph(self) -> RailGraph:
        return self._graph

    @property
    def config(self) -> NetworkConfig:
        return self._config

    def set_graph(self, graph: RailGraph) -> None:
        with self._lock:
            self._graph = graph
            self.clear_cache()

    def snapshot(self) -> RailGraph:
        """Deep copy of the live graph, taken under the service lock."""
        with self._lock:
            return self._graph.clone()

    def reset_graph(self) -> None:
        """
        Fresh graph from the factory, or the current graph restored to
        baseline when the service was built without one.
        """
        with self._lock:
            if self._graph_factory is not None:
                self._graph = self._graph_factory()
            else:
                self._graph.restore_baseline()
            self.clear_cache()
            self._log(f"graph reset ({self._graph.node_count} oblasts)")

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # --- Algorithm execution --------------------------------------------------

    def engine(self, algorithm: AlgorithmType) -> GraphAlgorithm:
        return self._engines[algorithm]

    def execute_algorithm(
        self,
        algorithm: AlgorithmType,
        start_id: Optional[str],
        end_id: Optional[str],
        use_cache: bool = True,
    ) -> AlgorithmResult:
        """
        Run one algorithm on the live graph.

        use_cache=False always recomputes and leaves the cache untouched;
        benchmarks rely on that to time real runs.
        """
        with self._lock:
            key = CacheKey(algorithm, start_id, end_id, self._graph.version)
            if use_cache:
                cached = self._cache.get(key)
                if cached is not None:
                    return cached

            result = self._engines[algorithm].run(self._graph, start_id, end_id)
            if use_cache:
                self._cache[key] = result
            return result

    def execute_all_algorithms(
        self,
        start_id: Optional[str],
        end_id: Optional[str],
        use_cache: bool = True,
    ) -> Dict[AlgorithmType, AlgorithmResult]:
        with self._lock:
            return {
                algorithm: self.execute_algorithm(algorithm, start_id, end_id, use_cache=use_cache)
                for algorithm in AlgorithmType
            }

    def find_best_route(self, start_id: str, end_id: str) -> Optional[AlgorithmResult]:
        """
        Successful path-finding result with the shortest route, or None.

        Spanning-tree results are run (and cached) but not candidates: their
        total is the tree weight, not a start -> end distance.
        """
        with self._lock:
            best: Optional[AlgorithmResult] = None
            for algorithm, result in self.execute_all_algorithms(start_id, end_id).items():
                if algorithm in SPANNING_TREE_TYPES:
                    continue
                if not result.success or result.main_route is None:
                    continue
                if best is None or result.distance < best.distance:
                    best = result
            return best

    # --- Attrition ------------------------------------------------------------

    def simulate_attack(self, percent: float) -> List[Connection]:
        """Roll war damage on links touching the configured frontline."""
        with self._lock:
            destroyed = simulate_war_damage(
                self._graph, percent, self._config.frontline_ids, rng=self._rng
            )
            self.clear_cache()
            self._log(f"attack {percent:.0f}% destroyed {len(destroyed)} connection(s)")
            return destroyed

    def destroy_node(self, node_id: str) -> bool:
        with self._lock:
            done = self._graph.destroy_node(node_id)
            self.clear_cache()
            if done:
                self._log(f"destroyed oblast {node_id}")
            return done

    def destroy_edge(self, from_id: str, to_id: str) -> bool:
        with self._lock:
            done = self._graph.destroy_edge(from_id, to_id)
            self.clear_cache()
            if done:
                self._log(f"destroyed connection {from_id} - {to_id}")
            return done

    def repair_all(self) -> None:
        """Every link and oblast back to baseline."""
        with self._lock:
            self._graph.restore_baseline()
            self.clear_cache()
            self._log("network repaired")

    # --- Queries --------------------------------------------------------------

    def critical_nodes(self) -> List[Oblast]:
        """Oblasts with supply below the critical threshold, lowest first."""
        with self._lock:
            threshold = self._config.critical_supply
            critical = [n for n in self._graph.nodes() if n.supply_level < threshold]
            return sorted(critical, key=lambda n: n.supply_level)

    def safe_nodes(self) -> List[Oblast]:
        with self._lock:
            threshold = self._config.safe_supply
            return [
                n for n in self._graph.nodes()
                if not n.is_frontline and n.supply_level > threshold
            ]

    def frontline_nodes(self) -> List[Oblast]:
        with self._lock:
            return [n for n in self._graph.nodes() if n.is_frontline]

    def most_connected_hub(self) -> Optional[Oblast]:
        """Oblast with the most usable links; the first one wins ties."""
        with self._lock:
            best: Optional[Oblast] = None
            best_degree = -1
            for node in self._graph.nodes():
                degree = self._graph.degree(node.id)
                if degree > best_degree:
                    best, best_degree = node, degree
            return best

    def connectivity(self) -> float:
        """
        Links (destroyed ones included) as a percentage of all unordered
        pairs; 0 for graphs with fewer than two oblasts.
        """
        with self._lock:
            n = self._graph.node_count
            if n < 2:
                return 0.0
            possible = n * (n - 1) / 2
            return self._graph.edge_count / possible * 100.0

    def total_network_distance(self) -> float:
        with self._lock:
            return float(sum(conn.distance for conn in self._graph.edges()))

    def network_statistics(self) -> NetworkStatistics:
        with self._lock:
            nodes = list(self._graph.nodes())
            edges = self._graph.edges()
            supply = np.array([n.supply_level for n in nodes], dtype=float)
            hub = self.most_connected_hub()
            return NetworkStatistics(
                total_oblasts=len(nodes),
                destroyed_oblasts=sum(1 for n in nodes if n.destroyed),
                frontline_oblasts=sum(1 for n in nodes if n.is_frontline),
                total_connections=len(edges),
                destroyed_connections=sum(1 for c in edges if c.destroyed),
                avg_supply_level=float(supply.mean()) if supply.size else 0.0,
                connectivity=self.connectivity(),
                total_distance=self.total_network_distance(),
                main_hub=hub.name if hub is not None else "N/A",
            )

    # --- Supply route ---------------------------------------------------------

    def supply_route(self) -> AlgorithmResult:
        """
        Greedy nearest-neighbour tour from the main hub through the critical
        oblasts.

        At each step the next target is the unvisited critical oblast with
        the smallest direct (matrix) distance from the current stop; Dijkstra
        supplies the segment. The tour ends when no remaining critical oblast
        has a finite direct distance, and whatever is left is reported in
        metadata as unreached. This is a heuristic, not a shortest tour.
        """
        name = "Supply Route"
        with self._lock:
            critical = self.critical_nodes()
            if not critical:
                return AlgorithmResult.failed(name, "No critical oblasts found")

            hub = self.most_connected_hub()
            start_id = hub.id if hub is not None else self._config.default_hub
            if not self._graph.has_node(start_id):
                return AlgorithmResult.failed(name, f"Start node '{start_id}' not found")

            dijkstra = self._engines[AlgorithmType.DIJKSTRA]
            remaining = [n.id for n in critical if n.id != start_id]
            path_ids = [start_id]
            served: List[str] = []
            total = 0.0
            current = start_id

            while remaining:
                nearest = min(remaining, key=lambda nid: self._graph.distance(current, nid))
                if self._graph.distance(current, nearest) == math.inf:
                    break
                remaining.remove(nearest)
                segment = dijkstra.run(self._graph, current, nearest)
                if not segment.success:
                    continue
                path_ids.extend(segment.main_route.node_ids[1:])
                total += segment.main_route.total_distance
                served.append(nearest)
                current = nearest

            route = Route.from_path(self._graph, path_ids, total, "Supply Route Optimizer", optimal=False)
            self._log(f"supply route served {len(served)}/{len(critical)} critical oblast(s)")
            return AlgorithmResult.succeeded(
                name,
                main_route=route,
                nodes_visited=len(path_ids),
                critical_oblasts=len(critical),
                served=served,
                unreached=remaining,
            )

    def _log(self, message: str) -> None:
        if self._verbose:
            print(f"[service] {message}")
