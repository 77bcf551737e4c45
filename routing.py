"""
Result value objects for routing queries.

Route is one concrete path through the network; AlgorithmResult wraps the
outcome of a single algorithm run (route(s), counters, timing, metadata).
Both are frozen: they are created once per query and never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
import math

from connections import Connection
from nodes import Oblast


def walk_parents(parents: Mapping[str, Optional[str]], dest: str) -> List[str]:
    """
    Rebuild source -> dest from a predecessor map.

    The source is the node whose parent is None (or which has no entry).
    """
    path: List[str] = []
    step: Optional[str] = dest
    while step is not None:
        path.append(step)
        step = parents.get(step)
    path.reverse()
    return path


@dataclass(frozen=True)
class Route:
    """
    Ordered path of oblasts plus the links traversed, when known.

    optimal is True only for Dijkstra, Kruskal and Prim outputs.
    """

    path: Tuple[Oblast, ...]
    total_distance: float
    algorithm: str = "UNKNOWN"
    connections: Tuple[Connection, ...] = ()
    computation_time_ms: float = 0.0
    optimal: bool = False

    @classmethod
    def from_path(
        cls,
        graph,
        node_ids: Sequence[str],
        total_distance: float,
        algorithm: str,
        computation_time_ms: float = 0.0,
        optimal: bool = False,
    ) -> "Route":
        """
        Build a route from node ids, resolving nodes and links against graph.

        Consecutive pairs without a connection contribute no link.
        """
        path = tuple(graph.node(nid) for nid in node_ids)
        links = []
        for a, b in zip(node_ids, node_ids[1:]):
            conn = graph.connection(a, b)
            if conn is not None:
                links.append(conn)
        return cls(
            path=path,
            total_distance=total_distance,
            algorithm=algorithm,
            connections=tuple(links),
            computation_time_ms=computation_time_ms,
            optimal=optimal,
        )

    @property
    def start(self) -> Optional[Oblast]:
        return self.path[0] if self.path else None

    @property
    def end(self) -> Optional[Oblast]:
        return self.path[-1] if self.path else None

    @property
    def step_count(self) -> int:
        return len(self.path)

    @property
    def hop_count(self) -> int:
        return max(0, len(self.path) - 1)

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.path]

    def passes_through(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.path)

    def is_valid(self, graph) -> bool:
        """True when every consecutive pair is joined by a live link in graph."""
        ids = self.node_ids
        return all(graph.has_edge(a, b) for a, b in zip(ids, ids[1:]))

    def path_string(self) -> str:
        return " → ".join(node.name for node in self.path)

    def path_ids(self) -> str:
        return " → ".join(self.node_ids)

    def detailed_description(self) -> str:
        lines = [
            f"Algorithm: {self.algorithm}",
            f"Total distance: {self.total_distance:.2f} km",
            f"Stops: {self.step_count}",
            f"Computation time: {self.computation_time_ms:.3f} ms",
            f"Optimal: {'yes' if self.optimal else 'no'}",
            "",
            "Path:",
        ]
        for i, node in enumerate(self.path):
            lines.append(f"{i + 1}. {node.name} ({node.id})")
            if i < len(self.path) - 1:
                lines.append(f"   ↓ {node.distance_to(self.path[i + 1]):.2f} km")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        origin = self.start.name if self.start else "?"
        return f"Route({origin}, {self.total_distance:.1f}km, {self.step_count} stops, {self.algorithm})"


@dataclass(frozen=True)
class AlgorithmResult:
    """
    Outcome of one algorithm run.

    Failures (unknown nodes, unreachable target) are carried here with
    success=False and an error message; counters are kept for diagnostics.
    """

    algorithm_name: str
    success: bool = True
    error_message: Optional[str] = None
    main_route: Optional[Route] = None
    alternative_routes: Tuple[Route, ...] = ()
    nodes_visited: int = 0
    edges_examined: int = 0
    execution_time_ms: float = 0.0
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        object.__setattr__(self, "alternative_routes", tuple(self.alternative_routes))

    @classmethod
    def succeeded(
        cls,
        algorithm_name: str,
        main_route: Optional[Route] = None,
        nodes_visited: int = 0,
        edges_examined: int = 0,
        execution_time_ms: float = 0.0,
        alternative_routes: Iterable[Route] = (),
        **metadata: Any,
    ) -> "AlgorithmResult":
        return cls(
            algorithm_name=algorithm_name,
            main_route=main_route,
            alternative_routes=tuple(alternative_routes),
            nodes_visited=nodes_visited,
            edges_examined=edges_examined,
            execution_time_ms=execution_time_ms,
            metadata=metadata,
        )

    @classmethod
    def failed(
        cls,
        algorithm_name: str,
        error_message: str,
        nodes_visited: int = 0,
        edges_examined: int = 0,
        execution_time_ms: float = 0.0,
        **metadata: Any,
    ) -> "AlgorithmResult":
        return cls(
            algorithm_name=algorithm_name,
            success=False,
            error_message=error_message,
            nodes_visited=nodes_visited,
            edges_examined=edges_examined,
            execution_time_ms=execution_time_ms,
            metadata=metadata,
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    @property
    def distance(self) -> float:
        """Main route distance, inf when there is no route."""
        return self.main_route.total_distance if self.main_route else math.inf

    @property
    def efficiency(self) -> float:
        """Nodes visited per millisecond."""
        if self.execution_time_ms <= 0:
            return math.inf
        return self.nodes_visited / self.execution_time_ms

    def best_route(self) -> Optional[Route]:
        """Shortest of the main and alternative routes."""
        if self.main_route is None:
            return None
        best = self.main_route
        for alt in self.alternative_routes:
            if alt.total_distance < best.total_distance:
                best = alt
        return best

    def all_routes_sorted(self) -> List[Route]:
        routes = [self.main_route] if self.main_route else []
        routes.extend(self.alternative_routes)
        return sorted(routes, key=lambda r: r.total_distance)

    def full_report(self) -> str:
        lines = [f"Algorithm: {self.algorithm_name}"]
        if not self.success:
            lines.append("Status: FAILED")
            lines.append(f"Error: {self.error_message}")
            return "\n".join(lines) + "\n"

        lines.extend(
            [
                "Status: OK",
                f"Execution time: {self.execution_time_ms:.3f} ms",
                f"Nodes visited: {self.nodes_visited}",
                f"Edges examined: {self.edges_examined}",
            ]
        )
        route = self.main_route
        if route is not None and route.path:
            lines.extend(
                [
                    f"Total distance: {route.total_distance:.2f} km",
                    f"Stops: {route.step_count}",
                    f"Origin: {route.start.name}",
                    f"Destination: {route.end.name}",
                ]
            )
        if self.alternative_routes:
            lines.append(f"Alternative routes: {len(self.alternative_routes)}")
        return "\n".join(lines) + "\n"

    def compare_with(self, other: "AlgorithmResult") -> str:
        lines = [
            f"{self.algorithm_name} vs {other.algorithm_name}",
            f"Time: {self.execution_time_ms:.3f} ms | {other.execution_time_ms:.3f} ms",
            f"Nodes visited: {self.nodes_visited} | {other.nodes_visited}",
        ]
        if self.main_route and other.main_route:
            lines.append(
                f"Distance: {self.main_route.total_distance:.2f} km | "
                f"{other.main_route.total_distance:.2f} km"
            )
        if self.execution_time_ms < other.execution_time_ms:
            winner = f"{self.algorithm_name} (faster)"
        elif self.execution_time_ms > other.execution_time_ms:
            winner = f"{other.algorithm_name} (faster)"
        else:
            winner = "tie"
        lines.append(f"Winner: {winner}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return (
            f"AlgorithmResult({self.algorithm_name}, success={self.success}, "
            f"time={self.execution_time_ms:.3f}ms, nodes={self.nodes_visited})"
        )
