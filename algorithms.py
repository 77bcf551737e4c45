"""
Algorithm interfaces for the rail network.

Keeps graph algorithms separate from the service layer: each AlgorithmType
has exactly one GraphAlgorithm implementation, and the service dispatches
through a registry keyed by the enum.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from graph import Graph
from routing import AlgorithmResult


class AlgorithmType(Enum):
    """
    The five supported algorithms.

    BFS/DFS: traversal, route not shortest by distance.
    DIJKSTRA: exact single-source shortest path.
    KRUSKAL/PRIM: minimum spanning tree (ignore the destination).
    """

    BFS = "bfs"
    DFS = "dfs"
    DIJKSTRA = "dijkstra"
    KRUSKAL = "kruskal"
    PRIM = "prim"

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]

    @property
    def is_optimal(self) -> bool:
        return self in (AlgorithmType.DIJKSTRA, AlgorithmType.KRUSKAL, AlgorithmType.PRIM)

    @property
    def category(self) -> str:
        if self in (AlgorithmType.BFS, AlgorithmType.DFS):
            return "Search/Traversal"
        if self is AlgorithmType.DIJKSTRA:
            return "Shortest Path"
        return "Minimum Spanning Tree"

    @property
    def complexity(self) -> str:
        return _COMPLEXITY[self]


_FULL_NAMES = {
    AlgorithmType.BFS: "Breadth-First Search",
    AlgorithmType.DFS: "Depth-First Search",
    AlgorithmType.DIJKSTRA: "Dijkstra",
    AlgorithmType.KRUSKAL: "Kruskal",
    AlgorithmType.PRIM: "Prim",
}

_COMPLEXITY = {
    AlgorithmType.BFS: "O(V + E)",
    AlgorithmType.DFS: "O(V + E)",
    AlgorithmType.DIJKSTRA: "O((V + E) log V)",
    AlgorithmType.KRUSKAL: "O(E log E)",
    AlgorithmType.PRIM: "O((V + E) log V)",
}


class GraphAlgorithm(ABC):
    """
    Interface for one routing/spanning algorithm over a graph snapshot.

    Implementations never raise for unknown or unreachable nodes; they
    return a failed AlgorithmResult carrying whatever counters they gathered.
    """

    algorithm_type: AlgorithmType

    @abstractmethod
    def run(
        self,
        graph: Graph,
        start_id: Optional[str],
        end_id: Optional[str],
    ) -> AlgorithmResult:
        """
        Execute the algorithm for one query.

        Args:
            graph: graph snapshot to read.
            start_id: origin node id (ignored by Kruskal, optional for Prim).
            end_id: destination node id (ignored by spanning-tree algorithms).
        """
        raise NotImplementedError
