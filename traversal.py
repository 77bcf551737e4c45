"""
Breadth-first and depth-first traversal over the rail graph.

Both record, for every node, the parent it was discovered from and the
cumulative distance along the discovery edges. Neither route is guaranteed
shortest by distance (BFS is shortest by hop count only), so optimal=False.
"""

from collections import deque
from typing import Dict, Iterator, List, Optional, Set, Tuple
import time

from algorithms import AlgorithmType, GraphAlgorithm
from graph import Graph
from nodes import Oblast
from routing import AlgorithmResult, Route, walk_parents


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def _missing_endpoint(graph: Graph, start_id: Optional[str], end_id: Optional[str]) -> bool:
    return (
        start_id is None
        or end_id is None
        or not graph.has_node(start_id)
        or not graph.has_node(end_id)
    )


def _no_path_message(graph: Graph, start_id: str, end_id: str) -> str:
    return f"No path between {graph.node(start_id).name} and {graph.node(end_id).name}"


class BreadthFirstSearch(GraphAlgorithm):
    """
    FIFO frontier expansion; stops as soon as the target is dequeued.
    """

    algorithm_type = AlgorithmType.BFS
    name = "BFS (Breadth-First Search)"

    def run(self, graph: Graph, start_id: Optional[str], end_id: Optional[str]) -> AlgorithmResult:
        started = time.perf_counter()
        if _missing_endpoint(graph, start_id, end_id):
            return AlgorithmResult.failed(self.name, "Start or destination node not found")

        queue = deque([start_id])
        visited: Set[str] = {start_id}
        order: List[str] = [start_id]
        parent: Dict[str, Optional[str]] = {start_id: None}
        dist: Dict[str, float] = {start_id: 0.0}

        nodes_visited = 0
        edges_examined = 0
        found = False

        while queue:
            current = queue.popleft()
            nodes_visited += 1
            if current == end_id:
                found = True
                break

            for neighbor in graph.neighbors(current):
                edges_examined += 1
                nid = neighbor.id
                if nid in visited:
                    continue
                visited.add(nid)
                order.append(nid)
                parent[nid] = current
                dist[nid] = dist[current] + graph.distance(current, nid)
                queue.append(nid)

        elapsed = _elapsed_ms(started)
        if not found:
            return AlgorithmResult.failed(
                self.name,
                _no_path_message(graph, start_id, end_id),
                nodes_visited=nodes_visited,
                edges_examined=edges_examined,
                execution_time_ms=elapsed,
            )

        route = Route.from_path(
            graph,
            walk_parents(parent, end_id),
            dist[end_id],
            "BFS",
            computation_time_ms=elapsed,
            optimal=False,
        )
        return AlgorithmResult.succeeded(
            self.name,
            main_route=route,
            nodes_visited=nodes_visited,
            edges_examined=edges_examined,
            execution_time_ms=elapsed,
            visited_order=order,
        )

    def full_traversal(self, graph: Graph, start_id: str) -> AlgorithmResult:
        """
        Visit everything reachable from start_id.

        Used to test connectivity: metadata holds visit_order and
        total_reachable; there is no route.
        """
        started = time.perf_counter()
        name = "BFS Full Traversal"
        if not graph.has_node(start_id):
            return AlgorithmResult.failed(name, f"Start node '{start_id}' not found")

        queue = deque([start_id])
        visited: Set[str] = {start_id}
        order: List[str] = []
        edges_examined = 0

        while queue:
            current = queue.popleft()
            order.append(current)
            for neighbor in graph.neighbors(current):
                edges_examined += 1
                if neighbor.id not in visited:
                    visited.add(neighbor.id)
                    queue.append(neighbor.id)

        return AlgorithmResult.succeeded(
            name,
            nodes_visited=len(order),
            edges_examined=edges_examined,
            execution_time_ms=_elapsed_ms(started),
            visit_order=order,
            total_reachable=len(visited),
        )


class DepthFirstSearch(GraphAlgorithm):
    """
    Depth-first search in two flavours.

    run() descends through neighbours in adjacency-list order and returns on
    the first path found. It keeps one frame per level instead of recursing,
    so long chains do not hit the interpreter's recursion limit.
    run_iterative() pushes whole neighbour lists onto a stack, so neighbours
    are explored in reverse order and the two can disagree on the path for
    the same query.
    """

    algorithm_type = AlgorithmType.DFS
    name = "DFS (Depth-First Search)"

    def run(self, graph: Graph, start_id: Optional[str], end_id: Optional[str]) -> AlgorithmResult:
        started = time.perf_counter()
        if _missing_endpoint(graph, start_id, end_id):
            return AlgorithmResult.failed(self.name, "Start or destination node not found")

        visited: Set[str] = {start_id}
        order: List[str] = [start_id]
        parent: Dict[str, Optional[str]] = {start_id: None}
        dist: Dict[str, float] = {start_id: 0.0}
        nodes_visited = 1
        edges_examined = 0
        found = start_id == end_id

        # One (node, pending neighbours) frame per level of the descent.
        frames: List[Tuple[str, Iterator[Oblast]]] = [(start_id, iter(graph.neighbors(start_id)))]
        while frames and not found:
            current, pending = frames[-1]
            neighbor = next(pending, None)
            if neighbor is None:
                frames.pop()
                continue
            edges_examined += 1
            nid = neighbor.id
            if nid in visited:
                continue
            parent[nid] = current
            dist[nid] = dist[current] + graph.distance(current, nid)
            visited.add(nid)
            order.append(nid)
            nodes_visited += 1
            if nid == end_id:
                found = True
            else:
                frames.append((nid, iter(graph.neighbors(nid))))

        elapsed = _elapsed_ms(started)
        return self._finish(graph, self.name, "DFS", found, start_id, end_id, parent, dist,
                            nodes_visited, edges_examined, elapsed, order)

    def run_iterative(self, graph: Graph, start_id: Optional[str], end_id: Optional[str]) -> AlgorithmResult:
        started = time.perf_counter()
        name = "DFS (Iterative)"
        if _missing_endpoint(graph, start_id, end_id):
            return AlgorithmResult.failed(name, "Start or destination node not found")

        stack: List[str] = [start_id]
        visited: Set[str] = set()
        order: List[str] = []
        parent: Dict[str, Optional[str]] = {start_id: None}
        dist: Dict[str, float] = {start_id: 0.0}

        nodes_visited = 0
        edges_examined = 0
        found = False

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            nodes_visited += 1
            if current == end_id:
                found = True
                break

            for neighbor in graph.neighbors(current):
                edges_examined += 1
                nid = neighbor.id
                if nid in visited:
                    continue
                # Latest push wins: the node is popped from its last pusher.
                parent[nid] = current
                dist[nid] = dist[current] + graph.distance(current, nid)
                stack.append(nid)

        elapsed = _elapsed_ms(started)
        return self._finish(graph, name, "DFS Iterative", found, start_id, end_id, parent, dist,
                            nodes_visited, edges_examined, elapsed, order)

    @staticmethod
    def _finish(
        graph: Graph,
        name: str,
        label: str,
        found: bool,
        start_id: str,
        end_id: str,
        parent: Dict[str, Optional[str]],
        dist: Dict[str, float],
        nodes_visited: int,
        edges_examined: int,
        elapsed: float,
        order: List[str],
    ) -> AlgorithmResult:
        if not found:
            return AlgorithmResult.failed(
                name,
                _no_path_message(graph, start_id, end_id),
                nodes_visited=nodes_visited,
                edges_examined=edges_examined,
                execution_time_ms=elapsed,
            )
        route = Route.from_path(
            graph,
            walk_parents(parent, end_id),
            dist[end_id],
            label,
            computation_time_ms=elapsed,
            optimal=False,
        )
        return AlgorithmResult.succeeded(
            name,
            main_route=route,
            nodes_visited=nodes_visited,
            edges_examined=edges_examined,
            execution_time_ms=elapsed,
            visited_order=order,
        )
