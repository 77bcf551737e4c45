"""
Minimum spanning tree engines (Kruskal and Prim).

Both work on usable links only and weigh them by raw distance. On a
disconnected network the result is still a success: Kruskal returns a
spanning forest, Prim the tree of the start node's component, and the
metadata carries is_forest/components so callers can tell.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set
import heapq
import itertools
import time

from algorithms import AlgorithmType, GraphAlgorithm
from connections import STANDARD, Connection
from disjoint_set import DisjointSet
from graph import Graph
from rail_graph import RailGraph
from routing import AlgorithmResult, Route


@dataclass(frozen=True)
class SpanningEdge:
    """One accepted tree edge."""

    from_id: str
    to_id: str
    weight: float

    def __str__(self) -> str:
        return f"{self.from_id} - {self.to_id} ({self.weight:.1f} km)"


def usable_links(graph: Graph) -> List[Connection]:
    """Usable links, each unordered endpoint pair exactly once."""
    seen: Set[frozenset] = set()
    links: List[Connection] = []
    for conn in graph.edges():
        if not graph.link_usable(conn) or conn.endpoints in seen:
            continue
        seen.add(conn.endpoints)
        links.append(conn)
    return links


def count_components(graph: Graph) -> int:
    """Connected components over usable links (isolated nodes count)."""
    sets = DisjointSet(node.id for node in graph.nodes())
    for conn in usable_links(graph):
        sets.union(conn.from_id, conn.to_id)
    return sets.components


def _tree_route(
    graph: Graph,
    accepted: List[SpanningEdge],
    links: List[Connection],
    total: float,
    label: str,
    elapsed: float,
    seed: Optional[str] = None,
) -> Route:
    # Nodes in order of first appearance along the accepted edges.
    order: Dict[str, None] = {}
    if seed is not None:
        order[seed] = None
    for edge in accepted:
        order.setdefault(edge.from_id, None)
        order.setdefault(edge.to_id, None)
    return Route(
        path=tuple(graph.node(nid) for nid in order),
        total_distance=total,
        algorithm=label,
        connections=tuple(links),
        computation_time_ms=elapsed,
        optimal=True,
    )


class KruskalEngine(GraphAlgorithm):
    """
    Sort usable links by distance and accept those joining two components.

    start_id and end_id are ignored.
    """

    algorithm_type = AlgorithmType.KRUSKAL
    name = "Kruskal (MST)"

    def run(self, graph: Graph, start_id: Optional[str] = None, end_id: Optional[str] = None) -> AlgorithmResult:
        started = time.perf_counter()
        nodes = list(graph.nodes())
        if not nodes:
            return AlgorithmResult.failed(self.name, "Graph has no nodes")

        links = sorted(usable_links(graph), key=lambda c: c.distance)
        sets = DisjointSet(node.id for node in nodes)
        target = len(nodes) - 1

        accepted: List[SpanningEdge] = []
        accepted_links: List[Connection] = []
        total = 0.0
        examined = 0

        for conn in links:
            if len(accepted) >= target:
                break
            examined += 1
            if sets.union(conn.from_id, conn.to_id):
                accepted.append(SpanningEdge(conn.from_id, conn.to_id, conn.distance))
                accepted_links.append(conn)
                total += conn.distance

        elapsed = (time.perf_counter() - started) * 1000.0
        route = _tree_route(graph, accepted, accepted_links, total, "Kruskal", elapsed)
        return AlgorithmResult.succeeded(
            self.name,
            main_route=route,
            nodes_visited=len(nodes),
            edges_examined=examined,
            execution_time_ms=elapsed,
            mst_edges=accepted,
            total_weight=total,
            edges_count=len(accepted),
            components=sets.components,
            is_forest=sets.components > 1,
        )


class PrimEngine(GraphAlgorithm):
    """
    Grow a tree from start_id (or the first node) with a lazy min-heap of
    frontier links. end_id is ignored.
    """

    algorithm_type = AlgorithmType.PRIM
    name = "Prim (MST)"

    def run(self, graph: Graph, start_id: Optional[str] = None, end_id: Optional[str] = None) -> AlgorithmResult:
        started = time.perf_counter()
        nodes = list(graph.nodes())
        if not nodes:
            return AlgorithmResult.failed(self.name, "Graph has no nodes")
        if start_id is None:
            start_id = nodes[0].id
        elif not graph.has_node(start_id):
            return AlgorithmResult.failed(self.name, f"Start node '{start_id}' not found")

        seq = itertools.count()
        in_tree: Set[str] = {start_id}
        heap: list = []
        examined = 0

        def push_frontier(node_id: str) -> None:
            for neighbor in graph.neighbors(node_id):
                if neighbor.id not in in_tree:
                    weight = graph.distance(node_id, neighbor.id)
                    heapq.heappush(heap, (weight, next(seq), node_id, neighbor.id))

        push_frontier(start_id)
        accepted: List[SpanningEdge] = []
        accepted_links: List[Connection] = []
        total = 0.0

        while heap and len(in_tree) < len(nodes):
            weight, _, from_id, to_id = heapq.heappop(heap)
            examined += 1
            if to_id in in_tree:
                continue
            in_tree.add(to_id)
            accepted.append(SpanningEdge(from_id, to_id, weight))
            conn = graph.connection(from_id, to_id)
            if conn is not None:
                accepted_links.append(conn)
            total += weight
            push_frontier(to_id)

        elapsed = (time.perf_counter() - started) * 1000.0
        route = _tree_route(graph, accepted, accepted_links, total, "Prim", elapsed, seed=start_id)
        return AlgorithmResult.succeeded(
            self.name,
            main_route=route,
            nodes_visited=len(in_tree),
            edges_examined=examined,
            execution_time_ms=elapsed,
            mst_edges=accepted,
            total_weight=total,
            edges_count=len(accepted),
            components=count_components(graph),
            is_forest=len(in_tree) < len(nodes),
            start_node=start_id,
        )


def mst_graph(graph: Graph, edges: Iterable[SpanningEdge]) -> RailGraph:
    """
    Materialize spanning-tree edges as a new RailGraph over copies of all
    of graph's nodes.
    """
    tree = RailGraph()
    for node in graph.nodes():
        tree.add_node(node.copy())
    for edge in edges:
        source = graph.connection(edge.from_id, edge.to_id)
        rail_type = source.railway_type if source is not None else STANDARD
        tree.add_edge(edge.from_id, edge.to_id, edge.weight, rail_type)
    return tree
