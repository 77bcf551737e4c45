"""
Concrete rail graph with a dual representation.

RailGraph keeps two views of the network that must never diverge:

- a dense numpy distance matrix indexed by node insertion order
  (matrix[i][j] = raw distance of a live link, 0 on the diagonal, inf
  otherwise), used for O(1) distance lookups;
- an adjacency map node_id -> list of Connection, used for O(degree)
  neighbour iteration.

Each link is stored once. In an undirected graph the same Connection record
is referenced from both endpoints' adjacency lists and neighbour queries read
it in whichever direction is asked for. Connections report their own state
changes back to the graph, so destroying or repairing a link through any
handle patches the matrix before the next query.

The matrix is rebuilt from scratch whenever the node set changes and patched
in place for link state changes.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import math

import numpy as np

from connections import STANDARD, Connection
from graph import Graph
from nodes import Oblast


class RailGraph(Graph):
    """
    Mutable rail graph; all mutations keep matrix and adjacency in sync.
    """

    def __init__(self, directed: bool = False) -> None:
        self._directed = directed
        self._nodes: Dict[str, Oblast] = {}
        self._edges: List[Connection] = []
        self._adjacency: Dict[str, List[Connection]] = {}
        self._index: Dict[str, int] = {}
        self._matrix: np.ndarray = np.zeros((0, 0), dtype=float)
        self._version = 0

    # --- Mutation API ---------------------------------------------------------

    def add_node(self, node: Oblast) -> None:
        """Add node; a node whose id is already present is ignored."""
        if node.id in self._nodes:
            return
        self._nodes[node.id] = node
        self._adjacency[node.id] = []
        self._index[node.id] = len(self._index)
        self._rebuild_matrix()
        self._bump()

    def add_edge(
        self,
        from_id: str,
        to_id: str,
        distance: float,
        railway_type: str = STANDARD,
    ) -> Connection:
        """
        Link two existing nodes and return the new Connection.

        Raises ValueError for unknown endpoints, self-loops, non-positive
        distances or a pair that is already linked.
        """
        if from_id not in self._nodes or to_id not in self._nodes:
            missing = [n for n in (from_id, to_id) if n not in self._nodes]
            raise ValueError(f"Cannot link unknown node(s): {', '.join(missing)}")
        if from_id == to_id:
            raise ValueError(f"Self-loop on '{from_id}' is not allowed")
        if not distance > 0:
            raise ValueError(f"Distance must be positive, got {distance!r}")
        if self._find(from_id, to_id) is not None:
            raise ValueError(f"'{from_id}' and '{to_id}' are already linked")

        conn = Connection(from_id, to_id, distance, railway_type)
        self._insert(conn)
        return conn

    def remove_edge(self, from_id: str, to_id: str) -> bool:
        conn = self._find(from_id, to_id)
        if conn is None:
            return False
        self._edges = [c for c in self._edges if c is not conn]
        for endpoint in (conn.from_id, conn.to_id):
            links = self._adjacency.get(endpoint, [])
            links[:] = [c for c in links if c is not conn]
        conn._detach()
        self._patch(conn, live=False)
        self._bump()
        return True

    def remove_node(self, node_id: str) -> bool:
        """Remove node and cascade to every link touching it."""
        if node_id not in self._nodes:
            return False
        doomed = [c for c in self._edges if node_id in (c.from_id, c.to_id)]
        for conn in doomed:
            conn._detach()
        self._edges = [c for c in self._edges if node_id not in (c.from_id, c.to_id)]
        for links in self._adjacency.values():
            links[:] = [c for c in links if node_id not in (c.from_id, c.to_id)]
        del self._adjacency[node_id]
        del self._nodes[node_id]
        self._index = {nid: i for i, nid in enumerate(self._nodes)}
        self._rebuild_matrix()
        self._bump()
        return True

    def destroy_edge(self, from_id: str, to_id: str) -> bool:
        conn = self._find(from_id, to_id)
        if conn is None:
            return False
        conn.destroyed = True
        return True

    def destroy_node(self, node_id: str) -> bool:
        """Mark node destroyed and destroy every incident link."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.destroyed = True
        for conn in self._adjacency[node_id]:
            conn.destroyed = True
        # Incoming links of a directed graph are not in node_id's list.
        if self._directed:
            for conn in self._edges:
                if conn.to_id == node_id:
                    conn.destroyed = True
        self._bump()
        return True

    def repair_edge(self, from_id: str, to_id: str) -> bool:
        """Rebuild a link; refused while either endpoint oblast is destroyed."""
        conn = self._find(from_id, to_id)
        if conn is None or self._endpoint_destroyed(conn):
            return False
        conn.restore()
        return True

    def set_condition(self, from_id: str, to_id: str, condition: float) -> bool:
        conn = self._find(from_id, to_id)
        if conn is None or self._endpoint_destroyed(conn):
            return False
        conn.condition = condition
        return True

    def restore_baseline(self) -> None:
        """Every link at full condition, every node at full supply."""
        for conn in self._edges:
            conn.restore()
        for node in self._nodes.values():
            node.restore()
        self._rebuild_matrix()
        self._bump()

    # --- Graph interface ------------------------------------------------------

    def nodes(self) -> Iterable[Oblast]:
        return list(self._nodes.values())

    def node(self, node_id: str) -> Optional[Oblast]:
        return self._nodes.get(node_id)

    def edges(self) -> List[Connection]:
        return list(self._edges)

    def neighbors(self, node_id: str) -> List[Oblast]:
        return [self._nodes[other] for other, _ in self.neighbor_links(node_id)]

    def neighbor_links(self, node_id: str) -> List[Tuple[str, Connection]]:
        """Usable (neighbour_id, connection) pairs in adjacency-list order."""
        links = self._adjacency.get(node_id)
        if not links:
            return []
        return [(conn.other(node_id), conn) for conn in links if self.link_usable(conn)]

    def distance(self, from_id: str, to_id: str) -> float:
        i = self._index.get(from_id)
        j = self._index.get(to_id)
        if i is None or j is None:
            return math.inf
        return float(self._matrix[i, j])

    def connection(self, from_id: str, to_id: str) -> Optional[Connection]:
        return self._find(from_id, to_id)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    # --- Queries --------------------------------------------------------------

    @property
    def directed(self) -> bool:
        return self._directed

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    @property
    def version(self) -> int:
        """Bumped on every mutation; lets callers detect stale derived data."""
        return self._version

    def connections_of(self, node_id: str) -> List[Connection]:
        """All links in node_id's adjacency list, destroyed or not."""
        return list(self._adjacency.get(node_id, []))

    def degree(self, node_id: str) -> int:
        return len(self.neighbor_links(node_id))

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index.get(node_id)

    def matrix(self) -> np.ndarray:
        """Read-only view of the distance matrix."""
        view = self._matrix.view()
        view.flags.writeable = False
        return view

    def adjacency(self) -> Mapping[str, Tuple[Connection, ...]]:
        return {nid: tuple(links) for nid, links in self._adjacency.items()}

    def validate(self) -> bool:
        """True when the matrix matches a fresh rebuild from the edge records."""
        return bool(np.array_equal(self._matrix, self._build_matrix()))

    def clone(self) -> "RailGraph":
        """Deep copy: new node and connection objects with the same state."""
        return self.subgraph(self._nodes.keys())

    def subgraph(self, node_ids: Iterable[str]) -> "RailGraph":
        """Deep copy of the subgraph induced by node_ids (unknown ids skipped)."""
        keep = [nid for nid in node_ids if nid in self._nodes]
        copy = RailGraph(directed=self._directed)
        for nid in keep:
            copy.add_node(self._nodes[nid].copy())
        kept = set(keep)
        for conn in self._edges:
            if conn.from_id in kept and conn.to_id in kept:
                copy._insert(conn.copy())
        return copy

    def summary(self) -> str:
        destroyed_edges = sum(1 for c in self._edges if c.destroyed)
        destroyed_nodes = sum(1 for n in self._nodes.values() if n.destroyed)
        degrees = [len(links) for links in self._adjacency.values()]
        avg_degree = sum(degrees) / len(degrees) if degrees else 0.0
        return (
            f"Nodes: {self.node_count}\n"
            f"Destroyed nodes: {destroyed_nodes}\n"
            f"Connections: {self.edge_count}\n"
            f"Destroyed connections: {destroyed_edges}\n"
            f"Average degree: {avg_degree:.2f}\n"
            f"Type: {'directed' if self._directed else 'undirected'}\n"
        )

    def __repr__(self) -> str:
        return (
            f"RailGraph(nodes={self.node_count}, connections={self.edge_count}, "
            f"directed={self._directed})"
        )

    # --- Internal helpers -----------------------------------------------------

    def _insert(self, conn: Connection) -> None:
        self._edges.append(conn)
        self._adjacency[conn.from_id].append(conn)
        if not self._directed:
            self._adjacency[conn.to_id].append(conn)
        conn._attach(self._on_connection_changed)
        self._patch(conn)
        self._bump()

    def _find(self, from_id: str, to_id: str) -> Optional[Connection]:
        for conn in self._adjacency.get(from_id, []):
            if self._directed:
                if conn.from_id == from_id and conn.to_id == to_id:
                    return conn
            elif conn.connects(from_id, to_id):
                return conn
        return None

    def _endpoint_destroyed(self, conn: Connection) -> bool:
        return any(
            self._nodes[nid].destroyed for nid in (conn.from_id, conn.to_id) if nid in self._nodes
        )

    def _on_connection_changed(self, conn: Connection) -> None:
        self._patch(conn)
        self._bump()

    def _patch(self, conn: Connection, live: bool = True) -> None:
        i = self._index.get(conn.from_id)
        j = self._index.get(conn.to_id)
        if i is None or j is None:
            return
        weight = conn.distance if live and self.link_usable(conn) else math.inf
        self._matrix[i, j] = weight
        if not self._directed:
            self._matrix[j, i] = weight

    def _build_matrix(self) -> np.ndarray:
        n = len(self._index)
        matrix = np.full((n, n), math.inf, dtype=float)
        np.fill_diagonal(matrix, 0.0)
        for conn in self._edges:
            if not self.link_usable(conn):
                continue
            i = self._index[conn.from_id]
            j = self._index[conn.to_id]
            matrix[i, j] = conn.distance
            if not self._directed:
                matrix[j, i] = conn.distance
        return matrix

    def _rebuild_matrix(self) -> None:
        self._matrix = self._build_matrix()

    def _bump(self) -> None:
        self._version += 1
