"""
Read-only graph abstraction for the rail network.

Nodes are Oblast instances keyed by string id.
Edges are Connection records; neighbour queries only report usable links.
Algorithms depend on this interface, never on a concrete graph.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from connections import Connection
from nodes import Oblast


class Graph(ABC):
    """Weighted rail graph over Oblast nodes."""

    @abstractmethod
    def nodes(self) -> Iterable[Oblast]:
        """Return all nodes in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def node(self, node_id: str) -> Optional[Oblast]:
        """Return the node with this id, or None."""
        raise NotImplementedError

    @abstractmethod
    def edges(self) -> List[Connection]:
        """Return every connection exactly once."""
        raise NotImplementedError

    @abstractmethod
    def neighbors(self, node_id: str) -> List[Oblast]:
        """
        Nodes reachable from node_id over a usable (non-destroyed) link,
        in adjacency-list order.
        """
        raise NotImplementedError

    @abstractmethod
    def distance(self, from_id: str, to_id: str) -> float:
        """
        Raw distance of the live link from_id -> to_id.

        Returns 0 for from_id == to_id and math.inf when no live link exists.
        """
        raise NotImplementedError

    @abstractmethod
    def connection(self, from_id: str, to_id: str) -> Optional[Connection]:
        """Return the connection joining the two nodes, destroyed or not."""
        raise NotImplementedError

    @property
    @abstractmethod
    def node_count(self) -> int:
        raise NotImplementedError

    def has_node(self, node_id: str) -> bool:
        return self.node(node_id) is not None

    def has_edge(self, from_id: str, to_id: str) -> bool:
        if from_id == to_id:
            return False
        return self.distance(from_id, to_id) != float("inf")

    def link_usable(self, conn: Connection) -> bool:
        """Link is intact and neither endpoint oblast is destroyed."""
        if not conn.is_usable:
            return False
        for nid in (conn.from_id, conn.to_id):
            node = self.node(nid)
            if node is not None and node.destroyed:
                return False
        return True
