"""
Union-find over node ids, used by Kruskal to reject cycle-forming links.
"""

from typing import Dict, Iterable


class DisjointSet:
    """
    Disjoint-set forest with path compression and union by rank.
    """

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._parent: Dict[str, str] = {}
        self._rank: Dict[str, int] = {}
        self._components = 0
        for item in items:
            self.add(item)

    def add(self, item: str) -> None:
        if item in self._parent:
            return
        self._parent[item] = item
        self._rank[item] = 0
        self._components += 1

    def find(self, item: str) -> str:
        """Root of item's set; raises KeyError for unknown items."""
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # Second pass points every node on the walk straight at the root.
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: str, b: str) -> bool:
        """
        Merge the sets holding a and b.

        Returns False when they were already in the same set.
        """
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return False

        rank_a = self._rank[root_a]
        rank_b = self._rank[root_b]
        if rank_a < rank_b:
            self._parent[root_a] = root_b
        elif rank_a > rank_b:
            self._parent[root_b] = root_a
        else:
            self._parent[root_b] = root_a
            self._rank[root_a] = rank_a + 1
        self._components -= 1
        return True

    def connected(self, a: str, b: str) -> bool:
        return self.find(a) == self.find(b)

    @property
    def components(self) -> int:
        return self._components

    def __contains__(self, item: object) -> bool:
        return item in self._parent

    def __len__(self) -> int:
        return len(self._parent)
