"""
Rail link (edge) entity.

A Connection is an undirected weighted link between two oblasts, identified
by node id. Its identity is direction-insensitive: A-B equals B-A.

Condition and destroyed state are coupled: destroyed <=> condition == 0.
When a connection belongs to a graph, every state change is reported to
that graph through the watcher callback so the distance matrix never lags
behind the edge records.
"""

from typing import Callable, Optional
import math


STANDARD = "STANDARD"
ELECTRIFIED = "ELECTRIFIED"
HIGH_SPEED = "HIGH_SPEED"


def _clamp_condition(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


class Connection:
    """
    Rail link between two oblasts with a destructible condition.
    """

    def __init__(
        self,
        from_id: str,
        to_id: str,
        distance: float,
        railway_type: str = STANDARD,
    ) -> None:
        self._from_id = from_id
        self._to_id = to_id
        self._distance = float(distance)
        self.railway_type = railway_type
        self._destroyed = False
        self._condition = 100.0
        self._watcher: Optional[Callable[["Connection"], None]] = None

    # --- Identity -------------------------------------------------------------

    @property
    def from_id(self) -> str:
        return self._from_id

    @property
    def to_id(self) -> str:
        return self._to_id

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def endpoints(self) -> frozenset:
        return frozenset((self._from_id, self._to_id))

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite node_id."""
        if node_id == self._from_id:
            return self._to_id
        if node_id == self._to_id:
            return self._from_id
        raise ValueError(f"Node '{node_id}' is not an endpoint of {self!r}")

    def connects(self, a: str, b: str) -> bool:
        return {a, b} == {self._from_id, self._to_id}

    # --- Operational state ----------------------------------------------------

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @destroyed.setter
    def destroyed(self, value: bool) -> None:
        if value:
            self._destroyed = True
            self._condition = 0.0
        else:
            self._destroyed = False
            if self._condition == 0.0:
                self._condition = 100.0
        self._notify()

    @property
    def condition(self) -> float:
        return self._condition

    @condition.setter
    def condition(self, value: float) -> None:
        self._condition = _clamp_condition(value)
        self._destroyed = self._condition == 0.0
        self._notify()

    @property
    def is_usable(self) -> bool:
        return not self._destroyed and self._condition > 0

    def damage(self, percent: float) -> None:
        self.condition = self._condition - percent

    def repair(self, percent: float) -> None:
        # Destroyed links need a full rebuild (destroyed = False), not a patch.
        if not self._destroyed:
            self.condition = self._condition + percent

    def restore(self) -> None:
        self._destroyed = False
        self._condition = 100.0
        self._notify()

    @property
    def effective_weight(self) -> float:
        """
        Distance scaled up by poor condition; infinite when destroyed.

        Informational only: routing and spanning-tree algorithms use the raw
        distance of usable links.
        """
        if self._destroyed:
            return math.inf
        return self._distance * (100.0 / max(1.0, self._condition))

    # --- Graph wiring ---------------------------------------------------------

    def _attach(self, watcher: Callable[["Connection"], None]) -> None:
        self._watcher = watcher

    def _detach(self) -> None:
        self._watcher = None

    def _notify(self) -> None:
        if self._watcher is not None:
            self._watcher(self)

    def copy(self) -> "Connection":
        """Detached copy carrying the same condition."""
        twin = Connection(self._from_id, self._to_id, self._distance, self.railway_type)
        twin._destroyed = self._destroyed
        twin._condition = self._condition
        return twin

    def detailed_string(self) -> str:
        return (
            "Connection:\n"
            f"From: {self._from_id}\n"
            f"To: {self._to_id}\n"
            f"Distance: {self._distance:.2f} km\n"
            f"Type: {self.railway_type}\n"
            f"Condition: {self._condition:.1f}%\n"
            f"Status: {'DESTROYED' if self._destroyed else 'OPERATIONAL'}\n"
            f"Effective Weight: {self.effective_weight:.2f}\n"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self.endpoints == other.endpoints

    def __hash__(self) -> int:
        return hash(self.endpoints)

    def __repr__(self) -> str:
        state = "DESTROYED" if self._destroyed else "OK"
        return (
            f"Connection({self._from_id} -> {self._to_id}, {self._distance:.1f}km, "
            f"{state}, {self._condition:.0f}%)"
        )
