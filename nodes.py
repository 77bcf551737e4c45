"""
Node abstraction for the rail network.

Oblast is the concrete region node. Its identity (id, name, coordinates,
population, region, frontline flag) is fixed at creation; its operational
state (destroyed flag, supply level, status) is mutated by simulations.
"""

from abc import ABC, abstractmethod
from enum import Enum

from geo import great_circle_km


class Node(ABC):
    """Abstract node in the rail network."""

    @property
    @abstractmethod
    def id(self) -> str:
        """
        Stable identifier, unique within a graph.
        """
        raise NotImplementedError


class NodeStatus(Enum):
    OPERATIONAL = "OPERATIONAL"
    MODERATE = "MODERATE"
    LOW = "LOW"
    CRITICAL = "CRITICAL"
    DESTROYED = "DESTROYED"


# Supply-level thresholds, checked in order (level < bound -> status).
STATUS_THRESHOLDS = (
    (20, NodeStatus.CRITICAL),
    (50, NodeStatus.LOW),
    (80, NodeStatus.MODERATE),
)


def _clamp_supply(level: int) -> int:
    return max(0, min(100, int(level)))


class Oblast(Node):
    """
    Region vertex of the rail network.

    Invariant: a destroyed oblast always has supply level 0 and status
    DESTROYED. Supply changes while destroyed keep the level at 0.
    """

    def __init__(
        self,
        oblast_id: str,
        name: str,
        latitude: float,
        longitude: float,
        is_frontline: bool = False,
        population: int = 0,
        region: str = "Unknown",
    ) -> None:
        self._id = oblast_id
        self.name = name
        self.latitude = latitude
        self.longitude = longitude
        self._is_frontline = is_frontline
        self.population = population
        self.region = region

        self._destroyed = False
        self._supply_level = 100
        self._status = NodeStatus.OPERATIONAL

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_frontline(self) -> bool:
        return self._is_frontline

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @destroyed.setter
    def destroyed(self, value: bool) -> None:
        self._destroyed = bool(value)
        if self._destroyed:
            self._supply_level = 0
        self._update_status()

    @property
    def supply_level(self) -> int:
        return self._supply_level

    @supply_level.setter
    def supply_level(self, level: int) -> None:
        self._supply_level = 0 if self._destroyed else _clamp_supply(level)
        self._update_status()

    @property
    def status(self) -> NodeStatus:
        return self._status

    def decrease_supply(self, amount: int) -> None:
        self.supply_level = self._supply_level - amount

    def increase_supply(self, amount: int) -> None:
        self.supply_level = self._supply_level + amount

    def restore(self) -> None:
        """Back to baseline: not destroyed, full supply."""
        self._destroyed = False
        self.supply_level = 100

    def _update_status(self) -> None:
        if self._destroyed:
            self._status = NodeStatus.DESTROYED
            return
        for bound, status in STATUS_THRESHOLDS:
            if self._supply_level < bound:
                self._status = status
                return
        self._status = NodeStatus.OPERATIONAL

    def distance_to(self, other: "Oblast") -> float:
        """Great-circle distance to another oblast in km."""
        return great_circle_km(self.latitude, self.longitude, other.latitude, other.longitude)

    def copy(self) -> "Oblast":
        """Independent copy carrying the same operational state."""
        twin = Oblast(
            self._id,
            self.name,
            self.latitude,
            self.longitude,
            is_frontline=self._is_frontline,
            population=self.population,
            region=self.region,
        )
        twin._destroyed = self._destroyed
        twin._supply_level = self._supply_level
        twin._status = self._status
        return twin

    def detailed_string(self) -> str:
        return (
            f"Oblast: {self.name} ({self._id})\n"
            f"Coordinates: ({self.latitude:.4f}, {self.longitude:.4f})\n"
            f"Population: {self.population:,}\n"
            f"Region: {self.region}\n"
            f"Frontline: {'Yes' if self._is_frontline else 'No'}\n"
            f"Status: {self._status.value}\n"
            f"Supply Level: {self._supply_level}%\n"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Oblast):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Oblast(id={self._id!r}, name={self.name!r}, "
            f"status={self._status.value}, supply={self._supply_level}%)"
        )
