"""
Scenario configuration for the rail network.

Holds the fixed node sets the services reason about (frontline, safe rear,
logistics hubs) and the constants of the supply and cost models. Defaults
describe the built-in Ukraine scenario; a YAML file can override any of
them and may also carry the network itself under a `network:` key.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from rail_graph import RailGraph
from topology_builder import build_rail_graph


DEFAULT_FRONTLINE = ("donetsk", "luhansk", "zaporizhzhia", "kherson")
DEFAULT_SAFE = (
    "lviv",
    "ivano-frankivsk",
    "ternopil",
    "volyn",
    "zakarpattia",
    "chernivtsi",
    "rivne",
    "khmelnytskyi",
)
DEFAULT_HUBS = ("kyiv", "lviv", "dnipropetrovsk", "kharkiv", "odesa")


@dataclass(frozen=True)
class NetworkConfig:
    frontline_ids: Tuple[str, ...] = DEFAULT_FRONTLINE
    safe_ids: Tuple[str, ...] = DEFAULT_SAFE
    logistics_hubs: Tuple[str, ...] = DEFAULT_HUBS
    default_hub: str = "kyiv"
    # Supply below this is critical; above safe_supply (and not frontline) is safe.
    critical_supply: int = 30
    safe_supply: int = 70
    cost_per_km: float = 10.0
    frontline_penalty: float = 1000.0
    low_supply_penalty: float = 500.0
    default_speed_kmh: float = 60.0
    destruction_levels: Tuple[float, ...] = field(default=(0.0, 10.0, 25.0, 50.0))

    def __post_init__(self) -> None:
        if not 0 <= self.critical_supply <= 100 or not 0 <= self.safe_supply <= 100:
            raise ValueError("supply thresholds must lie in [0, 100]")
        if self.critical_supply > self.safe_supply:
            raise ValueError(
                f"critical_supply ({self.critical_supply}) must not exceed safe_supply ({self.safe_supply})"
            )
        if self.cost_per_km < 0 or self.frontline_penalty < 0 or self.low_supply_penalty < 0:
            raise ValueError("cost constants must be non-negative")
        if self.default_speed_kmh <= 0:
            raise ValueError("default_speed_kmh must be positive")
        if any(not 0 <= level <= 100 for level in self.destruction_levels):
            raise ValueError("destruction levels must lie in [0, 100]")


_TUPLE_FIELDS = {"frontline_ids", "safe_ids", "logistics_hubs", "destruction_levels"}


def config_from_mapping(data: Mapping[str, Any]) -> NetworkConfig:
    """
    Build a NetworkConfig from a plain mapping, ignoring the `network` key.

    Unknown keys are rejected so typos do not silently fall back to defaults.
    """
    known = {f.name for f in fields(NetworkConfig)}
    unknown = sorted(set(data) - known - {"network"})
    if unknown:
        raise ValueError(f"Unknown configuration key(s): {', '.join(unknown)}")

    kwargs = {}
    for key, value in data.items():
        if key == "network":
            continue
        if key in _TUPLE_FIELDS:
            if isinstance(value, str) or not isinstance(value, (list, tuple)):
                raise ValueError(f"'{key}' must be a list")
            value = tuple(float(v) for v in value) if key == "destruction_levels" else tuple(value)
        kwargs[key] = value
    return NetworkConfig(**kwargs)


def _read_yaml(path: Path) -> Mapping[str, Any]:
    import yaml  # type: ignore

    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def load_config(path: Path) -> NetworkConfig:
    return config_from_mapping(_read_yaml(path))


def load_scenario(path: Path) -> tuple[NetworkConfig, Optional[RailGraph]]:
    """
    Load settings and, when the file has a `network:` section, the graph.

    The network section holds `nodes` and `edges` record lists in the shape
    topology_builder.build_rail_graph accepts.
    """
    data = _read_yaml(path)
    config = config_from_mapping(data)
    network = data.get("network")
    if network is None:
        return config, None
    if not isinstance(network, dict):
        raise ValueError(f"{path}: 'network' must be a mapping")
    graph = build_rail_graph(network.get("nodes", []), network.get("edges", []))
    return config, graph
