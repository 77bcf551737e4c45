"""
Build rail graphs from plain node and edge records.

Records come either from code or from the `network:` section of a scenario
YAML file. Node records need id, name, lat and lon; frontline, population
and region are optional. Edge records need from and to; distance defaults
to the great-circle distance between the endpoints when omitted.
"""

from typing import Any, Iterable, Mapping, Tuple

from connections import STANDARD
from nodes import Oblast
from rail_graph import RailGraph


def _require(record: Mapping[str, Any], key: str, kind: str) -> Any:
    if key not in record:
        raise ValueError(f"{kind} record {dict(record)!r} is missing '{key}'")
    return record[key]


def oblast_from_record(record: Mapping[str, Any]) -> Oblast:
    return Oblast(
        str(_require(record, "id", "node")),
        str(_require(record, "name", "node")),
        float(_require(record, "lat", "node")),
        float(_require(record, "lon", "node")),
        is_frontline=bool(record.get("frontline", False)),
        population=int(record.get("population", 0)),
        region=str(record.get("region", "Unknown")),
    )


def build_rail_graph(
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
    directed: bool = False,
) -> RailGraph:
    """
    Create a RailGraph from records.

    Raises ValueError for malformed records and for any structural problem
    RailGraph.add_edge rejects (unknown endpoint, self-loop, duplicate link,
    non-positive distance).
    """
    graph = RailGraph(directed=directed)
    for record in nodes:
        oblast = oblast_from_record(record)
        if graph.has_node(oblast.id):
            raise ValueError(f"Duplicate node id '{oblast.id}'")
        graph.add_node(oblast)

    for record in edges:
        from_id = str(_require(record, "from", "edge"))
        to_id = str(_require(record, "to", "edge"))
        distance = record.get("distance")
        if distance is None:
            a = graph.node(from_id)
            b = graph.node(to_id)
            if a is None or b is None:
                raise ValueError(f"Cannot link unknown node(s) in {dict(record)!r}")
            distance = a.distance_to(b)
        graph.add_edge(from_id, to_id, float(distance), str(record.get("type", STANDARD)))
    return graph


def build_from_tuples(
    nodes: Iterable[Oblast],
    edges: Iterable[Tuple],
) -> RailGraph:
    """
    Shorthand for code-defined networks: oblasts plus (from, to, distance[, type]).
    """
    graph = RailGraph()
    for node in nodes:
        graph.add_node(node)
    for edge in edges:
        graph.add_edge(*edge)
    return graph
