"""
Attrition simulation for the rail network.
"""

from typing import Iterable, List, Optional
import random

from connections import Connection
from rail_graph import RailGraph


def simulate_war_damage(
    graph: RailGraph,
    percent: float,
    frontline_ids: Iterable[str],
    rng: Optional[random.Random] = None,
) -> List[Connection]:
    """
    Destroy links touching the frontline, each with probability percent/100.

    Only links incident to a frontline oblast are at risk; the rest of the
    network is untouched. Each link is rolled at most once even when both
    endpoints are frontline. percent is clamped to [0, 100]; unknown ids are
    skipped.

    Returns the connections destroyed by this call, in roll order.
    """
    rng = rng or random.Random()
    chance = max(0.0, min(100.0, float(percent))) / 100.0

    rolled = set()
    destroyed: List[Connection] = []
    for node_id in frontline_ids:
        if graph.node(node_id) is None:
            continue
        for conn in graph.connections_of(node_id):
            if id(conn) in rolled or conn.destroyed:
                continue
            rolled.add(id(conn))
            if rng.random() < chance:
                conn.destroyed = True
                destroyed.append(conn)
    return destroyed
