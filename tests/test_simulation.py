"""
Unit tests for the war-damage simulation.
"""

import random

from nodes import Oblast
from rail_graph import RailGraph
from simulation import simulate_war_damage


def make_graph():
    # donetsk is frontline with two links; kyiv-lviv is far from the front.
    g = RailGraph()
    g.add_node(Oblast("donetsk", "Donetsk", 48.0159, 37.8028, is_frontline=True))
    g.add_node(Oblast("dnipro", "Dnipro", 48.4647, 35.0462))
    g.add_node(Oblast("kharkiv", "Kharkiv", 49.9935, 36.2304))
    g.add_node(Oblast("kyiv", "Kyiv", 50.4501, 30.5234))
    g.add_node(Oblast("lviv", "Lviv", 49.8397, 24.0297))
    g.add_edge("donetsk", "dnipro", 250.0)
    g.add_edge("donetsk", "kharkiv", 300.0)
    g.add_edge("kyiv", "lviv", 540.0)
    g.add_edge("kyiv", "dnipro", 480.0)
    return g


def test_full_damage_destroys_every_frontline_link():
    g = make_graph()
    destroyed = simulate_war_damage(g, 100, ["donetsk"], rng=random.Random(1))
    assert len(destroyed) == 2
    assert all(c.destroyed for c in g.connections_of("donetsk"))
    assert not g.connection("kyiv", "lviv").destroyed
    assert not g.connection("kyiv", "dnipro").destroyed
    assert g.validate()


def test_zero_damage_is_a_no_op():
    g = make_graph()
    assert simulate_war_damage(g, 0, ["donetsk"], rng=random.Random(1)) == []
    assert all(not c.destroyed for c in g.edges())


def test_percent_is_clamped():
    g = make_graph()
    assert len(simulate_war_damage(g, 250, ["donetsk"])) == 2
    g.restore_baseline()
    assert simulate_war_damage(g, -10, ["donetsk"]) == []


def test_shared_link_rolled_once_and_unknown_ids_skipped():
    g = make_graph()
    rng = random.Random(3)
    destroyed = simulate_war_damage(g, 100, ["donetsk", "dnipro", "missing"], rng=rng)
    # donetsk-dnipro touches two frontline ids but appears once.
    assert len(destroyed) == 3
    assert len({id(c) for c in destroyed}) == 3


def test_seeded_runs_are_repeatable():
    first = make_graph()
    second = make_graph()
    a = simulate_war_damage(first, 50, ["donetsk", "kyiv"], rng=random.Random(42))
    b = simulate_war_damage(second, 50, ["donetsk", "kyiv"], rng=random.Random(42))
    assert [(c.from_id, c.to_id) for c in a] == [(c.from_id, c.to_id) for c in b]
