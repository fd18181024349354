"""Tests for circuit aggregation."""

import pytest

from elecplanner.core.model import Door, LightFixture, Panel, Point, Socket, Switch, WireLabel
from elecplanner.electrical.circuits import aggregate

ORIGIN = Point(0, 0)


def test_mixed_circuit():
    loads = aggregate(
        [
            LightFixture(id="l1", position=ORIGIN, rated_power=100, circuit="1"),
            LightFixture(id="l2", position=ORIGIN, rated_power=100, circuit="1"),
            Socket(id="s1", position=ORIGIN, rated_power=100, circuit="1"),
            Switch(id="k1", position=ORIGIN, circuit="1"),
        ]
    )
    assert len(loads) == 1
    load = loads[0]
    assert load.circuit == "1"
    assert load.apparent_power == pytest.approx(325.0)
    assert load.active_power == pytest.approx(300.0)
    assert load.min_section == 2.5
    assert load.circuit_type == "power"
    assert load.description == "Lighting + Sockets + Switches"
    assert load.scheme == "FN"
    assert set(load.component_ids) == {"l1", "l2", "s1", "k1"}


def test_lighting_only_circuit():
    (load,) = aggregate({"l": LightFixture(id="l", position=ORIGIN, rated_power=60, circuit="2")})
    assert load.circuit_type == "lighting"
    assert load.min_section == 1.5
    assert load.apparent_power == 60.0


def test_switch_only_circuit_uses_switch_scheme():
    (load,) = aggregate([Switch(id="k", position=ORIGIN, circuit="7")])
    assert load.apparent_power == 0.0
    assert load.min_section is None
    assert load.scheme == "FNR"
    assert load.description == "Switches"


def test_natural_order_with_unknown_last():
    components = [
        Socket(id="a", position=ORIGIN, circuit="10"),
        Socket(id="b", position=ORIGIN, circuit=None),
        Socket(id="c", position=ORIGIN, circuit="2"),
        Socket(id="d", position=ORIGIN, circuit="unknown"),
        Socket(id="e", position=ORIGIN, circuit="B"),
        Socket(id="f", position=ORIGIN, circuit=""),
    ]
    loads = aggregate(components)
    assert [load.circuit for load in loads] == ["2", "10", "B", None]
    assert set(loads[-1].component_ids) == {"b", "d", "f"}


def test_non_loads_are_ignored():
    loads = aggregate(
        [
            Panel(id="p", position=ORIGIN),
            Door(id="d", position=ORIGIN),
            WireLabel(id="t", position=ORIGIN, circuit="1"),
        ]
    )
    assert loads == []
