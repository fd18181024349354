"""Tests for scripted operations."""

import pytest

from elecplanner.core.model import Diagram, Point, Wall
from elecplanner.engine.api import apply, apply_all
from elecplanner.engine.ops import get_operation, list_operations, register_operation
from elecplanner.engine.validators import InvalidOperation, validate_all
from elecplanner.io.parser import diagram_from_dict, diagram_to_dict
from elecplanner.geom.edit import control_point

SCRIPT = [
    {"op": "add_room", "id": "kitchen", "corner": [0, 0], "opposite": [400, 300]},
    {"op": "add_component", "id": "qd", "kind": "panel", "position": [0, 150]},
    {"op": "add_component", "id": "s1", "kind": "socket", "position": [200, 0], "rated_power": 600, "circuit": "3"},
    {"op": "connect", "id": "r1", "start": "qd", "end": "s1", "routing": "buried"},
]


@pytest.fixture
def kitchen():
    return apply_all(Diagram(), SCRIPT)


def test_registry_lists_every_operation():
    assert set(list_operations()) >= {
        "add_wall",
        "add_room",
        "move_wall",
        "move_wall_endpoint",
        "add_component",
        "move_component",
        "delete_component",
        "delete_wall",
        "connect",
        "delete_wire",
        "set_wire_curve",
        "set_wall_length",
        "calibrate",
    }
    with pytest.raises(KeyError):
        get_operation("teleport")


def test_script_builds_diagram(kitchen):
    assert set(kitchen.walls) == {"kitchen-top", "kitchen-right", "kitchen-bottom", "kitchen-left"}
    assert kitchen.components["s1"].rated_power == 600
    assert kitchen.wires["r1"].routing.value == "buried"


def test_move_wall_carries_mounted_socket(kitchen):
    moved = apply(kitchen, {"op": "move_wall", "wall": "kitchen-top", "dx": 0, "dy": -50})
    assert moved.components["s1"].position == Point(200, -50)
    assert moved.walls["kitchen-right"].a == Point(400, -50)
    assert moved.walls["kitchen-left"].b == Point(0, -50)


def test_move_wall_endpoint_snaps(kitchen):
    diagram = apply(kitchen, {"op": "add_wall", "id": "partition", "a": [200, 300], "b": [200, 150]})
    diagram = apply(diagram, {"op": "move_wall_endpoint", "wall": "partition", "end": "b", "point": [396, 5]})
    assert diagram.walls["partition"].b == Point(400, 0)


def test_component_operations(kitchen):
    diagram = apply(kitchen, {"op": "move_component", "component": "s1", "position": [100, 0]})
    assert diagram.components["s1"].position == Point(100, 0)
    diagram = apply(diagram, {"op": "delete_component", "component": "s1"})
    assert "s1" not in diagram.components
    assert diagram.wires == {}


def test_wire_operations(kitchen):
    diagram = apply(kitchen, {"op": "set_wire_curve", "wire": "r1", "handle": [50, 50]})
    assert control_point(diagram, diagram.wires["r1"]) == Point(50, 50)
    diagram = apply(diagram, {"op": "set_wire_curve", "wire": "r1", "offset": [0, 0]})
    assert diagram.wires["r1"].control_offset == Point(0, 0)
    diagram = apply(diagram, {"op": "delete_wire", "wire": "r1"})
    assert diagram.wires == {}


def test_delete_wall_group(kitchen):
    diagram = apply(kitchen, {"op": "delete_wall", "wall": "kitchen-top", "whole_group": True})
    assert diagram.walls == {}


def test_connect_converts_control_offset(kitchen):
    diagram = apply(kitchen, {"op": "connect", "id": "r2", "start": "s1", "end": "qd", "control_offset": [5, 5]})
    assert diagram.wires["r2"].control_offset == Point(5, 5)
    assert diagram_from_dict(diagram_to_dict(diagram)) == diagram


def test_set_wall_length(kitchen):
    diagram = apply(kitchen, {"op": "set_wall_length", "wall": "kitchen-top", "meters": 5})
    assert diagram.walls["kitchen-top"].a == Point(0, 0)
    assert diagram.walls["kitchen-top"].b == Point(200, 0)


def test_calibrate(kitchen):
    diagram = apply(kitchen, {"op": "calibrate", "a": [0, 0], "b": [400, 0], "meters": 5})
    assert diagram.calibration.pixels_per_meter == pytest.approx(80.0)


@pytest.mark.parametrize(
    "operation",
    [
        {"op": "teleport"},
        {"dx": 1},
        {"op": "move_wall", "wall": "missing", "dx": 1},
        {"op": "add_wall", "a": [0, 0], "b": [0, 0]},
        {"op": "add_room", "corner": [0, 0], "opposite": [5, 5]},
        {"op": "connect", "start": "qd", "end": "qd"},
        {"op": "connect", "start": "qd", "end": "ghost"},
        {"op": "add_component", "kind": "socket", "position": [0, 0], "gang": 9},
        {"op": "calibrate", "a": [0, 0], "b": [10, 0], "meters": 0},
        {"op": "set_wire_curve", "wire": "r1"},
        {"op": "move_wall", "dx": 1},
        {"op": "set_wall_length", "wall": "kitchen-top", "meters": 0},
        {"op": "set_wall_length", "wall": "kitchen-top", "meters": "long"},
        {"op": "connect", "start": "qd", "end": "s1", "control_offset": [1, 2, 3]},
    ],
)
def test_invalid_operations_raise_value_error(kitchen, operation):
    with pytest.raises(ValueError):
        apply(kitchen, operation)


def test_invariant_violations_raise_invalid_operation(kitchen):
    class CollapseWallOp:
        def precheck(self, diagram, **kwargs):
            return True

        def apply(self, diagram, wall, **kwargs):
            walls = dict(diagram.walls)
            walls[wall] = Wall(id=wall, a=Point(1, 1), b=Point(1, 1))
            return Diagram(walls=walls, components=diagram.components, wires=diagram.wires)

    register_operation("collapse_wall", CollapseWallOp())
    with pytest.raises(InvalidOperation):
        apply(kitchen, {"op": "collapse_wall", "wall": "kitchen-top"})


def test_validate_all_accepts_consistent_diagram(kitchen):
    validate_all(kitchen)
