"""Tests for diagram JSON persistence."""

import json

import pytest

from conftest import make_diagram
from elecplanner.core.model import (
    Calibration,
    Diagram,
    Dimension,
    MountingHeight,
    Point,
    Socket,
    Wall,
    Wire,
    WireLabel,
    WireRouting,
)
from elecplanner.io.parser import diagram_from_dict, diagram_to_dict, load_diagram, save_diagram


@pytest.fixture
def full_diagram(wired_diagram):
    components = dict(wired_diagram.components)
    components["t1"] = WireLabel(id="t1", position=Point(5, 5), circuit="1", gauge=2.5, leader=Point(-10, 25))
    components["s2"] = Socket(
        id="s2", position=Point(9, 9), mounting=MountingHeight.HIGH, gang=3, floor=True, with_switch=True, rotation=90
    )
    wires = dict(wired_diagram.wires)
    wires["r2"] = Wire(id="r2", start="s1", end="s2", routing=WireRouting.BURIED, scheme="FN", gauge=None)
    return Diagram(
        walls={"w": Wall(id="w", a=Point(0, 0), b=Point(120.5, 0), thickness=8, group="g1")},
        components=components,
        wires=wires,
        dimensions={"d": Dimension(id="d", a=Point(0, 10), b=Point(0, 90))},
        calibration=Calibration(pixels_per_meter=50.0, points=(Point(0, 0), Point(100, 0))),
    )


def test_round_trip_is_exact(full_diagram):
    assert diagram_from_dict(diagram_to_dict(full_diagram)) == full_diagram


def test_document_is_plain_json(full_diagram):
    data = json.loads(json.dumps(diagram_to_dict(full_diagram)))
    assert data["components"]["s2"]["kind"] == "socket"
    assert data["components"]["s2"]["mounting"] == "high"
    assert data["wires"]["r2"]["routing"] == "buried"
    assert data["walls"]["w"]["a"] == [0, 0]
    assert data["calibration"]["pixels_per_meter"] == 50.0


def test_save_and_load(tmp_path, full_diagram):
    path = tmp_path / "plans" / "house.json"
    save_diagram(full_diagram, path)
    assert load_diagram(path) == full_diagram


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_diagram(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_diagram(path)


def test_dangling_wires_are_pruned_on_load():
    data = diagram_to_dict(
        make_diagram(
            components=[Socket(id="a", position=Point(0, 0)), Socket(id="b", position=Point(10, 0))],
            wires=[Wire(id="ok", start="a", end="b")],
        )
    )
    data["wires"]["dangling"] = {"start": "a", "end": "ghost"}
    assert list(diagram_from_dict(data).wires) == ["ok"]


def test_degenerate_walls_are_dropped_on_load():
    data = {"walls": {"z": {"a": [5, 5], "b": [5, 5]}, "w": {"a": [0, 0], "b": [1, 0]}}}
    diagram = diagram_from_dict(data)
    assert list(diagram.walls) == ["w"]
    assert diagram.walls["w"].thickness == 6.0


def test_missing_sections_use_defaults():
    diagram = diagram_from_dict({})
    assert diagram == Diagram()


@pytest.mark.parametrize(
    "data",
    [
        {"components": {"x": {"kind": "toaster", "position": [0, 0]}}},
        {"components": {"x": {"kind": "socket", "position": [0, 0], "colour": "red"}}},
        {"components": {"x": {"kind": "socket", "position": "here"}}},
        {"walls": {"w": {"a": [0, 0]}}},
        {"wires": {"r": {"start": "a", "end": "b", "scheme": "XYZ"}}},
        {"calibration": {"pixels_per_meter": -3}},
        {"components": {"x": {"kind": "socket", "position": [0, 0], "rated_power": -100}}},
        {"components": {"x": {"kind": "light", "position": [0, 0], "rated_power": "bright"}}},
        {"wires": {"r": {"start": "a", "end": "b", "control_offset": "up"}}},
    ],
)
def test_malformed_records_raise(data):
    with pytest.raises(ValueError):
        diagram_from_dict(data)


def test_numeric_strings_are_coerced_on_load():
    data = {
        "components": {
            "a": {"kind": "socket", "position": [0, 0], "rated_power": "250"},
            "b": {"kind": "light", "position": [10, 0], "rated_power": 60},
        },
        "wires": {"r": {"start": "a", "end": "b", "control_offset": [5, -5]}},
    }
    diagram = diagram_from_dict(data)
    assert diagram.components["a"].rated_power == 250.0
    assert diagram.wires["r"].control_offset == Point(5, -5)
    assert diagram_from_dict(diagram_to_dict(diagram)) == diagram
