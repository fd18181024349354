"""Tests for the connectivity-preserving diagram transforms."""

import pytest

from conftest import make_diagram
from elecplanner.core.model import Point, Socket, Wall, Wire, WireLabel
from elecplanner.geom.edit import (
    control_point,
    default_control_point,
    drag_wall,
    find_connected_walls,
    mounted_components,
    offset_for_handle,
    prune_wires,
    remove_component,
    remove_wall,
    room_walls,
    set_wall_endpoint,
    translate_component,
    wire_path,
)


class TestWallDrag:
    def test_connected_endpoint_follows(self, corner_diagram):
        moved = drag_wall(corner_diagram, "w1", 0, 20)
        assert moved.walls["w1"].a == Point(0, 20)
        assert moved.walls["w1"].b == Point(100, 20)
        # Shared endpoint moves, far endpoint stays
        assert moved.walls["w2"].a == Point(100, 20)
        assert moved.walls["w2"].b == Point(100, 100)

    def test_unconnected_wall_is_untouched(self, corner_diagram):
        moved = drag_wall(corner_diagram, "w1", 0, 20)
        assert moved.walls["w3"] == corner_diagram.walls["w3"]

    @pytest.mark.parametrize("dx, dy", [(5, 0), (0, -30), (12.5, 7.25), (-40, 40)])
    def test_every_coincident_endpoint_moves_by_the_delta(self, dx, dy):
        """Endpoints matching the dragged wall before the move end up offset by exactly (dx, dy)."""
        diagram = make_diagram(
            walls=[
                Wall(id="w", a=Point(0, 0), b=Point(100, 0)),
                Wall(id="x", a=Point(3, 4), b=Point(0, 100)),
                Wall(id="y", a=Point(200, 0), b=Point(98, -2)),
                Wall(id="z", a=Point(50, 50), b=Point(60, 60)),
            ]
        )
        moved = drag_wall(diagram, "w", dx, dy)
        assert moved.walls["x"].a == Point(3, 4).offset(dx, dy)
        assert moved.walls["x"].b == Point(0, 100)
        assert moved.walls["y"].b == Point(98, -2).offset(dx, dy)
        assert moved.walls["y"].a == Point(200, 0)
        assert moved.walls["z"] == diagram.walls["z"]

    def test_mounted_components_follow(self):
        diagram = make_diagram(
            walls=[Wall(id="w", a=Point(0, 0), b=Point(100, 0))],
            components=[
                Socket(id="on", position=Point(50, 4)),
                Socket(id="off", position=Point(50, 30)),
            ],
        )
        moved = drag_wall(diagram, "w", 10, 10)
        assert moved.components["on"].position == Point(60, 14)
        assert moved.components["off"].position == Point(50, 30)

    def test_zero_delta_and_unknown_wall_are_noops(self, corner_diagram):
        assert drag_wall(corner_diagram, "w1", 0, 0) is corner_diagram
        assert drag_wall(corner_diagram, "missing", 5, 5) is corner_diagram

    def test_drag_does_not_mutate_input(self, corner_diagram):
        drag_wall(corner_diagram, "w1", 0, 20)
        assert corner_diagram.walls["w1"].a == Point(0, 0)


def test_find_connected_walls(corner_diagram):
    assert find_connected_walls(corner_diagram, "w1") == ["w2"]
    assert find_connected_walls(corner_diagram, "w3") == []


def test_mounted_components_uses_segment_distance():
    diagram = make_diagram(components=[Socket(id="past-end", position=Point(105, 0))])
    wall = Wall(id="w", a=Point(0, 0), b=Point(100, 0))
    assert mounted_components(diagram, wall) == ["past-end"]
    assert mounted_components(diagram, Wall(id="v", a=Point(0, 0), b=Point(90, 0))) == []


def test_set_wall_endpoint():
    diagram = make_diagram(walls=[Wall(id="w", a=Point(0, 0), b=Point(100, 0))])
    updated = set_wall_endpoint(diagram, "w", "b", Point(100, 50))
    assert updated.walls["w"].b == Point(100, 50)
    with pytest.raises(ValueError):
        set_wall_endpoint(diagram, "w", "c", Point(0, 0))


class TestRoomWalls:
    def test_four_walls_forming_a_closed_rectangle(self):
        walls = room_walls(Point(200, 150), Point(0, 0))
        assert len(walls) == 4
        assert len({w.group for w in walls}) == 1
        assert walls[0].group is not None
        for current, following in zip(walls, walls[1:] + walls[:1]):
            assert current.b == following.a
        assert walls[0].a == Point(0, 0)
        assert walls[2].a == Point(200, 150)

    def test_too_small_room_is_rejected(self):
        assert room_walls(Point(0, 0), Point(10, 100)) == []
        assert room_walls(Point(0, 0), Point(100, 5)) == []

    def test_explicit_group(self):
        assert {w.group for w in room_walls(Point(0, 0), Point(50, 50), group="kitchen")} == {"kitchen"}


def test_remove_wall_by_group():
    walls = room_walls(Point(0, 0), Point(50, 50), group="room")
    diagram = make_diagram(walls=walls + [Wall(id="lone", a=Point(0, 100), b=Point(50, 100))])
    assert len(remove_wall(diagram, walls[0].id).walls) == 4
    assert list(remove_wall(diagram, walls[0].id, whole_group=True).walls) == ["lone"]


class TestReferentialIntegrity:
    def test_deleting_component_removes_its_wires(self, wired_diagram):
        diagram = remove_component(wired_diagram, "s1")
        assert "s1" not in diagram.components
        assert diagram.wires == {}

    def test_prune_wires_drops_dangling_runs(self):
        diagram = make_diagram(
            components=[Socket(id="a", position=Point(0, 0)), Socket(id="b", position=Point(10, 0))],
            wires=[Wire(id="ok", start="a", end="b"), Wire(id="bad", start="a", end="ghost")],
        )
        assert list(prune_wires(diagram).wires) == ["ok"]


def test_wire_label_leader_is_preserved_when_moved():
    label = WireLabel(id="t", position=Point(10, 10), leader=Point(-5, 40))
    moved = translate_component(label, 100, 0)
    assert moved.leader == Point(-5, 40)
    assert moved.leader_tip == Point(105, 50)


class TestWireCurve:
    def test_default_control_point(self):
        assert default_control_point(Point(0, 0), Point(100, 0)) == Point(50, 20)

    def test_curve_tracks_moved_endpoints(self, wired_diagram):
        wire = wired_diagram.wires["r1"]
        handle = Point(200, 60)
        offset = offset_for_handle(wired_diagram, wire, handle)
        bent = Wire(id="r1", start="qd", end="s1", control_offset=offset)
        diagram = make_diagram(components=wired_diagram.components.values(), wires=[bent])
        assert control_point(diagram, bent) == handle

        # Move the socket: the control point is re-derived, keeping the user offset
        components = dict(diagram.components)
        components["s1"] = translate_component(components["s1"], 0, 100)
        moved = make_diagram(components=components.values(), wires=[bent])
        expected = default_control_point(Point(0, 0), Point(400, 100)).offset(offset.x, offset.y)
        assert control_point(moved, bent) == expected

    def test_straight_wire_path_length(self, wired_diagram):
        path = wire_path(wired_diagram, wired_diagram.wires["r1"])
        assert path.length == pytest.approx(400.0)
