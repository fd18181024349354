"""Interactive diagram editor.

``DiagramEditor`` owns the state of one diagram and exposes the editing
operations a canvas needs. Pointer interactions are modelled as
begin/update/end gestures: updates mutate the editor's diagram so the
canvas can redraw, ``end_*`` commits, and ``cancel`` restores the state
the gesture started from.

Invalid geometry (zero-length walls, rooms below the minimum size, a
non-positive calibration distance) is silently ignored: these are user
input rejections, not faults.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, List

from .. import config
from ..core.model import Component, Diagram, Dimension, Point, Wall, Wire, component_class
from ..geom.edit import (
    add_walls,
    drag_wall,
    new_id,
    offset_for_handle,
    remove_component,
    remove_wall,
    room_walls,
    set_wall_endpoint,
    translate_component,
)
from ..geom.snap import resolve, resolve_angle
from ..geom.units import calibrate, pixel_distance, segment_length_m

LOGGER = logging.getLogger(__name__)


@dataclass
class Gesture:
    """An in-progress pointer interaction.

    Attributes:
        tool: Gesture type (wall, room, dimension, wall_drag, endpoint_drag,
            component_drag).
        start: Point where the gesture began (snapped for walls).
        current: Latest resolved pointer position.
        snapshot: Diagram before the gesture, for drags.
        target: ID of the wall or component being dragged.
        end: Wall end being dragged (``"a"`` or ``"b"``).
        angle: Snapped drawing angle, if any.
    """

    tool: str
    start: Point
    current: Point
    snapshot: Diagram | None = None
    target: str | None = None
    end: str | None = None
    angle: float | None = None


class DiagramEditor:
    """Editing engine for one diagram."""

    def __init__(self, diagram: Diagram | None = None) -> None:
        self.diagram = diagram if diagram is not None else Diagram()
        self.gesture: Gesture | None = None
        self.pending_wire: str | None = None
        self.calibration_points: List[Point] = []

    # ------------------------------------------------------------------
    # Gesture bookkeeping

    def _active(self, tool: str) -> Gesture | None:
        if self.gesture is not None and self.gesture.tool == tool:
            return self.gesture
        return None

    def _finish(self, tool: str) -> Gesture | None:
        """Close the active gesture if it is of type ``tool`` and return it."""
        gesture = self._active(tool)
        if gesture is not None:
            self.gesture = None
        return gesture

    def cancel(self) -> None:
        """Discard any uncommitted wall, room, dimension, drag or wire."""
        if self.gesture is not None and self.gesture.snapshot is not None:
            self.diagram = self.gesture.snapshot
        if self.gesture is not None or self.pending_wire is not None:
            LOGGER.debug("Cancelled %s", self.gesture.tool if self.gesture else "pending wire")
        self.gesture = None
        self.pending_wire = None
        self.calibration_points = []

    # ------------------------------------------------------------------
    # Walls

    def begin_wall(self, point: Point) -> Point:
        """Start drawing a wall; the start point snaps onto existing vertices."""
        self.cancel()
        start = resolve(point, self.diagram.walls).point
        self.gesture = Gesture(tool="wall", start=start, current=start)
        return start

    def update_wall(self, point: Point) -> Point | None:
        """Move the free end of the wall being drawn.

        The end snaps onto an existing vertex when one is within tolerance,
        and otherwise onto the nearest multiple of 45 degrees.
        """
        gesture = self._active("wall")
        if gesture is None:
            return None

        snap = resolve(point, self.diagram.walls)
        if snap.snapped:
            gesture.current, gesture.angle = snap.point, None
        else:
            angle_snap = resolve_angle(gesture.start, point)
            gesture.current, gesture.angle = angle_snap.point, angle_snap.angle
        return gesture.current

    def end_wall(self) -> Wall | None:
        """Commit the wall being drawn, unless it has zero length."""
        gesture = self._finish("wall")
        if gesture is None or gesture.start == gesture.current:
            return None

        wall = Wall(id=new_id("wall"), a=gesture.start, b=gesture.current)
        self.diagram = add_walls(self.diagram, [wall])
        LOGGER.debug("Committed wall %s", wall.id)
        return wall

    def add_wall(self, a: Point, b: Point, thickness: float = config.DEFAULT_WALL_THICKNESS) -> Wall | None:
        """Add a wall directly, without snapping; zero-length walls are ignored."""
        wall = Wall(id=new_id("wall"), a=a, b=b, thickness=thickness)
        if wall.is_degenerate:
            return None
        self.diagram = add_walls(self.diagram, [wall])
        return wall

    def delete_wall(self, wall_id: str, whole_group: bool = False) -> None:
        self.diagram = remove_wall(self.diagram, wall_id, whole_group)

    # ------------------------------------------------------------------
    # Rooms

    def begin_room(self, point: Point) -> None:
        self.cancel()
        self.gesture = Gesture(tool="room", start=point, current=point)

    def update_room(self, point: Point) -> None:
        gesture = self._active("room")
        if gesture is not None:
            gesture.current = point

    def end_room(self) -> List[Wall]:
        """Commit the room rectangle as four walls sharing a group id."""
        gesture = self._finish("room")
        if gesture is None:
            return []

        walls = room_walls(gesture.start, gesture.current)
        self.diagram = add_walls(self.diagram, walls)
        return walls

    def add_room(self, corner: Point, opposite: Point) -> List[Wall]:
        walls = room_walls(corner, opposite)
        self.diagram = add_walls(self.diagram, walls)
        return walls

    # ------------------------------------------------------------------
    # Wall drags

    def begin_wall_drag(self, wall_id: str, point: Point) -> bool:
        """Grab a wall; walls sharing its endpoints and mounted symbols follow."""
        self.cancel()
        if wall_id not in self.diagram.walls:
            return False
        self.gesture = Gesture(tool="wall_drag", start=point, current=point, snapshot=self.diagram, target=wall_id)
        return True

    def update_wall_drag(self, point: Point) -> None:
        gesture = self._active("wall_drag")
        if gesture is None:
            return
        gesture.current = point
        dx = point.x - gesture.start.x
        dy = point.y - gesture.start.y
        # Always relative to the snapshot so frames never compound
        self.diagram = drag_wall(gesture.snapshot, gesture.target, dx, dy)

    def end_wall_drag(self) -> Wall | None:
        gesture = self._finish("wall_drag")
        if gesture is None:
            return None
        return self.diagram.walls.get(gesture.target)

    def move_wall(self, wall_id: str, dx: float, dy: float) -> None:
        """Translate a wall in one step, with the same propagation as a drag."""
        self.diagram = drag_wall(self.diagram, wall_id, dx, dy)

    # ------------------------------------------------------------------
    # Endpoint handles

    def begin_endpoint_drag(self, wall_id: str, end: str) -> bool:
        self.cancel()
        wall = self.diagram.walls.get(wall_id)
        if wall is None or end not in ("a", "b"):
            return False
        origin = getattr(wall, end)
        self.gesture = Gesture(
            tool="endpoint_drag", start=origin, current=origin, snapshot=self.diagram, target=wall_id, end=end
        )
        return True

    def update_endpoint_drag(self, point: Point) -> Point | None:
        """Move the grabbed endpoint, snapping to vertices of other walls."""
        gesture = self._active("endpoint_drag")
        if gesture is None:
            return None
        snapped = resolve(point, self.diagram.walls, exclude_wall_id=gesture.target).point
        gesture.current = snapped
        self.diagram = set_wall_endpoint(gesture.snapshot, gesture.target, gesture.end, snapped)
        return snapped

    def end_endpoint_drag(self) -> Wall | None:
        """Commit the endpoint move; a move collapsing the wall is reverted."""
        gesture = self._finish("endpoint_drag")
        if gesture is None:
            return None
        wall = self.diagram.walls.get(gesture.target)
        if wall is not None and wall.is_degenerate:
            LOGGER.debug("Endpoint drag would collapse wall %s; reverted", wall.id)
            self.diagram = gesture.snapshot
            return gesture.snapshot.walls.get(gesture.target)
        return wall

    def move_wall_endpoint(self, wall_id: str, end: str, point: Point) -> Wall | None:
        if not self.begin_endpoint_drag(wall_id, end):
            return None
        self.update_endpoint_drag(point)
        return self.end_endpoint_drag()

    # ------------------------------------------------------------------
    # Components

    def add_component(self, kind: str | Component, position: Point | None = None, **properties: Any) -> Component:
        """Place a symbol.

        Args:
            kind: Component kind (``"socket"``, ``"light"``, ...) or a
                ready-made Component.
            position: Anchor point; required when ``kind`` is a string.
            **properties: Kind-specific properties.

        Returns:
            The placed component.

        Raises:
            ValueError: If the kind is unknown, a property is not valid for
                the kind, or its value is out of range.
        """
        if isinstance(kind, Component):
            component = kind
        else:
            if position is None:
                raise ValueError("A position is required to place a component")
            cls = component_class(kind)
            try:
                component = cls(id=new_id("comp"), position=position, **properties)
            except TypeError as e:
                raise ValueError(f"Invalid properties for {kind}: {e}") from e

        components = dict(self.diagram.components)
        components[component.id] = component
        self.diagram = replace(self.diagram, components=components)
        return component

    def _replace_component(self, component: Component) -> None:
        components = dict(self.diagram.components)
        components[component.id] = component
        self.diagram = replace(self.diagram, components=components)

    def move_component(self, component_id: str, position: Point) -> None:
        component = self.diagram.components.get(component_id)
        if component is not None:
            self._replace_component(replace(component, position=position))

    def begin_component_drag(self, component_id: str, point: Point) -> bool:
        self.cancel()
        if component_id not in self.diagram.components:
            return False
        self.gesture = Gesture(
            tool="component_drag", start=point, current=point, snapshot=self.diagram, target=component_id
        )
        return True

    def update_component_drag(self, point: Point) -> None:
        gesture = self._active("component_drag")
        if gesture is None:
            return
        gesture.current = point
        original = gesture.snapshot.components[gesture.target]
        moved = translate_component(original, point.x - gesture.start.x, point.y - gesture.start.y)
        self.diagram = gesture.snapshot
        self._replace_component(moved)

    def end_component_drag(self) -> Component | None:
        gesture = self._finish("component_drag")
        if gesture is None:
            return None
        return self.diagram.components.get(gesture.target)

    def rotate_component(self, component_id: str, rotation: float) -> None:
        component = self.diagram.components.get(component_id)
        if component is not None:
            self._replace_component(replace(component, rotation=rotation % 360))

    def mirror_component(self, component_id: str) -> None:
        component = self.diagram.components.get(component_id)
        if component is not None:
            self._replace_component(replace(component, mirrored=not component.mirrored))

    def update_component(self, component_id: str, **changes: Any) -> Component | None:
        """Edit properties of a placed component.

        Raises:
            ValueError: If a property does not exist for the component's kind
                or its value is invalid.
        """
        component = self.diagram.components.get(component_id)
        if component is None:
            return None
        if "id" in changes:
            raise ValueError("A component's id cannot be changed")
        try:
            updated = replace(component, **changes)
        except TypeError as e:
            raise ValueError(f"Invalid properties for {component.kind}: {e}") from e
        self._replace_component(updated)
        return updated

    def delete_component(self, component_id: str) -> None:
        """Delete a component and every wire attached to it."""
        if self.pending_wire == component_id:
            self.pending_wire = None
        self.diagram = remove_component(self.diagram, component_id)

    # ------------------------------------------------------------------
    # Wires

    def click_component(self, component_id: str) -> Wire | None:
        """Two-click wiring.

        The first click arms a pending connection; a click on a different
        component commits a wire with the default curvature and scheme, and
        a second click on the same component aborts.
        """
        if component_id not in self.diagram.components:
            return None

        if self.pending_wire is None:
            self.pending_wire = component_id
            return None

        start, self.pending_wire = self.pending_wire, None
        if start == component_id or start not in self.diagram.components:
            return None

        wire = Wire(id=new_id("wire"), start=start, end=component_id)
        wires = dict(self.diagram.wires)
        wires[wire.id] = wire
        self.diagram = replace(self.diagram, wires=wires)
        LOGGER.debug("Connected %s -> %s with %s", start, component_id, wire.id)
        return wire

    def connect(self, start: str, end: str) -> Wire | None:
        self.pending_wire = None
        self.click_component(start)
        return self.click_component(end)

    def _replace_wire(self, wire: Wire) -> None:
        wires = dict(self.diagram.wires)
        wires[wire.id] = wire
        self.diagram = replace(self.diagram, wires=wires)

    def drag_wire_handle(self, wire_id: str, handle: Point) -> None:
        """Bend a wire by moving its control handle to ``handle``.

        Only the offset from the derived control point is stored, so the
        curve keeps following its components when they move.
        """
        wire = self.diagram.wires.get(wire_id)
        if wire is None:
            return
        offset = offset_for_handle(self.diagram, wire, handle)
        if offset is not None:
            self._replace_wire(replace(wire, control_offset=offset))

    def update_wire(self, wire_id: str, **changes: Any) -> Wire | None:
        wire = self.diagram.wires.get(wire_id)
        if wire is None:
            return None
        if {"id", "start", "end"} & set(changes):
            raise ValueError("A wire's id and endpoints cannot be changed")
        try:
            updated = replace(wire, **changes)
        except TypeError as e:
            raise ValueError(f"Invalid wire properties: {e}") from e
        self._replace_wire(updated)
        return updated

    def delete_wire(self, wire_id: str) -> None:
        wires = {wid: w for wid, w in self.diagram.wires.items() if wid != wire_id}
        self.diagram = replace(self.diagram, wires=wires)

    # ------------------------------------------------------------------
    # Dimensions

    def begin_dimension(self, point: Point) -> None:
        self.cancel()
        self.gesture = Gesture(tool="dimension", start=point, current=point)

    def update_dimension(self, point: Point) -> None:
        gesture = self._active("dimension")
        if gesture is not None:
            gesture.current = point

    def end_dimension(self) -> Dimension | None:
        gesture = self._finish("dimension")
        if gesture is None or pixel_distance(gesture.start, gesture.current) <= config.MIN_DIMENSION_LENGTH:
            return None

        dimension = Dimension(id=new_id("dim"), a=gesture.start, b=gesture.current)
        dimensions = dict(self.diagram.dimensions)
        dimensions[dimension.id] = dimension
        self.diagram = replace(self.diagram, dimensions=dimensions)
        return dimension

    # ------------------------------------------------------------------
    # Scale

    def add_calibration_point(self, point: Point) -> float | None:
        """Collect a calibration point.

        Returns:
            The pixel distance once two points are collected, else None.
        """
        if len(self.calibration_points) >= 2:
            self.calibration_points = []
        self.calibration_points.append(point)
        if len(self.calibration_points) == 2:
            return pixel_distance(*self.calibration_points)
        return None

    def confirm_calibration(self, meters) -> bool:
        """Set the scale from the two collected points and a real distance.

        The collected points are cleared whether or not the value is accepted.

        Returns:
            True if the calibration was applied.
        """
        points, self.calibration_points = self.calibration_points, []
        if len(points) != 2:
            return False
        calibration = calibrate(points[0], points[1], meters)
        if calibration is None:
            return False
        self.diagram = replace(self.diagram, calibration=calibration)
        return True

    @property
    def pixels_per_meter(self) -> float:
        return self.diagram.calibration.pixels_per_meter

    def wall_length_m(self, wall_id: str) -> float | None:
        wall = self.diagram.walls.get(wall_id)
        if wall is None:
            return None
        return segment_length_m(wall.a, wall.b, self.diagram.calibration)

    def set_wall_length(self, wall_id: str, meters) -> Wall | None:
        """Resize a wall to ``meters`` under the current scale.

        The wall keeps its direction and its ``a`` end; only ``b`` moves.
        Non-positive or non-numeric lengths are ignored.
        """
        wall = self.diagram.walls.get(wall_id)
        try:
            length = float(meters)
        except (TypeError, ValueError):
            return None
        if wall is None or wall.is_degenerate or not math.isfinite(length) or length <= 0:
            return None

        angle = math.atan2(wall.b.y - wall.a.y, wall.b.x - wall.a.x)
        pixels = length * self.pixels_per_meter
        b = Point(wall.a.x + pixels * math.cos(angle), wall.a.y + pixels * math.sin(angle))
        self.diagram = set_wall_endpoint(self.diagram, wall_id, "b", b)
        return self.diagram.walls[wall_id]

    def dimension_length_m(self, dimension_id: str) -> float | None:
        dimension = self.diagram.dimensions.get(dimension_id)
        if dimension is None:
            return None
        return segment_length_m(dimension.a, dimension.b, self.diagram.calibration)

    # ------------------------------------------------------------------
    # Selection helpers

    def delete(self, item_id: str) -> None:
        """Delete whatever item carries ``item_id``."""
        if item_id in self.diagram.components:
            self.delete_component(item_id)
        elif item_id in self.diagram.wires:
            self.delete_wire(item_id)
        elif item_id in self.diagram.walls:
            self.delete_wall(item_id)
        elif item_id in self.diagram.dimensions:
            dimensions = {did: d for did, d in self.diagram.dimensions.items() if did != item_id}
            self.diagram = replace(self.diagram, dimensions=dimensions)

    def duplicate(self, item_id: str) -> str | None:
        """Copy a wall or component, offset by ``config.PASTE_OFFSET``.

        Wires are not duplicated on their own since they depend on their
        components. Returns the new item's ID, or None.
        """
        offset = config.PASTE_OFFSET
        component = self.diagram.components.get(item_id)
        if component is not None:
            copy = replace(translate_component(component, offset, offset), id=new_id("comp"))
            self._replace_component(copy)
            return copy.id

        wall = self.diagram.walls.get(item_id)
        if wall is not None:
            copy = replace(
                wall, id=new_id("wall"), a=wall.a.offset(offset, offset), b=wall.b.offset(offset, offset), group=None
            )
            self.diagram = add_walls(self.diagram, [copy])
            return copy.id

        return None
