"""Operations engine for diagram editing.

This module provides the scripted counterparts of the editor gestures:
each operation validates its parameters against a diagram and returns a
new diagram with the change applied. Points are given as ``[x, y]`` pairs
so operations can be read straight from JSON.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, Protocol, Sequence

from .. import config
from ..core.model import Diagram, Point, Wall, Wire
from ..geom.edit import add_walls, drag_wall, new_id, offset_for_handle, remove_component, remove_wall, room_walls
from ..geom.units import calibrate
from .editor import DiagramEditor


class Operation(Protocol):
    """Protocol for diagram operations.

    All operations must implement this interface to be compatible
    with the operation registry and execution engine.
    """

    def precheck(self, diagram: Diagram, **kwargs: Any) -> bool:
        """Validate that the operation can be applied to the diagram.

        Raises:
            ValueError: If a referenced item does not exist or a parameter
                is invalid.
        """
        ...

    def apply(self, diagram: Diagram, **kwargs: Any) -> Diagram:
        """Apply the operation and return the new diagram."""
        ...


def as_point(value: Any) -> Point:
    """Convert an ``[x, y]`` pair (or a Point) to a Point.

    Raises:
        ValueError: If the value is not a pair of numbers.
    """
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        value = (value.get("x"), value.get("y"))
    try:
        x, y = value
        return Point(float(x), float(y))
    except (TypeError, ValueError):
        raise ValueError(f"Expected a point as [x, y], got {value!r}") from None


def _require(mapping, item_id: str, label: str) -> None:
    if item_id not in mapping:
        raise ValueError(f"{label} '{item_id}' does not exist")


class AddWallOp:
    """Add a straight wall between two points."""

    def precheck(self, diagram: Diagram, a: Sequence[float], b: Sequence[float], id: str | None = None, **kwargs: Any) -> bool:
        if as_point(a) == as_point(b):
            raise ValueError("A wall needs two distinct endpoints")
        if id is not None and id in diagram.walls:
            raise ValueError(f"Wall '{id}' already exists")
        return True

    def apply(
        self,
        diagram: Diagram,
        a: Sequence[float],
        b: Sequence[float],
        id: str | None = None,
        thickness: float = config.DEFAULT_WALL_THICKNESS,
        **kwargs: Any,
    ) -> Diagram:
        wall = Wall(id=id or new_id("wall"), a=as_point(a), b=as_point(b), thickness=float(thickness))
        return add_walls(diagram, [wall])


class AddRoomOp:
    """Add the four walls of a rectangular room.

    When ``id`` is given it becomes the room's group id and the walls are
    named ``<id>-top``, ``<id>-right``, ``<id>-bottom`` and ``<id>-left``.
    """

    SIDES = ("top", "right", "bottom", "left")

    def precheck(self, diagram: Diagram, corner: Sequence[float], opposite: Sequence[float], **kwargs: Any) -> bool:
        if not room_walls(as_point(corner), as_point(opposite)):
            raise ValueError(f"Room sides must exceed {config.MIN_ROOM_SIZE} px")
        return True

    def apply(
        self,
        diagram: Diagram,
        corner: Sequence[float],
        opposite: Sequence[float],
        id: str | None = None,
        **kwargs: Any,
    ) -> Diagram:
        walls = room_walls(as_point(corner), as_point(opposite), group=id)
        if id is not None:
            walls = [replace(wall, id=f"{id}-{side}") for wall, side in zip(walls, self.SIDES)]
        return add_walls(diagram, walls)


class MoveWallOp:
    """Translate a wall; connected walls and mounted symbols follow."""

    def precheck(self, diagram: Diagram, wall: str, dx: float = 0.0, dy: float = 0.0, **kwargs: Any) -> bool:
        _require(diagram.walls, wall, "Wall")
        return True

    def apply(self, diagram: Diagram, wall: str, dx: float = 0.0, dy: float = 0.0, **kwargs: Any) -> Diagram:
        return drag_wall(diagram, wall, float(dx), float(dy))


class MoveWallEndpointOp:
    """Move one endpoint of a wall, snapping onto other walls' vertices."""

    def precheck(self, diagram: Diagram, wall: str, end: str, point: Sequence[float], **kwargs: Any) -> bool:
        _require(diagram.walls, wall, "Wall")
        if end not in ("a", "b"):
            raise ValueError(f"Wall end must be 'a' or 'b', got {end!r}")
        as_point(point)
        return True

    def apply(self, diagram: Diagram, wall: str, end: str, point: Sequence[float], **kwargs: Any) -> Diagram:
        editor = DiagramEditor(diagram)
        editor.move_wall_endpoint(wall, end, as_point(point))
        return editor.diagram


class SetWallLengthOp:
    """Resize a wall to a length in meters, keeping its start and direction."""

    def precheck(self, diagram: Diagram, wall: str, meters: Any, **kwargs: Any) -> bool:
        _require(diagram.walls, wall, "Wall")
        try:
            length = float(meters)
        except (TypeError, ValueError):
            raise ValueError(f"Wall length must be a number, got {meters!r}") from None
        if not math.isfinite(length) or length <= 0:
            raise ValueError(f"Wall length must be positive, got {meters!r}")
        return True

    def apply(self, diagram: Diagram, wall: str, meters: Any, **kwargs: Any) -> Diagram:
        editor = DiagramEditor(diagram)
        editor.set_wall_length(wall, meters)
        return editor.diagram


class AddComponentOp:
    """Place a symbol; extra parameters become its properties."""

    def precheck(self, diagram: Diagram, kind: str, position: Sequence[float], id: str | None = None, **kwargs: Any) -> bool:
        as_point(position)
        if id is not None and id in diagram.components:
            raise ValueError(f"Component '{id}' already exists")
        return True

    def apply(
        self, diagram: Diagram, kind: str, position: Sequence[float], id: str | None = None, **properties: Any
    ) -> Diagram:
        editor = DiagramEditor(diagram)
        component = editor.add_component(kind, as_point(position), **properties)
        if id is not None:
            # Re-key under the requested id
            components = dict(diagram.components)
            components[id] = replace(component, id=id)
            return replace(diagram, components=components)
        return editor.diagram


class MoveComponentOp:
    def precheck(self, diagram: Diagram, component: str, position: Sequence[float], **kwargs: Any) -> bool:
        _require(diagram.components, component, "Component")
        as_point(position)
        return True

    def apply(self, diagram: Diagram, component: str, position: Sequence[float], **kwargs: Any) -> Diagram:
        components = dict(diagram.components)
        components[component] = replace(components[component], position=as_point(position))
        return replace(diagram, components=components)


class DeleteComponentOp:
    """Delete a symbol and every wire attached to it."""

    def precheck(self, diagram: Diagram, component: str, **kwargs: Any) -> bool:
        _require(diagram.components, component, "Component")
        return True

    def apply(self, diagram: Diagram, component: str, **kwargs: Any) -> Diagram:
        return remove_component(diagram, component)


class DeleteWallOp:
    def precheck(self, diagram: Diagram, wall: str, **kwargs: Any) -> bool:
        _require(diagram.walls, wall, "Wall")
        return True

    def apply(self, diagram: Diagram, wall: str, whole_group: bool = False, **kwargs: Any) -> Diagram:
        return remove_wall(diagram, wall, bool(whole_group))


class ConnectOp:
    """Run a wire between two distinct components."""

    def precheck(self, diagram: Diagram, start: str, end: str, id: str | None = None, **kwargs: Any) -> bool:
        _require(diagram.components, start, "Component")
        _require(diagram.components, end, "Component")
        if start == end:
            raise ValueError("A wire must connect two different components")
        if id is not None and id in diagram.wires:
            raise ValueError(f"Wire '{id}' already exists")
        return True

    def apply(self, diagram: Diagram, start: str, end: str, id: str | None = None, **properties: Any) -> Diagram:
        if "control_offset" in properties:
            properties["control_offset"] = as_point(properties["control_offset"])
        try:
            wire = Wire(id=id or new_id("wire"), start=start, end=end, **properties)
        except TypeError as e:
            raise ValueError(f"Invalid wire properties: {e}") from e
        wires = dict(diagram.wires)
        wires[wire.id] = wire
        return replace(diagram, wires=wires)


class DeleteWireOp:
    def precheck(self, diagram: Diagram, wire: str, **kwargs: Any) -> bool:
        _require(diagram.wires, wire, "Wire")
        return True

    def apply(self, diagram: Diagram, wire: str, **kwargs: Any) -> Diagram:
        wires = {wid: w for wid, w in diagram.wires.items() if wid != wire}
        return replace(diagram, wires=wires)


class SetWireCurveOp:
    """Bend a wire.

    Either ``handle`` (absolute position of the control handle) or
    ``offset`` (displacement from the default control point) is given.
    """

    def precheck(self, diagram: Diagram, wire: str, handle=None, offset=None, **kwargs: Any) -> bool:
        _require(diagram.wires, wire, "Wire")
        if (handle is None) == (offset is None):
            raise ValueError("Give exactly one of 'handle' or 'offset'")
        as_point(handle if handle is not None else offset)
        return True

    def apply(self, diagram: Diagram, wire: str, handle=None, offset=None, **kwargs: Any) -> Diagram:
        record = diagram.wires[wire]
        if handle is not None:
            new_offset = offset_for_handle(diagram, record, as_point(handle))
            if new_offset is None:
                return diagram
        else:
            new_offset = as_point(offset)
        wires = dict(diagram.wires)
        wires[wire] = replace(record, control_offset=new_offset)
        return replace(diagram, wires=wires)


class CalibrateOp:
    """Set the drawing scale from two points and their real distance."""

    def precheck(self, diagram: Diagram, a: Sequence[float], b: Sequence[float], meters: Any, **kwargs: Any) -> bool:
        if calibrate(as_point(a), as_point(b), meters) is None:
            raise ValueError("Calibration needs two distinct points and a positive distance")
        return True

    def apply(self, diagram: Diagram, a: Sequence[float], b: Sequence[float], meters: Any, **kwargs: Any) -> Diagram:
        return replace(diagram, calibration=calibrate(as_point(a), as_point(b), meters))


# Registry of available operations
_OPERATIONS: Dict[str, Operation] = {
    "add_wall": AddWallOp(),
    "add_room": AddRoomOp(),
    "move_wall": MoveWallOp(),
    "move_wall_endpoint": MoveWallEndpointOp(),
    "set_wall_length": SetWallLengthOp(),
    "add_component": AddComponentOp(),
    "move_component": MoveComponentOp(),
    "delete_component": DeleteComponentOp(),
    "delete_wall": DeleteWallOp(),
    "connect": ConnectOp(),
    "delete_wire": DeleteWireOp(),
    "set_wire_curve": SetWireCurveOp(),
    "calibrate": CalibrateOp(),
}


def register_operation(name: str, operation: Operation) -> None:
    """Register a new operation in the registry.

    Args:
        name: Name of the operation.
        operation: Operation instance to register.
    """
    _OPERATIONS[name] = operation


def get_operation(name: str) -> Operation:
    """Get an operation by name.

    Args:
        name: Name of the operation.

    Returns:
        The operation instance.

    Raises:
        KeyError: If the operation is not registered.
    """
    if name not in _OPERATIONS:
        raise KeyError(f"Operation '{name}' is not registered")
    return _OPERATIONS[name]


def list_operations() -> list[str]:
    """List all registered operations."""
    return list(_OPERATIONS.keys())
