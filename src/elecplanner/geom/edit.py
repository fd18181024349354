"""Geometric editing functions for diagram operations.

This module provides the connectivity-preserving transforms used while
editing: propagated wall drags, endpoint moves, room synthesis, cascading
deletes and wire curve handling. Every function is pure: it takes a
Diagram and returns a new one.

Connectivity is never stored. Two walls are connected when an endpoint of
one lies within ``config.SNAP_TOLERANCE`` of an endpoint of the other, and a
component is mounted on a wall when it lies within the same tolerance of
the wall segment. The same constant drives snapping, so a vertex snapped
while drawing is always found again when dragging.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Dict, List

from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint

from .. import config
from ..core.model import Component, Diagram, Point, Wall, Wire
from .snap import within_tolerance

LOGGER = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Generate a unique identifier such as ``wall-3f2a9c1b``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _wall_line(wall: Wall) -> LineString:
    return LineString([(wall.a.x, wall.a.y), (wall.b.x, wall.b.y)])


def find_connected_walls(diagram: Diagram, wall_id: str, tolerance: float = config.SNAP_TOLERANCE) -> List[str]:
    """Find walls that share an endpoint with the given wall."""
    if wall_id not in diagram.walls:
        return []

    target = diagram.walls[wall_id]
    connected = []

    for other_id, other in diagram.walls.items():
        if other_id == wall_id:
            continue
        if any(
            within_tolerance(p, q, tolerance)
            for p in (target.a, target.b)
            for q in (other.a, other.b)
        ):
            connected.append(other_id)

    return connected


def mounted_components(diagram: Diagram, wall: Wall, tolerance: float = config.SNAP_TOLERANCE) -> List[str]:
    """Return IDs of components lying on the wall segment.

    A component is mounted when the perpendicular distance from its anchor
    to the segment (clamped at the endpoints) is below ``tolerance``.
    """
    line = _wall_line(wall)
    return [
        component_id
        for component_id, component in diagram.components.items()
        if line.distance(ShapelyPoint(component.position.x, component.position.y)) < tolerance
    ]


def translate_component(component: Component, dx: float, dy: float) -> Component:
    """Move a component's anchor; relative data such as label leaders is kept."""
    return replace(component, position=component.position.offset(dx, dy))


def drag_wall(diagram: Diagram, wall_id: str, dx: float, dy: float) -> Diagram:
    """Translate a wall and everything attached to it.

    Every endpoint of another wall that coincides with one of the dragged
    wall's endpoints is translated by the same delta, as is every
    component mounted on the wall. Matching is done against the wall as it
    was before the move, in a single pass, so connections never chain
    through walls that were themselves just moved.

    Args:
        diagram: The diagram to update.
        wall_id: ID of the wall being dragged.
        dx: Horizontal translation in pixels.
        dy: Vertical translation in pixels.

    Returns:
        A new Diagram, or the same one if the wall is unknown or the delta
        is zero.
    """
    if wall_id not in diagram.walls or (dx == 0 and dy == 0):
        return diagram

    original = diagram.walls[wall_id]
    anchors = (original.a, original.b)

    new_walls: Dict[str, Wall] = {}
    for other_id, other in diagram.walls.items():
        if other_id == wall_id:
            new_walls[other_id] = replace(other, a=other.a.offset(dx, dy), b=other.b.offset(dx, dy))
            continue

        new_a = other.a
        new_b = other.b
        if any(within_tolerance(other.a, anchor) for anchor in anchors):
            new_a = other.a.offset(dx, dy)
        if any(within_tolerance(other.b, anchor) for anchor in anchors):
            new_b = other.b.offset(dx, dy)

        if new_a != other.a or new_b != other.b:
            new_walls[other_id] = replace(other, a=new_a, b=new_b)
        else:
            new_walls[other_id] = other

    moved = set(mounted_components(diagram, original))
    new_components = {
        component_id: translate_component(component, dx, dy) if component_id in moved else component
        for component_id, component in diagram.components.items()
    }

    LOGGER.debug("Dragged wall %s by (%.1f, %.1f); %d mounted components followed", wall_id, dx, dy, len(moved))
    return replace(diagram, walls=new_walls, components=new_components)


def set_wall_endpoint(diagram: Diagram, wall_id: str, end: str, point: Point) -> Diagram:
    """Move a single endpoint (``"a"`` or ``"b"``) of a wall to ``point``.

    Raises:
        ValueError: If ``end`` is not ``"a"`` or ``"b"``.
    """
    if end not in ("a", "b"):
        raise ValueError(f"Wall end must be 'a' or 'b', got {end!r}")
    if wall_id not in diagram.walls:
        return diagram

    walls = dict(diagram.walls)
    walls[wall_id] = replace(walls[wall_id], **{end: point})
    return replace(diagram, walls=walls)


def room_walls(
    corner: Point,
    opposite: Point,
    group: str | None = None,
    thickness: float = config.DEFAULT_WALL_THICKNESS,
    min_size: float = config.MIN_ROOM_SIZE,
) -> List[Wall]:
    """Synthesize the four walls of an axis-aligned room.

    Args:
        corner: Point where the drag started.
        opposite: Point where the drag ended.
        group: Group id shared by the four walls; generated if omitted.
        thickness: Wall thickness.
        min_size: Both sides must exceed this many pixels.

    Returns:
        Four walls forming a closed rectangle (top, right, bottom, left),
        or an empty list when the rectangle is too small.
    """
    x0, x1 = sorted((corner.x, opposite.x))
    y0, y1 = sorted((corner.y, opposite.y))
    if x1 - x0 <= min_size or y1 - y0 <= min_size:
        LOGGER.debug("Room rejected: %.1f x %.1f px is below the minimum size", x1 - x0, y1 - y0)
        return []

    group = group or new_id("room")
    corners = [Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)]
    return [
        Wall(id=new_id("wall"), a=corners[i], b=corners[(i + 1) % 4], thickness=thickness, group=group)
        for i in range(4)
    ]


def add_walls(diagram: Diagram, walls: List[Wall]) -> Diagram:
    """Add walls to the diagram, skipping degenerate ones."""
    kept = [wall for wall in walls if not wall.is_degenerate]
    if not kept:
        return diagram
    new_walls = dict(diagram.walls)
    new_walls.update({wall.id: wall for wall in kept})
    return replace(diagram, walls=new_walls)


def remove_wall(diagram: Diagram, wall_id: str, whole_group: bool = False) -> Diagram:
    """Delete a wall, or every wall of its room when ``whole_group`` is set."""
    wall = diagram.walls.get(wall_id)
    if wall is None:
        return diagram

    if whole_group and wall.group is not None:
        doomed = {wid for wid, w in diagram.walls.items() if w.group == wall.group}
    else:
        doomed = {wall_id}

    walls = {wid: w for wid, w in diagram.walls.items() if wid not in doomed}
    return replace(diagram, walls=walls)


def remove_component(diagram: Diagram, component_id: str) -> Diagram:
    """Delete a component together with every wire referencing it."""
    if component_id not in diagram.components:
        return diagram

    components = {cid: c for cid, c in diagram.components.items() if cid != component_id}
    wires = {wid: w for wid, w in diagram.wires.items() if not w.references(component_id)}
    LOGGER.debug(
        "Removed component %s and %d wires", component_id, len(diagram.wires) - len(wires)
    )
    return replace(diagram, components=components, wires=wires)


def prune_wires(diagram: Diagram) -> Diagram:
    """Drop wires whose start or end component no longer exists."""
    wires = {
        wid: w
        for wid, w in diagram.wires.items()
        if w.start in diagram.components and w.end in diagram.components
    }
    if len(wires) == len(diagram.wires):
        return diagram
    LOGGER.warning("Pruned %d wires referencing missing components", len(diagram.wires) - len(wires))
    return replace(diagram, wires=wires)


def default_control_point(start: Point, end: Point) -> Point:
    """Control point of a freshly drawn wire.

    The midpoint of the two anchors, displaced perpendicular to the segment
    by a fixed fraction of its length.
    """
    mid_x = (start.x + end.x) / 2
    mid_y = (start.y + end.y) / 2
    dx = end.x - start.x
    dy = end.y - start.y
    return Point(mid_x - dy * config.WIRE_CURVE_FACTOR, mid_y + dx * config.WIRE_CURVE_FACTOR)


def wire_anchors(diagram: Diagram, wire: Wire) -> tuple | None:
    """Return the (start, end) anchor points of a wire, or None if dangling."""
    start = diagram.components.get(wire.start)
    end = diagram.components.get(wire.end)
    if start is None or end is None:
        return None
    return start.position, end.position


def control_point(diagram: Diagram, wire: Wire) -> Point | None:
    """Absolute control point of a wire's quadratic curve."""
    anchors = wire_anchors(diagram, wire)
    if anchors is None:
        return None
    base = default_control_point(*anchors)
    return base.offset(wire.control_offset.x, wire.control_offset.y)


def offset_for_handle(diagram: Diagram, wire: Wire, handle: Point) -> Point | None:
    """Control offset that puts the curve's control point at ``handle``."""
    anchors = wire_anchors(diagram, wire)
    if anchors is None:
        return None
    base = default_control_point(*anchors)
    return Point(handle.x - base.x, handle.y - base.y)


def curve_point(p0: Point, control: Point, p2: Point, t: float) -> Point:
    """Point at parameter ``t`` on the quadratic Bezier ``p0``-``control``-``p2``."""
    u = 1 - t
    return Point(
        u * u * p0.x + 2 * u * t * control.x + t * t * p2.x,
        u * u * p0.y + 2 * u * t * control.y + t * t * p2.y,
    )


def wire_path(diagram: Diagram, wire: Wire, samples: int = 16) -> LineString | None:
    """Polyline approximation of a wire's curve, for length measurements."""
    anchors = wire_anchors(diagram, wire)
    if anchors is None:
        return None
    start, end = anchors
    if start == end:
        return None
    control = control_point(diagram, wire)
    points = [curve_point(start, control, end, i / samples) for i in range(samples + 1)]
    return LineString([(p.x, p.y) for p in points])
