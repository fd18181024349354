"""Vertex and angle snapping for wall drawing.

Snapping never fails: every call returns a usable point, either the
snapped one or the input unchanged.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .. import config
from ..core.model import Point, Wall

_DIAGONAL = math.sqrt(0.5)

# Exact unit vectors so axis-aligned snaps land on exact coordinates
_DIRECTIONS = {
    0: (1.0, 0.0),
    45: (_DIAGONAL, _DIAGONAL),
    90: (0.0, 1.0),
    135: (-_DIAGONAL, _DIAGONAL),
    180: (-1.0, 0.0),
    225: (-_DIAGONAL, -_DIAGONAL),
    270: (0.0, -1.0),
    315: (_DIAGONAL, -_DIAGONAL),
}


@dataclass(frozen=True)
class SnapResult:
    """Outcome of a vertex snap.

    Attributes:
        point: The resolved point.
        snapped: True if the point was locked onto a wall endpoint.
    """

    point: Point
    snapped: bool


@dataclass(frozen=True)
class AngleSnap:
    """Outcome of an angle snap.

    Attributes:
        point: The resolved free end of the wall.
        angle: The snapped direction in degrees [0, 360), or None.
    """

    point: Point
    angle: float | None


def within_tolerance(p: Point, q: Point, tolerance: float = config.SNAP_TOLERANCE) -> bool:
    """Check whether two points coincide within ``tolerance`` on both axes."""
    return abs(p.x - q.x) < tolerance and abs(p.y - q.y) < tolerance


def _iter_walls(walls: Mapping[str, Wall] | Iterable[Wall]) -> Iterable[Wall]:
    if isinstance(walls, Mapping):
        return walls.values()
    return walls


def resolve(
    point: Point,
    walls: Mapping[str, Wall] | Iterable[Wall],
    exclude_wall_id: str | None = None,
    tolerance: float = config.SNAP_TOLERANCE,
) -> SnapResult:
    """Lock a point onto the nearest wall endpoint within tolerance.

    There is no grid magnetism; the grid is a visual aid only.

    Args:
        point: Candidate point.
        walls: Existing walls, as a mapping or any iterable.
        exclude_wall_id: Wall whose own endpoints are ignored (endpoint drags).
        tolerance: Per-axis pixel tolerance.

    Returns:
        SnapResult with the endpoint and ``snapped=True``, or the original
        point and ``snapped=False``.
    """
    best: Point | None = None
    best_distance = math.inf

    for wall in _iter_walls(walls):
        if exclude_wall_id is not None and str(wall.id) == str(exclude_wall_id):
            continue
        for endpoint in (wall.a, wall.b):
            if not within_tolerance(point, endpoint, tolerance):
                continue
            distance = point.distance_to(endpoint)
            if distance < best_distance:
                best, best_distance = endpoint, distance

    if best is None:
        return SnapResult(point=point, snapped=False)
    return SnapResult(point=best, snapped=True)


def raw_angle(anchor: Point, free_point: Point) -> float:
    """Direction from ``anchor`` to ``free_point`` in degrees, in [0, 360)."""
    angle = math.degrees(math.atan2(free_point.y - anchor.y, free_point.x - anchor.x))
    if angle < 0:
        angle += 360.0
    return angle


def resolve_angle(
    anchor: Point,
    free_point: Point,
    tolerance: float = config.ANGLE_SNAP_TOLERANCE,
) -> AngleSnap:
    """Snap the direction of a wall being drawn to a multiple of 45 degrees.

    The snapped point keeps the distance from the anchor and moves onto the
    nearest standard direction when the raw angle is within ``tolerance``.

    Args:
        anchor: Fixed start of the wall.
        free_point: Current pointer position.
        tolerance: Angular tolerance in degrees.

    Returns:
        AngleSnap with the snapped point and angle, or the raw point and None.
    """
    dx = free_point.x - anchor.x
    dy = free_point.y - anchor.y
    distance = math.hypot(dx, dy)
    if distance == 0:
        return AngleSnap(point=free_point, angle=None)

    angle = raw_angle(anchor, free_point)
    for target in config.SNAP_ANGLES:
        gap = abs(angle - target)
        if gap < tolerance or gap > 360 - tolerance:
            ux, uy = _DIRECTIONS[target % 360]
            snapped = Point(anchor.x + distance * ux, anchor.y + distance * uy)
            return AngleSnap(point=snapped, angle=float(target % 360))

    return AngleSnap(point=free_point, angle=None)
