"""Parser for diagram JSON files.

This module converts Diagram objects to and from plain JSON documents.
Points are stored as ``[x, y]`` pairs, enums by value, and wires reference
their components by id. Loading is forgiving about referential integrity:
zero-length walls are dropped and wires pointing at missing components
are pruned, both with a warning.
"""

from __future__ import annotations

import json
import logging
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, TypedDict

from ..core.model import Calibration, Component, Diagram, Dimension, Point, Wall, Wire, component_class
from ..geom.edit import prune_wires

LOGGER = logging.getLogger(__name__)

FORMAT_VERSION = 1

# Component fields holding points
_POINT_FIELDS = ("position", "leader")


class WallRecord(TypedDict, total=False):
    a: List[float]
    b: List[float]
    thickness: float
    group: str | None


class WireRecord(TypedDict, total=False):
    start: str
    end: str
    control_offset: List[float]
    routing: str
    scheme: str
    gauge: float | None


class CalibrationRecord(TypedDict, total=False):
    pixels_per_meter: float
    points: List[List[float]] | None


def _point_to_list(point: Point) -> List[float]:
    return [point.x, point.y]


def _point_from_list(value: Any) -> Point:
    try:
        x, y = value
        return Point(float(x), float(y))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid point: {value!r}") from None


def _plain(value: Any) -> Any:
    if isinstance(value, Point):
        return _point_to_list(value)
    if isinstance(value, Enum):
        return value.value
    return value


def component_to_dict(component: Component) -> Dict[str, Any]:
    record: Dict[str, Any] = {"kind": component.kind}
    for f in fields(component):
        if f.name != "id":
            record[f.name] = _plain(getattr(component, f.name))
    return record


def component_from_dict(component_id: str, record: Dict[str, Any]) -> Component:
    """Build a component from its record.

    Raises:
        ValueError: If the kind is unknown or a property is invalid for it.
    """
    data = dict(record)
    cls = component_class(data.pop("kind", None))
    for name in _POINT_FIELDS:
        if name in data:
            data[name] = _point_from_list(data[name])
    try:
        return cls(id=component_id, **data)
    except TypeError as e:
        raise ValueError(f"Invalid properties for {cls.kind}: {e}") from e


def diagram_to_dict(diagram: Diagram) -> Dict[str, Any]:
    """Convert a diagram to a JSON-serializable dictionary."""
    calibration = diagram.calibration
    return {
        "version": FORMAT_VERSION,
        "walls": {
            wall_id: {
                "a": _point_to_list(wall.a),
                "b": _point_to_list(wall.b),
                "thickness": wall.thickness,
                "group": wall.group,
            }
            for wall_id, wall in diagram.walls.items()
        },
        "components": {
            component_id: component_to_dict(component) for component_id, component in diagram.components.items()
        },
        "wires": {
            wire_id: {
                "start": wire.start,
                "end": wire.end,
                "control_offset": _point_to_list(wire.control_offset),
                "routing": wire.routing.value,
                "scheme": wire.scheme,
                "gauge": wire.gauge,
            }
            for wire_id, wire in diagram.wires.items()
        },
        "dimensions": {
            dim_id: {"a": _point_to_list(dim.a), "b": _point_to_list(dim.b)}
            for dim_id, dim in diagram.dimensions.items()
        },
        "calibration": {
            "pixels_per_meter": calibration.pixels_per_meter,
            "points": [_point_to_list(p) for p in calibration.points] if calibration.points else None,
        },
    }


def _wall_from_dict(wall_id: str, record: WallRecord) -> Wall:
    kwargs: Dict[str, Any] = {"group": record.get("group")}
    if "thickness" in record:
        kwargs["thickness"] = float(record["thickness"])
    return Wall(id=wall_id, a=_point_from_list(record["a"]), b=_point_from_list(record["b"]), **kwargs)


def _wire_from_dict(wire_id: str, record: WireRecord) -> Wire:
    data: Dict[str, Any] = dict(record)
    if "control_offset" in data:
        data["control_offset"] = _point_from_list(data["control_offset"])
    return Wire(id=wire_id, **data)


def _calibration_from_dict(record: CalibrationRecord | None) -> Calibration:
    if not record:
        return Calibration()
    pixels_per_meter = float(record.get("pixels_per_meter", Calibration().pixels_per_meter))
    if pixels_per_meter <= 0:
        raise ValueError(f"Invalid pixels_per_meter: {pixels_per_meter}")
    points = record.get("points")
    return Calibration(
        pixels_per_meter=pixels_per_meter,
        points=tuple(_point_from_list(p) for p in points) if points else None,
    )


def diagram_from_dict(data: Dict[str, Any]) -> Diagram:
    """Build a diagram from a dictionary produced by ``diagram_to_dict``.

    Raises:
        ValueError: If a record is malformed.
    """
    walls = {}
    for wall_id, record in data.get("walls", {}).items():
        try:
            wall = _wall_from_dict(wall_id, record)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid wall data for {wall_id}: {e}") from e
        if wall.is_degenerate:
            LOGGER.warning("Dropped zero-length wall %s", wall_id)
            continue
        walls[wall_id] = wall

    components = {}
    for component_id, record in data.get("components", {}).items():
        try:
            components[component_id] = component_from_dict(component_id, record)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid component data for {component_id}: {e}") from e

    wires = {}
    for wire_id, record in data.get("wires", {}).items():
        try:
            wires[wire_id] = _wire_from_dict(wire_id, record)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid wire data for {wire_id}: {e}") from e

    dimensions = {}
    for dim_id, record in data.get("dimensions", {}).items():
        try:
            dimensions[dim_id] = Dimension(id=dim_id, a=_point_from_list(record["a"]), b=_point_from_list(record["b"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid dimension data for {dim_id}: {e}") from e

    diagram = Diagram(
        walls=walls,
        components=components,
        wires=wires,
        dimensions=dimensions,
        calibration=_calibration_from_dict(data.get("calibration")),
    )
    return prune_wires(diagram)


def load_diagram(path: str | Path) -> Diagram:
    """Load a diagram from a JSON file.

    Args:
        path: Path to the JSON file containing diagram data.

    Returns:
        Diagram object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON data is invalid or malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    return diagram_from_dict(data)


def save_diagram(diagram: Diagram, path: str | Path) -> None:
    """Save a diagram to a JSON file, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(diagram_to_dict(diagram), f, indent=2)
