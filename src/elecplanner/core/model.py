"""Core data models for electrical floor plans.

This module defines the fundamental data structures used to represent
a diagram: walls, placed electrical symbols, the wires connecting them,
dimension annotations and the drawing scale.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Tuple, Type

from .. import config

CONDUCTOR_CODES = {
    "F": "phase",
    "N": "neutral",
    "T": "protective earth",
    "R": "switched return",
}


class MountingHeight(str, Enum):
    """Mounting-height tier of a wall-mounted symbol."""

    LOW = "low"  # ~0.30 m
    MEDIUM = "medium"  # ~1.20 m
    HIGH = "high"  # ~2.00 m


class WireRouting(str, Enum):
    """How a circuit run is installed."""

    SURFACE = "surface"
    BURIED = "buried"


def validate_scheme(scheme: str) -> str:
    """Validate a conductor-scheme code such as ``"FNT"``.

    Args:
        scheme: One letter per conductor (F, N, T or R).

    Returns:
        The scheme, upper-cased.

    Raises:
        ValueError: If the scheme is empty or contains an unknown letter.
    """
    code = str(scheme).upper()
    if not code or any(letter not in CONDUCTOR_CODES for letter in code):
        raise ValueError(f"Invalid conductor scheme: {scheme!r}")
    return code


def circuit_id(value: Any) -> str | None:
    """Normalize a circuit identifier.

    Identifiers are compared as stripped strings, so ``2`` and ``" 2 "``
    name the same circuit. Empty values and ``"unknown"`` mean the component
    is not assigned to any circuit.
    """
    if value is None:
        return None
    circuit = str(value).strip()
    if not circuit or circuit.lower() == "unknown":
        return None
    return circuit


def rated_power(value: Any) -> float:
    """Coerce a rated power to float.

    Raises:
        ValueError: If the value is not a finite, non-negative number.
    """
    try:
        power = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid rated power: {value!r}") from None
    if not math.isfinite(power) or power < 0:
        raise ValueError(f"Rated power must be a non-negative number, got {value!r}")
    return power


@dataclass(frozen=True)
class Point:
    """Represents a 2D point in diagram units (pixels).

    Attributes:
        x: The x-coordinate of the point.
        y: The y-coordinate of the point.
    """

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Wall:
    """Represents a wall segment.

    Walls do not store which other walls they touch; connectivity is
    inferred from endpoint coincidence whenever it is needed.

    Attributes:
        id: Unique identifier for the wall.
        a: Starting point of the wall.
        b: Ending point of the wall.
        thickness: Drawn thickness in pixels.
        group: Shared tag of walls synthesized together as a room.
    """

    id: str
    a: Point
    b: Point
    thickness: float = config.DEFAULT_WALL_THICKNESS
    group: str | None = None

    @property
    def length(self) -> float:
        return self.a.distance_to(self.b)

    @property
    def is_degenerate(self) -> bool:
        return self.a == self.b


@dataclass(frozen=True)
class Component:
    """Base class of every placed symbol.

    Attributes:
        id: Unique identifier for the component.
        position: Anchor point of the symbol.
        rotation: Rotation in degrees.
        mirrored: Whether the symbol is flipped horizontally.
    """

    kind: ClassVar[str] = ""

    id: str
    position: Point
    rotation: float = 0.0
    mirrored: bool = False


@dataclass(frozen=True)
class Socket(Component):
    """Wall or floor outlet, optionally combined with a switch."""

    kind: ClassVar[str] = "socket"

    rated_power: float = 100.0  # VA
    circuit: str | None = "1"
    mounting: MountingHeight = MountingHeight.LOW
    scheme: str = "FNT"
    gang: int = 1
    floor: bool = False
    with_switch: bool = False

    def __post_init__(self) -> None:
        if self.gang not in (1, 2, 3):
            raise ValueError(f"Socket gang must be 1, 2 or 3, got {self.gang}")
        object.__setattr__(self, "rated_power", rated_power(self.rated_power))
        object.__setattr__(self, "mounting", MountingHeight(self.mounting))
        object.__setattr__(self, "scheme", validate_scheme(self.scheme))


@dataclass(frozen=True)
class Switch(Component):
    kind: ClassVar[str] = "switch"

    circuit: str | None = "1"
    mounting: MountingHeight = MountingHeight.MEDIUM
    scheme: str = "FNR"
    gang: int = 1

    def __post_init__(self) -> None:
        if self.gang not in (1, 2, 3):
            raise ValueError(f"Switch gang must be 1, 2 or 3, got {self.gang}")
        object.__setattr__(self, "mounting", MountingHeight(self.mounting))
        object.__setattr__(self, "scheme", validate_scheme(self.scheme))


@dataclass(frozen=True)
class LightFixture(Component):
    kind: ClassVar[str] = "light"

    rated_power: float = 100.0  # W
    circuit: str | None = "1"
    mounting: MountingHeight = MountingHeight.HIGH
    scheme: str = "FN"

    def __post_init__(self) -> None:
        object.__setattr__(self, "rated_power", rated_power(self.rated_power))
        object.__setattr__(self, "mounting", MountingHeight(self.mounting))
        object.__setattr__(self, "scheme", validate_scheme(self.scheme))


@dataclass(frozen=True)
class Panel(Component):
    """Distribution board feeding the circuits."""

    kind: ClassVar[str] = "panel"

    label: str = "QGBT"


@dataclass(frozen=True)
class Door(Component):
    kind: ClassVar[str] = "door"

    width: float = 32.0


@dataclass(frozen=True)
class Window(Component):
    kind: ClassVar[str] = "window"

    width: float = 48.0


@dataclass(frozen=True)
class WallOpening(Component):
    kind: ClassVar[str] = "opening"

    width: float = 32.0


@dataclass(frozen=True)
class WireLabel(Component):
    """Conductor tag pointing at a run.

    The leader is an offset relative to the anchor, so moving the label
    keeps the arrow where the user placed it relative to the tag.
    """

    kind: ClassVar[str] = "wire_label"

    circuit: str | None = None
    scheme: str = "FNT"
    gauge: float | None = None  # mm²
    leader: Point = field(default_factory=lambda: Point(*config.WIRE_LABEL_LEADER))

    def __post_init__(self) -> None:
        object.__setattr__(self, "scheme", validate_scheme(self.scheme))

    @property
    def leader_tip(self) -> Point:
        return self.position.offset(self.leader.x, self.leader.y)


COMPONENT_KINDS: Dict[str, Type[Component]] = {
    cls.kind: cls
    for cls in (Socket, Switch, LightFixture, Panel, Door, Window, WallOpening, WireLabel)
}


def component_class(kind: str) -> Type[Component]:
    """Return the component class registered for ``kind``.

    Raises:
        ValueError: If the kind is not one of the known symbols.
    """
    try:
        return COMPONENT_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown component kind: {kind!r}") from None


@dataclass(frozen=True)
class Wire:
    """Represents a physical circuit run between two components.

    Attributes:
        id: Unique identifier for the wire.
        start: ID of the component where the run starts.
        end: ID of the component where the run ends.
        control_offset: User displacement added to the derived control point.
        routing: Surface or buried installation.
        scheme: Conductor-scheme code of the run.
        gauge: Conductor cross-section in mm², if specified.
    """

    id: str
    start: str
    end: str
    control_offset: Point = Point(0.0, 0.0)
    routing: WireRouting = WireRouting.SURFACE
    scheme: str = "FNT"
    gauge: float | None = 1.5

    def __post_init__(self) -> None:
        if not isinstance(self.control_offset, Point):
            try:
                dx, dy = self.control_offset
                object.__setattr__(self, "control_offset", Point(float(dx), float(dy)))
            except (TypeError, ValueError):
                raise ValueError(f"Invalid control offset: {self.control_offset!r}") from None
        object.__setattr__(self, "routing", WireRouting(self.routing))
        object.__setattr__(self, "scheme", validate_scheme(self.scheme))

    def references(self, component_id: str) -> bool:
        return self.start == component_id or self.end == component_id


@dataclass(frozen=True)
class Dimension:
    """Measurement annotation drawn with the tape-measure tool."""

    id: str
    a: Point
    b: Point

    @property
    def length(self) -> float:
        return self.a.distance_to(self.b)


@dataclass(frozen=True)
class Calibration:
    """Drawing scale.

    Attributes:
        pixels_per_meter: Diagram units per real-world meter.
        points: The two reference points the scale was measured on, if any.
    """

    pixels_per_meter: float = config.DEFAULT_PIXELS_PER_METER
    points: Tuple[Point, Point] | None = None


@dataclass(frozen=True)
class Diagram:
    """Represents a complete electrical floor plan.

    Attributes:
        walls: Mapping of wall ID to Wall objects.
        components: Mapping of component ID to Component objects.
        wires: Mapping of wire ID to Wire objects.
        dimensions: Mapping of dimension ID to Dimension objects.
        calibration: Current drawing scale.
    """

    walls: Mapping[str, Wall] = field(default_factory=dict)
    components: Mapping[str, Component] = field(default_factory=dict)
    wires: Mapping[str, Wire] = field(default_factory=dict)
    dimensions: Mapping[str, Dimension] = field(default_factory=dict)
    calibration: Calibration = Calibration()
