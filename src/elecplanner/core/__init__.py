"""Core data models for electrical floor plans."""

from .model import (
    Calibration,
    Component,
    Diagram,
    Dimension,
    Door,
    LightFixture,
    MountingHeight,
    Panel,
    Point,
    Socket,
    Switch,
    Wall,
    WallOpening,
    Window,
    Wire,
    WireLabel,
    WireRouting,
)
from .topology import build_wall_graph, build_wire_graph, circuit_run_lengths

__all__ = [
    "Calibration",
    "Component",
    "Diagram",
    "Dimension",
    "Door",
    "LightFixture",
    "MountingHeight",
    "Panel",
    "Point",
    "Socket",
    "Switch",
    "Wall",
    "WallOpening",
    "Window",
    "Wire",
    "WireLabel",
    "WireRouting",
    "build_wall_graph",
    "build_wire_graph",
    "circuit_run_lengths",
]
