"""Elec Planner - A Python library for drawing electrical floor plans and sizing their circuits."""

__version__ = "0.1.0"

from .core.model import Component, Diagram, Point, Wall, Wire
from .electrical.sizing import LoadParameters, SizingResult, size
from .engine.editor import DiagramEditor

__all__ = ["Component", "Diagram", "DiagramEditor", "LoadParameters", "Point", "SizingResult", "Wall", "Wire", "size"]
