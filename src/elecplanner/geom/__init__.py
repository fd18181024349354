"""Geometry utilities for diagram editing.

This module provides vertex/angle snapping, the drawing scale and the
connectivity-preserving transforms applied while editing walls.
"""

from .snap import resolve, resolve_angle
from .units import calibrate, to_meters

__all__ = ["resolve", "resolve_angle", "calibrate", "to_meters"]
