"""Drawing scale and unit conversion.

The diagram is drawn in pixels; every length shown to the user or fed to
the sizing engine is converted to meters through the current calibration.
"""

from __future__ import annotations

import logging
import math

from ..core.model import Calibration, Point

LOGGER = logging.getLogger(__name__)


def pixel_distance(p1: Point, p2: Point) -> float:
    """Calculate Euclidean distance between two points, in pixels."""
    return math.sqrt((p1.x - p2.x) ** 2 + (p1.y - p2.y) ** 2)


def calibrate(p1: Point, p2: Point, meters) -> Calibration | None:
    """Build a calibration from two points and their real-world distance.

    Args:
        p1: First reference point.
        p2: Second reference point.
        meters: Real distance between the points, in meters. Strings are
            accepted since the value usually comes straight from a prompt.

    Returns:
        The new Calibration, or None when the input is rejected (not a
        number, zero or negative, or the two points coincide).
    """
    try:
        real = float(meters)
    except (TypeError, ValueError):
        LOGGER.debug("Calibration ignored: %r is not a distance", meters)
        return None

    if not math.isfinite(real) or real <= 0:
        LOGGER.debug("Calibration ignored: non-positive distance %r", meters)
        return None

    pixels = pixel_distance(p1, p2)
    if pixels == 0:
        LOGGER.debug("Calibration ignored: reference points coincide")
        return None

    calibration = Calibration(pixels_per_meter=pixels / real, points=(p1, p2))
    LOGGER.info("Scale calibrated: 1 m = %.2f px", calibration.pixels_per_meter)
    return calibration


def to_meters(pixels: float, calibration: Calibration) -> float:
    """Convert a length in pixels to meters."""
    return pixels / calibration.pixels_per_meter


def to_pixels(meters: float, calibration: Calibration) -> float:
    """Convert a length in meters to pixels."""
    return meters * calibration.pixels_per_meter


def segment_length_m(a: Point, b: Point, calibration: Calibration) -> float:
    """Real-world length of the segment ``a``-``b`` in meters."""
    return to_meters(pixel_distance(a, b), calibration)
