"""Tests for drawing-scale calibration."""

import pytest

from elecplanner.core.model import Calibration, Point
from elecplanner.geom.units import calibrate, pixel_distance, segment_length_m, to_meters, to_pixels


def test_default_scale_is_forty_pixels_per_meter():
    assert Calibration().pixels_per_meter == 40.0
    assert to_meters(80, Calibration()) == 2.0


def test_calibrate_from_two_points():
    calibration = calibrate(Point(0, 0), Point(100, 0), 2.5)
    assert calibration.pixels_per_meter == pytest.approx(40.0)
    assert calibration.points == (Point(0, 0), Point(100, 0))


def test_calibrate_accepts_numeric_strings():
    assert calibrate(Point(0, 0), Point(0, 50), "0.5").pixels_per_meter == pytest.approx(100.0)


@pytest.mark.parametrize("meters", [0, -1, "abc", None, float("nan"), float("inf")])
def test_invalid_distance_is_rejected(meters):
    assert calibrate(Point(0, 0), Point(100, 0), meters) is None


def test_coincident_points_are_rejected():
    assert calibrate(Point(3, 3), Point(3, 3), 1.0) is None


def test_conversions_use_calibration():
    calibration = Calibration(pixels_per_meter=50.0)
    assert to_pixels(2.0, calibration) == 100.0
    assert segment_length_m(Point(0, 0), Point(30, 40), calibration) == pytest.approx(1.0)
    assert pixel_distance(Point(0, 0), Point(30, 40)) == 50.0
