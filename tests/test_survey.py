"""Tests for the load survey totals."""

import math

import pytest

from elecplanner.electrical.survey import SurveyLoad, suggest_breaker, survey

LOADS = [
    {"description": "Lighting points", "quantity": 10, "power_va": 100, "demand_factor": 1.0},
    {"description": "Shower", "quantity": 1, "power_va": 5500, "demand_factor": 0.7},
]


def test_single_phase_totals():
    totals = survey(LOADS)
    assert totals.apparent_power == pytest.approx(4850.0)
    assert totals.active_power == pytest.approx(4850.0 * 0.92)
    assert totals.current == pytest.approx(4850.0 / 220)
    assert totals.breaker == 25


def test_three_phase_current():
    totals = survey(LOADS, voltage=380, phase="three")
    assert totals.current == pytest.approx(4850.0 / (380 * math.sqrt(3)))
    assert totals.breaker == 10


def test_two_phase_uses_line_voltage():
    totals = survey(LOADS, voltage=220, phase="two")
    assert totals.current == pytest.approx(4850.0 / 220)


def test_missing_fields_take_defaults():
    totals = survey([{"power_va": 1000}, SurveyLoad(power_va=500, quantity=2)])
    assert totals.apparent_power == pytest.approx(2000.0)


def test_empty_survey_has_no_breaker():
    totals = survey([])
    assert totals.apparent_power == 0
    assert totals.current == 0
    assert totals.breaker is None
    assert totals.to_dict()["breaker"] is None


@pytest.mark.parametrize(
    "current, expected",
    [
        (0, None),
        (9.9, 10),
        (16, 16),
        (65, 70),
        (240, 250),
        (400, 250),
    ],
)
def test_suggest_breaker(current, expected):
    assert suggest_breaker(current) == expected


class TestSurveyLoad:
    def test_demand(self):
        load = SurveyLoad(description="Sockets", quantity="4", power_va="200", demand_factor=0.5)
        assert load.demand_va == pytest.approx(400.0)

    @pytest.mark.parametrize(
        "record",
        [
            {"quantity": -1},
            {"power_va": -100},
            {"power_va": "a lot"},
            {"demand_factor": 0},
            {"power_va": float("nan")},
        ],
    )
    def test_invalid_loads_raise(self, record):
        with pytest.raises(ValueError):
            SurveyLoad.from_dict(record)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"voltage": 0},
        {"power_factor": 1.5},
        {"phase": "four"},
    ],
)
def test_invalid_supply_raises(kwargs):
    with pytest.raises(ValueError):
        survey(LOADS, **kwargs)


def test_non_record_load_raises():
    with pytest.raises(ValueError):
        survey([42])
