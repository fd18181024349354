"""Load survey.

A load survey estimates the demand of a whole installation from a list of
loads, before any circuit is drawn. Each line gives a rated apparent power,
a quantity and a demand factor; the totals give the service current and a
suggested main breaker.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from .. import config
from .sizing import Phase
from .tables import SURVEY_BREAKERS

LOGGER = logging.getLogger(__name__)


def _number(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {name}: {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class SurveyLoad:
    """One line of the survey.

    Attributes:
        description: Free-text name of the load.
        quantity: Number of identical loads.
        power_va: Rated apparent power of one load in VA.
        demand_factor: Fraction of the installed power expected at peak.
    """

    description: str = ""
    quantity: float = 1
    power_va: float = 0.0
    demand_factor: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", _number("quantity", self.quantity))
        object.__setattr__(self, "power_va", _number("power_va", self.power_va))
        object.__setattr__(self, "demand_factor", _number("demand_factor", self.demand_factor))

        if self.quantity < 0:
            raise ValueError(f"Quantity cannot be negative, got {self.quantity}")
        if self.power_va < 0:
            raise ValueError(f"Power cannot be negative, got {self.power_va}")
        if self.demand_factor <= 0:
            raise ValueError(f"Demand factor must be positive, got {self.demand_factor}")

    @property
    def demand_va(self) -> float:
        return self.power_va * self.quantity * self.demand_factor

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> SurveyLoad:
        """Build a load from a form record; missing fields take their defaults."""
        data = {k: v for k, v in record.items() if k in cls.__dataclass_fields__ and v is not None}
        return cls(**data)


@dataclass(frozen=True)
class SurveyTotals:
    """Result of a load survey.

    Attributes:
        apparent_power: Total demand in VA.
        active_power: Total demand in W.
        current: Service current in A.
        breaker: Suggested main breaker rating in A, or None without load.
    """

    apparent_power: float
    active_power: float
    current: float
    breaker: int | None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def suggest_breaker(current: float) -> int | None:
    """Smallest survey breaker rating carrying ``current``.

    Currents above the series are given the largest rating.
    """
    if current <= 0:
        return None
    for rating in SURVEY_BREAKERS:
        if rating >= current:
            return rating
    LOGGER.warning("Current %.2f A exceeds the largest breaker rating", current)
    return SURVEY_BREAKERS[-1]


def survey(
    loads: Iterable[SurveyLoad | Mapping[str, Any]],
    voltage: float = config.SURVEY_DEFAULTS["voltage"],
    phase: Phase | str = config.SURVEY_DEFAULTS["phase"],
    power_factor: float = config.SURVEY_DEFAULTS["power_factor"],
) -> SurveyTotals:
    """Total the demand of a list of loads.

    Args:
        loads: Survey lines, as SurveyLoad objects or form records.
        voltage: Supply voltage in V (line-line for three-phase).
        phase: Supply configuration.
        power_factor: Power factor used to derive active power.

    Returns:
        SurveyTotals for the whole list.

    Raises:
        ValueError: If a load or a supply parameter is invalid.
    """
    phase = Phase(phase)
    voltage = _number("voltage", voltage)
    power_factor = _number("power_factor", power_factor)
    if voltage <= 0:
        raise ValueError(f"Voltage must be positive, got {voltage}")
    if not 0 < power_factor <= 1:
        raise ValueError(f"Power factor must be in (0, 1], got {power_factor}")

    items: List[SurveyLoad] = []
    for load in loads:
        if isinstance(load, SurveyLoad):
            items.append(load)
        elif isinstance(load, Mapping):
            items.append(SurveyLoad.from_dict(load))
        else:
            raise ValueError(f"Invalid survey load: {load!r}")
    apparent = sum(load.demand_va for load in items)

    if phase is Phase.THREE:
        current = apparent / (voltage * math.sqrt(3))
    else:
        current = apparent / voltage

    return SurveyTotals(
        apparent_power=apparent,
        active_power=apparent * power_factor,
        current=current,
        breaker=suggest_breaker(current),
    )
