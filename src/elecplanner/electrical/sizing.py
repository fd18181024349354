"""Conductor and breaker sizing.

This module implements the sizing procedure of NBR 5410 for a single
circuit: design current, ampacity with correction factors, voltage drop,
and the coordination rule Ib <= In <= Iz between the load, the protective
device and the cable.

``size`` is a pure function. A circuit that cannot be sized is reported
through the status of the result, never by raising, so a whole load
schedule can be sized even when some circuits are non-conformant.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping

from .. import config
from .tables import (
    METHOD_COLUMNS,
    MIN_BREAKER,
    MIN_SECTION,
    RESISTIVITY,
    STANDARD_BREAKERS,
    STANDARD_SECTIONS,
    ampacity,
)

LOGGER = logging.getLogger(__name__)

# Slack for comparing computed voltage drops against the limit
_VD_EPSILON = 1e-9


class Phase(str, Enum):
    SINGLE = "single"
    TWO = "two"
    THREE = "three"

    @classmethod
    def _missing_(cls, value):
        aliases = {"biphasic": cls.TWO, "two_phase": cls.TWO, "three_phase": cls.THREE, "single_phase": cls.SINGLE}
        return aliases.get(str(value).lower().replace("-", "_"))


class Material(str, Enum):
    COPPER = "copper"
    ALUMINUM = "aluminum"


class CircuitType(str, Enum):
    LIGHTING = "lighting"
    POWER = "power"


class SizingStatus(str, Enum):
    CONFORMANT = "conformant"
    UNDERSIZED = "undersized"
    NON_CONFORMANT = "non_conformant"


class SizingReason(str, Enum):
    """Why a circuit is not conformant."""

    NO_STANDARD_CABLE = "no_standard_cable"
    LOAD_EXCEEDS_CABLE = "load_exceeds_cable"
    MINIMUM_BREAKER_EXCEEDS_CABLE = "minimum_breaker_exceeds_cable"
    NO_STANDARD_RATING = "no_standard_rating"
    VOLTAGE_DROP_EXCEEDED = "voltage_drop_exceeded"


REASON_MESSAGES = {
    SizingReason.NO_STANDARD_CABLE: "undersized: no standard cable suffices",
    SizingReason.LOAD_EXCEEDS_CABLE: "design current exceeds the cable capacity",
    SizingReason.MINIMUM_BREAKER_EXCEEDS_CABLE: "minimum breaker rating exceeds the cable capacity",
    SizingReason.NO_STANDARD_RATING: "no standard breaker rating fits between Ib and Iz",
    SizingReason.VOLTAGE_DROP_EXCEEDED: "voltage drop exceeds the limit at the largest section",
}


_NUMERIC_FIELDS = (
    "power",
    "voltage",
    "power_factor",
    "length",
    "voltage_drop",
    "grouping_factor",
    "temperature_factor",
)


@dataclass(frozen=True)
class LoadParameters:
    """Input of the sizing procedure.

    Attributes:
        power: Load power in W, or apparent power in VA with ``power_factor=1``.
        voltage: Nominal voltage in V (phase-neutral, or line-line for three-phase).
        phase: Phase configuration.
        power_factor: cos φ of the load.
        material: Conductor material.
        length: One-way run length in meters.
        voltage_drop: Permissible voltage drop in percent.
        method: Installation-method code (A1, A2, B1, B2, C, D).
        grouping_factor: Correction factor for grouped circuits.
        temperature_factor: Correction factor for ambient temperature.
        circuit_type: Lighting or power; sets the minimum section and breaker.
        min_section: Extra minimum section imposed by the circuit's composition.
    """

    power: float = config.CALCULATOR_DEFAULTS["power"]
    voltage: float = config.CALCULATOR_DEFAULTS["voltage"]
    phase: Phase = Phase.SINGLE
    power_factor: float = config.CALCULATOR_DEFAULTS["power_factor"]
    material: Material = Material.COPPER
    length: float = config.CALCULATOR_DEFAULTS["length"]
    voltage_drop: float = config.CALCULATOR_DEFAULTS["voltage_drop"]
    method: str = config.CALCULATOR_DEFAULTS["method"]
    grouping_factor: float = config.CALCULATOR_DEFAULTS["grouping_factor"]
    temperature_factor: float = config.CALCULATOR_DEFAULTS["temperature_factor"]
    circuit_type: CircuitType = CircuitType.POWER
    min_section: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "phase", Phase(self.phase))
        object.__setattr__(self, "material", Material(self.material))
        object.__setattr__(self, "circuit_type", CircuitType(self.circuit_type))
        object.__setattr__(self, "method", str(self.method).upper())

        for name in _NUMERIC_FIELDS:
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number, got {getattr(self, name)}")
        if self.method not in METHOD_COLUMNS:
            raise ValueError(f"Unknown installation method: {self.method}")
        if self.voltage <= 0:
            raise ValueError(f"Voltage must be positive, got {self.voltage}")
        if not 0 < self.power_factor <= 1:
            raise ValueError(f"Power factor must be in (0, 1], got {self.power_factor}")
        if self.power < 0:
            raise ValueError(f"Power cannot be negative, got {self.power}")
        if self.length < 0:
            raise ValueError(f"Length cannot be negative, got {self.length}")
        if self.voltage_drop <= 0:
            raise ValueError(f"Voltage drop limit must be positive, got {self.voltage_drop}")
        if self.grouping_factor <= 0 or self.temperature_factor <= 0:
            raise ValueError("Correction factors must be positive")

    @property
    def loaded_conductors(self) -> int:
        return 3 if self.phase is Phase.THREE else 2

    @classmethod
    def from_dict(cls, record: Mapping[str, Any], defaults: Mapping[str, Any] | None = None) -> LoadParameters:
        """Build parameters from a flat record, as sent by the calculator form.

        Missing keys fall back to ``defaults`` (the calculator defaults when
        omitted); unknown keys are ignored.

        Raises:
            ValueError: If a value cannot be converted or is out of range.
        """
        merged = dict(config.CALCULATOR_DEFAULTS if defaults is None else defaults)
        merged.update({k: v for k, v in record.items() if v is not None})

        try:
            return cls(
                power=float(merged["power"]),
                voltage=float(merged["voltage"]),
                phase=merged.get("phase", Phase.SINGLE),
                power_factor=float(merged["power_factor"]),
                material=merged.get("material", Material.COPPER),
                length=float(merged["length"]),
                voltage_drop=float(merged["voltage_drop"]),
                method=merged["method"],
                grouping_factor=float(merged["grouping_factor"]),
                temperature_factor=float(merged["temperature_factor"]),
                circuit_type=merged.get("circuit_type", CircuitType.POWER),
                min_section=float(merged["min_section"]) if merged.get("min_section") is not None else None,
            )
        except KeyError as e:
            raise ValueError(f"Missing load parameter: {e}") from e


@dataclass(frozen=True)
class SizingResult:
    """Output of the sizing procedure.

    Attributes:
        status: Conformance status.
        reason: Why the circuit is not conformant, if it is not.
        design_current: Ib in amperes.
        required_ampacity: Ib divided by the correction factors.
        section_by_ampacity: Smallest section carrying the required ampacity.
        section_by_voltage_drop: Raw (unrounded) section required by the drop limit.
        section: Final cross-section in mm².
        ampacity: Iz of the final section with correction factors applied.
        breaker: Selected breaker rating In in amperes.
        voltage_drop: Realized voltage drop at the final section, in percent.
        min_section: Minimum section imposed by the circuit type.
    """

    status: SizingStatus
    reason: SizingReason | None
    design_current: float
    required_ampacity: float
    section_by_ampacity: float | None = None
    section_by_voltage_drop: float | None = None
    section: float | None = None
    ampacity: float | None = None
    breaker: int | None = None
    voltage_drop: float | None = None
    min_section: float | None = None

    @property
    def conformant(self) -> bool:
        return self.status is SizingStatus.CONFORMANT

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Ib <= In <= Iz"
        return REASON_MESSAGES[self.reason]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["reason"] = self.reason.value if self.reason else None
        data["message"] = self.message
        return data


def design_current(power: float, voltage: float, power_factor: float, phase: Phase) -> float:
    """Ib = P / (V · cos φ), or P / (√3 · V · cos φ) for three-phase."""
    if phase is Phase.THREE:
        return power / (math.sqrt(3) * voltage * power_factor)
    return power / (voltage * power_factor)


def _round_up_section(section: float) -> float | None:
    """Smallest standard section >= ``section``, or None if beyond the table."""
    return next((s for s in STANDARD_SECTIONS if s >= section), None)


def _section_by_ampacity(required: float, load: LoadParameters) -> float | None:
    for section in STANDARD_SECTIONS:
        if ampacity(section, load.method, load.loaded_conductors, load.material.value) >= required:
            return float(section)
    return None


def _drop_factor(load: LoadParameters) -> float:
    """k · ρ · L, the section-independent part of the voltage drop."""
    k = math.sqrt(3) if load.phase is Phase.THREE else 2.0
    return k * RESISTIVITY[load.material.value] * load.length


def select_breaker(ib: float, iz: float, circuit_type: CircuitType) -> int | None:
    """Smallest standard rating with In >= Ib, In >= the practical minimum and In <= Iz."""
    minimum = MIN_BREAKER[CircuitType(circuit_type).value]
    return next((In for In in STANDARD_BREAKERS if In >= ib and In >= minimum and In <= iz), None)


def size(load: LoadParameters) -> SizingResult:
    """Size the conductor and protective device of one circuit.

    Steps:
    1. Design current Ib.
    2. Required ampacity Ib / (temperature factor · grouping factor).
    3. Smallest standard section whose tabulated ampacity covers it.
    4. Section required by the voltage-drop limit, rounded up.
    5. Final section: the largest of the two and the circuit-type minimum.
    6. Ampacity Iz of the final section with correction factors.
    7. Breaker with Ib <= In <= Iz from the standard series.
    8. Realized voltage drop at the final section.

    Args:
        load: Circuit description.

    Returns:
        The SizingResult; non-conformant circuits carry a reason.
    """
    ib = design_current(load.power, load.voltage, load.power_factor, load.phase)
    iz_required = ib / (load.temperature_factor * load.grouping_factor)

    s_iz = _section_by_ampacity(iz_required, load)
    if s_iz is None:
        LOGGER.debug("No standard cable carries %.2f A", iz_required)
        return SizingResult(
            status=SizingStatus.UNDERSIZED,
            reason=SizingReason.NO_STANDARD_CABLE,
            design_current=ib,
            required_ampacity=iz_required,
        )

    drop_factor = _drop_factor(load)
    dv_limit = (load.voltage_drop / 100) * load.voltage
    s_vd = drop_factor * ib / dv_limit
    s_vd_standard = _round_up_section(s_vd) or STANDARD_SECTIONS[-1]

    min_section = MIN_SECTION[load.circuit_type.value]
    if load.min_section is not None:
        min_section = max(min_section, _round_up_section(load.min_section) or STANDARD_SECTIONS[-1])

    section = float(max(s_iz, s_vd_standard, min_section))
    iz_final = ampacity(section, load.method, load.loaded_conductors, load.material.value) * (
        load.temperature_factor * load.grouping_factor
    )
    realized_drop = drop_factor * ib / section / load.voltage * 100

    breaker = select_breaker(ib, iz_final, load.circuit_type)
    reason: SizingReason | None = None
    if breaker is None:
        if ib > iz_final:
            reason = SizingReason.LOAD_EXCEEDS_CABLE
        elif MIN_BREAKER[load.circuit_type.value] > iz_final:
            reason = SizingReason.MINIMUM_BREAKER_EXCEEDS_CABLE
        else:
            reason = SizingReason.NO_STANDARD_RATING
    elif realized_drop > load.voltage_drop + _VD_EPSILON:
        reason = SizingReason.VOLTAGE_DROP_EXCEEDED

    status = SizingStatus.CONFORMANT if reason is None else SizingStatus.NON_CONFORMANT
    LOGGER.debug(
        "Sized %.0f W at %.0f V: Ib=%.2f A, S=%s mm², Iz=%.2f A, In=%s A (%s)",
        load.power, load.voltage, ib, section, iz_final, breaker, status.value,
    )
    return SizingResult(
        status=status,
        reason=reason,
        design_current=ib,
        required_ampacity=iz_required,
        section_by_ampacity=s_iz,
        section_by_voltage_drop=s_vd,
        section=section,
        ampacity=iz_final,
        breaker=breaker,
        voltage_drop=realized_drop,
        min_section=float(min_section),
    )
