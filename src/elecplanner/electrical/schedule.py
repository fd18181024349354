"""Load schedule generation.

The load schedule sizes every circuit of a diagram with a fixed,
common installation (embedded conduit, several circuits grouped) and
exposes the result as read-only rows for reports.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping

from .. import config
from ..core.model import Diagram
from ..core.topology import circuit_run_lengths
from .circuits import LoadDescriptor, aggregate
from .sizing import LoadParameters, SizingResult, size

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleRow:
    """One line of the load schedule."""

    circuit: str | None
    description: str
    scheme: str
    voltage: float
    power: float  # VA
    design_current: float
    breaker: int | None
    section: float | None
    voltage_drop: float | None
    length: float
    status: str
    reason: str | None

    @property
    def label(self) -> str:
        return self.circuit if self.circuit is not None else "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_parameters(
    load: LoadDescriptor,
    length: float | None = None,
    settings: Mapping[str, Any] | None = None,
) -> LoadParameters:
    """Sizing input for one aggregated circuit under the schedule installation.

    Args:
        load: Aggregated circuit load.
        length: Measured run length in meters; the default length is used
            when None.
        settings: Overrides of ``config.SCHEDULE_DEFAULTS``.
    """
    params = dict(config.SCHEDULE_DEFAULTS)
    if settings:
        params.update(settings)
    if length is not None:
        params["length"] = length

    return LoadParameters.from_dict(
        {
            "power": load.apparent_power,
            "circuit_type": load.circuit_type,
            "min_section": load.min_section,
        },
        defaults=params,
    )


def _row(load: LoadDescriptor, params: LoadParameters, result: SizingResult) -> ScheduleRow:
    return ScheduleRow(
        circuit=load.circuit,
        description=load.description,
        scheme=load.scheme,
        voltage=params.voltage,
        power=load.apparent_power,
        design_current=result.design_current,
        breaker=result.breaker,
        section=result.section,
        voltage_drop=result.voltage_drop,
        length=params.length,
        status=result.status.value,
        reason=result.reason.value if result.reason else None,
    )


def build_schedule(diagram: Diagram, settings: Mapping[str, Any] | None = None) -> List[ScheduleRow]:
    """Size every circuit of a diagram.

    Run lengths are measured along the wires from the nearest panel when the
    circuit is wired to one; otherwise the default schedule length is used.

    Args:
        diagram: The committed diagram.
        settings: Overrides of ``config.SCHEDULE_DEFAULTS``; the schedule
            uses the defaults unchanged when omitted.

    Returns:
        One ScheduleRow per circuit, in aggregation order.
    """
    lengths = circuit_run_lengths(diagram)
    rows = []
    for load in aggregate(diagram.components):
        params = load_parameters(load, lengths.get(load.circuit), settings)
        result = size(params)
        if not result.conformant:
            LOGGER.info("Circuit %s is %s: %s", load.circuit or "unknown", result.status.value, result.message)
        rows.append(_row(load, params, result))
    return rows
