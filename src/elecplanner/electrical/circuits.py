"""Circuit aggregation.

A circuit is not stored anywhere: it is the set of components sharing a
circuit identifier. This module groups placed components and reduces
each group to a single load descriptor for the sizing engine.
"""

from __future__ import annotations

import re
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..core.model import Component, LightFixture, Socket, Switch, circuit_id
from .tables import MIN_SECTION

# Multiplier turning rated power into apparent power: VA = W / factor
POWER_FACTORS = {"lighting": 1.0, "socket": 0.8}


@dataclass(frozen=True)
class LoadDescriptor:
    """Aggregated load of one circuit.

    Attributes:
        circuit: Circuit identifier, or None for untagged components.
        apparent_power: Total apparent power in VA.
        active_power: Total rated power in W.
        min_section: Minimum conductor section implied by the loads, in mm².
        circuit_type: ``"power"`` when sockets are present, else ``"lighting"``.
        description: Human-readable list of the load categories.
        scheme: Most common conductor scheme among the loads.
        component_ids: Components belonging to the circuit.
    """

    circuit: str | None
    apparent_power: float
    active_power: float
    min_section: float | None
    circuit_type: str
    description: str
    scheme: str
    component_ids: Tuple[str, ...]


def _circuit_key(component: Component) -> str | None:
    return circuit_id(getattr(component, "circuit", None))


def _sort_key(circuit: str | None):
    """Natural order of circuit ids, unknown last: 1, 2, 10, A, B, None."""
    if circuit is None:
        return (1, ())
    parts = re.split(r"(\d+)", circuit)
    return (0, tuple((0, int(p), "") if p.isdigit() else (1, 0, p.lower()) for p in parts if p))


def _is_load(component: Component) -> bool:
    return isinstance(component, (Socket, Switch, LightFixture))


def _describe(lighting: int, sockets: int, switches: int) -> str:
    categories = []
    if lighting:
        categories.append("Lighting")
    if sockets:
        categories.append("Sockets")
    if switches:
        categories.append("Switches")
    return " + ".join(categories) if categories else "Empty"


def aggregate(components: Mapping[str, Component] | Iterable[Component]) -> List[LoadDescriptor]:
    """Group components by circuit and reduce each group to one load.

    Lighting contributes its rated power at a multiplier of 1.0 and sockets
    at 0.8, giving the group's apparent power. The minimum section is
    1.5 mm² with lighting, 2.5 mm² with sockets, the stricter of the two
    when both are present.

    Args:
        components: Placed components; only sockets, switches and light
            fixtures take part.

    Returns:
        One LoadDescriptor per circuit id, labelled circuits in natural
        order and the untagged group last.
    """
    if isinstance(components, Mapping):
        components = components.values()

    groups: Dict[str | None, List[Component]] = defaultdict(list)
    for component in components:
        if _is_load(component):
            groups[_circuit_key(component)].append(component)

    descriptors = []
    for circuit in sorted(groups, key=_sort_key):
        members = groups[circuit]
        lights = [c for c in members if isinstance(c, LightFixture)]
        sockets = [c for c in members if isinstance(c, Socket)]
        switches = [c for c in members if isinstance(c, Switch)]

        active = sum(c.rated_power for c in lights) + sum(c.rated_power for c in sockets)
        apparent = sum(c.rated_power / POWER_FACTORS["lighting"] for c in lights) + sum(
            c.rated_power / POWER_FACTORS["socket"] for c in sockets
        )

        min_section = None
        if lights:
            min_section = MIN_SECTION["lighting"]
        if sockets:
            min_section = max(min_section or 0.0, MIN_SECTION["power"])

        schemes = Counter(c.scheme for c in lights + sockets) or Counter(c.scheme for c in switches)
        scheme = schemes.most_common(1)[0][0] if schemes else "FNT"

        descriptors.append(
            LoadDescriptor(
                circuit=circuit,
                apparent_power=apparent,
                active_power=active,
                min_section=min_section,
                circuit_type="power" if sockets else "lighting",
                description=_describe(len(lights), len(sockets), len(switches)),
                scheme=scheme,
                component_ids=tuple(c.id for c in members),
            )
        )

    return descriptors
