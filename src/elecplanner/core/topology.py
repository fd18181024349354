"""Topology analysis for electrical floor plans.

Wall and wire connectivity is never stored in the diagram. This module
rebuilds NetworkX graphs from the current geometry on demand, so the
result is always consistent with the latest edit.
"""

from __future__ import annotations

from typing import Dict, List

import networkx as nx

from .. import config
from ..geom.edit import find_connected_walls, wire_path
from ..geom.units import to_meters
from .model import Diagram, Panel, WireLabel, circuit_id


def build_wall_graph(diagram: Diagram, tolerance: float = config.SNAP_TOLERANCE) -> nx.Graph:
    """Build a graph of walls joined by coincident endpoints.

    Args:
        diagram: Diagram containing the walls.
        tolerance: Endpoint coincidence tolerance in pixels.

    Returns:
        NetworkX Graph whose nodes are wall IDs.
    """
    G = nx.Graph()

    for wall_id, wall in diagram.walls.items():
        G.add_node(wall_id, group=wall.group)

    for wall_id in diagram.walls:
        for other_id in find_connected_walls(diagram, wall_id, tolerance):
            G.add_edge(wall_id, other_id)

    return G


def wall_networks(diagram: Diagram) -> List[List[str]]:
    """Group walls into connected networks, largest first."""
    G = build_wall_graph(diagram)
    networks = [sorted(component) for component in nx.connected_components(G)]
    return sorted(networks, key=lambda ids: (-len(ids), ids))


def build_wire_graph(diagram: Diagram) -> nx.Graph:
    """Build a graph of components joined by wires.

    Edges carry the wire ID and its curve length in meters under the
    current calibration as ``length``. Parallel runs between the same pair
    of components keep the shorter one.
    """
    G = nx.Graph()

    for component_id, component in diagram.components.items():
        G.add_node(component_id, kind=component.kind)

    for wire_id, wire in diagram.wires.items():
        if wire.start not in G or wire.end not in G:
            continue
        path = wire_path(diagram, wire)
        length = to_meters(path.length, diagram.calibration) if path is not None else 0.0
        if G.has_edge(wire.start, wire.end) and G[wire.start][wire.end]["length"] <= length:
            continue
        G.add_edge(wire.start, wire.end, wire_id=wire_id, length=length)

    return G


def circuit_run_lengths(diagram: Diagram) -> Dict[str | None, float]:
    """Measure each circuit's run from the distribution panel.

    For every circuit, the run length is the wire-graph distance from the
    nearest panel to the farthest component of that circuit. Circuits with
    no component reachable from a panel are left out.

    Returns:
        Mapping of circuit ID to run length in meters.
    """
    G = build_wire_graph(diagram)
    panels = [cid for cid, c in diagram.components.items() if isinstance(c, Panel)]
    if not panels:
        return {}

    distances = nx.multi_source_dijkstra_path_length(G, panels, weight="length")

    lengths: Dict[str | None, float] = {}
    for component_id, component in diagram.components.items():
        circuit = circuit_id(getattr(component, "circuit", None))
        if isinstance(component, WireLabel) or circuit is None or component_id not in distances:
            continue
        lengths[circuit] = max(lengths.get(circuit, 0.0), distances[component_id])

    return lengths
