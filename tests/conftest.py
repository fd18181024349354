"""Shared fixtures for the diagram tests."""

import pytest

from elecplanner.core.model import Diagram, LightFixture, Panel, Point, Socket, Wall, Wire


def make_diagram(walls=(), components=(), wires=(), **kwargs) -> Diagram:
    return Diagram(
        walls={w.id: w for w in walls},
        components={c.id: c for c in components},
        wires={w.id: w for w in wires},
        **kwargs,
    )


@pytest.fixture
def corner_diagram() -> Diagram:
    """Two walls meeting at (100, 0) and a third, unconnected wall."""
    return make_diagram(
        walls=[
            Wall(id="w1", a=Point(0, 0), b=Point(100, 0)),
            Wall(id="w2", a=Point(100, 0), b=Point(100, 100)),
            Wall(id="w3", a=Point(300, 300), b=Point(400, 300)),
        ]
    )


@pytest.fixture
def wired_diagram() -> Diagram:
    """A panel feeding a socket and a light, 400 px (10 m) apart on a straight run."""
    return make_diagram(
        components=[
            Panel(id="qd", position=Point(0, 0)),
            Socket(id="s1", position=Point(400, 0), rated_power=1000, circuit="1"),
            LightFixture(id="l1", position=Point(0, 200), rated_power=100, circuit="2"),
        ],
        wires=[
            # Offset cancels the default bow so the run is a straight line
            Wire(id="r1", start="qd", end="s1", control_offset=Point(0, -80)),
        ],
    )
