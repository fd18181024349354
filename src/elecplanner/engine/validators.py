"""Post-apply validation functions for diagram operations.

This module provides validation functions that are executed after applying
scripted operations to ensure the diagram keeps its structural invariants.
"""

from __future__ import annotations

from ..core.model import Diagram


class InvalidOperation(Exception):
    """Raised when an operation violates diagram invariants."""

    pass


def validate_walls(diagram: Diagram) -> bool:
    """No wall is degenerate and every wall is stored under its own ID."""
    return all(not wall.is_degenerate and wall.id == wall_id for wall_id, wall in diagram.walls.items())


def validate_components(diagram: Diagram) -> bool:
    return all(component.id == component_id for component_id, component in diagram.components.items())


def validate_wires(diagram: Diagram) -> bool:
    """Every wire joins two distinct, existing components."""
    for wire_id, wire in diagram.wires.items():
        if wire.id != wire_id or wire.start == wire.end:
            return False
        if wire.start not in diagram.components or wire.end not in diagram.components:
            return False
    return True


def validate_all(diagram: Diagram) -> None:
    """Run all validation checks on a diagram.

    Args:
        diagram: The diagram to validate.

    Raises:
        InvalidOperation: If any validation check fails.
    """
    if not validate_walls(diagram):
        raise InvalidOperation("Diagram contains a degenerate or misfiled wall")

    if not validate_components(diagram):
        raise InvalidOperation("Diagram contains a misfiled component")

    if not validate_wires(diagram):
        raise InvalidOperation("Diagram contains a wire with a missing or repeated endpoint")
