"""Core API for scripted diagram operations.

This module provides the main interface for applying operations to
diagrams, either one at a time or as a sequence read from a file.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..core.model import Diagram
from .ops import get_operation
from .validators import InvalidOperation, validate_all

LOGGER = logging.getLogger(__name__)


def apply(diagram: Diagram, operation: Mapping) -> Diagram:
    """Apply an operation to a diagram and return the modified diagram.

    Args:
        diagram: The diagram to modify.
        operation: Dictionary describing the operation, with its name under
            ``"op"`` (or ``"type"``) and its parameters alongside.

    Returns:
        A new Diagram with the operation applied.

    Raises:
        ValueError: If the operation type is not recognized or its
            parameters are invalid.
        InvalidOperation: If the operation violates diagram invariants.
    """
    operation_type = operation.get("op") or operation.get("type")

    if operation_type is None:
        raise ValueError("Operation must have an 'op' or 'type' field")

    try:
        op = get_operation(operation_type)
    except KeyError:
        raise ValueError(f"Unknown operation type: {operation_type}") from None

    params = {k: v for k, v in operation.items() if k not in ("op", "type")}

    try:
        op.precheck(diagram, **params)
        new_diagram = op.apply(diagram, **params)
    except TypeError as e:
        # Missing or unexpected parameters
        raise ValueError(f"Invalid parameters for {operation_type}: {e}") from e

    try:
        validate_all(new_diagram)
    except InvalidOperation as e:
        raise InvalidOperation(f"Operation failed validation: {e}") from e

    LOGGER.debug("Applied %s", operation_type)
    return new_diagram


def apply_all(diagram: Diagram, operations: Iterable[Mapping]) -> Diagram:
    """Apply operations in order, each one to the result of the previous.

    The first failing operation aborts the sequence with its error; the
    input diagram is left untouched.
    """
    current = diagram
    for index, operation in enumerate(operations):
        try:
            current = apply(current, operation)
        except (ValueError, InvalidOperation) as e:
            LOGGER.warning("Operation %d (%s) failed: %s", index, operation.get("op"), e)
            raise
    return current
