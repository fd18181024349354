"""Engine module for diagram editing.

This module provides the interactive editor and the API for applying
scripted operations to diagrams.
"""

from .api import apply, apply_all
from .editor import DiagramEditor
from .validators import InvalidOperation

__all__ = ["DiagramEditor", "InvalidOperation", "apply", "apply_all"]
