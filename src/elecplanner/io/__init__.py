"""JSON persistence of diagrams."""

from .parser import diagram_from_dict, diagram_to_dict, load_diagram, save_diagram

__all__ = ["diagram_from_dict", "diagram_to_dict", "load_diagram", "save_diagram"]
