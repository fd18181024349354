"""
Configuration for the diagram engine and the sizing defaults.
"""

# Snapping
SNAP_TOLERANCE = 10.0  # px, per axis; also used for drag propagation and mount detection
ANGLE_SNAP_TOLERANCE = 3.0  # degrees
SNAP_ANGLES = (0, 45, 90, 135, 180, 225, 270, 315, 360)

# Drawing
DEFAULT_PIXELS_PER_METER = 40.0  # 40 px = 1 m until the user calibrates
DEFAULT_WALL_THICKNESS = 6.0
MIN_ROOM_SIZE = 10.0  # px, both sides of a room rectangle must exceed this
MIN_DIMENSION_LENGTH = 5.0  # px
PASTE_OFFSET = 20.0  # px
WIRE_CURVE_FACTOR = 0.2  # perpendicular displacement of the default control point
WIRE_LABEL_LEADER = (0.0, 30.0)

# Manual calculator defaults (NBR 5410)
CALCULATOR_DEFAULTS = {
    "phase": "single",
    "voltage": 220.0,
    "material": "copper",
    "circuit_type": "power",
    "power": 1000.0,  # W
    "length": 30.0,  # m
    "method": "B1",
    "power_factor": 0.92,
    "temperature_factor": 1.00,
    "grouping_factor": 1.00,
    "voltage_drop": 3.0,  # %
}

# Load survey form defaults
SURVEY_DEFAULTS = {
    "phase": "single",
    "voltage": 220.0,
    "power_factor": 0.92,
}

# Load schedule: embedded conduit in masonry, several circuits per conduit
SCHEDULE_DEFAULTS = {
    "phase": "single",
    "voltage": 220.0,
    "material": "copper",
    "method": "B1",
    "power_factor": 1.0,  # aggregated figures are already apparent power
    "temperature_factor": 1.00,
    "grouping_factor": 0.80,
    "voltage_drop": 4.0,  # %
    "length": 15.0,  # m, used when the run cannot be measured on the diagram
}
