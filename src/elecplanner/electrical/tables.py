"""Reference tables for circuit sizing (NBR 5410:2004).

Ampacities are Table 36: copper conductors, PVC insulation (70 °C),
30 °C ambient / 20 °C soil. Each row lists, for methods A1, A2, B1, B2, C
and D, the ampacity with two and with three loaded conductors.
"""

from __future__ import annotations

from typing import Dict, Tuple

STANDARD_SECTIONS: Tuple[float, ...] = (1.5, 2.5, 4, 6, 10, 16, 25, 35, 50, 70, 95, 120)

#            A1            A2            B1            B2            C             D
#          2     3       2     3       2     3       2     3       2     3       2     3
AMPACITY: Dict[float, Tuple[float, ...]] = {
    1.5: (14.5, 13.5, 14.0, 13.0, 17.5, 15.5, 16.5, 15.0, 19.5, 17.5, 22.0, 18.0),
    2.5: (19.5, 18.0, 18.5, 17.5, 24.0, 21.0, 23.0, 20.0, 27.0, 24.0, 29.0, 24.0),
    4: (26.0, 24.0, 25.0, 23.0, 32.0, 28.0, 30.0, 27.0, 36.0, 32.0, 38.0, 31.0),
    6: (34.0, 31.0, 32.0, 29.0, 41.0, 36.0, 38.0, 34.0, 46.0, 41.0, 47.0, 39.0),
    10: (46.0, 42.0, 43.0, 39.0, 57.0, 50.0, 52.0, 46.0, 63.0, 57.0, 63.0, 52.0),
    16: (61.0, 56.0, 57.0, 52.0, 76.0, 68.0, 69.0, 62.0, 85.0, 76.0, 81.0, 67.0),
    25: (80.0, 73.0, 75.0, 68.0, 101.0, 89.0, 90.0, 80.0, 112.0, 96.0, 104.0, 86.0),
    35: (99.0, 89.0, 92.0, 83.0, 125.0, 110.0, 111.0, 99.0, 138.0, 119.0, 125.0, 103.0),
    50: (119.0, 108.0, 110.0, 99.0, 151.0, 134.0, 133.0, 118.0, 168.0, 144.0, 148.0, 122.0),
    70: (151.0, 136.0, 139.0, 125.0, 192.0, 171.0, 168.0, 149.0, 213.0, 184.0, 183.0, 151.0),
    95: (182.0, 164.0, 167.0, 150.0, 232.0, 207.0, 201.0, 179.0, 258.0, 223.0, 216.0, 179.0),
    120: (210.0, 188.0, 192.0, 172.0, 269.0, 239.0, 232.0, 206.0, 299.0, 259.0, 246.0, 203.0),
}

# First column of each installation method; +1 selects three loaded conductors
METHOD_COLUMNS: Dict[str, int] = {"A1": 0, "A2": 2, "B1": 4, "B2": 6, "C": 8, "D": 10}

STANDARD_BREAKERS: Tuple[int, ...] = (10, 16, 20, 25, 32, 40, 50, 63, 80, 100, 125)

# Main breakers suggested by the load survey
SURVEY_BREAKERS: Tuple[int, ...] = (10, 16, 20, 25, 32, 40, 50, 63, 70, 80, 90, 100, 125, 150, 175, 200, 225, 250)

# Ω·mm²/m
RESISTIVITY: Dict[str, float] = {"copper": 0.0225, "aluminum": 0.036}

# Aluminium carries this fraction of the copper ampacity of the same section
ALUMINUM_FACTOR = 0.78

MIN_SECTION = {"lighting": 1.5, "power": 2.5}
MIN_BREAKER = {"lighting": 10, "power": 16}


def ampacity(section: float, method: str, loaded_conductors: int, material: str) -> float:
    """Tabulated ampacity of a conductor, before correction factors.

    Args:
        section: Cross-section in mm²; must be a standard section.
        method: Installation method code (A1, A2, B1, B2, C, D).
        loaded_conductors: 2 or 3.
        material: ``"copper"`` or ``"aluminum"``.

    Returns:
        Ampacity in amperes, or 0.0 for a section missing from the table.

    Raises:
        KeyError: If the installation method is unknown.
    """
    row = AMPACITY.get(section)
    if row is None:
        return 0.0
    column = METHOD_COLUMNS[method] + (1 if loaded_conductors == 3 else 0)
    factor = ALUMINUM_FACTOR if material == "aluminum" else 1.0
    return row[column] * factor
