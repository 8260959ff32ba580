# """
# Physical constants (SI). Process-wide and read-only.
# """
from __future__ import annotations

from math import pi, sqrt
from typing import Final

EPS0: Final[float] = 8.854188e-12  # vacuum permittivity (F/m)
MU0: Final[float] = 4.0 * pi * 1e-7  # vacuum permeability (H/m)
C0: Final[float] = 1.0 / sqrt(EPS0 * MU0)  # speed of light (m/s)
ETA0: Final[float] = sqrt(MU0 / EPS0)  # impedance of free space (Ω)

UM: Final[float] = 1e-6  # one micrometre in metres
