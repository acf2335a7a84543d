"""
Color vision deficiency simulation module.

Provides the per-pixel colorimetric models as Numba kernels, raster filters
that drive them, and the Simulator that selects the active mode.
"""

from cvdsim.simulation.filters import (
    GrayscaleFilter,
    RedGreenFilter,
    TritanCoefficients,
    TritanFilter,
    create_filter,
)
from cvdsim.simulation.selector import Deficiency, Simulator

__all__ = [
    "Deficiency",
    "Simulator",
    "RedGreenFilter",
    "TritanFilter",
    "TritanCoefficients",
    "GrayscaleFilter",
    "create_filter",
]
