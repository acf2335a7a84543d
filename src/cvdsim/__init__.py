"""
cvdsim - Color Vision Deficiency Simulation

Fast CPU simulation of color-impaired vision for screenshots and other
packed ARGB rasters.

Features:
- Deuteranopia and protanopia (fixed-point red-green model)
- Tritanopia (Brettel, Vienot & Mollon 1997, float32)
- Perceptual luminance-preserving grayscale
- Fixed gamma lookup tables shared process-wide
- Row-parallel Numba kernels with a run-length cache for flat screen regions
- Multi-display filtering on a thread pool
- Confusion highlighting via CIE L*a*b* color difference

Example - Simulator:
    >>> from cvdsim import RasterImage, Simulator
    >>>
    >>> screenshot = RasterImage.from_array(rgb_pixels)
    >>> simulator = Simulator().select_mode("deuteranopia")
    >>> simulated = simulator(screenshot)
    >>> simulator.mode.label
    'Deuteranopia'

Example - Individual Filters:
    >>> from cvdsim import RedGreenFilter, TritanFilter
    >>>
    >>> simulated = RedGreenFilter.protanopia().filter(screenshot)
    >>> pixel = TritanFilter().transform_pixel(0xFF3366CC)

Example - Confusion Highlighting:
    >>> from cvdsim import highlight_differences
    >>>
    >>> marked = highlight_differences(simulated, screenshot, threshold=40.0)
"""

__version__ = "0.1.0"

# Confusion highlighting
from cvdsim.difference import delta_e_map, highlight_differences, srgb_to_lab

# Errors
from cvdsim.exceptions import DimensionMismatch, InvalidMode

# Gamma tables
from cvdsim.gamma import GammaTables, delinearize, gamma_tables, linearize

# Protocols
from cvdsim.protocols import RasterFilter

# Raster images
from cvdsim.raster import RasterImage, pack_argb, unpack_argb

# Simulation
from cvdsim.simulation import (
    Deficiency,
    GrayscaleFilter,
    RedGreenFilter,
    Simulator,
    TritanCoefficients,
    TritanFilter,
    create_filter,
)

__all__ = [
    # Version
    "__version__",
    # Data structures
    "RasterImage",
    "pack_argb",
    "unpack_argb",
    # Gamma tables
    "GammaTables",
    "gamma_tables",
    "linearize",
    "delinearize",
    # Simulation
    "Deficiency",
    "Simulator",
    "RedGreenFilter",
    "TritanFilter",
    "TritanCoefficients",
    "GrayscaleFilter",
    "create_filter",
    # Confusion highlighting
    "highlight_differences",
    "delta_e_map",
    "srgb_to_lab",
    # Protocols
    "RasterFilter",
    # Errors
    "DimensionMismatch",
    "InvalidMode",
]
