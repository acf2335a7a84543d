"""
Constants and default values for cvdsim simulations.

Centralizes magic numbers of the gamma tables and the colorimetric models.
Changing any of these breaks bit-compatibility with previously simulated images.
"""

from __future__ import annotations

# =============================================================================
# Gamma Table Constants
# =============================================================================

GAMMA = 2.2  # Default display gamma
GAMMA_INV = 1.0 / GAMMA
FORWARD_GAIN = 0.992052  # 0.992052 * x^gamma + 0.003974 approximates the sRGB response
FORWARD_OFFSET = 0.003974

TABLE_SIZE = 256  # One entry per 8-bit channel value
CHANNEL_MAX = 255
LINEAR_SCALE = 32767  # Linear intensities are stored as 15-bit integers (0..2^15-1)

# =============================================================================
# Packed Pixel Layout (ARGB, 8 bits per channel)
# =============================================================================

ALPHA_SHIFT = 24
RED_SHIFT = 16
GREEN_SHIFT = 8
CHANNEL_MASK = 0xFF
OPAQUE_ALPHA = 0xFF000000
PIXEL_MASK = 0xFFFFFFFF  # Folds signed 32-bit ARGB ints into 0..2^32-1

# =============================================================================
# Red-Green (Deuteranopia / Protanopia) Constants
# =============================================================================

# Matrix values scaled to 2^15, linear rgb rescaled to 0..255 afterwards:
# 2^15 * 2^15 / 2^8 = 2^22
FIXED_POINT_SHIFT = 22
BLUE_WEIGHT = 32768

DEUTERANOPIA_COEFFICIENTS = (9591, 23173, -730)
PROTANOPIA_COEFFICIENTS = (3683, 29084, 131)

# =============================================================================
# Tritanopia Constants (Brettel, Vienot & Mollon 1997)
# =============================================================================

# Linear RGB -> LMS rows
LMS_FROM_RGB = (
    (0.05059983, 0.08585369, 0.00952420),
    (0.01893033, 0.08925308, 0.01370054),
    (0.00292202, 0.00975732, 0.07145979),
)

# LMS -> linear RGB rows
RGB_FROM_LMS = (
    (30.830854, -29.832659, 1.610474),
    (-6.481468, 17.715578, -2.532642),
    (-0.375690, -1.199062, 14.273846),
)

# Confusion plane factors: set 1 where lambda_a = 575 nm, set 2 where lambda_a = 475 nm
TRITAN_PLANE_575 = (0.007009, 0.0914)
TRITAN_PLANE_475 = (0.3636, 0.2237, 0.1284)

# =============================================================================
# Grayscale Constants
# =============================================================================

# Rec. 709 relative luminance weights
LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)
LEGACY_GRAYSCALE_SHIFT = 8  # Divide by 2^8 (legacy rescale, darker than exact)
EXACT_GRAYSCALE_SCALE = CHANNEL_MAX / LINEAR_SCALE

# =============================================================================
# Confusion Highlighting Constants
# =============================================================================

DEFAULT_DELTA_E_THRESHOLD = 40.0
DEFAULT_MARKER_COLOR = 0xFF0000FF  # Opaque blue

# Reference white D50
D50_WHITE = (0.964221, 1.0, 0.825211)

# Linear sRGB -> XYZ (Bradford-adapted to D50)
XYZ_D50_FROM_RGB = (
    (0.436052025, 0.385081593, 0.143087414),
    (0.222491598, 0.71688606, 0.060621486),
    (0.013929122, 0.097097002, 0.71418547),
)

LAB_EPSILON = 216.0 / 24389.0
LAB_KAPPA = 24389.0 / 27.0
LAB_LIGHTNESS_SCALE = 2.55  # Lightness stored as 0..255

# =============================================================================
# General Constants
# =============================================================================

# Valid deficiency mode names
VALID_MODES = {"normal", "deuteranopia", "protanopia", "tritanopia", "grayscale"}

# Short names used by older front ends
MODE_ALIASES = {"deutan": "deuteranopia", "protan": "protanopia", "tritan": "tritanopia"}
