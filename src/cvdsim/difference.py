"""
Confusion highlighting: mark pixels whose color changes strongly under simulation.

Both rasters are converted to CIE L*a*b* (D50 reference white) and compared
with the CIE76 color difference. Pixels where the simulated color is far from
the original are painted with a marker color, all others keep the original
pixel. Lab components are rounded to integers before the difference, with
lightness stored on a 0..255 scale.

Lab values differ slightly from the legacy highlighter: the linear segment of
the sRGB curve divides by the standard 12.92 (legacy: 12), and the
conversion runs in float64 (legacy: float32). Pixels near the 40 threshold
can therefore be marked differently than before.

Example:
    >>> from cvdsim import Simulator, highlight_differences
    >>> simulated = Simulator("deuteranopia").transform(screenshot)
    >>> marked = highlight_differences(simulated, screenshot)
"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit, prange

from cvdsim.constants import (
    CHANNEL_MASK,
    CHANNEL_MAX,
    D50_WHITE,
    DEFAULT_DELTA_E_THRESHOLD,
    DEFAULT_MARKER_COLOR,
    GREEN_SHIFT,
    LAB_EPSILON,
    LAB_KAPPA,
    LAB_LIGHTNESS_SCALE,
    PIXEL_MASK,
    RED_SHIFT,
    XYZ_D50_FROM_RGB,
)
from cvdsim.exceptions import DimensionMismatch
from cvdsim.raster import RasterImage
from cvdsim.simulation.kernels import use_parallel_kernels
from cvdsim.validators import validate_positive, validate_type

logger = logging.getLogger(__name__)

_X_R, _X_G, _X_B = XYZ_D50_FROM_RGB[0]
_Y_R, _Y_G, _Y_B = XYZ_D50_FROM_RGB[1]
_Z_R, _Z_G, _Z_B = XYZ_D50_FROM_RGB[2]
_WHITE_X, _WHITE_Y, _WHITE_Z = D50_WHITE

# ============================================================================
# Lab Conversion Kernels
# ============================================================================


@njit(cache=True, nogil=True)
def srgb_channel_to_linear(channel):
    """sRGB transfer function, 8-bit channel -> linear 0..1."""
    c = channel / CHANNEL_MAX
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


@njit(cache=True, nogil=True)
def _lab_f(t):
    if t > LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return (LAB_KAPPA * t + 16.0) / 116.0


@njit(cache=True, nogil=True)
def lab_pixel_numba(pixel):
    """
    Convert one packed ARGB pixel to integer Lab.

    Returns:
        Tuple (L, a, b): L scaled to 0..255, a and b rounded half up
        (truncating toward zero after adding 0.5)
    """
    p = np.int64(pixel)
    red = srgb_channel_to_linear((p >> RED_SHIFT) & CHANNEL_MASK)
    green = srgb_channel_to_linear((p >> GREEN_SHIFT) & CHANNEL_MASK)
    blue = srgb_channel_to_linear(p & CHANNEL_MASK)

    # Linear RGB -> XYZ -> Lab
    fx = _lab_f((_X_R * red + _X_G * green + _X_B * blue) / _WHITE_X)
    fy = _lab_f((_Y_R * red + _Y_G * green + _Y_B * blue) / _WHITE_Y)
    fz = _lab_f((_Z_R * red + _Z_G * green + _Z_B * blue) / _WHITE_Z)

    lightness = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    return (
        np.int64(LAB_LIGHTNESS_SCALE * lightness + 0.5),
        np.int64(a + 0.5),
        np.int64(b + 0.5),
    )


@njit(cache=True, nogil=True)
def delta_e_pixel(pixel1, pixel2):
    """CIE76 distance between the integer Lab values of two pixels."""
    l1, a1, b1 = lab_pixel_numba(pixel1)
    l2, a2, b2 = lab_pixel_numba(pixel2)
    dl = l1 - l2
    da = a1 - a2
    db = b1 - b2
    return np.sqrt(np.float64(dl * dl + da * da + db * db))


@njit(parallel=True, cache=True, nogil=True)
def delta_e_numba(src1, src2, out):
    """
    Per-pixel color difference of two rasters.

    Args:
        src1, src2: ARGB pixels [N] uint32
        out: Output buffer [N] float32
    """
    for i in prange(src1.shape[0]):
        out[i] = delta_e_pixel(src1[i], src2[i])


@njit(parallel=True, cache=True, nogil=True)
def highlight_numba(simulated, original, threshold, marker, out):
    """
    Paint pixels whose difference exceeds ``threshold`` with ``marker``.

    Args:
        simulated, original: ARGB pixels [N] uint32
        threshold: Delta E above which a pixel is marked
        marker: ARGB marker color
        out: Output buffer [N] uint32 (unmarked pixels copy ``original``)
    """
    for i in prange(simulated.shape[0]):
        if delta_e_pixel(simulated[i], original[i]) > threshold:
            out[i] = marker
        else:
            out[i] = original[i]


@njit(cache=True, nogil=True)
def delta_e_serial_numba(src1, src2, out):
    """Single-threaded version of delta_e_numba, safe to call from worker threads."""
    for i in range(src1.shape[0]):
        out[i] = delta_e_pixel(src1[i], src2[i])


@njit(cache=True, nogil=True)
def highlight_serial_numba(simulated, original, threshold, marker, out):
    """Single-threaded version of highlight_numba, safe to call from worker threads."""
    for i in range(simulated.shape[0]):
        if delta_e_pixel(simulated[i], original[i]) > threshold:
            out[i] = marker
        else:
            out[i] = original[i]


# ============================================================================
# Public API
# ============================================================================


def srgb_to_lab(pixel: int) -> tuple[int, int, int]:
    """
    Convert a packed ARGB pixel to integer Lab (alpha ignored).

    Example:
        >>> srgb_to_lab(0xFFFFFFFF)
        (255, 0, 0)
    """
    lightness, a, b = lab_pixel_numba(np.uint32(int(pixel) & PIXEL_MASK))
    return int(lightness), int(a), int(b)


def _check_pair(first: RasterImage, second: RasterImage) -> None:
    if not isinstance(second, RasterImage):
        raise TypeError(f"original must be RasterImage, got {type(second).__name__}")
    if not first.same_shape(second):
        raise DimensionMismatch(first.size, second.size)


@validate_type(RasterImage, "simulated", param_index=0)
def delta_e_map(simulated: RasterImage, original: RasterImage) -> np.ndarray:
    """
    Compute the per-pixel color difference between two rasters.

    Args:
        simulated: Simulated raster
        original: Raster of the same size

    Returns:
        float32 array [height, width]

    Raises:
        DimensionMismatch: If the rasters differ in size
    """
    _check_pair(simulated, original)
    out = np.empty(len(simulated), dtype=np.float32)
    if len(simulated):
        kernel = delta_e_numba if use_parallel_kernels() else delta_e_serial_numba
        kernel(simulated.pixels, original.pixels, out)
    return out.reshape(simulated.height, simulated.width)


@validate_type(RasterImage, "simulated", param_index=0)
@validate_positive("threshold", param_index=2)
def highlight_differences(
    simulated: RasterImage,
    original: RasterImage,
    threshold: float = DEFAULT_DELTA_E_THRESHOLD,
    marker: int = DEFAULT_MARKER_COLOR,
) -> RasterImage:
    """
    Mark the pixels that change visibly under simulation.

    Args:
        simulated: Simulated raster
        original: Raster the simulation was computed from
        threshold: Delta E above which a pixel is marked (default 40)
        marker: ARGB color for marked pixels (default opaque blue)

    Returns:
        New raster: marker where delta E > threshold, original pixel elsewhere

    Raises:
        DimensionMismatch: If the rasters differ in size
        ValueError: If threshold is not positive or marker is not a 32-bit value
    """
    _check_pair(simulated, original)
    if not 0 <= marker <= 0xFFFFFFFF:
        raise ValueError(f"marker={marker:#x} is not a 32-bit ARGB value")

    out = np.empty(len(simulated), dtype=np.uint32)
    if len(simulated):
        kernel = highlight_numba if use_parallel_kernels() else highlight_serial_numba
        kernel(
            simulated.pixels, original.pixels, float(threshold), np.uint32(marker), out
        )
        logger.info(
            "[highlight_differences] Compared %dx%d rasters (threshold=%.1f)",
            simulated.width,
            simulated.height,
            threshold,
        )
    return RasterImage(simulated.width, simulated.height, out)


def warmup_difference_kernels() -> None:
    """Warm up Numba JIT compilation for the highlighting kernels."""
    src = np.random.randint(0, 2**32, size=64, dtype=np.uint32)
    delta_e_numba(src, src[::-1].copy(), np.empty(64, dtype=np.float32))
    highlight_numba(src, src, 40.0, np.uint32(DEFAULT_MARKER_COLOR), np.empty_like(src))
    delta_e_serial_numba(src, src, np.empty(64, dtype=np.float32))
    highlight_serial_numba(src, src, 40.0, np.uint32(DEFAULT_MARKER_COLOR), np.empty_like(src))


# Warmup on import to avoid first-call overhead
warmup_difference_kernels()
