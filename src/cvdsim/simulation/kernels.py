"""
Numba-optimized kernels for color vision deficiency simulation.

Per-pixel kernels map one packed ARGB pixel to one opaque ARGB pixel.
``simulate_pixel`` selects one of them by variant tag, and the raster kernels
run it over [H, W] uint32 buffers: rows are processed in parallel (or serially
for callers on worker threads), and within a row the previous input/output
pair is reused while pixels repeat (screenshots are dominated by long runs of
identical pixels).

No fastmath here: tritan output must match the float32 reference bit for bit.
"""

import threading

import numpy as np
from numba import njit, prange

from cvdsim.constants import (
    BLUE_WEIGHT,
    CHANNEL_MASK,
    CHANNEL_MAX,
    EXACT_GRAYSCALE_SCALE,
    FIXED_POINT_SHIFT,
    GREEN_SHIFT,
    LEGACY_GRAYSCALE_SHIFT,
    LINEAR_SCALE,
    LMS_FROM_RGB,
    LUMINANCE_WEIGHTS,
    OPAQUE_ALPHA,
    RED_SHIFT,
    RGB_FROM_LMS,
)

# float32 copies, numba freezes them as typed constants
_L_R, _L_G, _L_B = (np.float32(v) for v in LMS_FROM_RGB[0])
_M_R, _M_G, _M_B = (np.float32(v) for v in LMS_FROM_RGB[1])
_R_L, _R_M, _R_S = (np.float32(v) for v in RGB_FROM_LMS[0])
_G_L, _G_M, _G_S = (np.float32(v) for v in RGB_FROM_LMS[1])
_B_L, _B_M, _B_S = (np.float32(v) for v in RGB_FROM_LMS[2])
_F32_LINEAR_SCALE = np.float32(LINEAR_SCALE)
_F32_CHANNEL_MAX = np.float32(CHANNEL_MAX)

_W_R, _W_G, _W_B = LUMINANCE_WEIGHTS

# ============================================================================
# Per-Pixel Kernels
# ============================================================================


@njit(cache=True, nogil=True)
def encode_channel(value, inverse):
    """
    Clamp a linear intensity to 0..255 and convert it to gamma-encoded 0..255.

    Args:
        value: Linear intensity (any integer, clamped)
        inverse: Inverse gamma table [256] uint8
    """
    if value < 0:
        return 0
    if value > CHANNEL_MAX:
        return CHANNEL_MAX
    return np.int64(inverse[value])


@njit(cache=True, nogil=True)
def red_green_pixel(pixel, k1, k2, k3, forward, inverse):
    """
    Simulate deuteranopia or protanopia for one pixel.

    Simulated red and green are identical. The matrix coefficients are scaled
    by 2^15, so the products are shifted right by 22 bits to land in 0..255
    (2^15 * 2^15 / 2^8). Clamping happens after the shift.

    Args:
        pixel: Packed ARGB input (alpha ignored)
        k1, k2, k3: Integer coefficients of the red-green model
        forward: Forward gamma table [256] int32
        inverse: Inverse gamma table [256] uint8

    Returns:
        Packed opaque ARGB output
    """
    p = np.int64(pixel)
    r_lin = np.int64(forward[(p >> RED_SHIFT) & CHANNEL_MASK])
    g_lin = np.int64(forward[(p >> GREEN_SHIFT) & CHANNEL_MASK])
    b_lin = np.int64(forward[p & CHANNEL_MASK])

    r_blind = (k1 * r_lin + k2 * g_lin) >> FIXED_POINT_SHIFT
    b_blind = (k3 * r_lin - k3 * g_lin + BLUE_WEIGHT * b_lin) >> FIXED_POINT_SHIFT

    red = encode_channel(r_blind, inverse)
    blue = encode_channel(b_blind, inverse)
    return OPAQUE_ALPHA | (red << RED_SHIFT) | (red << GREEN_SHIFT) | blue


@njit(cache=True, nogil=True)
def tritan_pixel(pixel, inflection, a1, b1, c1, a2, b2, c2, forward, inverse):
    """
    Simulate tritanopia for one pixel (Brettel, Vienot & Mollon 1997).

    The short-wave cone response is replaced by a value on one of two
    half-planes, chosen by which side of the inflection line M/L falls.
    All arithmetic is float32.

    Args:
        pixel: Packed ARGB input (alpha ignored)
        inflection: M/L ratio separating the two half-planes (float32)
        a1, b1, c1: Plane coefficients for lambda = 575 nm (float32)
        a2, b2, c2: Plane coefficients for lambda = 475 nm (float32)
        forward: Forward gamma table [256] int32
        inverse: Inverse gamma table [256] uint8

    Returns:
        Packed opaque ARGB output
    """
    p = np.int64(pixel)
    r = np.float32(forward[(p >> RED_SHIFT) & CHANNEL_MASK])
    g = np.float32(forward[(p >> GREEN_SHIFT) & CHANNEL_MASK])
    b = np.float32(forward[p & CHANNEL_MASK])

    # RGB -> LMS (S is replaced below)
    L = (r * _L_R + g * _L_G + b * _L_B) / _F32_LINEAR_SCALE
    M = (r * _M_R + g * _M_G + b * _M_B) / _F32_LINEAR_SCALE

    if M / L < inflection:
        S = -(a1 * L + b1 * M) / c1
    else:
        S = -(a2 * L + b2 * M) / c2

    # LMS -> linear RGB in 0..255
    red = np.int64(_F32_CHANNEL_MAX * (L * _R_L + M * _R_M + S * _R_S))
    green = np.int64(_F32_CHANNEL_MAX * (L * _G_L + M * _G_M + S * _G_S))
    blue = np.int64(_F32_CHANNEL_MAX * (L * _B_L + M * _B_M + S * _B_S))

    red = encode_channel(red, inverse)
    green = encode_channel(green, inverse)
    blue = encode_channel(blue, inverse)
    return OPAQUE_ALPHA | (red << RED_SHIFT) | (green << GREEN_SHIFT) | blue


@njit(cache=True, nogil=True)
def grayscale_pixel(pixel, exact_rescale, forward, inverse):
    """
    Perceptual luminance-preserving grayscale for one pixel.

    Args:
        pixel: Packed ARGB input (alpha ignored)
        exact_rescale: If True, map 0..32767 to 0..255 exactly; if False,
            divide by 2^8 like the legacy filter (output is darker)
        forward: Forward gamma table [256] int32
        inverse: Inverse gamma table [256] uint8

    Returns:
        Packed opaque ARGB output with R == G == B
    """
    p = np.int64(pixel)
    luminance = (
        _W_R * forward[(p >> RED_SHIFT) & CHANNEL_MASK]
        + _W_G * forward[(p >> GREEN_SHIFT) & CHANNEL_MASK]
        + _W_B * forward[p & CHANNEL_MASK]
    )

    if exact_rescale:
        linear = np.int64(luminance * EXACT_GRAYSCALE_SCALE)
    else:
        linear = np.int64(luminance) >> LEGACY_GRAYSCALE_SHIFT

    gray = encode_channel(linear, inverse)
    return OPAQUE_ALPHA | (gray << RED_SHIFT) | (gray << GREEN_SHIFT) | gray


# ============================================================================
# Variant Dispatch
# ============================================================================

# Filter variant tags; parameters travel in two small arrays:
#   RED_GREEN: int_params = (k1, k2, k3)
#   TRITAN:    float_params = (inflection, a1, b1, c1, a2, b2, c2)
#   GRAYSCALE: int_params[0] = exact_rescale (0 or 1)
RED_GREEN = 0
TRITAN = 1
GRAYSCALE = 2


@njit(cache=True, nogil=True)
def simulate_pixel(pixel, variant, int_params, float_params, forward, inverse):
    """
    Transform one pixel with the model selected by ``variant``.

    Args:
        pixel: Packed ARGB input
        variant: RED_GREEN, TRITAN or GRAYSCALE
        int_params: int64 parameters [3]
        float_params: float32 parameters [7]
        forward, inverse: Gamma tables

    Returns:
        Packed opaque ARGB output
    """
    if variant == RED_GREEN:
        return red_green_pixel(
            pixel, int_params[0], int_params[1], int_params[2], forward, inverse
        )
    if variant == TRITAN:
        return tritan_pixel(
            pixel,
            float_params[0],
            float_params[1],
            float_params[2],
            float_params[3],
            float_params[4],
            float_params[5],
            float_params[6],
            forward,
            inverse,
        )
    return grayscale_pixel(pixel, int_params[0] != 0, forward, inverse)


@njit(cache=True, nogil=True)
def _filter_row(src_row, variant, int_params, float_params, forward, inverse, out_row):
    # Run cache: repeated input pixels reuse the previous output.
    # The first pixel is always computed, whatever its value.
    prev_in = src_row[0]
    prev_out = simulate_pixel(prev_in, variant, int_params, float_params, forward, inverse)
    out_row[0] = prev_out

    for x in range(1, src_row.shape[0]):
        pixel = src_row[x]
        if pixel != prev_in:
            prev_in = pixel
            prev_out = simulate_pixel(pixel, variant, int_params, float_params, forward, inverse)
        out_row[x] = prev_out


# ============================================================================
# Raster Kernels (width must be >= 1)
# ============================================================================


@njit(parallel=True, cache=True, nogil=True)
def filter_raster_numba(src, variant, int_params, float_params, forward, inverse, out):
    """
    Apply a filter variant to every pixel of a raster, rows in parallel.

    Not safe to launch from several Python threads at once (numba's
    workqueue threading layer aborts); see use_parallel_kernels.

    Args:
        src: Input ARGB pixels [H, W] uint32
        variant: RED_GREEN, TRITAN or GRAYSCALE
        int_params: int64 parameters [3]
        float_params: float32 parameters [7]
        forward, inverse: Gamma tables
        out: Output buffer [H, W] uint32
    """
    for y in prange(src.shape[0]):
        _filter_row(src[y], variant, int_params, float_params, forward, inverse, out[y])


@njit(cache=True, nogil=True)
def filter_raster_serial_numba(src, variant, int_params, float_params, forward, inverse, out):
    """Single-threaded version of filter_raster_numba, safe to call from worker threads."""
    for y in range(src.shape[0]):
        _filter_row(src[y], variant, int_params, float_params, forward, inverse, out[y])


# ============================================================================
# Helper Functions
# ============================================================================


def use_parallel_kernels(parallel: bool = True) -> bool:
    """
    Decide whether a caller may launch the row-parallel kernels.

    Only the main thread does: numba's workqueue threading layer aborts the
    process when parallel kernels are launched from several threads at once,
    so worker threads always get the serial kernels.

    Args:
        parallel: Caller preference (False always selects serial kernels)
    """
    return parallel and threading.current_thread() is threading.main_thread()


def warmup_simulation_kernels() -> None:
    """
    Warm up Numba JIT compilation for simulation kernels.

    Call this once at import time to avoid first-call compilation overhead.
    """
    from cvdsim.gamma import gamma_tables

    tables = gamma_tables()
    src = np.random.randint(0, 2**32, size=(8, 16), dtype=np.uint32)
    out = np.empty_like(src)
    int_params = np.zeros(3, dtype=np.int64)
    float_params = np.ones(7, dtype=np.float32)

    for variant in (RED_GREEN, TRITAN, GRAYSCALE):
        filter_raster_numba(
            src, variant, int_params, float_params, tables.forward, tables.inverse, out
        )
        filter_raster_serial_numba(
            src, variant, int_params, float_params, tables.forward, tables.inverse, out
        )


# Warmup on import to avoid first-call overhead
warmup_simulation_kernels()
