"""
Gamma lookup tables for converting between gamma-encoded and linear RGB.

Two fixed 256-entry tables approximate the sRGB display response with a
pure power law (gamma 2.2):

- Forward: 8-bit gamma-encoded channel -> 15-bit linear intensity (0..32767),
  ``0.992052 * x^2.2 + 0.003974`` scaled by 32767.
- Inverse: 8-bit linear intensity bucket (0..255) -> 8-bit gamma-encoded channel,
  ``255 * x^(1/2.2)``.

Both tables truncate toward zero like the legacy integer casts; reproducing
them exactly is required for bit-compatible output. The tables are built
lazily on first use, shared process-wide and read-only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

import numpy as np

from cvdsim.constants import (
    CHANNEL_MAX,
    FORWARD_GAIN,
    FORWARD_OFFSET,
    GAMMA,
    GAMMA_INV,
    LINEAR_SCALE,
    TABLE_SIZE,
)

logger = logging.getLogger(__name__)


def build_forward_table() -> np.ndarray:
    """
    Build the gamma-encoded -> linear lookup table.

    Returns:
        int32 array [256] with values in 0..32767
    """
    x = np.arange(TABLE_SIZE, dtype=np.float64) / CHANNEL_MAX
    linear = FORWARD_GAIN * np.power(x, GAMMA) + FORWARD_OFFSET
    return (linear * LINEAR_SCALE).astype(np.int32)


def build_inverse_table() -> np.ndarray:
    """
    Build the linear -> gamma-encoded lookup table.

    Stored unsigned, so entries above 127 need no sign correction.

    Returns:
        uint8 array [256] with values in 0..255
    """
    x = np.arange(TABLE_SIZE, dtype=np.float64) / CHANNEL_MAX
    return (CHANNEL_MAX * np.power(x, GAMMA_INV)).astype(np.uint8)


@dataclass(frozen=True)
class GammaTables:
    """
    Immutable pair of gamma lookup tables.

    Attributes:
        forward: int32 [256], gamma-encoded channel -> linear intensity (0..32767)
        inverse: uint8 [256], linear bucket (0..255) -> gamma-encoded channel
    """

    forward: np.ndarray
    inverse: np.ndarray

    def __post_init__(self):
        for name in ("forward", "inverse"):
            table = getattr(self, name)
            if table.shape != (TABLE_SIZE,):
                raise ValueError(f"{name} table must have shape ({TABLE_SIZE},), got {table.shape}")
            table.setflags(write=False)

    @classmethod
    def build(cls) -> GammaTables:
        """Build both tables from the closed-form formulas."""
        return cls(forward=build_forward_table(), inverse=build_inverse_table())


@lru_cache(maxsize=None)
def gamma_tables() -> GammaTables:
    """
    Get the process-wide gamma tables, building them on first call.

    The returned arrays are read-only and safe to share between threads.
    """
    tables = GammaTables.build()
    logger.debug(
        "[GammaTables] Built tables: forward[0]=%d, forward[255]=%d",
        tables.forward[0],
        tables.forward[-1],
    )
    return tables


def _lookup(table: np.ndarray, index, param_name: str):
    values = np.asarray(index)
    if values.dtype == np.bool_ or not np.issubdtype(values.dtype, np.integer):
        raise TypeError(
            f"{param_name} must be an integer or integer array, got {values.dtype}"
        )
    if values.size and (values.min() < 0 or values.max() > CHANNEL_MAX):
        raise ValueError(
            f"{param_name} must be in [0, {CHANNEL_MAX}], got values in "
            f"[{values.min()}, {values.max()}]. Clamp linear intensities before lookup."
        )
    result = table[values]
    if result.ndim == 0:
        return int(result)
    return result


def linearize(channel):
    """
    Convert gamma-encoded channel value(s) to linear intensity.

    Args:
        channel: int or integer array with values in 0..255

    Returns:
        Linear intensity in 0..32767 (int for scalar input, int32 array otherwise)

    Raises:
        TypeError: If channel is not integral
        ValueError: If any value is outside 0..255

    Example:
        >>> linearize(0)
        130
        >>> linearize(255)
        32636
    """
    return _lookup(gamma_tables().forward, channel, "channel")


def delinearize(value):
    """
    Convert linear intensity bucket(s) to gamma-encoded channel value(s).

    Callers must clamp linear intensities to 0..255 first.

    Args:
        value: int or integer array with values in 0..255

    Returns:
        Gamma-encoded channel in 0..255 (int for scalar input, uint8 array otherwise)

    Raises:
        TypeError: If value is not integral
        ValueError: If any value is outside 0..255
    """
    return _lookup(gamma_tables().inverse, value, "value")
