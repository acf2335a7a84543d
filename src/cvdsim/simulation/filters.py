"""
Raster filters: drive one colorimetric transform across a whole raster.

Each filter is stateless between calls and owns only its immutable model
coefficients, so one instance can be reused for any number of rasters. The
run-length cache lives inside the raster kernels and is scoped to one call.

All filters share one kernel pair; a filter is a variant tag plus the
parameter arrays the kernels read.

Example:
    >>> from cvdsim.simulation.filters import RedGreenFilter
    >>> deutan = RedGreenFilter.deuteranopia()
    >>> simulated = deutan.filter(screenshot)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from numbers import Integral

import numpy as np

from cvdsim.constants import (
    DEUTERANOPIA_COEFFICIENTS,
    LMS_FROM_RGB,
    PIXEL_MASK,
    PROTANOPIA_COEFFICIENTS,
    TRITAN_PLANE_475,
    TRITAN_PLANE_575,
)
from cvdsim.exceptions import DimensionMismatch, InvalidMode
from cvdsim.gamma import gamma_tables
from cvdsim.protocols import RasterFilter
from cvdsim.raster import RasterImage
from cvdsim.simulation.kernels import (
    GRAYSCALE,
    RED_GREEN,
    TRITAN,
    filter_raster_numba,
    filter_raster_serial_numba,
    simulate_pixel,
    use_parallel_kernels,
)
from cvdsim.validators import validate_range, validate_type

logger = logging.getLogger(__name__)


class _RasterFilter:
    """
    Shared raster driver: validation, destination allocation and dispatch.

    Subclasses set ``variant`` and fill the parameter arrays.
    """

    __slots__ = ("parallel", "_int_params", "_float_params")

    name = "filter"
    variant = -1

    def __init__(self, parallel: bool = True):
        self.parallel = bool(parallel)
        self._int_params = np.zeros(3, dtype=np.int64)
        self._float_params = np.zeros(7, dtype=np.float32)

    def transform_pixel(self, pixel: int) -> int:
        """
        Transform one packed ARGB pixel into an opaque ARGB pixel.

        Signed 32-bit values (e.g. -1 for 0xFFFFFFFF) are accepted.
        """
        tables = gamma_tables()
        return int(
            simulate_pixel(
                np.uint32(int(pixel) & PIXEL_MASK),
                self.variant,
                self._int_params,
                self._float_params,
                tables.forward,
                tables.inverse,
            )
        )

    @validate_type(RasterImage, "src")
    def filter(self, src: RasterImage, dst: RasterImage | None = None) -> RasterImage:
        """
        Apply the filter to every pixel of a raster.

        Args:
            src: Source raster (not modified)
            dst: Optional destination raster of the same size. A new raster is
                allocated when omitted (recommended).

        Returns:
            Destination raster; every pixel is fully opaque

        Raises:
            DimensionMismatch: If dst does not have the size of src
        """
        if dst is None:
            dst = RasterImage(src.width, src.height, np.empty(len(src), dtype=np.uint32))
        elif not dst.same_shape(src):
            raise DimensionMismatch(src.size, dst.size)

        # Empty raster: nothing to transform
        if len(src) == 0:
            return dst

        if use_parallel_kernels(self.parallel):
            kernel = filter_raster_numba
        else:
            kernel = filter_raster_serial_numba
        tables = gamma_tables()
        kernel(
            src.as_2d(),
            self.variant,
            self._int_params,
            self._float_params,
            tables.forward,
            tables.inverse,
            dst.as_2d(),
        )
        logger.info("[%s] Filtered %dx%d raster", type(self).__name__, src.width, src.height)
        return dst

    def __call__(self, src: RasterImage, dst: RasterImage | None = None) -> RasterImage:
        """Apply the filter when called as a function."""
        return self.filter(src, dst)


class RedGreenFilter(_RasterFilter):
    """
    Red-green dichromacy (deuteranopia and protanopia).

    The model is a linear combination of linear red and green with integer
    coefficients scaled by 2^15. Simulated green always equals simulated red.

    Example:
        >>> RedGreenFilter.deuteranopia().transform_pixel(0xFFFFFFFF) == 0xFFFEFEFE
        True
    """

    __slots__ = ("k1", "k2", "k3", "name")

    variant = RED_GREEN

    @validate_range(-32768, 32768, "k1", param_index=1)
    @validate_range(-32768, 32768, "k2", param_index=2)
    @validate_range(-32768, 32768, "k3", param_index=3)
    def __init__(
        self, k1: int, k2: int, k3: int, name: str = "red-green", parallel: bool = True
    ):
        """
        Initialize the filter.

        Args:
            k1: Weight of linear red in simulated red
            k2: Weight of linear green in simulated red
            k3: Weight of (red - green) in simulated blue
            name: Label used in logs and repr
            parallel: Process rows on numba's thread pool

        Raises:
            TypeError: If a coefficient is not an integer
            ValueError: If a coefficient is outside [-2^15, 2^15]
        """
        for label, value in (("k1", k1), ("k2", k2), ("k3", k3)):
            if not isinstance(value, Integral):
                raise TypeError(f"{label} must be an integer, got {type(value).__name__}")

        super().__init__(parallel)
        self.k1 = int(k1)
        self.k2 = int(k2)
        self.k3 = int(k3)
        self.name = name
        self._int_params[:] = (self.k1, self.k2, self.k3)
        logger.debug("[RedGreenFilter] %s k=(%d, %d, %d)", name, self.k1, self.k2, self.k3)

    @classmethod
    def deuteranopia(cls, parallel: bool = True) -> RedGreenFilter:
        """Filter for missing medium-wavelength cones."""
        return cls(*DEUTERANOPIA_COEFFICIENTS, name="deuteranopia", parallel=parallel)

    @classmethod
    def protanopia(cls, parallel: bool = True) -> RedGreenFilter:
        """Filter for missing long-wavelength cones."""
        return cls(*PROTANOPIA_COEFFICIENTS, name="protanopia", parallel=parallel)

    def __repr__(self) -> str:
        return f"RedGreenFilter({self.name}, k=({self.k1}, {self.k2}, {self.k3}))"


@dataclass(frozen=True)
class TritanCoefficients:
    """
    Derived float32 constants of the tritan model.

    The anchors e0, e1, e2 are the L, M, S responses to an equal-energy
    stimulus (row sums of the RGB -> LMS matrix). Plane 1 passes through the
    575 nm anchor, plane 2 through the 475 nm anchor; ``inflection`` is the
    M/L ratio of the neutral axis where the two planes meet.
    """

    inflection: np.float32
    a1: np.float32
    b1: np.float32
    c1: np.float32
    a2: np.float32
    b2: np.float32
    c2: np.float32

    @classmethod
    def derive(cls) -> TritanCoefficients:
        """Derive the coefficients in float32, summing left to right."""
        e0, e1, e2 = (
            np.float32(row[0]) + np.float32(row[1]) + np.float32(row[2]) for row in LMS_FROM_RGB
        )
        p1, q1 = (np.float32(v) for v in TRITAN_PLANE_575)
        p2, q2, r2 = (np.float32(v) for v in TRITAN_PLANE_475)

        return cls(
            inflection=e1 / e0,
            a1=-e2 * p1,
            b1=e2 * q1,
            c1=e0 * p1 - e1 * q1,
            a2=e1 * p2 - e2 * q2,
            b2=e2 * r2 - e0 * p2,
            c2=e0 * q2 - e1 * r2,
        )

    def as_tuple(self) -> tuple[np.float32, ...]:
        """Return (inflection, a1, b1, c1, a2, b2, c2) in kernel argument order."""
        return (self.inflection, self.a1, self.b1, self.c1, self.a2, self.b2, self.c2)


class TritanFilter(_RasterFilter):
    """
    Blue-yellow dichromacy (tritanopia).

    Example:
        >>> TritanFilter().filter(screenshot)
    """

    __slots__ = ("coefficients",)

    name = "tritanopia"
    variant = TRITAN

    def __init__(self, parallel: bool = True):
        super().__init__(parallel)
        self.coefficients = TritanCoefficients.derive()
        self._float_params[:] = self.coefficients.as_tuple()
        logger.debug("[TritanFilter] inflection=%.6f", self.coefficients.inflection)

    def __repr__(self) -> str:
        return "TritanFilter()"


class GrayscaleFilter(_RasterFilter):
    """
    Perceptual luminance-preserving grayscale (Rec. 709 weights on linear RGB).

    By default the linear luminance is divided by 2^8, reproducing legacy
    output: the 0..32767 range lands in 0..127, so white becomes
    (185, 185, 185). Pass ``exact_rescale=True`` to map the full range to
    0..255 instead.
    """

    __slots__ = ("exact_rescale",)

    name = "grayscale"
    variant = GRAYSCALE

    def __init__(self, exact_rescale: bool = False, parallel: bool = True):
        super().__init__(parallel)
        self.exact_rescale = bool(exact_rescale)
        self._int_params[0] = int(self.exact_rescale)

    def __repr__(self) -> str:
        return f"GrayscaleFilter(exact_rescale={self.exact_rescale})"


def create_filter(
    mode, exact_grayscale: bool = False, parallel: bool = True
) -> RasterFilter | None:
    """
    Create the raster filter for a deficiency mode.

    Args:
        mode: Deficiency or mode name ("normal", "deuteranopia", "protanopia",
            "tritanopia", "grayscale")
        exact_grayscale: Use the exact grayscale rescale (see GrayscaleFilter)
        parallel: Process rows on numba's thread pool. Pass False for filters
            used from several Python threads at once.

    Returns:
        A new filter, or None for normal vision

    Raises:
        InvalidMode: If mode is not recognized
    """
    from cvdsim.simulation.selector import Deficiency

    deficiency = Deficiency.parse(mode)

    if deficiency is Deficiency.NORMAL:
        return None
    if deficiency is Deficiency.DEUTERANOPIA:
        return RedGreenFilter.deuteranopia(parallel=parallel)
    if deficiency is Deficiency.PROTANOPIA:
        return RedGreenFilter.protanopia(parallel=parallel)
    if deficiency is Deficiency.TRITANOPIA:
        return TritanFilter(parallel=parallel)
    if deficiency is Deficiency.GRAYSCALE:
        return GrayscaleFilter(exact_rescale=exact_grayscale, parallel=parallel)

    raise InvalidMode(mode, {d.value for d in Deficiency})
