"""
Simulator: holds the active deficiency mode and filters rasters with it.

Example:
    >>> from cvdsim import Simulator
    >>> simulator = Simulator().select_mode("deuteranopia")
    >>> simulated = simulator.transform(screenshot)
    >>> simulator.select_mode("normal").transform(screenshot) is screenshot
    True
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

# Python 3.10 compatibility: Self was added in Python 3.11
if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from cvdsim.constants import MODE_ALIASES, VALID_MODES
from cvdsim.exceptions import InvalidMode
from cvdsim.protocols import RasterFilter
from cvdsim.raster import RasterImage
from cvdsim.simulation.filters import create_filter
from cvdsim.validators import validate_positive, validate_type

logger = logging.getLogger(__name__)


class Deficiency(str, Enum):
    """Color vision deficiency modes."""

    NORMAL = "normal"
    DEUTERANOPIA = "deuteranopia"
    PROTANOPIA = "protanopia"
    TRITANOPIA = "tritanopia"
    GRAYSCALE = "grayscale"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. for menus and window titles."""
        if self is Deficiency.NORMAL:
            return "Normal Vision"
        return self.value.capitalize()

    @property
    def is_normal(self) -> bool:
        return self is Deficiency.NORMAL

    @classmethod
    def parse(cls, mode) -> Deficiency:
        """
        Convert a mode name or Deficiency to a Deficiency.

        Names are case-insensitive; "deutan", "protan" and "tritan" are accepted
        as short names.

        Raises:
            InvalidMode: If mode is not recognized
        """
        if isinstance(mode, cls):
            return mode
        if not isinstance(mode, str):
            raise InvalidMode(mode, VALID_MODES)

        name = mode.strip().lower()
        name = MODE_ALIASES.get(name, name)
        if name not in VALID_MODES:
            raise InvalidMode(mode, VALID_MODES)
        return cls(name)


class Simulator:
    """
    Current deficiency mode plus the raster filter that simulates it.

    There is no state beyond the mode: any mode can follow any other, and
    switching only constructs a new stateless filter. Each thread should use
    its own simulator; off the main thread filtering is always serial.

    Example:
        >>> simulator = Simulator(mode="tritanopia")
        >>> result = simulator(screenshot)
    """

    __slots__ = ("_mode", "_filter", "exact_grayscale", "parallel")

    def __init__(
        self,
        mode: Deficiency | str = Deficiency.NORMAL,
        exact_grayscale: bool = False,
        parallel: bool = True,
    ):
        """
        Initialize the simulator.

        Args:
            mode: Initial deficiency mode (default normal vision)
            exact_grayscale: Map grayscale luminance to the full 0..255 range
                instead of the legacy divide-by-256
            parallel: Process rows on numba's thread pool. Only honored on the
                main thread; simulators used from worker threads always run
                the serial kernel.

        Raises:
            InvalidMode: If mode is not recognized
        """
        self.exact_grayscale = bool(exact_grayscale)
        self.parallel = bool(parallel)
        self._mode = Deficiency.NORMAL
        self._filter = None
        self.select_mode(mode)

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def mode(self) -> Deficiency:
        """Currently active deficiency mode."""
        return self._mode

    @property
    def active_filter(self) -> RasterFilter | None:
        """Raster filter of the current mode, None for normal vision."""
        return self._filter

    def is_identity(self) -> bool:
        """Check if rasters pass through unchanged."""
        return self._mode.is_normal

    # ========================================================================
    # Mode Selection
    # ========================================================================

    def select_mode(self, mode: Deficiency | str) -> Self:
        """
        Switch to a deficiency mode.

        Args:
            mode: Deficiency or name ("normal", "deuteranopia", "protanopia",
                "tritanopia", "grayscale")

        Returns:
            Self for method chaining

        Raises:
            InvalidMode: If mode is not recognized; the current mode is kept
        """
        deficiency = Deficiency.parse(mode)
        self._filter = create_filter(
            deficiency, exact_grayscale=self.exact_grayscale, parallel=self.parallel
        )
        self._mode = deficiency
        logger.info("[Simulator] Mode set to %s", deficiency.value)
        return self

    set_mode = select_mode

    # ========================================================================
    # Filtering
    # ========================================================================

    @validate_type(RasterImage, "raster")
    def transform(self, raster: RasterImage, copy: bool = False) -> RasterImage:
        """
        Simulate the current mode on a raster.

        Args:
            raster: Source raster (not modified)
            copy: In normal mode, return a copy instead of the input itself

        Returns:
            New raster of the same size, or the input for normal vision
        """
        if self._filter is None:
            logger.debug("[Simulator] Normal vision, returning raster unchanged")
            return raster.copy() if copy else raster
        return self._filter.filter(raster)

    apply = transform

    @validate_positive("max_workers", param_index=2)
    def transform_many(
        self, rasters: Iterable[RasterImage], max_workers: int | None = None
    ) -> list[RasterImage]:
        """
        Simulate the current mode on several independent rasters in parallel.

        Intended for one screenshot per display. Each raster is filtered by its
        own single-threaded filter on a worker thread; the kernels release the GIL.

        Args:
            rasters: Source rasters
            max_workers: Thread pool size (None lets the pool decide)

        Returns:
            Results in input order
        """
        rasters = list(rasters)
        for raster in rasters:
            if not isinstance(raster, RasterImage):
                raise TypeError(f"rasters must contain RasterImage, got {type(raster).__name__}")

        if self.is_identity():
            return rasters

        mode = self._mode

        def run(raster: RasterImage) -> RasterImage:
            filter_ = create_filter(mode, exact_grayscale=self.exact_grayscale, parallel=False)
            return filter_.filter(raster)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, rasters))

        logger.info("[Simulator] Filtered %d rasters (%s)", len(results), mode.value)
        return results

    def __call__(self, raster: RasterImage, copy: bool = False) -> RasterImage:
        """Apply the simulation when called as a function."""
        return self.transform(raster, copy=copy)

    def __repr__(self) -> str:
        return f"Simulator(mode={self._mode.value})"
