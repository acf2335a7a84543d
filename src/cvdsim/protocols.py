"""
Protocol definitions for cvdsim filter interfaces.

Defines the common interface that all raster filters implement.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cvdsim.raster import RasterImage


@runtime_checkable
class RasterFilter(Protocol):
    """
    Protocol for raster filters (RedGreenFilter, TritanFilter, GrayscaleFilter).

    Capture and display code can depend on this interface instead of a
    concrete filter class.
    """

    def transform_pixel(self, pixel: int) -> int:
        """
        Transform one packed ARGB pixel.

        Args:
            pixel: Packed ARGB input, alpha ignored

        Returns:
            Packed ARGB output with opaque alpha
        """
        ...

    def filter(self, src: RasterImage, dst: RasterImage | None = None) -> RasterImage:
        """
        Apply the filter to every pixel of a raster.

        Args:
            src: Source raster
            dst: Optional destination raster of the same size

        Returns:
            Filtered raster
        """
        ...

    def __call__(self, src: RasterImage, dst: RasterImage | None = None) -> RasterImage:
        """Apply the filter (callable interface)."""
        ...
