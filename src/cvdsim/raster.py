"""
RasterImage: packed ARGB raster exchanged with capture and display code.

A raster is a width x height grid of 32-bit pixels stored as a flat, row-major
uint32 buffer. Each pixel packs alpha, red, green and blue with 8 bits per
channel (``0xAARRGGBB``).
"""

from __future__ import annotations

import numpy as np

from cvdsim.constants import (
    ALPHA_SHIFT,
    CHANNEL_MASK,
    GREEN_SHIFT,
    OPAQUE_ALPHA,
    RED_SHIFT,
)


def pack_argb(r: int, g: int, b: int, a: int = 255) -> int:
    """
    Pack 8-bit channels into one ARGB pixel.

    Example:
        >>> hex(pack_argb(255, 0, 0))
        '0xffff0000'
    """
    for name, value in (("r", r), ("g", g), ("b", b), ("a", a)):
        if not 0 <= value <= CHANNEL_MASK:
            raise ValueError(f"{name}={value} is outside valid range [0, 255]")
    return (a << ALPHA_SHIFT) | (r << RED_SHIFT) | (g << GREEN_SHIFT) | b


def unpack_argb(pixel: int) -> tuple[int, int, int, int]:
    """
    Split an ARGB pixel into its channels.

    Returns:
        Tuple (a, r, g, b)
    """
    pixel = int(pixel)
    return (
        (pixel >> ALPHA_SHIFT) & CHANNEL_MASK,
        (pixel >> RED_SHIFT) & CHANNEL_MASK,
        (pixel >> GREEN_SHIFT) & CHANNEL_MASK,
        pixel & CHANNEL_MASK,
    )


class RasterImage:
    """
    Rectangular ARGB raster with a flat row-major uint32 pixel buffer.

    Attributes:
        width: Number of columns
        height: Number of rows
        pixels: uint32 array [width * height]

    Example:
        >>> raster = RasterImage.blank(640, 480)
        >>> raster.as_2d().shape
        (480, 640)
    """

    __slots__ = ("width", "height", "pixels")

    def __init__(self, width: int, height: int, pixels=None):
        """
        Create a raster.

        Args:
            width: Number of columns (>= 0)
            height: Number of rows (>= 0)
            pixels: Packed ARGB values, any shape with width * height elements.
                Converted to a contiguous uint32 buffer (no copy when it already is one).
                Defaults to opaque black.

        Raises:
            ValueError: If dimensions are negative or the pixel count does not match
        """
        if width < 0 or height < 0:
            raise ValueError(f"Raster dimensions must be non-negative, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)

        if pixels is None:
            self.pixels = np.full(self.width * self.height, OPAQUE_ALPHA, dtype=np.uint32)
            return

        buffer = np.ascontiguousarray(pixels, dtype=np.uint32).reshape(-1)
        if buffer.size != self.width * self.height:
            raise ValueError(
                f"Pixel buffer has {buffer.size} values, expected "
                f"{self.width * self.height} for a {self.width}x{self.height} raster."
            )
        self.pixels = buffer

    # ========================================================================
    # Constructors
    # ========================================================================

    @classmethod
    def blank(cls, width: int, height: int, argb: int = OPAQUE_ALPHA) -> RasterImage:
        """Create a raster filled with a single ARGB value (default opaque black)."""
        return cls(width, height, np.full(width * height, argb, dtype=np.uint32))

    @classmethod
    def from_array(cls, array: np.ndarray) -> RasterImage:
        """
        Create a raster from an 8-bit channel array.

        Args:
            array: uint8 array [H, W, 3] (RGB, stored opaque) or [H, W, 4] (RGBA)

        Returns:
            RasterImage of size W x H

        Raises:
            ValueError: If the array is not uint8 H x W x 3 or H x W x 4
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected an array of shape (H, W, 3) or (H, W, 4), got {array.shape}"
            )
        if array.dtype != np.uint8:
            raise ValueError(
                f"Expected a uint8 array with channels in 0..255, got {array.dtype}. "
                f"Scale float images by 255 and convert with astype(np.uint8)."
            )
        channels = array.astype(np.uint32)
        height, width = array.shape[:2]

        if array.shape[2] == 4:
            alpha = channels[..., 3] << ALPHA_SHIFT
        else:
            alpha = np.uint32(OPAQUE_ALPHA)

        packed = (
            alpha
            | (channels[..., 0] << RED_SHIFT)
            | (channels[..., 1] << GREEN_SHIFT)
            | channels[..., 2]
        )
        return cls(width, height, packed.astype(np.uint32))

    # ========================================================================
    # Views and Conversions
    # ========================================================================

    @property
    def shape(self) -> tuple[int, int]:
        """(height, width) of the raster."""
        return self.height, self.width

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the raster."""
        return self.width, self.height

    def as_2d(self) -> np.ndarray:
        """Return a [height, width] view of the pixel buffer (no copy)."""
        return self.pixels.reshape(self.height, self.width)

    def to_array(self, alpha: bool = False) -> np.ndarray:
        """
        Unpack the raster into an 8-bit channel array.

        Args:
            alpha: If True, return RGBA [H, W, 4], otherwise RGB [H, W, 3]

        Returns:
            uint8 array
        """
        grid = self.as_2d()
        channels = [
            (grid >> RED_SHIFT) & CHANNEL_MASK,
            (grid >> GREEN_SHIFT) & CHANNEL_MASK,
            grid & CHANNEL_MASK,
        ]
        if alpha:
            channels.append((grid >> ALPHA_SHIFT) & CHANNEL_MASK)
        return np.stack(channels, axis=-1).astype(np.uint8)

    def same_shape(self, other: RasterImage) -> bool:
        """Check whether another raster has the same width and height."""
        return self.width == other.width and self.height == other.height

    def copy(self) -> RasterImage:
        """Create an independent copy of this raster."""
        return RasterImage(self.width, self.height, self.pixels.copy())

    # ========================================================================
    # Dunder Methods
    # ========================================================================

    def __len__(self) -> int:
        """Return number of pixels."""
        return self.pixels.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.same_shape(other) and np.array_equal(self.pixels, other.pixels)

    __hash__ = None  # Mutable buffer

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"
