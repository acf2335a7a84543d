"""
Exceptions raised by cvdsim.

Both are contract errors: they signal an integration bug, not a condition to retry.
"""

from __future__ import annotations


class DimensionMismatch(ValueError):
    """Source and destination rasters do not have the same width and height."""

    def __init__(self, expected: tuple[int, int], actual: tuple[int, int]):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Raster size {actual[0]}x{actual[1]} does not match source size "
            f"{expected[0]}x{expected[1]}. Pass dst=None to allocate a matching raster."
        )


class InvalidMode(ValueError):
    """Unknown color vision deficiency mode."""

    def __init__(self, mode: object, valid: set[str]):
        self.mode = mode
        super().__init__(
            f"mode={mode!r} is not valid. Valid options are: {', '.join(sorted(valid))}"
        )
