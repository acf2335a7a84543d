"""
Tests for Lab conversion and confusion highlighting.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from cvdsim import (
    DimensionMismatch,
    RasterImage,
    Simulator,
    delta_e_map,
    highlight_differences,
    srgb_to_lab,
)
from cvdsim.constants import DEFAULT_MARKER_COLOR

WHITE = 0xFFFFFFFF
BLACK = 0xFF000000
RED = 0xFFFF0000
GRAY = 0xFF808080


class TestLabConversion:
    """Test srgb_to_lab."""

    def test_white(self):
        assert srgb_to_lab(WHITE) == (255, 0, 0)

    def test_black(self):
        assert srgb_to_lab(BLACK) == (0, 0, 0)

    def test_grays_are_neutral(self):
        for value in (32, 128, 200):
            lightness, a, b = srgb_to_lab(0xFF000000 | value * 0x010101)
            assert 0 < lightness < 255
            assert abs(a) <= 1 and abs(b) <= 1

    def test_lightness_increases(self):
        lightness = [srgb_to_lab(0xFF000000 | v * 0x010101)[0] for v in range(0, 256, 15)]
        assert lightness == sorted(lightness)

    def test_red_is_warm(self):
        lightness, a, b = srgb_to_lab(RED)
        assert a > 60
        assert b > 50

    def test_alpha_ignored(self):
        assert srgb_to_lab(0x00FF0000) == srgb_to_lab(RED)

    def test_dark_gray_uses_standard_linear_segment(self):
        """Channel 10 sits on the 12.92 segment; dividing by 12 would give L = 8."""
        assert srgb_to_lab(0xFF0A0A0A)[0] == 7

    def test_signed_pixel_values(self):
        assert srgb_to_lab(-1) == srgb_to_lab(WHITE)
        assert srgb_to_lab(-65536) == srgb_to_lab(RED)


class TestDeltaEMap:
    """Test delta_e_map."""

    def test_identical_rasters(self):
        raster = RasterImage(3, 2, [WHITE, BLACK, RED, GRAY, 0xFF123456, 0x80ABCDEF])

        result = delta_e_map(raster, raster.copy())

        assert result.shape == (2, 3)
        assert result.dtype == np.float32
        np.testing.assert_array_equal(result, 0.0)

    def test_white_black_distance(self):
        result = delta_e_map(RasterImage.blank(2, 2, WHITE), RasterImage.blank(2, 2, BLACK))
        np.testing.assert_allclose(result, 255.0)

    def test_size_mismatch(self):
        with pytest.raises(DimensionMismatch):
            delta_e_map(RasterImage(2, 2), RasterImage(2, 3))

    def test_empty(self):
        assert delta_e_map(RasterImage(0, 4), RasterImage(0, 4)).shape == (4, 0)


class TestHighlightDifferences:
    """Test highlight_differences."""

    def test_marks_large_differences(self):
        simulated = RasterImage(2, 1, [BLACK, WHITE])
        original = RasterImage(2, 1, [WHITE, WHITE])

        result = highlight_differences(simulated, original)

        assert list(result.pixels) == [DEFAULT_MARKER_COLOR, WHITE]

    def test_unmarked_keep_original(self):
        """Unmarked pixels copy the original, alpha included."""
        original = RasterImage(2, 1, [0x40123456, 0x00FFFFFF])

        result = highlight_differences(original.copy(), original)

        assert result == original
        assert result is not original

    def test_deuteranopia_confusion(self):
        """Red changes visibly under deuteranopia, gray does not."""
        original = RasterImage(2, 1, [RED, GRAY])
        simulated = Simulator("deuteranopia").transform(original)

        result = highlight_differences(simulated, original)

        assert list(result.pixels) == [DEFAULT_MARKER_COLOR, GRAY]

    def test_threshold_and_marker(self):
        simulated = RasterImage(1, 1, [BLACK])
        original = RasterImage(1, 1, [WHITE])

        assert highlight_differences(simulated, original, threshold=300.0) == original
        marked = highlight_differences(simulated, original, marker=0xFFFF00FF)
        assert marked.pixels[0] == 0xFFFF00FF

    @pytest.mark.parametrize("threshold", [0, -1.0])
    def test_invalid_threshold(self, threshold):
        raster = RasterImage(1, 1)
        with pytest.raises(ValueError, match="threshold"):
            highlight_differences(raster, raster, threshold=threshold)

    def test_invalid_marker(self):
        raster = RasterImage(1, 1)
        with pytest.raises(ValueError, match="marker"):
            highlight_differences(raster, raster, marker=2**32)

    def test_size_mismatch(self):
        with pytest.raises(DimensionMismatch):
            highlight_differences(RasterImage(4, 1), RasterImage(1, 4))

    def test_type_checked(self):
        with pytest.raises(TypeError):
            highlight_differences("simulated", RasterImage(1, 1))
        with pytest.raises(TypeError):
            highlight_differences(RasterImage(1, 1), None)


class TestWorkerThreads:
    """Difference kernels called off the main thread."""

    def test_matches_main_thread(self):
        rng = np.random.default_rng(5)
        pixels = rng.integers(0, 2**32, size=128, dtype=np.uint64).astype(np.uint32)
        original = RasterImage(16, 8, pixels)
        simulated = Simulator("tritanopia").transform(original)
        expected_map = delta_e_map(simulated, original)
        expected = highlight_differences(simulated, original)

        with ThreadPoolExecutor(max_workers=2) as executor:
            map_future = executor.submit(delta_e_map, simulated, original)
            marked_future = executor.submit(highlight_differences, simulated, original)
            np.testing.assert_array_equal(map_future.result(), expected_map)
            assert marked_future.result() == expected
