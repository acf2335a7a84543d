"""
Benchmark simulation performance.

Measures raster filtering on screenshot-like and noisy rasters at common
display resolutions.
"""

import logging
import time

import numpy as np

from cvdsim import RasterImage, Simulator, highlight_differences

# Suppress logging for cleaner output
logging.getLogger("cvdsim").setLevel(logging.WARNING)

RESOLUTIONS = [(1280, 800), (1920, 1080), (2560, 1440), (3840, 2160)]
MODES = ["deuteranopia", "protanopia", "tritanopia", "grayscale"]


def generate_screenshot(width: int, height: int):
    """Generate a screenshot-like raster: flat panels, text-like stripes, one photo."""
    np.random.seed(42)

    grid = np.full((height, width), 0xFFF3F3F3, dtype=np.uint32)
    grid[: height // 20, :] = 0xFF2D2D30  # Title bar
    grid[:, : width // 6] = 0xFF1E1E1E  # Sidebar
    grid[height // 4 :: 12, width // 5 : width // 2] = 0xFF202020  # Text lines

    # Photo region with no repeated pixels
    h0, w0 = height // 2, width // 2
    photo = np.random.randint(0, 2**24, size=(height - h0, width - w0)).astype(np.uint32)
    grid[h0:, w0:] = photo | np.uint32(0xFF000000)

    return RasterImage(width, height, grid)


def generate_noise(width: int, height: int):
    """Generate a raster of random pixels (worst case for the run cache)."""
    np.random.seed(7)
    pixels = np.random.randint(0, 2**32, size=width * height, dtype=np.uint64).astype(np.uint32)
    return RasterImage(width, height, pixels)


def _time(func, iterations: int):
    for _ in range(3):
        func()

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func()
        end = time.perf_counter()
        times.append((end - start) * 1000)  # Convert to ms
    return np.mean(times), np.std(times)


def benchmark_modes(iterations: int = 20):
    """Benchmark every mode on a screenshot-like raster."""
    print("\n" + "=" * 80)
    print(f"SIMULATION MODES (screenshot content, {iterations} iterations)")
    print("=" * 80)

    for width, height in RESOLUTIONS:
        raster = generate_screenshot(width, height)
        print(f"\n{width}x{height}:")
        for mode in MODES:
            simulator = Simulator(mode)
            avg_time, std_time = _time(lambda: simulator(raster), iterations)
            throughput = len(raster) / (avg_time / 1000) / 1e6
            print(
                f"  {mode:<14} {avg_time:8.3f} ms +/- {std_time:.3f} ms  ({throughput:.0f}M px/sec)"
            )


def benchmark_run_cache(width: int = 1920, height: int = 1080, iterations: int = 20):
    """Compare screenshot content with random noise (no repeated pixels)."""
    print("\n" + "=" * 80)
    print(f"RUN CACHE ({width}x{height}, {iterations} iterations)")
    print("=" * 80)

    screenshot = generate_screenshot(width, height)
    noise = generate_noise(width, height)

    for mode in ("deuteranopia", "tritanopia"):
        simulator = Simulator(mode)
        flat, _ = _time(lambda: simulator(screenshot), iterations)
        noisy, _ = _time(lambda: simulator(noise), iterations)
        print(
            f"  {mode:<14} screenshot {flat:8.3f} ms | noise {noisy:8.3f} ms | {noisy / flat:.1f}x"
        )


def benchmark_multi_display(iterations: int = 10):
    """Benchmark transform_many against sequential transforms."""
    print("\n" + "=" * 80)
    print(f"MULTI-DISPLAY ({iterations} iterations)")
    print("=" * 80)

    displays = [generate_screenshot(w, h) for w, h in ((2560, 1440), (1920, 1080), (1920, 1080))]
    simulator = Simulator("tritanopia")

    sequential, _ = _time(lambda: [simulator(d) for d in displays], iterations)
    pooled, _ = _time(lambda: simulator.transform_many(displays), iterations)

    print(f"  Sequential (row-parallel): {sequential:8.3f} ms")
    print(f"  transform_many:            {pooled:8.3f} ms")


def benchmark_highlighting(width: int = 1920, height: int = 1080, iterations: int = 10):
    """Benchmark confusion highlighting."""
    print("\n" + "=" * 80)
    print(f"CONFUSION HIGHLIGHTING ({width}x{height}, {iterations} iterations)")
    print("=" * 80)

    original = generate_screenshot(width, height)
    simulated = Simulator("deuteranopia")(original)

    avg_time, std_time = _time(lambda: highlight_differences(simulated, original), iterations)
    print(f"Time:       {avg_time:.3f} ms +/- {std_time:.3f} ms")
    print(f"Throughput: {len(original) / (avg_time / 1000) / 1e6:.1f}M px/sec")


if __name__ == "__main__":
    benchmark_modes()
    benchmark_run_cache()
    benchmark_multi_display()
    benchmark_highlighting()
