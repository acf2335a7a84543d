"""
Example: color vision deficiency simulation usage.

Demonstrates how to use cvdsim for:
- Simulating a single screenshot in every mode
- Using individual filters and single pixels
- Filtering the screenshots of several displays at once
- Highlighting colors that become hard to tell apart
"""

import logging

import numpy as np

from cvdsim import (
    Deficiency,
    GrayscaleFilter,
    RasterImage,
    RedGreenFilter,
    Simulator,
    highlight_differences,
    unpack_argb,
)

# Configure logging to see filtering statistics
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def generate_sample_screenshot(width: int = 320, height: int = 200):
    """Generate a small screenshot with a red/green chart on a white background."""
    rgb = np.full((height, width, 3), 255, dtype=np.uint8)
    rgb[: height // 10] = (45, 45, 48)  # Title bar

    # Chart bars: red and green that deuteranopes confuse, blue and yellow for tritanopes
    bar_colors = [(220, 40, 40), (40, 180, 60), (40, 80, 220), (230, 210, 40)]
    bar_width = width // (2 * len(bar_colors))
    for i, color in enumerate(bar_colors):
        x0 = bar_width // 2 + 2 * i * bar_width
        rgb[height // 3 :, x0 : x0 + bar_width] = color

    return RasterImage.from_array(rgb)


def example_1_simulate_modes():
    """Simulate every deficiency mode on one screenshot."""
    print("\n" + "=" * 80)
    print("EXAMPLE 1: Simulate every mode")
    print("=" * 80)

    screenshot = generate_sample_screenshot()
    simulator = Simulator()

    for mode in Deficiency:
        result = simulator.select_mode(mode).transform(screenshot)
        _, r, g, b = unpack_argb(result.as_2d()[-1, screenshot.width // 16])
        print(f"{mode.label:<14} red bar -> ({r:3d}, {g:3d}, {b:3d})")


def example_2_filters_and_pixels():
    """Use filters directly and transform single pixels."""
    print("\n" + "=" * 80)
    print("EXAMPLE 2: Filters and single pixels")
    print("=" * 80)

    deutan = RedGreenFilter.deuteranopia()
    for name, pixel in (("white", 0xFFFFFFFF), ("black", 0xFF000000), ("red", 0xFFFF0000)):
        print(f"Deuteranopia {name:<5}: {pixel:#010x} -> {deutan.transform_pixel(pixel):#010x}")

    # Legacy grayscale divides by 256, so white comes out as (185, 185, 185)
    legacy = GrayscaleFilter()
    exact = GrayscaleFilter(exact_rescale=True)
    print(f"Grayscale white (legacy): {legacy.transform_pixel(0xFFFFFFFF):#010x}")
    print(f"Grayscale white (exact):  {exact.transform_pixel(0xFFFFFFFF):#010x}")

    # Reuse a destination raster between frames
    screenshot = generate_sample_screenshot()
    frame = RasterImage(screenshot.width, screenshot.height)
    for _ in range(3):
        deutan(screenshot, frame)
    print(f"Reused destination raster: {frame}")


def example_3_multiple_displays():
    """Filter one screenshot per display on a thread pool."""
    print("\n" + "=" * 80)
    print("EXAMPLE 3: Multiple displays")
    print("=" * 80)

    displays = [generate_sample_screenshot(w, h) for w, h in ((640, 400), (320, 200), (200, 320))]
    simulator = Simulator("protanopia")

    results = simulator.transform_many(displays)
    for display, result in zip(displays, results):
        print(f"{display} -> {result}")


def example_4_highlight_confusions():
    """Mark pixels whose color changes strongly under deuteranopia."""
    print("\n" + "=" * 80)
    print("EXAMPLE 4: Highlight confusions")
    print("=" * 80)

    screenshot = generate_sample_screenshot()
    simulated = Simulator("deuteranopia")(screenshot)

    marked = highlight_differences(simulated, screenshot)
    changed = np.count_nonzero(marked.pixels != screenshot.pixels)
    print(f"Marked {changed:,} of {len(screenshot):,} pixels ({100 * changed / len(screenshot):.1f}%)")


if __name__ == "__main__":
    example_1_simulate_modes()
    example_2_filters_and_pixels()
    example_3_multiple_displays()
    example_4_highlight_confusions()
