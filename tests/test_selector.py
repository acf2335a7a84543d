"""
Tests for Deficiency and Simulator.
"""

import threading

import numpy as np
import pytest

from cvdsim import (
    Deficiency,
    GrayscaleFilter,
    InvalidMode,
    RasterImage,
    RedGreenFilter,
    Simulator,
    TritanFilter,
)


@pytest.fixture
def screenshot():
    rng = np.random.default_rng(0)
    rgb = rng.integers(0, 256, size=(20, 30, 3), dtype=np.uint8)
    rgb[:, :10] = (255, 255, 255)
    return RasterImage.from_array(rgb)


@pytest.fixture
def displays():
    """Screenshots of three displays with different sizes."""
    rng = np.random.default_rng(1)
    return [
        RasterImage.from_array(rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8))
        for w, h in ((32, 18), (16, 9), (5, 40))
    ]


class TestDeficiency:
    """Test the mode enum."""

    @pytest.mark.parametrize(
        "mode,label",
        [
            (Deficiency.NORMAL, "Normal Vision"),
            (Deficiency.DEUTERANOPIA, "Deuteranopia"),
            (Deficiency.PROTANOPIA, "Protanopia"),
            (Deficiency.TRITANOPIA, "Tritanopia"),
            (Deficiency.GRAYSCALE, "Grayscale"),
        ],
    )
    def test_labels(self, mode, label):
        assert mode.label == label

    def test_parse_names(self):
        assert Deficiency.parse("tritanopia") is Deficiency.TRITANOPIA
        assert Deficiency.parse("  GrayScale ") is Deficiency.GRAYSCALE
        assert Deficiency.parse(Deficiency.NORMAL) is Deficiency.NORMAL

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("deutan", Deficiency.DEUTERANOPIA),
            ("protan", Deficiency.PROTANOPIA),
            ("tritan", Deficiency.TRITANOPIA),
        ],
    )
    def test_parse_aliases(self, alias, expected):
        assert Deficiency.parse(alias) is expected

    @pytest.mark.parametrize("bad", ["sepia", "", None, 3])
    def test_parse_invalid(self, bad):
        with pytest.raises(InvalidMode, match="Valid options are"):
            Deficiency.parse(bad)

    def test_is_normal(self):
        assert Deficiency.NORMAL.is_normal
        assert not Deficiency.GRAYSCALE.is_normal

    def test_string_value(self):
        assert Deficiency.PROTANOPIA == "protanopia"


class TestSimulatorModes:
    """Test mode selection."""

    def test_default_is_normal(self):
        simulator = Simulator()

        assert simulator.mode is Deficiency.NORMAL
        assert simulator.active_filter is None
        assert simulator.is_identity()

    @pytest.mark.parametrize(
        "mode,filter_type",
        [
            ("deuteranopia", RedGreenFilter),
            ("protanopia", RedGreenFilter),
            ("tritanopia", TritanFilter),
            ("grayscale", GrayscaleFilter),
        ],
    )
    def test_select_mode(self, mode, filter_type):
        simulator = Simulator().select_mode(mode)

        assert simulator.mode.value == mode
        assert isinstance(simulator.active_filter, filter_type)
        assert not simulator.is_identity()

    def test_any_transition_allowed(self):
        simulator = Simulator()
        for mode in ["tritanopia", "deuteranopia", "normal", "grayscale", "protanopia", "normal"]:
            simulator.set_mode(mode)
            assert simulator.mode.value == mode

    def test_invalid_mode_keeps_current(self):
        simulator = Simulator("protanopia")

        with pytest.raises(InvalidMode):
            simulator.select_mode("achromatopsia")

        assert simulator.mode is Deficiency.PROTANOPIA
        assert isinstance(simulator.active_filter, RedGreenFilter)

    def test_invalid_initial_mode(self):
        with pytest.raises(InvalidMode):
            Simulator(mode="xyz")

    def test_exact_grayscale_option(self):
        simulator = Simulator("grayscale", exact_grayscale=True)
        assert simulator.active_filter.exact_rescale is True

    def test_parallel_option(self):
        assert Simulator("tritanopia").active_filter.parallel is True
        simulator = Simulator("tritanopia", parallel=False)
        assert simulator.active_filter.parallel is False
        assert simulator.select_mode("protanopia").active_filter.parallel is False

    def test_repr(self):
        assert repr(Simulator("tritan")) == "Simulator(mode=tritanopia)"


class TestSimulatorTransform:
    """Test transform, apply and __call__."""

    def test_normal_returns_input(self, screenshot):
        """Normal vision passes the raster through untouched."""
        result = Simulator().transform(screenshot)

        assert result is screenshot

    def test_normal_copy(self, screenshot):
        result = Simulator().transform(screenshot, copy=True)

        assert result is not screenshot
        assert result == screenshot

    @pytest.mark.parametrize("mode", ["deuteranopia", "protanopia", "tritanopia", "grayscale"])
    def test_matches_filter(self, screenshot, mode):
        simulator = Simulator(mode)
        assert simulator.transform(screenshot) == simulator.active_filter.filter(screenshot)

    @pytest.mark.parametrize("mode", ["deuteranopia", "protanopia", "tritanopia", "grayscale"])
    def test_deterministic_and_opaque(self, screenshot, mode):
        simulator = Simulator(mode)

        first = simulator(screenshot)
        second = simulator.apply(screenshot)

        assert first == second
        assert first.size == screenshot.size
        assert np.all(first.pixels >> 24 == 0xFF)

    def test_type_checked(self):
        with pytest.raises(TypeError, match="raster must be RasterImage"):
            Simulator("grayscale").transform([0xFFFFFFFF])


class TestTransformMany:
    """Test multi-display filtering."""

    @pytest.mark.parametrize("mode", ["deuteranopia", "tritanopia", "grayscale"])
    def test_matches_single_transform(self, displays, mode):
        simulator = Simulator(mode)

        results = simulator.transform_many(displays, max_workers=3)

        assert len(results) == len(displays)
        for raster, result in zip(displays, results):
            assert result.size == raster.size
            assert result == simulator.transform(raster)

    def test_accepts_iterables(self, displays):
        results = Simulator("protanopia").transform_many(iter(displays))
        assert [r.size for r in results] == [d.size for d in displays]

    def test_normal_returns_inputs(self, displays):
        results = Simulator().transform_many(displays)
        assert all(result is raster for result, raster in zip(results, displays))

    def test_empty(self):
        assert Simulator("grayscale").transform_many([]) == []

    def test_non_raster_rejected(self, displays):
        with pytest.raises(TypeError, match="RasterImage"):
            Simulator("grayscale").transform_many(displays + ["screen"])

    @pytest.mark.parametrize("workers", [0, -2])
    def test_invalid_workers(self, displays, workers):
        with pytest.raises(ValueError, match="max_workers"):
            Simulator("grayscale").transform_many(displays, max_workers=workers)


class TestThreadedSimulators:
    """One simulator per thread, all transforming at the same time."""

    def test_two_threads_match_main_thread(self, screenshot):
        modes = ("tritanopia", "deuteranopia")
        expected = {mode: Simulator(mode).transform(screenshot) for mode in modes}
        results = {mode: [] for mode in modes}
        barrier = threading.Barrier(len(modes))

        def run(mode):
            simulator = Simulator(mode)
            barrier.wait()
            for _ in range(20):
                results[mode].append(simulator.transform(screenshot))

        threads = [threading.Thread(target=run, args=(mode,)) for mode in modes]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for mode in modes:
            assert len(results[mode]) == 20
            assert all(result == expected[mode] for result in results[mode])
