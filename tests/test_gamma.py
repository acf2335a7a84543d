"""
Tests for the gamma lookup tables.
"""

import math

import numpy as np
import pytest

from cvdsim import GammaTables, delinearize, gamma_tables, linearize
from cvdsim.gamma import build_forward_table, build_inverse_table


def _forward_reference(i):
    return int((0.992052 * math.pow(i / 255.0, 2.2) + 0.003974) * 32767)


def _inverse_reference(i):
    return int(255 * math.pow(i / 255.0, 1.0 / 2.2))


class TestTableConstruction:
    """Test the closed-form table builders."""

    def test_forward_matches_formula(self):
        """Every forward entry equals the truncated closed form."""
        table = build_forward_table()

        assert table.dtype == np.int32
        assert table.shape == (256,)
        expected = [_forward_reference(i) for i in range(256)]
        np.testing.assert_array_equal(table, expected)

    def test_inverse_matches_formula(self):
        """Every inverse entry equals the truncated closed form."""
        table = build_inverse_table()

        assert table.dtype == np.uint8
        assert table.shape == (256,)
        expected = [_inverse_reference(i) for i in range(256)]
        np.testing.assert_array_equal(table, expected)

    def test_pinned_entries(self):
        """Regression values of the legacy tables."""
        forward = build_forward_table()
        inverse = build_inverse_table()

        assert forward[0] == 130
        assert forward[255] == 32636
        assert inverse[0] == 0
        assert inverse[1] == 20
        assert inverse[127] == 185
        assert inverse[255] == 255

    def test_tables_are_monotonic(self):
        """Both tables are non-decreasing."""
        assert np.all(np.diff(build_forward_table()) >= 0)
        assert np.all(np.diff(build_inverse_table().astype(np.int32)) >= 0)

    def test_forward_stays_in_linear_range(self):
        table = build_forward_table()
        assert table.min() >= 0
        assert table.max() <= 32767


class TestGammaTables:
    """Test the shared GammaTables instance."""

    def test_shared_instance(self):
        """gamma_tables() is built once per process."""
        assert gamma_tables() is gamma_tables()

    def test_tables_are_read_only(self):
        """Shared tables cannot be modified."""
        tables = gamma_tables()

        with pytest.raises(ValueError):
            tables.forward[0] = 0
        with pytest.raises(ValueError):
            tables.inverse[0] = 1

    def test_wrong_shape_rejected(self):
        with pytest.raises(ValueError, match="shape"):
            GammaTables(forward=np.zeros(10, dtype=np.int32), inverse=build_inverse_table())


class TestLookups:
    """Test linearize and delinearize."""

    def test_scalar_lookup(self):
        """Scalar input gives a Python int."""
        assert linearize(0) == 130
        assert linearize(255) == 32636
        assert delinearize(127) == 185
        assert isinstance(linearize(np.uint8(10)), int)

    def test_array_lookup(self):
        """Array input gives an array of the same shape."""
        channels = np.array([[0, 255], [1, 127]], dtype=np.uint8)

        result = linearize(channels)

        assert result.shape == (2, 2)
        np.testing.assert_array_equal(result, gamma_tables().forward[channels])

    def test_out_of_range_rejected(self):
        """Indices outside 0..255 raise ValueError."""
        with pytest.raises(ValueError, match="0, 255"):
            linearize(256)
        with pytest.raises(ValueError):
            delinearize(-1)
        with pytest.raises(ValueError):
            delinearize(np.array([0, 300]))

    def test_non_integer_rejected(self):
        """Float and bool indices raise TypeError."""
        with pytest.raises(TypeError):
            linearize(1.5)
        with pytest.raises(TypeError):
            delinearize(np.array([0.0, 1.0]))
        with pytest.raises(TypeError):
            linearize(True)
