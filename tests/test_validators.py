"""
Tests for the validation decorators.
"""

import pytest

from cvdsim.validators import validate_positive, validate_range, validate_type


class Widget:
    @validate_range(0, 10, "level")
    def set_level(self, level):
        return level

    @validate_positive("threshold", param_index=2)
    def compare(self, other, threshold=None):
        return threshold

    @validate_type((int, str), "key")
    def lookup(self, key):
        return key


@pytest.fixture
def widget():
    return Widget()


class TestValidateRange:
    def test_in_range(self, widget):
        assert widget.set_level(0) == 0
        assert widget.set_level(10) == 10
        assert widget.set_level(level=5.5) == 5.5

    def test_out_of_range(self, widget):
        with pytest.raises(ValueError, match=r"level=11 is outside valid range \[0, 10\]"):
            widget.set_level(11)

    def test_non_numeric(self, widget):
        with pytest.raises(TypeError, match="level must be a number"):
            widget.set_level("3")
        with pytest.raises(TypeError):
            widget.set_level(True)

    def test_coefficient_suggestion(self):
        @validate_range(-32768, 32768, "k1", param_index=0)
        def build(k1):
            return k1

        with pytest.raises(ValueError, match="scaled by 2\\^15"):
            build(50000)


class TestValidatePositive:
    def test_none_passes(self, widget):
        assert widget.compare(object()) is None
        assert widget.compare(object(), None) is None

    def test_positive(self, widget):
        assert widget.compare(object(), 0.5) == 0.5
        assert widget.compare(object(), threshold=3) == 3

    @pytest.mark.parametrize("value", [0, -1, -0.1])
    def test_not_positive(self, widget, value):
        with pytest.raises(ValueError, match="must be positive"):
            widget.compare(object(), value)

    def test_non_numeric(self, widget):
        with pytest.raises(TypeError):
            widget.compare(object(), "40")


class TestValidateType:
    def test_accepted(self, widget):
        assert widget.lookup(3) == 3
        assert widget.lookup("a") == "a"

    def test_rejected(self, widget):
        with pytest.raises(TypeError, match=r"key must be one of \(int, str\), got float"):
            widget.lookup(1.5)

    def test_bool_rejected(self, widget):
        with pytest.raises(TypeError):
            widget.lookup(False)
