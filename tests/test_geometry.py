import math

import pytest

from posturelab.services.geometry import angle_at_vertex, angle_from_vertical, round_half_up

from conftest import lm


class TestAngleFromVertical:
    def test_straight_down_is_zero(self):
        assert angle_from_vertical(lm("a", 0, 0), lm("b", 0, 10)) == 0

    def test_sign_follows_horizontal_offset(self):
        assert angle_from_vertical(lm("a", 0, 0), lm("b", 10, 10)) == pytest.approx(45)
        assert angle_from_vertical(lm("a", 0, 0), lm("b", -10, 10)) == pytest.approx(-45)


class TestAngleAtVertex:
    def test_straight_line(self):
        assert angle_at_vertex(lm("a", 0, 0), lm("b", 0, 10), lm("c", 0, 20)) == pytest.approx(180)

    def test_right_angle(self):
        assert angle_at_vertex(lm("a", 10, 0), lm("b", 0, 0), lm("c", 0, 10)) == pytest.approx(90)

    def test_reflex_difference_is_folded(self):
        angle = angle_at_vertex(lm("a", -10, -1), lm("b", 0, 0), lm("c", -10, 1))
        assert angle == pytest.approx(2 * math.degrees(math.atan(0.1)))
        assert 0 <= angle <= 180


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,digits,expected", [
        (2.5, 0, 3),
        (-2.5, 0, -2),
        (1.25, 1, 1.3),
        (1.14, 1, 1.1),
        (-0.76, 1, -0.8),
    ])
    def test_rounding(self, value, digits, expected):
        assert round_half_up(value, digits) == pytest.approx(expected)
