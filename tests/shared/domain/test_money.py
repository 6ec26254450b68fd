"""Tests for money helpers."""

import pytest
from shared.money import from_minor_units, prices_differ, round_half_up, to_minor_units


class TestMinorUnits:
    @pytest.mark.parametrize(
        "amount, expected",
        [(50.0, 5000), (49.99, 4999), (0.1 + 0.2, 30), (19.995, 2000), (0, 0)],
    )
    def test_to_minor_units(self, amount, expected):
        assert to_minor_units(amount) == expected

    def test_from_minor_units(self):
        assert from_minor_units(4999) == 49.99


class TestPriceComparison:
    def test_differences_within_a_cent_are_ignored(self):
        assert not prices_differ(100.0, 100.005)

    def test_larger_differences_count(self):
        assert prices_differ(100.0, 100.02)


class TestRoundHalfUp:
    def test_rounds_half_up_not_to_even(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(4.45, 1) == 4.5

    def test_mean_of_ratings(self):
        assert round_half_up((5 + 4 + 4) / 3, 1) == 4.3
