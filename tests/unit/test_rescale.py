"""
Unit tests for fixed-point rescaling.

Verifies:
- Exact up-scaling
- Round-half-up down-scaling
- Identity for equal precisions
- Rejection of negative inputs
"""

import pytest

from payroll_kernel.domain.rescale import rescale


class TestUpscale:
    """Lower to higher precision is exact multiplication."""

    def test_stable_to_accounting(self):
        assert rescale(1_500_000, 6, 18) == 1_500_000 * 10**12

    def test_zero(self):
        assert rescale(0, 6, 18) == 0

    def test_one_unit(self):
        assert rescale(1, 0, 18) == 10**18


class TestDownscale:
    """Higher to lower precision rounds half up."""

    def test_exact_division(self):
        assert rescale(2 * 10**18, 18, 6) == 2_000_000

    def test_below_half_rounds_down(self):
        assert rescale(1_234_567_499_999_999_999, 18, 6) == 1_234_567

    def test_exactly_half_rounds_up(self):
        assert rescale(1_234_567_500_000_000_000, 18, 6) == 1_234_568

    def test_above_half_rounds_up(self):
        assert rescale(1_234_567_900_000_000_000, 18, 6) == 1_234_568

    def test_sub_unit_half_becomes_one(self):
        assert rescale(5 * 10**11, 18, 6) == 1

    def test_sub_unit_below_half_becomes_zero(self):
        assert rescale(5 * 10**11 - 1, 18, 6) == 0

    def test_pro_rata_salary_to_stable(self):
        """Two days of a 1000/week salary paid in a 6-decimal asset."""
        owed = 285714285714285714285
        assert rescale(owed, 18, 6) == 285714


class TestIdentity:
    def test_equal_decimals(self):
        assert rescale(123456789, 18, 18) == 123456789

    def test_equal_zero_decimals(self):
        assert rescale(42, 0, 0) == 42


class TestInvalidInput:
    def test_negative_amount_raises(self):
        with pytest.raises(ValueError):
            rescale(-1, 18, 6)

    def test_negative_decimals_raises(self):
        with pytest.raises(ValueError):
            rescale(1, -1, 6)
