"""Tests for fixed-width integer helpers."""

import pytest

from perpamm.constants import MAX_INT128, MAX_UINT128, MAX_UINT160, MAX_UINT256, MIN_INT128
from perpamm.safe_int import (
    LiquidityOverflow,
    LiquidityUnderflow,
    SafeCastOverflow,
    SafeIntError,
    Uint256Overflow,
    Underflow,
    add_delta,
    to_int128,
    to_uint128,
    to_uint160,
    to_uint256,
    wrapping_add,
    wrapping_sub,
)


class TestAddDelta:
    """Tests for applying signed liquidity deltas."""

    def test_positive_delta(self):
        """Adding a positive delta increases liquidity."""
        assert add_delta(5, 3) == 8

    def test_negative_delta(self):
        """Adding a negative delta decreases liquidity."""
        assert add_delta(5, -3) == 2

    def test_delta_to_zero(self):
        """Removing everything leaves zero."""
        assert add_delta(5, -5) == 0

    def test_underflow_raises(self):
        """Removing more than held raises LiquidityUnderflow."""
        with pytest.raises(LiquidityUnderflow):
            add_delta(5, -6)

    def test_underflow_is_underflow(self):
        """LiquidityUnderflow is catchable as a generic Underflow."""
        with pytest.raises(Underflow):
            add_delta(0, -1)

    def test_overflow_raises(self):
        """Exceeding uint128 raises LiquidityOverflow."""
        with pytest.raises(LiquidityOverflow):
            add_delta(MAX_UINT128, 1)

    def test_max_is_allowed(self):
        """Reaching exactly uint128 max is allowed."""
        assert add_delta(MAX_UINT128 - 1, 1) == MAX_UINT128


class TestWrappingArithmetic:
    """Tests for modulo 2**256 arithmetic."""

    def test_sub_without_wrap(self):
        """Ordinary subtraction is unchanged."""
        assert wrapping_sub(10, 3) == 7

    def test_sub_wraps_below_zero(self):
        """0 - 1 wraps to uint256 max."""
        assert wrapping_sub(0, 1) == MAX_UINT256

    def test_add_wraps_past_max(self):
        """max + 1 wraps to zero."""
        assert wrapping_add(MAX_UINT256, 1) == 0

    def test_add_then_sub_recovers_delta(self):
        """A wrapped accumulator still yields the right difference."""
        before = MAX_UINT256 - 5
        after = wrapping_add(before, 10)
        assert after == 4
        assert wrapping_sub(after, before) == 10


class TestCasts:
    """Tests for checked casts."""

    def test_uint128_bounds(self):
        """to_uint128 accepts [0, 2**128 - 1]."""
        assert to_uint128(0) == 0
        assert to_uint128(MAX_UINT128) == MAX_UINT128
        with pytest.raises(SafeCastOverflow):
            to_uint128(MAX_UINT128 + 1)
        with pytest.raises(SafeCastOverflow):
            to_uint128(-1)

    def test_uint160_bounds(self):
        """to_uint160 rejects values above 2**160 - 1."""
        assert to_uint160(MAX_UINT160) == MAX_UINT160
        with pytest.raises(SafeCastOverflow):
            to_uint160(MAX_UINT160 + 1)

    def test_int128_bounds(self):
        """to_int128 accepts the signed 128-bit range."""
        assert to_int128(MIN_INT128) == MIN_INT128
        assert to_int128(MAX_INT128) == MAX_INT128
        with pytest.raises(SafeCastOverflow):
            to_int128(MAX_INT128 + 1)
        with pytest.raises(SafeCastOverflow):
            to_int128(MIN_INT128 - 1)

    def test_uint256_bounds(self):
        """to_uint256 raises Uint256Overflow outside [0, 2**256 - 1]."""
        assert to_uint256(MAX_UINT256) == MAX_UINT256
        with pytest.raises(Uint256Overflow):
            to_uint256(MAX_UINT256 + 1)
        with pytest.raises(Uint256Overflow):
            to_uint256(-1)


class TestExceptionHierarchy:
    """Tests for the arithmetic error hierarchy."""

    def test_all_errors_are_safe_int_errors(self):
        """Every helper error derives from SafeIntError."""
        for error in (LiquidityUnderflow, LiquidityOverflow, SafeCastOverflow, Uint256Overflow):
            assert issubclass(error, SafeIntError)

    def test_safe_int_error_is_arithmetic_error(self):
        """SafeIntError can be caught as ArithmeticError."""
        assert issubclass(SafeIntError, ArithmeticError)
