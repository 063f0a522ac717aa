"""Fixed-width integer helpers for ledger arithmetic.

Python integers never overflow, but the ledger models values that live in
fixed-width slots (uint128 liquidity, uint160 prices, uint256 growth
accumulators). This module makes the width explicit at the seams:

- Checked casts raise instead of silently truncating
- Liquidity deltas are applied with underflow/overflow checks
- Growth accumulators use wrapping (modular) arithmetic on purpose

Usage pattern:
    from perpamm.safe_int import add_delta, wrapping_sub

    liquidity = add_delta(liquidity, liquidity_delta)  # raises on < 0
    inside = wrapping_sub(global_growth, outside)       # mod 2**256
"""

from __future__ import annotations

from perpamm.constants import (
    MAX_INT128,
    MAX_UINT128,
    MAX_UINT160,
    MAX_UINT256,
    MIN_INT128,
)

UINT256_MODULUS = MAX_UINT256 + 1


class SafeIntError(ArithmeticError):
    """Base class for fixed-width arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division or modulo by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value exceeds uint256 maximum."""

    pass


class SafeCastOverflow(SafeIntError):
    """Value does not fit the target integer width."""

    pass


class LiquidityUnderflow(Underflow):
    """Applying a liquidity delta would make liquidity negative."""

    pass


class LiquidityOverflow(SafeCastOverflow):
    """Applying a liquidity delta would exceed uint128."""

    pass


def add_delta(x: int, y: int) -> int:
    """Add a signed liquidity delta to an unsigned liquidity value.

    Raises:
        LiquidityUnderflow: If the result would be negative
        LiquidityOverflow: If the result would exceed uint128
    """
    z = x + y
    if z < 0:
        raise LiquidityUnderflow(f"Liquidity underflow: {x} + ({y}) = {z}")
    if z > MAX_UINT128:
        raise LiquidityOverflow(f"Liquidity overflow: {x} + {y} exceeds uint128")
    return z


def wrapping_add(a: int, b: int) -> int:
    """Add modulo 2**256."""
    return (a + b) % UINT256_MODULUS


def wrapping_sub(a: int, b: int) -> int:
    """Subtract modulo 2**256.

    Growth accumulators are monotonic modulo 2**256, so a "negative"
    difference is an expected wrap, not an error.
    """
    return (a - b) % UINT256_MODULUS


def to_uint128(value: int) -> int:
    """Checked cast to uint128."""
    if value < 0 or value > MAX_UINT128:
        raise SafeCastOverflow(f"Value does not fit uint128: {value}")
    return value


def to_uint160(value: int) -> int:
    """Checked cast to uint160."""
    if value < 0 or value > MAX_UINT160:
        raise SafeCastOverflow(f"Value does not fit uint160: {value}")
    return value


def to_int128(value: int) -> int:
    """Checked cast to int128."""
    if value < MIN_INT128 or value > MAX_INT128:
        raise SafeCastOverflow(f"Value does not fit int128: {value}")
    return value


def to_uint256(value: int) -> int:
    """Checked cast to uint256.

    Raises:
        Uint256Overflow: If value is negative or exceeds 2^256-1
    """
    if value < 0:
        raise Uint256Overflow(f"Negative value cannot be uint256: {value}")
    if value > MAX_UINT256:
        raise Uint256Overflow(f"Value exceeds uint256 max: {value}")
    return value


__all__ = [
    "UINT256_MODULUS",
    "SafeIntError",
    "DivisionByZero",
    "Underflow",
    "Uint256Overflow",
    "SafeCastOverflow",
    "LiquidityUnderflow",
    "LiquidityOverflow",
    "add_delta",
    "wrapping_add",
    "wrapping_sub",
    "to_uint128",
    "to_uint160",
    "to_int128",
    "to_uint256",
]
