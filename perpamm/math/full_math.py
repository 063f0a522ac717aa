"""512-bit-safe multiply/divide helpers.

Python integers are unbounded, so the intermediate product never
overflows. The result, like its 256-bit counterpart, must still fit
uint256.
"""

from __future__ import annotations

from perpamm.safe_int import DivisionByZero, to_uint256


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator).

    Raises:
        DivisionByZero: If denominator is zero
        Uint256Overflow: If the result exceeds uint256
    """
    if denominator == 0:
        raise DivisionByZero(f"Division by zero: {a} * {b} // 0")
    return to_uint256(a * b // denominator)


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)."""
    if denominator == 0:
        raise DivisionByZero(f"Division by zero: {a} * {b} // 0")
    quotient, remainder = divmod(a * b, denominator)
    if remainder:
        quotient += 1
    return to_uint256(quotient)


def div_rounding_up(x: int, y: int) -> int:
    """ceil(x / y) for non-negative x."""
    if y == 0:
        raise DivisionByZero(f"Ceiling division by zero: {x}")
    return -(-x // y)


__all__ = ["mul_div", "mul_div_rounding_up", "div_rounding_up"]
