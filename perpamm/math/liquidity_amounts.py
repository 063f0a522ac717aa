"""Liquidity needed to back token amounts over a price range."""

from __future__ import annotations

from perpamm.constants import Q96
from perpamm.math.full_math import mul_div
from perpamm.safe_int import to_uint128


def get_liquidity_for_amount0(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount0: int) -> int:
    """Liquidity for `amount0` of token0 spread over [a, b].

    L = amount0 * (sqrtA * sqrtB) / (sqrtB - sqrtA)
    """
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96
    intermediate = mul_div(sqrt_price_a_x96, sqrt_price_b_x96, Q96)
    return to_uint128(mul_div(amount0, intermediate, sqrt_price_b_x96 - sqrt_price_a_x96))


def get_liquidity_for_amount1(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount1: int) -> int:
    """Liquidity for `amount1` of token1 spread over [a, b].

    L = amount1 / (sqrtB - sqrtA)
    """
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96
    return to_uint128(mul_div(amount1, Q96, sqrt_price_b_x96 - sqrt_price_a_x96))


__all__ = [
    "get_liquidity_for_amount0",
    "get_liquidity_for_amount1",
]
