"""Square-root price and token amount math for a single liquidity range.

All functions take Q64.96 square-root prices and uint128 liquidity. Rounding
always favours the pool: amounts owed to the pool round up, amounts paid out
round down, and next prices move at least as far as needed.
"""

from __future__ import annotations

from perpamm.constants import MAX_UINT160, MAX_UINT256, Q96, RESOLUTION_96
from perpamm.errors import (
    InvalidPrice,
    InvalidPriceOrLiquidity,
    NotEnoughLiquidity,
    PriceOverflow,
)
from perpamm.math.full_math import div_rounding_up, mul_div, mul_div_rounding_up
from perpamm.safe_int import to_uint160


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding or removing `amount` of token0.

    Rounds up: exact output must move the price at least far enough and
    exact input must not move it so far that too much is paid out.

    The precise formula is L * sqrtP / (L +- amount * sqrtP). When the
    product would overflow 256 bits the fallback L / (L / sqrtP +- amount)
    is used, matching the on-chain result.
    """
    if amount == 0:
        return sqrt_price_x96
    numerator1 = liquidity << RESOLUTION_96
    product = amount * sqrt_price_x96

    if add:
        if product <= MAX_UINT256:
            denominator = numerator1 + product
            if denominator <= MAX_UINT256:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
        return div_rounding_up(numerator1, numerator1 // sqrt_price_x96 + amount)

    # removing token0: the denominator must stay positive
    if product > MAX_UINT256 or numerator1 <= product:
        raise PriceOverflow(f"Cannot remove {amount} token0 with liquidity {liquidity}")
    denominator = numerator1 - product
    return to_uint160(mul_div_rounding_up(numerator1, sqrt_price_x96, denominator))


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding or removing `amount` of token1.

    Computes sqrtP +- amount / L, rounding the result down.
    """
    if add:
        if amount <= MAX_UINT160:
            quotient = (amount << RESOLUTION_96) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        return to_uint160(sqrt_price_x96 + quotient)

    if amount <= MAX_UINT160:
        quotient = div_rounding_up(amount << RESOLUTION_96, liquidity)
    else:
        quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise NotEnoughLiquidity(f"Cannot remove {amount} token1 with liquidity {liquidity}")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price given an input amount of token0 or token1.

    Raises:
        InvalidPriceOrLiquidity: If price or liquidity is zero
    """
    if sqrt_price_x96 == 0 or liquidity == 0:
        raise InvalidPriceOrLiquidity("Price and liquidity must be non-zero")
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, add=True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(
        sqrt_price_x96, liquidity, amount_in, add=True
    )


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price given an output amount of token0 or token1.

    Raises:
        InvalidPriceOrLiquidity: If price or liquidity is zero
    """
    if sqrt_price_x96 == 0 or liquidity == 0:
        raise InvalidPriceOrLiquidity("Price and liquidity must be non-zero")
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, add=False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, add=False
    )


def get_amount0_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Token0 amount between two prices: L * (sqrtB - sqrtA) / (sqrtA * sqrtB).

    Raises:
        InvalidPrice: If the lower price is zero
    """
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96
    if sqrt_price_a_x96 == 0:
        raise InvalidPrice("sqrt price must be non-zero")

    numerator1 = liquidity << RESOLUTION_96
    numerator2 = sqrt_price_b_x96 - sqrt_price_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_price_b_x96),
            sqrt_price_a_x96,
        )
    return mul_div(numerator1, numerator2, sqrt_price_b_x96) // sqrt_price_a_x96


def get_amount1_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Token1 amount between two prices: L * (sqrtB - sqrtA)."""
    diff = abs(sqrt_price_b_x96 - sqrt_price_a_x96)
    if round_up:
        return mul_div_rounding_up(liquidity, diff, Q96)
    return mul_div(liquidity, diff, Q96)


def get_amount0_delta_signed(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
) -> int:
    """Signed token0 delta for a signed liquidity change.

    Adding liquidity rounds up (owed to the pool), removing rounds down.
    """
    if liquidity < 0:
        return -get_amount0_delta(sqrt_price_a_x96, sqrt_price_b_x96, -liquidity, False)
    return get_amount0_delta(sqrt_price_a_x96, sqrt_price_b_x96, liquidity, True)


def get_amount1_delta_signed(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
) -> int:
    """Signed token1 delta for a signed liquidity change."""
    if liquidity < 0:
        return -get_amount1_delta(sqrt_price_a_x96, sqrt_price_b_x96, -liquidity, False)
    return get_amount1_delta(sqrt_price_a_x96, sqrt_price_b_x96, liquidity, True)


__all__ = [
    "get_next_sqrt_price_from_amount0_rounding_up",
    "get_next_sqrt_price_from_amount1_rounding_down",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
]
