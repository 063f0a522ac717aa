"""Single-step swap computation within one liquidity range."""

from __future__ import annotations

from dataclasses import dataclass

from perpamm.constants import MAX_SWAP_FEE
from perpamm.math.full_math import mul_div, mul_div_rounding_up
from perpamm.math.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)


@dataclass(frozen=True)
class SwapStep:
    """Outcome of swapping within a single range.

    Attributes:
        sqrt_price_next_x96: Price after the step
        amount_in: Input consumed, excluding fee
        amount_out: Output produced
        fee_amount: Fee taken from the input
    """

    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


def get_sqrt_price_target(
    zero_for_one: bool,
    sqrt_price_next_x96: int,
    sqrt_price_limit_x96: int,
) -> int:
    """Nearer of the next tick price and the price limit in swap direction."""
    if zero_for_one:
        return max(sqrt_price_next_x96, sqrt_price_limit_x96)
    return min(sqrt_price_next_x96, sqrt_price_limit_x96)


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> SwapStep:
    """Swap as far toward the target price as the remaining amount allows.

    Args:
        sqrt_price_current_x96: Current price
        sqrt_price_target_x96: Price that cannot be exceeded in this step
        liquidity: Usable liquidity in the range
        amount_remaining: Negative for exact input, positive for exact output
        fee_pips: Swap fee in pips

    Returns:
        SwapStep with the new price and amounts. For exact input,
        amount_in + fee_amount never exceeds |amount_remaining|; for exact
        output, amount_out never exceeds amount_remaining.
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining < 0

    if exact_in:
        amount_remaining_less_fee = mul_div(
            -amount_remaining, MAX_SWAP_FEE - fee_pips, MAX_SWAP_FEE
        )
        if zero_for_one:
            amount_in = get_amount0_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True
            )
        else:
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True
            )

        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
            if fee_pips == MAX_SWAP_FEE:
                fee_amount = amount_in
            else:
                fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)
        else:
            # target not reached: whatever input is left over is the fee
            amount_in = amount_remaining_less_fee
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
            fee_amount = -amount_remaining - amount_in

        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False
            )
        return SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)

    if zero_for_one:
        amount_out = get_amount1_delta(
            sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False
        )
    else:
        amount_out = get_amount0_delta(
            sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False
        )

    if amount_remaining >= amount_out:
        sqrt_price_next_x96 = sqrt_price_target_x96
    else:
        amount_out = amount_remaining
        sqrt_price_next_x96 = get_next_sqrt_price_from_output(
            sqrt_price_current_x96, liquidity, amount_out, zero_for_one
        )

    if zero_for_one:
        amount_in = get_amount0_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True)
    else:
        amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True)
    # MAX_SWAP_FEE with exact output is rejected before stepping
    fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)
    return SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)


__all__ = ["SwapStep", "get_sqrt_price_target", "compute_swap_step"]
