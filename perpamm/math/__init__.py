"""Mathematical utilities for the pool ledger.

This package provides the pure integer primitives the ledger calls:
- tick <-> Q64.96 square-root price conversion
- next-price and token amount deltas for a liquidity range
- single-step swap computation
- liquidity needed to back token amounts
"""

from perpamm.math.full_math import div_rounding_up, mul_div, mul_div_rounding_up
from perpamm.math.liquidity_amounts import (
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
)
from perpamm.math.sqrt_price_math import (
    get_amount0_delta,
    get_amount0_delta_signed,
    get_amount1_delta,
    get_amount1_delta_signed,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from perpamm.math.swap_math import SwapStep, compute_swap_step, get_sqrt_price_target
from perpamm.math.tick_math import get_sqrt_price_at_tick, get_tick_at_sqrt_price

__all__ = [
    # Full math
    "mul_div",
    "mul_div_rounding_up",
    "div_rounding_up",
    # Tick math
    "get_sqrt_price_at_tick",
    "get_tick_at_sqrt_price",
    # Sqrt price math
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    # Swap math
    "SwapStep",
    "compute_swap_step",
    "get_sqrt_price_target",
    # Liquidity amounts
    "get_liquidity_for_amount0",
    "get_liquidity_for_amount1",
]
