"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Addresses, currencies and common pool parameters
- factories: Pool creation and operation shortcuts
"""

from tests.helpers.constants import (
    LIQUIDITY,
    LP_OWNER,
    OTHER_OWNER,
    SQRT_PRICE_1_1,
    TICK_SPACING,
    USDC,
    WETH,
)
from tests.helpers.factories import (
    add_liquidity,
    default_limit,
    liquidity_net_sum,
    make_pool,
    make_pool_key,
    swap_exact_input,
    swap_exact_output,
)

__all__ = [
    # Constants
    "USDC",
    "WETH",
    "LP_OWNER",
    "OTHER_OWNER",
    "SQRT_PRICE_1_1",
    "TICK_SPACING",
    "LIQUIDITY",
    # Factories
    "make_pool",
    "add_liquidity",
    "default_limit",
    "swap_exact_input",
    "swap_exact_output",
    "make_pool_key",
    "liquidity_net_sum",
]
