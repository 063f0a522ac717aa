"""Factory functions for creating pools and running operations in tests.

Usage:
    from tests.helpers import make_pool, add_liquidity, swap_exact_input

    pool = make_pool()
    add_liquidity(pool, -120, 120, LIQUIDITY)
    result = swap_exact_input(pool, 10**17, zero_for_one=False)
"""

from perpamm.constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, ZERO_SALT
from perpamm.pool import (
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    PoolState,
    SwapParams,
    SwapResult,
)
from perpamm.pools import PoolKey
from tests.helpers.constants import LP_OWNER, SQRT_PRICE_1_1, TICK_SPACING, USDC, WETH


def make_pool(sqrt_price_x96: int = SQRT_PRICE_1_1, lp_fee: int = 0) -> PoolState:
    """Create an initialized pool with no liquidity."""
    pool = PoolState()
    pool.initialize(sqrt_price_x96, lp_fee)
    return pool


def add_liquidity(
    pool: PoolState,
    tick_lower: int,
    tick_upper: int,
    liquidity_delta: int,
    owner: str = LP_OWNER,
    tick_spacing: int = TICK_SPACING,
    salt: bytes = ZERO_SALT,
) -> ModifyLiquidityResult:
    """Modify liquidity with a signed delta (negative removes)."""
    return pool.modify_liquidity(
        ModifyLiquidityParams(
            owner=owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity_delta=liquidity_delta,
            tick_spacing=tick_spacing,
            salt=salt,
        )
    )


def default_limit(zero_for_one: bool) -> int:
    """Loosest valid price limit for a direction."""
    return MIN_SQRT_PRICE + 1 if zero_for_one else MAX_SQRT_PRICE - 1


def swap_exact_input(
    pool: PoolState,
    amount_in: int,
    zero_for_one: bool,
    sqrt_price_limit_x96: int | None = None,
    tick_spacing: int = TICK_SPACING,
    lp_fee_override: int | None = None,
) -> SwapResult:
    """Swap exactly amount_in of the input token."""
    if sqrt_price_limit_x96 is None:
        sqrt_price_limit_x96 = default_limit(zero_for_one)
    return pool.swap(
        SwapParams(
            amount_specified=-amount_in,
            zero_for_one=zero_for_one,
            sqrt_price_limit_x96=sqrt_price_limit_x96,
            tick_spacing=tick_spacing,
            lp_fee_override=lp_fee_override,
        )
    )


def swap_exact_output(
    pool: PoolState,
    amount_out: int,
    zero_for_one: bool,
    sqrt_price_limit_x96: int | None = None,
    tick_spacing: int = TICK_SPACING,
    lp_fee_override: int | None = None,
) -> SwapResult:
    """Swap for exactly amount_out of the output token."""
    if sqrt_price_limit_x96 is None:
        sqrt_price_limit_x96 = default_limit(zero_for_one)
    return pool.swap(
        SwapParams(
            amount_specified=amount_out,
            zero_for_one=zero_for_one,
            sqrt_price_limit_x96=sqrt_price_limit_x96,
            tick_spacing=tick_spacing,
            lp_fee_override=lp_fee_override,
        )
    )


def make_pool_key(
    currency0: str = USDC,
    currency1: str = WETH,
    fee: int = 3000,
    tick_spacing: int = TICK_SPACING,
) -> PoolKey:
    """Create a PoolKey with sensible defaults."""
    return PoolKey(currency0=currency0, currency1=currency1, fee=fee, tick_spacing=tick_spacing)


def liquidity_net_sum(pool: PoolState) -> int:
    """Sum of liquidity_net over every stored tick."""
    return sum(info.liquidity_net for _, info in pool.ticks.items())
