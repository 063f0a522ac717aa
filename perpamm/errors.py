"""Pool ledger error classes.

Every failure aborts the whole operation; the pool state is restored to its
pre-call checkpoint before the error propagates. Errors are grouped by kind
so callers can decide retry policy at the right granularity.
"""

from perpamm.safe_int import SafeIntError


class PoolError(Exception):
    """Base error for pool ledger operations."""

    pass


# =============================================================================
# Malformed input
# =============================================================================


class InvalidInput(PoolError):
    """Arguments are malformed or out of their valid domain."""

    pass


class TicksMisordered(InvalidInput):
    """tick_lower must be strictly less than tick_upper."""

    pass


class TickLowerOutOfBounds(InvalidInput):
    """tick_lower is below MIN_TICK."""

    pass


class TickUpperOutOfBounds(InvalidInput):
    """tick_upper is above MAX_TICK."""

    pass


class TickMisaligned(InvalidInput):
    """Tick is not a multiple of the tick spacing."""

    pass


class InvalidTick(InvalidInput):
    """Tick is outside [MIN_TICK, MAX_TICK]."""

    pass


class InvalidSqrtPrice(InvalidInput):
    """sqrt price is outside [MIN_SQRT_PRICE, MAX_SQRT_PRICE)."""

    pass


class InvalidLiquidityDelta(InvalidInput):
    """Liquidity delta has the wrong sign for the operation."""

    pass


class InvalidPositionSize(InvalidInput):
    """Perpetual position size, collateral or leverage is not positive."""

    pass


class SwapAmountCannotBeZero(InvalidInput):
    """Swap requested with a zero specified amount."""

    pass


class TickSpacingTooSmall(InvalidInput):
    """Tick spacing is below the configured minimum."""

    pass


class TickSpacingTooLarge(InvalidInput):
    """Tick spacing is above the configured maximum."""

    pass


class CurrenciesOutOfOrder(InvalidInput):
    """currency0 must sort strictly before currency1."""

    pass


# =============================================================================
# State preconditions
# =============================================================================


class StatePreconditionError(PoolError):
    """Pool or position is not in a state that allows the operation."""

    pass


class PoolNotInitialized(StatePreconditionError):
    """Pool has no price yet."""

    pass


class PoolAlreadyInitialized(StatePreconditionError):
    """Pool price was already set."""

    pass


class PoolNotFound(StatePreconditionError):
    """No pool is registered under the given id."""

    pass


class CannotUpdateEmptyPosition(StatePreconditionError):
    """Zero-delta update (poke) of a position with zero liquidity."""

    pass


class NoLiquidityToReceiveFees(StatePreconditionError):
    """Donation while active liquidity is zero."""

    pass


class NoActiveLiquidity(StatePreconditionError):
    """Loss or gain growth update while active liquidity is zero."""

    pass


# =============================================================================
# Capacity
# =============================================================================


class CapacityError(PoolError):
    """Liquidity limits would be violated."""

    pass


class TickLiquidityOverflow(CapacityError):
    """Gross liquidity on a tick would exceed the per-tick maximum."""

    pass


class InsufficientAvailableLiquidity(CapacityError):
    """Unblocked liquidity on a tick is smaller than requested."""

    pass


class InsufficientBlockedLiquidity(CapacityError):
    """Blocked liquidity on a tick is smaller than the amount to release."""

    pass


class InsufficientLiquidityForProfit(CapacityError):
    """Range ticks cannot back the liquidity needed to pay trader profit."""

    pass


# =============================================================================
# Price limits
# =============================================================================


class PriceLimitError(PoolError):
    """Swap price limit is unusable."""

    pass


class PriceLimitAlreadyExceeded(PriceLimitError):
    """The current price is already past the limit."""

    pass


class PriceLimitOutOfBounds(PriceLimitError):
    """The limit is at or beyond the valid price domain."""

    pass


# =============================================================================
# Fee configuration
# =============================================================================


class FeeConfigurationError(PoolError):
    """Fee settings are invalid for the request."""

    pass


class InvalidFeeForExactOut(FeeConfigurationError):
    """A 100% swap fee cannot satisfy an exact-output swap."""

    pass


class LPFeeTooLarge(FeeConfigurationError):
    """LP fee exceeds MAX_LP_FEE."""

    pass


class ProtocolFeeTooLarge(FeeConfigurationError):
    """Protocol fee exceeds MAX_PROTOCOL_FEE in either direction."""

    pass


# =============================================================================
# Price math
# =============================================================================


class PriceOverflow(SafeIntError):
    """Removing token0 would push the sqrt price past its domain."""

    pass


class NotEnoughLiquidity(SafeIntError):
    """Removing token1 would push the sqrt price to zero or below."""

    pass


class InvalidPriceOrLiquidity(SafeIntError):
    """Next-price computation with zero price or zero liquidity."""

    pass


class InvalidPrice(SafeIntError):
    """Amount computation with a zero sqrt price."""

    pass
