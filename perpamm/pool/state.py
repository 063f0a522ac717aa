"""Pool state and the operations that mutate it.

A PoolState holds one trading pair's price, global growth accumulators,
active liquidity, tick ledger, tick bitmap and position ledger. Every
mutating operation is atomic: state is checkpointed on entry and restored
wholesale if any exception escapes, so a failed call leaves no trace.

Callers must serialize access to a given PoolState (see PoolManager).
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable
from typing import ParamSpec, TypeVar

import structlog

from perpamm.constants import (
    MAX_SQRT_PRICE,
    MAX_SWAP_FEE,
    MAX_TICK,
    MIN_SQRT_PRICE,
    MIN_TICK,
    PIPS_DENOMINATOR,
    Q128,
    ZERO_SALT,
)
from perpamm.errors import (
    InsufficientLiquidityForProfit,
    InvalidFeeForExactOut,
    InvalidInput,
    InvalidLiquidityDelta,
    InvalidPositionSize,
    NoActiveLiquidity,
    NoLiquidityToReceiveFees,
    PoolAlreadyInitialized,
    PoolNotInitialized,
    PriceLimitAlreadyExceeded,
    PriceLimitOutOfBounds,
    TickLiquidityOverflow,
    TickLowerOutOfBounds,
    TicksMisordered,
    TickUpperOutOfBounds,
)
from perpamm.math.full_math import mul_div
from perpamm.math.liquidity_amounts import (
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
)
from perpamm.math.sqrt_price_math import get_amount0_delta_signed, get_amount1_delta_signed
from perpamm.math.swap_math import compute_swap_step, get_sqrt_price_target
from perpamm.math.tick_math import get_sqrt_price_at_tick, get_tick_at_sqrt_price
from perpamm.pool.fees import calculate_swap_fee, validate_lp_fee, validate_protocol_fee
from perpamm.pool.positions import PositionLedger, PositionState
from perpamm.pool.tick_bitmap import TickBitmap, compress
from perpamm.pool.ticks import TickLedger, tick_spacing_to_max_liquidity_per_tick
from perpamm.pool.types import (
    ZERO_DELTA,
    BalanceDelta,
    GrowthKind,
    GrowthPair,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    ProtocolFee,
    Slot0,
    SwapParams,
    SwapResult,
    TickInfo,
    normalize_address,
)
from perpamm.safe_int import add_delta, to_int128, wrapping_add

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def check_ticks(tick_lower: int, tick_upper: int) -> None:
    """Validate a tick range.

    Raises:
        TicksMisordered: If tick_lower >= tick_upper
        TickLowerOutOfBounds: If tick_lower < MIN_TICK
        TickUpperOutOfBounds: If tick_upper > MAX_TICK
    """
    if tick_lower >= tick_upper:
        raise TicksMisordered(f"tick_lower {tick_lower} >= tick_upper {tick_upper}")
    if tick_lower < MIN_TICK:
        raise TickLowerOutOfBounds(f"tick_lower {tick_lower} < {MIN_TICK}")
    if tick_upper > MAX_TICK:
        raise TickUpperOutOfBounds(f"tick_upper {tick_upper} > {MAX_TICK}")


def atomic(method: Callable[P, R]) -> Callable[P, R]:
    """Run a PoolState method as a transaction.

    The instance state is deep-copied before the call and restored if the
    call raises, then the exception propagates unchanged. The checkpoint
    copies every tick and position, so each call costs O(pool size).
    """

    @functools.wraps(method)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        state = vars(args[0])
        checkpoint = copy.deepcopy(state)
        try:
            return method(*args, **kwargs)
        except Exception as e:
            state.clear()
            state.update(checkpoint)
            logger.debug("pool_operation_rolled_back", operation=method.__name__, error=str(e))
            raise

    return wrapper


class PoolState:
    """Ledger of one concentrated-liquidity pool.

    Attributes:
        slot0: Current price, tick and fee settings
        fee_growth_global: Fees per unit of liquidity since inception (Q128)
        loss_growth_global: Trader losses per unit of liquidity (Q128)
        gain_growth_global: Trader gains per unit of liquidity (Q128)
        liquidity: Active liquidity at the current tick
        ticks: Tick ledger
        tick_bitmap: Initialized-tick bitmap
        positions: Position ledger
        warn_on_dropped_fees: Log fees paid with no active liquidity at
            warning instead of debug
    """

    def __init__(self, warn_on_dropped_fees: bool = False) -> None:
        self.warn_on_dropped_fees = warn_on_dropped_fees
        self.slot0 = Slot0()
        self.fee_growth_global = GrowthPair()
        self.loss_growth_global = GrowthPair()
        self.gain_growth_global = GrowthPair()
        self.liquidity = 0
        self.ticks = TickLedger()
        self.tick_bitmap = TickBitmap()
        self.positions = PositionLedger()

    def __repr__(self) -> str:
        return (
            f"PoolState(sqrt_price_x96={self.slot0.sqrt_price_x96}, tick={self.slot0.tick}, "
            f"liquidity={self.liquidity}, ticks={len(self.ticks)})"
        )

    # --- Read accessors ---

    @property
    def sqrt_price_x96(self) -> int:
        return self.slot0.sqrt_price_x96

    @property
    def tick(self) -> int:
        return self.slot0.tick

    def get_tick_info(self, tick: int) -> TickInfo:
        return self.ticks.get(tick)

    def get_position(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        salt: bytes = ZERO_SALT,
    ) -> PositionState:
        """Position state without materializing it."""
        return self.positions.peek(normalize_address(owner), tick_lower, tick_upper, salt)

    def get_position_liquidity(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        salt: bytes = ZERO_SALT,
    ) -> int:
        return self.get_position(owner, tick_lower, tick_upper, salt).liquidity

    def get_growth_inside(self, kind: GrowthKind, tick_lower: int, tick_upper: int) -> GrowthPair:
        """Growth per unit of liquidity inside a range for one accumulator kind."""
        return self.ticks.get_growth_inside(
            kind, tick_lower, tick_upper, self.slot0.tick, self._growth_global(kind)
        )

    def _growth_global(self, kind: GrowthKind) -> GrowthPair:
        return getattr(self, f"{kind.value}_growth_global")

    def _growth_globals(self) -> dict[GrowthKind, GrowthPair]:
        return {kind: self._growth_global(kind) for kind in GrowthKind}

    def check_initialized(self) -> None:
        if not self.slot0.is_initialized:
            raise PoolNotInitialized("Pool is not initialized")

    # --- Lifecycle and fee settings ---

    @atomic
    def initialize(self, sqrt_price_x96: int, lp_fee: int) -> int:
        """Set the starting price and LP fee.

        Returns:
            The tick of the starting price

        Raises:
            PoolAlreadyInitialized: If the price was set before
            InvalidSqrtPrice: If the price is outside the valid domain
        """
        if self.slot0.is_initialized:
            raise PoolAlreadyInitialized("Pool is already initialized")

        tick = get_tick_at_sqrt_price(sqrt_price_x96)
        self.slot0 = Slot0(sqrt_price_x96=sqrt_price_x96, tick=tick, lp_fee=validate_lp_fee(lp_fee))
        logger.info("pool_initialized", sqrt_price_x96=sqrt_price_x96, tick=tick, lp_fee=lp_fee)
        return tick

    @atomic
    def set_protocol_fee(self, protocol_fee: ProtocolFee) -> None:
        self.check_initialized()
        self.slot0.protocol_fee = validate_protocol_fee(protocol_fee)

    @atomic
    def set_lp_fee(self, lp_fee: int) -> None:
        self.check_initialized()
        self.slot0.lp_fee = validate_lp_fee(lp_fee)

    # --- Liquidity ---

    @atomic
    def modify_liquidity(self, params: ModifyLiquidityParams) -> ModifyLiquidityResult:
        """Add or remove liquidity for a position and settle what it is owed.

        Args:
            params: Owner, range, signed liquidity delta, tick spacing, salt

        Returns:
            ModifyLiquidityResult with the principal delta (pool perspective),
            the fees owed to the owner and the loss-minus-gain owed to the owner

        Raises:
            TicksMisordered, TickLowerOutOfBounds, TickUpperOutOfBounds: bad range
            TickLiquidityOverflow: If a tick would exceed its liquidity ceiling
            CannotUpdateEmptyPosition: Zero-delta update of an empty position
            LiquidityUnderflow: Removing more than the position holds
            SafeCastOverflow: If an owed amount does not fit int128, as when
                growth inside the range has wrapped below its last value
        """
        self.check_initialized()
        tick_lower, tick_upper = params.tick_lower, params.tick_upper
        check_ticks(tick_lower, tick_upper)

        liquidity_delta = params.liquidity_delta
        tick_current = self.slot0.tick
        flipped_lower = flipped_upper = False

        if liquidity_delta != 0:
            growth_globals = self._growth_globals()
            flipped_lower, gross_after_lower = self.ticks.update_tick(
                tick_lower, tick_current, liquidity_delta, False, growth_globals
            )
            flipped_upper, gross_after_upper = self.ticks.update_tick(
                tick_upper, tick_current, liquidity_delta, True, growth_globals
            )

            if liquidity_delta > 0:
                max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(params.tick_spacing)
                if gross_after_lower > max_liquidity_per_tick:
                    raise TickLiquidityOverflow(f"Tick {tick_lower} exceeds {max_liquidity_per_tick}")
                if gross_after_upper > max_liquidity_per_tick:
                    raise TickLiquidityOverflow(f"Tick {tick_upper} exceeds {max_liquidity_per_tick}")

            if flipped_lower:
                self.tick_bitmap.flip_tick(tick_lower, params.tick_spacing)
            if flipped_upper:
                self.tick_bitmap.flip_tick(tick_upper, params.tick_spacing)

        fee_inside = self.get_growth_inside(GrowthKind.FEE, tick_lower, tick_upper)
        loss_inside = self.get_growth_inside(GrowthKind.LOSS, tick_lower, tick_upper)
        gain_inside = self.get_growth_inside(GrowthKind.GAIN, tick_lower, tick_upper)

        position = self.positions.get(params.owner, tick_lower, tick_upper, params.salt)
        # loss/gain settle on the liquidity held before this change
        loss0, loss1, gain0, gain1 = position.update_loss_and_gain_growth(
            loss_inside.token0, loss_inside.token1, gain_inside.token0, gain_inside.token1
        )
        fees0, fees1 = position.update(liquidity_delta, fee_inside.token0, fee_inside.token1)

        if liquidity_delta < 0:
            if flipped_lower:
                self.ticks.clear_tick(tick_lower)
            if flipped_upper:
                self.ticks.clear_tick(tick_upper)

        delta = ZERO_DELTA
        if liquidity_delta != 0:
            sqrt_price_lower = get_sqrt_price_at_tick(tick_lower)
            sqrt_price_upper = get_sqrt_price_at_tick(tick_upper)
            if tick_current < tick_lower:
                # range is above the price: only token0 is referenced
                delta = BalanceDelta(
                    get_amount0_delta_signed(sqrt_price_lower, sqrt_price_upper, liquidity_delta),
                    0,
                )
            elif tick_current < tick_upper:
                sqrt_price = self.slot0.sqrt_price_x96
                delta = BalanceDelta(
                    get_amount0_delta_signed(sqrt_price, sqrt_price_upper, liquidity_delta),
                    get_amount1_delta_signed(sqrt_price_lower, sqrt_price, liquidity_delta),
                )
                self.liquidity = add_delta(self.liquidity, liquidity_delta)
            else:
                delta = BalanceDelta(
                    0,
                    get_amount1_delta_signed(sqrt_price_lower, sqrt_price_upper, liquidity_delta),
                )

        logger.debug(
            "liquidity_modified",
            owner=params.owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity_delta=liquidity_delta,
            amount0=delta.amount0,
            amount1=delta.amount1,
        )
        return ModifyLiquidityResult(
            delta=BalanceDelta(to_int128(delta.amount0), to_int128(delta.amount1)),
            fee_delta=BalanceDelta(to_int128(fees0), to_int128(fees1)),
            loss_gain_delta=BalanceDelta(to_int128(loss0 - gain0), to_int128(loss1 - gain1)),
        )

    # --- Swap ---

    @atomic
    def swap(self, params: SwapParams) -> SwapResult:
        """Execute a swap by walking the curve tick by tick.

        Returns:
            SwapResult whose delta is from the pool's perspective: the input
            token is positive and the output token negative

        Raises:
            InvalidFeeForExactOut: 100% swap fee with exact output
            PriceLimitAlreadyExceeded: Limit is not beyond the current price
            PriceLimitOutOfBounds: Limit at or beyond the price domain edge
        """
        self.check_initialized()
        slot0_start = self.slot0

        if params.amount_specified == 0:
            return SwapResult(
                delta=ZERO_DELTA,
                amount_to_protocol=0,
                swap_fee=0,
                sqrt_price_x96=slot0_start.sqrt_price_x96,
                tick=slot0_start.tick,
                liquidity=self.liquidity,
            )

        zero_for_one = params.zero_for_one
        exact_input = params.is_exact_input
        tick_spacing = params.tick_spacing
        sqrt_price_limit_x96 = params.sqrt_price_limit_x96

        protocol_fee = slot0_start.protocol_fee.for_direction(zero_for_one)
        if params.lp_fee_override is not None:
            lp_fee = validate_lp_fee(params.lp_fee_override)
        else:
            lp_fee = slot0_start.lp_fee
        swap_fee = lp_fee if protocol_fee == 0 else calculate_swap_fee(protocol_fee, lp_fee)

        if swap_fee >= MAX_SWAP_FEE and not exact_input:
            raise InvalidFeeForExactOut("Exact output is impossible with a 100% swap fee")

        if zero_for_one:
            if sqrt_price_limit_x96 >= slot0_start.sqrt_price_x96:
                raise PriceLimitAlreadyExceeded(
                    f"Limit {sqrt_price_limit_x96} >= price {slot0_start.sqrt_price_x96}"
                )
            if sqrt_price_limit_x96 <= MIN_SQRT_PRICE:
                raise PriceLimitOutOfBounds(f"Limit {sqrt_price_limit_x96} <= {MIN_SQRT_PRICE}")
        else:
            if sqrt_price_limit_x96 <= slot0_start.sqrt_price_x96:
                raise PriceLimitAlreadyExceeded(
                    f"Limit {sqrt_price_limit_x96} <= price {slot0_start.sqrt_price_x96}"
                )
            if sqrt_price_limit_x96 >= MAX_SQRT_PRICE:
                raise PriceLimitOutOfBounds(f"Limit {sqrt_price_limit_x96} >= {MAX_SQRT_PRICE}")

        amount_specified_remaining = params.amount_specified
        amount_calculated = 0
        amount_to_protocol = 0
        sqrt_price_x96 = slot0_start.sqrt_price_x96
        tick = slot0_start.tick
        liquidity = self.liquidity
        fee_growth_global = (
            self.fee_growth_global.token0 if zero_for_one else self.fee_growth_global.token1
        )
        ticks_crossed = 0

        while amount_specified_remaining != 0 and sqrt_price_x96 != sqrt_price_limit_x96:
            sqrt_price_start_x96 = sqrt_price_x96

            tick_next, initialized = self.tick_bitmap.next_initialized_tick_within_one_word(
                tick, tick_spacing, zero_for_one
            )
            # the bitmap is unaware of the tick bounds
            tick_next = max(MIN_TICK, min(MAX_TICK, tick_next))
            sqrt_price_next_x96 = get_sqrt_price_at_tick(tick_next)

            step = compute_swap_step(
                sqrt_price_x96,
                get_sqrt_price_target(zero_for_one, sqrt_price_next_x96, sqrt_price_limit_x96),
                liquidity,
                amount_specified_remaining,
                swap_fee,
            )
            sqrt_price_x96 = step.sqrt_price_next_x96
            fee_amount = step.fee_amount

            if exact_input:
                amount_specified_remaining += step.amount_in + fee_amount
                amount_calculated += step.amount_out
            else:
                amount_specified_remaining -= step.amount_out
                amount_calculated -= step.amount_in + fee_amount

            if protocol_fee > 0:
                if swap_fee == protocol_fee:
                    protocol_delta = fee_amount
                else:
                    protocol_delta = (step.amount_in + fee_amount) * protocol_fee // PIPS_DENOMINATOR
                fee_amount -= protocol_delta
                amount_to_protocol += protocol_delta

            if liquidity > 0:
                fee_growth_global = wrapping_add(
                    fee_growth_global, mul_div(fee_amount, Q128, liquidity)
                )
            elif fee_amount > 0:
                log = logger.warning if self.warn_on_dropped_fees else logger.debug
                log("swap_fee_unattributed", fee_amount=fee_amount, tick=tick)

            if sqrt_price_x96 == sqrt_price_next_x96:
                if initialized:
                    if zero_for_one:
                        fee_growth = GrowthPair(fee_growth_global, self.fee_growth_global.token1)
                    else:
                        fee_growth = GrowthPair(self.fee_growth_global.token0, fee_growth_global)
                    liquidity_net = self.ticks.cross_tick(
                        tick_next,
                        {
                            GrowthKind.FEE: fee_growth,
                            GrowthKind.LOSS: self.loss_growth_global,
                            GrowthKind.GAIN: self.gain_growth_global,
                        },
                    )
                    # moving left, the net liquidity applies in reverse
                    if zero_for_one:
                        liquidity_net = -liquidity_net
                    liquidity = add_delta(liquidity, liquidity_net)
                    ticks_crossed += 1

                tick = tick_next - 1 if zero_for_one else tick_next
            elif sqrt_price_x96 != sqrt_price_start_x96:
                # price moved within the range, the tick is not a boundary
                tick = get_tick_at_sqrt_price(sqrt_price_x96)

        self.slot0.sqrt_price_x96 = sqrt_price_x96
        self.slot0.tick = tick
        self.liquidity = liquidity
        if zero_for_one:
            self.fee_growth_global = GrowthPair(fee_growth_global, self.fee_growth_global.token1)
        else:
            self.fee_growth_global = GrowthPair(self.fee_growth_global.token0, fee_growth_global)

        amount_specified_used = params.amount_specified - amount_specified_remaining
        if zero_for_one != exact_input:
            # specified amount is in token1
            delta = BalanceDelta(-amount_calculated, -amount_specified_used)
        else:
            delta = BalanceDelta(-amount_specified_used, -amount_calculated)

        logger.debug(
            "swap_executed",
            zero_for_one=zero_for_one,
            amount_specified=params.amount_specified,
            amount0=delta.amount0,
            amount1=delta.amount1,
            tick=tick,
            ticks_crossed=ticks_crossed,
            amount_to_protocol=amount_to_protocol,
        )
        return SwapResult(
            delta=delta,
            amount_to_protocol=amount_to_protocol,
            swap_fee=swap_fee,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            liquidity=liquidity,
        )

    @atomic
    def donate(self, amount0: int, amount1: int) -> BalanceDelta:
        """Distribute tokens to in-range liquidity as fees.

        Returns:
            Delta owed by the donor to the pool

        Raises:
            NoLiquidityToReceiveFees: If active liquidity is zero
        """
        self.check_initialized()
        if amount0 < 0 or amount1 < 0:
            raise InvalidInput(f"Donation amounts must be non-negative: {amount0}, {amount1}")
        if self.liquidity == 0:
            raise NoLiquidityToReceiveFees("No active liquidity to receive donation")

        self.fee_growth_global = self.fee_growth_global.wrapping_add(
            GrowthPair(
                mul_div(amount0, Q128, self.liquidity),
                mul_div(amount1, Q128, self.liquidity),
            )
        )
        return BalanceDelta(amount0, amount1)

    # --- Liquidity blocking and perpetual settlement ---

    def current_tick_range(self, tick_spacing: int) -> tuple[int, int]:
        """Spacing-aligned range [lower, lower + spacing) containing the current tick."""
        tick_lower = compress(self.slot0.tick, tick_spacing) * tick_spacing
        return tick_lower, tick_lower + tick_spacing

    def _required_liquidity(
        self,
        amount0: int,
        amount1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> int:
        """Liquidity backing both amounts over the range; the scarcer token wins."""
        sqrt_price_lower = get_sqrt_price_at_tick(tick_lower)
        sqrt_price_upper = get_sqrt_price_at_tick(tick_upper)
        return max(
            get_liquidity_for_amount0(sqrt_price_lower, sqrt_price_upper, amount0),
            get_liquidity_for_amount1(sqrt_price_lower, sqrt_price_upper, amount1),
        )

    @atomic
    def block_liquidity(self, liquidity_delta: int, tick_spacing: int) -> tuple[int, int]:
        """Reserve liquidity in the range around the current tick.

        Returns:
            (tick_lower, tick_upper) of the blocked range, needed to unblock

        Raises:
            InvalidLiquidityDelta: If liquidity_delta is not positive
            InsufficientAvailableLiquidity: If either boundary tick lacks
                unblocked liquidity
        """
        self.check_initialized()
        if liquidity_delta <= 0:
            raise InvalidLiquidityDelta(f"Blocking needs a positive delta: {liquidity_delta}")

        tick_lower, tick_upper = self.current_tick_range(tick_spacing)
        self.ticks.block(tick_lower, tick_upper, liquidity_delta)
        logger.info(
            "liquidity_blocked",
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=liquidity_delta,
        )
        return tick_lower, tick_upper

    @atomic
    def unblock_liquidity(self, liquidity_delta: int, tick_lower: int, tick_upper: int) -> None:
        """Release previously blocked liquidity.

        Raises:
            InvalidLiquidityDelta: If liquidity_delta is not negative
            InsufficientBlockedLiquidity: If either tick has less blocked
        """
        self.check_initialized()
        if liquidity_delta >= 0:
            raise InvalidLiquidityDelta(f"Unblocking needs a negative delta: {liquidity_delta}")
        check_ticks(tick_lower, tick_upper)

        self.ticks.unblock(tick_lower, tick_upper, -liquidity_delta)
        logger.info(
            "liquidity_unblocked",
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=-liquidity_delta,
        )

    def calculate_liquidity_delta(self, position_size: int, tick_spacing: int) -> int:
        """Liquidity needed to back a leveraged position of `position_size`.

        Raises:
            InvalidPositionSize: If position_size is not positive
        """
        self.check_initialized()
        if position_size <= 0:
            raise InvalidPositionSize(f"Position size must be positive: {position_size}")
        tick_lower, tick_upper = self.current_tick_range(tick_spacing)
        return self._required_liquidity(position_size, position_size, tick_lower, tick_upper)

    @atomic
    def update_from_trader_profit(
        self,
        profit0: int,
        profit1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> int:
        """Consume LP liquidity on a range's boundary ticks to pay trader profit.

        Gross liquidity is debited directly: the tick on the far side from
        the price pays first and the other covers the remainder; with the
        price inside the range both pay in proportion to their gross
        liquidity. liquidity_net and the bitmap are not adjusted.

        Returns:
            The liquidity consumed

        Raises:
            InsufficientLiquidityForProfit: If both ticks together hold less
                than the required liquidity
        """
        self.check_initialized()
        check_ticks(tick_lower, tick_upper)
        if profit0 < 0 or profit1 < 0:
            raise InvalidInput(f"Profit amounts must be non-negative: {profit0}, {profit1}")

        required = self._required_liquidity(profit0, profit1, tick_lower, tick_upper)
        lower_gross = self.ticks.get(tick_lower).liquidity_gross
        upper_gross = self.ticks.get(tick_upper).liquidity_gross
        total = lower_gross + upper_gross
        if total < required:
            raise InsufficientLiquidityForProfit(
                f"Range [{tick_lower}, {tick_upper}) holds {total} < required {required}"
            )
        if required == 0:
            return 0

        tick_current = self.slot0.tick
        if tick_current < tick_lower:
            from_upper = min(required, upper_gross)
            from_lower = required - from_upper
        elif tick_current >= tick_upper:
            from_lower = min(required, lower_gross)
            from_upper = required - from_lower
        else:
            from_lower = required * lower_gross // total
            from_upper = required - from_lower

        self.ticks.debit_gross(tick_lower, from_lower)
        self.ticks.debit_gross(tick_upper, from_upper)
        logger.info(
            "trader_profit_settled",
            profit0=profit0,
            profit1=profit1,
            liquidity=required,
            from_lower=from_lower,
            from_upper=from_upper,
        )
        return required

    def _bump_growth(
        self,
        kind: GrowthKind,
        amount0: int,
        amount1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> GrowthPair:
        self.check_initialized()
        check_ticks(tick_lower, tick_upper)
        if amount0 < 0 or amount1 < 0:
            raise InvalidInput(f"{kind.value} amounts must be non-negative: {amount0}, {amount1}")
        if self.liquidity == 0:
            raise NoActiveLiquidity(f"Cannot distribute {kind.value} with zero active liquidity")

        growth = GrowthPair(
            (amount0 << 128) // self.liquidity,
            (amount1 << 128) // self.liquidity,
        )
        setattr(self, f"{kind.value}_growth_global", self._growth_global(kind).wrapping_add(growth))
        self.ticks.bump_growth_outside(tick_lower, kind, growth)
        self.ticks.bump_growth_outside(tick_upper, kind, growth)
        logger.info(
            "growth_distributed",
            kind=kind.value,
            amount0=amount0,
            amount1=amount1,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
        )
        return growth

    @atomic
    def update_loss_growth_on_liquidation_or_loss(
        self,
        loss0: int,
        loss1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> GrowthPair:
        """Credit realized trader losses to LPs as loss growth.

        Returns:
            The growth added per unit of active liquidity

        Raises:
            NoActiveLiquidity: If active liquidity is zero
        """
        return self._bump_growth(GrowthKind.LOSS, loss0, loss1, tick_lower, tick_upper)

    @atomic
    def update_gain_growth_on_profit(
        self,
        gain0: int,
        gain1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> GrowthPair:
        """Charge realized trader gains to LPs as gain growth.

        Raises:
            NoActiveLiquidity: If active liquidity is zero
        """
        return self._bump_growth(GrowthKind.GAIN, gain0, gain1, tick_lower, tick_upper)


__all__ = ["PoolState", "atomic", "check_ticks"]
