"""Tests for PoolState.modify_liquidity."""

import pytest

from perpamm.constants import MAX_TICK, MIN_TICK, Q96
from perpamm.errors import (
    CannotUpdateEmptyPosition,
    PoolNotInitialized,
    TickLiquidityOverflow,
    TickLowerOutOfBounds,
    TickMisaligned,
    TicksMisordered,
    TickUpperOutOfBounds,
)
from perpamm.math import get_amount0_delta, get_amount1_delta, get_sqrt_price_at_tick
from perpamm.pool import ZERO_DELTA, BalanceDelta, PoolState, tick_spacing_to_max_liquidity_per_tick
from perpamm.safe_int import LiquidityUnderflow
from tests.helpers import (
    LIQUIDITY,
    LP_OWNER,
    OTHER_OWNER,
    TICK_SPACING,
    add_liquidity,
    liquidity_net_sum,
    make_pool,
    swap_exact_input,
)


class TestAddLiquidity:
    """Principal owed when adding liquidity."""

    def test_in_range_owes_both_tokens(self, pool):
        """A range containing the price needs both tokens, rounded up."""
        result = add_liquidity(pool, -120, 120, LIQUIDITY)
        sqrt_lower = get_sqrt_price_at_tick(-120)
        sqrt_upper = get_sqrt_price_at_tick(120)
        assert result.delta == BalanceDelta(
            get_amount0_delta(Q96, sqrt_upper, LIQUIDITY, True),
            get_amount1_delta(sqrt_lower, Q96, LIQUIDITY, True),
        )
        assert result.delta.amount0 > 0
        assert result.delta.amount1 > 0
        assert result.fee_delta == ZERO_DELTA
        assert result.loss_gain_delta == ZERO_DELTA
        assert pool.liquidity == LIQUIDITY

    def test_range_above_price_owes_token0_only(self, pool):
        result = add_liquidity(pool, 60, 180, LIQUIDITY)
        expected = get_amount0_delta(
            get_sqrt_price_at_tick(60), get_sqrt_price_at_tick(180), LIQUIDITY, True
        )
        assert result.delta == BalanceDelta(expected, 0)
        assert pool.liquidity == 0

    def test_range_below_price_owes_token1_only(self, pool):
        result = add_liquidity(pool, -180, -60, LIQUIDITY)
        expected = get_amount1_delta(
            get_sqrt_price_at_tick(-180), get_sqrt_price_at_tick(-60), LIQUIDITY, True
        )
        assert result.delta == BalanceDelta(0, expected)
        assert pool.liquidity == 0

    def test_upper_tick_at_price_is_below_range(self, pool):
        """The range is half-open: [-120, 0) does not contain tick 0."""
        result = add_liquidity(pool, -120, 0, LIQUIDITY)
        assert result.delta.amount0 == 0
        assert pool.liquidity == 0

    def test_ticks_and_bitmap_updated(self, pool):
        add_liquidity(pool, -120, 120, LIQUIDITY)
        lower = pool.get_tick_info(-120)
        upper = pool.get_tick_info(120)
        assert (lower.liquidity_gross, lower.liquidity_net) == (LIQUIDITY, LIQUIDITY)
        assert (upper.liquidity_gross, upper.liquidity_net) == (LIQUIDITY, -LIQUIDITY)
        assert pool.tick_bitmap.is_initialized(-120, TICK_SPACING)
        assert pool.tick_bitmap.is_initialized(120, TICK_SPACING)

    def test_position_recorded(self, pool):
        add_liquidity(pool, -120, 120, LIQUIDITY)
        assert pool.get_position_liquidity(LP_OWNER, -120, 120) == LIQUIDITY
        assert pool.get_position_liquidity(OTHER_OWNER, -120, 120) == 0

    def test_owner_address_case_insensitive(self, pool):
        owner = "0xAbCdEf0000000000000000000000000000000001"
        add_liquidity(pool, -120, 120, LIQUIDITY, owner=owner)
        assert pool.get_position_liquidity(owner, -120, 120) == LIQUIDITY
        assert pool.get_position_liquidity(owner.lower(), -120, 120) == LIQUIDITY

    def test_liquidity_net_sums_to_zero(self, pool):
        add_liquidity(pool, -120, 120, LIQUIDITY)
        add_liquidity(pool, -60, 180, 3 * LIQUIDITY, owner=OTHER_OWNER)
        add_liquidity(pool, -180, -60, LIQUIDITY)
        add_liquidity(pool, -60, 180, -LIQUIDITY, owner=OTHER_OWNER)
        assert liquidity_net_sum(pool) == 0
        assert pool.liquidity == 3 * LIQUIDITY


class TestRemoveLiquidity:
    """Principal paid out and tick clean-up when removing liquidity."""

    def test_round_trip(self, pool):
        """Adding then removing restores liquidity and clears the ticks."""
        added = add_liquidity(pool, -120, 120, LIQUIDITY)
        removed = add_liquidity(pool, -120, 120, -LIQUIDITY)

        assert pool.liquidity == 0
        assert len(pool.ticks) == 0
        assert pool.tick_bitmap.word(-1) == 0
        assert pool.tick_bitmap.word(0) == 0
        # removal rounds down, so the pool never pays out more than it took
        assert 0 <= added.delta.amount0 + removed.delta.amount0 <= 1
        assert 0 <= added.delta.amount1 + removed.delta.amount1 <= 1

    def test_partial_removal_keeps_ticks(self, pool_with_liquidity):
        add_liquidity(pool_with_liquidity, -120, 120, -LIQUIDITY // 4)
        assert pool_with_liquidity.liquidity == LIQUIDITY - LIQUIDITY // 4
        assert pool_with_liquidity.get_tick_info(-120).liquidity_gross == LIQUIDITY - LIQUIDITY // 4
        assert pool_with_liquidity.tick_bitmap.is_initialized(-120, TICK_SPACING)

    def test_shared_tick_not_cleared(self, pool_with_liquidity):
        """A tick still referenced by another position stays initialized."""
        add_liquidity(pool_with_liquidity, -120, 60, LIQUIDITY, owner=OTHER_OWNER)
        add_liquidity(pool_with_liquidity, -120, 120, -LIQUIDITY)

        assert -120 in pool_with_liquidity.ticks
        assert 120 not in pool_with_liquidity.ticks
        assert pool_with_liquidity.tick_bitmap.is_initialized(-120, TICK_SPACING)
        assert not pool_with_liquidity.tick_bitmap.is_initialized(120, TICK_SPACING)
        assert pool_with_liquidity.liquidity == LIQUIDITY

    def test_remove_more_than_owned_raises(self, pool_with_liquidity):
        with pytest.raises(LiquidityUnderflow):
            add_liquidity(pool_with_liquidity, -120, 120, -2 * LIQUIDITY)

    def test_remove_other_owners_liquidity_raises(self, pool_with_liquidity):
        """Ticks hold enough, but the position does not; nothing changes."""
        with pytest.raises(LiquidityUnderflow):
            add_liquidity(pool_with_liquidity, -120, 120, -LIQUIDITY, owner=OTHER_OWNER)
        assert pool_with_liquidity.get_tick_info(-120).liquidity_gross == LIQUIDITY
        assert pool_with_liquidity.liquidity == LIQUIDITY


class TestValidation:
    def test_misordered_ticks(self, pool):
        with pytest.raises(TicksMisordered):
            add_liquidity(pool, 120, -120, LIQUIDITY)
        with pytest.raises(TicksMisordered):
            add_liquidity(pool, 60, 60, LIQUIDITY)

    def test_lower_out_of_bounds(self, pool):
        with pytest.raises(TickLowerOutOfBounds):
            add_liquidity(pool, MIN_TICK - 1, 0, LIQUIDITY, tick_spacing=1)

    def test_upper_out_of_bounds(self, pool):
        with pytest.raises(TickUpperOutOfBounds):
            add_liquidity(pool, 0, MAX_TICK + 1, LIQUIDITY, tick_spacing=1)

    def test_misaligned_tick(self, pool):
        with pytest.raises(TickMisaligned):
            add_liquidity(pool, -100, 120, LIQUIDITY)
        assert len(pool.ticks) == 0

    def test_per_tick_ceiling(self, pool):
        """Adding beyond the per-tick maximum is rejected."""
        max_liquidity = tick_spacing_to_max_liquidity_per_tick(TICK_SPACING)
        add_liquidity(pool, -120, 120, max_liquidity)
        with pytest.raises(TickLiquidityOverflow):
            add_liquidity(pool, -120, 60, 1, owner=OTHER_OWNER)

    def test_ceiling_not_applied_on_removal(self, pool):
        max_liquidity = tick_spacing_to_max_liquidity_per_tick(TICK_SPACING)
        add_liquidity(pool, -120, 120, max_liquidity)
        add_liquidity(pool, -120, 120, -1)
        assert pool.liquidity == max_liquidity - 1

    def test_uninitialized_pool(self):
        with pytest.raises(PoolNotInitialized):
            add_liquidity(PoolState(), -120, 120, LIQUIDITY)

    def test_poke_empty_position(self, pool):
        with pytest.raises(CannotUpdateEmptyPosition):
            add_liquidity(pool, -120, 120, 0)


class TestFeeSettlement:
    """Fees owed to positions through modify_liquidity."""

    def test_poke_collects_swap_fees(self):
        """A 0.3% fee on 1e17 token1 input is 3e14, all to the single LP."""
        pool = make_pool(lp_fee=3000)
        add_liquidity(pool, -120, 120, LIQUIDITY)
        swap_exact_input(pool, 10**17, zero_for_one=False)

        result = add_liquidity(pool, -120, 120, 0)
        assert result.delta == ZERO_DELTA
        assert result.fee_delta.amount0 == 0
        assert 3 * 10**14 - 1 <= result.fee_delta.amount1 <= 3 * 10**14

        again = add_liquidity(pool, -120, 120, 0)
        assert again.fee_delta == ZERO_DELTA

    def test_fees_split_by_liquidity(self):
        pool = make_pool(lp_fee=3000)
        add_liquidity(pool, -120, 120, 3 * LIQUIDITY)
        add_liquidity(pool, -120, 120, LIQUIDITY, owner=OTHER_OWNER)
        swap_exact_input(pool, 10**17, zero_for_one=True)

        lp_fees = add_liquidity(pool, -120, 120, 0).fee_delta
        other_fees = add_liquidity(pool, -120, 120, 0, owner=OTHER_OWNER).fee_delta
        assert 225 * 10**12 - 1 <= lp_fees.amount0 <= 225 * 10**12
        assert 75 * 10**12 - 1 <= other_fees.amount0 <= 75 * 10**12
        assert lp_fees.amount1 == other_fees.amount1 == 0

    def test_out_of_range_position_earns_nothing(self):
        pool = make_pool(lp_fee=3000)
        add_liquidity(pool, -120, 120, LIQUIDITY)
        add_liquidity(pool, 120, 240, LIQUIDITY, owner=OTHER_OWNER)
        swap_exact_input(pool, 10**17, zero_for_one=False)

        assert add_liquidity(pool, 120, 240, 0, owner=OTHER_OWNER).fee_delta == ZERO_DELTA

    def test_removal_pays_fees_and_principal(self):
        pool = make_pool(lp_fee=3000)
        add_liquidity(pool, -120, 120, LIQUIDITY)
        swap_exact_input(pool, 10**17, zero_for_one=False)

        result = add_liquidity(pool, -120, 120, -LIQUIDITY)
        assert result.delta.amount0 < 0
        assert result.delta.amount1 < 0
        assert result.fee_delta.amount1 > 0
