"""Tick ledger and growth accounting.

The ledger stores one TickInfo per initialized tick. Besides liquidity it
keeps, per accumulator kind (fee, loss, gain), the growth that happened on
the "outside" of the tick relative to the current price. From those values
the growth inside any range follows without replaying history:

    inside = global - below(lower) - above(upper)

All growth arithmetic is modulo 2**256.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

import structlog

from perpamm.constants import MAX_TICK, MAX_UINT128, MIN_TICK
from perpamm.errors import (
    InsufficientAvailableLiquidity,
    InsufficientBlockedLiquidity,
)
from perpamm.pool.types import GrowthKind, GrowthPair, TickInfo
from perpamm.safe_int import add_delta, to_int128

logger = structlog.get_logger()


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """Maximum gross liquidity a single tick may reference.

    Chosen so that every usable tick at this spacing carrying the maximum
    still sums to at most uint128.
    """
    min_tick = MIN_TICK // tick_spacing
    max_tick = MAX_TICK // tick_spacing
    num_ticks = max_tick - min_tick + 1
    return MAX_UINT128 // num_ticks


class TickLedger:
    """Mapping of tick index to TickInfo with growth bookkeeping.

    Reads of an absent tick return an empty TickInfo without inserting it.
    """

    def __init__(self) -> None:
        self._ticks: dict[int, TickInfo] = {}

    def __contains__(self, tick: object) -> bool:
        return tick in self._ticks

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ticks))

    def __len__(self) -> int:
        return len(self._ticks)

    def __repr__(self) -> str:
        return f"TickLedger(ticks={len(self._ticks)})"

    def get(self, tick: int) -> TickInfo:
        """Tick info, or an empty (detached) TickInfo if not stored."""
        info = self._ticks.get(tick)
        return info if info is not None else TickInfo()

    def _get_or_create(self, tick: int) -> TickInfo:
        return self._ticks.setdefault(tick, TickInfo())

    def items(self) -> Iterator[tuple[int, TickInfo]]:
        for tick in sorted(self._ticks):
            yield tick, self._ticks[tick]

    def update_tick(
        self,
        tick: int,
        tick_current: int,
        liquidity_delta: int,
        upper: bool,
        growth_global: Mapping[GrowthKind, GrowthPair],
    ) -> tuple[bool, int]:
        """Apply a liquidity delta to one boundary tick of a range.

        Args:
            tick: Tick being updated
            tick_current: Current pool tick
            liquidity_delta: Signed liquidity added to (removed from) the range
            upper: True if tick is the range's upper bound
            growth_global: Global accumulators per kind

        Returns:
            (flipped, liquidity_gross_after). flipped is True when the tick
            went from zero to non-zero gross liquidity or back.

        Raises:
            LiquidityUnderflow: If gross liquidity would go negative
            InsufficientAvailableLiquidity: If a removal would dip into
                blocked liquidity
        """
        info = self._get_or_create(tick)

        liquidity_gross_before = info.liquidity_gross
        liquidity_gross_after = add_delta(liquidity_gross_before, liquidity_delta)
        if liquidity_gross_after < info.blocked_liquidity_gross:
            raise InsufficientAvailableLiquidity(
                f"Tick {tick}: removing {-liquidity_delta} leaves "
                f"{liquidity_gross_after} < blocked {info.blocked_liquidity_gross}"
            )

        flipped = (liquidity_gross_after == 0) != (liquidity_gross_before == 0)

        if liquidity_gross_before == 0 and tick <= tick_current:
            # by convention, all growth before a tick was initialized happened below it
            for kind, growth in growth_global.items():
                info.set_growth_outside(kind, growth)

        info.liquidity_gross = liquidity_gross_after
        if upper:
            info.liquidity_net = to_int128(info.liquidity_net - liquidity_delta)
        else:
            info.liquidity_net = to_int128(info.liquidity_net + liquidity_delta)

        return flipped, liquidity_gross_after

    def clear_tick(self, tick: int) -> None:
        """Delete a tick's data once nothing references it."""
        self._ticks.pop(tick, None)

    def cross_tick(
        self,
        tick: int,
        growth_global: Mapping[GrowthKind, GrowthPair],
    ) -> int:
        """Transition to the other side of a tick during a swap.

        Each outside accumulator becomes global - outside, so that "outside"
        again means the side away from the current price.

        Returns:
            The tick's liquidity_net, to be negated by the caller when
            crossing right to left
        """
        info = self._get_or_create(tick)
        for kind, growth in growth_global.items():
            info.set_growth_outside(kind, growth.wrapping_sub(info.growth_outside(kind)))
        return info.liquidity_net

    def get_growth_inside(
        self,
        kind: GrowthKind,
        tick_lower: int,
        tick_upper: int,
        tick_current: int,
        growth_global: GrowthPair,
    ) -> GrowthPair:
        """All-time growth per unit of liquidity inside [tick_lower, tick_upper)."""
        lower = self.get(tick_lower).growth_outside(kind)
        upper = self.get(tick_upper).growth_outside(kind)

        if tick_current < tick_lower:
            return lower.wrapping_sub(upper)
        if tick_current >= tick_upper:
            return upper.wrapping_sub(lower)
        return growth_global.wrapping_sub(lower).wrapping_sub(upper)

    def bump_growth_outside(self, tick: int, kind: GrowthKind, growth: GrowthPair) -> None:
        """Add growth directly to a tick's outside accumulator.

        Ticks without an entry are skipped: their outside values are seeded
        when liquidity first references them.
        """
        info = self._ticks.get(tick)
        if info is None:
            return
        info.set_growth_outside(kind, info.growth_outside(kind).wrapping_add(growth))

    # --- Liquidity blocking ---

    def block(self, tick_lower: int, tick_upper: int, liquidity: int) -> None:
        """Reserve liquidity on both boundary ticks.

        Raises:
            InsufficientAvailableLiquidity: If either tick has less than
                `liquidity` unblocked
        """
        lower, upper = self.get(tick_lower), self.get(tick_upper)
        for tick, info in ((tick_lower, lower), (tick_upper, upper)):
            if info.available_liquidity < liquidity:
                raise InsufficientAvailableLiquidity(
                    f"Tick {tick}: available {info.available_liquidity} < requested {liquidity}"
                )
        self._get_or_create(tick_lower).blocked_liquidity_gross += liquidity
        self._get_or_create(tick_upper).blocked_liquidity_gross += liquidity

    def unblock(self, tick_lower: int, tick_upper: int, liquidity: int) -> None:
        """Release reserved liquidity on both boundary ticks.

        Raises:
            InsufficientBlockedLiquidity: If either tick has less than
                `liquidity` blocked
        """
        for tick in (tick_lower, tick_upper):
            blocked = self.get(tick).blocked_liquidity_gross
            if blocked < liquidity:
                raise InsufficientBlockedLiquidity(
                    f"Tick {tick}: blocked {blocked} < requested {liquidity}"
                )
        self._ticks[tick_lower].blocked_liquidity_gross -= liquidity
        self._ticks[tick_upper].blocked_liquidity_gross -= liquidity

    def debit_gross(self, tick: int, liquidity: int) -> None:
        """Consume gross liquidity directly, outside the liquidity-delta path.

        liquidity_net, the bitmap and the per-tick ceiling are untouched.
        Blocked liquidity is capped at the new gross.
        """
        if liquidity == 0:
            return
        info = self._get_or_create(tick)
        info.liquidity_gross -= liquidity
        if info.blocked_liquidity_gross > info.liquidity_gross:
            info.blocked_liquidity_gross = info.liquidity_gross
        if info.liquidity_gross == 0:
            logger.warning("tick_gross_liquidity_drained", tick=tick)


__all__ = ["TickLedger", "tick_spacing_to_max_liquidity_per_tick"]
