"""Position ledger: liquidity per (owner, range, salt) and owed growth."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass

from perpamm.constants import Q128
from perpamm.errors import CannotUpdateEmptyPosition
from perpamm.math.full_math import mul_div
from perpamm.pool.types import GrowthPair
from perpamm.safe_int import add_delta


def position_key(owner: str, tick_lower: int, tick_upper: int, salt: bytes) -> bytes:
    """Derive the ledger key of a position.

    SHA3-256 over the packed 20-byte owner, 3-byte signed ticks and 32-byte
    salt. Every field has a fixed width, so the encoding is unambiguous and
    the key depends on argument order.
    """
    packed = (
        bytes.fromhex(owner[2:])
        + tick_lower.to_bytes(3, "big", signed=True)
        + tick_upper.to_bytes(3, "big", signed=True)
        + salt
    )
    return hashlib.sha3_256(packed).digest()


def _owed(growth_inside: GrowthPair, last: GrowthPair, liquidity: int) -> tuple[int, int]:
    delta = growth_inside.wrapping_sub(last)
    return (
        mul_div(delta.token0, liquidity, Q128),
        mul_div(delta.token1, liquidity, Q128),
    )


@dataclass
class PositionState:
    """Liquidity of one position and its last recorded growth-inside values."""

    liquidity: int = 0
    fee_growth_inside_last: GrowthPair = GrowthPair()
    loss_growth_inside_last: GrowthPair = GrowthPair()
    gain_growth_inside_last: GrowthPair = GrowthPair()

    def update(
        self,
        liquidity_delta: int,
        fee_growth_inside0_x128: int,
        fee_growth_inside1_x128: int,
    ) -> tuple[int, int]:
        """Apply a liquidity delta and settle fees earned since the last touch.

        Fees are computed on the liquidity held before this update.

        Returns:
            (fees_owed0, fees_owed1)

        Raises:
            CannotUpdateEmptyPosition: On a zero-delta update of an empty position
            LiquidityUnderflow: If more liquidity is removed than held
        """
        liquidity = self.liquidity

        if liquidity_delta == 0:
            if liquidity == 0:
                raise CannotUpdateEmptyPosition("Cannot poke a position with zero liquidity")
        else:
            self.liquidity = add_delta(liquidity, liquidity_delta)

        fee_growth_inside = GrowthPair(fee_growth_inside0_x128, fee_growth_inside1_x128)
        fees_owed = _owed(fee_growth_inside, self.fee_growth_inside_last, liquidity)
        self.fee_growth_inside_last = fee_growth_inside
        return fees_owed

    def update_loss_and_gain_growth(
        self,
        loss_growth_inside0_x128: int,
        loss_growth_inside1_x128: int,
        gain_growth_inside0_x128: int,
        gain_growth_inside1_x128: int,
    ) -> tuple[int, int, int, int]:
        """Settle loss and gain growth since the last touch.

        Uses the current liquidity and leaves it unchanged, so it must run
        before update() within one liquidity modification.

        Returns:
            (loss_owed0, loss_owed1, gain_owed0, gain_owed1)
        """
        loss_inside = GrowthPair(loss_growth_inside0_x128, loss_growth_inside1_x128)
        gain_inside = GrowthPair(gain_growth_inside0_x128, gain_growth_inside1_x128)

        loss_owed0, loss_owed1 = _owed(loss_inside, self.loss_growth_inside_last, self.liquidity)
        gain_owed0, gain_owed1 = _owed(gain_inside, self.gain_growth_inside_last, self.liquidity)

        self.loss_growth_inside_last = loss_inside
        self.gain_growth_inside_last = gain_inside
        return loss_owed0, loss_owed1, gain_owed0, gain_owed1


class PositionLedger:
    """Positions keyed by position_key, materialized on first lookup."""

    def __init__(self) -> None:
        self._positions: dict[bytes, PositionState] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._positions)

    def __repr__(self) -> str:
        return f"PositionLedger(positions={len(self._positions)})"

    def get(self, owner: str, tick_lower: int, tick_upper: int, salt: bytes) -> PositionState:
        """Position for the given identity, inserting an empty one if absent."""
        key = position_key(owner, tick_lower, tick_upper, salt)
        return self._positions.setdefault(key, PositionState())

    def peek(self, owner: str, tick_lower: int, tick_upper: int, salt: bytes) -> PositionState:
        """Read-only lookup; absent positions read as empty without insertion."""
        key = position_key(owner, tick_lower, tick_upper, salt)
        position = self._positions.get(key)
        return position if position is not None else PositionState()


__all__ = ["position_key", "PositionState", "PositionLedger"]
