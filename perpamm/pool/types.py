"""Data types for pool state, operation parameters and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator

from perpamm.constants import ZERO_SALT
from perpamm.errors import InvalidPositionSize
from perpamm.safe_int import wrapping_add, wrapping_sub

# 20-byte hex address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]


def normalize_address(address: str) -> str:
    """Normalize an address to lowercase for consistent comparison."""
    return address.lower()


class GrowthKind(str, Enum):
    """Which per-liquidity accumulator a growth value belongs to."""

    FEE = "fee"
    LOSS = "loss"  # trader losses, LP profit
    GAIN = "gain"  # trader gains, LP cost


@dataclass(frozen=True)
class GrowthPair:
    """Q128 growth values for token0 and token1, modulo 2**256."""

    token0: int = 0
    token1: int = 0

    def wrapping_add(self, other: GrowthPair) -> GrowthPair:
        return GrowthPair(
            wrapping_add(self.token0, other.token0),
            wrapping_add(self.token1, other.token1),
        )

    def wrapping_sub(self, other: GrowthPair) -> GrowthPair:
        return GrowthPair(
            wrapping_sub(self.token0, other.token0),
            wrapping_sub(self.token1, other.token1),
        )


@dataclass(frozen=True)
class ProtocolFee:
    """Protocol fee in pips, set independently per swap direction."""

    zero_for_one: int = 0
    one_for_zero: int = 0

    def for_direction(self, zero_for_one: bool) -> int:
        return self.zero_for_one if zero_for_one else self.one_for_zero


@dataclass
class Slot0:
    """Current price state of a pool.

    sqrt_price_x96 is zero until the pool is initialized. tick is the
    greatest tick whose price is <= the current price.
    """

    sqrt_price_x96: int = 0
    tick: int = 0
    protocol_fee: ProtocolFee = field(default_factory=ProtocolFee)
    lp_fee: int = 0

    @property
    def is_initialized(self) -> bool:
        return self.sqrt_price_x96 != 0


@dataclass
class TickInfo:
    """Per-tick ledger entry.

    Growth-outside values are only meaningful while liquidity_gross is
    non-zero; the entry is deleted when the tick is cleared.
    """

    liquidity_gross: int = 0
    # Subset of liquidity_gross reserved for open leveraged positions
    blocked_liquidity_gross: int = 0
    # Added to active liquidity when the tick is crossed left to right
    liquidity_net: int = 0
    fee_growth_outside: GrowthPair = GrowthPair()
    loss_growth_outside: GrowthPair = GrowthPair()
    gain_growth_outside: GrowthPair = GrowthPair()

    @property
    def available_liquidity(self) -> int:
        """Gross liquidity not reserved by blocking."""
        return self.liquidity_gross - self.blocked_liquidity_gross

    @property
    def is_initialized(self) -> bool:
        return self.liquidity_gross != 0

    def growth_outside(self, kind: GrowthKind) -> GrowthPair:
        return getattr(self, f"{kind.value}_growth_outside")

    def set_growth_outside(self, kind: GrowthKind, value: GrowthPair) -> None:
        setattr(self, f"{kind.value}_growth_outside", value)


@dataclass(frozen=True)
class BalanceDelta:
    """Signed token amounts from the pool's perspective.

    Positive: owed by the caller to the pool. Negative: owed by the pool to
    the caller.
    """

    amount0: int = 0
    amount1: int = 0


ZERO_DELTA = BalanceDelta()


class ModifyLiquidityParams(BaseModel):
    """Arguments for adding or removing liquidity in a range.

    Tick ordering and bounds are checked by the pool so that the failure
    surfaces as a ledger error; this model only enforces shapes.
    """

    model_config = ConfigDict(frozen=True)

    owner: Address
    tick_lower: StrictInt
    tick_upper: StrictInt
    liquidity_delta: StrictInt
    tick_spacing: StrictInt = Field(ge=1)
    salt: bytes = ZERO_SALT

    @field_validator("owner")
    @classmethod
    def _normalize_owner(cls, value: str) -> str:
        return normalize_address(value)

    @field_validator("salt")
    @classmethod
    def _check_salt(cls, value: bytes) -> bytes:
        if len(value) != 32:
            raise ValueError(f"salt must be 32 bytes, got {len(value)}")
        return value


class SwapParams(BaseModel):
    """Arguments for a swap.

    amount_specified is negative for exact input and positive for exact
    output. lp_fee_override, when set, replaces the stored LP fee for this
    swap only.
    """

    model_config = ConfigDict(frozen=True)

    amount_specified: StrictInt
    zero_for_one: StrictBool
    sqrt_price_limit_x96: StrictInt
    tick_spacing: StrictInt = Field(ge=1)
    lp_fee_override: StrictInt | None = None

    @property
    def is_exact_input(self) -> bool:
        return self.amount_specified < 0


@dataclass(frozen=True)
class PerpPosition:
    """Notional of a leveraged position, collateral * leverage."""

    collateral: int
    leverage: int

    def __post_init__(self) -> None:
        if self.collateral <= 0:
            raise InvalidPositionSize(f"Collateral must be positive: {self.collateral}")
        if self.leverage <= 0:
            raise InvalidPositionSize(f"Leverage must be positive: {self.leverage}")

    @property
    def size(self) -> int:
        return self.collateral * self.leverage


@dataclass(frozen=True)
class ModifyLiquidityResult:
    """Result of a liquidity modification.

    Attributes:
        delta: Principal owed by (positive) or to (negative) the caller
        fee_delta: Fees owed to the position owner
        loss_gain_delta: Loss growth owed minus gain growth charged, per token
    """

    delta: BalanceDelta
    fee_delta: BalanceDelta
    loss_gain_delta: BalanceDelta


@dataclass(frozen=True)
class SwapResult:
    """Result of a swap.

    Attributes:
        delta: Net balance delta, negative components are paid out by the pool
        amount_to_protocol: Protocol fee skimmed, in the input token
        swap_fee: Fee rate used, in pips
        sqrt_price_x96: Price after the swap
        tick: Tick after the swap
        liquidity: Active liquidity after the swap
    """

    delta: BalanceDelta
    amount_to_protocol: int
    swap_fee: int
    sqrt_price_x96: int
    tick: int
    liquidity: int


__all__ = [
    "Address",
    "normalize_address",
    "GrowthKind",
    "GrowthPair",
    "ProtocolFee",
    "Slot0",
    "TickInfo",
    "BalanceDelta",
    "ZERO_DELTA",
    "ModifyLiquidityParams",
    "SwapParams",
    "PerpPosition",
    "ModifyLiquidityResult",
    "SwapResult",
]
