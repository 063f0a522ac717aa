"""Single-pool ledger.

Provides PoolState and the tick, bitmap and position ledgers it is built on.
"""

from .fees import calculate_swap_fee, validate_lp_fee, validate_protocol_fee
from .positions import PositionLedger, PositionState, position_key
from .state import PoolState, check_ticks
from .tick_bitmap import TickBitmap
from .ticks import TickLedger, tick_spacing_to_max_liquidity_per_tick
from .types import (
    ZERO_DELTA,
    BalanceDelta,
    GrowthKind,
    GrowthPair,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    PerpPosition,
    ProtocolFee,
    Slot0,
    SwapParams,
    SwapResult,
    TickInfo,
)

__all__ = [
    "PoolState",
    "check_ticks",
    "TickLedger",
    "TickBitmap",
    "tick_spacing_to_max_liquidity_per_tick",
    "PositionLedger",
    "PositionState",
    "position_key",
    "calculate_swap_fee",
    "validate_lp_fee",
    "validate_protocol_fee",
    "BalanceDelta",
    "ZERO_DELTA",
    "GrowthKind",
    "GrowthPair",
    "ModifyLiquidityParams",
    "ModifyLiquidityResult",
    "PerpPosition",
    "ProtocolFee",
    "Slot0",
    "SwapParams",
    "SwapResult",
    "TickInfo",
]
