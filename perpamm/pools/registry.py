"""Pool registry keyed by pool id.

PoolManager owns every PoolState, serializes calls per pool with a lock and
accrues the protocol fees skimmed by swaps. It holds no settlement logic:
balance deltas are returned to the caller as produced by the pool.
"""

from __future__ import annotations

import hashlib
import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from perpamm.config import DEFAULT_POOL_MANAGER_CONFIG, PoolManagerConfig
from perpamm.constants import ZERO_SALT
from perpamm.errors import (
    CurrenciesOutOfOrder,
    PoolAlreadyInitialized,
    PoolNotFound,
    SwapAmountCannotBeZero,
    TickSpacingTooLarge,
    TickSpacingTooSmall,
)
from perpamm.pool.fees import validate_lp_fee
from perpamm.pool.state import PoolState
from perpamm.pool.types import (
    Address,
    BalanceDelta,
    GrowthPair,
    ModifyLiquidityParams,
    ModifyLiquidityResult,
    PerpPosition,
    ProtocolFee,
    Slot0,
    SwapParams,
    SwapResult,
    normalize_address,
)

logger = structlog.get_logger()


class PoolKey(BaseModel):
    """Identity of a pool: currency pair, static LP fee and tick spacing.

    Ordering of the currencies and the tick spacing range are checked when
    the pool is registered, so that they surface as ledger errors.
    """

    model_config = ConfigDict(frozen=True)

    currency0: Address
    currency1: Address
    fee: StrictInt = Field(ge=0)
    tick_spacing: StrictInt

    @field_validator("currency0", "currency1")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return normalize_address(value)

    @property
    def pool_id(self) -> bytes:
        """SHA3-256 digest of the packed key."""
        packed = (
            bytes.fromhex(self.currency0[2:])
            + bytes.fromhex(self.currency1[2:])
            + self.fee.to_bytes(3, "big")
            + self.tick_spacing.to_bytes(3, "big", signed=True)
        )
        return hashlib.sha3_256(packed).digest()


class PoolManager:
    """Registry of pools with per-pool serialization.

    Every operation on a pool runs while holding that pool's lock; calls on
    different pools may run concurrently.
    """

    def __init__(self, config: PoolManagerConfig = DEFAULT_POOL_MANAGER_CONFIG) -> None:
        self.config = config
        self._pools: dict[bytes, PoolState] = {}
        self._locks: dict[bytes, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        # Protocol fees skimmed by swaps, per currency
        self.protocol_fees_accrued: defaultdict[str, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, PoolKey) and key.pool_id in self._pools

    def _validate_key(self, key: PoolKey) -> None:
        if key.tick_spacing < self.config.min_tick_spacing:
            raise TickSpacingTooSmall(
                f"Tick spacing {key.tick_spacing} < {self.config.min_tick_spacing}"
            )
        if key.tick_spacing > self.config.max_tick_spacing:
            raise TickSpacingTooLarge(
                f"Tick spacing {key.tick_spacing} > {self.config.max_tick_spacing}"
            )
        if key.currency0 >= key.currency1:
            raise CurrenciesOutOfOrder(f"{key.currency0} is not below {key.currency1}")
        validate_lp_fee(key.fee)

    @contextmanager
    def _locked(self, key: PoolKey) -> Iterator[PoolState]:
        pool_id = key.pool_id
        with self._registry_lock:
            pool = self._pools.get(pool_id)
            lock = self._locks.get(pool_id)
        if pool is None or lock is None:
            raise PoolNotFound(f"No pool with id 0x{pool_id.hex()}")
        with lock:
            yield pool

    def initialize(self, key: PoolKey, sqrt_price_x96: int) -> int:
        """Register and initialize a pool at a starting price.

        Returns:
            The starting tick

        Raises:
            TickSpacingTooSmall, TickSpacingTooLarge: spacing outside config
            CurrenciesOutOfOrder: If currency0 >= currency1
            PoolAlreadyInitialized: If the key is already registered
        """
        self._validate_key(key)
        pool_id = key.pool_id

        with self._registry_lock:
            if pool_id in self._pools:
                raise PoolAlreadyInitialized(f"Pool 0x{pool_id.hex()} is already initialized")
            pool = PoolState(warn_on_dropped_fees=self.config.warn_on_dropped_fees)
            tick = pool.initialize(sqrt_price_x96, key.fee)
            self._pools[pool_id] = pool
            self._locks[pool_id] = threading.Lock()

        logger.info(
            "pool_registered",
            pool_id=f"0x{pool_id.hex()}",
            currency0=key.currency0,
            currency1=key.currency1,
            fee=key.fee,
            tick_spacing=key.tick_spacing,
            tick=tick,
        )
        return tick

    def get_pool(self, key: PoolKey) -> PoolState:
        """Pool state for a key. Mutating it bypasses the pool lock."""
        with self._locked(key) as pool:
            return pool

    # --- Liquidity and swaps ---

    def modify_liquidity(
        self,
        key: PoolKey,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
        salt: bytes = ZERO_SALT,
    ) -> ModifyLiquidityResult:
        """Add or remove liquidity for (owner, range, salt) in a pool."""
        params = ModifyLiquidityParams(
            owner=owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity_delta=liquidity_delta,
            tick_spacing=key.tick_spacing,
            salt=salt,
        )
        with self._locked(key) as pool:
            result = pool.modify_liquidity(params)
        logger.info(
            "liquidity_modified",
            pool_id=f"0x{key.pool_id.hex()}",
            owner=params.owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity_delta=liquidity_delta,
        )
        return result

    def swap(
        self,
        key: PoolKey,
        amount_specified: int,
        zero_for_one: bool,
        sqrt_price_limit_x96: int,
        lp_fee_override: int | None = None,
    ) -> SwapResult:
        """Swap against a pool.

        Raises:
            SwapAmountCannotBeZero: If amount_specified is zero
        """
        if amount_specified == 0:
            raise SwapAmountCannotBeZero("Swap amount cannot be zero")

        params = SwapParams(
            amount_specified=amount_specified,
            zero_for_one=zero_for_one,
            sqrt_price_limit_x96=sqrt_price_limit_x96,
            tick_spacing=key.tick_spacing,
            lp_fee_override=lp_fee_override,
        )
        with self._locked(key) as pool:
            result = pool.swap(params)

        if result.amount_to_protocol > 0:
            currency_in = key.currency0 if zero_for_one else key.currency1
            with self._registry_lock:
                self.protocol_fees_accrued[currency_in] += result.amount_to_protocol

        logger.info(
            "swap",
            pool_id=f"0x{key.pool_id.hex()}",
            zero_for_one=zero_for_one,
            amount0=result.delta.amount0,
            amount1=result.delta.amount1,
            tick=result.tick,
        )
        return result

    def donate(self, key: PoolKey, amount0: int, amount1: int) -> BalanceDelta:
        with self._locked(key) as pool:
            return pool.donate(amount0, amount1)

    def set_protocol_fee(self, key: PoolKey, protocol_fee: ProtocolFee) -> None:
        with self._locked(key) as pool:
            pool.set_protocol_fee(protocol_fee)
        logger.info(
            "protocol_fee_set",
            pool_id=f"0x{key.pool_id.hex()}",
            zero_for_one=protocol_fee.zero_for_one,
            one_for_zero=protocol_fee.one_for_zero,
        )

    def set_lp_fee(self, key: PoolKey, lp_fee: int) -> None:
        with self._locked(key) as pool:
            pool.set_lp_fee(lp_fee)
        logger.info("lp_fee_set", pool_id=f"0x{key.pool_id.hex()}", lp_fee=lp_fee)

    # --- Perpetual settlement ---

    def block_liquidity(self, key: PoolKey, liquidity_delta: int) -> tuple[int, int]:
        with self._locked(key) as pool:
            return pool.block_liquidity(liquidity_delta, key.tick_spacing)

    def unblock_liquidity(
        self,
        key: PoolKey,
        liquidity_delta: int,
        tick_lower: int,
        tick_upper: int,
    ) -> None:
        with self._locked(key) as pool:
            pool.unblock_liquidity(liquidity_delta, tick_lower, tick_upper)

    def calculate_liquidity_delta(self, key: PoolKey, position_size: int) -> int:
        with self._locked(key) as pool:
            return pool.calculate_liquidity_delta(position_size, key.tick_spacing)

    def block_for_position(self, key: PoolKey, position: PerpPosition) -> tuple[int, int, int]:
        """Block the liquidity backing a leveraged position around the price.

        Sizing and blocking happen under one lock acquisition, so the range
        cannot move in between.

        Returns:
            (liquidity, tick_lower, tick_upper)
        """
        with self._locked(key) as pool:
            liquidity = pool.calculate_liquidity_delta(position.size, key.tick_spacing)
            tick_lower, tick_upper = pool.block_liquidity(liquidity, key.tick_spacing)
        return liquidity, tick_lower, tick_upper

    def update_from_trader_profit(
        self,
        key: PoolKey,
        profit0: int,
        profit1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> int:
        with self._locked(key) as pool:
            return pool.update_from_trader_profit(profit0, profit1, tick_lower, tick_upper)

    def update_loss_growth_on_liquidation_or_loss(
        self,
        key: PoolKey,
        loss0: int,
        loss1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> GrowthPair:
        with self._locked(key) as pool:
            return pool.update_loss_growth_on_liquidation_or_loss(
                loss0, loss1, tick_lower, tick_upper
            )

    def update_gain_growth_on_profit(
        self,
        key: PoolKey,
        gain0: int,
        gain1: int,
        tick_lower: int,
        tick_upper: int,
    ) -> GrowthPair:
        with self._locked(key) as pool:
            return pool.update_gain_growth_on_profit(gain0, gain1, tick_lower, tick_upper)

    # --- Read accessors ---

    def get_slot0(self, key: PoolKey) -> Slot0:
        """Snapshot of the pool's Slot0."""
        with self._locked(key) as pool:
            return replace(pool.slot0)

    def get_liquidity(self, key: PoolKey) -> int:
        with self._locked(key) as pool:
            return pool.liquidity

    def get_position_liquidity(
        self,
        key: PoolKey,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        salt: bytes = ZERO_SALT,
    ) -> int:
        with self._locked(key) as pool:
            return pool.get_position_liquidity(owner, tick_lower, tick_upper, salt)


__all__ = ["PoolKey", "PoolManager"]
