"""Pytest configuration and fixtures."""

import pytest

from perpamm.config import PoolManagerConfig
from perpamm.pool import PoolState
from perpamm.pools import PoolKey, PoolManager
from tests.helpers import (
    LIQUIDITY,
    SQRT_PRICE_1_1,
    add_liquidity,
    make_pool,
    make_pool_key,
)


@pytest.fixture
def pool() -> PoolState:
    """An initialized 1:1 pool with zero LP fee and no liquidity."""
    return make_pool()


@pytest.fixture
def pool_with_liquidity() -> PoolState:
    """A 1:1 pool with LIQUIDITY over [-120, 120) at spacing 60."""
    pool = make_pool()
    add_liquidity(pool, -120, 120, LIQUIDITY)
    return pool


@pytest.fixture
def pool_key() -> PoolKey:
    """USDC/WETH key with a 0.3% fee and spacing 60."""
    return make_pool_key()


@pytest.fixture
def manager() -> PoolManager:
    """An empty registry with the default config."""
    return PoolManager(PoolManagerConfig())


@pytest.fixture
def initialized_manager(manager: PoolManager, pool_key: PoolKey) -> PoolManager:
    """A registry holding the pool_key pool initialized at price 1."""
    manager.initialize(pool_key, SQRT_PRICE_1_1)
    return manager
