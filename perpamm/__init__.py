"""Concentrated-liquidity AMM ledger with perpetual settlement."""

from perpamm.config import DEFAULT_POOL_MANAGER_CONFIG, PoolManagerConfig
from perpamm.errors import PoolError
from perpamm.pool import PoolState
from perpamm.pools import PoolKey, PoolManager

__version__ = "0.1.0"
__all__ = [
    "PoolState",
    "PoolKey",
    "PoolManager",
    "PoolManagerConfig",
    "DEFAULT_POOL_MANAGER_CONFIG",
    "PoolError",
    "__version__",
]
