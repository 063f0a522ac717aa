"""Pool management package.

Provides PoolManager for registering pools by PoolKey and running
operations against them.
"""

from .registry import PoolKey, PoolManager

__all__ = ["PoolKey", "PoolManager"]
