"""Configuration for the pool registry."""

from __future__ import annotations

import os
from dataclasses import dataclass

from perpamm.constants import MAX_TICK_SPACING, MIN_TICK_SPACING


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class PoolManagerConfig:
    """Registry-level settings.

    Attributes:
        min_tick_spacing: Smallest tick spacing a pool key may use
        max_tick_spacing: Largest tick spacing a pool key may use
        warn_on_dropped_fees: Log a warning when a swap step pays fees while
            no liquidity is active to receive them
    """

    min_tick_spacing: int = MIN_TICK_SPACING
    max_tick_spacing: int = MAX_TICK_SPACING
    warn_on_dropped_fees: bool = True

    @classmethod
    def from_env(cls) -> PoolManagerConfig:
        """Build a config from PERPAMM_* environment variables."""
        return cls(
            min_tick_spacing=int(os.environ.get("PERPAMM_MIN_TICK_SPACING", MIN_TICK_SPACING)),
            max_tick_spacing=int(os.environ.get("PERPAMM_MAX_TICK_SPACING", MAX_TICK_SPACING)),
            warn_on_dropped_fees=_env_bool("PERPAMM_WARN_ON_DROPPED_FEES", True),
        )


# Default configuration instance
DEFAULT_POOL_MANAGER_CONFIG = PoolManagerConfig()
