"""Protocol constants for the perpamm pool ledger.

Centralizes tick and price bounds, fixed-point resolutions and fee limits.
"""

# Fixed-point resolutions
RESOLUTION_96 = 96
Q96 = 1 << RESOLUTION_96
RESOLUTION_128 = 128
Q128 = 1 << RESOLUTION_128

# Integer widths
MAX_UINT128 = 2**128 - 1
MAX_UINT160 = 2**160 - 1
MAX_UINT256 = 2**256 - 1
MIN_INT128 = -(2**127)
MAX_INT128 = 2**127 - 1
MIN_INT256 = -(2**255)
MAX_INT256 = 2**255 - 1

# Tick bounds: log base sqrt(1.0001) of 2**-128 and 2**128
MIN_TICK = -887272
MAX_TICK = 887272

# sqrt price at MIN_TICK and MAX_TICK (Q64.96)
MIN_SQRT_PRICE = 4295128739
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342

# Tick spacing limits for pool keys
MIN_TICK_SPACING = 1
MAX_TICK_SPACING = 32767

# Fees in pips (hundredths of a basis point): 1_000_000 = 100%
PIPS_DENOMINATOR = 1_000_000
MAX_LP_FEE = 1_000_000
MAX_SWAP_FEE = 1_000_000
# Per-direction protocol fee cap (0.1%)
MAX_PROTOCOL_FEE = 1000

# 32 zero bytes, the default position salt
ZERO_SALT = bytes(32)

__all__ = [
    "RESOLUTION_96",
    "Q96",
    "RESOLUTION_128",
    "Q128",
    "MAX_UINT128",
    "MAX_UINT160",
    "MAX_UINT256",
    "MIN_INT128",
    "MAX_INT128",
    "MIN_INT256",
    "MAX_INT256",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "MIN_TICK_SPACING",
    "MAX_TICK_SPACING",
    "PIPS_DENOMINATOR",
    "MAX_LP_FEE",
    "MAX_SWAP_FEE",
    "MAX_PROTOCOL_FEE",
    "ZERO_SALT",
]
