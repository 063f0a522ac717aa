"""Conversion between ticks and Q64.96 square-root prices.

sqrt_price(tick) = sqrt(1.0001 ** tick) * 2**96, computed with the same
fixed-point constants as the on-chain TickMath library so results match bit
for bit.
"""

from __future__ import annotations

from perpamm.constants import (
    MAX_SQRT_PRICE,
    MAX_TICK,
    MAX_UINT256,
    MIN_SQRT_PRICE,
    MIN_TICK,
)
from perpamm.errors import InvalidSqrtPrice, InvalidTick

# sqrt(1.0001 ** -(2 ** i)) in Q128.128 for i = 0..19
_RATIOS = (
    0xFFFCB933BD6FAD37AA2D162D1A594001,
    0xFFF97272373D413259A46990580E213A,
    0xFFF2E50F5F656932EF12357CF3C7FDCC,
    0xFFE5CACA7E10E4E61C3624EAA0941CD0,
    0xFFCB9843D60F6159C9DB58835C926644,
    0xFF973B41FA98C081472E6896DFB254C0,
    0xFF2EA16466C96A3843EC78B326B52861,
    0xFE5DEE046A99A2A811C461F1969C3053,
    0xFCBE86C7900A88AEDCFFC83B479AA3A4,
    0xF987A7253AC413176F2B074CF7815E54,
    0xF3392B0822B70005940C7A398E4B70F3,
    0xE7159475A2C29B7443B29C7FA6E889D9,
    0xD097F3BDFD2022B8845AD8F792AA5825,
    0xA9F746462D870FDF8A65DC1F90E061E5,
    0x70D869A156D2A1B890BB3DF62BAF32F7,
    0x31BE135F97D08FD981231505542FCFA6,
    0x9AA508B5B7A84E1C677DE54F3E99BC9,
    0x5D6AF8DEDB81196699C329225EE604,
    0x2216E584F5FA1EA926041BEDFE98,
    0x48A170391F7DC42444E8FA2,
)


def get_sqrt_price_at_tick(tick: int) -> int:
    """Calculate sqrt(1.0001 ** tick) * 2**96.

    Args:
        tick: Tick index in [MIN_TICK, MAX_TICK]

    Returns:
        Q64.96 square-root price, rounded up

    Raises:
        InvalidTick: If tick is out of range
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidTick(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = abs(tick)
    ratio = _RATIOS[0] if abs_tick & 0x1 else 1 << 128
    for i in range(1, len(_RATIOS)):
        if abs_tick & (1 << i):
            ratio = (ratio * _RATIOS[i]) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up so that tick_at(sqrt_at(tick)) == tick
    return (ratio >> 32) + (1 if ratio & 0xFFFFFFFF else 0)


def get_tick_at_sqrt_price(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt price is <= sqrt_price_x96.

    Binary search over the monotonic get_sqrt_price_at_tick keeps this exact
    without a log2 approximation.

    Raises:
        InvalidSqrtPrice: If the price is outside [MIN_SQRT_PRICE, MAX_SQRT_PRICE)
    """
    if sqrt_price_x96 < MIN_SQRT_PRICE or sqrt_price_x96 >= MAX_SQRT_PRICE:
        raise InvalidSqrtPrice(f"sqrt price {sqrt_price_x96} outside valid domain")

    lo, hi = MIN_TICK, MAX_TICK - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if get_sqrt_price_at_tick(mid) <= sqrt_price_x96:
            lo = mid
        else:
            hi = mid - 1
    return lo


__all__ = ["get_sqrt_price_at_tick", "get_tick_at_sqrt_price"]
