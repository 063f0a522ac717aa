#!/usr/bin/env python3
"""CLI script for running a scripted scenario against an in-memory pool.

Usage:
    # 1:1 pool, one LP over [-120, 120), two swaps
    python scripts/simulate_pool.py --swap 0:1e17 --swap 1:5e16

    # Open a 10x leveraged position after the swaps and settle a loss
    python scripts/simulate_pool.py --swap 1:1e17 --position 1e16:10 --loss 1e15
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from perpamm.constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, Q96  # noqa: E402
from perpamm.errors import PoolError  # noqa: E402
from perpamm.pool.types import PerpPosition, ProtocolFee  # noqa: E402
from perpamm.pools import PoolKey, PoolManager  # noqa: E402
from perpamm.safe_int import SafeIntError  # noqa: E402

logger = structlog.get_logger()

LP = "0x000000000000000000000000000000000000a11c"
BACKER = "0x000000000000000000000000000000000000b0b0"
CURRENCY0 = "0x0000000000000000000000000000000000000001"
CURRENCY1 = "0x0000000000000000000000000000000000000002"


def parse_amount(value: str) -> int:
    """Parse an integer amount, accepting scientific notation like 1.5e17."""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if not amount.is_finite() or amount != amount.to_integral_value():
        raise argparse.ArgumentTypeError(f"amount must be a whole number: {value}")
    return int(amount)


def parse_swap(value: str) -> tuple[bool, int]:
    """Parse DIRECTION:AMOUNT, where DIRECTION 0 sells token0 and 1 sells token1."""
    direction, amount = value.split(":")
    if direction not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"direction must be 0 or 1, got {direction}")
    return direction == "0", parse_amount(amount)


def parse_position(value: str) -> PerpPosition:
    collateral, leverage = value.split(":")
    return PerpPosition(collateral=parse_amount(collateral), leverage=int(leverage))


def run(args: argparse.Namespace) -> None:
    manager = PoolManager()
    key = PoolKey(
        currency0=CURRENCY0,
        currency1=CURRENCY1,
        fee=args.fee,
        tick_spacing=args.tick_spacing,
    )

    tick = manager.initialize(key, Q96)
    print(f"Initialized 1:1 pool at tick {tick}")
    if args.protocol_fee:
        manager.set_protocol_fee(key, ProtocolFee(args.protocol_fee, args.protocol_fee))

    tick_lower, tick_upper = -args.range, args.range
    result = manager.modify_liquidity(key, LP, tick_lower, tick_upper, args.liquidity)
    print(
        f"Added {args.liquidity} liquidity over [{tick_lower}, {tick_upper}): "
        f"owes {result.delta.amount0} token0, {result.delta.amount1} token1"
    )

    for zero_for_one, amount in args.swap:
        limit = MIN_SQRT_PRICE + 1 if zero_for_one else MAX_SQRT_PRICE - 1
        swap = manager.swap(key, -amount, zero_for_one, limit)
        print(
            f"Swap {'0->1' if zero_for_one else '1->0'} {amount}: "
            f"delta ({swap.delta.amount0}, {swap.delta.amount1}), "
            f"tick {swap.tick}, protocol {swap.amount_to_protocol}"
        )

    if args.position is not None:
        # blocking draws on liquidity bounded by the current tick range
        backing_lower, backing_upper = manager.get_pool(key).current_tick_range(key.tick_spacing)
        manager.modify_liquidity(key, BACKER, backing_lower, backing_upper, args.liquidity)
        print(f"Backer added {args.liquidity} liquidity over [{backing_lower}, {backing_upper})")

        liquidity, block_lower, block_upper = manager.block_for_position(key, args.position)
        print(
            f"Blocked {liquidity} liquidity over [{block_lower}, {block_upper}) "
            f"for size {args.position.size}"
        )
        if args.loss:
            manager.update_loss_growth_on_liquidation_or_loss(
                key, args.loss, args.loss, block_lower, block_upper
            )
            print(f"Distributed trader loss of {args.loss} per token")
        manager.unblock_liquidity(key, -liquidity, block_lower, block_upper)

    result = manager.modify_liquidity(key, LP, tick_lower, tick_upper, -args.liquidity)
    print(
        f"Removed liquidity: principal ({result.delta.amount0}, {result.delta.amount1}), "
        f"fees ({result.fee_delta.amount0}, {result.fee_delta.amount1}), "
        f"loss-gain ({result.loss_gain_delta.amount0}, {result.loss_gain_delta.amount1})"
    )
    for currency, amount in sorted(manager.protocol_fees_accrued.items()):
        print(f"Protocol fees accrued in {currency}: {amount}")


def main() -> int:
    """Main entry point for the pool simulation."""
    parser = argparse.ArgumentParser(
        description="Run a scripted scenario against an in-memory perpamm pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/simulate_pool.py --swap 0:1e17
  python scripts/simulate_pool.py --fee 500 --protocol-fee 100 --swap 1:1e18 -v
        """,
    )
    parser.add_argument(
        "--liquidity",
        type=parse_amount,
        default=10**20,
        help="Liquidity added by the LP (default: 1e20)",
    )
    parser.add_argument(
        "--range",
        type=int,
        default=120,
        help="LP range is [-RANGE, RANGE) in ticks (default: 120)",
    )
    parser.add_argument("--fee", type=int, default=3000, help="LP fee in pips (default: 3000)")
    parser.add_argument("--tick-spacing", type=int, default=60, help="Tick spacing (default: 60)")
    parser.add_argument(
        "--protocol-fee",
        type=int,
        default=0,
        help="Protocol fee in pips for both directions (default: 0)",
    )
    parser.add_argument(
        "--swap",
        type=parse_swap,
        action="append",
        default=[],
        help="Exact-input swap as DIRECTION:AMOUNT (repeatable)",
    )
    parser.add_argument(
        "--position",
        type=parse_position,
        default=None,
        help="Leveraged position as COLLATERAL:LEVERAGE to block liquidity for",
    )
    parser.add_argument(
        "--loss",
        type=parse_amount,
        default=0,
        help="Trader loss per token distributed to the LP range after blocking",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    try:
        run(args)
    except (PoolError, SafeIntError) as e:
        logger.error("simulation_failed", error_type=type(e).__name__, error=str(e))
        print(f"Error: {type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
