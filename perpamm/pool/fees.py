"""LP and protocol fee validation and composition.

Fees are in pips: 1_000_000 is 100%.
"""

from __future__ import annotations

from perpamm.constants import MAX_LP_FEE, MAX_PROTOCOL_FEE, PIPS_DENOMINATOR
from perpamm.errors import LPFeeTooLarge, ProtocolFeeTooLarge
from perpamm.pool.types import ProtocolFee


def validate_lp_fee(fee: int) -> int:
    """Return fee if it is a valid LP fee.

    Raises:
        LPFeeTooLarge: If fee is negative or above MAX_LP_FEE
    """
    if fee < 0 or fee > MAX_LP_FEE:
        raise LPFeeTooLarge(f"LP fee {fee} outside [0, {MAX_LP_FEE}]")
    return fee


def validate_protocol_fee(fee: ProtocolFee) -> ProtocolFee:
    """Return fee if both directions are within MAX_PROTOCOL_FEE.

    Raises:
        ProtocolFeeTooLarge: If either direction is out of range
    """
    for value in (fee.zero_for_one, fee.one_for_zero):
        if value < 0 or value > MAX_PROTOCOL_FEE:
            raise ProtocolFeeTooLarge(f"Protocol fee {value} outside [0, {MAX_PROTOCOL_FEE}]")
    return fee


def calculate_swap_fee(protocol_fee: int, lp_fee: int) -> int:
    """Total fee charged on swap input.

    The protocol fee is taken first and the LP fee applies to what remains:
    protocol + lp - protocol * lp / 1e6, rounded down.
    """
    return protocol_fee + lp_fee - protocol_fee * lp_fee // PIPS_DENOMINATOR


__all__ = ["validate_lp_fee", "validate_protocol_fee", "calculate_swap_fee"]
