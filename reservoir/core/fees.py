"""
Fee splitting (deterministic, integer-only).

A fee charged on top of a cost is ``floor(cost * fee_bps / 10_000)``. A fee taken
out of a gross input floors the net part instead, so the protocol keeps the
rounding remainder and the net amount that enters pricing is never overstated.

Where the fee goes is the caller's concern:
- CP-AMM swaps keep it inside the input reserve (it is never priced).
- LMSR purchases route it to the market treasury, on top of the cost.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..checked import BPS_DENOM, checked_add, checked_sub, mul_div_floor, require_bps, require_int


@dataclass(frozen=True)
class FeeSplitResult:
    gross_amount: int
    fee_amount: int
    net_amount: int

    def __post_init__(self) -> None:
        for name, v in (
            ("gross_amount", self.gross_amount),
            ("fee_amount", self.fee_amount),
            ("net_amount", self.net_amount),
        ):
            require_int(name, v)
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.fee_amount + self.net_amount != self.gross_amount:
            raise ValueError("fee_amount + net_amount must equal gross_amount")


def compute_fee(amount: int, fee_bps: int) -> int:
    """``floor(amount * fee_bps / 10_000)``; the product is checked in u128."""
    require_int("amount", amount)
    require_bps("fee_bps", fee_bps)
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    return mul_div_floor(amount, fee_bps, BPS_DENOM)


def split_gross(gross_amount: int, fee_bps: int) -> FeeSplitResult:
    """
    Partition a gross input into (fee, net).

    Used for fee-on-input trades: ``net = floor(gross * (10_000 - fee_bps) / 10_000)``,
    i.e. ``gross - ceil(gross * fee_bps / 10_000)``. The fee rounds up, so it can
    exceed ``compute_fee(gross)`` by one unit.
    """
    require_int("gross_amount", gross_amount)
    require_bps("fee_bps", fee_bps)
    if gross_amount < 0:
        raise ValueError(f"gross_amount must be non-negative: {gross_amount}")
    net = mul_div_floor(gross_amount, BPS_DENOM - fee_bps, BPS_DENOM)
    fee = checked_sub(gross_amount, net)
    return FeeSplitResult(gross_amount=gross_amount, fee_amount=fee, net_amount=net)


def add_fee(net_amount: int, fee_bps: int) -> FeeSplitResult:
    """
    Fee-on-cost: charge ``compute_fee(net_amount)`` on top of a net cost.

    Returns a split whose ``gross_amount`` is the total the payer owes.
    """
    fee = compute_fee(net_amount, fee_bps)
    total = checked_add(net_amount, fee)
    return FeeSplitResult(gross_amount=total, fee_amount=fee, net_amount=net_amount)
