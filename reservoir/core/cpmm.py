"""
Constant Product Market Maker (CPMM) math.

Pure, integer-only functions with deterministic rounding. Reserves and
amounts are u64; products (k, share-weighted reserves) are evaluated in u128.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per operation
- Invariant: After each swap, (x + amount_in) * (y - amount_out) >= x * y
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

from ..checked import (
    U64_MAX,
    checked_add,
    checked_ceil_div,
    checked_div,
    checked_mul,
    checked_sub,
    mul_div_ceil,
    mul_div_floor,
    require_bps,
    require_int,
)
from ..errors import InvalidAmountError, MathError, PoolStateError
from ..state.balances import Amount
from .fees import split_gross


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    fee_amount: int
    net_in: int
    amount_out: int
    k_before: int
    new_reserve_in: int
    new_reserve_out: int

    @property
    def k_after(self) -> int:
        return self.new_reserve_in * self.new_reserve_out


@dataclass(frozen=True)
class DepositQuote:
    shares: int
    amount_x: int
    amount_y: int
    bootstrap: bool


@dataclass(frozen=True)
class WithdrawQuote:
    shares: int
    amount_x: int
    amount_y: int


def _require_amount(name: str, value: int) -> None:
    require_int(name, value)
    if value < 0:
        raise InvalidAmountError(f"{name} must be non-negative: {value}")
    if value > U64_MAX:
        raise MathError(f"{name} exceeds u64: {value}")


def _require_positive(name: str, value: int) -> None:
    _require_amount(name, value)
    if value == 0:
        raise InvalidAmountError(f"{name} must be positive")


def quote_swap(reserve_in: Amount, reserve_out: Amount, amount_in: Amount, fee_bps: int) -> SwapQuote:
    """
    Exact-in swap quote.

        net_in = floor(amount_in * (10_000 - fee_bps) / 10_000)
        k = reserve_in * reserve_out                       (u128)
        new_out = floor(k / (reserve_in + net_in))
        amount_out = reserve_out - new_out

    amount_out is also capped at ``reserve_out - ceil(k / (reserve_in + amount_in))``
    so that the post-trade reserves never hold less than k; this only binds when
    the fee is too small to absorb the floor rounding of new_out.

    The fee is not priced but stays in the input reserve:
        new_reserve_in = reserve_in + amount_in

    Raises:
        InvalidAmountError: zero input, or an output that rounds to zero
        PoolStateError: either reserve is empty
        MathError: a step leaves its integer width
    """
    _require_amount("reserve_in", reserve_in)
    _require_amount("reserve_out", reserve_out)
    _require_positive("amount_in", amount_in)
    require_bps("fee_bps", fee_bps)
    if reserve_in == 0 or reserve_out == 0:
        raise PoolStateError("cannot swap against an empty reserve")

    split = split_gross(amount_in, fee_bps)
    k = checked_mul(reserve_in, reserve_out)

    priced_in = checked_add(reserve_in, split.net_amount)
    new_out = checked_div(k, priced_in)
    amount_out = checked_sub(reserve_out, new_out)

    new_reserve_in = checked_add(reserve_in, amount_in)
    floor_out = checked_ceil_div(k, new_reserve_in)
    amount_out = min(amount_out, reserve_out - floor_out)

    if amount_out <= 0:
        raise InvalidAmountError("amount_out is zero (trade too small)")

    new_reserve_out = reserve_out - amount_out
    quote = SwapQuote(
        amount_in=amount_in,
        fee_amount=split.fee_amount,
        net_in=split.net_amount,
        amount_out=amount_out,
        k_before=k,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
    )
    if quote.k_after < k:
        raise MathError(f"Invariant violation: new_k ({quote.k_after}) < old_k ({k})")
    return quote


def quote_deposit(
    reserve_x: Amount,
    reserve_y: Amount,
    total_shares: Amount,
    desired_shares: Amount,
    max_x: Amount,
    max_y: Amount,
) -> DepositQuote:
    """
    Amounts required to mint `desired_shares` LP shares.

    Empty pool (no shares and no X reserve): the depositor sets the price,
    ``(x, y) = (max_x, max_y)``.

    Otherwise:
        x = ceil(reserve_x * desired / total)       (same for y, u128 product)

    Rounding goes up, so the depositor never pays less than their share, and
    overpays by less than one unit per side.
    Slippage against (max_x, max_y) is the caller's check.
    """
    _require_amount("reserve_x", reserve_x)
    _require_amount("reserve_y", reserve_y)
    _require_amount("total_shares", total_shares)
    _require_positive("desired_shares", desired_shares)
    _require_amount("max_x", max_x)
    _require_amount("max_y", max_y)

    if total_shares == 0 and reserve_x == 0:
        if max_x == 0 or max_y == 0:
            raise InvalidAmountError("initial deposit must provide both assets")
        return DepositQuote(shares=desired_shares, amount_x=max_x, amount_y=max_y, bootstrap=True)
    if total_shares == 0 or reserve_x == 0 or reserve_y == 0:
        raise PoolStateError(
            f"inconsistent pool: shares={total_shares} reserves=({reserve_x}, {reserve_y})"
        )

    checked_add(total_shares, desired_shares)  # new supply must fit u64
    amount_x = mul_div_ceil(reserve_x, desired_shares, total_shares)
    amount_y = mul_div_ceil(reserve_y, desired_shares, total_shares)
    return DepositQuote(shares=desired_shares, amount_x=amount_x, amount_y=amount_y, bootstrap=False)


def quote_withdraw(
    reserve_x: Amount,
    reserve_y: Amount,
    total_shares: Amount,
    lp_amount: Amount,
) -> WithdrawQuote:
    """
    Proportional withdrawal for burning `lp_amount` shares.

        x_out = floor(reserve_x * lp_amount / total_shares)    (same for y)
    """
    _require_amount("reserve_x", reserve_x)
    _require_amount("reserve_y", reserve_y)
    _require_amount("total_shares", total_shares)
    _require_positive("lp_amount", lp_amount)
    if total_shares == 0:
        raise PoolStateError("pool has no LP supply")
    if lp_amount > total_shares:
        raise InvalidAmountError(f"Cannot burn more LP than supply: {lp_amount} > {total_shares}")

    amount_x = mul_div_floor(reserve_x, lp_amount, total_shares)
    amount_y = mul_div_floor(reserve_y, lp_amount, total_shares)
    return WithdrawQuote(shares=lp_amount, amount_x=amount_x, amount_y=amount_y)


def spot_price(reserve_x: Amount, reserve_y: Amount) -> Fraction:
    """Marginal price of X in units of Y (``y / x``)."""
    if reserve_x == 0 or reserve_y == 0:
        raise PoolStateError("spot price undefined for an empty pool")
    return Fraction(reserve_y, reserve_x)


def ratio_drift(before: Tuple[Amount, Amount], after: Tuple[Amount, Amount]) -> Fraction:
    """``|x'/y' - x/y|`` as an exact fraction."""
    (x0, y0), (x1, y1) = before, after
    if y0 == 0 or y1 == 0:
        raise PoolStateError("ratio undefined for an empty reserve")
    return abs(Fraction(x1, y1) - Fraction(x0, y0))


def ratio_tolerance(before: Tuple[Amount, Amount], after: Tuple[Amount, Amount]) -> Fraction:
    """
    Largest ``ratio_drift(before, after)`` that integer rounding of one
    proportional deposit or withdraw can produce.

    Each side misses its exact proportional amount by less than one unit, so

        |x'/y' - x/y| <= max(x, y) / (y * y')
    """
    (x0, y0), (_x1, y1) = before, after
    if y0 == 0 or y1 == 0:
        raise PoolStateError("ratio undefined for an empty reserve")
    return Fraction(max(x0, y0), y0 * y1)


__all__ = [
    "SwapQuote",
    "DepositQuote",
    "WithdrawQuote",
    "quote_swap",
    "quote_deposit",
    "quote_withdraw",
    "spot_price",
    "ratio_drift",
    "ratio_tolerance",
]
