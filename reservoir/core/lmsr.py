"""
Logarithmic Market Scoring Rule (LMSR) math for binary markets.

    C(q_yes, q_no) = b * ln(exp(q_yes / b) + exp(q_no / b))

evaluated with the log-sum-exp identity so the exponentials never overflow
for large share counts:

    C = b * (m + ln1p(exp(n - m))),   m = max(r), n = min(r), r = q / b

Floats never leave this module: `to_amount` is the single checked
conversion from a real-valued cost to an integer amount.

Algorithm Design:
- Type: Floating-point evaluation with an explicit range ceiling
- Time Complexity: O(1) per operation
- Invariant: buy_cost >= 0 and prices sum to 1
"""

from __future__ import annotations

import math
from typing import Tuple

from ..checked import U64_MAX, require_int
from ..errors import InvalidAmountError, MathError, MathRangeError
from ..state.markets import OutcomeSide

# exp(25_000) is far beyond any representable cost; larger ratios are rejected
# before evaluation instead of overflowing.
MAX_EXP_INPUT: float = 25_000.0


def log_sum_exp(x: float, y: float) -> float:
    """``ln(exp(x) + exp(y))`` without overflow."""
    m = max(x, y)
    n = min(x, y)
    return m + math.log1p(math.exp(n - m))


def cost(b: float, q_yes: float, q_no: float, *, max_exp_input: float = MAX_EXP_INPUT) -> float:
    """
    LMSR cost function.

    Args:
        b: Liquidity parameter (> 0)
        q_yes: Cumulative YES shares issued
        q_no: Cumulative NO shares issued
        max_exp_input: Ceiling on ``q / b``

    Returns:
        Cost in collateral base units

    Raises:
        MathRangeError: if either ratio exceeds the ceiling or the result is not finite
        InvalidAmountError: if b is not positive or a quantity is negative
    """
    if not math.isfinite(b) or b <= 0:
        raise InvalidAmountError(f"b must be positive and finite: {b}")
    if q_yes < 0 or q_no < 0:
        raise InvalidAmountError(f"share quantities must be non-negative: ({q_yes}, {q_no})")

    r_yes = q_yes / b
    r_no = q_no / b
    if r_yes > max_exp_input or r_no > max_exp_input:
        raise MathRangeError(
            f"exponent out of range: max(q/b)={max(r_yes, r_no)} > {max_exp_input}"
        )

    value = b * log_sum_exp(r_yes, r_no)
    if not math.isfinite(value):
        raise MathRangeError(f"cost is not finite: {value}")
    return value


def buy_cost(
    b: float,
    q_yes: int,
    q_no: int,
    side: OutcomeSide,
    delta: int,
    *,
    max_exp_input: float = MAX_EXP_INPUT,
) -> float:
    """
    Real-valued cost of buying `delta` shares of `side`.

    ``max(0, C(after) - C(before))``; the clamp absorbs float noise on tiny deltas.
    """
    require_int("q_yes", q_yes)
    require_int("q_no", q_no)
    require_int("delta", delta)
    if delta < 0:
        raise InvalidAmountError(f"delta must be non-negative: {delta}")

    before = cost(b, float(q_yes), float(q_no), max_exp_input=max_exp_input)
    if side is OutcomeSide.YES:
        after = cost(b, float(q_yes) + float(delta), float(q_no), max_exp_input=max_exp_input)
    else:
        after = cost(b, float(q_yes), float(q_no) + float(delta), max_exp_input=max_exp_input)
    return max(0.0, after - before)


def prices(b: float, q_yes: int, q_no: int) -> Tuple[float, float]:
    """
    Instantaneous (marginal) prices ``(p_yes, p_no)``.

    The gradient of C is the softmax of ``q / b``; computed relative to the
    larger ratio so it never overflows.
    """
    if not math.isfinite(b) or b <= 0:
        raise InvalidAmountError(f"b must be positive and finite: {b}")
    r_yes = q_yes / b
    r_no = q_no / b
    m = max(r_yes, r_no)
    e_yes = math.exp(r_yes - m)
    e_no = math.exp(r_no - m)
    total = e_yes + e_no
    return e_yes / total, e_no / total


def to_amount(value: float) -> int:
    """
    Convert a real-valued cost to a u64 amount, rounding half away from zero.

    Raises:
        MathError: for NaN, infinities, negatives, or values above u64
    """
    if not math.isfinite(value):
        raise MathError(f"cannot convert non-finite value to an amount: {value}")
    if value < 0:
        raise MathError(f"cannot convert negative value to an amount: {value}")
    if value > float(U64_MAX):
        raise MathError(f"value exceeds u64: {value}")
    amount = math.floor(value + 0.5)
    if amount > U64_MAX:
        raise MathError(f"value exceeds u64: {value}")
    return amount


__all__ = [
    "MAX_EXP_INPUT",
    "log_sum_exp",
    "cost",
    "buy_cost",
    "prices",
    "to_amount",
]
