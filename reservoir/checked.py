"""Checked fixed-width integer arithmetic.

Python ints never wrap, so the width limits of the reserve ledger are
enforced explicitly: stored amounts (balances, reserves, share counts) are
u64, and products/intermediates are evaluated in u128. Any step that would
leave its width raises ``MathError`` instead of producing a value.

Rounding is explicit: ``checked_div`` floors, ``checked_ceil_div`` rounds up.
"""

from __future__ import annotations

from .errors import MathError

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1

BPS_DENOM: int = 10_000


def require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check(value: int, limit: int, op: str) -> int:
    if value < 0:
        raise MathError(f"{op} underflow: {value} < 0")
    if value > limit:
        raise MathError(f"{op} overflow: {value} exceeds {limit.bit_length()}-bit range")
    return value


def checked_add(a: int, b: int, *, limit: int = U64_MAX) -> int:
    return _check(a + b, limit, "add")


def checked_sub(a: int, b: int, *, limit: int = U64_MAX) -> int:
    return _check(a - b, limit, "sub")


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _check(a * b, limit, "mul")


def checked_div(numerator: int, denominator: int) -> int:
    """Floor division of non-negative operands."""
    if denominator == 0:
        raise MathError("division by zero")
    if numerator < 0 or denominator < 0:
        raise MathError(f"div operands must be non-negative: {numerator} / {denominator}")
    return numerator // denominator


def checked_ceil_div(numerator: int, denominator: int) -> int:
    """Ceiling division of non-negative operands."""
    if denominator == 0:
        raise MathError("division by zero")
    if numerator < 0 or denominator < 0:
        raise MathError(f"div operands must be non-negative: {numerator} / {denominator}")
    return (numerator + denominator - 1) // denominator


def to_u64(value: int) -> int:
    """Narrow a widened intermediate back to the stored amount width."""
    return _check(value, U64_MAX, "narrow")


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)`` with the product checked in u128, result narrowed to u64."""
    return to_u64(checked_div(checked_mul(a, b), denominator))


def mul_div_ceil(a: int, b: int, denominator: int) -> int:
    """``ceil(a * b / denominator)`` with the product checked in u128, result narrowed to u64."""
    return to_u64(checked_ceil_div(checked_mul(a, b), denominator))


def require_bps(name: str, value: int) -> None:
    require_int(name, value)
    if not (0 <= value <= BPS_DENOM):
        raise ValueError(f"{name} must be in [0, {BPS_DENOM}]: {value}")
