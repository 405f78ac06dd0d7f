from __future__ import annotations

import random
from fractions import Fraction

import pytest

from reservoir.checked import U64_MAX
from reservoir.core.cpmm import (
    quote_deposit,
    quote_swap,
    quote_withdraw,
    ratio_drift,
    ratio_tolerance,
    spot_price,
)
from reservoir.errors import InvalidAmountError, MathError, PoolStateError


def test_swap_30bps_on_500k_250k_pool() -> None:
    q = quote_swap(reserve_in=500_000, reserve_out=250_000, amount_in=10_000, fee_bps=30)

    assert q.fee_amount == 30
    assert q.net_in == 9_970
    assert q.k_before == 125_000_000_000
    # floor(125e9 / 509_970) = 245_112
    assert q.amount_out == 250_000 - 245_112 == 4_888
    # Fee stays in the reserve: the vault receives the gross input.
    assert q.new_reserve_in == 510_000
    assert q.new_reserve_out == 245_112
    assert q.k_after >= q.k_before


def test_zero_fee_swap_never_decreases_k() -> None:
    # Uncapped: new_out = floor(30 / 4) = 7, out = 3, k_after = 4 * 7 = 28 < 30.
    q = quote_swap(reserve_in=3, reserve_out=10, amount_in=1, fee_bps=0)
    assert q.amount_out == 2
    assert q.k_after == 32


def test_swap_rejects_zero_input_and_empty_reserves() -> None:
    with pytest.raises(InvalidAmountError, match="positive"):
        quote_swap(1_000, 1_000, 0, 30)
    with pytest.raises(PoolStateError, match="empty reserve"):
        quote_swap(0, 1_000, 10, 30)


def test_swap_output_rounding_to_zero_is_rejected() -> None:
    with pytest.raises(InvalidAmountError, match="amount_out is zero"):
        quote_swap(reserve_in=1_000_000, reserve_out=10, amount_in=1, fee_bps=30)


def test_swap_overflowing_reserve_raises_math_error() -> None:
    with pytest.raises(MathError):
        quote_swap(reserve_in=U64_MAX, reserve_out=1_000, amount_in=1, fee_bps=0)


def test_swap_invariant_holds_for_random_trades() -> None:
    rng = random.Random(7)
    for _ in range(500):
        x = rng.randint(1, 10**12)
        y = rng.randint(1, 10**12)
        amount_in = rng.randint(1, 10**10)
        fee_bps = rng.choice([0, 1, 5, 30, 100, 10_000])
        try:
            q = quote_swap(x, y, amount_in, fee_bps)
        except InvalidAmountError:
            continue
        assert (x + amount_in) * (y - q.amount_out) >= x * y
        assert 0 < q.amount_out < y


def test_first_deposit_sets_reserves_to_max_amounts() -> None:
    q = quote_deposit(0, 0, 0, desired_shares=1_000, max_x=500_000, max_y=250_000)
    assert q.bootstrap
    assert (q.amount_x, q.amount_y, q.shares) == (500_000, 250_000, 1_000)


def test_proportional_deposit_exact_ratio() -> None:
    q = quote_deposit(500_000, 250_000, 1_000, desired_shares=100, max_x=10**9, max_y=10**9)
    assert not q.bootstrap
    assert (q.amount_x, q.amount_y) == (50_000, 25_000)


def test_proportional_deposit_rounds_up() -> None:
    # Exact amounts would be 1000/7 = 142.86 and 333/7 = 47.57.
    q = quote_deposit(1_000, 333, 7, desired_shares=1, max_x=10**9, max_y=10**9)
    assert (q.amount_x, q.amount_y) == (143, 48)


def test_small_deposit_into_deep_pool_pays_its_share() -> None:
    # 1_000 of 10**12 shares is a 1e-9 slice of the pool.
    q = quote_deposit(10**12, 10**12, 10**12, desired_shares=1_000, max_x=U64_MAX, max_y=U64_MAX)
    assert (q.amount_x, q.amount_y) == (1_000, 1_000)

    q = quote_deposit(10**12 + 7, 3 * 10**11, 10**9, desired_shares=3, max_x=U64_MAX, max_y=U64_MAX)
    exact_x = Fraction((10**12 + 7) * 3, 10**9)
    exact_y = Fraction(3 * 10**11 * 3, 10**9)
    assert exact_x <= q.amount_x < exact_x + 1
    assert exact_y <= q.amount_y < exact_y + 1
    assert (q.amount_x, q.amount_y) == (3_001, 900)


def test_deposit_at_u64_reserves_does_not_overflow() -> None:
    q = quote_deposit(U64_MAX, U64_MAX, U64_MAX - 1, desired_shares=1, max_x=U64_MAX, max_y=U64_MAX)
    assert (q.amount_x, q.amount_y) == (2, 2)


def test_deposit_into_inconsistent_pool_is_rejected() -> None:
    with pytest.raises(PoolStateError, match="inconsistent pool"):
        quote_deposit(0, 500, 10, desired_shares=1, max_x=10, max_y=10)


def test_withdraw_is_floor_proportional() -> None:
    q = quote_withdraw(550_000, 275_000, 1_100, lp_amount=100)
    assert (q.amount_x, q.amount_y) == (50_000, 25_000)

    q = quote_withdraw(1_000, 333, 7, lp_amount=1)
    assert (q.amount_x, q.amount_y) == (142, 47)


def test_withdraw_more_than_supply_is_rejected() -> None:
    with pytest.raises(InvalidAmountError, match="more LP than supply"):
        quote_withdraw(1_000, 1_000, 10, lp_amount=11)
    with pytest.raises(PoolStateError, match="no LP supply"):
        quote_withdraw(1_000, 1_000, 0, lp_amount=1)


def test_ratio_drift_stays_within_tolerance() -> None:
    rng = random.Random(11)
    for _ in range(300):
        x = rng.randint(1_000, 10**12)
        y = rng.randint(1_000, 10**12)
        total = rng.randint(1, 10**9)
        desired = rng.randint(1, total)

        d = quote_deposit(x, y, total, desired, U64_MAX, U64_MAX)
        after = (x + d.amount_x, y + d.amount_y)
        assert ratio_drift((x, y), after) <= ratio_tolerance((x, y), after)

        lp = rng.randint(1, total + desired - 1)
        w = quote_withdraw(after[0], after[1], total + desired, lp)
        final = (after[0] - w.amount_x, after[1] - w.amount_y)
        assert ratio_drift(after, final) <= ratio_tolerance(after, final)


def test_spot_price_is_exact_fraction() -> None:
    assert spot_price(500_000, 250_000) == Fraction(1, 2)
    with pytest.raises(PoolStateError):
        spot_price(0, 1)
