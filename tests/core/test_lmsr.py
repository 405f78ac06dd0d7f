from __future__ import annotations

import math
import random

import pytest

from reservoir.core.lmsr import MAX_EXP_INPUT, buy_cost, cost, log_sum_exp, prices, to_amount
from reservoir.errors import InvalidAmountError, MathError, MathRangeError
from reservoir.state.markets import OutcomeSide

YES = OutcomeSide.YES
NO = OutcomeSide.NO


class TestCost:
    def test_empty_book_costs_b_ln2(self) -> None:
        assert cost(100.0, 0.0, 0.0) == pytest.approx(100 * math.log(2))

    def test_log_sum_exp_matches_naive_form(self) -> None:
        for x, y in [(0.0, 0.0), (0.1, 0.0), (3.0, -2.0), (-5.0, 7.5)]:
            assert log_sum_exp(x, y) == pytest.approx(math.log(math.exp(x) + math.exp(y)))

    def test_large_quantities_do_not_overflow(self) -> None:
        # exp(20_000) overflows a float; log-sum-exp does not.
        value = cost(1.0, 20_000.0, 19_999.0)
        assert math.isfinite(value)
        assert value == pytest.approx(20_000 + math.log1p(math.exp(-1.0)))

    def test_exponent_ceiling(self) -> None:
        with pytest.raises(MathRangeError, match="out of range"):
            cost(1.0, MAX_EXP_INPUT + 1, 0.0)
        # at the ceiling itself the cost is still finite
        assert math.isfinite(cost(1.0, MAX_EXP_INPUT, 0.0))

    def test_rejects_bad_parameters(self) -> None:
        with pytest.raises(InvalidAmountError):
            cost(0.0, 1.0, 1.0)
        with pytest.raises(InvalidAmountError):
            cost(1.0, -1.0, 0.0)


class TestBuyCost:
    def test_b100_buy_10_yes(self) -> None:
        raw = buy_cost(100.0, 0, 0, YES, 10)
        expected = 100 * math.log(math.exp(0.1) + 1) - 100 * math.log(2)
        assert raw == pytest.approx(expected)
        assert raw == pytest.approx(5.1249, abs=1e-4)
        assert to_amount(raw) == 5

    def test_symmetric_sides(self) -> None:
        assert buy_cost(50.0, 0, 0, YES, 7) == pytest.approx(buy_cost(50.0, 0, 0, NO, 7))

    def test_cost_is_monotonic_in_own_side(self) -> None:
        rng = random.Random(3)
        b = 250.0
        q_yes, q_no = 0, 0
        last = 0.0
        for _ in range(100):
            delta = rng.randint(1, 50)
            step = buy_cost(b, q_yes, q_no, YES, delta) / delta
            assert step >= last - 1e-9
            last = step
            q_yes += delta

    def test_zero_delta_costs_nothing(self) -> None:
        assert buy_cost(100.0, 10, 3, YES, 0) == 0.0

    def test_range_error_propagates(self) -> None:
        with pytest.raises(MathRangeError):
            buy_cost(1.0, 25_000, 0, YES, 1)


class TestPrices:
    def test_even_book(self) -> None:
        assert prices(100.0, 0, 0) == pytest.approx((0.5, 0.5))

    def test_prices_sum_to_one_and_track_demand(self) -> None:
        p_yes, p_no = prices(100.0, 300, 100)
        assert p_yes + p_no == pytest.approx(1.0)
        assert p_yes > p_no

    def test_marginal_price_matches_cost_gradient(self) -> None:
        b, q_yes, q_no = 80.0, 40, 10
        h = 1e-4
        grad = (cost(b, q_yes + h, q_no) - cost(b, q_yes, q_no)) / h
        assert prices(b, q_yes, q_no)[0] == pytest.approx(grad, rel=1e-3)


class TestToAmount:
    def test_rounds_half_away_from_zero(self) -> None:
        assert to_amount(2.5) == 3
        assert to_amount(0.5) == 1
        assert to_amount(2.4999) == 2
        assert to_amount(0.0) == 0

    @pytest.mark.parametrize("value", [-0.1, float("nan"), float("inf"), float(2**64)])
    def test_rejects_out_of_range(self, value) -> None:
        with pytest.raises(MathError):
            to_amount(value)
