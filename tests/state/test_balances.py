from __future__ import annotations

import pytest

from reservoir.checked import U64_MAX
from reservoir.errors import InsufficientFundsError, MathError
from reservoir.state.balances import BalanceTable


def test_add_and_subtract() -> None:
    t = BalanceTable()
    t.add("a", "X", 100)
    t.subtract("a", "X", 40)
    assert t.get("a", "X") == 60
    t.subtract("a", "X", 60)
    assert t.snapshot() == {}


def test_overdraft_rejected() -> None:
    t = BalanceTable()
    t.add("a", "X", 5)
    with pytest.raises(InsufficientFundsError):
        t.subtract("a", "X", 6)
    assert t.get("a", "X") == 5


def test_u64_ceiling() -> None:
    t = BalanceTable()
    t.add("a", "X", U64_MAX)
    with pytest.raises(MathError):
        t.add("a", "X", 1)
    assert t.get("a", "X") == U64_MAX
