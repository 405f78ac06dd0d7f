from __future__ import annotations

import logging

import pytest

from reservoir.core.ledger import ReserveLedger
from reservoir.errors import InsufficientFundsError, InvalidAmountError, UnauthorizedError
from reservoir.integration.authority import derive_authority
from reservoir.integration.custody import CustodyLedger


@pytest.fixture
def custody() -> CustodyLedger:
    c = CustodyLedger()
    c.credit("alice", "X", 100)
    return c


def test_plain_transfer(custody: CustodyLedger) -> None:
    custody.transfer("X", "alice", "bob", 30)
    assert custody.balance("alice", "X") == 70
    assert custody.balance("bob", "X") == 30


def test_negative_amount_rejected(custody: CustodyLedger) -> None:
    with pytest.raises(InvalidAmountError):
        custody.transfer("X", "alice", "bob", -1)


def test_vault_requires_owner_authority(custody: CustodyLedger) -> None:
    owner = derive_authority("pool", "p1")
    custody.register_vault("vault", owner)
    custody.transfer("X", "alice", "vault", 50)

    with pytest.raises(UnauthorizedError):
        custody.transfer("X", "vault", "alice", 1)
    with pytest.raises(UnauthorizedError):
        custody.transfer("X", "vault", "alice", 1, authority=derive_authority("pool", "p2"))

    custody.transfer("X", "vault", "alice", 10, authority=owner)
    assert custody.balance("vault", "X") == 40


def test_registration_conflicts(custody: CustodyLedger) -> None:
    a = derive_authority("a")
    custody.register_vault("vault", a)
    custody.register_vault("vault", a)  # idempotent for the same owner
    with pytest.raises(UnauthorizedError):
        custody.register_vault("vault", derive_authority("b"))
    custody.register_mint("LP", a)
    with pytest.raises(UnauthorizedError):
        custody.register_mint("LP", derive_authority("b"))


def test_mint_requires_registered_authority(custody: CustodyLedger) -> None:
    a = derive_authority("a")
    with pytest.raises(UnauthorizedError):
        custody.mint("LP", "alice", 1, authority=a)
    custody.register_mint("LP", a)
    custody.mint("LP", "alice", 5, authority=a)
    custody.burn("LP", "alice", 2)
    assert custody.supply("LP") == 3
    assert custody.holders("LP") == {"alice": 3}


def test_transaction_rolls_back_everything(custody: CustodyLedger, caplog) -> None:
    a = derive_authority("a")
    custody.register_mint("LP", a)

    with caplog.at_level(logging.WARNING, logger="reservoir.integration.custody"):
        with pytest.raises(InsufficientFundsError):
            with custody.transaction():
                custody.transfer("X", "alice", "bob", 60)
                custody.mint("LP", "alice", 10, authority=a)
                custody.transfer("X", "alice", "bob", 60)

    assert custody.balance("alice", "X") == 100
    assert custody.balance("bob", "X") == 0
    assert custody.supply("LP") == 0
    assert "rolled back" in caplog.text


def test_nested_transactions_join_outer(custody: CustodyLedger) -> None:
    with pytest.raises(RuntimeError):
        with custody.transaction():
            with custody.transaction():
                custody.transfer("X", "alice", "bob", 10)
            custody.transfer("X", "alice", "bob", 10)
            raise RuntimeError("boom")
    assert custody.balance("alice", "X") == 100

    with custody.transaction():
        with custody.transaction():
            custody.transfer("X", "alice", "bob", 10)
    assert custody.balance("bob", "X") == 10


def test_reserve_ledger_signs_payouts(custody: CustodyLedger) -> None:
    auth = derive_authority("market", "m1")
    custody.register_vault("vault", auth)
    custody.register_mint("YES", auth)
    ledger = ReserveLedger(custody=custody, authority=auth)

    ledger.collect("X", "alice", "vault", 40)
    ledger.issue("YES", "alice", 4)
    ledger.pay("X", "vault", "alice", 15)
    ledger.retire("YES", "alice", 4)
    ledger.pay("X", "vault", "alice", 0)

    assert ledger.reserve("vault", "X") == 25
    assert ledger.claim_supply("YES") == 0
    assert ledger.claim_balance("alice", "YES") == 0
