from __future__ import annotations

from dataclasses import replace

import pytest

from reservoir.core.settlement import redemption_payout, withdraw_payout
from reservoir.errors import (
    AuthorizationError,
    InsufficientVaultFundsError,
    MarketNotResolvedError,
    NoRewardsAvailableError,
    NoTokensToRedeemError,
    WrongSideError,
)
from reservoir.state.markets import MarketState, OutcomeSide

YES = OutcomeSide.YES
NO = OutcomeSide.NO


def _market(**kwargs) -> MarketState:
    base = MarketState(
        market_id="0xm",
        seed=1,
        creator="alice",
        question="Will it rain?",
        expiry_timestamp=2_000,
        collateral_asset="USDC",
        yes_class="0xyes",
        no_class="0xno",
        vault="0xvault",
        authority="0xauth",
        fee_bps=100,
        treasury="treasury",
        b_value_scaled=100_000_000,
    )
    return replace(base, **kwargs)


def _resolved(winner=YES, **kwargs) -> MarketState:
    return _market(resolved=True, winner=winner, resolved_at=2_000, **kwargs)


def test_payout_is_pro_rata_of_vault() -> None:
    q = redemption_payout(_resolved(yes_shares=30), holder_balance=10, outstanding_supply=30, vault_balance=100)
    assert q.side is YES
    assert q.payout == 33  # floor(10 * 100 / 30)


def test_sequential_claims_drain_vault_exactly() -> None:
    market = _resolved(yes_shares=3)
    vault, supply, paid = 10, 3, []
    for _ in range(3):
        q = redemption_payout(market, 1, supply, vault)
        paid.append(q.payout)
        vault -= q.payout
        supply -= 1
    assert paid == [3, 3, 4]
    assert vault == 0


def test_rejection_order() -> None:
    with pytest.raises(MarketNotResolvedError):
        redemption_payout(_market(), 0, 0, 0)
    with pytest.raises(WrongSideError):
        redemption_payout(_resolved(), 0, 0, 0, side=NO)
    with pytest.raises(NoTokensToRedeemError):
        redemption_payout(_resolved(), 0, 0, 0)
    with pytest.raises(NoRewardsAvailableError, match="no winning shares"):
        redemption_payout(_resolved(yes_shares=0), 5, 5, 100)
    with pytest.raises(InsufficientVaultFundsError):
        redemption_payout(_resolved(yes_shares=5), 5, 5, 0)
    with pytest.raises(NoRewardsAvailableError, match="rounds to zero"):
        redemption_payout(_resolved(yes_shares=1_000), 1, 1_000, 999)


def test_claim_errors_are_authorization_errors() -> None:
    for exc in (WrongSideError, NoTokensToRedeemError, NoRewardsAvailableError, InsufficientVaultFundsError):
        assert issubclass(exc, AuthorizationError)


def test_holder_cannot_claim_more_than_outstanding() -> None:
    with pytest.raises(NoTokensToRedeemError, match="exceeds outstanding"):
        redemption_payout(_resolved(yes_shares=10), 11, 10, 100)


def test_withdraw_payout_matches_lp_share() -> None:
    q = withdraw_payout(1_000, 2_000, 100, 25)
    assert (q.amount_x, q.amount_y) == (250, 500)
