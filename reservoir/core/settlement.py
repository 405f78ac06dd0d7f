"""
Settlement math: how much a claim is worth when it is cashed in.

- CP-AMM: burning LP shares pays a floor-proportional slice of both reserves.
- LMSR: after resolution, each winning share is worth
  ``vault / outstanding_winning_supply``; losing shares are worth nothing.

Both payouts round down, so the sum of all possible payouts never exceeds
what the reserve holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..checked import mul_div_floor
from ..errors import (
    InsufficientVaultFundsError,
    MarketNotResolvedError,
    NoRewardsAvailableError,
    NoTokensToRedeemError,
    WrongSideError,
)
from ..state.balances import Amount
from ..state.markets import MarketState, OutcomeSide
from .cpmm import WithdrawQuote, quote_withdraw


@dataclass(frozen=True)
class RedemptionQuote:
    side: OutcomeSide
    shares: int
    payout: int
    vault_balance: int
    outstanding_supply: int


def withdraw_payout(reserve_x: Amount, reserve_y: Amount, total_shares: Amount, lp_amount: Amount) -> WithdrawQuote:
    """Proportional LP redemption; see `quote_withdraw`."""
    return quote_withdraw(reserve_x, reserve_y, total_shares, lp_amount)


def redemption_payout(
    market: MarketState,
    holder_balance: Amount,
    outstanding_supply: Amount,
    vault_balance: Amount,
    side: Optional[OutcomeSide] = None,
) -> RedemptionQuote:
    """
    Payout for redeeming a holder's whole winning balance.

    Checks run in a fixed order and the first failure wins:

    1. market not resolved                -> MarketNotResolvedError
    2. ``side`` given and not the winner   -> WrongSideError
    3. holder has no winning shares        -> NoTokensToRedeemError
    4. no winning shares were ever issued  -> NoRewardsAvailableError
    5. vault is empty                      -> InsufficientVaultFundsError
    6. payout rounds to zero               -> NoRewardsAvailableError

    ``payout = floor(holder_balance * vault_balance / outstanding_supply)``
    with the product in u128.

    Args:
        market: Market record (resolution state and issued share totals)
        holder_balance: Holder's balance of the winning share class
        outstanding_supply: Current supply of the winning share class
        vault_balance: Collateral held by the market vault
        side: Side the holder claims for; None means "the winner"
    """
    if not market.resolved or market.winner is None:
        raise MarketNotResolvedError(f"market {market.market_id} is not resolved")
    winner = market.winner
    if side is not None and side is not winner:
        raise WrongSideError(f"claimed {side.value} but the winner is {winner.value}")
    if holder_balance == 0:
        raise NoTokensToRedeemError("holder has no winning shares")
    if market.shares(winner) == 0 or outstanding_supply == 0:
        raise NoRewardsAvailableError("no winning shares were issued")
    if vault_balance == 0:
        raise InsufficientVaultFundsError("market vault is empty")
    if holder_balance > outstanding_supply:
        raise NoTokensToRedeemError(
            f"holder balance {holder_balance} exceeds outstanding supply {outstanding_supply}"
        )

    payout = mul_div_floor(holder_balance, vault_balance, outstanding_supply)
    if payout == 0:
        raise NoRewardsAvailableError("payout rounds to zero")
    return RedemptionQuote(
        side=winner,
        shares=holder_balance,
        payout=payout,
        vault_balance=vault_balance,
        outstanding_supply=outstanding_supply,
    )


__all__ = [
    "RedemptionQuote",
    "withdraw_payout",
    "redemption_payout",
]
