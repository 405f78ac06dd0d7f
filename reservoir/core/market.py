"""
Binary LMSR prediction market operations.

Lifecycle:

    create_market -> buy_outcome* -> (expiry) -> resolve_market -> claim_rewards*

`MarketState` records are immutable. Every operation takes the current
record and returns an event whose `market` field is the record after the
operation; callers keep that one. Custody effects of an operation run in one
transaction and the new record is only produced once it has committed.

Purchases pay the LMSR cost into the market vault and a fee of
``floor(cost * fee_bps / 10_000)`` on top of it to the treasury; the buyer
receives exactly the requested number of outcome shares.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..checked import checked_add, require_bps
from ..errors import (
    InvalidAmountError,
    MarketAlreadyResolvedError,
    MarketExpiredError,
    MarketNotExpiredError,
    MarketStateError,
    SlippageError,
)
from ..integration.authority import Authority, derive_authority
from ..integration.clock import Clock
from ..integration.custody import Custody
from ..state.balances import AccountId, Amount, AssetId
from ..state.markets import MarketState, OutcomeSide, compute_market_id, compute_outcome_class
from ..state.pools import compute_vault
from . import lmsr
from .fees import add_fee
from .invariants import check_market, enforce, market_snapshot
from .ledger import ReserveLedger
from .settlement import redemption_payout

logger = logging.getLogger(__name__)

MAX_QUESTION_LEN = 256


@dataclass(frozen=True)
class MarketCreated:
    market: MarketState
    question: str
    expiry_timestamp: int
    fee_bps: int
    treasury: AccountId


@dataclass(frozen=True)
class OutcomeBought:
    market: MarketState
    buyer: AccountId
    side: OutcomeSide
    shares: int
    total_paid: int
    fee_amount: int
    net_staked: int


@dataclass(frozen=True)
class MarketResolved:
    market: MarketState
    winner: OutcomeSide
    resolved_at: int


@dataclass(frozen=True)
class RewardsClaimed:
    market: MarketState
    holder: AccountId
    side: OutcomeSide
    shares_burned: int
    payout: int
    losing_burned: int


def market_authority(market: MarketState) -> Authority:
    return derive_authority("market", market.market_id)


def _ledger(custody: Custody, market: MarketState) -> ReserveLedger:
    return ReserveLedger(custody=custody, authority=market_authority(market))


def create_market(
    custody: Custody,
    clock: Clock,
    creator: AccountId,
    seed: int,
    question: str,
    expiry_timestamp: int,
    fee_bps: int,
    treasury: AccountId,
    b_value_scaled: int,
    collateral_asset: AssetId,
    *,
    max_question_len: int = MAX_QUESTION_LEN,
) -> MarketCreated:
    """
    Open a new binary market.

    Derives the market id from ``(creator, seed)``, the YES/NO share classes
    and the collateral vault from the market id, and registers them with
    custody under the market authority.

    Raises:
        MarketExpiredError: expiry is not strictly in the future
        MarketStateError: a market with this (creator, seed) already exists
        ValueError: empty or over-long question, fee outside [0, 10000], b <= 0
    """
    if not question or len(question) > max_question_len:
        raise ValueError(f"question must be 1-{max_question_len} characters")
    require_bps("fee_bps", fee_bps)
    now = clock.now()
    if expiry_timestamp <= now:
        raise MarketExpiredError(f"expiry {expiry_timestamp} is not after now ({now})")

    market_id = compute_market_id(creator, seed)
    yes_class = compute_outcome_class(market_id, OutcomeSide.YES)
    if custody.mint_authority(yes_class) is not None:
        raise MarketStateError(f"market {market_id} already exists")

    authority = derive_authority("market", market_id)
    market = MarketState(
        market_id=market_id,
        seed=seed,
        creator=creator,
        question=question,
        expiry_timestamp=expiry_timestamp,
        collateral_asset=collateral_asset,
        yes_class=yes_class,
        no_class=compute_outcome_class(market_id, OutcomeSide.NO),
        vault=compute_vault(market_id, collateral_asset),
        authority=authority.account,
        fee_bps=fee_bps,
        treasury=treasury,
        b_value_scaled=b_value_scaled,
    )
    custody.register_vault(market.vault, authority)
    custody.register_mint(market.yes_class, authority)
    custody.register_mint(market.no_class, authority)

    logger.info(
        "market created: id=%s creator=%s expiry=%d fee_bps=%d b=%s",
        market_id, creator, expiry_timestamp, fee_bps, market.b,
    )
    return MarketCreated(
        market=market,
        question=question,
        expiry_timestamp=expiry_timestamp,
        fee_bps=fee_bps,
        treasury=treasury,
    )


def quote_buy(
    market: MarketState,
    side: OutcomeSide,
    delta_shares: Amount,
    *,
    max_exp_input: float = lmsr.MAX_EXP_INPUT,
) -> tuple[int, int, int]:
    """``(cost, fee, total)`` in collateral units for buying `delta_shares` of `side`."""
    if delta_shares <= 0:
        raise InvalidAmountError(f"delta_shares must be positive: {delta_shares}")
    raw = lmsr.buy_cost(
        market.b, market.yes_shares, market.no_shares, side, delta_shares, max_exp_input=max_exp_input
    )
    split = add_fee(lmsr.to_amount(raw), market.fee_bps)
    return split.net_amount, split.fee_amount, split.gross_amount


def buy_outcome(
    custody: Custody,
    clock: Clock,
    market: MarketState,
    buyer: AccountId,
    side: OutcomeSide,
    delta_shares: Amount,
    *,
    max_total: Optional[Amount] = None,
    max_exp_input: float = lmsr.MAX_EXP_INPUT,
) -> OutcomeBought:
    """
    Buy `delta_shares` outcome shares of `side`.

    Raises:
        MarketAlreadyResolvedError: market is resolved
        MarketExpiredError: ``now >= expiry``
        InvalidAmountError: zero shares
        MathRangeError / MathError: cost out of range or share totals overflow
        SlippageError: total above `max_total`
        InsufficientFundsError: buyer cannot pay cost + fee
    """
    if market.resolved:
        raise MarketAlreadyResolvedError(f"market {market.market_id} is resolved")
    now = clock.now()
    if now >= market.expiry_timestamp:
        raise MarketExpiredError(f"market {market.market_id} expired at {market.expiry_timestamp}")

    cost, fee, total = quote_buy(market, side, delta_shares, max_exp_input=max_exp_input)
    if max_total is not None and total > max_total:
        raise SlippageError("purchase total above maximum", bound=max_total, actual=total)

    if side is OutcomeSide.YES:
        updated = replace(market, yes_shares=checked_add(market.yes_shares, delta_shares))
    else:
        updated = replace(market, no_shares=checked_add(market.no_shares, delta_shares))

    ledger = _ledger(custody, market)
    with custody.transaction():
        ledger.collect(market.collateral_asset, buyer, market.treasury, fee)
        ledger.collect(market.collateral_asset, buyer, market.vault, cost)
        ledger.issue(market.share_class(side), buyer, delta_shares)
        enforce(check_market(market_snapshot(custody, updated)), f"buy {market.market_id}")

    logger.info(
        "outcome bought: market=%s buyer=%s side=%s shares=%d cost=%d fee=%d",
        market.market_id, buyer, side.value, delta_shares, cost, fee,
    )
    return OutcomeBought(
        market=updated,
        buyer=buyer,
        side=side,
        shares=delta_shares,
        total_paid=total,
        fee_amount=fee,
        net_staked=cost,
    )


def resolve_market(clock: Clock, market: MarketState, winner: OutcomeSide) -> MarketResolved:
    """
    Record the winning side. One-shot and irreversible.

    `winner` is trusted input from whatever decides the outcome; only the
    timing and the one-shot rule are checked here.
    """
    if market.resolved:
        raise MarketAlreadyResolvedError(f"market {market.market_id} is already resolved")
    now = clock.now()
    if now < market.expiry_timestamp:
        raise MarketNotExpiredError(
            f"market {market.market_id} expires at {market.expiry_timestamp}, now is {now}"
        )

    updated = replace(market, resolved=True, winner=winner, resolved_at=now)
    logger.info("market resolved: id=%s winner=%s at=%d", market.market_id, winner.value, now)
    return MarketResolved(market=updated, winner=winner, resolved_at=now)


def claim_rewards(
    custody: Custody,
    market: MarketState,
    holder: AccountId,
    *,
    side: Optional[OutcomeSide] = None,
    burn_losing: bool = False,
) -> RewardsClaimed:
    """
    Redeem the holder's whole winning balance for its share of the vault.

    ``payout = floor(balance * vault / outstanding_winning_supply)``. The
    winning balance is burned; with `burn_losing` the holder's losing-side
    balance is burned as well. See `settlement.redemption_payout` for the
    order in which rejections are reported.
    """
    ledger = _ledger(custody, market)
    if market.winner is not None:
        winning_class = market.share_class(market.winner)
        holder_balance = ledger.claim_balance(holder, winning_class)
        outstanding = ledger.claim_supply(winning_class)
    else:
        holder_balance = outstanding = 0
    vault_balance = ledger.reserve(market.vault, market.collateral_asset)

    quote = redemption_payout(market, holder_balance, outstanding, vault_balance, side)
    losing_class = market.share_class(quote.side.other)
    losing = ledger.claim_balance(holder, losing_class) if burn_losing else 0

    with custody.transaction():
        ledger.pay(market.collateral_asset, market.vault, holder, quote.payout)
        ledger.retire(market.share_class(quote.side), holder, quote.shares)
        ledger.retire(losing_class, holder, losing)
        enforce(check_market(market_snapshot(custody, market)), f"claim {market.market_id}")

    logger.info(
        "rewards claimed: market=%s holder=%s shares=%d payout=%d",
        market.market_id, holder, quote.shares, quote.payout,
    )
    return RewardsClaimed(
        market=market,
        holder=holder,
        side=quote.side,
        shares_burned=quote.shares,
        payout=quote.payout,
        losing_burned=losing,
    )


__all__ = [
    "MAX_QUESTION_LEN",
    "MarketCreated",
    "OutcomeBought",
    "MarketResolved",
    "RewardsClaimed",
    "market_authority",
    "create_market",
    "quote_buy",
    "buy_outcome",
    "resolve_market",
    "claim_rewards",
]
