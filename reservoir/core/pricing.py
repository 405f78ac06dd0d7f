"""Pricing engine abstraction.

Both pricing models share the same shape: they quote marginal prices from
current state and apply a trade against the protocol reserve through the
same custody service, reserve ledger and fee splitter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from fractions import Fraction
from typing import Any, Optional, Sequence

from ..integration.clock import Clock
from ..integration.custody import Custody
from ..state.balances import AccountId, Amount
from ..state.markets import MarketState, OutcomeSide
from ..state.pools import PoolState
from . import amm, lmsr, market as market_ops
from .cpmm import spot_price


class PricingEngine(ABC):
    @abstractmethod
    def price(self) -> Sequence[Any]:
        """Marginal prices for each asset/outcome given the current reserves or quantities."""
        ...

    @abstractmethod
    def apply(self, trader: AccountId, amount: Amount, **kwargs: Any) -> Any:
        """Execute a trade of `amount` for `trader` and return its receipt."""
        ...


class ConstantProductEngine(PricingEngine):
    """x * y = k pricing over one pool."""

    def __init__(self, custody: Custody, pool: PoolState) -> None:
        self.custody = custody
        self.pool = pool

    def price(self) -> tuple[Fraction, Fraction]:
        """(price of X in Y, price of Y in X)."""
        reserve_x, reserve_y = amm.reserves(self.custody, self.pool)
        p = spot_price(reserve_x, reserve_y)
        return p, 1 / p

    def apply(
        self,
        trader: AccountId,
        amount: Amount,
        *,
        x_to_y: bool = True,
        min_out: Amount = 0,
    ) -> amm.SwapReceipt:
        return amm.swap(self.custody, self.pool, trader, amount, min_out, x_to_y)


class LmsrEngine(PricingEngine):
    """LMSR pricing over one binary market; tracks the latest market record."""

    def __init__(self, custody: Custody, clock: Clock, market: MarketState) -> None:
        self.custody = custody
        self.clock = clock
        self.market = market

    def price(self) -> tuple[float, float]:
        """(p_yes, p_no)."""
        return lmsr.prices(self.market.b, self.market.yes_shares, self.market.no_shares)

    def apply(
        self,
        trader: AccountId,
        amount: Amount,
        *,
        side: OutcomeSide = OutcomeSide.YES,
        max_total: Optional[Amount] = None,
    ) -> market_ops.OutcomeBought:
        event = market_ops.buy_outcome(
            self.custody, self.clock, self.market, trader, side, amount, max_total=max_total
        )
        self.market = event.market
        return event


__all__ = [
    "PricingEngine",
    "ConstantProductEngine",
    "LmsrEngine",
]
