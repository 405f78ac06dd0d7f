"""Post-state invariant checkers for pools and markets.

Each `inv_*` function returns True when the invariant holds. `check_pool()`
and `check_market()` return the list of violated invariant IDs (empty = all
pass); `enforce()` turns a non-empty list into `InvariantViolationError`.

State invariants are evaluated on snapshots read back from custody after an
operation. Transition invariants (k never decreases on a swap, the reserve
ratio survives a deposit/withdraw) compare the snapshots before and after.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..checked import U64_MAX
from ..errors import InvariantViolationError
from ..integration.custody import Custody
from ..state.markets import MarketState, OutcomeSide
from ..state.pools import PoolState
from .cpmm import ratio_drift, ratio_tolerance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolSnapshot:
    reserve_x: int
    reserve_y: int
    lp_supply: int
    lp_held: int

    @property
    def reserves(self) -> Tuple[int, int]:
        return self.reserve_x, self.reserve_y

    @property
    def k(self) -> int:
        return self.reserve_x * self.reserve_y


@dataclass(frozen=True)
class MarketSnapshot:
    yes_issued: int
    no_issued: int
    yes_supply: int
    no_supply: int
    yes_held: int
    no_held: int
    vault_balance: int
    resolved: bool
    winner: Optional[OutcomeSide]


def pool_snapshot(custody: Custody, pool: PoolState) -> PoolSnapshot:
    return PoolSnapshot(
        reserve_x=custody.balance(pool.vault_x, pool.asset_x),
        reserve_y=custody.balance(pool.vault_y, pool.asset_y),
        lp_supply=custody.supply(pool.lp_class),
        lp_held=sum(custody.holders(pool.lp_class).values()),
    )


def market_snapshot(custody: Custody, market: MarketState) -> MarketSnapshot:
    return MarketSnapshot(
        yes_issued=market.yes_shares,
        no_issued=market.no_shares,
        yes_supply=custody.supply(market.yes_class),
        no_supply=custody.supply(market.no_class),
        yes_held=sum(custody.holders(market.yes_class).values()),
        no_held=sum(custody.holders(market.no_class).values()),
        vault_balance=custody.balance(market.vault, market.collateral_asset),
        resolved=market.resolved,
        winner=market.winner,
    )


# -- pool state -----------------------------------------------------------------

def inv_pool_reserves_in_range(s: PoolSnapshot) -> bool:
    return 0 <= s.reserve_x <= U64_MAX and 0 <= s.reserve_y <= U64_MAX


def inv_pool_lp_supply_conserved(s: PoolSnapshot) -> bool:
    return s.lp_supply == s.lp_held


def inv_pool_supply_backed(s: PoolSnapshot) -> bool:
    if s.lp_supply == 0:
        return True
    return s.reserve_x > 0 and s.reserve_y > 0


POOL_INVARIANTS: dict[str, Callable[[PoolSnapshot], bool]] = {
    "pool_reserves_in_range": inv_pool_reserves_in_range,
    "pool_lp_supply_conserved": inv_pool_lp_supply_conserved,
    "pool_supply_backed": inv_pool_supply_backed,
}


# -- market state ---------------------------------------------------------------

def inv_market_yes_supply_conserved(s: MarketSnapshot) -> bool:
    return s.yes_supply == s.yes_held


def inv_market_no_supply_conserved(s: MarketSnapshot) -> bool:
    return s.no_supply == s.no_held


def inv_market_outstanding_le_issued(s: MarketSnapshot) -> bool:
    return s.yes_supply <= s.yes_issued and s.no_supply <= s.no_issued


def inv_market_issued_in_range(s: MarketSnapshot) -> bool:
    return 0 <= s.yes_issued <= U64_MAX and 0 <= s.no_issued <= U64_MAX


def inv_market_resolution_consistent(s: MarketSnapshot) -> bool:
    return s.resolved == (s.winner is not None)


def inv_market_vault_non_negative(s: MarketSnapshot) -> bool:
    return s.vault_balance >= 0


MARKET_INVARIANTS: dict[str, Callable[[MarketSnapshot], bool]] = {
    "market_yes_supply_conserved": inv_market_yes_supply_conserved,
    "market_no_supply_conserved": inv_market_no_supply_conserved,
    "market_outstanding_le_issued": inv_market_outstanding_le_issued,
    "market_issued_in_range": inv_market_issued_in_range,
    "market_resolution_consistent": inv_market_resolution_consistent,
    "market_vault_non_negative": inv_market_vault_non_negative,
}


def check_pool(state: PoolSnapshot) -> list[str]:
    """Return list of violated pool invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, check_fn in POOL_INVARIANTS.items() if not check_fn(state)]


def check_market(state: MarketSnapshot) -> list[str]:
    """Return list of violated market invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, check_fn in MARKET_INVARIANTS.items() if not check_fn(state)]


# -- transitions ----------------------------------------------------------------

def check_swap(before: PoolSnapshot, after: PoolSnapshot) -> list[str]:
    """``(x + amount_in) * (y - out) >= x * y`` and LP supply untouched."""
    violations = check_pool(after)
    if after.k < before.k:
        violations.append("swap_k_non_decreasing")
    if after.lp_supply != before.lp_supply:
        violations.append("swap_lp_supply_unchanged")
    return violations


def check_liquidity(before: PoolSnapshot, after: PoolSnapshot) -> list[str]:
    """Deposit/withdraw keep ``x/y`` within the integer-rounding tolerance."""
    violations = check_pool(after)
    if before.lp_supply == 0 or after.lp_supply == 0:
        # bootstrap sets the ratio; a full exit has none left to keep
        return violations
    if ratio_drift(before.reserves, after.reserves) > ratio_tolerance(before.reserves, after.reserves):
        violations.append("liquidity_ratio_preserved")
    return violations


def enforce(violations: list[str], context: str) -> None:
    """Raise on any violation; the surrounding custody transaction rolls back."""
    if violations:
        logger.error("%s: invariant violations %s", context, violations)
        raise InvariantViolationError(violations)
    logger.debug("%s: invariants hold", context)


__all__ = [
    "PoolSnapshot",
    "MarketSnapshot",
    "pool_snapshot",
    "market_snapshot",
    "POOL_INVARIANTS",
    "MARKET_INVARIANTS",
    "check_pool",
    "check_market",
    "check_swap",
    "check_liquidity",
    "enforce",
]
