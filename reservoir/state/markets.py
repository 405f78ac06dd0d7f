"""
Market state for binary LMSR prediction markets.

Units/conventions:
- `b_value_scaled` is the liquidity parameter scaled by 1e6 (b = b_value_scaled / 1e6).
- `yes_shares` / `no_shares` are cumulative shares issued, in collateral base units.
- `*_bps` rates are basis points (1/10_000).
- Collateral held by the market is the balance of `vault`, never cached here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

from ..checked import U64_MAX, require_bps, require_int
from .balances import AccountId, AssetId
from .canonical import derive_id
from .shares import ShareClass

B_SCALE: int = 1_000_000


@unique
class OutcomeSide(Enum):
    YES = "yes"
    NO = "no"

    @property
    def other(self) -> "OutcomeSide":
        return OutcomeSide.NO if self is OutcomeSide.YES else OutcomeSide.YES


def compute_market_id(creator: AccountId, seed: int) -> str:
    """Deterministic market id: ``H("market" || creator || seed)``."""
    require_int("seed", seed)
    if seed < 0:
        raise ValueError(f"seed must be non-negative: {seed}")
    return derive_id("market", creator, seed)


def compute_outcome_class(market_id: str, side: OutcomeSide) -> ShareClass:
    return derive_id(f"{side.value}_mint", market_id)


@dataclass(frozen=True)
class MarketState:
    """Complete state of one binary LMSR market."""

    market_id: str
    seed: int
    creator: AccountId
    question: str
    expiry_timestamp: int
    collateral_asset: AssetId
    yes_class: ShareClass
    no_class: ShareClass
    vault: AccountId
    authority: AccountId
    fee_bps: int
    treasury: AccountId
    b_value_scaled: int

    # LMSR bookkeeping
    yes_shares: int = 0
    no_shares: int = 0

    # Resolution
    resolved: bool = False
    winner: Optional[OutcomeSide] = None
    resolved_at: Optional[int] = None

    def __post_init__(self) -> None:
        require_bps("fee_bps", self.fee_bps)
        require_int("b_value_scaled", self.b_value_scaled)
        if not (0 < self.b_value_scaled <= U64_MAX):
            raise ValueError(f"b_value_scaled must be in (0, u64]: {self.b_value_scaled}")
        for name, v in (("yes_shares", self.yes_shares), ("no_shares", self.no_shares)):
            require_int(name, v)
            if not (0 <= v <= U64_MAX):
                raise ValueError(f"{name} must be in [0, u64]: {v}")
        if self.resolved != (self.winner is not None):
            raise ValueError("winner must be set exactly when the market is resolved")

    @property
    def b(self) -> float:
        """Liquidity parameter as a real number."""
        return self.b_value_scaled / B_SCALE

    def shares(self, side: OutcomeSide) -> int:
        return self.yes_shares if side is OutcomeSide.YES else self.no_shares

    def share_class(self, side: OutcomeSide) -> ShareClass:
        return self.yes_class if side is OutcomeSide.YES else self.no_class
