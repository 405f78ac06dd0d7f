"""
Pool state for constant-product pools.

The record holds identity and configuration only. Reserves live in the
custodial vault accounts and LP supply lives in the share ledger; both are
read from there on every operation.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..checked import require_bps, require_int
from .balances import AccountId, AssetId
from .canonical import derive_id
from .shares import ShareClass


def compute_pool_id(seed: int) -> str:
    """Deterministic pool id: ``H("pool" || seed)``. One pool per seed."""
    require_int("seed", seed)
    if seed < 0:
        raise ValueError(f"seed must be non-negative: {seed}")
    return derive_id("pool", seed)


def compute_lp_class(pool_id: str) -> ShareClass:
    return derive_id("lp", pool_id)


def compute_vault(owner_id: str, asset: AssetId) -> AccountId:
    return derive_id("vault", owner_id, asset)


@dataclass(frozen=True)
class PoolState:
    """
    Identity of a constant-product pool.

    Attributes:
        pool_id: Deterministic pool identifier (hex string)
        seed: Caller-chosen seed the pool id is derived from
        asset_x: First asset identifier
        asset_y: Second asset identifier
        lp_class: Share class of the pool's LP shares
        fee_bps: Swap fee in basis points (0-10000), immutable
        authority: Derived protocol account that owns the vaults and mints LP
        vault_x: Custodial reserve account for asset_x
        vault_y: Custodial reserve account for asset_y
        created_at: Timestamp when the pool was created
    """
    pool_id: str
    seed: int
    asset_x: AssetId
    asset_y: AssetId
    lp_class: ShareClass
    fee_bps: int
    authority: AccountId
    vault_x: AccountId
    vault_y: AccountId
    created_at: int = 0

    def __post_init__(self) -> None:
        if self.asset_x == self.asset_y:
            raise ValueError(f"Pool assets must differ: {self.asset_x}")
        require_bps("fee_bps", self.fee_bps)
        if self.created_at < 0:
            raise ValueError(f"created_at must be non-negative: {self.created_at}")

    def vaults(self, x_to_y: bool) -> tuple[AccountId, AccountId]:
        """(input vault, output vault) for a swap direction."""
        return (self.vault_x, self.vault_y) if x_to_y else (self.vault_y, self.vault_x)

    def assets(self, x_to_y: bool) -> tuple[AssetId, AssetId]:
        """(input asset, output asset) for a swap direction."""
        return (self.asset_x, self.asset_y) if x_to_y else (self.asset_y, self.asset_x)
