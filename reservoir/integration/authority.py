"""
Deterministic protocol authorities.

A protocol-owned account is derived from seed material instead of a key
pair. Holding the `Authority` object is the capability to move funds out of
the reserves it owns and to mint the share classes registered to it; nothing
here is secret.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from ..state.balances import AccountId
from ..state.canonical import derive_id


@dataclass(frozen=True)
class Authority:
    account: AccountId
    seeds: Tuple[Any, ...]

    def owns(self, owner: AccountId) -> bool:
        return self.account == owner


def derive_authority(*seeds: Any) -> Authority:
    """
    Derive the authority for a seed tuple, e.g. ``derive_authority("pool", pool_id)``.

    Same seeds always yield the same account; seeds must be canonical-JSON
    encodable (str/int/bool/None, lists thereof).
    """
    if not seeds:
        raise ValueError("at least one seed is required")
    return Authority(account=derive_id("authority", *seeds), seeds=tuple(seeds))
