"""
Claim-share ledger: LP shares for pools, YES/NO outcome shares for markets.

Shares are scoped per share class and tracked separately from custodial asset
balances. Supply only changes through ``mint``/``burn``, so the total supply
of a class always equals the sum of its holder balances.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..checked import checked_add
from ..errors import InsufficientFundsError
from .balances import AccountId, Amount

# Type alias
ShareClass = str


class ShareTable:
    """
    Share balance table mapping (holder, share_class) -> amount, plus per-class supply.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[AccountId, ShareClass], Amount] = {}
        self._supply: Dict[ShareClass, Amount] = {}

    def get(self, holder: AccountId, share_class: ShareClass) -> Amount:
        """Get share balance for (holder, share_class). Returns 0 if not found."""
        return self._balances.get((holder, share_class), 0)

    def total_supply(self, share_class: ShareClass) -> Amount:
        return self._supply.get(share_class, 0)

    def mint(self, holder: AccountId, share_class: ShareClass, amount: Amount) -> None:
        """Mint new shares to a holder; supply and balance are both overflow-checked."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        new_supply = checked_add(self.total_supply(share_class), amount)
        new_balance = checked_add(self.get(holder, share_class), amount)
        self._set_balance(holder, share_class, new_balance)
        self._set_supply(share_class, new_supply)

    def burn(self, holder: AccountId, share_class: ShareClass, amount: Amount) -> None:
        """Burn shares from a holder."""
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.get(holder, share_class)
        if amount > current:
            raise InsufficientFundsError(required=amount, available=current)
        self._set_balance(holder, share_class, current - amount)
        self._set_supply(share_class, self.total_supply(share_class) - amount)

    def holders(self, share_class: ShareClass) -> Dict[AccountId, Amount]:
        return {h: amt for (h, c), amt in self._balances.items() if c == share_class}

    def _set_balance(self, holder: AccountId, share_class: ShareClass, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop((holder, share_class), None)
        else:
            self._balances[(holder, share_class)] = amount

    def _set_supply(self, share_class: ShareClass, amount: Amount) -> None:
        if amount == 0:
            self._supply.pop(share_class, None)
        else:
            self._supply[share_class] = amount

    def snapshot(self) -> Tuple[Dict[Tuple[AccountId, ShareClass], Amount], Dict[ShareClass, Amount]]:
        return dict(self._balances), dict(self._supply)

    def restore(
        self,
        snapshot: Tuple[Dict[Tuple[AccountId, ShareClass], Amount], Dict[ShareClass, Amount]],
    ) -> None:
        balances, supply = snapshot
        self._balances = dict(balances)
        self._supply = dict(supply)

    def verify_conservation(self, share_class: ShareClass) -> bool:
        """Total supply equals the sum of all holder balances."""
        return self.total_supply(share_class) == sum(self.holders(share_class).values())

    def __repr__(self) -> str:
        return f"ShareTable({len(self._balances)} entries, {len(self._supply)} classes)"
