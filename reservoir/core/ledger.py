"""
Reserve ledger: the protocol-side view of one pool's or market's custody.

The ledger never stores balances itself. It reads reserves from the custodial
vault accounts and moves funds through the custody service, signing payouts
and mints with the pool/market `Authority`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..integration.authority import Authority
from ..integration.custody import Custody
from ..state.balances import AccountId, Amount, AssetId
from ..state.shares import ShareClass


@dataclass(frozen=True)
class ReserveLedger:
    custody: Custody
    authority: Authority

    def reserve(self, vault: AccountId, asset: AssetId) -> Amount:
        return self.custody.balance(vault, asset)

    def claim_supply(self, share_class: ShareClass) -> Amount:
        return self.custody.supply(share_class)

    def claim_balance(self, holder: AccountId, share_class: ShareClass) -> Amount:
        return self.custody.share_balance(holder, share_class)

    def collect(self, asset: AssetId, payer: AccountId, vault: AccountId, amount: Amount) -> None:
        """Move funds from a payer into a reserve (or any protocol destination)."""
        if amount > 0:
            self.custody.transfer(asset, payer, vault, amount)

    def pay(self, asset: AssetId, vault: AccountId, recipient: AccountId, amount: Amount) -> None:
        """Move funds out of a reserve, authorized by the ledger's authority."""
        if amount > 0:
            self.custody.transfer(asset, vault, recipient, amount, authority=self.authority)

    def issue(self, share_class: ShareClass, holder: AccountId, amount: Amount) -> None:
        if amount > 0:
            self.custody.mint(share_class, holder, amount, authority=self.authority)

    def retire(self, share_class: ShareClass, holder: AccountId, amount: Amount) -> None:
        if amount > 0:
            self.custody.burn(share_class, holder, amount)
