"""
Custodial transfer service.

`CustodyLedger` is the in-memory implementation of the transfer/mint/burn
collaborator the pricing core talks to. It combines a `BalanceTable` for
fungible assets with a `ShareTable` for claim shares, and enforces ownership:

- vault accounts registered to an authority only release funds when that
  authority is presented;
- share classes registered to an authority only mint when that authority is
  presented.

Every core operation runs its mutations inside `transaction()`, which
restores the pre-operation snapshot if anything raises.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Protocol

from ..errors import InvalidAmountError, UnauthorizedError
from ..state.balances import AccountId, Amount, AssetId, BalanceTable
from ..state.shares import ShareClass, ShareTable
from .authority import Authority

logger = logging.getLogger(__name__)


class Custody(Protocol):
    def balance(self, account: AccountId, asset: AssetId) -> Amount: ...

    def share_balance(self, holder: AccountId, share_class: ShareClass) -> Amount: ...

    def supply(self, share_class: ShareClass) -> Amount: ...

    def holders(self, share_class: ShareClass) -> Dict[AccountId, Amount]: ...

    def transfer(
        self,
        asset: AssetId,
        src: AccountId,
        dst: AccountId,
        amount: Amount,
        *,
        authority: Optional[Authority] = None,
    ) -> None: ...

    def mint(self, share_class: ShareClass, to: AccountId, amount: Amount, *, authority: Authority) -> None: ...

    def burn(self, share_class: ShareClass, holder: AccountId, amount: Amount) -> None: ...

    def transaction(self): ...


def _require_amount(amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise InvalidAmountError(f"amount must be non-negative: {amount}")


class CustodyLedger:
    def __init__(
        self,
        balances: Optional[BalanceTable] = None,
        shares: Optional[ShareTable] = None,
    ) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self.shares = shares if shares is not None else ShareTable()
        self._vault_owners: Dict[AccountId, AccountId] = {}
        self._mint_authorities: Dict[ShareClass, AccountId] = {}
        self._depth = 0

    # -- registration ---------------------------------------------------------

    def register_vault(self, account: AccountId, authority: Authority) -> None:
        owner = self._vault_owners.get(account)
        if owner is not None and owner != authority.account:
            raise UnauthorizedError(f"vault {account} is already owned by {owner}")
        self._vault_owners[account] = authority.account

    def register_mint(self, share_class: ShareClass, authority: Authority) -> None:
        owner = self._mint_authorities.get(share_class)
        if owner is not None and owner != authority.account:
            raise UnauthorizedError(f"share class {share_class} already has mint authority {owner}")
        self._mint_authorities[share_class] = authority.account

    def vault_owner(self, account: AccountId) -> Optional[AccountId]:
        return self._vault_owners.get(account)

    def mint_authority(self, share_class: ShareClass) -> Optional[AccountId]:
        return self._mint_authorities.get(share_class)

    # -- reads ----------------------------------------------------------------

    def balance(self, account: AccountId, asset: AssetId) -> Amount:
        return self.balances.get(account, asset)

    def share_balance(self, holder: AccountId, share_class: ShareClass) -> Amount:
        return self.shares.get(holder, share_class)

    def supply(self, share_class: ShareClass) -> Amount:
        return self.shares.total_supply(share_class)

    def holders(self, share_class: ShareClass) -> Dict[AccountId, Amount]:
        return self.shares.holders(share_class)

    # -- writes ---------------------------------------------------------------

    def credit(self, account: AccountId, asset: AssetId, amount: Amount) -> None:
        """Bring external funds into custody (bridge deposits, test fixtures)."""
        _require_amount(amount)
        self.balances.add(account, asset, amount)

    def transfer(
        self,
        asset: AssetId,
        src: AccountId,
        dst: AccountId,
        amount: Amount,
        *,
        authority: Optional[Authority] = None,
    ) -> None:
        _require_amount(amount)
        owner = self._vault_owners.get(src)
        if owner is not None and (authority is None or not authority.owns(owner)):
            raise UnauthorizedError(f"transfer out of vault {src} requires its authority")
        if amount == 0 or src == dst:
            return
        self.balances.subtract(src, asset, amount)
        self.balances.add(dst, asset, amount)

    def mint(self, share_class: ShareClass, to: AccountId, amount: Amount, *, authority: Authority) -> None:
        _require_amount(amount)
        owner = self._mint_authorities.get(share_class)
        if owner is None or not authority.owns(owner):
            raise UnauthorizedError(f"mint of {share_class} requires its mint authority")
        self.shares.mint(to, share_class, amount)

    def burn(self, share_class: ShareClass, holder: AccountId, amount: Amount) -> None:
        _require_amount(amount)
        self.shares.burn(holder, share_class, amount)

    @contextmanager
    def transaction(self) -> Iterator["CustodyLedger"]:
        """
        All-or-nothing scope. Nested scopes join the outermost one.

        On any exception the balance and share tables are restored to the
        snapshot taken on entry and the exception propagates.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        balances_snap = self.balances.snapshot()
        shares_snap = self.shares.snapshot()
        self._depth = 1
        try:
            yield self
        except BaseException as exc:
            self.balances.restore(balances_snap)
            self.shares.restore(shares_snap)
            logger.warning("custody transaction rolled back: %s", exc)
            raise
        finally:
            self._depth = 0

    def __repr__(self) -> str:
        return f"CustodyLedger({self.balances!r}, {self.shares!r})"
