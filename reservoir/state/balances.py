"""
Multi-asset custodial balance tracking.

Implements BalanceTable[AccountId, AssetId] -> Amount with u64 amounts.
"""

from typing import Dict, Tuple

from ..checked import U64_MAX
from ..errors import InsufficientFundsError, MathError


# Type aliases
AccountId = str  # 32-byte hex string (0x...), user or derived protocol account
AssetId = str  # asset or share-class identifier
Amount = int  # Non-negative integer, at most U64_MAX


class BalanceTable:
    """
    Balance table mapping (account, asset) -> amount.

    Reserve balances are read straight from this table; pool and market
    records never cache them.
    """

    def __init__(self):
        self._balances: Dict[Tuple[AccountId, AssetId], Amount] = {}

    def get(self, account: AccountId, asset: AssetId) -> Amount:
        """Get balance for (account, asset). Returns 0 if not found."""
        return self._balances.get((account, asset), 0)

    def _set(self, account: AccountId, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (account, asset).

        Raises:
            ValueError: If amount is negative
            MathError: If amount does not fit in u64
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount > U64_MAX:
            raise MathError(f"Balance overflow: {amount} exceeds u64")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def add(self, account: AccountId, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            InsufficientFundsError: If resulting balance would be negative
        """
        current = self.get(account, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise InsufficientFundsError(required=-delta, available=current)
        self._set(account, asset, new_balance)

    def subtract(self, account: AccountId, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, asset, -delta)

    def snapshot(self) -> Dict[Tuple[AccountId, AssetId], Amount]:
        return dict(self._balances)

    def restore(self, snapshot: Dict[Tuple[AccountId, AssetId], Amount]) -> None:
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
