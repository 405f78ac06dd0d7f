"""
State records and ledgers for reservoir pools and markets
"""

from .balances import BalanceTable
from .markets import MarketState, OutcomeSide
from .pools import PoolState
from .shares import ShareTable

__all__ = [
    "BalanceTable",
    "MarketState",
    "OutcomeSide",
    "PoolState",
    "ShareTable",
]
