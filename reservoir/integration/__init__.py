"""
Collaborators at the edge of the pricing core: custody, authorities, clocks
"""

from .authority import Authority, derive_authority
from .clock import Clock, FixedClock, SystemClock
from .custody import Custody, CustodyLedger

__all__ = [
    "Authority",
    "derive_authority",
    "Clock",
    "FixedClock",
    "SystemClock",
    "Custody",
    "CustodyLedger",
]
