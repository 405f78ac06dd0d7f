"""Exception types for the reservoir pricing core.

Every operation either commits all of its effects or raises one of these
before (or while rolling back) any mutation. The families map onto the
error taxonomy callers are expected to branch on:

- ``MathError``: overflow, underflow, division by zero, out-of-range
  float->integer conversion. Also an ``ArithmeticError``.
- ``SlippageError``: the result is worse than the caller's bound.
- ``MarketStateError``: the pool/market is in the wrong lifecycle state.
- ``AuthorizationError``: the caller has no claim to what it asked for.
"""

from __future__ import annotations


class ReservoirError(Exception):
    """Base class for all reservoir errors."""


# -- Arithmetic ---------------------------------------------------------------

class MathError(ReservoirError, ArithmeticError):
    """Raised when a checked arithmetic step would overflow, underflow or divide by zero."""


class MathRangeError(MathError):
    """Raised when an LMSR exponent exceeds the stable evaluation range."""


class InvalidAmountError(ReservoirError, ValueError):
    """Raised for zero, negative or otherwise malformed request amounts."""


# -- Slippage -----------------------------------------------------------------

class SlippageError(ReservoirError):
    """Raised when the computed amount violates a caller-supplied min/max bound."""

    def __init__(self, message: str, *, bound: int, actual: int) -> None:
        self.bound = bound
        self.actual = actual
        super().__init__(f"{message}: bound={bound} actual={actual}")


# -- Lifecycle state ----------------------------------------------------------

class MarketStateError(ReservoirError):
    """Raised when an operation is not allowed in the current pool/market state."""


class PoolStateError(MarketStateError):
    """Raised for pool lifecycle violations (unknown pool, no liquidity, duplicate id)."""


class MarketExpiredError(MarketStateError):
    """Raised when creating or trading a market at or past its expiry."""


class MarketNotExpiredError(MarketStateError):
    """Raised when resolving a market before its expiry."""


class MarketAlreadyResolvedError(MarketStateError):
    """Raised when trading or resolving a market that is already resolved."""


class MarketNotResolvedError(MarketStateError):
    """Raised when claiming against a market that is not resolved yet."""


# -- Authorization ------------------------------------------------------------

class AuthorizationError(ReservoirError):
    """Raised when the caller has no right to the requested transfer or claim."""


class UnauthorizedError(AuthorizationError):
    """Raised when an authority that does not own an account tries to move funds."""


class WrongSideError(AuthorizationError):
    """Raised when a claim is made for the losing side."""


class NoTokensToRedeemError(AuthorizationError):
    """Raised when the claimant holds no winning-side shares."""


class NoRewardsAvailableError(AuthorizationError):
    """Raised when the winning side has no shares or the payout rounds to zero."""


class InsufficientVaultFundsError(AuthorizationError):
    """Raised when the collateral reserve cannot fund a payout."""


# -- Custody / invariants ------------------------------------------------------

class InsufficientFundsError(ReservoirError):
    """Raised by custody when a transfer or burn exceeds the available balance."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"insufficient balance: required {required}, available {available}")


class InvariantViolationError(ReservoirError):
    """Raised when a post-state violates one or more ledger invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


# -- Configuration ---------------------------------------------------------------

class ConfigError(ReservoirError, ValueError):
    """Raised for malformed or unknown configuration values."""
