"""
Constant-product pool operations.

Each operation reads the pool's reserves and LP supply from custody, prices
the request with the integer kernels in `cpmm`, checks the caller's slippage
bounds, and then moves funds and shares inside one custody transaction.
Post-state invariants are enforced before the transaction commits, so a
failing check rolls every mutation back.

Fee convention: swaps charge the fee on the input amount and leave it in the
input reserve (it accrues to LPs). Deposits and withdrawals are fee-free.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..checked import require_bps
from ..errors import InvalidAmountError, PoolStateError, SlippageError
from ..integration.authority import Authority, derive_authority
from ..integration.custody import Custody
from ..state.balances import AccountId, Amount, AssetId
from ..state.pools import PoolState, compute_lp_class, compute_pool_id, compute_vault
from . import cpmm
from .invariants import check_liquidity, check_swap, enforce, pool_snapshot
from .ledger import ReserveLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapReceipt:
    pool_id: str
    user: AccountId
    x_to_y: bool
    amount_in: int
    fee_amount: int
    amount_out: int
    reserve_in: int
    reserve_out: int


@dataclass(frozen=True)
class DepositReceipt:
    pool_id: str
    user: AccountId
    shares: int
    amount_x: int
    amount_y: int
    lp_supply: int


@dataclass(frozen=True)
class WithdrawReceipt:
    pool_id: str
    user: AccountId
    shares: int
    amount_x: int
    amount_y: int
    lp_supply: int


def pool_authority(pool: PoolState) -> Authority:
    return derive_authority("pool", pool.pool_id)


def _ledger(custody: Custody, pool: PoolState) -> ReserveLedger:
    return ReserveLedger(custody=custody, authority=pool_authority(pool))


def init_pool(
    custody: Custody,
    seed: int,
    asset_x: AssetId,
    asset_y: AssetId,
    fee_bps: int,
    created_at: int = 0,
) -> PoolState:
    """
    Create a pool and register its vaults and LP share class with custody.

    Raises:
        ValueError: fee_bps outside [0, 10000] or identical assets
        PoolStateError: a pool with this seed already exists
    """
    require_bps("fee_bps", fee_bps)
    if asset_x == asset_y:
        raise ValueError(f"Pool assets must differ: {asset_x}")

    pool_id = compute_pool_id(seed)
    lp_class = compute_lp_class(pool_id)
    if custody.mint_authority(lp_class) is not None:
        raise PoolStateError(f"pool {pool_id} already exists for seed {seed}")

    authority = derive_authority("pool", pool_id)
    pool = PoolState(
        pool_id=pool_id,
        seed=seed,
        asset_x=asset_x,
        asset_y=asset_y,
        lp_class=lp_class,
        fee_bps=fee_bps,
        authority=authority.account,
        vault_x=compute_vault(pool_id, asset_x),
        vault_y=compute_vault(pool_id, asset_y),
        created_at=created_at,
    )
    custody.register_vault(pool.vault_x, authority)
    custody.register_vault(pool.vault_y, authority)
    custody.register_mint(lp_class, authority)
    logger.info("pool created: id=%s seed=%d pair=(%s, %s) fee_bps=%d", pool_id, seed, asset_x, asset_y, fee_bps)
    return pool


def reserves(custody: Custody, pool: PoolState) -> tuple[Amount, Amount]:
    return custody.balance(pool.vault_x, pool.asset_x), custody.balance(pool.vault_y, pool.asset_y)


def swap(
    custody: Custody,
    pool: PoolState,
    user: AccountId,
    amount_in: Amount,
    min_out: Amount,
    x_to_y: bool,
) -> SwapReceipt:
    """
    Exact-in swap.

    The vault receives the gross `amount_in`; only the net of fee is priced.

    Raises:
        InvalidAmountError: zero input or an output that rounds to zero
        SlippageError: output below `min_out`
        InsufficientFundsError: user cannot cover `amount_in`
    """
    if amount_in == 0:
        raise InvalidAmountError("amount_in must be positive")

    ledger = _ledger(custody, pool)
    vault_in, vault_out = pool.vaults(x_to_y)
    asset_in, asset_out = pool.assets(x_to_y)
    reserve_in = ledger.reserve(vault_in, asset_in)
    reserve_out = ledger.reserve(vault_out, asset_out)

    quote = cpmm.quote_swap(reserve_in, reserve_out, amount_in, pool.fee_bps)
    logger.debug("swap quote %s: %s", pool.pool_id, quote)
    if quote.amount_out < min_out:
        raise SlippageError("swap output below minimum", bound=min_out, actual=quote.amount_out)

    before = pool_snapshot(custody, pool)
    with custody.transaction():
        ledger.collect(asset_in, user, vault_in, amount_in)
        ledger.pay(asset_out, vault_out, user, quote.amount_out)
        enforce(check_swap(before, pool_snapshot(custody, pool)), f"swap {pool.pool_id}")

    logger.info(
        "swap committed: pool=%s user=%s in=%d %s out=%d %s fee=%d",
        pool.pool_id, user, amount_in, asset_in, quote.amount_out, asset_out, quote.fee_amount,
    )
    return SwapReceipt(
        pool_id=pool.pool_id,
        user=user,
        x_to_y=x_to_y,
        amount_in=amount_in,
        fee_amount=quote.fee_amount,
        amount_out=quote.amount_out,
        reserve_in=quote.new_reserve_in,
        reserve_out=quote.new_reserve_out,
    )


def deposit(
    custody: Custody,
    pool: PoolState,
    user: AccountId,
    desired_shares: Amount,
    max_x: Amount,
    max_y: Amount,
) -> DepositReceipt:
    """
    Mint `desired_shares` LP shares against a proportional deposit.

    The first deposit into an empty pool sets the price with exactly
    ``(max_x, max_y)``.

    Raises:
        InvalidAmountError: zero shares
        SlippageError: required amounts exceed (max_x, max_y)
    """
    if desired_shares == 0:
        raise InvalidAmountError("desired_shares must be positive")

    ledger = _ledger(custody, pool)
    reserve_x, reserve_y = reserves(custody, pool)
    total = ledger.claim_supply(pool.lp_class)

    quote = cpmm.quote_deposit(reserve_x, reserve_y, total, desired_shares, max_x, max_y)
    logger.debug("deposit quote %s: %s", pool.pool_id, quote)
    if quote.amount_x > max_x:
        raise SlippageError("deposit requires more X than max_x", bound=max_x, actual=quote.amount_x)
    if quote.amount_y > max_y:
        raise SlippageError("deposit requires more Y than max_y", bound=max_y, actual=quote.amount_y)

    before = pool_snapshot(custody, pool)
    with custody.transaction():
        ledger.collect(pool.asset_x, user, pool.vault_x, quote.amount_x)
        ledger.collect(pool.asset_y, user, pool.vault_y, quote.amount_y)
        ledger.issue(pool.lp_class, user, quote.shares)
        after = pool_snapshot(custody, pool)
        enforce(check_liquidity(before, after), f"deposit {pool.pool_id}")

    logger.info(
        "deposit committed: pool=%s user=%s shares=%d x=%d y=%d bootstrap=%s",
        pool.pool_id, user, quote.shares, quote.amount_x, quote.amount_y, quote.bootstrap,
    )
    return DepositReceipt(
        pool_id=pool.pool_id,
        user=user,
        shares=quote.shares,
        amount_x=quote.amount_x,
        amount_y=quote.amount_y,
        lp_supply=after.lp_supply,
    )


def withdraw(
    custody: Custody,
    pool: PoolState,
    user: AccountId,
    lp_amount: Amount,
    min_x: Amount,
    min_y: Amount,
) -> WithdrawReceipt:
    """
    Burn `lp_amount` LP shares for a floor-proportional share of both reserves.

    Raises:
        InvalidAmountError: zero or more than the supply
        SlippageError: either payout below its minimum
        InsufficientFundsError: user holds fewer than `lp_amount` shares
    """
    if lp_amount == 0:
        raise InvalidAmountError("lp_amount must be positive")

    ledger = _ledger(custody, pool)
    reserve_x, reserve_y = reserves(custody, pool)
    total = ledger.claim_supply(pool.lp_class)

    quote = cpmm.quote_withdraw(reserve_x, reserve_y, total, lp_amount)
    logger.debug("withdraw quote %s: %s", pool.pool_id, quote)
    if quote.amount_x < min_x:
        raise SlippageError("withdraw X below min_x", bound=min_x, actual=quote.amount_x)
    if quote.amount_y < min_y:
        raise SlippageError("withdraw Y below min_y", bound=min_y, actual=quote.amount_y)

    before = pool_snapshot(custody, pool)
    with custody.transaction():
        ledger.retire(pool.lp_class, user, quote.shares)
        ledger.pay(pool.asset_x, pool.vault_x, user, quote.amount_x)
        ledger.pay(pool.asset_y, pool.vault_y, user, quote.amount_y)
        after = pool_snapshot(custody, pool)
        enforce(check_liquidity(before, after), f"withdraw {pool.pool_id}")

    logger.info(
        "withdraw committed: pool=%s user=%s shares=%d x=%d y=%d",
        pool.pool_id, user, quote.shares, quote.amount_x, quote.amount_y,
    )
    return WithdrawReceipt(
        pool_id=pool.pool_id,
        user=user,
        shares=quote.shares,
        amount_x=quote.amount_x,
        amount_y=quote.amount_y,
        lp_supply=after.lp_supply,
    )


__all__ = [
    "SwapReceipt",
    "DepositReceipt",
    "WithdrawReceipt",
    "pool_authority",
    "init_pool",
    "reserves",
    "swap",
    "deposit",
    "withdraw",
]
