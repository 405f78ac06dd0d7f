"""
Core pricing and settlement algorithms
"""

from .cpmm import (
    quote_swap,
    quote_deposit,
    quote_withdraw,
    spot_price,
)
from .fees import FeeSplitResult, add_fee, compute_fee, split_gross
from .lmsr import MAX_EXP_INPUT, buy_cost, prices, to_amount
from .ledger import ReserveLedger
from .amm import DepositReceipt, SwapReceipt, WithdrawReceipt, deposit, init_pool, swap, withdraw
from .market import (
    MarketCreated,
    MarketResolved,
    OutcomeBought,
    RewardsClaimed,
    buy_outcome,
    claim_rewards,
    create_market,
    resolve_market,
)
from .settlement import RedemptionQuote, redemption_payout, withdraw_payout
from .pricing import ConstantProductEngine, LmsrEngine, PricingEngine

__all__ = [
    "quote_swap",
    "quote_deposit",
    "quote_withdraw",
    "spot_price",
    "FeeSplitResult",
    "add_fee",
    "compute_fee",
    "split_gross",
    "MAX_EXP_INPUT",
    "buy_cost",
    "prices",
    "to_amount",
    "ReserveLedger",
    "DepositReceipt",
    "SwapReceipt",
    "WithdrawReceipt",
    "deposit",
    "init_pool",
    "swap",
    "withdraw",
    "MarketCreated",
    "MarketResolved",
    "OutcomeBought",
    "RewardsClaimed",
    "buy_outcome",
    "claim_rewards",
    "create_market",
    "resolve_market",
    "RedemptionQuote",
    "redemption_payout",
    "withdraw_payout",
    "ConstantProductEngine",
    "LmsrEngine",
    "PricingEngine",
]
