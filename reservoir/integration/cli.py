#!/usr/bin/env python3
"""
Offline quote tool.

Prices a request against reserves/quantities given on the command line and
prints the result as JSON; nothing is executed or persisted.

    python -m reservoir.integration.cli quote-swap --reserve-in 500000 --reserve-out 250000 --amount-in 10000
    python -m reservoir.integration.cli quote-buy --b-scaled 100000000 --side yes --shares 10
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ..core import cpmm, lmsr
from ..core.fees import add_fee
from ..errors import ReservoirError
from ..state.markets import B_SCALE, OutcomeSide
from .config import EngineConfig, config_from_env, configure_logging, load_config

logger = logging.getLogger(__name__)


def _quote_swap(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    fee_bps = config.default_fee_bps if args.fee_bps is None else args.fee_bps
    q = cpmm.quote_swap(args.reserve_in, args.reserve_out, args.amount_in, fee_bps)
    return {
        "amount_in": q.amount_in,
        "fee_amount": q.fee_amount,
        "net_in": q.net_in,
        "amount_out": q.amount_out,
        "new_reserve_in": q.new_reserve_in,
        "new_reserve_out": q.new_reserve_out,
        "k_before": q.k_before,
        "k_after": q.k_after,
    }


def _quote_deposit(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    q = cpmm.quote_deposit(
        args.reserve_x, args.reserve_y, args.total_shares, args.shares, args.max_x, args.max_y
    )
    return {
        "shares": q.shares,
        "amount_x": q.amount_x,
        "amount_y": q.amount_y,
        "bootstrap": q.bootstrap,
        "within_bounds": q.amount_x <= args.max_x and q.amount_y <= args.max_y,
    }


def _quote_withdraw(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    q = cpmm.quote_withdraw(args.reserve_x, args.reserve_y, args.total_shares, args.lp_amount)
    return {"shares": q.shares, "amount_x": q.amount_x, "amount_y": q.amount_y}


def _quote_buy(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    fee_bps = config.default_fee_bps if args.fee_bps is None else args.fee_bps
    side = OutcomeSide(args.side)
    raw = lmsr.buy_cost(
        args.b_scaled / B_SCALE, args.q_yes, args.q_no, side, args.shares,
        max_exp_input=config.max_exp_input,
    )
    split = add_fee(lmsr.to_amount(raw), fee_bps)
    return {
        "side": side.value,
        "shares": args.shares,
        "raw_cost": raw,
        "cost": split.net_amount,
        "fee_amount": split.fee_amount,
        "total_paid": split.gross_amount,
    }


def _prices(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    p_yes, p_no = lmsr.prices(args.b_scaled / B_SCALE, args.q_yes, args.q_no)
    return {"yes": p_yes, "no": p_no}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="reservoir", description="Quote CP-AMM and LMSR trades offline.")
    p.add_argument("--config", type=Path, default=None, help="YAML config file (RESERVOIR_* env vars override it)")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("quote-swap", help="Exact-in swap against (reserve_in, reserve_out)")
    s.add_argument("--reserve-in", type=int, required=True)
    s.add_argument("--reserve-out", type=int, required=True)
    s.add_argument("--amount-in", type=int, required=True)
    s.add_argument("--fee-bps", type=int, default=None, help="Swap fee (default: config default_fee_bps)")
    s.set_defaults(handler=_quote_swap)

    d = sub.add_parser("quote-deposit", help="Amounts required to mint LP shares")
    d.add_argument("--reserve-x", type=int, required=True)
    d.add_argument("--reserve-y", type=int, required=True)
    d.add_argument("--total-shares", type=int, required=True)
    d.add_argument("--shares", type=int, required=True)
    d.add_argument("--max-x", type=int, required=True)
    d.add_argument("--max-y", type=int, required=True)
    d.set_defaults(handler=_quote_deposit)

    w = sub.add_parser("quote-withdraw", help="Payout for burning LP shares")
    w.add_argument("--reserve-x", type=int, required=True)
    w.add_argument("--reserve-y", type=int, required=True)
    w.add_argument("--total-shares", type=int, required=True)
    w.add_argument("--lp-amount", type=int, required=True)
    w.set_defaults(handler=_quote_withdraw)

    b = sub.add_parser("quote-buy", help="LMSR cost and fee for buying outcome shares")
    b.add_argument("--b-scaled", type=int, required=True, help="Liquidity parameter scaled by 1e6")
    b.add_argument("--q-yes", type=int, default=0)
    b.add_argument("--q-no", type=int, default=0)
    b.add_argument("--side", choices=[s.value for s in OutcomeSide], required=True)
    b.add_argument("--shares", type=int, required=True)
    b.add_argument("--fee-bps", type=int, default=None, help="Trading fee (default: config default_fee_bps)")
    b.set_defaults(handler=_quote_buy)

    pr = sub.add_parser("prices", help="LMSR marginal prices")
    pr.add_argument("--b-scaled", type=int, required=True, help="Liquidity parameter scaled by 1e6")
    pr.add_argument("--q-yes", type=int, default=0)
    pr.add_argument("--q-no", type=int, default=0)
    pr.set_defaults(handler=_prices)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config is not None else EngineConfig()
        config = config_from_env(config)
        configure_logging(config)
        result = args.handler(args, config)
    except (OSError, ReservoirError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.debug("%s -> %s", args.command, result)
    print(json.dumps(result, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
