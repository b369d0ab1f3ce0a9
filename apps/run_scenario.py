#!/usr/bin/env python3
"""
Replay a pool scenario from JSON and print the per-step trace.

Printing policy:
1) Pool policy, offsets and initial wallets.
2) One line per step: epoch, live/current reserves, result or error.
3) Final wallets, share balances and recorded epoch state.

Exit status is 1 when any step's outcome differs from its `expect_error`.
"""

import argparse
import json

from epoch_amm import SnapshotPool
from epoch_amm.core.fmt import fmt_units, fmt_reserves
from epoch_amm.scenario import run_scenario, format_record


def parse_args():
    p = argparse.ArgumentParser(description="Replay an epoch AMM scenario.")
    p.add_argument("--input", required=True, help="Path to scenario JSON")
    p.add_argument("--places", type=int, default=4, help="Fractional digits when printing amounts")
    return p.parse_args()


def main() -> int:
    args = parse_args()

    with open(args.input, "r", encoding="utf-8") as f:
        doc = json.load(f)

    run = run_scenario(doc)
    pool = run.pool
    dec = run.token_a.decimals

    # -----------------------------
    # 1) Setup
    # -----------------------------
    print("\n=== Scenario ===")
    print(f"policy   : {doc.get('policy', 'offset')} ({type(pool).__name__})")
    print(f"offsets  : {pool.offsets.name}")
    print(f"epoch    : duration={pool.config.epoch_duration}s start={pool.config.epoch_start}")

    # -----------------------------
    # 2) Trace
    # -----------------------------
    print("\n=== Steps ===")
    for rec in run.records:
        print(format_record(rec, dec, args.places))

    # -----------------------------
    # 3) Final state
    # -----------------------------
    print("\n=== Final state ===")
    for holder in sorted(doc.get("accounts", {})):
        a, b = run.wallet(holder)
        print(f"{holder:<10} ALPHA={fmt_units(a, dec, args.places)} BETA={fmt_units(b, dec, args.places)} "
              f"{pool.shares.symbol}={fmt_units(pool.balance_of(holder), dec, args.places)}")
    if isinstance(pool, SnapshotPool):
        for epoch, value in sorted(pool.ledger.snapshots().items()):
            print(f"epoch_liquidity[{epoch}] = {fmt_units(value, dec, args.places)}")
    else:
        for epoch in pool.ledger.epochs():
            r = pool.epoch_reserves(epoch)
            shown = "empty" if r.is_empty() else fmt_reserves(r, dec, args.places)
            print(f"epoch_reserves[{epoch}] = {shown}")

    return 0 if run.all_as_expected() else 1


if __name__ == "__main__":
    raise SystemExit(main())
