"""Comprehensive demo: epoch-partitioned pools under desynchronized vs aligned offsets.

Scenarios covered:
S1a) Snapshot policy, desynchronized: stale epoch-0 K lets an oversized swap through
S1b) Snapshot policy, aligned: the same swap is rejected against live K
S2)  Snapshot policy, epoch 0: no snapshot yet, swaps validate against live reserves
S3a) Offset policy, desynchronized: mint at e, price at e-1, burn at e+1
S3b) Offset policy, aligned: the same flow on a single epoch slot
S4)  Offset policy, skipped epochs: carry-forward reads the empty slot before the new epoch
"""
from __future__ import annotations

import argparse
from copy import deepcopy
from typing import Any, Dict

from epoch_amm.core.fmt import fmt_dec, units_to_decimal
from epoch_amm.scenario import run_scenario, format_record

ACCOUNTS = {"alice": [100000, 100000], "attacker": [100000, 100000]}

SNAPSHOT_EXPLOIT: Dict[str, Any] = {
    "policy": "snapshot",
    "scale": "token",
    "config": {"offsets": "desynchronized"},
    "accounts": ACCOUNTS,
    "steps": [
        {"op": "mint", "who": "alice", "amount_a": 10000, "amount_b": 10000},
        {"op": "advance", "epochs": 1},
        {"op": "sync"},
        {"op": "mint", "who": "attacker", "amount_a": 50000, "amount_b": 50000},
        {"op": "transfer", "who": "attacker", "token": "b", "amount": 1000},
        {"op": "swap", "to": "attacker", "amount_a_out": 5000, "amount_b_out": 0},
        {"op": "burn", "who": "attacker", "shares": "all"},
    ],
}

SNAPSHOT_FALLBACK: Dict[str, Any] = {
    "policy": "snapshot",
    "scale": "token",
    "accounts": ACCOUNTS,
    "steps": [
        {"op": "mint", "who": "alice", "amount_a": 10000, "amount_b": 10000},
        {"op": "transfer", "who": "attacker", "token": "b", "amount": 100},
        {"op": "swap", "to": "attacker", "amount_a_out": 90, "amount_b_out": 0},
        {"op": "transfer", "who": "attacker", "token": "b", "amount": 100},
        {"op": "swap", "to": "attacker", "amount_a_out": 1000, "amount_b_out": 0,
         "expect_error": "InvariantViolation"},
    ],
}

OFFSET_FLOW: Dict[str, Any] = {
    "policy": "offset",
    "scale": "token",
    "config": {"offsets": "desynchronized"},
    "accounts": {"owner": [200000, 200000], "attacker": [10000, 10000]},
    "steps": [
        {"op": "add_liquidity", "who": "owner", "amount_a": 100000, "amount_b": 100000},
        {"op": "advance", "epochs": 1},
        {"op": "add_liquidity", "who": "attacker", "amount_a": 100, "amount_b": 100},
        {"op": "swap", "who": "attacker", "amount_in": 1, "a_to_b": True},
        {"op": "remove_liquidity", "who": "attacker", "shares": "all"},
    ],
}

OFFSET_SKIP: Dict[str, Any] = {
    "policy": "offset",
    "scale": "token",
    "accounts": {"owner": [200000, 200000]},
    "steps": [
        {"op": "add_liquidity", "who": "owner", "amount_a": 1000, "amount_b": 1000},
        {"op": "advance", "epochs": 3},
        {"op": "sync"},
        {"op": "swap", "who": "owner", "amount_in": 1, "a_to_b": True,
         "expect_error": "ZeroOutputComputed"},
    ],
}


def aligned(doc: Dict[str, Any], **step_overrides: Any) -> Dict[str, Any]:
    out = deepcopy(doc)
    out.setdefault("config", {})["offsets"] = "aligned"
    for index, patch in step_overrides.items():
        out["steps"][int(index.lstrip("s"))].update(patch)
    return out


SCENARIOS = {
    "S1a": ("Snapshot, desynchronized: stale K admits the swap", SNAPSHOT_EXPLOIT),
    "S1b": ("Snapshot, aligned: same swap rejected against live K",
            aligned(SNAPSHOT_EXPLOIT, s5={"expect_error": "InvariantViolation"})),
    "S2": ("Snapshot, epoch 0 fallback to live reserves", SNAPSHOT_FALLBACK),
    "S3a": ("Offset, desynchronized mint/price/burn epochs", OFFSET_FLOW),
    "S3b": ("Offset, aligned epochs", aligned(OFFSET_FLOW)),
    "S4": ("Offset, skipped epochs carry forward an empty slot", OFFSET_SKIP),
}


def print_run(title: str, doc: Dict[str, Any], *, compact: bool = False) -> bool:
    run = run_scenario(doc)
    print(f"\n=== {title} ===")
    if not compact:
        for rec in run.records:
            print(format_record(rec))
    for holder in sorted(doc.get("accounts", {})):
        a, b = run.wallet(holder)
        start_a, start_b = doc["accounts"][holder]
        da = units_to_decimal(a) - start_a
        db = units_to_decimal(b) - start_b
        print(f"- {holder}: ΔALPHA={fmt_dec(da)}, ΔBETA={fmt_dec(db)}")
    print(f"- all steps as expected: {run.all_as_expected()}")
    return run.all_as_expected()


def main() -> int:
    parser = argparse.ArgumentParser(description="Epoch AMM demo scenarios")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS) + ["all"], default="all")
    parser.add_argument("--compact", action="store_true", help="Only print wallet deltas")
    args = parser.parse_args()

    names = sorted(SCENARIOS) if args.scenario == "all" else [args.scenario]
    ok = True
    for name in names:
        title, doc = SCENARIOS[name]
        ok = print_run(f"{name}) {title}", doc, compact=args.compact) and ok
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
