"""
Swap engine math: constant product with the fee on input. Pool math only.

Offset policy
  amount_out = (reserve_out // reserve_in) * amount_in * FEE_NUM // FEE_DEN,
  priced on one epoch slot and settled on another.

Snapshot policy
  optimistic transfer: outputs are paid first, inputs are inferred from the
  pool's observed balances, and the fee-adjusted product must reach
  `k_required`, which comes from the previous epoch's liquidity snapshot when
  one exists.
"""
from __future__ import annotations

from typing import Optional, Tuple

from .core import checked
from .core.constants import FEE_NUM, FEE_DEN, FEE_K_SCALE, FEE_K_WEIGHT, MAX_SWAP_IN
from .core.datatypes import EpochReserves, SwapDirection, SwapQuote
from .core.exc import (
    ZeroAmount,
    ZeroOutputComputed,
    InvariantViolation,
    SwapCapExceeded,
)

# --- Debug utilities (toggleable) ---
DEBUG_SWAP = False

def _dbg(msg: str) -> None:
    if DEBUG_SWAP:
        print(f"[SWAP] {msg}")


# ---------------------------------------------------------------------------
# Offset policy
# ---------------------------------------------------------------------------

def offset_amount_out(amount_in: int,
                      reserve_in: int,
                      reserve_out: int,
                      *,
                      fee_num: int = FEE_NUM,
                      fee_den: int = FEE_DEN) -> int:
    """Integer-rate quote: the reserve ratio is floored *before* scaling by amount_in."""
    if reserve_in == 0:
        return 0
    rate = checked.div(reserve_out, reserve_in)
    gross = checked.mul(rate, amount_in)
    return checked.mul_div(gross, fee_num, fee_den)


def quote_offset_swap(amount_in: int,
                      direction: SwapDirection,
                      priced: EpochReserves,
                      *,
                      max_swap_in: int = MAX_SWAP_IN,
                      fee_num: int = FEE_NUM,
                      fee_den: int = FEE_DEN,
                      priced_epoch: int = 0,
                      settled_epoch: int = 0) -> SwapQuote:
    checked.require_uint("amount_in", amount_in)
    if amount_in == 0:
        raise ZeroAmount("amount_in must be > 0")
    if amount_in > max_swap_in:
        raise SwapCapExceeded(amount_in, max_swap_in)
    reserve_in, reserve_out = direction.orient(priced)
    amount_out = offset_amount_out(amount_in, reserve_in, reserve_out, fee_num=fee_num, fee_den=fee_den)
    _dbg(f"offset quote {direction.value}: in={amount_in} priced=({reserve_in}, {reserve_out}) out={amount_out}")
    if amount_out == 0:
        raise ZeroOutputComputed(
            f"swap of {amount_in} against priced reserves ({reserve_in}, {reserve_out}) pays nothing"
        )
    return SwapQuote(direction, amount_in, amount_out, priced_epoch, settled_epoch)


# ---------------------------------------------------------------------------
# Snapshot policy
# ---------------------------------------------------------------------------

def required_k(snapshot_value: int,
               live_a: int,
               live_b: int,
               current_epoch: int) -> int:
    """K a swap must preserve.

    The squared snapshot when the pool is past epoch 0 and the snapshot is
    nonzero; otherwise the live product. A missing snapshot and a recorded zero
    are indistinguishable here, both fall back to live reserves.
    """
    if current_epoch > 0 and snapshot_value > 0:
        return checked.mul(snapshot_value, snapshot_value)
    return checked.mul(live_a, live_b)


def observed_input(balance: int, reserve: int, amount_out: int) -> int:
    """Input implied by a post-payout balance: balance - (reserve - amount_out), floored at 0."""
    expected = reserve - amount_out
    return balance - expected if balance > expected else 0


def observed_inputs(balance_a: int,
                    balance_b: int,
                    reserve_a: int,
                    reserve_b: int,
                    amount_a_out: int,
                    amount_b_out: int) -> Tuple[int, int]:
    """Per-side inputs; both may be zero, in which case only the K check can reject."""
    return (
        observed_input(balance_a, reserve_a, amount_a_out),
        observed_input(balance_b, reserve_b, amount_b_out),
    )


def fee_adjusted(balance: int, amount_in: int) -> int:
    """balance * FEE_K_SCALE - FEE_K_WEIGHT * amount_in."""
    return checked.sub(
        checked.mul(balance, FEE_K_SCALE),
        checked.mul(amount_in, FEE_K_WEIGHT),
        what="fee-adjusted balance",
    )


def check_k(balance_a: int,
            balance_b: int,
            amount_a_in: int,
            amount_b_in: int,
            k_req: int) -> None:
    """Raise InvariantViolation unless adj_a * adj_b >= k_req * FEE_K_SCALE**2."""
    lhs = checked.mul(fee_adjusted(balance_a, amount_a_in), fee_adjusted(balance_b, amount_b_in))
    rhs = checked.mul(k_req, FEE_K_SCALE * FEE_K_SCALE)
    _dbg(f"check_k lhs={lhs} rhs={rhs} ok={lhs >= rhs}")
    if lhs < rhs:
        raise InvariantViolation(lhs, rhs)


def max_out_for_input(amount_in: int,
                      reserve_in: int,
                      reserve_out: int,
                      k_req: int) -> int:
    """Largest single-sided output that still passes `check_k` for a given input.

    Preview helper for traders; solves for out with integer bisection.
    """
    if amount_in == 0 or reserve_out == 0:
        return 0
    balance_in = checked.add(reserve_in, amount_in)
    adj_in = fee_adjusted(balance_in, amount_in)
    rhs = checked.mul(k_req, FEE_K_SCALE * FEE_K_SCALE)
    lo, hi = 0, reserve_out - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if adj_in * ((reserve_out - mid) * FEE_K_SCALE) >= rhs:
            lo = mid
        else:
            hi = mid - 1
    return lo


__all__ = [
    "offset_amount_out",
    "quote_offset_swap",
    "required_k",
    "observed_input",
    "observed_inputs",
    "fee_adjusted",
    "check_k",
    "max_out_for_input",
]
