"""
Liquidity accounting: share issuance for deposits and payouts for redemptions.

Pure functions over a reserve slot. The pools decide *which* slot (epoch) is
passed in; nothing here knows about epochs.
"""
from __future__ import annotations

from typing import Optional, Tuple

from .core import checked
from .core.constants import SLIPPAGE_BPS, BPS_DEN
from .core.datatypes import EpochReserves, DepositQuote, WithdrawQuote
from .core.exc import ZeroAmount, InsufficientInput, ZeroLiquidityComputed

# --- Debug utilities (toggleable) ---
DEBUG_LIQUIDITY = False

def _dbg(msg: str) -> None:
    if DEBUG_LIQUIDITY:
        print(f"[LIQ] {msg}")


def within_tolerance(amount: int, optimal: int, slippage_bps: int = SLIPPAGE_BPS) -> bool:
    """True if |amount - optimal| <= optimal * slippage_bps / BPS_DEN."""
    return checked.mul(abs(amount - optimal), BPS_DEN) <= checked.mul(optimal, slippage_bps)


def optimal_amounts(amount_a: int,
                    amount_b: int,
                    reserves: EpochReserves,
                    *,
                    slippage_bps: int = SLIPPAGE_BPS) -> Tuple[int, int]:
    """Return the (amount_a, amount_b) actually deposited.

    Empty slot (reserve_a == 0): both inputs are used as given.
    Otherwise the deposit is cut down to the slot's ratio: B is trimmed when A
    is the binding side; when B is binding, the A side is recomputed from B and
    the caller's A must lie within `slippage_bps` of it.
    """
    if reserves.reserve_a == 0:
        return amount_a, amount_b
    if reserves.reserve_b == 0:
        # one-sided slot: nothing to price B against
        return amount_a, amount_b
    b_opt = checked.mul_div(amount_a, reserves.reserve_b, reserves.reserve_a)
    if b_opt <= amount_b:
        _dbg(f"optimal: A binding, b_opt={b_opt}")
        return amount_a, b_opt
    a_opt = checked.mul_div(amount_b, reserves.reserve_a, reserves.reserve_b)
    _dbg(f"optimal: B binding, a_opt={a_opt}, a_given={amount_a}")
    if not within_tolerance(amount_a, a_opt, slippage_bps):
        raise InsufficientInput(
            f"amount_a={amount_a} outside {slippage_bps}bps of optimal {a_opt} for amount_b={amount_b}"
        )
    return a_opt, amount_b


def shares_for_deposit(amount_a: int, amount_b: int, reserves: EpochReserves) -> int:
    """Shares issued for a (ratio-adjusted) deposit against `reserves`."""
    if reserves.total_shares == 0:
        return checked.isqrt(checked.mul(amount_a, amount_b))
    if reserves.reserve_a == 0 or reserves.reserve_b == 0:
        # supply without reserves cannot be priced
        return 0
    return min(
        checked.mul_div(amount_a, reserves.total_shares, reserves.reserve_a),
        checked.mul_div(amount_b, reserves.total_shares, reserves.reserve_b),
    )


def quote_deposit(amount_a: int,
                  amount_b: int,
                  reserves: EpochReserves,
                  *,
                  slippage_bps: int = SLIPPAGE_BPS) -> DepositQuote:
    checked.require_uint("amount_a", amount_a)
    checked.require_uint("amount_b", amount_b)
    if amount_a == 0 or amount_b == 0:
        raise ZeroAmount("deposit amounts must both be > 0")
    used_a, used_b = optimal_amounts(amount_a, amount_b, reserves, slippage_bps=slippage_bps)
    shares = shares_for_deposit(used_a, used_b, reserves)
    if shares == 0:
        raise ZeroLiquidityComputed(f"deposit ({used_a}, {used_b}) mints zero shares")
    return DepositQuote(used_a, used_b, shares)


def quote_withdraw(shares: int,
                   reserves: EpochReserves,
                   *,
                   decay: Optional[Tuple[int, int]] = None) -> WithdrawQuote:
    """Pro-rata payout for `shares` out of `reserves`, then the optional decay haircut."""
    checked.require_uint("shares", shares)
    if shares == 0:
        raise ZeroAmount("shares must be > 0")
    if reserves.total_shares == 0:
        raise ZeroLiquidityComputed("selected slot has no share supply")
    amount_a = checked.mul_div(shares, reserves.reserve_a, reserves.total_shares)
    amount_b = checked.mul_div(shares, reserves.reserve_b, reserves.total_shares)
    if decay is not None:
        num, den = decay
        amount_a = checked.mul_div(amount_a, num, den)
        amount_b = checked.mul_div(amount_b, num, den)
    if amount_a == 0 or amount_b == 0:
        raise ZeroLiquidityComputed(f"redeeming {shares} shares pays ({amount_a}, {amount_b})")
    return WithdrawQuote(amount_a, amount_b)


__all__ = [
    "within_tolerance",
    "optimal_amounts",
    "shares_for_deposit",
    "quote_deposit",
    "quote_withdraw",
]
