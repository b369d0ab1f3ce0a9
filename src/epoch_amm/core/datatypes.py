"""
Core datatypes used by the ledgers and the pools.

These datatypes are intentionally minimal and immutable so that epoch tables
can be copied by value (carry-forward) and atomic rollback stays a matter of
keeping references to old objects.

Notes:
- All quantities are unsigned integers in base units.
- `EpochReserves` is the per-epoch slot of the offset policy; the snapshot
  policy reuses it for its single live pair and leaves total_shares at 0;
  its share supply lives in the share ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from . import checked


# ---------------------------------------------------------------------------
# Epoch slot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EpochReserves:
    """Reserve pair and share supply recorded for one epoch.

    Fields:
    - reserve_a / reserve_b: asset quantities attributed to the epoch.
    - total_shares: pool-share supply attributed to the epoch.
    """

    reserve_a: int = 0
    reserve_b: int = 0
    total_shares: int = 0

    def __post_init__(self):
        checked.require_uint("reserve_a", self.reserve_a)
        checked.require_uint("reserve_b", self.reserve_b)
        checked.require_uint("total_shares", self.total_shares)

    @classmethod
    def zero(cls) -> "EpochReserves":
        return cls(0, 0, 0)

    def is_empty(self) -> bool:
        return self.reserve_a == 0 and self.reserve_b == 0 and self.total_shares == 0

    def product(self) -> int:
        return checked.mul(self.reserve_a, self.reserve_b)

    def pair(self) -> Tuple[int, int]:
        return self.reserve_a, self.reserve_b

    def deposit(self, amount_a: int, amount_b: int, shares: int) -> "EpochReserves":
        return EpochReserves(
            checked.add(self.reserve_a, amount_a),
            checked.add(self.reserve_b, amount_b),
            checked.add(self.total_shares, shares),
        )

    def withdraw(self, amount_a: int, amount_b: int, shares: int) -> "EpochReserves":
        return EpochReserves(
            checked.sub(self.reserve_a, amount_a, what="reserve_a"),
            checked.sub(self.reserve_b, amount_b, what="reserve_b"),
            checked.sub(self.total_shares, shares, what="total_shares"),
        )

    def settle_swap(self, direction: "SwapDirection", amount_in: int, amount_out: int) -> "EpochReserves":
        """Credit amount_in to the input side and debit amount_out from the output side."""
        if direction is SwapDirection.A_TO_B:
            return EpochReserves(
                checked.add(self.reserve_a, amount_in),
                checked.sub(self.reserve_b, amount_out, what="reserve_b"),
                self.total_shares,
            )
        return EpochReserves(
            checked.sub(self.reserve_a, amount_out, what="reserve_a"),
            checked.add(self.reserve_b, amount_in),
            self.total_shares,
        )


# ---------------------------------------------------------------------------
# Swap orientation
# ---------------------------------------------------------------------------

class SwapDirection(Enum):
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    @classmethod
    def from_flag(cls, a_to_b: bool) -> "SwapDirection":
        return cls.A_TO_B if a_to_b else cls.B_TO_A

    def orient(self, reserves: EpochReserves) -> Tuple[int, int]:
        """Return (reserve_in, reserve_out) for this direction."""
        if self is SwapDirection.A_TO_B:
            return reserves.reserve_a, reserves.reserve_b
        return reserves.reserve_b, reserves.reserve_a


# ---------------------------------------------------------------------------
# Epoch transition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EpochTransition:
    """A lazily observed epoch advance: `previous` -> `new` (new > previous)."""

    previous: int
    new: int

    @property
    def skipped(self) -> int:
        """Number of epochs passed over without an operation (0 for a single step)."""
        return self.new - self.previous - 1


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DepositQuote:
    """Amounts actually taken from the provider and the shares issued for them."""

    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class WithdrawQuote:
    """Amounts paid to the provider for a redemption (after any decay)."""

    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class SwapQuote:
    """Offset-policy swap result.

    `priced_epoch` is the slot whose reserves set the rate; `settled_epoch` is
    the slot the trade was written to. They differ under desynchronized offsets.
    """

    direction: SwapDirection
    amount_in: int
    amount_out: int
    priced_epoch: int = 0
    settled_epoch: int = 0


@dataclass(frozen=True)
class SnapshotSwapResult:
    """Snapshot-policy swap result as observed after payout."""

    amount_a_in: int
    amount_b_in: int
    amount_a_out: int
    amount_b_out: int
    k_required: int
    priced_epoch: Optional[int] = None


__all__ = [
    "EpochReserves",
    "SwapDirection",
    "EpochTransition",
    "DepositQuote",
    "WithdrawQuote",
    "SwapQuote",
    "SnapshotSwapResult",
]
