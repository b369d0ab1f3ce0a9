"""
Reserve ledgers: where pool reserves live between operations.

Two interchangeable policies:

- OffsetReserveLedger: one (reserve_a, reserve_b, total_shares) slot per epoch.
  Entering a new epoch copies the slot of `new - 1` into it (carry-forward).
- SnapshotReserveLedger: a single live reserve pair, plus one scalar
  floor(sqrt(reserve_a * reserve_b)) recorded for each epoch as it ends.

Both apply at most one advance per observed transition, regardless of how many
epochs elapsed. The pools call `advance()` only through their epoch check.
"""
from __future__ import annotations

from typing import Dict, Optional

from .core import checked
from .core.datatypes import EpochReserves, EpochTransition

# --- Debug utilities (toggleable) ---
DEBUG_LEDGER = False

def _dbg(msg: str) -> None:
    if DEBUG_LEDGER:
        print(f"[LEDGER] {msg}")


class OffsetReserveLedger:
    """Epoch-indexed reserve slots.

    Missing epochs read as an all-zero slot; they are not created by reads.
    """

    def __init__(self, bootstrap: Optional[EpochReserves] = None) -> None:
        self._slots: Dict[int, EpochReserves] = {0: bootstrap or EpochReserves.zero()}

    def get(self, epoch: int) -> EpochReserves:
        return self._slots.get(epoch, EpochReserves.zero())

    def has(self, epoch: int) -> bool:
        return epoch in self._slots

    def put(self, epoch: int, entry: EpochReserves) -> None:
        _dbg(f"put epoch={epoch} -> {entry}")
        self._slots[epoch] = entry

    def advance(self, transition: EpochTransition) -> EpochReserves:
        """Carry forward: slot[new] = slot[new - 1].

        `new - 1` equals `previous` only for a single-step advance; when epochs
        were skipped the source is the (usually empty) slot just before `new`.
        """
        source = transition.new - 1
        entry = self.get(source)
        _dbg(f"carry-forward {source} -> {transition.new}: {entry} (skipped={transition.skipped})")
        self._slots[transition.new] = entry
        return entry

    def materialize(self, epoch: int, source: int) -> EpochReserves:
        """Create slot `epoch` as a copy of slot `source` unless it already exists."""
        if epoch not in self._slots:
            _dbg(f"materialize {epoch} from {source}")
            self._slots[epoch] = self.get(source)
        return self._slots[epoch]

    def epochs(self) -> list[int]:
        return sorted(self._slots)

    def copy(self) -> "OffsetReserveLedger":
        clone = OffsetReserveLedger.__new__(OffsetReserveLedger)
        # slots are immutable, a shallow dict copy is a full copy
        clone._slots = dict(self._slots)
        return clone

    def __repr__(self) -> str:
        return f"OffsetReserveLedger(epochs={self.epochs()})"


class SnapshotReserveLedger:
    """Live reserve pair with a write-once liquidity checkpoint per ended epoch."""

    def __init__(self, reserve_a: int = 0, reserve_b: int = 0) -> None:
        self.live = EpochReserves(reserve_a, reserve_b, 0)
        self._snapshots: Dict[int, int] = {}

    @property
    def reserve_a(self) -> int:
        return self.live.reserve_a

    @property
    def reserve_b(self) -> int:
        return self.live.reserve_b

    def set_reserves(self, reserve_a: int, reserve_b: int) -> None:
        self.live = EpochReserves(reserve_a, reserve_b, self.live.total_shares)

    def liquidity(self) -> int:
        """floor(sqrt(reserve_a * reserve_b)) of the live pair."""
        return checked.isqrt(self.live.product())

    def advance(self, transition: EpochTransition) -> Optional[int]:
        """Record the live liquidity under the epoch that just ended.

        Returns the value written, or None if that epoch already had one.
        """
        ended = transition.previous
        if ended in self._snapshots:
            return None
        value = self.liquidity()
        self._snapshots[ended] = value
        _dbg(f"snapshot epoch={ended} L={value} (skipped={transition.skipped})")
        return value

    def snapshot(self, epoch: int) -> int:
        """Recorded liquidity for `epoch`; 0 when nothing was recorded."""
        return self._snapshots.get(epoch, 0)

    def has_snapshot(self, epoch: int) -> bool:
        return epoch in self._snapshots

    def snapshots(self) -> Dict[int, int]:
        return dict(self._snapshots)

    def copy(self) -> "SnapshotReserveLedger":
        clone = SnapshotReserveLedger.__new__(SnapshotReserveLedger)
        clone.live = self.live
        clone._snapshots = dict(self._snapshots)
        return clone

    def __repr__(self) -> str:
        return f"SnapshotReserveLedger(live={self.live}, snapshots={self._snapshots})"


__all__ = ["OffsetReserveLedger", "SnapshotReserveLedger"]
