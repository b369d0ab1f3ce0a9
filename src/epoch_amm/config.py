from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .core.constants import (
    EPOCH_DURATION,
    FEE_NUM,
    FEE_DEN,
    DECAY_NUM,
    DECAY_DEN,
    SLIPPAGE_BPS,
    MAX_SWAP_IN,
)
from .core.datatypes import EpochReserves
from .offsets import EpochOffsets, DESYNCHRONIZED, resolve_offsets


@dataclass(frozen=True)
class PoolConfig:
    """
    Static parameters of one pool instance.

    Fields:
      - epoch_duration / epoch_start: epoch clock parameters (seconds).
      - fee_num / fee_den: keep ratio applied to offset-policy swap output.
      - decay_num / decay_den: snapshot-policy burn haircut.
      - slippage_bps: deposit ratio tolerance.
      - max_swap_in: offset-policy per-call input cap.
      - bootstrap: offset-policy epoch-0 slot at construction.
      - offsets: per-operation epoch selection.
      - address: the pool's holder identity on the token ledgers.
    """

    epoch_duration: int = EPOCH_DURATION
    epoch_start: int = 0
    fee_num: int = FEE_NUM
    fee_den: int = FEE_DEN
    decay_num: int = DECAY_NUM
    decay_den: int = DECAY_DEN
    slippage_bps: int = SLIPPAGE_BPS
    max_swap_in: int = MAX_SWAP_IN
    bootstrap: EpochReserves = field(default_factory=EpochReserves.zero)
    offsets: EpochOffsets = field(default_factory=lambda: DESYNCHRONIZED)
    address: str = "pool"

    def __post_init__(self) -> None:
        if self.epoch_duration <= 0:
            raise ValueError("epoch_duration must be > 0")
        if self.epoch_start < 0:
            raise ValueError("epoch_start must be >= 0")
        if not (0 < self.fee_num <= self.fee_den):
            raise ValueError("fee must satisfy 0 < fee_num <= fee_den")
        if not (0 < self.decay_num <= self.decay_den):
            raise ValueError("decay must satisfy 0 < decay_num <= decay_den")
        if self.slippage_bps < 0:
            raise ValueError("slippage_bps must be >= 0")
        if self.max_swap_in <= 0:
            raise ValueError("max_swap_in must be > 0")
        if not self.address:
            raise ValueError("address must be non-empty")

    @property
    def decay(self) -> tuple[int, int]:
        return self.decay_num, self.decay_den

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PoolConfig":
        """Build from a JSON-style mapping.

        `bootstrap` may be a [reserve_a, reserve_b, total_shares] list or a
        mapping with those keys; `offsets` a preset name or {operation: offset}.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ValueError(f"unknown pool config keys: {sorted(unknown)}")
        kwargs = dict(raw)
        if "bootstrap" in kwargs:
            b = kwargs["bootstrap"]
            kwargs["bootstrap"] = EpochReserves(**b) if isinstance(b, Mapping) else EpochReserves(*b)
        if "offsets" in kwargs:
            kwargs["offsets"] = resolve_offsets(kwargs["offsets"])
        return cls(**kwargs)


__all__ = ["PoolConfig"]
