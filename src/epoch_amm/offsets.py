"""
Per-operation epoch selection.

Each pool operation reads (and possibly writes) the reserve slot of an epoch
chosen relative to the pool's current epoch. The table below is the single
place that decides it, so the same engine can run the desynchronized layout
(mint at e, burn at e+1, price swaps at e-1) or the aligned one.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


class Operation(Enum):
    MINT = "mint"
    BURN = "burn"
    SWAP_PRICING = "swap_pricing"
    SWAP_SETTLEMENT = "swap_settlement"


@dataclass(frozen=True)
class EpochOffsets:
    """Immutable mapping Operation -> signed epoch offset (missing = 0)."""

    name: str
    table: Mapping[Operation, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # freeze the mapping so presets cannot be mutated through an instance
        object.__setattr__(self, "table", MappingProxyType(dict(self.table)))

    def offset(self, op: Operation) -> int:
        return self.table.get(op, 0)

    def resolve(self, op: Operation, current_epoch: int) -> int:
        """Epoch index `op` works against; clamped at 0."""
        return max(current_epoch + self.offset(op), 0)

    def is_aligned(self) -> bool:
        return all(v == 0 for v in self.table.values())

    @classmethod
    def from_mapping(cls, raw: Mapping[str, int], name: str = "custom") -> "EpochOffsets":
        table = {}
        for key, value in raw.items():
            try:
                op = Operation(key)
            except ValueError:
                raise ValueError(f"unknown operation in offsets: {key!r}") from None
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"offset for {key!r} must be an int")
            table[op] = value
        return cls(name, table)


DESYNCHRONIZED = EpochOffsets(
    "desynchronized",
    {
        Operation.MINT: 0,
        Operation.BURN: 1,
        Operation.SWAP_PRICING: -1,
        Operation.SWAP_SETTLEMENT: 0,
    },
)

ALIGNED = EpochOffsets("aligned", {op: 0 for op in Operation})

PRESETS = {
    DESYNCHRONIZED.name: DESYNCHRONIZED,
    ALIGNED.name: ALIGNED,
}


def resolve_offsets(value: Union[str, Mapping[str, int], EpochOffsets]) -> EpochOffsets:
    """Accept a preset name, an explicit {operation: offset} mapping, or an EpochOffsets."""
    if isinstance(value, EpochOffsets):
        return value
    if isinstance(value, str):
        try:
            return PRESETS[value]
        except KeyError:
            raise ValueError(f"unknown offsets preset {value!r}; expected one of {sorted(PRESETS)}") from None
    return EpochOffsets.from_mapping(value)


__all__ = ["Operation", "EpochOffsets", "DESYNCHRONIZED", "ALIGNED", "PRESETS", "resolve_offsets"]
