# Top-level API for epoch_amm (integer-domain).
"""
Top-level API for epoch_amm (integer-domain).

This module exposes the stable interface of the epoch-partitioned pools:
  - EpochPool: per-epoch reserve slots with per-operation epoch offsets
  - SnapshotPool: live reserves with a per-epoch liquidity checkpoint
  - PoolConfig / EpochOffsets: static parameters and epoch selection
  - EpochClock / ManualClock: lazy epoch derivation with an injectable time source

Core data types and arithmetic are integer-domain, unsigned and range-checked.
"""

from __future__ import annotations

from .pool import EpochPool, SnapshotPool
from .config import PoolConfig
from .offsets import Operation, EpochOffsets, DESYNCHRONIZED, ALIGNED
from .clock import EpochClock, ManualClock, SystemClock, epoch_transition
from .tokens import TokenLedger, InMemoryToken
from .shares import PoolShareLedger

from .core import (
    EpochReserves,
    SwapDirection,
    EpochTransition,
    PoolError,
    ZeroAmount,
    InsufficientInput,
    ZeroLiquidityComputed,
    ZeroOutputComputed,
    InvariantViolation,
    InsufficientBalance,
    ArithmeticOverflow,
    TransferFailed,
    SwapCapExceeded,
)

__version__ = "0.1.0"

__all__ = [
    # pools
    "EpochPool",
    "SnapshotPool",
    # configuration
    "PoolConfig",
    "Operation",
    "EpochOffsets",
    "DESYNCHRONIZED",
    "ALIGNED",
    # time
    "EpochClock",
    "ManualClock",
    "SystemClock",
    "epoch_transition",
    # collaborators
    "TokenLedger",
    "InMemoryToken",
    "PoolShareLedger",
    # core data types
    "EpochReserves",
    "SwapDirection",
    "EpochTransition",
    # errors
    "PoolError",
    "ZeroAmount",
    "InsufficientInput",
    "ZeroLiquidityComputed",
    "ZeroOutputComputed",
    "InvariantViolation",
    "InsufficientBalance",
    "ArithmeticOverflow",
    "TransferFailed",
    "SwapCapExceeded",
]
