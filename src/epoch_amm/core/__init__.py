"""
Epoch AMM Core
==============

Unified exports for integer-domain primitives used by the pools.
All arithmetic is unsigned, fixed-width and checked; Decimal helpers are
provided *only* for I/O formatting.
"""

# NOTE:
#   The `core` package defines the integer-domain primitives and arithmetic used
#   across the ledgers and engines. Nothing here knows about epochs or policies.

# Integer-domain constants
from .constants import (
    UINT_BITS,
    UINT_MAX,
    EPOCH_DURATION,
    FEE_NUM,
    FEE_DEN,
    FEE_K_SCALE,
    FEE_K_WEIGHT,
    DECAY_NUM,
    DECAY_DEN,
    SLIPPAGE_BPS,
    BPS_DEN,
    TOKEN_DECIMALS,
    MAX_SWAP_IN,
)

# Core datatypes
from .datatypes import (
    EpochReserves,
    SwapDirection,
    EpochTransition,
    DepositQuote,
    WithdrawQuote,
    SwapQuote,
    SnapshotSwapResult,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    units_to_decimal,
    decimal_to_units,
    fmt_dec,
    fmt_units,
    fmt_reserves,
)

# Core exceptions
from .exc import (
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

__all__ = [
    # constants
    "UINT_BITS",
    "UINT_MAX",
    "EPOCH_DURATION",
    "FEE_NUM",
    "FEE_DEN",
    "FEE_K_SCALE",
    "FEE_K_WEIGHT",
    "DECAY_NUM",
    "DECAY_DEN",
    "SLIPPAGE_BPS",
    "BPS_DEN",
    "TOKEN_DECIMALS",
    "MAX_SWAP_IN",
    # datatypes
    "EpochReserves",
    "SwapDirection",
    "EpochTransition",
    "DepositQuote",
    "WithdrawQuote",
    "SwapQuote",
    "SnapshotSwapResult",
    # fmt
    "units_to_decimal",
    "decimal_to_units",
    "fmt_dec",
    "fmt_units",
    "fmt_reserves",
    # exceptions
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
