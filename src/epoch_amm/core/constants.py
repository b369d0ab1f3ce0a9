"""
Epoch AMM Constants (integer domain)
====================================

Fixed numeric parameters shared by the ledger, liquidity and swap modules.
Pool instances may override most of them through `PoolConfig`; the values here
are the defaults the reference deployments run with.
"""

# NOTE: All quantities are unsigned integers in base units (18-decimal tokens by default).

# ---------------------------------------------------------------------------
# Integer width
# ---------------------------------------------------------------------------

#: Width of the emulated unsigned integer type.
UINT_BITS: int = 256
UINT_MAX: int = (1 << UINT_BITS) - 1


# ---------------------------------------------------------------------------
# Epochs
# ---------------------------------------------------------------------------

#: Seconds per epoch.
EPOCH_DURATION: int = 12


# ---------------------------------------------------------------------------
# Fees, decay and slippage
# ---------------------------------------------------------------------------

#: Trading fee as a keep ratio: amount * FEE_NUM // FEE_DEN (0.3% fee).
FEE_NUM: int = 997
FEE_DEN: int = 1000

#: Fee weight used inside the snapshot-policy K check: balance*1000 - 3*amount_in.
FEE_K_SCALE: int = 1000
FEE_K_WEIGHT: int = 3

#: Burn haircut (snapshot policy): amount * DECAY_NUM // DECAY_DEN.
DECAY_NUM: int = 9950
DECAY_DEN: int = 10000

#: Deposit ratio tolerance in basis points (0.5%).
SLIPPAGE_BPS: int = 50
BPS_DEN: int = 10000


# ---------------------------------------------------------------------------
# Swap limits
# ---------------------------------------------------------------------------

#: Token decimals of the reference assets.
TOKEN_DECIMALS: int = 18

#: Offset-policy per-call input cap: one whole token.
MAX_SWAP_IN: int = 10 ** TOKEN_DECIMALS


__all__ = [
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
]
