"""
Core exception types for epoch_amm.

These are dependency-free and may be imported by all modules. Every pool
operation either completes or raises exactly one of these with pool state left
as it was before the call.
"""

__all__ = [
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


class PoolError(Exception):
    """Base class for every failure surfaced by a pool operation."""
    pass


class ZeroAmount(PoolError):
    """Raised when a required amount argument is zero."""
    pass


class InsufficientInput(PoolError):
    """Raised when a deposit fails the ratio guard."""
    pass


class ZeroLiquidityComputed(PoolError):
    """Raised when share issuance or redemption rounds down to zero."""
    pass


class ZeroOutputComputed(PoolError):
    """Raised when a swap would pay out nothing."""
    pass


class InvariantViolation(PoolError):
    """Raised when the post-swap product falls below the required K.

    Attributes
    ----------
    lhs : int
        Fee-adjusted product of post-trade balances.
    rhs : int
        Required K scaled by FEE_K_SCALE**2.
    """

    def __init__(self, lhs: int = 0, rhs: int = 0):
        super().__init__(f"K_FAIL: adjusted product {lhs} < required {rhs}")
        self.lhs = lhs
        self.rhs = rhs


class InsufficientBalance(PoolError):
    """Raised when a holder or a reserve cannot cover a debit."""

    def __init__(self, what: str, available: int, requested: int):
        super().__init__(f"insufficient {what}: available={available}, requested={requested}")
        self.what = what
        self.available = available
        self.requested = requested


class ArithmeticOverflow(PoolError):
    """Raised when a result does not fit the emulated unsigned width."""
    pass


class TransferFailed(PoolError):
    """Raised when the asset ledger rejects a transfer."""

    def __init__(self, token: str, sender: str, recipient: str, amount: int):
        super().__init__(f"{token} transfer {sender} -> {recipient} of {amount} rejected")
        self.token = token
        self.sender = sender
        self.recipient = recipient
        self.amount = amount


class SwapCapExceeded(PoolError):
    """Raised when a swap input is above the per-call cap."""

    def __init__(self, amount_in: int, cap: int):
        super().__init__(f"swap input {amount_in} exceeds per-call cap {cap}")
        self.amount_in = amount_in
        self.cap = cap
