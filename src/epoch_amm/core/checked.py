"""
Checked unsigned arithmetic on Python ints.

Python integers never wrap, so the fixed-width behaviour of the pool is
emulated here: every result is range-checked against UINT_MAX and negative
results are rejected. Callers use these helpers for all reserve, share and
invariant math so that an out-of-range value fails the call instead of
propagating.

# Rounding: all divisions floor (toward zero in the non-negative domain).
"""

from __future__ import annotations

import math

from .constants import UINT_MAX
from .exc import ArithmeticOverflow, InsufficientBalance

# Debug printing control
DEBUG_CHECKED = False

def _dbg(msg: str) -> None:
    if DEBUG_CHECKED:
        print(f"[CHECKED] {msg}")


def require_uint(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    if value > UINT_MAX:
        raise ArithmeticOverflow(f"{name}={value} exceeds uint256")


def _bound(value: int, op: str) -> int:
    if value > UINT_MAX:
        _dbg(f"overflow in {op}: {value}")
        raise ArithmeticOverflow(f"{op} overflows uint256")
    return value


def add(a: int, b: int) -> int:
    return _bound(a + b, "add")


def sub(a: int, b: int, *, what: str = "value") -> int:
    """a - b, raising InsufficientBalance (labelled `what`) if b > a."""
    if b > a:
        raise InsufficientBalance(what, a, b)
    return a - b


def mul(a: int, b: int) -> int:
    return _bound(a * b, "mul")


def div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("division by zero")
    return a // b


def mul_div(a: int, b: int, c: int) -> int:
    """floor(a * b / c) with the intermediate product range-checked."""
    return div(mul(a, b), c)


def isqrt(a: int) -> int:
    """floor(sqrt(a)) for a >= 0."""
    if a < 0:
        raise ValueError("isqrt of negative value")
    return math.isqrt(a)


__all__ = [
    "require_uint",
    "add",
    "sub",
    "mul",
    "div",
    "mul_div",
    "isqrt",
]
