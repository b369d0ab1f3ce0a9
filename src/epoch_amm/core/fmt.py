"""
Formatting helpers and Decimal bridges (non-core arithmetic).

Core arithmetic uses integers in base units. Decimal here is only for
formatting and convenience (e.g., tests, logs, display, JSON input).
"""

from decimal import Decimal, InvalidOperation, getcontext, ROUND_DOWN

from .constants import TOKEN_DECIMALS
from .datatypes import EpochReserves


# ---------------------------------------------------------------------------
# Global Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Enough significant digits for a full uint256 value.
DEFAULT_DECIMAL_PRECISION: int = 80
getcontext().prec = DEFAULT_DECIMAL_PRECISION


# ---------------------------------------------------------------------------
# Unit bridges
# ---------------------------------------------------------------------------

def units_to_decimal(units: int, decimals: int = TOKEN_DECIMALS) -> Decimal:
    """Base units -> whole-token Decimal (e.g. wei -> ether)."""
    if units < 0:
        raise ValueError("units_to_decimal(): negative units")
    return Decimal(units).scaleb(-decimals)


def decimal_to_units(value, decimals: int = TOKEN_DECIMALS) -> int:
    """Whole-token amount (Decimal/str/int) -> base units, floored to the grid."""
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"decimal_to_units(): not a number: {value!r}") from None
    if not d.is_finite():
        raise ValueError(f"decimal_to_units(): not a finite amount: {value!r}")
    if d < 0:
        raise ValueError("decimal_to_units(): negative amount")
    return int(d.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def fmt_dec(x: Decimal, places: int = 6) -> str:
    """Format a Decimal with fixed fractional digits, e.g. '10000.000000'."""
    return format(x, f".{places}f")


def fmt_units(units: int, decimals: int = TOKEN_DECIMALS, places: int = 6) -> str:
    return fmt_dec(units_to_decimal(units, decimals), places=places)


def fmt_reserves(r: EpochReserves, decimals: int = TOKEN_DECIMALS, places: int = 6) -> str:
    return (
        f"A={fmt_units(r.reserve_a, decimals, places)}, "
        f"B={fmt_units(r.reserve_b, decimals, places)}, "
        f"shares={fmt_units(r.total_shares, decimals, places)}"
    )


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "units_to_decimal",
    "decimal_to_units",
    "fmt_dec",
    "fmt_units",
    "fmt_reserves",
]
