"""Pool share ledger: per-holder balances plus a global supply counter."""
from __future__ import annotations

from typing import Dict, Iterator, Tuple

from .core import checked
from .core.exc import ZeroAmount


class PoolShareLedger:
    """Minimal fungible ledger for pool ownership shares.

    Invariant: sum(balances) == total_supply after every mint/burn. Holders
    whose balance falls to zero keep their entry.
    """

    def __init__(self, name: str = "EpochLP", symbol: str = "ELP") -> None:
        self.name = name
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def mint(self, holder: str, shares: int) -> None:
        checked.require_uint("shares", shares)
        if shares == 0:
            raise ZeroAmount("cannot mint zero shares")
        new_supply = checked.add(self._total_supply, shares)
        self._balances[holder] = checked.add(self.balance_of(holder), shares)
        self._total_supply = new_supply

    def burn(self, holder: str, shares: int) -> None:
        checked.require_uint("shares", shares)
        if shares == 0:
            raise ZeroAmount("cannot burn zero shares")
        remaining = checked.sub(self.balance_of(holder), shares, what=f"{self.symbol} balance of {holder}")
        self._balances[holder] = remaining
        self._total_supply = checked.sub(self._total_supply, shares, what=f"{self.symbol} supply")

    def holders(self) -> Iterator[Tuple[str, int]]:
        return iter(sorted(self._balances.items()))

    def check(self) -> bool:
        """True if balances sum to the supply counter."""
        return sum(self._balances.values()) == self._total_supply

    def copy(self) -> "PoolShareLedger":
        clone = PoolShareLedger(self.name, self.symbol)
        clone._balances = dict(self._balances)
        clone._total_supply = self._total_supply
        return clone

    def __repr__(self) -> str:
        return f"PoolShareLedger({self.symbol}, supply={self._total_supply}, holders={len(self._balances)})"


__all__ = ["PoolShareLedger"]
