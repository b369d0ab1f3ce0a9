"""
Fungible asset ledger collaborator.

Pools only depend on the `TokenLedger` protocol. `InMemoryToken` is the
process-local implementation used by tests, the demo and the scenario runner;
it also supports snapshot/restore so a pool can undo transfers made inside a
failed operation.
"""
from __future__ import annotations

from typing import Dict, Protocol, runtime_checkable

from .core.constants import TOKEN_DECIMALS


@runtime_checkable
class TokenLedger(Protocol):
    name: str

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, owner: str, recipient: str, amount: int) -> bool: ...

    def balance_of(self, holder: str) -> int: ...


@runtime_checkable
class Restorable(Protocol):
    def snapshot(self) -> object: ...

    def restore(self, state: object) -> None: ...


class InMemoryToken:
    """Balance table with transfer semantics of a plain fungible token.

    Transfers with an insufficient balance return False instead of raising;
    the pool turns that into TransferFailed. Allowances are not modelled:
    `transfer_from` moves funds from `owner` directly.
    """

    def __init__(self, name: str, symbol: str, decimals: int = TOKEN_DECIMALS) -> None:
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: Dict[str, int] = {}
        self.total_supply = 0

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def mint_to(self, holder: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("mint amount must be >= 0")
        self._balances[holder] = self.balance_of(holder) + amount
        self.total_supply += amount

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            return False
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        return self._move(sender, recipient, amount)

    def transfer_from(self, owner: str, recipient: str, amount: int) -> bool:
        return self._move(owner, recipient, amount)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)

    def restore(self, state: Dict[str, int]) -> None:
        self._balances = dict(state)

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol}, supply={self.total_supply})"


__all__ = ["TokenLedger", "Restorable", "InMemoryToken"]
