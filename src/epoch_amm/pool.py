"""
Epoch-partitioned two-asset pools: the public surface.

EpochPool (offset policy)
  Reserves are kept per epoch. Deposits, withdrawals and swaps each read the
  slot chosen by `PoolConfig.offsets`; with the default desynchronized table a
  deposit works against epoch e, a withdrawal against e+1 and a swap is priced
  on e-1 but settled on e.

SnapshotPool (snapshot policy)
  Reserves are a single live pair. When an epoch ends its liquidity
  floor(sqrt(a*b)) is recorded once; swaps must preserve the K implied by the
  previous epoch's record rather than the live product.

Every operation:
  1. takes the pool lock and opens an atomic scope (pool state + token ledgers),
  2. runs the epoch check (at most one advance per call),
  3. computes against the selected reserves, mutates, transfers.
Any exception restores the state captured in step 1 and propagates.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from .clock import EpochClock, TimeSource, SystemClock, epoch_transition
from .config import PoolConfig
from .core import checked
from .core.datatypes import (
    EpochReserves,
    EpochTransition,
    SwapDirection,
    SnapshotSwapResult,
)
from .core.exc import InsufficientBalance, TransferFailed, ZeroOutputComputed
from .ledger import OffsetReserveLedger, SnapshotReserveLedger
from .liquidity import quote_deposit, quote_withdraw
from .offsets import Operation
from .shares import PoolShareLedger
from .swap import quote_offset_swap, required_k, observed_inputs, check_k
from .tokens import TokenLedger, Restorable

# --- Debug utilities (toggleable) ---
DEBUG_POOL = False

def _dbg(msg: str) -> None:
    if DEBUG_POOL:
        print(f"[POOL] {msg}")


class _PoolBase:
    """Shared plumbing: clock, lock, atomic scope, transfers, share ledger."""

    def __init__(self,
                 token_a: TokenLedger,
                 token_b: TokenLedger,
                 config: Optional[PoolConfig] = None,
                 time_source: Optional[TimeSource] = None,
                 *,
                 name: str,
                 symbol: str) -> None:
        if token_a is token_b:
            raise ValueError("token_a and token_b must be distinct ledgers")
        self.token_a = token_a
        self.token_b = token_b
        self.config = config or PoolConfig()
        self.clock = EpochClock(
            epoch_duration=self.config.epoch_duration,
            epoch_start=self.config.epoch_start,
            source=time_source or SystemClock(),
        )
        self.shares = PoolShareLedger(name, symbol)
        self.current_epoch = 0
        self._lock = threading.RLock()

    # --- identity ---
    @property
    def address(self) -> str:
        return self.config.address

    @property
    def offsets(self):
        return self.config.offsets

    # --- share ledger views ---
    def balance_of(self, holder: str) -> int:
        return self.shares.balance_of(holder)

    @property
    def total_supply(self) -> int:
        return self.shares.total_supply

    # --- atomic scope ---
    def _capture(self) -> tuple:
        raise NotImplementedError

    def _restore(self, state: tuple) -> None:
        raise NotImplementedError

    @contextmanager
    def _atomic(self, op: str) -> Iterator[None]:
        """Serialize the call and undo every mutation if it raises."""
        with self._lock:
            state = self._capture()
            token_states = [
                (t, t.snapshot()) for t in (self.token_a, self.token_b) if isinstance(t, Restorable)
            ]
            try:
                yield
            except BaseException as exc:
                _dbg(f"{op} aborted: {type(exc).__name__}: {exc}; rolling back")
                self._restore(state)
                for token, snap in token_states:
                    token.restore(snap)
                raise

    # --- epoch check ---
    def _advance(self, transition: EpochTransition) -> None:
        raise NotImplementedError

    def _check_epoch(self) -> Optional[EpochTransition]:
        transition = epoch_transition(self.clock.observe(), self.current_epoch)
        if transition is not None:
            self._advance(transition)
            self.current_epoch = transition.new
            _dbg(f"epoch {transition.previous} -> {transition.new}")
        return transition

    def sync_epoch(self) -> Optional[EpochTransition]:
        """Run the epoch check on its own; returns the transition applied, if any."""
        with self._atomic("sync_epoch"):
            return self._check_epoch()

    def observed_epoch(self) -> int:
        """Epoch implied by the clock now (may be ahead of `current_epoch`)."""
        return self.clock.observe()

    # --- transfers ---
    def _pull(self, token: TokenLedger, owner: str, amount: int) -> None:
        if not token.transfer_from(owner, self.address, amount):
            raise TransferFailed(token.name, owner, self.address, amount)

    def _push(self, token: TokenLedger, recipient: str, amount: int) -> None:
        if not token.transfer(self.address, recipient, amount):
            raise TransferFailed(token.name, self.address, recipient, amount)

    def _require_shares(self, holder: str, shares: int) -> None:
        held = self.shares.balance_of(holder)
        if held < shares:
            raise InsufficientBalance(f"{self.shares.symbol} balance of {holder}", held, shares)


class EpochPool(_PoolBase):
    """Offset-policy pool: one reserve slot per epoch."""

    def __init__(self,
                 token_a: TokenLedger,
                 token_b: TokenLedger,
                 config: Optional[PoolConfig] = None,
                 time_source: Optional[TimeSource] = None,
                 *,
                 name: str = "EpochLP",
                 symbol: str = "ELP") -> None:
        super().__init__(token_a, token_b, config, time_source, name=name, symbol=symbol)
        self.ledger = OffsetReserveLedger(self.config.bootstrap)
        if self.config.bootstrap.total_shares:
            # bootstrap supply is owned by the pool itself
            self.shares.mint(self.address, self.config.bootstrap.total_shares)

    def _capture(self) -> tuple:
        return self.current_epoch, self.ledger.copy(), self.shares.copy()

    def _restore(self, state: tuple) -> None:
        self.current_epoch, self.ledger, self.shares = state

    def _advance(self, transition: EpochTransition) -> None:
        self.ledger.advance(transition)

    def _epoch_for(self, op: Operation) -> int:
        return self.offsets.resolve(op, self.current_epoch)

    # --- operations ---
    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> int:
        """Deposit against the mint slot; returns shares minted."""
        with self._atomic("add_liquidity"):
            self._check_epoch()
            epoch = self._epoch_for(Operation.MINT)
            slot = self.ledger.get(epoch)
            quote = quote_deposit(amount_a, amount_b, slot, slippage_bps=self.config.slippage_bps)
            self.ledger.put(epoch, slot.deposit(quote.amount_a, quote.amount_b, quote.shares))
            self._pull(self.token_a, provider, quote.amount_a)
            self._pull(self.token_b, provider, quote.amount_b)
            self.shares.mint(provider, quote.shares)
            _dbg(f"add_liquidity {provider}: epoch={epoch} in=({quote.amount_a}, {quote.amount_b}) shares={quote.shares}")
            return quote.shares

    def remove_liquidity(self, provider: str, shares: int) -> Tuple[int, int]:
        """Redeem against the burn slot; returns (amount_a, amount_b) paid."""
        with self._atomic("remove_liquidity"):
            self._check_epoch()
            self._require_shares(provider, shares)
            epoch = self._epoch_for(Operation.BURN)
            self.ledger.materialize(epoch, self._epoch_for(Operation.MINT))
            slot = self.ledger.get(epoch)
            quote = quote_withdraw(shares, slot)
            self.ledger.put(epoch, slot.withdraw(quote.amount_a, quote.amount_b, shares))
            self.shares.burn(provider, shares)
            self._push(self.token_a, provider, quote.amount_a)
            self._push(self.token_b, provider, quote.amount_b)
            _dbg(f"remove_liquidity {provider}: epoch={epoch} shares={shares} out=({quote.amount_a}, {quote.amount_b})")
            return quote.amount_a, quote.amount_b

    def swap(self, trader: str, amount_in: int, a_to_b: bool = True) -> int:
        """Swap `amount_in` of one asset for the other; returns amount_out."""
        with self._atomic("swap"):
            self._check_epoch()
            direction = SwapDirection.from_flag(a_to_b)
            priced_epoch = self._epoch_for(Operation.SWAP_PRICING)
            settled_epoch = self._epoch_for(Operation.SWAP_SETTLEMENT)
            quote = quote_offset_swap(
                amount_in,
                direction,
                self.ledger.get(priced_epoch),
                max_swap_in=self.config.max_swap_in,
                fee_num=self.config.fee_num,
                fee_den=self.config.fee_den,
                priced_epoch=priced_epoch,
                settled_epoch=settled_epoch,
            )
            slot = self.ledger.get(settled_epoch)
            self.ledger.put(settled_epoch, slot.settle_swap(direction, quote.amount_in, quote.amount_out))
            token_in, token_out = (self.token_a, self.token_b) if a_to_b else (self.token_b, self.token_a)
            self._pull(token_in, trader, quote.amount_in)
            self._push(token_out, trader, quote.amount_out)
            _dbg(f"swap {trader} {direction.value}: priced@{priced_epoch} settled@{settled_epoch} "
                 f"in={quote.amount_in} out={quote.amount_out}")
            return quote.amount_out

    # --- views ---
    def current_reserves(self) -> EpochReserves:
        return self.ledger.get(self.current_epoch)

    def pricing_reserves(self) -> EpochReserves:
        return self.ledger.get(self._epoch_for(Operation.SWAP_PRICING))

    def epoch_reserves(self, epoch: int) -> EpochReserves:
        return self.ledger.get(epoch)

    def __repr__(self) -> str:
        return f"EpochPool(epoch={self.current_epoch}, reserves={self.current_reserves()}, offsets={self.offsets.name})"


class SnapshotPool(_PoolBase):
    """Snapshot-policy pool: live reserves, write-once liquidity checkpoint per epoch."""

    def __init__(self,
                 token_a: TokenLedger,
                 token_b: TokenLedger,
                 config: Optional[PoolConfig] = None,
                 time_source: Optional[TimeSource] = None,
                 *,
                 name: str = "SnapshotLP",
                 symbol: str = "SLP") -> None:
        super().__init__(token_a, token_b, config, time_source, name=name, symbol=symbol)
        self.ledger = SnapshotReserveLedger()

    def _capture(self) -> tuple:
        return self.current_epoch, self.ledger.copy(), self.shares.copy()

    def _restore(self, state: tuple) -> None:
        self.current_epoch, self.ledger, self.shares = state

    def _advance(self, transition: EpochTransition) -> None:
        self.ledger.advance(transition)

    def _live(self) -> EpochReserves:
        return EpochReserves(self.ledger.reserve_a, self.ledger.reserve_b, self.shares.total_supply)

    # --- operations ---
    def mint(self, provider: str, amount_a: int, amount_b: int, to: Optional[str] = None) -> int:
        """Deposit from `provider`, crediting shares to `to` (default provider)."""
        with self._atomic("mint"):
            self._check_epoch()
            live = self._live()
            quote = quote_deposit(amount_a, amount_b, live, slippage_bps=self.config.slippage_bps)
            updated = live.deposit(quote.amount_a, quote.amount_b, 0)
            self._pull(self.token_a, provider, quote.amount_a)
            self._pull(self.token_b, provider, quote.amount_b)
            self.ledger.set_reserves(updated.reserve_a, updated.reserve_b)
            self.shares.mint(to or provider, quote.shares)
            _dbg(f"mint {provider}->{to or provider}: in=({quote.amount_a}, {quote.amount_b}) shares={quote.shares}")
            return quote.shares

    def burn(self, provider: str, shares: int, to: Optional[str] = None) -> Tuple[int, int]:
        """Redeem `provider`'s shares with the decay haircut, paying `to` (default provider)."""
        with self._atomic("burn"):
            self._check_epoch()
            self._require_shares(provider, shares)
            live = self._live()
            quote = quote_withdraw(shares, live, decay=self.config.decay)
            updated = live.withdraw(quote.amount_a, quote.amount_b, 0)
            self.ledger.set_reserves(updated.reserve_a, updated.reserve_b)
            self.shares.burn(provider, shares)
            recipient = to or provider
            self._push(self.token_a, recipient, quote.amount_a)
            self._push(self.token_b, recipient, quote.amount_b)
            _dbg(f"burn {provider}->{recipient}: shares={shares} out=({quote.amount_a}, {quote.amount_b})")
            return quote.amount_a, quote.amount_b

    def swap(self, amount_a_out: int, amount_b_out: int, to: str) -> SnapshotSwapResult:
        """Optimistic swap: input must already sit in the pool's token balance."""
        with self._atomic("swap"):
            checked.require_uint("amount_a_out", amount_a_out)
            checked.require_uint("amount_b_out", amount_b_out)
            if to == self.address:
                # a payout to the pool itself would be read back as input
                raise ValueError(f"swap recipient must not be the pool address {self.address!r}")
            self._check_epoch()
            if amount_a_out == 0 and amount_b_out == 0:
                raise ZeroOutputComputed("swap requests no output")
            reserve_a, reserve_b = self.ledger.reserve_a, self.ledger.reserve_b
            if amount_a_out >= reserve_a and amount_a_out > 0:
                raise InsufficientBalance("reserve_a", reserve_a, amount_a_out)
            if amount_b_out >= reserve_b and amount_b_out > 0:
                raise InsufficientBalance("reserve_b", reserve_b, amount_b_out)
            priced_epoch = self.offsets.resolve(Operation.SWAP_PRICING, self.current_epoch)
            k_req = required_k(self.ledger.snapshot(priced_epoch), reserve_a, reserve_b, self.current_epoch)

            if amount_a_out:
                self._push(self.token_a, to, amount_a_out)
            if amount_b_out:
                self._push(self.token_b, to, amount_b_out)
            balance_a = self.token_a.balance_of(self.address)
            balance_b = self.token_b.balance_of(self.address)
            amount_a_in, amount_b_in = observed_inputs(
                balance_a, balance_b, reserve_a, reserve_b, amount_a_out, amount_b_out
            )
            check_k(balance_a, balance_b, amount_a_in, amount_b_in, k_req)

            self.ledger.set_reserves(balance_a, balance_b)
            _dbg(f"swap ->{to}: in=({amount_a_in}, {amount_b_in}) out=({amount_a_out}, {amount_b_out}) "
                 f"k_req={k_req} priced@{priced_epoch}")
            return SnapshotSwapResult(
                amount_a_in=amount_a_in,
                amount_b_in=amount_b_in,
                amount_a_out=amount_a_out,
                amount_b_out=amount_b_out,
                k_required=k_req,
                priced_epoch=priced_epoch,
            )

    # --- views ---
    def get_reserves(self) -> Tuple[int, int]:
        return self.ledger.reserve_a, self.ledger.reserve_b

    def epoch_liquidity(self, epoch: int) -> int:
        return self.ledger.snapshot(epoch)

    def required_k(self) -> int:
        """K the next swap in the pool's current epoch would be checked against."""
        priced_epoch = self.offsets.resolve(Operation.SWAP_PRICING, self.current_epoch)
        return required_k(
            self.ledger.snapshot(priced_epoch), self.ledger.reserve_a, self.ledger.reserve_b, self.current_epoch
        )

    def __repr__(self) -> str:
        return f"SnapshotPool(epoch={self.current_epoch}, reserves={self.get_reserves()}, offsets={self.offsets.name})"


__all__ = ["EpochPool", "SnapshotPool"]
