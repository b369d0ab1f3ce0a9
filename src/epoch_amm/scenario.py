"""
Declarative scenario replay.

A scenario is a JSON-style mapping:

    {
      "policy": "snapshot",                 # or "offset"
      "scale": "token",                     # amounts in whole tokens ("base" = raw units)
      "config": {"offsets": "desynchronized"},
      "accounts": {"alice": [100000, 100000]},
      "steps": [
        {"op": "mint", "who": "alice", "amount_a": 10000, "amount_b": 10000},
        {"op": "advance", "epochs": 1},
        {"op": "sync"},
        {"op": "transfer", "who": "alice", "token": "b", "amount": 1000},
        {"op": "swap", "to": "alice", "amount_a_out": 5000, "amount_b_out": 0,
         "expect_error": "InvariantViolation"}
      ]
    }

Each step is executed against a fresh pool with a ManualClock; failures are
recorded on the step instead of aborting the run, so exploit and regression
traces can be compared side by side.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .clock import ManualClock
from .config import PoolConfig
from .core.constants import TOKEN_DECIMALS
from .core.exc import PoolError, TransferFailed
from .core.fmt import decimal_to_units, fmt_units
from .pool import EpochPool, SnapshotPool
from .tokens import InMemoryToken

POLICIES = ("offset", "snapshot")
STEP_OPS = frozenset({
    "advance", "sync", "transfer",
    "mint", "add_liquidity", "burn", "remove_liquidity", "swap",
})


@dataclass
class StepRecord:
    """Outcome of one scenario step."""

    index: int
    op: str
    ok: bool
    epoch: int
    reserves: tuple
    result: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    expected_error: Optional[str] = None

    @property
    def as_expected(self) -> bool:
        if self.expected_error is None:
            return self.ok
        return (not self.ok) and self.error == self.expected_error


@dataclass
class ScenarioRun:
    pool: Union[EpochPool, SnapshotPool]
    token_a: InMemoryToken
    token_b: InMemoryToken
    clock: ManualClock
    records: List[StepRecord] = field(default_factory=list)

    def all_as_expected(self) -> bool:
        return all(r.as_expected for r in self.records)

    def wallet(self, holder: str) -> tuple:
        return self.token_a.balance_of(holder), self.token_b.balance_of(holder)


class ScenarioError(ValueError):
    """Malformed scenario document."""
    pass


def _amount_parser(scale: str, decimals: int) -> Callable[[Any], int]:
    if scale == "base":
        def parse(v: Any) -> int:
            if not isinstance(v, int) or isinstance(v, bool):
                raise ScenarioError(f"base-unit amounts must be ints, got {v!r}")
            return v
        return parse
    if scale == "token":
        return lambda v: decimal_to_units(v, decimals)
    raise ScenarioError(f"unknown scale {scale!r}; expected 'base' or 'token'")


def build(doc: Mapping[str, Any]) -> tuple[ScenarioRun, Callable[[Any], int]]:
    policy = doc.get("policy", "offset")
    if policy not in POLICIES:
        raise ScenarioError(f"unknown policy {policy!r}; expected one of {POLICIES}")
    decimals = int(doc.get("decimals", TOKEN_DECIMALS))
    amount = _amount_parser(doc.get("scale", "base"), decimals)

    raw_cfg = dict(doc.get("config", {}))
    if "max_swap_in" in raw_cfg:
        raw_cfg["max_swap_in"] = amount(raw_cfg["max_swap_in"])
    if "bootstrap" in raw_cfg:
        b = raw_cfg["bootstrap"]
        raw_cfg["bootstrap"] = (
            {k: amount(v) for k, v in b.items()} if isinstance(b, Mapping) else [amount(v) for v in b]
        )
    config = PoolConfig.from_dict(raw_cfg)

    token_a = InMemoryToken("Alpha Token", "ALPHA", decimals)
    token_b = InMemoryToken("Beta Token", "BETA", decimals)
    clock = ManualClock(config.epoch_start)
    cls = SnapshotPool if policy == "snapshot" else EpochPool
    pool = cls(token_a, token_b, config, clock)

    # bootstrap reserves are backed by real pool balances
    token_a.mint_to(pool.address, config.bootstrap.reserve_a)
    token_b.mint_to(pool.address, config.bootstrap.reserve_b)
    for holder, (a, b) in doc.get("accounts", {}).items():
        token_a.mint_to(holder, amount(a))
        token_b.mint_to(holder, amount(b))
    return ScenarioRun(pool, token_a, token_b, clock), amount


def _reserves_of(pool) -> tuple:
    if isinstance(pool, SnapshotPool):
        return pool.get_reserves()
    return pool.current_reserves().pair()


def _execute(run: ScenarioRun, step: Mapping[str, Any], amount: Callable[[Any], int]) -> Any:
    pool = run.pool
    op = step["op"]
    if op == "advance":
        seconds = step.get("seconds")
        if seconds is None:
            seconds = int(step.get("epochs", 1)) * pool.config.epoch_duration
        return run.clock.advance(int(seconds))
    if op == "sync":
        t = pool.sync_epoch()
        return None if t is None else (t.previous, t.new)
    if op == "transfer":
        token = run.token_a if step.get("token", "a") == "a" else run.token_b
        qty = amount(step["amount"])
        recipient = step.get("to", pool.address)
        if not token.transfer(step["who"], recipient, qty):
            raise TransferFailed(token.name, step["who"], recipient, qty)
        return qty

    def shares_arg() -> int:
        s = step["shares"]
        return pool.balance_of(step["who"]) if s == "all" else amount(s)

    if isinstance(pool, SnapshotPool):
        if op in ("mint", "add_liquidity"):
            return pool.mint(step["who"], amount(step["amount_a"]), amount(step["amount_b"]), step.get("to"))
        if op in ("burn", "remove_liquidity"):
            return pool.burn(step["who"], shares_arg(), step.get("to"))
        res = pool.swap(amount(step.get("amount_a_out", 0)), amount(step.get("amount_b_out", 0)), step["to"])
        return {"amount_a_in": res.amount_a_in, "amount_b_in": res.amount_b_in,
                "k_required": res.k_required, "priced_epoch": res.priced_epoch}
    if op in ("mint", "add_liquidity"):
        return pool.add_liquidity(step["who"], amount(step["amount_a"]), amount(step["amount_b"]))
    if op in ("burn", "remove_liquidity"):
        return pool.remove_liquidity(step["who"], shares_arg())
    return pool.swap(step["who"], amount(step["amount_in"]), bool(step.get("a_to_b", True)))


def run_scenario(doc: Mapping[str, Any]) -> ScenarioRun:
    """Build the pool described by `doc` and replay its steps.

    A malformed step (no or unknown `op`, missing field) raises ScenarioError.
    Any failure while executing a well-formed step, including bad amounts, is
    recorded on that step and the run continues.
    """
    run, amount = build(doc)
    for i, step in enumerate(doc.get("steps", [])):
        op = step.get("op")
        if op is None:
            raise ScenarioError(f"step {i} has no 'op'")
        if op not in STEP_OPS:
            raise ScenarioError(f"step {i}: unsupported op {op!r}; expected one of {sorted(STEP_OPS)}")
        expected = step.get("expect_error")
        try:
            result = _execute(run, step, amount)
        except KeyError as exc:
            raise ScenarioError(f"step {i} ({op}) is missing field {exc}") from None
        except (PoolError, ValueError, TypeError) as exc:
            rec = StepRecord(i, op, False, run.pool.current_epoch, _reserves_of(run.pool),
                             error=type(exc).__name__, message=str(exc), expected_error=expected)
        else:
            rec = StepRecord(i, op, True, run.pool.current_epoch, _reserves_of(run.pool),
                             result=result, expected_error=expected)
        run.records.append(rec)
    return run


def format_record(rec: StepRecord, decimals: int = TOKEN_DECIMALS, places: int = 4) -> str:
    ra, rb = rec.reserves
    head = f"[{rec.index:02d}] {rec.op:<16} epoch={rec.epoch} reserves=({fmt_units(ra, decimals, places)}, {fmt_units(rb, decimals, places)})"
    if rec.ok:
        body = f"ok result={rec.result}"
    else:
        body = f"FAILED {rec.error}: {rec.message}"
    flag = "" if rec.as_expected else "  <-- unexpected"
    return f"{head} | {body}{flag}"


__all__ = [
    "POLICIES",
    "STEP_OPS",
    "StepRecord",
    "ScenarioRun",
    "ScenarioError",
    "build",
    "run_scenario",
    "format_record",
]
