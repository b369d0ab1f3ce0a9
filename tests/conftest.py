from __future__ import annotations

from typing import Callable

import pytest

# Import project primitives
from epoch_amm import (
    EpochPool,
    SnapshotPool,
    PoolConfig,
    ManualClock,
    InMemoryToken,
    ALIGNED,
    DESYNCHRONIZED,
)

FUNDING = 1_000_000
EPOCH = PoolConfig().epoch_duration


# -----------------------------
# Test helpers (pure functions)
# -----------------------------

def fund(token_a: InMemoryToken, token_b: InMemoryToken, *holders: str, amount: int = FUNDING) -> None:
    for h in holders:
        token_a.mint_to(h, amount)
        token_b.mint_to(h, amount)


def next_epoch(clock: ManualClock, epochs: int = 1) -> None:
    """Move the clock just past the next `epochs` boundaries."""
    clock.advance(epochs * EPOCH + 1)


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(0)


@pytest.fixture()
def tokens():
    token_a = InMemoryToken("Alpha Token", "ALPHA")
    token_b = InMemoryToken("Beta Token", "BETA")
    fund(token_a, token_b, "alice", "bob", "attacker")
    return token_a, token_b


@pytest.fixture()
def make_offset_pool(tokens, clock) -> Callable[..., EpochPool]:
    def _make(offsets=DESYNCHRONIZED, **cfg) -> EpochPool:
        return EpochPool(tokens[0], tokens[1], PoolConfig(offsets=offsets, **cfg), clock)
    return _make


@pytest.fixture()
def make_snapshot_pool(tokens, clock) -> Callable[..., SnapshotPool]:
    def _make(offsets=DESYNCHRONIZED, **cfg) -> SnapshotPool:
        return SnapshotPool(tokens[0], tokens[1], PoolConfig(offsets=offsets, **cfg), clock)
    return _make


@pytest.fixture()
def offset_pool(make_offset_pool) -> EpochPool:
    return make_offset_pool()


@pytest.fixture()
def aligned_offset_pool(make_offset_pool) -> EpochPool:
    return make_offset_pool(ALIGNED)


@pytest.fixture()
def snapshot_pool(make_snapshot_pool) -> SnapshotPool:
    return make_snapshot_pool()


@pytest.fixture()
def aligned_snapshot_pool(make_snapshot_pool) -> SnapshotPool:
    return make_snapshot_pool(ALIGNED)


@pytest.fixture()
def tick(clock) -> Callable[..., None]:
    """tick(n=1): move the shared clock past the next n epoch boundaries."""
    return lambda epochs=1: next_epoch(clock, epochs)
