import threading

import pytest

from epoch_amm import ALIGNED, DESYNCHRONIZED
from epoch_amm.core.constants import UINT_MAX
from epoch_amm.core.datatypes import EpochReserves, EpochTransition
from epoch_amm.core.exc import (
    ArithmeticOverflow,
    InsufficientBalance,
    SwapCapExceeded,
    TransferFailed,
    ZeroLiquidityComputed,
    ZeroOutputComputed,
)

FUNDING = 1_000_000  # per-holder funding in the `tokens` fixture


def wallet(pool, holder):
    return pool.token_a.balance_of(holder), pool.token_b.balance_of(holder)


# -----------------------------
# Deposits / withdrawals
# -----------------------------

def test_first_deposit_lands_in_current_slot(offset_pool):
    shares = offset_pool.add_liquidity("alice", 1000, 3000)
    assert shares == 1732
    assert offset_pool.epoch_reserves(0) == EpochReserves(1000, 3000, 1732)
    assert offset_pool.balance_of("alice") == 1732
    assert wallet(offset_pool, "alice") == (FUNDING - 1000, FUNDING - 3000)
    assert wallet(offset_pool, "pool") == (1000, 3000)


def test_bootstrap_shares_belong_to_pool(make_offset_pool):
    pool = make_offset_pool(bootstrap=EpochReserves(500, 500, 500))
    assert pool.balance_of("pool") == 500
    assert pool.total_supply == 500
    assert pool.current_reserves() == EpochReserves(500, 500, 500)


def test_desynchronized_burn_reads_the_next_slot(offset_pool, tick):
    print("\n===== DESYNC_BURN =====")
    offset_pool.add_liquidity("alice", 1000, 1000)
    out = offset_pool.remove_liquidity("alice", 400)
    print(f"    out={out} slot0={offset_pool.epoch_reserves(0)} slot1={offset_pool.epoch_reserves(1)}")
    assert out == (400, 400)
    # the withdrawal debits epoch 1; epoch 0 still shows the full deposit
    assert offset_pool.epoch_reserves(0) == EpochReserves(1000, 1000, 1000)
    assert offset_pool.epoch_reserves(1) == EpochReserves(600, 600, 600)

    tick()
    offset_pool.sync_epoch()
    # crossing copies epoch 0 forward over the debited slot
    assert offset_pool.current_reserves() == EpochReserves(1000, 1000, 1000)
    assert offset_pool.total_supply == 600
    assert offset_pool.shares.check()


def test_aligned_burn_reads_the_current_slot(aligned_offset_pool, tick):
    aligned_offset_pool.add_liquidity("alice", 1000, 1000)
    aligned_offset_pool.remove_liquidity("alice", 400)
    assert aligned_offset_pool.current_reserves() == EpochReserves(600, 600, 600)
    tick()
    aligned_offset_pool.sync_epoch()
    assert aligned_offset_pool.current_reserves() == EpochReserves(600, 600, 600)


def test_round_trip_on_empty_pool_returns_deposit(offset_pool):
    shares = offset_pool.add_liquidity("alice", 5000, 5000)
    assert offset_pool.remove_liquidity("alice", shares) == (5000, 5000)
    assert wallet(offset_pool, "alice") == (FUNDING, FUNDING)
    assert offset_pool.total_supply == 0


def test_remove_more_than_held(offset_pool):
    offset_pool.add_liquidity("alice", 1000, 1000)
    with pytest.raises(InsufficientBalance):
        offset_pool.remove_liquidity("bob", 1)
    with pytest.raises(InsufficientBalance):
        offset_pool.remove_liquidity("alice", 1001)


# -----------------------------
# Swaps
# -----------------------------

@pytest.mark.parametrize("offsets,second_out", [(DESYNCHRONIZED, 299), (ALIGNED, 99)])
def test_swap_pricing_slot(make_offset_pool, tick, offsets, second_out):
    print(f"\n===== SWAP_PRICING[{offsets.name}] =====")
    pool = make_offset_pool(offsets)
    pool.add_liquidity("alice", 1000, 3000)
    tick()
    first = pool.swap("bob", 500, a_to_b=True)
    second = pool.swap("bob", 100, a_to_b=True)
    print(f"    first={first} second={second} pricing={pool.pricing_reserves()}")
    assert first == 1495
    assert second == second_out
    # settlement always hits the current slot
    assert pool.current_reserves().pair() == (1600, 3000 - 1495 - second_out)


def test_stale_quote_larger_than_settled_reserve_rolls_back(offset_pool, tick):
    offset_pool.add_liquidity("alice", 1000, 3000)
    tick()
    offset_pool.swap("bob", 500)
    before = offset_pool.current_reserves()
    bob = wallet(offset_pool, "bob")
    with pytest.raises(InsufficientBalance):
        offset_pool.swap("bob", 600)
    assert offset_pool.current_reserves() == before
    assert wallet(offset_pool, "bob") == bob


def test_swap_b_to_a(offset_pool):
    offset_pool.add_liquidity("alice", 3000, 1000)
    assert offset_pool.swap("bob", 10, a_to_b=False) == 29
    assert offset_pool.current_reserves().pair() == (2971, 1010)


def test_swap_cap(offset_pool):
    offset_pool.add_liquidity("alice", 1000, 1000)
    with pytest.raises(SwapCapExceeded):
        offset_pool.swap("bob", 10**18 + 1)


def test_skipped_epochs_leave_an_empty_slot(offset_pool, tick):
    print("\n===== SKIP =====")
    offset_pool.add_liquidity("alice", 1000, 1000)
    tick(3)
    with pytest.raises(ZeroOutputComputed):
        offset_pool.swap("bob", 100)
    # the failed swap rolled back its own epoch check
    assert offset_pool.current_epoch == 0
    t = offset_pool.sync_epoch()
    assert t == EpochTransition(0, 3)
    assert offset_pool.current_reserves() == EpochReserves.zero()
    # empty slot: next deposit is priced as a first deposit
    assert offset_pool.add_liquidity("bob", 400, 900) == 600


def test_withdraw_from_empty_burn_slot(offset_pool, tick):
    offset_pool.add_liquidity("alice", 1000, 1000)
    tick(3)
    with pytest.raises(ZeroLiquidityComputed):
        offset_pool.remove_liquidity("alice", 10)


# -----------------------------
# Epoch check / atomicity
# -----------------------------

def test_sync_is_idempotent_within_an_epoch(offset_pool, tick):
    assert offset_pool.sync_epoch() is None
    tick()
    assert offset_pool.sync_epoch() == EpochTransition(0, 1)
    assert offset_pool.sync_epoch() is None
    assert offset_pool.current_epoch == 1


def test_failed_transfer_restores_pool_state(offset_pool, tick):
    print("\n===== ROLLBACK =====")
    offset_pool.add_liquidity("alice", 1000, 1000)
    tick()
    ledger_before = offset_pool.ledger.epochs()
    with pytest.raises(TransferFailed):
        offset_pool.add_liquidity("carol", 100, 100)
    print(f"    epoch={offset_pool.current_epoch} ledger={offset_pool.ledger}")
    assert offset_pool.current_epoch == 0
    assert offset_pool.ledger.epochs() == ledger_before
    assert offset_pool.epoch_reserves(0) == EpochReserves(1000, 1000, 1000)
    assert offset_pool.balance_of("carol") == 0
    assert offset_pool.total_supply == 1000


def test_partial_pull_is_undone(offset_pool, tokens):
    token_a, _ = tokens
    token_a.mint_to("dave", 100)
    with pytest.raises(TransferFailed) as ei:
        offset_pool.add_liquidity("dave", 100, 100)
    assert ei.value.token == "Beta Token"
    assert token_a.balance_of("dave") == 100
    assert token_a.balance_of("pool") == 0


def test_share_supply_tracks_holders(offset_pool, tick):
    offset_pool.add_liquidity("alice", 1000, 1000)
    offset_pool.add_liquidity("bob", 500, 500)
    tick()
    offset_pool.remove_liquidity("bob", 200)
    assert offset_pool.shares.check()
    assert offset_pool.total_supply == 1300


def test_overflowing_deposit_fails_whole_call(offset_pool, tick):
    print("\n===== OVERFLOW =====")
    offset_pool.add_liquidity("alice", 1000, 1000)
    tick()
    big = UINT_MAX - 500
    with pytest.raises(ArithmeticOverflow):
        offset_pool.add_liquidity("bob", big, big)
    assert offset_pool.current_epoch == 0
    assert offset_pool.ledger.epochs() == [0]
    assert offset_pool.epoch_reserves(0) == EpochReserves(1000, 1000, 1000)
    assert offset_pool.total_supply == 1000
    assert wallet(offset_pool, "bob") == (FUNDING, FUNDING)
    assert wallet(offset_pool, "pool") == (1000, 1000)


def test_concurrent_deposits_are_serialized(offset_pool):
    holders = ("alice", "bob", "attacker")
    rounds = 200

    def deposit(holder):
        for _ in range(rounds):
            offset_pool.add_liquidity(holder, 10, 10)

    threads = [threading.Thread(target=deposit, args=(h,)) for h in holders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert offset_pool.shares.check()
    assert offset_pool.total_supply == 10 * rounds * len(holders)
    assert offset_pool.current_reserves().total_shares == offset_pool.total_supply
    assert offset_pool.current_reserves().pair() == wallet(offset_pool, "pool")
