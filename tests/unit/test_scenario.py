import json
from pathlib import Path

import pytest

from epoch_amm import EpochPool, SnapshotPool
from epoch_amm.scenario import ScenarioError, run_scenario, format_record

SCENARIO_DIR = Path(__file__).resolve().parents[2] / "apps" / "scenarios"


def _load(name: str) -> dict:
    with open(SCENARIO_DIR / name, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.mark.parametrize("name,cls", [
    ("snapshot_exploit.json", SnapshotPool),
    ("offset_desync.json", EpochPool),
])
def test_bundled_scenarios_replay_as_expected(name, cls):
    run = run_scenario(_load(name))
    print(f"\n===== {name} =====")
    for rec in run.records:
        print(format_record(rec))
    assert isinstance(run.pool, cls)
    assert run.all_as_expected()


def test_base_units_and_recorded_failures():
    doc = {
        "policy": "snapshot",
        "config": {"offsets": "aligned"},
        "accounts": {"alice": [100_000, 100_000]},
        "steps": [
            {"op": "mint", "who": "alice", "amount_a": 10_000, "amount_b": 10_000},
            {"op": "swap", "to": "alice", "amount_a_out": 1, "amount_b_out": 0},
            {"op": "burn", "who": "alice", "shares": "all"},
        ],
    }
    run = run_scenario(doc)
    ok, failed, burned = run.records
    assert ok.ok and ok.result == 10_000
    assert not failed.ok and failed.error == "InvariantViolation"
    assert "K_FAIL" in failed.message
    assert "unexpected" in format_record(failed)
    assert burned.result == (9_950, 9_950)
    assert not run.all_as_expected()


def test_offset_bootstrap_is_funded():
    doc = {"policy": "offset", "config": {"bootstrap": [1_000, 1_000, 1_000]}, "steps": [{"op": "sync"}]}
    run = run_scenario(doc)
    assert run.wallet("pool") == (1_000, 1_000)
    assert run.pool.balance_of("pool") == 1_000
    assert run.records[0].result is None


@pytest.mark.parametrize("doc", [
    {"policy": "clob"},
    {"scale": "wei"},
    {"steps": [{"who": "alice"}]},
    {"steps": [{"op": "teleport"}]},
    {"accounts": {"alice": [1.5, 1]}},
])
def test_malformed_documents(doc):
    with pytest.raises(ScenarioError):
        run_scenario(doc)


def test_step_failures_are_recorded_and_the_run_continues():
    doc = {
        "policy": "offset",
        "scale": "token",
        "accounts": {"alice": [100, 100]},
        "steps": [
            {"op": "add_liquidity", "who": "alice", "amount_a": -5, "amount_b": 5, "expect_error": "ValueError"},
            {"op": "add_liquidity", "who": "alice", "amount_a": "lots", "amount_b": 5, "expect_error": "ValueError"},
            {"op": "transfer", "who": "bob", "token": "b", "amount": 1, "expect_error": "TransferFailed"},
            {"op": "advance", "epochs": 1},
            {"op": "sync"},
        ],
    }
    run = run_scenario(doc)
    print("\n===== STEP_FAILURES =====")
    for rec in run.records:
        print(format_record(rec))
    assert len(run.records) == 5
    assert [r.error for r in run.records[:3]] == ["ValueError", "ValueError", "TransferFailed"]
    assert run.records[4].result == (0, 1)
    assert run.all_as_expected()
    assert run.wallet("alice") == (100 * 10**18, 100 * 10**18)


def test_missing_step_field_is_malformed():
    with pytest.raises(ScenarioError):
        run_scenario({"steps": [{"op": "swap", "amount_in": 1}]})


def test_negative_base_amount_rejected_by_pool():
    doc = {
        "policy": "offset",
        "accounts": {"alice": [1_000, 1_000]},
        "steps": [
            {"op": "add_liquidity", "who": "alice", "amount_a": -5, "amount_b": 5, "expect_error": "ValueError"},
            {"op": "sync"},
        ],
    }
    run = run_scenario(doc)
    assert [r.ok for r in run.records] == [False, True]
    assert "amount_a" in run.records[0].message
    assert run.all_as_expected()
