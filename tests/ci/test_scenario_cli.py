from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _run(path: Path) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT / "src"), env.get("PYTHONPATH")]))
    cmd = [sys.executable, str(ROOT / "apps" / "run_scenario.py"), "--input", str(path)]
    return subprocess.run(cmd, check=False, capture_output=True, text=True, env=env)


def test_snapshot_exploit_trace() -> None:
    result = _run(ROOT / "apps" / "scenarios" / "snapshot_exploit.json")
    assert result.returncode == 0, result.stderr
    assert "=== Steps ===" in result.stdout
    assert "epoch_liquidity[0]" in result.stdout
    assert "unexpected" not in result.stdout


def test_offset_desync_trace() -> None:
    result = _run(ROOT / "apps" / "scenarios" / "offset_desync.json")
    assert result.returncode == 0, result.stderr
    assert "FAILED SwapCapExceeded" in result.stdout
    assert "epoch_reserves[2]" in result.stdout


def test_unexpected_outcome_sets_exit_status(tmp_path: Path) -> None:
    doc = {
        "policy": "offset",
        "accounts": {"alice": [1000, 1000]},
        "steps": [{"op": "add_liquidity", "who": "alice", "amount_a": 100, "amount_b": 100,
                   "expect_error": "ZeroAmount"}],
    }
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    result = _run(path)
    assert result.returncode == 1
    assert "<-- unexpected" in result.stdout


def test_empty_epoch_slot_is_marked(tmp_path: Path) -> None:
    doc = {
        "policy": "offset",
        "accounts": {"alice": [1000, 1000]},
        "steps": [
            {"op": "add_liquidity", "who": "alice", "amount_a": 100, "amount_b": 100},
            {"op": "advance", "epochs": 3},
            {"op": "sync"},
        ],
    }
    path = tmp_path / "skip.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    result = _run(path)
    assert result.returncode == 0, result.stderr
    assert "epoch_reserves[0] = A=" in result.stdout
    assert "epoch_reserves[3] = empty" in result.stdout
