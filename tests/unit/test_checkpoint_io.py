import os

import pytest

from arcade_rl.errors import ResumeError
from arcade_rl.utils import checkpoint_io as ckpt


def _touch(path):
    with open(path, "w") as f:
        f.write("x")


def test_latest_snapshot_picks_highest_iteration(save_prefix):
    for n in (500, 12000, 3000):
        _touch(f"{save_prefix}_iter_{n}.solverstate")
    _touch(f"{save_prefix}_iter_99999.weights")  # weights alone are not a snapshot
    _touch(f"{save_prefix}other_iter_50000.solverstate")
    assert ckpt.find_latest_snapshot(save_prefix) == f"{save_prefix}_iter_12000.solverstate"


def test_latest_snapshot_empty_when_none(save_prefix):
    assert ckpt.find_latest_snapshot(save_prefix) == ""


def test_latest_snapshot_missing_directory(tmp_path):
    assert ckpt.find_latest_snapshot(str(tmp_path / "nope" / "game")) == ""


def test_hi_score_scan(save_prefix):
    assert ckpt.find_hi_score(save_prefix) is None
    _touch(f"{save_prefix}_HiScore12_iter_100.weights")
    _touch(f"{save_prefix}_HiScore50_iter_900.weights")
    _touch(f"{save_prefix}_HiScore7_iter_1000.weights")
    assert ckpt.find_hi_score(save_prefix) == 50.0


def test_hi_score_prefix_truncates():
    assert ckpt.hi_score_prefix("runs/game", 41.9) == "runs/game_HiScore41"


def test_replay_memory_must_accompany_snapshot(save_prefix):
    snap = f"{save_prefix}_iter_10.solverstate"
    _touch(snap)
    with pytest.raises(ResumeError):
        ckpt.require_replay_memory(snap)
    _touch(f"{save_prefix}_iter_10.replaymemory")
    assert ckpt.require_replay_memory(snap) == f"{save_prefix}_iter_10.replaymemory"


def test_atomic_writes_leave_no_temp_files(tmp_path):
    ckpt.save_payload({"a": 1}, tmp_path / "p.weights")
    ckpt.write_json({"b": 2}, tmp_path / "s.json")
    assert sorted(os.listdir(tmp_path)) == ["p.weights", "s.json"]
    assert ckpt.load_payload(tmp_path / "p.weights") == {"a": 1}
    assert ckpt.read_json(tmp_path / "s.json") == {"b": 2}
