"""Checkpoint file set naming, discovery and atomic writes.

For a save prefix ``P`` and training iteration ``N``::

    P_net.json                      network / solver definition
    P_iter_N.weights                online network weights
    P_iter_N.solverstate            optimizer, target network, iteration
    P_iter_N.replaymemory           replay memory
    P_iter_N.trainstate.json        supervisor counters and best score
    P_HiScore<S>_iter_N.weights     high-score weights (display only)

The solver state is written last, so ``find_latest_snapshot`` never returns a
half-written set.
"""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import torch

from arcade_rl.errors import ResumeError

NET_SUFFIX = "_net.json"
WEIGHTS_SUFFIX = ".weights"
SOLVER_SUFFIX = ".solverstate"
REPLAY_SUFFIX = ".replaymemory"
TRAIN_STATE_SUFFIX = ".trainstate.json"
HI_SCORE_TAG = "_HiScore"


def snapshot_base(prefix: str, iteration: int) -> str:
    return f"{prefix}_iter_{int(iteration)}"


def hi_score_prefix(prefix: str, score: float) -> str:
    return f"{prefix}{HI_SCORE_TAG}{int(score)}"


def strip_suffix(path: str, suffix: str) -> str:
    path = str(path)
    return path[: -len(suffix)] if path.endswith(suffix) else path


def replay_memory_path(snapshot: str) -> str:
    """Replay memory file sharing the base name of a ``.solverstate`` snapshot."""
    return strip_suffix(snapshot, SOLVER_SUFFIX) + REPLAY_SUFFIX


def require_replay_memory(snapshot: str) -> str:
    mem = replay_memory_path(snapshot)
    if not Path(mem).is_file():
        raise ResumeError(f"Unable to find .replaymemory for snapshot: {snapshot}")
    return mem


def train_state_path(snapshot: str) -> str:
    return strip_suffix(snapshot, SOLVER_SUFFIX) + TRAIN_STATE_SUFFIX


def _listing(prefix: str):
    p = Path(prefix)
    directory = p.parent if str(p.parent) else Path(".")
    if not directory.is_dir():
        return directory, []
    return directory, [entry.name for entry in directory.iterdir() if entry.is_file()]


def find_latest_snapshot(prefix: str) -> str:
    """Path of the solver state with the highest iteration for ``prefix``, or ''."""
    directory, names = _listing(prefix)
    pattern = re.compile(rf"^{re.escape(Path(prefix).name)}_iter_(\d+){re.escape(SOLVER_SUFFIX)}$")
    best_iter, best_name = -1, ""
    for name in names:
        m = pattern.match(name)
        if m and int(m.group(1)) > best_iter:
            best_iter, best_name = int(m.group(1)), name
    return str(directory / best_name) if best_name else ""


def find_hi_score(prefix: str) -> Optional[float]:
    """Highest score recorded in high-score checkpoint names, or None."""
    _, names = _listing(prefix)
    pattern = re.compile(
        rf"^{re.escape(Path(prefix).name)}{HI_SCORE_TAG}(-?\d+)_iter_\d+{re.escape(WEIGHTS_SUFFIX)}$")
    scores = [int(m.group(1)) for m in (pattern.match(n) for n in names) if m]
    return float(max(scores)) if scores else None


def _atomic_target(path: Path) -> Path:
    return path.with_name(path.name + f".{os.getpid()}.tmp")


def save_payload(payload: Any, path: Path) -> None:
    tmp_path = _atomic_target(path)
    try:
        with tmp_path.open("wb") as fp:
            torch.save(payload, fp)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def load_payload(path: Path, *, map_location: Optional[str] = "cpu") -> Any:
    # Payloads carry numpy frames and plain python containers, not only tensors.
    return torch.load(str(path), map_location=map_location, weights_only=False)


def write_json(data: Dict[str, Any], path: Path) -> None:
    tmp_path = _atomic_target(path)
    try:
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True))
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def read_json(path: Path) -> Dict[str, Any]:
    return json.loads(Path(path).read_text())
