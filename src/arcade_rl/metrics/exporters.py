"""JSONL export of per-episode and per-evaluation records."""
from __future__ import annotations

from pathlib import Path
import json
import time
from typing import Any, Dict

from arcade_rl.models.episode import Episode
from arcade_rl.models.session import EvaluationResult

EPISODE_LOG_SUFFIX = "_episodes.jsonl"


def episode_record(episode: Episode, epsilon: float, iteration: int, replay_mem_size: int) -> Dict[str, Any]:
    return {
        "type": "episode",
        "ts": time.time(),
        "epsilon": epsilon,
        "iteration": iteration,
        "replay_mem_size": replay_mem_size,
        **episode.summary_dict(),
    }


def evaluation_record(result: EvaluationResult, new_high_score: bool) -> Dict[str, Any]:
    return {
        "type": "evaluation",
        "ts": time.time(),
        "new_high_score": new_high_score,
        **result.summary_dict(),
    }


def append_record(record: Dict[str, Any], path: Path) -> None:
    with path.open("a") as f:
        f.write(json.dumps(record) + "\n")
