from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import math


@dataclass
class TrainingState:
    """Counters owned by the training supervisor and persisted with each checkpoint.

    ``best_score`` is None until a first evaluation (or a high-score checkpoint
    found on resume) sets it.
    """
    current_iteration: int = 0
    best_score: Optional[float] = None
    last_eval_iteration: int = 0
    episode_count: int = 0

    def beats_best(self, score: float) -> bool:
        return self.best_score is None or score > self.best_score

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingState":
        best = data.get("best_score")
        return cls(
            current_iteration=int(data.get("current_iteration", 0)),
            best_score=None if best is None else float(best),
            last_eval_iteration=int(data.get("last_eval_iteration", 0)),
            episode_count=int(data.get("episode_count", 0)),
        )


@dataclass
class EvaluationResult:
    """Aggregate of repeated evaluation episodes."""
    scores: List[float] = field(default_factory=list)
    mean: float = 0.0
    stddev: float = math.nan
    iteration: int = 0

    @property
    def games(self) -> int:
        return len(self.scores)

    @property
    def degenerate(self) -> bool:
        # Sample standard deviation needs at least two games.
        return self.games < 2

    def summary_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.iteration,
            "games": self.games,
            "mean": self.mean,
            "stddev": None if math.isnan(self.stddev) else self.stddev,
            "scores": list(self.scores),
        }
