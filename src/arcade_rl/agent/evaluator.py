"""Evaluation protocol: repeated non-learning games at a fixed epsilon."""
from __future__ import annotations

import logging
import math
import statistics

from arcade_rl.agent.runner import EpisodeRunner
from arcade_rl.models.session import EvaluationResult

logger = logging.getLogger(__name__)


class Evaluator:
    def __init__(self, runner: EpisodeRunner, epsilon: float):
        self.runner = runner
        self.epsilon = epsilon

    def run(self, repeat_count: int, iteration: int = 0) -> EvaluationResult:
        """Play ``repeat_count`` games; report mean and sample standard deviation."""
        if repeat_count < 1:
            raise ValueError("repeat_count must be >= 1")
        scores = [self.runner.run_episode(self.epsilon, learning_enabled=False) for _ in range(repeat_count)]
        result = EvaluationResult(scores=scores, mean=statistics.fmean(scores), iteration=iteration)
        if result.degenerate:
            logger.warning("Evaluation over a single game: sample standard deviation is undefined")
            result.stddev = math.nan
        else:
            result.stddev = statistics.stdev(scores)
        logger.info("Evaluation avg_score = %s std = %s", result.mean, result.stddev)
        return result

    def evaluate(self, repeat_count: int) -> float:
        return self.run(repeat_count).mean
