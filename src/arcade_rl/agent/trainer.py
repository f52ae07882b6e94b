"""Training supervisor: exploration schedule, evaluation cadence, checkpoints, resume.

One supervisor owns the ``TrainingState`` and the save prefix. Each loop
iteration plays a learning episode, then decides whether to evaluate. An
evaluation always ends with a resume-capable checkpoint; a new best mean score
additionally writes a weights-only high-score snapshot.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from arcade_rl.agent.base import LearningAgent
from arcade_rl.agent.evaluator import Evaluator
from arcade_rl.agent.runner import EpisodeRunner
from arcade_rl.env.base import Emulator
from arcade_rl.env.frames import ScreenRecorder
from arcade_rl.metrics.exporters import EPISODE_LOG_SUFFIX, append_record, episode_record, evaluation_record
from arcade_rl.models.config import TrainingConfig
from arcade_rl.models.session import EvaluationResult, TrainingState
from arcade_rl.utils import checkpoint_io as ckpt
from arcade_rl.utils.profiler import Profiler

logger = logging.getLogger(__name__)


def compute_epsilon(iteration: int, explore: int, epsilon_final: float) -> float:
    """Linear decay from 1.0 to ``epsilon_final`` over ``explore`` iterations."""
    if iteration < explore:
        return 1.0 - (1.0 - epsilon_final) * (float(iteration) / explore)
    return epsilon_final


class TrainingSupervisor:
    def __init__(
        self,
        cfg: TrainingConfig,
        emulator: Emulator,
        agent: LearningAgent,
        save_prefix: str = "",
        recorder: Optional[ScreenRecorder] = None,
        profiler: Optional[Profiler] = None,
    ):
        self.cfg = cfg
        self.agent = agent
        self.save_prefix = save_prefix
        self.runner = EpisodeRunner(emulator, agent, cfg, recorder=recorder, profiler=profiler)
        self.evaluator = Evaluator(self.runner, cfg.evaluate_with_epsilon)
        self.state = TrainingState()
        self.log_path: Optional[Path] = Path(save_prefix + EPISODE_LOG_SUFFIX) if save_prefix else None

    def epsilon(self) -> float:
        return compute_epsilon(self.state.current_iteration, self.cfg.explore, self.cfg.epsilon)

    # --- startup ---
    def restore(self) -> TrainingState:
        """Load the most recent checkpoint (or fine-tuning weights) before any episode runs."""
        cfg = self.cfg
        state = TrainingState()
        snapshot = cfg.snapshot
        if cfg.resume and not snapshot and self.save_prefix:
            snapshot = ckpt.find_latest_snapshot(self.save_prefix)
        if snapshot:
            mem_path = ckpt.require_replay_memory(snapshot)
            logger.info("Resuming from %s", snapshot)
            self.agent.restore_solver(snapshot)
            self.agent.load_replay_memory(mem_path)
            state_path = Path(ckpt.train_state_path(snapshot))
            if state_path.is_file():
                state = TrainingState.from_dict(ckpt.read_json(state_path))
        elif cfg.weights:
            logger.info("Finetuning from %s", cfg.weights)
            self.agent.load_pretrained_weights(cfg.weights)
        state.current_iteration = self.agent.current_training_iteration()
        if cfg.resume and self.save_prefix:
            hi_score = ckpt.find_hi_score(self.save_prefix)
            # File names keep only int(score); an exact best from the sidecar wins.
            if hi_score is not None and state.best_score is None:
                state.best_score = hi_score
            logger.info("Resuming from HiScore %s", state.best_score)
        self.state = state
        return state

    # --- evaluation / checkpoints ---
    def should_evaluate(self, score: float, iteration: int) -> bool:
        # Score-driven trigger after exploration OR the periodic one.
        state = self.state
        return ((state.beats_best(score) and iteration >= self.cfg.explore)
                or iteration >= state.last_eval_iteration + self.cfg.evaluate_freq)

    def checkpoint(self) -> str:
        """Write the resume-capable set: training state, weights, replay memory, solver state."""
        if not self.save_prefix:
            return ""
        base = ckpt.snapshot_base(self.save_prefix, self.agent.current_training_iteration())
        ckpt.write_json(self.state.to_dict(), Path(base + ckpt.TRAIN_STATE_SUFFIX))
        return self.agent.snapshot(self.save_prefix, True, True)

    def evaluate_and_checkpoint(self) -> EvaluationResult:
        state = self.state
        iteration = self.agent.current_training_iteration()
        result = self.evaluator.run(self.cfg.repeat_games, iteration=iteration)
        new_high_score = state.beats_best(result.mean)
        if new_high_score:
            logger.info("iter %d New High Score: %s", iteration, result.mean)
            state.best_score = result.mean
            if self.save_prefix:
                self.agent.snapshot(ckpt.hi_score_prefix(self.save_prefix, result.mean), False, False)
        state.last_eval_iteration = iteration
        self.checkpoint()
        if self.log_path is not None:
            append_record(evaluation_record(result, new_high_score), self.log_path)
        return result

    # --- main loop ---
    def run(self) -> TrainingState:
        cfg = self.cfg
        state = self.state
        if self.save_prefix:
            self.agent.write_net_definition(self.save_prefix + ckpt.NET_SUFFIX)
        while state.current_iteration < cfg.max_iter:
            epsilon = self.epsilon()
            episode = self.runner.play(epsilon, learning_enabled=True, index=state.episode_count)
            state.current_iteration = self.agent.current_training_iteration()
            mem_size = self.agent.replay_memory_size()
            logger.info("Episode %d score = %s, epsilon = %s, iter = %d, replay_mem_size = %d",
                        state.episode_count, episode.score, epsilon, state.current_iteration, mem_size)
            if self.log_path is not None:
                append_record(episode_record(episode, epsilon, state.current_iteration, mem_size), self.log_path)
            state.episode_count += 1
            if self.should_evaluate(episode.score, state.current_iteration):
                self.evaluate_and_checkpoint()
        if state.last_eval_iteration < state.current_iteration:
            self.evaluate_and_checkpoint()
        return state
