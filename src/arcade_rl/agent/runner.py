"""Episode runner: plays one game, shaping rewards and assembling transitions.

Learning and evaluation differ on purpose:
  - learning: the post-action frame is observed once and reused as the next
    step's current frame; transitions are recorded and updates triggered.
  - evaluation: every step re-reads the emulator screen and nothing is stored.
"""
from __future__ import annotations

import logging
from typing import Optional

from arcade_rl.agent.base import LearningAgent
from arcade_rl.env.base import Emulator, NOOP_ACTION
from arcade_rl.env.frames import FramePipeline, FrameWindow, ScreenRecorder
from arcade_rl.env.reward import shape_reward
from arcade_rl.errors import InvariantViolation
from arcade_rl.models.config import TrainingConfig
from arcade_rl.models.episode import Episode, Frame, Transition
from arcade_rl.utils.profiler import Profiler, SectionTimer

logger = logging.getLogger(__name__)


class EpisodeRunner:
    def __init__(
        self,
        emulator: Emulator,
        agent: LearningAgent,
        cfg: TrainingConfig,
        recorder: Optional[ScreenRecorder] = None,
        profiler: Optional[Profiler] = None,
    ):
        self.emulator = emulator
        self.agent = agent
        self.frames_per_timestep = cfg.frames_per_timestep
        self.skip_frame = cfg.skip_frame
        self.memory_threshold = cfg.memory_threshold
        self.update_frequency = cfg.update_frequency
        self.pipeline = FramePipeline(cfg.obscure_size)
        self.recorder = recorder
        self.profiler = profiler

    def _observe(self) -> Frame:
        return self.pipeline.observe(self.emulator.current_screen())

    def run_episode(self, epsilon: float, learning_enabled: bool) -> float:
        """Play one full game and return its raw (unclipped) score."""
        return self.play(epsilon, learning_enabled).score

    def play(self, epsilon: float, learning_enabled: bool, index: int = 0) -> Episode:
        emu = self.emulator
        if emu.is_terminal():
            raise InvariantViolation("episode started on an emulator that is already game over")
        window = FrameWindow(self.frames_per_timestep)
        episode = Episode(index=index)
        current_frame = self._observe()
        first_action = True
        step = 0
        while not emu.is_terminal():
            if not learning_enabled:
                current_frame = self._observe()
            window.push(current_frame)
            if self.recorder is not None and self.recorder.enabled:
                self.recorder.record(step, emu.current_screen(), current_frame)

            action = NOOP_ACTION
            if window.full:
                with SectionTimer(self.profiler, "select_action"):
                    action = self.agent.select_action(window.frames(), epsilon, not first_action)
                first_action = False

            lives_before = emu.lives()
            immediate_score = 0.0
            with SectionTimer(self.profiler, "emulate"):
                for _ in range(self.skip_frame + 1):
                    if emu.is_terminal():
                        break
                    immediate_score += emu.apply_action(action)
            lives_after = emu.lives()
            reward = shape_reward(immediate_score, lives_before, lives_after)
            episode.record_step(immediate_score, reward, lives_after < lives_before)

            if learning_enabled:
                next_frame = self._observe()
                terminal = emu.is_terminal()
                episode.append(Transition(current_frame, action, reward, None if terminal else next_frame))
                if (self.agent.replay_memory_size() > self.memory_threshold
                        and step % self.update_frequency == 0):
                    with SectionTimer(self.profiler, "update"):
                        self.agent.update_step()
                current_frame = next_frame
            step += 1

        if learning_enabled:
            self.agent.remember_episode(episode)
        emu.reset_episode()
        logger.debug("Episode %d finished after %d steps, score %s", index, step, episode.score)
        return episode
