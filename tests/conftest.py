import json
import os
import tempfile
from pathlib import Path

import pytest

from arcade_rl.models.config import TrainingConfig


class RecordingAgent:
    """Learning-agent double: fixed action, counted updates, JSON snapshot files."""

    def __init__(self, action=1, iters_per_update=1, memory_size=0):
        self.action = action
        self.iters_per_update = iters_per_update
        self.memory_size = memory_size
        self.iteration = 0
        self.select_calls = []
        self.episodes = []
        self.updates = 0
        self.snapshots = []
        self.loaded_weights = None

    def select_action(self, frames, epsilon, has_prior_action):
        self.select_calls.append((len(frames), epsilon, has_prior_action))
        return self.action

    def remember_episode(self, episode):
        self.episodes.append(episode)
        self.memory_size += len(episode)

    def replay_memory_size(self):
        return self.memory_size

    def update_step(self):
        self.updates += 1
        self.iteration += self.iters_per_update

    def current_training_iteration(self):
        return self.iteration

    def write_net_definition(self, path):
        Path(path).write_text(json.dumps({"fake": True}))

    def snapshot(self, prefix, include_solver_state, include_replay_memory):
        base = f"{prefix}_iter_{self.iteration}"
        self.snapshots.append((prefix, include_solver_state, include_replay_memory))
        Path(base + ".weights").write_text(json.dumps({"iteration": self.iteration}))
        if include_replay_memory:
            Path(base + ".replaymemory").write_text(json.dumps({"size": self.memory_size}))
        if include_solver_state:
            Path(base + ".solverstate").write_text(json.dumps({"iteration": self.iteration}))
        return base

    def restore_solver(self, path):
        self.iteration = json.loads(Path(path).read_text())["iteration"]

    def load_replay_memory(self, path):
        self.memory_size = json.loads(Path(path).read_text())["size"]

    def load_pretrained_weights(self, path):
        self.loaded_weights = path


@pytest.fixture()
def temp_runs_dir(monkeypatch):
    d = tempfile.mkdtemp(prefix="arcade_rl_runs_")
    monkeypatch.setenv("ARCADE_RL_GLOBAL_SEED", "7")
    return d


@pytest.fixture()
def save_prefix(temp_runs_dir):
    return os.path.join(temp_runs_dir, "game")


@pytest.fixture()
def make_agent():
    return RecordingAgent


@pytest.fixture()
def small_cfg():
    def _make(**overrides):
        base = dict(
            game="scripted",
            save="unused",
            memory=1000,
            memory_threshold=0,
            frames_per_timestep=2,
            skip_frame=0,
            explore=10,
            epsilon=0.1,
            evaluate_freq=5,
            repeat_games=2,
            max_iter=10,
            minibatch=4,
            device="cpu",
        )
        base.update(overrides)
        return TrainingConfig(**base)
    return _make
