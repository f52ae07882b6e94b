"""DQN learning agent: action selection, replay storage, updates and snapshots."""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim

from arcade_rl.agent.dqn import DQN
from arcade_rl.agent.replay_buffer import EpisodicReplayMemory
from arcade_rl.env.frames import FRAME_HEIGHT, FRAME_WIDTH
from arcade_rl.models.config import TrainingConfig
from arcade_rl.models.episode import Episode, Frame
from arcade_rl.utils import checkpoint_io as ckpt

logger = logging.getLogger(__name__)


def resolve_device(device_cfg: str) -> torch.device:
    if device_cfg == "auto":
        return torch.device("cuda" if torch.cuda.is_available() else "cpu")
    if device_cfg == "cuda":
        if not torch.cuda.is_available():
            logger.warning("Requested cuda but not available; falling back to cpu")
            return torch.device("cpu")
        return torch.device("cuda")
    return torch.device("cpu")


class DQNAgent:
    """Epsilon-greedy DQN with a periodically cloned target network."""

    def __init__(self, legal_actions: Sequence[int], cfg: TrainingConfig, device: Optional[torch.device] = None):
        if not legal_actions:
            raise ValueError("legal_actions must not be empty")
        self.cfg = cfg
        self.legal_actions = [int(a) for a in legal_actions]
        self._action_index = {a: i for i, a in enumerate(self.legal_actions)}
        self.device = device or resolve_device(cfg.device)
        seed = cfg.seed or 0
        self.rng = random.Random(seed)
        input_shape = (cfg.frames_per_timestep, FRAME_HEIGHT, FRAME_WIDTH)
        self.net = DQN(input_shape, len(self.legal_actions), dueling=cfg.dueling).to(self.device)
        self.target_net = DQN(input_shape, len(self.legal_actions), dueling=cfg.dueling).to(self.device)
        self.target_net.load_state_dict(self.net.state_dict())
        self.target_net.eval()
        self.optimizer = optim.Adam(self.net.parameters(), lr=cfg.lr)
        self.memory = EpisodicReplayMemory(cfg.memory, cfg.frames_per_timestep, seed=seed)
        self.iteration = 0
        self.last_loss: Optional[float] = None

    # --- acting ---
    def select_action(self, frames: Sequence[Frame], epsilon: float, has_prior_action: bool) -> int:
        # The network is feed-forward, so nothing carries over between decisions.
        if not has_prior_action:
            logger.debug("First decision of the episode (epsilon=%.3f)", epsilon)
        if self.rng.random() < epsilon:
            return self.rng.choice(self.legal_actions)
        state = torch.from_numpy(np.stack(frames)).unsqueeze(0).to(self.device)
        with torch.no_grad():
            q = self.net(state)
        return self.legal_actions[int(q.argmax(dim=1).item())]

    # --- memory ---
    def remember_episode(self, episode: Episode) -> None:
        self.memory.add_episode(episode)

    def replay_memory_size(self) -> int:
        return len(self.memory)

    # --- learning ---
    def current_training_iteration(self) -> int:
        return self.iteration

    def update_step(self) -> Optional[float]:
        cfg = self.cfg
        if len(self.memory) < cfg.minibatch:
            return None
        states, actions, rewards, next_states, terminals = self.memory.sample(cfg.minibatch)
        action_idx = torch.as_tensor([self._action_index[int(a)] for a in actions], dtype=torch.long)
        states = states.to(self.device)
        next_states = next_states.to(self.device)
        action_idx = action_idx.to(self.device)
        rewards = rewards.to(self.device)
        terminals = terminals.to(self.device)

        q_values = self.net(states).gather(1, action_idx.unsqueeze(1)).squeeze(1)
        with torch.no_grad():
            next_q = self.target_net(next_states).max(1)[0]
            target = rewards + cfg.gamma * next_q * (1 - terminals)
        loss = nn.functional.smooth_l1_loss(q_values, target)
        self.optimizer.zero_grad(set_to_none=True)
        loss.backward()
        if cfg.grad_clip_norm is not None:
            nn.utils.clip_grad_norm_(self.net.parameters(), cfg.grad_clip_norm)
        self.optimizer.step()
        self.iteration += 1
        if self.iteration % cfg.clone_freq == 0:
            self.target_net.load_state_dict(self.net.state_dict())
        self.last_loss = float(loss.detach().item())
        return self.last_loss

    # --- persistence ---
    def net_definition(self) -> Dict[str, Any]:
        cfg = self.cfg
        return {
            "architecture": "dqn-nature",
            "input_shape": [cfg.frames_per_timestep, FRAME_HEIGHT, FRAME_WIDTH],
            "legal_actions": self.legal_actions,
            "dueling": cfg.dueling,
            "solver": {
                "type": "Adam",
                "lr": cfg.lr,
                "gamma": cfg.gamma,
                "minibatch": cfg.minibatch,
                "clone_freq": cfg.clone_freq,
                "grad_clip_norm": cfg.grad_clip_norm,
                "max_iter": cfg.max_iter,
            },
        }

    def write_net_definition(self, path: str) -> None:
        ckpt.write_json(self.net_definition(), Path(path))

    def snapshot(self, prefix: str, include_solver_state: bool, include_replay_memory: bool) -> str:
        base = ckpt.snapshot_base(prefix, self.iteration)
        ckpt.save_payload({
            "model": self.net.state_dict(),
            "iteration": self.iteration,
            "legal_actions": self.legal_actions,
        }, Path(base + ckpt.WEIGHTS_SUFFIX))
        if include_replay_memory:
            self.memory.save(Path(base + ckpt.REPLAY_SUFFIX))
        if include_solver_state:
            ckpt.save_payload({
                "optimizer": self.optimizer.state_dict(),
                "target_model": self.target_net.state_dict(),
                "iteration": self.iteration,
            }, Path(base + ckpt.SOLVER_SUFFIX))
        logger.info("Snapshotting to %s", base)
        return base

    def restore_solver(self, path: str) -> None:
        solver = ckpt.load_payload(Path(path))
        weights_path = ckpt.strip_suffix(path, ckpt.SOLVER_SUFFIX) + ckpt.WEIGHTS_SUFFIX
        self.load_pretrained_weights(weights_path)
        self.target_net.load_state_dict(solver["target_model"])
        self.optimizer.load_state_dict(solver["optimizer"])
        self.iteration = int(solver["iteration"])

    def load_replay_memory(self, path: str) -> None:
        self.memory.load(Path(path))

    def load_pretrained_weights(self, path: str) -> None:
        weights = ckpt.load_payload(Path(path))
        self.net.load_state_dict(weights["model"])
        self.target_net.load_state_dict(weights["model"])
