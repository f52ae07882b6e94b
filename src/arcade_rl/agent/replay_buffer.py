"""Episodic FIFO replay memory.

Episodes arrive whole; each transition is expanded into a stacked state made
of references to the frames of the preceding transitions, so a frame is
stored once no matter how many stacks it belongs to.
"""
from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Deque, Optional, Tuple
import random

import numpy as np
import torch

from arcade_rl.models.episode import Episode, Frame
from arcade_rl.utils.checkpoint_io import load_payload, save_payload

# (state frames, action, reward, next state frames or None)
StackedTransition = Tuple[Tuple[Frame, ...], int, float, Optional[Tuple[Frame, ...]]]


class EpisodicReplayMemory:
    def __init__(self, capacity: int = 400_000, frames_per_timestep: int = 4, seed: int = 0):
        self.capacity = capacity
        self.frames_per_timestep = frames_per_timestep
        self.memory: Deque[StackedTransition] = deque(maxlen=capacity)
        self.rng = random.Random(seed)

    def add_episode(self, episode: Episode) -> int:
        """Store every transition of ``episode``; return how many were added."""
        k = self.frames_per_timestep
        frames = [t.frame for t in episode.transitions]
        if not frames:
            return 0
        for i, t in enumerate(episode.transitions):
            # Pad the start of the episode by repeating its first frame.
            state = tuple(frames[max(j, 0)] for j in range(i - k + 1, i + 1))
            next_state = None
            if t.next_frame is not None:
                next_state = state[1:] + (t.next_frame,)
            self.memory.append((state, int(t.action), float(t.reward), next_state))
        return len(episode.transitions)

    def sample(self, batch_size: int):
        batch = self.rng.sample(self.memory, batch_size)
        states, actions, rewards, next_states = zip(*batch)
        states_np = np.stack([np.stack(s) for s in states])
        # Terminal transitions have no next state; zeros keep the batch rectangular.
        blank = np.zeros_like(states_np[0])
        next_np = np.stack([np.stack(s) if s is not None else blank for s in next_states])
        terminals = [1.0 if s is None else 0.0 for s in next_states]
        return (
            torch.from_numpy(states_np),
            torch.as_tensor(actions, dtype=torch.long),
            torch.as_tensor(rewards, dtype=torch.float32),
            torch.from_numpy(next_np),
            torch.as_tensor(terminals, dtype=torch.float32),
        )

    def save(self, path: Path) -> None:
        save_payload({
            "capacity": self.capacity,
            "frames_per_timestep": self.frames_per_timestep,
            "memory": list(self.memory),
        }, Path(path))

    def load(self, path: Path) -> None:
        data = load_payload(Path(path))
        if int(data["frames_per_timestep"]) != self.frames_per_timestep:
            raise ValueError(
                f"replay memory {path} stacks {data['frames_per_timestep']} frames, "
                f"expected {self.frames_per_timestep}")
        # Keep this memory's capacity; the newest transitions win if it shrank.
        self.memory = deque(data["memory"], maxlen=self.capacity)

    def __len__(self):
        return len(self.memory)
