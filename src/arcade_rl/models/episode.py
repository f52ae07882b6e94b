from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

import numpy as np

from arcade_rl.errors import InvariantViolation

# Preprocessed screen: read-only 2-D uint8 array, shared by reference.
Frame = np.ndarray

VALID_REWARDS = (-1.0, 0.0, 1.0)


@dataclass(frozen=True)
class Transition:
    """One learning sample. ``next_frame`` is None exactly on the terminal step."""
    frame: Frame
    action: int
    reward: float
    next_frame: Optional[Frame] = None

    def __post_init__(self):
        if self.reward not in VALID_REWARDS:
            raise InvariantViolation(f"reward {self.reward!r} outside {{-1, 0, 1}}")

    @property
    def terminal(self) -> bool:
        return self.next_frame is None


@dataclass
class Episode:
    index: int
    transitions: List[Transition] = field(default_factory=list)
    score: float = 0.0
    steps: int = 0
    life_losses: int = 0
    reward_traj: List[float] = field(default_factory=list)

    def record_step(self, immediate_score: float, reward: float, life_lost: bool) -> None:
        self.steps += 1
        self.score += immediate_score
        if life_lost:
            self.life_losses += 1
        self.reward_traj.append(reward)

    def append(self, transition: Transition) -> None:
        if self.transitions and self.transitions[-1].terminal:
            raise InvariantViolation("cannot append a transition after the terminal one")
        self.transitions.append(transition)

    def __len__(self) -> int:
        return len(self.transitions)

    def __iter__(self):
        return iter(self.transitions)

    @property
    def complete(self) -> bool:
        return bool(self.transitions) and self.transitions[-1].terminal

    def summary_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "score": self.score,
            "steps": self.steps,
            "transitions": len(self.transitions),
            "life_losses": self.life_losses,
            "positive_rewards": sum(1 for r in self.reward_traj if r > 0),
            "negative_rewards": sum(1 for r in self.reward_traj if r < 0),
        }
