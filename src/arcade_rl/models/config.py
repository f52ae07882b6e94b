from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from arcade_rl.errors import ConfigurationError

DEVICES = ("auto", "cpu", "cuda")


@dataclass
class TrainingConfig:
    """Every knob of a training / evaluation run.

    Defaults reproduce the classic Atari DQN setup: 4 stacked frames, frame
    skip of 4, 1M iterations of linear epsilon decay down to 0.1.
    """

    # Game / run layout
    game: str = ""
    save: str = ""
    # Replay memory
    memory: int = 400_000
    memory_threshold: int = 50_000
    # Exploration
    explore: int = 1_000_000
    epsilon: float = 0.1
    # Learning
    gamma: float = 0.99
    clone_freq: int = 10_000
    update_frequency: int = 1
    minibatch: int = 32
    lr: float = 2.5e-4
    grad_clip_norm: Optional[float] = 10.0
    dueling: bool = False
    max_iter: int = 10_000_000
    # Frames
    skip_frame: int = 4
    frames_per_timestep: int = 4
    obscure_size: int = 0
    # Warm start
    weights: str = ""
    snapshot: str = ""
    resume: bool = True
    # Evaluation
    evaluate: bool = False
    evaluate_with_epsilon: float = 0.05
    evaluate_freq: int = 50_000
    repeat_games: int = 10
    # Diagnostics
    save_screen: str = ""
    save_binary_screen: str = ""
    gui: bool = False
    time: bool = False
    # Infrastructure
    seed: Optional[int] = 0
    device: str = "auto"  # 'auto' | 'cpu' | 'cuda'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> "TrainingConfig":
        """Raise ConfigurationError on the first invalid or conflicting option."""
        if not self.game:
            raise ConfigurationError("Game (ROM) required but not set.")
        if not self.save and not self.evaluate:
            raise ConfigurationError("Save path (or evaluate) required but not set.")
        if self.snapshot and self.weights:
            raise ConfigurationError(
                "Give a snapshot to resume training or weights to finetune but not both.")
        for name in ("frames_per_timestep", "repeat_games", "update_frequency", "minibatch", "memory", "clone_freq"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {getattr(self, name)}")
        for name in ("skip_frame", "obscure_size", "explore", "memory_threshold", "max_iter"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("epsilon", "evaluate_with_epsilon"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1], got {value}")
        if self.grad_clip_norm is not None and self.grad_clip_norm <= 0:
            raise ConfigurationError(f"grad_clip_norm must be > 0 or None, got {self.grad_clip_norm}")
        if not 0.0 < self.gamma <= 1.0:
            raise ConfigurationError(f"gamma must lie in (0, 1], got {self.gamma}")
        if self.memory_threshold >= self.memory:
            raise ConfigurationError(
                f"memory_threshold ({self.memory_threshold}) must be below the replay capacity ({self.memory})")
        if self.minibatch > self.memory:
            raise ConfigurationError(f"minibatch ({self.minibatch}) exceeds the replay capacity ({self.memory})")
        if self.device not in DEVICES:
            raise ConfigurationError(f"device must be one of {DEVICES}, got {self.device!r}")
        return self
