"""Arcade Learning Environment emulator backed by gymnasium's ALE registration."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import ale_py
import gymnasium as gym
import numpy as np

from arcade_rl.errors import ConfigurationError

logger = logging.getLogger(__name__)

gym.register_envs(ale_py)


def game_env_id(game: str) -> str:
    """Map a game name, ROM file name or full env id to a gymnasium ALE id.

    ``breakout``, ``breakout.bin`` and ``space_invaders`` become ``ALE/Breakout-v5``
    and ``ALE/SpaceInvaders-v5``; ids containing a ``/`` pass through.
    """
    if "/" in game and not Path(game).suffix:
        return game
    stem = Path(game).stem
    camel = "".join(part[:1].upper() + part[1:] for part in stem.replace("-", "_").split("_") if part)
    return f"ALE/{camel}-v5"


class AleEmulator:
    """Single-frame stepping over an ALE game.

    Frame skipping, sticky actions and life handling are all disabled in the
    environment because the episode runner does them itself.
    """

    def __init__(self, game: str, seed: Optional[int] = 0, display: bool = False):
        self.env_id = game_env_id(game)
        kwargs: Dict[str, Any] = {
            "obs_type": "rgb",
            "frameskip": 1,
            "repeat_action_probability": 0.0,
            "full_action_space": False,
        }
        if display:
            kwargs["render_mode"] = "human"
        try:
            self.env = gym.make(self.env_id, **kwargs)
        except gym.error.Error as e:
            raise ConfigurationError(f"Invalid ROM / game: {game} ({e})") from e
        self.seed = seed
        self._screen: np.ndarray = np.zeros((210, 160, 3), dtype=np.uint8)
        self._lives = 0
        self._terminal = False
        self._reset(seed=seed)
        logger.info("Loaded %s with %d legal actions", self.env_id, len(self.legal_actions()))

    def _reset(self, seed: Optional[int] = None) -> None:
        obs, info = self.env.reset(seed=seed)
        self._screen = obs
        self._lives = int(info.get("lives", 0))
        self._terminal = False

    def is_terminal(self) -> bool:
        return self._terminal

    def lives(self) -> int:
        return self._lives

    def current_screen(self) -> np.ndarray:
        return self._screen

    def apply_action(self, action: int) -> float:
        obs, reward, terminated, truncated, info = self.env.step(int(action))
        self._screen = obs
        self._lives = int(info.get("lives", self._lives))
        self._terminal = bool(terminated or truncated)
        return float(reward)

    def legal_actions(self) -> Sequence[int]:
        return list(range(int(self.env.action_space.n)))

    def reset_episode(self) -> None:
        self._reset()

    def close(self) -> None:
        self.env.close()
