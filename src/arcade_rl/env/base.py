"""Emulator capability protocol consumed by the training loop."""
from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

# ALE minimal action sets always start with PLAYER_A_NOOP.
NOOP_ACTION = 0


class Emulator(Protocol):
    """What the episode runner needs from a game emulator."""

    def is_terminal(self) -> bool:
        """True once the current game is over."""

    def lives(self) -> int:
        """Remaining lives in the current game."""

    def current_screen(self) -> np.ndarray:
        """Latest raw screen, ``uint8`` HxWx3 (RGB) or HxW (grayscale)."""

    def apply_action(self, action: int) -> float:
        """Advance one emulator frame and return the native score delta."""

    def legal_actions(self) -> Sequence[int]:
        """Actions the agent may choose from."""

    def reset_episode(self) -> None:
        """Start a fresh game."""


__all__ = ["Emulator", "NOOP_ACTION"]
