"""A deterministic scripted emulator for tests and demo runs.

This is NOT a game: each ``apply_action`` call consumes the next entry of a
fixed score script, and the game ends when the script runs out. Screens are
synthetic RGB images whose content depends only on the frame counter, so
repeated episodes are identical.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

SCREEN_SHAPE = (210, 160, 3)


class ScriptedEmulator:
    def __init__(
        self,
        scores: Sequence[float],
        lives: Optional[Sequence[int]] = None,
        start_lives: int = 3,
        num_actions: int = 4,
    ):
        if lives is not None and len(lives) != len(scores):
            raise ValueError("lives script must match the score script length")
        self.scores = list(scores)
        self.lives_script = list(lives) if lives is not None else None
        self.start_lives = start_lives
        self.num_actions = num_actions
        self.actions: List[int] = []
        self.episodes_played = 0
        self._frame = 0
        self._lives = start_lives

    def is_terminal(self) -> bool:
        return self._frame >= len(self.scores)

    def lives(self) -> int:
        return self._lives

    def current_screen(self) -> np.ndarray:
        screen = np.zeros(SCREEN_SHAPE, dtype=np.uint8)
        # Moving horizontal band so consecutive frames differ.
        row = (self._frame * 7) % (SCREEN_SHAPE[0] - 10)
        screen[row:row + 10, :, :] = 255
        screen[:, :, 0] = (self._frame * 13) % 256
        return screen

    def apply_action(self, action: int) -> float:
        if self.is_terminal():
            raise RuntimeError("apply_action called on a finished game")
        if not 0 <= int(action) < self.num_actions:
            raise ValueError(f"illegal action {action}")
        self.actions.append(int(action))
        score = float(self.scores[self._frame])
        if self.lives_script is not None:
            self._lives = int(self.lives_script[self._frame])
        self._frame += 1
        return score

    def legal_actions(self) -> Sequence[int]:
        return list(range(self.num_actions))

    def reset_episode(self) -> None:
        self.episodes_played += 1
        self._frame = 0
        self._lives = self.start_lives

    def close(self) -> None:  # pragma: no cover
        pass
