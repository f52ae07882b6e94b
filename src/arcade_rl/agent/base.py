"""Learning agent capability protocol consumed by the training loop."""
from __future__ import annotations

from typing import Protocol, Sequence

from arcade_rl.models.episode import Episode, Frame


class LearningAgent(Protocol):
    def select_action(self, frames: Sequence[Frame], epsilon: float, has_prior_action: bool) -> int:
        """Pick an action for the stacked ``frames`` (oldest first)."""

    def remember_episode(self, episode: Episode) -> None:
        """Store a complete episode in replay memory."""

    def replay_memory_size(self) -> int:
        """Number of transitions currently in replay memory."""

    def update_step(self) -> None:
        """Run one learning update (one solver iteration)."""

    def current_training_iteration(self) -> int:
        """Number of learning updates performed so far."""

    def snapshot(self, prefix: str, include_solver_state: bool, include_replay_memory: bool) -> str:
        """Persist state under ``prefix``; return the base path written."""

    def restore_solver(self, path: str) -> None:
        """Restore weights, solver state and iteration from a solver-state file."""

    def load_replay_memory(self, path: str) -> None:
        """Replace replay memory with the contents of ``path``."""

    def load_pretrained_weights(self, path: str) -> None:
        """Load network weights only (fine-tuning / evaluation)."""

    def write_net_definition(self, path: str) -> None:
        """Write the network / solver definition file of the checkpoint set."""
