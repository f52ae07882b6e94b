#!/usr/bin/env python3
"""Tiny end-to-end training run on the scripted emulator (no ALE needed)."""

import logging
import sys
import tempfile
from pathlib import Path

# Add the src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from arcade_rl.agent.learner import DQNAgent
from arcade_rl.agent.trainer import TrainingSupervisor
from arcade_rl.env.dummy_env import ScriptedEmulator
from arcade_rl.models.config import TrainingConfig


def main():
    """Run a short training session and print where the checkpoints went."""
    logging.basicConfig(level=logging.INFO, format="%(levelname).1s %(name)s] %(message)s")
    output_dir = Path(tempfile.mkdtemp(prefix="arcade_rl_demo_"))
    config = TrainingConfig(
        game="scripted",
        save=str(output_dir),
        memory=2_000,
        memory_threshold=64,
        minibatch=16,
        explore=200,
        max_iter=300,
        evaluate_freq=100,
        repeat_games=3,
        skip_frame=1,
        device="cpu",
    ).validate()
    emulator = ScriptedEmulator(scores=[0, 1, 0, 0, 2, 0, -1, 0] * 10, num_actions=4)
    agent = DQNAgent(emulator.legal_actions(), config)
    supervisor = TrainingSupervisor(config, emulator, agent, save_prefix=str(output_dir / "scripted"))
    supervisor.restore()
    state = supervisor.run()

    print(f"Training completed at iteration {state.current_iteration}")
    print(f"Episodes played: {state.episode_count}")
    print(f"Best evaluation score: {state.best_score}")
    print(f"Checkpoints written to: {output_dir}")


if __name__ == "__main__":
    main()
