"""``arcade-rl`` entry point: train, evaluate or benchmark a DQN on an ALE game.

Usage (basic):
  arcade-rl --game breakout --save runs/breakout
  arcade-rl --game breakout --evaluate --snapshot runs/breakout_Breakout_iter_50000.solverstate
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import fields
from typing import List, Optional

from arcade_rl.agent.learner import DQNAgent
from arcade_rl.agent.trainer import TrainingSupervisor
from arcade_rl.env.frames import ScreenRecorder
from arcade_rl.errors import ConfigurationError
from arcade_rl.models.config import TrainingConfig
from arcade_rl.utils.paths import resolve_save_prefix
from arcade_rl.utils.profiler import Profiler
from arcade_rl.utils.seeding import seed_everything

logger = logging.getLogger("arcade_rl")

USAGE = "arcade-rl --game GAME [--evaluate | --save PATH] [options]"
_LOG_FORMAT = "%(asctime)s %(levelname).1s %(name)s] %(message)s"

_HELP = {
    "game": "ALE game to play (name, ROM file name or gymnasium id)",
    "save": "Prefix (or directory) for saving snapshots",
    "memory": "Capacity of replay memory",
    "memory_threshold": "Number of transitions to start learning",
    "explore": "Iterations for epsilon to reach given value",
    "epsilon": "Value of epsilon after explore iterations",
    "gamma": "Discount factor of future rewards (0,1]",
    "clone_freq": "Frequency (steps) of cloning the target network",
    "update_frequency": "Number of actions between SGD updates",
    "minibatch": "Minibatch size",
    "lr": "Adam learning rate",
    "grad_clip_norm": "Clip global gradient norm (0 or none disables)",
    "dueling": "Use dueling value/advantage heads",
    "max_iter": "Training iterations (SGD updates) to run",
    "skip_frame": "Number of frames skipped",
    "frames_per_timestep": "Frames given to agent at each timestep",
    "obscure_size": "Size of obscured game screen",
    "weights": "Pretrained weights to load (*.weights)",
    "snapshot": "Solver state to load (*.solverstate)",
    "resume": "Automatically resume training from latest snapshot",
    "evaluate": "Evaluation mode: only playing a game, no updates",
    "evaluate_with_epsilon": "Epsilon value to be used in evaluation mode",
    "evaluate_freq": "Frequency (steps) between evaluations",
    "repeat_games": "Number of games played in evaluation mode",
    "save_screen": "File prefix in which to save screens (PNG)",
    "save_binary_screen": "File prefix in which to save binary frames",
    "gui": "Open a GUI window",
    "time": "Time one learning episode and exit",
    "seed": "Random seed",
    "device": "auto | cpu | cuda",
}


def _clip_norm(value: str) -> Optional[float]:
    """Gradient norm bound; `0` or `none` disables clipping."""
    if value.strip().lower() in ("none", "off"):
        return None
    try:
        norm = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number or 'none', got {value!r}") from None
    if norm < 0:
        raise argparse.ArgumentTypeError(f"gradient norm must be >= 0, got {value}")
    return norm or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arcade-rl", usage=USAGE, description=__doc__.splitlines()[0])
    defaults = TrainingConfig()
    for f in fields(TrainingConfig):
        flag = "--" + f.name.replace("_", "-")
        default = getattr(defaults, f.name)
        if isinstance(default, bool):
            parser.add_argument(flag, dest=f.name, action=argparse.BooleanOptionalAction,
                                default=default, help=_HELP.get(f.name))
        elif f.name == "grad_clip_norm":
            parser.add_argument(flag, dest=f.name, type=_clip_norm, default=default, help=_HELP.get(f.name))
        else:
            parser.add_argument(flag, dest=f.name, type=type(default), default=default, help=_HELP.get(f.name))
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG-level logging")
    return parser


def configure_logging(log_prefix: str = "", verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_prefix:
        handlers.append(logging.FileHandler(log_prefix + "_INFO.log"))
    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers, force=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = vars(build_parser().parse_args(argv))
    verbose = args.pop("verbose")
    cfg = TrainingConfig(**args)
    configure_logging(verbose=verbose)
    try:
        cfg.validate()
        save_prefix = resolve_save_prefix(cfg.save, cfg.game) if cfg.save else ""
        if save_prefix and not cfg.evaluate:
            configure_logging(save_prefix, verbose)
        cfg.seed = seed_everything(cfg.seed)

        from arcade_rl.env.ale_env import AleEmulator
        emulator = AleEmulator(cfg.game, seed=cfg.seed, display=cfg.gui)
        agent = DQNAgent(emulator.legal_actions(), cfg)
        recorder = ScreenRecorder(cfg.save_screen, cfg.save_binary_screen)
        profiler = Profiler() if cfg.time else None
        supervisor = TrainingSupervisor(cfg, emulator, agent, save_prefix, recorder=recorder, profiler=profiler)
        supervisor.restore()
    except ConfigurationError as e:
        logger.error("%s", e)
        logger.error("Usage: %s", USAGE)
        return 1

    if cfg.evaluate:
        if cfg.gui:
            score = supervisor.runner.run_episode(cfg.evaluate_with_epsilon, learning_enabled=False)
            logger.info("Score %s", score)
        else:
            supervisor.evaluator.run(cfg.repeat_games, iteration=agent.current_training_iteration())
        return 0

    if profiler is not None:
        supervisor.runner.play(cfg.evaluate_with_epsilon, learning_enabled=True)
        profiler.log_report()
        return 0

    state = supervisor.run()
    logger.info("Training finished at iter %d after %d episodes, best score %s",
                state.current_iteration, state.episode_count, state.best_score)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
