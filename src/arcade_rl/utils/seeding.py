"""Seeding utility to make training runs reproducible (best-effort on GPU)."""
from __future__ import annotations

import logging
import os
import random
from typing import Optional

import numpy as np
import torch

logger = logging.getLogger(__name__)

_DEF_ENVAR = "ARCADE_RL_GLOBAL_SEED"
_DEFAULT_SEED = 42


def resolve_seed(seed: Optional[int] = None) -> int:
    """Explicit seed, else $ARCADE_RL_GLOBAL_SEED, else 42."""
    if seed is not None:
        return int(seed)
    env_seed = os.getenv(_DEF_ENVAR)
    if env_seed is not None:
        return int(env_seed)
    return _DEFAULT_SEED


def seed_everything(seed: Optional[int] = None) -> int:
    """Seed python, numpy and torch and export the seed for child processes.

    Returns the resolved integer seed.
    """
    seed = resolve_seed(seed)
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():  # pragma: no cover - may not run in CI
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.benchmark = False
    os.environ[_DEF_ENVAR] = str(seed)
    logger.debug("Seeded python/numpy/torch with %d", seed)
    return seed
