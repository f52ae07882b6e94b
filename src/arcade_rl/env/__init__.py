"""Emulator side of the training loop.

``ScriptedEmulator`` is importable without the ALE; ``AleEmulator`` lives in
``arcade_rl.env.ale_env`` and pulls in gymnasium and ale_py on import.
"""

from .base import Emulator, NOOP_ACTION  # noqa: F401
from .dummy_env import ScriptedEmulator  # noqa: F401
from .frames import FramePipeline, FrameWindow, preprocess  # noqa: F401
from .reward import shape_reward  # noqa: F401
