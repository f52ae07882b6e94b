"""Frame pipeline: raw screen -> fixed-size grayscale frame -> stacked window.

Frames are ``uint8`` 84x84 arrays marked read-only once produced, so the same
object can sit in the window and in one or two transitions at once.
"""
from __future__ import annotations

import itertools
import logging
from collections import deque
from pathlib import Path
from typing import Deque, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

FRAME_HEIGHT = 84
FRAME_WIDTH = 84
# Resize target before cropping the score area and the bottom border.
_RESIZED_HW = (110, 84)
_CROP_TOP = 18

Frame = np.ndarray


def preprocess(raw_screen: np.ndarray) -> Frame:
    """Grayscale, resize to 110x84 and crop the playing field to 84x84."""
    screen = np.asarray(raw_screen)
    if screen.ndim == 3:
        screen = cv2.cvtColor(screen, cv2.COLOR_RGB2GRAY)
    elif screen.ndim != 2:
        raise ValueError(f"Unsupported screen shape {screen.shape}")
    resized = cv2.resize(screen, (_RESIZED_HW[1], _RESIZED_HW[0]), interpolation=cv2.INTER_AREA)
    cropped = resized[_CROP_TOP:_CROP_TOP + FRAME_HEIGHT, :]
    return np.ascontiguousarray(cropped, dtype=np.uint8)


def obscure(frame: Frame, size: int) -> Frame:
    """Return a copy of ``frame`` with a centred ``size`` x ``size`` square blanked."""
    if size <= 0:
        return frame
    out = np.array(frame, copy=True)
    h, w = out.shape
    size = min(size, h, w)
    top = (h - size) // 2
    left = (w - size) // 2
    out[top:top + size, left:left + size] = 0
    return out


class FramePipeline:
    """Turns emulator screens into frozen frames, applying obscuration uniformly."""

    def __init__(self, obscure_size: int = 0):
        self.obscure_size = int(obscure_size)

    def observe(self, raw_screen: np.ndarray) -> Frame:
        frame = preprocess(raw_screen)
        if self.obscure_size > 0:
            frame = obscure(frame, self.obscure_size)
        frame.flags.writeable = False
        return frame


class FrameWindow:
    """Bounded queue of the most recent ``capacity`` frames (oldest first)."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._frames: Deque[Frame] = deque()

    def push(self, frame: Frame) -> None:
        self._frames.append(frame)
        while len(self._frames) > self.capacity:
            self._frames.popleft()

    @property
    def full(self) -> bool:
        return len(self._frames) == self.capacity

    def frames(self) -> Tuple[Frame, ...]:
        return tuple(self._frames)

    def __len__(self) -> int:
        return len(self._frames)


# Binary dumps are numbered across episodes for the lifetime of the process.
_binary_dump_counter = itertools.count()


class ScreenRecorder:
    """Optional dumps of raw screens (PNG) and preprocessed frames (raw bytes)."""

    def __init__(self, screen_prefix: str = "", binary_prefix: str = ""):
        self.screen_prefix = screen_prefix
        self.binary_prefix = binary_prefix
        if screen_prefix:
            logger.info("Saving screens to: %s", screen_prefix)

    @property
    def enabled(self) -> bool:
        return bool(self.screen_prefix or self.binary_prefix)

    def record(self, frame_index: int, raw_screen: Optional[np.ndarray], frame: Frame) -> None:
        if self.screen_prefix and raw_screen is not None:
            path = f"{self.screen_prefix}{frame_index:05d}.png"
            image = raw_screen
            if raw_screen.ndim == 3:
                image = cv2.cvtColor(raw_screen, cv2.COLOR_RGB2BGR)
            cv2.imwrite(path, image)
        if self.binary_prefix:
            path = f"{self.binary_prefix}{next(_binary_dump_counter)}.bin"
            Path(path).write_bytes(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
