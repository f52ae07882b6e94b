import numpy as np
import pytest

from arcade_rl.env.dummy_env import ScriptedEmulator
from arcade_rl.env.frames import FRAME_HEIGHT, FRAME_WIDTH, FramePipeline, FrameWindow, obscure, preprocess


def _screen(value=128):
    return np.full((210, 160, 3), value, dtype=np.uint8)


def test_preprocess_shape_and_dtype():
    frame = preprocess(_screen())
    assert frame.shape == (FRAME_HEIGHT, FRAME_WIDTH)
    assert frame.dtype == np.uint8


def test_preprocess_accepts_grayscale():
    frame = preprocess(np.zeros((210, 160), dtype=np.uint8))
    assert frame.shape == (FRAME_HEIGHT, FRAME_WIDTH)


def test_preprocess_is_deterministic():
    emu = ScriptedEmulator(scores=[0, 0, 0])
    emu.apply_action(0)
    screen = emu.current_screen()
    assert np.array_equal(preprocess(screen), preprocess(screen.copy()))


def test_pipeline_frames_are_read_only():
    frame = FramePipeline().observe(_screen())
    with pytest.raises(ValueError):
        frame[0, 0] = 1


def test_obscure_blanks_centre_only():
    frame = np.full((84, 84), 200, dtype=np.uint8)
    out = obscure(frame, 10)
    assert out[42, 42] == 0
    assert out[0, 0] == 200
    assert int((out == 0).sum()) == 100
    # input untouched
    assert frame[42, 42] == 200


def test_obscure_zero_size_is_identity():
    frame = np.ones((84, 84), dtype=np.uint8)
    assert obscure(frame, 0) is frame


def test_pipeline_applies_obscure():
    frame = FramePipeline(obscure_size=20).observe(_screen(255))
    assert frame[42, 42] == 0


def test_window_never_exceeds_capacity():
    window = FrameWindow(3)
    frames = [np.full((2, 2), i, dtype=np.uint8) for i in range(6)]
    for i, f in enumerate(frames):
        window.push(f)
        assert len(window) == min(i + 1, 3)
    assert window.full
    assert [int(f[0, 0]) for f in window.frames()] == [3, 4, 5]


def test_window_rejects_zero_capacity():
    with pytest.raises(ValueError):
        FrameWindow(0)
