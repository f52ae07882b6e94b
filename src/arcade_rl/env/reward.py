"""Reward shaping for DQN: clip native score deltas to their sign."""
from __future__ import annotations


def clip_score(immediate_score: float) -> float:
    """1 for any positive score, -1 for any negative score, otherwise 0."""
    if immediate_score > 0:
        return 1.0
    if immediate_score < 0:
        return -1.0
    return 0.0


def shape_reward(immediate_score: float, lives_before: int, lives_after: int) -> float:
    """Clipped score, forced to -1 when a life was lost during the step."""
    reward = clip_score(immediate_score)
    if lives_after < lives_before:
        reward = -1.0
    return reward
