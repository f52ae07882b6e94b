"""Exception types raised by arcade_rl."""
from __future__ import annotations


class ArcadeRLError(Exception):
    """Base class for all arcade_rl errors."""


class ConfigurationError(ArcadeRLError, ValueError):
    """Invalid or conflicting startup configuration. Fatal before training starts."""


class ResumeError(ConfigurationError):
    """A checkpoint set is incomplete (e.g. solver state without its replay memory)."""


class InvariantViolation(ArcadeRLError, AssertionError):
    """A runtime invariant of the training loop was broken upstream.

    Never caught inside the library: a transition reward outside {-1, 0, 1}
    means the loop is producing corrupt experience.
    """


__all__ = ["ArcadeRLError", "ConfigurationError", "ResumeError", "InvariantViolation"]
