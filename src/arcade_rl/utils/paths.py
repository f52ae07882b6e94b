"""Save-prefix resolution for checkpoints and logs."""
from __future__ import annotations

from pathlib import Path


def game_stem(game: str) -> str:
    return Path(game).stem or game


def resolve_save_prefix(save: str, game: str) -> str:
    """``<save>/<game>`` when ``save`` is a directory, else ``<save>_<game>``.

    The parent directory is created if missing.
    """
    stem = game_stem(game)
    p = Path(save)
    if p.is_dir():
        prefix = p / stem
    else:
        prefix = Path(f"{save}_{stem}")
        prefix.parent.mkdir(parents=True, exist_ok=True)
    return str(prefix)
