"""Read ``.env`` defaults for the ``SPEC_RENDERER_*`` settings."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

__all__ = ["load_env"]

_loaded = False


def load_env(*, dotenv_path: Optional[str | Path] = None) -> bool:
    """Load ``dotenv_path`` (or the nearest ``.env``) once per process.

    Variables already set in the environment are left alone. Returns whether a
    file was read on this call.
    """

    global _loaded
    if _loaded:
        return False
    _loaded = True
    path = dotenv_path or find_dotenv(usecwd=True)
    return bool(path) and load_dotenv(dotenv_path=path, override=False)
