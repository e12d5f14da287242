"""Find a resource directory in common locations and make it the working directory."""

from __future__ import annotations

import os
import sys
from os import PathLike
from pathlib import Path

_LEVELS_ABOVE_APP_DIR = 3


def _application_dir() -> Path:
    """Return the directory that holds the running program."""
    entry = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(entry).resolve().parent


def search_and_set_resource_dir(
    folder_name: str | PathLike[str],
    app_dir: str | PathLike[str] | None = None,
) -> bool:
    """Look for folder_name and, when found, change the working directory to it.

    The working directory is searched first, then the application directory
    and up to three levels above it. Returns False, leaving the working
    directory unchanged, when no such directory exists.
    """
    base = Path(app_dir) if app_dir is not None else _application_dir()

    working = Path.cwd() / folder_name
    candidates = [working] + [
        base.joinpath(*([".."] * level), folder_name)
        for level in range(_LEVELS_ABOVE_APP_DIR + 1)
    ]
    for candidate in candidates:
        if candidate.is_dir():
            os.chdir(candidate)
            return True
    return False