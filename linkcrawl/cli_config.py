"""Locating and loading ``.env`` files for the command-line tools."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

CONFIG_DIR = Path.home() / ".config" / "linkcrawl"
CONFIG_ENV_FILE = CONFIG_DIR / ".env"
# Explicit .env file, bypassing the search below
ENV_FILE_VARIABLE = "LINKCRAWL_ENV_FILE"
EXAMPLE_FILE = Path(__file__).parent / ".env.example"

EnvLoader = Callable[[Path], bool]
FileCopier = Callable[[Path, Path], object]


def config_candidates(cwd: Path, config_env_file: Path) -> List[Path]:
    """Return the ``.env`` files to try, most specific first."""
    candidates = []
    explicit = os.getenv(ENV_FILE_VARIABLE)
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(cwd / ".env")
    candidates.append(config_env_file)
    return candidates


def seed_user_config(
    config_env_file: Path, copy_file: FileCopier, example_file: Path = EXAMPLE_FILE
) -> bool:
    """Copy ``.env.example`` to the user config location; True on success."""
    if not example_file.is_file():
        return False
    try:
        config_env_file.parent.mkdir(parents=True, exist_ok=True)
        copy_file(example_file, config_env_file)
    except OSError as exc:
        logging.debug("Could not create %s: %s", config_env_file, exc)
        return False

    logging.info(
        "Created config file at %s from .env.example. "
        "Edit it to change the LINKCRAWL_* defaults.",
        config_env_file,
    )
    return True


def load_config(
    *,
    config_env_file: Path,
    cwd: Path,
    load_env: EnvLoader,
    copy_file: FileCopier,
    example_file: Path = EXAMPLE_FILE,
) -> Optional[Path]:
    """Load the first ``.env`` file found and return its path.

    Search order:
    1. $LINKCRAWL_ENV_FILE
    2. .env in the current working directory
    3. ~/.config/linkcrawl/.env

    When none exists, ``.env.example`` is copied to the user config location
    as a starting point and loaded from there.
    """
    for candidate in config_candidates(cwd, config_env_file):
        if candidate.is_file():
            load_env(candidate)
            return candidate

    if seed_user_config(config_env_file, copy_file, example_file):
        load_env(config_env_file)
        return config_env_file
    return None
