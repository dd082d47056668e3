"""
Process-environment helpers for envboot.

DOTENV LOOKUP:
    <cwd>/.env.local, <cwd>/.env
    <cwd>/config/.env.local, <cwd>/config/.env
    <settings dir>/.env.local, <settings dir>/.env   (when a settings file is named)

Values already in os.environ win unless override=True, so NODE_ENV / ENV
and the ENVBOOT_* overrides set by the host always take precedence.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv


ENV_FILES = (".env.local", ".env")

# Set by a host that re-executes itself as a worker process.
FORKED_WORKER_ENV = "ENVBOOT_FORKED_WORKER"

TRUTHY_VALUES = frozenset({"1", "true", "yes", "y", "on"})


def dotenv_search_dirs(config_file: Optional[Path] = None) -> list[Path]:
    """Directories searched for env files, without duplicates."""
    cwd = Path.cwd()
    dirs = [cwd, cwd / "config"]
    if config_file is not None:
        settings_dir = Path(config_file).parent.resolve()
        if settings_dir not in {d.resolve() for d in dirs}:
            dirs.append(settings_dir)
    return dirs


def load_env(
    filenames: Iterable[str] = ENV_FILES,
    search_dirs: Optional[list[Path]] = None,
    override: bool = False,
    config_file: Optional[Path] = None,
) -> list[Path]:
    """
    Load envboot's dotenv files into the process environment.

    Args:
        filenames: File names tried in each directory, in order
        search_dirs: Directories to search (default: dotenv_search_dirs(config_file))
        override: Let file values replace variables that are already set
        config_file: Settings file whose directory is searched as well

    Returns:
        The env files that were loaded, in load order
    """
    if search_dirs is None:
        search_dirs = dotenv_search_dirs(config_file)

    names = tuple(filenames)
    loaded: list[Path] = []
    for d in search_dirs:
        for p in (d / name for name in names):
            if p.is_file():
                load_dotenv(dotenv_path=p, override=override)
                loaded.append(p)

    return loaded


def env_flag(name: str, default: bool = False) -> bool:
    """True when *name* holds one of TRUTHY_VALUES (case and padding ignored)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def forked_worker() -> bool:
    """Whether this process was started as a forked worker (ENVBOOT_FORKED_WORKER)."""
    return env_flag(FORKED_WORKER_ENV)
