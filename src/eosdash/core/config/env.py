"""
.env file layering for EOSDASH_* variables.

Lowest to highest precedence:
    ~/.config/eosdash/.env  <  ./.env  <  ./.env.local  <  the shell

A file never overrides a variable that was already exported when loading
started.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

PROJECT_ENV_NAMES = (".env", ".env.local")


def default_user_env_paths() -> list[Path]:
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return [xdg_home / "eosdash" / ".env"]


def default_project_env_paths(project_dir: Path) -> list[Path]:
    return [project_dir / name for name in PROJECT_ENV_NAMES]


def read_env_file(path: Path) -> dict[str, str]:
    """Parse one .env file; a missing file or a valueless key contributes nothing."""
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> set[str]:
    """
    Export variables from user and project .env files into ``os.environ``.

    Args:
        project_dir: Directory holding the project files (defaults to cwd)
        user_env_paths: Override for the user file list
        project_env_paths: Override for the project file list

    Returns:
        Names of the variables this call set
    """
    if user_env_paths is None:
        user_env_paths = default_user_env_paths()
    if project_env_paths is None:
        project_env_paths = default_project_env_paths(project_dir or Path.cwd())

    # Later files win over earlier ones; the shell wins over all of them
    merged: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        values = read_env_file(Path(path))
        if values:
            logger.debug("Read %d variables from %s", len(values), path)
        merged.update(values)

    exported = {key for key, value in merged.items() if key not in os.environ}
    for key in exported:
        os.environ[key] = merged[key]
    return exported
