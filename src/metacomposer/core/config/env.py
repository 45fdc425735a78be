"""
.env file loading.

Settings such as NVIM_LISTEN_ADDRESS or META_COMPOSER_HTTP_TIMEOUT can be
kept in .env files instead of the shell profile:

    ~/.config/meta-composer/.env   (user)
    <project>/.env                 (project)
    <project>/.env.local           (project, local overrides)

Later files override earlier ones. Variables already exported in the
process environment always win.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)


def env_files(project_dir: Path | None = None) -> list[Path]:
    """Candidate .env files, lowest precedence first."""
    if project_dir is None:
        project_dir = Path.cwd()
    return [
        get_xdg_config_home() / "meta-composer" / ".env",
        project_dir / ".env",
        project_dir / ".env.local",
    ]


def read_env_files(paths: list[Path]) -> dict[str, tuple[str, Path]]:
    """
    Merge the given .env files.

    Returns:
        Variable name to (value, file it came from); keys without a value
        are skipped
    """
    merged: dict[str, tuple[str, Path]] = {}
    for path in paths:
        if not path.is_file():
            continue
        for key, value in dotenv_values(path).items():
            if key and value is not None:
                merged[key] = (value, path)
    return merged


def load_layered_env(project_dir: Path | None = None) -> dict[str, Path]:
    """
    Export variables from .env files into os.environ.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)

    Returns:
        The variables that were set, mapped to their source file
    """
    applied: dict[str, Path] = {}
    for key, (value, source) in read_env_files(env_files(project_dir)).items():
        if key in os.environ:
            continue
        os.environ[key] = value
        applied[key] = source
        logger.debug("Loaded %s from %s", key, source)
    return applied
