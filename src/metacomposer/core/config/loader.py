"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import MetaComposerConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per invocation
_config_cache: MetaComposerConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Path to ~/.config/meta-composer/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "meta-composer" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .meta-composer.json in that directory
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".meta-composer.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested dicts
    are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10, "y": 20}}, {"b": {"y": 30}, "c": 3})
        {'a': 1, 'b': {'x': 10, 'y': 30}, 'c': 3}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _parse_positive_float(var: str) -> float | None:
    raw = os.environ.get(var)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s', ignoring", var, raw)
        return None
    if value <= 0:
        logger.warning("%s must be > 0, got %s, ignoring", var, raw)
        return None
    return value


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        META_COMPOSER_HTTP_TIMEOUT - overrides http.timeout
        NVIM - overrides nvim.socket (set inside Neovim terminals)
        NVIM_LISTEN_ADDRESS - overrides nvim.socket when NVIM is unset
        META_COMPOSER_NVIM_TIMEOUT - overrides nvim.timeout

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if (http_timeout := _parse_positive_float("META_COMPOSER_HTTP_TIMEOUT")) is not None:
        result["http"] = {**result.get("http", {}), "timeout": http_timeout}

    socket = os.environ.get("NVIM") or os.environ.get("NVIM_LISTEN_ADDRESS")
    if socket:
        result["nvim"] = {**result.get("nvim", {}), "socket": socket}

    if (nvim_timeout := _parse_positive_float("META_COMPOSER_NVIM_TIMEOUT")) is not None:
        result["nvim"] = {**result.get("nvim", {}), "timeout": nvim_timeout}

    return result


def get_default_config() -> dict[str, Any]:
    """Hardcoded default configuration."""
    return {
        "http": {"timeout": 30.0, "follow_redirects": True},
        "nvim": {"socket": None, "timeout": 5.0},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> MetaComposerConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables
        2. Project config (.meta-composer.json)
        3. User config (~/.config/meta-composer/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .meta-composer.json from
        use_cache: If True, return cached config from previous load

    Returns:
        Validated MetaComposerConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = MetaComposerConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
