"""
Layered configuration for eosdash.

Each layer is a partial dict merged over the previous one:

    built-in defaults
    < $XDG_CONFIG_HOME/eosdash/config.json
    < ./.eosdash.json
    < EOSDASH_* environment variables

The merged dict is validated once into an EosConfig and cached for the
rest of the process.
"""

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import EosConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".eosdash.json"

_config_cache: EosConfig | None = None


def get_xdg_config_home() -> Path:
    """$XDG_CONFIG_HOME, or ~/.config when it is unset or empty."""
    configured = os.environ.get("XDG_CONFIG_HOME")
    return Path(configured) if configured else Path.home() / ".config"


def get_user_config_path() -> Path:
    """Per-user settings file shared by every project."""
    return get_xdg_config_home() / "eosdash" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Project settings file.

    Args:
        cwd: Project directory (defaults to the current directory)
    """
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Return ``base`` with ``override`` laid over it, section by section.

    Nested dicts merge key by key; any other value replaces the old one.
    Neither argument is modified.

    Example:
        >>> deep_merge({"api": {"base_url": "a", "timeout_seconds": 5}}, {"api": {"base_url": "b"}})
        {'api': {'base_url': 'b', 'timeout_seconds': 5}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read one settings layer.

    A missing, unreadable or malformed file is skipped with a warning so the
    remaining layers still apply.

    Returns:
        The file's top-level object, or None when the layer is skipped
    """
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: top level is not an object", path)
        return None
    return data


def _positive_seconds(name: str, raw: str) -> float | None:
    try:
        seconds = float(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s', ignoring", name, raw)
        return None
    if seconds <= 0:
        logger.warning("%s must be > 0, got %s, ignoring", name, seconds)
        return None
    return seconds


# Sentinel for "leave the setting alone"
_SKIP = object()


def _parse_url(name: str, raw: str) -> Any:
    return raw or _SKIP


def _parse_webhook(name: str, raw: str) -> Any:
    # An empty value turns the webhook off
    return raw or None


def _parse_timeout(name: str, raw: str) -> Any:
    if raw.lower() in ("none", "off"):
        return None
    seconds = _positive_seconds(name, raw) if raw else None
    return _SKIP if seconds is None else seconds


def _parse_ttl(name: str, raw: str) -> Any:
    seconds = _positive_seconds(name, raw) if raw else None
    return _SKIP if seconds is None else seconds


# env var -> (section, key, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str, str], Any]]] = {
    "EOSDASH_API_BASE": ("api", "base_url", _parse_url),
    "EOSDASH_WEBHOOK_URL": ("api", "webhook_url", _parse_webhook),
    "EOSDASH_TIMEOUT": ("api", "timeout_seconds", _parse_timeout),
    "EOSDASH_NOTIFICATION_TTL": ("notifications", "ttl_seconds", _parse_ttl),
}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Lay EOSDASH_* environment variables over a settings dict.

    EOSDASH_API_BASE sets api.base_url. EOSDASH_WEBHOOK_URL sets
    api.webhook_url, where an empty value disables the webhook.
    EOSDASH_TIMEOUT sets api.timeout_seconds, where "none" or "off" waits
    indefinitely. EOSDASH_NOTIFICATION_TTL sets notifications.ttl_seconds.
    Unparseable or non-positive durations are ignored with a warning.

    Returns:
        A new dict; ``config_dict`` is not modified
    """
    overrides: dict[str, Any] = {}
    for name, (section, key, parse) in ENV_OVERRIDES.items():
        if name not in os.environ:
            continue
        value = parse(name, os.environ[name])
        if value is not _SKIP:
            overrides.setdefault(section, {})[key] = value
    return deep_merge(config_dict, overrides)


def get_default_config() -> dict[str, Any]:
    """Built-in settings, the lowest layer."""
    return {
        "api": {
            "base_url": "http://localhost:8787/api/v1",
            "webhook_url": "http://localhost:8787/api/ghl/webhook",
            "timeout_seconds": 30.0,
        },
        "notifications": {"ttl_seconds": 5.0},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> EosConfig:
    """
    Merge every layer and validate the result.

    Args:
        project_dir: Where to look for .eosdash.json (defaults to cwd)
        use_cache: Reuse the configuration from an earlier call

    Returns:
        EosConfig

    Raises:
        ValidationError: If the merged settings are invalid (e.g. a bad URL)
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    settings = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        layer = load_json_file(path)
        if layer:
            logger.debug("Applying config layer %s", path)
            settings = deep_merge(settings, layer)
    settings = apply_env_overrides(settings)

    _config_cache = EosConfig(**settings)
    return _config_cache


def clear_cache() -> None:
    """Forget the cached configuration so the next load re-reads every layer."""
    global _config_cache
    _config_cache = None
