"""
Configuration loading from environment variables.

Configuration precedence (highest to lowest):
    1. Explicit overrides passed by the caller (CLI options)
    2. Environment variables (POE2FILTER_*, GITHUB_TOKEN, Steam variables)
    3. Hardcoded defaults on SyncConfig
"""

import os
from collections.abc import Mapping
from typing import Any

from .models import SyncConfig

# Environment variable -> SyncConfig field
ENV_VARS: dict[str, str] = {
    "POE2FILTER_GAME_DIR": "game_dir",
    "POE2FILTER_LOG": "log_level",
    "GITHUB_TOKEN": "github_token",
    "POE2FILTER_GITHUB_API": "api_url",
    "POE2FILTER_GITHUB_URL": "archive_url",
    "POE2FILTER_TIMEOUT": "timeout",
}

# Checked in order, first non-empty wins
STEAM_APP_ID_VARS = ("STEAM_COMPAT_APP_ID", "SteamGameId")


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Collect SyncConfig fields set through the environment.

    Empty values are ignored so that ``POE2FILTER_GAME_DIR=`` behaves like
    the variable being unset.

    Args:
        environ: Environment mapping to read

    Returns:
        Dictionary of field name to raw string value
    """
    result: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        if value := environ.get(var):
            result[field] = value

    for var in STEAM_APP_ID_VARS:
        if value := environ.get(var):
            result["steam_app_id"] = value
            break

    return result


def load_config(
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> SyncConfig:
    """
    Build the sync configuration.

    Args:
        environ: Environment to read (defaults to os.environ)
        **overrides: Field values that take precedence over the environment;
            None values are ignored

    Returns:
        Validated SyncConfig instance

    Raises:
        ValidationError: If a value fails Pydantic validation

    Example:
        >>> config = load_config({"POE2FILTER_LOG": "INFO"})
        >>> config.log_level
        'info'
    """
    if environ is None:
        environ = os.environ

    merged = env_overrides(environ)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return SyncConfig(**merged)
