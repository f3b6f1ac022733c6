"""
Configuration data model for poe2filter.

Settings come from the environment (optionally seeded from .env files), with
validation and type safety via Pydantic.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("critical", "error", "warning", "info", "debug")
_LEVEL_ALIASES = {"trace": "debug", "warn": "warning", "off": "critical"}


def parse_log_level(value: str) -> str | None:
    """
    Read a level from a plain name or an env_logger style directive list.

    Accepts "info", "WARN", "poe2filter=debug", "info,hyper=warn" and
    "poe2filter::sync=trace". A poe2filter directive wins over a bare level;
    directives for other targets are ignored. A bare module name means trace.

    Returns:
        One of the stdlib level names in lowercase, or None when nothing in
        the value can be used
    """
    bare: str | None = None
    own: str | None = None
    for directive in value.strip().lower().split(","):
        target, sep, level = directive.strip().partition("=")
        target = target.strip()
        if not target and not sep:
            continue
        if not sep:
            level, target = (target, "") if _known(target) else ("trace", target)
        level = _LEVEL_ALIASES.get(level.strip(), level.strip())
        if level not in _LOG_LEVELS:
            continue
        if not target:
            bare = level
        elif target == "poe2filter" or target.startswith("poe2filter::"):
            own = level
    return own or bare


def _known(name: str) -> bool:
    return name in _LOG_LEVELS or name in _LEVEL_ALIASES


class SyncConfig(BaseModel):
    """
    Settings for a sync run.

    Everything has a sensible default; the environment only needs to provide
    overrides (see ``poe2filter.core.config.loader``).
    """

    game_dir: Path | None = Field(
        default=None,
        description="Install filters here instead of discovering the game directory",
    )
    log_level: str = Field(
        default="warning",
        description="Logging level when --debug is not given",
    )
    github_token: str | None = Field(
        default=None,
        description="Optional GitHub token, raises the API rate limit",
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    archive_url: str = Field(
        default="https://github.com",
        description="GitHub web base URL used for commit archives",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds",
    )
    user_agent: str = Field(default="poe2filter", min_length=1)
    marker_extension: str = Field(
        default="filter",
        min_length=1,
        description="Archive entries with this extension are installed",
    )
    state_file_name: str = Field(
        default="filter_watermarks.json",
        min_length=1,
        description="Name of the watermark file inside the game directory",
    )
    steam_app_id: str = Field(
        default="2694490",
        min_length=1,
        description="Steam app id used to find the Proton prefix",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any case and directive lists; fall back to warning otherwise."""
        level = parse_log_level(v)
        if level is None:
            logger.warning(f"Unrecognized log level {v!r}, using warning")
            return "warning"
        return level

    @field_validator("api_url", "archive_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        url = v.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must include scheme and host (e.g. https://api.github.com)")
        return url

    @field_validator("marker_extension")
    @classmethod
    def strip_leading_dot(cls, v: str) -> str:
        return v.lstrip(".")
