"""Environment loading helpers.

poe2filter reads its settings from the environment. To make Steam launch
options less painful, values can also live in .env files:
- OS environment (highest precedence)
- Project environment files (.env, .env.local in the working directory)
- User environment file (~/.config/poe2filter/.env)

A .env file never overrides a variable already present in the process
environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def _read_env(path: Path) -> dict[str, str]:
    """Read a .env file, skipping keys without a value."""
    if not path.is_file():
        return {}
    return {str(k): str(v) for k, v in dotenv_values(path).items() if k and v is not None}


def _apply(values: dict[str, str], overridable: set[str]) -> set[str]:
    """Set values not already in os.environ (unless overridable); return keys set."""
    applied: set[str] = set()
    for key, value in values.items():
        if key in os.environ and key not in overridable:
            continue
        os.environ[key] = value
        applied.add(key)
    return applied


def get_user_env_path() -> Path:
    """Return the user-level .env path (XDG aware)."""
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return xdg_home / "poe2filter" / ".env"


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> None:
    """Load environment variables from user + project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths
    """
    base = Path.cwd() if project_dir is None else project_dir
    user_paths = [get_user_env_path()] if user_env_paths is None else list(user_env_paths)
    project_paths = (
        [base / ".env", base / ".env.local"]
        if project_env_paths is None
        else list(project_env_paths)
    )

    from_user: set[str] = set()
    for path in user_paths:
        from_user |= _apply(_read_env(Path(path)), overridable=set())

    # Project files may replace user values, and later project files earlier ones
    from_project: set[str] = set()
    for path in project_paths:
        from_project |= _apply(_read_env(Path(path)), overridable=from_user | from_project)
