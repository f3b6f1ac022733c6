"""
Configuration model and loading.

Settings are read from the environment, which can be seeded from
.env files: OS env > project .env > user .env.
"""

from .env import get_user_env_path, load_layered_env
from .loader import ENV_VARS, env_overrides, load_config
from .models import SyncConfig

__all__ = [
    # Models
    "SyncConfig",
    # Loader functions
    "ENV_VARS",
    "env_overrides",
    "load_config",
    "get_user_env_path",
    "load_layered_env",
]
