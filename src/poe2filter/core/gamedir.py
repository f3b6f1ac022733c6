"""
Game directory discovery.

Path of Exile 2 runs under Proton on Linux, so its "My Games" folder lives
inside a Steam compatdata prefix. Candidate prefixes are derived from the
environment Steam sets for launched games, then from the usual install
locations. The first candidate whose ``My Games`` folder exists wins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from poe2filter.core.exceptions import GameDirectoryNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_APP_ID = "2694490"
MY_GAMES = Path("pfx/drive_c/users/steamuser/My Documents/My Games")
GAME_FOLDER = "Path of Exile 2"


def split_paths(raw: str | None) -> list[Path]:
    """Split a PATH-style variable, dropping empty entries."""
    if not raw:
        return []
    return [Path(p) for p in raw.split(os.pathsep) if p]


def candidate_paths(environ: Mapping[str, str], app_id: str | None = None) -> list[Path]:
    """
    List compatdata prefixes that may hold the game, most specific first.

    Args:
        environ: Environment to read
        app_id: Steam app id; defaults to the one Steam exports, then to
            the Path of Exile 2 id

    Returns:
        Candidate prefix directories, without duplicates
    """
    if app_id is None:
        app_id = (
            environ.get("STEAM_COMPAT_APP_ID")
            or environ.get("SteamGameId")
            or DEFAULT_APP_ID
        )

    paths: list[Path] = []

    if compat_path := environ.get("STEAM_COMPAT_DATA_PATH"):
        paths.append(Path(compat_path))

    for library in split_paths(environ.get("STEAM_COMPAT_LIBRARY_PATHS")):
        paths.append(library / "compatdata" / app_id)

    if base_path := environ.get("STEAM_BASE_FOLDER"):
        paths.append(Path(base_path) / "steamapps" / "compatdata" / app_id)

    for data_dir in split_paths(environ.get("XDG_DATA_DIRS")):
        paths.append(data_dir / "Steam" / "steamapps" / "compatdata" / app_id)

    if home := environ.get("HOME"):
        paths.append(
            Path(home) / ".local" / "share" / "Steam" / "steamapps" / "compatdata" / app_id
        )

    # dict keeps first-seen order
    return list(dict.fromkeys(paths))


def locate_game_directory(
    environ: Mapping[str, str] | None = None,
    app_id: str | None = None,
) -> Path:
    """
    Find (and create if needed) the game's data directory.

    Args:
        environ: Environment to read (defaults to os.environ)
        app_id: Steam app id override

    Returns:
        Path to ``.../My Games/Path of Exile 2``

    Raises:
        GameDirectoryNotFoundError: If no candidate works
    """
    if environ is None:
        environ = os.environ

    candidates = candidate_paths(environ, app_id)
    for prefix in candidates:
        my_games = prefix / MY_GAMES
        logger.info(f"Checking {my_games}...")
        if not my_games.is_dir():
            continue

        game_dir = my_games / GAME_FOLDER
        logger.info(f"Attempting to create game data directory at {game_dir}")
        try:
            game_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Failed to create directory {game_dir}: {e}")
            continue

        logger.info(f"Found game directory {game_dir}")
        return game_dir

    raise GameDirectoryNotFoundError(
        "No Steam path could be located",
        checked=", ".join(str(p) for p in candidates) or "none",
    )


def resolve_game_directory(
    override: Path | None,
    environ: Mapping[str, str] | None = None,
    app_id: str | None = None,
) -> Path:
    """
    Use an explicit directory when given, otherwise discover one.

    An explicit directory is created if it does not exist yet.
    """
    if override is None:
        return locate_game_directory(environ, app_id)

    directory = Path(override).expanduser()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GameDirectoryNotFoundError(
            f"Cannot use {directory} as game directory: {e}",
            path=str(directory),
        ) from e
    return directory
