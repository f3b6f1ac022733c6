"""
Watermark storage for the sync pipeline.

Manages ``filter_watermarks.json`` in the game directory: a flat JSON object
mapping each canonical descriptor to the watermark last installed from it.

Example:
    store = WatermarkStore(game_dir)
    watermarks = store.load()
    watermarks["github:cdrg/cdr-poe2filter"] = "v1.2"
    store.save(watermarks)
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from poe2filter.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "filter_watermarks.json"

_watermarks_adapter = TypeAdapter(dict[str, str])


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class WatermarkStore:
    """
    Storage layer for watermarks.

    The store itself holds no state: ``load`` hands out a plain dict that
    the caller owns and mutates, and ``save`` writes it back in one go.
    Writes go to a temp file that then replaces the state file, so a crash
    mid-write leaves the previous save intact.
    """

    def __init__(self, directory: Path, filename: str = DEFAULT_STATE_FILE) -> None:
        """
        Initialize store for a directory.

        Args:
            directory: Game data directory
            filename: Name of the state file inside the directory
        """
        self.directory = Path(directory)
        self.state_file = self.directory / filename

    def load(self) -> dict[str, str]:
        """
        Load watermarks from disk.

        A missing, unreadable or corrupt file yields an empty mapping; this
        is never an error, the next save simply starts from scratch.

        Returns:
            Mapping of canonical descriptor to watermark
        """
        if not self.state_file.exists():
            logger.debug(f"No watermark file at {self.state_file}, starting empty")
            return {}

        try:
            raw = self.state_file.read_text(encoding="utf-8")
            return _watermarks_adapter.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(
                f"Could not read existing watermarks from {self.state_file}, "
                f"starting from scratch: {e}"
            )
            return {}

    def save(self, watermarks: dict[str, str]) -> Path:
        """
        Write watermarks to disk, replacing the previous file.

        Args:
            watermarks: Mapping to persist

        Returns:
            Path to the saved state file

        Raises:
            PersistenceError: If the file cannot be written
        """
        json_str = json.dumps(watermarks, indent=2)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{self.state_file.name}.",
                delete=False,
                suffix=".tmp",
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(json_str)
                tmp.flush()

            # NamedTemporaryFile creates 0600; give the state file the usual mode
            tmp_path.chmod(0o666 & ~_current_umask())
            tmp_path.replace(self.state_file)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise PersistenceError(
                f"Failed to save watermarks: {e}",
                path=str(self.state_file),
            ) from e

        logger.info(f"Saved {len(watermarks)} watermark(s) to {self.state_file}")
        return self.state_file

    @staticmethod
    def clear(watermarks: dict[str, str]) -> None:
        """Forget every recorded watermark, in place."""
        watermarks.clear()
