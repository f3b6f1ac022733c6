"""
Archive installer for downloaded filter releases.

Downloads a zip archive, picks the entries carrying the marker extension
(``.filter``) and writes each one into the game directory under its base
name. Archive directory structure is discarded, so two entries with the same
file name in different folders overwrite each other and the last one in
archive order wins. Such collisions are logged as warnings but otherwise
left alone.
"""

import io
import logging
import zipfile
import zlib
from pathlib import Path, PurePosixPath

import httpx

from poe2filter.core.exceptions import ArchiveError, PersistenceError
from poe2filter.core.sync.http import fetch_bytes

logger = logging.getLogger(__name__)

DEFAULT_MARKER_EXTENSION = "filter"
_CHUNK_SIZE = 64 * 1024

# What zipfile raises for corrupt or unsupported archives and entries
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    KeyError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    zlib.error,
)


def entry_base_name(entry_name: str) -> str | None:
    """
    Return the file name an archive entry is installed under.

    Args:
        entry_name: Full path of the entry inside the archive

    Returns:
        Base name, or None for directory entries and names that have no
        usable final component
    """
    normalized = entry_name.replace("\\", "/")
    if normalized.endswith("/"):
        return None
    base = PurePosixPath(normalized).name
    if base in ("", ".", ".."):
        return None
    return base


class ArchiveInstaller:
    """
    Installs the managed files of a zip archive into a directory.

    Example:
        installer = ArchiveInstaller(client)
        count = await installer.install(record.download_url, game_dir)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        marker_extension: str = DEFAULT_MARKER_EXTENSION,
    ) -> None:
        """
        Args:
            client: Shared HTTP client
            marker_extension: Extension (without dot) of entries to install
        """
        self.client = client
        self.suffix = "." + marker_extension.lstrip(".")

    def is_managed(self, entry_name: str) -> bool:
        """True if the entry carries the marker extension."""
        return PurePosixPath(entry_name.replace("\\", "/")).suffix == self.suffix

    async def install(self, download_url: str, target_directory: Path) -> int:
        """
        Download an archive and install its managed files.

        Args:
            download_url: URL of the zip archive
            target_directory: Directory to write files into

        Returns:
            Number of files written (zero when nothing matched)

        Raises:
            RemoteRequestError: If the download fails
            ArchiveError: If the archive or one of its entries cannot be read
            PersistenceError: If a file cannot be written
        """
        logger.info(f"Downloading archive {download_url}")
        data = await fetch_bytes(self.client, download_url, source="download")
        return self.extract(data, Path(target_directory), origin=download_url)

    def extract(self, data: bytes, target_directory: Path, origin: str = "archive") -> int:
        """
        Install managed files from archive bytes already in memory.

        Args:
            data: Raw zip archive
            target_directory: Directory to write files into
            origin: Where the bytes came from, for error messages

        Returns:
            Number of files written
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except _ARCHIVE_ERRORS as e:
            raise ArchiveError(
                f"Downloaded file is not a valid zip archive: {e}", url=origin
            ) from e

        written = 0
        installed: dict[str, str] = {}
        buffer = bytearray()

        with archive:
            # Snapshot entry names before reading any entry
            entry_names = list(archive.namelist())

            for entry_name in entry_names:
                if not self.is_managed(entry_name):
                    continue

                base_name = entry_base_name(entry_name)
                if base_name is None:
                    logger.warning(f"Skipping archive entry without a file name: {entry_name!r}")
                    continue

                logger.info(f"Extracting {entry_name}")
                buffer.clear()
                try:
                    with archive.open(entry_name) as entry:
                        for chunk in iter(lambda: entry.read(_CHUNK_SIZE), b""):
                            buffer.extend(chunk)
                except _ARCHIVE_ERRORS as e:
                    raise ArchiveError(
                        f"Failed to read archive entry {entry_name}: {e}",
                        url=origin,
                        entry=entry_name,
                    ) from e

                if base_name in installed:
                    logger.warning(
                        f"{entry_name} overwrites {installed[base_name]}, "
                        f"both install as {base_name}"
                    )

                destination = target_directory / base_name
                logger.info(f"Writing {destination}")
                try:
                    destination.write_bytes(buffer)
                except OSError as e:
                    raise PersistenceError(
                        f"Failed to write {destination}: {e}",
                        path=str(destination),
                    ) from e

                installed[base_name] = entry_name
                written += 1

        logger.info(f"Installed {written} file(s) into {target_directory}")
        return written
