"""
Pytest configuration and shared fixtures.

Provides fixtures for game directories, sync configuration and in-memory
zip archives used across the test suite.
"""

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from poe2filter.core.config.models import SyncConfig

# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def game_dir(tmp_path: Path) -> Path:
    """Provide an existing, empty game data directory."""
    directory = tmp_path / "Path of Exile 2"
    directory.mkdir()
    return directory


# ==============================================================================
# Configuration Fixtures
# ==============================================================================


@pytest.fixture
def sync_config(game_dir: Path) -> SyncConfig:
    """Sync configuration pointing at the temporary game directory."""
    return SyncConfig(game_dir=game_dir)


# ==============================================================================
# Archive Fixtures
# ==============================================================================


def build_zip(entries: dict[str, bytes | str]) -> bytes:
    """Build a zip archive in memory, entries written in dict order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip() -> Callable[[dict[str, bytes | str]], bytes]:
    """Factory fixture for in-memory zip archives."""
    return build_zip


@pytest.fixture
def filter_archive() -> bytes:
    """
    A release zipball the way GitHub packages it.

    Five entries under a top-level folder, two of them filters (one nested
    two levels deep).
    """
    return build_zip(
        {
            "NeverSinkDev-NeverSink-PoE2litefilter-1a2b3c4/README.md": "# NeverSink lite",
            "NeverSinkDev-NeverSink-PoE2litefilter-1a2b3c4/LICENSE": "MIT",
            "NeverSinkDev-NeverSink-PoE2litefilter-1a2b3c4/NeverSink-lite.filter": (
                "Show\n    BaseType == \"Divine Orb\"\n"
            ),
            "NeverSinkDev-NeverSink-PoE2litefilter-1a2b3c4/styles/dark/NeverSink-dark.filter": (
                "Show\n    Rarity Unique\n"
            ),
            "NeverSinkDev-NeverSink-PoE2litefilter-1a2b3c4/styles/dark/preview.png": b"\x89PNG",
        }
    )
