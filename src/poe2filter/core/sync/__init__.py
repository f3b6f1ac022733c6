"""
Filter synchronization pipeline.

Resolves source descriptors to their latest published archive, compares
against recorded watermarks and installs changed filters.
"""

from poe2filter.core.exceptions import SyncError
from poe2filter.core.sync.descriptor import ALIASES, Descriptor, parse
from poe2filter.core.sync.installer import ArchiveInstaller
from poe2filter.core.sync.models import SourceOutcome, SourceStatus, SyncResult, VersionRecord
from poe2filter.core.sync.service import SyncService
from poe2filter.core.sync.sources import SourceResolver, list_sources
from poe2filter.core.sync.store import WatermarkStore

__all__ = [
    # Descriptors
    "ALIASES",
    "Descriptor",
    "parse",
    # Models
    "VersionRecord",
    "SourceOutcome",
    "SourceStatus",
    "SyncResult",
    # Components
    "ArchiveInstaller",
    "SourceResolver",
    "SyncService",
    "WatermarkStore",
    "list_sources",
    "SyncError",
]
