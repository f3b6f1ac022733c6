"""
Version source protocol and registry.

This module provides:
- VersionSource: Protocol that all version sources must implement
- @register_source: Decorator for registering source implementations
- get_source(): Get a source instance by name
- list_sources(): Get all registered source names
- SourceResolver: Per-run dispatcher used by the sync service
"""

from poe2filter.core.sync.sources import base as _base
from poe2filter.core.sync.sources.base import (
    SourceResolver,
    VersionSource,
    get_source,
    list_sources,
    register_source,
)

# Import source implementations to register them
from poe2filter.core.sync.sources import github as _github  # noqa: F401

# Expose the registry for testing purposes
_sources = _base._sources

__all__ = [
    "VersionSource",
    "SourceResolver",
    "register_source",
    "get_source",
    "list_sources",
]
