"""
Version source protocol and registry.

This module defines the VersionSource protocol that every remote source
implements, keyed by the descriptor type it handles ("github" in
``github:owner/repo``).

- VersionSource is a runtime_checkable Protocol
- Sources are registered with a decorator
- Sources are instantiated on demand with the shared HTTP client
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import httpx

from poe2filter.core.config.models import SyncConfig
from poe2filter.core.exceptions import MalformedDescriptor
from poe2filter.core.sync.descriptor import Descriptor
from poe2filter.core.sync.models import VersionRecord


@runtime_checkable
class VersionSource(Protocol):
    """
    Protocol for version source implementations.

    A source turns the payload of a descriptor into the current remote
    version. It never looks at previously recorded watermarks.
    """

    @property
    def name(self) -> str:
        """
        Get the name of this source.

        Returns:
            Source name, equal to the descriptor type it handles
        """
        ...

    async def resolve(self, payload: str) -> VersionRecord | None:
        """
        Resolve a payload to the latest published version.

        Args:
            payload: Descriptor payload (everything after ``type:``)

        Returns:
            VersionRecord, or None if nothing has been published yet

        Raises:
            MalformedDescriptor: If the payload has the wrong shape
            RemoteRequestError: If a request fails
            RemoteProtocolError: If a response has an unexpected shape
        """
        ...


SourceFactory = Callable[[httpx.AsyncClient, SyncConfig], VersionSource]

# Source registry
_sources: dict[str, SourceFactory] = {}


def register_source(name: str) -> Callable[[SourceFactory], SourceFactory]:
    """
    Decorator to register a version source implementation.

    Usage:
        @register_source('github')
        class GitHubSource:
            def __init__(self, client, config): ...

            @property
            def name(self) -> str:
                return 'github'

            async def resolve(self, payload: str) -> VersionRecord | None:
                ...

    Args:
        name: Descriptor type handled by the source

    Returns:
        Decorator function

    Raises:
        ValueError: If source name is already registered
    """

    def decorator(source_class: SourceFactory) -> SourceFactory:
        if name in _sources:
            raise ValueError(
                f"Source '{name}' is already registered. "
                f"Available sources: {', '.join(_sources.keys())}"
            )
        _sources[name] = source_class
        return source_class

    return decorator


def get_source(name: str, client: httpx.AsyncClient, config: SyncConfig) -> VersionSource:
    """
    Get a version source by name.

    Args:
        name: Descriptor type (e.g., 'github')
        client: Shared HTTP client
        config: Sync configuration

    Returns:
        VersionSource instance

    Raises:
        ValueError: If source name is not registered
    """
    source_class = _sources.get(name)
    if source_class is None:
        available = ", ".join(_sources.keys()) if _sources else "none registered"
        raise ValueError(f"Source '{name}' not registered. Available sources: {available}")
    return source_class(client, config)


def list_sources() -> list[str]:
    """
    List all registered source names.

    Returns:
        List of source names in alphabetical order
    """
    return sorted(_sources.keys())


class SourceResolver:
    """
    Dispatches descriptors to their source, creating each source once.

    Used by the sync service as its resolver: one instance per run, sharing
    the run's HTTP client.
    """

    def __init__(self, client: httpx.AsyncClient, config: SyncConfig) -> None:
        self.client = client
        self.config = config
        self._instances: dict[str, VersionSource] = {}

    def source_for(self, descriptor: Descriptor) -> VersionSource:
        """
        Get the source handling a descriptor's type.

        Raises:
            MalformedDescriptor: If no source handles the type
        """
        if descriptor.type not in self._instances:
            try:
                self._instances[descriptor.type] = get_source(
                    descriptor.type, self.client, self.config
                )
            except ValueError as e:
                raise MalformedDescriptor(
                    str(descriptor),
                    f"Unsupported source type '{descriptor.type}' "
                    f"(supported: {', '.join(list_sources())})",
                ) from e
        return self._instances[descriptor.type]

    async def resolve(self, descriptor: Descriptor) -> VersionRecord | None:
        """Resolve a descriptor through its source."""
        return await self.source_for(descriptor).resolve(descriptor.payload)
