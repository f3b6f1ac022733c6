"""
Sync service: resolves sources, installs changed ones, records watermarks.

A run goes through these steps:

    load store -> [clear] -> for each source:
        parse -> resolve -> compare -> (skip | install -> update store)
    -> save store

Sources are processed one after another, in the order given. The first
error aborts the run and nothing is saved, so watermarks on disk only ever
reflect fully completed runs.

Example:
    store = WatermarkStore(game_dir)
    async with create_client(config) as client:
        service = SyncService(
            store,
            ArchiveInstaller(client),
            SourceResolver(client, config),
            on_change=print_change,
        )
        result = await service.sync(["neversink-lite", "github:cdrg/cdr-poe2filter/main"])
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

import httpx

from poe2filter.core.config.models import SyncConfig
from poe2filter.core.gamedir import resolve_game_directory
from poe2filter.core.sync.descriptor import Descriptor, parse
from poe2filter.core.sync.http import create_client
from poe2filter.core.sync.installer import ArchiveInstaller
from poe2filter.core.sync.models import SourceOutcome, SourceStatus, SyncResult, VersionRecord
from poe2filter.core.sync.sources import SourceResolver
from poe2filter.core.sync.store import WatermarkStore

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    async def resolve(self, descriptor: Descriptor) -> VersionRecord | None: ...


class Installer(Protocol):
    async def install(self, download_url: str, target_directory: Path) -> int: ...


ChangeCallback = Callable[[SourceOutcome], None]


class SyncService:
    """
    Orchestrates a sync run over a list of descriptors.

    The service owns the watermark mapping for the duration of a run. It is
    loaded at the start, passed through each step, and written back once
    at the end.
    """

    def __init__(
        self,
        store: WatermarkStore,
        installer: Installer,
        resolver: Resolver,
        on_change: ChangeCallback | None = None,
    ) -> None:
        """
        Args:
            store: Watermark store; its directory is also the install target
            installer: Installs an archive into a directory
            resolver: Resolves a descriptor to its current remote version
            on_change: Called right after each source is installed
        """
        self.store = store
        self.installer = installer
        self.resolver = resolver
        self.on_change = on_change

    @property
    def target_directory(self) -> Path:
        return self.store.directory

    async def sync(self, raw_descriptors: Sequence[str], clear: bool = False) -> SyncResult:
        """
        Bring every source up to date.

        Args:
            raw_descriptors: Descriptors or aliases, processed in order
            clear: Forget all recorded watermarks first, forcing reinstall

        Returns:
            SyncResult with one outcome per descriptor

        Raises:
            SyncError: On the first failing source; the store is not saved
        """
        watermarks = self.store.load()
        if clear:
            logger.info(f"Clearing {len(watermarks)} recorded watermark(s)")
            self.store.clear(watermarks)

        outcomes: list[SourceOutcome] = []
        for raw in raw_descriptors:
            outcome = await self.sync_source(raw, watermarks)
            outcomes.append(outcome)

        logger.info("Saving watermarks")
        state_file = self.store.save(watermarks)

        return SyncResult(outcomes=outcomes, cleared=clear, state_file=state_file)

    async def sync_source(self, raw: str, watermarks: dict[str, str]) -> SourceOutcome:
        """
        Process a single descriptor against the in-memory watermarks.

        Updates ``watermarks`` in place when the source was installed.
        """
        descriptor = parse(raw)
        key = str(descriptor)
        previous = watermarks.get(key)
        logger.info(f"Updating {key} which has watermark {previous or 'none'}")

        record = await self.resolver.resolve(descriptor)
        if record is None:
            logger.info(f"Nothing published for {key} yet")
            return SourceOutcome(
                descriptor=key,
                status=SourceStatus.NO_ARTIFACT,
                previous=previous,
            )

        if previous == record.watermark:
            logger.info(f"{key} is up to date")
            return SourceOutcome(
                descriptor=key,
                status=SourceStatus.UP_TO_DATE,
                previous=previous,
                watermark=record.watermark,
                note=record.note,
            )

        files_written = await self.installer.install(record.download_url, self.target_directory)
        watermarks[key] = record.watermark
        logger.info(f"Watermark for {key} set to {record.watermark}")

        outcome = SourceOutcome(
            descriptor=key,
            status=SourceStatus.UPDATED,
            previous=previous,
            watermark=record.watermark,
            note=record.note,
            files_written=files_written,
        )
        if self.on_change is not None:
            self.on_change(outcome)
        return outcome


async def run_sync(
    config: SyncConfig,
    raw_descriptors: Sequence[str],
    clear: bool = False,
    on_change: ChangeCallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SyncResult:
    """
    Run a complete sync with the standard components.

    Locates the game directory, opens one HTTP client for the run and wires
    the GitHub-backed resolver and archive installer into a SyncService.

    Args:
        config: Sync configuration
        raw_descriptors: Descriptors or aliases, processed in order
        clear: Forget recorded watermarks first
        on_change: Called after each installed source
        transport: Optional HTTP transport override, used by tests

    Returns:
        SyncResult of the run
    """
    game_dir = resolve_game_directory(config.game_dir, app_id=config.steam_app_id)
    store = WatermarkStore(game_dir, config.state_file_name)

    async with create_client(config, transport=transport) as client:
        service = SyncService(
            store,
            ArchiveInstaller(client, config.marker_extension),
            SourceResolver(client, config),
            on_change=on_change,
        )
        return await service.sync(raw_descriptors, clear=clear)
