"""
Tests for the sync service.

Resolver and installer are replaced with in-memory stubs so the tests
exercise only the orchestration: gating on watermarks, store updates,
ordering and failure handling.
"""

import json
from pathlib import Path

import pytest

from poe2filter.core.exceptions import MalformedDescriptor, RemoteRequestError
from poe2filter.core.sync.descriptor import Descriptor
from poe2filter.core.sync.models import SourceOutcome, SourceStatus, VersionRecord
from poe2filter.core.sync.service import SyncService
from poe2filter.core.sync.store import WatermarkStore

LITE = "github:NeverSinkDev/NeverSink-PoE2litefilter"
CDR = "github:cdrg/cdr-poe2filter/main"


class StubResolver:
    """Resolves descriptors from a fixed table; raises for configured keys."""

    def __init__(
        self,
        records: dict[str, VersionRecord | None],
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.records = records
        self.errors = errors or {}
        self.resolved: list[str] = []

    async def resolve(self, descriptor: Descriptor) -> VersionRecord | None:
        key = str(descriptor)
        self.resolved.append(key)
        if key in self.errors:
            raise self.errors[key]
        return self.records[key]


class StubInstaller:
    """Records install calls instead of downloading."""

    def __init__(self, files_per_install: int = 1) -> None:
        self.installs: list[tuple[str, Path]] = []
        self.files_per_install = files_per_install

    async def install(self, download_url: str, target_directory: Path) -> int:
        self.installs.append((download_url, target_directory))
        return self.files_per_install


def record(watermark: str, note: str | None = None) -> VersionRecord:
    return VersionRecord(
        download_url=f"https://example.com/{watermark}.zip", watermark=watermark, note=note
    )


@pytest.fixture
def store(game_dir: Path) -> WatermarkStore:
    return WatermarkStore(game_dir)


class TestSync:
    """Tests for SyncService.sync()."""

    @pytest.mark.asyncio
    async def test_first_run_installs_and_records(
        self, store: WatermarkStore, game_dir: Path
    ) -> None:
        resolver = StubResolver({LITE: record("0.5.2", "notes")})
        installer = StubInstaller(files_per_install=3)

        result = await SyncService(store, installer, resolver).sync([LITE])

        assert installer.installs == [("https://example.com/0.5.2.zip", game_dir)]
        assert store.load() == {LITE: "0.5.2"}
        (outcome,) = result.outcomes
        assert outcome.status == SourceStatus.UPDATED
        assert outcome.previous is None
        assert outcome.watermark == "0.5.2"
        assert outcome.note == "notes"
        assert outcome.files_written == 3
        assert result.state_file == store.state_file

    @pytest.mark.asyncio
    async def test_second_run_is_idempotent(self, store: WatermarkStore) -> None:
        resolver = StubResolver({LITE: record("0.5.2")})
        installer = StubInstaller()
        service = SyncService(store, installer, resolver)

        await service.sync([LITE])
        result = await service.sync([LITE])

        assert len(installer.installs) == 1
        assert result.outcomes[0].status == SourceStatus.UP_TO_DATE
        assert result.updated == []
        assert store.load() == {LITE: "0.5.2"}

    @pytest.mark.asyncio
    async def test_changed_watermark_reinstalls(self, store: WatermarkStore) -> None:
        store.save({LITE: "0.5.1"})
        installer = StubInstaller()

        result = await SyncService(store, installer, StubResolver({LITE: record("0.5.2")})).sync(
            [LITE]
        )

        assert len(installer.installs) == 1
        assert result.outcomes[0].previous == "0.5.1"
        assert store.load() == {LITE: "0.5.2"}

    @pytest.mark.asyncio
    async def test_watermarks_only_compared_for_equality(self, store: WatermarkStore) -> None:
        """An "older" looking remote version still counts as a change."""
        store.save({LITE: "v2.0"})
        installer = StubInstaller()

        await SyncService(store, installer, StubResolver({LITE: record("v1.9")})).sync([LITE])

        assert len(installer.installs) == 1
        assert store.load() == {LITE: "v1.9"}

    @pytest.mark.asyncio
    async def test_clear_forces_reinstall(self, store: WatermarkStore) -> None:
        store.save({LITE: "0.5.2", "github:old/source": "x"})
        installer = StubInstaller()

        result = await SyncService(store, installer, StubResolver({LITE: record("0.5.2")})).sync(
            [LITE], clear=True
        )

        assert len(installer.installs) == 1
        assert result.cleared is True
        assert store.load() == {LITE: "0.5.2"}

    @pytest.mark.asyncio
    async def test_clear_without_sources_empties_store(self, store: WatermarkStore) -> None:
        store.save({LITE: "0.5.2"})

        result = await SyncService(store, StubInstaller(), StubResolver({})).sync([], clear=True)

        assert result.outcomes == []
        assert store.load() == {}
        assert json.loads(store.state_file.read_text()) == {}

    @pytest.mark.asyncio
    async def test_unmentioned_sources_are_kept(self, store: WatermarkStore) -> None:
        store.save({CDR: "abc"})

        await SyncService(store, StubInstaller(), StubResolver({LITE: record("1")})).sync([LITE])

        assert store.load() == {CDR: "abc", LITE: "1"}

    @pytest.mark.asyncio
    async def test_no_artifact_leaves_key_unset(self, store: WatermarkStore) -> None:
        installer = StubInstaller()

        result = await SyncService(store, installer, StubResolver({LITE: None})).sync([LITE])

        assert installer.installs == []
        assert result.outcomes[0].status == SourceStatus.NO_ARTIFACT
        assert store.load() == {}

    @pytest.mark.asyncio
    async def test_no_artifact_keeps_existing_watermark(self, store: WatermarkStore) -> None:
        store.save({LITE: "0.5.2"})

        await SyncService(store, StubInstaller(), StubResolver({LITE: None})).sync([LITE])

        assert store.load() == {LITE: "0.5.2"}

    @pytest.mark.asyncio
    async def test_alias_recorded_under_canonical_key(self, store: WatermarkStore) -> None:
        resolver = StubResolver({LITE: record("0.5.2")})

        result = await SyncService(store, StubInstaller(), resolver).sync(["neversink-lite"])

        assert resolver.resolved == [LITE]
        assert result.outcomes[0].descriptor == LITE
        assert store.load() == {LITE: "0.5.2"}

    @pytest.mark.asyncio
    async def test_alias_and_full_form_share_watermark(self, store: WatermarkStore) -> None:
        installer = StubInstaller()
        resolver = StubResolver({LITE: record("0.5.2")})

        result = await SyncService(store, installer, resolver).sync(["neversink-lite", LITE])

        assert len(installer.installs) == 1
        assert [o.status for o in result.outcomes] == [
            SourceStatus.UPDATED,
            SourceStatus.UP_TO_DATE,
        ]

    @pytest.mark.asyncio
    async def test_sources_processed_in_order(self, store: WatermarkStore) -> None:
        resolver = StubResolver({LITE: record("1"), CDR: record("2")})
        installer = StubInstaller()

        result = await SyncService(store, installer, resolver).sync([CDR, LITE])

        assert resolver.resolved == [CDR, LITE]
        assert [url for url, _ in installer.installs] == [
            "https://example.com/2.zip",
            "https://example.com/1.zip",
        ]
        assert [o.descriptor for o in result.outcomes] == [CDR, LITE]

    @pytest.mark.asyncio
    async def test_result_totals(self, store: WatermarkStore) -> None:
        store.save({CDR: "2"})
        resolver = StubResolver({LITE: record("1"), CDR: record("2")})

        result = await SyncService(store, StubInstaller(files_per_install=4), resolver).sync(
            [LITE, CDR]
        )

        assert [o.descriptor for o in result.updated] == [LITE]
        assert result.files_written == 4


class TestFailures:
    """A failing source aborts the run without saving."""

    @pytest.mark.asyncio
    async def test_failure_leaves_state_file_unchanged(self, store: WatermarkStore) -> None:
        store.save({CDR: "old"})
        before = store.state_file.read_bytes()
        resolver = StubResolver(
            {LITE: record("1")},
            errors={CDR: RemoteRequestError("github", "HTTP 500", status_code=500)},
        )
        installer = StubInstaller()

        with pytest.raises(RemoteRequestError):
            await SyncService(store, installer, resolver).sync([LITE, CDR])

        # LITE was installed before the failure but not recorded
        assert len(installer.installs) == 1
        assert store.state_file.read_bytes() == before

    @pytest.mark.asyncio
    async def test_failure_stops_processing(self, store: WatermarkStore) -> None:
        resolver = StubResolver(
            {CDR: record("2")},
            errors={LITE: RemoteRequestError("github", "HTTP 404", status_code=404)},
        )

        with pytest.raises(RemoteRequestError):
            await SyncService(store, StubInstaller(), resolver).sync([LITE, CDR])

        assert resolver.resolved == [LITE]
        assert not store.state_file.exists()

    @pytest.mark.asyncio
    async def test_malformed_descriptor_raises_before_resolving(
        self, store: WatermarkStore
    ) -> None:
        resolver = StubResolver({})

        with pytest.raises(MalformedDescriptor):
            await SyncService(store, StubInstaller(), resolver).sync(["not-a-descriptor"])

        assert resolver.resolved == []

    @pytest.mark.asyncio
    async def test_clear_not_persisted_when_run_fails(self, store: WatermarkStore) -> None:
        store.save({LITE: "0.5.2"})

        with pytest.raises(MalformedDescriptor):
            await SyncService(store, StubInstaller(), StubResolver({})).sync(
                ["bogus"], clear=True
            )

        assert store.load() == {LITE: "0.5.2"}


class TestChangeCallback:
    @pytest.mark.asyncio
    async def test_called_for_updated_sources_only(self, store: WatermarkStore) -> None:
        store.save({CDR: "2"})
        changes: list[SourceOutcome] = []
        resolver = StubResolver({LITE: record("1", "new uniques"), CDR: record("2")})

        await SyncService(store, StubInstaller(), resolver, on_change=changes.append).sync(
            [LITE, CDR]
        )

        assert [c.descriptor for c in changes] == [LITE]
        assert changes[0].watermark == "1"
        assert changes[0].note == "new uniques"

    @pytest.mark.asyncio
    async def test_called_after_install_before_next_source(self, store: WatermarkStore) -> None:
        events: list[str] = []

        class OrderedInstaller:
            async def install(self, download_url: str, target_directory: Path) -> int:
                events.append(f"install {download_url}")
                return 1

        resolver = StubResolver({LITE: record("1"), CDR: record("2")})
        service = SyncService(
            store,
            OrderedInstaller(),
            resolver,
            on_change=lambda outcome: events.append(f"change {outcome.descriptor}"),
        )

        await service.sync([LITE, CDR])

        assert events == [
            "install https://example.com/1.zip",
            f"change {LITE}",
            "install https://example.com/2.zip",
            f"change {CDR}",
        ]
