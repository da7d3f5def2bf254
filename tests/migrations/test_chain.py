"""Tests for ChainExecutor."""

import pytest

from migrate_nosql.core.exceptions import MigrationError, PersistenceError
from migrate_nosql.core.store import InMemoryDocumentStore
from migrate_nosql.migrations.chain import ChainExecutor
from migrate_nosql.migrations.loader import MigrationRegistry, TableMigrationLoader
from migrate_nosql.migrations.models import MigrateConfig
from migrate_nosql.migrations.resolver import VersionResolver
from migrate_nosql.migrations.steps import MigrationStepRunner


def make_chain(store, table, config):
    registry = MigrationRegistry(TableMigrationLoader(table))
    return ChainExecutor(
        VersionResolver(store, config),
        MigrationStepRunner(store, registry, config),
        config,
    )


class EventLogStore(InMemoryDocumentStore):
    """In-memory store that records writes into a shared event log."""

    def __init__(self, events: list):
        super().__init__()
        self.events = events

    async def upsert(self, key, document):
        self.events.append(("saved", document.get("version")))
        await super().upsert(key, document)


class TestNoOp:
    """Tests for documents with nothing to do."""

    @pytest.mark.asyncio
    async def test_at_latest_version(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 1), MigrateConfig(versions={"article": 1}))
        doc = {"type": "article", "version": 1}

        outcome = await chain.upgrade(doc, "a1")

        assert outcome.document is doc
        assert outcome.steps == 0
        assert recorder.calls == []
        assert store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_above_latest_version(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 2), MigrateConfig(versions={"article": 2}))
        doc = {"type": "article", "version": 5}

        outcome = await chain.upgrade(doc, "a1")

        assert outcome.document is doc
        assert outcome.steps == 0
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_unknown_type_in_store(self, store, recorder):
        """No stored counter for a type means nothing to migrate, whatever the document says."""
        chain = make_chain(store, recorder.table("comment", 3), MigrateConfig())
        doc = {"type": "comment", "version": -1}

        outcome = await chain.upgrade(doc, "c1")

        assert outcome.document is doc
        assert outcome.steps == 0
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_missing_type_field(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 1), MigrateConfig(versions={"article": 1}))
        doc = {"title": "untyped"}

        outcome = await chain.upgrade(doc, "x1")

        assert outcome.steps == 0
        assert outcome.document is doc


class TestChain:
    """Tests for multi-step upgrades."""

    @pytest.mark.asyncio
    async def test_single_step_scenario(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 1), MigrateConfig(versions={"article": 1}))

        outcome = await chain.upgrade({"type": "article", "version": 0}, "a1")

        assert recorder.versions_called() == [1]
        assert outcome.document["version"] == 1
        assert outcome.steps == 1

    @pytest.mark.asyncio
    async def test_missing_version_counts_as_zero(self, store, recorder, sample_article):
        chain = make_chain(store, recorder.table("article", 3), MigrateConfig(versions={"article": 3}))

        outcome = await chain.upgrade(sample_article, "a1")

        assert recorder.versions_called() == [1, 2, 3]
        assert outcome.steps == 3

    @pytest.mark.asyncio
    async def test_null_version_counts_as_zero(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 2), MigrateConfig(versions={"article": 2}))

        outcome = await chain.upgrade({"type": "article", "version": None}, "a1")

        assert outcome.steps == 2

    @pytest.mark.asyncio
    async def test_steps_run_in_order_from_current(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 5), MigrateConfig(versions={"article": 5}))

        outcome = await chain.upgrade({"type": "article", "version": 2}, "a1")

        assert recorder.versions_called() == [3, 4, 5]
        assert outcome.steps == 3
        assert outcome.document["applied"] == [3, 4, 5]

    @pytest.mark.asyncio
    async def test_each_step_sees_previous_output(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 3), MigrateConfig(versions={"article": 3}))

        await chain.upgrade({"type": "article"}, "a1")

        # (type, step, version of the document the step received)
        assert recorder.calls == [("article", 1, 0), ("article", 2, 1), ("article", 3, 2)]

    @pytest.mark.asyncio
    async def test_each_step_saved_before_next(self, recorder):
        events = []
        store = EventLogStore(events)

        def step(version):
            def migrate(document):
                events.append(("step", version))
                return {**document, "version": version}

            return migrate

        table = {"article": {v: step(v) for v in (1, 2, 3)}}
        chain = make_chain(store, table, MigrateConfig(versions={"article": 3}))

        await chain.upgrade({"type": "article"}, "a1")

        assert events == [
            ("step", 1),
            ("saved", 1),
            ("step", 2),
            ("saved", 2),
            ("step", 3),
            ("saved", 3),
        ]

    @pytest.mark.asyncio
    async def test_final_document_stored(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 2), MigrateConfig(versions={"article": 2}))

        outcome = await chain.upgrade({"type": "article", "title": "t"}, "a1")

        assert await store.get("a1") == outcome.document

    @pytest.mark.asyncio
    async def test_rerun_is_noop(self, store, recorder):
        chain = make_chain(store, recorder.table("article", 2), MigrateConfig(versions={"article": 2}))

        first = await chain.upgrade({"type": "article"}, "a1")
        second = await chain.upgrade(first.document, "a1")

        assert second.steps == 0
        assert second.document is first.document
        assert recorder.versions_called() == [1, 2]

    @pytest.mark.asyncio
    async def test_stored_latest_version(self, recorder):
        store = InMemoryDocumentStore({"article::version": {"current": 2}})
        chain = make_chain(store, recorder.table("article", 2), MigrateConfig())

        outcome = await chain.upgrade({"type": "article"}, "a1")

        assert outcome.steps == 2
        assert (await store.get("a1"))["version"] == 2

    @pytest.mark.asyncio
    async def test_version_mismatch_keeps_step_numbering(self, store):
        """A step that reports an unexpected version does not change which steps run."""
        calls = []

        def step(version):
            def migrate(document):
                calls.append(version)
                return {**document, "version": 99}

            return migrate

        table = {"article": {1: step(1), 2: step(2)}}
        chain = make_chain(store, table, MigrateConfig(versions={"article": 2}))

        outcome = await chain.upgrade({"type": "article"}, "a1")

        assert calls == [1, 2]
        assert outcome.steps == 2


class TestChainFailures:
    """Tests for chain aborts."""

    @pytest.mark.asyncio
    async def test_failure_stops_chain(self, store, recorder):
        chain = make_chain(
            store, recorder.table("article", 4, fail_at=2), MigrateConfig(versions={"article": 4})
        )

        with pytest.raises(MigrationError) as exc_info:
            await chain.upgrade({"type": "article"}, "a1")

        assert exc_info.value.version == 2
        assert recorder.versions_called() == [1, 2]

    @pytest.mark.asyncio
    async def test_completed_steps_stay_persisted(self, store, recorder):
        chain = make_chain(
            store, recorder.table("article", 4, fail_at=3), MigrateConfig(versions={"article": 4})
        )

        with pytest.raises(MigrationError):
            await chain.upgrade({"type": "article"}, "a1")

        saved = await store.get("a1")
        assert saved["version"] == 2
        assert saved["applied"] == [1, 2]

    @pytest.mark.asyncio
    async def test_persistence_failure_stops_chain(self, recorder):
        class FailingStore(InMemoryDocumentStore):
            async def upsert(self, key, document):
                if document.get("version") == 2:
                    raise ConnectionError("disk full")
                await super().upsert(key, document)

        store = FailingStore()
        chain = make_chain(store, recorder.table("article", 3), MigrateConfig(versions={"article": 3}))

        with pytest.raises(PersistenceError) as exc_info:
            await chain.upgrade({"type": "article"}, "a1")

        assert exc_info.value.version == 2
        assert recorder.versions_called() == [1, 2]
        assert (await store.get("a1"))["version"] == 1
