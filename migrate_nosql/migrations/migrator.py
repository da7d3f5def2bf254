"""
Migration service: one configuration, one store, and the caches they share.
"""

from typing import Any

from migrate_nosql.core.exceptions import ConfigurationError
from migrate_nosql.core.store import DocumentStore
from migrate_nosql.log.logging import logger
from migrate_nosql.migrations.batch import BatchOrchestrator, Fetcher
from migrate_nosql.migrations.chain import ChainExecutor
from migrate_nosql.migrations.loader import (
    DirectoryMigrationLoader,
    MigrationLoader,
    MigrationRegistry,
)
from migrate_nosql.migrations.models import BatchResult, MigrateConfig, UpgradeOutcome
from migrate_nosql.migrations.resolver import COUNTER_FIELD, VersionResolver
from migrate_nosql.migrations.steps import MigrationStepRunner


class Migrator:
    """
    Upgrades documents to the latest version of their type.

    A Migrator is meant to live as long as the process: the latest version of
    each type and every loaded migration function are cached on first use and
    never refreshed.

    Example:
        ```python
        migrator = Migrator(store, MigrateConfig(versions={"article": 1}))
        outcome = await migrator.upgrade(doc, "article::42")
        summary = await migrator.batch(lambda: store.fetch_by_type("article"))
        ```
    """

    def __init__(
        self,
        store: DocumentStore,
        config: MigrateConfig | None = None,
        loader: MigrationLoader | None = None,
    ):
        self._config = config or MigrateConfig()
        self._store = store
        self._loader = loader or DirectoryMigrationLoader(self._config.migrations_path)

        self._resolver = VersionResolver(store, self._config)
        self._registry = MigrationRegistry(self._loader)
        self._step_runner = MigrationStepRunner(store, self._registry, self._config)
        self._chain = ChainExecutor(self._resolver, self._step_runner, self._config)
        try:
            self._batch = BatchOrchestrator(self._chain, self._config.parallel_limit)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        logger.debug(
            "Migrator initialized",
            event_type="migrator_initialized",
            static_versions=self._config.versions is not None,
            parallel_limit=self._config.parallel_limit,
        )

    @property
    def config(self) -> MigrateConfig:
        return self._config

    @property
    def loader(self) -> MigrationLoader:
        return self._loader

    async def get_current_version(self, document: dict[str, Any]) -> int:
        """Latest version for the type of ``document``, 0 when unknown."""
        return await self._resolver.resolve(document.get(self._config.type_field))

    async def upgrade(self, document: dict[str, Any], document_id: Any) -> UpgradeOutcome:
        """Upgrade one document. See ChainExecutor.upgrade."""
        return await self._chain.upgrade(document, document_id)

    async def upgrade_by_id(self, document_id: Any) -> UpgradeOutcome:
        """
        Load a document from the store and upgrade it.

        Raises:
            DocumentNotFoundError: If no document is stored under ``document_id``.
        """
        document = await self._store.get(document_id)
        return await self.upgrade(document, document_id)

    async def batch(self, fetch: Fetcher) -> BatchResult:
        """Upgrade every document returned by ``fetch``. See BatchOrchestrator.run_batch."""
        return await self._batch.run_batch(fetch)

    async def set_latest_version(self, doc_type: str, version: int) -> None:
        """
        Write the version counter record of a type.

        Already-cached versions are left as they are; the new value is seen by
        Migrators created afterwards.
        """
        if self._config.versions is not None:
            raise ConfigurationError(
                "Latest versions come from the static versions table, not the store"
            )
        key = self._config.counter_key(doc_type)
        await self._store.upsert(key, {COUNTER_FIELD: version})
        logger.info(
            "Set latest version of {doc_type} to {version}",
            doc_type=doc_type,
            version=version,
            key=key,
            event_type="version_counter_updated",
        )
