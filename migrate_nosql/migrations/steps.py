"""
Single migration step: run one migration function and persist its output.
"""

import inspect
import time
from collections.abc import Mapping
from typing import Any

from migrate_nosql.core import metrics
from migrate_nosql.core.exceptions import MigrationError, MigrationLoadError, PersistenceError
from migrate_nosql.core.store import DocumentStore
from migrate_nosql.log.logging import logger
from migrate_nosql.migrations.loader import MigrationRegistry
from migrate_nosql.migrations.models import MigrateConfig


class MigrationStepRunner:
    """
    Applies one version step to one document.

    The transformed document is saved before the step reports success, so a
    following step never starts from data that has not been written.
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: MigrationRegistry,
        config: MigrateConfig,
    ):
        self._store = store
        self._registry = registry
        self._config = config

    async def apply_step(
        self, version: int, document: dict[str, Any], document_id: Any
    ) -> tuple[dict[str, Any], int]:
        """
        Run migration ``version`` on a document and save the result.

        Args:
            version: The migration version to apply.
            document: The document at ``version - 1``.
            document_id: Key the document is stored under.

        Returns:
            The new document and its declared version.

        Raises:
            MigrationLoadError: If the migration function cannot be loaded.
            MigrationError: If the migration function fails.
            PersistenceError: If saving the new document fails.
            ConfigurationError: If the migrations directory does not exist.
        """
        doc_type = document.get(self._config.type_field)

        try:
            fn = self._registry.get(doc_type, version)
        except MigrationLoadError as e:
            metrics.record_step_failure(doc_type, "load")
            raise MigrationLoadError(doc_type, version, e.detail, document_id=document_id) from e

        start_time = time.time()
        try:
            new_document = fn(document)
            if inspect.isawaitable(new_document):
                new_document = await new_document
        except Exception as e:
            metrics.record_step_failure(doc_type, "migrate")
            logger.error(
                "Migration {doc_type}/{version} failed on {document_id}: {error}",
                doc_type=doc_type,
                version=version,
                document_id=document_id,
                error=str(e),
                event_type="migration_step_failed",
            )
            raise MigrationError(doc_type, version, str(e), document_id=document_id) from e

        if not isinstance(new_document, Mapping):
            metrics.record_step_failure(doc_type, "migrate")
            raise MigrationError(
                doc_type,
                version,
                f"expected a document, got {type(new_document).__name__}",
                document_id=document_id,
            )
        new_document = dict(new_document)

        try:
            await self._store.upsert(document_id, new_document)
        except Exception as e:
            metrics.record_step_failure(doc_type, "persist")
            logger.error(
                "Failed to save {document_id} after migration {doc_type}/{version}: {error}",
                doc_type=doc_type,
                version=version,
                document_id=document_id,
                error=str(e),
                event_type="migration_persist_failed",
            )
            raise PersistenceError(document_id, version, str(e)) from e

        metrics.record_step_applied(doc_type)
        new_version = new_document.get(self._config.version_field)
        if new_version is None:
            new_version = version

        logger.debug(
            "Applied migration {doc_type}/{version} to {document_id}",
            doc_type=doc_type,
            version=version,
            document_id=document_id,
            execution_time_ms=int((time.time() - start_time) * 1000),
            event_type="migration_step_applied",
        )
        return new_document, new_version
