"""
Per-document migration chain.
"""

from typing import Any

from migrate_nosql.core import metrics
from migrate_nosql.log.logging import logger
from migrate_nosql.migrations.models import MigrateConfig, UpgradeOutcome
from migrate_nosql.migrations.resolver import VersionResolver
from migrate_nosql.migrations.steps import MigrationStepRunner


class ChainExecutor:
    """
    Brings one document from its current version to the latest version.

    Steps run strictly one after the other, each on the document produced by
    the previous step. The first failing step aborts the chain; steps that
    already completed stay persisted.
    """

    def __init__(
        self,
        resolver: VersionResolver,
        step_runner: MigrationStepRunner,
        config: MigrateConfig,
    ):
        self._resolver = resolver
        self._step_runner = step_runner
        self._config = config

    def document_version(self, document: dict[str, Any]) -> int:
        return document.get(self._config.version_field) or 0

    async def upgrade(self, document: dict[str, Any], document_id: Any) -> UpgradeOutcome:
        """
        Upgrade a document to the latest version of its type.

        Args:
            document: The document to upgrade.
            document_id: Key the document is stored under.

        Returns:
            UpgradeOutcome with the final document and the number of steps applied.

        Raises:
            MigrationError: If a migration step fails.
            PersistenceError: If saving a migrated document fails.
        """
        doc_type = document.get(self._config.type_field)
        if doc_type is None:
            return UpgradeOutcome(document=document, document_id=document_id, steps=0)

        latest = await self._resolver.resolve(doc_type)
        if latest == 0:
            return UpgradeOutcome(document=document, document_id=document_id, steps=0)

        current = self.document_version(document)
        if current >= latest:
            return UpgradeOutcome(document=document, document_id=document_id, steps=0)

        record = document
        for version in range(current + 1, latest + 1):
            record, reported = await self._step_runner.apply_step(version, record, document_id)
            if reported != version:
                logger.warning(
                    "Migration {doc_type}/{version} left {document_id} at version {reported}",
                    doc_type=doc_type,
                    version=version,
                    reported=reported,
                    document_id=document_id,
                    event_type="migration_version_mismatch",
                )

        steps = latest - current
        metrics.record_document_upgraded(doc_type)
        logger.info(
            "Upgraded {document_id} from version {current} to {latest}",
            document_id=document_id,
            doc_type=doc_type,
            current=current,
            latest=latest,
            steps=steps,
            event_type="document_upgraded",
        )
        return UpgradeOutcome(document=record, document_id=document_id, steps=steps)
