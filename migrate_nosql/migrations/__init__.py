"""
Document migration system.

Upgrades documents of a schemaless store one version step at a time, using
externally supplied migration functions keyed by document type and version.
"""

from migrate_nosql.migrations.batch import BatchOrchestrator
from migrate_nosql.migrations.chain import ChainExecutor
from migrate_nosql.migrations.loader import (
    DirectoryMigrationLoader,
    MigrationLoader,
    MigrationRegistry,
    TableMigrationLoader,
)
from migrate_nosql.migrations.migrator import Migrator
from migrate_nosql.migrations.models import (
    BatchResult,
    FetchedDocument,
    MigrateConfig,
    UpgradeOutcome,
)
from migrate_nosql.migrations.resolver import VersionResolver
from migrate_nosql.migrations.steps import MigrationStepRunner

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "ChainExecutor",
    "DirectoryMigrationLoader",
    "FetchedDocument",
    "MigrateConfig",
    "MigrationLoader",
    "MigrationRegistry",
    "MigrationStepRunner",
    "Migrator",
    "TableMigrationLoader",
    "UpgradeOutcome",
    "VersionResolver",
]
