"""
Latest-version resolution for document types.
"""

from migrate_nosql.core.store import DocumentStore
from migrate_nosql.log.logging import logger
from migrate_nosql.migrations.models import MigrateConfig

COUNTER_FIELD = "current"


class VersionResolver:
    """
    Resolves the latest known version of a document type.

    With a static ``versions`` table the store is never consulted. Otherwise
    the version counter record of each type is read from the store once and
    cached for the lifetime of the resolver, even if the stored counter
    changes afterwards.

    Resolution never fails: a missing or unreadable counter resolves to 0,
    meaning there is nothing to migrate for that type.
    """

    def __init__(self, store: DocumentStore, config: MigrateConfig):
        self._store = store
        self._config = config
        self._cache: dict[str, int] = {}

    @property
    def cached_versions(self) -> dict[str, int]:
        return dict(self._cache)

    async def resolve(self, doc_type: str) -> int:
        """
        Get the latest version for a document type.

        Args:
            doc_type: The document type.

        Returns:
            The latest version, 0 when unknown.
        """
        if self._config.versions is not None:
            return self._config.versions.get(doc_type, 0)

        if doc_type in self._cache:
            return self._cache[doc_type]

        version = await self._read_counter(doc_type)
        # Concurrent first reads of a type all write the same value.
        self._cache[doc_type] = version
        return version

    async def _read_counter(self, doc_type: str) -> int:
        key = self._config.counter_key(doc_type)
        try:
            record = await self._store.get(key)
            version = int(record[COUNTER_FIELD])
        except Exception as e:
            logger.warning(
                "No version counter for type {doc_type}, assuming version 0",
                doc_type=doc_type,
                key=key,
                error=str(e),
                event_type="version_lookup_failed",
            )
            return 0

        logger.debug(
            "Resolved latest version {version} for type {doc_type}",
            doc_type=doc_type,
            version=version,
            event_type="version_resolved",
        )
        return version
