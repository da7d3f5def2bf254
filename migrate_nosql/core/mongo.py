"""
MongoDB document store.

Documents are keyed by ``_id``. Version counter records live in the same
collection as the documents they describe, e.g. ``{"_id": "article::version",
"current": 3}``.
"""

from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from migrate_nosql.core.config import settings
from migrate_nosql.core.exceptions import DocumentNotFoundError
from migrate_nosql.core.store import DocumentStore
from migrate_nosql.log.logging import logger


def get_client() -> AsyncIOMotorClient:
    """Create a MongoDB client from settings."""
    return AsyncIOMotorClient(
        settings.mongodb,
        maxPoolSize=settings.mongo_max_pool_size,
        connectTimeoutMS=settings.mongo_connect_timeout_ms,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        socketTimeoutMS=settings.mongo_socket_timeout_ms,
        retryWrites=True,
        retryReads=True,
    )


def get_collection(client: AsyncIOMotorClient | None = None) -> AsyncIOMotorCollection:
    """Get the configured documents collection."""
    client = client or get_client()
    return client[settings.mongodb_database][settings.mongodb_collection]


class MongoDocumentStore(DocumentStore):
    """Document store backed by a single MongoDB collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    @classmethod
    def from_settings(cls) -> "MongoDocumentStore":
        return cls(get_collection())

    async def get(self, key: Any) -> dict[str, Any]:
        doc = await self._collection.find_one({"_id": key})
        if doc is None:
            raise DocumentNotFoundError(key)
        doc.pop("_id", None)
        return doc

    async def upsert(self, key: Any, document: dict[str, Any]) -> None:
        body = {k: v for k, v in document.items() if k != "_id"}
        await self._collection.replace_one({"_id": key}, body, upsert=True)

    async def find_key(self, key: str) -> Any:
        """
        Resolve an id typed as text to the stored ``_id``.

        The string itself wins when a document is stored under it; otherwise a
        valid ObjectId hex string is converted.
        """
        if await self._collection.find_one({"_id": key}, {"_id": 1}) is not None:
            return key
        if ObjectId.is_valid(key):
            return ObjectId(key)
        return key

    async def fetch_by_type(self, doc_type: str, type_field: str = "type") -> list[dict]:
        """
        List every document of a type as ``{"id", "doc"}`` pairs.

        ``id`` is the stored ``_id`` as is (an ObjectId stays an ObjectId), so
        upserts land on the same document.

        Raises:
            PyMongoError: If the query fails.
        """
        docs = []
        try:
            async for doc in self._collection.find({type_field: doc_type}):
                docs.append({"id": doc.pop("_id"), "doc": doc})
        except PyMongoError as e:
            logger.error(
                "Failed to list documents of type {doc_type}: {error}",
                doc_type=doc_type,
                error=str(e),
                event_type="fetch_failed",
            )
            raise

        logger.debug(
            "Fetched {count} documents of type {doc_type}",
            count=len(docs),
            doc_type=doc_type,
            event_type="documents_fetched",
        )
        return docs
