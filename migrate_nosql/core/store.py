"""
Document store interface and in-memory implementation.

The migration core only needs two operations from a store: fetch a document
by key and overwrite a document by key.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any

from migrate_nosql.core.exceptions import DocumentNotFoundError


class DocumentStore(ABC):
    """Abstract interface for document store implementations."""

    @abstractmethod
    async def get(self, key: Any) -> dict[str, Any]:
        """
        Get a document by key.

        Raises:
            DocumentNotFoundError: If no document is stored under ``key``.
        """
        pass

    @abstractmethod
    async def upsert(self, key: Any, document: dict[str, Any]) -> None:
        """Store ``document`` under ``key``, replacing any existing document."""
        pass


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Documents are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        self._documents: dict[str, dict[str, Any]] = {
            key: copy.deepcopy(doc) for key, doc in (documents or {}).items()
        }

    async def get(self, key: Any) -> dict[str, Any]:
        if key not in self._documents:
            raise DocumentNotFoundError(key)
        return copy.deepcopy(self._documents[key])

    async def upsert(self, key: Any, document: dict[str, Any]) -> None:
        self._documents[key] = copy.deepcopy(document)

    async def fetch_by_type(self, doc_type: str, type_field: str = "type") -> list[dict]:
        """List ``{"id", "doc"}`` pairs for every document of a type."""
        return [
            {"id": key, "doc": copy.deepcopy(doc)}
            for key, doc in self._documents.items()
            if doc.get(type_field) == doc_type
        ]

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Copy of every stored document, keyed by id."""
        return copy.deepcopy(self._documents)
