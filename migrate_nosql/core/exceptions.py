"""
Custom exception classes and structured error details.

This module provides:
- Error codes for programmatic error handling
- A structured error payload shared by every exception
- Specific exception classes for each failing stage of an upgrade
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ErrorCode:
    """Error codes for programmatic error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    CONFIGURATION_ERROR = "ERR_1001"

    # Store errors (2xxx)
    DOCUMENT_NOT_FOUND = "ERR_2001"
    PERSISTENCE_FAILED = "ERR_2002"

    # Migration errors (3xxx)
    MIGRATION_FAILED = "ERR_3001"
    MIGRATION_NOT_FOUND = "ERR_3002"

    # Batch errors (4xxx)
    FETCH_FAILED = "ERR_4001"


class ErrorResponse(BaseModel):
    """Structured error payload for logs and CLI output."""

    error: str  # Error class name
    code: str  # Error code for programmatic handling
    message: str  # Human-readable message
    context: dict[str, Any] | None = None  # Type, version, document id...
    timestamp: str  # ISO 8601 timestamp


class MigrateNoSQLError(Exception):
    """Base exception for all migration errors."""

    error_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, error_code: str | None = None, **context: Any):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.context = context

    def to_dict(self) -> dict:
        """Convert to the structured error payload."""
        return ErrorResponse(
            error=self.__class__.__name__,
            code=self.error_code,
            message=self.message,
            context={k: v for k, v in self.context.items() if v is not None} or None,
            timestamp=datetime.utcnow().isoformat() + "Z",
        ).model_dump()


class ConfigurationError(MigrateNoSQLError):
    """Raised when the migration configuration is invalid."""

    error_code = ErrorCode.CONFIGURATION_ERROR


# =============================================================================
# Store Errors
# =============================================================================


class DocumentNotFoundError(MigrateNoSQLError):
    """Raised by a document store when a key holds no document."""

    error_code = ErrorCode.DOCUMENT_NOT_FOUND

    def __init__(self, key: Any):
        super().__init__(f"Document not found: {key}", key=key)
        self.key = key


class PersistenceError(MigrateNoSQLError):
    """Raised when saving a migrated document fails."""

    error_code = ErrorCode.PERSISTENCE_FAILED

    def __init__(self, document_id: Any, version: int, detail: str):
        super().__init__(
            f"Failed to save document {document_id} at version {version}: {detail}",
            document_id=document_id,
            version=version,
        )
        self.document_id = document_id
        self.version = version


# =============================================================================
# Migration Errors
# =============================================================================


class MigrationError(MigrateNoSQLError):
    """Raised when a migration step function fails."""

    error_code = ErrorCode.MIGRATION_FAILED

    def __init__(
        self,
        doc_type: str,
        version: int,
        detail: str,
        document_id: Any = None,
    ):
        target = f" on document {document_id}" if document_id else ""
        super().__init__(
            f"Migration {doc_type}/{version} failed{target}: {detail}",
            doc_type=doc_type,
            version=version,
            document_id=document_id,
        )
        self.doc_type = doc_type
        self.version = version
        self.detail = detail
        self.document_id = document_id


class MigrationLoadError(MigrationError):
    """Raised when no migration function can be loaded for a type and version."""

    error_code = ErrorCode.MIGRATION_NOT_FOUND


# =============================================================================
# Batch Errors
# =============================================================================


class FetchError(MigrateNoSQLError):
    """Raised when the batch document fetcher fails."""

    error_code = ErrorCode.FETCH_FAILED

    def __init__(self, detail: str):
        super().__init__(f"Failed to fetch documents: {detail}")
