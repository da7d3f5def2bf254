"""
Migration data models and configuration.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, field_validator

from migrate_nosql.core.exceptions import ConfigurationError


class MigrateConfig(BaseModel):
    """
    Options controlling how documents are typed, versioned and migrated.

    Attributes:
        type_field: Document field holding the document type.
        version_field: Document field holding the version number.
        key_separator: Separator used to build version counter keys.
        migrations_path: Root directory of file-based migration functions.
        parallel_limit: Maximum number of concurrent upgrades in batch mode.
        versions: Optional static table of latest versions per type. When set,
            version counters are never read from the store.
    """

    type_field: str = "type"
    version_field: str = "version"
    key_separator: str = "::"
    migrations_path: str = "migrations"
    parallel_limit: int = 8
    versions: dict[str, int] | None = None

    @field_validator("parallel_limit")
    @classmethod
    def check_parallel_limit(cls, value: int) -> int:
        if value < 1:
            raise ConfigurationError(f"parallel_limit must be at least 1, got {value}")
        return value

    def counter_key(self, doc_type: str) -> str:
        """Key of the version counter record for a document type."""
        return f"{doc_type}{self.key_separator}{self.version_field}"


@dataclass
class UpgradeOutcome:
    """
    Result of upgrading one document.

    Attributes:
        document: The document after the last applied step (unchanged on no-op).
        document_id: Key the document is stored under.
        steps: Number of migration steps applied.
    """

    document: dict[str, Any]
    document_id: Any
    steps: int = 0

    @property
    def upgraded(self) -> bool:
        return self.steps > 0


@dataclass
class FetchedDocument:
    """A document returned by a batch fetcher, with the key it is stored under."""

    id: Any
    doc: dict[str, Any]

    @classmethod
    def from_dict(cls, data: Any) -> "FetchedDocument":
        """Accept either a FetchedDocument or an ``{"id": ..., "doc": ...}`` mapping."""
        if isinstance(data, cls):
            return data
        return cls(id=data["id"], doc=data["doc"])


@dataclass
class BatchResult:
    """
    Aggregate over a batch run.

    Attributes:
        handled: Number of documents processed.
        upgraded: Number of documents with at least one step applied.
        total: Total number of steps applied across all documents.
        duration_ms: Wall time of the run.
    """

    handled: int = 0
    upgraded: int = 0
    total: int = 0
    duration_ms: int = 0
    outcomes: list[UpgradeOutcome] = field(default_factory=list, repr=False)

    @classmethod
    def from_outcomes(cls, outcomes: list[UpgradeOutcome], duration_ms: int = 0) -> "BatchResult":
        return cls(
            handled=len(outcomes),
            upgraded=sum(1 for o in outcomes if o.upgraded),
            total=sum(o.steps for o in outcomes),
            duration_ms=duration_ms,
            outcomes=outcomes,
        )

    def to_dict(self) -> dict:
        """Convert to the summary dictionary."""
        return {
            "handled": self.handled,
            "upgraded": self.upgraded,
            "total": self.total,
            "duration_ms": self.duration_ms,
        }
