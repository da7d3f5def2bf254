"""
Prometheus metrics for migration monitoring.

This module provides metrics collection for:
- Migration steps applied and failed
- Documents upgraded
- Batch run duration
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Step Metrics
# =============================================================================

MIGRATION_STEPS_APPLIED = Counter(
    "migration_steps_applied_total",
    "Total number of migration steps applied and persisted",
    ["doc_type"],
)

MIGRATION_STEP_FAILURES = Counter(
    "migration_step_failures_total",
    "Total number of migration steps that failed",
    ["doc_type", "stage"],  # load, migrate, persist
)


# =============================================================================
# Document Metrics
# =============================================================================

DOCUMENTS_UPGRADED = Counter(
    "documents_upgraded_total",
    "Total number of documents upgraded by at least one step",
    ["doc_type"],
)


# =============================================================================
# Batch Metrics
# =============================================================================

BATCH_DURATION = Histogram(
    "migration_batch_duration_seconds",
    "Time taken to run a migration batch",
    ["status"],  # success, failed
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 900.0),
)


def record_step_applied(doc_type: str) -> None:
    MIGRATION_STEPS_APPLIED.labels(doc_type=doc_type).inc()


def record_step_failure(doc_type: str, stage: str) -> None:
    MIGRATION_STEP_FAILURES.labels(doc_type=doc_type, stage=stage).inc()


def record_document_upgraded(doc_type: str) -> None:
    DOCUMENTS_UPGRADED.labels(doc_type=doc_type).inc()


def record_batch_duration(seconds: float, status: str) -> None:
    BATCH_DURATION.labels(status=status).observe(seconds)
