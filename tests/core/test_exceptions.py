"""Tests for migration exceptions."""

from migrate_nosql.core.exceptions import (
    ErrorCode,
    FetchError,
    MigrateNoSQLError,
    MigrationError,
    MigrationLoadError,
    PersistenceError,
)


class TestExceptions:
    """Tests for structured exceptions."""

    def test_migration_error_message(self):
        error = MigrationError("article", 2, "bad field", document_id="a1")

        assert str(error) == "Migration article/2 failed on document a1: bad field"
        assert error.error_code == ErrorCode.MIGRATION_FAILED

    def test_load_error_code(self):
        error = MigrationLoadError("article", 2, "file not found")

        assert isinstance(error, MigrationError)
        assert error.error_code == ErrorCode.MIGRATION_NOT_FOUND
        assert str(error) == "Migration article/2 failed: file not found"

    def test_to_dict(self):
        error = PersistenceError("a1", 3, "timeout")

        data = error.to_dict()

        assert data["error"] == "PersistenceError"
        assert data["code"] == ErrorCode.PERSISTENCE_FAILED
        assert data["context"] == {"document_id": "a1", "version": 3}
        assert data["timestamp"].endswith("Z")

    def test_to_dict_drops_empty_context(self):
        data = FetchError("view missing").to_dict()

        assert data["context"] is None
        assert data["message"] == "Failed to fetch documents: view missing"

    def test_all_errors_share_base(self):
        for error in (
            MigrationError("a", 1, "x"),
            PersistenceError("a1", 1, "x"),
            FetchError("x"),
        ):
            assert isinstance(error, MigrateNoSQLError)
