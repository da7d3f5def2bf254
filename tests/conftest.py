import asyncio

import pytest

from migrate_nosql.core.store import InMemoryDocumentStore
from migrate_nosql.migrations import MigrateConfig, Migrator, TableMigrationLoader


class StepRecorder:
    """Builds migration functions that record every call they receive."""

    def __init__(self):
        self.calls: list[tuple[str, int, int]] = []

    def step(self, doc_type: str, version: int, fail: bool = False, delay: float = 0):
        async def migrate(document):
            self.calls.append((doc_type, version, document.get("version") or 0))
            if delay:
                await asyncio.sleep(delay)
            if fail:
                raise RuntimeError(f"{doc_type} step {version} exploded")
            upgraded = dict(document)
            upgraded["version"] = version
            upgraded.setdefault("applied", [])
            upgraded["applied"] = upgraded["applied"] + [version]
            return upgraded

        return migrate

    def table(self, doc_type: str, latest: int, fail_at: int | None = None, delay: float = 0):
        return {
            doc_type: {
                v: self.step(doc_type, v, fail=(v == fail_at), delay=delay)
                for v in range(1, latest + 1)
            }
        }

    def versions_called(self, doc_type: str | None = None) -> list[int]:
        return [v for t, v, _ in self.calls if doc_type is None or t == doc_type]


@pytest.fixture
def recorder():
    """Provide a migration step recorder."""
    return StepRecorder()


@pytest.fixture
def store():
    """Provide an empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def article_migrator(store, recorder):
    """Migrator with a static table {article: 3} and recording steps."""
    config = MigrateConfig(versions={"article": 3})
    loader = TableMigrationLoader(recorder.table("article", 3))
    return Migrator(store, config, loader)


@pytest.fixture
def sample_article():
    """Provide a version 0 article document."""
    return {"type": "article", "title": "Hello", "body": "World"}
