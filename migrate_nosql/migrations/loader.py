"""
Migration function loaders.

A loader turns a ``(doc_type, version)`` pair into the function that upgrades
a document of that type from ``version - 1`` to ``version``. Migration
functions take the document and return the new document, either directly or
as an awaitable. They signal failure by raising.
"""

import importlib.util
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from migrate_nosql.core.exceptions import ConfigurationError, MigrationLoadError
from migrate_nosql.log.logging import logger

MigrationFn = Callable[[dict[str, Any]], Any]

MIGRATION_ENTRYPOINT = "migrate"


def is_valid_type_name(doc_type: Any) -> bool:
    """Type names map to directory names: letters, digits and underscores only."""
    return isinstance(doc_type, str) and doc_type.replace("_", "").isalnum()


class MigrationLoader(ABC):
    """Abstract interface for migration function loaders."""

    @abstractmethod
    def load(self, doc_type: str, version: int) -> MigrationFn:
        """
        Load the migration function for a type and version.

        Raises:
            MigrationLoadError: If no such migration exists.
        """
        pass


class TableMigrationLoader(MigrationLoader):
    """Loads migration functions from a ``{doc_type: {version: fn}}`` table."""

    def __init__(self, table: Mapping[str, Mapping[int, MigrationFn]]):
        self._table = table

    def load(self, doc_type: str, version: int) -> MigrationFn:
        try:
            return self._table[doc_type][version]
        except KeyError:
            raise MigrationLoadError(doc_type, version, "no migration registered")


class DirectoryMigrationLoader(MigrationLoader):
    """
    Loads migration functions from Python files.

    Layout::

        <migrations_dir>/
            article/
                1.py    # def migrate(document): ...
                2.py
            comment/
                1.py

    Each file must define a ``migrate(document)`` function, sync or async.
    """

    def __init__(self, migrations_dir: str):
        self._migrations_dir = migrations_dir

    @property
    def migrations_dir(self) -> str:
        return self._migrations_dir

    def migration_path(self, doc_type: str, version: int) -> Path:
        """
        Path of the file holding migration ``version`` of a type.

        Raises:
            MigrationLoadError: If the type name is not a plain directory name.
        """
        if not is_valid_type_name(doc_type):
            raise MigrationLoadError(
                doc_type, version, f"invalid document type name: {doc_type!r}"
            )
        return Path(self._migrations_dir) / doc_type / f"{version}.py"

    def load(self, doc_type: str, version: int) -> MigrationFn:
        if not os.path.isdir(self._migrations_dir):
            raise ConfigurationError(
                f"Migrations directory not found: {self._migrations_dir}",
                migrations_path=self._migrations_dir,
            )

        file_path = self.migration_path(doc_type, version)
        if not file_path.is_file():
            raise MigrationLoadError(doc_type, version, f"file not found: {file_path}")

        try:
            spec = importlib.util.spec_from_file_location(
                f"migration_{doc_type}_{version}", str(file_path)
            )
            if spec is None or spec.loader is None:
                raise MigrationLoadError(doc_type, version, f"cannot import {file_path}")

            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except MigrationLoadError:
            raise
        except Exception as e:
            logger.error(
                "Error loading migration {doc_type}/{version}: {error}",
                doc_type=doc_type,
                version=version,
                error=str(e),
                event_type="migration_load_error",
            )
            raise MigrationLoadError(doc_type, version, str(e)) from e

        fn = getattr(module, MIGRATION_ENTRYPOINT, None)
        if not callable(fn):
            raise MigrationLoadError(
                doc_type, version, f"{file_path} has no {MIGRATION_ENTRYPOINT}() function"
            )

        logger.debug(
            "Loaded migration {doc_type}/{version}",
            doc_type=doc_type,
            version=version,
            file_path=str(file_path),
            event_type="migration_loaded",
        )
        return fn

    def latest_version(self, doc_type: str) -> int:
        """Highest consecutive version file present for a type, 0 if none."""
        if not is_valid_type_name(doc_type):
            return 0
        type_dir = Path(self._migrations_dir) / doc_type
        if not type_dir.is_dir():
            return 0

        versions = set()
        for filename in os.listdir(type_dir):
            stem, ext = os.path.splitext(filename)
            if ext == ".py" and stem.isdigit():
                versions.add(int(stem))

        latest = 0
        while latest + 1 in versions:
            latest += 1
        return latest


class MigrationRegistry:
    """
    Load-once cache of migration functions keyed by ``(doc_type, version)``.

    Each key is loaded through the loader on first reference and the same
    function instance is returned for every later lookup.
    """

    def __init__(self, loader: MigrationLoader):
        self._loader = loader
        self._functions: dict[tuple[str, int], MigrationFn] = {}

    def __len__(self) -> int:
        return len(self._functions)

    def get(self, doc_type: str, version: int) -> MigrationFn:
        key = (doc_type, version)
        fn = self._functions.get(key)
        if fn is None:
            fn = self._loader.load(doc_type, version)
            self._functions[key] = fn
        return fn
