"""
Migration CLI commands for upgrading documents.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from migrate_nosql.cli.output import (
    console,
    print_batch_result,
    print_error,
    print_info,
    print_json,
    print_success,
)
from migrate_nosql.core.exceptions import MigrateNoSQLError

app = typer.Typer(help="Document migration commands")


def get_store():
    """Get the MongoDB document store."""
    from migrate_nosql.core.mongo import MongoDocumentStore

    return MongoDocumentStore.from_settings()


def get_migrator(store=None, parallel_limit: int | None = None):
    """Get a migrator configured from settings."""
    from migrate_nosql.core.config import settings
    from migrate_nosql.migrations import Migrator

    config = settings.migrate_config
    if parallel_limit is not None:
        config = config.model_copy(update={"parallel_limit": parallel_limit})
    return Migrator(store or get_store(), config)


def _fail(action: str, e: Exception) -> None:
    if isinstance(e, MigrateNoSQLError):
        print_error(f"{action}: {e.message}", e.context or None)
    else:
        print_error(f"{action}: {e}")
    raise typer.Exit(1)


@app.command("version")
def version(
    doc_type: Annotated[str, typer.Argument(help="Document type")],
) -> None:
    """Show the latest version of a document type."""

    async def _version():
        migrator = get_migrator()
        return await migrator.get_current_version({migrator.config.type_field: doc_type})

    try:
        latest = asyncio.run(_version())
    except Exception as e:
        _fail("Failed to resolve version", e)

    console.print(f"Latest version of [bold]{doc_type}[/bold]: [cyan]{latest}[/cyan]")


@app.command("upgrade")
def upgrade(
    document_id: Annotated[str, typer.Argument(help="Id of the document to upgrade")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the upgraded document as JSON"),
    ] = False,
) -> None:
    """Upgrade one document to the latest version of its type."""

    async def _upgrade():
        store = get_store()
        key = await store.find_key(document_id)
        return await get_migrator(store).upgrade_by_id(key)

    try:
        outcome = asyncio.run(_upgrade())
    except Exception as e:
        _fail("Upgrade failed", e)

    if as_json:
        print_json({"id": outcome.document_id, "steps": outcome.steps, "doc": outcome.document})
    elif outcome.upgraded:
        print_success(f"Applied {outcome.steps} migration(s) to {document_id}")
    else:
        print_info(f"{document_id} is already up to date.")


@app.command("batch")
def batch(
    doc_type: Annotated[str, typer.Option("--type", "-t", help="Document type to upgrade")],
    parallel: Annotated[
        Optional[int],
        typer.Option("--parallel", "-p", min=1, help="Maximum concurrent upgrades"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the summary as JSON"),
    ] = False,
) -> None:
    """Upgrade every document of a type."""

    async def _batch():
        store = get_store()
        migrator = get_migrator(store, parallel_limit=parallel)
        type_field = migrator.config.type_field
        return await migrator.batch(lambda: store.fetch_by_type(doc_type, type_field))

    try:
        result = asyncio.run(_batch())
    except Exception as e:
        _fail("Batch failed", e)

    if as_json:
        print_json(result.to_dict())
    else:
        print_batch_result(result.to_dict())


MIGRATION_TEMPLATE = '''"""
Migration: {doc_type} version {version}
Created: {created}
"""


def migrate(document: dict) -> dict:
    """Upgrade a {doc_type} document from version {previous} to {version}."""
    document = dict(document)
    # Transform the document here.
    document["{version_field}"] = {version}
    return document
'''


@app.command("create")
def create(
    doc_type: Annotated[str, typer.Argument(help="Document type (use_underscores)")],
    bump: Annotated[
        bool,
        typer.Option("--bump", "-b", help="Also set the stored latest version to the new one"),
    ] = False,
) -> None:
    """Create the next migration file for a document type."""
    from migrate_nosql.migrations.loader import DirectoryMigrationLoader, is_valid_type_name

    if not is_valid_type_name(doc_type):
        print_error("Document type must be alphanumeric with underscores only")
        raise typer.Exit(1)

    from migrate_nosql.core.config import settings

    try:
        config = settings.migrate_config
    except MigrateNoSQLError as e:
        _fail("Invalid configuration", e)
    loader = DirectoryMigrationLoader(config.migrations_path)
    next_version = loader.latest_version(doc_type) + 1

    filepath: Path = loader.migration_path(doc_type, next_version)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(
        MIGRATION_TEMPLATE.format(
            doc_type=doc_type,
            version=next_version,
            previous=next_version - 1,
            version_field=config.version_field,
            created=datetime.now().strftime("%Y-%m-%d"),
        )
    )
    print_success(f"Created migration file: {filepath}")

    if bump:
        try:
            asyncio.run(get_migrator().set_latest_version(doc_type, next_version))
        except Exception as e:
            _fail("Failed to update the version counter", e)
        print_success(f"Latest version of {doc_type} set to {next_version}")
