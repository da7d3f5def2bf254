"""CLI entry point for document migrations."""

from typing import Annotated, Optional

import typer
from rich.console import Console

from migrate_nosql import __version__
from migrate_nosql.cli.commands import config, migrate

# Create main app
app = typer.Typer(
    name="migrate-nosql",
    help="Upgrade documents to the latest schema version of their type",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register sub-commands
app.add_typer(migrate.app, name="migrate", help="Document migration commands")
app.add_typer(config.app, name="config", help="Configuration commands")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"migrate-nosql version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    migrations_path: Annotated[
        Optional[str],
        typer.Option("--migrations-path", "-m", envvar="MIGRATIONS_PATH", help="Migrations directory"),
    ] = None,
    versions: Annotated[
        Optional[str],
        typer.Option("--versions", envvar="VERSIONS", help="Static versions, e.g. article:1,comment:3"),
    ] = None,
) -> None:
    """
    Document migration CLI.

    [bold]Quick Start:[/bold]

        # Scaffold the next migration of a type
        migrate-nosql migrate create article --bump

        # Show the latest version of a type
        migrate-nosql migrate version article

        # Upgrade a single document
        migrate-nosql migrate upgrade article::42

        # Upgrade every document of a type, 4 at a time
        migrate-nosql migrate batch --type article --parallel 4

    [bold]Environment Variables:[/bold]

        MONGODB, MONGODB_DATABASE, MONGODB_COLLECTION - Document store
        MIGRATIONS_PATH - Migrations directory
        VERSIONS        - Static latest versions (disables stored counters)
        PARALLEL_LIMIT  - Default batch concurrency
    """
    # Override settings with CLI options
    from migrate_nosql.core.config import settings

    if migrations_path:
        settings.migrations_path = migrations_path
    if versions:
        import os

        os.environ["VERSIONS"] = versions


if __name__ == "__main__":
    app()
