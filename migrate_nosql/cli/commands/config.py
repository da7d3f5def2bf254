"""Configuration commands."""

import typer

from migrate_nosql.cli.output import console, print_error
from migrate_nosql.core.exceptions import ConfigurationError

app = typer.Typer(help="Configuration commands")


@app.command("show")
def show_config() -> None:
    """
    Show current migration configuration.
    """
    from migrate_nosql.core.config import settings

    try:
        config = settings.migrate_config
    except ConfigurationError as e:
        print_error(e.message)
        raise typer.Exit(1)

    console.print("[bold]Current Configuration[/bold]\n")
    console.print(f"  MongoDB:         {settings.mongodb}")
    console.print(f"  Database:        {settings.mongodb_database}")
    console.print(f"  Collection:      {settings.mongodb_collection}")
    console.print(f"  Type field:      {config.type_field}")
    console.print(f"  Version field:   {config.version_field}")
    console.print(f"  Key separator:   {config.key_separator}")
    console.print(f"  Migrations path: {config.migrations_path}")
    console.print(f"  Parallel limit:  {config.parallel_limit}")
    if config.versions is None:
        console.print("  Versions:        [dim]stored counters[/dim]")
    else:
        versions = ", ".join(f"{t}={v}" for t, v in sorted(config.versions.items()))
        console.print(f"  Versions:        {versions}")
