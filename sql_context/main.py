"""sql-context - Main entry point."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import settings
from .database.models import ConnectionDescriptor, EngineKind, FileDescriptor, NetworkDescriptor, TlsMode
from .errors import SQLContextError
from .markdown import render_markdown
from .service import check_connection, introspect

app = typer.Typer(
    name="sql-context",
    help="Describe a database schema as a markdown context document",
    add_completion=False,
)

console = Console(stderr=True)

FORMATS = ("markdown", "json")


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def build_descriptor(
    engine: str,
    host: Optional[str] = None,
    port: Optional[int] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    database: Optional[str] = None,
    schema: Optional[str] = None,
    ssl: Optional[bool] = None,
    file: Optional[str] = None,
) -> ConnectionDescriptor:
    """Build a connection descriptor from command-line options.

    Raises:
        UnsupportedEngineError: Unknown engine name
        ValidationError: Options do not fit the engine kind
    """
    kind = EngineKind.parse(engine)
    if kind.is_file_based:
        return FileDescriptor(path=str(Path(file).expanduser().resolve()) if file else "", engine=kind)

    default_port = settings.postgres_port if kind is EngineKind.POSTGRES else settings.mysql_port
    return NetworkDescriptor(
        engine=kind,
        host=host or "",
        database=database or "",
        user=user,
        password=password,
        port=port if port is not None else default_port,
        schema=schema,
        tls=TlsMode.from_flag(ssl),
        connect_timeout=settings.connect_timeout,
    )


EngineOption = typer.Option(..., "--engine", "-e", help="Database engine: postgres, mysql or sqlite")
HostOption = typer.Option(None, "--host", "-h", help="Database host (postgres/mysql)")
PortOption = typer.Option(None, "--port", "-p", help="Database port (default: engine default)")
UserOption = typer.Option(None, "--user", "-u", help="Database user")
PasswordOption = typer.Option(None, "--password", envvar="SQL_CONTEXT_PASSWORD", help="Database password (or SQL_CONTEXT_PASSWORD env)")
DatabaseOption = typer.Option(None, "--database", "-d", help="Database name (postgres/mysql)")
SchemaOption = typer.Option(None, "--schema", "-s", help="Only this schema, postgres only ('*' for all)")
SslOption = typer.Option(None, "--ssl/--no-ssl", help="Require or disable TLS (default: driver default)")
FileOption = typer.Option(None, "--file", "-f", help="Path to the SQLite database file")


@app.command("introspect")
def introspect_command(
    engine: str = EngineOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    user: Optional[str] = UserOption,
    password: Optional[str] = PasswordOption,
    database: Optional[str] = DatabaseOption,
    schema: Optional[str] = SchemaOption,
    ssl: Optional[bool] = SslOption,
    file: Optional[str] = FileOption,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the document to this file instead of stdout"),
    output_format: Optional[str] = typer.Option(None, "--format", help="Output format: markdown or json"),
):
    """
    Introspect a database and print its context document.

    Examples:

        sql-context introspect -e sqlite -f ./app.db

        sql-context introspect -e postgres -h localhost -d app -u app -s public -o context.md
    """
    fmt = (output_format or settings.output_format).lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Unknown format '{fmt}'. Choose from: {', '.join(FORMATS)}")

    try:
        descriptor = build_descriptor(engine, host, port, user, password, database, schema, ssl, file)
        snapshot = introspect(descriptor)
    except SQLContextError as e:
        console.print(f"[red]{e.code}: {e.message}[/red]")
        raise typer.Exit(1)

    if fmt == "json":
        document = json.dumps(snapshot.to_dict(), indent=2) + "\n"
    else:
        document = render_markdown(snapshot, descriptor=descriptor)

    # Written only once rendering has fully succeeded
    if output:
        output.write_text(document, encoding="utf-8")
        console.print(f"[green]Wrote {len(snapshot.tables)} tables to {output}[/green]")
    else:
        typer.echo(document, nl=False)


@app.command("probe")
def probe_command(
    engine: str = EngineOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    user: Optional[str] = UserOption,
    password: Optional[str] = PasswordOption,
    database: Optional[str] = DatabaseOption,
    ssl: Optional[bool] = SslOption,
    file: Optional[str] = FileOption,
):
    """Check that a database is reachable without reading its schema."""
    try:
        descriptor = build_descriptor(engine, host, port, user, password, database, None, ssl, file)
        result = check_connection(descriptor)
    except SQLContextError as e:
        console.print(f"[red]{e.code}: {e.message}[/red]")
        raise typer.Exit(1)

    if result.success:
        console.print(f"[green]{result.engine.value}: {result.message}[/green]")
    else:
        console.print(f"[red]{result.engine.value}: {result.error_code}: {result.message}[/red]")
        raise typer.Exit(1)


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Log level: {settings.log_level}")
    console.print(f"  Connect timeout: {settings.connect_timeout or 'driver default'}")
    console.print(f"  PostgreSQL port: {settings.postgres_port}")
    console.print(f"  MySQL port: {settings.mysql_port}")
    console.print(f"  Output format: {settings.output_format}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    sql-context - Describe a database schema as a markdown context document.

    Supports PostgreSQL, MySQL and SQLite.
    """
    _configure_logging(verbose)


if __name__ == "__main__":
    app()
