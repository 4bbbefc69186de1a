"""Shared CLI utilities and constants."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from sqlalchemy.engine import make_url

from lineage_context.core.config import get_settings
from lineage_context.core.logging import configure_logging
from lineage_context.metadata.repository import MetadataRepository

# Load .env file from current directory (LINEAGE_CONTEXT_* settings)
load_dotenv()

# Shared console instance
console = Console()

# Common type aliases for typer options
GraphFileOption = Annotated[
    Path | None,
    typer.Option(
        "--graph",
        "-g",
        help="YAML graph document to read instead of a metadata store",
        exists=True,
        dir_okay=False,
        file_okay=True,
        resolve_path=True,
    ),
]

DatabaseOption = Annotated[
    Path | None,
    typer.Option(
        "--database",
        "-d",
        help="SQLite metadata store (overrides LINEAGE_CONTEXT_DATABASE_URL)",
        dir_okay=False,
        resolve_path=True,
    ),
]

UserOption = Annotated[
    str,
    typer.Option(
        "--user",
        "-u",
        help="User id passed to the metadata repository",
    ),
]

JsonFlag = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output as JSON for scripting",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]


def setup_logging(verbosity: int = 0, log_format: str | None = None) -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=configured level (LINEAGE_CONTEXT_LOG_LEVEL), 1=INFO, 2+=DEBUG
        log_format: "console" for development, "json" for services;
            defaults to LINEAGE_CONTEXT_LOG_FORMAT
    """
    settings = get_settings()
    log_format = log_format or settings.log_format

    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = settings.log_level

    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )


def sqlite_url(database: Path) -> str:
    return f"sqlite:///{database}"


def database_url(database: Path | None) -> str:
    """URL of the metadata store: ``--database`` if given, else LINEAGE_CONTEXT_DATABASE_URL."""
    if database is not None:
        return sqlite_url(database)
    return get_settings().database_url


def sqlite_file(url: str) -> Path | None:
    """Path of the database file behind a SQLite URL, None for other stores."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or parsed.database in (None, "", ":memory:"):
        return None
    return Path(parsed.database)


@contextmanager
def open_repository(
    graph_file: Path | None, database: Path | None
) -> Generator[MetadataRepository, None, None]:
    """Open the repository named on the command line.

    ``--graph`` and ``--database`` are mutually exclusive; with neither, the
    configured metadata store is opened.
    """
    from lineage_context.metadata import InMemoryMetadataRepository, load_graph_document
    from lineage_context.metadata.loader import GraphDocumentError
    from lineage_context.storage import SqlMetadataRepository, create_session_factory

    if graph_file is not None and database is not None:
        console.print("[red]Pass only one of --graph or --database[/red]")
        raise typer.Exit(2)

    if graph_file is not None:
        try:
            document = load_graph_document(graph_file)
        except GraphDocumentError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1) from e
        yield InMemoryMetadataRepository.from_document(document)
        return

    url = database_url(database)
    path = sqlite_file(url)
    if path is not None and not path.exists():
        console.print(f"[red]No metadata store found at {escape(str(path))}[/red]")
        raise typer.Exit(1)

    session_factory = create_session_factory(url)
    with session_factory() as session:
        yield SqlMetadataRepository(session)
