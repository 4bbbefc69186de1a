"""Import command - load a graph document into a metadata store."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from lineage_context.cli.common import (
    DatabaseOption,
    VerboseOption,
    console,
    database_url,
    setup_logging,
    sqlite_file,
)


def load(
    graph_file: Annotated[
        Path,
        typer.Argument(
            help="YAML graph document",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    database: DatabaseOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Import a graph document into a metadata store.

    The store is created if missing. Entities and relationships with the
    same GUID are replaced.

    Examples:

        lineage-context import graphs/warehouse.yaml

        lineage-context import graphs/warehouse.yaml --database ./store.db
    """
    from lineage_context.metadata import load_graph_document
    from lineage_context.metadata.loader import GraphDocumentError
    from lineage_context.storage import SqlMetadataRepository, create_session_factory

    setup_logging(verbose)

    try:
        document = load_graph_document(graph_file)
    except GraphDocumentError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    url = database_url(database)
    path = sqlite_file(url)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)

    session_factory = create_session_factory(url)
    with session_factory() as session:
        SqlMetadataRepository(session).load_document(document)
        session.commit()

    console.print(
        f"[green]Imported {len(document.entities)} entities and "
        f"{len(document.relationships)} relationships into {escape(str(path or url))}[/green]"
    )
