"""Context command - print the lineage context of a schema element."""

from __future__ import annotations

import json
from typing import Annotated, Any

import typer
from rich.markup import escape
from rich.table import Table as RichTable

from lineage_context.cli.common import (
    DatabaseOption,
    GraphFileOption,
    JsonFlag,
    UserOption,
    VerboseOption,
    console,
    open_repository,
    setup_logging,
)
from lineage_context.metadata.models import ContextMap, GraphContext


def context(
    guid: Annotated[str, typer.Argument(help="GUID of the schema element")],
    type_name: Annotated[
        str,
        typer.Option("--type", "-t", help="Type of the schema element"),
    ] = "TabularColumn",
    graph_file: GraphFileOption = None,
    database: DatabaseOption = None,
    user: UserOption = "lineage-cli",
    legacy: Annotated[
        bool,
        typer.Option(
            "--legacy",
            help="Build the single accumulated asset graph instead of the two context sets",
        ),
    ] = False,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Show the column and asset context of a schema element.

    Examples:

        lineage-context context col-1 --graph graphs/warehouse.yaml

        lineage-context context col-7 --type RelationalColumn --database ./store.db --json
    """
    from lineage_context.core.errors import LineageContextError
    from lineage_context.lineage import ContextAssembler

    setup_logging(verbose)

    with open_repository(graph_file, database) as repository:
        assembler = ContextAssembler.from_settings(repository)
        try:
            entity = assembler.get_entity_by_type_and_guid(user, guid, type_name)
        except LineageContextError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1) from e

        if legacy:
            try:
                asset_context = assembler.build_asset_context(user, entity)
            except LineageContextError as e:
                console.print(f"[red]{escape(str(e))}[/red]")
                raise typer.Exit(1) from e
            result_map: ContextMap = {"asset-graph": asset_context.graph_contexts}
        else:
            result = assembler.build_context(user, entity)
            if not result.success:
                kind = result.kind.value if result.kind else "error"
                console.print(f"[red]{kind}: {escape(result.error or '')}[/red]")
                raise typer.Exit(1)
            result_map = result.unwrap()

    if json_output:
        typer.echo(json.dumps(_to_json(result_map), indent=2))
        return

    if not result_map:
        console.print(f"[yellow]No context found for {escape(guid)}[/yellow]")
        return

    for category, edges in result_map.items():
        table = RichTable(title=category)
        table.add_column("Relationship", style="cyan")
        table.add_column("From")
        table.add_column("To")
        for edge in _sorted(edges):
            table.add_row(
                escape(edge.relationship_type),
                _vertex_label(edge.from_vertex.guid, edge.from_vertex.type_name),
                _vertex_label(edge.to_vertex.guid, edge.to_vertex.type_name),
            )
        console.print(table)


def _sorted(edges: set[GraphContext]) -> list[GraphContext]:
    return sorted(edges, key=lambda e: (e.relationship_type, e.from_vertex.guid, e.to_vertex.guid))


def _vertex_label(guid: str, type_name: str) -> str:
    return f"{escape(guid)} [dim]({escape(type_name)})[/dim]"


def _to_json(context_map: ContextMap) -> dict[str, list[dict[str, Any]]]:
    return {
        category: [edge.model_dump(mode="json", exclude_none=True) for edge in _sorted(edges)]
        for category, edges in context_map.items()
    }
