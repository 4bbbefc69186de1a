"""Entities command - list entities of a type."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table as RichTable

from lineage_context.cli.common import (
    DatabaseOption,
    GraphFileOption,
    JsonFlag,
    UserOption,
    console,
    open_repository,
)


def entities(
    type_name: Annotated[str, typer.Argument(help="Entity type, e.g. TabularColumn")],
    graph_file: GraphFileOption = None,
    database: DatabaseOption = None,
    user: UserOption = "lineage-cli",
    json_output: JsonFlag = False,
) -> None:
    """List the entities of a type.

    Examples:

        lineage-context entities RelationalColumn --database ./store.db
    """
    from lineage_context.core.errors import LineageContextError
    from lineage_context.lineage import ContextAssembler

    with open_repository(graph_file, database) as repository:
        assembler = ContextAssembler.from_settings(repository)
        try:
            found = assembler.get_entities_by_type_name(user, type_name)
        except LineageContextError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1) from e

    if json_output:
        typer.echo(
            json.dumps(
                [entity.model_dump(mode="json", exclude_none=True) for entity in found], indent=2
            )
        )
        return

    table = RichTable(title=f"{type_name} ({len(found)})")
    table.add_column("GUID", style="cyan")
    table.add_column("Qualified name")
    table.add_column("Zones")
    for entity in found:
        table.add_row(
            escape(entity.guid),
            escape(entity.qualified_name or ""),
            escape(", ".join(entity.zone_membership)),
        )
    console.print(table)
