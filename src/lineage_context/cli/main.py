"""Main CLI application entry point."""

from __future__ import annotations

import typer

from lineage_context.cli.commands import context, entities, load

app = typer.Typer(
    name="lineage-context",
    help="Lineage context assembler - schema, asset and connection context of metadata entities.",
    no_args_is_help=True,
)

# Register commands
app.command(name="import")(load.load)
app.command()(context.context)
app.command()(entities.entities)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
