"""Schema element kinds the assembler knows how to traverse."""

from __future__ import annotations

from dataclasses import dataclass

from lineage_context.metadata.constants import RELATIONAL_COLUMN, TABULAR_COLUMN
from lineage_context.metadata.models import EntityDetail


@dataclass(frozen=True)
class TabularColumnElement:
    """Column of a file-based table (CSV, Avro...)."""

    entity: EntityDetail


@dataclass(frozen=True)
class RelationalColumnElement:
    """Column of a database table."""

    entity: EntityDetail


@dataclass(frozen=True)
class UnrecognizedElement:
    """Any other entity; it has no context."""

    entity: EntityDetail


SchemaElement = TabularColumnElement | RelationalColumnElement | UnrecognizedElement

_ELEMENT_KINDS: dict[str, type[TabularColumnElement] | type[RelationalColumnElement]] = {
    TABULAR_COLUMN: TabularColumnElement,
    RELATIONAL_COLUMN: RelationalColumnElement,
}


def classify_schema_element(entity: EntityDetail) -> SchemaElement:
    kind = _ELEMENT_KINDS.get(entity.type_name)
    if kind is None:
        return UnrecognizedElement(entity)
    return kind(entity)
