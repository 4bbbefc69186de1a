"""Graph document loader.

Loads a metadata graph (type definitions, entities, relationships) from a
YAML file so it can be imported into a repository.

Usage:
    from lineage_context.metadata.loader import load_graph_document

    document = load_graph_document(Path("graphs/warehouse.yaml"))
    repository = InMemoryMetadataRepository.from_document(document)

Document layout:
    type_definitions:
      - name: TabularSchemaType
        super_type: ComplexSchemaType
    entities:
      - guid: column-1
        type: TabularColumn
        properties: {qualifiedName: "sales.csv#amount"}
        classifications:
          - name: AssetZoneMembership
            properties: {zoneMembership: [landing]}
    relationships:
      - guid: rel-1
        type: AttributeForSchema
        end_one: schema-1
        end_two: column-1
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from uuid import NAMESPACE_URL, uuid5

import yaml
from pydantic import BaseModel, Field, ValidationError

from lineage_context.metadata.models import (
    Classification,
    EntityDetail,
    EntityProxy,
    Relationship,
    TypeDef,
)


class GraphDocumentError(Exception):
    """Error loading a graph document."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class GraphDocument(BaseModel):
    """Parsed content of a graph document."""

    type_defs: list[TypeDef] = Field(default_factory=list)
    entities: list[EntityDetail] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)


def type_def_guid(name: str) -> str:
    """Stable GUID for a type definition declared without one."""
    return str(uuid5(NAMESPACE_URL, f"lineage-context/typedef/{name}"))


def load_graph_document(path: Path) -> GraphDocument:
    """Load a graph document from a YAML file."""
    if not path.exists():
        raise GraphDocumentError(path, "File not found")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise GraphDocumentError(path, f"Invalid YAML: {e}") from e

    return parse_graph_document(data or {}, path=path)


def parse_graph_document(data: dict[str, Any], path: Path | None = None) -> GraphDocument:
    """Build a GraphDocument from already-parsed YAML/JSON data."""
    if not isinstance(data, dict):
        raise GraphDocumentError(path, "Document root must be a mapping")

    try:
        type_defs = [_parse_type_def(item) for item in data.get("type_definitions") or []]
        entities = [_parse_entity(item) for item in data.get("entities") or []]
    except (KeyError, TypeError, ValidationError) as e:
        raise GraphDocumentError(path, f"Malformed entry: {e}") from e

    entity_types = {entity.guid: entity.type_name for entity in entities}
    relationships = []
    for item in data.get("relationships") or []:
        try:
            relationships.append(_parse_relationship(item, entity_types))
        except (KeyError, TypeError, ValidationError) as e:
            raise GraphDocumentError(path, f"Malformed relationship: {e}") from e
        except ValueError as e:
            raise GraphDocumentError(path, str(e)) from e

    # Every entity and relationship type used must be resolvable by name
    declared = {type_def.name for type_def in type_defs}
    used = [entity.type_name for entity in entities]
    used += [relationship.type_name for relationship in relationships]
    for name in used:
        if name not in declared:
            type_defs.append(TypeDef(guid=type_def_guid(name), name=name))
            declared.add(name)

    return GraphDocument(type_defs=type_defs, entities=entities, relationships=relationships)


def _parse_type_def(item: dict[str, Any]) -> TypeDef:
    name = item["name"]
    return TypeDef(
        guid=item.get("guid") or type_def_guid(name),
        name=name,
        super_type=item.get("super_type"),
    )


def _parse_entity(item: dict[str, Any]) -> EntityDetail:
    classifications = tuple(
        Classification(name=c["name"], properties=c.get("properties") or {})
        for c in item.get("classifications") or []
    )
    return EntityDetail(
        guid=str(item["guid"]),
        type_name=item["type"],
        classifications=classifications,
        properties=item.get("properties") or {},
        version=item.get("version", 1),
        created_by=item.get("created_by"),
        updated_by=item.get("updated_by"),
        create_time=item.get("create_time"),
        update_time=item.get("update_time"),
    )


def _parse_end(value: Any, entity_types: dict[str, str]) -> EntityProxy:
    # A bare GUID must name an entity in the document; a mapping may point
    # outside it (dangling relationship).
    if isinstance(value, dict):
        return EntityProxy(guid=str(value["guid"]), type_name=value["type"])
    guid = str(value)
    if guid not in entity_types:
        raise ValueError(f"Relationship end '{guid}' is not a known entity")
    return EntityProxy(guid=guid, type_name=entity_types[guid])


def _parse_relationship(item: dict[str, Any], entity_types: dict[str, str]) -> Relationship:
    return Relationship(
        guid=str(item["guid"]),
        type_name=item["type"],
        entity_one=_parse_end(item["end_one"], entity_types),
        entity_two=_parse_end(item["end_two"], entity_types),
        properties=item.get("properties") or {},
    )
