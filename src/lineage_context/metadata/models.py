"""Metadata graph models.

Entities and relationships are read-only snapshots of repository content.
Vertices and edges (LineageEntity, GraphContext) are the output shape handed
to lineage publication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lineage_context.metadata.constants import (
    ASSET_ZONE_MEMBERSHIP,
    QUALIFIED_NAME,
    ZONE_MEMBERSHIP_PROPERTY,
)


class Classification(BaseModel):
    """A classification attached to an entity (zone membership, confidentiality...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    properties: dict[str, Any] = Field(default_factory=dict)


class EntityProxy(BaseModel):
    """Reference to one end of a relationship."""

    model_config = ConfigDict(frozen=True)

    guid: str
    type_name: str


class EntityDetail(BaseModel):
    """A typed node of the metadata graph.

    Identity is the GUID: two snapshots of the same entity compare equal even
    if their properties were read at different times.
    """

    model_config = ConfigDict(frozen=True)

    guid: str
    type_name: str
    classifications: tuple[Classification, ...] = ()
    properties: dict[str, Any] = Field(default_factory=dict)
    version: int = 1
    created_by: str | None = None
    updated_by: str | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityDetail):
            return NotImplemented
        return self.guid == other.guid

    def __hash__(self) -> int:
        return hash(self.guid)

    @property
    def qualified_name(self) -> str | None:
        value = self.properties.get(QUALIFIED_NAME)
        return str(value) if value is not None else None

    @property
    def zone_membership(self) -> list[str]:
        """Zones listed by the entity's AssetZoneMembership classification."""
        for classification in self.classifications:
            if classification.name == ASSET_ZONE_MEMBERSHIP:
                zones = classification.properties.get(ZONE_MEMBERSHIP_PROPERTY) or []
                return [str(zone) for zone in zones]
        return []

    def proxy(self) -> EntityProxy:
        return EntityProxy(guid=self.guid, type_name=self.type_name)


class Relationship(BaseModel):
    """A typed edge between two entity proxies."""

    model_config = ConfigDict(frozen=True)

    guid: str
    type_name: str
    entity_one: EntityProxy
    entity_two: EntityProxy
    properties: dict[str, Any] = Field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(self.guid)

    def other_end(self, guid: str) -> EntityProxy:
        """Return the proxy opposite the entity with the given GUID."""
        if self.entity_one.guid == guid:
            return self.entity_two
        return self.entity_one


class LineageEntity(BaseModel):
    """Vertex of a context graph."""

    model_config = ConfigDict(frozen=True)

    guid: str
    type_name: str
    qualified_name: str | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    version: int = 1
    created_by: str | None = None
    updated_by: str | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineageEntity):
            return NotImplemented
        return self.guid == other.guid

    def __hash__(self) -> int:
        return hash(self.guid)

    @classmethod
    def from_entity(cls, entity: EntityDetail) -> LineageEntity:
        return cls(
            guid=entity.guid,
            type_name=entity.type_name,
            qualified_name=entity.qualified_name,
            properties={key: str(value) for key, value in entity.properties.items()},
            version=entity.version,
            created_by=entity.created_by,
            updated_by=entity.updated_by,
            create_time=entity.create_time,
            update_time=entity.update_time,
        )


class GraphContext(BaseModel):
    """One resolved traversal step: ``from_vertex -[relationship_type]-> to_vertex``.

    Equality is structural over source, target and relationship type, so a
    set of edges never holds the same step twice.
    """

    model_config = ConfigDict(frozen=True)

    relationship_type: str
    relationship_guid: str
    from_vertex: LineageEntity
    to_vertex: LineageEntity
    metadata: dict[str, str] | None = None

    def _key(self) -> tuple[str, str, str]:
        return (self.from_vertex.guid, self.to_vertex.guid, self.relationship_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphContext):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.from_vertex.guid} -[{self.relationship_type}]-> {self.to_vertex.guid}"


ContextMap = dict[str, set[GraphContext]]


class TypeDef(BaseModel):
    """Entity or relationship type definition."""

    model_config = ConfigDict(frozen=True)

    guid: str
    name: str
    super_type: str | None = None


class TypeDefGallery(BaseModel):
    """The repository's type-definition catalog."""

    type_defs: list[TypeDef] = Field(default_factory=list)

    def get(self, name: str) -> TypeDef | None:
        for type_def in self.type_defs:
            if type_def.name == name:
                return type_def
        return None


@dataclass
class AssetContext:
    """Graph accumulated by the legacy asset context traversal.

    Holds every vertex seen, every edge recorded, and for each vertex GUID
    the edges that start from it.
    """

    vertices: set[LineageEntity] = field(default_factory=set)
    graph_contexts: set[GraphContext] = field(default_factory=set)
    neighbors: dict[str, set[GraphContext]] = field(default_factory=dict)

    def add_vertex(self, vertex: LineageEntity) -> None:
        self.vertices.add(vertex)

    def add_graph_context(self, edge: GraphContext) -> None:
        self.add_vertex(edge.from_vertex)
        self.add_vertex(edge.to_vertex)
        self.graph_contexts.add(edge)
        self.neighbors.setdefault(edge.from_vertex.guid, set()).add(edge)

    def add_graph_contexts(self, edges: set[GraphContext]) -> None:
        for edge in edges:
            self.add_graph_context(edge)
