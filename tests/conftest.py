"""Shared pytest fixtures for all tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from lineage_context.core.errors import RepositoryUnavailableError
from lineage_context.lineage import ContextAssembler
from lineage_context.metadata import (
    Classification,
    EntityDetail,
    EntityProxy,
    InMemoryMetadataRepository,
    Relationship,
    TypeDef,
)
from lineage_context.metadata.loader import type_def_guid

SAMPLE_GRAPH = Path(__file__).parent.parent / "config" / "graphs" / "sample_lineage.yaml"


class GraphBuilder:
    """Small DSL for building repository content inside a test."""

    def __init__(self, repository: InMemoryMetadataRepository):
        self.repository = repository
        self._relationship_count = 0

    def type_def(self, name: str, super_type: str | None = None) -> TypeDef:
        type_def = TypeDef(guid=type_def_guid(name), name=name, super_type=super_type)
        self.repository.add_type_def(type_def)
        return type_def

    def entity(
        self,
        guid: str,
        type_name: str,
        classifications: list[Classification] | None = None,
        **properties: Any,
    ) -> EntityDetail:
        if type_name not in self.repository.type_defs:
            self.type_def(type_name)
        entity = EntityDetail(
            guid=guid,
            type_name=type_name,
            classifications=tuple(classifications or ()),
            properties=properties,
        )
        self.repository.add_entity(entity)
        return entity

    def link(
        self,
        type_name: str,
        end_one: EntityDetail | EntityProxy,
        end_two: EntityDetail | EntityProxy,
    ) -> Relationship:
        self._relationship_count += 1
        relationship = Relationship(
            guid=f"rel-{self._relationship_count}",
            type_name=type_name,
            entity_one=_proxy(end_one),
            entity_two=_proxy(end_two),
        )
        self.repository.add_relationship(relationship)
        return relationship


def _proxy(end: EntityDetail | EntityProxy) -> EntityProxy:
    if isinstance(end, EntityDetail):
        return end.proxy()
    return end


class RecordingRepository(InMemoryMetadataRepository):
    """In-memory repository that records relationship lookups."""

    def __init__(self) -> None:
        super().__init__()
        self.relationship_calls: list[tuple[str, str]] = []

    def relationships_of_type(
        self,
        user_id: str,
        entity_guid: str,
        relationship_type: str,
        entity_type: str,
    ) -> list[Relationship]:
        self.relationship_calls.append((entity_guid, relationship_type))
        return super().relationships_of_type(user_id, entity_guid, relationship_type, entity_type)

    def lookups_of(self, relationship_type: str) -> list[str]:
        return [guid for guid, rel_type in self.relationship_calls if rel_type == relationship_type]


class UnavailableRepository(InMemoryMetadataRepository):
    """Repository whose relationship lookups always fail."""

    def relationships_of_type(
        self,
        user_id: str,
        entity_guid: str,
        relationship_type: str,
        entity_type: str,
    ) -> list[Relationship]:
        raise RepositoryUnavailableError("connection refused", method="relationships_of_type")


@pytest.fixture
def repository() -> RecordingRepository:
    """Empty in-memory repository recording relationship lookups."""
    return RecordingRepository()


@pytest.fixture
def graph(repository: RecordingRepository) -> GraphBuilder:
    """Builder writing into the ``repository`` fixture."""
    builder = GraphBuilder(repository)
    builder.type_def("ComplexSchemaType")
    builder.type_def("TabularSchemaType", super_type="ComplexSchemaType")
    builder.type_def("RelationalTableType", super_type="ComplexSchemaType")
    return builder


@pytest.fixture
def unavailable_graph() -> GraphBuilder:
    """Builder over a repository whose relationship lookups fail."""
    return GraphBuilder(UnavailableRepository())


@pytest.fixture
def assembler(repository: RecordingRepository) -> ContextAssembler:
    """Assembler over the ``repository`` fixture, all zones visible."""
    return ContextAssembler(
        repository,
        lineage_classification_types={"Confidentiality"},
        max_traversal_depth=16,
    )


@pytest.fixture
def sample_graph_path() -> Path:
    return SAMPLE_GRAPH
