"""Tests for the graph document loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from lineage_context.metadata import (
    GraphDocumentError,
    InMemoryMetadataRepository,
    load_graph_document,
    parse_graph_document,
)
from lineage_context.metadata.loader import type_def_guid


class TestLoadGraphDocument:
    """Tests for reading YAML files."""

    def test_sample_graph_loads(self, sample_graph_path: Path) -> None:
        document = load_graph_document(sample_graph_path)

        assert len(document.entities) == 15
        assert len(document.relationships) == 13
        names = {t.name for t in document.type_defs}
        assert {"ComplexSchemaType", "TabularColumn", "FolderHierarchy"} <= names

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(GraphDocumentError, match="File not found"):
            load_graph_document(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("entities: [unclosed\n")

        with pytest.raises(GraphDocumentError, match="Invalid YAML"):
            load_graph_document(path)

    def test_empty_file_is_empty_document(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        document = load_graph_document(path)

        assert document.entities == []
        assert document.relationships == []


class TestParseGraphDocument:
    """Tests for building documents from parsed data."""

    def test_entity_fields(self) -> None:
        document = parse_graph_document(
            {
                "entities": [
                    {
                        "guid": "col-1",
                        "type": "TabularColumn",
                        "properties": {"qualifiedName": "sales.csv#amount"},
                        "classifications": [
                            {"name": "AssetZoneMembership", "properties": {"zoneMembership": ["a"]}}
                        ],
                        "version": 3,
                    }
                ]
            }
        )

        (entity,) = document.entities
        assert entity.qualified_name == "sales.csv#amount"
        assert entity.zone_membership == ["a"]
        assert entity.version == 3

    def test_bare_end_takes_entity_type(self) -> None:
        document = parse_graph_document(
            {
                "entities": [
                    {"guid": "s", "type": "TabularSchemaType"},
                    {"guid": "c", "type": "TabularColumn"},
                ],
                "relationships": [
                    {"guid": "r", "type": "AttributeForSchema", "end_one": "s", "end_two": "c"}
                ],
            }
        )

        (relationship,) = document.relationships
        assert relationship.entity_one.type_name == "TabularSchemaType"
        assert relationship.entity_two.type_name == "TabularColumn"

    def test_unknown_bare_end_rejected(self) -> None:
        with pytest.raises(GraphDocumentError, match="not a known entity"):
            parse_graph_document(
                {
                    "entities": [{"guid": "c", "type": "TabularColumn"}],
                    "relationships": [
                        {"guid": "r", "type": "AttributeForSchema", "end_one": "x", "end_two": "c"}
                    ],
                }
            )

    def test_explicit_end_may_dangle(self) -> None:
        document = parse_graph_document(
            {
                "entities": [{"guid": "c", "type": "TabularColumn"}],
                "relationships": [
                    {
                        "guid": "r",
                        "type": "AttributeForSchema",
                        "end_one": {"guid": "gone", "type": "TabularSchemaType"},
                        "end_two": "c",
                    }
                ],
            }
        )

        assert document.relationships[0].entity_one.guid == "gone"

    def test_missing_key_rejected(self) -> None:
        with pytest.raises(GraphDocumentError, match="Malformed entry"):
            parse_graph_document({"entities": [{"guid": "c"}]})

    def test_root_must_be_mapping(self) -> None:
        with pytest.raises(GraphDocumentError):
            parse_graph_document(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_undeclared_types_added(self) -> None:
        document = parse_graph_document({"entities": [{"guid": "c", "type": "TabularColumn"}]})

        (type_def,) = document.type_defs
        assert type_def.name == "TabularColumn"
        assert type_def.guid == type_def_guid("TabularColumn")
        assert type_def.super_type is None

    def test_declared_supertype_kept(self) -> None:
        document = parse_graph_document(
            {"type_definitions": [{"name": "TabularSchemaType", "super_type": "ComplexSchemaType"}]}
        )

        assert document.type_defs[0].super_type == "ComplexSchemaType"


class TestInMemoryRepository:
    """Tests for the dictionary-backed repository."""

    @pytest.fixture
    def sample_repository(self, sample_graph_path: Path) -> InMemoryMetadataRepository:
        return InMemoryMetadataRepository.from_document(load_graph_document(sample_graph_path))

    def test_entities_of_type(self, sample_repository: InMemoryMetadataRepository) -> None:
        type_id = sample_repository.resolve_type_id("erin", "FileFolder")

        found = sample_repository.entities_of_type("erin", type_id)

        assert sorted(e.guid for e in found) == ["folder-2024", "folder-landing", "folder-sales"]

    def test_entities_of_type_paged(self, sample_repository: InMemoryMetadataRepository) -> None:
        type_id = sample_repository.resolve_type_id("erin", "FileFolder")

        page = sample_repository.entities_of_type("erin", type_id, start_from=1, page_size=1)

        assert len(page) == 1

    def test_entity_by_supertype(self, sample_repository: InMemoryMetadataRepository) -> None:
        """A TabularSchemaType entity is found when ComplexSchemaType is asked for."""
        entity = sample_repository.entity_by_guid_and_type(
            "erin", "schema-sales", "ComplexSchemaType"
        )

        assert entity.type_name == "TabularSchemaType"

    def test_entity_of_wrong_type_not_found(
        self, sample_repository: InMemoryMetadataRepository
    ) -> None:
        from lineage_context.core.errors import EntityNotFoundError

        with pytest.raises(EntityNotFoundError):
            sample_repository.entity_by_guid_and_type("erin", "schema-sales", "DataFile")

    def test_relationships_from_either_end(
        self, sample_repository: InMemoryMetadataRepository
    ) -> None:
        as_child = sample_repository.relationships_of_type(
            "erin", "folder-sales", "FolderHierarchy", "FileFolder"
        )

        assert sorted(r.guid for r in as_child) == ["rel-4", "rel-5"]

    def test_denied_user(self) -> None:
        from lineage_context.core.errors import UserNotAuthorizedError

        repository = InMemoryMetadataRepository(denied_users={"mallory"})

        with pytest.raises(UserNotAuthorizedError):
            repository.all_type_definitions("mallory")
