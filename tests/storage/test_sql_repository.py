"""Tests for the SQLAlchemy metadata repository."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from lineage_context.core.errors import (
    EntityNotFoundError,
    InvalidParameterError,
    RepositoryUnavailableError,
)
from lineage_context.core.models.base import ErrorKind
from lineage_context.lineage import ContextAssembler
from lineage_context.metadata import (
    InMemoryMetadataRepository,
    load_graph_document,
    parse_graph_document,
)
from lineage_context.storage import EntityRecord, RelationshipRecord, SqlMetadataRepository


@pytest.fixture
def loaded(session: Session, sample_graph_path: Path) -> SqlMetadataRepository:
    repository = SqlMetadataRepository(session)
    repository.load_document(load_graph_document(sample_graph_path))
    session.commit()
    return repository


class TestLoadDocument:
    """Tests for importing graph documents."""

    def test_rows_written(self, loaded: SqlMetadataRepository, session: Session) -> None:
        entities = session.execute(select(func.count()).select_from(EntityRecord)).scalar_one()
        relationships = session.execute(
            select(func.count()).select_from(RelationshipRecord)
        ).scalar_one()

        assert entities == 15
        assert relationships == 13

    def test_reimport_replaces_rows(
        self, loaded: SqlMetadataRepository, session: Session, sample_graph_path: Path
    ) -> None:
        loaded.load_document(load_graph_document(sample_graph_path))
        session.commit()

        entities = session.execute(select(func.count()).select_from(EntityRecord)).scalar_one()
        assert entities == 15

    def test_classifications_round_trip(self, loaded: SqlMetadataRepository) -> None:
        entity = loaded.entity_by_guid_and_type("erin", "col-amount", "TabularColumn")

        assert entity.zone_membership == ["landing"]
        assert entity.qualified_name == "landing/sales/2024/sales.csv#amount"

    def test_updated_entity_replaces_classifications(
        self, loaded: SqlMetadataRepository, session: Session
    ) -> None:
        loaded.load_document(
            parse_graph_document(
                {
                    "entities": [
                        {
                            "guid": "col-amount",
                            "type": "TabularColumn",
                            "classifications": [
                                {
                                    "name": "AssetZoneMembership",
                                    "properties": {"zoneMembership": ["trusted"]},
                                }
                            ],
                        }
                    ]
                }
            )
        )
        session.commit()

        entity = loaded.entity_by_guid_and_type("erin", "col-amount", "TabularColumn")
        assert entity.zone_membership == ["trusted"]


class TestRepositoryContract:
    """Tests for the MetadataRepository operations."""

    def test_unknown_type(self, loaded: SqlMetadataRepository) -> None:
        with pytest.raises(InvalidParameterError):
            loaded.resolve_type_id("erin", "NoSuchType")

    def test_entities_of_type(self, loaded: SqlMetadataRepository) -> None:
        type_id = loaded.resolve_type_id("erin", "FileFolder")

        found = loaded.entities_of_type("erin", type_id)

        assert [e.guid for e in found] == ["folder-2024", "folder-landing", "folder-sales"]

    def test_entities_of_type_paged(self, loaded: SqlMetadataRepository) -> None:
        type_id = loaded.resolve_type_id("erin", "FileFolder")

        page = loaded.entities_of_type("erin", type_id, start_from=1, page_size=1)

        assert [e.guid for e in page] == ["folder-landing"]

    def test_entity_by_supertype(self, loaded: SqlMetadataRepository) -> None:
        entity = loaded.entity_by_guid_and_type("erin", "table-type-customers", "ComplexSchemaType")

        assert entity.type_name == "RelationalTableType"

    def test_missing_entity(self, loaded: SqlMetadataRepository) -> None:
        with pytest.raises(EntityNotFoundError):
            loaded.entity_by_guid_and_type("erin", "gone", "DataFile")

    def test_relationships_in_document_order(self, loaded: SqlMetadataRepository) -> None:
        found = loaded.relationships_of_type("erin", "folder-sales", "FolderHierarchy", "FileFolder")

        assert [r.guid for r in found] == ["rel-4", "rel-5"]
        assert found[0].entity_one.guid == "folder-sales"
        assert found[0].entity_two.type_name == "FileFolder"

    def test_type_catalog(self, loaded: SqlMetadataRepository) -> None:
        gallery = loaded.all_type_definitions("erin")

        schema_type = gallery.get("TabularSchemaType")
        assert schema_type is not None
        assert schema_type.super_type == "ComplexSchemaType"

    def test_database_failure_is_unavailable(self, session: Session, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "execute", broken)

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            SqlMetadataRepository(session).relationships_of_type(
                "erin", "col", "AttributeForSchema", "TabularColumn"
            )
        assert exc_info.value.kind == ErrorKind.REPOSITORY_UNAVAILABLE


class TestContextFromStore:
    """The assembler gives the same context over either repository."""

    @pytest.mark.parametrize(
        ("guid", "type_name"),
        [("col-amount", "TabularColumn"), ("col-customer-id", "RelationalColumn")],
    )
    def test_same_context_as_in_memory(
        self,
        loaded: SqlMetadataRepository,
        sample_graph_path: Path,
        guid: str,
        type_name: str,
    ) -> None:
        in_memory = InMemoryMetadataRepository.from_document(load_graph_document(sample_graph_path))

        from_store = ContextAssembler(loaded)
        from_memory = ContextAssembler(in_memory)
        stored = from_store.build_context(
            "erin", from_store.get_entity_by_type_and_guid("erin", guid, type_name)
        ).unwrap()
        expected = from_memory.build_context(
            "erin", from_memory.get_entity_by_type_and_guid("erin", guid, type_name)
        ).unwrap()

        assert stored == expected
        assert stored

    def test_folder_chain_from_store(self, loaded: SqlMetadataRepository) -> None:
        assembler = ContextAssembler(loaded)
        column = assembler.get_entity_by_type_and_guid("erin", "col-amount", "TabularColumn")

        context = assembler.build_context("erin", column).unwrap()

        assert sorted(e.relationship_type for e in context["asset-context"]) == [
            "ConnectionEndpoint",
            "ConnectionToAsset",
            "FolderHierarchy",
            "FolderHierarchy",
            "NestedFile",
        ]
