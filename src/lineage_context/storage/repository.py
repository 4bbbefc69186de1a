"""Metadata store repository.

Implements the ``MetadataRepository`` contract over a SQLAlchemy session,
plus the import path used to fill the store from a graph document.

Usage:
    from lineage_context.storage import SqlMetadataRepository

    with session_factory() as session:
        repo = SqlMetadataRepository(session)
        repo.load_document(document)
        session.commit()

        assembler = ContextAssembler.from_settings(repo)
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lineage_context.core.errors import (
    EntityNotFoundError,
    InvalidParameterError,
    RepositoryUnavailableError,
)
from lineage_context.core.logging import get_logger
from lineage_context.metadata.loader import GraphDocument
from lineage_context.metadata.models import (
    Classification,
    EntityDetail,
    EntityProxy,
    Relationship,
    TypeDef,
    TypeDefGallery,
)
from lineage_context.storage.models import (
    ClassificationRecord,
    EntityRecord,
    RelationshipRecord,
    TypeDefRecord,
)

logger = get_logger(__name__)


def entity_to_record(entity: EntityDetail) -> EntityRecord:
    """Create record from EntityDetail model."""
    return EntityRecord(
        guid=entity.guid,
        type_name=entity.type_name,
        properties=dict(entity.properties),
        version=entity.version,
        created_by=entity.created_by,
        updated_by=entity.updated_by,
        create_time=entity.create_time,
        update_time=entity.update_time,
        classifications=[
            ClassificationRecord(
                position=position,
                name=classification.name,
                properties=dict(classification.properties),
            )
            for position, classification in enumerate(entity.classifications)
        ],
    )


def record_to_entity(record: EntityRecord) -> EntityDetail:
    """Convert record back to EntityDetail model."""
    return EntityDetail(
        guid=record.guid,
        type_name=record.type_name,
        classifications=tuple(
            Classification(name=c.name, properties=c.properties or {})
            for c in record.classifications
        ),
        properties=record.properties or {},
        version=record.version,
        created_by=record.created_by,
        updated_by=record.updated_by,
        create_time=record.create_time,
        update_time=record.update_time,
    )


def relationship_to_record(relationship: Relationship, position: int = 0) -> RelationshipRecord:
    """Create record from Relationship model."""
    return RelationshipRecord(
        guid=relationship.guid,
        type_name=relationship.type_name,
        end_one_guid=relationship.entity_one.guid,
        end_one_type=relationship.entity_one.type_name,
        end_two_guid=relationship.entity_two.guid,
        end_two_type=relationship.entity_two.type_name,
        properties=dict(relationship.properties),
        position=position,
    )


def record_to_relationship(record: RelationshipRecord) -> Relationship:
    """Convert record back to Relationship model."""
    return Relationship(
        guid=record.guid,
        type_name=record.type_name,
        entity_one=EntityProxy(guid=record.end_one_guid, type_name=record.end_one_type),
        entity_two=EntityProxy(guid=record.end_two_guid, type_name=record.end_two_type),
        properties=record.properties or {},
    )


class SqlMetadataRepository:
    """SQLAlchemy implementation of ``MetadataRepository``.

    The user id is accepted for contract compatibility; access control is
    left to the database.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, method: str) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("metadata_store_error", method=method, error=str(e))
            raise RepositoryUnavailableError(str(e), method=method) from e

    # ==================== Import ====================

    def load_document(self, document: GraphDocument) -> None:
        """Write every type definition, entity and relationship of a document.

        Existing rows with the same key are replaced. The caller commits.
        """
        with self._guard("load_document"):
            for type_def in document.type_defs:
                existing = self.session.execute(
                    select(TypeDefRecord).where(TypeDefRecord.name == type_def.name)
                ).scalar_one_or_none()
                if existing is not None:
                    existing.super_type = type_def.super_type
                else:
                    self.session.add(
                        TypeDefRecord(
                            type_def_id=type_def.guid,
                            name=type_def.name,
                            super_type=type_def.super_type,
                        )
                    )

            for entity in document.entities:
                existing_entity = self.session.get(EntityRecord, entity.guid)
                if existing_entity is not None:
                    self.session.delete(existing_entity)
                    self.session.flush()
                self.session.add(entity_to_record(entity))

            offset = self._next_relationship_position()
            for position, relationship in enumerate(document.relationships, start=offset):
                self.session.merge(relationship_to_record(relationship, position))

            self.session.flush()

        logger.info(
            "graph_document_loaded",
            type_defs=len(document.type_defs),
            entities=len(document.entities),
            relationships=len(document.relationships),
        )

    def _next_relationship_position(self) -> int:
        positions = self.session.execute(select(RelationshipRecord.position)).scalars().all()
        return max(positions, default=-1) + 1

    # ==================== MetadataRepository ====================

    def resolve_type_id(self, user_id: str, type_name: str) -> str:
        with self._guard("resolve_type_id"):
            record = self.session.execute(
                select(TypeDefRecord).where(TypeDefRecord.name == type_name)
            ).scalar_one_or_none()
        if record is None:
            raise InvalidParameterError(
                "type_name", f"Unknown type {type_name}", method="resolve_type_id"
            )
        return record.type_def_id

    def entities_of_type(
        self,
        user_id: str,
        type_id: str,
        start_from: int = 0,
        page_size: int = 0,
    ) -> list[EntityDetail]:
        with self._guard("entities_of_type"):
            stmt = (
                select(EntityRecord)
                .join(TypeDefRecord, TypeDefRecord.name == EntityRecord.type_name)
                .where(TypeDefRecord.type_def_id == type_id)
                .order_by(EntityRecord.guid)
                .offset(start_from)
            )
            if page_size:
                stmt = stmt.limit(page_size)
            records = self.session.execute(stmt).scalars().all()
            return [record_to_entity(r) for r in records]

    def entity_by_guid_and_type(self, user_id: str, guid: str, type_name: str) -> EntityDetail:
        with self._guard("entity_by_guid_and_type"):
            record = self.session.get(EntityRecord, guid)
            if record is None or not self._is_type_of(record.type_name, type_name):
                raise EntityNotFoundError(guid, type_name, method="entity_by_guid_and_type")
            return record_to_entity(record)

    def relationships_of_type(
        self,
        user_id: str,
        entity_guid: str,
        relationship_type: str,
        entity_type: str,
    ) -> list[Relationship]:
        with self._guard("relationships_of_type"):
            records = (
                self.session.execute(
                    select(RelationshipRecord)
                    .where(RelationshipRecord.type_name == relationship_type)
                    .where(
                        or_(
                            RelationshipRecord.end_one_guid == entity_guid,
                            RelationshipRecord.end_two_guid == entity_guid,
                        )
                    )
                    .order_by(RelationshipRecord.position)
                )
                .scalars()
                .all()
            )
            return [record_to_relationship(r) for r in records]

    def all_type_definitions(self, user_id: str) -> TypeDefGallery:
        with self._guard("all_type_definitions"):
            records = self.session.execute(select(TypeDefRecord)).scalars().all()
            return TypeDefGallery(
                type_defs=[
                    TypeDef(guid=r.type_def_id, name=r.name, super_type=r.super_type)
                    for r in records
                ]
            )

    def _is_type_of(self, actual: str, expected: str) -> bool:
        """True if ``actual`` is ``expected`` or one of its subtypes."""
        seen: set[str] = set()
        current: str | None = actual
        while current is not None and current not in seen:
            if current == expected:
                return True
            seen.add(current)
            current = self.session.execute(
                select(TypeDefRecord.super_type).where(TypeDefRecord.name == current)
            ).scalar_one_or_none()
        return False
