"""In-memory metadata repository.

Holds a whole graph in dictionaries. Used by tests and by the CLI when a
graph document is read directly instead of from a metadata store.
"""

from __future__ import annotations

from lineage_context.core.errors import (
    EntityNotFoundError,
    InvalidParameterError,
    UserNotAuthorizedError,
)
from lineage_context.metadata.loader import GraphDocument
from lineage_context.metadata.models import EntityDetail, Relationship, TypeDef, TypeDefGallery


class InMemoryMetadataRepository:
    """Dictionary-backed implementation of ``MetadataRepository``."""

    def __init__(self, denied_users: set[str] | None = None):
        self.type_defs: dict[str, TypeDef] = {}
        self.entities: dict[str, EntityDetail] = {}
        self.relationships: list[Relationship] = []
        self.denied_users = denied_users or set()

    @classmethod
    def from_document(cls, document: GraphDocument) -> InMemoryMetadataRepository:
        repository = cls()
        repository.load_document(document)
        return repository

    def load_document(self, document: GraphDocument) -> None:
        for type_def in document.type_defs:
            self.add_type_def(type_def)
        for entity in document.entities:
            self.add_entity(entity)
        for relationship in document.relationships:
            self.add_relationship(relationship)

    def add_type_def(self, type_def: TypeDef) -> None:
        self.type_defs[type_def.name] = type_def

    def add_entity(self, entity: EntityDetail) -> None:
        self.entities[entity.guid] = entity

    def add_relationship(self, relationship: Relationship) -> None:
        self.relationships.append(relationship)

    # ==================== MetadataRepository ====================

    def resolve_type_id(self, user_id: str, type_name: str) -> str:
        self._check_user(user_id)
        type_def = self.type_defs.get(type_name)
        if type_def is None:
            raise InvalidParameterError(
                "type_name", f"Unknown type {type_name}", method="resolve_type_id"
            )
        return type_def.guid

    def entities_of_type(
        self,
        user_id: str,
        type_id: str,
        start_from: int = 0,
        page_size: int = 0,
    ) -> list[EntityDetail]:
        self._check_user(user_id)
        names = {t.name for t in self.type_defs.values() if t.guid == type_id}
        matches = [e for e in self.entities.values() if e.type_name in names]
        if page_size:
            return matches[start_from : start_from + page_size]
        return matches[start_from:]

    def entity_by_guid_and_type(self, user_id: str, guid: str, type_name: str) -> EntityDetail:
        self._check_user(user_id)
        entity = self.entities.get(guid)
        if entity is None or not self._is_type_of(entity.type_name, type_name):
            raise EntityNotFoundError(guid, type_name, method="entity_by_guid_and_type")
        return entity

    def relationships_of_type(
        self,
        user_id: str,
        entity_guid: str,
        relationship_type: str,
        entity_type: str,
    ) -> list[Relationship]:
        self._check_user(user_id)
        return [
            r
            for r in self.relationships
            if r.type_name == relationship_type
            and entity_guid in (r.entity_one.guid, r.entity_two.guid)
        ]

    def all_type_definitions(self, user_id: str) -> TypeDefGallery:
        self._check_user(user_id)
        return TypeDefGallery(type_defs=list(self.type_defs.values()))

    # ==================== Helpers ====================

    def _check_user(self, user_id: str) -> None:
        if user_id in self.denied_users:
            raise UserNotAuthorizedError(user_id)

    def _is_type_of(self, actual: str, expected: str) -> bool:
        """True if ``actual`` is ``expected`` or one of its subtypes."""
        seen: set[str] = set()
        current: str | None = actual
        while current is not None and current not in seen:
            if current == expected:
                return True
            seen.add(current)
            type_def = self.type_defs.get(current)
            current = type_def.super_type if type_def else None
        return False
