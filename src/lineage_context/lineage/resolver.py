"""Relationship lookup and far-end resolution.

The basic graph-edge primitive: every traversal pattern is a sequence of
``relationships_of_type`` followed by ``entity_at_other_end``.
"""

from __future__ import annotations

from lineage_context.core.errors import EntityNotFoundError, InvalidParameterError
from lineage_context.core.logging import (
    get_logger,
    increment_repository_call,
    record_dangling_relationship,
)
from lineage_context.metadata.constants import FILE_FOLDER
from lineage_context.metadata.models import EntityDetail, Relationship
from lineage_context.metadata.repository import MetadataRepository

logger = get_logger(__name__)


class RelationshipResolver:
    """Fetches typed relationships and resolves the entity at their other end."""

    def __init__(self, repository: MetadataRepository):
        self.repository = repository

    def relationships_of_type(
        self, user_id: str, entity: EntityDetail, relationship_type: str
    ) -> list[Relationship]:
        """Return the entity's relationships of the given type.

        For folders only relationships where the folder is end two are kept,
        so a climb up the folder hierarchy never turns back into a subfolder.

        Raises:
            InvalidParameterError: relationship_type is empty
        """
        if not relationship_type or not relationship_type.strip():
            raise InvalidParameterError(
                "relationship_type",
                "Relationship type name must not be empty",
                method="relationships_of_type",
            )

        increment_repository_call()
        relationships = self.repository.relationships_of_type(
            user_id, entity.guid, relationship_type, entity.type_name
        )

        if entity.type_name == FILE_FOLDER:
            relationships = [r for r in relationships if r.entity_two.guid == entity.guid]

        return relationships

    def entity_at_other_end(
        self, user_id: str, entity: EntityDetail, relationship: Relationship
    ) -> EntityDetail | None:
        """Resolve the entity opposite ``entity``; None if it no longer exists."""
        proxy = relationship.other_end(entity.guid)
        increment_repository_call()
        try:
            return self.repository.entity_by_guid_and_type(user_id, proxy.guid, proxy.type_name)
        except EntityNotFoundError:
            record_dangling_relationship()
            logger.warning(
                "dangling_relationship",
                relationship_guid=relationship.guid,
                relationship_type=relationship.type_name,
                missing_guid=proxy.guid,
            )
            return None
