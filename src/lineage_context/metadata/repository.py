"""Contracts the assembler consumes from its collaborators.

Both collaborators are passed to the assembler explicitly so that tests and
tools can substitute in-memory implementations.
"""

from __future__ import annotations

from typing import Protocol

from lineage_context.metadata.models import EntityDetail, Relationship, TypeDefGallery


class MetadataRepository(Protocol):
    """Read-only view of a metadata repository.

    Implementations raise ``EntityNotFoundError`` for unknown entities,
    ``UserNotAuthorizedError`` for rejected callers and
    ``RepositoryUnavailableError`` for communication failures.
    """

    def resolve_type_id(self, user_id: str, type_name: str) -> str:
        """Return the GUID of the named type definition."""
        ...

    def entities_of_type(
        self,
        user_id: str,
        type_id: str,
        start_from: int = 0,
        page_size: int = 0,
    ) -> list[EntityDetail]:
        """Return entities of a type; ``page_size`` 0 means no limit."""
        ...

    def entity_by_guid_and_type(self, user_id: str, guid: str, type_name: str) -> EntityDetail:
        """Return one entity."""
        ...

    def relationships_of_type(
        self,
        user_id: str,
        entity_guid: str,
        relationship_type: str,
        entity_type: str,
    ) -> list[Relationship]:
        """Return relationships of a type attached to the entity, in repository order."""
        ...

    def all_type_definitions(self, user_id: str) -> TypeDefGallery:
        """Return the full type-definition catalog."""
        ...


class ZoneValidator(Protocol):
    """Authorization check on an entity's zone membership."""

    def validate_entity_in_allowed_zone(
        self,
        entity_guid: str,
        zone_membership: list[str],
        allowed_zones: list[str],
    ) -> None:
        """Raise ``EntityNotVisibleError`` if the entity may not be read."""
        ...
