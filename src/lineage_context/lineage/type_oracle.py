"""Schema type classification against the repository's type catalog."""

from __future__ import annotations

from lineage_context.core.logging import get_logger, increment_repository_call
from lineage_context.metadata.constants import COMPLEX_SCHEMA_TYPE
from lineage_context.metadata.repository import MetadataRepository

logger = get_logger(__name__)


class TypeOracle:
    """Answers type questions that decide which traversal branch is taken."""

    def __init__(self, repository: MetadataRepository):
        self.repository = repository

    def is_complex_schema_type(self, user_id: str, type_name: str) -> bool:
        """Check whether the type's declared supertype is ComplexSchemaType.

        The catalog is read on every call; a stale catalog would only change
        traversal depth, never the edges already resolved.
        """
        increment_repository_call()
        gallery = self.repository.all_type_definitions(user_id)
        type_def = gallery.get(type_name)
        result = type_def is not None and type_def.super_type == COMPLEX_SCHEMA_TYPE
        logger.debug("schema_type_classified", type_name=type_name, complex=result)
        return result

    def is_type_of(self, user_id: str, type_name: str, expected: str) -> bool:
        """Check whether ``type_name`` is ``expected`` or one of its subtypes."""
        if type_name == expected:
            return True

        increment_repository_call()
        gallery = self.repository.all_type_definitions(user_id)
        seen: set[str] = set()
        current: str | None = type_name
        while current is not None and current not in seen:
            if current == expected:
                return True
            seen.add(current)
            type_def = gallery.get(current)
            current = type_def.super_type if type_def else None
        return False
