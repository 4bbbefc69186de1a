"""Storage layer for the metadata store.

This module provides:
- Base: SQLAlchemy declarative base for all models
- EntityRecord, RelationshipRecord, TypeDefRecord: stored graph
- SqlMetadataRepository: MetadataRepository over a SQLAlchemy session
- init_database, create_session_factory: Schema management
"""

from lineage_context.storage.base import (
    Base,
    create_session_factory,
    init_database,
    metadata_obj,
)
from lineage_context.storage.models import (
    ClassificationRecord,
    EntityRecord,
    RelationshipRecord,
    TypeDefRecord,
)
from lineage_context.storage.repository import SqlMetadataRepository

__all__ = [
    # Base and metadata
    "Base",
    "metadata_obj",
    # Records
    "ClassificationRecord",
    "EntityRecord",
    "RelationshipRecord",
    "TypeDefRecord",
    # Repository
    "SqlMetadataRepository",
    # Database management
    "create_session_factory",
    "init_database",
]
