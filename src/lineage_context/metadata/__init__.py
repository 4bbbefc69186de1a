"""Metadata graph model and repository contracts."""

from lineage_context.metadata.constants import ContextCategory
from lineage_context.metadata.loader import (
    GraphDocument,
    GraphDocumentError,
    load_graph_document,
    parse_graph_document,
)
from lineage_context.metadata.memory import InMemoryMetadataRepository
from lineage_context.metadata.models import (
    AssetContext,
    Classification,
    ContextMap,
    EntityDetail,
    EntityProxy,
    GraphContext,
    LineageEntity,
    Relationship,
    TypeDef,
    TypeDefGallery,
)
from lineage_context.metadata.repository import MetadataRepository, ZoneValidator

__all__ = [
    # Models
    "AssetContext",
    "Classification",
    "ContextCategory",
    "ContextMap",
    "EntityDetail",
    "EntityProxy",
    "GraphContext",
    "LineageEntity",
    "Relationship",
    "TypeDef",
    "TypeDefGallery",
    # Contracts
    "MetadataRepository",
    "ZoneValidator",
    # Implementations
    "InMemoryMetadataRepository",
    "GraphDocument",
    "GraphDocumentError",
    "load_graph_document",
    "parse_graph_document",
]
