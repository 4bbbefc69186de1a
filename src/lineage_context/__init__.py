"""Lineage Context Assembler.

Computes the schema, asset, storage and connection context of a metadata
entity for lineage publication.

Example:
    from lineage_context import ContextAssembler
    from lineage_context.metadata import InMemoryMetadataRepository, load_graph_document

    repository = InMemoryMetadataRepository.from_document(load_graph_document(path))
    assembler = ContextAssembler.from_settings(repository)
    result = assembler.build_context("erin", column)
"""

__version__ = "0.1.0"

from lineage_context.core.models.base import ErrorKind, Result
from lineage_context.lineage import ContextAssembler

__all__ = [
    "ContextAssembler",
    "ErrorKind",
    "Result",
    "__version__",
]
