"""Lineage context traversal.

Usage:
    from lineage_context.lineage import ContextAssembler

    assembler = ContextAssembler.from_settings(repository)
    result = assembler.build_context(user_id, column)
"""

from lineage_context.lineage.accumulator import EdgeAccumulator, TraversalStep
from lineage_context.lineage.assembler import ContextAssembler
from lineage_context.lineage.elements import (
    RelationalColumnElement,
    SchemaElement,
    TabularColumnElement,
    UnrecognizedElement,
    classify_schema_element,
)
from lineage_context.lineage.resolver import RelationshipResolver
from lineage_context.lineage.type_oracle import TypeOracle
from lineage_context.lineage.zones import SupportedZoneValidator

__all__ = [
    "ContextAssembler",
    "EdgeAccumulator",
    "RelationshipResolver",
    "SupportedZoneValidator",
    "TraversalStep",
    "TypeOracle",
    # Schema elements
    "RelationalColumnElement",
    "SchemaElement",
    "TabularColumnElement",
    "UnrecognizedElement",
    "classify_schema_element",
]
