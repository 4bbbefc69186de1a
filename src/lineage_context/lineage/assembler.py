"""Lineage context assembly.

Given one schema element (a tabular or relational column), walks the
metadata graph up to the enclosing schema, asset, storage hierarchy and
connection endpoint, and returns the edges found, keyed by context category:

- column-context: the column's link to its schema (and the schema's asset)
- asset-context: the asset's storage hierarchy and physical connection

Usage:
    from lineage_context.lineage import ContextAssembler

    assembler = ContextAssembler.from_settings(repository)
    result = assembler.build_context("erin", column)
    if result.success:
        edges = result.value["column-context"]

Every traversal function returns the edges it found; callers merge them.
Missing relationships end a branch with a partial result, while
authorization and repository failures abort the whole call.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from lineage_context.core.config import Settings, get_settings
from lineage_context.core.errors import (
    EntityNotVisibleError,
    InvalidParameterError,
    LineageContextError,
)
from lineage_context.core.logging import (
    end_traversal_metrics,
    get_logger,
    increment_repository_call,
    log_context,
    record_entity_visited,
    record_truncated_branch,
    start_traversal_metrics,
)
from lineage_context.core.models.base import Result
from lineage_context.lineage.accumulator import EdgeAccumulator, TraversalStep
from lineage_context.lineage.elements import (
    RelationalColumnElement,
    TabularColumnElement,
    classify_schema_element,
)
from lineage_context.lineage.resolver import RelationshipResolver
from lineage_context.lineage.type_oracle import TypeOracle
from lineage_context.lineage.zones import SupportedZoneValidator
from lineage_context.metadata.constants import (
    ASSET_SCHEMA_TYPE,
    ATTRIBUTE_FOR_SCHEMA,
    CONNECTION_ENDPOINT,
    CONNECTION_TO_ASSET,
    DATA_CONTENT_FOR_DATA_SET,
    DATA_FILE,
    DATABASE,
    FOLDER_HIERARCHY,
    LINEAGE_MAPPING,
    NESTED_FILE,
    NESTED_SCHEMA_ATTRIBUTE,
    ContextCategory,
)
from lineage_context.metadata.models import AssetContext, ContextMap, EntityDetail, GraphContext
from lineage_context.metadata.repository import MetadataRepository, ZoneValidator

logger = get_logger(__name__)


@dataclass
class _Traversal:
    """Per-call state: the caller and the entities already walked through."""

    user_id: str
    max_depth: int
    # Record classifications of every entity stepped from, even without edges
    classify_always: bool = False
    visited: set[str] = field(default_factory=set)

    def enter(self, entity: EntityDetail, depth: int) -> bool:
        """Mark ``entity`` as visited; False if the branch must stop here."""
        if entity.guid in self.visited:
            record_truncated_branch()
            logger.warning("traversal_cycle_detected", guid=entity.guid, type=entity.type_name)
            return False
        if depth > self.max_depth:
            record_truncated_branch()
            logger.warning("traversal_depth_exceeded", guid=entity.guid, depth=depth)
            return False
        self.visited.add(entity.guid)
        record_entity_visited()
        return True


class ContextAssembler:
    """Builds column and asset context for schema elements.

    Args:
        repository: Read-only metadata repository
        zone_validator: Zone visibility check for the root entity
        supported_zones: Zones entities may be read from (empty = all)
        lineage_classification_types: Classifications recorded as auxiliary edges
        max_traversal_depth: Bound on recursive hops along one branch
    """

    def __init__(
        self,
        repository: MetadataRepository,
        zone_validator: ZoneValidator | None = None,
        *,
        supported_zones: Iterable[str] = (),
        lineage_classification_types: Iterable[str] = (),
        max_traversal_depth: int = 64,
    ):
        self.repository = repository
        self.zone_validator = zone_validator or SupportedZoneValidator()
        self.supported_zones = list(supported_zones)
        self.max_traversal_depth = max_traversal_depth
        self.resolver = RelationshipResolver(repository)
        self.accumulator = EdgeAccumulator(self.resolver, lineage_classification_types)
        self.type_oracle = TypeOracle(repository)

    @classmethod
    def from_settings(
        cls,
        repository: MetadataRepository,
        zone_validator: ZoneValidator | None = None,
        settings: Settings | None = None,
    ) -> ContextAssembler:
        settings = settings or get_settings()
        return cls(
            repository,
            zone_validator,
            supported_zones=settings.supported_zones,
            lineage_classification_types=settings.lineage_classification_types,
            max_traversal_depth=settings.max_traversal_depth,
        )

    # ==================== Lookups ====================

    def get_entities_by_type_name(self, user_id: str, type_name: str) -> list[EntityDetail]:
        """Return every entity of the named type."""
        _validate_name("user_id", user_id, "get_entities_by_type_name")
        _validate_name("type_name", type_name, "get_entities_by_type_name")
        increment_repository_call()
        type_id = self.repository.resolve_type_id(user_id, type_name)
        increment_repository_call()
        return self.repository.entities_of_type(user_id, type_id)

    def get_entity_by_type_and_guid(self, user_id: str, guid: str, type_name: str) -> EntityDetail:
        """Return one entity; raises EntityNotFoundError if it does not exist."""
        _validate_name("user_id", user_id, "get_entity_by_type_and_guid")
        _validate_name("guid", guid, "get_entity_by_type_and_guid")
        _validate_name("type_name", type_name, "get_entity_by_type_and_guid")
        increment_repository_call()
        return self.repository.entity_by_guid_and_type(user_id, guid, type_name)

    # ==================== Column / asset context ====================

    def build_context(self, user_id: str, entity: EntityDetail) -> Result[ContextMap]:
        """Build the context of a schema element.

        Returns:
            Result with a mapping from context category to edges. The mapping
            is empty for unrecognized entity types, for columns without a
            schema, and for entities outside the supported zones. Failures
            carry the error kind (invalid input, unauthorized, repository
            unavailable).
        """
        try:
            return Result.ok(self.build_schema_element_context(user_id, entity))
        except LineageContextError as e:
            logger.error("context_build_failed", guid=entity.guid, kind=e.kind.value, error=str(e))
            return Result.fail(str(e), kind=e.kind)

    def build_schema_element_context(self, user_id: str, entity: EntityDetail) -> ContextMap:
        """Raising variant of ``build_context``."""
        method = "build_schema_element_context"
        _validate_name("user_id", user_id, method)
        _validate_name("guid", entity.guid, method)
        _validate_name("type_name", entity.type_name, method)

        with log_context(user_id=user_id, guid=entity.guid, type=entity.type_name):
            if not self._is_visible(entity):
                return {}

            start_traversal_metrics(entity.guid)
            try:
                traversal = _Traversal(user_id, self.max_traversal_depth)
                context = self._dispatch(traversal, entity)
            finally:
                metrics = end_traversal_metrics()

            logger.info(
                "context_built",
                categories={category: len(edges) for category, edges in context.items()},
                **(metrics.to_dict() if metrics else {}),
            )
            return context

    def _is_visible(self, entity: EntityDetail) -> bool:
        try:
            self.zone_validator.validate_entity_in_allowed_zone(
                entity.guid, entity.zone_membership, self.supported_zones
            )
        except EntityNotVisibleError:
            logger.info("entity_not_in_supported_zone", zones=entity.zone_membership)
            return False
        return True

    def _dispatch(self, traversal: _Traversal, entity: EntityDetail) -> ContextMap:
        element = classify_schema_element(entity)
        if isinstance(element, TabularColumnElement):
            return self._tabular_column_context(traversal, element.entity)
        if isinstance(element, RelationalColumnElement):
            return self._relational_column_context(traversal, element.entity)
        logger.debug("unrecognized_schema_element")
        return {}

    def _tabular_column_context(self, traversal: _Traversal, column: EntityDetail) -> ContextMap:
        schema_step = self._follow(traversal, column, ATTRIBUTE_FOR_SCHEMA)
        schema_type = schema_step.first
        if schema_type is None:
            return {}

        asset_step = self._follow(traversal, schema_type, ASSET_SCHEMA_TYPE)
        context: ContextMap = {
            ContextCategory.COLUMN_CONTEXT.value: schema_step.edges | asset_step.edges,
        }

        asset = asset_step.first
        if asset is not None and self._is_data_file(traversal, asset):
            context[ContextCategory.ASSET_CONTEXT.value] = self._data_file_context(traversal, asset)
        return context

    def _relational_column_context(self, traversal: _Traversal, column: EntityDetail) -> ContextMap:
        table_step = self._follow(traversal, column, NESTED_SCHEMA_ATTRIBUTE)
        table = table_step.first
        if table is None:
            return {}

        return {
            ContextCategory.COLUMN_CONTEXT.value: set(table_step.edges),
            ContextCategory.ASSET_CONTEXT.value: self._relational_table_context(traversal, table),
        }

    def _relational_table_context(
        self, traversal: _Traversal, table: EntityDetail
    ) -> set[GraphContext]:
        edges: set[GraphContext] = set()

        # table -> schema type -> deployed schema -> database
        current = table
        for relationship_type in (ATTRIBUTE_FOR_SCHEMA, ASSET_SCHEMA_TYPE, DATA_CONTENT_FOR_DATA_SET):
            step = self._follow(traversal, current, relationship_type)
            edges |= step.edges
            if step.first is None:
                return edges
            current = step.first

        edges |= self._connection_context(traversal, current)
        return edges

    def _data_file_context(self, traversal: _Traversal, data_file: EntityDetail) -> set[GraphContext]:
        folder_step = self._follow(traversal, data_file, NESTED_FILE)
        edges = set(folder_step.edges)
        if folder_step.first is not None:
            edges |= self._folder_hierarchy_context(traversal, folder_step.first, depth=0)
        return edges

    def _folder_hierarchy_context(
        self, traversal: _Traversal, folder: EntityDetail, depth: int
    ) -> set[GraphContext]:
        """Climb to the top folder; its connection ends the walk."""
        if not traversal.enter(folder, depth):
            return set()

        parent_step = self._follow(traversal, folder, FOLDER_HIERARCHY)
        edges = set(parent_step.edges)
        if parent_step.dangling:
            return edges

        parent = parent_step.first
        if parent is not None:
            edges |= self._folder_hierarchy_context(traversal, parent, depth + 1)
        else:
            edges |= self._connection_context(traversal, folder)
        return edges

    def _connection_context(self, traversal: _Traversal, asset: EntityDetail) -> set[GraphContext]:
        connection_step = self._follow(traversal, asset, CONNECTION_TO_ASSET)
        edges = set(connection_step.edges)
        connection = connection_step.first
        if connection is not None:
            edges |= self._follow(traversal, connection, CONNECTION_ENDPOINT).edges
        return edges

    def _follow(
        self, traversal: _Traversal, entity: EntityDetail, relationship_type: str
    ) -> TraversalStep:
        return self.accumulator.follow(
            traversal.user_id,
            entity,
            relationship_type,
            classify_always=traversal.classify_always,
        )

    def _is_data_file(self, traversal: _Traversal, asset: EntityDetail) -> bool:
        return self.type_oracle.is_type_of(traversal.user_id, asset.type_name, DATA_FILE)

    # ==================== Legacy asset context ====================

    def build_asset_context(self, user_id: str, entity: EntityDetail) -> AssetContext:
        """Build one graph holding the whole asset context of a schema element.

        Unlike ``build_context`` this also records lineage mappings, and it
        decides how far to descend from each schema type by asking whether
        the type is a complex schema type.
        """
        method = "build_asset_context"
        _validate_name("user_id", user_id, method)
        _validate_name("guid", entity.guid, method)
        _validate_name("type_name", entity.type_name, method)

        asset_context = AssetContext()
        with log_context(user_id=user_id, guid=entity.guid, type=entity.type_name):
            if not self._is_visible(entity):
                return asset_context

            start_traversal_metrics(entity.guid)
            try:
                traversal = _Traversal(user_id, self.max_traversal_depth, classify_always=True)
                asset_context.add_graph_contexts(self._schema_element_graph(traversal, entity, 0))
            finally:
                metrics = end_traversal_metrics()

            logger.info(
                "asset_context_built",
                vertices=len(asset_context.vertices),
                **(metrics.to_dict() if metrics else {}),
            )
        return asset_context

    def _schema_element_graph(
        self, traversal: _Traversal, entity: EntityDetail, depth: int
    ) -> set[GraphContext]:
        if not traversal.enter(entity, depth):
            return set()

        edges = self._lineage_mapping_edges(traversal, entity)

        schema_step = self._follow(traversal, entity, ATTRIBUTE_FOR_SCHEMA)
        if not schema_step:
            schema_step = self._follow(traversal, entity, NESTED_SCHEMA_ATTRIBUTE)
        edges |= schema_step.edges

        # Simple schema types are nested attributes: continue from the first one
        descended = False
        for schema_type in schema_step.targets:
            if self.type_oracle.is_complex_schema_type(traversal.user_id, schema_type.type_name):
                edges |= self._asset_details_graph(traversal, schema_type)
            elif not descended:
                descended = True
                edges |= self._schema_element_graph(traversal, schema_step.targets[0], depth + 1)
        return edges

    def _lineage_mapping_edges(self, traversal: _Traversal, entity: EntityDetail) -> set[GraphContext]:
        edges = set()
        for relationship in self.resolver.relationships_of_type(
            traversal.user_id, entity, LINEAGE_MAPPING
        ):
            resolved = self.accumulator.add_edge(traversal.user_id, entity, relationship)
            if resolved is not None:
                edges.add(resolved[0])
        return edges

    def _asset_details_graph(
        self, traversal: _Traversal, complex_schema_type: EntityDetail
    ) -> set[GraphContext]:
        asset_step = self._follow(traversal, complex_schema_type, ASSET_SCHEMA_TYPE)
        edges = set(asset_step.edges)
        asset = asset_step.first
        if asset is None:
            return edges

        is_file = self._is_data_file(traversal, asset)
        relationship_type = NESTED_FILE if is_file else DATA_CONTENT_FOR_DATA_SET
        container_step = self._follow(traversal, asset, relationship_type)
        edges |= container_step.edges

        for container in container_step.targets:
            if container.type_name == DATABASE:
                edges |= self._database_connections_graph(traversal, container)
            else:
                edges |= self._folder_graph(traversal, container, depth=0)
        return edges

    def _database_connections_graph(
        self, traversal: _Traversal, database: EntityDetail
    ) -> set[GraphContext]:
        connection_step = self._follow(traversal, database, CONNECTION_TO_ASSET)
        edges = set(connection_step.edges)
        for connection in connection_step.targets:
            edges |= self._follow(traversal, connection, CONNECTION_ENDPOINT).edges
        return edges

    def _folder_graph(self, traversal: _Traversal, folder: EntityDetail, depth: int) -> set[GraphContext]:
        """Record each folder's connection while climbing the hierarchy."""
        if not traversal.enter(folder, depth):
            return set()

        edges = self._connection_context(traversal, folder)

        parent_step = self._follow(traversal, folder, FOLDER_HIERARCHY)
        edges |= parent_step.edges
        if parent_step.first is not None:
            edges |= self._folder_graph(traversal, parent_step.first, depth + 1)
        return edges


def _validate_name(parameter: str, value: str | None, method: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidParameterError(parameter, f"{parameter} must not be empty", method=method)
