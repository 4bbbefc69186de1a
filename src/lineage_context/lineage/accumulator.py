"""Turns resolved relationships into context edges.

Each call returns an owned ``TraversalStep``; callers merge the edge sets of
the steps they keep instead of sharing one mutable container.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import NAMESPACE_URL, uuid5

from lineage_context.core.logging import get_logger, record_edges
from lineage_context.lineage.resolver import RelationshipResolver
from lineage_context.metadata.constants import CLASSIFICATION_EDGE
from lineage_context.metadata.models import (
    Classification,
    EntityDetail,
    GraphContext,
    LineageEntity,
    Relationship,
)

logger = get_logger(__name__)


@dataclass
class TraversalStep:
    """Edges recorded by following one relationship type from one entity.

    ``dangling`` is set when a relationship existed but its far end could not
    be resolved, as opposed to no relationship at all.
    """

    edges: set[GraphContext] = field(default_factory=set)
    targets: list[EntityDetail] = field(default_factory=list)
    dangling: bool = False

    @property
    def first(self) -> EntityDetail | None:
        """Entity at the far end of the first relationship, if any."""
        return self.targets[0] if self.targets else None

    def __bool__(self) -> bool:
        return bool(self.targets)


class EdgeAccumulator:
    """Records relationship traversals as directed edges.

    Args:
        resolver: Relationship lookup used for every step
        lineage_classification_types: Classification names copied into the
            context as auxiliary edges from the classified entity
    """

    def __init__(
        self,
        resolver: RelationshipResolver,
        lineage_classification_types: Iterable[str] = (),
    ):
        self.resolver = resolver
        self.lineage_classification_types = frozenset(lineage_classification_types)

    def add_edge(
        self, user_id: str, source: EntityDetail, relationship: Relationship
    ) -> tuple[GraphContext, EntityDetail] | None:
        """Resolve the far end of ``relationship`` and build the edge to it.

        Returns None for a dangling relationship; the caller stops descending.
        """
        target = self.resolver.entity_at_other_end(user_id, source, relationship)
        if target is None:
            return None

        edge = GraphContext(
            relationship_type=relationship.type_name,
            relationship_guid=relationship.guid,
            from_vertex=LineageEntity.from_entity(source),
            to_vertex=LineageEntity.from_entity(target),
        )
        return edge, target

    def follow(
        self,
        user_id: str,
        source: EntityDetail,
        relationship_type: str,
        classify_always: bool = False,
    ) -> TraversalStep:
        """Follow every ``relationship_type`` relationship of ``source``.

        A single unresolved far end empties the whole step: the branch ends
        without a partial relationship edge.

        The source's lineage classifications are added once the step resolves
        an edge, or unconditionally with ``classify_always``.
        """
        classifications = self.classification_edges(source) if classify_always else set()
        step = TraversalStep(edges=set(classifications))
        for relationship in self.resolver.relationships_of_type(user_id, source, relationship_type):
            resolved = self.add_edge(user_id, source, relationship)
            if resolved is None:
                return TraversalStep(edges=classifications, dangling=True)
            edge, target = resolved
            step.edges.add(edge)
            step.targets.append(target)

        if step:
            if not classify_always:
                step.edges |= self.classification_edges(source)
            record_edges(len(step.edges))
            logger.debug(
                "relationship_followed",
                guid=source.guid,
                relationship_type=relationship_type,
                targets=[t.guid for t in step.targets],
            )
        return step

    def classification_edges(self, entity: EntityDetail) -> set[GraphContext]:
        """Edges from ``entity`` to its lineage-relevant classifications."""
        edges = set()
        vertex = LineageEntity.from_entity(entity)
        for classification in entity.classifications:
            if classification.name not in self.lineage_classification_types:
                continue
            edges.add(
                GraphContext(
                    relationship_type=CLASSIFICATION_EDGE,
                    relationship_guid=_classification_guid(entity, classification),
                    from_vertex=vertex,
                    to_vertex=_classification_vertex(entity, classification),
                    metadata={"classification": classification.name},
                )
            )
        return edges


def _classification_guid(entity: EntityDetail, classification: Classification) -> str:
    return str(uuid5(NAMESPACE_URL, f"{entity.guid}/{classification.name}"))


def _classification_vertex(entity: EntityDetail, classification: Classification) -> LineageEntity:
    return LineageEntity(
        guid=_classification_guid(entity, classification),
        type_name=classification.name,
        properties={key: str(value) for key, value in classification.properties.items()},
    )
