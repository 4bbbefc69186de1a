"""SQLAlchemy models for the metadata store.

Relationship ends are stored as plain GUID + type columns rather than
foreign keys: a relationship may outlive the entity at one of its ends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lineage_context.storage.base import Base


class TypeDefRecord(Base):
    """Entity or relationship type definition."""

    __tablename__ = "type_definitions"

    type_def_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    super_type: Mapped[str | None] = mapped_column(String)


class EntityRecord(Base):
    """A metadata entity."""

    __tablename__ = "entities"
    __table_args__ = (Index("idx_entities_type", "type_name"),)

    guid: Mapped[str] = mapped_column(String, primary_key=True)
    type_name: Mapped[str] = mapped_column(String, nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Audit
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_by: Mapped[str | None] = mapped_column(String)
    updated_by: Mapped[str | None] = mapped_column(String)
    create_time: Mapped[datetime | None] = mapped_column(DateTime)
    update_time: Mapped[datetime | None] = mapped_column(DateTime)

    classifications: Mapped[list[ClassificationRecord]] = relationship(
        back_populates="entity",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ClassificationRecord.position",
    )


class ClassificationRecord(Base):
    """A classification attached to an entity."""

    __tablename__ = "entity_classifications"

    classification_id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid4())
    )
    entity_guid: Mapped[str] = mapped_column(
        ForeignKey("entities.guid", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    entity: Mapped[EntityRecord] = relationship(back_populates="classifications")


class RelationshipRecord(Base):
    """A typed relationship between two entities."""

    __tablename__ = "relationships"
    __table_args__ = (
        Index("idx_relationships_end_one", "type_name", "end_one_guid"),
        Index("idx_relationships_end_two", "type_name", "end_two_guid"),
    )

    guid: Mapped[str] = mapped_column(String, primary_key=True)
    type_name: Mapped[str] = mapped_column(String, nullable=False)
    end_one_guid: Mapped[str] = mapped_column(String, nullable=False)
    end_one_type: Mapped[str] = mapped_column(String, nullable=False)
    end_two_guid: Mapped[str] = mapped_column(String, nullable=False)
    end_two_type: Mapped[str] = mapped_column(String, nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # Preserves document order, which decides the "first" relationship
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
