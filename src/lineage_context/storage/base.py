"""SQLAlchemy base configuration and schema initialization.

This module provides:
- Base: SQLAlchemy declarative base for all models
- init_database: Schema creation
- create_session_factory: Engine + sessionmaker for a database URL
"""

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

# Naming convention for constraints
# This ensures consistent constraint names across PostgreSQL and SQLite
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    metadata = metadata_obj


def init_database(engine: Engine) -> None:
    """
    Initialize database schema.

    Creates all tables defined in SQLAlchemy models.
    Safe to call multiple times - only creates missing tables.

    Args:
        engine: SQLAlchemy engine
    """
    # Register the models with Base metadata
    from lineage_context.storage import models as _storage_models  # noqa: F401

    with engine.begin() as conn:
        Base.metadata.create_all(conn)


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Create an engine for ``database_url``, initialize it, and return a sessionmaker."""
    engine = create_engine(database_url, echo=echo, future=True)

    if engine.dialect.name == "sqlite":
        # Enable foreign keys for SQLite
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    init_database(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
