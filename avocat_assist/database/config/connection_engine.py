"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes the local database used as durable client storage:
- Creates the Engine for a given SQLAlchemy URL (SQLite file by default).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- The URL comes from `settings.TOKEN_DB_URL` unless a caller passes another one
  (tests use an in-memory or temporary SQLite database).
- All ORM models must inherit from `declarativeBase` to participate in
  `metadata.create_all`.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData

from avocat_assist.config.config import settings

metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables. Shared across all models.
"""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models."""


def create_connection_engine(url: Optional[str] = None) -> Engine:
    """
    Create the Engine and make sure every mapped table exists.

    Parameters
    ----------
    url : str, optional
        SQLAlchemy URL. Defaults to `settings.TOKEN_DB_URL`.

    Returns
    -------
    Engine
        Engine bound to the credential database.
    """
    url = url or settings.TOKEN_DB_URL
    if url in ("sqlite://", "sqlite:///:memory:"):
        # a single shared connection, otherwise each checkout sees an empty database
        engine = create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    else:
        engine = create_engine(url)
    # import registers the mapped classes on `metadata`
    from avocat_assist.database.entities import credential  # noqa: F401
    metadata.create_all(engine)
    return engine
