"""Declarative Base — metadata shared by the persona, follow and binding tables.

Invariants:
    - Every model inherits from Base so one metadata drives create_all and alembic
    - Constraint and index names are deterministic (naming convention below)

Design Decisions:
    - Explicit names matter here: services translate IntegrityError by the
      unique constraints, and migrations must produce the same names on every backend
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    """Base class for all persona-graph ORM models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
