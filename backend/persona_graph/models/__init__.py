"""ORM Models — SQLAlchemy declarative models for personas, follows and session bindings.

Invariants:
    - All models inherit from Base (db/base.py)
    - No foreign keys between tables: integrity is enforced in services/

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from persona_graph.models.persona import Persona  # noqa: F401
from persona_graph.models.follow import Follow  # noqa: F401
from persona_graph.models.persona_session import PersonaSession  # noqa: F401
