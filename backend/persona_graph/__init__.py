"""Persona Graph Package — identity and follow-graph consistency service.

Invariants:
    - Package root has no import side effects; it only carries the version

Design Decisions:
    - Explicit imports only, no star exports
"""

__version__ = "1.0.0"
