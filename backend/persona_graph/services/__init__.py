"""Services Layer — the four graph components, each bound to one AsyncSession.

Invariants:
    - PersonaRegistry is the only writer of personas, FollowGraphStore the only writer of follows
    - ActivePersonaBinder is the only place a session becomes an acting persona
    - ReferentialIntegrityCoordinator is the only place deletions cascade
    - No component caches another's records beyond a single operation

Design Decisions:
    - Components typed against core/repository_protocols.py, wired in api/dependencies.py
"""
